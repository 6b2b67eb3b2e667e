"""``completions``: shell completion scripts generated from the registry."""

from __future__ import annotations

import argparse
from typing import Callable, Optional

from trogue.registry import Argument, Command, CommandRegistry, Context

PROG = "trogue"
GLOBAL_OPTIONS = ("-h", "--help", "-v", "--verbose", "--version")

INSTALL_HELP = f"""\
Generate shell completion scripts for {PROG}.

To install completions:

Bash:
  {PROG} completions bash >> ~/.bashrc
  source ~/.bashrc

Zsh:
  {PROG} completions zsh > ~/.zsh/completions/_{PROG}
  Add 'fpath=(~/.zsh/completions $fpath)' to ~/.zshrc
  source ~/.zshrc

Fish:
  {PROG} completions fish > ~/.config/fish/completions/{PROG}.fish
"""


def _options(command: Command) -> list[str]:
    opts = ["-h", "--help"]
    for arg in command.arguments:
        if arg.positional:
            opts.extend(arg.options.get("choices", ()))
        else:
            opts.extend(arg.flags)
    return opts


def _quote(text: str) -> str:
    return (
        text.replace("'", "")
        .replace(":", " -")
        .replace("[", "(")
        .replace("]", ")")
    )


def bash_script(registry: CommandRegistry) -> str:
    commands = " ".join(registry.names)
    cases = "\n".join(
        f'        {c.name}) opts="{" ".join(_options(c))}" ;;' for c in registry
    )
    return f"""\
_{PROG}() {{
    local cur opts
    COMPREPLY=()
    cur="${{COMP_WORDS[COMP_CWORD]}}"
    if [[ ${{COMP_CWORD}} -eq 1 ]]; then
        COMPREPLY=( $(compgen -W "{commands} {' '.join(GLOBAL_OPTIONS)}" -- "$cur") )
        return 0
    fi
    case "${{COMP_WORDS[1]}}" in
{cases}
        *) opts="" ;;
    esac
    COMPREPLY=( $(compgen -W "$opts" -- "$cur") )
    return 0
}}
complete -F _{PROG} {PROG}
"""


def _zsh_spec(arg: Argument) -> str:
    help_text = _quote(arg.help)
    if len(arg.flags) == 1:
        return f"'{arg.flags[0]}[{help_text}]'"
    names = ",".join(arg.flags)
    return f"'({' '.join(arg.flags)})'{{{names}}}'[{help_text}]'"


def zsh_script(registry: CommandRegistry) -> str:
    described = "\n".join(f"        '{c.name}:{_quote(c.help)}'" for c in registry)
    cases = []
    for command in registry:
        specs = [_zsh_spec(a) for a in command.arguments if not a.positional]
        specs.append("'(-h --help)'{-h,--help}'[show help]'")
        cases.append(f"        {command.name}) _arguments {' '.join(specs)} ;;")
    case_block = "\n".join(cases)
    return f"""\
#compdef {PROG}

_{PROG}() {{
    local -a commands
    commands=(
{described}
    )
    if (( CURRENT == 2 )); then
        _describe 'command' commands
        return
    fi
    case $words[2] in
{case_block}
    esac
}}

compdef _{PROG} {PROG}
"""


def fish_script(registry: CommandRegistry) -> str:
    lines = [f"complete -c {PROG} -f"]
    for command in registry:
        lines.append(
            f"complete -c {PROG} -n '__fish_use_subcommand' "
            f"-a {command.name} -d '{_quote(command.help)}'"
        )
    for command in registry:
        for arg in command.arguments:
            if arg.positional:
                continue
            parts = [f"complete -c {PROG} -n '__fish_seen_subcommand_from {command.name}'"]
            for flag in arg.flags:
                if flag.startswith("--"):
                    parts.append(f"-l {flag[2:]}")
                else:
                    parts.append(f"-s {flag[1:]}")
            parts.append(f"-d '{_quote(arg.help)}'")
            lines.append(" ".join(parts))
    return "\n".join(lines) + "\n"


def powershell_script(registry: CommandRegistry) -> str:
    table = "\n".join(
        f"        '{c.name}' = @({', '.join(repr(o) for o in _options(c))})" for c in registry
    )
    commands = ", ".join(repr(n) for n in registry.names)
    return f"""\
Register-ArgumentCompleter -Native -CommandName '{PROG}' -ScriptBlock {{
    param($wordToComplete, $commandAst, $cursorPosition)
    $commands = @({commands})
    $options = @{{
{table}
    }}
    $elements = $commandAst.CommandElements
    if ($elements.Count -lt 2 -or ($elements.Count -eq 2 -and $wordToComplete -ne '')) {{
        $candidates = $commands
    }} else {{
        $candidates = $options[$elements[1].ToString()]
    }}
    $candidates | Where-Object {{ $_ -like "$wordToComplete*" }} | ForEach-Object {{
        [System.Management.Automation.CompletionResult]::new($_, $_, 'ParameterValue', $_)
    }}
}}
"""


GENERATORS: dict[str, Callable[[CommandRegistry], str]] = {
    "bash": bash_script,
    "zsh": zsh_script,
    "fish": fish_script,
    "powershell": powershell_script,
}


def make_command(registry: CommandRegistry) -> Command:
    """Return the ``completions`` command bound to *registry*.

    The script covers every command in *registry* at the time it runs,
    including this one once registered.
    """

    def run(context: Optional[Context], args: argparse.Namespace) -> str:
        return GENERATORS[args.shell](registry).rstrip("\n")

    return Command(
        name="completions",
        help="Generate shell completion scripts",
        description=INSTALL_HELP,
        handler=run,
        needs_context=False,
        arguments=(
            Argument(
                ("shell",),
                {
                    "choices": sorted(GENERATORS),
                    "metavar": "SHELL",
                    "help": "The shell to generate completions for (bash, zsh, fish, powershell)",
                },
            ),
        ),
    )
