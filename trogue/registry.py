"""Command descriptors and the registry that dispatches to them.

Every feature module exposes one ``Command``: a name, a declarative list of
``Argument`` definitions and a handler. The registry folds the commands into
a single ``argparse`` parser and routes a parsed invocation to exactly one
handler, passing it the shared ``Context``.
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterator, Optional

from trogue.config import Config
from trogue.steam import SteamClient

logger = logging.getLogger(__name__)


class UsageError(Exception):
    """Raised for invocations that do not name a registered command."""


@dataclass(frozen=True)
class Context:
    """Read-only state shared with the dispatched handler."""

    config: Config
    client: SteamClient


@dataclass(frozen=True)
class Argument:
    """One ``add_argument`` call: option strings plus keyword options."""

    flags: tuple[str, ...]
    options: dict[str, Any] = field(default_factory=dict)
    group: Optional[str] = None  # arguments sharing a group are mutually exclusive

    @property
    def positional(self) -> bool:
        return not self.flags[0].startswith("-")

    @property
    def help(self) -> str:
        """Help text with argparse %-placeholders expanded."""
        text = self.options.get("help", "")
        if "%(" in text:
            text = text % {"default": self.options.get("default")}
        return text


Handler = Callable[[Any, argparse.Namespace], str]


@dataclass(frozen=True)
class Command:
    """Registration record for a sub-command.

    The handler returns the complete output text; it must not print.
    Commands with ``needs_context=False`` are called with ``None`` and
    never trigger configuration loading.
    """

    name: str
    help: str
    handler: Handler
    arguments: tuple[Argument, ...] = ()
    description: Optional[str] = None
    needs_context: bool = True


class CommandRegistry:
    """Fixed mapping of command name to ``Command``."""

    def __init__(self, commands: tuple[Command, ...] | list[Command] = ()) -> None:
        self._commands: dict[str, Command] = {}
        for command in commands:
            self.register(command)

    def register(self, command: Command) -> None:
        """Add *command*. Raises ``ValueError`` on a duplicate name."""
        if command.name in self._commands:
            raise ValueError(f"Duplicate command name: {command.name!r}")
        self._commands[command.name] = command

    def get(self, name: Optional[str]) -> Command:
        try:
            return self._commands[name]  # type: ignore[index]
        except KeyError:
            raise UsageError(f"Unknown command: {name!r}") from None

    def __iter__(self) -> Iterator[Command]:
        return iter(self._commands.values())

    def __len__(self) -> int:
        return len(self._commands)

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    @property
    def names(self) -> list[str]:
        return list(self._commands)

    # ------------------------------------------------------------------
    # Parser construction
    # ------------------------------------------------------------------

    def add_to_parser(self, parser: argparse.ArgumentParser) -> None:
        """Add one sub-parser per registered command to *parser*."""
        subparsers = parser.add_subparsers(dest="command", metavar="COMMAND", required=True)
        for command in self._commands.values():
            sub = subparsers.add_parser(
                command.name,
                help=command.help,
                description=command.description or command.help,
                formatter_class=argparse.RawDescriptionHelpFormatter,
            )
            groups: dict[str, argparse._MutuallyExclusiveGroup] = {}
            for arg in command.arguments:
                target: Any = sub
                if arg.group is not None:
                    if arg.group not in groups:
                        groups[arg.group] = sub.add_mutually_exclusive_group()
                    target = groups[arg.group]
                target.add_argument(*arg.flags, **arg.options)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch(
        self,
        args: argparse.Namespace,
        context_factory: Callable[[], Context],
    ) -> str:
        """Run the handler registered for ``args.command``.

        *context_factory* is only called when the command needs the API, so
        configuration errors surface before any request and are never raised
        for commands that do not use it.
        """
        command = self.get(getattr(args, "command", None))
        context = context_factory() if command.needs_context else None
        logger.debug("Dispatching %r", command.name)
        return command.handler(context, args)
