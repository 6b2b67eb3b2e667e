"""Configuration loaded from the process environment."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

API_KEY_VAR = "TROGUE_STEAM_API_KEY"
STEAM_ID_VAR = "TROGUE_STEAM_ID"


class ConfigError(Exception):
    """Raised when the environment does not hold a usable configuration."""


class MissingVariable(ConfigError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Missing {name} environment variable.")
        self.name = name


class InvalidVariable(ConfigError):
    def __init__(self, name: str, value: str) -> None:
        super().__init__(f"Invalid value for {name}: {value!r}")
        self.name = name
        self.value = value


@dataclass(frozen=True)
class Config:
    """Steam credentials used for every API request."""

    api_key: str
    steam_id: str

    def __repr__(self) -> str:
        return f"Config(api_key='***', steam_id={self.steam_id!r})"


def _read(environ: Mapping[str, str], name: str) -> str:
    value = environ.get(name, "")
    if not value.strip():
        raise MissingVariable(name)
    return value


def load(environ: Optional[Mapping[str, str]] = None) -> Config:
    """Build a ``Config`` from *environ* (defaults to ``os.environ``).

    Both variables are mandatory. Raises ``MissingVariable`` naming the
    first absent variable, or ``InvalidVariable`` when the Steam ID is not
    a numeric 64-bit id.
    """
    if environ is None:
        environ = os.environ
    api_key = _read(environ, API_KEY_VAR)
    steam_id = _read(environ, STEAM_ID_VAR)
    if not (steam_id.isascii() and steam_id.isdigit()):
        raise InvalidVariable(STEAM_ID_VAR, steam_id)
    return Config(api_key=api_key, steam_id=steam_id)
