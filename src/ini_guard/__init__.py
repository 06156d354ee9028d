"""
ini_guard: INI parsing into an immutable, typed configuration object.

- Parses INI text into ordered sections of text values, with line-numbered errors.
- Coerces values on read (bool, int, float, str, list, or registered types).
- Merges configs with later sources taking precedence.
- Publishes one Config as a process-wide instance, installed at most once.
"""

from __future__ import annotations

from ini_guard.coercion import CoercerProtocol, register_coercer, unregister_coercer
from ini_guard.exceptions import (
    AlreadyInstalledError,
    CoercionError,
    ConfigBypassError,
    ConfigError,
    ConfigIOError,
    ConfigNotFoundError,
    NotInstalledError,
    ParseError,
)
from ini_guard.model import IMPLICIT_SECTION, Config, Section
from ini_guard.options import DuplicatePolicy, ParseOptions
from ini_guard.parser import Parser, load_file, load_files, parse
from ini_guard.registry import GlobalConfig
from ini_guard.registry import get as get_global
from ini_guard.registry import install
from ini_guard.registry import is_installed
from ini_guard.registry import require as require_global
from ini_guard.registry import reset as reset_global
from ini_guard.writer import dumps, write_file

__all__ = [
    "Config",
    "Section",
    "IMPLICIT_SECTION",
    "ParseOptions",
    "DuplicatePolicy",
    "Parser",
    "parse",
    "load_file",
    "load_files",
    "dumps",
    "write_file",
    "GlobalConfig",
    "install",
    "get_global",
    "require_global",
    "is_installed",
    "reset_global",
    "CoercerProtocol",
    "register_coercer",
    "unregister_coercer",
    "ConfigError",
    "ParseError",
    "CoercionError",
    "ConfigNotFoundError",
    "AlreadyInstalledError",
    "NotInstalledError",
    "ConfigBypassError",
    "ConfigIOError",
]
