from __future__ import annotations

import logging
import os
from typing import List

from ini_guard.exceptions import ConfigIOError
from ini_guard.model import Config, Section
from ini_guard.parser import PathType

logger = logging.getLogger("ini_guard.writer")
logger.addHandler(logging.NullHandler())

__all__ = ["dumps", "write_file"]

_QUOTE_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\t": "\\t"}
_QUOTE_TRIGGERS = ('"', ";", "#", "\n", "\r", "\\")


def _needs_quotes(value: str) -> bool:
    if value != value.strip():
        return True
    return any(c in value for c in _QUOTE_TRIGGERS)


def _format_value(value: str) -> str:
    if not _needs_quotes(value):
        return value
    return '"' + "".join(_QUOTE_ESCAPES.get(c, c) for c in value) + '"'


def _format_key(key: str) -> str:
    out = []
    for i, ch in enumerate(key):
        if ch in "\\=:" or (i == 0 and ch in "[;#"):
            out.append("\\")
        out.append(ch)
    return "".join(out)


def _format_section(section: Section) -> List[str]:
    lines = [] if section.is_implicit else [f"[{section.name}]"]
    for key, value in section.items():
        lines.append(f"{_format_key(key)} = {_format_value(value)}")
    return lines


def dumps(config: Config) -> str:
    """
    Serialize ``config`` to INI text that parses back to the same contents.

    The implicit section is written first, without a header. Values with
    surrounding whitespace, quotes, backslashes, comment characters or line
    breaks are quoted and escaped.
    """
    ordered = sorted(config._section_objects(), key=lambda s: not s.is_implicit)
    blocks = ["\n".join(_format_section(s)) for s in ordered]
    if not blocks:
        return ""
    return "\n\n".join(blocks) + "\n"


def write_file(config: Config, path: PathType, *, encoding: str = "utf-8") -> None:
    """Write ``config`` to ``path``, replacing any existing file."""
    path_str = os.fspath(path)
    text = dumps(config)
    try:
        with open(path_str, "w", encoding=encoding, newline="\n") as fp:
            fp.write(text)
    except OSError as exc:
        logger.error("Cannot write config file %s: %s", path_str, exc)
        raise ConfigIOError(path_str, f"Cannot write config file ({exc.strerror or exc})") from exc
    logger.info("Wrote %d sections to %s", len(config), path_str)
