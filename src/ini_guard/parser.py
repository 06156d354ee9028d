"""
INI parser and file loaders.

The parser is a two-state machine driven by the tokenizer: it starts in the
implicit (unnamed) section and moves to a named section on every header.
A document is accepted whole or rejected whole: the first ParseError aborts
the parse and no partial Config is returned.
"""

from __future__ import annotations

import enum
import logging
import os
from typing import Any, Optional, Set, Union

import chardet

from ini_guard.exceptions import ConfigIOError, ParseError
from ini_guard.model import IMPLICIT_SECTION, Config, _ConfigDraft
from ini_guard.options import DEFAULT_OPTIONS, DuplicatePolicy, ParseOptions
from ini_guard.tokenizer import Token, TokenKind, tokenize

logger = logging.getLogger("ini_guard.parser")
logger.addHandler(logging.NullHandler())

__all__ = ["Parser", "ParserState", "parse", "load_file", "load_files"]

PathType = Union[str, "os.PathLike[str]"]

# chardet guesses below this are ignored in favour of UTF-8
MIN_DETECT_CONFIDENCE = 0.8


class ParserState(enum.Enum):
    IN_IMPLICIT_SECTION = "implicit"
    IN_NAMED_SECTION = "named"


def _resolve_options(options: Optional[ParseOptions], overrides: dict) -> ParseOptions:
    resolved = options if options is not None else DEFAULT_OPTIONS
    if overrides:
        resolved = resolved.replace(**overrides)
    return resolved


class Parser:
    def __init__(self, options: Optional[ParseOptions] = None, **overrides: Any) -> None:
        self._options = _resolve_options(options, overrides)

    @property
    def options(self) -> ParseOptions:
        return self._options

    def parse(self, text: str, *, source: Optional[str] = None) -> Config:
        """
        Parse a complete INI document.

        ``source`` (usually a file path) is attached to any ParseError raised.
        """
        if not isinstance(text, str):
            raise TypeError(f"INI text must be a str, got {type(text)}")
        try:
            config = self._run(text)
        except ParseError as exc:
            if source is not None:
                raise exc.with_source(source) from None
            raise
        logger.debug(
            "Parsed %s: %d sections, %d keys",
            source or "<text>",
            len(config),
            sum(len(s) for s in config.to_dict().values()),
        )
        return config

    def _run(self, text: str) -> Config:
        draft = _ConfigDraft(self._options)
        state = ParserState.IN_IMPLICIT_SECTION
        current = IMPLICIT_SECTION
        headers_seen: Set[str] = set()

        for token in tokenize(text, self._options):
            if token.kind is TokenKind.SECTION_HEADER:
                assert token.name is not None
                self._enter_section(draft, token, headers_seen)
                state, current = ParserState.IN_NAMED_SECTION, token.name
            elif token.kind is TokenKind.KEY_VALUE:
                assert token.key is not None and token.value is not None
                section = current if state is ParserState.IN_NAMED_SECTION else IMPLICIT_SECTION
                self._assign(draft, section, token)
            # comments and blank lines are no-ops

        return draft.freeze()

    def _enter_section(self, draft: _ConfigDraft, token: Token, headers_seen: Set[str]) -> None:
        name = token.name or ""
        canon = draft.section_key(name)
        if canon in headers_seen and self._options.duplicate_section_policy is DuplicatePolicy.ERROR:
            logger.error("Duplicate section [%s] at line %d", name, token.line)
            raise ParseError(token.line, f"Duplicate section [{name}]", token.raw.strip())
        headers_seen.add(canon)
        draft.open_section(name)

    def _assign(self, draft: _ConfigDraft, section: str, token: Token) -> None:
        key = token.key or ""
        if draft.has_key(section, key):
            if self._options.duplicate_key_policy is DuplicatePolicy.ERROR:
                logger.error("Duplicate key %r in section [%s] at line %d", key, section, token.line)
                raise ParseError(
                    token.line, f"Duplicate key {key!r} in section [{section}]", token.raw.strip()
                )
            logger.debug("Key %r in [%s] overwritten at line %d", key, section, token.line)
        draft.set(section, key, token.value or "")


def parse(text: str, options: Optional[ParseOptions] = None, **overrides: Any) -> Config:
    """Parse INI ``text`` into a Config. Keyword overrides replace fields of ``options``."""
    return Parser(options, **overrides).parse(text)


def _decode(raw: bytes, path: str, encoding: Optional[str]) -> str:
    if encoding is not None:
        try:
            return raw.decode(encoding)
        except (UnicodeDecodeError, LookupError) as exc:
            logger.error("Cannot decode %s as %s: %s", path, encoding, exc)
            raise ConfigIOError(path, f"Cannot decode config file as {encoding}") from exc

    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.debug("%s is not UTF-8, detecting encoding", path)

    guess = chardet.detect(raw)
    codec = guess.get("encoding")
    if codec is None or (guess.get("confidence") or 0.0) < MIN_DETECT_CONFIDENCE:
        codec = "utf-8"
    try:
        return raw.decode(codec)
    except (UnicodeDecodeError, LookupError) as exc:
        logger.error("Cannot decode %s (detected %s): %s", path, codec, exc)
        raise ConfigIOError(path, "Cannot decode config file") from exc


def load_file(
    path: PathType,
    options: Optional[ParseOptions] = None,
    *,
    encoding: Optional[str] = None,
    **overrides: Any,
) -> Config:
    """
    Read and parse the INI file at ``path``.

    Without ``encoding`` the file is read as UTF-8 (a BOM is accepted) and
    falls back to chardet's guess when that fails.

    Raises:
    - ConfigIOError: the file cannot be read or decoded.
    - ParseError: the contents are malformed; ``source`` is set to the path.
    """
    path_str = os.fspath(path)
    try:
        with open(path_str, "rb") as fp:
            raw = fp.read()
    except OSError as exc:
        logger.error("Cannot read config file %s: %s", path_str, exc)
        raise ConfigIOError(path_str, f"Cannot read config file ({exc.strerror or exc})") from exc

    text = _decode(raw, path_str, encoding)
    return Parser(options, **overrides).parse(text, source=path_str)


def load_files(
    *paths: PathType,
    options: Optional[ParseOptions] = None,
    encoding: Optional[str] = None,
    **overrides: Any,
) -> Config:
    """Load several INI files and merge them in order; later files override earlier ones."""
    resolved = _resolve_options(options, overrides)
    result = Config(options=resolved)
    for path in paths:
        result = result.merge(load_file(path, resolved, encoding=encoding))
    logger.info("Loaded %d config file(s): %d sections", len(paths), len(result))
    return result
