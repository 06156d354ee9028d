"""
Line-level tokenizer for INI text.

Each physical line becomes exactly one Token: a comment, a blank line, a
section header or a key/value assignment. Malformed lines raise ParseError
carrying the 1-based line number.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from ini_guard.exceptions import ParseError
from ini_guard.options import DEFAULT_OPTIONS, ParseOptions

logger = logging.getLogger("ini_guard.tokenizer")
logger.addHandler(logging.NullHandler())

COMMENT_CHARS = (";", "#")
SEPARATORS = ("=", ":")
# characters a backslash may escape inside a key
KEY_ESCAPES = frozenset("=:\\[;#")
QUOTE_ESCAPES = {'"': '"', "\\": "\\", "n": "\n", "t": "\t"}


class TokenKind(enum.Enum):
    COMMENT = "comment"
    BLANK = "blank"
    SECTION_HEADER = "section_header"
    KEY_VALUE = "key_value"


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    line: int
    raw: str
    name: Optional[str] = None
    key: Optional[str] = None
    value: Optional[str] = None
    quoted: bool = False


def _fail(lineno: int, reason: str, raw: str) -> ParseError:
    # the raw line may hold a secret value; it stays on the exception only
    logger.error("Parse error at line %d: %s", lineno, reason)
    return ParseError(lineno, reason, raw)


def tokenize_line(line: str, lineno: int, options: ParseOptions = DEFAULT_OPTIONS) -> Token:
    """Classify a single line (without its line terminator)."""
    stripped = line.strip()
    if not stripped:
        return Token(TokenKind.BLANK, lineno, line)
    if stripped[0] in COMMENT_CHARS:
        return Token(TokenKind.COMMENT, lineno, line)
    if stripped[0] == "[":
        return Token(TokenKind.SECTION_HEADER, lineno, line, name=_section_name(stripped, lineno, options))
    key, value, quoted = _key_value(stripped, lineno, options)
    return Token(TokenKind.KEY_VALUE, lineno, line, key=key, value=value, quoted=quoted)


def tokenize(text: str, options: ParseOptions = DEFAULT_OPTIONS) -> Iterator[Token]:
    """Yield one Token per line. Accepts ``\\n`` and ``\\r\\n`` line endings."""
    if text.startswith("\ufeff"):
        text = text[1:]
    for lineno, line in enumerate(text.split("\n"), start=1):
        if line.endswith("\r"):
            line = line[:-1]
        yield tokenize_line(line, lineno, options)


def _section_name(stripped: str, lineno: int, options: ParseOptions) -> str:
    body = stripped
    if options.allow_inline_comments:
        close = body.find("]")
        if close != -1:
            rest = body[close + 1 :].lstrip()
            if rest and rest[0] in COMMENT_CHARS:
                body = body[: close + 1]
    if not body.endswith("]"):
        raise _fail(lineno, "Missing closing bracket for section name", stripped)
    name = body[1:-1].strip()
    if "[" in name or "]" in name:
        raise _fail(lineno, "Unbalanced brackets in section header", stripped)
    if not name:
        raise _fail(lineno, "Empty section name", stripped)
    return name


def _key_value(stripped: str, lineno: int, options: ParseOptions) -> Tuple[str, str, bool]:
    key_chars: List[str] = []
    sep: Optional[int] = None
    i = 0
    n = len(stripped)
    while i < n:
        ch = stripped[i]
        if ch == "\\" and i + 1 < n and stripped[i + 1] in KEY_ESCAPES:
            key_chars.append(stripped[i + 1])
            i += 2
            continue
        if ch in SEPARATORS:
            sep = i
            break
        key_chars.append(ch)
        i += 1

    if sep is None:
        raise _fail(lineno, "Expected a key-value assignment", stripped)
    key = "".join(key_chars).strip()
    if not key:
        raise _fail(lineno, "Assignment requires a key name", stripped)

    rest = stripped[sep + 1 :].lstrip()
    if rest.startswith('"'):
        return key, _quoted_value(rest, lineno, options, stripped), True
    if options.allow_inline_comments:
        rest = _strip_inline_comment(rest)
    return key, rest.strip(), False


def _strip_inline_comment(text: str) -> str:
    # a comment marker only counts at the start or after whitespace
    for i, ch in enumerate(text):
        if ch in COMMENT_CHARS and (i == 0 or text[i - 1].isspace()):
            return text[:i]
    return text


def _quoted_value(text: str, lineno: int, options: ParseOptions, stripped: str) -> str:
    out: List[str] = []
    i = 1
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\\" and i + 1 < n:
            nxt = text[i + 1]
            if nxt in QUOTE_ESCAPES:
                out.append(QUOTE_ESCAPES[nxt])
                i += 2
                continue
            # unknown escape, keep the backslash verbatim
            out.append(ch)
            i += 1
            continue
        if ch == '"':
            trailing = text[i + 1 :].strip()
            if trailing and not (options.allow_inline_comments and trailing[0] in COMMENT_CHARS):
                raise _fail(lineno, "Unexpected text after quoted value", stripped)
            return "".join(out)
        out.append(ch)
        i += 1
    raise _fail(lineno, "Unterminated quoted value", stripped)
