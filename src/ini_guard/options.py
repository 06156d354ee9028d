from __future__ import annotations

import dataclasses
import enum
from dataclasses import dataclass
from typing import Any


class DuplicatePolicy(enum.Enum):
    """What the parser does when a key or section name repeats."""

    OVERWRITE = "overwrite"
    ERROR = "error"


@dataclass(frozen=True)
class ParseOptions:
    """
    Parsing and lookup policy, fixed when a Config is built.

    Defaults: duplicate keys are an error, duplicate section headers re-open
    the earlier section, names are case-sensitive, inline comments are off
    and lists split on ``,``.
    """

    duplicate_key_policy: DuplicatePolicy = DuplicatePolicy.ERROR
    duplicate_section_policy: DuplicatePolicy = DuplicatePolicy.OVERWRITE
    case_sensitive_keys: bool = True
    case_sensitive_sections: bool = True
    allow_inline_comments: bool = False
    list_delimiter: str = ","

    def __post_init__(self) -> None:
        for field in ("duplicate_key_policy", "duplicate_section_policy"):
            value = getattr(self, field)
            if not isinstance(value, DuplicatePolicy):
                # accept the enum's string values, e.g. "overwrite"
                try:
                    object.__setattr__(self, field, DuplicatePolicy(value))
                except ValueError as exc:
                    raise ValueError(f"{field} must be a DuplicatePolicy, got {value!r}") from exc
        if not isinstance(self.list_delimiter, str) or len(self.list_delimiter) != 1:
            raise ValueError(f"list_delimiter must be a single character, got {self.list_delimiter!r}")
        if self.list_delimiter.isspace():
            raise ValueError("list_delimiter must not be whitespace")

    def replace(self, **changes: Any) -> "ParseOptions":
        return dataclasses.replace(self, **changes)


DEFAULT_OPTIONS = ParseOptions()
