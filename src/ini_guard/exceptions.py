from __future__ import annotations

from typing import Any, Optional


class ConfigError(Exception):
    """Base config exception."""


class ParseError(ConfigError):
    """Raised when INI text is malformed. Always carries the 1-based line number."""

    def __init__(
        self,
        line: int,
        reason: str,
        text: Optional[str] = None,
        source: Optional[str] = None,
    ) -> None:
        self.line = line
        self.reason = reason
        self.text = text
        self.source = source
        msg = f"{reason} at line {line}"
        if source is not None:
            msg += f" in {source}"
        if text is not None:
            msg += f": {text!r}"
        super().__init__(msg)

    def with_source(self, source: str) -> "ParseError":
        return ParseError(self.line, self.reason, self.text, source)


class CoercionError(ConfigError, ValueError):
    """Raised by typed accessors when stored text does not match the target type."""

    def __init__(self, text: str, target_type: Any) -> None:
        self.text = text
        self.target_type = target_type
        type_name = getattr(target_type, "__name__", repr(target_type))
        super().__init__(f"Cannot coerce {text!r} to {type_name}")


class ConfigNotFoundError(ConfigError):
    """Raised when a requested section/key pair is not present."""

    def __init__(self, section: str, key: str) -> None:
        self.section = section
        self.key = key
        super().__init__(f"No value for key {key!r} in section {section!r}")


class AlreadyInstalledError(ConfigError):
    """Raised when a global config is installed a second time."""

    def __init__(self, config: Any = None) -> None:
        # the rejected config, handed back to the caller
        self.config = config
        super().__init__("A global config has already been installed")


class NotInstalledError(ConfigError):
    """Raised when the global config is requested before install()."""

    def __init__(self) -> None:
        super().__init__("No global config has been installed")


class ConfigBypassError(ConfigError):
    """Raised when reset is attempted without required environment approval."""


class ConfigIOError(ConfigError):
    """Raised when a config file cannot be read, decoded or written."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{reason}: {path}")
