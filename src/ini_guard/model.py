"""
Immutable INI data model.

A Config is an ordered collection of Sections; a Section is an ordered
mapping of key -> text. Values are always stored as the text read from the
source and are only converted by the typed accessors (get_as, get_or,
get_list), so the same value can be read as different types.

Neither class can be changed after construction. merge() and with_value()
build new objects and leave existing references untouched.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import (
    AbstractSet,
    Any,
    Dict,
    ItemsView,
    Iterator,
    KeysView,
    Mapping,
    Optional,
    Tuple,
)

from ini_guard.coercion import coerce, coerce_list
from ini_guard.exceptions import CoercionError, ConfigNotFoundError
from ini_guard.options import DEFAULT_OPTIONS, ParseOptions
from ini_guard.utils import _canon, _checksum_of_config, _redact_for_log

logger = logging.getLogger("ini_guard.model")
logger.addHandler(logging.NullHandler())

__all__ = ["IMPLICIT_SECTION", "Section", "Config"]

# Name of the section holding keys that appear before any [section] header.
IMPLICIT_SECTION = ""

_EMPTY: Mapping[str, str] = MappingProxyType({})


class Section(Mapping[str, str]):
    """
    One INI section: a name plus an ordered, read-only mapping key -> text.

    Key lookups follow the case policy the section was built with; iteration
    yields keys as first spelled in the source.
    """

    def __init__(
        self,
        name: str,
        entries: Optional[Mapping[str, Tuple[str, str]]] = None,
        *,
        case_sensitive: bool = True,
    ) -> None:
        # entries: canonical key -> (display key, value)
        self.__name = name
        self.__case_sensitive = case_sensitive
        entries = entries or {}
        self.__display: Mapping[str, str] = MappingProxyType({c: d for c, (d, _) in entries.items()})
        self.__values: Mapping[str, str] = MappingProxyType({c: v for c, (_, v) in entries.items()})

    @property
    def name(self) -> str:
        return self.__name

    @property
    def case_sensitive(self) -> bool:
        return self.__case_sensitive

    @property
    def is_implicit(self) -> bool:
        return self.__name == IMPLICIT_SECTION

    def __setattr__(self, name: str, value: Any) -> None:
        if hasattr(self, "_Section__values"):
            raise AttributeError("Section is read-only")
        super().__setattr__(name, value)

    def __getitem__(self, key: str) -> str:
        return self.__values[_canon(key, self.__case_sensitive)]

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        return _canon(key, self.__case_sensitive) in self.__values

    def __iter__(self) -> Iterator[str]:
        return iter(self.__display.values())

    def __len__(self) -> int:
        return len(self.__values)

    def __repr__(self) -> str:
        return f"<Section name={self.__name!r} keys={len(self)}>"

    def _entries(self) -> Dict[str, Tuple[str, str]]:
        return {c: (self.__display[c], v) for c, v in self.__values.items()}


class _ConfigDraft:
    """Mutable staging area used to build a Config in one pass."""

    def __init__(self, options: ParseOptions) -> None:
        self.options = options
        # canonical section -> (display name, {canonical key -> (display key, value)})
        self._sections: Dict[str, Tuple[str, Dict[str, Tuple[str, str]]]] = {}

    @classmethod
    def from_config(cls, config: "Config") -> "_ConfigDraft":
        draft = cls(config.options)
        for section in config._section_objects():
            draft._sections[draft.section_key(section.name)] = (section.name, section._entries())
        return draft

    def section_key(self, name: str) -> str:
        return _canon(name, self.options.case_sensitive_sections)

    def has_section(self, name: str) -> bool:
        return self.section_key(name) in self._sections

    def open_section(self, name: str) -> str:
        canon = self.section_key(name)
        if canon not in self._sections:
            self._sections[canon] = (name, {})
        return canon

    def has_key(self, section: str, key: str) -> bool:
        entries = self._sections.get(self.section_key(section))
        return entries is not None and _canon(key, self.options.case_sensitive_keys) in entries[1]

    def set(self, section: str, key: str, value: str) -> None:
        canon_section = self.open_section(section)
        entries = self._sections[canon_section][1]
        canon_key = _canon(key, self.options.case_sensitive_keys)
        display = entries[canon_key][0] if canon_key in entries else key
        entries[canon_key] = (display, value)

    def freeze(self) -> "Config":
        # an implicit section only exists while it holds keys
        sections = {
            canon: Section(name, entries, case_sensitive=self.options.case_sensitive_keys)
            for canon, (name, entries) in self._sections.items()
            if entries or name != IMPLICIT_SECTION
        }
        return Config(sections, self.options)


def _check_names(section: str, key: Optional[str] = None) -> None:
    if not isinstance(section, str):
        raise TypeError(f"Section name must be a str, got {type(section)}")
    if section != section.strip() or any(c in section for c in "[]\r\n"):
        raise ValueError(f"Invalid section name: {section!r}")
    if key is None:
        return
    if not isinstance(key, str):
        raise TypeError(f"Key must be a str, got {type(key)}")
    if not key or key != key.strip() or any(c in key for c in "\r\n"):
        raise ValueError(f"Invalid key: {key!r}")


class Config:
    """
    Parsed INI configuration.

    Behaves like a read-only mapping of section name -> Section. Lookups by
    (section, key) never raise for absent names; typed accessors coerce the
    stored text on demand.
    """

    def __init__(
        self,
        sections: Optional[Mapping[str, Section]] = None,
        options: ParseOptions = DEFAULT_OPTIONS,
    ) -> None:
        # sections: canonical name -> Section, in order of first appearance
        sections = dict(sections or {})
        self.__options = options
        self.__sections: Mapping[str, Section] = MappingProxyType(sections)
        self.__by_name: Mapping[str, Section] = MappingProxyType({s.name: s for s in sections.values()})

    @classmethod
    def from_dict(
        cls,
        mapping: Mapping[str, Mapping[str, Any]],
        options: ParseOptions = DEFAULT_OPTIONS,
    ) -> "Config":
        """
        Build a Config from ``{section: {key: value}}``.

        Values are stored as ``str(value)``. Use ``""`` (IMPLICIT_SECTION) for
        top-level keys.
        """
        draft = _ConfigDraft(options)
        for section, values in mapping.items():
            _check_names(section)
            draft.open_section(section)
            for key, value in values.items():
                _check_names(section, key)
                draft.set(section, key, str(value))
        return draft.freeze()

    @property
    def options(self) -> ParseOptions:
        return self.__options

    def __setattr__(self, name: str, value: Any) -> None:
        if hasattr(self, "_Config__by_name"):
            raise AttributeError("Config is read-only; use merge() or with_value() to derive a new one")
        super().__setattr__(name, value)

    def _section_objects(self) -> Iterator[Section]:
        return iter(self.__sections.values())

    # mapping protocol
    def __getitem__(self, name: str) -> Section:
        section = self.section(name)
        if section is None:
            raise KeyError(name)
        return section

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.section(name) is not None

    def __iter__(self) -> Iterator[str]:
        return iter(self.__by_name)

    def __len__(self) -> int:
        return len(self.__sections)

    def section(self, name: str) -> Optional[Section]:
        return self.__sections.get(_canon(name, self.__options.case_sensitive_sections))

    def sections(self) -> KeysView[str]:
        """Section names in order of first appearance."""
        return self.__by_name.keys()

    def keys(self, section: str) -> AbstractSet[str]:
        """Key names of ``section`` in insertion order; empty if the section is absent."""
        found = self.section(section)
        return found.keys() if found is not None else _EMPTY.keys()

    def items(self, section: str) -> ItemsView[str, str]:
        found = self.section(section)
        return found.items() if found is not None else _EMPTY.items()

    # lookups
    def get(self, section: str, key: str) -> Optional[str]:
        """Return the stored text, or None if the section or key is absent."""
        found = self.section(section)
        if found is None:
            return None
        value = found.get(key)
        logger.debug("get [%s] %s -> %s", section, key, _redact_for_log(key, value))
        return value

    def get_default(self, key: str) -> Optional[str]:
        """Lookup in the implicit top-level section."""
        return self.get(IMPLICIT_SECTION, key)

    def get_as(self, section: str, key: str, target_type: Any, *, delimiter: Optional[str] = None) -> Any:
        """
        Coerce the stored text to ``target_type``.

        Supported out of the box: bool (true/false/1/0/yes/no/on/off, any
        case), int, float, str and list (split on ``delimiter``, defaulting
        to the options' list_delimiter, each element trimmed). Other types
        need a coercer registered with ``register_coercer``.

        Raises:
        - ConfigNotFoundError: the section or key is absent.
        - CoercionError: the text does not match the type's grammar.
        - TypeError: no coercer exists for ``target_type``.
        """
        text = self.get(section, key)
        if text is None:
            raise ConfigNotFoundError(section, key)
        return coerce(text, target_type, delimiter or self.__options.list_delimiter)

    def get_or(self, section: str, key: str, default: Any, target_type: Any = None) -> Any:
        """
        Like get_as, but return ``default`` on a missing key or a coercion
        failure. The error is discarded; use get_as when it matters.

        ``target_type`` defaults to ``type(default)``, or str when default is None.
        """
        if target_type is None:
            target_type = str if default is None else type(default)
        try:
            return self.get_as(section, key, target_type)
        except ConfigNotFoundError:
            logger.debug("get_or [%s] %s missing, using default", section, key)
            return default
        except CoercionError as exc:
            logger.debug(
                "get_or [%s] %s: %s is not a valid %r, using default",
                section,
                key,
                _redact_for_log(key, exc.text),
                exc.target_type,
            )
            return default

    def get_list(
        self,
        section: str,
        key: str,
        item_type: Any = str,
        *,
        delimiter: Optional[str] = None,
    ) -> list:
        text = self.get(section, key)
        if text is None:
            raise ConfigNotFoundError(section, key)
        return coerce_list(text, delimiter or self.__options.list_delimiter, item_type)

    # derivations
    def merge(self, other: "Config") -> "Config":
        """
        Return a new Config with ``other`` layered over this one.

        Values in ``other`` win. Sections keep this config's order, with
        sections only ``other`` has appended in their order. The result uses
        this config's options.
        """
        if not isinstance(other, Config):
            raise TypeError(f"Can only merge with a Config, got {type(other)}")
        draft = _ConfigDraft.from_config(self)
        for section in other._section_objects():
            draft.open_section(section.name)
            for key, value in section.items():
                draft.set(section.name, key, value)
        merged = draft.freeze()
        logger.debug("Merged configs: %d + %d -> %d sections", len(self), len(other), len(merged))
        return merged

    def with_value(self, section: str, key: str, value: Any) -> "Config":
        """Return a new Config with ``section``/``key`` set to ``str(value)``."""
        _check_names(section, key)
        draft = _ConfigDraft.from_config(self)
        draft.set(section, key, str(value))
        return draft.freeze()

    def to_dict(self) -> Dict[str, Dict[str, str]]:
        return {s.name: dict(s.items()) for s in self.__sections.values()}

    def fingerprint(self) -> str:
        return _checksum_of_config(self.to_dict())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Config):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self) -> int:
        return hash(frozenset((s.name, frozenset(s.items())) for s in self.__sections.values()))

    def __repr__(self) -> str:
        return f"<Config sections={len(self)} checksum={self.fingerprint()[:12]}>"
