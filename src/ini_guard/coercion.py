from __future__ import annotations

import logging
import re
import threading
from typing import Any, Callable, Dict, List, Optional, Protocol

from typing_extensions import runtime_checkable

from ini_guard.exceptions import CoercionError

logger = logging.getLogger("ini_guard.coercion")
logger.addHandler(logging.NullHandler())

__all__ = [
    "CoercerProtocol",
    "coerce",
    "coerce_list",
    "register_coercer",
    "unregister_coercer",
    "has_coercer",
]

TRUE_WORDS = frozenset({"true", "1", "yes", "on"})
FALSE_WORDS = frozenset({"false", "0", "no", "off"})

_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_FLOAT_SPECIAL_RE = re.compile(r"[+-]?(?:inf|infinity|nan)", re.IGNORECASE)


@runtime_checkable
class CoercerProtocol(Protocol):
    def __call__(self, text: str) -> Any:  # raise ValueError on mismatch
        ...


def _to_bool(text: str) -> bool:
    word = text.strip().lower()
    if word in TRUE_WORDS:
        return True
    if word in FALSE_WORDS:
        return False
    raise ValueError(f"not a boolean: {text!r}")


def _to_int(text: str) -> int:
    stripped = text.strip()
    if not _INT_RE.fullmatch(stripped):
        raise ValueError(f"not a decimal integer: {text!r}")
    return int(stripped, 10)


def _to_float(text: str) -> float:
    stripped = text.strip()
    if not (_FLOAT_RE.fullmatch(stripped) or _FLOAT_SPECIAL_RE.fullmatch(stripped)):
        raise ValueError(f"not a decimal number: {text!r}")
    return float(stripped)


def _to_str(text: str) -> str:
    return text


_COERCERS: Dict[Any, Callable[[str], Any]] = {
    bool: _to_bool,
    int: _to_int,
    float: _to_float,
    str: _to_str,
}
_BUILTINS = frozenset(_COERCERS)
_coercers_lock = threading.Lock()


def register_coercer(target_type: Any, func: CoercerProtocol, *, override: bool = False) -> None:
    """
    Register a text -> value conversion for ``target_type``.

    The function receives the stored text and must raise ValueError (or
    TypeError) when the text does not fit; the caller turns that into a
    CoercionError. Built-in coercers for bool/int/float/str/list cannot be
    replaced.
    """
    if not isinstance(func, CoercerProtocol):
        raise TypeError("Coercer must be callable")
    if target_type in _BUILTINS or target_type is list:
        raise ValueError(f"Cannot replace the built-in coercer for {target_type!r}")
    with _coercers_lock:
        if target_type in _COERCERS and not override:
            raise ValueError(f"A coercer for {target_type!r} is already registered")
        _COERCERS[target_type] = func
    logger.debug("Registered coercer for %r", target_type)


def unregister_coercer(target_type: Any) -> None:
    if target_type in _BUILTINS:
        raise ValueError(f"Cannot remove the built-in coercer for {target_type!r}")
    with _coercers_lock:
        _COERCERS.pop(target_type, None)


def has_coercer(target_type: Any) -> bool:
    return target_type is list or target_type in _COERCERS


def coerce_list(text: str, delimiter: str, item_type: Any = str) -> List[Any]:
    """Split on ``delimiter``, trim each element, then coerce each to ``item_type``."""
    if not text.strip():
        return []
    items = [part.strip() for part in text.split(delimiter)]
    if item_type is str:
        return items
    return [coerce(item, item_type) for item in items]


def coerce(text: str, target_type: Any, delimiter: Optional[str] = None) -> Any:
    """
    Convert stored text to ``target_type``.

    Raises CoercionError when the text does not match the type's grammar and
    TypeError when no coercer exists for the type.
    """
    if target_type is list:
        return coerce_list(text, delimiter or ",")
    func = _COERCERS.get(target_type)
    if func is None:
        raise TypeError(f"No coercer registered for {target_type!r}")
    try:
        return func(text)
    except (ValueError, TypeError) as exc:
        logger.debug("Coercion to %r failed", target_type)
        raise CoercionError(text, target_type) from exc
