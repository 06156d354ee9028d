from __future__ import annotations

import hashlib
import json
import os
from typing import Dict, Mapping

__all__ = [
    "_stable_serialize_for_checksum",
    "_checksum_of_config",
    "_require_reset_env",
    "_redact_for_log",
    "_canon",
]

_SECRET_MARKERS = ("secret", "password", "token", "key", "passwd", "api_key")


def _stable_serialize_for_checksum(data: Mapping[str, Mapping[str, str]]) -> bytes:
    out: Dict[str, Dict[str, str]] = {}
    for section in sorted(data.keys()):
        out[section] = {k: str(v) for k, v in data[section].items()}
    return json.dumps(out, separators=(",", ":"), sort_keys=True).encode("utf-8")


def _checksum_of_config(snapshot: Mapping[str, Mapping[str, str]], algorithm: str = "sha256") -> str:
    b = _stable_serialize_for_checksum(snapshot)
    return hashlib.new(algorithm, b).hexdigest()


def _require_reset_env() -> bool:
    return os.getenv("ALLOW_CONFIG_RESET", "") == "1"


def _redact_for_log(name: str, value: object) -> str:
    """
    Redact likely secrets in logs.
    """
    lowered = name.lower()
    if any(s in lowered for s in _SECRET_MARKERS):
        return "***"
    return repr(value)


def _canon(name: str, case_sensitive: bool) -> str:
    return name if case_sensitive else name.casefold()
