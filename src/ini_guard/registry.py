"""
Process-wide publication of a single Config.

install() succeeds exactly once per process; every later call fails with
AlreadyInstalledError and leaves the published Config untouched. Reads do
not lock: the slot only ever holds a fully built, immutable Config.

reset() exists for test isolation only. It refuses to run unless
ALLOW_CONFIG_RESET=1 is set in the environment.
"""

from __future__ import annotations

import logging
import threading
from typing import Optional

from ini_guard.exceptions import AlreadyInstalledError, ConfigBypassError, NotInstalledError
from ini_guard.model import Config
from ini_guard.utils import _require_reset_env

logger = logging.getLogger("ini_guard.registry")
logger.addHandler(logging.NullHandler())

__all__ = [
    "GlobalConfig",
    "install",
    "get",
    "require",
    "is_installed",
    "reset",
]


class GlobalConfig:
    """A slot holding at most one published Config, installed at most once."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._config: Optional[Config] = None

    def install(self, config: Config) -> None:
        """
        Publish ``config``.

        Raises AlreadyInstalledError, carrying the rejected config, if a
        config was already published.
        """
        if not isinstance(config, Config):
            raise TypeError(f"Only a Config can be installed, got {type(config)}")
        with self._lock:
            if self._config is not None:
                logger.debug("Global config already installed; rejecting %r", config)
                raise AlreadyInstalledError(config)
            self._config = config
        logger.info("Global config installed: %r", config)

    def get(self) -> Optional[Config]:
        return self._config

    def require(self) -> Config:
        config = self._config
        if config is None:
            raise NotInstalledError()
        return config

    def is_installed(self) -> bool:
        return self._config is not None

    def reset(self) -> None:
        """
        Clear the slot. Test tooling only, never call this in production code.

        Raises ConfigBypassError unless ALLOW_CONFIG_RESET=1 is set.
        """
        if not _require_reset_env():
            raise ConfigBypassError("Global config reset requires ALLOW_CONFIG_RESET=1")
        with self._lock:
            self._config = None
        logger.warning("Global config reset.")

    def __repr__(self) -> str:
        return f"<GlobalConfig installed={self.is_installed()}>"


_GLOBAL = GlobalConfig()


def install(config: Config) -> None:
    _GLOBAL.install(config)


def get() -> Optional[Config]:
    return _GLOBAL.get()


def require() -> Config:
    return _GLOBAL.require()


def is_installed() -> bool:
    return _GLOBAL.is_installed()


def reset() -> None:
    _GLOBAL.reset()
