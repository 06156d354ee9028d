import logging
import threading

import pytest

from ini_guard import Config, parse, registry
from ini_guard.exceptions import AlreadyInstalledError, ConfigBypassError, NotInstalledError
from ini_guard.registry import GlobalConfig


def test_get_before_install_is_none():
    assert registry.get() is None
    assert registry.is_installed() is False
    with pytest.raises(NotInstalledError):
        registry.require()


def test_install_once():
    c1 = parse("[a]\nx = 1\n")
    c2 = parse("[a]\nx = 2\n")
    registry.install(c1)
    with pytest.raises(AlreadyInstalledError) as info:
        registry.install(c2)
    assert info.value.config is c2
    assert registry.get() is c1
    assert registry.require().get("a", "x") == "1"
    assert registry.is_installed() is True


def test_install_rejects_non_config():
    with pytest.raises(TypeError):
        registry.install({"a": {"x": "1"}})  # type: ignore[arg-type]
    assert registry.get() is None


def test_empty_config_counts_as_installed():
    registry.install(Config())
    assert registry.is_installed() is True
    with pytest.raises(AlreadyInstalledError):
        registry.install(Config())


def test_reset_requires_env(monkeypatch):
    registry.install(Config())
    monkeypatch.delenv("ALLOW_CONFIG_RESET", raising=False)
    with pytest.raises(ConfigBypassError):
        registry.reset()
    assert registry.is_installed() is True


def test_reset_allows_new_install(caplog):
    caplog.set_level("WARNING", logger="ini_guard.registry")
    registry.install(parse("a = 1\n"))
    registry.reset()
    assert registry.get() is None
    assert any("reset" in r.getMessage() for r in caplog.records)
    registry.install(parse("a = 2\n"))
    assert registry.require().get_default("a") == "2"


def test_concurrent_install_has_single_winner():
    slot = GlobalConfig()
    configs = [Config.from_dict({"s": {"n": i}}) for i in range(16)]
    barrier = threading.Barrier(len(configs))
    winners = []
    losers = []

    def worker(cfg):
        barrier.wait()
        try:
            slot.install(cfg)
            winners.append(cfg)
        except AlreadyInstalledError as exc:
            losers.append(exc.config)

    threads = [threading.Thread(target=worker, args=(c,)) for c in configs]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert len(winners) == 1
    assert len(losers) == len(configs) - 1
    assert slot.get() is winners[0]


def test_readers_see_none_or_complete_config():
    slot = GlobalConfig()
    cfg = Config.from_dict({"s": {str(i): i for i in range(200)}})
    seen = []
    stop = threading.Event()

    def reader():
        while not stop.is_set():
            current = slot.get()
            seen.append(None if current is None else len(current["s"]))

    t = threading.Thread(target=reader)
    t.start()
    slot.install(cfg)
    stop.set()
    t.join()
    assert set(seen) <= {None, 200}


def test_rejected_install_logs_no_error(caplog):
    registry.install(parse("a = 1\n"))
    caplog.set_level(logging.DEBUG, logger="ini_guard")
    with pytest.raises(AlreadyInstalledError):
        registry.install(parse("a = 2\n"))
    assert not [r for r in caplog.records if r.levelno >= logging.ERROR]
    assert any("rejecting" in r.getMessage() for r in caplog.records)


def test_repr():
    slot = GlobalConfig()
    assert repr(slot) == "<GlobalConfig installed=False>"
