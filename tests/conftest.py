# python
import pytest

from ini_guard import registry


@pytest.fixture(autouse=True)
def clean_global_config(monkeypatch):
    monkeypatch.setenv("ALLOW_CONFIG_RESET", "1")
    registry.reset()
    yield
    monkeypatch.setenv("ALLOW_CONFIG_RESET", "1")
    registry.reset()


@pytest.fixture
def sample_text():
    return (
        "; top-level settings\n"
        "name = demo\n"
        "\n"
        "[server]\n"
        "host = localhost\n"
        "port: 8080\n"
        "debug = yes\n"
        "\n"
        "# paths\n"
        "[paths]\n"
        "search = /usr/lib, /opt/lib , ~/lib\n"
        'motd = "  hello ; world  "\n'
    )
