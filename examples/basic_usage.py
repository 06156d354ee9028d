# python
import logging

from ini_guard import Config, CoercionError, install, parse, require_global

TEXT = """
; application defaults
log_level = info

[server]
host = 0.0.0.0
port = 8080
debug = no

[paths]
search = /usr/lib, /opt/lib
"""

if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)

    defaults = Config().with_value("server", "workers", 4)
    config = defaults.merge(parse(TEXT))

    print("Port:", config.get_as("server", "port", int))
    print("Debug:", config.get_or("server", "debug", True))
    print("Workers:", config.get_as("server", "workers", int))
    print("Search path:", config.get_list("paths", "search"))

    try:
        config.get_as("server", "host", int)
    except CoercionError as exc:
        print("Coercion failed:", exc)

    install(config)
    print("Global log level:", require_global().get_default("log_level"))
