import logging
import sys

from ini_guard import ParseError, install, load_file, require_global

if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)

    try:
        install(load_file(sys.argv[1]))
    except ParseError as exc:
        print("Invalid config:", exc)
        sys.exit(1)

    for section in require_global().sections():
        print(f"[{section or '<top>'}]", dict(require_global().items(section)))
