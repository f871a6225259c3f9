# SPDX-License-Identifier: MIT

from markban.cleanup import register_cleanup
from markban.initialize import initialize
from markban.terminal.app import run


def main() -> None:
    initialize()
    register_cleanup()
    run()


if __name__ == "__main__":
    main()
