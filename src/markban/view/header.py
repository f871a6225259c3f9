# SPDX-License-Identifier: MIT

from typing import Optional

from rich import print
from rich.padding import Padding

from markban.view.state import get_show_header


def header(board_name: str, sub_header: Optional[str] = None) -> None:
    """Print the application header with the board name.

    Args:
        board_name: The name of the board
        sub_header: Optional sub-header text to display
    """
    if not get_show_header():
        return

    print(Padding("[dark_orange]markban[/dark_orange]", (1, 0, 0, 1)))
    if sub_header is not None:
        print(Padding(f"[sandy_brown]{sub_header}[/sandy_brown]", (0, 1)))
    print(Padding(f"[plum1]{board_name}[/plum1]", (0, 1)))
