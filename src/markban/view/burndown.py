# SPDX-License-Identifier: MIT

from rich import box
from rich.console import Console
from rich.table import Table

from markban.model.burndown import BurndownReport
from markban.time import datetime_to_display_local_datetime_str
from markban.view.header import header


def burndown_view(board_name: str, report: BurndownReport) -> None:
    header(board_name, "burndown")
    console = Console()

    for series in report["series"]:
        title = (
            f"{datetime_to_display_local_datetime_str(series['start'])} to "
            f"{datetime_to_display_local_datetime_str(series['end'])}"
        )
        if series["sprint"] is not None:
            title = f"sprint {series['sprint']['number']}: {series['sprint']['name']}, {title}"

        burndown_table = Table(box=box.SIMPLE, title=title)
        burndown_table.add_column("date")
        burndown_table.add_column("workload", justify="right")
        burndown_table.add_column("active", justify="right")
        burndown_table.add_column("events")

        for sample in series["data_points"]:
            burndown_table.add_row(
                datetime_to_display_local_datetime_str(sample["x"]),
                f"{sample['y']:g}",
                str(sample["count"]),
                ", ".join(
                    f"{event['event_type']} {event['task']}" for event in sample["tasks"]
                ),
            )
        console.print(burndown_table)
