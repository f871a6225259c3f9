# SPDX-License-Identifier: MIT

from rich import box
from rich.console import Console
from rich.table import Table

from markban.model.status import SprintReport, StatusReport, WorkloadInPeriod
from markban.time import datetime_to_display_local_datetime_str
from markban.view.header import header


def status_view(report: StatusReport) -> None:
    header(report["name"], "status")
    console = Console()

    summary_table = Table(box=box.SIMPLE, show_header=False)
    summary_table.add_column("property")
    summary_table.add_column("value", justify="right")
    summary_table.add_row("tasks", str(report["tasks"]))
    summary_table.add_row("started", str(report["started_tasks"]))
    summary_table.add_row("completed", str(report["completed_tasks"]))
    if report["total_workload"] is not None:
        summary_table.add_row("workload", __number(report["total_workload"]))
    if report["total_remaining_workload"] is not None:
        summary_table.add_row("remaining", __number(report["total_remaining_workload"]))
    console.print(summary_table)

    columns_table = Table(box=box.SIMPLE, title="columns")
    columns_table.add_column("column")
    columns_table.add_column("tasks", justify="right")
    column_workloads = report["column_workloads"]
    if column_workloads is not None:
        columns_table.add_column("workload", justify="right")
        columns_table.add_column("remaining", justify="right")
    for column_name, count in report["column_tasks"].items():
        row = [column_name, str(count)]
        if column_workloads is not None:
            row.append(__number(column_workloads[column_name]["workload"]))
            row.append(__number(column_workloads[column_name]["remaining_workload"]))
        columns_table.add_row(*row)
    console.print(columns_table)

    if report["assigned"]:
        assigned_table = Table(box=box.SIMPLE, title="assigned")
        assigned_table.add_column("assigned")
        assigned_table.add_column("tasks", justify="right")
        assigned_table.add_column("workload", justify="right")
        assigned_table.add_column("remaining", justify="right")
        for assignee, totals in report["assigned"].items():
            assigned_table.add_row(
                assignee,
                str(totals["total"]),
                __number(totals["workload"]),
                __number(totals["remaining_workload"]),
            )
        console.print(assigned_table)

    if report["due_tasks"]:
        due_table = Table(box=box.SIMPLE, title="due")
        due_table.add_column("task")
        due_table.add_column("due")
        due_table.add_column("status")
        for due_task in report["due_tasks"]:
            status = due_task["due_message"]
            if due_task["overdue"]:
                status = f"[red]{status}[/red]"
            due_table.add_row(
                due_task["task"],
                datetime_to_display_local_datetime_str(due_task["due_date"]),
                status,
            )
        console.print(due_table)

    if report["sprint"] is not None:
        __sprint_view(console, report["sprint"])

    period = report["period"]
    if period is not None:
        title = (
            f"{datetime_to_display_local_datetime_str(period['start'])} to "
            f"{datetime_to_display_local_datetime_str(period['end'])}"
        )
        console.print(
            __period_table(
                title,
                {
                    "created": period["created"],
                    "started": period["started"],
                    "completed": period["completed"],
                    "due": period["due"],
                },
            )
        )

    if report["untracked_tasks"]:
        console.print("[bold]untracked[/bold]")
        for file_name in report["untracked_tasks"]:
            console.print(f"  {file_name}", highlight=False)


def untracked_view(file_names: list[str]) -> None:
    console = Console()
    for file_name in file_names:
        console.print(file_name, highlight=False)


def __sprint_view(console: Console, sprint: SprintReport) -> None:
    title = f"sprint {sprint['number']}: {sprint['name']}"
    if sprint["end"] is not None:
        title += f" (ended, current sprint is {sprint['current']})"
    console.print(f"[bold]{title}[/bold]")
    if sprint["description"]:
        console.print(sprint["description"])
    console.print(
        f"started {datetime_to_display_local_datetime_str(sprint['start'])}, "
        f"lasting {sprint['duration_message']}"
    )

    periods = {
        "created": sprint["created"],
        "started": sprint["started"],
        "completed": sprint["completed"],
        "due": sprint["due"],
    }
    periods.update(sprint["custom_fields"])
    console.print(__period_table("sprint", periods))


def __period_table(title: str, periods: dict[str, WorkloadInPeriod]) -> Table:
    period_table = Table(box=box.SIMPLE, title=title)
    period_table.add_column("event")
    period_table.add_column("tasks")
    period_table.add_column("workload", justify="right")
    for event, period in periods.items():
        period_table.add_row(
            event,
            ", ".join(task["id"] for task in period["tasks"]),
            __number(period["workload"]),
        )
    return period_table


def __number(value: float) -> str:
    return f"{value:g}"
