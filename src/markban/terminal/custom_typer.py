# SPDX-License-Identifier: MIT

import re
from typing import Any, Optional

import click
import typer
import typer.core
from rich.console import Console

from markban.exceptions import MarkbanError

error_console = Console(stderr=True)


class AliasedTyperGroup(typer.core.TyperGroup):
    """TyperGroup that supports comma-separated command aliases and reports
    markban errors as a red message and exit code 1 instead of a traceback"""

    _CMD_SPLIT_P = re.compile(r" ?, ?")

    def get_command(self, ctx: click.Context, cmd_name: str) -> Optional[click.Command]:
        """Override to resolve aliases to the full command name"""
        cmd_name = self._group_cmd_name(cmd_name)
        return super().get_command(ctx, cmd_name)

    def _group_cmd_name(self, default_name: str) -> str:
        """Find the full command name if default_name is an alias"""
        for cmd in self.commands.values():
            name = cmd.name
            if name and default_name in self._CMD_SPLIT_P.split(name):
                return name
        return default_name

    def add_command(self, cmd: click.Command, name: Optional[str] = None) -> None:
        """Override to prevent duplicate commands from being added"""
        if name is None:
            name = cmd.name

        existing_name = self._group_cmd_name(name or "")
        if existing_name in self.commands and existing_name != name:
            return

        super().add_command(cmd, name)

    def invoke(self, ctx: click.Context) -> Any:
        try:
            return super().invoke(ctx)
        except MarkbanError as e:
            error_console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)
