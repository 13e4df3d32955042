"""Output formatting utilities for the CLI."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict

from rich.console import Console
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table

from aiclient.models import ModelEntry
from aiclient.types import Choice

LOG_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def setup_logging(level: str, console: Console | None = None) -> None:
    """Route log records through rich; ``trace`` is treated as ``debug``."""
    logging.basicConfig(
        level=LOG_LEVELS.get(level.lower(), logging.INFO),
        format="%(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[RichHandler(console=console or Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


class OutputFormatter:
    """Rich-based output formatting for the ai CLI."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def format_model_list(self, models: list[ModelEntry], show_pricing: bool = False) -> None:
        if not models:
            self.console.print("[dim]No models found.[/dim]")
            return

        table = Table(title=f"Models ({len(models)})")
        table.add_column("Name", style="cyan")
        table.add_column("ID", no_wrap=True)
        table.add_column("Context length", justify="right")
        if show_pricing:
            table.add_column("Pricing")

        for m in models:
            row = [m.name, m.id, str(m.context_length)]
            if show_pricing:
                row.append(str(m.pricing))
            table.add_row(*row)

        self.console.print(table)

    def format_choices(self, choices: list[Choice]) -> None:
        for choice in choices:
            self.console.print(f"[bold green]Response:[/bold green] {choice.message.content}")

    def format_json(self, data: object, title: str | None = None) -> None:
        if title:
            self.console.print(f"[bold]{title}[/bold]")
        text = json.dumps(data, indent=2, default=str)
        self.console.print(Syntax(text, "json", theme="monokai"))

    def format_dataclass(self, value: object, title: str | None = None) -> None:
        self.format_json(asdict(value), title)

    def format_config(self, config: dict) -> None:
        self.format_json(config)
