"""
Main CLI application for aiclient.

Usage:
    ai [--log-level L] [--api-endpoint URL] models [-s TEXT] [-c] [-f] [-t] [-p]
    ai prompt --prompt TEXT [--model ID]
    ai weather [--model ID] [--city NAME]
    ai structured [--model ID]
    ai config show
    ai version
"""

from __future__ import annotations

import asyncio
import enum
import logging
from pathlib import Path
from typing import Awaitable, Callable, Iterable, Optional

import typer
from rich.console import Console

from aiclient import __version__
from aiclient.cli.output import OutputFormatter, setup_logging
from aiclient.client import Client
from aiclient.config import AppConfig, find_config_path, load_config, resolve_api_key
from aiclient.errors import AIClientError
from aiclient.models import ModelEntry
from aiclient.request import ChatCompletionParameter
from aiclient.types import Message

app = typer.Typer(name="ai", help="Chat-completion client for OpenRouter-compatible APIs")
config_app = typer.Typer(help="Configuration management")

app.add_typer(config_app, name="config")

console = Console()
logger = logging.getLogger(__name__)


class LogLevel(str, enum.Enum):
    trace = "trace"
    debug = "debug"
    info = "info"
    warn = "warn"
    error = "error"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def filter_models(
    models: Iterable[ModelEntry],
    *,
    search: str | None = None,
    structured_output: bool = False,
    function_calling: bool = False,
    tool_choice: bool = False,
) -> list[ModelEntry]:
    """Keep models whose name contains *search* and that support the flagged features."""
    needle = search.lower() if search else None
    required = []
    if structured_output:
        required.append("structured_outputs")
    if function_calling:
        required.append("tools")
    if tool_choice:
        required.append("tool_choice")

    selected = []
    for m in models:
        if needle and needle not in m.name.lower():
            continue
        if not all(m.supports(cap) for cap in required):
            continue
        selected.append(m)
    return selected


def _run(ctx: typer.Context, action: Callable[[Client], Awaitable[None]]) -> None:
    """Build a client from the context config, run *action*, map errors to exit 1."""
    cfg: AppConfig = ctx.obj

    async def _main() -> None:
        logger.info("Load API key...")
        api_key = resolve_api_key(cfg.client)
        logger.info("Load API key...Ok")
        async with Client.from_config(cfg.client, api_key) as client:
            await action(client)

    try:
        asyncio.run(_main())
    except AIClientError as exc:
        logger.error("Error: %s", exc)
        logger.error("FAILED")
        raise typer.Exit(1)
    logger.info("SUCCESS")


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

@app.callback()
def main_options(
    ctx: typer.Context,
    log_level: Optional[LogLevel] = typer.Option(None, "--log-level", "-l", help="Log level"),
    api_endpoint: Optional[str] = typer.Option(None, "--api-endpoint", "-a", help="API base URL"),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML config file"),
    profile: Optional[str] = typer.Option(None, help="Config profile name"),
):
    """Chat-completion client for OpenRouter-compatible APIs."""
    try:
        cfg = load_config(
            config or find_config_path(),
            profile=profile,
            cli_overrides={
                "client.api_base": api_endpoint,
                "client.log_level": log_level.value if log_level else None,
            },
        )
    except AIClientError as exc:
        console.print(f"[red]Config error:[/red] {exc}")
        raise typer.Exit(1)
    setup_logging(cfg.client.log_level)
    logger.debug("api_endpoint: %s", cfg.client.api_base)
    logger.debug("log_level: %s", cfg.client.log_level)
    ctx.obj = cfg


@app.command()
def models(
    ctx: typer.Context,
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Filter by name substring"),
    structured_output: bool = typer.Option(
        False, "--structured-output", "-c", help="Only models supporting structured output"
    ),
    function_calling: bool = typer.Option(
        False, "--function-calling", "-f", help="Only models supporting function calling"
    ),
    tool_choice: bool = typer.Option(
        False, "--tool-choice", "-t", help="Only models supporting tool_choice"
    ),
    show_pricing: bool = typer.Option(False, "--show-pricing", "-p", help="Show pricing"),
):
    """Query the models available in the API."""

    async def _list(client: Client) -> None:
        catalog = await client.get_models()
        selected = filter_models(
            catalog,
            search=search,
            structured_output=structured_output,
            function_calling=function_calling,
            tool_choice=tool_choice,
        )
        OutputFormatter(console).format_model_list(selected, show_pricing=show_pricing)

    _run(ctx, _list)


@app.command()
def prompt(
    ctx: typer.Context,
    text: str = typer.Option(..., "--prompt", "-p", help="The prompt to send"),
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Model ID"),
):
    """Send a single prompt and print the response."""
    cfg: AppConfig = ctx.obj

    async def _prompt(client: Client) -> None:
        param = ChatCompletionParameter(model or cfg.client.model, [Message.user(text)])
        choices = await client.chat_completion(param)
        OutputFormatter(console).format_choices(choices)

    _run(ctx, _prompt)


@app.command()
def weather(
    ctx: typer.Context,
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Model ID"),
    city: str = typer.Option("Paris", "--city", help="City to ask about"),
):
    """Check that tool calling works, using a weather lookup."""
    from aiclient.cli.demos import run_weather_exchange

    cfg: AppConfig = ctx.obj

    async def _weather(client: Client) -> None:
        choices = await run_weather_exchange(client, model or cfg.client.model, city)
        OutputFormatter(console).format_choices(choices)

    _run(ctx, _weather)


@app.command()
def structured(
    ctx: typer.Context,
    model: Optional[str] = typer.Option(None, "--model", "-m", help="Model ID"),
):
    """Check that structured output works, asking for a list of countries."""
    from aiclient.cli.demos import run_structured_example

    cfg: AppConfig = ctx.obj

    async def _structured(client: Client) -> None:
        formatter = OutputFormatter(console)
        for raw, parsed in await run_structured_example(client, model or cfg.client.model):
            console.print(f"Raw response: {raw}")
            formatter.format_dataclass(parsed, title="Parsed response")

    _run(ctx, _structured)


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Show effective config."""
    cfg: AppConfig = ctx.obj
    OutputFormatter(console).format_config(cfg.to_dict())


@app.command()
def version():
    """Show version."""
    console.print(f"aiclient v{__version__}")


def main():
    app()


if __name__ == "__main__":
    main()
