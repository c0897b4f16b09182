import asyncio
import functools
import sys

import click
from pydantic import ValidationError
from rich.console import Console

from autopoweroff.config import Settings, get_settings
from autopoweroff.utils.timeparse import parse_duration

console = Console()


def handle_async_command(async_func):
    """Decorator to handle async CLI commands."""
    @functools.wraps(async_func)
    def wrapper(*args, **kwargs):
        try:
            return asyncio.run(async_func(*args, **kwargs))
        except KeyboardInterrupt:
            console.print("\n[yellow]Operation cancelled by user[/yellow]")
            sys.exit(1)
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")
            sys.exit(1)
    return wrapper


def duration_option(ctx, param, value):
    """Click callback turning '60s', '1m' or '90' into seconds."""
    if value is None:
        return None
    try:
        return parse_duration(value)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


def load_settings(**overrides) -> Settings:
    """Build settings with CLI overrides, exiting cleanly on invalid values."""
    try:
        return get_settings(**overrides)
    except ValidationError as e:
        console.print("[red]Invalid configuration:[/red]")
        for error in e.errors():
            location = ".".join(str(part) for part in error["loc"]) or "settings"
            console.print(f"  [red]{location}[/red]: {error['msg']}")
        sys.exit(1)
