"""Providers diagnostic command"""

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from reasoning_gateway.providers import plugin_loader

console = Console()


def get_settings():
    """Get settings lazily."""
    from reasoning_gateway.config import settings
    return settings


@click.command()
def providers():
    """List configured providers and available dialects (credentials are never shown)"""
    settings = get_settings()
    provider_ids = settings.configured_providers()

    if not provider_ids:
        console.print("[yellow]No providers configured.[/yellow] Set SOLARA_API_KEY or PROVIDERS.")
    else:
        table = Table(title=f"Providers ({len(provider_ids)})")
        table.add_column("ID", style="cyan")
        table.add_column("Model")
        table.add_column("Dialect")
        table.add_column("Base URL")
        table.add_column("Timeout", justify="right")
        table.add_column("Attempts", justify="right")
        table.add_column("Backoff", justify="right")

        for provider_id in provider_ids:
            try:
                config = settings.provider_config(provider_id)
            except ValueError as e:
                table.add_row(provider_id, f"[red]invalid: {escape(str(e))}[/red]", "", "", "", "", "")
                continue
            table.add_row(
                provider_id,
                config.model,
                config.dialect,
                config.base_url,
                f"{config.timeout_ms}ms",
                str(config.max_retries),
                f"{config.base_backoff_ms}ms (max {config.max_backoff_ms}ms)",
            )
        console.print(table)

    dialects = plugin_loader.get_available_dialects()
    console.print(f"Dialects ({len(dialects)}): {', '.join(dialects)}")
