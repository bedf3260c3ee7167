"""One-off provider call command"""

import asyncio
import json

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from reasoning_gateway.errors import CallCancelled, GatewayError, ProviderCallFailed
from reasoning_gateway.providers import ProviderRegistry, get_registry
from reasoning_gateway.types import CallRequest, CallResult

console = Console()


async def run_call(registry: ProviderRegistry, provider_id: str, request: CallRequest) -> CallResult:
    """Make one call and release the provider's connections afterwards."""
    try:
        adapter = registry.get(provider_id)
        return await adapter.call(request)
    finally:
        await registry.aclose()


@click.command()
@click.argument('provider_id')
@click.argument('prompt')
@click.option('--model', default=None, help='Model override (default: provider model)')
@click.option('--temperature', '-t', type=float, default=0.2, show_default=True)
@click.option('--max-tokens', type=int, default=1024, show_default=True)
@click.option('--timeout-ms', type=int, default=None, help='Per-attempt timeout override')
@click.option('--max-retries', type=int, default=None, help='Total attempt budget override')
@click.option('--json', 'as_json', is_flag=True, help='Print the result as JSON')
def call(
    provider_id: str,
    prompt: str,
    model: str | None,
    temperature: float,
    max_tokens: int,
    timeout_ms: int | None,
    max_retries: int | None,
    as_json: bool,
):
    """
    Send PROMPT to PROVIDER_ID and print the response.

    Examples:
        reasoning-gateway call solara "Explain exponential backoff"
        reasoning-gateway call solara "2 + 2?" --max-tokens 16 --json
    """
    request = CallRequest(
        prompt=prompt,
        model=model,
        temperature=temperature,
        max_tokens=max_tokens,
        timeout_ms=timeout_ms,
        max_retries=max_retries,
    )

    try:
        result = asyncio.run(run_call(get_registry(), provider_id, request))
    except GatewayError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        if isinstance(e, (ProviderCallFailed, CallCancelled)) and e.attempts:
            _print_attempts(e.attempts)
        raise SystemExit(1)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    click.echo(result.content)
    console.print(
        f"[dim]{result.provider_id}/{result.model}: "
        f"{result.usage.total_tokens} tokens "
        f"({result.usage.prompt_tokens} prompt, {result.usage.completion_tokens} completion), "
        f"{result.attempt_count} attempt(s), {result.elapsed:.2f}s[/dim]"
    )


def _print_attempts(attempts) -> None:
    table = Table(title="Attempts")
    table.add_column("#", justify="right")
    table.add_column("Outcome")
    table.add_column("Latency", justify="right")
    table.add_column("Detail")
    for record in attempts:
        table.add_row(
            str(record.attempt_index + 1),
            record.outcome,
            f"{record.latency * 1000:.0f}ms",
            escape(record.detail or ""),
        )
    console.print(table)
