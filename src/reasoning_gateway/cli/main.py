"""Main CLI entry point"""

import logging
from pathlib import Path

import click
from dotenv import load_dotenv

# Load .env file from current working directory before importing anything else
# This ensures environment variables are set before pydantic-settings reads them
_env_file = Path.cwd() / ".env"
if _env_file.exists():
    load_dotenv(_env_file)


@click.group()
@click.version_option(version='0.1.0', prog_name='reasoning-gateway')
@click.option('--log-level', default=None, help='Override LOG_LEVEL (debug, info, warning, error)')
def cli(log_level: str | None):
    """reasoning-gateway - resilient calls to remote reasoning providers"""
    from reasoning_gateway.config import settings

    logging.basicConfig(
        level=(log_level or settings.log_level).upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


def setup_cli():
    """Register all CLI commands"""
    from .call_cmd import call
    from .providers_cmd import providers

    cli.add_command(call, name='call')
    cli.add_command(providers, name='providers')


def main():
    cli()


# Setup commands when module is imported
setup_cli()
