"""
Command-line entry point for blog_engine.

Examples:
    blog health
    blog health --compact
    blog db-check --uri mongodb://localhost:27017
"""

import asyncio
import json
import logging
import sys

import click

from ..config import BlogConfig
from ..database import ConnectionManager
from ..exceptions import BlogEngineError
from ..observability import build_health_checker


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """blog_engine operations tooling."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def _run_health(config: BlogConfig) -> dict:
    manager = ConnectionManager.from_config(config)
    checker = build_health_checker(config, manager)
    try:
        return await checker.run_checks()
    finally:
        await manager.disconnect()


@cli.command()
@click.option("--compact", is_flag=True, help="Print the report on one line")
def health(compact: bool) -> None:
    """
    Run the deployment health checks and print the JSON report.

    Exits with status 1 when any check fails.
    """
    report = asyncio.run(_run_health(BlogConfig()))
    click.echo(json.dumps(report, indent=None if compact else 2))
    if report["status"] != "healthy":
        sys.exit(1)


async def _run_db_check(manager: ConnectionManager) -> str:
    try:
        await manager.connect()
        await manager.ping()
        return manager.status().value
    finally:
        await manager.disconnect()


@cli.command("db-check")
@click.option("--uri", default=None, help="MongoDB URI (defaults to MONGODB_URI)")
@click.option("--retries", default=0, show_default=True, help="Retries after the first failure")
def db_check(uri: str | None, retries: int) -> None:
    """Connect to MongoDB once, report the status and disconnect."""
    config = BlogConfig(mongodb_uri=uri, connect_max_retries=retries)
    manager = ConnectionManager.from_config(config)
    try:
        status = asyncio.run(_run_db_check(manager))
    except BlogEngineError as e:
        click.echo(click.style(f"❌ {e}", fg="red"))
        sys.exit(1)
    click.echo(click.style(f"✅ MongoDB {status} (database '{config.db_name}')", fg="green"))


if __name__ == "__main__":
    cli()
