"""
Operator command line.

    examdesk generate-token [--days N]   print a signed admin token
    examdesk create-customer EMAIL       create a customer and print its token
    examdesk purge-recovery              delete used or expired recovery tokens
    examdesk serve                       run the API server
"""

import asyncio
import logging
from datetime import UTC, datetime, timedelta
from typing import Optional

import click
import uvicorn
from dotenv import load_dotenv

from .factory import ServiceFactory, build_codec
from .logging_config import configure_logging, get_logging_config
from .modules.config import get_config
from .modules.errors import DuplicateEmail

BANNER = "=" * 40


@click.group()
@click.option("--env-file", default=None, help="Load environment variables from this file first")
def cli(env_file: Optional[str]):
    """Examdesk administration commands."""
    load_dotenv(env_file)
    configure_logging(get_config().get("log_level"))


@cli.command("generate-token")
@click.option("--days", type=click.IntRange(min=1), default=None, help="Expiry in days (default: never expires)")
def generate_token(days: Optional[int]):
    """Generate a long-lived admin token."""
    codec = build_codec(get_config())
    token = codec.issue_admin_token(ttl_days=days)

    click.echo(f"\n{BANNER}\nADMIN TOKEN GENERATED\n{BANNER}")
    if days:
        expires = datetime.now(UTC) + timedelta(days=days)
        click.echo(f"Expiration: {days} days")
        click.echo(f"Expires: {expires.isoformat()}")
    else:
        click.echo("Expiration: NEVER EXPIRES")
    click.echo("--------\nTOKEN:")
    click.echo(token)
    click.echo("--------")
    click.echo("\nUse it in the Authorization header:\nAuthorization: Bearer <token>")
    click.echo(f"{BANNER}\n")


async def _create_customer(email: str):
    services = await ServiceFactory.build(get_config())
    try:
        return await services.accounts.create_customer(email)
    finally:
        await services.storage.disconnect()


@cli.command("create-customer")
@click.argument("email")
def create_customer(email: str):
    """Create a customer directly in the configured store."""
    try:
        customer = asyncio.run(_create_customer(email))
    except DuplicateEmail:
        raise click.ClickException(f"Error creating customer: email {email} already exists")

    click.echo(f"\n{BANNER}\nCUSTOMER CREATED\n{BANNER}")
    click.echo(f"Email: {customer.email}")
    click.echo(f"Customer ID: {customer.id}")
    click.echo("--------\nSTUDENT TOKEN:")
    click.echo(customer.token)
    click.echo("--------")
    click.echo("\nShare this token with the student. They can use it to log in.")
    click.echo(f"{BANNER}\n")


async def _purge_recovery() -> int:
    services = await ServiceFactory.build(get_config())
    try:
        return await services.ledger.purge_inert()
    finally:
        await services.storage.disconnect()


@cli.command("purge-recovery")
def purge_recovery():
    """Delete recovery tokens that are used or expired."""
    purged = asyncio.run(_purge_recovery())
    click.echo(f"Purged {purged} recovery tokens")


@cli.command()
@click.option("--host", default=None, help="Bind address (default: API_HOST)")
@click.option("--port", type=int, default=None, help="Port (default: PORT)")
def serve(host: Optional[str], port: Optional[int]):
    """Run the API server."""
    config = get_config()
    logging.getLogger(__name__).info("Starting API server")
    uvicorn.run(
        "examdesk.main:app",
        host=host or config.get("host"),
        port=port or config.get("port"),
        log_level=config.get("log_level").lower(),
        reload=config.get("debug"),
        log_config=get_logging_config(config.get("log_level")),
    )


def main():
    cli()


if __name__ == "__main__":
    main()
