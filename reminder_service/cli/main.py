"""Main CLI entry point for reminder-service management commands."""

import click

from reminder_service.cli.commands import database, push, server
from reminder_service.infra.logging.config import setup_logging


@click.group()
@click.version_option(version="0.1.0", prog_name="reminder-service")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Reminder Service CLI.

    \b
    Commands:
      serve      Run the API server
      db         Database migrations
      push       VAPID keys and manual delivery sweeps

    \b
    Quick Start:
      reminder-service push generate-vapid-keys >> .env
      reminder-service db upgrade
      reminder-service serve
    """
    ctx.ensure_object(dict)


cli.add_command(server.serve)
cli.add_command(database.db)
cli.add_command(push.push)


def main() -> None:
    """Entry point for CLI."""
    setup_logging()
    cli(obj={})


if __name__ == "__main__":
    main()
