"""Web Push commands: VAPID key generation and manual delivery sweeps."""

import json
import sys

import click

from reminder_service.cli.utils import coro, counters, error, header, success, warning
from reminder_service.core.exceptions import StorageError
from reminder_service.features.push.exceptions import VapidConfigurationError
from reminder_service.features.push.vapid import generate_vapid_keys


@click.group(name="push")
def push() -> None:
    """Web Push delivery commands."""


@push.command(name="generate-vapid-keys")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["env", "json"]),
    default="env",
    help="Output format",
)
def generate_vapid_keys_cmd(output_format: str) -> None:
    """Generate a P-256 VAPID key pair for PUSH_VAPID_*."""
    keys = generate_vapid_keys()
    if output_format == "json":
        click.echo(json.dumps({"public_key": keys.public_key, "private_key": keys.private_key}, indent=2))
        return
    click.echo(f"PUSH_VAPID_PUBLIC_KEY={keys.public_key}")
    click.echo(f"PUSH_VAPID_PRIVATE_KEY={keys.private_key}")


@push.command(name="check-reminders")
@coro
async def check_reminders() -> None:
    """Run one push delivery sweep now."""
    from reminder_service.features.push.scheduler import PushDeliveryScheduler
    from reminder_service.infra.database import close_database

    try:
        summary = await PushDeliveryScheduler().run_once()
    except VapidConfigurationError as e:
        error(e.detail)
        sys.exit(2)
    except StorageError as e:
        error(f"Sweep aborted: {e.detail}")
        sys.exit(1)
    finally:
        await close_database()

    header("Push delivery sweep")
    counters(
        {
            "checked": summary.checked,
            "sent": summary.sent,
            "marked": summary.marked,
            "skipped": summary.skipped,
            "failed": summary.failed,
            "gone": summary.gone,
        },
        highlight="failed",
    )
    for line in summary.errors:
        warning(line)
    if not summary.errors:
        success("Sweep completed")
