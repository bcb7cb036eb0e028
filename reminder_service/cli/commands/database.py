"""Database migration commands backed by Alembic.

Alembic's ``env.py`` drives its own event loop, so these commands stay
synchronous.

Example:bash
    reminder-service db upgrade
    reminder-service db current
"""

import sys
from pathlib import Path

import click

from alembic import command
from alembic.config import Config
from reminder_service.cli.utils import error, info, success, warning
from reminder_service.core.settings import get_db_settings

PROJECT_ROOT = Path(__file__).resolve().parents[3]


def get_alembic_config(config_path: str | None = None) -> Config:
    """Load ``alembic.ini``, pointing ``script_location`` at the migrations folder."""
    path = Path(config_path) if config_path else PROJECT_ROOT / "alembic.ini"
    cfg = Config(str(path)) if path.exists() else Config()
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    # configparser interpolation treats "%" specially
    cfg.set_main_option("sqlalchemy.url", get_db_settings().get_sqlalchemy_url().replace("%", "%%"))
    return cfg


@click.group(name="db")
@click.option("--config", "config_path", default=None, help="Path to alembic.ini")
@click.pass_context
def db(ctx: click.Context, config_path: str | None) -> None:
    """Database migration commands."""
    ctx.ensure_object(dict)
    ctx.obj["alembic_config"] = config_path


@db.command()
@click.option("--revision", default="head", help="Target revision (default: head)")
@click.option("--sql/--no-sql", default=False, help="Output SQL without executing")
@click.pass_context
def upgrade(ctx: click.Context, revision: str, sql: bool) -> None:
    """Apply database migrations."""
    info(f"Upgrading database to: {revision}")
    try:
        command.upgrade(get_alembic_config(ctx.obj.get("alembic_config")), revision, sql=sql)
    except Exception as e:
        error(f"Failed to upgrade database: {e}")
        sys.exit(1)
    if not sql:
        success("Database upgraded successfully!")


@db.command()
@click.option("--steps", default=1, type=int, help="Number of migrations to roll back (0 = base)")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt")
@click.pass_context
def downgrade(ctx: click.Context, steps: int, yes: bool) -> None:
    """Roll back database migrations."""
    target = f"-{steps}" if steps > 0 else "base"
    warning(f"Rolling back to: {target}")
    if not yes and not click.confirm("Are you sure you want to roll back migrations?"):
        info("Rollback cancelled")
        return
    try:
        command.downgrade(get_alembic_config(ctx.obj.get("alembic_config")), target)
    except Exception as e:
        error(f"Failed to downgrade database: {e}")
        sys.exit(1)
    success("Database downgraded successfully!")


@db.command()
@click.pass_context
def current(ctx: click.Context) -> None:
    """Show the current database revision."""
    try:
        command.current(get_alembic_config(ctx.obj.get("alembic_config")), verbose=True)
    except Exception as e:
        error(f"Failed to read current revision: {e}")
        sys.exit(1)
