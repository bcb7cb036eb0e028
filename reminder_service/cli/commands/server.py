"""Server commands."""

import click
import uvicorn

from reminder_service.cli.utils import info
from reminder_service.core.settings import get_app_settings


@click.command(name="serve")
@click.option("--host", default=None, help="Host to bind (default: APP_HOST)")
@click.option("--port", default=None, type=int, help="Port to bind (default: APP_PORT)")
@click.option("--reload/--no-reload", default=False, help="Enable auto-reload on code changes")
@click.option(
    "--log-level",
    default="info",
    type=click.Choice(["critical", "error", "warning", "info", "debug"]),
    help="Uvicorn log level",
)
def serve(host: str | None, port: int | None, reload: bool, log_level: str) -> None:
    """Run the API server."""
    settings = get_app_settings()
    host = host or settings.host
    port = port or settings.port

    info(f"Serving {settings.title} at http://{host}:{port} ({settings.environment})")
    uvicorn.run(
        "reminder_service.app.main:app",
        host=host,
        port=port,
        reload=reload,
        log_level=log_level,
    )
