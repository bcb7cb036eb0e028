"""Output formatting utilities for CLI commands."""

from collections.abc import Mapping

import click


def success(message: str) -> None:
    click.secho(f"✓ {message}", fg="green")


def error(message: str) -> None:
    """Print to stderr in red."""
    click.secho(f"✗ {message}", fg="red", err=True)


def warning(message: str) -> None:
    click.secho(f"⚠ {message}", fg="yellow")


def info(message: str) -> None:
    click.secho(f"ℹ {message}", fg="blue")


def header(message: str) -> None:
    click.secho(f"\n{message}", fg="cyan", bold=True)


def counters(values: Mapping[str, int], *, highlight: str | None = None) -> None:
    """Print ``name=value`` pairs on one line, bolding ``highlight`` when non-zero."""
    parts = []
    for name, value in values.items():
        text = f"{name}={value}"
        parts.append(click.style(text, bold=True) if name == highlight and value else text)
    click.echo("  " + " ".join(parts))
