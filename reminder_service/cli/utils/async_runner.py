"""Run coroutines from synchronous Click commands."""

import asyncio
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any, TypeVar

T = TypeVar("T")


def coro(f: Callable[..., Awaitable[T]]) -> Callable[..., T]:
    """Make an async function callable as a Click command.

    Usage:
        @cli.command()
        @coro
        async def check_reminders():
            summary = await PushDeliveryScheduler().run_once()
    """

    @wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        return asyncio.run(f(*args, **kwargs))

    return wrapper
