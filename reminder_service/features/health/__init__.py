"""Health check feature package."""

from .router import router

__all__ = ["router"]
