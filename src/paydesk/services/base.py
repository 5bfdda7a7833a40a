"""Base service with common dependency wiring and lifecycle patterns."""

from __future__ import annotations

from typing import Any

from paydesk.core.config import AppSettings


class BaseService:
    """Common base for PayDesk services.

    Settings are injected at construction time; collaborators are passed
    as keyword arguments by subclasses.
    """

    def __init__(self, *, settings: AppSettings) -> None:
        self._settings = settings

    async def health_check(self) -> dict[str, Any]:
        """Return service health status."""
        return {
            "service": self.__class__.__name__,
            "status": "healthy",
            "environment": self._settings.environment,
        }
