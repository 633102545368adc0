from __future__ import annotations

from collections.abc import Iterable


class ModelError(ValueError):
    """Raised when elements/sections cannot form a valid document."""

    def __init__(self, message: str, *, ids: Iterable[str] = ()):
        super().__init__(message)
        self.message = message
        self.ids = tuple(ids)
