from __future__ import annotations
from typing import Optional


class GuideError(Exception):
    """Base class for guide generation failures."""


class ConfigurationError(GuideError):
    """Missing or invalid credential/backend setup. Never retried."""


class BackendError(GuideError):
    """Failure reported by the text-generation backend, at setup or mid-stream."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, status={self.status!r})"

