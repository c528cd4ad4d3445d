# Guide package

# Makes guide/ importable and exposes key interfaces.

from .accumulator import GuideAccumulator
from .errors import BackendError, ConfigurationError, GuideError
from .generator import GuideGenerator
from .prompts import build_generation_request, error_message
from .retry import RetryController, backoff_delay, is_transient_overload
from .selection import PreferenceDraft, parse_preferences
from .types import (
    ClientOS,
    GenerationRequest,
    GuideSnapshot,
    GuideStatus,
    ServerOS,
    UserPreferences,
    VpnProtocol,
)
from .clients.echo_dev_client import EchoDevClient

__all__ = [
    "GuideAccumulator",
    "GuideGenerator",
    "RetryController",
    "backoff_delay",
    "is_transient_overload",
    "build_generation_request",
    "error_message",
    "PreferenceDraft",
    "parse_preferences",
    "UserPreferences",
    "VpnProtocol",
    "ServerOS",
    "ClientOS",
    "GenerationRequest",
    "GuideSnapshot",
    "GuideStatus",
    "GuideError",
    "ConfigurationError",
    "BackendError",
    "EchoDevClient",
]
