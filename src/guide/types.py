# Typed records shared across the guide pipeline: the three wizard choices,
# the request handed to a backend, and the consumer-side status.

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class _Choice(str, Enum):
    """String enum that parses member names, labels and short keys."""

    @property
    def key(self) -> str:
        return self.name.lower()

    @classmethod
    def parse(cls, raw):
        if isinstance(raw, cls):
            return raw
        needle = str(raw).strip().lower()
        for member in cls:
            if needle in (member.key, member.value.lower()):
                return member
        valid = ", ".join(m.key for m in cls)
        raise ValueError(f"Unknown {cls.__name__} {raw!r}; expected one of: {valid}")


class VpnProtocol(_Choice):
    WIREGUARD = "WireGuard"
    OPENVPN = "OpenVPN"
    TAILSCALE = "Tailscale (Easy)"
    SHADOWSOCKS = "Shadowsocks"


class ServerOS(_Choice):
    UBUNTU = "Ubuntu 22.04/24.04"
    DEBIAN = "Debian 11/12"
    DOCKER = "Docker Container"


class ClientOS(_Choice):
    WINDOWS = "Windows"
    MACOS = "macOS"
    IOS = "iOS/iPadOS"
    ANDROID = "Android"


@dataclass(frozen=True)
class UserPreferences:
    """Snapshot of the three choices; frozen once generation starts."""
    protocol: VpnProtocol
    server_os: ServerOS
    client_os: ClientOS

    def as_dict(self) -> dict:
        return {
            "protocol": self.protocol.key,
            "server_os": self.server_os.key,
            "client_os": self.client_os.key,
        }


DEFAULT_TEMPERATURE = 0.3


@dataclass(frozen=True)
class GenerationRequest:
    """Everything a streaming client needs for one call."""
    system_instruction: str
    prompt: str
    temperature: float = DEFAULT_TEMPERATURE


@dataclass
class RetryState:
    attempt: int = 0
    max_retries: int = 3
    last_error: Optional[BaseException] = None


class GuideStatus(str, Enum):
    IDLE = "idle"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class GuideSnapshot:
    """Read-only view of the accumulator handed to renderers."""
    epoch: int
    status: GuideStatus
    content: str = field(default="")
