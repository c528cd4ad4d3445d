from __future__ import annotations
from dataclasses import dataclass

from .types import ClientOS, ServerOS, UserPreferences, VpnProtocol


@dataclass
class PreferenceDraft:
    """Choices while the user is still picking; freeze() before generating."""
    protocol: VpnProtocol = VpnProtocol.WIREGUARD
    server_os: ServerOS = ServerOS.UBUNTU
    client_os: ClientOS = ClientOS.WINDOWS

    def update(self, protocol=None, server_os=None, client_os=None) -> "PreferenceDraft":
        if protocol is not None:
            self.protocol = VpnProtocol.parse(protocol)
        if server_os is not None:
            self.server_os = ServerOS.parse(server_os)
        if client_os is not None:
            self.client_os = ClientOS.parse(client_os)
        return self

    def freeze(self) -> UserPreferences:
        return UserPreferences(protocol=self.protocol, server_os=self.server_os, client_os=self.client_os)


def parse_preferences(protocol, server_os, client_os) -> UserPreferences:
    return PreferenceDraft().update(protocol, server_os, client_os).freeze()
