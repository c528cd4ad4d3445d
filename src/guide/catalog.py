# Titles and blurbs for each wizard choice, per guide language.

from __future__ import annotations
from dataclasses import asdict, dataclass
from typing import Dict, List

from .prompts import get_locale
from .selection import PreferenceDraft
from .types import ClientOS, ServerOS, VpnProtocol


@dataclass(frozen=True)
class OptionCard:
    key: str
    label: str
    title: str
    description: str


_DESCRIPTIONS = {
    "zh": {
        VpnProtocol.WIREGUARD: ("WireGuard", "现代、极速且精简。适合大多数追求性能和简洁的用户。"),
        VpnProtocol.OPENVPN: ("OpenVPN", "行业标准的传统协议。配置高度灵活，即便在严格的防火墙下也能工作。"),
        VpnProtocol.TAILSCALE: ("Tailscale (简易)", "基于 WireGuard 的零配置网格 VPN。设置最简单，无需端口转发。"),
        VpnProtocol.SHADOWSOCKS: ("Shadowsocks", "一种安全的 Socks5 代理，专为保护网络流量而设计。轻量且高效。"),
        ServerOS.UBUNTU: ("Ubuntu 22.04/24.04", "VPS 最流行的 Linux 发行版。推荐初学者使用。"),
        ServerOS.DEBIAN: ("Debian 11/12", "稳定、轻量，作为服务器极其可靠。"),
        ServerOS.DOCKER: ("Docker Container", "隔离环境。非常适合保持宿主系统清洁。"),
        ClientOS.WINDOWS: ("Windows", "Windows 10/11 台式机或笔记本。"),
        ClientOS.MACOS: ("macOS", "MacBook Air, Pro 或 iMac。"),
        ClientOS.IOS: ("iOS / iPadOS", "iPhone 或 iPad 移动设备。"),
        ClientOS.ANDROID: ("Android", "Android 手机或平板。"),
    },
    "en": {
        VpnProtocol.WIREGUARD: ("WireGuard", "Modern, very fast and lean. Suits most users who want performance and simplicity."),
        VpnProtocol.OPENVPN: ("OpenVPN", "The long-standing industry standard. Highly configurable and works behind strict firewalls."),
        VpnProtocol.TAILSCALE: ("Tailscale (Easy)", "Zero-config mesh VPN built on WireGuard. Easiest setup, no port forwarding."),
        VpnProtocol.SHADOWSOCKS: ("Shadowsocks", "A secure Socks5 proxy designed to protect network traffic. Light and efficient."),
        ServerOS.UBUNTU: ("Ubuntu 22.04/24.04", "The most popular Linux distribution on VPS hosts. Recommended for beginners."),
        ServerOS.DEBIAN: ("Debian 11/12", "Stable, light and very reliable as a server."),
        ServerOS.DOCKER: ("Docker Container", "Isolated environment that keeps the host system clean."),
        ClientOS.WINDOWS: ("Windows", "Windows 10/11 desktop or laptop."),
        ClientOS.MACOS: ("macOS", "MacBook Air, Pro or iMac."),
        ClientOS.IOS: ("iOS / iPadOS", "iPhone or iPad."),
        ClientOS.ANDROID: ("Android", "Android phone or tablet."),
    },
}


def _cards(members, language: str) -> List[dict]:
    table = _DESCRIPTIONS[get_locale(language).code]
    return [asdict(OptionCard(key=m.key, label=m.value, title=table[m][0], description=table[m][1])) for m in members]


def option_catalog(language: str = "zh") -> Dict[str, object]:
    defaults = PreferenceDraft().freeze()
    return {
        "protocol": _cards(VpnProtocol, language),
        "server_os": _cards(ServerOS, language),
        "client_os": _cards(ClientOS, language),
        "defaults": defaults.as_dict(),
    }
