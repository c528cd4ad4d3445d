import itertools

import pytest

from src.guide import ClientOS, ServerOS, UserPreferences, VpnProtocol, build_generation_request, error_message
from src.guide.prompts import LOCALES, get_locale


ALL_PREFS = [
    UserPreferences(protocol=p, server_os=s, client_os=c)
    for p, s, c in itertools.product(VpnProtocol, ServerOS, ClientOS)
]


@pytest.mark.parametrize("language", sorted(LOCALES))
def test_builder_is_deterministic(language):
    for prefs in ALL_PREFS:
        assert build_generation_request(prefs, language) == build_generation_request(prefs, language)


def test_wireguard_ubuntu_windows_prompt_mentions_all_choices(prefs):
    req = build_generation_request(prefs)
    assert "WireGuard" in req.prompt
    assert "Ubuntu" in req.prompt
    assert "Windows" in req.prompt
    assert req.temperature == 0.3


def test_client_os_drives_client_section():
    prefs = UserPreferences(VpnProtocol.TAILSCALE, ServerOS.DOCKER, ClientOS.IOS)
    req = build_generation_request(prefs, "en")
    assert "Tailscale (Easy)" in req.prompt
    assert "Docker Container" in req.prompt
    assert "Client configuration for iOS/iPadOS" in req.prompt


def test_english_system_instruction_rules():
    text = build_generation_request(ALL_PREFS[0], "en").system_instruction
    for needle in ("security", "Prerequisites", "disclaimer", "Markdown", "English"):
        assert needle in text


def test_default_language_is_chinese(prefs):
    req = build_generation_request(prefs)
    assert "中文" in req.system_instruction
    assert error_message() == LOCALES["zh"].error_message


def test_unknown_language_rejected(prefs):
    with pytest.raises(ValueError):
        build_generation_request(prefs, "fr")
    assert get_locale("EN").code == "en"
