# guide/cli.py
# ============================================================
# Generate a VPN setup guide from the terminal.
#
#   python -m src.guide.cli --protocol wireguard --server-os ubuntu --client-os windows
#
# Fragments are written to stdout as they arrive. On failure the
# localized error message goes to stderr and the exit status is 1.
# Backend, model, language and retry budget default to src.settings.
# ============================================================

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import List, Optional, Sequence

from src.logging_config import configure_logging
from src.settings import Settings

from .clients import BACKENDS, build_model_client
from .errors import ConfigurationError
from .generator import GuideGenerator
from .prompts import LOCALES
from .selection import PreferenceDraft
from .types import ClientOS, GuideSnapshot, GuideStatus, ServerOS, VpnProtocol


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    ap = argparse.ArgumentParser(description="Stream a step-by-step VPN setup guide.")
    ap.add_argument("--protocol", default=VpnProtocol.WIREGUARD.key, choices=[m.key for m in VpnProtocol])
    ap.add_argument("--server-os", default=ServerOS.UBUNTU.key, choices=[m.key for m in ServerOS])
    ap.add_argument("--client-os", default=ClientOS.WINDOWS.key, choices=[m.key for m in ClientOS])
    ap.add_argument("--backend", choices=BACKENDS, help="Override GUIDE_BACKEND")
    ap.add_argument("--model", help="Override GUIDE_MODEL")
    ap.add_argument("--language", choices=sorted(LOCALES), help="Override GUIDE_LANGUAGE")
    ap.add_argument("--max-retries", type=int, help="Override MAX_RETRIES")
    ap.add_argument("--log-level", help="Override LOG_LEVEL")
    return ap.parse_args(argv)


def _settings_from_args(args: argparse.Namespace) -> Settings:
    overrides = {
        "GUIDE_BACKEND": args.backend,
        "GUIDE_MODEL": args.model,
        "GUIDE_LANGUAGE": args.language,
        "MAX_RETRIES": args.max_retries,
        "LOG_LEVEL": args.log_level,
    }
    return Settings(**{k: v for k, v in overrides.items() if v is not None})


class _StdoutRenderer:
    """Writes only the new tail of the buffer on each change."""

    def __init__(self, out=None):
        self.out = out or sys.stdout
        self.written = 0

    def __call__(self, snap: GuideSnapshot) -> None:
        if snap.status is not GuideStatus.GENERATING:
            return
        if len(snap.content) < self.written:
            self.written = 0
        self.out.write(snap.content[self.written:])
        self.out.flush()
        self.written = len(snap.content)


async def run(args: argparse.Namespace, settings: Settings, model_client=None, out=None, err=None) -> int:
    err = err or sys.stderr
    prefs = PreferenceDraft().update(args.protocol, args.server_os, args.client_os).freeze()
    gen = GuideGenerator.from_settings(settings, model_client=model_client)
    unsubscribe = gen.accumulator.subscribe(_StdoutRenderer(out))
    try:
        snap = await gen.generate(prefs)
    finally:
        unsubscribe()
    if snap.status is GuideStatus.FAILED:
        err.write(snap.content + "\n")
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    settings = _settings_from_args(args)
    configure_logging(settings.LOG_LEVEL)
    try:
        model_client = build_model_client(settings)
    except ConfigurationError as exc:
        sys.stderr.write(f"{exc}\n")
        return 2
    return asyncio.run(run(args, settings, model_client=model_client))


if __name__ == "__main__":
    sys.exit(main())
