# ===============================================
# tests/conftest.py
# Shared fakes: scripted streaming clients and a
# retry controller that records instead of sleeping.
# ===============================================

import random
import sys
from pathlib import Path

import pytest

# Make project root importable (so `src` is on sys.path)
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from src.guide import BackendError, RetryController, UserPreferences, VpnProtocol, ServerOS, ClientOS  # noqa: E402


class ScriptedClient:
    """Fails with the queued errors first, then streams `fragments`."""

    def __init__(self, failures=(), fragments=("## Step 1\n", "Install package.\n")):
        self.model = "scripted"
        self.failures = list(failures)
        self.fragments = list(fragments)
        self.calls = 0
        self.requests = []

    async def open_stream(self, request):
        self.calls += 1
        self.requests.append(request)
        if self.failures:
            raise self.failures.pop(0)
        fragments = list(self.fragments)

        async def generator():
            for fragment in fragments:
                if isinstance(fragment, BaseException):
                    raise fragment
                yield fragment

        return generator()


class RecordingSleep:
    def __init__(self):
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)


def overloaded(n: int = 1):
    return [BackendError("The model is overloaded. Please try again later.", status=503) for _ in range(n)]


@pytest.fixture
def prefs():
    return UserPreferences(protocol=VpnProtocol.WIREGUARD, server_os=ServerOS.UBUNTU, client_os=ClientOS.WINDOWS)


@pytest.fixture
def sleeper():
    return RecordingSleep()


@pytest.fixture
def retry(sleeper):
    return RetryController(max_retries=3, sleep=sleeper, rng=random.Random(7))
