# Offline client for local dev and tests: streams a canned Markdown guide
# that echoes the request, one line per fragment, without any API call.

import asyncio
from typing import AsyncIterator, List

from ..types import GenerationRequest


class EchoDevClient:
    def __init__(self, delay: float = 0.0):
        self.model = "echo-dev"
        self.delay = delay

    def render(self, request: GenerationRequest) -> List[str]:
        lines = [line.strip() for line in request.prompt.splitlines() if line.strip()]
        fragments = ["## [ECHO GUIDE]\n", f"_temperature={request.temperature}_\n\n"]
        fragments += [f"{line}\n" for line in lines]
        return fragments

    async def open_stream(self, request: GenerationRequest) -> AsyncIterator[str]:
        fragments = self.render(request)

        async def generator():
            for fragment in fragments:
                if self.delay:
                    await asyncio.sleep(self.delay)
                yield fragment

        return generator()
