# Streaming model clients.
# Every client exposes `async open_stream(request) -> AsyncIterator[str]`:
# awaiting it establishes the call, iterating it yields non-empty fragments.

from __future__ import annotations
from typing import AsyncIterator, Protocol

from ..errors import ConfigurationError
from ..types import GenerationRequest
from .echo_dev_client import EchoDevClient

BACKENDS = ("gemini", "openai", "ollama", "echo")


class StreamingClient(Protocol):
    model: str

    async def open_stream(self, request: GenerationRequest) -> AsyncIterator[str]:
        ...


def build_model_client(settings) -> StreamingClient:
    """Pick the streaming client named by settings.GUIDE_BACKEND."""
    backend = (settings.GUIDE_BACKEND or "").strip().lower()
    model = settings.GUIDE_MODEL
    if backend == "gemini":
        from .gemini_client import GeminiClient
        client = GeminiClient(api_key=settings.GEMINI_API_KEY)
    elif backend == "openai":
        from .openai_client import OpenAIClient
        client = OpenAIClient(api_key=settings.OPENAI_API_KEY)
    elif backend == "ollama":
        from .ollama_client import OllamaClient
        client = OllamaClient(host=settings.OLLAMA_HOST)
    elif backend == "echo":
        client = EchoDevClient()
    else:
        raise ConfigurationError(
            f"Unsupported guide backend: {settings.GUIDE_BACKEND!r}. Supported: {', '.join(BACKENDS)}"
        )
    if model and hasattr(client, "set_model"):
        client.set_model(model)
    return client


__all__ = ["BACKENDS", "StreamingClient", "EchoDevClient", "build_model_client"]
