# Client for Ollama local inference, streaming /api/generate over httpx.
# No credential: the server is expected on OLLAMA_HOST.

import json
from contextlib import AsyncExitStack
from typing import AsyncIterator, Optional

import httpx

from ..errors import BackendError
from ..types import GenerationRequest

DEFAULT_OLLAMA_HOST = "http://localhost:11434"


class OllamaClient:
    def __init__(
        self,
        model: str = "mistral:7b-instruct",
        host: str = DEFAULT_OLLAMA_HOST,
        timeout: float = 180.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.model = model
        self.host = host.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    def set_model(self, model: str):
        self.model = model

    async def open_stream(self, request: GenerationRequest) -> AsyncIterator[str]:
        payload = {
            "model": self.model,
            "system": request.system_instruction,
            "prompt": request.prompt,
            "stream": True,
            "options": {"temperature": float(request.temperature)},
        }
        resources = AsyncExitStack()
        session = await resources.enter_async_context(
            httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        )
        try:
            resp = await session.send(
                session.build_request("POST", f"{self.host}/api/generate", json=payload),
                stream=True,
            )
            resources.push_async_callback(resp.aclose)
            if resp.status_code >= 400:
                body = (await resp.aread()).decode("utf-8", errors="replace")
                raise BackendError(f"{resp.status_code}: {body.strip()}", status=resp.status_code)
        except httpx.HTTPError as exc:
            await resources.aclose()
            raise BackendError(f"{exc.__class__.__name__}: {exc}") from exc
        except BaseException:
            await resources.aclose()
            raise
        return OllamaStream(resp, resources)


class OllamaStream:
    """Fragments of one /api/generate response.

    aclose() releases the response and its session whether or not iteration
    ever started.
    """

    def __init__(self, resp: httpx.Response, resources: AsyncExitStack):
        self._resp = resp
        self._resources = resources
        self._fragments = self._iter_fragments()

    def __aiter__(self):
        return self

    async def __anext__(self) -> str:
        return await self._fragments.__anext__()

    async def aclose(self) -> None:
        try:
            await self._fragments.aclose()
        finally:
            await self._resources.aclose()

    @property
    def closed(self) -> bool:
        return self._resp.is_closed

    async def _iter_fragments(self):
        try:
            async for line in self._resp.aiter_lines():
                if not line.strip():
                    continue
                data = json.loads(line)
                if data.get("error"):
                    raise BackendError(str(data["error"]))
                text = data.get("response", "")
                if text:
                    yield text
                if data.get("done"):
                    break
        except (httpx.HTTPError, json.JSONDecodeError) as exc:
            raise BackendError(f"{exc.__class__.__name__}: {exc}") from exc
        finally:
            await self._resources.aclose()
