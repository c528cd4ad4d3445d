# Client for the Gemini API (google-genai SDK), async streaming.

from typing import AsyncIterator, Optional

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ..errors import BackendError, ConfigurationError
from ..types import GenerationRequest


class GeminiClient:
    def __init__(self, api_key: Optional[str] = None, model: str = "gemini-2.5-flash"):
        self.api_key = api_key
        self.model = model
        self._client = genai.Client(api_key=api_key) if api_key else None

    def set_model(self, model: str):
        self.model = model

    async def open_stream(self, request: GenerationRequest) -> AsyncIterator[str]:
        if self._client is None:
            raise ConfigurationError("GEMINI_API_KEY is not defined in the environment.")
        # the SDK sends the request on the first iteration, so pull the first
        # chunk here to surface setup failures from open_stream itself
        first = None
        try:
            response_stream = await self._client.aio.models.generate_content_stream(
                model=self.model,
                contents=request.prompt,
                config=types.GenerateContentConfig(
                    system_instruction=request.system_instruction,
                    temperature=request.temperature,
                ),
            )
            try:
                first = await response_stream.__anext__()
            except StopAsyncIteration:
                pass
        except genai_errors.APIError as exc:
            raise BackendError(_describe(exc), status=exc.code) from exc
        except Exception as exc:
            raise BackendError(f"{exc.__class__.__name__}: {exc}") from exc

        async def generator():
            if first is None:
                return
            try:
                if first.text:
                    yield first.text
                async for chunk in response_stream:
                    text = chunk.text
                    if text:
                        yield text
            except genai_errors.APIError as exc:
                raise BackendError(_describe(exc), status=exc.code) from exc
            except Exception as exc:
                raise BackendError(f"{exc.__class__.__name__}: {exc}") from exc

        return generator()


def _describe(exc: "genai_errors.APIError") -> str:
    return f"{exc.code} {exc.status}: {exc.message}"
