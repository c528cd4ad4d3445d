# Client for the OpenAI Chat Completions API, streaming.
# Same interface as GeminiClient.

from typing import AsyncIterator, Optional

import openai
from openai import AsyncOpenAI

from ..errors import BackendError, ConfigurationError
from ..types import GenerationRequest


class OpenAIClient:
    def __init__(self, api_key: Optional[str] = None, model: str = "gpt-4o-mini"):
        self.model = model
        self.client = AsyncOpenAI(api_key=api_key) if api_key else None

    def set_model(self, model: str):
        self.model = model

    async def open_stream(self, request: GenerationRequest) -> AsyncIterator[str]:
        if self.client is None:
            raise ConfigurationError("OPENAI_API_KEY is not defined in the environment.")
        formatted = [
            {"role": "system", "content": request.system_instruction},
            {"role": "user", "content": request.prompt},
        ]
        try:
            stream = await self.client.chat.completions.create(
                model=self.model,
                messages=formatted,
                temperature=request.temperature,
                stream=True,
            )
        except openai.APIStatusError as exc:
            raise BackendError(exc.message, status=exc.status_code) from exc
        except openai.OpenAIError as exc:
            raise BackendError(f"{exc.__class__.__name__}: {exc}") from exc

        async def generator():
            try:
                async for chunk in stream:
                    if not chunk.choices:
                        continue
                    text = chunk.choices[0].delta.content
                    if text:
                        yield text
            except openai.APIStatusError as exc:
                raise BackendError(exc.message, status=exc.status_code) from exc
            except openai.OpenAIError as exc:
                raise BackendError(f"{exc.__class__.__name__}: {exc}") from exc

        return generator()
