import json
import random
from types import SimpleNamespace

import httpx
import openai
import pytest

from src.guide import BackendError, ConfigurationError, EchoDevClient, GenerationRequest, RetryController
from src.guide.clients import build_model_client
from src.guide.clients.gemini_client import GeminiClient
from src.guide.clients.ollama_client import OllamaClient
from src.guide.clients.openai_client import OpenAIClient
from src.settings import Settings

from conftest import RecordingSleep

REQUEST = GenerationRequest(system_instruction="be terse", prompt="WireGuard on Ubuntu for Windows")


async def _drain(stream):
    return [f async for f in stream]


def _async_iter(items):
    async def generator():
        for item in items:
            if isinstance(item, BaseException):
                raise item
            yield item

    return generator()


# ---------- factory

@pytest.mark.parametrize(
    "backend, cls",
    [("gemini", GeminiClient), ("openai", OpenAIClient), ("ollama", OllamaClient), ("echo", EchoDevClient)],
)
def test_factory_selects_backend(backend, cls):
    client = build_model_client(Settings(GUIDE_BACKEND=backend, GEMINI_API_KEY="k", OPENAI_API_KEY="k"))
    assert isinstance(client, cls)


def test_factory_applies_model_override():
    client = build_model_client(Settings(GUIDE_BACKEND="ollama", GUIDE_MODEL="llama3:8b"))
    assert client.model == "llama3:8b"


def test_factory_rejects_unknown_backend():
    with pytest.raises(ConfigurationError, match="Unsupported guide backend"):
        build_model_client(Settings(GUIDE_BACKEND="palm"))


# ---------- echo

@pytest.mark.asyncio
async def test_echo_streams_prompt_lines():
    fragments = await _drain(await EchoDevClient().open_stream(REQUEST))
    assert fragments[0] == "## [ECHO GUIDE]\n"
    assert fragments[-1] == "WireGuard on Ubuntu for Windows\n"
    assert all(fragments)


# ---------- gemini

@pytest.mark.asyncio
async def test_gemini_without_key_is_configuration_error():
    with pytest.raises(ConfigurationError):
        await GeminiClient(api_key=None).open_stream(REQUEST)


@pytest.mark.asyncio
async def test_gemini_streams_non_empty_text():
    client = GeminiClient(api_key="test-key")
    calls = []

    async def generate_content_stream(**kwargs):
        calls.append(kwargs)
        return _async_iter([SimpleNamespace(text="## A\n"), SimpleNamespace(text=None), SimpleNamespace(text="b")])

    client._client = SimpleNamespace(aio=SimpleNamespace(models=SimpleNamespace(generate_content_stream=generate_content_stream)))
    assert await _drain(await client.open_stream(REQUEST)) == ["## A\n", "b"]
    assert calls[0]["model"] == "gemini-2.5-flash"
    assert calls[0]["contents"] == REQUEST.prompt
    assert calls[0]["config"].system_instruction == "be terse"
    assert calls[0]["config"].temperature == 0.3


@pytest.mark.asyncio
async def test_gemini_setup_failure_is_backend_error():
    client = GeminiClient(api_key="test-key")

    async def generate_content_stream(**kwargs):
        # the request only goes out once the stream is iterated
        return _async_iter([RuntimeError("503 UNAVAILABLE")])

    client._client = SimpleNamespace(aio=SimpleNamespace(models=SimpleNamespace(generate_content_stream=generate_content_stream)))
    with pytest.raises(BackendError, match="UNAVAILABLE") as info:
        await client.open_stream(REQUEST)
    assert isinstance(info.value.__cause__, RuntimeError)


@pytest.mark.asyncio
async def test_gemini_overload_is_retried_until_budget_runs_out():
    client = GeminiClient(api_key="test-key")
    calls = []

    async def generate_content_stream(**kwargs):
        calls.append(kwargs)
        return _async_iter([RuntimeError("503 UNAVAILABLE: The model is overloaded.")])

    client._client = SimpleNamespace(aio=SimpleNamespace(models=SimpleNamespace(generate_content_stream=generate_content_stream)))
    sleeper = RecordingSleep()
    controller = RetryController(max_retries=3, sleep=sleeper, rng=random.Random(1))
    with pytest.raises(BackendError, match="overloaded"):
        await controller.open(client, REQUEST)
    assert len(calls) == 4
    assert len(sleeper.delays) == 3


@pytest.mark.asyncio
async def test_gemini_empty_stream_drains_to_nothing():
    client = GeminiClient(api_key="test-key")

    async def generate_content_stream(**kwargs):
        return _async_iter([])

    client._client = SimpleNamespace(aio=SimpleNamespace(models=SimpleNamespace(generate_content_stream=generate_content_stream)))
    assert await _drain(await client.open_stream(REQUEST)) == []


# ---------- openai

def _chunk(text):
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=text))])


class _FakeCompletions:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.kwargs = None

    async def create(self, **kwargs):
        self.kwargs = kwargs
        if self.error is not None:
            raise self.error
        return self.result


@pytest.mark.asyncio
async def test_openai_streams_deltas():
    client = OpenAIClient(api_key="sk-test")
    completions = _FakeCompletions(result=_async_iter([_chunk("Hello"), _chunk(None), SimpleNamespace(choices=[]), _chunk(" world")]))
    client.client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    assert await _drain(await client.open_stream(REQUEST)) == ["Hello", " world"]
    assert completions.kwargs["stream"] is True
    assert completions.kwargs["messages"][0] == {"role": "system", "content": "be terse"}


@pytest.mark.asyncio
async def test_openai_status_error_carries_status():
    client = OpenAIClient(api_key="sk-test")
    response = httpx.Response(503, request=httpx.Request("POST", "https://api.openai.com/v1/chat/completions"))
    error = openai.APIStatusError("Service overloaded", response=response, body=None)
    client.client = SimpleNamespace(chat=SimpleNamespace(completions=_FakeCompletions(error=error)))
    with pytest.raises(BackendError) as info:
        await client.open_stream(REQUEST)
    assert info.value.status == 503


@pytest.mark.asyncio
async def test_openai_without_key_is_configuration_error():
    with pytest.raises(ConfigurationError):
        await OpenAIClient(api_key=None).open_stream(REQUEST)


# ---------- ollama

def _ollama_transport(status=200, lines=()):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["payload"] = json.loads(request.content)
        body = "\n".join(json.dumps(line) for line in lines)
        return httpx.Response(status, content=body.encode("utf-8"))

    return httpx.MockTransport(handler), seen


@pytest.mark.asyncio
async def test_ollama_streams_ndjson():
    transport, seen = _ollama_transport(lines=[
        {"response": "## Step", "done": False},
        {"response": "", "done": False},
        {"response": " 1", "done": True},
    ])
    client = OllamaClient(host="http://ollama:11434/", transport=transport)
    assert await _drain(await client.open_stream(REQUEST)) == ["## Step", " 1"]
    assert seen["url"] == "http://ollama:11434/api/generate"
    assert seen["payload"]["system"] == "be terse"
    assert seen["payload"]["stream"] is True


@pytest.mark.asyncio
async def test_ollama_http_error_carries_status():
    transport, _ = _ollama_transport(status=503, lines=[{"error": "server busy"}])
    client = OllamaClient(transport=transport)
    with pytest.raises(BackendError) as info:
        await client.open_stream(REQUEST)
    assert info.value.status == 503


@pytest.mark.asyncio
async def test_ollama_error_line_mid_stream():
    transport, _ = _ollama_transport(lines=[{"response": "ok"}, {"error": "model crashed"}])
    client = OllamaClient(transport=transport)
    stream = await client.open_stream(REQUEST)
    with pytest.raises(BackendError, match="model crashed"):
        await _drain(stream)


@pytest.mark.asyncio
async def test_ollama_close_before_iterating_releases_response():
    transport, _ = _ollama_transport(lines=[{"response": "never read", "done": True}])
    client = OllamaClient(transport=transport)
    stream = await client.open_stream(REQUEST)
    assert not stream.closed
    await stream.aclose()
    assert stream.closed


@pytest.mark.asyncio
async def test_ollama_drained_stream_is_closed():
    transport, _ = _ollama_transport(lines=[{"response": "done", "done": True}])
    client = OllamaClient(transport=transport)
    stream = await client.open_stream(REQUEST)
    assert await _drain(stream) == ["done"]
    assert stream.closed
