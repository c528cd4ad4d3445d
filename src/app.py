# ============================================================
# VPN Guide Generator FastAPI App
# ------------------------------------------------------------
# This app wires everything together:
#   - Option catalog for the three wizard steps
#   - One guide episode at a time (start / poll / reset)
#   - Direct streaming of a guide as text/markdown
#   - Support for Gemini, OpenAI, Ollama, or Echo clients
# ============================================================

import logging
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import BackgroundTasks, Depends, FastAPI, HTTPException, Query
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, field_validator

# --- Local imports ---
from src.settings import settings
from src.logging_config import configure_logging
from src.guide import (
    BackendError,
    ClientOS,
    ConfigurationError,
    GuideGenerator,
    ServerOS,
    UserPreferences,
    VpnProtocol,
    is_transient_overload,
)
from src.guide.catalog import option_catalog
from src.guide.clients import build_model_client

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# ------------------------------------------------------------
# 🔧 Model client selection
# ------------------------------------------------------------
model_client = build_model_client(settings)
guide_gen = GuideGenerator.from_settings(settings, model_client=model_client)


def get_generator() -> GuideGenerator:
    return guide_gen

# ------------------------------------------------------------
# 🚀 FastAPI init
# ------------------------------------------------------------
app = FastAPI(title="VPN Guide Generator API", version="0.1")

# ------------------------------------------------------------
# 📦 Pydantic models
# ------------------------------------------------------------
class GuideRequest(BaseModel):
    protocol: VpnProtocol = VpnProtocol.WIREGUARD
    server_os: ServerOS = ServerOS.UBUNTU
    client_os: ClientOS = ClientOS.WINDOWS

    @field_validator("protocol", mode="before")
    @classmethod
    def _parse_protocol(cls, v):
        return VpnProtocol.parse(v)

    @field_validator("server_os", mode="before")
    @classmethod
    def _parse_server_os(cls, v):
        return ServerOS.parse(v)

    @field_validator("client_os", mode="before")
    @classmethod
    def _parse_client_os(cls, v):
        return ClientOS.parse(v)

    def to_preferences(self) -> UserPreferences:
        return UserPreferences(protocol=self.protocol, server_os=self.server_os, client_os=self.client_os)


class GuidePayload(BaseModel):
    epoch: int
    status: str
    content: str
    preferences: Optional[Dict[str, str]] = None


def _payload(gen: GuideGenerator) -> GuidePayload:
    snap = gen.accumulator.snapshot()
    prefs = gen.preferences.as_dict() if gen.preferences else None
    return GuidePayload(epoch=snap.epoch, status=snap.status.value, content=snap.content, preferences=prefs)

# ------------------------------------------------------------
# 🧩 Wizard options
# ------------------------------------------------------------
@app.get("/options")
def options(language: Optional[str] = Query(None, description="Guide language (zh or en)")) -> Dict[str, Any]:
    try:
        return option_catalog(language or settings.GUIDE_LANGUAGE)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

# ------------------------------------------------------------
# 📝 Guide episode: start / poll / reset
# ------------------------------------------------------------
@app.post("/guide", response_model=GuidePayload, status_code=202)
def start_guide(req: GuideRequest, background: BackgroundTasks, gen: GuideGenerator = Depends(get_generator)):
    prefs = req.to_preferences()
    epoch = gen.start(prefs)
    background.add_task(gen.generate, prefs, epoch)
    return _payload(gen)


@app.get("/guide", response_model=GuidePayload)
def read_guide(gen: GuideGenerator = Depends(get_generator)):
    return _payload(gen)


@app.delete("/guide", response_model=GuidePayload)
def reset_guide(gen: GuideGenerator = Depends(get_generator)):
    gen.reset()
    return _payload(gen)

# ------------------------------------------------------------
# 💬 Direct streaming route
# ------------------------------------------------------------
@app.post("/guide/stream")
async def stream_guide(req: GuideRequest, gen: GuideGenerator = Depends(get_generator)):
    error_text = gen.accumulator.error_text
    try:
        stream = await gen.open_stream(req.to_preferences())
    except ConfigurationError:
        logger.exception("Guide backend is not configured")
        raise HTTPException(status_code=500, detail=error_text)
    except BackendError as exc:
        if is_transient_overload(exc):
            logger.exception("Guide backend stayed overloaded")
            raise HTTPException(status_code=503, detail=error_text)
        logger.exception("Guide backend call failed")
        raise HTTPException(status_code=502, detail=error_text)

    async def body() -> AsyncIterator[str]:
        try:
            async for fragment in stream:
                yield fragment
        except BackendError:
            # headers are already sent; end the document with the user-facing message
            logger.exception("Guide stream broke off")
            yield f"\n\n{error_text}\n"
        finally:
            await _close_stream()

    async def _close_stream() -> None:
        aclose = getattr(stream, "aclose", None)
        if aclose is not None:
            await aclose()

    # the background close covers clients that disconnect before the body starts
    cleanup = BackgroundTasks()
    cleanup.add_task(_close_stream)
    return StreamingResponse(body(), media_type="text/markdown; charset=utf-8", background=cleanup)

# ------------------------------------------------------------
# 🧭 Health checks
# ------------------------------------------------------------
@app.get("/healthz")
def healthz():
    return {
        "ok": True,
        "env": settings.ENV,
        "debug": settings.DEBUG,
        "app": settings.app_name,
        "backend": settings.GUIDE_BACKEND,
        "model": getattr(model_client, "model", None),
    }

@app.get("/health")
def health():
    return {"status": "ok", "env": settings.ENV}

@app.get("/")
def hello():
    return {"message": "VPN Guide Generator service running."}
