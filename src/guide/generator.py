# GuideGenerator wires the pipeline together:
#   preferences -> prompt -> retried streaming call -> accumulator
# It accepts any streaming client (Gemini, OpenAI, Ollama, Echo).

from __future__ import annotations
import logging
from typing import AsyncIterator, Optional

from .accumulator import GuideAccumulator
from .prompts import DEFAULT_LANGUAGE, build_generation_request, get_locale
from .retry import RetryController
from .types import GenerationRequest, GuideSnapshot, UserPreferences

logger = logging.getLogger(__name__)


class GuideGenerator:
    def __init__(
        self,
        model_client,
        retry: Optional[RetryController] = None,
        language: str = DEFAULT_LANGUAGE,
        accumulator: Optional[GuideAccumulator] = None,
    ):
        self.model_client = model_client
        self.retry = retry or RetryController()
        self.language = get_locale(language).code
        self.accumulator = accumulator or GuideAccumulator(language=self.language)
        self.preferences: Optional[UserPreferences] = None

    @classmethod
    def from_settings(cls, settings, model_client=None) -> "GuideGenerator":
        if model_client is None:
            from .clients import build_model_client
            model_client = build_model_client(settings)
        retry = RetryController(
            max_retries=settings.MAX_RETRIES,
            base_delay=settings.RETRY_BASE_DELAY,
            jitter=settings.RETRY_JITTER,
        )
        return cls(model_client, retry=retry, language=settings.GUIDE_LANGUAGE)

    def build_request(self, prefs: UserPreferences) -> GenerationRequest:
        return build_generation_request(prefs, self.language)

    async def open_stream(self, prefs: UserPreferences) -> AsyncIterator[str]:
        """Fragments of a fresh guide; raises once the retry policy gives up."""
        request = self.build_request(prefs)
        logger.info(
            "Requesting guide from %s (%s / %s / %s)",
            getattr(self.model_client, "model", type(self.model_client).__name__),
            prefs.protocol.value,
            prefs.server_os.value,
            prefs.client_os.value,
        )
        return await self.retry.open(self.model_client, request)

    def start(self, prefs: UserPreferences) -> int:
        """Begin a new episode (superseding any running one) and return its epoch."""
        self.preferences = prefs
        return self.accumulator.begin()

    async def generate(self, prefs: UserPreferences, epoch: Optional[int] = None) -> GuideSnapshot:
        """Run one generation episode on the shared accumulator."""
        if epoch is None:
            epoch = self.start(prefs)
        return await self.accumulator.consume(lambda: self.open_stream(prefs), epoch=epoch)

    def reset(self) -> None:
        self.preferences = None
        self.accumulator.reset()
