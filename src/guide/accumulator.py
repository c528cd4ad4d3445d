# Consumer-side state for one guide at a time.
#
#   IDLE -> GENERATING -> COMPLETED | FAILED
#   COMPLETED | FAILED -> GENERATING   (new start clears the buffer)
#   any -> IDLE                        (reset)
#
# Every start bumps `epoch`. Writers pass the epoch they started with, so a
# stream abandoned by a restart can never write into the new buffer.

from __future__ import annotations
import logging
from typing import AsyncIterator, Awaitable, Callable, List, Optional

from .prompts import DEFAULT_LANGUAGE, error_message
from .types import GuideSnapshot, GuideStatus

logger = logging.getLogger(__name__)

Listener = Callable[[GuideSnapshot], None]


class GuideAccumulator:
    def __init__(self, language: str = DEFAULT_LANGUAGE):
        self.error_text = error_message(language)
        self.status = GuideStatus.IDLE
        self.content = ""
        self.epoch = 0
        self.last_error: Optional[BaseException] = None
        self._listeners: List[Listener] = []

    # ---------- observers

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call `listener` with a snapshot after every change. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def snapshot(self) -> GuideSnapshot:
        return GuideSnapshot(epoch=self.epoch, status=self.status, content=self.content)

    def _notify(self) -> None:
        snap = self.snapshot()
        for listener in list(self._listeners):
            listener(snap)

    # ---------- transitions

    def begin(self) -> int:
        self.epoch += 1
        self.content = ""
        self.last_error = None
        self.status = GuideStatus.GENERATING
        self._notify()
        return self.epoch

    def reset(self) -> None:
        self.epoch += 1
        self.content = ""
        self.last_error = None
        self.status = GuideStatus.IDLE
        self._notify()

    def _is_current(self, epoch: int) -> bool:
        return epoch == self.epoch and self.status is GuideStatus.GENERATING

    def append(self, epoch: int, fragment: str) -> bool:
        """Append a fragment of episode `epoch`. Returns False if that episode is no longer current."""
        if not self._is_current(epoch):
            return False
        if fragment:
            self.content += fragment
            self._notify()
        return True

    def complete(self, epoch: int) -> bool:
        if not self._is_current(epoch):
            return False
        self.status = GuideStatus.COMPLETED
        self._notify()
        return True

    def fail(self, epoch: int, exc: BaseException) -> bool:
        if not self._is_current(epoch):
            return False
        self.last_error = exc
        self.content = self.error_text
        self.status = GuideStatus.FAILED
        self._notify()
        return True

    # ---------- driving a stream

    async def consume(
        self,
        open_stream: Callable[[], Awaitable[AsyncIterator[str]]],
        epoch: Optional[int] = None,
    ) -> GuideSnapshot:
        """Run one generation episode: start, drain fragments in order, finish.

        Pass `epoch` to drive an episode already started with begin(); it is
        skipped if a newer one has started since. Errors from opening or
        draining the stream end the episode as FAILED.
        """
        if epoch is None:
            epoch = self.begin()
        elif not self._is_current(epoch):
            return self.snapshot()
        logger.info("Guide generation #%d started", epoch)
        stream = None
        try:
            stream = await open_stream()
            async for fragment in stream:
                if not self.append(epoch, fragment):
                    logger.info("Guide generation #%d superseded; dropping the rest of its stream", epoch)
                    break
            else:
                if self.complete(epoch):
                    logger.info("Guide generation #%d completed (%d chars)", epoch, len(self.content))
        except Exception as exc:
            logger.error("Guide generation #%d failed: %r", epoch, exc, exc_info=exc)
            self.fail(epoch, exc)
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()
        return self.snapshot()
