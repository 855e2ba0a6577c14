"""Buffer for events delivered without content, awaiting their retry."""

import asyncio
from enum import Enum

from loguru import logger

from stickerbot.bus.events import InboundEvent

DEFAULT_PENDING_TIMEOUT_S = 8.0


class PendingAction(str, Enum):
    buffered = "buffered"  # Held until the content arrives
    already_buffered = "already_buffered"
    fulfilled = "fulfilled"  # Content arrived for a buffered event
    fresh = "fresh"

    @property
    def should_process(self) -> bool:
        return self in (PendingAction.fulfilled, PendingAction.fresh)


class PendingBuffer:
    """Registry of content-less events keyed by ``remote_jid|message_id``.

    Each entry owns exactly one expiry timer. An entry leaves the registry
    either when its content arrives (timer cancelled) or when the timer fires.
    """

    def __init__(self, timeout_s: float = DEFAULT_PENDING_TIMEOUT_S):
        self.timeout_s = timeout_s
        self._timers: dict[str, asyncio.TimerHandle] = {}

    def __len__(self) -> int:
        return len(self._timers)

    def __contains__(self, key: object) -> bool:
        return key in self._timers

    def admit(self, event: InboundEvent) -> PendingAction:
        """Decide whether ``event`` should be processed now."""
        key = event.pending_key

        if event.envelope is None:
            if key in self._timers:
                logger.info(f"Message without content, already pending: {key}")
                return PendingAction.already_buffered

            logger.info(f"Message without content, buffering for retry: {key}")
            loop = asyncio.get_running_loop()
            self._timers[key] = loop.call_later(self.timeout_s, self._expire, key)
            return PendingAction.buffered

        handle = self._timers.pop(key, None)
        if handle is not None:
            handle.cancel()
            logger.info(f"Pending message now has content, processing: {key}")
            return PendingAction.fulfilled

        return PendingAction.fresh

    def _expire(self, key: str) -> None:
        if self._timers.pop(key, None) is not None:
            logger.info(f"Pending message expired: {key}")

    def clear(self) -> None:
        """Cancel every outstanding timer."""
        for handle in self._timers.values():
            handle.cancel()
        self._timers.clear()
