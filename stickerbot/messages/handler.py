"""Message handler: the per-batch boundary of the message pipeline."""

from loguru import logger

from stickerbot.bus.events import InboundEvent, MessagesBatch
from stickerbot.messages.classifier import Classifier
from stickerbot.messages.dispatcher import Dispatcher
from stickerbot.messages.pending import PendingBuffer
from stickerbot.messages.unwrap import unwrap
from stickerbot.session.base import Session


class MessageHandler:
    """Gates, unwraps, classifies and dispatches inbound events.

    Events in a batch are handled one after another. A failing event is
    logged and skipped without affecting the rest of the batch.
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        classifier: Classifier | None = None,
        pending: PendingBuffer | None = None,
    ):
        self.dispatcher = dispatcher
        self.classifier = classifier or Classifier()
        self.pending = pending or PendingBuffer()

    def bind(self, session: Session) -> None:
        self.dispatcher.bind(session)

    async def handle_batch(self, batch: MessagesBatch) -> int:
        """Process every event in ``batch``. Returns the number of messages sent."""
        logger.info(f"messages received type={batch.batch_kind} count={len(batch.events)}")

        sent = 0
        for event in batch.events:
            try:
                if await self.handle_event(event):
                    sent += 1
            except Exception as e:
                logger.error(f"Error processing message {event.pending_key}: {e}")
        return sent

    async def handle_event(self, event: InboundEvent) -> bool:
        """Process one event. Returns True if a message was sent."""
        if not self.pending.admit(event).should_process:
            return False

        msg = unwrap(event.envelope)
        logger.info(
            f"From={event.remote_jid} id={event.message_id} "
            f"type={msg.content_type} innerType={msg.inner_content_type}"
        )
        if msg.is_view_once:
            logger.info("View-once message detected")

        action = self.classifier.classify(event, msg)
        logger.debug(f"Action for {event.pending_key}: {action.kind.value}")
        return await self.dispatcher.dispatch(action)
