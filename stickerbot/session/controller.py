"""Connection lifecycle: session establishment, QR login and reconnection."""

import asyncio
from typing import Any, Protocol

from loguru import logger

from stickerbot.auth.credentials import CredentialStore
from stickerbot.bus.events import ConnectionUpdate, MessagesBatch
from stickerbot.messages.handler import MessageHandler
from stickerbot.session.base import (
    CONNECTION_UPDATE,
    CREDENTIALS_UPDATED,
    MESSAGES_RECEIVED,
    ConnectionState,
    DisconnectReason,
    Session,
    SessionFactory,
    SessionOptions,
)

DEFAULT_RECONNECT_DELAY_S = 5.0

EXIT_LOGGED_OUT = 0
EXIT_RECONNECT_FAILED = 1


class QRRenderer(Protocol):
    def render(self, challenge: str) -> None: ...


def next_state(state: ConnectionState, update: ConnectionUpdate) -> ConnectionState:
    """Transition function of the connection state machine.

    QR challenges and unknown updates leave the state unchanged. A terminal
    state is never left.
    """
    if state == ConnectionState.CLOSED_TERMINAL:
        return state
    if update.connection == "open":
        return ConnectionState.OPEN
    if update.connection == "connecting":
        return ConnectionState.CONNECTING
    if update.connection == "close":
        if update.close_code == DisconnectReason.LOGGED_OUT:
            return ConnectionState.CLOSED_TERMINAL
        return ConnectionState.CLOSED_RETRYABLE
    return state


class SessionController:
    """Owns the session and keeps it alive across transient disconnects.

    A closed session is reconnected once after a fixed delay. At most one
    reconnect is scheduled at a time, and a reconnect that fails to start
    ends the controller instead of retrying.
    """

    def __init__(
        self,
        session_factory: SessionFactory,
        credential_store: CredentialStore,
        handler: MessageHandler,
        qr_renderer: QRRenderer | None = None,
        options: SessionOptions | None = None,
        reconnect_delay_s: float = DEFAULT_RECONNECT_DELAY_S,
    ):
        self.session_factory = session_factory
        self.credential_store = credential_store
        self.handler = handler
        self.qr_renderer = qr_renderer
        self.options = options or SessionOptions()
        self.reconnect_delay_s = reconnect_delay_s

        self.session: Session | None = None
        self._state = ConnectionState.CONNECTING
        self._reconnect: asyncio.TimerHandle | None = None
        self._tasks: set[asyncio.Task] = set()
        self._done: asyncio.Future[int] | None = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def reconnect_scheduled(self) -> bool:
        return self._reconnect is not None

    @property
    def finished(self) -> bool:
        return self._done is not None and self._done.done()

    # ── Lifecycle ────────────────────────────────────────────────────────────

    async def start(self) -> None:
        """Connect a fresh session and wire its listeners. Does not block."""
        credentials = self.credential_store.load()
        session = await self.session_factory(credentials, self.options)

        self.session = session
        self._state = ConnectionState.CONNECTING
        self.handler.bind(session)

        session.on(CREDENTIALS_UPDATED, self._listener(session, self._on_credentials))
        session.on(CONNECTION_UPDATE, self._listener(session, self._on_connection_update))
        session.on(MESSAGES_RECEIVED, self._listener(session, self._on_messages))
        logger.info("Session started, waiting for connection...")

    async def run(self) -> int:
        """Start and wait until the controller stops. Returns an exit code."""
        self._ensure_done()
        try:
            await self.start()
            return await self._done
        finally:
            await self.stop()

    async def stop(self) -> None:
        """Tear down timers, in-flight batches and the session."""
        if self._reconnect is not None:
            self._reconnect.cancel()
            self._reconnect = None
        self.handler.pending.clear()

        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        if self.session is not None:
            try:
                await self.session.close()
            except Exception as e:
                logger.warning(f"Error closing session: {e}")

    def _ensure_done(self) -> asyncio.Future:
        if self._done is None:
            self._done = asyncio.get_running_loop().create_future()
        return self._done

    def _finish(self, code: int) -> None:
        done = self._ensure_done()
        if not done.done():
            done.set_result(code)

    # ── Session events ──────────────────────────────────────────────────────

    def _listener(self, session: Session, callback):
        """Bind ``callback`` to ``session`` so a replaced session is ignored."""
        async def listener(payload: Any) -> None:
            if session is not self.session:
                logger.debug("Ignoring event from a replaced session")
                return
            await callback(payload)
        return listener

    async def _on_credentials(self, credentials: dict[str, Any]) -> None:
        try:
            self.credential_store.persist(credentials)
        except Exception as e:
            logger.error(f"Failed to persist credentials: {e}")
            raise

    async def _on_messages(self, batch: MessagesBatch | dict[str, Any]) -> None:
        if isinstance(batch, dict):
            batch = MessagesBatch.from_raw(batch)
        task = asyncio.create_task(self.handler.handle_batch(batch))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _on_connection_update(self, update: ConnectionUpdate | dict[str, Any]) -> None:
        if isinstance(update, dict):
            update = ConnectionUpdate.from_raw(update)
        if update.qr and self.qr_renderer is not None:
            self.qr_renderer.render(update.qr)

        previous = self._state
        self._state = next_state(previous, update)

        if update.connection == "open":
            logger.info("Connected and ready.")
        elif update.connection == "close":
            logger.info(f"Connection closed {update.close_code or ''} {update.close_error or ''}".rstrip())
            if self._state == ConnectionState.CLOSED_TERMINAL:
                if previous != ConnectionState.CLOSED_TERMINAL:
                    self._on_logged_out()
            elif self._state == ConnectionState.CLOSED_RETRYABLE:
                self._schedule_reconnect()

    def _on_logged_out(self) -> None:
        if self._reconnect is not None:
            self._reconnect.cancel()
            self._reconnect = None
        logger.warning("Session logged out. Run 'stickerbot logout' (or remove the auth directory) and restart to log in again.")
        self._finish(EXIT_LOGGED_OUT)

    # ── Reconnect ───────────────────────────────────────────────────────────

    def _schedule_reconnect(self) -> None:
        if self._reconnect is not None or self.finished:
            return
        logger.info(f"Restarting in {self.reconnect_delay_s:g}s...")
        loop = asyncio.get_running_loop()
        self._reconnect = loop.call_later(self.reconnect_delay_s, self._fire_reconnect)

    def _fire_reconnect(self) -> None:
        self._reconnect = None
        task = asyncio.ensure_future(self._reconnect_now())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _reconnect_now(self) -> None:
        logger.info("Trying to reconnect...")
        try:
            await self.start()
        except Exception as e:
            logger.error(f"Failed to restart session: {e}")
            self._finish(EXIT_RECONNECT_FAILED)
