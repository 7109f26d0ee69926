"""Browser WebSocket handler: streams preload progress and snapshot updates."""

import asyncio

import structlog
from fastapi import WebSocket, WebSocketDisconnect

from learn2go.api.sessions import LearnerSession, SessionRegistry
from learn2go.errors import Learn2GoError
from learn2go.models.snapshot import LoadProgress

logger = structlog.get_logger()


class BrowserConnection:
    """One browser tab attached to (at most) one learner session.

    Outgoing messages go through a queue so that load-progress signals,
    which are emitted synchronously from inside the preload, keep their
    order relative to the replies sent by message handlers.

    Args:
        websocket: Accepted browser WebSocket.
        registry: Session registry shared with the REST routes.
    """

    def __init__(self, websocket: WebSocket, registry: SessionRegistry):
        self.websocket = websocket
        self.registry = registry
        self.session: LearnerSession | None = None
        self.username: str | None = None
        self._outbox: asyncio.Queue[dict | None] = asyncio.Queue()
        self._sender: asyncio.Task | None = None

    def start(self) -> None:
        self._sender = asyncio.create_task(self._send_loop())

    async def close(self) -> None:
        self._detach()
        if self._sender is not None:
            self._outbox.put_nowait(None)
            try:
                await self._sender
            except Exception:
                logger.debug("sender_closed_with_error")

    async def handle(self, message: dict) -> None:
        msg_type = message.get("type", "")
        try:
            if msg_type == "start_session":
                await self._start_session(message)
            elif msg_type == "update_progress":
                await self._update_progress(message)
            elif msg_type == "refresh":
                await self._refresh()
            elif msg_type == "stop_session":
                await self._stop_session()
            else:
                self._send({"type": "error", "message": f"Unknown message type: {msg_type}"})
        except Learn2GoError as e:
            logger.info("websocket_request_rejected", type=msg_type, reason=str(e))
            self._send({"type": "error", "message": str(e)})

    async def _start_session(self, message: dict) -> None:
        username = message.get("username", "")
        if message.get("sign_up"):
            # A taken name must not attach to the owner's live session
            self.registry.ensure_available(username)
        self._detach()
        session = self.registry.session_for(username)
        session.cache.add_progress_listener(self._on_progress)
        self.session = session
        self.username = username.strip().lower()

        try:
            if message.get("sign_up"):
                await self.registry.sign_up(
                    username, message.get("country", "US"), message.get("language", "en")
                )
            else:
                await self.registry.sign_in(username)
        except Learn2GoError:
            self._detach()
            raise
        self._send_snapshot()

    async def _update_progress(self, message: dict) -> None:
        if self.session is None:
            self._send({"type": "error", "message": "No active session"})
            return
        cache = self.session.cache
        lesson_id = message.get("lesson_id", "")
        score = message.get("score")
        if message.get("answers") is not None:
            lesson = next((item for item in cache.data.lessons if item.id == lesson_id), None)
            if lesson is None:
                self._send({"type": "error", "message": "Lesson not found"})
                return
            score = lesson.score_answers(message["answers"])
        if score is None:
            self._send({"type": "error", "message": "Either score or answers is required"})
            return

        await cache.update_user_progress(lesson_id, score, message.get("completed", True))
        self._send({
            "type": "progress_updated",
            "lesson_id": lesson_id,
            "score": score,
            "analytics": cache.data.analytics.model_dump(mode="json"),
            "badges": [badge.model_dump(mode="json") for badge in cache.data.badges],
        })

    async def _refresh(self) -> None:
        if self.session is None:
            self._send({"type": "error", "message": "No active session"})
            return
        await self.session.cache.refresh()
        self._send_snapshot()

    async def _stop_session(self) -> None:
        username = self.username
        self._detach()
        if username:
            await self.registry.sign_out(username)
        self._send({"type": "session_state", "status": "signed_out"})

    def _detach(self) -> None:
        if self.session is not None:
            self.session.cache.remove_progress_listener(self._on_progress)
        self.session = None
        self.username = None

    def _on_progress(self, signal: LoadProgress) -> None:
        self._send({"type": "load_progress", **signal.model_dump()})

    def _send_snapshot(self) -> None:
        cache = self.session.cache
        self._send({
            "type": "data_ready",
            "state": cache.state.value,
            "progress": cache.progress,
            "error": cache.error,
            "data": cache.data.model_dump(mode="json"),
        })

    def _send(self, message: dict) -> None:
        self._outbox.put_nowait(message)

    async def _send_loop(self) -> None:
        while True:
            message = await self._outbox.get()
            if message is None:
                return
            try:
                await self.websocket.send_json(message)
            except Exception as e:
                logger.debug("browser_send_failed", error=str(e))
                return


async def handle_browser_websocket(websocket: WebSocket, registry: SessionRegistry) -> None:
    """Handle a browser WebSocket connection."""
    await websocket.accept()
    connection = BrowserConnection(websocket, registry)
    connection.start()

    try:
        while True:
            data = await websocket.receive_json()
            await connection.handle(data)

    except WebSocketDisconnect:
        logger.info("browser_disconnected")
    except Exception:
        logger.exception("websocket_handler_error")
    finally:
        await connection.close()
