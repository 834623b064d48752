"""Live-update fan-out.

Every connected socket gets its own outbound queue drained by a dedicated
writer task, so one slow browser cannot hold up the request that triggered
the broadcast.  A client whose send times out, fails, or whose queue fills
up is dropped; it reconnects and re-fetches on its own.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any
from typing import Dict

from fastapi import WebSocket

from rolodex.config import get_settings
from rolodex.constants import CONTACTS_TOPIC
from rolodex.constants import UPDATE_SIGNAL
from rolodex.events import EventBus
from rolodex.events import EventType
from rolodex.events import event_bus
from rolodex.schemas.ws_messages import Envelope

logger = logging.getLogger(__name__)

_ENVELOPE_KEYS = ("v", "type", "ts")


@dataclass
class _Client:
    websocket: WebSocket
    queue: asyncio.Queue
    writer: asyncio.Task | None = None


class ConnectionManager:
    """Tracks live-update sockets and pushes the ``Update`` signal to all of them."""

    SEND_TIMEOUT = 1.0  # seconds allowed for a single frame
    QUEUE_SIZE = 100  # pending frames per client before it is dropped

    def __init__(self, bus: EventBus | None = None):
        self._clients: Dict[str, _Client] = {}
        self._bus = bus or event_bus
        self._bus.subscribe(EventType.CONTACTS_CHANGED, self._handle_contacts_changed)

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    @property
    def connection_count(self) -> int:
        return len(self._clients)

    def is_connected(self, client_id: str) -> bool:
        return client_id in self._clients

    async def connect(self, client_id: str, websocket: WebSocket) -> None:
        """Register an already accepted *websocket* under *client_id*."""
        # Unbounded under TESTING: the in-process TestClient can enqueue
        # faster than the writer drains.
        maxsize = 0 if get_settings().testing else self.QUEUE_SIZE
        client = _Client(websocket=websocket, queue=asyncio.Queue(maxsize=maxsize))
        client.writer = asyncio.create_task(self._drain(client_id, client))
        self._clients[client_id] = client
        logger.info("Client %s connected (%d open)", client_id, len(self._clients))

    async def disconnect(self, client_id: str) -> None:
        client = self._clients.pop(client_id, None)
        if client is None:
            return
        # The writer may be the one dropping its own client.
        if client.writer is not None and client.writer is not asyncio.current_task():
            client.writer.cancel()
        logger.info("Client %s disconnected (%d open)", client_id, len(self._clients))

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    async def _drain(self, client_id: str, client: _Client) -> None:
        try:
            while True:
                frame = await client.queue.get()
                try:
                    await asyncio.wait_for(client.websocket.send_json(frame), timeout=self.SEND_TIMEOUT)
                except asyncio.TimeoutError:
                    logger.warning("Client %s too slow, dropping it", client_id)
                    await self.disconnect(client_id)
                    return
                except Exception as exc:
                    logger.warning("Send to client %s failed (%s), dropping it", client_id, exc)
                    await self.disconnect(client_id)
                    return
                finally:
                    client.queue.task_done()
        except asyncio.CancelledError:
            logger.debug("Writer for client %s stopped", client_id)

    async def broadcast(self, message: Dict[str, Any]) -> None:
        """Queue an envelope *message* for every connected client.

        Raises:
            ValueError: *message* is not an envelope dict.
        """
        if not isinstance(message, dict) or any(key not in message for key in _ENVELOPE_KEYS):
            raise ValueError("Message must be in envelope format")

        targets = list(self._clients.items())
        if not targets:
            logger.debug("No live-update clients to notify")
            return

        for client_id, client in targets:
            try:
                client.queue.put_nowait(message)
            except asyncio.QueueFull:
                logger.warning("Queue full for client %s, dropping it", client_id)
                await self.disconnect(client_id)

        # Under TESTING wait until the writers flushed so assertions made
        # right after a request see the frame.
        if get_settings().testing:
            await asyncio.gather(
                *(asyncio.wait_for(client.queue.join(), timeout=1.0) for _, client in targets),
                return_exceptions=True,
            )

    async def _handle_contacts_changed(self, data: Dict[str, Any]) -> None:
        envelope = Envelope.create(message_type=UPDATE_SIGNAL, topic=CONTACTS_TOPIC, data=dict(data))
        await self.broadcast(envelope.model_dump())

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    async def shutdown(self) -> None:
        """Stop every writer and close every socket (application shutdown)."""
        clients, self._clients = self._clients, {}
        for client_id, client in clients.items():
            if client.writer is not None:
                client.writer.cancel()
            try:
                await client.websocket.close()
            except Exception as exc:
                logger.debug("Closing client %s during shutdown failed: %s", client_id, exc)

    def close(self) -> None:
        """Stop listening to the bus; used by tests that build their own manager."""
        self._bus.unsubscribe(EventType.CONTACTS_CHANGED, self._handle_contacts_changed)


connection_manager = ConnectionManager()

__all__ = ["ConnectionManager", "connection_manager"]
