"""Live-update socket served at ``/api/ws``.

The server pushes an ``Update`` envelope whenever contact data changes.  The
only client frame understood is ``{"type": "ping"}``; anything else that
parses is ignored.
"""

from __future__ import annotations

import json
import logging
import uuid

from fastapi import APIRouter
from fastapi import WebSocket
from fastapi import WebSocketDisconnect

from rolodex.constants import WS_ENDPOINT
from rolodex.schemas.ws_messages import ErrorMessage
from rolodex.schemas.ws_messages import PongMessage
from rolodex.websocket.manager import connection_manager

router = APIRouter(tags=["live-update"])
logger = logging.getLogger(__name__)


async def _handle_frame(websocket: WebSocket, client_id: str, raw: str) -> None:
    try:
        frame = json.loads(raw)
    except json.JSONDecodeError as exc:
        logger.warning("Client %s sent invalid JSON: %s", client_id, exc)
        await websocket.send_json(ErrorMessage(error="Invalid JSON payload").model_dump())
        return

    if isinstance(frame, dict) and frame.get("type") == "ping":
        await websocket.send_json(PongMessage().model_dump())
    else:
        logger.debug("Ignoring frame from client %s: %s", client_id, frame)


@router.websocket(WS_ENDPOINT)
async def live_updates(websocket: WebSocket):
    client_id = str(uuid.uuid4())
    await websocket.accept()
    await connection_manager.connect(client_id, websocket)

    try:
        while True:
            await _handle_frame(websocket, client_id, await websocket.receive_text())
    except WebSocketDisconnect:
        logger.info("Client %s closed the socket", client_id)
    except Exception as exc:
        logger.error("Socket for client %s failed: %s", client_id, exc)
    finally:
        await connection_manager.disconnect(client_id)
