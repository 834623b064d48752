"""Operational endpoints (public)."""

from typing import Any
from typing import Dict

from fastapi import APIRouter
from fastapi import status
from sqlalchemy import text

from rolodex.database import get_session_factory
from rolodex.websocket.manager import connection_manager

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health() -> Dict[str, Any]:
    """Lightweight readiness probe.

    Returns JSON with overall status, database reachability and the number of
    live-update sockets currently connected.
    """
    db_ok = True
    try:
        session_factory = get_session_factory()
        with session_factory() as s:
            s.execute(text("SELECT 1"))
    except Exception:  # surfaced as unhealthy, never raised
        db_ok = False

    return {
        "status": "ok" if db_ok else "degraded",
        "db": {"ok": db_ok},
        "ws": {"connections": connection_manager.connection_count},
    }
