import logging

from dotenv import load_dotenv

# Environment first: rolodex modules read settings at import time.
load_dotenv()

# ruff: noqa: E402
from fastapi import FastAPI
from fastapi import Request
from fastapi import status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rolodex.config import get_settings
from rolodex.constants import API_PREFIX
from rolodex.constants import CONTACTS_PREFIX
from rolodex.constants import get_full_path
from rolodex.database import initialize_database
from rolodex.routers.contacts import INTERNAL_ERROR_DETAIL
from rolodex.routers.contacts import router as contacts_router
from rolodex.routers.system import router as system_router
from rolodex.routers.websocket import router as websocket_router
from rolodex.websocket.manager import connection_manager

_settings = get_settings()

# LOG_LEVEL drives the root logger (INFO by default).  The socket modules
# log every connect/disconnect, so they stay at WARNING.
logging.basicConfig(
    level=getattr(logging, _settings.log_level.upper(), logging.INFO),
    format="%(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()],
)
for _chatty in ("rolodex.routers.websocket", "rolodex.websocket.manager"):
    logging.getLogger(_chatty).setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


def _cors_origins(raw: str) -> list:
    origins = [origin.strip() for origin in raw.split(",") if origin.strip()]
    return origins or ["*"]


app = FastAPI(title="Rolodex", redirect_slashes=True)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(_settings.allowed_cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def bad_request_on_validation_error(request: Request, exc: RequestValidationError):
    """Malformed ids and unparsable bodies answer 400 with per-field messages."""
    detail = {}
    for err in exc.errors():
        field = ".".join(str(part) for part in err.get("loc", ())) or "__root__"
        detail.setdefault(field, []).append(err.get("msg", "invalid"))
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, detail)
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": detail})


@app.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s: %s", request.method, request.url.path, exc, exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": INTERNAL_ERROR_DETAIL},
    )


app.include_router(contacts_router, prefix=get_full_path(CONTACTS_PREFIX))
app.include_router(websocket_router, prefix=API_PREFIX)
app.include_router(system_router, prefix=API_PREFIX)


@app.on_event("startup")
async def startup_event():
    initialize_database()
    logger.info("Contact tables ready")


@app.on_event("shutdown")
async def shutdown_event():
    await connection_manager.shutdown()
    logger.info("Live-update sockets closed")


@app.get("/")
async def read_root():
    return {"message": "Rolodex API is running"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8001)
