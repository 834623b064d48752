"""WebSocket message definitions.

Every frame the server pushes is wrapped in an :class:`Envelope`; the schema
below is checked on creation so a malformed frame fails on the server rather
than in the browser.
"""

import time
from typing import Any
from typing import Dict
from typing import Optional

import jsonschema
from pydantic import BaseModel
from pydantic import Field

# Schema constants for validation
ENVELOPE_SCHEMA = {
    "type": "object",
    "required": ["v", "type", "topic", "ts", "data"],
    "additionalProperties": False,
    "properties": {
        "v": {"type": "integer", "const": 1},
        "type": {"type": "string", "minLength": 1},
        "topic": {"type": "string"},
        "req_id": {"type": ["string", "null"]},
        "ts": {"type": "integer"},
        "data": {"type": "object"},
    },
}


class EnvelopeValidationError(ValueError):
    """Raised when an outgoing frame does not match :data:`ENVELOPE_SCHEMA`."""


def validate_envelope_fast(data: Dict[str, Any]) -> None:
    """Envelope validation using jsonschema."""
    try:
        jsonschema.validate(data, ENVELOPE_SCHEMA)
    except jsonschema.ValidationError as e:
        raise EnvelopeValidationError(f"Envelope validation failed: {e.message}") from e


class Envelope(BaseModel):
    """Unified envelope for all WebSocket messages with validation."""

    v: int = Field(default=1, description="Protocol version")
    type: str = Field(description="Message type identifier")
    topic: str = Field(description="Topic routing string")
    req_id: Optional[str] = Field(default=None, description="Request correlation ID")
    ts: int = Field(description="Timestamp in milliseconds since epoch")
    data: Dict[str, Any] = Field(description="Message payload")

    @classmethod
    def create(
        cls,
        message_type: str,
        topic: str,
        data: Dict[str, Any],
        req_id: Optional[str] = None,
    ) -> "Envelope":
        """Create and validate a new envelope.

        ``message_type`` is kept verbatim; clients match on the exact signal
        name (e.g. ``"Update"``).
        """
        envelope = cls(
            type=message_type,
            topic=topic,
            data=data,
            req_id=req_id,
            ts=int(time.time() * 1000),
        )
        # Validate on creation for fail-fast behavior
        validate_envelope_fast(envelope.model_dump())
        return envelope


class ErrorMessage(BaseModel):
    """Frame sent back when a client message cannot be handled."""

    type: str = "error"
    error: str


class PongMessage(BaseModel):
    type: str = "pong"
    timestamp: int = Field(default_factory=lambda: int(time.time() * 1000))
