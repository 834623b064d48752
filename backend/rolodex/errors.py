"""Error taxonomy for contact operations.

``ValidationError`` and ``NotFoundError`` are the caller's fault and are
raised before anything is written.  ``InternalError`` wraps every other
failure so storage details never reach the caller.
"""

from typing import Dict
from typing import List


class ContactManagerError(Exception):
    """Base exception for all contact-operation errors."""

    pass


class ValidationError(ContactManagerError):
    """Raised when the submitted payload is malformed or incomplete."""

    def __init__(self, errors: Dict[str, List[str]]):
        self.errors = errors
        super().__init__(f"Validation failed: {errors}")


class NotFoundError(ContactManagerError):
    """Raised when the referenced contact does not exist."""

    def __init__(self, contact_id: str):
        self.contact_id = contact_id
        super().__init__(f"Contact '{contact_id}' not found")


class InternalError(ContactManagerError):
    """Raised when an operation fails for a reason the caller cannot fix."""

    def __init__(self, operation: str, cause: Exception = None):
        self.operation = operation
        self.cause = cause
        message = f"Operation '{operation}' failed"
        if cause:
            message += f": {cause}"
        super().__init__(message)
