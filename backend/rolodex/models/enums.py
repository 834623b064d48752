"""Shared *Enum* definitions for SQLAlchemy & Pydantic models.

The Enums inherit from ``str`` so that:

* JSON serialisation remains unchanged (values render as plain strings).
* Equality checks against raw literals (``title == "Dr"``) keep working.
"""

from __future__ import annotations

from enum import Enum


class Title(str, Enum):
    """Salutations offered on the contact form.

    Adding a member here adds it to the form's option list as well.
    """

    MR = "Mr"
    MRS = "Mrs"
    MS = "Ms"
    DR = "Dr"


__all__ = [
    "Title",
]
