"""Database models for the application."""

from .enums import Title
from .models import Address
from .models import Contact
from .models import EmailAddress

__all__ = [
    "Address",
    "Contact",
    "EmailAddress",
    "Title",
]
