"""Outbound administrator notifications."""

from __future__ import annotations

from .notifier import SUBJECT
from .notifier import MailNotifier

__all__ = ["MailNotifier", "SUBJECT"]
