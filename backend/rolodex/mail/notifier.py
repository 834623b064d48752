"""Best-effort administrator alert sent after a contact is saved.

A single delivery attempt, never retried.  Any failure is logged and
swallowed so a broken relay can never fail the save that triggered it.

Certificate validation is switched off for the relay connection.
"""

from __future__ import annotations

import asyncio
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formataddr
from typing import Callable
from typing import Optional

from rolodex.config import Settings
from rolodex.config import get_settings
from rolodex.utils.log import get_logger

logger = get_logger(component="mail-notifier")

SUBJECT = "ContactManager System Alert"


def _insecure_tls_context() -> ssl.SSLContext:
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return context


class MailNotifier:
    """Sends the "contact was updated" message to the configured admin."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        smtp_factory: Optional[Callable[..., smtplib.SMTP]] = None,
    ) -> None:
        self._settings = settings or get_settings()
        # Overridable so tests can inject a fake transport.
        self._smtp_factory = smtp_factory

    # ------------------------------------------------------------------
    # Message construction
    # ------------------------------------------------------------------

    def build_message(self, contact_id: str) -> EmailMessage:
        s = self._settings
        message = EmailMessage()
        message["From"] = formataddr((s.mail_from_name, s.mail_from))
        message["To"] = formataddr((s.mail_to_name, s.mail_to))
        message["Subject"] = SUBJECT
        message.set_content(f"Contact with id:{contact_id} was updated")
        return message

    # ------------------------------------------------------------------
    # Transport helpers
    # ------------------------------------------------------------------

    def _connect(self) -> smtplib.SMTP:
        s = self._settings
        if self._smtp_factory is not None:
            return self._smtp_factory(s.smtp_host, s.smtp_port, timeout=s.smtp_timeout)
        if s.smtp_use_ssl:
            return smtplib.SMTP_SSL(s.smtp_host, s.smtp_port, timeout=s.smtp_timeout, context=_insecure_tls_context())
        return smtplib.SMTP(s.smtp_host, s.smtp_port, timeout=s.smtp_timeout)

    def _secure_and_login(self, client: smtplib.SMTP) -> None:
        s = self._settings
        client.ehlo()
        # Opportunistic STARTTLS when the relay offers it.
        if not s.smtp_use_ssl and client.has_extn("starttls"):
            client.starttls(context=_insecure_tls_context())
            client.ehlo()
        if s.smtp_username:
            client.login(s.smtp_username, s.smtp_password or "")

    @staticmethod
    def _close(client: smtplib.SMTP) -> None:
        try:
            client.quit()
        except (smtplib.SMTPException, OSError):
            client.close()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def send_notification(self, contact_id: str) -> bool:
        """Deliver the alert for *contact_id*; return whether it went out."""

        if not self._settings.mail_enabled:
            logger.info("mail-disabled", contact_id=contact_id)
            return False

        logger.info("mail-send-start", contact_id=contact_id, relay=f"{self._settings.smtp_host}:{self._settings.smtp_port}")

        try:
            message = self.build_message(contact_id)
            client = self._connect()
            try:
                self._secure_and_login(client)
                client.send_message(message)
            finally:
                self._close(client)
        except smtplib.SMTPAuthenticationError as exc:
            logger.error("mail-auth-failed", contact_id=contact_id, error=str(exc))
            return False
        except ssl.SSLError as exc:
            logger.error("mail-tls-failed", contact_id=contact_id, error=str(exc))
            return False
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("mail-send-failed", contact_id=contact_id, error=str(exc))
            return False
        except Exception as exc:  # noqa: BLE001
            logger.error("mail-unexpected-error", contact_id=contact_id, error=str(exc), exc_info=True)
            return False

        logger.info("mail-sent", contact_id=contact_id)
        return True

    async def notify_contact_saved(self, contact_id: str) -> bool:
        """Async entry point; the blocking SMTP exchange runs in a worker thread."""

        return await asyncio.to_thread(self.send_notification, contact_id)
