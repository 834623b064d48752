"""Contact orchestration.

Turns an incoming save request into one consistent set of store mutations,
then runs the post-commit hooks (live-update announcement, admin mail).

Rules enforced here:

* Child collections are replaced wholesale on every save; there is no diff.
* At most one email per contact is primary.  The first entry submitted with
  ``is_primary`` wins, later claims are cleared, and a submission without any
  primary stays without one.
* Post-commit hooks are best-effort: their failures are logged and never
  change the result of the operation.
"""

import logging
from typing import Any
from typing import Iterable
from typing import List
from typing import Mapping
from typing import Optional
from typing import Protocol

import pydantic
from sqlalchemy.orm import Session

from rolodex.crud import crud
from rolodex.errors import ContactManagerError
from rolodex.errors import InternalError
from rolodex.errors import NotFoundError
from rolodex.errors import ValidationError
from rolodex.events import ChangeAnnouncer
from rolodex.events import EventBusAnnouncer
from rolodex.mail import MailNotifier
from rolodex.models.models import Address
from rolodex.models.models import Contact
from rolodex.models.models import EmailAddress
from rolodex.schemas.schemas import ContactEditView
from rolodex.schemas.schemas import ContactSave
from rolodex.schemas.schemas import EmailAddressIn
from rolodex.schemas.schemas import available_titles

logger = logging.getLogger(__name__)


class SaveNotifier(Protocol):
    async def notify_contact_saved(self, contact_id: str) -> Any: ...


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


def resolve_primary_flags(entries: Iterable[EmailAddressIn]) -> List[bool]:
    """Return the persisted primary flag for each entry, in submission order."""

    flags: List[bool] = []
    primary_taken = False
    for entry in entries:
        is_primary = entry.is_primary and not primary_taken
        primary_taken = primary_taken or is_primary
        flags.append(is_primary)
    return flags


def _validation_errors(exc: pydantic.ValidationError) -> dict:
    errors: dict = {}
    for err in exc.errors():
        field = ".".join(str(part) for part in err["loc"]) or "__root__"
        errors.setdefault(field, []).append(err["msg"])
    return errors


def parse_save_request(payload: Any) -> ContactSave:
    """Validate the raw request body or raise :class:`ValidationError`."""

    if isinstance(payload, ContactSave):
        return payload
    if not isinstance(payload, Mapping):
        raise ValidationError({"__root__": ["Request body must be a JSON object"]})
    try:
        return ContactSave.model_validate(payload)
    except pydantic.ValidationError as exc:
        raise ValidationError(_validation_errors(exc)) from exc


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class ContactService:
    """CRUD workflows for contacts.

    Both collaborators are injected; the service never manages who listens
    to announcements or how mail is transported.
    """

    def __init__(self, announcer: ChangeAnnouncer, mail_notifier: Optional[SaveNotifier] = None):
        self.announcer = announcer
        self.mail_notifier = mail_notifier

    # ------------------------------------------------------------------
    # Save (create or update)
    # ------------------------------------------------------------------

    async def save_contact(self, db: Session, payload: Any) -> Contact:
        request = parse_save_request(payload)
        logger.info("Starting to save contact. ContactId: %s", request.contact_id)

        try:
            contact = self._apply_save(db, request)
            crud.commit(db)
        except ContactManagerError:
            db.rollback()
            raise
        except Exception as exc:
            db.rollback()
            logger.exception("An error occurred in %s with details: %s", "save_contact", exc)
            raise InternalError("save_contact", exc) from exc

        logger.info("Database changes saved successfully. ContactId: %s", contact.id)

        await self._announce("save_contact")
        await self._send_mail(contact.id)

        logger.info("Contact saved successfully. ContactId: %s", contact.id)
        return contact

    def _apply_save(self, db: Session, request: ContactSave) -> Contact:
        if request.is_new:
            contact = Contact(
                title=request.title,
                first_name=request.first_name,
                last_name=request.last_name,
                dob=request.dob,
            )
        else:
            contact = crud.get_contact(db, request.contact_id, include_emails=True, include_addresses=True)
            if contact is None:
                logger.warning("Contact to save not found. ContactId: %s", request.contact_id)
                raise NotFoundError(request.contact_id)
            logger.info("Updating contact. Clearing existing addresses and emails. ContactId: %s", contact.id)

        crud.remove_email_addresses(db, contact.email_addresses)
        crud.remove_addresses(db, contact.addresses)

        flags = resolve_primary_flags(request.emails)
        contact.email_addresses = [
            EmailAddress(type=entry.type, email=entry.email, is_primary=is_primary)
            for entry, is_primary in zip(request.emails, flags)
        ]
        contact.addresses = [
            Address(
                type=entry.type,
                street1=entry.street1,
                street2=entry.street2,
                city=entry.city,
                state=entry.state,
                zip=entry.zip,
            )
            for entry in request.addresses
        ]

        contact.title = request.title
        contact.first_name = request.first_name
        contact.last_name = request.last_name
        contact.dob = request.dob

        if request.is_new:
            crud.add_contact(db, contact)
        else:
            contact = crud.update_contact(db, contact)
        return contact

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    async def delete_contact(self, db: Session, contact_id: str) -> None:
        logger.info("Attempting to delete contact with ID: %s", contact_id)

        try:
            contact = crud.get_contact(db, contact_id, include_emails=True)
            if contact is None:
                logger.warning("Delete attempt for non-existing contact ID: %s", contact_id)
                raise NotFoundError(contact_id)

            crud.remove_email_addresses(db, contact.email_addresses)
            # Address rows go with the contact through the FK cascade.
            crud.remove_contact(db, contact)
            crud.commit(db)
        except ContactManagerError:
            db.rollback()
            raise
        except Exception as exc:
            db.rollback()
            logger.exception("An error occurred in %s with details: %s", "delete_contact", exc)
            raise InternalError("delete_contact", exc) from exc

        await self._announce("delete_contact")
        logger.info("Contact with ID: %s deleted successfully.", contact_id)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_contacts(self, db: Session) -> List[Contact]:
        logger.info("Attempting to retrieve all contacts")
        try:
            contacts = crud.get_contacts(db)
        except Exception as exc:
            logger.exception("An error occurred in %s with details: %s", "list_contacts", exc)
            raise InternalError("list_contacts", exc) from exc
        logger.info("Successfully retrieved %d contacts.", len(contacts))
        return contacts

    def get_contact_for_edit(self, db: Session, contact_id: str) -> ContactEditView:
        logger.info("Initiating edit for contact with ID: %s", contact_id)
        try:
            contact = crud.get_contact(db, contact_id, include_emails=True, include_addresses=True)
        except Exception as exc:
            logger.exception("An error occurred in %s with details: %s", "get_contact_for_edit", exc)
            raise InternalError("get_contact_for_edit", exc) from exc

        if contact is None:
            logger.warning("Attempted to edit a non-existing contact with ID: %s", contact_id)
            raise NotFoundError(contact_id)

        primary = contact.primary_email
        logger.info("Loaded contact %s for edit. PrimaryEmail: %s", contact_id, primary.email if primary else None)
        view = ContactEditView.model_validate(contact)
        view.available_titles = available_titles()
        return view

    def new_contact_scaffold(self) -> ContactEditView:
        return ContactEditView(available_titles=available_titles())

    # ------------------------------------------------------------------
    # Post-commit hooks
    # ------------------------------------------------------------------

    async def _announce(self, operation: str) -> None:
        logger.info("Sending change notification to all clients.")
        try:
            await self.announcer.announce_change()
        except Exception as exc:
            logger.error("Change announcement after %s failed: %s", operation, exc)

    async def _send_mail(self, contact_id: str) -> None:
        if self.mail_notifier is None:
            return
        logger.info("Sending email notification for contact update. ContactId: %s", contact_id)
        try:
            await self.mail_notifier.notify_contact_saved(contact_id)
        except Exception as exc:
            logger.error("Email notification for contact %s failed: %s", contact_id, exc)


# ---------------------------------------------------------------------------
# Process-wide instance used by the routers
# ---------------------------------------------------------------------------

_service: Optional[ContactService] = None


def get_contact_service() -> ContactService:
    """FastAPI dependency returning the shared :class:`ContactService`."""

    global _service
    if _service is None:
        _service = ContactService(EventBusAnnouncer(), MailNotifier())
    return _service
