"""Thin data-access helpers for the contact store.

The helpers never commit: the contact service owns
the unit of work and calls :func:`commit` exactly once per operation.
"""

from typing import Iterable
from typing import List
from typing import Optional

from sqlalchemy.orm import Session
from sqlalchemy.orm import selectinload

from rolodex.models.models import Address
from rolodex.models.models import Contact
from rolodex.models.models import EmailAddress


# Contact queries
def get_contacts(db: Session) -> List[Contact]:
    """Return every contact ordered by first name (children not loaded)."""

    return db.query(Contact).order_by(Contact.first_name.asc()).all()


def get_contact(
    db: Session,
    contact_id: str,
    *,
    include_emails: bool = False,
    include_addresses: bool = False,
) -> Optional[Contact]:
    """Get a single contact by ID, eager-loading the requested children.

    Eager loading keeps the collections readable after the request-scoped
    session is closed and FastAPI serialises the response.
    """

    query = db.query(Contact)
    if include_emails:
        query = query.options(selectinload(Contact.email_addresses))
    if include_addresses:
        query = query.options(selectinload(Contact.addresses))
    return query.filter(Contact.id == contact_id).first()


# Mutations (no commit) -----------------------------------------------------


def add_contact(db: Session, contact: Contact) -> Contact:
    db.add(contact)
    return contact


def update_contact(db: Session, contact: Contact) -> Contact:
    """Mark *contact* as updated in the current unit of work."""

    # ``merge`` attaches detached instances and is a no-op for persistent ones.
    return db.merge(contact)


def remove_contact(db: Session, contact: Contact) -> None:
    db.delete(contact)


def remove_email_addresses(db: Session, emails: Iterable[EmailAddress]) -> None:
    """Delete a range of email rows."""

    for email in list(emails):
        db.delete(email)


def remove_addresses(db: Session, addresses: Iterable[Address]) -> None:
    """Delete a range of address rows."""

    for address in list(addresses):
        db.delete(address)


def commit(db: Session) -> None:
    """Flush and commit the unit of work; roll back on failure."""

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
