import uuid

# SQLAlchemy core imports
from sqlalchemy import Boolean
from sqlalchemy import Column
from sqlalchemy import Date
from sqlalchemy import Enum as SAEnum
from sqlalchemy import ForeignKey
from sqlalchemy import String
from sqlalchemy import false
from sqlalchemy.orm import relationship

# Local helpers / enums
from rolodex.database import Base
from rolodex.models.enums import Title


def _new_id() -> str:
    return str(uuid.uuid4())


# ---------------------------------------------------------------------------
# Contact (owns its email addresses and addresses)
# ---------------------------------------------------------------------------


class Contact(Base):
    """A person in the address book.

    Email addresses and postal addresses are owned by the contact: they are
    created, replaced and deleted only through it.
    """

    __tablename__ = "contacts"

    id = Column(String(36), primary_key=True, default=_new_id)
    title = Column(
        SAEnum(Title, native_enum=False, name="contact_title_enum", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    first_name = Column(String, nullable=False, index=True)
    last_name = Column(String, nullable=False)
    dob = Column(Date, nullable=False)

    # Children point back through ``contact_id`` only; no child -> parent
    # object reference is mapped.
    email_addresses = relationship(
        "EmailAddress",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    addresses = relationship(
        "Address",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    @property
    def primary_email(self):
        """Return the primary :class:`EmailAddress` or ``None``."""

        return next((e for e in self.email_addresses if e.is_primary), None)


class EmailAddress(Base):
    __tablename__ = "email_addresses"

    id = Column(String(36), primary_key=True, default=_new_id)
    type = Column(String, nullable=True)
    email = Column(String, nullable=False)
    # Added by migration b2c0ffee0002; at most one row per contact is True.
    is_primary = Column(Boolean, nullable=False, default=False, server_default=false())

    contact_id = Column(String(36), ForeignKey("contacts.id", ondelete="CASCADE"), nullable=False, index=True)


class Address(Base):
    __tablename__ = "addresses"

    id = Column(String(36), primary_key=True, default=_new_id)
    type = Column(String, nullable=True)
    street1 = Column(String, nullable=False)
    street2 = Column(String, nullable=True)
    city = Column(String, nullable=True)
    state = Column(String, nullable=True)
    zip = Column(String, nullable=True)

    contact_id = Column(String(36), ForeignKey("contacts.id", ondelete="CASCADE"), nullable=False, index=True)
