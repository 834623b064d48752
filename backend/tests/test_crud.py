from datetime import date

import pytest
from sqlalchemy import text
from sqlalchemy.orm import Session

from rolodex.crud import crud
from rolodex.database import db_session as unit_of_work
from rolodex.models.enums import Title
from rolodex.models.models import Address
from rolodex.models.models import Contact
from rolodex.models.models import EmailAddress
from tests.helpers.contact_helpers import count_addresses
from tests.helpers.contact_helpers import count_contacts
from tests.helpers.contact_helpers import count_email_addresses


@pytest.fixture
def sample_contact(db_session: Session) -> Contact:
    """
    Create a sample contact with two emails and one address
    """
    contact = Contact(title=Title.MRS, first_name="Ada", last_name="Lovelace", dob=date(1815, 12, 10))
    contact.email_addresses = [
        EmailAddress(type="home", email="ada@example.com", is_primary=True),
        EmailAddress(type="work", email="ada@engine.example.com"),
    ]
    contact.addresses = [Address(type="home", street1="12 St James's Square", city="London")]
    db_session.add(contact)
    db_session.commit()
    return contact


def test_get_contacts_ordered_by_first_name(db_session: Session, sample_contact: Contact):
    """Test listing contacts"""
    for first in ("Grace", "Charles"):
        db_session.add(Contact(title=Title.MR, first_name=first, last_name="X", dob=date(1900, 1, 1)))
    db_session.commit()

    assert [c.first_name for c in crud.get_contacts(db_session)] == ["Ada", "Charles", "Grace"]


def test_get_contact_with_children(db_session: Session, sample_contact: Contact):
    """Test getting a single contact with its children eager-loaded"""
    db_session.expunge_all()

    contact = crud.get_contact(db_session, sample_contact.id, include_emails=True, include_addresses=True)
    db_session.close()

    # Collections stay readable once the session is gone.
    assert {e.email for e in contact.email_addresses} == {"ada@example.com", "ada@engine.example.com"}
    assert [a.city for a in contact.addresses] == ["London"]
    assert contact.title is Title.MRS


def test_get_contact_missing(db_session: Session):
    assert crud.get_contact(db_session, "00000000-0000-0000-0000-000000000001") is None


def test_mutations_wait_for_commit(db_session: Session):
    """Helpers stage changes; nothing is visible to a rollback until commit"""
    contact = Contact(title=Title.DR, first_name="Grace", last_name="Hopper", dob=date(1906, 12, 9))
    crud.add_contact(db_session, contact)
    db_session.rollback()

    assert count_contacts(db_session) == 0

    crud.add_contact(db_session, contact)
    crud.commit(db_session)
    assert count_contacts(db_session) == 1


def test_remove_email_addresses(db_session: Session, sample_contact: Contact):
    crud.remove_email_addresses(db_session, sample_contact.email_addresses)
    crud.commit(db_session)

    assert count_email_addresses(db_session) == 0
    assert count_contacts(db_session) == 1


def test_remove_addresses(db_session: Session, sample_contact: Contact):
    crud.remove_addresses(db_session, sample_contact.addresses)
    crud.commit(db_session)

    assert count_addresses(db_session) == 0
    assert count_email_addresses(db_session) == 2


def test_update_contact_merges_detached_instance(db_session: Session, sample_contact: Contact):
    db_session.expunge(sample_contact)
    sample_contact.last_name = "King"

    merged = crud.update_contact(db_session, sample_contact)
    crud.commit(db_session)

    assert merged.last_name == "King"
    assert crud.get_contact(db_session, sample_contact.id).last_name == "King"


def test_database_cascades_children_on_contact_delete(db_session: Session, sample_contact: Contact):
    """ON DELETE CASCADE removes child rows the ORM never loaded"""
    contact_id = sample_contact.id
    db_session.expunge_all()

    db_session.execute(text("DELETE FROM contacts WHERE id = :id"), {"id": contact_id})
    db_session.commit()

    assert count_addresses(db_session) == 0
    assert count_email_addresses(db_session) == 0


def test_is_primary_defaults_false(db_session: Session, sample_contact: Contact):
    flags = sorted(e.is_primary for e in sample_contact.email_addresses)
    assert flags == [False, True]
    assert sample_contact.primary_email.email == "ada@example.com"


def test_unit_of_work_commits(db_session: Session, session_factory):
    with unit_of_work(session_factory) as db:
        crud.add_contact(db, Contact(title=Title.DR, first_name="Grace", last_name="Hopper", dob=date(1906, 12, 9)))

    assert count_contacts(db_session) == 1


def test_unit_of_work_rolls_back_on_error(db_session: Session, session_factory):
    with pytest.raises(RuntimeError):
        with unit_of_work(session_factory) as db:
            crud.add_contact(db, Contact(title=Title.DR, first_name="Grace", last_name="Hopper", dob=date(1906, 12, 9)))
            db.flush()
            raise RuntimeError("abort")

    assert count_contacts(db_session) == 0
