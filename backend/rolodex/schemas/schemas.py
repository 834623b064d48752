import uuid
from datetime import date
from typing import List
from typing import Optional

from pydantic import AliasChoices
from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import field_validator

from rolodex.models.enums import Title

# ---------------------------------------------------------------------------
# Save request
# ---------------------------------------------------------------------------


def _required_text(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value.strip()


class EmailAddressIn(BaseModel):
    type: Optional[str] = None
    email: str
    is_primary: bool = Field(default=False, validation_alias=AliasChoices("is_primary", "primary"))

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        return _required_text(value)


class AddressIn(BaseModel):
    type: Optional[str] = None
    street1: str
    street2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None

    @field_validator("street1")
    @classmethod
    def check_street1(cls, value: str) -> str:
        return _required_text(value)


class ContactSave(BaseModel):
    """Body of the create-or-update call.

    ``contact_id`` absent, empty or the nil UUID means "create".
    """

    contact_id: Optional[str] = None
    title: Title
    first_name: str
    last_name: str
    dob: date
    emails: List[EmailAddressIn] = Field(default_factory=list)
    addresses: List[AddressIn] = Field(default_factory=list)

    @field_validator("first_name", "last_name")
    @classmethod
    def check_names(cls, value: str) -> str:
        return _required_text(value)

    @field_validator("contact_id")
    @classmethod
    def normalise_contact_id(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        try:
            parsed = uuid.UUID(value.strip())
        except ValueError:
            raise ValueError("must be a valid UUID")
        if parsed.int == 0:
            return None
        return str(parsed)

    @property
    def is_new(self) -> bool:
        return self.contact_id is None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class EmailAddressOut(BaseModel):
    id: str
    type: Optional[str] = None
    email: str
    is_primary: bool
    contact_id: str

    model_config = ConfigDict(from_attributes=True)


class AddressOut(BaseModel):
    id: str
    type: Optional[str] = None
    street1: str
    street2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    contact_id: str

    model_config = ConfigDict(from_attributes=True)


class ContactSummary(BaseModel):
    """One row of the contact list, without children."""

    id: str
    title: Title
    first_name: str
    last_name: str
    dob: date

    model_config = ConfigDict(from_attributes=True)


class TitleOption(BaseModel):
    text: str
    value: str


class ContactEditView(BaseModel):
    """Shape behind the edit form.

    For the new-contact scaffold only ``available_titles`` is populated.
    """

    id: Optional[str] = None
    title: Optional[Title] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    dob: Optional[date] = None
    email_addresses: List[EmailAddressOut] = Field(default_factory=list)
    addresses: List[AddressOut] = Field(default_factory=list)
    available_titles: List[TitleOption] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


def available_titles() -> List[TitleOption]:
    """Return the fixed option list for the title drop-down."""

    return [TitleOption(text=t.value, value=t.value) for t in Title]
