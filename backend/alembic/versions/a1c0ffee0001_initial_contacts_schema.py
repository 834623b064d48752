"""Initial contacts schema

Revision ID: a1c0ffee0001
Revises:
Create Date: 2024-03-01 09:12:44.118203

"""

from typing import Sequence
from typing import Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "a1c0ffee0001"
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create contacts, email_addresses and addresses."""
    op.create_table(
        "contacts",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("title", sa.String(length=3), nullable=False),
        sa.Column("first_name", sa.String(), nullable=False),
        sa.Column("last_name", sa.String(), nullable=False),
        sa.Column("dob", sa.Date(), nullable=False),
    )
    op.create_index("ix_contacts_first_name", "contacts", ["first_name"])

    op.create_table(
        "email_addresses",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("type", sa.String(), nullable=True),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column(
            "contact_id",
            sa.String(length=36),
            sa.ForeignKey("contacts.id", ondelete="CASCADE"),
            nullable=False,
        ),
    )
    op.create_index("ix_email_addresses_contact_id", "email_addresses", ["contact_id"])

    op.create_table(
        "addresses",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("type", sa.String(), nullable=True),
        sa.Column("street1", sa.String(), nullable=False),
        sa.Column("street2", sa.String(), nullable=True),
        sa.Column("city", sa.String(), nullable=True),
        sa.Column("state", sa.String(), nullable=True),
        sa.Column("zip", sa.String(), nullable=True),
        sa.Column(
            "contact_id",
            sa.String(length=36),
            sa.ForeignKey("contacts.id", ondelete="CASCADE"),
            nullable=False,
        ),
    )
    op.create_index("ix_addresses_contact_id", "addresses", ["contact_id"])


def downgrade() -> None:
    """Drop the contact tables."""
    op.drop_index("ix_addresses_contact_id", table_name="addresses")
    op.drop_table("addresses")
    op.drop_index("ix_email_addresses_contact_id", table_name="email_addresses")
    op.drop_table("email_addresses")
    op.drop_index("ix_contacts_first_name", table_name="contacts")
    op.drop_table("contacts")
