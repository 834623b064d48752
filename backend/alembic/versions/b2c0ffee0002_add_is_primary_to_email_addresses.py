"""Add is_primary to email_addresses

Revision ID: b2c0ffee0002
Revises: a1c0ffee0001
Create Date: 2024-03-08 04:57:13.402118

Existing rows default to non-primary.  The rows that should become primary
are chosen by whoever runs the upgrade, as comma-separated email ids in
``ROLODEX_PRIMARY_EMAIL_IDS``.  Ids belonging to a contact that already got a
primary from an earlier id in the list are skipped so the one-primary-per-
contact rule holds after the backfill.
"""

import os
from typing import List
from typing import Sequence
from typing import Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "b2c0ffee0002"
down_revision: Union[str, Sequence[str], None] = "a1c0ffee0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

PRIMARY_IDS_ENV = "ROLODEX_PRIMARY_EMAIL_IDS"


def _requested_primary_ids() -> List[str]:
    raw = os.getenv(PRIMARY_IDS_ENV, "")
    return [part.strip() for part in raw.split(",") if part.strip()]


def backfill_primary_flags(connection, email_ids: Sequence[str]) -> int:
    """Mark *email_ids* primary, first id per contact wins; return rows updated."""

    emails = sa.table(
        "email_addresses",
        sa.column("id", sa.String),
        sa.column("contact_id", sa.String),
        sa.column("is_primary", sa.Boolean),
    )

    updated = 0
    contacts_done = set()
    for email_id in email_ids:
        contact_id = connection.execute(sa.select(emails.c.contact_id).where(emails.c.id == email_id)).scalar()
        if contact_id is None:
            print(f"Email {email_id} not found - skipping")
            continue
        if contact_id in contacts_done:
            print(f"Contact {contact_id} already has a primary email - skipping {email_id}")
            continue
        connection.execute(emails.update().where(emails.c.id == email_id).values(is_primary=True))
        contacts_done.add(contact_id)
        updated += 1
    return updated


def upgrade() -> None:
    """Add the column (default false) and backfill the requested primaries."""
    connection = op.get_bind()
    inspector = sa.inspect(connection)

    columns = [col["name"] for col in inspector.get_columns("email_addresses")]
    if "is_primary" in columns:
        print("is_primary column already exists - skipping")
        return

    op.add_column(
        "email_addresses",
        sa.Column("is_primary", sa.Boolean(), nullable=False, server_default=sa.false()),
    )

    primary_ids = _requested_primary_ids()
    if primary_ids:
        count = backfill_primary_flags(connection, primary_ids)
        print(f"Marked {count} email address(es) as primary")


def downgrade() -> None:
    """Remove is_primary from email_addresses."""
    with op.batch_alter_table("email_addresses") as batch_op:
        batch_op.drop_column("is_primary")
