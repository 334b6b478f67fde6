"""Create contacts table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `contacts` table and its indexes.
How:   Portable column types (Uuid, DateTime with timezone) so the same
       revision runs on PostgreSQL and on SQLite in tests.

Rollback: downgrade() drops the table entirely (destructive — all data lost).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "contacts",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("phone", sa.String(64), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        # Email uniqueness is the only cross-record invariant
        sa.UniqueConstraint("email", name="uq_contacts_email"),
    )

    # Backs the newest-first listing
    op.create_index(
        "idx_contacts_created_at",
        "contacts",
        [sa.text("created_at DESC")],
    )


def downgrade() -> None:
    op.drop_index("idx_contacts_created_at", table_name="contacts")
    op.drop_table("contacts")
