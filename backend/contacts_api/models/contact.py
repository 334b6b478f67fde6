"""
Contact API — Contact SQLAlchemy Model
========================================

What:  ORM model representing the `contacts` table.
Why:   Maps Python objects to database rows for type-safe database operations.
How:   Inherits from the shared DeclarativeBase; Alembic reads this for migrations.
Who:   Used by ContactStore for CRUD operations and by Alembic for schema management.

Table Design:
    - UUID primary key: generated in Python so the id is known before insert
    - email: UNIQUE (uq_contacts_email), the only cross-record invariant,
      enforced by the database and compared exactly as stored
    - phone: nullable, free-form
    - created_at / updated_at: timezone-aware, always written in UTC

    Index on created_at DESC backs the newest-first listing.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, Index, String, UniqueConstraint, Uuid
from sqlalchemy.types import TypeDecorator
from sqlalchemy.orm import Mapped, mapped_column

from contacts_api.database import Base

# Column widths; the request schemas reject longer values before they reach
# the database
NAME_MAX_LENGTH = 255
EMAIL_MAX_LENGTH = 320
PHONE_MAX_LENGTH = 64


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UTCDateTime(TypeDecorator):
    """
    Timezone-aware datetime that always comes back in UTC.

    PostgreSQL keeps the offset itself; SQLite stores bare text, so values
    are normalised to UTC on the way in and tagged UTC on the way out.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is not None and value.tzinfo is not None:
            return value.astimezone(timezone.utc)
        return value

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class Contact(Base):
    """
    A person's contact details.

    Lifecycle:
        1. Created by ContactStore.create (id, created_at, updated_at assigned)
        2. Fields name/email/phone replaced by ContactStore.update_by_id
        3. Removed by ContactStore.delete_by_id (hard delete)
    """

    __tablename__ = "contacts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(NAME_MAX_LENGTH), nullable=False)

    # Stored exactly as sent; uniqueness is case-sensitive
    email: Mapped[str] = mapped_column(String(EMAIL_MAX_LENGTH), nullable=False)

    phone: Mapped[Optional[str]] = mapped_column(String(PHONE_MAX_LENGTH), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utcnow,
    )

    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime(),
        nullable=False,
        default=utcnow,
    )

    __table_args__ = (
        UniqueConstraint("email", name="uq_contacts_email"),
        Index("idx_contacts_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Contact(id={self.id}, email='{self.email}')>"
