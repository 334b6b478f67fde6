"""
Contact API — Contact Store (Persistence Layer)
=================================================

What:  Durable storage of Contact records with id lookup and a unique email.
Why:   Keeps every database detail out of the route handlers.
How:   Each public method opens one session via `session_scope`, performs a
       single logical operation and commits. Expected outcomes (not found,
       email conflict, blanked required field) come back as a StoreResult;
       only unclassified failures are raised, as DatabaseError.
Who:   Constructed once by the application lifespan and injected into the
       route handlers through `get_contact_store`.

Result kinds:
    OK         → value holds the Contact (None for delete)
    NOT_FOUND  → no record with that id, or the id is not a UUID
    CONFLICT   → the email is already used by another record
    INVALID    → an update tried to blank name or email

Uniqueness is left to the database's unique constraint rather than a
read-then-write check, so two concurrent creates with the same email cannot
both succeed.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, Generic, List, Mapping, Optional, TypeVar

from sqlalchemy import desc, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from contacts_api.database import session_scope
from contacts_api.exceptions import DatabaseError
from contacts_api.models.contact import Contact

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Fields a client may change after creation; id and timestamps are immutable
UPDATABLE_FIELDS = ("name", "email", "phone")
REQUIRED_FIELDS = ("name", "email")


class StoreStatus(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INVALID = "invalid"


@dataclass(frozen=True)
class StoreResult(Generic[T]):
    """Outcome of a store operation."""

    status: StoreStatus
    value: Optional[T] = None

    @property
    def ok(self) -> bool:
        return self.status is StoreStatus.OK

    @classmethod
    def success(cls, value: Optional[T] = None) -> "StoreResult[T]":
        return cls(StoreStatus.OK, value)

    @classmethod
    def not_found(cls) -> "StoreResult[T]":
        return cls(StoreStatus.NOT_FOUND)

    @classmethod
    def conflict(cls) -> "StoreResult[T]":
        return cls(StoreStatus.CONFLICT)

    @classmethod
    def invalid(cls) -> "StoreResult[T]":
        return cls(StoreStatus.INVALID)


def is_blank(value: Any) -> bool:
    """None, empty and whitespace-only values all count as blank."""
    return value is None or not str(value).strip()


def parse_contact_id(raw: Any) -> Optional[uuid.UUID]:
    """Return the UUID for `raw`, or None when it is not a well-formed id."""
    if isinstance(raw, uuid.UUID):
        return raw
    try:
        return uuid.UUID(str(raw))
    except (ValueError, TypeError, AttributeError):
        return None


class ContactStore:
    """
    Persistence abstraction over the `contacts` table.

    Args:
        session_factory: Session factory bound to the process-wide engine.
        clock: Returns the current time; defaults to UTC now. Tests pass a
               deterministic clock to control ordering.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._session_factory = session_factory
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def list_all(self) -> List[Contact]:
        """All contacts, newest created_at first."""
        try:
            async with session_scope(self._session_factory) as session:
                result = await session.execute(
                    select(Contact).order_by(desc(Contact.created_at), desc(Contact.id))
                )
                contacts = list(result.scalars().all())
        except SQLAlchemyError as e:
            raise self._wrap("list_all", e) from e

        logger.debug("Listed %d contacts", len(contacts))
        return contacts

    async def get_by_id(self, contact_id: Any) -> StoreResult[Contact]:
        key = parse_contact_id(contact_id)
        if key is None:
            return StoreResult.not_found()

        try:
            async with session_scope(self._session_factory) as session:
                contact = await session.get(Contact, key)
        except SQLAlchemyError as e:
            raise self._wrap("get_by_id", e, contact_id=str(key)) from e

        if contact is None:
            return StoreResult.not_found()
        return StoreResult.success(contact)

    async def create(
        self,
        name: str,
        email: str,
        phone: Optional[str] = None,
    ) -> StoreResult[Contact]:
        """
        Insert a new contact.

        The id and both timestamps are assigned here. A duplicate email is
        reported as CONFLICT; the existing record is left untouched.
        """
        now = self._clock()
        contact = Contact(
            id=uuid.uuid4(),
            name=name,
            email=email,
            phone=phone,
            created_at=now,
            updated_at=now,
        )
        try:
            async with session_scope(self._session_factory) as session:
                session.add(contact)
                await session.flush()
        except IntegrityError:
            logger.info("Rejected contact create: email %s already exists", email)
            return StoreResult.conflict()
        except SQLAlchemyError as e:
            raise self._wrap("create", e) from e

        logger.info("Contact created: %s", contact.id)
        return StoreResult.success(contact)

    async def update_by_id(
        self,
        contact_id: Any,
        fields: Mapping[str, Any],
    ) -> StoreResult[Contact]:
        """
        Apply a partial update.

        Only keys in UPDATABLE_FIELDS are applied; everything else is
        dropped. Values are stored as given; name and email may be replaced but
        not blanked. An empty change set returns the record as it is.
        """
        key = parse_contact_id(contact_id)
        if key is None:
            return StoreResult.not_found()

        changes: Dict[str, Any] = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS}

        try:
            async with session_scope(self._session_factory) as session:
                contact = await session.get(Contact, key)
                if contact is None:
                    return StoreResult.not_found()
                if any(field in changes and is_blank(changes[field]) for field in REQUIRED_FIELDS):
                    return StoreResult.invalid()
                for field, value in changes.items():
                    setattr(contact, field, value)
                if changes:
                    contact.updated_at = self._clock()
                    await session.flush()
        except IntegrityError:
            logger.info("Rejected update of %s: email already exists", key)
            return StoreResult.conflict()
        except SQLAlchemyError as e:
            raise self._wrap("update_by_id", e, contact_id=str(key)) from e

        logger.info("Contact updated: %s (%s)", key, ", ".join(sorted(changes)) or "no changes")
        return StoreResult.success(contact)

    async def delete_by_id(self, contact_id: Any) -> StoreResult[None]:
        key = parse_contact_id(contact_id)
        if key is None:
            return StoreResult.not_found()

        try:
            async with session_scope(self._session_factory) as session:
                contact = await session.get(Contact, key)
                if contact is None:
                    return StoreResult.not_found()
                await session.delete(contact)
        except SQLAlchemyError as e:
            raise self._wrap("delete_by_id", e, contact_id=str(key)) from e

        logger.info("Contact deleted: %s", key)
        return StoreResult.success()

    @staticmethod
    def _wrap(operation: str, error: Exception, **context: Any) -> DatabaseError:
        logger.error("Database error in %s: %s", operation, error, exc_info=True)
        return DatabaseError(
            context={"operation": operation, "error_type": type(error).__name__, **context},
        )
