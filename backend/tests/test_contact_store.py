"""
Contact API — Contact Store Unit Tests
========================================

What:  Tests for ContactStore against a real SQLite database.
Why:   The store owns the only invariant (unique email) and every result
       kind the routes depend on.
How:   Uses the `store` fixture (fresh SQLite file per test, ticking clock).

What we test:
    ✅ create assigns id and timestamps; get returns the same data
    ✅ duplicate email → CONFLICT, only one record kept
    ✅ unknown and malformed ids → NOT_FOUND
    ✅ partial update touches only supplied fields
    ✅ update cannot blank required fields or change immutable ones
    ✅ delete is not repeatable
    ✅ list_all orders newest first
    ✅ driver failures surface as DatabaseError
"""

import uuid

import pytest

from contacts_api.exceptions import DatabaseError
from contacts_api.services.contact_store import (
    ContactStore,
    StoreStatus,
    parse_contact_id,
)


class TestContactStoreCreate:
    """Tests for create and get_by_id."""

    @pytest.mark.asyncio
    async def test_create_then_get_returns_same_fields(self, store):
        """A created contact can be read back with its generated id and timestamps."""
        created = await store.create(name="Ann", email="ann@x.com", phone="555-0100")

        assert created.status is StoreStatus.OK
        contact = created.value
        assert isinstance(contact.id, uuid.UUID)
        assert contact.created_at is not None
        assert contact.updated_at == contact.created_at

        fetched = await store.get_by_id(str(contact.id))
        assert fetched.ok
        assert fetched.value.name == "Ann"
        assert fetched.value.email == "ann@x.com"
        assert fetched.value.phone == "555-0100"
        assert fetched.value.id == contact.id

    @pytest.mark.asyncio
    async def test_values_are_stored_as_given(self, store):
        created = (await store.create(name=" Ann ", email="Ann@X.com")).value

        fetched = (await store.get_by_id(created.id)).value

        assert fetched.name == " Ann "
        assert fetched.email == "Ann@X.com"

    @pytest.mark.asyncio
    async def test_phone_is_optional(self, store):
        result = await store.create(name="Bob", email="bob@x.com")

        assert result.ok
        assert result.value.phone is None

    @pytest.mark.asyncio
    async def test_duplicate_email_is_conflict(self, store):
        """Second create with the same email is rejected and nothing is added."""
        first = await store.create(name="Ann", email="ann@x.com")
        second = await store.create(name="Another Ann", email="ann@x.com")

        assert first.ok
        assert second.status is StoreStatus.CONFLICT
        assert second.value is None

        contacts = await store.list_all()
        assert len(contacts) == 1
        assert contacts[0].name == "Ann"

    @pytest.mark.asyncio
    async def test_store_usable_after_conflict(self, store):
        """A rolled-back insert must not poison later operations."""
        await store.create(name="Ann", email="ann@x.com")
        await store.create(name="Ann", email="ann@x.com")

        result = await store.create(name="Cara", email="cara@x.com")
        assert result.ok


class TestContactStoreLookup:
    """Tests for not-found handling on id-based operations."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("contact_id", [str(uuid.uuid4()), "not-a-uuid", "", "123"])
    async def test_unknown_or_malformed_id_is_not_found(self, store, contact_id):
        assert (await store.get_by_id(contact_id)).status is StoreStatus.NOT_FOUND
        assert (await store.update_by_id(contact_id, {"name": "X"})).status is StoreStatus.NOT_FOUND
        assert (await store.update_by_id(contact_id, {"name": ""})).status is StoreStatus.NOT_FOUND
        assert (await store.delete_by_id(contact_id)).status is StoreStatus.NOT_FOUND

    def test_parse_contact_id(self):
        key = uuid.uuid4()
        assert parse_contact_id(key) == key
        assert parse_contact_id(str(key)) == key
        assert parse_contact_id("nope") is None
        assert parse_contact_id(None) is None


class TestContactStoreUpdate:
    """Tests for partial updates."""

    @pytest.mark.asyncio
    async def test_partial_update_changes_only_supplied_fields(self, store):
        created = (await store.create(name="Ann", email="ann@x.com", phone="111")).value

        result = await store.update_by_id(created.id, {"phone": "222"})

        assert result.ok
        updated = result.value
        assert updated.phone == "222"
        assert updated.name == "Ann"
        assert updated.email == "ann@x.com"
        assert updated.created_at == created.created_at
        assert updated.updated_at > created.updated_at

    @pytest.mark.asyncio
    async def test_immutable_fields_are_ignored(self, store):
        created = (await store.create(name="Ann", email="ann@x.com")).value

        result = await store.update_by_id(
            created.id,
            {"id": str(uuid.uuid4()), "created_at": "1999-01-01T00:00:00Z", "name": "Annie"},
        )

        assert result.ok
        assert result.value.id == created.id
        assert result.value.created_at == created.created_at
        assert result.value.name == "Annie"

    @pytest.mark.asyncio
    async def test_empty_update_returns_current_record(self, store):
        created = (await store.create(name="Ann", email="ann@x.com")).value

        result = await store.update_by_id(created.id, {})

        assert result.ok
        assert result.value.name == "Ann"
        assert result.value.updated_at == created.updated_at

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "fields",
        [{"name": ""}, {"email": None}, {"name": None, "phone": "1"}, {"email": "  "}],
    )
    async def test_blanking_required_field_is_invalid(self, store, fields):
        created = (await store.create(name="Ann", email="ann@x.com")).value

        result = await store.update_by_id(created.id, fields)

        assert result.status is StoreStatus.INVALID
        unchanged = (await store.get_by_id(created.id)).value
        assert unchanged.name == "Ann"
        assert unchanged.email == "ann@x.com"

    @pytest.mark.asyncio
    async def test_phone_can_be_cleared(self, store):
        created = (await store.create(name="Ann", email="ann@x.com", phone="111")).value

        result = await store.update_by_id(created.id, {"phone": None})

        assert result.ok
        assert result.value.phone is None

    @pytest.mark.asyncio
    async def test_email_collision_with_other_record_is_conflict(self, store):
        await store.create(name="Ann", email="ann@x.com")
        bob = (await store.create(name="Bob", email="bob@x.com")).value

        result = await store.update_by_id(bob.id, {"email": "ann@x.com"})

        assert result.status is StoreStatus.CONFLICT
        assert (await store.get_by_id(bob.id)).value.email == "bob@x.com"

    @pytest.mark.asyncio
    async def test_keeping_own_email_is_not_a_conflict(self, store):
        ann = (await store.create(name="Ann", email="ann@x.com")).value

        result = await store.update_by_id(ann.id, {"email": "ann@x.com", "name": "Ann B."})

        assert result.ok
        assert result.value.name == "Ann B."


class TestContactStoreDeleteAndList:
    """Tests for delete_by_id and list_all."""

    @pytest.mark.asyncio
    async def test_second_delete_is_not_found(self, store):
        created = (await store.create(name="Ann", email="ann@x.com")).value

        first = await store.delete_by_id(str(created.id))
        second = await store.delete_by_id(str(created.id))

        assert first.status is StoreStatus.OK
        assert second.status is StoreStatus.NOT_FOUND
        assert (await store.get_by_id(created.id)).status is StoreStatus.NOT_FOUND

    @pytest.mark.asyncio
    async def test_deleted_email_can_be_reused(self, store):
        created = (await store.create(name="Ann", email="ann@x.com")).value
        await store.delete_by_id(created.id)

        assert (await store.create(name="Ann", email="ann@x.com")).ok

    @pytest.mark.asyncio
    async def test_list_all_empty(self, store):
        assert await store.list_all() == []

    @pytest.mark.asyncio
    async def test_list_all_newest_first(self, store):
        """Contacts created at t1 < t2 < t3 are listed as [t3, t2, t1]."""
        for name in ("first", "second", "third"):
            await store.create(name=name, email=f"{name}@x.com")

        contacts = await store.list_all()

        assert [c.name for c in contacts] == ["third", "second", "first"]


class TestContactStoreFailures:
    """Unclassified database errors must propagate as DatabaseError."""

    def setup_method(self):
        self.contact_id = str(uuid.uuid4())

    @pytest.mark.asyncio
    async def test_list_failure_raises_database_error(self, failing_session_factory):
        store = ContactStore(failing_session_factory)

        with pytest.raises(DatabaseError) as exc_info:
            await store.list_all()

        assert exc_info.value.context["operation"] == "list_all"
        assert exc_info.value.context["error_type"] == "OperationalError"

    @pytest.mark.asyncio
    async def test_get_failure_raises_database_error(self, failing_session_factory):
        store = ContactStore(failing_session_factory)

        with pytest.raises(DatabaseError):
            await store.get_by_id(self.contact_id)

    @pytest.mark.asyncio
    async def test_create_failure_is_not_reported_as_conflict(self, failing_session_factory):
        store = ContactStore(failing_session_factory)

        with pytest.raises(DatabaseError):
            await store.create(name="Ann", email="ann@x.com")

    @pytest.mark.asyncio
    async def test_delete_failure_raises_database_error(self, failing_session_factory):
        store = ContactStore(failing_session_factory)

        with pytest.raises(DatabaseError):
            await store.delete_by_id(self.contact_id)

    @pytest.mark.asyncio
    async def test_update_failure_raises_database_error(self, failing_session_factory):
        store = ContactStore(failing_session_factory)

        with pytest.raises(DatabaseError) as exc_info:
            await store.update_by_id(self.contact_id, {"name": "Ann"})

        assert exc_info.value.context["operation"] == "update_by_id"
        assert exc_info.value.context["contact_id"] == self.contact_id
