"""
Unit tests for InMemoryRecordStore and InMemoryUserDirectory adapters.

Tests verify the adapters honour the RecordStore contract the domain
relies on: equality filters, ordering, paging and unique fields.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest

from src.adapters.repository.memory import InMemoryRecordStore, InMemoryUserDirectory
from src.domain.exceptions import DuplicateRecord
from src.domain.ports import RecordStore, SortDirection, UserDirectory


@pytest.fixture
def store() -> InMemoryRecordStore:
    store = InMemoryRecordStore()
    store.create({"email": "b@example.com", "status": "pending", "position": 2})
    store.create({"email": "a@example.com", "status": "approved", "position": 1})
    store.create({"email": "c@example.com", "status": "pending", "position": None})
    return store


class TestProtocol:
    def test_satisfies_ports(self) -> None:
        def accepts(store: RecordStore, users: UserDirectory) -> None:
            pass

        accepts(InMemoryRecordStore(), InMemoryUserDirectory())

    def test_no_explicit_inheritance(self) -> None:
        assert InMemoryRecordStore.__bases__ == (object,)


class TestReads:
    def test_create_assigns_id(self) -> None:
        record = InMemoryRecordStore().create({"email": "x@example.com"})
        assert record["id"]

    def test_find_one_conjunction(self, store) -> None:
        assert store.find_one({"email": "a@example.com", "status": "approved"}) is not None
        assert store.find_one({"email": "a@example.com", "status": "pending"}) is None

    def test_count(self, store) -> None:
        assert store.count() == 3
        assert store.count({"status": "pending"}) == 2

    def test_find_many_sorted_nulls_last(self, store) -> None:
        rows = store.find_many(sort_by="position")
        assert [r["email"] for r in rows] == ["a@example.com", "b@example.com", "c@example.com"]

    def test_find_many_desc_keeps_nulls_last(self, store) -> None:
        rows = store.find_many(sort_by="position", direction=SortDirection.DESC)
        assert [r["email"] for r in rows] == ["b@example.com", "a@example.com", "c@example.com"]

    def test_find_many_desc_limit_offset(self, store) -> None:
        rows = store.find_many(sort_by="email", direction=SortDirection.DESC, limit=1, offset=1)
        assert [r["email"] for r in rows] == ["b@example.com"]

    def test_returned_records_are_copies(self, store) -> None:
        record = store.find_one({"email": "a@example.com"})
        record["status"] = "rejected"
        assert store.find_one({"email": "a@example.com"})["status"] == "approved"


class TestWrites:
    def test_update_returns_merged_record(self, store) -> None:
        updated = store.update({"email": "b@example.com"}, {"status": "approved"})
        assert updated["status"] == "approved"
        assert updated["position"] == 2

    def test_update_missing_returns_none(self, store) -> None:
        assert store.update({"email": "zz@example.com"}, {"status": "approved"}) is None

    def test_duplicate_email_rejected(self, store) -> None:
        with pytest.raises(DuplicateRecord) as exc_info:
            store.create({"email": "a@example.com"})
        assert exc_info.value.field == "email"

    def test_duplicate_invite_code_on_update(self, store) -> None:
        store.update({"email": "a@example.com"}, {"invite_code": "code-1"})

        with pytest.raises(DuplicateRecord) as exc_info:
            store.update({"email": "b@example.com"}, {"invite_code": "code-1"})

        assert exc_info.value.field == "invite_code"

    def test_null_unique_values_do_not_collide(self, store) -> None:
        store.update({"email": "a@example.com"}, {"invite_code": None})
        store.update({"email": "b@example.com"}, {"invite_code": None})

    def test_concurrent_creates_one_winner(self) -> None:
        store = InMemoryRecordStore()

        def create() -> bool:
            try:
                store.create({"email": "race@example.com"})
                return True
            except DuplicateRecord:
                return False

        with ThreadPoolExecutor(max_workers=8) as executor:
            results = list(executor.map(lambda _: create(), range(20)))

        assert results.count(True) == 1
        assert store.count() == 1


class TestUserDirectory:
    def test_case_insensitive(self) -> None:
        users = InMemoryUserDirectory({"Member@Example.com"})
        assert users.user_exists("member@example.com") is True
        assert users.user_exists("other@example.com") is False
