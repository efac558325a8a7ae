import asyncio
from datetime import datetime, timedelta

import pytest
from mongomock_motor import AsyncMongoMockClient

from formcraft.config.database import Collections, DatabaseConfig
from formcraft.database.db_operations import DBOperations
from formcraft.database.mongo_store import MongoStore
from formcraft.database.supervisor import StoreSupervisor
from formcraft.utils.errors import ConflictError
from formcraft.utils.helpers import utcnow


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def mongo_store() -> MongoStore:
    config = DatabaseConfig(uri="mongodb://localhost:27017", database_name="formcraft_test")
    config.client = AsyncMongoMockClient()
    config.database = config.client[config.DATABASE_NAME]
    return MongoStore(config)


def test_insert_and_lookup_by_string_id(mongo_store):
    created = run(mongo_store.insert(Collections.FORMS, {"_id": "ignored", "title": "T", "userId": "u1"}))
    assert isinstance(created["_id"], str) and len(created["_id"]) == 24

    assert run(mongo_store.get_by_id(Collections.FORMS, created["_id"]))["title"] == "T"
    assert run(mongo_store.get_one(Collections.FORMS, {"_id": created["_id"]}))["userId"] == "u1"
    assert run(mongo_store.get_by_id(Collections.FORMS, "form_1")) is None


def test_update_returns_the_document_after_the_change(mongo_store):
    created = run(mongo_store.insert(Collections.FORMS, {"title": "a", "description": "d"}))
    updated = run(mongo_store.update(Collections.FORMS, created["_id"], {"title": "b"}))

    assert updated == {"_id": created["_id"], "title": "b", "description": "d"}
    assert run(mongo_store.update(Collections.FORMS, "form_1", {"title": "c"})) is None


def test_delete_returns_the_removed_document_once(mongo_store):
    created = run(mongo_store.insert(Collections.SUBMISSIONS, {"formId": "f", "responses": {}}))

    assert run(mongo_store.delete(Collections.SUBMISSIONS, created["_id"]))["formId"] == "f"
    assert run(mongo_store.delete(Collections.SUBMISSIONS, created["_id"])) is None


def test_datetimes_come_back_timezone_aware(mongo_store):
    now = utcnow()
    created = run(mongo_store.insert(Collections.USERS, {"email": "a@example.com", "createdAt": now}))
    found = run(mongo_store.get_by_id(Collections.USERS, created["_id"]))

    assert found["createdAt"].tzinfo is not None
    assert abs(found["createdAt"] - now) < timedelta(milliseconds=1)


def test_get_all_filters_by_owner(mongo_store):
    run(mongo_store.insert(Collections.FORMS, {"title": "A", "userId": "u1"}))
    run(mongo_store.insert(Collections.FORMS, {"title": "B", "userId": "u2"}))

    assert [f["title"] for f in run(mongo_store.get_all(Collections.FORMS, {"userId": "u1"}))] == ["A"]
    assert len(run(mongo_store.get_all(Collections.FORMS))) == 2


def test_unique_email_index_raises_conflict(mongo_store):
    run(mongo_store.ensure_indexes())
    run(mongo_store.insert(Collections.USERS, {"email": "bob@example.com"}))

    with pytest.raises(ConflictError):
        run(mongo_store.insert(Collections.USERS, {"email": "bob@example.com"}))
    run(mongo_store.insert(Collections.USERS, {"email": "Bob@example.com"}))


def test_form_shapes_match_on_mongo_and_memory(mongo_store, sample_form):
    backends = {
        "durable": DBOperations(StoreSupervisor(durable=mongo_store)),
        "volatile": DBOperations(StoreSupervisor()),
    }
    shapes = {}
    for name, db in backends.items():
        created = run(db.create(Collections.FORMS, {**sample_form, "userId": "u1"}))
        found = run(db.find_by_id(Collections.FORMS, created["_id"]))
        updated = run(db.update(Collections.FORMS, created["_id"], {"title": "Renamed"}))
        listed = run(db.find_by_owner(Collections.FORMS, "u1"))
        deleted = run(db.delete(Collections.FORMS, created["_id"]))

        assert updated["title"] == "Renamed"
        assert [f["id"] for f in found["fields"]] == ["name", "email", "plan", "topics"]
        assert [f["_id"] for f in listed] == [created["_id"]]
        for record in (created, found, updated, deleted):
            assert isinstance(record["_id"], str)
            assert isinstance(record["updatedAt"], datetime) and record["updatedAt"].tzinfo is not None
        shapes[name] = {key: type(value) for key, value in found.items()}
        assert backends[name].stores.mode == ("durable" if name == "durable" else "volatile-only")

    assert shapes["durable"] == shapes["volatile"]
    assert backends["durable"].stores.volatile.total() == 0
