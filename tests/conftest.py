import os
import tempfile

os.environ.setdefault("SIGNING_SECRET", "test-signing-secret")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="formcraft-uploads-"))
os.environ.pop("STORE_CONNECTION_URI", None)

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from formcraft.database.db_operations import DBOperations
from formcraft.database.memory_store import MemoryStore
from formcraft.database.supervisor import StoreSupervisor
from formcraft.main import app


class FlakyStore(MemoryStore):
    """Stands in for MongoDB: ObjectId ids, and every call fails while `down`"""

    def __init__(self):
        super().__init__()
        self.down = False
        self.calls = 0

    def _next_id(self, collection_name):
        return str(ObjectId())

    def _check(self):
        self.calls += 1
        if self.down:
            raise ConnectionError("durable store unreachable")

    async def ping(self):
        self._check()

    async def insert(self, collection_name, document):
        self._check()
        return await super().insert(collection_name, document)

    async def get_by_id(self, collection_name, doc_id):
        self._check()
        return await super().get_by_id(collection_name, doc_id)

    async def get_one(self, collection_name, filter_query):
        self._check()
        return await super().get_one(collection_name, filter_query)

    async def get_all(self, collection_name, filter_query=None):
        self._check()
        return await super().get_all(collection_name, filter_query)

    async def update(self, collection_name, doc_id, update_data):
        self._check()
        return await super().update(collection_name, doc_id, update_data)

    async def delete(self, collection_name, doc_id):
        self._check()
        return await super().delete(collection_name, doc_id)


@pytest.fixture
def durable() -> FlakyStore:
    return FlakyStore()


@pytest.fixture
def supervisor(durable) -> StoreSupervisor:
    return StoreSupervisor(durable=durable, timeout=1, recovery_interval=0)


@pytest.fixture
def db(supervisor) -> DBOperations:
    return DBOperations(supervisor)


@pytest.fixture
def client(db):
    previous = app.state.db_ops
    app.state.db_ops = db
    yield TestClient(app)
    app.state.db_ops = previous


@pytest.fixture
def register(client):
    """Register a user and return (user, auth headers)"""

    def _register(email="owner@example.com", name="Owner", password="secret123"):
        response = client.post("/api/auth/register", json={"name": name, "email": email, "password": password})
        assert response.status_code == 201, response.text
        body = response.json()
        return body["user"], {"Authorization": f"Bearer {body['token']}"}

    return _register


@pytest.fixture
def sample_form():
    return {
        "title": "Contact",
        "description": "Get in touch",
        "fields": [
            {"id": "name", "type": "text", "label": "Name", "required": True},
            {"id": "email", "type": "email", "label": "Email", "required": True},
            {"id": "plan", "type": "select", "label": "Plan", "options": ["Free", "Pro"]},
            {"id": "topics", "type": "checkbox", "label": "Topics", "options": ["X", "Y", "Z"]},
        ],
    }
