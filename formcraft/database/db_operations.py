"""
Database operations - uniform CRUD for users, forms and submissions
"""
from typing import List, Dict, Optional, Any
from fastapi import Request

from formcraft.config.database import Collections
from formcraft.config.settings import settings
from formcraft.database.supervisor import StoreSupervisor
from formcraft.models.form import Theme
from formcraft.services.schema_validation import validate_form, parse_form_fields
from formcraft.utils.errors import ConflictError, NotFound, ValidationError
from formcraft.utils.helpers import utcnow, ensure_aware

# Field each kind is listed by in find_by_owner
OWNER_KEYS = {
    Collections.USERS: "_id",
    Collections.FORMS: "userId",
    Collections.SUBMISSIONS: "formId",
}

UNIQUE_KEYS = {
    Collections.USERS: ("email",),
}

IMMUTABLE_KEYS = ("_id", "userId", "createdAt")

NOT_FOUND_MESSAGES = {
    Collections.USERS: "User not found",
    Collections.FORMS: "Form not found",
    Collections.SUBMISSIONS: "Submission not found",
}


def _prepare_form(document: Dict) -> Dict:
    errors = validate_form(document)
    if errors:
        raise ValidationError(errors)
    document["fields"] = parse_form_fields(document.get("fields") or [])
    document["description"] = document.get("description") or ""
    document["isPublic"] = bool(document.get("isPublic", False))
    document["theme"] = Theme(**(document.get("theme") or {})).model_dump()
    return document


class DBOperations:
    """Gateway over the store supervisor"""

    def __init__(self, stores: StoreSupervisor):
        self.stores = stores

    def _not_found(self, collection_name: str) -> NotFound:
        return NotFound(NOT_FOUND_MESSAGES.get(collection_name))

    async def _check_unique(self, collection_name: str, document: Dict) -> None:
        for key in UNIQUE_KEYS.get(collection_name, ()):
            if key not in document:
                continue
            existing = await self.find_one(collection_name, {key: document[key]})
            if existing:
                raise ConflictError("User already exists" if collection_name == Collections.USERS else f"{key} already exists")

    async def create(self, collection_name: str, document: Dict) -> Dict:
        """Create a new document"""
        document = dict(document)
        document.pop("_id", None)
        now = utcnow()
        if collection_name == Collections.FORMS:
            document = _prepare_form(document)
            document["createdAt"] = now
            document["updatedAt"] = now
        elif collection_name == Collections.USERS:
            document.setdefault("role", "user")
            document["createdAt"] = now
        elif collection_name == Collections.SUBMISSIONS:
            document["submittedAt"] = ensure_aware(document.get("submittedAt") or now)

        await self._check_unique(collection_name, document)
        return await self.stores.run(
            f"create {collection_name}",
            lambda store: store.insert(collection_name, document),
        )

    async def find_by_id(self, collection_name: str, doc_id: str) -> Dict:
        """Get a single document by ID"""
        document = await self.stores.run(
            f"find {collection_name}",
            lambda store: store.get_by_id(collection_name, doc_id),
            doc_id=doc_id,
        )
        if not document:
            raise self._not_found(collection_name)
        return document

    async def find_one(self, collection_name: str, filter_query: Dict) -> Optional[Dict]:
        """Get a single document by filter query"""
        return await self.stores.first(
            f"find one {collection_name}",
            lambda store: store.get_one(collection_name, filter_query),
        )

    async def find_by_owner(self, collection_name: str, owner_id: str) -> List[Dict]:
        """List documents belonging to owner_id, most recently updated first for forms"""
        key = OWNER_KEYS[collection_name]
        documents = await self.stores.gather(
            f"list {collection_name}",
            lambda store: store.get_all(collection_name, {key: owner_id}),
        )
        if collection_name == Collections.FORMS:
            documents.sort(key=lambda doc: doc.get("updatedAt") or doc.get("createdAt"), reverse=True)
        return documents

    async def update(self, collection_name: str, doc_id: str, update_data: Dict) -> Dict:
        """Shallow-merge update_data into a document by ID"""
        update_data = {k: v for k, v in update_data.items() if k not in IMMUTABLE_KEYS}
        if collection_name == Collections.FORMS:
            existing = await self.find_by_id(collection_name, doc_id)
            merged = _prepare_form({**existing, **update_data})
            update_data = {k: merged[k] for k in update_data}
        update_data["updatedAt"] = utcnow()

        updated = await self.stores.run(
            f"update {collection_name}",
            lambda store: store.update(collection_name, doc_id, update_data),
            doc_id=doc_id,
        )
        if not updated:
            raise self._not_found(collection_name)
        return updated

    async def delete(self, collection_name: str, doc_id: str) -> Dict:
        """Delete a document by ID"""
        deleted = await self.stores.run(
            f"delete {collection_name}",
            lambda store: store.delete(collection_name, doc_id),
            doc_id=doc_id,
        )
        if not deleted:
            raise self._not_found(collection_name)
        return deleted

    async def health(self) -> Dict[str, Any]:
        return await self.stores.status()


store_supervisor = StoreSupervisor(
    timeout=settings.STORE_TIMEOUT_SECONDS,
    recovery_interval=settings.STORE_RECOVERY_INTERVAL_SECONDS,
)
db_ops = DBOperations(store_supervisor)


def get_db(request: Request) -> DBOperations:
    """FastAPI dependency returning the gateway the app was started with"""
    return getattr(request.app.state, "db_ops", db_ops)
