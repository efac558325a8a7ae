"""
Durable MongoDB store on top of motor
"""
from typing import Dict, List, Optional
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from formcraft.config.database import DatabaseConfig, Collections
from formcraft.database.store import Store
from formcraft.utils.errors import ConflictError, StoreError
from formcraft.utils.helpers import serialize_doc, serialize_docs, is_object_id


def _to_query(filter_query: Optional[Dict]) -> Dict:
    query = dict(filter_query or {})
    if "_id" in query and is_object_id(query["_id"]):
        query["_id"] = ObjectId(query["_id"])
    return query


class MongoStore(Store):
    def __init__(self, config: DatabaseConfig):
        self.config = config

    def _collection(self, collection_name: str):
        return self.config.get_collection(collection_name)

    async def ping(self) -> None:
        if self.config.client is None:
            raise StoreError("Database not connected")
        await self.config.client.admin.command('ping')

    async def ensure_indexes(self) -> None:
        await self._collection(Collections.USERS).create_index("email", unique=True)
        await self._collection(Collections.FORMS).create_index([("userId", 1), ("updatedAt", -1)])
        await self._collection(Collections.SUBMISSIONS).create_index("formId")

    async def insert(self, collection_name: str, document: Dict) -> Dict:
        document = dict(document)
        document.pop("_id", None)
        try:
            result = await self._collection(collection_name).insert_one(document)
        except DuplicateKeyError:
            raise ConflictError("User already exists")
        document["_id"] = result.inserted_id
        return serialize_doc(document)

    async def get_by_id(self, collection_name: str, doc_id: str) -> Optional[Dict]:
        if not is_object_id(doc_id):
            return None
        document = await self._collection(collection_name).find_one({"_id": ObjectId(doc_id)})
        return serialize_doc(document)

    async def get_one(self, collection_name: str, filter_query: Dict) -> Optional[Dict]:
        document = await self._collection(collection_name).find_one(_to_query(filter_query))
        return serialize_doc(document)

    async def get_all(self, collection_name: str, filter_query: Optional[Dict] = None) -> List[Dict]:
        cursor = self._collection(collection_name).find(_to_query(filter_query))
        documents = await cursor.to_list(length=None)
        return serialize_docs(documents)

    async def update(self, collection_name: str, doc_id: str, update_data: Dict) -> Optional[Dict]:
        if not is_object_id(doc_id):
            return None
        result = await self._collection(collection_name).find_one_and_update(
            {"_id": ObjectId(doc_id)},
            {"$set": update_data},
            return_document=ReturnDocument.AFTER
        )
        return serialize_doc(result)

    async def delete(self, collection_name: str, doc_id: str) -> Optional[Dict]:
        if not is_object_id(doc_id):
            return None
        result = await self._collection(collection_name).find_one_and_delete({"_id": ObjectId(doc_id)})
        return serialize_doc(result)
