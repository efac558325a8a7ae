"""
Volatile in-process store used when MongoDB is unavailable.

Identifiers are kind-prefixed counters (`user_1`, `form_1`, ...) that restart
from 1 with the process. Each collection has its own asyncio lock so a
read-modify-write on one collection never interleaves with another on it.
"""
import asyncio
import copy
from collections import defaultdict
from typing import Dict, List, Optional

from formcraft.config.database import Collections
from formcraft.database.store import Store

ID_PREFIXES = {
    Collections.USERS: "user",
    Collections.FORMS: "form",
    Collections.SUBMISSIONS: "submission",
}


def _matches(document: Dict, filter_query: Optional[Dict]) -> bool:
    return all(document.get(key) == value for key, value in (filter_query or {}).items())


class MemoryStore(Store):
    def __init__(self):
        self._collections: Dict[str, Dict[str, Dict]] = defaultdict(dict)
        self._counters: Dict[str, int] = defaultdict(int)
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def _next_id(self, collection_name: str) -> str:
        self._counters[collection_name] += 1
        prefix = ID_PREFIXES.get(collection_name, collection_name.rstrip("s"))
        return f"{prefix}_{self._counters[collection_name]}"

    async def ping(self) -> None:
        return None

    async def insert(self, collection_name: str, document: Dict) -> Dict:
        async with self._locks[collection_name]:
            record = copy.deepcopy(document)
            record["_id"] = str(record.get("_id") or self._next_id(collection_name))
            self._collections[collection_name][record["_id"]] = record
            return copy.deepcopy(record)

    async def get_by_id(self, collection_name: str, doc_id: str) -> Optional[Dict]:
        record = self._collections[collection_name].get(str(doc_id))
        return copy.deepcopy(record) if record is not None else None

    async def get_one(self, collection_name: str, filter_query: Dict) -> Optional[Dict]:
        for record in self._collections[collection_name].values():
            if _matches(record, filter_query):
                return copy.deepcopy(record)
        return None

    async def get_all(self, collection_name: str, filter_query: Optional[Dict] = None) -> List[Dict]:
        return [
            copy.deepcopy(record)
            for record in self._collections[collection_name].values()
            if _matches(record, filter_query)
        ]

    async def update(self, collection_name: str, doc_id: str, update_data: Dict) -> Optional[Dict]:
        async with self._locks[collection_name]:
            record = self._collections[collection_name].get(str(doc_id))
            if record is None:
                return None
            record.update(copy.deepcopy(update_data))
            return copy.deepcopy(record)

    async def delete(self, collection_name: str, doc_id: str) -> Optional[Dict]:
        async with self._locks[collection_name]:
            record = self._collections[collection_name].pop(str(doc_id), None)
            return copy.deepcopy(record) if record is not None else None

    def total(self) -> int:
        """Records held across every collection"""
        return sum(len(records) for records in self._collections.values())
