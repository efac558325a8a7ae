"""
Store capability shared by the durable (MongoDB) and volatile (in-process) backends
"""
from abc import ABC, abstractmethod
from typing import Dict, List, Optional


class Store(ABC):
    """CRUD over named collections of dict documents.

    Documents go in and come out with `_id` as a string. Filter queries are
    plain equality matches on top-level keys. Implementations return copies,
    never their internal state, and report a missing document as None.
    """

    @abstractmethod
    async def ping(self) -> None:
        ...

    @abstractmethod
    async def insert(self, collection_name: str, document: Dict) -> Dict:
        ...

    @abstractmethod
    async def get_by_id(self, collection_name: str, doc_id: str) -> Optional[Dict]:
        ...

    @abstractmethod
    async def get_one(self, collection_name: str, filter_query: Dict) -> Optional[Dict]:
        ...

    @abstractmethod
    async def get_all(self, collection_name: str, filter_query: Optional[Dict] = None) -> List[Dict]:
        ...

    @abstractmethod
    async def update(self, collection_name: str, doc_id: str, update_data: Dict) -> Optional[Dict]:
        ...

    @abstractmethod
    async def delete(self, collection_name: str, doc_id: str) -> Optional[Dict]:
        ...
