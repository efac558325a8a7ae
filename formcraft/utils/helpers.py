"""
Helper utility functions
"""
from bson import ObjectId
from typing import Dict, List, Optional
from datetime import datetime
import pytz


def utcnow() -> datetime:
    return datetime.now(pytz.utc)


def serialize_doc(doc: Optional[Dict]) -> Optional[Dict]:
    """Convert MongoDB document to JSON-serializable format"""
    if doc is None:
        return None

    # Convert any nested ObjectIds or naive datetimes (MongoDB hands back naive UTC)
    for key, value in doc.items():
        if isinstance(value, ObjectId):
            doc[key] = str(value)
        elif isinstance(value, datetime):
            if value.tzinfo is None:
                doc[key] = pytz.utc.localize(value)
        elif isinstance(value, list):
            doc[key] = [serialize_doc(item) if isinstance(item, dict) else item for item in value]
        elif isinstance(value, dict):
            doc[key] = serialize_doc(value)

    return doc


def serialize_docs(docs: List[Dict]) -> List[Dict]:
    """Convert list of MongoDB documents to JSON-serializable format"""
    return [serialize_doc(doc) for doc in docs]


def is_object_id(value) -> bool:
    """True when value is a durable-store identifier"""
    return isinstance(value, ObjectId) or (isinstance(value, str) and ObjectId.is_valid(value))


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC"""
    if value.tzinfo is None:
        return pytz.utc.localize(value)
    return value
