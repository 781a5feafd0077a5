"""
Key-value persistence

Every store persists its snapshot as a JSON blob under its own key.
The capability is intentionally tiny (get/set/remove/clear) so the stores
can run against an in-memory dict in tests and against MongoDB when
DATABASE_URL / DATABASE_NAME are configured.
"""
import json
import logging
import os
from typing import Any, Dict, Optional, Protocol

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...

    def clear(self) -> None: ...


class MemoryStore:
    """Dict-backed store. Lives exactly as long as the process holding it."""

    def __init__(self):
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._data


class MongoStore:
    """One document per key in a single collection: { _id: key, value: str }."""

    def __init__(self, database, collection: str = 'keyvalue'):
        self._collection = database[collection]

    def get(self, key: str) -> Optional[str]:
        doc = self._collection.find_one({'_id': key})
        return doc['value'] if doc else None

    def set(self, key: str, value: str) -> None:
        self._collection.update_one({'_id': key}, {'$set': {'value': value}}, upsert=True)

    def remove(self, key: str) -> None:
        self._collection.delete_one({'_id': key})

    def clear(self) -> None:
        self._collection.delete_many({})


def connect_database():
    database_url = os.getenv('DATABASE_URL')
    database_name = os.getenv('DATABASE_NAME')
    if not database_url or not database_name:
        return None
    from pymongo import MongoClient
    client = MongoClient(database_url)
    return client[database_name]


def create_store() -> KeyValueStore:
    db = connect_database()
    if db is None:
        logger.info('DATABASE_URL not set, using in-memory storage')
        return MemoryStore()
    logger.info('Using MongoDB database %s', db.name)
    return MongoStore(db)


# ---------- Versioned blobs ----------

def load_blob(storage: KeyValueStore, key: str, version: int = 0) -> Optional[Dict[str, Any]]:
    raw = storage.get(key)
    if raw is None:
        return None
    try:
        envelope = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning('Discarding unreadable blob %s', key)
        return None
    if not isinstance(envelope, dict) or not isinstance(envelope.get('state'), dict):
        logger.warning('Discarding malformed blob %s', key)
        return None
    if envelope.get('version', 0) != version:
        logger.warning('Discarding blob %s with version %s (expected %s)', key, envelope.get('version'), version)
        return None
    return envelope['state']


def save_blob(storage: KeyValueStore, key: str, state: Dict[str, Any], version: int = 0) -> None:
    storage.set(key, json.dumps({'state': state, 'version': version}))
