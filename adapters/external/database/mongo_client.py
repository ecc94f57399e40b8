# adapters/external/database/mongo_client.py

from __future__ import annotations

from typing import Optional

from pymongo import MongoClient
from pymongo.database import Database

from config import get_settings

_client: Optional[MongoClient] = None
_db: Optional[Database] = None


def get_mongo_client() -> MongoClient:
    """
    Process-wide MongoClient built lazily from MONGO_URI.
    """
    global _client
    if _client is None:
        uri = get_settings().MONGO_URI
        if not uri:
            raise RuntimeError("MONGO_URI is not configured; the adapter registry needs MongoDB.")
        _client = MongoClient(uri, serverSelectionTimeoutMS=5000)
    return _client


def get_mongo_db() -> Database:
    """
    Database holding the adapter registry (MONGO_DB), shared by all repositories.
    """
    global _db
    if _db is None:
        db_name = get_settings().MONGO_DB
        if not db_name:
            raise RuntimeError("MONGO_DB is not configured; cannot select the adapter registry database.")
        _db = get_mongo_client()[db_name]
    return _db
