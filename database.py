"""
MongoDB connection and document helpers

The connection is configured from DATABASE_URL / DATABASE_NAME. When either is
missing `db` stays None and callers report "Database not configured".
"""
import os
import logging
from datetime import datetime, timezone
from typing import Optional

from pymongo import MongoClient
from pymongo.database import Database

logger = logging.getLogger(__name__)

DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME")


def connect(url: Optional[str] = DATABASE_URL, name: Optional[str] = DATABASE_NAME) -> Optional[Database]:
    if not url or not name:
        logger.warning("DATABASE_URL or DATABASE_NAME not set, running without a database")
        return None
    client = MongoClient(url)
    return client[name]


db = connect()


def create_document(database: Database, collection_name: str, data: dict) -> str:
    """Insert a document stamped with created_at and return its _id as a string."""
    doc = dict(data)
    doc.setdefault("created_at", datetime.now(timezone.utc))
    result = database[collection_name].insert_one(doc)
    return str(result.inserted_id)

