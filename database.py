from __future__ import annotations
from typing import Any, Optional
from datetime import datetime, timezone
from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
import structlog

from config import get_settings

logger = structlog.get_logger(__name__)

_client: Optional[AsyncIOMotorClient] = None
_db: Optional[AsyncIOMotorDatabase] = None

class DatabaseNotConfigured(RuntimeError):
    pass

async def get_db() -> AsyncIOMotorDatabase:
    global _client, _db
    if _db is None:
        settings = get_settings()
        if not settings.DATABASE_URL:
            raise DatabaseNotConfigured("DATABASE_URL is not set")
        _client = AsyncIOMotorClient(settings.DATABASE_URL)
        _db = _client[settings.DATABASE_NAME]
        logger.info("Database client created", database=settings.DATABASE_NAME)
    return _db

def use_database(db: Optional[AsyncIOMotorDatabase]) -> None:
    """Swap the active database handle (tests plug an in-memory one in here)."""
    global _client, _db
    _client = None
    _db = db

def close_db() -> None:
    global _client, _db
    if _client is not None:
        _client.close()
        logger.info("Database client closed")
    _client = None
    _db = None

def _with_str_id(doc: dict[str, Any]) -> dict[str, Any]:
    doc["id"] = str(doc.pop("_id"))
    return doc

def _object_id(value: str) -> Optional[ObjectId]:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None

async def ping() -> bool:
    db = await get_db()
    await db.command("ping")
    return True

async def create_document(collection_name: str, data: dict[str, Any]) -> dict[str, Any]:
    db = await get_db()
    now = datetime.now(timezone.utc)
    data_with_meta = {**data, "created_at": now, "updated_at": now}
    result = await db[collection_name].insert_one(data_with_meta)
    inserted = await db[collection_name].find_one({"_id": result.inserted_id})
    if inserted and "_id" in inserted:
        _with_str_id(inserted)
    return inserted or {}

async def find_document_by_id(collection_name: str, doc_id: str) -> Optional[dict[str, Any]]:
    oid = _object_id(doc_id)
    if oid is None:
        return None
    db = await get_db()
    doc = await db[collection_name].find_one({"_id": oid})
    return _with_str_id(doc) if doc else None

async def update_document(collection_name: str, doc_id: str, values: dict[str, Any], filter_dict: dict[str, Any] | None = None) -> bool:
    """Set ``values`` on one document; extra ``filter_dict`` conditions guard the write."""
    oid = _object_id(doc_id)
    if oid is None:
        return False
    db = await get_db()
    result = await db[collection_name].update_one(
        {**(filter_dict or {}), "_id": oid},
        {"$set": {**values, "updated_at": datetime.now(timezone.utc)}},
    )
    return result.modified_count == 1

async def get_documents(
    collection_name: str,
    filter_dict: dict[str, Any] | None = None,
    limit: int = 100,
    sort: list[tuple[str, int]] | None = None,
    projection: dict[str, int] | None = None,
) -> list[dict[str, Any]]:
    db = await get_db()
    cursor = db[collection_name].find(filter_dict or {}, projection)
    if sort:
        cursor = cursor.sort(sort)
    cursor = cursor.limit(limit)
    docs = []
    async for d in cursor:
        docs.append(_with_str_id(d))
    return docs
