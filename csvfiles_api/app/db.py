from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database

from .config import config

logger = logging.getLogger(__name__)

_client: MongoClient | None = None

DEFAULT_DB_NAME = "csv_crud_db"

IndexDefinition = tuple[tuple[tuple[str, int], ...], Dict[str, Any]]

# Creation order matters only for the printed report.
CSV_FILE_INDEXES: list[IndexDefinition] = [
    ((("filename", ASCENDING),), {"name": "idx_filename_exact", "unique": True}),
    ((("uploadedAt", DESCENDING),), {"name": "idx_uploadedAt_desc"}),
    ((("lastModified", DESCENDING),), {"name": "idx_lastModified_desc"}),
    ((("filename", ASCENDING), ("uploadedAt", DESCENDING)), {"name": "idx_filename_uploadedAt"}),
]

TTL_INDEX_NAME = "idx_ttl_cleanup"


def ttl_index() -> IndexDefinition:
    return (
        (("uploadedAt", ASCENDING),),
        {"name": TTL_INDEX_NAME, "expireAfterSeconds": config.INDEX_TTL_SECONDS},
    )


def get_client() -> MongoClient:
    global _client
    if _client is None:
        _client = MongoClient(config.MONGO_URI)
    return _client


def get_db() -> Database:
    client = get_client()
    return client.get_default_database(DEFAULT_DB_NAME)


def collection(name: str) -> Collection:
    return get_db()[name]


def csv_files() -> Collection:
    return collection(config.CSV_FILES_COLLECTION)


def index_definitions(include_ttl: Optional[bool] = None) -> list[IndexDefinition]:
    """Return the index definitions for the CSV file collection, in creation order."""
    if include_ttl is None:
        include_ttl = config.INDEX_TTL_ENABLED
    definitions = list(CSV_FILE_INDEXES)
    if include_ttl:
        definitions.append(ttl_index())
    return definitions


def ensure_indexes(
    coll: Optional[Collection] = None, include_ttl: Optional[bool] = None
) -> list[IndexDefinition]:
    """Create the CSV file indexes and return the definitions that were applied.

    Creating an index that already exists with the same definition is a no-op,
    so this can run on every start. Driver errors (e.g. a DuplicateKeyError
    because stored filenames already collide) are not caught.
    """
    coll = coll if coll is not None else csv_files()
    applied: list[IndexDefinition] = []
    for keys, options in index_definitions(include_ttl):
        name = coll.create_index(list(keys), **options)
        logger.info("Ensured index %s on %s: %s", name, coll.name, dict(keys))
        applied.append((keys, options))
    return applied


def describe_indexes(coll: Optional[Collection] = None) -> list[dict[str, Any]]:
    """List the indexes currently present on the collection."""
    coll = coll if coll is not None else csv_files()
    described = []
    for name, info in coll.index_information().items():
        entry: dict[str, Any] = {"name": name, "key": dict(info["key"])}
        if info.get("unique"):
            entry["unique"] = True
        if info.get("expireAfterSeconds") is not None:
            entry["expireAfterSeconds"] = info["expireAfterSeconds"]
        described.append(entry)
    return described
