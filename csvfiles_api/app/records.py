from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Optional

from pymongo import ReturnDocument

from .csv_format import parse_csv, render_csv
from .db import csv_files

logger = logging.getLogger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def find_by_filename(filename: str) -> Optional[dict[str, Any]]:
    return csv_files().find_one({"filename": filename})


def save_upload(filename: str, text: str) -> tuple[dict[str, Any], bool]:
    """Store an uploaded CSV under its filename.

    A new record gets ``uploadedAt`` and ``lastModified`` set to now. An
    existing record keeps ``uploadedAt`` and has its users, content and
    ``lastModified`` replaced. Returns the stored document and whether it
    was created.
    """
    users = parse_csv(text)
    now = _now()
    coll = csv_files()
    before = coll.find_one_and_update(
        {"filename": filename},
        {
            "$set": {"users": users, "csvContent": text, "lastModified": now},
            "$setOnInsert": {"uploadedAt": now},
        },
        upsert=True,
        return_document=ReturnDocument.BEFORE,
    )
    created = before is None
    logger.info("%s %s with %d users", "Stored new file" if created else "Updated file", filename, len(users))
    return coll.find_one({"filename": filename}), created


def replace_users(
    filename: str, users: list[dict[str, Any]], expected_modified: Optional[datetime] = None
) -> Optional[dict[str, Any]]:
    """Store a new user list. Returns None when the file is missing or, with
    ``expected_modified``, when it changed since that ``lastModified`` was read."""
    query: dict[str, Any] = {"filename": filename}
    if expected_modified is not None:
        query["lastModified"] = expected_modified
    return csv_files().find_one_and_update(
        query,
        {"$set": {"users": users, "csvContent": render_csv(users), "lastModified": _now()}},
        return_document=ReturnDocument.AFTER,
    )


def delete_by_filename(filename: str) -> bool:
    result = csv_files().delete_one({"filename": filename})
    if result.deleted_count:
        logger.info("Deleted file %s", filename)
    return bool(result.deleted_count)


def _timestamp(value: Any) -> Any:
    return value.isoformat() if isinstance(value, datetime) else value


def file_info(doc: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": str(doc.get("_id")),
        "filename": doc.get("filename"),
        "userCount": len(doc.get("users") or []),
        "uploadedAt": _timestamp(doc.get("uploadedAt")),
        "lastModified": _timestamp(doc.get("lastModified")),
    }
