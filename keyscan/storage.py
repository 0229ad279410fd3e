"""
Persistence layer for scanner settings and scan history.

Uses MongoDB when a connection URI is configured, a local JSON file
otherwise.
"""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
from uuid import uuid4

from pymongo import DESCENDING, MongoClient
from pymongo.errors import PyMongoError

from .core.scanner import ScanValues


DATA_DIR = Path(os.getenv("KEYSCAN_DATA_DIR", str(Path.home() / ".keyscan")))
JSON_PATH = DATA_DIR / "keyscan.json"
PERSISTENCE_BACKEND = os.getenv("KEYSCAN_PERSISTENCE_BACKEND", "")
MONGODB_URI = os.getenv("KEYSCAN_MONGODB_URI", "")
MONGODB_DB = os.getenv("KEYSCAN_MONGODB_DB", "keyscan")

_client: Optional[MongoClient] = None


def _utc_now() -> str:
    return datetime.now(timezone.utc).replace(tzinfo=None).isoformat(timespec="milliseconds") + "Z"


def _get_client() -> MongoClient:
    global _client
    if _client is None:
        if not MONGODB_URI:
            raise ValueError("KEYSCAN_MONGODB_URI is required for MongoDB backend.")
        _client = MongoClient(MONGODB_URI)
    return _client


def get_db():
    return _get_client()[MONGODB_DB]


def _backend() -> str:
    if PERSISTENCE_BACKEND:
        return PERSISTENCE_BACKEND.strip().lower()
    if not MONGODB_URI:
        return "json"
    return "mongodb"


def _ensure_data_dir() -> None:
    JSON_PATH.parent.mkdir(parents=True, exist_ok=True)


def _json_load() -> Dict[str, Any]:
    _ensure_data_dir()
    if not JSON_PATH.exists():
        return {"scans": [], "settings": {}}
    with JSON_PATH.open("r", encoding="utf-8") as f:
        return json.load(f)


def _json_save(payload: Dict[str, Any]) -> None:
    _ensure_data_dir()
    with JSON_PATH.open("w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=True, indent=2)


def init_db() -> None:
    if _backend() == "json":
        _json_save(_json_load())
        return
    db = get_db()
    db.scans.create_index("scan_id", unique=True)
    db.scans.create_index([("timestamp", DESCENDING)])
    db.settings.create_index("key", unique=True)


def check_connection() -> bool:
    if _backend() == "json":
        return True
    try:
        _get_client().admin.command("ping")
        return True
    except PyMongoError:
        return False


def set_setting(key: str, value: Any) -> None:
    if _backend() == "json":
        payload = _json_load()
        payload.setdefault("settings", {})[key] = value
        _json_save(payload)
        return
    db = get_db()
    db.settings.update_one(
        {"_id": key},
        {"$set": {"key": key, "value": value}},
        upsert=True,
    )


def get_setting(key: str, default: Any = None) -> Any:
    if _backend() == "json":
        payload = _json_load()
        return payload.get("settings", {}).get(key, default)
    db = get_db()
    doc = db.settings.find_one({"_id": key})
    if not doc:
        return default
    return doc.get("value", default)


def record_scan(values: Union[ScanValues, Dict[str, Any]], source: Optional[str] = None) -> str:
    """
    Store a completed scan.

    Args:
        values: ScanValues, or a dict with "parsed" and "scanned"
        source: Optional label of the device or station the scan came from

    Returns:
        The new scan id.
    """
    data = values.to_dict() if isinstance(values, ScanValues) else dict(values)
    scan_id = data.get("scan_id") or str(uuid4())
    doc = {
        "_id": scan_id,
        "scan_id": scan_id,
        "timestamp": data.get("timestamp") or _utc_now(),
        "source": source or data.get("source"),
        "scanned": data.get("scanned", ""),
        "parsed": data.get("parsed") or {},
    }
    if _backend() == "json":
        payload = _json_load()
        payload.setdefault("scans", []).append(doc.copy())
        _json_save(payload)
    else:
        db = get_db()
        db.scans.insert_one(doc)
    return scan_id


def list_scans(limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """Recorded scans, newest first."""
    if _backend() == "json":
        payload = _json_load()
        scans = sorted(
            reversed(payload.get("scans", [])),
            key=lambda s: s.get("timestamp", ""),
            reverse=True,
        )
        if limit:
            scans = scans[:limit]
        docs = []
        for scan in scans:
            doc = dict(scan)
            doc.pop("_id", None)
            docs.append(doc)
        return docs
    db = get_db()
    cursor = db.scans.find().sort("timestamp", DESCENDING)
    if limit:
        cursor = cursor.limit(limit)
    docs = []
    for doc in cursor:
        doc.pop("_id", None)
        docs.append(doc)
    return docs


def delete_scans() -> int:
    """Remove every recorded scan. Returns the number removed."""
    if _backend() == "json":
        payload = _json_load()
        removed = len(payload.get("scans", []))
        payload["scans"] = []
        _json_save(payload)
        return removed
    db = get_db()
    return db.scans.delete_many({}).deleted_count
