# Overview: Key-value persistence collaborator; whole JSON documents per key.

from __future__ import annotations

import json
from typing import Any, Callable, Iterable, TypeVar

from ..extensions import db
from ..models import StorageEntry
from omnimarket.time_utils import utcnow
"""
Storage contract (authoritative)

- get_value(key) -> decoded JSON document, or None when the key was never written.
- set_value(key, raw) replaces the whole document for that key.
- Callers decide the default for a missing key (empty list, seeded catalog, ...);
  a missing key is never an error.
- Read-modify-write with a single writer; no locking, no versioning.
"""

KEY_PRODUCTS = "products"
KEY_STOCK_ADJUSTMENTS = "stock_adjustments"
KEY_TRANSACTIONS = "transactions"
KEY_VISITS = "visits"
KEY_BRANCHES = "branches"
KEY_APP_CONFIG = "app_config"
KEY_LOW_STOCK_LIMIT = "inventory_low_stock_limit"

T = TypeVar("T")


def get_value(key: str) -> Any | None:
    entry = db.session.get(StorageEntry, key)
    if entry is None:
        return None
    return json.loads(entry.value)


def set_value(key: str, raw: Any, *, commit: bool = True) -> None:
    """
    Replace the document stored under key.

    commit=False lets a service write several keys and commit once
    (checkout writes the transaction log and the product list together).
    """
    encoded = json.dumps(raw, ensure_ascii=False)

    entry = db.session.get(StorageEntry, key)
    if entry is None:
        entry = StorageEntry(key=key, value=encoded, updated_at=utcnow())
        db.session.add(entry)
    else:
        entry.value = encoded
        entry.updated_at = utcnow()

    if commit:
        db.session.commit()
    else:
        db.session.flush()


def delete_value(key: str) -> bool:
    entry = db.session.get(StorageEntry, key)
    if entry is None:
        return False
    db.session.delete(entry)
    db.session.commit()
    return True


def load_records(
    key: str,
    decode: Callable[[dict], T],
    default: Callable[[], list[T]] | None = None,
) -> list[T]:
    """Decode a stored list of records; a missing key yields default() (or [])."""
    raw = get_value(key)
    if raw is None:
        return default() if default is not None else []
    return [decode(item) for item in raw]


def save_records(key: str, records: Iterable[Any], *, commit: bool = True) -> None:
    set_value(key, [r.to_dict() for r in records], commit=commit)


def append_record(key: str, record: Any, *, commit: bool = True) -> None:
    """Append one record to a list document without decoding the existing ones."""
    raw = get_value(key) or []
    raw.append(record.to_dict())
    set_value(key, raw, commit=commit)


def record_ids(key: str) -> list[str]:
    """Ids already used in a list document; feeds id allocation."""
    return [item.get("id") for item in get_value(key) or []]
