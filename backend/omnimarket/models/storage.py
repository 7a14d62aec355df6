from __future__ import annotations

from ..extensions import db


class StorageEntry(db.Model):
    """
    One persisted key of the local store.

    The core treats storage as a dumb read-modify-write key-value target:
    each key holds a whole JSON document (the product list, the adjustment
    ledger, ...). There is no per-record row, no optimistic locking and no
    versioning; exactly one writer is assumed.
    """
    __tablename__ = "storage_entries"

    key = db.Column(db.String(64), primary_key=True)

    # JSON-encoded document
    value = db.Column(db.Text, nullable=False)

    updated_at = db.Column(
        db.DateTime(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def __repr__(self) -> str:
        return f"<StorageEntry key={self.key!r} bytes={len(self.value or '')}>"
