# Overview: Record id allocation for products, adjustments, transactions, branches and visits.

from __future__ import annotations

from typing import Iterable

from omnimarket.time_utils import epoch_millis

PREFIX_PRODUCT = "P"
PREFIX_ADJUSTMENT = "ADJ"
PREFIX_TRANSACTION = "TX"
PREFIX_BRANCH = "B"
PREFIX_VISIT = "V"


class DocumentNumberError(Exception):
    """Raised when a record id cannot be allocated."""
    pass


def next_document_number(*, prefix: str, existing_ids: Iterable[str] = ()) -> str:
    """
    Allocate "<prefix>-<epoch millis>".

    Two records created within the same millisecond would collide, so the
    millisecond counter is bumped until the id is unused.
    """
    if not prefix:
        raise DocumentNumberError("prefix is required")

    taken = set(existing_ids)
    millis = epoch_millis()
    candidate = f"{prefix}-{millis}"
    while candidate in taken:
        millis += 1
        candidate = f"{prefix}-{millis}"
    return candidate
