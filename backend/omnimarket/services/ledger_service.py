# Overview: Append-only stock adjustment ledger.

from __future__ import annotations

from ..models import Product, StockAdjustment, Actor
from ..validation import require_text
from . import storage_service
from .storage_service import KEY_STOCK_ADJUSTMENTS
from .document_service import next_document_number, PREFIX_ADJUSTMENT
from omnimarket.time_utils import utcnow, to_utc_z
"""
Stock Adjustment Ledger Invariants (authoritative)

- Append-only: records are never updated, reordered or deleted.
- Exactly one record per manual adjustment (add / remove / set).
- delta == new_stock - old_stock, taken from the values actually written.
- product_name and branch_id are snapshots of the product at adjustment time.
- Sale deductions do NOT write here (see inventory_service.deduct_sale_items).
"""


def append_adjustment(
    *,
    product: Product,
    old_stock: int | float,
    new_stock: int | float,
    reason: str,
    actor: Actor,
    commit: bool = True,
) -> StockAdjustment:
    reason = require_text(reason, "reason")

    adjustment = StockAdjustment(
        id=next_document_number(
            prefix=PREFIX_ADJUSTMENT,
            existing_ids=storage_service.record_ids(KEY_STOCK_ADJUSTMENTS),
        ),
        product_id=product.id,
        product_name=product.name,
        branch_id=product.branch_id,
        date=to_utc_z(utcnow()),
        old_stock=old_stock,
        new_stock=new_stock,
        delta=new_stock - old_stock,
        reason=reason,
        adjusted_by=actor.name,
    )

    storage_service.append_record(KEY_STOCK_ADJUSTMENTS, adjustment, commit=commit)
    return adjustment


def list_adjustments(branch_id: str | None = None, product_id: str | None = None) -> list[StockAdjustment]:
    """Adjustment history in append order, optionally narrowed to a branch and/or product."""
    adjustments = storage_service.load_records(KEY_STOCK_ADJUSTMENTS, StockAdjustment.from_dict)
    if branch_id is not None:
        adjustments = [a for a in adjustments if a.branch_id == branch_id]
    if product_id is not None:
        adjustments = [a for a in adjustments if a.product_id == product_id]
    return adjustments
