# Overview: Stock mutation primitives; manual adjustments and sale-time deductions.

# backend/omnimarket/services/inventory_service.py

from __future__ import annotations

from flask import current_app

from ..models import (
    Actor,
    AdjustmentMode,
    CartItem,
    Product,
    StockAdjustment,
    ADJUSTMENT_REASONS,
    REASON_OTHER,
    UNSPECIFIED_REASON,
)
from ..validation import ValidationError, require_number
from .conversion_service import to_base_quantity
from .products_service import adjust_stock, require_product
"""
Stock Mutation Semantics (authoritative)

Stock is a counter in base units. There are exactly two ways to change it.

Manual adjustment (apply_adjustment):
- ADD:    new = current + amount
- REMOVE: new = max(0, current - amount)
- SET:    new = max(0, amount)
- Over-removal saturates at zero silently; that is not an error.
- amount is NOT checked for sign here; the operator surface validates it.
- Always audited: exactly one StockAdjustment per call.

Sale deduction (deduct_sale_items):
- For each cart line: base_qty = qty * (snapshot conversion quantity),
  using the conversions frozen on the cart line, not the live catalog.
- Subtracted directly: NOT floored at zero and NOT audited. Overselling
  drives stock negative. This asymmetry with manual adjustment is kept
  as-is pending a product decision.
"""


def _normalize(value: int | float) -> int | float:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def compute_new_stock(mode: AdjustmentMode | str, current: int | float, amount: int | float) -> int | float:
    try:
        mode = AdjustmentMode(mode)
    except ValueError:
        raise ValidationError(f"mode must be one of: {', '.join(m.value for m in AdjustmentMode)}")

    if mode is AdjustmentMode.ADD:
        new_stock = current + amount
    elif mode is AdjustmentMode.REMOVE:
        new_stock = max(0, current - amount)
    else:
        new_stock = max(0, amount)
    return _normalize(new_stock)


def resolve_reason(reason: str, custom_reason: str | None = None) -> str:
    """
    Map a category to the stored reason text.

    "Other" stores the operator's own text, or "Unspecified Adjustment"
    when none was given. Anything outside the taxonomy is rejected.
    """
    if reason not in ADJUSTMENT_REASONS:
        raise ValidationError(f"reason must be one of: {', '.join(ADJUSTMENT_REASONS)}")
    if reason == REASON_OTHER:
        custom = (custom_reason or "").strip()
        return custom or UNSPECIFIED_REASON
    return reason


def apply_adjustment(
    *,
    product_id: str,
    mode: AdjustmentMode | str,
    amount: int | float,
    reason: str,
    actor: Actor,
    custom_reason: str | None = None,
) -> StockAdjustment:
    """
    Manual add/remove/set with audit.

    Raises:
        ValidationError: unknown mode, non-numeric amount, reason outside taxonomy
        ProductNotFoundError: unknown product id
    """
    amount = require_number(amount, "amount")
    stored_reason = resolve_reason(reason, custom_reason)
    product = require_product(product_id)

    new_stock = compute_new_stock(mode, product.stock, amount)
    return adjust_stock(product.id, new_stock, stored_reason, actor=actor)


def deduct_sale_items(products: list[Product], items: list[CartItem] | tuple[CartItem, ...]) -> list[Product]:
    """
    Subtract each line's base-unit quantity from the matching product in products.

    Mutates and returns products; the caller persists them. A line whose
    product has since been deleted from the catalog is skipped.
    """
    by_id = {p.id: p for p in products}

    for item in items:
        snapshot = item.product
        base_qty = to_base_quantity(
            base_unit=snapshot.base_unit,
            conversions=snapshot.conversions,
            unit=item.selected_unit,
            qty=item.qty,
        )

        product = by_id.get(snapshot.id)
        if product is None:
            current_app.logger.warning(
                "Sale line for %s skipped: product no longer in catalog", snapshot.id
            )
            continue

        product.stock = _normalize(product.stock - base_qty)
        current_app.logger.info(
            "Sale deducted %s %s from %s (stock now %s)",
            base_qty, snapshot.base_unit, product.id, product.stock,
        )
        if product.stock < 0:
            current_app.logger.warning("Product %s oversold; stock is %s", product.id, product.stock)

    return products
