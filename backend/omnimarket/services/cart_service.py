# Overview: Cart pricing engine; pure line/cart totals over product snapshots.

from __future__ import annotations

from dataclasses import replace
from typing import Iterable

from ..models import Product, CartItem, PaymentMethod
from ..validation import ValidationError, UnitNotFoundError, require_number
"""
Cart Pricing Rules (authoritative)

- unit price = product.base_price when the selected unit is the base unit,
  else the matching conversion's fixed price. Never derived from
  quantity * base_price, so switching units back and forth is lossless.
- line subtotal = qty * unit price; cart total = sum of subtotals.
- Changing a line's unit re-prices that line only; qty is kept.
- qty never drops below 1. Removing a line is a separate explicit action.
- No catalog access: every computation reads the cart line's own snapshot.
"""

MIN_LINE_QTY = 1


def price_for_selection(product: Product, selected_unit: str) -> int | float:
    """
    Unit price of one selected_unit of product.

    Raises:
        UnitNotFoundError: selected_unit is neither the base unit nor a conversion
    """
    if selected_unit == product.base_unit:
        return product.base_price
    conv = product.find_conversion(selected_unit)
    if conv is None:
        raise UnitNotFoundError(f"Unit '{selected_unit}' is not defined for {product.name}")
    return conv.price


def line_subtotal(qty: int | float, unit_price: int | float) -> int | float:
    return qty * unit_price


def cart_total(items: Iterable[CartItem]) -> int | float:
    return sum(item.subtotal for item in items)


def snapshot_item(product: Product, selected_unit: str | None = None, qty: int | float = MIN_LINE_QTY) -> CartItem:
    """Freeze product into a new cart line priced for selected_unit (base unit by default)."""
    qty = require_number(qty, "qty", minimum=MIN_LINE_QTY)
    snapshot = product.snapshot()
    unit = selected_unit if selected_unit is not None else snapshot.base_unit
    unit_price = price_for_selection(snapshot, unit)
    return CartItem(
        product=snapshot,
        selected_unit=unit,
        qty=qty,
        unit_price=unit_price,
        subtotal=line_subtotal(qty, unit_price),
    )


def compute_change(total: int | float, cash_received: int | float) -> int | float:
    return max(0, cash_received - total)


def is_payment_valid(
    method: PaymentMethod | str,
    total: int | float,
    cash_received: int | float | None = None,
) -> bool:
    """QRIS is always accepted; CASH needs cash_received >= total."""
    method = PaymentMethod(method)
    if method is PaymentMethod.QRIS:
        return True
    return cash_received is not None and cash_received >= total


class Cart:
    """
    In-memory cart for one checkout. Not persisted.

    Lines are addressed by position. Every mutation replaces the affected
    CartItem rather than editing it.
    """

    def __init__(self, items: Iterable[CartItem] = ()):
        self._items: list[CartItem] = list(items)

    @property
    def items(self) -> tuple[CartItem, ...]:
        return tuple(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def is_empty(self) -> bool:
        return not self._items

    @property
    def total(self) -> int | float:
        return cart_total(self._items)

    @property
    def item_count(self) -> int | float:
        return sum(item.qty for item in self._items)

    def add_product(self, product: Product) -> CartItem:
        """
        Add one base unit of product.

        A line for the same product already in its base unit absorbs the
        add (qty + 1) instead of opening a second line.
        """
        for idx, item in enumerate(self._items):
            if item.product_id == product.id and item.selected_unit == item.product.base_unit:
                return self.update_qty(idx, 1)

        item = snapshot_item(product)
        self._items.append(item)
        return item

    def add_selection(self, product: Product, selected_unit: str, qty: int | float) -> CartItem:
        """Open a new line with an explicit unit and qty."""
        item = snapshot_item(product, selected_unit, qty)
        self._items.append(item)
        return item

    def update_qty(self, index: int, delta: int | float) -> CartItem:
        item = self._line(index)
        qty = max(MIN_LINE_QTY, item.qty + delta)
        updated = replace(item, qty=qty, subtotal=line_subtotal(qty, item.unit_price))
        self._items[index] = updated
        return updated

    def change_unit(self, index: int, unit_name: str) -> CartItem:
        item = self._line(index)
        unit_price = price_for_selection(item.product, unit_name)
        updated = replace(
            item,
            selected_unit=unit_name,
            unit_price=unit_price,
            subtotal=line_subtotal(item.qty, unit_price),
        )
        self._items[index] = updated
        return updated

    def remove(self, index: int) -> CartItem:
        item = self._line(index)
        del self._items[index]
        return item

    def clear(self) -> None:
        self._items.clear()

    def _line(self, index: int) -> CartItem:
        if index < 0 or index >= len(self._items):
            raise ValidationError(f"cart line {index} out of range")
        return self._items[index]
