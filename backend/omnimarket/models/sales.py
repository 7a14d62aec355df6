from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from ..validation import ValidationError, require_text, require_number, optional_number
from .inventory import Product

CART_ITEM_FIELDS = ("selectedUnit", "qty", "unitPrice", "subtotal")


class PaymentMethod(str, Enum):
    CASH = "CASH"
    QRIS = "QRIS"


@dataclass(frozen=True)
class CartItem:
    """
    One cart line: a frozen Product snapshot plus the operator's selection.

    The snapshot is taken at add-to-cart time. Pricing and the sale-time
    base-unit deduction both read the snapshot's conversions, never the
    live catalog, so a catalog edit mid-cart changes nothing for this line.
    """
    product: Product
    selected_unit: str
    qty: int | float
    unit_price: int | float
    subtotal: int | float

    @property
    def product_id(self) -> str:
        return self.product.id

    def to_dict(self) -> dict:
        # Persisted shape: product fields flattened alongside the selection
        data = self.product.to_dict()
        data.update({
            "selectedUnit": self.selected_unit,
            "qty": self.qty,
            "unitPrice": self.unit_price,
            "subtotal": self.subtotal,
        })
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CartItem":
        if not isinstance(data, dict):
            raise ValidationError("cart item must be an object")
        product_data = {k: v for k, v in data.items() if k not in CART_ITEM_FIELDS}
        return cls(
            product=Product.from_dict(product_data),
            selected_unit=require_text(data.get("selectedUnit"), "selectedUnit"),
            qty=require_number(data.get("qty"), "qty", minimum=1),
            unit_price=require_number(data.get("unitPrice"), "unitPrice", minimum=0),
            subtotal=require_number(data.get("subtotal"), "subtotal", minimum=0),
        )


@dataclass(frozen=True)
class Transaction:
    """
    A completed sale. Write-once.

    INVARIANTS:
    - total == sum(item.subtotal)
    - CASH: cash_received >= total and change == cash_received - total
    - QRIS: cash_received and change are both None
    """
    id: str
    branch_id: str
    date: str
    items: tuple[CartItem, ...]
    total: int | float
    cashier_name: str
    payment_method: PaymentMethod
    cash_received: int | float | None = None
    change: int | float | None = None

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "branchId": self.branch_id,
            "date": self.date,
            "items": [item.to_dict() for item in self.items],
            "total": self.total,
            "cashierName": self.cashier_name,
            "paymentMethod": self.payment_method.value,
        }
        if self.payment_method is PaymentMethod.CASH:
            data["cashReceived"] = self.cash_received
            data["change"] = self.change
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Transaction":
        if not isinstance(data, dict):
            raise ValidationError("transaction must be an object")
        try:
            method = PaymentMethod(data.get("paymentMethod"))
        except ValueError:
            raise ValidationError("paymentMethod must be CASH or QRIS")
        items = data.get("items") or []
        if not isinstance(items, list):
            raise ValidationError("items must be a list")
        return cls(
            id=require_text(data.get("id"), "id"),
            branch_id=str(data.get("branchId") or ""),
            date=require_text(data.get("date"), "date"),
            items=tuple(CartItem.from_dict(i) for i in items),
            total=require_number(data.get("total"), "total", minimum=0),
            cashier_name=str(data.get("cashierName") or ""),
            payment_method=method,
            cash_received=optional_number(data.get("cashReceived"), "cashReceived"),
            change=optional_number(data.get("change"), "change"),
        )
