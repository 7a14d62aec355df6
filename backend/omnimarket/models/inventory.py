from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..validation import ValidationError, require_text, require_number, optional_text


@dataclass(frozen=True)
class UnitConversion:
    """
    A named alternate unit of a product, e.g. "Karton = 120 Sachet @ 170000".

    quantity is ALWAYS in base units. Relative definitions ("1 Karton =
    12 Renceng") are resolved by conversion_service before a UnitConversion
    is ever built, so readers never walk a chain.
    """
    name: str
    quantity: int | float
    price: int | float

    def to_dict(self) -> dict:
        return {"name": self.name, "quantity": self.quantity, "price": self.price}

    @classmethod
    def from_dict(cls, data: dict) -> "UnitConversion":
        if not isinstance(data, dict):
            raise ValidationError("conversion must be an object")
        return cls(
            name=require_text(data.get("name"), "conversion.name"),
            quantity=require_number(data.get("quantity"), "conversion.quantity", greater_than=0),
            price=require_number(data.get("price"), "conversion.price", minimum=0),
        )


@dataclass
class Product:
    """
    Catalog entry, owned by one branch.

    STOCK: counted in base_unit only. Manual adjustments floor it at zero;
    sale deductions do not, so a stored product may carry negative stock
    after an oversell.

    SKU: display identifier only. Duplicate SKUs are permitted, within a
    branch and across branches; id is the identity.
    """
    id: str
    name: str
    sku: str
    category: str
    branch_id: str
    base_unit: str
    base_price: int | float
    stock: int | float
    conversions: list[UnitConversion] = field(default_factory=list)
    image: str | None = None

    def find_conversion(self, unit_name: str) -> UnitConversion | None:
        for conv in self.conversions:
            if conv.name == unit_name:
                return conv
        return None

    def unit_names(self) -> list[str]:
        return [self.base_unit] + [c.name for c in self.conversions]

    def snapshot(self) -> "Product":
        """Detached copy; later catalog edits never reach it."""
        return copy.deepcopy(self)

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "sku": self.sku,
            "category": self.category,
            "branchId": self.branch_id,
            "baseUnit": self.base_unit,
            "basePrice": self.base_price,
            "stock": self.stock,
            "conversions": [c.to_dict() for c in self.conversions],
        }
        if self.image is not None:
            data["image"] = self.image
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Product":
        if not isinstance(data, dict):
            raise ValidationError("product must be an object")
        raw_conversions = data.get("conversions") or []
        if not isinstance(raw_conversions, list):
            raise ValidationError("conversions must be a list")
        return cls(
            id=require_text(data.get("id"), "id"),
            name=require_text(data.get("name"), "name"),
            sku=str(data.get("sku") or ""),
            category=str(data.get("category") or ""),
            branch_id=require_text(data.get("branchId"), "branchId"),
            base_unit=require_text(data.get("baseUnit"), "baseUnit"),
            base_price=require_number(data.get("basePrice"), "basePrice", minimum=0),
            stock=require_number(data.get("stock"), "stock"),
            conversions=[UnitConversion.from_dict(c) for c in raw_conversions],
            image=optional_text(data.get("image"), "image"),
        )


class AdjustmentMode(str, Enum):
    ADD = "add"
    REMOVE = "remove"
    SET = "set"


REASON_NEW_STOCK = "New Stock In"
REASON_DAMAGED = "Damaged Goods"
REASON_EXPIRED = "Expired"
REASON_STOCKTAKE = "Stocktake Correction"
REASON_INTERNAL_USE = "Internal Use"
REASON_OTHER = "Other"

# Closed taxonomy; "Other" is the escape hatch for free text
ADJUSTMENT_REASONS = (
    REASON_NEW_STOCK,
    REASON_DAMAGED,
    REASON_EXPIRED,
    REASON_STOCKTAKE,
    REASON_INTERNAL_USE,
    REASON_OTHER,
)

UNSPECIFIED_REASON = "Unspecified Adjustment"


@dataclass(frozen=True)
class StockAdjustment:
    """
    Immutable audit record of one manual stock change.

    APPEND-ONLY: never updated or deleted once written. product_name is a
    snapshot taken at adjustment time and does not follow later renames.
    """
    id: str
    product_id: str
    product_name: str
    branch_id: str
    date: str
    old_stock: int | float
    new_stock: int | float
    delta: int | float
    reason: str
    adjusted_by: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "productId": self.product_id,
            "productName": self.product_name,
            "branchId": self.branch_id,
            "date": self.date,
            "oldStock": self.old_stock,
            "newStock": self.new_stock,
            "delta": self.delta,
            "reason": self.reason,
            "adjustedBy": self.adjusted_by,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StockAdjustment":
        if not isinstance(data, dict):
            raise ValidationError("stock adjustment must be an object")
        return cls(
            id=require_text(data.get("id"), "id"),
            product_id=require_text(data.get("productId"), "productId"),
            product_name=str(data.get("productName") or ""),
            branch_id=str(data.get("branchId") or ""),
            date=require_text(data.get("date"), "date"),
            old_stock=require_number(data.get("oldStock"), "oldStock"),
            new_stock=require_number(data.get("newStock"), "newStock"),
            delta=require_number(data.get("delta"), "delta"),
            reason=str(data.get("reason") or ""),
            adjusted_by=str(data.get("adjustedBy") or ""),
        )
