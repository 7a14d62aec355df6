# Overview: Unit conversion resolver; turns "N of <reference unit> = 1 <new unit>" into base-unit quantities.

from __future__ import annotations

from typing import Sequence

from ..models import UnitConversion
from ..validation import (
    ValidationError,
    ReferenceNotFoundError,
    DuplicateUnitNameError,
    UnitNotFoundError,
    require_text,
    require_number,
)
"""
Conversion Invariants (authoritative)

- Stored UnitConversion.quantity is ALWAYS in base units.
- An operator may define a unit relative to the base unit or to any
  conversion that already exists; the relation is collapsed at write time:
      quantity = multiplier                      (reference == base unit)
      quantity = multiplier * reference.quantity (reference == conversion)
- Because a unit can only reference units that already exist, no cycle
  can form and no graph walk is ever needed at sale time.
- Resolution is a one-time snapshot: editing an intermediate unit later does
  NOT update units that were defined relative to it.
- Names are unique per product, case-insensitively, and never equal the
  base unit. An edited unit may keep its own name.
"""


def _ensure_unique_name(
    name: str,
    base_unit: str,
    conversions: Sequence[UnitConversion],
    editing_index: int | None,
) -> None:
    folded = name.casefold()
    if folded == base_unit.casefold():
        raise DuplicateUnitNameError(f"Unit name '{name}' is the base unit")
    for idx, conv in enumerate(conversions):
        if idx == editing_index:
            continue
        if conv.name.casefold() == folded:
            raise DuplicateUnitNameError(f"Unit name '{name}' already exists")


def resolve_conversion(
    *,
    name: str,
    reference_unit: str,
    multiplier: int | float,
    price: int | float,
    base_unit: str,
    conversions: Sequence[UnitConversion],
    editing_index: int | None = None,
) -> UnitConversion:
    """
    Resolve a new or edited unit to a base-unit UnitConversion.

    Pure: the caller stores the result (append on add, replace on edit).

    Raises:
        ValidationError: blank name, multiplier <= 0, price <= 0
        DuplicateUnitNameError: name collides with base unit or another unit
        ReferenceNotFoundError: reference_unit is neither base unit nor a conversion
    """
    name = require_text(name, "name")
    multiplier = require_number(multiplier, "multiplier", greater_than=0)
    price = require_number(price, "price", greater_than=0)

    _ensure_unique_name(name, base_unit, conversions, editing_index)

    if reference_unit == base_unit:
        quantity = multiplier
    else:
        # A unit being edited cannot be defined in terms of itself
        reference = next(
            (c for idx, c in enumerate(conversions) if c.name == reference_unit and idx != editing_index),
            None,
        )
        if reference is None:
            raise ReferenceNotFoundError(f"Reference unit '{reference_unit}' not found")
        quantity = multiplier * reference.quantity

    if isinstance(quantity, float) and quantity.is_integer():
        quantity = int(quantity)

    return UnitConversion(name=name, quantity=quantity, price=price)


def add_conversion(
    conversions: Sequence[UnitConversion],
    *,
    base_unit: str,
    name: str,
    reference_unit: str,
    multiplier: int | float,
    price: int | float,
) -> list[UnitConversion]:
    resolved = resolve_conversion(
        name=name,
        reference_unit=reference_unit,
        multiplier=multiplier,
        price=price,
        base_unit=base_unit,
        conversions=conversions,
    )
    return list(conversions) + [resolved]


def edit_conversion(
    conversions: Sequence[UnitConversion],
    index: int,
    *,
    base_unit: str,
    name: str,
    reference_unit: str,
    multiplier: int | float,
    price: int | float,
) -> list[UnitConversion]:
    """Replace the unit at index in place; display order is preserved."""
    _check_index(conversions, index)
    resolved = resolve_conversion(
        name=name,
        reference_unit=reference_unit,
        multiplier=multiplier,
        price=price,
        base_unit=base_unit,
        conversions=conversions,
        editing_index=index,
    )
    updated = list(conversions)
    updated[index] = resolved
    return updated


def remove_conversion(conversions: Sequence[UnitConversion], index: int) -> list[UnitConversion]:
    _check_index(conversions, index)
    return [c for i, c in enumerate(conversions) if i != index]


def describe_for_edit(conversion: UnitConversion, base_unit: str) -> dict:
    """
    Form values for re-editing a unit.

    Editing always re-opens relative to the base unit, showing the resolved
    quantity, since the original reference unit is not stored.
    """
    return {
        "name": conversion.name,
        "reference_unit": base_unit,
        "multiplier": conversion.quantity,
        "price": conversion.price,
    }


def reference_choices(base_unit: str, conversions: Sequence[UnitConversion]) -> list[str]:
    return [base_unit] + [c.name for c in conversions]


def to_base_quantity(
    *,
    base_unit: str,
    conversions: Sequence[UnitConversion],
    unit: str,
    qty: int | float,
) -> int | float:
    """qty of unit, expressed in base units."""
    if unit == base_unit:
        return qty
    conv = next((c for c in conversions if c.name == unit), None)
    if conv is None:
        raise UnitNotFoundError(f"Unit '{unit}' is not defined for this product")
    return qty * conv.quantity


def _check_index(conversions: Sequence[UnitConversion], index: int) -> None:
    if index < 0 or index >= len(conversions):
        raise ValidationError(f"conversion index {index} out of range")
