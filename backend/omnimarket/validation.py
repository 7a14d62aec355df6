from __future__ import annotations

from typing import Any

# Highest stock or price value accepted from an operator; keeps stored JSON sane
MAX_AMOUNT = 999_999_999_999


class ValidationError(ValueError):
    """Operator input problem (missing field, non-numeric amount, ...)."""


class InventoryError(ValueError):
    """Base for catalog, conversion and pricing logic failures."""


class ReferenceNotFoundError(InventoryError):
    """A conversion was defined relative to a unit the product does not have."""


class DuplicateUnitNameError(InventoryError):
    """A conversion name collides with the base unit or another conversion."""


class UnitNotFoundError(InventoryError):
    """A selected unit matches neither the base unit nor any conversion."""


class ProductNotFoundError(InventoryError):
    """A mutation targeted a product id that is not in the catalog."""


class PaymentError(ValueError):
    """Checkout refused: empty cart or insufficient cash."""


def require_text(value: Any, field: str) -> str:
    if value is None:
        raise ValidationError(f"{field} is required")
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    stripped = value.strip()
    if not stripped:
        raise ValidationError(f"{field} is required")
    return stripped


def optional_text(value: Any, field: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    return value


def require_number(
    value: Any,
    field: str,
    *,
    minimum: float | None = None,
    greater_than: float | None = None,
    maximum: float | None = None,
) -> int | float:
    """
    Coerce a number (or numeric string) and check its lower bound.

    Integral values come back as int so stored JSON keeps whole quantities
    whole ("500", not "500.0").
    """
    if value is None:
        raise ValidationError(f"{field} is required")

    # bool is an int subclass; never accept it as a quantity
    if isinstance(value, bool):
        raise ValidationError(f"{field} must be a number")

    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} is required")
        try:
            value = float(stripped)
        except ValueError:
            raise ValidationError(f"{field} must be a number")

    if not isinstance(value, (int, float)):
        raise ValidationError(f"{field} must be a number")

    if value != value or value in (float("inf"), float("-inf")):
        raise ValidationError(f"{field} must be a finite number")

    if isinstance(value, float) and value.is_integer():
        value = int(value)

    if minimum is not None and value < minimum:
        raise ValidationError(f"{field} must be >= {minimum}")
    if greater_than is not None and value <= greater_than:
        raise ValidationError(f"{field} must be > {greater_than}")
    if maximum is not None and value > maximum:
        raise ValidationError(f"{field} must be <= {maximum}")
    if abs(value) > MAX_AMOUNT:
        raise ValidationError(f"{field} exceeds maximum allowed value")

    return value


def optional_number(value: Any, field: str, **bounds) -> int | float | None:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return require_number(value, field, **bounds)
