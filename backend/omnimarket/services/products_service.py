# backend/omnimarket/services/products_service.py
"""
Product Catalog Store

BRANCH SCOPING: every product belongs to exactly one branch (branch_id).
Listing is always branch-scoped; upsert/delete/adjust address products by id.

IDENTITY: products are matched by id, never by SKU. Duplicate SKUs are
permitted and are NOT rejected here.

STOCK: catalog edits never touch stock. Stock changes go through
adjust_stock() (audited) or the sale deduction in inventory_service.
"""
from __future__ import annotations

from flask import current_app

from ..extensions import db
from ..models import Product, UnitConversion, StockAdjustment, Actor
from ..validation import (
    ValidationError,
    DuplicateUnitNameError,
    ProductNotFoundError,
    require_text,
    require_number,
    optional_text,
)
from . import storage_service
from .storage_service import KEY_PRODUCTS, KEY_LOW_STOCK_LIMIT
from .document_service import next_document_number, PREFIX_PRODUCT
from .ledger_service import append_adjustment

PRODUCT_MUTABLE_FIELDS = {"name", "sku", "category", "base_unit", "base_price", "conversions", "image"}

STARTER_CATALOG = [
    {
        "id": "P001",
        "name": "Kopi Kapal Api Mix",
        "sku": "8991001",
        "category": "Beverage",
        "branchId": "B001",
        "baseUnit": "Sachet",
        "basePrice": 1500,
        "stock": 500,
        "conversions": [
            {"name": "Renceng", "quantity": 10, "price": 14500},
            {"name": "Karton", "quantity": 120, "price": 170000},
        ],
        "image": "https://picsum.photos/200",
    },
    {
        "id": "P002",
        "name": "Indomie Goreng",
        "sku": "8992002",
        "category": "Food",
        "branchId": "B001",
        "baseUnit": "Bungkus",
        "basePrice": 3500,
        "stock": 200,
        "conversions": [
            {"name": "Karton", "quantity": 40, "price": 135000},
        ],
        "image": "https://picsum.photos/201",
    },
]


def starter_catalog() -> list[Product]:
    return [Product.from_dict(p) for p in STARTER_CATALOG]


def _default_catalog() -> list[Product]:
    if current_app.config.get("SEED_STARTER_CATALOG", True):
        return starter_catalog()
    return []


def list_all_products() -> list[Product]:
    """Every product in every branch, in insertion order."""
    return storage_service.load_records(KEY_PRODUCTS, Product.from_dict, default=_default_catalog)


def save_products(products: list[Product], *, commit: bool = True) -> None:
    storage_service.save_records(KEY_PRODUCTS, products, commit=commit)


def _matches_search(product: Product, search: str) -> bool:
    # Name match ignores case; SKU match is a plain substring test
    return search.casefold() in product.name.casefold() or search in product.sku


def list_by_branch(
    branch_id: str,
    *,
    search: str | None = None,
    low_stock_only: bool = False,
    threshold: int | float | None = None,
) -> list[Product]:
    """
    Branch-scoped product listing.

    Filters narrow the list but never reorder it:
    - search: case-insensitive substring of name, or substring of sku
    - low_stock_only: stock <= threshold (persisted low-stock limit if omitted)
    """
    products = [p for p in list_all_products() if p.branch_id == branch_id]

    if search:
        products = [p for p in products if _matches_search(p, search)]

    if low_stock_only:
        if threshold is None:
            threshold = get_low_stock_limit()
        products = [p for p in products if p.stock <= threshold]

    return products


def low_stock_count(branch_id: str, threshold: int | float | None = None) -> int:
    if threshold is None:
        threshold = get_low_stock_limit()
    return sum(1 for p in list_all_products() if p.branch_id == branch_id and p.stock <= threshold)


def get_product(product_id: str) -> Product | None:
    for p in list_all_products():
        if p.id == product_id:
            return p
    return None


def require_product(product_id: str) -> Product:
    product = get_product(product_id)
    if product is None:
        raise ProductNotFoundError(f"Product {product_id} not found")
    return product


def _check_unit_names(product: Product) -> None:
    seen = {product.base_unit.casefold()}
    for conv in product.conversions:
        folded = conv.name.casefold()
        if folded in seen:
            raise DuplicateUnitNameError(
                f"Unit name '{conv.name}' collides with the base unit or another unit of {product.name}"
            )
        seen.add(folded)


def upsert_product(product: Product) -> Product:
    """
    Insert when id is new, otherwise replace in place (position kept).

    Unit names are checked for catalog integrity; SKU is not.
    """
    _check_unit_names(product)

    products = list_all_products()
    for idx, existing in enumerate(products):
        if existing.id == product.id:
            products[idx] = product
            break
    else:
        products.append(product)

    save_products(products)
    current_app.logger.info("Saved product %s (%s) in branch %s", product.id, product.name, product.branch_id)
    return product


def create_product(
    *,
    branch_id: str,
    name: str,
    base_unit: str,
    base_price: int | float,
    stock: int | float = 0,
    sku: str = "",
    category: str = "",
    conversions: list[UnitConversion] | None = None,
    image: str | None = None,
) -> Product:
    product = Product(
        id=next_document_number(prefix=PREFIX_PRODUCT, existing_ids=(p.id for p in list_all_products())),
        name=require_text(name, "name"),
        sku=(sku or "").strip(),
        category=(category or "").strip(),
        branch_id=require_text(branch_id, "branch_id"),
        base_unit=require_text(base_unit, "base_unit"),
        base_price=require_number(base_price, "base_price", minimum=0),
        stock=require_number(stock, "stock", minimum=0),
        conversions=list(conversions or []),
        image=optional_text(image, "image"),
    )
    return upsert_product(product)


def update_product(product_id: str, patch: dict) -> Product:
    """
    Merge a field patch onto an existing product.

    Only PRODUCT_MUTABLE_FIELDS are honoured; id, branch_id and stock are
    never changed through a catalog edit.

    Raises:
        ProductNotFoundError: unknown id
        ValidationError: bad field value
    """
    product = require_product(product_id)

    for key, value in patch.items():
        if key not in PRODUCT_MUTABLE_FIELDS:
            continue
        if key in ("name", "base_unit"):
            value = require_text(value, key)
        elif key == "base_price":
            value = require_number(value, key, minimum=0)
        elif key in ("sku", "category"):
            value = (value or "").strip()
        elif key == "image":
            value = optional_text(value, key)
        elif key == "conversions":
            if not all(isinstance(c, UnitConversion) for c in value):
                raise ValidationError("conversions must be UnitConversion records")
            value = list(value)
        setattr(product, key, value)

    return upsert_product(product)


def delete_product(product_id: str) -> bool:
    """
    Hard delete. Idempotent: an unknown id is a no-op returning False.
    """
    products = list_all_products()
    remaining = [p for p in products if p.id != product_id]
    if len(remaining) == len(products):
        return False

    save_products(remaining)
    current_app.logger.info("Deleted product %s", product_id)
    return True


def adjust_stock(product_id: str, new_stock: int | float, reason: str, *, actor: Actor) -> StockAdjustment:
    """
    Overwrite a product's stock and append exactly one StockAdjustment.

    new_stock is written as given: flooring at zero is the caller's job
    (see inventory_service.apply_adjustment). delta = new_stock - old stock.
    The stock write and its audit record commit together or not at all.

    Raises:
        ValidationError: non-numeric new_stock or blank reason
        ProductNotFoundError: unknown id
    """
    new_stock = require_number(new_stock, "new_stock")
    reason = require_text(reason, "reason")

    products = list_all_products()
    product = next((p for p in products if p.id == product_id), None)
    if product is None:
        raise ProductNotFoundError(f"Product {product_id} not found")

    old_stock = product.stock
    product.stock = new_stock
    try:
        save_products(products, commit=False)
        adjustment = append_adjustment(
            product=product,
            old_stock=old_stock,
            new_stock=new_stock,
            reason=reason,
            actor=actor,
            commit=False,
        )
        db.session.commit()
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Stock adjustment failed for %s", product_id)
        raise

    current_app.logger.info(
        "Stock adjusted for %s: %s -> %s (%s) by %s",
        product.id, old_stock, new_stock, reason, actor.name,
    )
    return adjustment


def get_low_stock_limit() -> int | float:
    raw = storage_service.get_value(KEY_LOW_STOCK_LIMIT)
    if raw is None:
        return current_app.config.get("DEFAULT_LOW_STOCK_LIMIT", 10)
    return require_number(raw, "low stock limit", minimum=0)


def set_low_stock_limit(value: int | float) -> int | float:
    value = require_number(value, "low stock limit", minimum=0)
    storage_service.set_value(KEY_LOW_STOCK_LIMIT, value)
    return value
