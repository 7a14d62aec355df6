# Overview: Checkout; turns a cart into a write-once Transaction and deducts stock.

from __future__ import annotations

from typing import Iterable

from flask import current_app

from ..extensions import db
from ..models import Actor, PaymentMethod, Transaction
from ..validation import PaymentError, ValidationError, optional_number
from . import storage_service
from .storage_service import KEY_TRANSACTIONS
from .cart_service import Cart, compute_change, is_payment_valid
from .document_service import next_document_number, PREFIX_TRANSACTION
from .inventory_service import deduct_sale_items
from .products_service import list_all_products, require_product, save_products
from omnimarket.time_utils import utcnow, to_utc_z


def _payment_method(value: PaymentMethod | str) -> PaymentMethod:
    try:
        return PaymentMethod(value)
    except ValueError:
        raise ValidationError("payment_method must be CASH or QRIS")


def build_cart(selections: Iterable[tuple[str, str | None, int | float]]) -> Cart:
    """
    Cart from (product_id, unit, qty) selections, snapshotting the live catalog.

    unit None means the product's base unit.
    """
    cart = Cart()
    for product_id, unit, qty in selections:
        product = require_product(product_id)
        cart.add_selection(product, unit if unit else product.base_unit, qty)
    return cart


def checkout(
    cart: Cart,
    *,
    actor: Actor,
    payment_method: PaymentMethod | str,
    cash_received: int | float | None = None,
) -> Transaction:
    """
    Finalize a sale.

    - Writes one Transaction (id TX-<millis>) for actor's branch
    - Deducts every line's base-unit quantity from the catalog, using the
      conversions frozen on the line (see inventory_service.deduct_sale_items)
    - Both writes commit together

    Raises:
        PaymentError: empty cart, or CASH with cash_received < total
        ValidationError: unknown payment method, or non-numeric/negative cash for CASH
    """
    if cart.is_empty():
        raise PaymentError("Cart is empty")

    method = _payment_method(payment_method)
    total = cart.total
    # QRIS ignores cash entirely
    cash = optional_number(cash_received, "cash_received", minimum=0) if method is PaymentMethod.CASH else None

    if not is_payment_valid(method, total, cash):
        raise PaymentError(f"Cash received {cash} does not cover total {total}")

    items = cart.items
    transaction = Transaction(
        id=next_document_number(prefix=PREFIX_TRANSACTION, existing_ids=storage_service.record_ids(KEY_TRANSACTIONS)),
        branch_id=actor.branch_id,
        date=to_utc_z(utcnow()),
        items=items,
        total=total,
        cashier_name=actor.name,
        payment_method=method,
        cash_received=cash if method is PaymentMethod.CASH else None,
        change=compute_change(total, cash) if method is PaymentMethod.CASH else None,
    )

    try:
        storage_service.append_record(KEY_TRANSACTIONS, transaction, commit=False)
        save_products(deduct_sale_items(list_all_products(), items), commit=False)
        db.session.commit()
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Checkout failed for cart of %s lines", len(items))
        raise

    current_app.logger.info(
        "Transaction %s committed: total=%s method=%s cashier=%s",
        transaction.id, transaction.total, method.value, actor.name,
    )
    return transaction


def list_transactions(branch_id: str | None = None) -> list[Transaction]:
    transactions = storage_service.load_records(KEY_TRANSACTIONS, Transaction.from_dict)
    if branch_id is not None:
        transactions = [t for t in transactions if t.branch_id == branch_id]
    return transactions


def sales_summary(branch_id: str | None = None) -> dict:
    """Dashboard metrics: revenue, transaction count and average ticket."""
    transactions = list_transactions(branch_id)
    revenue = sum(t.total for t in transactions)
    count = len(transactions)
    return {
        "totalRevenue": revenue,
        "transactionCount": count,
        "averageTicket": (revenue / count) if count else 0,
    }


def preview_payment(cart: Cart, payment_method: PaymentMethod | str, cash_received: int | float | None = None) -> dict:
    """Grand total, change and validity for the payment screen, without committing."""
    method = _payment_method(payment_method)
    total = cart.total
    if method is not PaymentMethod.CASH:
        return {"grandTotal": total, "change": None, "isPaymentValid": True}

    cash = optional_number(cash_received, "cash_received", minimum=0) or 0
    return {
        "grandTotal": total,
        "change": compute_change(total, cash),
        "isPaymentValid": is_payment_valid(method, total, cash),
    }
