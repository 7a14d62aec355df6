import pytest

from omnimarket.models import Actor, PaymentMethod
from omnimarket.services import ledger_service, products_service, sales_service, storage_service
from omnimarket.services.cart_service import Cart
from omnimarket.services.inventory_service import apply_adjustment
from omnimarket.services.storage_service import KEY_TRANSACTIONS
from omnimarket.validation import PaymentError, ProductNotFoundError, UnitNotFoundError, ValidationError


def test_sell_one_karton_then_restock(storage, cashier):
    cart = sales_service.build_cart([("P001", "Karton", 1)])
    transaction = sales_service.checkout(cart, actor=cashier, payment_method="QRIS")

    assert transaction.total == 170000
    assert transaction.id.startswith("TX-")
    assert products_service.require_product("P001").stock == 380
    # Sales are not audited
    assert ledger_service.list_adjustments() == []

    adjustment = apply_adjustment(product_id="P001", mode="add", amount=50, reason="New Stock In", actor=cashier)
    assert products_service.require_product("P001").stock == 430
    assert adjustment.delta == 50
    assert len(ledger_service.list_adjustments()) == 1


def test_cash_checkout_records_change(storage, cashier):
    cart = sales_service.build_cart([("P002", None, 5), ("P001", "Renceng", 1), ("P001", None, 1)])
    assert cart.total == 17500 + 14500 + 1500

    transaction = sales_service.checkout(cart, actor=cashier, payment_method=PaymentMethod.CASH, cash_received=50000)
    assert transaction.payment_method is PaymentMethod.CASH
    assert transaction.cash_received == 50000
    assert transaction.change == 50000 - 33500
    assert transaction.cashier_name == "Ani"
    assert transaction.branch_id == "B001"

    assert products_service.require_product("P001").stock == 500 - 10 - 1
    assert products_service.require_product("P002").stock == 195


def test_qris_checkout_has_no_cash_fields(storage, cashier):
    transaction = sales_service.checkout(
        sales_service.build_cart([("P002", None, 1)]),
        actor=cashier,
        payment_method="QRIS",
    )
    stored = storage_service.get_value(KEY_TRANSACTIONS)[0]
    assert transaction.cash_received is None
    assert "cashReceived" not in stored
    assert "change" not in stored
    assert stored["items"][0]["selectedUnit"] == "Bungkus"
    assert stored["items"][0]["name"] == "Indomie Goreng"


def test_insufficient_cash_changes_nothing(storage, cashier):
    cart = sales_service.build_cart([("P001", "Karton", 1)])
    with pytest.raises(PaymentError):
        sales_service.checkout(cart, actor=cashier, payment_method="CASH", cash_received=169999)
    with pytest.raises(PaymentError):
        sales_service.checkout(cart, actor=cashier, payment_method="CASH")

    assert products_service.require_product("P001").stock == 500
    assert sales_service.list_transactions() == []


def test_empty_cart_is_refused(storage, cashier):
    with pytest.raises(PaymentError):
        sales_service.checkout(Cart(), actor=cashier, payment_method="QRIS")


def test_unknown_payment_method(storage, cashier):
    with pytest.raises(ValidationError):
        sales_service.checkout(sales_service.build_cart([("P001", None, 1)]), actor=cashier, payment_method="CARD")


def test_build_cart_validates_selection(storage):
    with pytest.raises(ProductNotFoundError):
        sales_service.build_cart([("P404", None, 1)])
    with pytest.raises(UnitNotFoundError):
        sales_service.build_cart([("P001", "Pallet", 1)])


def test_oversell_drives_stock_negative(storage, cashier):
    cart = sales_service.build_cart([("P002", "Karton", 6)])
    sales_service.checkout(cart, actor=cashier, payment_method="QRIS")
    assert products_service.require_product("P002").stock == -40


def test_deduction_uses_conversion_captured_in_cart(storage, cashier):
    cart = sales_service.build_cart([("P001", "Karton", 2)])
    products_service.update_product("P001", {"conversions": []})

    sales_service.checkout(cart, actor=cashier, payment_method="QRIS")
    assert products_service.require_product("P001").stock == 260


def test_transactions_and_summary_by_branch(storage, cashier):
    bandung = Actor(name="Sari", branch_id="B002")
    sales_service.checkout(sales_service.build_cart([("P001", None, 10)]), actor=cashier, payment_method="QRIS")
    sales_service.checkout(sales_service.build_cart([("P002", None, 2)]), actor=cashier, payment_method="QRIS")
    sales_service.checkout(sales_service.build_cart([("P002", None, 1)]), actor=bandung, payment_method="QRIS")

    assert [t.total for t in sales_service.list_transactions("B001")] == [15000, 7000]
    assert sales_service.sales_summary("B001") == {
        "totalRevenue": 22000,
        "transactionCount": 2,
        "averageTicket": 11000,
    }
    assert sales_service.sales_summary("B999") == {"totalRevenue": 0, "transactionCount": 0, "averageTicket": 0}

    stored = sales_service.list_transactions()
    assert len(stored) == 3
    assert stored[0].items[0].product.id == "P001"


def test_preview_payment(storage):
    cart = sales_service.build_cart([("P002", None, 5), ("P001", None, 5)])
    assert cart.total == 25000
    assert sales_service.preview_payment(cart, "CASH", 50000) == {
        "grandTotal": 25000,
        "change": 25000,
        "isPaymentValid": True,
    }
    assert sales_service.preview_payment(cart, "CASH", 20000)["isPaymentValid"] is False
    assert sales_service.preview_payment(cart, "QRIS")["isPaymentValid"] is True


def test_qris_ignores_cash_received(storage, cashier):
    transaction = sales_service.checkout(
        sales_service.build_cart([("P002", None, 1)]),
        actor=cashier,
        payment_method="QRIS",
        cash_received=-5,
    )
    assert transaction.cash_received is None
    assert transaction.change is None


def test_negative_cash_is_rejected_for_cash_payment(storage, cashier):
    with pytest.raises(ValidationError):
        sales_service.checkout(
            sales_service.build_cart([("P002", None, 1)]),
            actor=cashier,
            payment_method="CASH",
            cash_received=-5,
        )


def test_preview_payment_unknown_method(storage):
    cart = sales_service.build_cart([("P002", None, 1)])
    with pytest.raises(ValidationError):
        sales_service.preview_payment(cart, "CARD", 5000)
    assert sales_service.preview_payment(cart, "QRIS", -1)["isPaymentValid"] is True
