from omnimarket.services import ledger_service, products_service, sales_service, store_service


def test_system_init_persists_starter_data(runner):
    result = runner.invoke(args=["system", "init"])
    assert result.exit_code == 0, result.output
    assert "PASS Persisted starter catalog" in result.output

    again = runner.invoke(args=["system", "init"])
    assert "PASS Using existing catalog" in again.output


def test_catalog_list_and_search(runner):
    result = runner.invoke(args=["catalog", "list", "--branch", "B001", "--search", "indomie"])
    assert result.exit_code == 0, result.output
    assert "Indomie Goreng" in result.output
    assert "Kopi Kapal Api Mix" not in result.output


def test_add_unit_resolves_against_existing_unit(runner):
    result = runner.invoke(args=[
        "catalog", "add-unit", "P001",
        "--name", "Slop", "--reference", "Renceng", "--multiplier", "12", "--price", "160000",
    ])
    assert result.exit_code == 0, result.output
    assert products_service.require_product("P001").find_conversion("Slop").quantity == 120


def test_add_unit_with_unknown_reference_fails(runner):
    result = runner.invoke(args=[
        "catalog", "add-unit", "P001",
        "--name", "Slop", "--reference", "Bal", "--multiplier", "2", "--price", "1000",
    ])
    assert result.exit_code != 0
    assert "Reference unit 'Bal' not found" in result.output


def test_edit_and_remove_unit(runner):
    result = runner.invoke(args=[
        "catalog", "edit-unit", "P001", "0",
        "--name", "Renceng", "--multiplier", "12", "--price", "17000",
    ])
    assert result.exit_code == 0, result.output
    assert products_service.require_product("P001").conversions[0].quantity == 12

    result = runner.invoke(args=["catalog", "remove-unit", "P001", "0"])
    assert result.exit_code == 0, result.output
    assert products_service.require_product("P001").unit_names() == ["Sachet", "Karton"]


def test_create_and_delete_product(runner):
    result = runner.invoke(args=[
        "catalog", "create", "--branch", "B002", "--name", "Teh Botol",
        "--base-unit", "Botol", "--base-price", "4000", "--stock", "48",
    ])
    assert result.exit_code == 0, result.output
    created = products_service.list_by_branch("B002")[0]
    assert created.stock == 48

    result = runner.invoke(args=["catalog", "delete", created.id])
    assert "PASS Deleted product" in result.output
    result = runner.invoke(args=["catalog", "delete", created.id])
    assert result.exit_code == 0
    assert "SKIP" in result.output


def test_inventory_adjust_and_history(runner):
    result = runner.invoke(args=[
        "inventory", "adjust", "P002", "--mode", "remove", "--amount", "15",
        "--reason", "Expired", "--actor", "Budi",
    ])
    assert result.exit_code == 0, result.output
    assert "200 -> 185" in result.output

    history = ledger_service.list_adjustments()
    assert [(a.adjusted_by, a.delta) for a in history] == [("Budi", -15)]

    result = runner.invoke(args=["inventory", "history", "--product", "P002"])
    assert "Indomie Goreng" in result.output


def test_inventory_adjust_rejects_negative_amount(runner):
    result = runner.invoke(args=["inventory", "adjust", "P002", "--mode", "add", "--amount", "-5"])
    assert result.exit_code != 0
    assert products_service.require_product("P002").stock == 200


def test_low_stock_limit(runner):
    result = runner.invoke(args=["inventory", "low-stock-limit", "25"])
    assert result.exit_code == 0, result.output
    assert "Low-stock limit: 25" in result.output
    assert products_service.get_low_stock_limit() == 25


def test_checkout_cash(runner):
    result = runner.invoke(args=[
        "sales", "checkout", "--item", "P001:Karton:1", "--item", "P002::2",
        "--method", "CASH", "--cash", "200000", "--actor", "Ani",
    ])
    assert result.exit_code == 0, result.output
    assert "TOTAL 177000" in result.output
    assert "CHANGE 23000" in result.output

    transactions = sales_service.list_transactions("B001")
    assert len(transactions) == 1
    assert transactions[0].cashier_name == "Ani"
    assert products_service.require_product("P001").stock == 380


def test_checkout_insufficient_cash_fails(runner):
    result = runner.invoke(args=["sales", "checkout", "--item", "P001:Karton:1", "--cash", "1000"])
    assert result.exit_code != 0
    assert sales_service.list_transactions() == []


def test_checkout_bad_item_format(runner):
    result = runner.invoke(args=["sales", "checkout", "--item", "P001-Karton"])
    assert result.exit_code != 0


def test_branches_and_visits(runner):
    result = runner.invoke(args=["branches", "add", "--name", "Cabang Medan", "--city", "Medan"])
    assert result.exit_code == 0, result.output
    assert any(b.name == "Cabang Medan" for b in store_service.list_branches())

    result = runner.invoke(args=[
        "visits", "record", "--shop", "Toko Maju", "--lat", "-6.2", "--lng", "106.8", "--actor", "Rina",
    ])
    assert result.exit_code == 0, result.output
    result = runner.invoke(args=["visits", "list", "--motorist", "Rina"])
    assert "Toko Maju" in result.output


def test_reset_db_requires_confirmation(runner):
    result = runner.invoke(args=["system", "reset-db"], input="n\n")
    assert result.exit_code != 0
