import pytest

from conftest import cart_item
from services.committer import OptimisticCommitter, build_cart
from services.errors import UnknownEntityError, ValidationError, WriteError


@pytest.fixture
def committer(store, gateway):
    return OptimisticCommitter(store, gateway)


# ---------------- sales ----------------
def test_sale_totals_and_stock(committer, store, gateway):
    items = [cart_item("v1", 3, 100), cart_item("v2", 1, 250)]

    bill = committer.commit_sale("Ravi", items, discount=50, amount_received=500)

    assert bill.total_amount == 550
    assert bill.final_amount == 500
    assert bill.amount_pending == 0
    assert store.get("variations", "v1").stock == 7
    assert store.get("variations", "v2").stock == 4
    assert store.get("bills", bill.id) == bill

    name, sent_bill, affected = gateway.calls[0]
    assert name == "create_bill"
    assert sent_bill is bill
    assert {v.id: v.stock for v in affected} == {"v1": 7, "v2": 4}


def test_sale_stock_drops_before_remote_write(committer, store, gateway):
    seen = []
    gateway.on_call = lambda name: seen.append(store.get("variations", "v1").stock)

    committer.commit_sale("Ravi", [cart_item("v1", 2, 100)])

    assert seen == [8]


def test_sale_pending_and_final_floor_at_zero(committer):
    bill = committer.commit_sale("Ravi", [cart_item("v1", 1, 100)], discount=150, amount_received=0)
    assert bill.final_amount == 0
    assert bill.amount_pending == 0

    bill = committer.commit_sale("Ravi", [cart_item("v1", 1, 100)], amount_received=40)
    assert bill.amount_pending == 60


def test_sale_stock_is_not_clamped(committer, store):
    committer.commit_sale("Ravi", [cart_item("v2", 8, 250)])
    assert store.get("variations", "v2").stock == -3


def test_sale_repeated_variation_accumulates(committer, store, gateway):
    committer.commit_sale("Ravi", [cart_item("v1", 2, 100), cart_item("v1", 3, 90)])
    assert store.get("variations", "v1").stock == 5
    assert [v.stock for v in gateway.calls[0][2]] == [5]


def test_sale_skips_stock_for_unknown_variation(committer, store, gateway):
    bill = committer.commit_sale("Ravi", [cart_item("gone", 1, 10), cart_item("v1", 1, 100)])
    assert store.get("bills", bill.id) is not None
    assert [v.id for v in gateway.calls[0][2]] == ["v1"]


def test_sale_validation(committer):
    with pytest.raises(ValidationError):
        committer.commit_sale("", [cart_item("v1", 1, 100)])
    with pytest.raises(ValidationError):
        committer.commit_sale("Ravi", [])
    with pytest.raises(ValidationError):
        committer.commit_sale("Ravi", [cart_item("v1", 1, 100)], payment_mode="Barter")


# ---------------- purchases ----------------
def test_purchase_adds_stock_and_overwrites_purchase_price(committer, store, gateway):
    purchase = committer.commit_purchase("Tata Steel", [cart_item("v1", 5, 70)], amount_paid=100)

    v1 = store.get("variations", "v1")
    assert v1.stock == 15
    assert v1.purchase_price == 70
    assert v1.selling_price == 100.0
    assert purchase.total_amount == 350
    assert purchase.amount_pending == 250
    assert gateway.calls[0][0] == "create_purchase"


# ---------------- manual stock ----------------
def test_set_negative_stock_clamps_to_zero(committer, store, gateway):
    committer.adjust_stock("v1", "set", -5)
    assert store.get("variations", "v1").stock == 0
    assert gateway.calls[0][1].stock == 0


def test_add_stock_delta(committer, store):
    committer.adjust_stock("v1", "add", 4)
    assert store.get("variations", "v1").stock == 14
    committer.adjust_stock("v1", "add", -20)
    assert store.get("variations", "v1").stock == 0


def test_adjust_stock_errors(committer):
    with pytest.raises(UnknownEntityError):
        committer.adjust_stock("nope", "add", 1)
    with pytest.raises(ValidationError):
        committer.adjust_stock("v1", "multiply", 2)
    with pytest.raises(ValidationError):
        committer.adjust_stock("v1", "set", "1.5")


# ---------------- categories ----------------
def test_category_list_growth_issues_single_add(committer, store, gateway):
    store.set_categories(["A", "B"])
    assert committer.update_categories(["A", "B", "C"]) == ("add", "C")
    assert gateway.calls == [("add_category", "C")]
    assert store.categories() == ["A", "B", "C"]


def test_category_list_shrink_issues_single_delete(committer, store, gateway):
    store.set_categories(["A", "B", "C"])
    assert committer.update_categories(["A", "C"]) == ("remove", "B")
    assert gateway.calls == [("delete_category", "B")]


def test_category_rename_is_ignored(committer, store, gateway):
    store.set_categories(["A", "B"])
    assert committer.update_categories(["A", "X"]) is None
    assert gateway.calls == []
    assert store.categories() == ["A", "B"]


def test_explicit_category_add_and_remove(committer, store, gateway):
    assert committer.add_category("Lamps") is True
    assert committer.add_category("Lamps") is False
    assert committer.remove_category("Beds") is True
    assert committer.remove_category("Beds") is False
    assert gateway.calls == [("add_category", "Lamps"), ("delete_category", "Beds")]


# ---------------- write failures ----------------
def test_write_failure_keeps_optimistic_state(committer, store, gateway):
    gateway.fail = True

    with pytest.raises(WriteError) as excinfo:
        committer.commit_sale("Ravi", [cart_item("v1", 2, 100)])

    assert excinfo.value.operation == "Create bill"
    assert excinfo.value.rolled_back is False
    assert "Create bill failed" in str(excinfo.value)
    assert store.get("variations", "v1").stock == 8
    assert store.count("bills") == 1


def test_write_failure_rolls_back_when_enabled(store, gateway):
    committer = OptimisticCommitter(store, gateway, rollback_on_failure=True)
    gateway.fail = True

    with pytest.raises(WriteError) as excinfo:
        committer.commit_purchase("Tata Steel", [cart_item("v1", 5, 70)])

    assert excinfo.value.rolled_back is True
    assert store.get("variations", "v1").stock == 10
    assert store.get("variations", "v1").purchase_price == 80.0
    assert store.count("purchases") == 0


def test_category_write_failure_rolls_back_list(store, gateway):
    committer = OptimisticCommitter(store, gateway, rollback_on_failure=True)
    gateway.fail = True

    with pytest.raises(WriteError):
        committer.add_category("Lamps")
    assert store.categories() == ["Almirahs", "Beds"]


# ---------------- cart ----------------
def test_build_cart_fills_names_from_store(store):
    items = build_cart(store, [{"variationId": "v2", "quantity": 2, "rate": 240}])
    assert items[0].product_id == "p1"
    assert items[0].product_name == "Steel Almirah"
    assert items[0].variation_name == "Large"
    assert items[0].total == 480


def test_build_cart_keeps_named_line_for_missing_variation(store):
    items = build_cart(store, [{
        "variationId": "gone", "productId": "p1", "productName": "Steel Almirah",
        "variationName": "Discontinued", "quantity": 1, "rate": 90,
    }])
    assert items[0].variation_name == "Discontinued"
    assert items[0].total == 90


@pytest.mark.parametrize("lines", [
    [],
    [{"variationId": "v1", "quantity": 0, "rate": 10}],
    [{"variationId": "v1", "quantity": 1, "rate": -1}],
    [{"variationId": "unknown", "quantity": 1, "rate": 10}],
    [{"variationId": "v1", "quantity": 1, "rate": "nan"}],
    [{"variationId": "v1", "quantity": "inf", "rate": 10}],
    "v1",
])
def test_build_cart_rejects_bad_lines(store, lines):
    with pytest.raises(ValidationError):
        build_cart(store, lines)
