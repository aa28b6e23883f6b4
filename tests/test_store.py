from services.entities import Product, Variation


def test_append_is_idempotent_by_id(store):
    assert store.append("products", Product(id="p2", name="Bed")) is True
    assert store.append("products", Product(id="p2", name="Other")) is False
    assert store.count("products") == 2
    assert store.get("products", "p2").name == "Bed"


def test_replace_unknown_returns_none(store):
    assert store.replace("variations", Variation(id="zz", product_id="p1", name="X")) is None
    assert store.get("variations", "zz") is None


def test_replace_returns_previous(store):
    current = store.get("variations", "v1")
    previous = store.replace("variations", current.with_stock(3))
    assert previous.stock == 10
    assert store.get("variations", "v1").stock == 3


def test_merge_overwrites_only_given_attributes(store):
    assert store.merge("variations", "v1", {"stock": 4}) is True
    v1 = store.get("variations", "v1")
    assert v1.stock == 4
    assert v1.selling_price == 100.0
    assert store.merge("variations", "missing", {"stock": 1}) is False


def test_remove(store):
    removed = store.remove("variations", "v2")
    assert removed.id == "v2"
    assert store.remove("variations", "v2") is None
    assert [v.id for v in store.variations_for("p1")] == ["v1"]


def test_categories(store):
    assert store.add_category("Lamps") is True
    assert store.add_category("Lamps") is False
    assert store.categories() == ["Almirahs", "Beds", "Lamps"]
    assert store.remove_category("Beds") is True
    assert store.remove_category("Beds") is False
    assert store.count("categories") == 2


def test_snapshot_is_detached(store):
    snap = store.snapshot()
    store.add_category("Lamps")
    store.remove("variations", "v1")
    assert len(snap.variations) == 2
    assert "Lamps" not in snap.categories


def test_clear_empties_everything(store):
    store.clear()
    assert store.count("products") == 0
    assert store.count("variations") == 0
    assert store.categories() == []
