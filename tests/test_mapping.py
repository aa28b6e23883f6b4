from services.entities import CartItem, Variation
from services.mapping import BILLS, VARIATIONS, camelize


def test_camelize():
    assert camelize("product_id") == "productId"
    assert camelize("base_selling_price") == "baseSellingPrice"
    assert camelize("name") == "name"


def test_variation_row_round_trip():
    row = {
        "id": "v1", "product_id": "p1", "name": "Small", "stock": 4,
        "purchase_price": 80.0, "selling_price": 100.0, "image": None, "color": "#fff",
    }
    variation = VARIATIONS.from_row(row)
    assert variation == Variation("v1", "p1", "Small", 4, 80.0, 100.0, None, "#fff")
    assert VARIATIONS.to_row(variation) == row


def test_changes_only_carries_present_columns_without_key():
    assert VARIATIONS.changes({"id": "v1", "stock": 2}) == {"stock": 2}
    assert VARIATIONS.changes({"id": "v1", "stock": 2}, include_key=True) == {"id": "v1", "stock": 2}


def test_to_json_uses_camel_case():
    data = VARIATIONS.to_json(Variation("v1", "p1", "Small", stock=4))
    assert data["productId"] == "p1"
    assert data["sellingPrice"] == 0.0
    assert "product_id" not in data


def test_bill_items_are_stored_as_camel_case_json():
    row = {
        "id": "b1", "customer_name": "Ravi", "contact_no": None, "date": "2024-05-01",
        "items": [{"productId": "p1", "variationId": "v1", "productName": "Bed",
                   "variationName": "Queen", "quantity": 2, "rate": 50.0, "total": 100.0}],
        "total_amount": 100.0, "discount": 0.0, "final_amount": 100.0,
        "amount_received": 100.0, "amount_pending": 0.0, "payment_mode": "Cash", "type": "SALE",
    }
    bill = BILLS.from_row(row)
    assert bill.items == (CartItem("p1", "v1", "Bed", "Queen", 2, 50.0, 100.0),)
    assert BILLS.to_row(bill)["items"] == row["items"]
    assert BILLS.to_json(bill)["customerName"] == "Ravi"
