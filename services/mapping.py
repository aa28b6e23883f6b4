"""
Field mapping between backend rows and application entities.

Backend rows use the snake_case column names of the tables in ``models.py``.
The application-facing shape (JSON API, the ``items`` column) uses camelCase
keys. Entity attributes carry the column names, so a ``FieldMap`` only has to
know the column list and which columns need value conversion.
"""
from dataclasses import fields

from services.entities import Bill, CartItem, Product, Purchase, Variation


def camelize(name):
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


CART_ITEM_KEYS = {f.name: camelize(f.name) for f in fields(CartItem)}


def item_to_json(item):
    return {key: getattr(item, attr) for attr, key in CART_ITEM_KEYS.items()}


def item_from_json(data):
    quantity = int(data.get("quantity", 0))
    rate = float(data.get("rate", 0))
    total = data.get("total")
    return CartItem(
        product_id=str(data.get("productId", "")),
        variation_id=str(data.get("variationId", "")),
        product_name=data.get("productName", ""),
        variation_name=data.get("variationName", ""),
        quantity=quantity,
        rate=rate,
        total=float(total) if total is not None else quantity * rate,
    )


def _items_in(value):
    return tuple(item_from_json(i) for i in (value or []))


def _items_out(value):
    return [item_to_json(i) for i in value]


class FieldMap:
    def __init__(self, table, entity, key="id", readers=None, writers=None):
        self.table = table
        self.entity = entity
        self.key = key
        self.columns = tuple(f.name for f in fields(entity))
        self.json_keys = {c: camelize(c) for c in self.columns}
        self._readers = readers or {}
        self._writers = writers or {}

    def _read(self, column, value):
        reader = self._readers.get(column)
        return reader(value) if reader else value

    def _write(self, column, value):
        writer = self._writers.get(column)
        return writer(value) if writer else value

    # ---- backend row -> application ----
    def from_row(self, row):
        return self.entity(**self.changes(row, include_key=True))

    def changes(self, row, include_key=False):
        """Attribute values for the columns present in ``row``."""
        return {
            column: self._read(column, row[column])
            for column in self.columns
            if column in row and (include_key or column != self.key)
        }

    # ---- application -> backend row ----
    def to_row(self, entity):
        return {c: self._write(c, getattr(entity, c)) for c in self.columns}

    # ---- JSON (camelCase) ----
    def to_json(self, entity):
        return {self.json_keys[c]: self._write(c, getattr(entity, c)) for c in self.columns}


PRODUCTS = FieldMap("products", Product)
VARIATIONS = FieldMap("variations", Variation)
BILLS = FieldMap("bills", Bill, readers={"items": _items_in}, writers={"items": _items_out})
PURCHASES = FieldMap("purchases", Purchase, readers={"items": _items_in}, writers={"items": _items_out})

FIELD_MAPS = {m.table: m for m in (PRODUCTS, VARIATIONS, BILLS, PURCHASES)}

CATEGORIES = "categories"
WATCHED_TABLES = tuple(FIELD_MAPS) + (CATEGORIES,)
