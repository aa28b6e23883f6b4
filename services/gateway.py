"""
Remote Gateway: CRUD against the backend tables.

Every call goes through the Flask-SQLAlchemy session and converts rows with
the field maps in ``services.mapping``. A failure rolls the session back and
is raised as ``GatewayError`` with the backend's message; nothing is retried
here.
"""
import logging
from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError

from models import db, row_image, Category, TABLE_MODELS
from services.demo_data import DEMO_CATEGORIES, DEMO_PRODUCTS, DEMO_VARIATIONS
from services.errors import GatewayError
from services.mapping import BILLS, PRODUCTS, PURCHASES, VARIATIONS

logger = logging.getLogger(__name__)

LOAD_ORDER = (
    ("products", "Products", PRODUCTS),
    ("variations", "Variations", VARIATIONS),
    ("bills", "Bills", BILLS),
    ("purchases", "Purchases", PURCHASES),
)


def _message(exc):
    return str(getattr(exc, "orig", None) or exc)


def empty_collections(categories=()):
    return {
        "products": [],
        "variations": [],
        "bills": [],
        "purchases": [],
        "categories": list(categories),
    }


class RemoteGateway:
    def __init__(self, session=None, seed_demo_data=True):
        self.session = session if session is not None else db.session
        self.seed_demo_data = seed_demo_data

    # ---------------- plumbing ----------------
    @contextmanager
    def _write(self, label):
        try:
            yield self.session
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.warning("%s failed: %s", label, _message(e))
            raise GatewayError(_message(e)) from e

    def _select(self, model, label, order_by=None):
        query = db.select(model)
        if order_by is not None:
            query = query.order_by(order_by)
        try:
            return self.session.execute(query).scalars().all()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise GatewayError(f"{label} Load Error: {_message(e)}") from e

    def _insert(self, table, row):
        self.session.add(TABLE_MODELS[table](**row))

    def _update(self, table, entity_id, values):
        obj = self.session.get(TABLE_MODELS[table], entity_id)
        if obj is None:
            # update-by-id on a missing row touches nothing
            logger.warning("No %s row with id %s; update skipped", table, entity_id)
            return False
        for column, value in values.items():
            setattr(obj, column, value)
        return True

    # ---------------- reads ----------------
    def fetch_all(self, retry_count=0):
        rows = {
            table: [row_image(obj) for obj in self._select(TABLE_MODELS[table], label)]
            for table, label, _ in LOAD_ORDER
        }
        categories = self.fetch_categories()

        if not rows["products"] and not categories:
            if retry_count > 0 or not self.seed_demo_data:
                return empty_collections()
            try:
                self.seed()
            except GatewayError:
                return empty_collections(DEMO_CATEGORIES)
            return self.fetch_all(retry_count=1)

        data = {
            table: [field_map.from_row(row) for row in rows[table]]
            for table, _, field_map in LOAD_ORDER
        }
        data["categories"] = categories
        return data

    def fetch_categories(self):
        return [c.name for c in self._select(Category, "Categories", order_by=Category.name)]

    def seed(self):
        logger.info("Backend is empty; seeding demo catalog")
        with self._write("Seed demo data"):
            for name in DEMO_CATEGORIES:
                self._insert("categories", {"name": name})
            for product in DEMO_PRODUCTS:
                self._insert("products", PRODUCTS.to_row(product))
            for variation in DEMO_VARIATIONS:
                self._insert("variations", VARIATIONS.to_row(variation))

    # ---------------- catalog writes ----------------
    def add_product(self, product, variations=()):
        with self._write("Add product"):
            self._insert("products", PRODUCTS.to_row(product))
            for variation in variations:
                self._insert("variations", VARIATIONS.to_row(variation))

    def update_product(self, product):
        values = PRODUCTS.to_row(product)
        values.pop("id")
        with self._write("Update product"):
            self._update("products", product.id, values)

    def add_variation(self, variation):
        with self._write("Add variation"):
            self._insert("variations", VARIATIONS.to_row(variation))

    def update_variation(self, variation):
        values = VARIATIONS.to_row(variation)
        values.pop("id")
        with self._write("Update variation"):
            self._update("variations", variation.id, values)

    # ---------------- transactions ----------------
    def create_bill(self, bill, updated_variations):
        with self._write("Create bill"):
            self._insert("bills", BILLS.to_row(bill))
            for v in updated_variations:
                self._update("variations", v.id, {"stock": v.stock})

    def create_purchase(self, purchase, updated_variations):
        with self._write("Create purchase"):
            self._insert("purchases", PURCHASES.to_row(purchase))
            for v in updated_variations:
                self._update("variations", v.id, {"stock": v.stock, "purchase_price": v.purchase_price})

    # ---------------- categories ----------------
    def add_category(self, name):
        with self._write("Add category"):
            self._insert("categories", {"name": name})

    def delete_category(self, name):
        with self._write("Delete category"):
            obj = self.session.get(Category, name)
            if obj is not None:
                self.session.delete(obj)
