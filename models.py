from flask_sqlalchemy import SQLAlchemy
from flask_login import UserMixin
from sqlalchemy import inspect as sa_inspect

db = SQLAlchemy()


# ==========================
# Operator (not persisted)
# ==========================
class Operator(UserMixin):
    """The single shop operator. Credentials come from configuration."""

    def __init__(self, username):
        self.id = username
        self.name = username

    def __repr__(self):
        return f"<Operator {self.name}>"


# ==========================
# Product Model
# ==========================
class Product(db.Model):
    __tablename__ = "products"

    id = db.Column(db.String(64), primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    category = db.Column(db.String(100), default="")
    image = db.Column(db.String(500), default="")
    base_purchase_price = db.Column(db.Float, nullable=True)
    base_selling_price = db.Column(db.Float, nullable=True)

    def __repr__(self):
        return f"<Product {self.name}>"


# ==========================
# Variation Model
# ==========================
class Variation(db.Model):
    __tablename__ = "variations"

    id = db.Column(db.String(64), primary_key=True)
    # no FK: a variation row may arrive before its product over the feed
    product_id = db.Column(db.String(64), nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)
    stock = db.Column(db.Integer, nullable=False, default=0)
    purchase_price = db.Column(db.Float, nullable=False, default=0.0)
    selling_price = db.Column(db.Float, nullable=False, default=0.0)
    image = db.Column(db.String(500), nullable=True)
    color = db.Column(db.String(50), nullable=True)

    def __repr__(self):
        return f"<Variation {self.name} stock={self.stock}>"


# ==========================
# Bill Model (sales)
# ==========================
class Bill(db.Model):
    __tablename__ = "bills"

    id = db.Column(db.String(64), primary_key=True)
    customer_name = db.Column(db.String(200), nullable=False)
    contact_no = db.Column(db.String(30), nullable=True)
    date = db.Column(db.String(32), nullable=False)
    items = db.Column(db.JSON, nullable=False)
    total_amount = db.Column(db.Float, default=0.0)
    discount = db.Column(db.Float, default=0.0)
    final_amount = db.Column(db.Float, default=0.0)
    amount_received = db.Column(db.Float, default=0.0)
    amount_pending = db.Column(db.Float, default=0.0)
    payment_mode = db.Column(db.String(20), default="Cash")
    type = db.Column(db.String(20), default="SALE")

    def __repr__(self):
        return f"<Bill {self.id}>"


# ==========================
# Purchase Model (restock)
# ==========================
class Purchase(db.Model):
    __tablename__ = "purchases"

    id = db.Column(db.String(64), primary_key=True)
    supplier_name = db.Column(db.String(200), nullable=False)
    date = db.Column(db.String(32), nullable=False)
    items = db.Column(db.JSON, nullable=False)
    total_amount = db.Column(db.Float, default=0.0)
    amount_paid = db.Column(db.Float, default=0.0)
    amount_pending = db.Column(db.Float, default=0.0)
    payment_mode = db.Column(db.String(20), default="Cash")
    type = db.Column(db.String(20), default="PURCHASE")

    def __repr__(self):
        return f"<Purchase {self.id}>"


# ==========================
# Category Model
# ==========================
class Category(db.Model):
    __tablename__ = "categories"

    name = db.Column(db.String(100), primary_key=True)

    def __repr__(self):
        return f"<Category {self.name}>"


# table name -> model, for the gateway and the change feed
TABLE_MODELS = {
    "products": Product,
    "variations": Variation,
    "bills": Bill,
    "purchases": Purchase,
    "categories": Category,
}


def row_image(obj):
    """Column values of a mapped instance, keyed by column name."""
    return {attr.key: getattr(obj, attr.key) for attr in sa_inspect(obj).mapper.column_attrs}
