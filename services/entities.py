"""
Application-side entities held by the Local Store.

All entities are frozen; a change produces a new instance through
``dataclasses.replace`` and the store swaps it in by id.
"""
import uuid
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

from services.errors import ValidationError

PLACEHOLDER_IMAGE = "https://placehold.co/400x300?text=No+Image"


class PaymentMode(str, Enum):
    CASH = "Cash"
    ONLINE = "Online"
    CHEQUE = "Cheque"
    CREDIT = "Credit"

    @classmethod
    def parse(cls, value):
        if isinstance(value, cls):
            return value
        for mode in cls:
            if str(value or "").strip().lower() == mode.value.lower():
                return mode
        raise ValidationError(f"Unknown payment mode: {value!r}")


def new_id() -> str:
    """Random 128-bit identifier for a new entity."""
    return str(uuid.uuid4())


def pending_amount(due: float, paid: float) -> float:
    return max(0.0, due - paid)


@dataclass(frozen=True)
class Product:
    id: str
    name: str
    category: str = ""
    image: str = ""
    base_purchase_price: Optional[float] = None
    base_selling_price: Optional[float] = None


@dataclass(frozen=True)
class Variation:
    id: str
    product_id: str
    name: str
    stock: int = 0
    purchase_price: float = 0.0
    selling_price: float = 0.0
    image: Optional[str] = None
    color: Optional[str] = None

    def with_stock(self, stock: int) -> "Variation":
        return replace(self, stock=stock)


@dataclass(frozen=True)
class CartItem:
    """Line item snapshot. Names and rate are frozen at transaction time."""

    product_id: str
    variation_id: str
    product_name: str
    variation_name: str
    quantity: int
    rate: float
    total: float

    @classmethod
    def snapshot(cls, product_id, variation_id, product_name, variation_name, quantity, rate):
        return cls(
            product_id=product_id,
            variation_id=variation_id,
            product_name=product_name,
            variation_name=variation_name,
            quantity=quantity,
            rate=rate,
            total=quantity * rate,
        )


@dataclass(frozen=True)
class Bill:
    id: str
    customer_name: str
    date: str
    items: Tuple[CartItem, ...]
    total_amount: float
    discount: float
    final_amount: float
    amount_received: float
    amount_pending: float
    payment_mode: str
    contact_no: Optional[str] = None
    type: str = "SALE"


@dataclass(frozen=True)
class Purchase:
    id: str
    supplier_name: str
    date: str
    items: Tuple[CartItem, ...]
    total_amount: float
    amount_paid: float
    amount_pending: float
    payment_mode: str
    type: str = "PURCHASE"
