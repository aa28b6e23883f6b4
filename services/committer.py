"""
Optimistic Transaction Committer.

Every operator action follows the same shape:

1. mutate the Local Store synchronously (one ``store.batch()`` step),
2. issue the remote write through the gateway,
3. on ``GatewayError`` raise ``WriteError`` naming the operation.

The optimistic mutation is left in place when the write fails unless the
committer was built with ``rollback_on_failure=True``, in which case exactly
that mutation is reverted before the error is raised.

Sale stock is decremented without clamping; manual adjustments clamp at 0.
"""
import logging
from dataclasses import replace
from datetime import date as _date
from enum import Enum

from services.entities import Bill, CartItem, PaymentMode, Purchase, new_id, pending_amount
from services.errors import GatewayError, UnknownEntityError, ValidationError, WriteError
from services.validation import optional_text, parse_date, parse_float, parse_int, require_text

logger = logging.getLogger(__name__)


class StockMode(str, Enum):
    ADD = "add"
    SET = "set"

    @classmethod
    def parse(cls, value):
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            raise ValidationError(f"Unknown stock mode: {value!r} (use 'add' or 'set')") from None


def build_cart(store, lines):
    """
    Turn cart lines ``{variationId, quantity, rate[, productId, productName,
    variationName]}`` into CartItem snapshots.

    Names missing from a line are taken from the Local Store. A line whose
    variation is unknown is accepted only if it carries its own names.
    """
    if not isinstance(lines, list) or not lines:
        raise ValidationError("Cart is empty")

    items = []
    for idx, line in enumerate(lines, start=1):
        if not isinstance(line, dict):
            raise ValidationError(f"Item {idx}: invalid format")
        variation_id = require_text(line.get("variationId"), f"Item {idx}: variationId")
        quantity = parse_int(line.get("quantity"), f"Item {idx}: quantity")
        if quantity <= 0:
            raise ValidationError(f"Item {idx}: quantity must be a positive integer")
        rate = parse_float(line.get("rate"), f"Item {idx}: rate", minimum=0)

        variation = store.get("variations", variation_id)
        product_id = line.get("productId") or (variation.product_id if variation else "")
        product = store.get("products", product_id) if product_id else None
        product_name = line.get("productName") or (product.name if product else "")
        variation_name = line.get("variationName") or (variation.name if variation else "")
        if variation is None and not (product_name and variation_name):
            raise ValidationError(f"Item {idx}: unknown variation {variation_id}")

        items.append(
            CartItem.snapshot(product_id, variation_id, product_name, variation_name, quantity, rate)
        )
    return items


class OptimisticCommitter:
    def __init__(self, store, gateway, rollback_on_failure=False):
        self.store = store
        self.gateway = gateway
        self.rollback_on_failure = rollback_on_failure

    # ---------------- plumbing ----------------
    def _write(self, operation, call, undo=None):
        try:
            call()
        except GatewayError as e:
            rolled_back = False
            if self.rollback_on_failure and undo is not None:
                with self.store.batch():
                    undo()
                rolled_back = True
            logger.warning(
                "%s failed%s: %s", operation, " (rolled back)" if rolled_back else "", e
            )
            raise WriteError(operation, str(e), rolled_back=rolled_back) from e

    def _move_stock(self, items, adjust):
        """Apply ``adjust`` to each line's variation. Caller holds the batch."""
        before = {}
        after = {}
        for item in items:
            current = self.store.get("variations", item.variation_id)
            if current is None:
                logger.debug("No variation %s in store; stock left as is", item.variation_id)
                continue
            before.setdefault(current.id, current)
            updated = adjust(current, item)
            self.store.replace("variations", updated)
            after[updated.id] = updated
        return before, list(after.values())

    def _undo_transaction(self, table, entity_id, before):
        def undo():
            self.store.remove(table, entity_id)
            for variation in before.values():
                self.store.replace("variations", variation)
        return undo

    # ---------------- transactions ----------------
    def commit_sale(self, customer_name, items, date=None, discount=0.0,
                    amount_received=0.0, payment_mode=PaymentMode.CASH, contact_no=None):
        customer_name = require_text(customer_name, "Customer Name")
        if not items:
            raise ValidationError("Cart is empty")
        discount = parse_float(discount, "Discount", default=0.0, minimum=0)
        amount_received = parse_float(amount_received, "Amount received", default=0.0, minimum=0)
        mode = PaymentMode.parse(payment_mode)

        total = sum(item.total for item in items)
        final = max(0.0, total - discount)
        bill = Bill(
            id=new_id(),
            customer_name=customer_name,
            contact_no=optional_text(contact_no),
            date=parse_date(date) or _date.today().isoformat(),
            items=tuple(items),
            total_amount=total,
            discount=discount,
            final_amount=final,
            amount_received=amount_received,
            amount_pending=pending_amount(final, amount_received),
            payment_mode=mode.value,
        )

        with self.store.batch():
            before, affected = self._move_stock(
                items, lambda v, item: v.with_stock(v.stock - item.quantity)
            )
            self.store.append("bills", bill)
        logger.info("Bill %s: %d items, final %.2f", bill.id, len(items), final)

        self._write(
            "Create bill",
            lambda: self.gateway.create_bill(bill, affected),
            undo=self._undo_transaction("bills", bill.id, before),
        )
        return bill

    def commit_purchase(self, supplier_name, items, date=None, amount_paid=0.0,
                        payment_mode=PaymentMode.CASH):
        supplier_name = require_text(supplier_name, "Supplier Name")
        if not items:
            raise ValidationError("Cart is empty")
        amount_paid = parse_float(amount_paid, "Amount paid", default=0.0, minimum=0)
        mode = PaymentMode.parse(payment_mode)

        total = sum(item.total for item in items)
        purchase = Purchase(
            id=new_id(),
            supplier_name=supplier_name,
            date=parse_date(date) or _date.today().isoformat(),
            items=tuple(items),
            total_amount=total,
            amount_paid=amount_paid,
            amount_pending=pending_amount(total, amount_paid),
            payment_mode=mode.value,
        )

        with self.store.batch():
            before, affected = self._move_stock(
                items,
                lambda v, item: replace(v, stock=v.stock + item.quantity, purchase_price=item.rate),
            )
            self.store.append("purchases", purchase)
        logger.info("Purchase %s: %d items, total %.2f", purchase.id, len(items), total)

        self._write(
            "Create purchase",
            lambda: self.gateway.create_purchase(purchase, affected),
            undo=self._undo_transaction("purchases", purchase.id, before),
        )
        return purchase

    # ---------------- stock ----------------
    def adjust_stock(self, variation_id, mode, value):
        mode = StockMode.parse(mode)
        value = parse_int(value, "Stock value")

        with self.store.batch():
            current = self.store.get("variations", variation_id)
            if current is None:
                raise UnknownEntityError("variations", variation_id)
            target = current.stock + value if mode == StockMode.ADD else value
            updated = current.with_stock(max(0, target))
            self.store.replace("variations", updated)

        self._write(
            "Update stock",
            lambda: self.gateway.update_variation(updated),
            undo=lambda: self.store.replace("variations", current),
        )
        return updated

    # ---------------- catalog ----------------
    def add_product(self, product, variations):
        with self.store.batch():
            self.store.append("products", product)
            for variation in variations:
                self.store.append("variations", variation)

        def undo():
            self.store.remove("products", product.id)
            for variation in variations:
                self.store.remove("variations", variation.id)

        self._write("Save product", lambda: self.gateway.add_product(product, variations), undo=undo)
        return product

    def update_product(self, product):
        previous = self.store.replace("products", product)
        if previous is None:
            raise UnknownEntityError("products", product.id)
        self._write(
            "Update product",
            lambda: self.gateway.update_product(product),
            undo=lambda: self.store.replace("products", previous),
        )
        return product

    def add_variation(self, variation):
        if self.store.get("products", variation.product_id) is None:
            raise UnknownEntityError("products", variation.product_id)
        self.store.append("variations", variation)
        self._write(
            "Add variation",
            lambda: self.gateway.add_variation(variation),
            undo=lambda: self.store.remove("variations", variation.id),
        )
        return variation

    def update_variation(self, variation):
        previous = self.store.replace("variations", variation)
        if previous is None:
            raise UnknownEntityError("variations", variation.id)
        self._write(
            "Update variation",
            lambda: self.gateway.update_variation(variation),
            undo=lambda: self.store.replace("variations", previous),
        )
        return variation

    # ---------------- categories ----------------
    def add_category(self, name):
        name = require_text(name, "Category name")
        previous = self.store.categories()
        if not self.store.add_category(name):
            return False
        self._write(
            "Add category",
            lambda: self.gateway.add_category(name),
            undo=lambda: self.store.set_categories(previous),
        )
        return True

    def remove_category(self, name):
        previous = self.store.categories()
        if not self.store.remove_category(name):
            return False
        self._write(
            "Delete category",
            lambda: self.gateway.delete_category(name),
            undo=lambda: self.store.set_categories(previous),
        )
        return True

    def update_categories(self, new_names):
        """
        Infer a single add or remove from a before/after list.

        Returns ``("add", name)``, ``("remove", name)`` or None when the edit
        is neither (nothing is written then).
        """
        new_names = [str(n).strip() for n in new_names]
        previous = self.store.categories()

        change = None
        if len(new_names) > len(previous):
            change = next((("add", c) for c in new_names if c not in previous), None)
        elif len(new_names) < len(previous):
            change = next((("remove", c) for c in previous if c not in new_names), None)
        if change is None:
            logger.debug("Category edit is not a single add or remove; ignored")
            return None

        kind, name = change
        if not name:
            raise ValidationError("Category name is required")
        self.store.set_categories(new_names)
        call = self.gateway.add_category if kind == "add" else self.gateway.delete_category
        self._write(
            "Add category" if kind == "add" else "Delete category",
            lambda: call(name),
            undo=lambda: self.store.set_categories(previous),
        )
        return change
