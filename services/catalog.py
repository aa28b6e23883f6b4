"""
Builders for catalog entities from operator input (camelCase JSON).

A product is created either *simple* (prices and stock on the product form,
one "Standard" variation made from them) or with an explicit list of
variations; in both cases the base prices are copied from the first
variation for sorting and display.
"""
from dataclasses import replace

from services.entities import PLACEHOLDER_IMAGE, Product, Variation, new_id
from services.errors import ValidationError
from services.validation import optional_text, parse_float, parse_int, require_text

STANDARD_VARIATION = "Standard"


def _stock(value, label="Stock"):
    stock = parse_int(value, label, default=0)
    if stock < 0:
        raise ValidationError(f"{label} cannot be negative")
    return stock


def build_variation(data, product_id):
    name = require_text(data.get("name"), "Variation name")
    return Variation(
        id=new_id(),
        product_id=product_id,
        name=name,
        stock=_stock(data.get("stock")),
        purchase_price=parse_float(data.get("purchasePrice"), f'Purchase price for "{name}"', minimum=0),
        selling_price=parse_float(data.get("sellingPrice"), f'Selling price for "{name}"', minimum=0),
        image=optional_text(data.get("image")),
        color=optional_text(data.get("color")),
    )


def build_product(data):
    """Return ``(product, variations)`` for the add-product flow."""
    name = require_text(data.get("name"), "Product name")
    category = require_text(data.get("category"), "Category")
    image = optional_text(data.get("image"))
    product_id = new_id()

    rows = data.get("variations")
    if rows:
        if not isinstance(rows, list):
            raise ValidationError("variations must be a list")
        variations = [build_variation(row, product_id) for row in rows]
    else:
        variations = [
            Variation(
                id=new_id(),
                product_id=product_id,
                name=STANDARD_VARIATION,
                stock=_stock(data.get("stock")),
                purchase_price=parse_float(data.get("purchasePrice"), "Purchase price", minimum=0),
                selling_price=parse_float(data.get("sellingPrice"), "Selling price", minimum=0),
                image=image,
            )
        ]

    product = Product(
        id=product_id,
        name=name,
        category=category,
        image=image or PLACEHOLDER_IMAGE,
        base_purchase_price=variations[0].purchase_price,
        base_selling_price=variations[0].selling_price,
    )
    return product, variations


def edit_product(product, data):
    changes = {}
    if "name" in data:
        changes["name"] = require_text(data["name"], "Product name")
    if "category" in data:
        changes["category"] = str(data["category"] or "").strip()
    if "image" in data:
        changes["image"] = optional_text(data["image"]) or PLACEHOLDER_IMAGE
    if "basePurchasePrice" in data:
        changes["base_purchase_price"] = parse_float(data["basePurchasePrice"], "Base purchase price", minimum=0)
    if "baseSellingPrice" in data:
        changes["base_selling_price"] = parse_float(data["baseSellingPrice"], "Base selling price", minimum=0)
    return replace(product, **changes)


def edit_variation(variation, data):
    changes = {}
    if "name" in data:
        changes["name"] = require_text(data["name"], "Variation name")
    if "stock" in data:
        changes["stock"] = _stock(data["stock"])
    if "purchasePrice" in data:
        changes["purchase_price"] = parse_float(data["purchasePrice"], "Purchase price", minimum=0)
    if "sellingPrice" in data:
        changes["selling_price"] = parse_float(data["sellingPrice"], "Selling price", minimum=0)
    if "image" in data:
        changes["image"] = optional_text(data["image"])
    if "color" in data:
        changes["color"] = optional_text(data["color"])
    return replace(variation, **changes)
