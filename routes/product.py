from flask import Blueprint, request, jsonify
from flask_login import login_required

from services.catalog import build_product, build_variation, edit_product, edit_variation
from services.errors import UnknownEntityError
from services.mapping import PRODUCTS, VARIATIONS
from services.workspace import active_workspace

bp = Blueprint("product", __name__, url_prefix="/products")


# ---------- Helpers ----------
def _to_dict(product, variations):
    prices = [v.selling_price for v in variations]
    data = PRODUCTS.to_json(product)
    data.update(
        {
            "variationCount": len(variations),
            "totalStock": sum(v.stock for v in variations),
            "minPrice": min(prices) if prices else None,
            "maxPrice": max(prices) if prices else None,
        }
    )
    return data


def _product_or_404(store, product_id):
    product = store.get("products", product_id)
    if product is None:
        raise UnknownEntityError("products", product_id)
    return product


def _variation_or_404(store, variation_id):
    variation = store.get("variations", variation_id)
    if variation is None:
        raise UnknownEntityError("variations", variation_id)
    return variation


# ---------- APIs ----------
@bp.route("/api", methods=["GET"])
@login_required
def api_list():
    store = active_workspace().store
    q = request.args.get("q", "").strip().lower()
    category = request.args.get("category", "All").strip()

    products = store.all("products")
    if q:
        products = [p for p in products if q in p.name.lower() or q in (p.category or "").lower()]
    if category and category != "All":
        products = [p for p in products if p.category == category]

    return jsonify({
        "products": [_to_dict(p, store.variations_for(p.id)) for p in products]
    })


@bp.route("/api", methods=["POST"])
@login_required
def api_create():
    workspace = active_workspace()
    data = request.get_json(silent=True) or {}

    product, variations = build_product(data)
    workspace.committer.add_product(product, variations)

    return jsonify({
        "message": "Created",
        "product": _to_dict(product, variations),
        "variations": [VARIATIONS.to_json(v) for v in variations],
    }), 201


@bp.route("/api/<product_id>", methods=["GET"])
@login_required
def api_detail(product_id):
    store = active_workspace().store
    product = _product_or_404(store, product_id)
    variations = store.variations_for(product_id)
    return jsonify({
        "product": _to_dict(product, variations),
        "variations": [VARIATIONS.to_json(v) for v in variations],
    })


@bp.route("/api/<product_id>", methods=["PUT"])
@login_required
def api_update(product_id):
    workspace = active_workspace()
    product = _product_or_404(workspace.store, product_id)
    data = request.get_json(silent=True) or {}

    updated = workspace.committer.update_product(edit_product(product, data))

    return jsonify({
        "message": "Updated",
        "product": _to_dict(updated, workspace.store.variations_for(product_id)),
    })


@bp.route("/api/<product_id>/variations", methods=["POST"])
@login_required
def api_add_variation(product_id):
    workspace = active_workspace()
    _product_or_404(workspace.store, product_id)
    data = request.get_json(silent=True) or {}

    variation = workspace.committer.add_variation(build_variation(data, product_id))

    return jsonify({"message": "Created", "variation": VARIATIONS.to_json(variation)}), 201


@bp.route("/variations/<variation_id>", methods=["PUT"])
@login_required
def api_update_variation(variation_id):
    workspace = active_workspace()
    variation = _variation_or_404(workspace.store, variation_id)
    data = request.get_json(silent=True) or {}

    updated = workspace.committer.update_variation(edit_variation(variation, data))

    return jsonify({"message": "Updated", "variation": VARIATIONS.to_json(updated)})


@bp.route("/variations/<variation_id>/stock", methods=["POST"])
@login_required
def api_adjust_stock(variation_id):
    workspace = active_workspace()
    data = request.get_json(silent=True) or {}

    updated = workspace.committer.adjust_stock(variation_id, data.get("mode"), data.get("value"))

    return jsonify({"message": "Stock updated", "variation": VARIATIONS.to_json(updated)})
