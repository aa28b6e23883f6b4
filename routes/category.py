from flask import Blueprint, request, jsonify
from flask_login import login_required

from services.errors import UnknownEntityError, ValidationError
from services.workspace import active_workspace

bp = Blueprint("category", __name__, url_prefix="/categories")


@bp.route("/api", methods=["GET"])
@login_required
def api_list():
    store = active_workspace().store
    return jsonify({"categories": store.categories()})


@bp.route("/api", methods=["PUT"])
@login_required
def api_replace():
    """Accept the edited list and write the single add or remove it implies."""
    workspace = active_workspace()
    data = request.get_json(silent=True) or {}
    names = data.get("categories")
    if not isinstance(names, list):
        raise ValidationError("categories must be a list")

    change = workspace.committer.update_categories(names)

    return jsonify({
        "change": {"kind": change[0], "name": change[1]} if change else None,
        "categories": workspace.store.categories(),
    })


@bp.route("/api", methods=["POST"])
@login_required
def api_add():
    workspace = active_workspace()
    data = request.get_json(silent=True) or {}

    if not workspace.committer.add_category(data.get("name")):
        return jsonify({"message": "Category already exists", "categories": workspace.store.categories()})
    return jsonify({"message": "Created", "categories": workspace.store.categories()}), 201


@bp.route("/api/<name>", methods=["DELETE"])
@login_required
def api_delete(name):
    workspace = active_workspace()
    if not workspace.committer.remove_category(name):
        raise UnknownEntityError("categories", name)
    return jsonify({"message": "Deleted", "categories": workspace.store.categories()})
