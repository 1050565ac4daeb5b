"""Portfolio project endpoints. Projects are addressed by title."""

from flask import Blueprint, current_app, jsonify, request

from auth import require_api_key
from services.errors import ValidationError

bp = Blueprint("projects", __name__)


def _projects():
    return current_app.extensions["portfolio"].projects


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


@bp.route("/api/projects", methods=["GET"])
@require_api_key
def list_projects():
    return jsonify(_projects().list_projects())


@bp.route("/api/projects", methods=["POST"])
@require_api_key
def create_project():
    return jsonify(_projects().create_project(_json_body())), 201


@bp.route("/api/projects/<path:title>", methods=["PUT"])
@require_api_key
def update_project(title):
    return jsonify(_projects().update_project(title, _json_body()))


@bp.route("/api/projects/<path:title>", methods=["DELETE"])
@require_api_key
def delete_project(title):
    _projects().delete_project(title)
    return jsonify({"message": "Project deleted", "title": title})
