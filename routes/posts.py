"""Blog post endpoints: list, read, create, update, delete."""

from flask import Blueprint, current_app, jsonify, request

from auth import require_api_key
from services.errors import ValidationError

bp = Blueprint("posts", __name__)


def _posts():
    return current_app.extensions["portfolio"].posts


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _split_content(data: dict) -> tuple[dict, str | None]:
    """Separate the body text from the frontmatter fields of a request."""
    fields = dict(data)
    content = fields.pop("content", None)
    if content is not None and not isinstance(content, str):
        raise ValidationError("content must be a string")
    return fields, content


@bp.route("/api/posts", methods=["GET"])
@require_api_key
def list_posts():
    return jsonify(_posts().list_posts())


@bp.route("/api/posts/<slug>", methods=["GET"])
@require_api_key
def get_post(slug):
    return jsonify(_posts().get_post(slug))


@bp.route("/api/posts", methods=["POST"])
@require_api_key
def create_post():
    """Create a post. Body: frontmatter fields plus ``content``."""
    frontmatter, content = _split_content(_json_body())
    return jsonify(_posts().create_post(frontmatter, content or "")), 201


@bp.route("/api/posts/<slug>", methods=["PUT"])
@require_api_key
def update_post(slug):
    """Merge the given frontmatter fields; replace the body only if ``content`` is sent."""
    updates, content = _split_content(_json_body())
    return jsonify(_posts().update_post(slug, updates, content))


@bp.route("/api/posts/<slug>", methods=["DELETE"])
@require_api_key
def delete_post(slug):
    _posts().delete_post(slug)
    return jsonify({"message": "Post deleted", "slug": slug})
