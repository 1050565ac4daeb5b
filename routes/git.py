"""Version control endpoints: working-tree status and confirmed commit/push."""

from flask import Blueprint, current_app, jsonify, request

from auth import require_api_key
from services.errors import ValidationError, VersionControlError

bp = Blueprint("git", __name__)


def _git():
    gate = current_app.extensions["portfolio"].git
    if gate is None:
        raise VersionControlError(
            "Version control is only available with the local backend; "
            "GitHub backend writes are committed directly"
        )
    return gate


@bp.route("/api/git/status", methods=["GET"])
@require_api_key
def git_status():
    return jsonify(_git().status())


@bp.route("/api/git/commit-push", methods=["POST"])
@require_api_key
def git_commit_push():
    """Two-phase: without ``confirmed: true`` this only reports what would be pushed."""
    data = request.get_json(silent=True) or {}
    message = data.get("message", "")
    if not isinstance(message, str):
        raise ValidationError("message must be a string")
    confirmed = data.get("confirmed", False) is True
    return jsonify(_git().commit_and_push(message, confirmed=confirmed))
