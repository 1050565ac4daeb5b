"""API key authentication for the content API.

When an API key is configured, API routes require ``Authorization: Bearer <key>``.
With no key configured every request passes through (local development).
"""

import secrets
from functools import wraps

from flask import current_app, jsonify, request

# Prefix makes keys visually identifiable and greppable
_KEY_PREFIX = "pc_"
_KEY_BYTES = 24  # 24 bytes = 32 base64 chars


def generate_api_key() -> str:
    """Generate a new API key with the pc_ prefix."""
    return _KEY_PREFIX + secrets.token_urlsafe(_KEY_BYTES)


def require_api_key(f):
    """Flask route decorator: requires a valid Bearer token when a key is configured."""

    @wraps(f)
    def decorated(*args, **kwargs):
        expected = current_app.config.get("PORTFOLIO_API_KEY") or ""
        if not expected:
            return f(*args, **kwargs)

        auth_header = request.headers.get("Authorization", "")
        if not auth_header.startswith("Bearer "):
            return jsonify({"error": "Missing or malformed Authorization header"}), 401

        token = auth_header[7:]  # Strip "Bearer "
        if not secrets.compare_digest(token, expected):
            return jsonify({"error": "Invalid API key"}), 401

        return f(*args, **kwargs)

    return decorated
