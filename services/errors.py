"""Error taxonomy for content operations.

Every error carries a stable ``code`` and the HTTP ``status`` the API layer
answers with, so callers can tell "fix your input" from "retry later" from
"the resource changed under you".
"""


class ContentError(Exception):
    status = 500
    code = "content_error"

    def to_dict(self) -> dict:
        return {"error": str(self), "code": self.code}


class NotFound(ContentError):
    status = 404
    code = "not_found"


class AlreadyExists(ContentError):
    status = 409
    code = "already_exists"


class ValidationError(ContentError):
    status = 400
    code = "validation_error"

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = errors or []

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.errors:
            data["errors"] = self.errors
        return data


class FormatError(ContentError):
    status = 400
    code = "format_error"


class Conflict(ContentError):
    """Remote write rejected because the supplied sha is stale."""

    status = 409
    code = "conflict"


class BackendError(ContentError):
    status = 502
    code = "backend_error"

    def __init__(self, message: str, upstream_status: int | None = None):
        super().__init__(message)
        self.upstream_status = upstream_status


class VersionControlError(ContentError):
    status = 500
    code = "version_control_error"
