"""Post frontmatter and project record schemas and validation."""

POST_SCHEMA = {
    "title":      {"type": str,  "required": True},
    "date":       {"type": str,  "required": True},    # ISO: YYYY-MM-DD
    "tags":       {"type": list, "required": True},
    "draft":      {"type": bool, "required": True},
    "summary":    {"type": str,  "required": True},
    "pinned":     {"type": bool, "required": False},
    "pinnedtext": {"type": str,  "required": False},
}

PROJECT_SCHEMA = {
    "title":       {"type": str, "required": True},
    "description": {"type": str, "required": True},
    "imgSrc":      {"type": str, "required": True},
    "href":        {"type": str, "required": True},
    "github":      {"type": str, "required": False},
    "tech1":       {"type": str, "required": False},
    "tech2":       {"type": str, "required": False},
    "tech3":       {"type": str, "required": False},
}

# Frontmatter lists are written unquoted, so these would split or truncate on re-read.
_TAG_FORBIDDEN = (",", "[", "]", "\n", "\r")

# The projects file parser stops at the first "];".
_ARRAY_TERMINATOR = "];"


def _check_schema(record: dict, schema: dict, partial: bool) -> list[str]:
    errors = []
    for field, spec in schema.items():
        if partial and field not in record:
            continue
        value = record.get(field)
        if spec.get("required") and (value is None or value == ""):
            errors.append(f"Missing required field: {field!r}")
            continue
        if value is not None and not isinstance(value, spec["type"]):
            expected = spec["type"].__name__
            got = type(value).__name__
            errors.append(f"Field {field!r} must be {expected}, got {got}")
    return errors


def validate_frontmatter(fm: dict, partial: bool = False) -> list[str]:
    """Return list of validation errors. Empty list means valid.

    With ``partial`` only the keys present are checked (used for updates,
    where absent keys keep their stored value).
    """
    errors = _check_schema(fm, POST_SCHEMA, partial)

    tags = fm.get("tags")
    if isinstance(tags, list):
        for tag in tags:
            if not isinstance(tag, str):
                errors.append(f"Tags must be strings, got {type(tag).__name__}")
            elif any(ch in tag for ch in _TAG_FORBIDDEN):
                errors.append(f"Tag {tag!r} may not contain ',', '[', ']' or line breaks")

    return errors


def validate_project(record: dict, partial: bool = False) -> list[str]:
    """Return list of validation errors for a project record (or update)."""
    errors = [f"Unknown project field: {k!r}" for k in record if k not in PROJECT_SCHEMA]
    errors += _check_schema(record, PROJECT_SCHEMA, partial)

    for field, value in record.items():
        if isinstance(value, str) and _ARRAY_TERMINATOR in value:
            errors.append(f"Field {field!r} may not contain {_ARRAY_TERMINATOR!r}")

    return errors
