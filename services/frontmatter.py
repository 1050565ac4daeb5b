"""Post frontmatter: parse, build, and slug derivation.

The block is a flat run of ``key: value`` lines between two ``---`` lines.
It is deliberately not full YAML: values are strings, booleans, or
``[a, b]`` string lists, and strings are written single-quoted with ``\\'``
escapes the way the site's existing posts are.
"""

import re

PREFERRED_ORDER = ("title", "date", "tags", "draft", "summary", "pinned", "pinnedtext")

_DELIMITER = "---"
_QUOTES = "'\""

_NON_SLUG_RE = re.compile(r"[^\w\s-]", re.ASCII)
_WHITESPACE_RE = re.compile(r"\s+")
_HYPHENS_RE = re.compile(r"-+")

# Single-quoted values keep one line each; unknown escapes are left as written.
_ESCAPE_RE = re.compile(r"\\(.)")
_UNESCAPES = {"'": "'", "\\": "\\", "n": "\n", "r": "\r"}


def slugify(title: str) -> str:
    """Derive the storage key for a post from its title."""
    slug = title.lower().strip()
    slug = _NON_SLUG_RE.sub("", slug)
    slug = _WHITESPACE_RE.sub("-", slug)
    return _HYPHENS_RE.sub("-", slug)


def _parse_value(raw: str):
    value = raw.strip()
    if value.startswith("[") and value.endswith("]"):
        inner = value[1:-1].strip()
        if not inner:
            return []
        return [item.strip().strip(_QUOTES) for item in inner.split(",")]
    if value == "true":
        return True
    if value == "false":
        return False
    if len(value) >= 2 and value[0] == value[-1] and value[0] in _QUOTES:
        inner = value[1:-1]
        if value[0] == "'":
            inner = _ESCAPE_RE.sub(lambda m: _UNESCAPES.get(m.group(1), m.group(0)), inner)
        return inner
    return value


def parse_frontmatter(content: str) -> tuple[dict, str]:
    """Split raw post text into (frontmatter, body).

    Text without a complete ``---`` block is returned whole as the body with
    empty frontmatter; malformed lines inside the block are skipped.
    """
    lines = content.split("\n")
    if not lines or lines[0].strip() != _DELIMITER:
        return {}, content

    end_idx = None
    for i, line in enumerate(lines[1:], 1):
        if line.strip() == _DELIMITER:
            end_idx = i
            break

    if end_idx is None:
        return {}, content

    frontmatter: dict = {}
    for line in lines[1:end_idx]:
        key, sep, raw = line.partition(":")
        if not sep or not key.strip():
            continue
        frontmatter[key.strip()] = _parse_value(raw)

    body = "\n".join(lines[end_idx + 1 :]).strip()
    return frontmatter, body


def _format_value(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(str(item) for item in value) + "]"
    if isinstance(value, str):
        escaped = value.replace("\\", "\\\\").replace("'", "\\'")
        escaped = escaped.replace("\n", "\\n").replace("\r", "\\r")
        return "'" + escaped + "'"
    return str(value)


def build_frontmatter(frontmatter: dict) -> str:
    """Render the ``---`` block. Known keys first, extras in encounter order."""
    ordered = [k for k in PREFERRED_ORDER if k in frontmatter]
    ordered += [k for k in frontmatter if k not in PREFERRED_ORDER]

    lines = [_DELIMITER]
    for key in ordered:
        value = frontmatter[key]
        if value is None:
            continue
        lines.append(f"{key}: {_format_value(value)}")
    lines.append(_DELIMITER)
    return "\n".join(lines)


def render_document(frontmatter: dict, body: str) -> str:
    return f"{build_frontmatter(frontmatter)}\n\n{body.strip()}\n"
