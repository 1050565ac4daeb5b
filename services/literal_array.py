"""Read and regenerate the site's ``projectsData`` JS module.

The file is a single array-literal assignment. Reading converts the literal
to JSON; writing regenerates the whole file from a fixed layout, so comments
and hand formatting in the file do not survive a programmatic write.
"""

import json
import re

from services.errors import FormatError

VARIABLE = "projectsData"

FIELD_ORDER = ("title", "description", "imgSrc", "href")
OPTIONAL_FIELDS = ("github", "tech1", "tech2", "tech3")

# Whole-line comments only; "//" inside a URL value is left alone.
_COMMENT_LINE_RE = re.compile(r"^\s*//.*$", re.MULTILINE)

# Non-greedy: the first "];" after the opening bracket closes the array.
_ASSIGNMENT_RE = re.compile(
    r"(?:export\s+)?(?:const|let|var)\s+" + VARIABLE + r"\s*=\s*(\[[\s\S]*?\]);"
)

# One pass over the literal: strings are matched first so the key and
# trailing-comma rewrites never touch string contents.
_TOKEN_RE = re.compile(
    r"""
    (?P<single>'(?:\\.|[^'\\])*')
    | (?P<double>"(?:\\.|[^"\\])*")
    | (?P<key>[A-Za-z_$][\w$]*)(?=\s*:)
    | (?P<comma>,)(?=\s*[\]}])
    """,
    re.VERBOSE,
)


def _unescape_single(literal: str) -> str:
    inner = literal[1:-1]
    escapes = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\", "'": "'", '"': '"'}
    return re.sub(r"\\(.)", lambda m: escapes.get(m.group(1), m.group(1)), inner)


def _to_json(literal: str) -> str:
    def replace(match: re.Match) -> str:
        if match.group("single"):
            return json.dumps(_unescape_single(match.group("single")))
        if match.group("double"):
            return match.group("double")
        if match.group("key"):
            return json.dumps(match.group("key"))
        return ""

    return _TOKEN_RE.sub(replace, literal)


def parse_projects(source: str) -> list[dict]:
    """Extract the project records from the module source."""
    stripped = _COMMENT_LINE_RE.sub("", source)
    match = _ASSIGNMENT_RE.search(stripped)
    if not match:
        raise FormatError(f"Invalid projects file format: no '{VARIABLE} = [...];' assignment")

    literal = re.sub(r"[\t\r]", " ", match.group(1))
    try:
        records = json.loads(_to_json(literal))
    except json.JSONDecodeError as e:
        raise FormatError(f"Failed to parse projects: {e}") from e

    if not all(isinstance(r, dict) for r in records):
        raise FormatError("Failed to parse projects: every entry must be an object")
    return records


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    escaped = escaped.replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")
    return "'" + escaped + "'"


def _render_record(record: dict) -> str:
    fields = [f"  {key}: {_quote(record.get(key) or '')}" for key in FIELD_ORDER]
    fields += [f"  {key}: {_quote(record[key])}" for key in OPTIONAL_FIELDS if record.get(key)]
    return "{\n" + ",\n".join(fields) + "\n},"


def render_projects(records: list[dict]) -> str:
    """Regenerate the full module source for ``records``."""
    body = "\n".join(_render_record(r) for r in records)
    return f"const {VARIABLE} = [\n{body}\n];\n\nexport default {VARIABLE};\n"
