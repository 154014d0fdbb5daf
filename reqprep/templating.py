"""reqprep templating - {{var}} placeholder substitution and raw entry parsing."""

import json
import re
from collections.abc import Callable, Sequence

from reqprep.errors import RawEntryParseError, TemplateResolutionError
from reqprep.models import KeyValue, Variable
from reqprep.scope import bindings

PLACEHOLDER_RE = re.compile(r"\{\{([^{}]+?)\}\}")

# Variables may reference other variables; give up after this many passes.
MAX_EXPAND_DEPTH = 10

_Pass = Callable[[str, dict[str, str]], tuple[str, bool]]


def _substitute(text: str, table: dict[str, str]) -> tuple[str, bool]:
    """One substitution pass. Returns (text, whether anything was bound)."""
    found = False

    def _replace(m: re.Match) -> str:
        nonlocal found
        value = table.get(m.group(1).strip())
        if value is None:
            return m.group(0)
        found = True
        return value

    return PLACEHOLDER_RE.sub(_replace, text), found


def _substitute_json(text: str, table: dict[str, str]) -> tuple[str, bool]:
    """Like _substitute, but JSON-escapes values landing inside string literals."""
    out: list[str] = []
    found = False
    in_string = False
    escaped = False
    pos = 0

    for m in PLACEHOLDER_RE.finditer(text):
        for ch in text[pos : m.start()]:
            if escaped:
                escaped = False
            elif ch == "\\" and in_string:
                escaped = True
            elif ch == '"':
                in_string = not in_string
        out.append(text[pos : m.start()])

        value = table.get(m.group(1).strip())
        if value is None:
            out.append(m.group(0))
        else:
            found = True
            out.append(json.dumps(value, ensure_ascii=False)[1:-1] if in_string else value)
        pos = m.end()

    out.append(text[pos:])
    return "".join(out), found


def _expand(text: str, table: dict[str, str], substitute: _Pass) -> str:
    result = text
    for _ in range(MAX_EXPAND_DEPTH):
        result, found = substitute(result, table)
        if not found:
            return result
    # Still substituting after the last pass: a variable refers to itself.
    if substitute(result, table)[1]:
        raise TemplateResolutionError(text, "Variable expansion loop")
    return result


def resolve_template(
    text: str,
    scope: Sequence[Variable],
    local_vars: Sequence[Variable] = (),
) -> str:
    """Resolve {{name}} placeholders against scope.

    local_vars, when given, shadow scope. Unbound placeholders are left
    as-is. If expansion loops, the original text is returned.
    """
    table = bindings((*local_vars, *scope))
    try:
        return _expand(text, table, _substitute)
    except TemplateResolutionError:
        return text


def resolve_template_checked(text: str, scope: Sequence[Variable]) -> str:
    """Resolve placeholders, raising TemplateResolutionError on any miss."""
    result = _expand(text, bindings(scope), _substitute)
    m = PLACEHOLDER_RE.search(result)
    if m:
        raise TemplateResolutionError(text, f"Unbound variable '{m.group(1).strip()}'")
    return result


def is_json_content_type(content_type: str | None) -> bool:
    if not content_type:
        return False
    mime = content_type.split(";", 1)[0].strip().lower()
    return mime.endswith("/json") or mime.endswith("+json")


def resolve_body_template(
    text: str,
    scope: Sequence[Variable],
    content_type: str | None = None,
) -> str:
    """Resolve placeholders in a raw body.

    For JSON bodies, values substituted inside string literals are escaped
    so the document stays valid. Never raises.
    """
    substitute = _substitute_json if is_json_content_type(content_type) else _substitute
    try:
        return _expand(text, bindings(scope), substitute)
    except TemplateResolutionError:
        return text


def parse_raw_entries(raw: str) -> list[KeyValue]:
    """Parse raw form text into entries.

    Entries are separated by newlines or '&'. A leading '#' disables an
    entry. Each entry must contain '='; the first one splits key and value.
    """
    entries: list[KeyValue] = []
    for line in raw.splitlines():
        for chunk in line.split("&"):
            chunk = chunk.strip()
            active = not chunk.startswith("#")
            if not active:
                chunk = chunk[1:].strip()
            if not chunk:
                continue
            if "=" not in chunk:
                raise RawEntryParseError(chunk)
            key, value = chunk.split("=", 1)
            entries.append(KeyValue(key=key.strip(), value=value.strip(), active=active))
    return entries
