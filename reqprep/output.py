"""reqprep output - render effective requests for the terminal."""

from __future__ import annotations

import json
from typing import Any

from reqprep.body import MultipartForm
from reqprep.models import EffectiveRequest, FileBlob


def _field_to_dict(name: str, value: str | FileBlob) -> dict[str, Any]:
    if isinstance(value, FileBlob):
        return {
            "key": name,
            "file": value.filename,
            "content_type": value.content_type,
            "size": len(value.content),
        }
    return {"key": name, "value": value}


def body_to_data(body: MultipartForm | str | None) -> Any:
    if isinstance(body, MultipartForm):
        return [_field_to_dict(name, value) for name, value in body]
    return body


def effective_to_dict(effective: EffectiveRequest) -> dict[str, Any]:
    """JSON-safe view of the resolved parts of a request."""
    return {
        "name": effective.name,
        "method": effective.method,
        "url": effective.final_url,
        "headers": [{"key": h.key, "value": h.value} for h in effective.final_headers],
        "params": [{"key": p.key, "value": p.value} for p in effective.final_params],
        "body": body_to_data(effective.final_body),
        "vars": [{"key": v.key, "value": v.value} for v in effective.final_vars],
    }


def format_effective(effective: EffectiveRequest, as_json: bool = False) -> str:
    """Format an effective request for CLI output.

    Default output:
        GET https://example.com/items
        PARAMS:
          page: 2
        HEADERS:
          Authorization: Bearer abc
        BODY:
        {"id": 1}
    """
    if as_json:
        return json.dumps(effective_to_dict(effective), indent=2)

    lines: list[str] = [f"{effective.method} {effective.final_url}"]

    if effective.final_params:
        lines.append("PARAMS:")
        for p in effective.final_params:
            lines.append(f"  {p.key}: {p.value}")

    if effective.final_headers:
        lines.append("HEADERS:")
        for h in effective.final_headers:
            lines.append(f"  {h.key}: {h.value}")

    body = effective.final_body
    if isinstance(body, MultipartForm):
        lines.append("BODY (multipart):")
        for name, value in body:
            if isinstance(value, FileBlob):
                lines.append(f"  {name}: @{value.filename} ({value.content_type}, {len(value.content)} bytes)")
            else:
                lines.append(f"  {name}: {value}")
    elif body is not None:
        lines.append("BODY:")
        lines.append(body)

    return "\n".join(lines)
