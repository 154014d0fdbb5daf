"""reqprep prepare - wire-level form of an effective request (no I/O)."""

from typing import Any

import requests

from reqprep.body import MultipartForm
from reqprep.models import EffectiveRequest, FileBlob


def _header_dict(effective: EffectiveRequest) -> dict[str, str]:
    """Final headers as a dict; a later row replaces an earlier one."""
    headers: dict[str, str] = {}
    lowered: dict[str, str] = {}
    for row in effective.final_headers:
        previous = lowered.get(row.key.lower())
        if previous is not None:
            del headers[previous]
        headers[row.key] = row.value
        lowered[row.key.lower()] = row.key
    return headers


def prepare_request(effective: EffectiveRequest) -> requests.PreparedRequest:
    """Build a requests.PreparedRequest. Nothing is sent.

    Query params are appended to the URL and the body is encoded. For a
    multipart body the content-type header is left to requests so it
    carries the boundary.
    """
    headers = _header_dict(effective)
    kwargs: dict[str, Any] = {
        "method": effective.method.upper(),
        "url": effective.final_url,
        "params": [(p.key, p.value) for p in effective.final_params],
    }

    body = effective.final_body
    if isinstance(body, MultipartForm):
        for key in [k for k in headers if k.lower() == "content-type"]:
            del headers[key]
        kwargs["files"] = body.to_requests_files()
    elif body is not None:
        kwargs["data"] = body.encode("utf-8")

    kwargs["headers"] = headers
    return requests.Request(**kwargs).prepare()


def _shell_quote(s: str) -> str:
    if not s:
        return "''"
    if all(c.isalnum() or c in "-_=./:@" for c in s):
        return s
    return "'" + s.replace("'", "'\\''") + "'"


def format_curl(effective: EffectiveRequest) -> str:
    """Render the request as a curl command line."""
    prepared = prepare_request(effective)
    parts = ["curl", "-X", prepared.method or "GET", _shell_quote(prepared.url or "")]

    body = effective.final_body
    for key, value in _header_dict(effective).items():
        if isinstance(body, MultipartForm) and key.lower() == "content-type":
            continue
        parts += ["-H", _shell_quote(f"{key}: {value}")]

    if isinstance(body, MultipartForm):
        for name, value in body:
            if isinstance(value, FileBlob):
                parts += ["-F", _shell_quote(f"{name}=@{value.filename};type={value.content_type}")]
            else:
                parts += ["-F", _shell_quote(f"{name}={value}")]
    elif body is not None:
        parts += ["--data-raw", _shell_quote(body)]

    return " ".join(parts)
