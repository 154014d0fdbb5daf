"""reqprep computed - headers and params implied by auth and body config."""

import base64
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Literal

from reqprep.models import (
    ApiKeyAuth,
    ApiKeyTarget,
    BasicAuth,
    BearerAuth,
    KeyValue,
    NoAuth,
    OAuth2Auth,
    Request,
    Variable,
)
from reqprep.templating import resolve_template


@dataclass(frozen=True, slots=True)
class ComputedHeader:
    source: Literal["auth", "body"]
    header: KeyValue


@dataclass(frozen=True, slots=True)
class ComputedParam:
    source: Literal["auth"]
    param: KeyValue


def has_header(headers: Iterable[KeyValue], name: str, active_only: bool = False) -> bool:
    """True if a header with this name (case-insensitive) is declared."""
    name = name.lower()
    return any(h.key.lower() == name and (h.active or not active_only) for h in headers)


def computed_auth_headers(request: Request, scope: Sequence[Variable]) -> list[KeyValue]:
    """Headers generated by the request's auth config.

    A user-defined Authorization header (even a disabled one) takes
    priority and suppresses these.
    """
    auth = request.auth

    if has_header(request.headers, "authorization"):
        return []
    if not auth.active:
        return []

    if isinstance(auth, BasicAuth):
        username = resolve_template(auth.username, scope)
        password = resolve_template(auth.password, scope)
        credentials = base64.b64encode(f"{username}:{password}".encode()).decode()
        return [KeyValue("Authorization", f"Basic {credentials}")]

    if isinstance(auth, BearerAuth | OAuth2Auth):
        return [KeyValue("Authorization", f"Bearer {resolve_template(auth.token, scope)}")]

    if isinstance(auth, ApiKeyAuth):
        if auth.add_to is ApiKeyTarget.HEADERS:
            return [
                KeyValue(
                    resolve_template(auth.key, scope),
                    resolve_template(auth.value, scope),
                )
            ]
        return []

    if isinstance(auth, NoAuth):
        return []

    raise TypeError(f"Unsupported auth type: {type(auth).__name__}")


def computed_body_headers(request: Request) -> list[KeyValue]:
    """content-type header derived from the body, unless one is already set."""
    if has_header(request.headers, "content-type", active_only=True):
        return []

    content_type = request.body.content_type
    if content_type is None:
        return []

    return [KeyValue("content-type", content_type)]


def computed_headers(request: Request, scope: Sequence[Variable]) -> list[ComputedHeader]:
    """Headers added during execution, tagged with where they came from."""
    return [
        *(ComputedHeader("auth", h) for h in computed_auth_headers(request, scope)),
        *(ComputedHeader("body", h) for h in computed_body_headers(request)),
    ]


def computed_params(request: Request, scope: Sequence[Variable]) -> list[ComputedParam]:
    """Query params added during execution (API key sent as a query param)."""
    auth = request.auth
    if not auth.active:
        return []
    if not isinstance(auth, ApiKeyAuth):
        return []
    if auth.add_to is not ApiKeyTarget.QUERY_PARAMS:
        return []

    return [
        ComputedParam(
            "auth",
            KeyValue(resolve_template(auth.key, scope), resolve_template(auth.value, scope)),
        )
    ]
