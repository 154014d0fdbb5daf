"""reqprep models - request, environment, auth and body types."""

from __future__ import annotations

import enum
import mimetypes
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from reqprep.body import MultipartForm

URLENCODED = "application/x-www-form-urlencoded"
MULTIPART = "multipart/form-data"


@dataclass(frozen=True, slots=True)
class KeyValue:
    """A header or query parameter row."""

    key: str
    value: str
    active: bool = True


@dataclass(frozen=True, slots=True)
class Variable:
    key: str
    value: str


# ── Auth ─────────────────────────────────────────────────────────────────


class ApiKeyTarget(enum.Enum):
    HEADERS = "headers"
    QUERY_PARAMS = "query"


@dataclass(frozen=True, slots=True)
class NoAuth:
    active: bool = False


@dataclass(frozen=True, slots=True)
class BasicAuth:
    username: str = ""
    password: str = ""
    active: bool = True


@dataclass(frozen=True, slots=True)
class BearerAuth:
    token: str = ""
    active: bool = True


@dataclass(frozen=True, slots=True)
class OAuth2Auth:
    """OAuth 2.0 with an already obtained access token."""

    token: str = ""
    active: bool = True


@dataclass(frozen=True, slots=True)
class ApiKeyAuth:
    key: str = ""
    value: str = ""
    add_to: ApiKeyTarget = ApiKeyTarget.HEADERS
    active: bool = True


Auth = Union[NoAuth, BasicAuth, BearerAuth, OAuth2Auth, ApiKeyAuth]


# ── Body ─────────────────────────────────────────────────────────────────


@dataclass(frozen=True, slots=True)
class FileBlob:
    """In-memory file content attached to a multipart entry."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @classmethod
    def from_path(cls, path: str | Path) -> FileBlob:
        path = Path(path)
        mime = mimetypes.guess_type(str(path))[0] or "application/octet-stream"
        return cls(filename=path.name, content=path.read_bytes(), content_type=mime)


@dataclass(frozen=True, slots=True)
class FormDataEntry:
    key: str
    value: str | tuple[FileBlob, ...] = ""
    active: bool = True
    is_file: bool = False


@dataclass(frozen=True, slots=True)
class NoBody:
    @property
    def content_type(self) -> None:
        return None


@dataclass(frozen=True, slots=True)
class UrlEncodedBody:
    """Form body declared as raw ``key=value`` lines (or ``&``-joined pairs)."""

    raw: str = ""

    @property
    def content_type(self) -> str:
        return URLENCODED


@dataclass(frozen=True, slots=True)
class MultipartBody:
    entries: tuple[FormDataEntry, ...] = ()

    @property
    def content_type(self) -> str:
        return MULTIPART


@dataclass(frozen=True, slots=True)
class RawBody:
    """Any other textual body: JSON, XML, plain text..."""

    content_type: str
    raw: str = ""


Body = Union[NoBody, UrlEncodedBody, MultipartBody, RawBody]


# ── Request / Environment ────────────────────────────────────────────────


@dataclass(frozen=True)
class Request:
    """Declarative request. String fields may carry ``{{var}}`` placeholders."""

    endpoint: str = ""
    method: str = "GET"
    name: str = ""
    headers: tuple[KeyValue, ...] = ()
    params: tuple[KeyValue, ...] = ()
    vars: tuple[Variable, ...] = ()
    auth: Auth = field(default_factory=NoAuth)
    body: Body = field(default_factory=NoBody)


@dataclass(frozen=True)
class Environment:
    name: str = ""
    variables: tuple[Variable, ...] = ()


@dataclass(frozen=True)
class EffectiveRequest(Request):
    """A request with every placeholder resolved and computed rows injected.

    The original request fields are kept as declared; the ``final_*``
    fields hold what would actually be sent.
    """

    final_url: str = ""
    final_headers: tuple[KeyValue, ...] = ()
    final_params: tuple[KeyValue, ...] = ()
    final_body: MultipartForm | str | None = None
    final_vars: tuple[Variable, ...] = ()
