"""reqprep body - turn a declared body into what would be sent."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from urllib.parse import quote, urlencode

from reqprep.errors import RawEntryParseError, TemplateResolutionError
from reqprep.models import (
    Body,
    FileBlob,
    FormDataEntry,
    MultipartBody,
    NoBody,
    RawBody,
    UrlEncodedBody,
    Variable,
)
from reqprep.templating import (
    parse_raw_entries,
    resolve_body_template,
    resolve_template,
    resolve_template_checked,
)

logger = logging.getLogger(__name__)

FieldValue = str | FileBlob


@dataclass(frozen=True, slots=True)
class MultipartForm:
    """Ordered multipart/form-data fields.

    A name may repeat; each file blob is its own field.
    """

    fields: tuple[tuple[str, FieldValue], ...] = ()

    @classmethod
    def from_pairs(cls, pairs: Sequence[tuple[str, FieldValue]]) -> MultipartForm:
        return cls(tuple((name, value) for name, value in pairs))

    def __iter__(self) -> Iterator[tuple[str, FieldValue]]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def keys(self) -> list[str]:
        return [name for name, _ in self.fields]

    def getall(self, name: str) -> list[FieldValue]:
        return [value for key, value in self.fields if key == name]

    def to_requests_files(self) -> list[tuple[str, tuple]]:
        """Ordered list for the ``files=`` argument of requests.

        Text fields use a None filename so they are sent as plain form
        fields, not as uploads.
        """
        out: list[tuple[str, tuple]] = []
        for name, value in self.fields:
            if isinstance(value, FileBlob):
                out.append((name, (value.filename, value.content, value.content_type)))
            else:
                out.append((name, (None, value)))
        return out


# ── urlencoded ───────────────────────────────────────────────────────────


def _group_by_key(pairs: Sequence[tuple[str, str]]) -> dict[str, list[str]]:
    """Group values under their key, keys in first-seen order."""
    grouped: dict[str, list[str]] = {}
    for key, value in pairs:
        grouped.setdefault(key, []).append(value)
    return grouped


def encode_form(grouped: dict[str, list[str]]) -> str:
    """Query-string encode; repeated keys become ``k=a&k=b`` (no indices)."""
    return urlencode(
        [(key, value) for key, values in grouped.items() for value in values],
        quote_via=quote,
    )


def _materialize_urlencoded(body: UrlEncodedBody, scope: Sequence[Variable]) -> str | None:
    try:
        entries = parse_raw_entries(body.raw)
    except RawEntryParseError as e:
        logger.debug("Discarding urlencoded body: %s", e)
        return None

    pairs: list[tuple[str, str]] = []
    for entry in entries:
        if not entry.active or not entry.key:
            continue
        try:
            key = resolve_template_checked(entry.key, scope)
            value = resolve_template_checked(entry.value, scope)
        except TemplateResolutionError as e:
            logger.debug("Dropping urlencoded entry %r: %s", entry.key, e)
            continue
        pairs.append((key, value))

    return encode_form(_group_by_key(pairs))


# ── multipart ────────────────────────────────────────────────────────────


def _is_file_entry(entry: FormDataEntry) -> bool:
    """A blob tuple value makes an entry a file upload whatever its flag says."""
    return entry.is_file or not isinstance(entry.value, str)


def _expand_form_entry(entry: FormDataEntry, scope: Sequence[Variable]) -> list[tuple[str, FieldValue]]:
    key = resolve_template(entry.key, scope)
    if not isinstance(entry.value, str):
        # One field per blob; they share the key.
        return [(key, blob) for blob in entry.value]
    return [(key, resolve_template(entry.value, scope))]


def _materialize_multipart(body: MultipartBody, scope: Sequence[Variable]) -> MultipartForm:
    entries = [e for e in body.entries if e.key != "" and e.active]
    # Files go last; sorted() is stable so declaration order is kept otherwise.
    entries = sorted(entries, key=_is_file_entry)

    pairs: list[tuple[str, FieldValue]] = []
    for entry in entries:
        pairs.extend(_expand_form_entry(entry, scope))
    return MultipartForm.from_pairs(pairs)


def materialize_body(body: Body, scope: Sequence[Variable]) -> MultipartForm | str | None:
    """Build the final body for a request.

    Returns None for no body (or an unparseable urlencoded body), a string
    for urlencoded and raw bodies, or a MultipartForm.
    """
    if isinstance(body, NoBody):
        return None
    if isinstance(body, UrlEncodedBody):
        return _materialize_urlencoded(body, scope)
    if isinstance(body, MultipartBody):
        return _materialize_multipart(body, scope)
    if isinstance(body, RawBody):
        return resolve_body_template(body.raw, scope, body.content_type)
    raise TypeError(f"Unsupported body type: {type(body).__name__}")


def resolve_body_variables(body: Body, scope: Sequence[Variable]) -> Body:
    """Resolve placeholders in a body but keep its declared shape.

    Multipart entries are all kept, inactive ones included, with their
    flags; keys are resolved, and so are values that are not file blobs.
    Urlencoded and raw bodies have their whole text resolved.
    """
    if isinstance(body, NoBody):
        return body
    if isinstance(body, MultipartBody):
        return MultipartBody(
            tuple(
                FormDataEntry(
                    key=resolve_template(e.key, scope),
                    value=e.value if not isinstance(e.value, str) else resolve_template(e.value, scope),
                    active=e.active,
                    is_file=e.is_file,
                )
                for e in body.entries
            )
        )
    if isinstance(body, UrlEncodedBody):
        return UrlEncodedBody(resolve_template(body.raw, scope))
    if isinstance(body, RawBody):
        return RawBody(body.content_type, resolve_body_template(body.raw, scope, body.content_type))
    raise TypeError(f"Unsupported body type: {type(body).__name__}")
