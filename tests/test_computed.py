"""Tests for headers and params derived from auth and body config."""

import base64

import pytest

from reqprep.computed import (
    ComputedHeader,
    ComputedParam,
    computed_headers,
    computed_params,
    has_header,
)
from reqprep.models import (
    ApiKeyAuth,
    ApiKeyTarget,
    BasicAuth,
    BearerAuth,
    KeyValue,
    MultipartBody,
    NoAuth,
    NoBody,
    OAuth2Auth,
    RawBody,
    Request,
    UrlEncodedBody,
    Variable,
)

SCOPE = (Variable("token", "abc"), Variable("user", "u"), Variable("pass", "p"))


def _auth_headers(request, scope=SCOPE):
    return [c.header for c in computed_headers(request, scope) if c.source == "auth"]


def _body_headers(request):
    return [c.header for c in computed_headers(request, ()) if c.source == "body"]


# ── has_header ───────────────────────────────────────────────────────────


class TestHasHeader:
    def test_case_insensitive(self):
        assert has_header([KeyValue("AUTHORIZATION", "x")], "authorization")

    def test_inactive_counts_by_default(self):
        assert has_header([KeyValue("Authorization", "x", active=False)], "authorization")

    def test_inactive_ignored_when_active_only(self):
        headers = [KeyValue("Content-Type", "text/plain", active=False)]
        assert not has_header(headers, "content-type", active_only=True)


# ── auth headers ─────────────────────────────────────────────────────────


class TestAuthHeaders:
    def test_basic(self):
        req = Request(auth=BasicAuth("u", "p"))
        expected = "Basic " + base64.b64encode(b"u:p").decode()
        assert _auth_headers(req) == [KeyValue("Authorization", expected)]

    def test_basic_resolves_templates(self):
        req = Request(auth=BasicAuth("{{user}}", "{{pass}}"))
        assert _auth_headers(req)[0].value == "Basic " + base64.b64encode(b"u:p").decode()

    def test_basic_non_ascii(self):
        req = Request(auth=BasicAuth("üser", "pä"))
        expected = "Basic " + base64.b64encode("üser:pä".encode()).decode()
        assert _auth_headers(req)[0].value == expected

    def test_bearer(self):
        req = Request(auth=BearerAuth("{{token}}"))
        assert _auth_headers(req) == [KeyValue("Authorization", "Bearer abc")]

    def test_oauth2_uses_bearer(self):
        req = Request(auth=OAuth2Auth("{{token}}"))
        assert _auth_headers(req) == [KeyValue("Authorization", "Bearer abc")]

    def test_api_key_in_headers(self):
        req = Request(auth=ApiKeyAuth("X-Api-Key", "{{token}}", ApiKeyTarget.HEADERS))
        assert _auth_headers(req) == [KeyValue("X-Api-Key", "abc")]

    def test_api_key_in_query_adds_no_header(self):
        req = Request(auth=ApiKeyAuth("X", "{{token}}", ApiKeyTarget.QUERY_PARAMS))
        assert _auth_headers(req) == []

    def test_no_auth(self):
        assert _auth_headers(Request(auth=NoAuth())) == []

    def test_inactive_auth(self):
        assert _auth_headers(Request(auth=BearerAuth("t", active=False))) == []

    @pytest.mark.parametrize("active", [True, False])
    def test_explicit_authorization_suppresses(self, active):
        req = Request(
            headers=(KeyValue("authorization", "Custom x", active=active),),
            auth=BasicAuth("u", "p"),
        )
        assert _auth_headers(req) == []

    def test_explicit_authorization_suppresses_api_key_header(self):
        req = Request(
            headers=(KeyValue("Authorization", "x"),),
            auth=ApiKeyAuth("X-Api-Key", "k"),
        )
        assert _auth_headers(req) == []

    def test_unknown_auth_type(self):
        class WeirdAuth:
            active = True

        with pytest.raises(TypeError):
            computed_headers(Request(auth=WeirdAuth()), ())


# ── body headers ─────────────────────────────────────────────────────────


class TestBodyHeaders:
    def test_raw_content_type(self):
        req = Request(body=RawBody("application/json", "{}"))
        assert _body_headers(req) == [KeyValue("content-type", "application/json")]

    def test_urlencoded(self):
        req = Request(body=UrlEncodedBody("a=1"))
        assert _body_headers(req) == [KeyValue("content-type", "application/x-www-form-urlencoded")]

    def test_multipart(self):
        req = Request(body=MultipartBody())
        assert _body_headers(req) == [KeyValue("content-type", "multipart/form-data")]

    def test_no_body(self):
        assert _body_headers(Request(body=NoBody())) == []

    def test_content_type_not_template_resolved(self):
        req = Request(body=RawBody("{{ct}}", ""))
        assert _body_headers(req) == [KeyValue("content-type", "{{ct}}")]

    def test_active_content_type_suppresses(self):
        req = Request(
            headers=(KeyValue("Content-Type", "text/plain"),),
            body=RawBody("application/json", "{}"),
        )
        assert _body_headers(req) == []

    def test_inactive_content_type_does_not_suppress(self):
        req = Request(
            headers=(KeyValue("Content-Type", "text/plain", active=False),),
            body=RawBody("application/json", "{}"),
        )
        assert _body_headers(req) == [KeyValue("content-type", "application/json")]


class TestComputedHeadersOrder:
    def test_auth_before_body(self):
        req = Request(auth=BearerAuth("t"), body=RawBody("text/plain", "x"))
        assert computed_headers(req, ()) == [
            ComputedHeader("auth", KeyValue("Authorization", "Bearer t")),
            ComputedHeader("body", KeyValue("content-type", "text/plain")),
        ]


# ── params ───────────────────────────────────────────────────────────────


class TestComputedParams:
    def test_api_key_in_query(self):
        req = Request(auth=ApiKeyAuth("X", "{{token}}", ApiKeyTarget.QUERY_PARAMS))
        assert computed_params(req, SCOPE) == [ComputedParam("auth", KeyValue("X", "abc"))]

    def test_api_key_in_headers(self):
        req = Request(auth=ApiKeyAuth("X", "v", ApiKeyTarget.HEADERS))
        assert computed_params(req, SCOPE) == []

    def test_inactive(self):
        req = Request(auth=ApiKeyAuth("X", "v", ApiKeyTarget.QUERY_PARAMS, active=False))
        assert computed_params(req, SCOPE) == []

    def test_other_auth(self):
        assert computed_params(Request(auth=BearerAuth("t")), SCOPE) == []
