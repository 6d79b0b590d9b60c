"""Contract tests run against every row of the forwarding table.

Each route must: reject a missing credential locally, relay 2xx JSON
verbatim, relay upstream errors with their status, and map connection
failures and HTML error pages to a generic 500.
"""

from __future__ import annotations

from typing import Any

import httpx
import pytest

from flowhr.common.constants import (
    MSG_CONNECT_FAILED,
    MSG_HTML_RESPONSE,
    MSG_INVALID_RESPONSE,
    BodyKind,
    CredentialSource,
)
from flowhr.proxy.routes import ROUTES
from flowhr.proxy.schemas import ProxyRoute
from tests.conftest import TEST_TOKEN

ALL_ROUTES: list[ProxyRoute] = [route for group in ROUTES.values() for route in group]

_SAMPLE_PARAMS = {"month": "5", "year": "2024"}


class _SampleParams(dict):
    def __missing__(self, key: str) -> str:
        return f"{key}-42"


def sample_call(route: ProxyRoute) -> tuple[str, str, dict[str, Any]]:
    """A valid inbound call for ``route`` (minus credentials)."""
    url = "/api" + route.path.format_map(_SampleParams(_SAMPLE_PARAMS))
    kwargs: dict[str, Any] = {}
    if route.name == "users_birthdays_by_query":
        kwargs["params"] = {"month": "5"}
    if route.body is BodyKind.json:
        kwargs["json"] = {"password": "N3w-Passw0rd", "notes": "sample"}
    elif route.body is BodyKind.multipart:
        kwargs["files"] = {"avatar": ("me.png", b"\x89PNG fake", "image/png")}
    return route.method, url, kwargs


def _ids(route: ProxyRoute) -> str:
    return route.name


@pytest.fixture(params=ALL_ROUTES, ids=_ids)
def route(request) -> ProxyRoute:
    return request.param


# ═════════════════════════════════════════════════════════════════════
# CREDENTIALS
# ═════════════════════════════════════════════════════════════════════


class TestMissingCredential:
    async def test_401_without_credential_and_no_upstream_call(self, client, backend, route):
        method, url, kwargs = sample_call(route)

        resp = await client.request(method, url, **kwargs)

        assert resp.status_code == 401
        assert resp.json() == {"error": route.unauthorized_detail}
        assert not backend.called

    async def test_non_bearer_scheme_is_rejected(self, client, backend, route):
        method, url, kwargs = sample_call(route)

        resp = await client.request(
            method, url, headers={"Authorization": "Basic dXNlcjpwYXNz"}, **kwargs,
        )

        assert resp.status_code == 401
        assert not backend.called

    async def test_token_is_forwarded_as_bearer(self, client, backend, auth_headers, route):
        method, url, kwargs = sample_call(route)

        await client.request(method, url, headers=auth_headers, **kwargs)

        assert backend.last.headers["Authorization"] == f"Bearer {TEST_TOKEN}"
        assert backend.last.method == route.method


class TestCookieCredential:
    """Routes that accept the ``token`` cookie as well as the header."""

    COOKIE = {"Cookie": "token=cookie-token"}
    COOKIE_ROUTES = [r for r in ALL_ROUTES if r.credential is CredentialSource.cookie_or_header]
    HEADER_ROUTES = [r for r in ALL_ROUTES if r.credential is CredentialSource.header]

    @pytest.mark.parametrize("cookie_route", COOKIE_ROUTES, ids=_ids)
    async def test_cookie_token_is_accepted(self, client, backend, cookie_route):
        method, url, kwargs = sample_call(cookie_route)
        resp = await client.request(method, url, headers=self.COOKIE, **kwargs)

        assert resp.status_code == 200
        assert backend.last.headers["Authorization"] == "Bearer cookie-token"

    @pytest.mark.parametrize("cookie_route", COOKIE_ROUTES[:1], ids=_ids)
    async def test_cookie_wins_over_header(self, client, backend, auth_headers, cookie_route):
        method, url, kwargs = sample_call(cookie_route)
        await client.request(method, url, headers={**auth_headers, **self.COOKIE}, **kwargs)

        assert backend.last.headers["Authorization"] == "Bearer cookie-token"

    @pytest.mark.parametrize("header_route", HEADER_ROUTES, ids=_ids)
    async def test_header_only_routes_ignore_cookie(self, client, backend, header_route):
        method, url, kwargs = sample_call(header_route)
        resp = await client.request(method, url, headers=self.COOKIE, **kwargs)

        assert resp.status_code == 401
        assert not backend.called


# ═════════════════════════════════════════════════════════════════════
# RELAY
# ═════════════════════════════════════════════════════════════════════


class TestSuccessRelay:
    async def test_2xx_json_is_relayed_verbatim(self, client, backend, auth_headers, route):
        body = {"data": [{"_id": "u1", "name": "Ada"}], "total": 1}
        backend.reply_json(201, body)
        method, url, kwargs = sample_call(route)

        resp = await client.request(method, url, headers=auth_headers, **kwargs)

        assert resp.status_code == 201
        assert resp.json() == body

    async def test_upstream_url_uses_configured_base(self, client, backend, auth_headers, route):
        method, url, kwargs = sample_call(route)

        await client.request(method, url, headers=auth_headers, **kwargs)

        assert str(backend.last.url).startswith("http://backend.test/api/")

    async def test_empty_2xx_is_relayed_without_body(self, client, backend, auth_headers):
        backend.handler = lambda request: httpx.Response(204)

        resp = await client.delete("/api/payroll/p-1", headers=auth_headers)

        assert resp.status_code == 204
        assert resp.content == b""

    async def test_non_json_2xx_becomes_500(self, client, backend, auth_headers):
        backend.reply_text(200, "plain words")

        resp = await client.get("/api/users/managers", headers=auth_headers)

        assert resp.status_code == 500
        assert resp.json() == {"error": MSG_INVALID_RESPONSE}

    @pytest.mark.parametrize("literal", ["NaN", "Infinity", "-Infinity"])
    async def test_non_standard_json_constant_becomes_500(
        self, client, backend, auth_headers, literal,
    ):
        backend.reply_text(200, f'{{"value": {literal}}}', content_type="application/json")

        resp = await client.get("/api/users/managers", headers=auth_headers)

        assert resp.status_code == 500
        assert resp.json() == {"error": MSG_INVALID_RESPONSE}
        assert "X-Request-ID" in resp.headers

    async def test_non_standard_json_constant_in_error_is_kept_as_text(
        self, client, backend, auth_headers,
    ):
        backend.reply_text(422, '{"score": NaN}', content_type="application/json")

        resp = await client.get("/api/leave/balance", headers=auth_headers)

        assert resp.status_code == 422
        assert resp.json() == {"error": '{"score": NaN}'}


class TestErrorRelay:
    async def test_upstream_error_status_and_message_relayed(
        self, client, backend, auth_headers, route,
    ):
        backend.reply_json(403, {"error": "Access denied for role employee"})
        method, url, kwargs = sample_call(route)

        resp = await client.request(method, url, headers=auth_headers, **kwargs)

        assert resp.status_code == 403
        assert resp.json()["error"] == "Access denied for role employee"

    async def test_connection_refused_is_500(self, client, backend, auth_headers, route):
        backend.refuse_connection()
        method, url, kwargs = sample_call(route)

        resp = await client.request(method, url, headers=auth_headers, **kwargs)

        assert resp.status_code == 500
        assert resp.json() == {"error": MSG_CONNECT_FAILED}

    async def test_html_error_page_is_500(self, client, backend, auth_headers, route):
        backend.reply_text(502, "<html><body>Bad Gateway</body></html>", "text/html")
        method, url, kwargs = sample_call(route)

        resp = await client.request(method, url, headers=auth_headers, **kwargs)

        assert resp.status_code == 500
        assert resp.json() == {"error": MSG_HTML_RESPONSE}

    async def test_html_on_2xx_is_also_500(self, client, backend, auth_headers):
        backend.reply_text(200, "<!doctype html><p>login</p>", "text/html; charset=utf-8")

        resp = await client.delete("/api/users/avatar", headers=auth_headers)

        assert resp.status_code == 500
        assert resp.json() == {"error": MSG_HTML_RESPONSE}


class TestPassthroughPolicy:
    """Avatar, leave, attendance, payroll and notification routes."""

    async def test_full_error_body_is_relayed(self, client, backend, auth_headers):
        body = {"error": "Leave overlaps", "conflicts": ["2024-05-02"]}
        backend.reply_json(409, body)

        resp = await client.post(
            "/api/leave/request", headers=auth_headers, json={"leaveType": "annual"},
        )

        assert resp.status_code == 409
        assert resp.json() == body

    async def test_plain_text_error_is_wrapped(self, client, backend, auth_headers):
        backend.reply_text(503, "backend warming up")

        resp = await client.get("/api/leave/monthly", headers=auth_headers)

        assert resp.status_code == 503
        assert resp.json() == {"error": "backend warming up"}

    async def test_empty_error_falls_back_to_reason_phrase(self, client, backend, auth_headers):
        backend.reply_text(404, "")

        resp = await client.get("/api/attendance/my-records", headers=auth_headers)

        assert resp.status_code == 404
        assert resp.json() == {"error": "Not Found"}


class TestMessagePolicy:
    """User-management routes rewrite errors to ``{"error": message}``."""

    async def test_extra_fields_are_dropped(self, client, backend, auth_headers):
        backend.reply_json(400, {"error": "Email taken", "field": "email"})

        resp = await client.post("/api/users/create", headers=auth_headers, json={"email": "a@b.c"})

        assert resp.status_code == 400
        assert resp.json() == {"error": "Email taken"}

    async def test_message_key_is_used_when_error_missing(self, client, backend, auth_headers):
        backend.reply_json(404, {"message": "User not found"})

        resp = await client.put(
            "/api/users/change-password/u1", headers=auth_headers, json={"password": "x1"},
        )

        assert resp.status_code == 404
        assert resp.json() == {"error": "User not found"}

    async def test_route_fallback_when_body_has_no_message(self, client, backend, auth_headers):
        backend.reply_json(500, {"code": 17})

        resp = await client.put(
            "/api/users/change-password/u1", headers=auth_headers, json={"password": "x1"},
        )

        assert resp.status_code == 500
        assert resp.json() == {"error": "Failed to change password"}

    async def test_unparseable_error_keeps_raw_text(self, client, backend, auth_headers):
        backend.reply_text(502, "upstream exploded")

        resp = await client.get("/api/users/managers", headers=auth_headers)

        assert resp.status_code == 502
        assert resp.json() == {"error": "upstream exploded"}


# ═════════════════════════════════════════════════════════════════════
# FORWARDING DETAILS
# ═════════════════════════════════════════════════════════════════════


class TestForwarding:
    async def test_json_body_is_forwarded_unmodified(self, client, backend, auth_headers):
        payload = {"employeeId": "e1", "month": 5, "year": 2024, "bonuses": {"performance": 200}}

        await client.post("/api/payroll/generate", headers=auth_headers, json=payload)

        assert backend.last_json() == payload
        assert backend.last.headers["content-type"] == "application/json"

    async def test_get_query_is_forwarded(self, client, backend, auth_headers):
        await client.get(
            "/api/payroll",
            headers=auth_headers,
            params={"month": "5", "year": "2024", "status": "approved"},
        )

        assert backend.last.url.path == "/api/payroll"
        assert dict(backend.last.url.params) == {"month": "5", "year": "2024", "status": "approved"}

    async def test_user_routes_do_not_forward_query(self, client, backend, auth_headers):
        await client.get("/api/users/managers", headers=auth_headers, params={"debug": "1"})

        assert backend.last.url.query == b""

    async def test_path_params_are_url_encoded(self, client, backend, auth_headers):
        await client.get("/api/payroll/employee/a%20b", headers=auth_headers)

        assert backend.last.url.raw_path == b"/api/payroll/employee/a%20b"

    async def test_empty_json_body_sends_no_body(self, client, backend, auth_headers):
        await client.post("/api/attendance/clock-in", headers=auth_headers)

        assert backend.last.content == b""

    async def test_malformed_json_body_is_400(self, client, backend, auth_headers):
        resp = await client.post(
            "/api/leave/request",
            headers={**auth_headers, "content-type": "application/json"},
            content=b"{not json",
        )

        assert resp.status_code == 400
        assert resp.json() == {"error": "Request body must be valid JSON"}
        assert not backend.called

    async def test_request_id_is_forwarded(self, client, backend, auth_headers):
        resp = await client.get(
            "/api/leave/balance", headers={**auth_headers, "X-Request-ID": "req-77"},
        )

        assert backend.last.headers["X-Request-ID"] == "req-77"
        assert resp.headers["X-Request-ID"] == "req-77"

    async def test_payroll_literal_paths_win_over_id(self, client, backend, auth_headers):
        await client.get("/api/payroll/my-payslips", headers=auth_headers)

        assert backend.last.url.path == "/api/payroll/my-payslips"

    async def test_approve_uses_patch(self, client, backend, auth_headers):
        await client.patch(
            "/api/payroll/p-9/approve", headers=auth_headers, json={"notes": "ok"},
        )

        assert backend.last.method == "PATCH"
        assert backend.last.url.path == "/api/payroll/p-9/approve"
        assert backend.last_json() == {"notes": "ok"}
