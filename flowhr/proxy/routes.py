"""The forwarding table: one ProxyRoute per gateway endpoint.

Request preparation hooks live here too; they validate route-specific
input and reshape the outbound request before it is sent.
"""

from __future__ import annotations

import re
from datetime import datetime

from flowhr.common.constants import BodyKind, CredentialSource, ErrorRelay
from flowhr.common.exceptions import BadRequestException
from flowhr.proxy.schemas import OutboundRequest, ProxyRoute

MSG_INVALID_MONTH = "Invalid month parameter"
MSG_MONTH_REQUIRED = "Month parameter is required"
MSG_INVALID_YEAR = "Invalid year parameter"
MSG_PASSWORD_REQUIRED = "Password is required"

_DIGITS = re.compile(r"[0-9]+")


# ── Preparation hooks ───────────────────────────────────────────────

def _parse_digits(value: object) -> int | None:
    """ASCII digits only; signs, spaces and underscores are rejected."""
    text = str(value) if value is not None else ""
    if not _DIGITS.fullmatch(text):
        return None
    return int(text)


def parse_month(value: object) -> int:
    """Parse a calendar month; anything outside 1–12 is a 400."""
    month = _parse_digits(value)
    if month is None or not 1 <= month <= 12:
        raise BadRequestException(MSG_INVALID_MONTH)
    return month


def _query_value(outbound: OutboundRequest, name: str) -> str | None:
    for key, value in outbound.query:
        if key == name:
            return value
    return None


def prepare_birthdays_by_path(outbound: OutboundRequest) -> None:
    outbound.path_params["month"] = str(parse_month(outbound.path_params.get("month")))


def prepare_birthdays_by_query(outbound: OutboundRequest) -> None:
    """``?month=N`` on the inbound side becomes ``/N`` upstream."""
    raw = _query_value(outbound, "month")
    if not raw:
        raise BadRequestException(MSG_MONTH_REQUIRED)
    outbound.path_params["month"] = str(parse_month(raw))
    outbound.query = []


def prepare_leave_monthly(outbound: OutboundRequest) -> None:
    month = _query_value(outbound, "month") or str(datetime.now().month)
    outbound.query = [("month", month)]


def prepare_change_password(outbound: OutboundRequest) -> None:
    """Forward only the new password, which must be non-empty."""
    body = outbound.json if isinstance(outbound.json, dict) else {}
    password = body.get("password")
    if not password:
        raise BadRequestException(MSG_PASSWORD_REQUIRED)
    outbound.json = {"password": password}
    outbound.send_json = True


def prepare_payroll_report(outbound: OutboundRequest) -> None:
    outbound.path_params["month"] = str(parse_month(outbound.path_params.get("month")))
    year = _parse_digits(outbound.path_params.get("year"))
    if year is None or year < 1:
        raise BadRequestException(MSG_INVALID_YEAR)
    outbound.path_params["year"] = str(year)


# ── Route table ─────────────────────────────────────────────────────

_AUTH_REQUIRED = "Authentication required"
_NO_AUTH_HEADER = "No authorization header"

USER_ROUTES: list[ProxyRoute] = [
    ProxyRoute(
        name="users_managers",
        method="GET",
        path="/users/managers",
        upstream="/users/managers",
        error_relay=ErrorRelay.message,
    ),
    ProxyRoute(
        name="users_create",
        method="POST",
        path="/users/create",
        upstream="/users/create",
        body=BodyKind.json,
        error_relay=ErrorRelay.message,
    ),
    ProxyRoute(
        name="users_update",
        method="PUT",
        path="/users/update/{id}",
        upstream="/users/update/{id}",
        body=BodyKind.json,
        error_relay=ErrorRelay.message,
    ),
    ProxyRoute(
        name="users_delete",
        method="DELETE",
        path="/users/update/{id}",
        upstream="/users/{id}",
        error_relay=ErrorRelay.message,
    ),
    ProxyRoute(
        name="users_change_password",
        method="PUT",
        path="/users/change-password/{id}",
        upstream="/users/admin-change-password/{id}",
        body=BodyKind.json,
        unauthorized_detail="Authorization header required",
        error_relay=ErrorRelay.message,
        error_fallback="Failed to change password",
        prepare=prepare_change_password,
    ),
    ProxyRoute(
        name="users_birthdays_by_query",
        method="GET",
        path="/users/birthdays",
        upstream="/users/birthdays/{month}",
        unauthorized_detail=_AUTH_REQUIRED,
        error_relay=ErrorRelay.message,
        error_fallback="Failed to fetch birthday employees",
        prepare=prepare_birthdays_by_query,
    ),
    ProxyRoute(
        name="users_birthdays_by_month",
        method="GET",
        path="/users/birthdays/{month}",
        upstream="/users/birthdays/{month}",
        unauthorized_detail=_AUTH_REQUIRED,
        error_relay=ErrorRelay.message,
        error_fallback="Failed to fetch birthday employees",
        prepare=prepare_birthdays_by_path,
    ),
    ProxyRoute(
        name="users_own_avatar_delete",
        method="DELETE",
        path="/users/avatar",
        upstream="/users/avatar",
        unauthorized_detail=_NO_AUTH_HEADER,
    ),
    ProxyRoute(
        name="users_avatar_upload",
        method="POST",
        path="/users/{id}/avatar",
        upstream="/users/{id}/avatar",
        body=BodyKind.multipart,
        unauthorized_detail=_NO_AUTH_HEADER,
    ),
    ProxyRoute(
        name="users_avatar_delete",
        method="DELETE",
        path="/users/{id}/avatar",
        upstream="/users/{id}/avatar",
        unauthorized_detail=_NO_AUTH_HEADER,
    ),
]


def _backend_route(
    name: str,
    method: str,
    path: str,
    *,
    body: BodyKind = BodyKind.none,
    prepare=None,
) -> ProxyRoute:
    """Same-path route for endpoints the pages would otherwise call directly."""
    return ProxyRoute(
        name=name,
        method=method,
        path=path,
        upstream=path,
        body=body,
        credential=CredentialSource.cookie_or_header,
        unauthorized_detail=_AUTH_REQUIRED,
        forward_query=method == "GET",
        prepare=prepare,
    )


LEAVE_ROUTES: list[ProxyRoute] = [
    ProxyRoute(
        name="leave_monthly",
        method="GET",
        path="/leave/monthly",
        upstream="/leave/monthly",
        credential=CredentialSource.cookie_or_header,
        unauthorized_detail=_AUTH_REQUIRED,
        forward_query=True,
        prepare=prepare_leave_monthly,
    ),
    _backend_route("leave_balance", "GET", "/leave/balance"),
    _backend_route("leave_submit", "POST", "/leave/request", body=BodyKind.json),
    _backend_route("leave_my_requests", "GET", "/leave/my-requests"),
    _backend_route("leave_pending", "GET", "/leave/pending"),
    _backend_route("leave_cancel", "POST", "/leave/{leave_id}/cancel", body=BodyKind.json),
    _backend_route("leave_set_status", "POST", "/leave/{leave_id}/status", body=BodyKind.json),
]

ATTENDANCE_ROUTES: list[ProxyRoute] = [
    _backend_route("attendance_clock_in", "POST", "/attendance/clock-in", body=BodyKind.json),
    _backend_route("attendance_clock_out", "POST", "/attendance/clock-out", body=BodyKind.json),
    _backend_route("attendance_my_records", "GET", "/attendance/my-records"),
    _backend_route("attendance_team", "GET", "/attendance/team"),
    _backend_route("attendance_update", "PATCH", "/attendance/{attendance_id}", body=BodyKind.json),
]

# Literal segments are registered before /payroll/{payroll_id}
PAYROLL_ROUTES: list[ProxyRoute] = [
    _backend_route("payroll_my_payslips", "GET", "/payroll/my-payslips"),
    _backend_route("payroll_generate", "POST", "/payroll/generate", body=BodyKind.json),
    _backend_route("payroll_generate_bulk", "POST", "/payroll/generate/bulk", body=BodyKind.json),
    _backend_route("payroll_by_employee", "GET", "/payroll/employee/{employee_id}"),
    _backend_route(
        "payroll_report", "GET", "/payroll/report/{month}/{year}",
        prepare=prepare_payroll_report,
    ),
    _backend_route("payroll_list", "GET", "/payroll"),
    _backend_route("payroll_detail", "GET", "/payroll/{payroll_id}"),
    _backend_route("payroll_update", "PUT", "/payroll/{payroll_id}", body=BodyKind.json),
    _backend_route("payroll_approve", "PATCH", "/payroll/{payroll_id}/approve", body=BodyKind.json),
    _backend_route("payroll_mark_paid", "PATCH", "/payroll/{payroll_id}/paid", body=BodyKind.json),
    _backend_route("payroll_delete", "DELETE", "/payroll/{payroll_id}"),
]

NOTIFICATION_ROUTES: list[ProxyRoute] = [
    _backend_route("notifications_list", "GET", "/notifications"),
    _backend_route("notifications_mark_all_read", "PATCH", "/notifications/mark-all-read"),
    _backend_route("notifications_mark_read", "PATCH", "/notifications/{id}/read"),
    _backend_route("notifications_delete", "DELETE", "/notifications/{id}"),
]

ROUTES: dict[str, list[ProxyRoute]] = {
    "users": USER_ROUTES,
    "leave": LEAVE_ROUTES,
    "attendance": ATTENDANCE_ROUTES,
    "payroll": PAYROLL_ROUTES,
    "notifications": NOTIFICATION_ROUTES,
}
