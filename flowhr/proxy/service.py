"""Proxy service layer — issue the upstream call and translate its reply."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from flowhr.common.constants import (
    MSG_UNKNOWN_ERROR,
    REQUEST_ID_HEADER,
    BodyKind,
    ErrorRelay,
)
from flowhr.common.exceptions import (
    UpstreamException,
    UpstreamHTMLException,
    UpstreamResponseException,
    UpstreamUnavailableException,
)
from flowhr.proxy.schemas import OutboundRequest, ProxyRoute

logger = logging.getLogger(__name__)

# How much of an unexpected HTML page makes it into the log line
_HTML_LOG_PREVIEW = 200


def build_upstream_url(base_url: str, route: ProxyRoute, path_params: dict[str, str]) -> str:
    """Concatenate the backend base URL with the route's upstream path."""
    encoded = {name: quote(str(value), safe="") for name, value in path_params.items()}
    return f"{base_url.rstrip('/')}{route.upstream.format(**encoded)}"


def parse_error_body(response: httpx.Response) -> dict[str, Any]:
    """Best-effort JSON decode of an upstream error; wrap raw text otherwise."""
    text = response.text
    try:
        data = decode_json(text)
    except ValueError:
        data = None
    if isinstance(data, dict):
        return data
    return {"error": text or response.reason_phrase or MSG_UNKNOWN_ERROR}


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def decode_json(content: bytes | str) -> Any:
    """Strict JSON decode: NaN and Infinity are rejected like any other bad token."""
    return json.loads(content, parse_constant=_reject_constant)


def multipart_parts(outbound: OutboundRequest) -> list[tuple[str, tuple]]:
    """Text fields and files as one multipart payload, fields first."""
    parts: list[tuple[str, tuple]] = [
        (name, (None, value))
        for name, values in outbound.form.items()
        for value in values
    ]
    parts.extend(outbound.files)
    return parts


def error_message(body: dict[str, Any]) -> Optional[str]:
    """Pick the human-readable message out of an upstream error body."""
    for key in ("error", "message"):
        value = body.get(key)
        if isinstance(value, str) and value:
            return value
    return None


class ProxyService:
    """Forwarding logic shared by every proxy route."""

    @staticmethod
    async def forward(
        client: httpx.AsyncClient,
        base_url: str,
        route: ProxyRoute,
        outbound: OutboundRequest,
        token: str,
        request_id: Optional[str] = None,
    ) -> tuple[int, Any]:
        """Send one request upstream and return ``(status, json_body)``.

        ``json_body`` is None when the backend answered 2xx with no content.
        Every failure mode surfaces as an AppException subclass.
        """
        url = build_upstream_url(base_url, route, outbound.path_params)
        headers = {"Authorization": f"Bearer {token}"}
        if request_id:
            headers[REQUEST_ID_HEADER] = request_id

        kwargs: dict[str, Any] = {"headers": headers}
        if route.forward_query and outbound.query:
            kwargs["params"] = outbound.query
        if outbound.send_json:
            kwargs["json"] = outbound.json
        if route.body is BodyKind.multipart:
            # Passing everything as ``files`` keeps httpx on multipart/form-data
            # even when the form carries text fields only.
            kwargs["files"] = multipart_parts(outbound)

        try:
            response = await client.request(route.method, url, **kwargs)
        except httpx.RequestError as exc:
            logger.error(
                "Upstream %s %s unreachable (route=%s, request_id=%s): %s",
                route.method, url, route.name, request_id, exc,
            )
            raise UpstreamUnavailableException() from exc

        content_type = response.headers.get("content-type", "")
        if "text/html" in content_type:
            logger.warning(
                "Upstream returned HTML instead of JSON (route=%s, status=%d, request_id=%s): %s",
                route.name, response.status_code, request_id,
                response.text[:_HTML_LOG_PREVIEW],
            )
            raise UpstreamHTMLException()

        if response.is_success:
            if not response.content:
                return response.status_code, None
            try:
                return response.status_code, decode_json(response.content)
            except ValueError as exc:
                logger.warning(
                    "Upstream returned a non-JSON body (route=%s, status=%d, request_id=%s)",
                    route.name, response.status_code, request_id,
                )
                raise UpstreamResponseException() from exc

        body = parse_error_body(response)
        logger.warning(
            "Upstream rejected %s %s with %d (route=%s, request_id=%s): %s",
            route.method, url, response.status_code, route.name, request_id, body,
        )
        if route.error_relay is ErrorRelay.message:
            body = {"error": error_message(body) or route.error_fallback}
        raise UpstreamException(response.status_code, body)
