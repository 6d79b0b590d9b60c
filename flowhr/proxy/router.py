"""Proxy endpoints — one parameterized handler registered per table row."""

from __future__ import annotations

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response
from starlette.datastructures import UploadFile

from flowhr.common.constants import MSG_INVALID_FORM, MSG_INVALID_JSON, BodyKind
from flowhr.common.exceptions import BadRequestException
from flowhr.config import settings
from flowhr.proxy.credentials import require_token
from flowhr.proxy.routes import ROUTES
from flowhr.proxy.schemas import OutboundRequest, ProxyRoute
from flowhr.proxy.service import ProxyService


def get_http_client(request: Request) -> httpx.AsyncClient:
    """FastAPI dependency: the pooled upstream client created at startup."""
    return request.app.state.http_client


async def _read_json(request: Request, outbound: OutboundRequest) -> None:
    raw = await request.body()
    if not raw.strip():
        return
    try:
        outbound.json = await request.json()
    except ValueError:
        raise BadRequestException(MSG_INVALID_JSON)
    outbound.send_json = True


async def _read_multipart(request: Request, outbound: OutboundRequest) -> None:
    content_type = request.headers.get("content-type", "")
    if not content_type.startswith("multipart/form-data"):
        raise BadRequestException(MSG_INVALID_FORM)
    async with request.form() as form:
        for field_name, value in form.multi_items():
            # starlette UploadFile: fastapi.UploadFile is a subclass and would not match
            if isinstance(value, UploadFile):
                content = await value.read()
                outbound.files.append(
                    (
                        field_name,
                        (
                            value.filename or field_name,
                            content,
                            value.content_type or "application/octet-stream",
                        ),
                    ),
                )
            else:
                outbound.form.setdefault(field_name, []).append(value)


async def build_outbound(request: Request, route: ProxyRoute) -> OutboundRequest:
    """Copy path params, query and body off the inbound request."""
    outbound = OutboundRequest(
        path_params={k: str(v) for k, v in request.path_params.items()},
        query=list(request.query_params.multi_items()),
    )
    if route.body is BodyKind.json:
        await _read_json(request, outbound)
    elif route.body is BodyKind.multipart:
        await _read_multipart(request, outbound)
    if route.prepare is not None:
        route.prepare(outbound)
    return outbound


def _make_endpoint(route: ProxyRoute):
    async def endpoint(
        request: Request,
        client: httpx.AsyncClient = Depends(get_http_client),
    ) -> Response:
        # Credential first: a 401 never depends on the rest of the input
        token = require_token(request, route)
        outbound = await build_outbound(request, route)
        status_code, data = await ProxyService.forward(
            client,
            settings.api_base_url,
            route,
            outbound,
            token,
            request_id=getattr(request.state, "request_id", None),
        )
        if data is None:
            return Response(status_code=status_code)
        return JSONResponse(status_code=status_code, content=data)

    endpoint.__name__ = route.name
    endpoint.__doc__ = f"Forward {route.method} {route.path} to {route.upstream}."
    return endpoint


def build_router(routes: dict[str, list[ProxyRoute]]) -> APIRouter:
    """Register every table row as an endpoint, preserving table order."""
    router = APIRouter()
    for tag, group in routes.items():
        for route in group:
            router.add_api_route(
                route.path,
                _make_endpoint(route),
                methods=[route.method],
                name=route.name,
                tags=[tag],
            )
    return router


router = build_router(ROUTES)
