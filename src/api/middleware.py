"""
Config policy middleware.

Applies the delivery policies of the live system config to requests.

Key behaviors:
- CORS covers the public API only; admin pages are same-origin forms
  and never checked against the configured domain
- Cross-origin headers and preflight come from CORSMiddleware, which asks
  the live config whether an origin is allowed
- Public GET responses get cache headers and etag revalidation
- Responses are gzip-compressed unless disabled
"""

import gzip
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.types import ASGIApp, Receive, Scope, Send

from src.components.delivery import (
    determine_cache_policy,
    gzip_allowed,
    is_not_modified,
    origin_allowed,
)
from src.domain.entities import SystemConfig

PUBLIC_PREFIX = "/api/public"
PUBLIC_METHODS = ["GET"]
PUBLIC_REQUEST_HEADERS = ["If-None-Match"]

CallNext = Callable[[Request], Awaitable[Response]]
ConfigSource = Callable[[], SystemConfig | None]


def is_public_path(path: str) -> bool:
    return path == PUBLIC_PREFIX or path.startswith(PUBLIC_PREFIX + "/")


# --- CORS ---


class ConfigCORSMiddleware(CORSMiddleware):
    """CORSMiddleware for the public API whose allowed origins follow the live config."""

    def __init__(self, app: ASGIApp, config_source: ConfigSource) -> None:
        super().__init__(
            app,
            allow_methods=PUBLIC_METHODS,
            allow_headers=PUBLIC_REQUEST_HEADERS,
            expose_headers=["ETag"],
        )
        self.config_source = config_source

    def is_allowed_origin(self, origin: str) -> bool:
        config = self.config_source()
        return config is not None and origin_allowed(config, origin)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not is_public_path(scope["path"]):
            await self.app(scope, receive, send)
            return
        await super().__call__(scope, receive, send)


# --- Cache and GZIP ---


async def config_policy(request: Request, call_next: CallNext) -> Response:
    service = getattr(request.app.state, "config_service", None)
    if service is None:
        return await call_next(request)

    config = service.get()
    public = is_public_path(request.url.path)

    if public and not origin_allowed(config, request.headers.get("origin")):
        return JSONResponse(
            {"detail": "Origin not allowed"},
            status_code=status.HTTP_403_FORBIDDEN,
        )

    cacheable = public and request.method == "GET"
    policy = determine_cache_policy(config)

    if cacheable and is_not_modified(config, request.headers.get("if-none-match")):
        return Response(status_code=status.HTTP_304_NOT_MODIFIED, headers=policy.headers)

    response = await call_next(request)
    if cacheable and response.status_code == status.HTTP_200_OK:
        response.headers.update(policy.headers)

    accept_encoding = request.headers.get("accept-encoding")
    if (
        config.disable_gzip
        or not accept_encoding
        or "content-encoding" in response.headers
        or response.status_code != status.HTTP_200_OK
    ):
        return response

    body = b"".join([chunk async for chunk in response.body_iterator])  # type: ignore[attr-defined]
    headers = {k: v for k, v in response.headers.items() if k.lower() != "content-length"}
    if gzip_allowed(config, accept_encoding, len(body)):
        body = gzip.compress(body)
        headers["Content-Encoding"] = "gzip"
        headers["Vary"] = ", ".join(filter(None, [headers.pop("vary", ""), "Accept-Encoding"]))
    return Response(
        content=body,
        status_code=response.status_code,
        headers=headers,
        media_type=response.media_type,
    )


def install_config_policy(app: FastAPI) -> None:
    """Register the config policy, with CORS as the outer layer."""

    def current_config() -> SystemConfig | None:
        service = getattr(app.state, "config_service", None)
        return service.get() if service is not None else None

    app.middleware("http")(config_policy)
    app.add_middleware(ConfigCORSMiddleware, config_source=current_config)
