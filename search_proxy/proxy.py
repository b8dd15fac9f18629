"""Pexels video search proxy.

Accepts GET /videos/search from the app and re-issues it against the Pexels
API with the server-held key, so the key never ships to clients.
"""

import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import httpx
import structlog
from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, Response, StreamingResponse
from starlette.background import BackgroundTask

from search_proxy.config import ProxySettings, get_settings
from search_proxy.gateway import (
    METHOD_NOT_ALLOWED,
    InboundRequest,
    build_upstream_request,
    check_request,
)
from search_proxy.logging import configure_logging, logger


# Routed methods. Anything else is answered by the 405 handler below.
PROXY_METHODS = ["GET", "HEAD", "POST", "PUT", "DELETE", "PATCH", "OPTIONS", "TRACE", "CONNECT"]


def raw_path(request: Request) -> str:
    """Path as sent by the client, percent-escapes intact."""
    raw = request.scope.get("raw_path")
    if raw is None:
        return request.scope["path"]
    return raw.decode("latin-1")


def inbound_from(request: Request) -> InboundRequest:
    return InboundRequest(
        method=request.method,
        path=raw_path(request),
        query=request.scope.get("query_string", b"").decode("latin-1"),
    )


async def relay_body(upstream: httpx.Response) -> AsyncIterator[bytes]:
    try:
        async for chunk in upstream.aiter_bytes():
            yield chunk
    except httpx.HTTPError as exc:
        # Headers are already out; all we can do is drop the connection.
        logger.warning("upstream_stream_failed", error=type(exc).__name__)
        raise
    finally:
        await upstream.aclose()


def create_app(
    settings: Optional[ProxySettings] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """Build the proxy app.

    An injected ``client`` is used as-is and left open; otherwise a pooled
    client lives for the duration of the app lifespan.
    """
    if settings is None:
        settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if client is not None:
            yield
            return
        async with httpx.AsyncClient(timeout=settings.upstream_timeout_seconds) as pooled:
            app.state.http_client = pooled
            yield

    app = FastAPI(
        title="Pexels Search Proxy",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    if client is not None:
        app.state.http_client = client

    async def method_not_allowed(request: Request, exc: Exception) -> Response:
        logger.info(
            "request_rejected",
            method=request.method,
            path=raw_path(request),
            status=METHOD_NOT_ALLOWED.status_code,
        )
        return PlainTextResponse(METHOD_NOT_ALLOWED.body, status_code=METHOD_NOT_ALLOWED.status_code)

    app.add_exception_handler(405, method_not_allowed)

    async def search(request: Request) -> Response:
        inbound = inbound_from(request)
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(method=inbound.method, path=inbound.path)
        rejection = check_request(inbound, settings.search_path)
        if rejection is not None:
            logger.info(
                "request_rejected",
                method=inbound.method,
                path=inbound.path,
                status=rejection.status_code,
            )
            return PlainTextResponse(rejection.body, status_code=rejection.status_code)

        outbound = build_upstream_request(
            inbound, settings.upstream_url, settings.pexels_api_key.get_secret_value()
        )
        http: httpx.AsyncClient = request.app.state.http_client
        started = time.perf_counter()
        try:
            upstream = await http.send(
                http.build_request(outbound.method, outbound.url, headers=outbound.headers),
                stream=True,
            )
        except httpx.TimeoutException as exc:
            logger.warning("upstream_timeout", error=type(exc).__name__, query=inbound.query)
            return PlainTextResponse("Gateway timeout", status_code=504)
        except httpx.HTTPError as exc:
            logger.warning("upstream_unreachable", error=type(exc).__name__, query=inbound.query)
            return PlainTextResponse("Bad gateway", status_code=502)

        logger.info(
            "upstream_response",
            status=upstream.status_code,
            query=inbound.query,
            elapsed_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        return StreamingResponse(
            relay_body(upstream),
            status_code=upstream.status_code,
            media_type="application/json",
            background=BackgroundTask(upstream.aclose),
        )

    app.add_route("/{full_path:path}", search, methods=PROXY_METHODS, include_in_schema=False)
    return app


def main() -> None:
    import uvicorn

    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(
        "proxy_starting",
        host=settings.host,
        port=settings.port,
        upstream=settings.upstream_url,
    )
    uvicorn.run(
        "search_proxy.proxy:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
