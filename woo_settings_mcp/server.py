"""FastAPI application exposing the settings MCP dispatcher over HTTP."""

from __future__ import annotations

import json
import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from woo_settings_mcp.auth import Authorizer, TokenAuthorizer
from woo_settings_mcp.config import default_config
from woo_settings_mcp.factory import Components, build_components
from woo_settings_mcp.logging_config import configure_logging
from woo_settings_mcp.mcp import MCP_PROTOCOL_VERSION, MCP_SERVER_NAME, MCP_SERVER_VERSION

logger = logging.getLogger(__name__)

APP_VERSION = MCP_SERVER_VERSION

AuthorizerFactory = Callable[[Request], Authorizer]


def _bearer_authorizer(components: Components) -> AuthorizerFactory:
    def factory(request: Request) -> Authorizer:
        return TokenAuthorizer(components.config.admin_token, request.headers.get("authorization"))

    return factory


def create_app(
    components: Optional[Components] = None,
    *,
    authorizer_factory: Optional[AuthorizerFactory] = None,
) -> FastAPI:
    """
    Build the HTTP app around an already-wired component graph.

    ``authorizer_factory`` decides, per request, whether the caller may change
    settings or read the schema. By default a bearer token must match the
    configured admin token.
    """
    components = components or build_components(default_config)
    authorizer_for = authorizer_factory or _bearer_authorizer(components)
    metrics = components.metrics

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        # Startup
        yield
        # Shutdown
        await components.aclose()

    app = FastAPI(
        title="WooCommerce Settings MCP Server",
        description="MCP tools for reading and updating WooCommerce general settings.",
        version=APP_VERSION,
        lifespan=lifespan,
    )
    app.state.components = components

    @app.middleware("http")
    async def add_request_context(request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        start = time.time()
        metrics.incr_request()
        response = await call_next(request)
        duration_ms = (time.time() - start) * 1000
        metrics.record_duration(request_id, duration_ms)
        response.headers["X-Request-ID"] = request_id
        return response

    @app.get("/health")
    async def health() -> JSONResponse:
        """Public liveness probe; also reports whether the store answers."""
        return JSONResponse(
            content={
                "status": "ok",
                "version": APP_VERSION,
                "woocommerce_active": await components.store.is_available(),
                "mcp_protocol": MCP_PROTOCOL_VERSION,
            }
        )

    @app.get("/metrics")
    async def metrics_snapshot() -> JSONResponse:
        """Return in-process metrics snapshot."""
        return JSONResponse(content=metrics.snapshot())

    @app.get("/schema")
    async def schema(request: Request) -> JSONResponse:
        if not authorizer_for(request).can_manage_settings():
            return JSONResponse(
                status_code=403,
                content={
                    "code": "rest_forbidden",
                    "message": "You do not have permission to view WooCommerce settings.",
                },
            )
        return JSONResponse(content={"settings": components.registry.as_dict()})

    @app.post("/mcp")
    async def mcp_gateway(request: Request) -> Response:
        """
        JSON-RPC gateway. Malformed JSON still gets a 200 with a parse-error
        envelope; notifications get an empty 204.
        """
        request_id = getattr(request.state, "request_id", None)
        body = await request.body()
        if not body.strip():
            return JSONResponse(
                status_code=400,
                content={"code": "empty_body", "message": "Request body is empty."},
            )

        response_text = await components.mcp_server.process_message(
            body,
            authorizer=authorizer_for(request),
            request_id=request_id,
        )
        if response_text is None:
            return Response(status_code=204)
        return JSONResponse(content=json.loads(response_text))

    logger.debug("http app created server=%s", MCP_SERVER_NAME)
    return app


configure_logging(default_config)
app = create_app()

# Run with: uvicorn woo_settings_mcp.server:app --reload
