import logging
from datetime import datetime, timezone
from typing import Any, Optional
from urllib.parse import quote

import requests
import uvicorn
from fastapi import Body, Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from platform_common.auth import TokenVerifier
from platform_common.errors import INTERNAL_ERROR_MESSAGE, BadRequest, error_response, install_error_handlers
from platform_common.log_config import configure_logging

from . import config
from .rate_limit import AdmissionMiddleware, SlidingWindowLimiter

SERVICE_NAME = "api-gateway"

logger = logging.getLogger(__name__)


class Upstream:
    """Forwards one request to a downstream service and relays its answer."""

    def __init__(self, name: str, base_url: str, timeout: float):
        self.name = name
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def forward(self, method: str, path: str, authorization: Optional[str] = None, payload: Any = None) -> Response:
        if isinstance(payload, (bytes, bytearray)):
            # Non-JSON bodies arrive raw; only JSON is forwarded
            raise BadRequest("Invalid request")
        headers = {}
        if authorization is not None:
            # Passed through untouched; the downstream verifies it again
            headers["Authorization"] = authorization
        url = f"{self.base_url}{path}"
        try:
            upstream = requests.request(
                method,
                url,
                headers=headers,
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"{self.name} unreachable for {method} {path}: {e}")
            return error_response(500, INTERNAL_ERROR_MESSAGE)
        return self.relay(method, path, upstream)

    def relay(self, method: str, path: str, upstream: requests.Response) -> Response:
        try:
            body = upstream.json()
        except ValueError:
            if upstream.status_code < 400:
                return Response(
                    content=upstream.content,
                    status_code=upstream.status_code,
                    media_type=upstream.headers.get("content-type"),
                )
            logger.error(f"{self.name} returned {upstream.status_code} without a JSON body for {method} {path}")
            return error_response(500, INTERNAL_ERROR_MESSAGE)
        return JSONResponse(status_code=upstream.status_code, content=body)


def create_app(
    verifier: TokenVerifier,
    limiter: SlidingWindowLimiter,
    user_service: Upstream,
    order_service: Upstream,
) -> FastAPI:
    app = FastAPI(title="API Gateway")

    # Admission wraps routing, so over-limit clients never reach auth or an upstream
    app.add_middleware(AdmissionMiddleware, limiter=limiter)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ALLOW_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_error_handlers(app)

    require_auth = verifier.dependency()
    protected = [Depends(require_auth)]

    @app.get("/health")
    def health():
        return {
            "status": "ok",
            "service": SERVICE_NAME,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    # User service routes

    @app.post("/api/users/register")
    def register(payload: Any = Body(None)):
        return user_service.forward("POST", "/api/users/register", payload=payload)

    @app.post("/api/users/login")
    def login(payload: Any = Body(None)):
        return user_service.forward("POST", "/api/users/login", payload=payload)

    @app.get("/api/users/{user_id}", dependencies=protected)
    def get_user(user_id: str, request: Request):
        path = f"/api/users/{quote(user_id, safe='')}"
        return user_service.forward("GET", path, request.headers.get("authorization"))

    # Order service routes

    @app.get("/api/orders", dependencies=protected)
    def list_orders(request: Request):
        return order_service.forward("GET", "/api/orders", request.headers.get("authorization"))

    @app.post("/api/orders", dependencies=protected)
    def create_order(request: Request, payload: Any = Body(None)):
        return order_service.forward("POST", "/api/orders", request.headers.get("authorization"), payload)

    @app.get("/api/orders/{order_id}", dependencies=protected)
    def get_order(order_id: str, request: Request):
        path = f"/api/orders/{quote(order_id, safe='')}"
        return order_service.forward("GET", path, request.headers.get("authorization"))

    @app.put("/api/orders/{order_id}/status", dependencies=protected)
    def update_order_status(order_id: str, request: Request, payload: Any = Body(None)):
        return order_service.forward(
            "PUT", f"/api/orders/{quote(order_id, safe='')}/status", request.headers.get("authorization"), payload
        )

    return app


configure_logging(SERVICE_NAME)

app = create_app(
    verifier=TokenVerifier(config.JWT_SECRET, config.JWT_ALGORITHM),
    limiter=SlidingWindowLimiter(config.RATE_LIMIT_MAX, config.RATE_LIMIT_WINDOW_SECONDS),
    user_service=Upstream("user-service", config.USER_SERVICE_URL, config.UPSTREAM_TIMEOUT_SECONDS),
    order_service=Upstream("order-service", config.ORDER_SERVICE_URL, config.UPSTREAM_TIMEOUT_SECONDS),
)

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
