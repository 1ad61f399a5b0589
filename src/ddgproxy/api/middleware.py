"""Flask middleware registration for preflight, auth, CORS and access logging."""
import time
import uuid

from flask import Response, g, request

from ..core.errors import AuthError
from ..utils.http import CORS_HEADERS, PREFLIGHT_MAX_AGE, extract_bearer_token, get_client_ip
from ..utils.logging import log_event, redact_headers, should_log_request

UNGATED_PATHS = ("/healthz",)


def register_middlewares(app, api_keys, logging_cfg):
    """Register request hooks; ``api_keys`` empty means open mode."""
    allowed_keys = frozenset(api_keys)

    @app.before_request
    def attach_request_context():
        g.request_id = request.headers.get("X-Request-ID", uuid.uuid4().hex)
        g.request_start = time.time()

    @app.before_request
    def answer_preflight():
        if request.method != "OPTIONS":
            return None
        response = Response(status=204)
        response.headers["Access-Control-Max-Age"] = PREFLIGHT_MAX_AGE
        return response

    @app.before_request
    def enforce_api_key():
        if not allowed_keys or request.path in UNGATED_PATHS:
            return None
        key = extract_bearer_token(request.headers.get("Authorization"))
        if key in allowed_keys:
            return None
        raise AuthError("Invalid API key")

    @app.after_request
    def add_headers(response):
        response.headers["X-Request-ID"] = getattr(g, "request_id", "")
        for name, value in CORS_HEADERS.items():
            response.headers[name] = value

        if request.path == "/healthz":
            return response
        if not should_log_request(response.status_code, logging_cfg.get("sample_rate", 1.0)):
            return response
        latency_ms = None
        if hasattr(g, "request_start"):
            latency_ms = int((time.time() - g.request_start) * 1000)
        log_event(
            20,
            "request",
            request_id=getattr(g, "request_id", ""),
            method=request.method,
            path=request.path,
            status=response.status_code,
            latency_ms=latency_ms,
            model=getattr(g, "resolved_model", None),
            stream=getattr(g, "stream", None),
            client_ip=get_client_ip(),
        )
        if logging_cfg.get("include_headers"):
            log_event(
                20,
                "request_detail",
                request_id=getattr(g, "request_id", ""),
                headers=redact_headers(dict(request.headers), logging_cfg.get("redact_headers", [])),
            )
        return response
