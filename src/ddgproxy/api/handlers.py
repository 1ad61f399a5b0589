"""Route handlers for ddgproxy endpoints."""
import time

import httpx
from flask import Response, g, jsonify, request, stream_with_context
from pydantic import ValidationError

from ..core.errors import ApiError, ChatRequestFailed, InvalidModel, InvalidRequest, NotFound
from ..utils.http import error_response
from ..utils.logging import log_event
from ..utils.messages import normalize_messages
from .schemas import ChatCompletionsRequest
from .streaming import collect_chat_completion, build_chat_completion, make_response_id, stream_chat_sse


def _parse_chat_request(registry) -> ChatCompletionsRequest:
    """Validate the inbound body; raises before anything is sent upstream."""
    content_type = request.headers.get("Content-Type", "")
    if "application/json" not in content_type:
        raise InvalidRequest("Content-Type must be application/json")
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidRequest("Request body must be a JSON object")
    try:
        payload = ChatCompletionsRequest.model_validate(data)
    except ValidationError as e:
        raise InvalidRequest(str(e)) from e
    if not payload.messages:
        raise InvalidRequest("Messages is required and must be a non-empty array")
    if payload.model not in registry:
        raise InvalidModel(f"Please select the correct model: {', '.join(registry.ids())}")
    return payload


def register_routes(app, settings, registry, duck_client):

    @app.route('/chat/completions', methods=['POST'])
    @app.route('/v1/chat/completions', methods=['POST'])
    def chat_completions():
        payload = _parse_chat_request(registry)
        g.resolved_model = payload.model
        stream = bool(payload.stream)
        g.stream = stream
        prompt = normalize_messages(payload.messages)

        upstream = duck_client.open_chat(prompt, payload.model)
        response_id = make_response_id()
        created = int(time.time())
        if stream:
            response = Response(
                stream_with_context(
                    stream_chat_sse(upstream, payload.model, response_id, created, request_id=g.request_id)
                ),
                mimetype="text/event-stream",
            )
            response.headers["Cache-Control"] = "no-cache"
            response.call_on_close(upstream.close)
            return response

        try:
            content = collect_chat_completion(upstream, request_id=g.request_id)
        except httpx.HTTPError as e:
            raise ChatRequestFailed(f"Chat request failed: {e}") from e
        return jsonify(build_chat_completion(content, payload.model, response_id, created))

    @app.route('/models', methods=['GET'])
    @app.route('/v1/models', methods=['GET'])
    def list_models():
        return jsonify({"object": "list", "data": registry.list_response()})

    @app.route('/healthz', methods=['GET'])
    def health():
        errors = app.config.get("CONFIG_ERRORS", [])
        status = "ok" if not errors else "warn"
        if request.args.get("verbose") != "1":
            return jsonify({"status": status})
        return jsonify(
            {
                "status": status,
                "uptime_seconds": int(time.time() - app.config.get("APP_STARTED_AT", time.time())),
                "version": settings.app_version,
                "config_errors": errors,
            }
        )

    @app.route('/version', methods=['GET'])
    def version():
        return jsonify({"version": settings.app_version})

    @app.errorhandler(ApiError)
    def handle_api_error(error):
        return error_response(error.message, error.status, error.error_type)

    @app.errorhandler(404)
    @app.errorhandler(405)
    def handle_not_found(error):
        # unmatched method+path pairs are reported as missing routes
        return handle_api_error(NotFound("Not Found"))

    @app.errorhandler(413)
    def handle_payload_too_large(error):
        return error_response("Request body too large", 413, "invalid_request_error")

    @app.errorhandler(Exception)
    def handle_unexpected(error):
        log_event(40, "unhandled_error", request_id=getattr(g, "request_id", ""), error=repr(error))
        return error_response(str(error) or "Internal Server Error", 500, "internal_error")
