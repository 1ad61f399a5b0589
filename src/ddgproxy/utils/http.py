"""HTTP helpers and error responses."""
from flask import jsonify, request

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "*",
    "Access-Control-Expose-Headers": "Content-Type, Authorization",
    "Access-Control-Allow-Credentials": "true",
}

PREFLIGHT_MAX_AGE = "86400"


def get_client_ip() -> str:
    """Resolve client IP with basic X-Forwarded-For support."""
    forwarded_for = request.headers.get("X-Forwarded-For", "")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.remote_addr or "unknown"


def format_error(message: str, status: int, error_type: str = "api_error") -> dict:
    """OpenAI-style error body."""
    return {
        "error": {
            "message": message,
            "type": error_type,
            "code": status,
            "param": None,
        }
    }


def error_response(message: str, status: int = 400, error_type: str = "invalid_request_error"):
    return jsonify(format_error(message, status, error_type)), status


def extract_bearer_token(header_value: str | None) -> str | None:
    """Return the credential of an ``Authorization: Bearer <key>`` header."""
    if not header_value:
        return None
    scheme, _, credential = header_value.partition(" ")
    if scheme != "Bearer":
        return None
    credential = credential.strip()
    return credential or None
