"""Error taxonomy shared by the gateway, upstream client and stream translator."""


class ApiError(Exception):
    """An error that is rendered as an OpenAI-style error body."""

    status = 500
    error_type = "api_error"

    def __init__(self, message: str, status: int | None = None, error_type: str | None = None):
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status
        if error_type is not None:
            self.error_type = error_type


class InvalidRequest(ApiError):
    status = 400
    error_type = "invalid_request_error"


class InvalidModel(InvalidRequest):
    pass


class AuthError(ApiError):
    status = 401
    error_type = "authentication_error"


class NotFound(ApiError):
    status = 404
    error_type = "invalid_request_error"


class UpstreamUnavailable(ApiError):
    """The session token could not be obtained."""


class ChatRequestFailed(ApiError):
    """The chat call to upstream failed before any event was decoded."""


class UpstreamInBandError(ApiError):
    """Upstream reported an error object inside its event stream."""

    error_type = "duck_error"

    def __init__(self, status: int | None, upstream_type: str | None):
        self.upstream_type = upstream_type or "unknown"
        # as sent by upstream; ``status`` is the coerced HTTP status
        self.upstream_status = status
        super().__init__(f"DuckDuckGo Error: {self.upstream_type}", status=_coerce_status(status))


def _coerce_status(value) -> int:
    try:
        status = int(value)
    except (TypeError, ValueError):
        return 500
    if status < 400 or status > 599:
        return 500
    return status
