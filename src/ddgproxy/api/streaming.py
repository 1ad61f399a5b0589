"""Translate the upstream event stream into OpenAI chat completion output."""
import json
import time
import uuid

import httpx

from ..core.errors import UpstreamInBandError
from ..services.event_stream import EndOfStream, ErrorEvent, MessageFragment, iter_upstream_events
from ..utils.http import format_error
from ..utils.logging import log_event


def make_response_id() -> str:
    return f"chatcmpl-{uuid.uuid4().hex[:24]}"


def format_sse(payload: dict) -> str:
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


def build_chat_chunk(content, response_model, response_id, created, last: bool = False) -> dict:
    """A ``chat.completion.chunk``; the last one carries an empty delta."""
    return {
        "id": response_id,
        "object": "chat.completion.chunk",
        "created": created,
        "model": response_model,
        "choices": [
            {
                "index": 0,
                "delta": {} if last else {"content": content},
                "finish_reason": "stop" if last else None,
            }
        ],
    }


def build_chat_completion(content, response_model, response_id=None, created=None) -> dict:
    return {
        "id": response_id or make_response_id(),
        "object": "chat.completion",
        "created": created if created is not None else int(time.time()),
        "model": response_model,
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
    }


def stream_chat_sse(upstream: httpx.Response, response_model, response_id, created, request_id=None):
    """Re-emit upstream events as SSE records, one per event, as they arrive.

    The upstream response is closed when the generator finishes or is closed
    early by a disconnecting client.
    """
    try:
        for event in iter_upstream_events(upstream.iter_bytes()):
            if isinstance(event, MessageFragment):
                yield format_sse(build_chat_chunk(event.text, response_model, response_id, created))
            elif isinstance(event, ErrorEvent):
                err = UpstreamInBandError(event.status, event.error_type)
                log_event(30, "upstream_in_band_error", request_id=request_id, status=err.status, type=err.upstream_type)
                code = err.upstream_status if err.upstream_status is not None else err.status
                yield format_sse(format_error(err.message, code, err.error_type))
                return
            elif isinstance(event, EndOfStream):
                yield format_sse(build_chat_chunk("", response_model, response_id, created, last=True))
                return
    except httpx.HTTPError as e:
        # No terminal frame: the client must see an aborted stream.
        log_event(40, "upstream_stream_error", request_id=request_id, error=str(e))
        raise
    finally:
        upstream.close()


def collect_chat_completion(upstream: httpx.Response, request_id=None) -> str:
    """Read the whole upstream body and return the concatenated message text.

    Falls back to the raw body text when no fragment could be decoded.
    """
    try:
        body = upstream.read()
    finally:
        upstream.close()
    fragments = []
    for event in iter_upstream_events([body]):
        if isinstance(event, MessageFragment):
            fragments.append(event.text)
        elif isinstance(event, ErrorEvent):
            err = UpstreamInBandError(event.status, event.error_type)
            log_event(30, "upstream_in_band_error", request_id=request_id, status=err.status, type=err.upstream_type)
            raise err
    if not fragments:
        return upstream.text
    return "".join(fragments)
