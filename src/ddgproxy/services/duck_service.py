"""DuckDuckGo AI chat client: session-token handshake and the chat call."""
from typing import Mapping, Optional

import httpx

from ..core.errors import ApiError, ChatRequestFailed, InvalidModel, UpstreamInBandError, UpstreamUnavailable
from ..core.models import ModelRegistry
from ..utils.logging import log_event
from .event_stream import ErrorEvent, iter_upstream_events

TOKEN_HEADER = "x-vqd-4"

DEFAULT_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:129.0) Gecko/20100101 Firefox/129.0",
    "Accept": "*/*",
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate",
    "Referer": "https://duckduckgo.com/",
    "Cache-Control": "no-store",
    "x-vqd-accept": "1",
    "Connection": "keep-alive",
    "Cookie": "dcm=3",
    "Sec-Fetch-Dest": "empty",
    "Sec-Fetch-Mode": "cors",
    "Sec-Fetch-Site": "same-origin",
    "Priority": "u=4",
    "Pragma": "no-cache",
    "TE": "trailers",
}


def create_http_client(timeout: float) -> httpx.Client:
    """Create the pooled HTTP client used for upstream calls."""
    return httpx.Client(timeout=httpx.Timeout(timeout, connect=10.0))


class DuckChatClient:
    """Performs the status -> chat handshake against upstream.

    Tokens are fetched fresh for every chat call and never cached.
    """

    def __init__(
        self,
        http_client: httpx.Client,
        registry: ModelRegistry,
        status_url: str,
        chat_url: str,
        headers: Optional[Mapping[str, str]] = None,
    ):
        self._http = http_client
        self.registry = registry
        self.status_url = status_url
        self.chat_url = chat_url
        self.headers = dict(headers or DEFAULT_HEADERS)

    def fetch_session_token(self) -> str:
        """GET the status endpoint and return the session token header."""
        resp = self._http.get(self.status_url, headers=self.headers)
        if not resp.is_success:
            log_event(40, "upstream_status_failed", status=resp.status_code, url=self.status_url)
            raise UpstreamUnavailable(f"DuckDuckGo status API failed with {resp.status_code}")
        token = resp.headers.get(TOKEN_HEADER)
        if not token:
            log_event(40, "upstream_status_failed", status=resp.status_code, reason="missing token header")
            raise UpstreamUnavailable("DuckDuckGo status API returned no session token")
        return token

    def open_chat(self, prompt: str, model_id: str) -> httpx.Response:
        """Send the chat call for the advertised ``model_id``.

        The response is returned with its body unread; the caller owns it and
        must close it.
        """
        upstream_model = self.registry.resolve(model_id)
        if upstream_model is None:
            raise InvalidModel(f"Invalid model name: {model_id}")
        try:
            headers = {
                **self.headers,
                "Content-Type": "application/json",
                "Accept": "text/event-stream",
                TOKEN_HEADER: self.fetch_session_token(),
            }
            body = {
                "model": upstream_model,
                "messages": [{"role": "user", "content": prompt}],
            }
            req = self._http.build_request("POST", self.chat_url, headers=headers, json=body)
            resp = self._http.send(req, stream=True)
            if not resp.is_success:
                _raise_for_chat_status(resp)
            return resp
        except ApiError:
            raise
        except httpx.HTTPError as e:
            log_event(40, "upstream_chat_failed", url=self.chat_url, error=str(e))
            raise ChatRequestFailed(f"Chat request failed: {e}") from e


def _raise_for_chat_status(resp: httpx.Response) -> None:
    try:
        resp.read()
    finally:
        resp.close()
    log_event(40, "upstream_chat_failed", status=resp.status_code, body=resp.text[:2000])
    try:
        data = resp.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("action") == "error":
        raise UpstreamInBandError(data.get("status", resp.status_code), data.get("type"))
    # The error may also arrive framed as an event stream line.
    for event in iter_upstream_events([resp.content]):
        if isinstance(event, ErrorEvent):
            status = event.status if event.status is not None else resp.status_code
            raise UpstreamInBandError(status, event.error_type)
    raise ChatRequestFailed(f"Chat request failed with status {resp.status_code}")
