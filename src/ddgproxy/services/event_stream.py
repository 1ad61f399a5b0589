"""Incremental decoder for the upstream ``data: {json}`` line stream.

The upstream splits logical lines across network chunks and batches several
lines into one chunk, so the decoder keeps the unterminated tail of the text
between ``feed`` calls. Decoding is a small state machine:

* ``AWAITING_DATA``: lines are parsed as they complete.
* ``TERMINATED``: ``[DONE]`` or end of input was seen; ``EndOfStream`` emitted.
* ``ERRORED``: upstream sent an ``action: error`` object.

Once terminated or errored the decoder ignores further input.
"""
from __future__ import annotations

import codecs
import enum
import json
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Union

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


@dataclass(frozen=True)
class MessageFragment:
    text: str


@dataclass(frozen=True)
class ErrorEvent:
    status: Optional[int]
    error_type: Optional[str]


@dataclass(frozen=True)
class EndOfStream:
    pass


UpstreamEvent = Union[MessageFragment, ErrorEvent, EndOfStream]


class DecoderState(enum.Enum):
    AWAITING_DATA = "awaiting_data"
    TERMINATED = "terminated"
    ERRORED = "errored"


def parse_line(line: str) -> Optional[UpstreamEvent]:
    """Decode one complete line; None means the line carries nothing."""
    line = line.rstrip("\r")
    if not line.strip() or not line.startswith(DATA_PREFIX):
        return None
    payload = line[len(DATA_PREFIX):]
    if payload == DONE_SENTINEL:
        return EndOfStream()
    try:
        data = json.loads(payload)
    except ValueError:
        # keep-alive noise
        return None
    if not isinstance(data, dict):
        return None
    if data.get("action") == "error":
        return ErrorEvent(status=data.get("status"), error_type=data.get("type"))
    message = data.get("message")
    if isinstance(message, str) and message:
        return MessageFragment(message)
    return None


class EventStreamDecoder:
    """Turns raw upstream bytes into ``UpstreamEvent`` objects."""

    def __init__(self):
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._carry = ""
        self.state = DecoderState.AWAITING_DATA

    @property
    def finished(self) -> bool:
        return self.state is not DecoderState.AWAITING_DATA

    def feed(self, chunk: bytes) -> List[UpstreamEvent]:
        """Consume one network chunk and return the events it completed."""
        if self.finished:
            return []
        self._carry += self._decoder.decode(chunk)
        *lines, self._carry = self._carry.split("\n")
        return self._process(lines)

    def close(self) -> List[UpstreamEvent]:
        """Flush the tail at end of input and terminate the stream.

        Unless an error ended the stream, the result always finishes with
        exactly one ``EndOfStream``.
        """
        if self.finished:
            return []
        tail = self._carry + self._decoder.decode(b"", final=True)
        self._carry = ""
        events = self._process(tail.split("\n"))
        if not self.finished:
            events.append(EndOfStream())
            self.state = DecoderState.TERMINATED
        return events

    def _process(self, lines: Iterable[str]) -> List[UpstreamEvent]:
        events: List[UpstreamEvent] = []
        for line in lines:
            event = parse_line(line)
            if event is None:
                continue
            events.append(event)
            if isinstance(event, EndOfStream):
                self.state = DecoderState.TERMINATED
            elif isinstance(event, ErrorEvent):
                self.state = DecoderState.ERRORED
            if self.finished:
                self._carry = ""
                break
        return events


def iter_upstream_events(chunks: Iterable[bytes]) -> Iterator[UpstreamEvent]:
    """Decode ``chunks`` lazily, stopping after the first terminal event."""
    decoder = EventStreamDecoder()
    for chunk in chunks:
        yield from decoder.feed(chunk)
        if decoder.finished:
            return
    yield from decoder.close()
