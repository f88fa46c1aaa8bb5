"""
Sentinel-framed JSON protocol between a multilang component and its host.

Every message is a JSON document followed by a line containing only
``end``.  Inbound frames may span several lines; blank lines are ignored.
"""

import json
from typing import Any, TextIO

SENTINEL = "end"

# Spout commands (host -> spout)
NEXT = "next"
ACK = "ack"
FAIL = "fail"
ACTIVATE = "activate"
DEACTIVATE = "deactivate"

# Component commands (component -> host)
SYNC = "sync"
EMIT = "emit"
LOG = "log"
ERROR = "error"
METRICS = "metrics"

HEARTBEAT_STREAM = "__heartbeat"
HEARTBEAT_TASK = -1

# Log levels understood by the host
LOG_TRACE = 0
LOG_DEBUG = 1
LOG_INFO = 2
LOG_WARN = 3
LOG_ERROR = 4


class ProtocolError(Exception):
    """Base class for protocol failures."""
    pass


class StreamClosedError(ProtocolError):
    """The input stream ended before a sentinel was read.

    The host process is gone; there is nothing left to do but exit.
    """
    pass


class MessageDecodeError(ProtocolError):
    """A well-framed payload could not be decoded into a message."""

    def __init__(self, message: str, payload: str = ""):
        super().__init__(message)
        self.payload = payload


def read_frame(stream: TextIO) -> str:
    """Read one frame from ``stream`` and return its payload.

    Lines are accumulated until the sentinel line.  Each kept line is
    terminated with ``\\n``; blank lines are dropped.

    Raises:
        StreamClosedError: if the stream ends before the sentinel.
    """
    parts = []
    while True:
        line = stream.readline()
        if not line:
            raise StreamClosedError("Input stream closed before end of frame")
        line = line.rstrip("\r\n")
        if line == SENTINEL:
            break
        if not line.strip():
            continue
        parts.append(line + "\n")
    return "".join(parts)


def is_task_ids_payload(payload: str) -> bool:
    """True if the payload's JSON root is an array."""
    return payload.lstrip().startswith("[")


def to_json(message: Any) -> str:
    """Serialize an outbound message (or plain JSON value) to text."""
    if hasattr(message, "to_dict"):
        message = message.to_dict()
    return json.dumps(message)


def encode_frame(message: Any) -> str:
    """Encode a message as a complete frame, sentinel included."""
    return to_json(message) + "\n" + SENTINEL + "\n"


def decode_payload(payload: str) -> Any:
    """Parse a payload's JSON text.

    Raises:
        MessageDecodeError: if the payload is not valid JSON.
    """
    try:
        return json.loads(payload)
    except json.JSONDecodeError as exc:
        raise MessageDecodeError(f"Invalid JSON payload: {exc}", payload) from exc
