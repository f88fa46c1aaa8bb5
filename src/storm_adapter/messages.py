"""
Message types exchanged with the host.

Inbound messages are built from decoded JSON with ``from_dict``; a payload
missing a required key or of the wrong kind is rejected, extra keys are
ignored.  Outbound messages render
themselves with ``to_dict``; their ``None`` fields are left out of the frame.
"""

import json
from dataclasses import dataclass, field, fields, is_dataclass
from typing import Any, ClassVar, Dict, List, Optional

from .protocol import (
    ACK,
    EMIT,
    ERROR,
    FAIL,
    HEARTBEAT_STREAM,
    HEARTBEAT_TASK,
    LOG,
    LOG_INFO,
    METRICS,
    SYNC,
    MessageDecodeError,
)


class _JsonMessage:
    """Maps dataclass attributes to JSON keys."""

    # attribute name -> JSON key, for attributes whose names differ
    _json_names: ClassVar[Dict[str, str]] = {}
    # Outbound frames leave unset fields out; inbound ones keep every key
    _omit_none: ClassVar[bool] = False

    def to_dict(self) -> dict:
        out = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None and self._omit_none:
                continue
            out[self._json_names.get(f.name, f.name)] = value
        return out

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    def __str__(self) -> str:
        return self.to_json()


# ---------------------------------------------------------------------------
# Inbound (host -> component)
# ---------------------------------------------------------------------------

class InMessage(_JsonMessage):
    """Base for object-rooted inbound messages."""

    @classmethod
    def from_dict(cls, data: Any) -> "InMessage":
        if not isinstance(data, dict):
            raise MessageDecodeError(
                f"{cls.__name__} expects a JSON object, got {type(data).__name__}"
            )
        if not is_dataclass(cls):
            raise TypeError(f"{cls.__name__} is not a message dataclass")
        by_key = {cls._json_names.get(f.name, f.name): f.name for f in fields(cls)}
        # Keys with no matching field are ignored
        kwargs = {by_key[key]: value for key, value in data.items() if key in by_key}
        try:
            return cls(**kwargs)
        except (TypeError, ValueError) as exc:
            raise MessageDecodeError(f"Invalid {cls.__name__}: {exc}") from exc


@dataclass
class HandshakeMessage(InMessage):
    """First message from the host: topology config and task context."""

    conf: Dict[str, Any]
    context: Dict[str, Any]
    pid_dir: str

    _json_names: ClassVar[Dict[str, str]] = {"pid_dir": "pidDir"}

    def __post_init__(self):
        if not isinstance(self.pid_dir, str):
            raise ValueError("pidDir must be a string")


@dataclass
class CommandMessage(InMessage):
    """Spout command: next, ack, fail, activate or deactivate."""

    command: str
    id: Any = None

    def __post_init__(self):
        if not isinstance(self.command, str):
            raise ValueError("command must be a string")


@dataclass
class TupleMessage(InMessage):
    """A tuple delivered to a bolt."""

    stream: str
    task: int
    values: List[Any]
    id: Any = None
    component: Optional[str] = None

    _json_names: ClassVar[Dict[str, str]] = {"component": "comp", "values": "tuple"}

    def __post_init__(self):
        if not isinstance(self.values, list):
            raise ValueError("tuple must be a list")

    @property
    def is_heartbeat(self) -> bool:
        return self.stream == HEARTBEAT_STREAM and self.task == HEARTBEAT_TASK


@dataclass
class TaskIdsMessage:
    """Array-rooted inbound message: the tasks an emit was routed to."""

    task_ids: List[Any] = field(default_factory=list)

    @classmethod
    def from_list(cls, data: Any) -> "TaskIdsMessage":
        if not isinstance(data, list):
            raise MessageDecodeError(
                f"TaskIdsMessage expects a JSON array, got {type(data).__name__}"
            )
        return cls(task_ids=data)

    def to_dict(self) -> list:
        # Array-rooted on the wire
        return list(self.task_ids)

    def to_json(self) -> str:
        return json.dumps(self.task_ids)

    def __str__(self) -> str:
        return self.to_json()


# ---------------------------------------------------------------------------
# Outbound (component -> host)
# ---------------------------------------------------------------------------

class OutMessage(_JsonMessage):
    """Base for outbound messages."""

    _omit_none: ClassVar[bool] = True


@dataclass
class PidMessage(OutMessage):
    pid: int


@dataclass
class SyncMessage(OutMessage):
    command: str = SYNC


@dataclass
class EmitMessage(OutMessage):
    """Emit a tuple.  ``id`` is the spout message id; ``anchors`` are bolt input ids."""

    values: List[Any]
    stream: Optional[str] = None
    task: Optional[int] = None
    anchors: Optional[List[Any]] = None
    id: Any = None
    need_task_ids: bool = True
    command: str = EMIT

    _json_names: ClassVar[Dict[str, str]] = {"values": "tuple"}


@dataclass
class AckMessage(OutMessage):
    id: Any
    command: str = ACK


@dataclass
class FailMessage(OutMessage):
    id: Any
    command: str = FAIL


@dataclass
class LogMessage(OutMessage):
    msg: str
    level: int = LOG_INFO
    command: str = LOG


@dataclass
class ErrorMessage(OutMessage):
    msg: str
    command: str = ERROR


@dataclass
class MetricsMessage(OutMessage):
    name: str
    params: Any
    command: str = METRICS
