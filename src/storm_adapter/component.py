"""
Spout and bolt base classes for multilang components.

Subclass ``Spout`` or ``Bolt``, override the hooks, and call ``run()``
(or use the ``storm-adapter`` entry point).  ``run()`` blocks until the
host closes stdin, at which point ``StreamClosedError`` unwinds out of it.

Usage:
    class SplitSentence(Bolt):
        def process(self, tup):
            for word in tup.values[0].split():
                self.emit([word])
"""

import logging
import os
import traceback
from collections import deque
from pathlib import Path
from typing import Any, Deque, Dict, List, Optional, Tuple, Type

from .channel import Channel
from .messages import (
    AckMessage,
    CommandMessage,
    EmitMessage,
    ErrorMessage,
    FailMessage,
    HandshakeMessage,
    InMessage,
    LogMessage,
    MetricsMessage,
    PidMessage,
    SyncMessage,
    TaskIdsMessage,
    TupleMessage,
)
from .protocol import (
    ACK,
    ACTIVATE,
    DEACTIVATE,
    FAIL,
    LOG_INFO,
    NEXT,
    ProtocolError,
)

logger = logging.getLogger(__name__)


class Component:
    """Shared plumbing: handshake, pending queues and host commands."""

    # Object-rooted message type this component reads in its main loop
    message_type: Optional[Type[InMessage]] = None

    def __init__(self, channel: Optional[Channel] = None):
        self.channel = channel or Channel()
        self.conf: Dict[str, Any] = {}
        self.context: Dict[str, Any] = {}
        self._pending_messages: Deque[InMessage] = deque()
        self._pending_task_ids: Deque[TaskIdsMessage] = deque()

    # -- Hooks -------------------------------------------------------------

    def initialize(self, conf: Dict[str, Any], context: Dict[str, Any]) -> None:
        """Called once after the handshake."""
        pass

    # -- Protocol helpers --------------------------------------------------

    def _expected_type(self) -> Type[InMessage]:
        if self.message_type is None:
            raise TypeError(f"{type(self).__name__}.message_type is not set")
        return self.message_type

    def handshake(self) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        """Receive config and context, announce our pid, and return both.

        The host expects an empty file named after our pid in ``pidDir``.
        """
        msg = self.channel.receive(HandshakeMessage)
        if not isinstance(msg, HandshakeMessage):
            raise ProtocolError(f"Expected handshake from host, got {msg!r}")

        pid = os.getpid()
        Path(msg.pid_dir, str(pid)).touch()
        self.channel.send(PidMessage(pid=pid))

        self.conf = msg.conf
        self.context = msg.context
        logger.info("Handshake complete (pid=%d, pidDir=%s)", pid, msg.pid_dir)
        return msg.conf, msg.context

    def read_message(self, expected_type: Optional[Type[InMessage]] = None) -> InMessage:
        """Next object-rooted message; unsolicited task ids are queued."""
        if self._pending_messages:
            return self._pending_messages.popleft()

        expected_type = expected_type or self._expected_type()
        while True:
            msg = self.channel.receive(expected_type)
            if msg is None:
                continue
            if isinstance(msg, TaskIdsMessage):
                self._pending_task_ids.append(msg)
                continue
            return msg

    def read_task_ids(self) -> TaskIdsMessage:
        """Next task-id list; other messages arriving first are queued."""
        if self._pending_task_ids:
            return self._pending_task_ids.popleft()

        while True:
            msg = self.channel.receive(self._expected_type())
            if msg is None:
                continue
            if isinstance(msg, TaskIdsMessage):
                return msg
            self._pending_messages.append(msg)

    def sync(self) -> None:
        self.channel.send(SyncMessage())

    def log(self, msg: str, level: int = LOG_INFO) -> None:
        """Write a line into the host's worker log."""
        self.channel.send(LogMessage(msg=msg, level=level))

    def report_error(self, msg: str) -> None:
        self.channel.send(ErrorMessage(msg=msg))

    def send_metrics(self, name: str, params: Any) -> None:
        self.channel.send(MetricsMessage(name=name, params=params))

    def run(self) -> None:
        raise NotImplementedError


class Spout(Component):
    """Base class for spouts.

    The host drives the spout with ``next``/``ack``/``fail``/``activate``/
    ``deactivate`` commands; each command is answered with ``sync``.
    """

    message_type = CommandMessage

    def next_tuple(self) -> None:
        pass

    def ack(self, tup_id: Any) -> None:
        pass

    def fail(self, tup_id: Any) -> None:
        pass

    def activate(self) -> None:
        pass

    def deactivate(self) -> None:
        pass

    def emit(
        self,
        values: List[Any],
        tup_id: Any = None,
        stream: Optional[str] = None,
        direct_task: Optional[int] = None,
        need_task_ids: bool = True,
    ) -> Optional[List[Any]]:
        """Emit a tuple.  Returns the receiving task ids when requested."""
        self.channel.send(EmitMessage(
            values=list(values),
            stream=stream,
            task=direct_task,
            id=tup_id,
            need_task_ids=need_task_ids,
        ))
        if need_task_ids and direct_task is None:
            return self.read_task_ids().task_ids
        return None

    def _dispatch(self, msg: CommandMessage) -> None:
        command = msg.command
        if command == NEXT:
            self.next_tuple()
        elif command == ACK:
            self.ack(msg.id)
        elif command == FAIL:
            self.fail(msg.id)
        elif command == ACTIVATE:
            self.activate()
        elif command == DEACTIVATE:
            self.deactivate()
        else:
            logger.warning("Unknown spout command: %s", command)

    def run(self) -> None:
        conf, context = self.handshake()
        self.initialize(conf, context)
        while True:
            msg = self.read_message(CommandMessage)
            self._dispatch(msg)
            self.sync()


class Bolt(Component):
    """Base class for bolts.

    With ``auto_anchor`` (default) emits made while processing a tuple are
    anchored to it.  With ``auto_ack`` (default) the tuple is acked once
    ``process`` returns, or reported and failed if it raises.
    """

    message_type = TupleMessage
    auto_ack = True
    auto_anchor = True

    def __init__(self, channel: Optional[Channel] = None):
        super().__init__(channel)
        self._current_tuple: Optional[TupleMessage] = None

    def process(self, tup: TupleMessage) -> None:
        raise NotImplementedError

    def emit(
        self,
        values: List[Any],
        stream: Optional[str] = None,
        anchors: Optional[List[Any]] = None,
        direct_task: Optional[int] = None,
        need_task_ids: bool = True,
    ) -> Optional[List[Any]]:
        """Emit a tuple anchored to ``anchors`` (tuples or tuple ids)."""
        if anchors is None and self.auto_anchor and self._current_tuple is not None:
            anchors = [self._current_tuple]
        anchor_ids = None
        if anchors is not None:
            anchor_ids = [a.id if isinstance(a, TupleMessage) else a for a in anchors]

        self.channel.send(EmitMessage(
            values=list(values),
            stream=stream,
            task=direct_task,
            anchors=anchor_ids,
            need_task_ids=need_task_ids,
        ))
        if need_task_ids and direct_task is None:
            return self.read_task_ids().task_ids
        return None

    def ack(self, tup: Any) -> None:
        tup_id = tup.id if isinstance(tup, TupleMessage) else tup
        self.channel.send(AckMessage(id=tup_id))

    def fail(self, tup: Any) -> None:
        tup_id = tup.id if isinstance(tup, TupleMessage) else tup
        self.channel.send(FailMessage(id=tup_id))

    def _handle_tuple(self, tup: TupleMessage) -> None:
        self._current_tuple = tup
        try:
            self.process(tup)
        except Exception:
            logger.error("process failed for tuple %s", tup.id, exc_info=True)
            self.report_error(traceback.format_exc())
            if not self.auto_ack:
                raise
            self.fail(tup)
        else:
            if self.auto_ack:
                self.ack(tup)
        finally:
            self._current_tuple = None

    def run(self) -> None:
        conf, context = self.handshake()
        self.initialize(conf, context)
        while True:
            tup = self.read_message(TupleMessage)
            if tup.is_heartbeat:
                self.sync()
                continue
            self._handle_tuple(tup)
