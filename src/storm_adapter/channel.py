"""
Protocol channel: framed send and receive over a pair of text streams.

``receive`` distinguishes two failure kinds:
  - ``StreamClosedError``: the host is gone.  Logged and re-raised.
  - ``MessageDecodeError``: one bad frame.  Logged and skipped (``None``).
"""

import logging
import sys
import threading
from typing import Any, Optional, TextIO, Type, TypeVar, Union

from .messages import InMessage, TaskIdsMessage
from .protocol import (
    MessageDecodeError,
    StreamClosedError,
    decode_payload,
    encode_frame,
    is_task_ids_payload,
    read_frame,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=InMessage)


class Channel:
    """Reads and writes sentinel-framed JSON messages.

    The reader and writer are locked independently, so a send from one
    thread never interleaves with a send from another, and likewise for
    receives.
    """

    def __init__(
        self,
        input_stream: Optional[TextIO] = None,
        output_stream: Optional[TextIO] = None,
        log: Optional[logging.Logger] = None,
    ):
        self._input = input_stream
        self._output = output_stream
        self._log = log or logger
        self._read_lock = threading.Lock()
        self._write_lock = threading.Lock()

    @property
    def input_stream(self) -> TextIO:
        # Resolved lazily so patched sys.stdin/sys.stdout are honoured
        return self._input if self._input is not None else sys.stdin

    @property
    def output_stream(self) -> TextIO:
        return self._output if self._output is not None else sys.stdout

    def send(self, message: Any) -> None:
        """Write one message followed by the sentinel line."""
        frame = encode_frame(message)
        with self._write_lock:
            out = self.output_stream
            out.write(frame)
            out.flush()

    def receive(
        self, expected_type: Type[M]
    ) -> Optional[Union[M, TaskIdsMessage]]:
        """Read one frame and decode it.

        Array-rooted payloads always decode to ``TaskIdsMessage``; anything
        else is decoded as ``expected_type``.  Returns ``None`` when the
        payload cannot be decoded.

        Raises:
            StreamClosedError: if the input ends before a full frame.
        """
        with self._read_lock:
            try:
                payload = read_frame(self.input_stream)
            except StreamClosedError as exc:
                self._log.debug("%s", exc)
                raise

        try:
            return self._decode(payload, expected_type)
        except MessageDecodeError:
            self._log.error("Message parsing error, payload=%r", payload, exc_info=True)
        return None

    @staticmethod
    def _decode(payload: str, expected_type: Type[M]) -> Union[M, TaskIdsMessage]:
        data = decode_payload(payload)
        if is_task_ids_payload(payload):
            return TaskIdsMessage.from_list(data)
        return expected_type.from_dict(data)
