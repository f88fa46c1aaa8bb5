"""
storm-adapter: write Storm multilang spouts and bolts in Python.

Quick start:
    from storm_adapter import Bolt

    class SplitSentence(Bolt):
        def process(self, tup):
            for word in tup.values[0].split():
                self.emit([word])

    if __name__ == "__main__":
        SplitSentence().run()
"""

__version__ = "0.1.0"

from .channel import Channel
from .component import Bolt, Component, Spout
from .log_handler import StormLogHandler
from .messages import (
    CommandMessage,
    HandshakeMessage,
    TaskIdsMessage,
    TupleMessage,
)
from .protocol import MessageDecodeError, ProtocolError, StreamClosedError

__all__ = [
    "Bolt",
    "Channel",
    "CommandMessage",
    "Component",
    "HandshakeMessage",
    "MessageDecodeError",
    "ProtocolError",
    "Spout",
    "StormLogHandler",
    "StreamClosedError",
    "TaskIdsMessage",
    "TupleMessage",
    "__version__",
]
