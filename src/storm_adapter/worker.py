"""
Command-line entry point for running a multilang component.

Run as:  ``storm-adapter mypackage.bolts:SplitSentence``
    or:  ``python -m storm_adapter.worker mypackage.bolts:SplitSentence``

**stdout is reserved for protocol frames**: all logging goes to stderr,
and optionally to the host's worker log with ``--forward-logs``.
"""

import argparse
import importlib
import logging
import os
import sys
from typing import List, Optional, Type

from .channel import Channel
from .component import Component
from .log_handler import StormLogHandler
from .protocol import StreamClosedError

logger = logging.getLogger("storm_adapter.worker")

LOG_LEVEL_ENV = "STORM_ADAPTER_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"


def default_log_level() -> str:
    return os.environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper()


def configure_logging(level: str, channel: Optional[Channel] = None) -> None:
    """Send log records to stderr, and to the host if a channel is given."""
    logging.basicConfig(
        stream=sys.stderr,
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if channel is not None:
        handler = StormLogHandler(channel)
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        logging.getLogger().addHandler(handler)


def load_component(target: str) -> Type[Component]:
    """Resolve ``module:ClassName`` to a component class."""
    module_name, sep, class_name = target.partition(":")
    if not sep or not module_name or not class_name:
        raise ValueError(f"Expected 'module:ClassName', got '{target}'")

    module = importlib.import_module(module_name)
    try:
        cls = getattr(module, class_name)
    except AttributeError:
        raise ValueError(f"Module '{module_name}' has no attribute '{class_name}'") from None
    if not (isinstance(cls, type) and issubclass(cls, Component)):
        raise ValueError(f"'{target}' is not a Spout or Bolt subclass")
    return cls


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="storm-adapter",
        description="Run a multilang spout or bolt over stdin/stdout",
    )
    parser.add_argument("component", help="Component class as module:ClassName")
    parser.add_argument(
        "--log-level",
        default=default_log_level(),
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help=f"Log level (default: ${LOG_LEVEL_ENV} or {DEFAULT_LOG_LEVEL})",
    )
    parser.add_argument(
        "--forward-logs",
        action="store_true",
        help="Also send log records to the host's worker log",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    channel = Channel()
    configure_logging(args.log_level, channel if args.forward_logs else None)

    try:
        cls = load_component(args.component)
    except (ImportError, ValueError) as exc:
        logger.error("Cannot load component: %s", exc)
        return 2

    component = cls(channel)
    logger.info("Starting %s", args.component)
    try:
        component.run()
    except StreamClosedError:
        logger.info("Host closed the input stream, exiting")
        return 0
    except Exception:
        logger.exception("Component %s crashed", args.component)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
