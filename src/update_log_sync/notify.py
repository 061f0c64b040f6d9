"""User-facing warnings for failed remote saves."""

from __future__ import annotations

import logging
import sys
from typing import Protocol, TextIO

LOGGER = logging.getLogger(__name__)


class Notifier(Protocol):
    def warn(self, message: str) -> None: ...


class LoggingNotifier:
    def warn(self, message: str) -> None:
        LOGGER.warning("%s", message)


class StderrNotifier:
    """Print a banner that stands out from regular log output."""

    def __init__(self, stream: TextIO | None = None):
        self.stream = stream

    def warn(self, message: str) -> None:
        stream = self.stream or sys.stderr
        stream.write(f"\n!! {message}\n\n")
        stream.flush()
