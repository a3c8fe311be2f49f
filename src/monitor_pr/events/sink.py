"""Event sinks for normalized monitor events.

The webhook server hands every MonitorEvent to a sink. The default sink
writes newline-delimited JSON to stdout, which is the output contract of
monitor-pr; progress and diagnostics go to the log (stderr) instead.

Source:
- src/monitor_pr/webhook/models.py (MonitorEvent)
"""

import json
import sys
import threading
from abc import ABC, abstractmethod
from typing import Optional, TextIO

from src.monitor_pr.webhook.models import MonitorEvent


class EventSink(ABC):
    """Abstract base class for monitor event consumers.

    Implementations may be called from several request handlers, so emit()
    must write each event atomically.
    """

    @abstractmethod
    def emit(self, event: MonitorEvent) -> None:
        """Deliver a single event.

        Args:
            event: The normalized event to deliver.
        """

    def close(self) -> None:
        """Release resources. The default implementation does nothing."""


class JsonLinesEventSink(EventSink):
    """Writes each event as one line of compact JSON.

    Attributes:
        stream: Text stream the events are written to (stdout by default).
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream
        self._lock = threading.Lock()

    @property
    def stream(self) -> TextIO:
        return self._stream if self._stream is not None else sys.stdout

    def emit(self, event: MonitorEvent) -> None:
        line = json.dumps(event.to_output_dict(), separators=(",", ":"))
        with self._lock:
            self.stream.write(line + "\n")
            self.stream.flush()
