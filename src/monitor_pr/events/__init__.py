"""Delivery of normalized events to the consumer.

Event Sinks:
- EventSink: Abstract base class for event delivery
- JsonLinesEventSink: Writes one JSON object per line (stdout by default)
"""

from .sink import EventSink, JsonLinesEventSink

__all__ = [
    "EventSink",
    "JsonLinesEventSink",
]
