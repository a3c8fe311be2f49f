"""Unit tests for the newline-delimited JSON event sink."""

import io
import json
import threading

from src.monitor_pr.events.sink import JsonLinesEventSink
from src.monitor_pr.webhook import (
    CheckStatus,
    CIEvent,
    CommentEvent,
    ReviewAction,
    ReviewEvent,
)


class TestJsonLinesEventSink:
    def test_ci_event_keeps_null_conclusion(self):
        stream = io.StringIO()
        JsonLinesEventSink(stream).emit(
            CIEvent(check="build", status=CheckStatus.QUEUED, conclusion=None)
        )

        assert stream.getvalue() == (
            '{"event":"ci","check":"build","status":"queued","conclusion":null}\n'
        )

    def test_comment_event_omits_unset_target(self):
        stream = io.StringIO()
        JsonLinesEventSink(stream).emit(CommentEvent(issue=15, user="u", body="x"))

        assert json.loads(stream.getvalue()) == {
            "event": "comment",
            "issue": 15,
            "user": "u",
            "body": "x",
        }

    def test_one_line_per_event(self):
        stream = io.StringIO()
        sink = JsonLinesEventSink(stream)
        sink.emit(ReviewEvent(pr=42, user="r", action=ReviewAction.APPROVED))
        sink.emit(CommentEvent(pr=42, user="r", body="line one\nline two"))

        lines = stream.getvalue().splitlines()
        assert len(lines) == 2
        assert json.loads(lines[1])["body"] == "line one\nline two"

    def test_defaults_to_stdout(self, capsys):
        JsonLinesEventSink().emit(ReviewEvent(pr=1, user="r", action=ReviewAction.DISMISSED))

        captured = capsys.readouterr()
        assert json.loads(captured.out)["action"] == "dismissed"
        assert captured.err == ""

    def test_concurrent_emits_do_not_interleave(self):
        stream = io.StringIO()
        sink = JsonLinesEventSink(stream)
        event = CommentEvent(pr=7, user="u", body="x" * 500)

        threads = [
            threading.Thread(target=lambda: [sink.emit(event) for _ in range(20)])
            for _ in range(4)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        lines = stream.getvalue().splitlines()
        assert len(lines) == 80
        assert all(json.loads(line)["pr"] == 7 for line in lines)
