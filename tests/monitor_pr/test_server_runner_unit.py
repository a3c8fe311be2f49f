"""Tests for the embedded uvicorn webhook server lifecycle.

These tests bind a real socket on 127.0.0.1 and talk to it with httpx.
"""

import asyncio
import json
import socket

import httpx
import pytest

from src.monitor_pr.server.app import WebhookServerOptions, create_webhook_app
from src.monitor_pr.server.runner import WebhookServer, WebhookServerError
from src.monitor_pr.webhook import compute_signature

SECRET = "runner-secret"


def run_async(coro):
    return asyncio.run(coro)


def _make_server(events: list) -> WebhookServer:
    options = WebhookServerOptions(
        target_pr=42,
        linked_issues=frozenset(),
        on_event=events.append,
        secret=SECRET,
    )
    return WebhookServer(create_webhook_app(options))


def _signed_request(pr_number: int):
    body = json.dumps(
        {
            "action": "completed",
            "check_run": {
                "name": "lint",
                "status": "completed",
                "conclusion": "success",
                "pull_requests": [{"number": pr_number}],
            },
        }
    ).encode()
    headers = {
        "X-GitHub-Event": "check_run",
        "X-Hub-Signature-256": compute_signature(body, SECRET),
        "Content-Type": "application/json",
    }
    return body, headers


def _port_accepts_connections(port: int) -> bool:
    try:
        with socket.create_connection(("127.0.0.1", port), timeout=1):
            return True
    except OSError:
        return False


class TestServerLifecycle:
    def test_start_assigns_ephemeral_loopback_port(self):
        async def scenario():
            server = _make_server([])
            port = await server.start()
            try:
                assert port > 0
                assert server.port == port
                assert server.is_running
                assert _port_accepts_connections(port)
            finally:
                await server.stop()

        run_async(scenario())

    def test_signed_delivery_for_other_pr_acknowledged(self):
        async def scenario():
            events: list = []
            server = _make_server(events)
            port = await server.start()
            try:
                body, headers = _signed_request(pr_number=7)
                async with httpx.AsyncClient(trust_env=False) as client:
                    response = await client.post(
                        f"http://127.0.0.1:{port}/", content=body, headers=headers
                    )
            finally:
                await server.stop()
            return response, events

        response, events = run_async(scenario())

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        assert events == []

    def test_signed_delivery_for_target_pr_emits_event(self):
        async def scenario():
            events: list = []
            server = _make_server(events)
            port = await server.start()
            try:
                body, headers = _signed_request(pr_number=42)
                async with httpx.AsyncClient(trust_env=False) as client:
                    await client.post(
                        f"http://127.0.0.1:{port}/", content=body, headers=headers
                    )
            finally:
                await server.stop()
            return events

        events = run_async(scenario())

        assert len(events) == 1
        assert events[0].check == "lint"

    def test_connections_refused_after_stop(self):
        async def scenario():
            server = _make_server([])
            port = await server.start()
            await server.stop()

            async with httpx.AsyncClient(trust_env=False) as client:
                with pytest.raises(httpx.ConnectError):
                    await client.post(f"http://127.0.0.1:{port}/", content=b"{}")
            return port

        port = run_async(scenario())
        assert not _port_accepts_connections(port)

    def test_stop_is_idempotent(self):
        async def scenario():
            server = _make_server([])
            await server.start()
            await server.stop()
            await server.stop()
            assert not server.is_running

        run_async(scenario())

    def test_stop_before_start_is_noop(self):
        run_async(_make_server([]).stop())

    def test_port_unavailable_before_start(self):
        with pytest.raises(WebhookServerError):
            _ = _make_server([]).port

    def test_double_start_rejected(self):
        async def scenario():
            server = _make_server([])
            await server.start()
            try:
                with pytest.raises(WebhookServerError):
                    await server.start()
            finally:
                await server.stop()

        run_async(scenario())
