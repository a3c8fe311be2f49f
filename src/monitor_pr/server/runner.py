"""Embedded uvicorn server bound to an ephemeral loopback port.

The server socket is bound before uvicorn starts so the assigned port is
known as soon as start() returns. stop() asks uvicorn to exit, which closes
the listening socket first and then waits for in-flight requests.

uvicorn's own signal capture is disabled: SIGINT/SIGTERM belong to the
monitor session, which stops the server as part of its shutdown.
"""

import asyncio
import contextlib
import logging
import socket
from typing import Iterator, Optional

import uvicorn
from fastapi import FastAPI

logger = logging.getLogger(__name__)

LOOPBACK_HOST = "127.0.0.1"


class WebhookServerError(Exception):
    """Raised when the webhook server cannot be started."""


class _EmbeddedUvicornServer(uvicorn.Server):
    """uvicorn server that leaves signal handling to its owner."""

    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:
        yield


class WebhookServer:
    """Runs a webhook application on 127.0.0.1 with an OS-assigned port.

    Attributes:
        app: The ASGI application to serve.
        host: Interface to bind to (loopback only).
        startup_timeout: Seconds to wait for uvicorn to start serving.

    Example:
        >>> server = WebhookServer(create_webhook_app(options))
        >>> port = await server.start()
        >>> ...
        >>> await server.stop()
    """

    def __init__(
        self,
        app: FastAPI,
        host: str = LOOPBACK_HOST,
        startup_timeout: float = 10.0,
    ):
        self.app = app
        self.host = host
        self.startup_timeout = startup_timeout
        self._server: Optional[_EmbeddedUvicornServer] = None
        self._task: Optional[asyncio.Task] = None
        self._port: Optional[int] = None

    @property
    def port(self) -> int:
        """The bound port.

        Raises:
            WebhookServerError: If the server has not been started.
        """
        if self._port is None:
            raise WebhookServerError("Webhook server is not running")
        return self._port

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> int:
        """Bind the socket and start serving.

        Returns:
            The port assigned by the operating system.

        Raises:
            WebhookServerError: If binding fails or uvicorn does not start.
        """
        if self._task is not None:
            raise WebhookServerError("Webhook server already started")

        sock = self._bind_socket()
        port = sock.getsockname()[1]

        config = uvicorn.Config(
            self.app,
            log_config=None,
            access_log=False,
            lifespan="off",
        )
        self._server = _EmbeddedUvicornServer(config)
        self._task = asyncio.create_task(self._server.serve(sockets=[sock]))

        try:
            await asyncio.wait_for(self._wait_started(), timeout=self.startup_timeout)
        except (asyncio.TimeoutError, WebhookServerError) as exc:
            await self.stop()
            sock.close()
            raise WebhookServerError(f"Webhook server failed to start: {exc}") from exc

        self._port = port
        logger.info("Webhook server listening on %s:%d", self.host, port)
        return port

    async def stop(self) -> None:
        """Stop accepting connections and wait until the server has closed.

        Calling stop() on a server that is not running does nothing.
        """
        server, task = self._server, self._task
        if server is None or task is None:
            return

        self._server = None
        self._task = None
        self._port = None

        server.should_exit = True
        try:
            await task
        except Exception as exc:
            logger.error("Webhook server exited with an error: %s", exc)

        logger.info("Webhook server stopped")

    def _bind_socket(self) -> socket.socket:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        try:
            sock.bind((self.host, 0))
        except OSError as exc:
            sock.close()
            raise WebhookServerError(
                f"Failed to bind webhook server to {self.host}: {exc}"
            ) from exc
        return sock

    async def _wait_started(self) -> None:
        assert self._server is not None and self._task is not None
        while not self._server.started:
            if self._task.done():
                raise WebhookServerError("uvicorn exited during startup")
            await asyncio.sleep(0.01)
