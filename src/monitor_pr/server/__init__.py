"""Webhook HTTP server.

This module provides:
- create_webhook_app: FastAPI application receiving forwarded deliveries
- WebhookServer: embedded uvicorn server on an ephemeral loopback port
"""

from .app import WebhookServerOptions, create_webhook_app
from .runner import LOOPBACK_HOST, WebhookServer, WebhookServerError

__all__ = [
    "LOOPBACK_HOST",
    "WebhookServer",
    "WebhookServerError",
    "WebhookServerOptions",
    "create_webhook_app",
]
