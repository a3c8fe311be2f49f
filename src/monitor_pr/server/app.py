"""FastAPI application receiving forwarded GitHub webhooks.

The application exposes a single endpoint, ``POST /``. Each delivery is
verified, parsed and normalized; matching events are handed to the
``on_event`` callback. Every request that passes validation is answered
with 200 so GitHub does not redeliver filtered-out events.

Responses:
- 200 {"ok": true}
- 400 {"error": "Missing X-GitHub-Event header"}
- 400 {"error": "Invalid JSON payload"}
- 401 {"error": "Invalid signature"}
- 404 {"error": "Not found"}
- 500 {"error": "Internal server error"}

Source:
- src/monitor_pr/webhook/signature.py (verify_signature)
- src/monitor_pr/webhook/dispatcher.py (parse_webhook_event)
"""

import json
import logging
from dataclasses import dataclass
from typing import AbstractSet, Any, Callable, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.monitor_pr.webhook.dispatcher import parse_webhook_event
from src.monitor_pr.webhook.models import MonitorEvent
from src.monitor_pr.webhook.signature import verify_signature

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Hub-Signature-256"
EVENT_HEADER = "X-GitHub-Event"


@dataclass(frozen=True)
class WebhookServerOptions:
    """Configuration of a webhook receiver.

    Attributes:
        target_pr: Number of the monitored pull request.
        linked_issues: Issue numbers whose comments are also reported.
        on_event: Called with each normalized event.
        secret: Webhook secret. When None, signature verification is
                skipped and any local process can inject events.
        on_error: Called with unexpected exceptions raised while handling
                  a delivery.
    """

    target_pr: int
    linked_issues: AbstractSet[int]
    on_event: Callable[[MonitorEvent], None]
    secret: Optional[str] = None
    on_error: Optional[Callable[[Exception], None]] = None


def _json_response(status_code: int, content: Dict[str, Any]) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=content)


async def _handle_delivery(request: Request, options: WebhookServerOptions) -> JSONResponse:
    """Validate a single delivery and emit its event, if any.

    Args:
        request: The incoming webhook request.
        options: Receiver configuration.

    Returns:
        The JSON response for the delivery.
    """
    body = await request.body()

    if options.secret:
        signature = request.headers.get(SIGNATURE_HEADER)
        if not verify_signature(body, signature, options.secret):
            logger.warning("Rejected webhook delivery with invalid signature")
            return _json_response(401, {"error": "Invalid signature"})

    event_type = request.headers.get(EVENT_HEADER)
    if not event_type:
        return _json_response(400, {"error": "Missing X-GitHub-Event header"})

    try:
        payload = json.loads(body)
    except ValueError:
        return _json_response(400, {"error": "Invalid JSON payload"})

    event = parse_webhook_event(
        event_type,
        payload,
        options.target_pr,
        options.linked_issues,
    )

    if event is not None:
        logger.debug("Emitting %s event from %s delivery", event.event, event_type)
        options.on_event(event)

    return _json_response(200, {"ok": True})


def create_webhook_app(options: WebhookServerOptions) -> FastAPI:
    """Create the webhook receiver application.

    Args:
        options: Receiver configuration.

    Returns:
        A FastAPI application serving ``POST /``.
    """
    if not options.secret:
        logger.warning(
            "No webhook secret configured; signature verification is disabled"
        )

    app = FastAPI(
        title="monitor-pr webhook receiver",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        # Unknown paths and wrong methods on "/" are both reported as 404.
        if exc.status_code in (404, 405):
            return _json_response(404, {"error": "Not found"})
        return _json_response(exc.status_code, {"error": str(exc.detail)})

    @app.post("/")
    async def receive_webhook(request: Request) -> JSONResponse:
        try:
            return await _handle_delivery(request, options)
        except Exception as exc:
            logger.exception("Unexpected error handling webhook delivery")
            if options.on_error is not None:
                options.on_error(exc)
            return _json_response(500, {"error": "Internal server error"})

    return app
