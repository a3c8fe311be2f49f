"""Webhook forwarder subprocess.

This module manages ``gh webhook forward``:
- Subprocess launch pointed at the local webhook server
- stderr streaming to the log
- Graceful termination with a kill fallback
"""

from .gh_webhook import ForwarderError, WebhookForwarder

__all__ = [
    "ForwarderError",
    "WebhookForwarder",
]
