"""
Single-attempt delivery of relay envelopes.

The dispatcher posts each envelope once. A non-2xx response or a transport
failure is logged and the event is dropped: there is no retry, no queue and
no backpressure. The blocking ``requests`` call runs in a worker thread so
the gateway loop keeps processing events while a delivery is in flight.
"""

from __future__ import annotations

import asyncio
import json
from datetime import datetime
from typing import Any, Dict

import requests

from modrelay.datatypes.relay_datatypes import DeliveryOutcome, Envelope, EventType
from modrelay.util.logger import get_logger

logger = get_logger("dispatcher")

JSON_HEADERS = {"Content-Type": "application/json"}


def is_success_status(status_code: int) -> bool:
    return 200 <= status_code < 300


class RelayDispatcher:
    """Posts envelopes to the configured webhook and logs the outcome.

    Parameters
    ----------
    webhook_url:
        Destination URL. An empty value disables delivery; every event is
        then reported as a configuration error and dropped.
    timeout:
        Optional ``requests`` timeout in seconds. None keeps the transport
        default (wait indefinitely).
    """

    def __init__(self, webhook_url: str | None, timeout: float | None = None) -> None:
        self.webhook_url = (webhook_url or "").strip()
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.webhook_url)

    def build_envelope(self, event_type: EventType, payload: Dict[str, Any], now: datetime | None = None) -> Envelope:
        return Envelope.build(event_type, payload, now=now)

    def _post(self, envelope: Envelope) -> requests.Response:
        """Blocking POST of one envelope. Runs in a worker thread."""
        return requests.post(
            self.webhook_url,
            data=json.dumps(envelope.to_dict(), ensure_ascii=False).encode("utf-8"),
            headers=JSON_HEADERS,
            timeout=self.timeout,
        )

    async def deliver(self, event_type: EventType, payload: Dict[str, Any]) -> DeliveryOutcome:
        """Wrap ``payload`` in an envelope and post it once.

        Never raises for delivery problems; the outcome is logged and returned.
        """
        event_name = EventType(event_type).value
        if not self.is_configured:
            logger.error("[DISPATCHER] Webhook URL not configured; dropping %s", event_name)
            return DeliveryOutcome.UNCONFIGURED

        envelope = self.build_envelope(event_type, payload)
        logger.debug("[DISPATCHER] Sending %s", event_name)

        try:
            response = await asyncio.to_thread(self._post, envelope)
        except requests.RequestException as exc:
            logger.error("[DISPATCHER] Failed to send %s: %s", event_name, exc)
            return DeliveryOutcome.FAILED

        if is_success_status(response.status_code):
            logger.info("[DISPATCHER] Delivered %s (HTTP %s)", event_name, response.status_code)
            return DeliveryOutcome.DELIVERED

        logger.error("[DISPATCHER] Error delivering %s: HTTP %s", event_name, response.status_code)
        return DeliveryOutcome.FAILED
