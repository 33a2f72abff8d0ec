"""
Relay-level types.

This module defines what leaves the pipeline: the event kinds the relay knows
about, the advisory spam labels, the ``RelayEvent`` produced per accepted
gateway event and the ``Envelope`` actually posted downstream.

Key Features:
- `EventType`: Event kind strings used as ``event_type`` in envelopes.
- `SpamSignal`: Fixed set of advisory spam pattern labels.
- `RelayEvent`: Event kind plus normalized payload, before timestamping.
- `Envelope`: The unit of delivery.
- `DeliveryOutcome`: Result of one delivery attempt.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict


class EventType(str, Enum):
    """Event kinds forwarded by the relay, valued as sent downstream."""

    MESSAGE_CREATE = "messageCreate"
    MESSAGE_UPDATE = "messageUpdate"
    MESSAGE_DELETE = "messageDelete"
    MEMBER_ADD = "memberAdd"
    MEMBER_REMOVE = "memberRemove"
    MEMBER_UPDATE = "memberUpdate"
    REACTION_ADD = "reactionAdd"

    def __str__(self) -> str:
        return self.value


class SpamSignal(str, Enum):
    """Advisory spam labels. Declaration order is the serialization order."""

    PRIVATE_CONTACT = "intento_contacto_privado"
    SELF_PROMOTION = "autopromocion"
    CONTAINS_LINK = "contiene_enlace"
    COMMERCIAL_OFFER = "oferta_comercial"
    SHARED_TOOL = "herramienta_compartida"

    def __str__(self) -> str:
        return self.value


class DeliveryOutcome(str, Enum):
    """Result of a single delivery attempt."""

    DELIVERED = "delivered"
    FAILED = "failed"
    UNCONFIGURED = "unconfigured"


def iso_timestamp(moment: datetime) -> str:
    """Format ``moment`` as an ISO-8601 UTC instant with millisecond precision.

    Naive datetimes are assumed to be UTC.

    >>> iso_timestamp(datetime(2026, 1, 2, 3, 4, 5, 678000, tzinfo=timezone.utc))
    '2026-01-02T03:04:05.678Z'
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def epoch_millis(moment: datetime | None) -> int | None:
    """Convert ``moment`` to integer milliseconds since the Unix epoch."""
    if moment is None:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)


@dataclass(frozen=True, slots=True)
class RelayEvent:
    """An accepted gateway event, normalized but not yet timestamped.

    Attributes:
        event_type (EventType): Kind of event.
        data (Dict[str, Any]): Normalized payload. Never mutated after construction.
    """

    event_type: EventType
    data: Dict[str, Any]


@dataclass(frozen=True, slots=True)
class Envelope:
    """The document posted to the downstream endpoint.

    Attributes:
        event_type (EventType): Kind of event.
        data (Dict[str, Any]): Normalized payload.
        timestamp (str): ISO-8601 instant the envelope was built.
    """

    event_type: EventType
    data: Dict[str, Any]
    timestamp: str

    @classmethod
    def build(cls, event_type: EventType, data: Dict[str, Any], now: datetime | None = None) -> "Envelope":
        """Wrap ``data`` in an envelope stamped with ``now`` (defaults to the current instant)."""
        moment = now or datetime.now(timezone.utc)
        return cls(event_type=EventType(event_type), data=data, timestamp=iso_timestamp(moment))

    def to_dict(self) -> Dict[str, Any]:
        """Return the JSON-serializable form of the envelope."""
        return {
            "event_type": self.event_type.value,
            "data": self.data,
            "timestamp": self.timestamp,
        }
