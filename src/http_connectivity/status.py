"""Connection status primitives."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class ConnectionStatus(StrEnum):
    """Connectivity inferred from real request outcomes.

    ``UNKNOWN`` is only ever the initial value; no classified outcome
    produces it.
    """

    UNKNOWN = "unknown"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"

    @property
    def is_connected(self) -> bool:
        return self is ConnectionStatus.CONNECTED

    @property
    def is_disconnected(self) -> bool:
        return self is ConnectionStatus.DISCONNECTED

    @property
    def is_unknown(self) -> bool:
        return self is ConnectionStatus.UNKNOWN


class SubscriptionMode(StrEnum):
    """Delivery mode of a status subscription."""

    ALL = "all"
    CHANGES = "changes"

    @property
    def method_name(self) -> str:
        """Return the manager method that opens this kind of subscription."""
        if self is SubscriptionMode.ALL:
            return "subscribe_all"
        return "subscribe_changes"


@dataclass(frozen=True)
class StatusSnapshot:
    """Point-in-time view of connection manager state.

    Attributes:
        status: Latest reported status.
        last_change_at: Timestamp of the latest report, if any.
        interceptor_attached: Whether an interceptor has been attached.
    """

    status: ConnectionStatus
    last_change_at: datetime | None
    interceptor_attached: bool
