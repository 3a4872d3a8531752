"""Connectivity status inferred from real HTTP request outcomes.

Instead of asking the operating system about network interfaces, the status
follows what actually happens to outbound requests:
  - A response of any HTTP status means a server was reached: ``CONNECTED``.
  - Connection, socket, protocol and TLS handshake failures, or failures
    whose text says the host could not be resolved or the network is
    unreachable, mean ``DISCONNECTED``.
  - Timeouts and other failures still count as ``CONNECTED``.
  - The status is ``UNKNOWN`` until the first request completes.

Attach ``ConnectionStatusTransport`` (or ``AsyncConnectionStatusTransport``)
to an httpx client, then read or subscribe through
``get_connection_manager()``.
"""

from http_connectivity.errors import (
    ConnectionManagerClosedError,
    ConnectivityError,
    SubscriptionClosedError,
)
from http_connectivity.interceptor import ConnectionStatusInterceptor
from http_connectivity.manager import (
    ConnectionManager,
    get_connection_manager,
    set_connection_manager,
)
from http_connectivity.outcome import (
    DISCONNECT_ERROR_KINDS,
    UNREACHABLE_MARKERS,
    ErrorKind,
    Failure,
    RequestOutcome,
    Success,
    classify_outcome,
    outcome_from_exception,
)
from http_connectivity.settings import ConnectivitySettings
from http_connectivity.status import ConnectionStatus, StatusSnapshot, SubscriptionMode
from http_connectivity.subscription import StatusSubscription
from http_connectivity.transport import (
    AsyncConnectionStatusTransport,
    ConnectionStatusTransport,
)

__all__ = [
    "DISCONNECT_ERROR_KINDS",
    "UNREACHABLE_MARKERS",
    "AsyncConnectionStatusTransport",
    "ConnectionManager",
    "ConnectionManagerClosedError",
    "ConnectionStatus",
    "ConnectionStatusInterceptor",
    "ConnectionStatusTransport",
    "ConnectivityError",
    "ConnectivitySettings",
    "ErrorKind",
    "Failure",
    "RequestOutcome",
    "StatusSnapshot",
    "StatusSubscription",
    "Success",
    "SubscriptionClosedError",
    "SubscriptionMode",
    "classify_outcome",
    "get_connection_manager",
    "outcome_from_exception",
    "set_connection_manager",
]
