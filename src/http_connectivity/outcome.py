"""Request outcomes and the rules mapping them to connection status.

The classifier only distinguishes "no path to any server" from "a server was
reached". Timeouts, HTTP status errors and unrecognized failures all count as
``CONNECTED``: a false connected signal is preferred over a spurious
disconnect caused by an unrelated request failure.
"""

from __future__ import annotations

import ssl
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import StrEnum

import httpx

from http_connectivity.status import ConnectionStatus

UNREACHABLE_MARKERS: tuple[str, ...] = (
    "network is unreachable",
    "failed host lookup",
    "no address associated with hostname",
)


class ErrorKind(StrEnum):
    """Classification tag attached to a failed request at the boundary."""

    CONNECTION_ERROR = "connection_error"
    SOCKET_EXCEPTION = "socket_exception"
    HTTP_EXCEPTION = "http_exception"
    TLS_HANDSHAKE_EXCEPTION = "tls_handshake_exception"
    TIMEOUT = "timeout"
    HTTP_STATUS_ERROR = "http_status_error"
    OTHER = "other"


DISCONNECT_ERROR_KINDS = frozenset(
    {
        ErrorKind.CONNECTION_ERROR,
        ErrorKind.SOCKET_EXCEPTION,
        ErrorKind.HTTP_EXCEPTION,
        ErrorKind.TLS_HANDSHAKE_EXCEPTION,
    }
)


@dataclass(frozen=True)
class Success:
    """A request that completed with a response."""


@dataclass(frozen=True)
class Failure:
    """A request that failed, tagged for classification."""

    error_kind: ErrorKind
    description: str = ""


RequestOutcome = Success | Failure


def _matches_unreachable(description: str, markers: Iterable[str]) -> bool:
    lowered = description.lower()
    return any(marker.lower() in lowered for marker in markers)


def classify_outcome(
    outcome: RequestOutcome,
    *,
    unreachable_markers: Iterable[str] = UNREACHABLE_MARKERS,
) -> ConnectionStatus:
    """Map one request outcome to ``CONNECTED`` or ``DISCONNECTED``.

    Args:
        outcome: Outcome of one completed request attempt.
        unreachable_markers: Substrings that mark an ``OTHER`` failure as a
            loss of connectivity. Matched case-insensitively.

    Returns:
        ``DISCONNECTED`` for connection-level failures, ``CONNECTED``
        otherwise. Never ``UNKNOWN``.
    """
    if isinstance(outcome, Success):
        return ConnectionStatus.CONNECTED
    if outcome.error_kind in DISCONNECT_ERROR_KINDS:
        return ConnectionStatus.DISCONNECTED
    if outcome.error_kind == ErrorKind.OTHER and _matches_unreachable(
        outcome.description, unreachable_markers
    ):
        return ConnectionStatus.DISCONNECTED
    return ConnectionStatus.CONNECTED


def _exception_chain(exc: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__


def outcome_from_exception(exc: BaseException) -> Failure:
    """Translate an httpx or platform exception into a tagged ``Failure``."""
    description = str(exc)
    if isinstance(exc, httpx.HTTPStatusError):
        return Failure(ErrorKind.HTTP_STATUS_ERROR, description)
    if isinstance(exc, (httpx.TimeoutException, TimeoutError)):
        return Failure(ErrorKind.TIMEOUT, description)

    chain = tuple(_exception_chain(exc))
    if any(isinstance(item, ssl.SSLError) for item in chain):
        return Failure(ErrorKind.TLS_HANDSHAKE_EXCEPTION, description)
    if isinstance(exc, httpx.ConnectError):
        return Failure(ErrorKind.CONNECTION_ERROR, description)
    if isinstance(exc, httpx.ProtocolError):
        return Failure(ErrorKind.HTTP_EXCEPTION, description)
    if isinstance(exc, httpx.NetworkError) or any(
        isinstance(item, OSError) and not isinstance(item, TimeoutError)
        for item in chain
    ):
        return Failure(ErrorKind.SOCKET_EXCEPTION, description)
    return Failure(ErrorKind.OTHER, description)
