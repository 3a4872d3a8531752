"""Boundary between a host HTTP pipeline and the connection manager."""

from __future__ import annotations

from collections.abc import Iterable
from contextlib import suppress
from typing import TypeVar

import httpx

from http_connectivity.errors import ConnectionManagerClosedError
from http_connectivity.manager import ConnectionManager, get_connection_manager
from http_connectivity.outcome import (
    UNREACHABLE_MARKERS,
    RequestOutcome,
    Success,
    classify_outcome,
    outcome_from_exception,
)
from http_connectivity.settings import ConnectivitySettings
from http_connectivity.status import ConnectionStatus

E = TypeVar("E", bound=BaseException)


class ConnectionStatusInterceptor:
    """Feed request outcomes into a connection manager.

    The interceptor only observes: ``on_response`` returns the response it
    was given and ``on_error`` returns the exception it was given, so the
    host pipeline can pass both through unchanged.
    """

    def __init__(
        self,
        manager: ConnectionManager | None = None,
        *,
        settings: ConnectivitySettings | None = None,
        unreachable_markers: Iterable[str] | None = None,
    ) -> None:
        """Attach to ``manager`` (the process-wide one by default).

        Args:
            manager: Manager receiving classified outcomes.
            settings: Settings used for the default manager and for
                ``extra_unreachable_markers``. Read from the environment
                only when omitted and one of those is needed.
            unreachable_markers: Full replacement for the description
                substrings that mark an unclassified failure as a loss of
                connectivity.
        """
        resolved = settings
        if resolved is None and (manager is None or unreachable_markers is None):
            resolved = ConnectivitySettings()

        if manager is None:
            assert resolved is not None
            manager = get_connection_manager(resolved)
        self.manager = manager

        if unreachable_markers is None:
            assert resolved is not None
            self.unreachable_markers = (
                UNREACHABLE_MARKERS + resolved.extra_unreachable_markers
            )
        else:
            self.unreachable_markers = tuple(unreachable_markers)
        self.manager.mark_interceptor_attached()

    def on_outcome(self, outcome: RequestOutcome) -> ConnectionStatus:
        """Classify one outcome, report it and return the classified status.

        Outcomes arriving after the manager was shut down are not reported;
        the request result still reaches the host unchanged.
        """
        status = classify_outcome(outcome, unreachable_markers=self.unreachable_markers)
        with suppress(ConnectionManagerClosedError):
            self.manager.report_outcome(status)
        return status

    def on_response(self, response: httpx.Response) -> httpx.Response:
        self.on_outcome(Success())
        return response

    def on_error(self, error: E) -> E:
        self.on_outcome(outcome_from_exception(error))
        return error
