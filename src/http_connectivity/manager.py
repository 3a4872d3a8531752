"""Process-wide holder and broadcaster of the inferred connection status."""

from __future__ import annotations

import threading
import weakref
from collections.abc import Callable
from datetime import UTC, datetime

from http_connectivity.errors import ConnectionManagerClosedError
from http_connectivity.logging import (
    AnyLogger,
    get_logger,
    log_event,
    log_status_report,
)
from http_connectivity.settings import ConnectivitySettings
from http_connectivity.status import (
    ConnectionStatus,
    StatusSnapshot,
    SubscriptionMode,
)
from http_connectivity.subscription import StatusSubscription


def _utcnow() -> datetime:
    return datetime.now(UTC)


class ConnectionManager:
    """Current connection status plus fan-out to live subscribers.

    Every mutation and its fan-out happen under one internal lock, so all
    subscribers observe reports in the same total order. Nothing outside
    this class runs while the lock is held; logging happens after release.

    Subscriptions are held weakly: a handle dropped without ``close()`` stops
    receiving reports once it is garbage collected.

    After ``shutdown()`` every mutation and subscribe call raises
    ``ConnectionManagerClosedError``. Reads keep returning the last state.
    """

    def __init__(
        self,
        *,
        logging_enabled: bool = True,
        logger: AnyLogger | None = None,
        now: Callable[[], datetime] | None = None,
    ) -> None:
        """Build a manager in the initial ``UNKNOWN`` state.

        Args:
            logging_enabled: Emit diagnostic log events. Mutable at runtime
                through the ``logging_enabled`` attribute.
            logger: Structured or stdlib logger. Defaults to the package
                structlog logger.
            now: Clock used to stamp ``last_change_at``.
        """
        self.logging_enabled = logging_enabled
        self._logger = get_logger() if logger is None else logger
        self._now = _utcnow if now is None else now
        self._lock = threading.Lock()
        self._status = ConnectionStatus.UNKNOWN
        self._last_change_at: datetime | None = None
        self._interceptor_attached = False
        self._subscriptions: weakref.WeakSet[StatusSubscription] = weakref.WeakSet()
        self._shut_down = False

    def current_status(self) -> ConnectionStatus:
        return self._status

    def is_connected(self) -> bool:
        return self._status.is_connected

    def is_disconnected(self) -> bool:
        return self._status.is_disconnected

    def last_change_at(self) -> datetime | None:
        """Return when the latest status was reported.

        Stamped on every report, including repeats of the current status.
        """
        return self._last_change_at

    @property
    def interceptor_attached(self) -> bool:
        return self._interceptor_attached

    @property
    def is_shut_down(self) -> bool:
        return self._shut_down

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def snapshot(self) -> StatusSnapshot:
        """Return status, timestamp and attachment read under one lock."""
        with self._lock:
            return StatusSnapshot(
                status=self._status,
                last_change_at=self._last_change_at,
                interceptor_attached=self._interceptor_attached,
            )

    def subscribe_all(self) -> StatusSubscription:
        """Subscribe to every report, repeats included.

        The first delivered value is the status current at subscribe time.
        """
        return self._subscribe(SubscriptionMode.ALL)

    def subscribe_changes(self) -> StatusSubscription:
        """Subscribe to transitions only; consecutive duplicates are dropped.

        The first delivered value is the status current at subscribe time.
        """
        return self._subscribe(SubscriptionMode.CHANGES)

    def _subscribe(self, mode: SubscriptionMode) -> StatusSubscription:
        subscription = StatusSubscription(mode, on_close=self._detach)
        with self._lock:
            if self._shut_down:
                raise ConnectionManagerClosedError(mode.method_name)
            self._subscriptions.add(subscription)
            subscription.publish(self._status)
            attached = self._interceptor_attached

        if not attached and self.logging_enabled:
            log_event(
                self._logger,
                "warning",
                "connectivity.interceptor.missing",
                method=mode.method_name,
                detail=(
                    "status stays unknown until a ConnectionStatusInterceptor "
                    "or ConnectionStatusTransport is attached to the HTTP client"
                ),
            )
        return subscription

    def _detach(self, subscription: StatusSubscription) -> None:
        with self._lock:
            self._subscriptions.discard(subscription)

    def _broadcast_locked(self, status: ConnectionStatus) -> None:
        for subscription in list(self._subscriptions):
            subscription.publish(status)

    def report_outcome(self, status: ConnectionStatus) -> None:
        """Record a classified status and notify every live subscriber.

        Raises:
            ConnectionManagerClosedError: When called after ``shutdown()``.
        """
        with self._lock:
            if self._shut_down:
                raise ConnectionManagerClosedError("report_outcome")
            self._status = status
            self._last_change_at = self._now()
            self._broadcast_locked(status)

        if self.logging_enabled:
            log_status_report(self._logger, status)

    def mark_interceptor_attached(self) -> None:
        with self._lock:
            if self._shut_down:
                raise ConnectionManagerClosedError("mark_interceptor_attached")
            self._interceptor_attached = True

        if self.logging_enabled:
            log_event(self._logger, "info", "connectivity.interceptor.attached")

    def reset(self) -> None:
        """Restore the initial state, keeping existing subscriptions live.

        Live subscribers are sent ``UNKNOWN`` so their view matches the
        restored state.
        """
        with self._lock:
            if self._shut_down:
                raise ConnectionManagerClosedError("reset")
            self._status = ConnectionStatus.UNKNOWN
            self._last_change_at = None
            self._interceptor_attached = False
            self._broadcast_locked(ConnectionStatus.UNKNOWN)

    def shutdown(self) -> None:
        """Terminate every subscription and reject further mutations.

        No report reaches a subscription after this call. Statuses delivered
        before it stay readable, and iteration ends once they are consumed.
        """
        with self._lock:
            if self._shut_down:
                return
            self._shut_down = True
            subscriptions = list(self._subscriptions)
            self._subscriptions.clear()

        for subscription in subscriptions:
            subscription.terminate()
        if self.logging_enabled:
            log_event(
                self._logger,
                "info",
                "connectivity.manager.shutdown",
                subscribers=len(subscriptions),
            )


_default_manager: ConnectionManager | None = None
_default_manager_lock = threading.Lock()


def get_connection_manager(
    settings: ConnectivitySettings | None = None,
) -> ConnectionManager:
    """Return the process-wide manager, creating it on first access.

    ``settings`` is only consulted when the manager is created.
    """
    global _default_manager
    with _default_manager_lock:
        if _default_manager is None:
            resolved = ConnectivitySettings() if settings is None else settings
            _default_manager = ConnectionManager(
                logging_enabled=resolved.logging_enabled
            )
        return _default_manager


def set_connection_manager(
    manager: ConnectionManager | None,
) -> ConnectionManager | None:
    """Install ``manager`` as the process-wide instance; return the old one.

    Passing ``None`` makes the next ``get_connection_manager()`` build a
    fresh instance. Intended for test harnesses and host-managed lifetimes.
    """
    global _default_manager
    with _default_manager_lock:
        previous, _default_manager = _default_manager, manager
        return previous
