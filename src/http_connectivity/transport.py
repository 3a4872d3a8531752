"""httpx transports that report every request outcome.

Usage::

    client = httpx.Client(transport=ConnectionStatusTransport())
    async_client = httpx.AsyncClient(transport=AsyncConnectionStatusTransport())
"""

from __future__ import annotations

import httpx

from http_connectivity.interceptor import ConnectionStatusInterceptor


class ConnectionStatusTransport(httpx.BaseTransport):
    """Sync transport wrapper feeding a ``ConnectionStatusInterceptor``."""

    def __init__(
        self,
        transport: httpx.BaseTransport | None = None,
        *,
        interceptor: ConnectionStatusInterceptor | None = None,
    ) -> None:
        """Wrap ``transport`` (a fresh ``httpx.HTTPTransport`` by default).

        Args:
            transport: Transport that actually sends requests.
            interceptor: Interceptor to notify. Defaults to one attached to
                the process-wide connection manager.
        """
        self._transport = httpx.HTTPTransport() if transport is None else transport
        self.interceptor = (
            ConnectionStatusInterceptor() if interceptor is None else interceptor
        )

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        try:
            response = self._transport.handle_request(request)
        except Exception as exc:
            self.interceptor.on_error(exc)
            raise
        return self.interceptor.on_response(response)

    def close(self) -> None:
        self._transport.close()


class AsyncConnectionStatusTransport(httpx.AsyncBaseTransport):
    """Async transport wrapper feeding a ``ConnectionStatusInterceptor``."""

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport | None = None,
        *,
        interceptor: ConnectionStatusInterceptor | None = None,
    ) -> None:
        """Wrap ``transport`` (a fresh ``httpx.AsyncHTTPTransport`` by default).

        Args:
            transport: Transport that actually sends requests.
            interceptor: Interceptor to notify. Defaults to one attached to
                the process-wide connection manager.
        """
        self._transport = (
            httpx.AsyncHTTPTransport() if transport is None else transport
        )
        self.interceptor = (
            ConnectionStatusInterceptor() if interceptor is None else interceptor
        )

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        try:
            response = await self._transport.handle_async_request(request)
        except Exception as exc:
            self.interceptor.on_error(exc)
            raise
        return self.interceptor.on_response(response)

    async def aclose(self) -> None:
        await self._transport.aclose()
