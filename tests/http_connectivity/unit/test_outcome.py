from __future__ import annotations

import socket
import ssl

import httpx
import pytest

from http_connectivity import (
    ConnectionStatus,
    ErrorKind,
    Failure,
    Success,
    classify_outcome,
    outcome_from_exception,
)

_REQUEST = httpx.Request("GET", "https://example.com/ping")


def test_success_is_connected() -> None:
    assert classify_outcome(Success()) is ConnectionStatus.CONNECTED


@pytest.mark.parametrize(
    ("kind", "expected"),
    [
        (ErrorKind.CONNECTION_ERROR, ConnectionStatus.DISCONNECTED),
        (ErrorKind.SOCKET_EXCEPTION, ConnectionStatus.DISCONNECTED),
        (ErrorKind.HTTP_EXCEPTION, ConnectionStatus.DISCONNECTED),
        (ErrorKind.TLS_HANDSHAKE_EXCEPTION, ConnectionStatus.DISCONNECTED),
        (ErrorKind.TIMEOUT, ConnectionStatus.CONNECTED),
        (ErrorKind.HTTP_STATUS_ERROR, ConnectionStatus.CONNECTED),
        (ErrorKind.OTHER, ConnectionStatus.CONNECTED),
    ],
)
def test_every_error_kind_has_a_fixed_mapping(
    kind: ErrorKind, expected: ConnectionStatus
) -> None:
    assert classify_outcome(Failure(kind)) is expected


@pytest.mark.parametrize(
    "description",
    [
        "Failed host lookup: example.com",
        "OSError: Network is unreachable (errno = 101)",
        "NO ADDRESS ASSOCIATED WITH HOSTNAME",
    ],
)
def test_other_failure_with_unreachable_text_is_disconnected(description: str) -> None:
    outcome = Failure(ErrorKind.OTHER, description)

    assert classify_outcome(outcome) is ConnectionStatus.DISCONNECTED


def test_unreachable_text_only_matters_for_other_failures() -> None:
    outcome = Failure(ErrorKind.TIMEOUT, "failed host lookup")

    assert classify_outcome(outcome) is ConnectionStatus.CONNECTED


def test_http_status_error_is_connected() -> None:
    outcome = Failure(ErrorKind.HTTP_STATUS_ERROR, "404 Not Found")

    assert classify_outcome(outcome) is ConnectionStatus.CONNECTED


def test_custom_markers_extend_text_matching() -> None:
    outcome = Failure(ErrorKind.OTHER, "Captive portal detected")

    assert classify_outcome(outcome) is ConnectionStatus.CONNECTED
    assert (
        classify_outcome(outcome, unreachable_markers=("captive portal",))
        is ConnectionStatus.DISCONNECTED
    )


def test_classifier_never_returns_unknown() -> None:
    outcomes = [Success()] + [
        Failure(kind, description)
        for kind in ErrorKind
        for description in ("", "failed host lookup", "garbage")
    ]

    assert all(
        classify_outcome(outcome) is not ConnectionStatus.UNKNOWN
        for outcome in outcomes
    )


def _chained(error: BaseException, cause: BaseException) -> BaseException:
    error.__cause__ = cause
    return error


def _raised_while_handling(
    error: BaseException, context: BaseException
) -> BaseException:
    error.__context__ = context
    return error


@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (httpx.ConnectError("refused", request=_REQUEST), ErrorKind.CONNECTION_ERROR),
        (httpx.ConnectTimeout("slow", request=_REQUEST), ErrorKind.TIMEOUT),
        (httpx.ReadTimeout("slow", request=_REQUEST), ErrorKind.TIMEOUT),
        (TimeoutError("timed out"), ErrorKind.TIMEOUT),
        (httpx.ReadError("reset", request=_REQUEST), ErrorKind.SOCKET_EXCEPTION),
        (
            httpx.RemoteProtocolError("bad frame", request=_REQUEST),
            ErrorKind.HTTP_EXCEPTION,
        ),
        (ConnectionResetError("reset by peer"), ErrorKind.SOCKET_EXCEPTION),
        (socket.gaierror(-2, "Name or service not known"), ErrorKind.SOCKET_EXCEPTION),
        (ssl.SSLError("handshake failed"), ErrorKind.TLS_HANDSHAKE_EXCEPTION),
        (
            _chained(
                httpx.ConnectError("tls", request=_REQUEST),
                ssl.SSLCertVerificationError("certificate verify failed"),
            ),
            ErrorKind.TLS_HANDSHAKE_EXCEPTION,
        ),
        (
            _chained(RuntimeError("wrapped"), ConnectionRefusedError("refused")),
            ErrorKind.SOCKET_EXCEPTION,
        ),
        (ValueError("something else"), ErrorKind.OTHER),
        (
            _raised_while_handling(
                ValueError("invalid JSON body"), ConnectionResetError("reset")
            ),
            ErrorKind.OTHER,
        ),
        (
            _raised_while_handling(
                KeyError("token"), ssl.SSLError("handshake failed")
            ),
            ErrorKind.OTHER,
        ),
    ],
)
def test_outcome_from_exception_tags_failures(
    error: BaseException, expected: ErrorKind
) -> None:
    assert outcome_from_exception(error).error_kind is expected


def test_outcome_from_exception_tags_http_status_error() -> None:
    response = httpx.Response(404, request=_REQUEST)
    error = httpx.HTTPStatusError("404 Not Found", request=_REQUEST, response=response)

    outcome = outcome_from_exception(error)

    assert outcome == Failure(ErrorKind.HTTP_STATUS_ERROR, "404 Not Found")


def test_outcome_from_exception_keeps_description_for_text_matching() -> None:
    outcome = outcome_from_exception(RuntimeError("Failed host lookup: example.com"))

    assert outcome.error_kind is ErrorKind.OTHER
    assert classify_outcome(outcome) is ConnectionStatus.DISCONNECTED
