"""Testes dos modelos de TypedResult e ErrorDetail."""

from __future__ import annotations

import pytest

from tixte_client.connector.models import ErrorDetail, Failure, HttpMethod, Success
from tixte_client.utils.errors import (
    AuthenticationError,
    DecodingError,
    ErrorKind,
    HttpStatusError,
    NetworkError,
    RequestTimeoutError,
)


class TestFailure:
    """Variante de falha."""

    def test_from_exception_builds_detail(self) -> None:
        exc = NetworkError("http_connection_error")
        failure = Failure.from_exception(exc)
        assert failure.kind is ErrorKind.NETWORK
        assert failure.error == ErrorDetail(status=0, message="http_connection_error", code="network")
        assert failure.cause is exc
        assert not failure.is_success

    def test_unwrap_reraises_cause(self) -> None:
        exc = DecodingError("bad")
        with pytest.raises(DecodingError) as exc_info:
            Failure.from_exception(exc).unwrap()
        assert exc_info.value is exc

    @pytest.mark.parametrize(
        ("kind", "expected"),
        [
            (ErrorKind.HTTP, HttpStatusError),
            (ErrorKind.NETWORK, NetworkError),
            (ErrorKind.AUTHENTICATION, AuthenticationError),
            (ErrorKind.TIMEOUT, RequestTimeoutError),
        ],
    )
    def test_unwrap_without_cause(self, kind: ErrorKind, expected: type[Exception]) -> None:
        failure = Failure(kind=kind, error=ErrorDetail(status=500, message="x"))
        with pytest.raises(expected):
            failure.unwrap()

    def test_request_timeout_is_builtin_timeout(self) -> None:
        assert isinstance(RequestTimeoutError("t"), TimeoutError)


class TestSuccess:
    def test_unwrap(self) -> None:
        assert Success([1, 2]).unwrap() == [1, 2]
        assert Success(None).is_success


class TestErrorDetail:
    """Categorias de status."""

    @pytest.mark.parametrize(
        ("status", "category"),
        [
            (401, "unauthorized"),
            (402, "payment_required"),
            (403, "forbidden"),
            (404, "not_found"),
            (429, "rate_limited"),
            (500, "server_error"),
            (503, "server_error"),
            (400, "http_error"),
        ],
    )
    def test_category(self, status: int, category: str) -> None:
        assert ErrorDetail(status=status, message="m").category == category


class TestHttpMethod:
    def test_idempotency(self) -> None:
        assert {m for m in HttpMethod if m.is_idempotent} == {
            HttpMethod.GET,
            HttpMethod.PUT,
            HttpMethod.DELETE,
        }
