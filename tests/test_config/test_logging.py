"""Testes para config.logging.

Cobre: configure_logging, get_logger, log_call_failed,
CorrelationIdFilter, SecretRedactionFilter, create_json_formatter.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest

from tixte_client.config.logging import (
    FIELD_RENAME_MAP,
    REQUIRED_LOG_FIELDS,
    CorrelationIdFilter,
    SecretRedactionFilter,
    configure_logging,
    create_json_formatter,
    get_logger,
    log_call_failed,
)
from tixte_client.config.logging.config import DEFAULT_SERVICE_NAME, VALID_LOG_LEVELS
from tixte_client.observability import reset_correlation_id, set_correlation_id
from tixte_client.utils.errors import ErrorKind


@pytest.fixture(autouse=True)
def _restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


def _record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord("tixte_client.test", logging.INFO, __file__, 1, "evt", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestConfigureLogging:
    """Testes para configure_logging."""

    def test_configure_logging_default_level(self) -> None:
        """Configura logging com nível padrão INFO."""
        configure_logging()
        assert logging.getLogger().level == logging.INFO

    def test_configure_logging_case_insensitive(self) -> None:
        """Nível aceita minúsculas."""
        configure_logging(level="warning")
        assert logging.getLogger().level == logging.WARNING

    def test_configure_logging_invalid_level_raises(self) -> None:
        """Nível inválido levanta ValueError."""
        with pytest.raises(ValueError, match="Nível de log inválido"):
            configure_logging(level="INVALID")

    def test_configure_logging_replaces_handlers(self) -> None:
        """configure_logging substitui handlers existentes."""
        root = logging.getLogger()
        root.handlers = [logging.NullHandler(), logging.NullHandler()]
        configure_logging()
        assert len(root.handlers) == 1

    def test_configure_logging_installs_filters(self) -> None:
        """Handler recebe filtros de correlation_id e redação."""
        configure_logging(correlation_id_getter=lambda: "custom-corr-id")
        filters = logging.getLogger().handlers[0].filters
        assert any(isinstance(f, CorrelationIdFilter) for f in filters)
        assert any(isinstance(f, SecretRedactionFilter) for f in filters)

    def test_default_getter_reads_context(self) -> None:
        """Sem getter explícito, usa o correlation_id do contexto."""
        configure_logging()
        correlation_filter = next(
            f for f in logging.getLogger().handlers[0].filters if isinstance(f, CorrelationIdFilter)
        )
        token = set_correlation_id("ctx-1")
        try:
            record = _record()
            correlation_filter.filter(record)
        finally:
            reset_correlation_id(token)
        assert record.correlation_id == "ctx-1"
        assert record.service == DEFAULT_SERVICE_NAME

    def test_valid_levels(self) -> None:
        assert {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} == VALID_LOG_LEVELS


class TestGetLogger:
    """Testes para get_logger."""

    def test_returns_named_logger(self) -> None:
        logger = get_logger("tixte_client.connector")
        assert logger.name == "tixte_client.connector"


class TestCorrelationIdFilter:
    """Testes para CorrelationIdFilter."""

    def test_injects_service_and_correlation_id(self) -> None:
        record = _record()
        assert CorrelationIdFilter("svc", lambda: "abc").filter(record) is True
        assert record.correlation_id == "abc"
        assert record.service == "svc"

    def test_preserves_explicit_correlation_id(self) -> None:
        record = _record(correlation_id="from-extra")
        CorrelationIdFilter("svc", lambda: "abc").filter(record)
        assert record.correlation_id == "from-extra"

    def test_without_getter_uses_empty_string(self) -> None:
        record = _record()
        CorrelationIdFilter("svc").filter(record)
        assert record.correlation_id == ""


class TestSecretRedactionFilter:
    """Testes para SecretRedactionFilter."""

    def test_masks_sensitive_fields(self) -> None:
        record = _record(token="abcdef123456", authorization="secretvalue", path="/users/@me")
        SecretRedactionFilter().filter(record)
        assert record.token == "abcd***"
        assert record.authorization == "secr***"
        assert record.path == "/users/@me"

    def test_already_masked_value_kept(self) -> None:
        record = _record(api_key="abcd***")
        SecretRedactionFilter().filter(record)
        assert record.api_key == "abcd***"

    def test_short_secret_fully_masked(self) -> None:
        record = _record(session_token="abc")
        SecretRedactionFilter().filter(record)
        assert record.session_token == "***"


class TestJsonFormatter:
    """Testes para create_json_formatter."""

    def test_output_has_required_fields_renamed(self) -> None:
        record = _record(correlation_id="c1", service="svc", latency_ms=42)
        payload = json.loads(create_json_formatter().format(record))

        assert payload["level"] == "INFO"
        assert payload["logger"] == "tixte_client.test"
        assert payload["message"] == "evt"
        assert payload["correlation_id"] == "c1"
        assert payload["service"] == "svc"
        assert payload["latency_ms"] == 42

    def test_rename_map(self) -> None:
        assert FIELD_RENAME_MAP == {"asctime": "timestamp", "levelname": "level", "name": "logger"}
        assert {"correlation_id", "service"} <= REQUIRED_LOG_FIELDS

    def test_timestamp_field(self) -> None:
        record = _record(correlation_id="c1", service="svc")
        payload = json.loads(create_json_formatter().format(record))
        assert "timestamp" in payload
        assert "asctime" not in payload

    def test_empty_optional_event_fields_dropped(self) -> None:
        """status_code/outcome None são omitidos; extras preenchidos ficam."""
        record = _record(
            correlation_id="c1",
            service="svc",
            status_code=None,
            outcome=None,
            error_kind="network",
        )
        payload = json.loads(create_json_formatter().format(record))
        assert "status_code" not in payload
        assert "outcome" not in payload
        assert payload["error_kind"] == "network"

    def test_enum_and_datetime_values(self) -> None:
        record = _record(
            correlation_id="c1",
            service="svc",
            kind=ErrorKind.TIMEOUT,
            expires_at=datetime(2026, 10, 19, 12, 0, tzinfo=UTC),
        )
        payload = json.loads(create_json_formatter().format(record))
        assert payload["kind"] == "timeout"
        assert payload["expires_at"] == "2026-10-19T12:00:00+00:00"


class TestLogCallFailed:
    """Testes para log_call_failed."""

    def test_logs_warning_with_fields(self) -> None:
        logger = MagicMock(spec=logging.Logger)
        log_call_failed(logger, "GET", "/files/1", "http", status=404, elapsed_ms=12.3456)

        logger.warning.assert_called_once()
        args, kwargs = logger.warning.call_args
        assert args == ("tixte_call_failed",)
        assert kwargs["extra"] == {
            "method": "GET",
            "path": "/files/1",
            "error_kind": "http",
            "status_code": 404,
            "elapsed_ms": 12.35,
        }

    def test_omits_status_when_no_response(self) -> None:
        logger = MagicMock(spec=logging.Logger)
        log_call_failed(logger, "POST", "/x", "network", status=0)
        extra = logger.warning.call_args.kwargs["extra"]
        assert "status_code" not in extra
        assert "elapsed_ms" not in extra
