"""Formatter JSON dos eventos tixte_*.

Cada linha carrega os campos obrigatórios (timestamp, level, logger,
message, correlation_id, service) mais os extras do evento. Extras
opcionais sem valor (status_code de falha sem resposta, outcome de
métrica ainda não classificada) são omitidos em vez de sair como null.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pythonjsonlogger.json import JsonFormatter

# Campos obrigatórios em todo log estruturado
REQUIRED_LOG_FIELDS = frozenset(
    {
        "asctime",
        "levelname",
        "name",
        "message",
        "correlation_id",
        "service",
    }
)

FIELD_RENAME_MAP = {
    "asctime": "timestamp",
    "levelname": "level",
    "name": "logger",
}

# Extras dos eventos tixte_call_failed, tixte_retry_attempted e metric_latency
OPTIONAL_EVENT_FIELDS = frozenset(
    {
        "status_code",
        "elapsed_ms",
        "backoff_seconds",
        "outcome",
        "auth_mode",
        "expires_at",
    }
)


def _json_default(value: Any) -> Any:
    # ErrorKind, HttpMethod e AuthMode são str-enums
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat()
    return str(value)


class TixteJsonFormatter(JsonFormatter):
    """JsonFormatter que descarta extras opcionais vazios."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: Any,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        for name in OPTIONAL_EVENT_FIELDS:
            if name in log_record and log_record[name] is None:
                del log_record[name]


def create_json_formatter() -> TixteJsonFormatter:
    """Cria formatter JSON com campos padronizados.

    Exemplo de output:
        {
            "timestamp": "2026-10-19 10:30:00,123",
            "level": "WARNING",
            "logger": "tixte_client.connector.client",
            "message": "tixte_call_failed",
            "correlation_id": "9f0c...",
            "service": "tixte_client",
            "method": "GET",
            "path": "/users/@me",
            "error_kind": "network"
        }
    """
    format_string = " ".join(f"%({field})s" for field in sorted(REQUIRED_LOG_FIELDS))

    return TixteJsonFormatter(
        format_string,
        rename_fields=FIELD_RENAME_MAP,
        json_default=_json_default,
    )
