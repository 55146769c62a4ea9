"""Registro de métricas via structured logging.

As métricas são registradas como logs estruturados e podem ser agregadas
posteriormente pelo sistema de logs da aplicação.
"""

from __future__ import annotations

import logging

logger = logging.getLogger(__name__)


def record_latency(
    component: str,
    operation: str,
    latency_ms: float,
    correlation_id: str | None = None,
    outcome: str | None = None,
) -> None:
    """Registra latência de operação.

    Args:
        component: Nome do componente (ex: "tixte_client")
        operation: Nome da operação (ex: "GET /users/@me")
        latency_ms: Latência em milissegundos
        correlation_id: ID de correlação para rastreamento
        outcome: "success" ou ErrorKind da falha
    """
    logger.info(
        "metric_latency",
        extra={
            "metric_type": "latency",
            "component": component,
            "operation": operation,
            "latency_ms": round(latency_ms, 2),
            "correlation_id": correlation_id,
            "outcome": outcome,
        },
    )
