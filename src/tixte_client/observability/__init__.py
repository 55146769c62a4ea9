"""Observabilidade: correlation_id e métricas via logs estruturados."""

from tixte_client.observability.correlation import (
    correlation_scope,
    generate_correlation_id,
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)
from tixte_client.observability.metrics import record_latency

__all__ = [
    "correlation_scope",
    "generate_correlation_id",
    "get_correlation_id",
    "record_latency",
    "reset_correlation_id",
    "set_correlation_id",
]
