"""Configuração centralizada de logging.

Funções para configurar logging estruturado JSON com:
- Campos obrigatórios (correlation_id, service, level, logger, message)
- Redação de credenciais em campos extras
- Níveis configuráveis

Uso:
    from tixte_client.config.logging import configure_logging, get_logger

    # Na inicialização da aplicação que usa o cliente
    configure_logging(level="INFO", service_name="meu_servico")

    # Em qualquer módulo
    logger = get_logger(__name__)
    logger.info("tixte_upload_done", extra={"latency_ms": 42})
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tixte_client.config.logging.filters import CorrelationIdFilter, SecretRedactionFilter
from tixte_client.config.logging.formatters import create_json_formatter

if TYPE_CHECKING:
    from collections.abc import Callable

# Níveis de log válidos
VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

# Nome padrão do serviço
DEFAULT_SERVICE_NAME = "tixte_client"


def configure_logging(
    level: str = "INFO",
    service_name: str = DEFAULT_SERVICE_NAME,
    correlation_id_getter: Callable[[], str] | None = None,
) -> None:
    """Configura logging JSON estruturado.

    Deve ser chamada uma vez na inicialização da aplicação.

    Args:
        level: Nível de log (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        service_name: Nome do serviço para identificação nos logs.
        correlation_id_getter: Função opcional que retorna o correlation_id
            do contexto atual (default: tixte_client.observability).

    Raises:
        ValueError: Se o nível de log for inválido.
    """
    level_upper = level.upper()
    if level_upper not in VALID_LOG_LEVELS:
        raise ValueError(
            f"Nível de log inválido: {level}. "
            f"Válidos: {', '.join(sorted(VALID_LOG_LEVELS))}"
        )

    if correlation_id_getter is None:
        from tixte_client.observability import get_correlation_id

        correlation_id_getter = get_correlation_id

    formatter = create_json_formatter()

    handler = logging.StreamHandler()
    handler.setLevel(level_upper)
    handler.setFormatter(formatter)
    handler.addFilter(CorrelationIdFilter(service_name, correlation_id_getter))
    handler.addFilter(SecretRedactionFilter())

    root = logging.getLogger()
    root.setLevel(level_upper)
    # Substituir handlers existentes para evitar duplicação
    root.handlers = [handler]


def get_logger(name: str) -> logging.Logger:
    """Retorna logger para o módulo especificado.

    O filter injeta automaticamente service e correlation_id.
    """
    return logging.getLogger(name)


def log_call_failed(
    logger: logging.Logger,
    method: str,
    path: str,
    kind: str,
    status: int | None = None,
    elapsed_ms: float | None = None,
) -> None:
    """Log observável de chamada que terminou em falha (sem PII).

    Args:
        logger: Logger instance.
        method: Método HTTP.
        path: Path resolvido (sem query).
        kind: ErrorKind de origem (ex.: "timeout").
        status: Status HTTP, quando houve resposta.
        elapsed_ms: Tempo decorrido em ms.
    """
    extra: dict[str, object] = {
        "method": method,
        "path": path,
        "error_kind": kind,
    }
    if status:
        extra["status_code"] = status
    if elapsed_ms is not None:
        extra["elapsed_ms"] = round(elapsed_ms, 2)

    logger.warning(
        "tixte_call_failed",
        extra=extra,
    )
