"""Filters de logging para injeção de contexto e redação de segredos.

Campos injetados:
- correlation_id: ID de rastreamento da chamada
- service: Nome do serviço

Campos redigidos: qualquer atributo extra cujo nome indique credencial
(authorization, token, api_key, ...). Tokens nunca aparecem inteiros.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tixte_client.utils.redaction import mask_secret

if TYPE_CHECKING:
    from collections.abc import Callable

SENSITIVE_FIELD_NAMES = frozenset(
    {
        "authorization",
        "api_key",
        "apikey",
        "session_token",
        "token",
        "access_token",
    }
)


class CorrelationIdFilter(logging.Filter):
    """Injeta correlation_id e service em cada record de log.

    Args:
        service_name: Nome do serviço para identificação nos logs.
        correlation_id_getter: Função que retorna o correlation_id atual.
            Se não fornecida, usa string vazia como fallback.
    """

    def __init__(
        self,
        service_name: str,
        correlation_id_getter: Callable[[], str] | None = None,
    ) -> None:
        super().__init__()
        self._service_name = service_name
        self._get_correlation_id = correlation_id_getter or (lambda: "")

    def filter(self, record: logging.LogRecord) -> bool:
        """Adiciona correlation_id e service ao record.

        Se correlation_id já foi passado via `extra`, preserva o valor.
        """
        existing = getattr(record, "correlation_id", None)
        record.correlation_id = existing if existing else self._get_correlation_id()
        record.service = self._service_name
        return True


class SecretRedactionFilter(logging.Filter):
    """Mascara atributos extras com nomes de credenciais.

    Valores já mascarados (terminando em ***) são preservados.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        for name in SENSITIVE_FIELD_NAMES:
            value = record.__dict__.get(name)
            if isinstance(value, str) and value and not value.endswith("***"):
                record.__dict__[name] = mask_secret(value)
        return True
