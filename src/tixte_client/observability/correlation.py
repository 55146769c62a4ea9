"""Gerenciamento de correlation_id por chamada.

O correlation_id identifica uma chamada do Client em todos os logs
(início, retries, falha). Usa ContextVar para ser async-safe: chamadas
concorrentes em Tasks diferentes não se misturam.

Uso:
    with correlation_scope() as correlation_id:
        ...  # logs dentro do bloco carregam o mesmo id
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token

_correlation_id: ContextVar[str] = ContextVar("tixte_correlation_id", default="")


def get_correlation_id() -> str:
    """Retorna o correlation_id do contexto atual (ou string vazia)."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str | None = None) -> Token[str]:
    """Define o correlation_id no contexto atual.

    Args:
        correlation_id: ID a definir. Se None, gera um novo UUID.

    Returns:
        Token para reset posterior via reset_correlation_id().
    """
    value = correlation_id or generate_correlation_id()
    return _correlation_id.set(value)


def reset_correlation_id(token: Token[str]) -> None:
    """Restaura o correlation_id ao valor anterior."""
    _correlation_id.reset(token)


def generate_correlation_id() -> str:
    return uuid.uuid4().hex


@contextmanager
def correlation_scope(correlation_id: str | None = None) -> Iterator[str]:
    """Garante um correlation_id durante o bloco.

    Reaproveita o id do contexto quando já existe (chamada aninhada em
    uma requisição da aplicação); caso contrário gera um novo.
    """
    current = correlation_id or get_correlation_id()
    token = set_correlation_id(current or None)
    try:
        yield get_correlation_id()
    finally:
        reset_correlation_id(token)
