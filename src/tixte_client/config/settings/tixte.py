"""Settings do cliente Tixte.

Todas as variáveis usam o prefixo TIXTE_.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from tixte_client import __version__

# Constantes da API
TIXTE_API_BASE_URL: str = "https://api.tixte.com/v1"
DEFAULT_USER_AGENT: str = f"tixte-client/{__version__}"

VALID_CACHE_POLICIES = frozenset({"none", "memory"})


@dataclass(frozen=True)
class TixteSettings:
    """Configurações do cliente Tixte.

    Attributes:
        api_key: API key da conta (header Authorization)
        session_token: Session token para endpoints de conta
        api_base_url: URL base da API (com versão)
        user_agent: User-Agent das requisições
        request_timeout_seconds: Timeout por tentativa
        call_timeout_seconds: Timeout acumulado por chamada (None = sem limite)
        max_retries: Total de tentativas por requisição
        backoff_base_seconds: Atraso base do backoff exponencial
        backoff_max_seconds: Teto do backoff
        max_connections: Máximo de conexões simultâneas
        cache_policy: "none" ou "memory"
        cache_ttl_seconds: Validade das respostas cacheadas
    """

    # Credenciais
    api_key: str = ""
    session_token: str = ""

    # API
    api_base_url: str = TIXTE_API_BASE_URL
    user_agent: str = DEFAULT_USER_AGENT

    # Timeouts e retries
    request_timeout_seconds: float = 30.0
    call_timeout_seconds: float | None = None
    max_retries: int = 3
    backoff_base_seconds: float = 0.5
    backoff_max_seconds: float = 8.0

    # Pool
    max_connections: int = 100

    # Cache
    cache_policy: str = "none"
    cache_ttl_seconds: float = 60.0

    def validate(self) -> list[str]:
        """Valida configurações mínimas.

        Returns:
            Lista de erros de validação (vazia = tudo OK).
        """
        errors: list[str] = []

        if not self.api_key:
            errors.append("TIXTE_API_KEY não configurado")
        elif any(ch.isspace() for ch in self.api_key):
            errors.append("TIXTE_API_KEY não pode conter espaços")

        if self.session_token and any(ch.isspace() for ch in self.session_token):
            errors.append("TIXTE_SESSION_TOKEN não pode conter espaços")

        if self.request_timeout_seconds <= 0:
            errors.append("TIXTE_REQUEST_TIMEOUT_SECONDS deve ser > 0")

        if self.call_timeout_seconds is not None and self.call_timeout_seconds <= 0:
            errors.append("TIXTE_CALL_TIMEOUT_SECONDS deve ser > 0")

        if self.max_retries < 1:
            errors.append("TIXTE_MAX_RETRIES deve ser >= 1")

        if self.backoff_base_seconds < 0 or self.backoff_max_seconds < 0:
            errors.append("TIXTE_BACKOFF_* deve ser >= 0")

        if self.max_connections < 1:
            errors.append("TIXTE_MAX_CONNECTIONS deve ser >= 1")

        if self.cache_policy not in VALID_CACHE_POLICIES:
            errors.append("TIXTE_CACHE_POLICY deve ser 'none' ou 'memory'")

        if self.cache_ttl_seconds <= 0:
            errors.append("TIXTE_CACHE_TTL_SECONDS deve ser > 0")

        return errors


def _optional_float(raw: str | None) -> float | None:
    if raw is None or not raw.strip():
        return None
    return float(raw)


def _load_from_env() -> TixteSettings:
    """Carrega TixteSettings a partir de variáveis de ambiente."""
    return TixteSettings(
        api_key=os.getenv("TIXTE_API_KEY", ""),
        session_token=os.getenv("TIXTE_SESSION_TOKEN", ""),
        api_base_url=os.getenv("TIXTE_API_BASE_URL", TIXTE_API_BASE_URL),
        user_agent=os.getenv("TIXTE_USER_AGENT", DEFAULT_USER_AGENT),
        request_timeout_seconds=float(os.getenv("TIXTE_REQUEST_TIMEOUT_SECONDS", "30")),
        call_timeout_seconds=_optional_float(os.getenv("TIXTE_CALL_TIMEOUT_SECONDS")),
        max_retries=int(os.getenv("TIXTE_MAX_RETRIES", "3")),
        backoff_base_seconds=float(os.getenv("TIXTE_BACKOFF_BASE_SECONDS", "0.5")),
        backoff_max_seconds=float(os.getenv("TIXTE_BACKOFF_MAX_SECONDS", "8")),
        max_connections=int(os.getenv("TIXTE_MAX_CONNECTIONS", "100")),
        cache_policy=os.getenv("TIXTE_CACHE_POLICY", "none").lower(),
        cache_ttl_seconds=float(os.getenv("TIXTE_CACHE_TTL_SECONDS", "60")),
    )


@lru_cache(maxsize=1)
def get_tixte_settings() -> TixteSettings:
    """Retorna instância cacheada de TixteSettings.

    A cache garante singleton para múltiplas injeções.
    """
    return _load_from_env()
