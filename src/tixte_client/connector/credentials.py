"""Fontes de credencial para o Authenticator.

- StaticCredentialSource: token fixo (API key sem expiração).
- EnvCredentialSource: lê o token de variável de ambiente e relê a cada
  renovação (útil quando um processo externo rotaciona o segredo).
"""

from __future__ import annotations

import logging
import os
from datetime import datetime

from tixte_client.connector.models import Credential
from tixte_client.utils.errors import AuthenticationError

logger = logging.getLogger(__name__)

API_KEY_ENV = "TIXTE_API_KEY"
SESSION_TOKEN_ENV = "TIXTE_SESSION_TOKEN"


class StaticCredentialSource:
    """Credencial fixa; renovar devolve a mesma credencial."""

    def __init__(self, token: str, expires_at: datetime | None = None) -> None:
        if not token or not token.strip():
            raise ValueError("token não pode ser vazio")
        if any(ch.isspace() for ch in token):
            raise ValueError("token não pode conter espaços")
        self._credential = Credential(token=token, expires_at=expires_at)

    def current_credential(self) -> Credential:
        return self._credential

    async def refresh(self) -> Credential:
        return self._credential


class EnvCredentialSource:
    """Credencial lida de variável de ambiente.

    Args:
        env_key: Nome da variável (ex.: TIXTE_API_KEY)
    """

    def __init__(self, env_key: str = API_KEY_ENV) -> None:
        self._env_key = env_key

    def current_credential(self) -> Credential:
        """Lê credencial do ambiente.

        Raises:
            AuthenticationError: Se variável não definida ou vazia
        """
        value = os.getenv(self._env_key, "").strip()
        if not value:
            logger.debug("env_credential_not_found", extra={"env_key": self._env_key})
            raise AuthenticationError(
                f"Variável de ambiente obrigatória não definida: {self._env_key}"
            )
        return Credential(token=value)

    async def refresh(self) -> Credential:
        return self.current_credential()
