"""Protocolo de fonte de credenciais.

O carregamento/persistência da credencial de longa duração (arquivo,
env, secret manager) fica fora do core; o Authenticator depende apenas
deste contrato.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from tixte_client.connector.models import Credential


class CredentialSourceProtocol(Protocol):
    """Contrato mínimo para fontes de credencial."""

    def current_credential(self) -> Credential: ...

    async def refresh(self) -> Credential: ...
