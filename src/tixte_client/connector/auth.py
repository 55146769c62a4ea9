"""Autenticação de requisições Tixte.

O Authenticator guarda a credencial corrente e anota cada descriptor com
o header de autorização. Credenciais expiradas são renovadas via
SingleFlight: no máximo uma renovação em andamento, e todos os chamadores
concorrentes observam o mesmo resultado (sucesso ou falha).
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Generic, TypeVar

from tixte_client.utils.errors import AuthenticationError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from tixte_client.connector.models import Credential, RequestDescriptor
    from tixte_client.protocols import CredentialSourceProtocol

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SingleFlight(Generic[T]):
    """Coordena uma única execução concorrente de uma operação assíncrona.

    Chamadores que chegam enquanto a operação está em andamento aguardam a
    mesma Task. O cancelamento de um chamador não cancela a Task
    compartilhada (asyncio.shield).
    """

    def __init__(self) -> None:
        self._task: asyncio.Task[T] | None = None

    @property
    def in_flight(self) -> bool:
        return self._task is not None

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        task = self._task
        if task is None:
            task = asyncio.ensure_future(operation())
            self._task = task
            task.add_done_callback(self._on_done)
        return await asyncio.shield(task)

    def _on_done(self, task: asyncio.Task[T]) -> None:
        if self._task is task:
            self._task = None
        if not task.cancelled():
            # Marca a exceção como consumida mesmo sem chamadores restantes
            task.exception()


class Authenticator:
    """Anota requisições com a credencial corrente.

    Args:
        source: Fonte de credenciais (current_credential/refresh)
        clock: Relógio para checar expiração (default: UTC agora)
        header_name: Header de autorização
        scheme: Prefixo do valor (ex.: "Bearer"); vazio envia o token puro
        refresh_margin: Antecedência para considerar a credencial expirada
    """

    def __init__(
        self,
        source: CredentialSourceProtocol,
        *,
        clock: Callable[[], datetime] | None = None,
        header_name: str = "Authorization",
        scheme: str = "",
        refresh_margin: timedelta = timedelta(0),
    ) -> None:
        self._source = source
        self._clock = clock or _utcnow
        self._header_name = header_name
        self._scheme = scheme.strip()
        self._refresh_margin = refresh_margin
        self._credential: Credential | None = None
        self._force_refresh = False
        self._refresh_flight: SingleFlight[Credential] = SingleFlight()

    async def annotate(self, descriptor: RequestDescriptor) -> RequestDescriptor:
        """Retorna cópia do descriptor com header de autorização.

        Raises:
            AuthenticationError: Credencial indisponível ou renovação falhou
        """
        credential = await self.credential()
        if not credential.token or not credential.token.strip():
            raise AuthenticationError("Credencial vazia")
        return descriptor.with_headers({self._header_name: self._format(credential.token)})

    async def credential(self) -> Credential:
        """Credencial válida, renovando se expirada."""
        credential = self._credential
        if credential is None:
            credential = self._load_current()
        if self._needs_refresh(credential):
            credential = await self._refresh_flight.run(self._refresh)
        return credential

    def invalidate(self) -> None:
        """Força renovação na próxima chamada."""
        self._force_refresh = True

    def _load_current(self) -> Credential:
        try:
            credential = self._source.current_credential()
        except AuthenticationError:
            raise
        except Exception as exc:
            logger.warning("tixte_credential_unavailable", extra={"error_type": type(exc).__name__})
            raise AuthenticationError("Credencial indisponível") from exc
        self._credential = credential
        return credential

    def _needs_refresh(self, credential: Credential) -> bool:
        if self._force_refresh:
            return True
        return credential.is_expired(self._clock() + self._refresh_margin)

    async def _refresh(self) -> Credential:
        try:
            fresh = await self._source.refresh()
        except AuthenticationError:
            logger.warning("tixte_credential_refresh_rejected")
            raise
        except Exception as exc:
            logger.warning(
                "tixte_credential_refresh_failed",
                extra={"error_type": type(exc).__name__},
            )
            raise AuthenticationError("Falha ao renovar credencial") from exc

        if fresh.is_expired(self._clock() + self._refresh_margin):
            logger.warning("tixte_credential_refresh_expired")
            raise AuthenticationError("Credencial renovada já está expirada")

        self._credential = fresh
        self._force_refresh = False
        logger.info(
            "tixte_credential_refreshed",
            extra={"token": fresh.masked, "expires_at": str(fresh.expires_at)},
        )
        return fresh

    def _format(self, token: str) -> str:
        if self._scheme:
            return f"{self._scheme} {token}"
        return token
