"""Transport HTTP do conector Tixte.

Único ponto de IO de rede. Responsabilidades:
- Pool de conexões (httpx.AsyncClient) com limite de slots concorrentes
- Timeout por tentativa
- Retry com backoff exponencial conforme método e tipo de falha

Regras de retry:
- GET/PUT/DELETE: falhas de conexão, timeouts, 5xx e 429
- POST/PATCH: apenas falhas antes de qualquer byte enviado
  (ConnectError, ConnectTimeout, PoolTimeout)
- Cancelamento nunca é retentado
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

import httpx

from tixte_client.connector.models import ResponseEnvelope
from tixte_client.utils.errors import NetworkError, RequestTimeoutError, TixteError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from tixte_client.connector.models import HttpMethod, RequestDescriptor

RATE_LIMIT_STATUS = 429


class AttemptOutcome(str, Enum):
    """Resultado de uma tentativa de envio."""

    COMPLETED = "completed"
    RETRYABLE_STATUS = "retryable_status"
    CONNECT_FAILED = "connect_failed"
    CONNECT_TIMEOUT = "connect_timeout"
    TRANSFER_FAILED = "transfer_failed"
    TRANSFER_TIMEOUT = "transfer_timeout"

    @property
    def before_send(self) -> bool:
        """True se a falha ocorreu antes de qualquer byte enviado."""
        return self in (AttemptOutcome.CONNECT_FAILED, AttemptOutcome.CONNECT_TIMEOUT)


@dataclass(frozen=True)
class RetryPolicy:
    """Política de retry com backoff exponencial.

    Attributes:
        max_attempts: Total de tentativas (inclui a primeira)
        base_delay_seconds: Atraso base
        max_delay_seconds: Teto do atraso
    """

    max_attempts: int = 3
    base_delay_seconds: float = 0.5
    max_delay_seconds: float = 8.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts deve ser >= 1")
        if self.base_delay_seconds < 0 or self.max_delay_seconds < 0:
            raise ValueError("atrasos devem ser >= 0")

    def should_retry(self, method: HttpMethod, outcome: AttemptOutcome, attempt: int) -> bool:
        """Decide se a tentativa `attempt` (0-based) deve ser repetida."""
        if outcome is AttemptOutcome.COMPLETED:
            return False
        if attempt + 1 >= self.max_attempts:
            return False
        if outcome.before_send:
            return True
        return method.is_idempotent

    def delay_for(self, attempt: int, retry_after: float | None = None) -> float:
        """Atraso antes da próxima tentativa: base * 2^attempt, limitado."""
        if retry_after is not None:
            return min(max(retry_after, 0.0), self.max_delay_seconds)
        return min((2**attempt) * self.base_delay_seconds, self.max_delay_seconds)


@dataclass
class TransportConfig:
    """Configuração do Transport."""

    base_url: str = "https://api.tixte.com/v1"
    timeout_seconds: float = 30.0
    max_connections: int = 100
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    default_headers: dict[str, str] = field(default_factory=dict)
    verify_ssl: bool = True


class _AttemptFailed(Exception):
    def __init__(self, outcome: AttemptOutcome, error: TixteError) -> None:
        super().__init__(str(error))
        self.outcome = outcome
        self.error = error


class Transport:
    """Executa RequestDescriptors com retry.

    Args:
        config: Configuração do transporte
        client: httpx.AsyncClient pré-configurado (testes/proxies).
            Se None, cria um com base_url, headers e limites do config.
        sleep: Função de espera (injetável para testes determinísticos)
        logger: Logger para eventos de retry
    """

    def __init__(
        self,
        config: TransportConfig | None = None,
        *,
        client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        logger: logging.Logger | None = None,
    ) -> None:
        self._config = config or TransportConfig()
        if self._config.max_connections < 1:
            raise ValueError("max_connections deve ser >= 1")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self._config.base_url,
            headers=self._config.default_headers,
            verify=self._config.verify_ssl,
            timeout=httpx.Timeout(self._config.timeout_seconds),
            limits=httpx.Limits(max_connections=self._config.max_connections),
        )
        self._slots = asyncio.Semaphore(self._config.max_connections)
        self._sleep = sleep
        self._logger = logger or logging.getLogger(__name__)

    @property
    def config(self) -> TransportConfig:
        return self._config

    async def execute(
        self,
        descriptor: RequestDescriptor,
        *,
        timeout: float | None = None,
    ) -> ResponseEnvelope:
        """Envia o descriptor, repetindo conforme a RetryPolicy.

        Args:
            descriptor: Requisição imutável (reenviada sem alterações)
            timeout: Timeout por tentativa (default: config.timeout_seconds)

        Returns:
            ResponseEnvelope da última tentativa

        Raises:
            NetworkError: Falha de conexão ou 5xx/429 persistente
            RequestTimeoutError: Última tentativa excedeu o timeout
        """
        policy = self._config.retry
        attempt_timeout = timeout if timeout is not None else self._config.timeout_seconds

        for attempt in range(policy.max_attempts):
            envelope: ResponseEnvelope | None = None
            error: TixteError | None = None
            try:
                envelope = await self._attempt(descriptor, attempt_timeout)
                outcome = _classify(envelope)
            except _AttemptFailed as failed:
                outcome, error = failed.outcome, failed.error
                error.__cause__ = failed.__cause__

            if not policy.should_retry(descriptor.method, outcome, attempt):
                return self._finish(descriptor, outcome, envelope, error)

            delay = policy.delay_for(attempt, _retry_after(envelope))
            self._logger.info(
                "tixte_retry_attempted",
                extra={
                    "method": descriptor.method.value,
                    "path": descriptor.path,
                    "attempt": attempt + 1,
                    "outcome": outcome.value,
                    "status_code": envelope.status_code if envelope else None,
                    "backoff_seconds": delay,
                },
            )
            await self._sleep(delay)

        # Inalcançável: a última tentativa sempre retorna via _finish
        raise NetworkError("http_retry_exhausted")

    def _finish(
        self,
        descriptor: RequestDescriptor,
        outcome: AttemptOutcome,
        envelope: ResponseEnvelope | None,
        error: TixteError | None,
    ) -> ResponseEnvelope:
        if error is not None:
            raise error
        assert envelope is not None
        if outcome is AttemptOutcome.RETRYABLE_STATUS and descriptor.method.is_idempotent:
            raise NetworkError(
                "http_retry_exhausted",
                status_code=envelope.status_code,
                envelope=envelope,
            )
        return envelope

    async def _attempt(self, descriptor: RequestDescriptor, timeout: float) -> ResponseEnvelope:
        async with self._slots:
            try:
                async with asyncio.timeout(timeout):
                    response = await self._client.request(
                        descriptor.method.value,
                        descriptor.path,
                        params=list(descriptor.query),
                        headers=dict(descriptor.headers),
                        content=descriptor.body,
                        timeout=httpx.Timeout(timeout),
                    )
            except (httpx.ConnectTimeout, httpx.PoolTimeout) as exc:
                raise _AttemptFailed(
                    AttemptOutcome.CONNECT_TIMEOUT,
                    RequestTimeoutError("http_connect_timeout"),
                ) from exc
            except httpx.TimeoutException as exc:
                raise _AttemptFailed(
                    AttemptOutcome.TRANSFER_TIMEOUT,
                    RequestTimeoutError("http_attempt_timeout"),
                ) from exc
            except TimeoutError as exc:
                raise _AttemptFailed(
                    AttemptOutcome.TRANSFER_TIMEOUT,
                    RequestTimeoutError("http_attempt_timeout"),
                ) from exc
            except httpx.ConnectError as exc:
                raise _AttemptFailed(
                    AttemptOutcome.CONNECT_FAILED,
                    NetworkError("http_connection_error"),
                ) from exc
            except httpx.TransportError as exc:
                raise _AttemptFailed(
                    AttemptOutcome.TRANSFER_FAILED,
                    NetworkError("http_transfer_error"),
                ) from exc
            except httpx.RequestError as exc:
                # Resposta recebida mas ilegível (DecodingError, TooManyRedirects)
                raise _AttemptFailed(
                    AttemptOutcome.TRANSFER_FAILED,
                    NetworkError("http_response_error"),
                ) from exc

        return ResponseEnvelope(
            status_code=response.status_code,
            headers=dict(response.headers),
            body=response.content,
            reason_phrase=response.reason_phrase,
        )

    async def aclose(self) -> None:
        """Fecha o pool de conexões (quando criado pelo Transport)."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> Transport:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def _classify(envelope: ResponseEnvelope) -> AttemptOutcome:
    if envelope.status_code == RATE_LIMIT_STATUS or envelope.status_code >= 500:
        return AttemptOutcome.RETRYABLE_STATUS
    return AttemptOutcome.COMPLETED


def _retry_after(envelope: ResponseEnvelope | None) -> float | None:
    if envelope is None or envelope.status_code != RATE_LIMIT_STATUS:
        return None
    value = {k.lower(): v for k, v in envelope.headers.items()}.get("retry-after")
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None
