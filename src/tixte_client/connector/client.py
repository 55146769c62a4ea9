"""Cliente público da API Tixte.

Compõe RequestBuilder → Authenticator → Transport → Codec em uma única
chamada que sempre devolve TypedResult:

    BUILDING → AUTHENTICATING → SENDING → DECODING → DONE

Os estados só avançam; retries acontecem dentro de SENDING (Transport) e
não são visíveis aqui. Qualquer erro da taxonomia encerra a chamada em
DONE com a variante Failure carregando o ErrorKind de origem.

Mapeamento de status:
- 2xx: decodifica no response_type → Success
- 401/403: Failure(AUTHENTICATION, ErrorDetail)
- demais >= 400: Failure(HTTP, ErrorDetail)
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Any

from tixte_client.config.logging import log_call_failed
from tixte_client.connector.auth import Authenticator
from tixte_client.connector.cache import CachePolicy, ResponseCache
from tixte_client.connector.codec import JsonCodec
from tixte_client.connector.credentials import (
    API_KEY_ENV,
    EnvCredentialSource,
    StaticCredentialSource,
)
from tixte_client.connector.models import (
    AuthMode,
    CallState,
    Failure,
    HttpMethod,
    Success,
)
from tixte_client.connector.request_builder import build_request
from tixte_client.connector.transport import RetryPolicy, Transport, TransportConfig
from tixte_client.observability import correlation_scope, record_latency
from tixte_client.utils.errors import (
    ErrorKind,
    InvalidRequestError,
    NetworkError,
    RequestTimeoutError,
    TixteError,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping, Sequence

    import httpx

    from tixte_client.config.settings import TixteSettings
    from tixte_client.connector.models import RequestDescriptor, ResponseEnvelope, TypedResult
    from tixte_client.protocols import CredentialSourceProtocol

_AUTH_FAILURE_STATUSES = frozenset({401, 403})

_STATE_ORDER = {state: index for index, state in enumerate(CallState)}


class _CallStateTracker:
    """Garante que os estados de uma chamada só avançam."""

    def __init__(self, listener: Callable[[CallState], None] | None) -> None:
        self.state = CallState.BUILDING
        self._listener = listener
        self._notify(CallState.BUILDING)

    def advance(self, state: CallState) -> None:
        if _STATE_ORDER[state] <= _STATE_ORDER[self.state]:
            raise RuntimeError(f"Transição inválida: {self.state.value} -> {state.value}")
        self.state = state
        self._notify(state)

    def finish(self) -> None:
        if self.state is not CallState.DONE:
            self.advance(CallState.DONE)

    def _notify(self, state: CallState) -> None:
        if self._listener is not None:
            self._listener(state)


class TixteClient:
    """Fachada assíncrona da API Tixte.

    Args:
        transport: Transport com pool de conexões e retry
        authenticator: Authenticator da API key
        codec: Codec JSON (default: JsonCodec())
        session_authenticator: Authenticator do session token (endpoints de conta)
        cache: Cache transitório de GETs (None desativa)
        call_timeout: Timeout acumulado por chamada, incluindo retries
        logger: Logger para eventos da chamada
        state_listener: Callback chamado a cada transição de estado
    """

    def __init__(
        self,
        transport: Transport,
        authenticator: Authenticator,
        *,
        codec: JsonCodec | None = None,
        session_authenticator: Authenticator | None = None,
        cache: ResponseCache | None = None,
        call_timeout: float | None = None,
        logger: logging.Logger | None = None,
        state_listener: Callable[[CallState], None] | None = None,
    ) -> None:
        if call_timeout is not None and call_timeout <= 0:
            raise ValueError("call_timeout deve ser > 0")
        self._transport = transport
        self._authenticators = {AuthMode.API_KEY: authenticator}
        if session_authenticator is not None:
            self._authenticators[AuthMode.SESSION] = session_authenticator
        self._codec = codec or JsonCodec()
        self._cache = cache
        self._call_timeout = call_timeout
        self._logger = logger or logging.getLogger(__name__)
        self._state_listener = state_listener

    async def call(
        self,
        method: HttpMethod | str,
        path_template: str,
        params: Mapping[str, Any] | None = None,
        *,
        response_type: Any = Any,
        query: Mapping[str, Any] | Sequence[tuple[str, Any]] | None = None,
        headers: Mapping[str, str] | None = None,
        body: Any = None,
        required_fields: Iterable[str] = (),
        auth: AuthMode = AuthMode.API_KEY,
        timeout: float | None = None,
        attempt_timeout: float | None = None,
    ) -> TypedResult[Any]:
        """Executa uma chamada completa e devolve TypedResult.

        Args:
            method: Método HTTP
            path_template: Path com placeholders (ex.: /users/@me/uploads/{id})
            params: Valores dos placeholders
            response_type: Formato esperado do `data` da resposta
            query: Parâmetros de query
            headers: Headers adicionais
            body: Corpo a serializar em JSON
            required_fields: Campos que o body deve conter com valor não nulo
            auth: Credencial a usar (API key ou session token)
            timeout: Timeout acumulado desta chamada (sobrescreve o default)
            attempt_timeout: Timeout por tentativa no Transport

        Returns:
            Success(valor) ou Failure(kind, ErrorDetail)
        """
        deadline = timeout if timeout is not None else self._call_timeout
        started = time.perf_counter()

        with correlation_scope() as correlation_id:
            tracker = _CallStateTracker(self._state_listener)
            path_label = path_template
            try:
                async with asyncio.timeout(deadline):
                    result, path_label = await self._run(
                        tracker,
                        method,
                        path_template,
                        params,
                        response_type=response_type,
                        query=query,
                        headers=headers,
                        body=body,
                        required_fields=required_fields,
                        auth=auth,
                        attempt_timeout=attempt_timeout,
                    )
            except TimeoutError as exc:
                # Prazo acumulado: a tentativa em andamento foi cancelada
                timeout_error = RequestTimeoutError("call_timeout")
                timeout_error.__cause__ = exc
                result = Failure.from_exception(timeout_error)
                tracker.finish()

            elapsed_ms = (time.perf_counter() - started) * 1000
            method_label = method.value if isinstance(method, HttpMethod) else str(method).upper()
            self._log_outcome(result, method_label, path_label, elapsed_ms)
            record_latency(
                "tixte_client",
                f"{method_label} {path_template}",
                elapsed_ms,
                correlation_id,
                outcome="success" if result.is_success else result.kind.value,
            )
            return result

    async def get(
        self,
        path_template: str,
        params: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> TypedResult[Any]:
        return await self.call(HttpMethod.GET, path_template, params, **kwargs)

    async def post(
        self,
        path_template: str,
        params: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> TypedResult[Any]:
        return await self.call(HttpMethod.POST, path_template, params, **kwargs)

    async def put(
        self,
        path_template: str,
        params: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> TypedResult[Any]:
        return await self.call(HttpMethod.PUT, path_template, params, **kwargs)

    async def patch(
        self,
        path_template: str,
        params: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> TypedResult[Any]:
        return await self.call(HttpMethod.PATCH, path_template, params, **kwargs)

    async def delete(
        self,
        path_template: str,
        params: Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> TypedResult[Any]:
        return await self.call(HttpMethod.DELETE, path_template, params, **kwargs)

    async def _run(
        self,
        tracker: _CallStateTracker,
        method: HttpMethod | str,
        path_template: str,
        params: Mapping[str, Any] | None,
        *,
        response_type: Any,
        query: Mapping[str, Any] | Sequence[tuple[str, Any]] | None,
        headers: Mapping[str, str] | None,
        body: Any,
        required_fields: Iterable[str],
        auth: AuthMode,
        attempt_timeout: float | None,
    ) -> tuple[TypedResult[Any], str]:
        path_label = path_template
        try:
            descriptor = build_request(
                method,
                path_template,
                params,
                query=query,
                headers=headers,
                body=body,
                required_fields=required_fields,
                codec=self._codec,
            )
            path_label = descriptor.path
            authenticator = self._authenticator_for(auth)

            envelope = self._cache.get(descriptor, auth) if self._cache else None
            from_cache = envelope is not None
            if envelope is None:
                self._logger.info(
                    "tixte_request_started",
                    extra={
                        "method": descriptor.method.value,
                        "path": descriptor.path,
                        "auth_mode": auth.value,
                    },
                )
                tracker.advance(CallState.AUTHENTICATING)
                signed = await authenticator.annotate(descriptor)

                tracker.advance(CallState.SENDING)
                envelope = await self._transport.execute(signed, timeout=attempt_timeout)
            else:
                self._logger.debug("tixte_cache_hit", extra={"path": descriptor.path})

            tracker.advance(CallState.DECODING)
            result = self._decode(envelope, response_type)
            # Hit não renova o TTL da entrada
            if result.is_success and not from_cache:
                self._update_cache(descriptor, auth, envelope)
        except NetworkError as exc:
            detail = self._codec.decode_error(exc.envelope) if exc.envelope is not None else None
            result = Failure.from_exception(exc, detail)
        except TixteError as exc:
            result = Failure.from_exception(exc)

        tracker.finish()
        return result, path_label

    def _authenticator_for(self, auth: AuthMode) -> Authenticator:
        authenticator = self._authenticators.get(auth)
        if authenticator is None:
            raise InvalidRequestError(f"Nenhuma credencial configurada para {auth.value}")
        return authenticator

    def _decode(self, envelope: ResponseEnvelope, response_type: Any) -> TypedResult[Any]:
        if envelope.status_code >= 400:
            detail = self._codec.decode_error(envelope)
            kind = (
                ErrorKind.AUTHENTICATION
                if envelope.status_code in _AUTH_FAILURE_STATUSES
                else ErrorKind.HTTP
            )
            return Failure(kind=kind, error=detail)
        return Success(self._codec.decode(envelope.body, response_type))

    def _update_cache(
        self,
        descriptor: RequestDescriptor,
        auth: AuthMode,
        envelope: ResponseEnvelope,
    ) -> None:
        if self._cache is None:
            return
        if descriptor.method is HttpMethod.GET:
            self._cache.put(descriptor, auth, envelope)
        else:
            self._cache.invalidate(descriptor.path)

    def _log_outcome(
        self,
        result: TypedResult[Any],
        method: str,
        path: str,
        elapsed_ms: float,
    ) -> None:
        if isinstance(result, Failure):
            log_call_failed(
                self._logger,
                method,
                path,
                result.kind.value,
                status=result.error.status,
                elapsed_ms=elapsed_ms,
            )
            return
        self._logger.debug(
            "tixte_call_succeeded",
            extra={"method": method, "path": path, "elapsed_ms": round(elapsed_ms, 2)},
        )

    async def aclose(self) -> None:
        """Fecha o Transport e descarta o cache."""
        if self._cache is not None:
            self._cache.clear()
        await self._transport.aclose()

    async def __aenter__(self) -> TixteClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


def create_tixte_client(
    settings: TixteSettings | None = None,
    *,
    credential_source: CredentialSourceProtocol | None = None,
    session_source: CredentialSourceProtocol | None = None,
    http_client: httpx.AsyncClient | None = None,
) -> TixteClient:
    """Factory para criar cliente Tixte com config padrão.

    Args:
        settings: TixteSettings opcional. Se None, carrega do ambiente.
        credential_source: Fonte da API key. Default: settings.api_key ou
            variável TIXTE_API_KEY lida sob demanda.
        session_source: Fonte do session token. Default: settings.session_token.
        http_client: httpx.AsyncClient externo (ex.: com proxy).

    Returns:
        Cliente configurado.
    """
    # Import local para evitar dependência circular
    from tixte_client.config.settings import get_tixte_settings

    tixte = settings or get_tixte_settings()

    if credential_source is None:
        credential_source = (
            StaticCredentialSource(tixte.api_key)
            if tixte.api_key
            else EnvCredentialSource(API_KEY_ENV)
        )
    if session_source is None and tixte.session_token:
        session_source = StaticCredentialSource(tixte.session_token)

    config = TransportConfig(
        base_url=tixte.api_base_url,
        timeout_seconds=tixte.request_timeout_seconds,
        max_connections=tixte.max_connections,
        retry=RetryPolicy(
            max_attempts=tixte.max_retries,
            base_delay_seconds=tixte.backoff_base_seconds,
            max_delay_seconds=tixte.backoff_max_seconds,
        ),
        default_headers={"User-Agent": tixte.user_agent},
    )
    cache = (
        ResponseCache(ttl_seconds=tixte.cache_ttl_seconds)
        if CachePolicy(tixte.cache_policy) is CachePolicy.MEMORY
        else None
    )

    return TixteClient(
        Transport(config, client=http_client),
        Authenticator(credential_source),
        session_authenticator=Authenticator(session_source) if session_source else None,
        cache=cache,
        call_timeout=tixte.call_timeout_seconds,
    )
