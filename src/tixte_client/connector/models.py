"""Modelos de protocolo do conector Tixte.

Todos os modelos são imutáveis: o descriptor construído pelo RequestBuilder
é o mesmo objeto reenviado a cada tentativa do Transport, e a anotação de
credenciais sempre produz uma cópia nova.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Generic, NoReturn, TypeVar, Union

from tixte_client.utils.errors import (
    AuthenticationError,
    DecodingError,
    EncodingError,
    ErrorKind,
    HttpStatusError,
    InvalidRequestError,
    NetworkError,
    RequestTimeoutError,
    TixteError,
)
from tixte_client.utils.redaction import mask_secret

if TYPE_CHECKING:
    from collections.abc import Mapping

T = TypeVar("T")


class HttpMethod(str, Enum):
    """Métodos HTTP suportados pela API."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"

    @property
    def is_idempotent(self) -> bool:
        """True se o método pode ser reenviado sem duplicar efeitos."""
        return self in (HttpMethod.GET, HttpMethod.PUT, HttpMethod.DELETE)


class CallState(str, Enum):
    """Estados de uma chamada do Client (somente avançam)."""

    BUILDING = "building"
    AUTHENTICATING = "authenticating"
    SENDING = "sending"
    DECODING = "decoding"
    DONE = "done"


class AuthMode(str, Enum):
    """Credencial usada na chamada.

    A Tixte aceita a API key na maioria dos endpoints; endpoints de conta
    exigem o session token.
    """

    API_KEY = "api_key"
    SESSION = "session"


def _freeze_headers(headers: Mapping[str, str] | None) -> Mapping[str, str]:
    return MappingProxyType(dict(headers or {}))


@dataclass(frozen=True)
class RequestDescriptor:
    """Requisição pronta para envio.

    Attributes:
        method: Método HTTP
        path: Path já resolvido (sem placeholders)
        query: Pares (nome, valor) em ordem
        headers: Headers somente leitura
        body: Corpo já serializado (JSON) ou None
    """

    method: HttpMethod
    path: str
    query: tuple[tuple[str, str], ...] = ()
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    body: bytes | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.headers, MappingProxyType):
            object.__setattr__(self, "headers", _freeze_headers(self.headers))

    def with_headers(self, extra: Mapping[str, str]) -> RequestDescriptor:
        """Retorna cópia com headers adicionais (sobrescreve chaves iguais)."""
        return replace(self, headers=_freeze_headers({**self.headers, **extra}))

    def __repr__(self) -> str:
        # Headers podem conter credenciais
        return (
            f"RequestDescriptor(method={self.method.value}, path={self.path!r}, "
            f"query={self.query!r}, headers={sorted(self.headers)!r}, "
            f"body={'<%d bytes>' % len(self.body) if self.body is not None else None})"
        )


@dataclass(frozen=True)
class Credential:
    """Token opaco com expiração opcional.

    O repr nunca expõe o token completo.
    """

    token: str = field(repr=False)
    expires_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        """True se a credencial expirou no instante `now`."""
        if self.expires_at is None:
            return False
        return now >= self.expires_at

    @property
    def masked(self) -> str:
        return mask_secret(self.token)

    def __repr__(self) -> str:
        return f"Credential(token={self.masked!r}, expires_at={self.expires_at!r})"


@dataclass(frozen=True)
class ResponseEnvelope:
    """Resposta HTTP bruta produzida pelo Transport."""

    status_code: int
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    body: bytes = b""
    reason_phrase: str = ""

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


@dataclass(frozen=True)
class ErrorDetail:
    """Erro estruturado de uma resposta >= 400 (ou de falha local).

    Attributes:
        status: Status HTTP (0 quando não houve resposta)
        message: Mensagem do fornecedor ou descrição local
        code: Código legível por máquina (ex.: "bad_request")
        field: Campo rejeitado, quando informado pela API
    """

    status: int
    message: str
    code: str | None = None
    field: str | None = None

    @property
    def category(self) -> str:
        """Classificação do status conforme exceções da API Tixte."""
        if self.status >= 500:
            return "server_error"
        return _STATUS_CATEGORIES.get(self.status, "http_error")


_STATUS_CATEGORIES = {
    401: "unauthorized",
    402: "payment_required",
    403: "forbidden",
    404: "not_found",
    429: "rate_limited",
}

_KIND_TO_EXCEPTION: dict[ErrorKind, type[TixteError]] = {
    ErrorKind.INVALID_REQUEST: InvalidRequestError,
    ErrorKind.AUTHENTICATION: AuthenticationError,
    ErrorKind.TIMEOUT: RequestTimeoutError,
    ErrorKind.ENCODING: EncodingError,
    ErrorKind.DECODING: DecodingError,
}


@dataclass(frozen=True)
class Success(Generic[T]):
    """Variante de sucesso do TypedResult."""

    value: T

    @property
    def is_success(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Failure:
    """Variante de falha do TypedResult.

    Attributes:
        kind: Categoria do erro de origem
        error: Detalhe estruturado
        cause: Exceção original, quando houver
    """

    kind: ErrorKind
    error: ErrorDetail
    cause: BaseException | None = field(default=None, compare=False)

    @property
    def is_success(self) -> bool:
        return False

    def unwrap(self) -> NoReturn:
        """Levanta a exceção correspondente ao erro."""
        if isinstance(self.cause, TixteError):
            raise self.cause
        if self.kind is ErrorKind.HTTP:
            raise HttpStatusError(self.error)
        if self.kind is ErrorKind.NETWORK:
            raise NetworkError(self.error.message, status_code=self.error.status or None)
        raise _KIND_TO_EXCEPTION.get(self.kind, TixteError)(self.error.message)

    @classmethod
    def from_exception(cls, exc: TixteError, detail: ErrorDetail | None = None) -> Failure:
        """Cria falha a partir de uma exceção da taxonomia."""
        status = getattr(exc, "status_code", None) or 0
        return cls(
            kind=exc.kind,
            error=detail or ErrorDetail(status=status, message=str(exc), code=exc.kind.value),
            cause=exc,
        )


TypedResult = Union[Success[T], Failure]
