"""Exceções do cliente Tixte.

Cada exceção carrega um `kind` estável (ErrorKind) usado pelo Client para
montar a variante de falha do TypedResult sem inspecionar tipos.

Política de retry:
- InvalidRequestError, AuthenticationError, EncodingError, DecodingError:
  nunca retentadas.
- NetworkError, RequestTimeoutError: retentadas pelo Transport conforme
  método HTTP e orçamento de tentativas.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tixte_client.connector.models import ErrorDetail, ResponseEnvelope


class ErrorKind(str, Enum):
    """Categoria de erro exposta na falha de um TypedResult."""

    INVALID_REQUEST = "invalid_request"
    AUTHENTICATION = "authentication"
    NETWORK = "network"
    TIMEOUT = "timeout"
    ENCODING = "encoding"
    DECODING = "decoding"
    HTTP = "http"


class TixteError(Exception):
    """Base para erros do cliente Tixte (sem dados sensíveis)."""

    kind: ErrorKind = ErrorKind.NETWORK


class InvalidRequestError(TixteError, ValueError):
    """Uso incorreto pelo chamador (placeholder ausente, body inválido)."""

    kind = ErrorKind.INVALID_REQUEST


class AuthenticationError(TixteError):
    """Credencial rejeitada ou falha ao renovar credencial."""

    kind = ErrorKind.AUTHENTICATION


class NetworkError(TixteError):
    """Falha de conexão ou 5xx persistente após esgotar as tentativas.

    Args:
        message: Descrição curta (ex.: "http_retry_exhausted")
        status_code: Status da última resposta, quando houve resposta
        envelope: Última resposta recebida, quando houve resposta
    """

    kind = ErrorKind.NETWORK

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        envelope: ResponseEnvelope | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.envelope = envelope


class RequestTimeoutError(TixteError, TimeoutError):
    """Tentativa ou prazo acumulado da chamada excedido."""

    kind = ErrorKind.TIMEOUT


class EncodingError(TixteError):
    """Valor não serializável para JSON."""

    kind = ErrorKind.ENCODING


class DecodingError(TixteError):
    """Payload não corresponde ao formato esperado."""

    kind = ErrorKind.DECODING


class HttpStatusError(TixteError):
    """Resposta >= 400 levantada por TypedResult.unwrap()."""

    kind = ErrorKind.HTTP

    def __init__(self, detail: ErrorDetail) -> None:
        super().__init__(f"{detail.status}: {detail.message}")
        self.detail = detail
