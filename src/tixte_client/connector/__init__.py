"""Conector Tixte - adapter de borda para a API HTTP/JSON da Tixte.

Este módulo é o único ponto de IO com a API.
Responsabilidades:
- Montagem de requisições (RequestBuilder)
- Autenticação com renovação single-flight
- Transporte HTTP com pool, timeout e retry
- Codec JSON e mapeamento de erros
- Cache transitório de GETs
"""

from .auth import Authenticator, SingleFlight
from .cache import CachePolicy, ResponseCache
from .client import TixteClient, create_tixte_client
from .codec import JsonCodec
from .credentials import EnvCredentialSource, StaticCredentialSource
from .models import (
    AuthMode,
    CallState,
    Credential,
    ErrorDetail,
    Failure,
    HttpMethod,
    RequestDescriptor,
    ResponseEnvelope,
    Success,
    TypedResult,
)
from .request_builder import build_request
from .transport import AttemptOutcome, RetryPolicy, Transport, TransportConfig

__all__ = [
    "AttemptOutcome",
    "AuthMode",
    "Authenticator",
    "CachePolicy",
    "CallState",
    "Credential",
    "EnvCredentialSource",
    "ErrorDetail",
    "Failure",
    "HttpMethod",
    "JsonCodec",
    "RequestDescriptor",
    "ResponseCache",
    "ResponseEnvelope",
    "RetryPolicy",
    "SingleFlight",
    "StaticCredentialSource",
    "Success",
    "TixteClient",
    "Transport",
    "TransportConfig",
    "TypedResult",
    "build_request",
    "create_tixte_client",
]
