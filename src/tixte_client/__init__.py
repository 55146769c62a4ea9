"""Cliente assíncrono para a API da Tixte.

Uso:
    from tixte_client import create_tixte_client

    async with create_tixte_client() as client:
        result = await client.get("/users/@me", auth=AuthMode.SESSION)
        if result.is_success:
            print(result.value)
"""

__version__ = "1.0.0"

from tixte_client.connector import (  # noqa: E402
    AuthMode,
    ErrorDetail,
    Failure,
    HttpMethod,
    Success,
    TixteClient,
    TypedResult,
    create_tixte_client,
)
from tixte_client.utils.errors import (  # noqa: E402
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

__all__ = [
    "AuthMode",
    "AuthenticationError",
    "DecodingError",
    "EncodingError",
    "ErrorDetail",
    "ErrorKind",
    "Failure",
    "HttpMethod",
    "HttpStatusError",
    "InvalidRequestError",
    "NetworkError",
    "RequestTimeoutError",
    "Success",
    "TixteClient",
    "TixteError",
    "TypedResult",
    "__version__",
    "create_tixte_client",
]
