"""Exceções compartilhadas do cliente Tixte."""

from .exceptions import (
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
    "AuthenticationError",
    "DecodingError",
    "EncodingError",
    "ErrorKind",
    "HttpStatusError",
    "InvalidRequestError",
    "NetworkError",
    "RequestTimeoutError",
    "TixteError",
]
