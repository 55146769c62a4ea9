"""Protocolos e contratos do core do cliente."""

from .credentials import CredentialSourceProtocol

__all__ = [
    "CredentialSourceProtocol",
]
