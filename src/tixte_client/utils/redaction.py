"""Mascaramento de segredos para logs e repr."""

from __future__ import annotations

# Prefixo visível de tokens
VISIBLE_SECRET_CHARS = 4


def mask_secret(value: str) -> str:
    """Mascara um segredo mantendo só um prefixo curto."""
    if len(value) <= VISIBLE_SECRET_CHARS:
        return "***"
    return f"{value[:VISIBLE_SECRET_CHARS]}***"
