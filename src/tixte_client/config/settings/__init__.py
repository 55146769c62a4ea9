"""Settings do cliente Tixte."""

from __future__ import annotations

from tixte_client.config.settings.tixte import (
    DEFAULT_USER_AGENT,
    TIXTE_API_BASE_URL,
    TixteSettings,
    get_tixte_settings,
)

__all__ = [
    "DEFAULT_USER_AGENT",
    "TIXTE_API_BASE_URL",
    "TixteSettings",
    "get_tixte_settings",
]
