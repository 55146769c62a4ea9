"""Codec JSON do conector Tixte.

Serializa corpos de requisição e valida respostas em tipos do chamador
usando pydantic. Campos desconhecidos são ignorados (compatibilidade com
versões novas da API); campos ausentes ou de tipo errado são erro.

Formato de respostas da Tixte:
    sucesso: {"success": true, "data": {...}}
    erro:    {"success": false, "error": {"code": "...", "message": "...", "field": "..."}}
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, to_json

from tixte_client.connector.models import ErrorDetail
from tixte_client.utils.errors import DecodingError, EncodingError

if TYPE_CHECKING:
    from tixte_client.connector.models import ResponseEnvelope

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Limite de texto bruto aproveitado como mensagem de erro
_MAX_RAW_MESSAGE_CHARS = 200


@lru_cache(maxsize=256)
def _adapter_for(target: Any) -> TypeAdapter[Any]:
    return TypeAdapter(target)


def _get_adapter(target: Any) -> TypeAdapter[Any]:
    try:
        return _adapter_for(target)
    except TypeError:
        # Targets não hasheáveis (ex.: Annotated com metadados mutáveis)
        return TypeAdapter(target)


class JsonCodec:
    """Codec JSON baseado em pydantic.

    Args:
        unwrap_envelope: Se True, extrai `data` de respostas
            `{"success": ..., "data": ...}` antes de validar.
    """

    def __init__(self, *, unwrap_envelope: bool = True) -> None:
        self._unwrap_envelope = unwrap_envelope

    def encode(self, value: Any) -> bytes:
        """Serializa valor para JSON.

        Aceita modelos pydantic, dataclasses, mappings, sequências,
        datetimes e primitivos.

        Raises:
            EncodingError: Se o valor não é serializável
        """
        try:
            return to_json(value)
        except (PydanticSerializationError, TypeError, ValueError) as exc:
            logger.debug("codec_encode_failed", extra={"value_type": type(value).__name__})
            raise EncodingError(
                f"Valor não serializável: {type(value).__name__}"
            ) from exc

    def decode(self, body: bytes, target: Any) -> Any:
        """Valida o corpo JSON no formato `target`.

        Args:
            body: Corpo bruto da resposta
            target: Tipo esperado (modelo pydantic, dataclass, list[...], etc.)

        Returns:
            Valor validado

        Raises:
            DecodingError: JSON inválido, campo obrigatório ausente ou tipo errado
        """
        payload = self._load(body)
        if self._unwrap_envelope:
            payload = _unwrap(payload)
        try:
            return _get_adapter(target).validate_python(payload)
        except ValidationError as exc:
            fields = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})
            logger.debug("codec_decode_invalid", extra={"fields": fields})
            raise DecodingError(f"Resposta fora do formato esperado: {fields}") from exc

    def decode_error(self, envelope: ResponseEnvelope) -> ErrorDetail:
        """Extrai ErrorDetail de uma resposta >= 400.

        Nunca falha: corpos fora do formato viram mensagem textual.
        """
        status = envelope.status_code
        try:
            payload = json.loads(envelope.body) if envelope.body else None
        except (json.JSONDecodeError, UnicodeDecodeError):
            payload = None

        if isinstance(payload, dict):
            detail = _parse_error_payload(status, payload)
            if detail is not None:
                return detail

        text = _safe_text(envelope.body)
        return ErrorDetail(
            status=status,
            message=text or envelope.reason_phrase or "Erro desconhecido",
        )

    def _load(self, body: bytes) -> Any:
        if not body or not body.strip():
            return None
        try:
            return json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise DecodingError("Response JSON inválido") from exc


def _unwrap(payload: Any) -> Any:
    if isinstance(payload, dict) and "data" in payload and "success" in payload:
        return payload["data"]
    return payload


def _parse_error_payload(status: int, payload: dict[str, Any]) -> ErrorDetail | None:
    error_obj = payload.get("error")
    if isinstance(error_obj, dict):
        message = error_obj.get("message") or payload.get("message")
        return ErrorDetail(
            status=status,
            message=str(message) if message is not None else "Erro desconhecido",
            code=_optional_str(error_obj.get("code")),
            field=_optional_str(error_obj.get("field")),
        )

    message = payload.get("message")
    if message is None and isinstance(error_obj, str):
        message = error_obj
    if message is None:
        return None

    code = payload.get("code")
    if code is None and isinstance(error_obj, str) and error_obj != message:
        code = error_obj
    return ErrorDetail(
        status=status,
        message=str(message),
        code=_optional_str(code),
        field=_optional_str(payload.get("field")),
    )


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _safe_text(body: bytes) -> str:
    text = body.decode("utf-8", errors="replace").strip()
    if len(text) > _MAX_RAW_MESSAGE_CHARS:
        return text[:_MAX_RAW_MESSAGE_CHARS] + "..."
    return text
