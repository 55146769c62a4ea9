"""Testes do JsonCodec."""

from __future__ import annotations

from datetime import datetime

import pytest
from pydantic import BaseModel

from tixte_client.connector.codec import JsonCodec
from tixte_client.connector.models import ErrorDetail, ResponseEnvelope
from tixte_client.utils.errors import DecodingError, EncodingError


class Upload(BaseModel):
    id: str
    name: str
    size: int


class TestEncode:
    """Serialização."""

    def test_encode_model(self) -> None:
        codec = JsonCodec()
        assert codec.encode(Upload(id="a1", name="cat.png", size=10)) == (
            b'{"id":"a1","name":"cat.png","size":10}'
        )

    def test_encode_datetime(self) -> None:
        """datetime vira string ISO."""
        encoded = JsonCodec().encode({"at": datetime(2026, 1, 2, 3, 4, 5)})
        assert b"2026-01-02T03:04:05" in encoded

    def test_encode_unserializable_raises(self) -> None:
        with pytest.raises(EncodingError, match="object"):
            JsonCodec().encode(object())


class TestDecode:
    """Validação de respostas."""

    def test_model_survives_encode_decode(self) -> None:
        codec = JsonCodec()
        upload = Upload(id="a1", name="cat.png", size=10)
        assert codec.decode(codec.encode(upload), Upload) == upload

    def test_unwraps_success_envelope(self) -> None:
        """`data` é extraído de {"success": true, "data": ...}."""
        body = b'{"success": true, "data": {"id": "x", "name": "n", "size": 1}}'
        assert JsonCodec().decode(body, Upload) == Upload(id="x", name="n", size=1)

    def test_envelope_kept_when_unwrap_disabled(self) -> None:
        body = b'{"success": true, "data": 1}'
        assert JsonCodec(unwrap_envelope=False).decode(body, dict) == {"success": True, "data": 1}

    def test_unknown_fields_are_ignored(self) -> None:
        """Campos novos da API não quebram a decodificação."""
        body = b'{"id": "x", "name": "n", "size": 1, "extension": "png"}'
        assert JsonCodec().decode(body, Upload).id == "x"

    def test_missing_field_raises_decoding_error(self) -> None:
        """Campo obrigatório ausente é DecodingError citando o campo."""
        with pytest.raises(DecodingError, match="size"):
            JsonCodec().decode(b'{"id": "x", "name": "n"}', Upload)

    def test_wrong_type_raises_decoding_error(self) -> None:
        with pytest.raises(DecodingError):
            JsonCodec().decode(b'{"id": "x", "name": "n", "size": "big"}', Upload)

    def test_invalid_json_raises_decoding_error(self) -> None:
        with pytest.raises(DecodingError, match="JSON"):
            JsonCodec().decode(b"<html>", Upload)

    def test_empty_body_decodes_to_none(self) -> None:
        assert JsonCodec().decode(b"", type(None)) is None

    def test_list_target(self) -> None:
        body = b'{"success": true, "data": [{"id": "a", "name": "b", "size": 2}]}'
        assert JsonCodec().decode(body, list[Upload]) == [Upload(id="a", name="b", size=2)]


class TestDecodeError:
    """Extração de ErrorDetail."""

    def test_flat_message(self) -> None:
        """404 {"message": "not found"} vira ErrorDetail(404, "not found")."""
        envelope = ResponseEnvelope(status_code=404, body=b'{"message":"not found"}')
        assert JsonCodec().decode_error(envelope) == ErrorDetail(status=404, message="not found")

    def test_nested_error_object(self) -> None:
        """Formato de erro da Tixte com code e field."""
        envelope = ResponseEnvelope(
            status_code=400,
            body=(
                b'{"success": false, "error": {"code": "invalid_domain",'
                b' "message": "Domain is invalid", "field": "domain"}}'
            ),
        )
        detail = JsonCodec().decode_error(envelope)
        assert detail == ErrorDetail(
            status=400,
            message="Domain is invalid",
            code="invalid_domain",
            field="domain",
        )

    def test_string_error_field(self) -> None:
        envelope = ResponseEnvelope(status_code=429, body=b'{"error": "Too many requests"}')
        detail = JsonCodec().decode_error(envelope)
        assert detail.message == "Too many requests"
        assert detail.code is None
        assert detail.category == "rate_limited"

    def test_non_json_body_uses_text(self) -> None:
        envelope = ResponseEnvelope(status_code=502, body=b"Bad Gateway\n")
        detail = JsonCodec().decode_error(envelope)
        assert detail.message == "Bad Gateway"
        assert detail.category == "server_error"

    def test_long_text_is_truncated(self) -> None:
        envelope = ResponseEnvelope(status_code=500, body=b"x" * 500)
        assert len(JsonCodec().decode_error(envelope).message) == 203

    def test_empty_body_uses_reason_phrase(self) -> None:
        envelope = ResponseEnvelope(status_code=403, reason_phrase="Forbidden")
        detail = JsonCodec().decode_error(envelope)
        assert detail.message == "Forbidden"
        assert detail.category == "forbidden"

    def test_empty_body_without_reason(self) -> None:
        envelope = ResponseEnvelope(status_code=418)
        detail = JsonCodec().decode_error(envelope)
        assert detail.message == "Erro desconhecido"
        assert detail.category == "http_error"
