"""Montagem de RequestDescriptor a partir de template de path.

Puro: sem IO e sem estado. Toda validação de uso do chamador acontece aqui
para que erros de montagem nunca cheguem ao Transport.
"""

from __future__ import annotations

import dataclasses
import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from pydantic import BaseModel

from tixte_client.connector.codec import JsonCodec
from tixte_client.connector.models import HttpMethod, RequestDescriptor
from tixte_client.utils.errors import InvalidRequestError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

_PLACEHOLDER = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")

JSON_CONTENT_TYPE = "application/json; charset=utf-8"

_default_codec = JsonCodec()


def build_request(
    method: HttpMethod | str,
    path_template: str,
    params: Mapping[str, Any] | None = None,
    *,
    query: Mapping[str, Any] | Sequence[tuple[str, Any]] | None = None,
    headers: Mapping[str, str] | None = None,
    body: Any = None,
    required_fields: Iterable[str] = (),
    codec: JsonCodec | None = None,
) -> RequestDescriptor:
    """Monta descriptor imutável.

    Args:
        method: Método HTTP (enum ou string)
        path_template: Path com placeholders nomeados (ex.: /files/{id})
        params: Valores dos placeholders
        query: Parâmetros de query (mapping ou pares ordenados)
        headers: Headers adicionais
        body: Corpo (modelo pydantic, dataclass, mapping ou primitivo)
        required_fields: Campos que o body deve conter com valor não nulo
        codec: Codec para serializar o body

    Returns:
        RequestDescriptor pronto para autenticação

    Raises:
        InvalidRequestError: Placeholder sem valor, parâmetro sobrando,
            método desconhecido ou body que falha na pré-validação
        EncodingError: Body não serializável
    """
    resolved_method = _parse_method(method)
    path = _resolve_path(path_template, params or {})
    query_pairs = _normalize_query(query)

    final_headers: dict[str, str] = {"Accept": "application/json"}
    final_headers.update(headers or {})

    required = tuple(required_fields)
    encoded: bytes | None = None
    if body is None:
        if required:
            raise InvalidRequestError(
                f"Body obrigatório com campos: {', '.join(required)}"
            )
    else:
        _check_required_fields(body, required)
        encoded = (codec or _default_codec).encode(body)
        final_headers.setdefault("Content-Type", JSON_CONTENT_TYPE)

    return RequestDescriptor(
        method=resolved_method,
        path=path,
        query=query_pairs,
        headers=final_headers,
        body=encoded,
    )


def _parse_method(method: HttpMethod | str) -> HttpMethod:
    if isinstance(method, HttpMethod):
        return method
    try:
        return HttpMethod(str(method).upper())
    except ValueError as exc:
        raise InvalidRequestError(f"Método HTTP não suportado: {method}") from exc


def _resolve_path(template: str, params: Mapping[str, Any]) -> str:
    names = _PLACEHOLDER.findall(template)
    missing = [name for name in names if params.get(name) is None]
    if missing:
        raise InvalidRequestError(f"Placeholders sem valor: {', '.join(missing)}")

    unused = sorted(set(params) - set(names))
    if unused:
        raise InvalidRequestError(f"Parâmetros fora do template: {', '.join(unused)}")

    def _substitute(match: re.Match[str]) -> str:
        value = str(params[match.group(1)])
        if not value:
            raise InvalidRequestError(f"Placeholder vazio: {match.group(1)}")
        return quote(value, safe="")

    return _PLACEHOLDER.sub(_substitute, template)


def _normalize_query(
    query: Mapping[str, Any] | Sequence[tuple[str, Any]] | None,
) -> tuple[tuple[str, str], ...]:
    if not query:
        return ()
    items = query.items() if isinstance(query, Mapping) else query
    pairs: list[tuple[str, str]] = []
    for name, value in items:
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        pairs.append((str(name), str(value)))
    return tuple(pairs)


def _check_required_fields(body: Any, required: tuple[str, ...]) -> None:
    if not required:
        return
    if isinstance(body, BaseModel):
        data: Mapping[str, Any] = body.model_dump()
    elif dataclasses.is_dataclass(body) and not isinstance(body, type):
        data = dataclasses.asdict(body)
    elif isinstance(body, Mapping):
        data = body
    else:
        raise InvalidRequestError(
            f"Body do tipo {type(body).__name__} não suporta campos obrigatórios"
        )

    missing = [name for name in required if data.get(name) is None]
    if missing:
        raise InvalidRequestError(f"Campos obrigatórios nulos: {', '.join(missing)}")
