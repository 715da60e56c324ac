"""Serialization helpers shared by the client and the engines."""

import base64
import binascii
import json
from collections.abc import Mapping
from typing import Any, ClassVar

from pydantic import BaseModel, SerializerFunctionWrapHandler, model_serializer
from pydantic_core import PydanticSerializationError, to_jsonable_python

from .exceptions import ByteDecodeError, JsonError, MalformedResponseError


class Payload(BaseModel):
    """Base model for request and response bodies.

    Optional fields left as ``None`` are dropped from the serialized body,
    except the ones listed in ``nullable_fields`` which are sent as ``null``.
    """

    nullable_fields: ClassVar[frozenset[str]] = frozenset()

    @model_serializer(mode="wrap")
    def _omit_unset(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        return {
            key: value
            for key, value in data.items()
            if value is not None or key in self.nullable_fields
        }


def to_json_value(payload: Any) -> Any:
    """Turn a payload (model, mapping, JSON value) into plain JSON types."""
    try:
        if isinstance(payload, BaseModel):
            return payload.model_dump(mode="json", by_alias=True)
        return to_jsonable_python(payload, by_alias=True)
    except PydanticSerializationError as exc:
        raise JsonError(str(exc)) from exc


def encode_body(payload: Any) -> bytes | None:
    """Serialize a request body.  ``None`` means no body at all."""
    if payload is None:
        return None
    try:
        return json.dumps(to_json_value(payload)).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise JsonError(str(exc)) from exc


def encode_query(query: Any) -> list[tuple[str, str]]:
    """Flatten a query (mapping, pairs or model) into string pairs.

    ``None`` values are skipped and booleans are written as true/false.
    """
    if isinstance(query, BaseModel):
        query = query.model_dump(mode="json", by_alias=True)
    if isinstance(query, Mapping):
        items = list(query.items())
    elif isinstance(query, (str, bytes)):
        raise JsonError("query must be a mapping or a sequence of key/value pairs")
    else:
        try:
            items = list(query)
        except TypeError as exc:
            raise JsonError(f"query is not iterable: {query!r}") from exc
    params = []
    for item in items:
        if not isinstance(item, (tuple, list)) or len(item) != 2:
            raise JsonError(f"query item {item!r} is not a key/value pair")
        key, value = item
        if value is None:
            continue
        if isinstance(value, bool):
            value = "true" if value else "false"
        elif isinstance(value, (Mapping, list, tuple, set)):
            raise JsonError(f"query parameter {key!r} is not a scalar")
        params.append((str(key), str(value)))
    return params


def b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def b64decode(text: str) -> bytes:
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ByteDecodeError(f"Invalid base64 data: {exc}") from exc


def extract_string_list(data: Mapping[str, Any], field: str) -> list[str]:
    """Return ``data[field]`` as a list of strings.

    Used by the LIST endpoints, which reply with ``{"keys": [...]}``.
    """
    if field not in data:
        raise MalformedResponseError(f"missing field {field!r}")
    values = data[field]
    if not isinstance(values, list):
        raise MalformedResponseError(f"field {field!r} is not an array")
    for value in values:
        if not isinstance(value, str):
            raise MalformedResponseError(f"field {field!r} holds a non-string: {value!r}")
    return list(values)
