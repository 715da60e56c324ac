"""HTTP/JSON protocol between the client and Vault.

Every request is ``{METHOD} {address}/v1/{path}`` with the token in the
``X-Vault-Token`` header.  Every reply body is one of:

  {"errors": ["...", ...]}                  -- ErrorResponse
  {"request_id": ..., "lease_id": ...,
   "renewable": ..., "lease_duration": ...,
   "warnings": ..., "auth": ..., "data": ...} -- DataResponse
  <empty body>                               -- EmptyResponse (write/delete)

There is no discriminant field: the error shape is tried first, then the
data shape.  The empty variant is never decoded, the client creates it when
a write expected no reply.
"""

import enum
import json
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field, TypeAdapter, field_validator

from ._secret import Secret
from .exceptions import JsonError, MissingDataError, VaultError

API_PREFIX = "/v1/"
TOKEN_HEADER = "X-Vault-Token"
REVOKE_SELF_PATH = "auth/token/revoke-self"

# HTTP methods
METHOD_GET = "GET"
METHOD_POST = "POST"
METHOD_PUT = "PUT"
METHOD_DELETE = "DELETE"
METHOD_LIST = "LIST"

T = TypeVar("T")


class TokenType(str, enum.Enum):
    """Type of token, see Vault's token documentation."""

    SERVICE = "service"
    BATCH = "batch"


class Authentication(BaseModel):
    """The ``auth`` block returned by login and token endpoints."""

    client_token: Secret
    accessor: str
    policies: list[str]
    # Policies directly attached to the token, without identity policies
    token_policies: list[str]
    metadata: dict[str, str] = Field(default_factory=dict)
    lease_duration: int = Field(ge=0)
    renewable: bool
    entity_id: str
    token_type: TokenType

    @field_validator("metadata", mode="before")
    @classmethod
    def _null_metadata(cls, value: Any) -> Any:
        return {} if value is None else value


class ResponseData(BaseModel):
    """Envelope of a successful reply.  ``wrap_info`` is not modelled."""

    request_id: str
    lease_id: str
    renewable: bool
    lease_duration: int = Field(ge=0)
    warnings: list[str] | None = None
    auth: Authentication | None = None
    data: Any = None


@dataclass(frozen=True)
class LeasedData(Generic[T]):
    """Decoded ``data`` together with the lease it was issued under."""

    lease_id: str
    renewable: bool
    lease_duration: int
    data: T

    def unwrap(self) -> T:
        """Discard the lease and return the payload."""
        return self.data


@lru_cache(maxsize=None)
def _adapter(target: Any) -> TypeAdapter:
    return TypeAdapter(target)


def decode_as(target: Any, value: Any) -> Any:
    """Validate a JSON value into ``target``, raising JsonError on mismatch.

    Validation is strict: the value must already have the shape of
    ``target`` (no "1" for an int or "yes" for a bool).  It runs in JSON
    mode so enums and Secret fields still accept their string form.
    """
    try:
        return _adapter(target).validate_json(json.dumps(value), strict=True)
    except (TypeError, ValueError) as exc:
        # ValidationError is a ValueError
        raise JsonError(str(exc)) from exc


class Response(ABC):
    """A decoded Vault reply.  See the subclasses for the three shapes."""

    __slots__ = ()

    @staticmethod
    def decode(value: Any) -> "Response":
        """Build a Response from a parsed JSON body."""
        if isinstance(value, dict):
            errors = value.get("errors")
            if isinstance(errors, list) and all(isinstance(e, str) for e in errors):
                return ErrorResponse(list(errors))
        return DataResponse(decode_as(ResponseData, value))

    @abstractmethod
    def ok(self) -> ResponseData | None:
        """Return the response data, ``None`` for an empty reply.

        Raises VaultError if Vault reported errors.
        """

    @abstractmethod
    def data_value(self) -> Any:
        """Return the raw ``data`` payload.

        Raises VaultError for an error reply and MissingDataError when there
        is no payload.
        """

    def data(self, target: Any) -> Any:
        """Decode the ``data`` payload into ``target``."""
        return decode_as(target, self.data_value())

    @abstractmethod
    def leased_data(self, target: Any) -> LeasedData:
        """Decode the ``data`` payload into ``target``, keeping lease details."""


class ErrorResponse(Response):
    """Vault rejected the request."""

    __slots__ = ("errors",)

    def __init__(self, errors: list[str]) -> None:
        self.errors = errors

    def __repr__(self) -> str:
        return f"ErrorResponse(errors={self.errors!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ErrorResponse):
            return self.errors == other.errors
        return NotImplemented

    def ok(self) -> ResponseData | None:
        raise VaultError(self.errors)

    def data_value(self) -> Any:
        raise VaultError(self.errors)

    def leased_data(self, target: Any) -> LeasedData:
        raise VaultError(self.errors)


class DataResponse(Response):
    """A successful reply carrying an envelope."""

    __slots__ = ("response",)

    def __init__(self, response: ResponseData) -> None:
        self.response = response

    def __repr__(self) -> str:
        return f"DataResponse({self.response!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, DataResponse):
            return self.response == other.response
        return NotImplemented

    def ok(self) -> ResponseData | None:
        return self.response

    def data_value(self) -> Any:
        if self.response.data is None:
            raise MissingDataError(self)
        return self.response.data

    def leased_data(self, target: Any) -> LeasedData:
        decoded = self.data(target)
        return LeasedData(
            lease_id=self.response.lease_id,
            renewable=self.response.renewable,
            lease_duration=self.response.lease_duration,
            data=decoded,
        )


class EmptyResponse(Response):
    """A successful reply without a body, usually from writes and deletes."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "EmptyResponse()"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, EmptyResponse)

    def __hash__(self) -> int:
        return hash(EmptyResponse)

    def ok(self) -> ResponseData | None:
        return None

    def data_value(self) -> Any:
        raise MissingDataError(self)

    def leased_data(self, target: Any) -> LeasedData:
        raise MissingDataError(self)
