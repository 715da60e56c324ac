"""vaultclient - a thin, typed client for the HashiCorp Vault HTTP API.

Consumer API:
    from vaultclient import Client

    with Client.from_environment() as client:
        response = client.get("secret/my-app")
        config = response.data(dict)

Engines are plain functions over any Vault implementation:
    from vaultclient.secrets import transit
    from vaultclient.sys import mounts

    mounts.enable(client, mounts.SecretEngine(path="transit", type="transit"))
    transit.create_key(client, "transit", transit.CreateKey(name="app"))

Configuration (explicit argument or environment variable):
    VAULT_ADDR            Vault address, e.g. https://vault.internal:8200
    VAULT_TOKEN           token sent in the X-Vault-Token header
    VAULT_CACERT          PEM file with the root CA to trust (optional)
    VAULT_CLIENT_TIMEOUT  request timeout in seconds (optional, default 60)

Tokens and credentials are wrapped in Secret, which prints as ``***``.
"""

__version__ = "0.2.0"

from ._secret import Secret
from ._protocol import (
    Authentication,
    DataResponse,
    EmptyResponse,
    ErrorResponse,
    LeasedData,
    Response,
    ResponseData,
    TokenType,
)
from ._client import Client, Vault
from .exceptions import (
    VaultClientError,
    TransportError,
    UrlParseError,
    HeaderEncodingError,
    IntegerParseError,
    JsonError,
    LocalIOError,
    ByteDecodeError,
    MissingAddressError,
    MissingTokenError,
    VaultError,
    MissingDataError,
    UnexpectedResponseError,
    MalformedResponseError,
)


__all__ = [
    "Client",
    "Vault",
    "Secret",
    "Response",
    "ErrorResponse",
    "DataResponse",
    "EmptyResponse",
    "ResponseData",
    "Authentication",
    "TokenType",
    "LeasedData",
    "VaultClientError",
    "TransportError",
    "UrlParseError",
    "HeaderEncodingError",
    "IntegerParseError",
    "JsonError",
    "LocalIOError",
    "ByteDecodeError",
    "MissingAddressError",
    "MissingTokenError",
    "VaultError",
    "MissingDataError",
    "UnexpectedResponseError",
    "MalformedResponseError",
]
