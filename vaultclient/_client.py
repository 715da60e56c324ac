"""Vault HTTP API client.

Usage:
    from vaultclient import Client

    with Client.from_environment(revoke_self_on_drop=True) as client:
        response = client.get("auth/token/lookup-self")
        info = response.data(dict)

Configuration (explicit argument first, then environment):
    address  -- address= or VAULT_ADDR  (required)
    token    -- token= or VAULT_TOKEN   (required)
    ca_cert  -- ca_cert= or VAULT_CACERT (optional PEM root CA)
    timeout  -- timeout= or VAULT_CLIENT_TIMEOUT (seconds, default 60)

Any object implementing the Vault protocol (read, read_with_query and
write) gets the convenience verbs and can be passed to the engine
functions in vaultclient.sys and vaultclient.secrets.
"""

import json
import logging
from typing import Any, Optional, Protocol

import httpx

from ._protocol import (
    METHOD_DELETE,
    METHOD_GET,
    METHOD_LIST,
    METHOD_POST,
    METHOD_PUT,
    REVOKE_SELF_PATH,
    TOKEN_HEADER,
    EmptyResponse,
    Response,
)
from ._secret import Secret
from ._transport import (
    build_url,
    create_session,
    resolve_address,
    resolve_ca_cert,
    resolve_timeout,
    resolve_token,
)
from ._utils import encode_body, encode_query
from .exceptions import (
    ByteDecodeError,
    HeaderEncodingError,
    JsonError,
    MissingAddressError,
    MissingTokenError,
    TransportError,
    UnexpectedResponseError,
)

logger = logging.getLogger(__name__)


class Vault(Protocol):
    """The basic Vault API operations.

    Implementations provide ``read``, ``read_with_query`` and ``write``;
    the remaining verbs are built on top of them.
    """

    def read(self, path: str, method: str) -> Response:
        """Read a generic path."""
        ...

    def read_with_query(self, path: str, method: str, query: Any) -> Response:
        """Read a generic path with query parameters."""
        ...

    def write(
        self, path: str, payload: Any, method: str, response_expected: bool
    ) -> Response:
        """Write ``payload`` to a generic path.

        When ``response_expected`` is false the reply must be empty and
        EmptyResponse is returned.
        """
        ...

    def get(self, path: str) -> Response:
        return self.read(path, METHOD_GET)

    def get_with_query(self, path: str, query: Any) -> Response:
        return self.read_with_query(path, METHOD_GET, query)

    def list(self, path: str) -> Response:
        return self.read(path, METHOD_LIST)

    def post(self, path: str, payload: Any, response_expected: bool) -> Response:
        return self.write(path, payload, METHOD_POST, response_expected)

    def put(self, path: str, payload: Any, response_expected: bool) -> Response:
        return self.write(path, payload, METHOD_PUT, response_expected)

    def delete(self, path: str, response_expected: bool) -> Response:
        return self.write(path, None, METHOD_DELETE, response_expected)


class Client(Vault):
    """Vault API client authenticated with a token.

    The HTTP session is shared by all calls and is safe to use from
    several threads.  Use the client as a context manager (or call
    ``close()``) so that the token is revoked when ``revoke_self_on_drop``
    is set.
    """

    def __init__(
        self,
        address: str,
        token: str | Secret,
        *,
        revoke_self_on_drop: bool = False,
        session: Optional[httpx.Client] = None,
    ) -> None:
        if not address:
            raise MissingAddressError()
        if not token:
            raise MissingTokenError()
        self._address = address
        self._token = Secret(token)
        self.revoke_self_on_drop = revoke_self_on_drop
        self._owns_session = session is None
        self._session = session if session is not None else create_session(address)
        self._closed = False

    @classmethod
    def from_environment(
        cls,
        address: Optional[str] = None,
        token: Optional[str] = None,
        ca_cert: Optional[str] = None,
        *,
        revoke_self_on_drop: bool = False,
        timeout: Optional[float] = None,
    ) -> "Client":
        """Create a client, falling back to the VAULT_* environment variables."""
        resolved_address = resolve_address(address)
        resolved_token = resolve_token(token)
        session = create_session(
            resolved_address,
            ca_cert=resolve_ca_cert(ca_cert),
            timeout=resolve_timeout(timeout),
        )
        client = cls(
            resolved_address,
            resolved_token,
            revoke_self_on_drop=revoke_self_on_drop,
            session=session,
        )
        client._owns_session = True
        return client

    @property
    def address(self) -> str:
        return self._address

    @property
    def token(self) -> Secret:
        return self._token

    def __repr__(self) -> str:
        return f"Client(address={self._address!r}, token={self._token!r})"

    # -- Vault protocol --

    def read(self, path: str, method: str) -> Response:
        request = self._build_request(path, method)
        return self._execute(request)

    def read_with_query(self, path: str, method: str, query: Any) -> Response:
        request = self._build_request(path, method, params=encode_query(query))
        return self._execute(request)

    def write(
        self, path: str, payload: Any, method: str, response_expected: bool
    ) -> Response:
        request = self._build_request(path, method, content=encode_body(payload))
        if response_expected:
            return self._execute(request)
        self._execute_no_body(request)
        return EmptyResponse()

    # -- Token --

    def revoke_self(self) -> None:
        """Revoke the client's own token.  It can no longer be used afterwards."""
        logger.info("Revoking self Vault token")
        request = self._build_request(REVOKE_SELF_PATH, METHOD_POST)
        # Vault replies 204 No Content
        self._execute_no_body(request)

    # -- Lifecycle --

    def close(self) -> None:
        """Revoke the token if requested, then release the HTTP session.

        A failed revocation is logged and never raised.
        """
        if self._closed:
            return
        self._closed = True
        if self.revoke_self_on_drop:
            logger.info("Vault client is being closed. Revoking its own token")
            try:
                self.revoke_self()
            except Exception as e:
                logger.warning("Error revoking self: %s", e)
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # -- Internal --

    def _build_request(
        self,
        path: str,
        method: str,
        params: Optional[list[tuple[str, str]]] = None,
        content: Optional[bytes] = None,
    ) -> httpx.Request:
        url = build_url(self._address, path)
        headers = {TOKEN_HEADER: self._token.reveal()}
        if content is not None:
            headers["Content-Type"] = "application/json"
        try:
            return self._session.build_request(
                method, url, params=params, headers=headers, content=content
            )
        except UnicodeEncodeError as exc:
            raise HeaderEncodingError(TOKEN_HEADER) from exc

    def _send(self, request: httpx.Request) -> str:
        logger.debug("Executing request: %s %s", request.method, request.url)
        try:
            response = self._session.send(request)
        except httpx.HTTPError as exc:
            raise TransportError(str(exc) or type(exc).__name__) from exc
        logger.debug(
            "Response received: %s (%d bytes)",
            response.status_code,
            len(response.content),
        )
        try:
            return response.content.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ByteDecodeError(f"Response body is not UTF-8: {exc}") from exc

    def _execute(self, request: httpx.Request) -> Response:
        body = self._send(request)
        try:
            value = json.loads(body)
        except ValueError as exc:
            raise JsonError(str(exc)) from exc
        return Response.decode(value)

    def _execute_no_body(self, request: httpx.Request) -> None:
        body = self._send(request)
        if body:
            raise UnexpectedResponseError(body)
