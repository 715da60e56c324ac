"""Transport configuration for the Vault client.

Settings resolution order (per setting):
  1. Explicit argument to Client.from_environment / Client
  2. Environment variable (VAULT_ADDR, VAULT_TOKEN, VAULT_CACERT,
     VAULT_CLIENT_TIMEOUT)
  3. Error for the address and token; defaults for the rest

The address is only checked to be non-empty here.  It is parsed as a URL on
every request (see build_url), so a malformed address fails on first use.
"""

import logging
import os
import ssl
import warnings
from typing import Optional

import httpx

from .exceptions import (
    ByteDecodeError,
    IntegerParseError,
    LocalIOError,
    MissingAddressError,
    MissingTokenError,
    TransportError,
    UrlParseError,
)
from ._protocol import API_PREFIX

logger = logging.getLogger(__name__)

ENV_ADDRESS = "VAULT_ADDR"
ENV_TOKEN = "VAULT_TOKEN"
ENV_CA_CERT = "VAULT_CACERT"
ENV_TIMEOUT = "VAULT_CLIENT_TIMEOUT"

DEFAULT_TIMEOUT = 60.0

_LOOPBACK_HOSTS = frozenset({"127.0.0.1", "localhost", "::1"})


def _from_env(value: Optional[str], env: str) -> Optional[str]:
    if value:
        return value
    env_value = os.environ.get(env, "").strip()
    return env_value or None


def resolve_address(address: Optional[str] = None) -> str:
    """Resolve the Vault address from parameter or VAULT_ADDR."""
    resolved = _from_env(address, ENV_ADDRESS)
    if not resolved:
        raise MissingAddressError()
    return resolved


def resolve_token(token: Optional[str] = None) -> str:
    """Resolve the Vault token from parameter or VAULT_TOKEN."""
    resolved = _from_env(token, ENV_TOKEN)
    if not resolved:
        raise MissingTokenError()
    return resolved


def resolve_ca_cert(ca_cert: Optional[str] = None) -> Optional[str]:
    """Resolve the CA certificate path from parameter or VAULT_CACERT."""
    return _from_env(ca_cert, ENV_CA_CERT)


def resolve_timeout(timeout: Optional[float] = None) -> float:
    """Resolve the request timeout (seconds) from parameter or VAULT_CLIENT_TIMEOUT."""
    if timeout is not None:
        return timeout
    env_value = os.environ.get(ENV_TIMEOUT, "").strip()
    if not env_value:
        return DEFAULT_TIMEOUT
    try:
        return float(int(env_value))
    except ValueError as exc:
        raise IntegerParseError(ENV_TIMEOUT, env_value) from exc


def build_url(address: str, path: str) -> httpx.URL:
    """Join ``path`` under the API prefix of ``address``.

    The prefix is absolute, so any path component of the address is
    replaced: ``http://host:8200/ui`` + ``sys/mounts`` gives
    ``http://host:8200/v1/sys/mounts``.
    """
    try:
        base = httpx.URL(address)
    except httpx.InvalidURL as exc:
        raise UrlParseError(address, str(exc)) from exc
    if not base.scheme or not base.host:
        raise UrlParseError(address, "relative URL without a base")
    try:
        return base.join(f"{API_PREFIX}{path}")
    except httpx.InvalidURL as exc:
        raise UrlParseError(f"{API_PREFIX}{path}", str(exc)) from exc


def load_ca_cert(path: str) -> ssl.SSLContext:
    """Build an SSL context trusting the PEM root certificate(s) in ``path``."""
    try:
        with open(path, "rb") as f:
            raw = f.read()
    except OSError as exc:
        raise LocalIOError(path, str(exc)) from exc
    try:
        pem = raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ByteDecodeError(f"CA certificate {path} is not UTF-8: {exc}") from exc
    try:
        return ssl.create_default_context(cadata=pem)
    except ssl.SSLError as exc:
        raise TransportError(f"invalid CA certificate {path}: {exc}") from exc


def create_session(
    address: str,
    ca_cert: Optional[str] = None,
    timeout: float = DEFAULT_TIMEOUT,
) -> httpx.Client:
    """Create the HTTP session used for every request of a client.

    Warns when the address sends the token over plain HTTP to a
    non-loopback host.
    """
    try:
        parsed = httpx.URL(address)
    except httpx.InvalidURL:
        parsed = None
    if parsed is not None and parsed.scheme == "http" and parsed.host not in _LOOPBACK_HOSTS:
        warnings.warn(
            f"Connecting to Vault over unencrypted HTTP at {parsed.host}. "
            "Use https:// for non-loopback connections.",
            UserWarning,
            stacklevel=3,
        )

    verify: ssl.SSLContext | bool = True
    if ca_cert:
        logger.debug("Loading Vault CA certificate from %s", ca_cert)
        verify = load_ca_cert(ca_cert)
    return httpx.Client(timeout=timeout, verify=verify)
