"""AWS secrets engine: root configuration, lease settings and credentials.

Every function takes any object implementing the Vault protocol and the
path the engine is mounted at.

The role endpoints other than listing are not implemented yet and raise
NotImplementedError.
"""

from typing import Any, NoReturn, Optional

from pydantic import BaseModel

from .._client import Vault
from .._protocol import LeasedData, Response
from .._secret import Secret
from .._utils import Payload, extract_string_list


class RootConfig(Payload):
    """Credentials Vault uses to talk to IAM and STS."""

    access_key: str
    secret_key: Secret
    region: Optional[str] = None
    max_retries: Optional[int] = None
    iam_endpoint: Optional[str] = None
    sts_endpoint: Optional[str] = None


class RotatedRoot(BaseModel):
    """Result of rotating the root credentials."""

    access_key: str


class LeaseConfig(Payload):
    """Lease settings for generated credentials.

    Values are duration strings passed through as-is; Vault normalizes them
    on read (``"1h"`` reads back as ``"1h0m0s"``).
    """

    lease: str
    lease_max: str


class CredentialsRequest(Payload):
    """Query parameters for generate_credentials."""

    role_arn: Optional[str] = None
    ttl: Optional[str] = None


class Credentials(BaseModel):
    """AWS credentials issued for a role."""

    access_key: str
    secret_key: Secret
    security_token: Optional[Secret] = None
    arn: Optional[str] = None


def configure_root(vault: Vault, mount: str, config: RootConfig) -> Response:
    return vault.post(f"{mount}/config/root", config, False)


def rotate_root(vault: Vault, mount: str) -> RotatedRoot:
    """Rotate the root access key.  The old key stops working."""
    return vault.post(f"{mount}/config/rotate-root", None, True).data(RotatedRoot)


def configure_lease(vault: Vault, mount: str, lease: LeaseConfig) -> Response:
    return vault.post(f"{mount}/config/lease", lease, False)


def read_lease(vault: Vault, mount: str) -> LeaseConfig:
    return vault.get(f"{mount}/config/lease").data(LeaseConfig)


def generate_credentials(
    vault: Vault,
    mount: str,
    role: str,
    request: Optional[CredentialsRequest] = None,
) -> LeasedData[Credentials]:
    """Generate credentials for ``role``, keeping the lease they are issued under."""
    query = request if request is not None else CredentialsRequest()
    response = vault.get_with_query(f"{mount}/creds/{role}", query)
    return response.leased_data(Credentials)


def list_roles(vault: Vault, mount: str) -> list[str]:
    data = vault.list(f"{mount}/roles").data(dict[str, Any])
    return extract_string_list(data, "keys")


def create_role(vault: Vault, mount: str, role: str, definition: Any) -> NoReturn:
    raise NotImplementedError("aws create_role is not implemented")


def update_role(vault: Vault, mount: str, role: str, definition: Any) -> NoReturn:
    """Same as create_role: Vault creates or replaces the role."""
    return create_role(vault, mount, role, definition)


def read_role(vault: Vault, mount: str, role: str) -> NoReturn:
    raise NotImplementedError("aws read_role is not implemented")


def delete_role(vault: Vault, mount: str, role: str) -> NoReturn:
    raise NotImplementedError("aws delete_role is not implemented")
