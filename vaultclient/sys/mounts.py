"""The ``/sys/mounts`` endpoints: enable, disable, list and tune secrets engines.

Every function takes any object implementing the Vault protocol as its
first argument:

    from vaultclient.sys import mounts

    mounts.enable(client, mounts.SecretEngine(path="kv-test", type="kv"))
    assert "kv-test" in mounts.list_mounts(client)
"""

import enum
from typing import Any, Optional

from pydantic import Field

from .._client import Vault
from .._protocol import Response, decode_as
from .._utils import Payload, to_json_value


class ListingVisibility(str, enum.Enum):
    """Whether to show the mount in the UI-specific listing endpoint."""

    UNAUTH = "unauth"
    HIDDEN = "hidden"


class SecretsEngineConfig(Payload):
    """Configuration options of a mounted secrets engine."""

    default_lease_ttl: Optional[int] = Field(default=None, ge=0)
    max_lease_ttl: Optional[int] = Field(default=None, ge=0)
    force_no_cache: Optional[bool] = None
    # Keys that audit devices will not HMAC
    audit_non_hmac_request_keys: Optional[set[str]] = None
    audit_non_hmac_response_keys: Optional[set[str]] = None
    listing_visibility: Optional[ListingVisibility] = None
    passthrough_request_headers: Optional[set[str]] = None
    allowed_response_headers: Optional[set[str]] = None
    # Mount type specific options passed to the backend
    options: Optional[dict[str, str]] = None
    # Vault Enterprise only
    local: Optional[bool] = None
    seal_wrap: Optional[bool] = None


class SecretEngine(Payload):
    """A secrets engine mount.

    ``path`` is not part of the objects Vault returns from ``sys/mounts``;
    list_mounts fills it in from the mount's key.
    """

    path: str
    type: str
    description: Optional[str] = None
    config: Optional[SecretsEngineConfig] = None


class SecretsEngineTune(Payload):
    """Tuning options for a mounted secrets engine."""

    nullable_fields = frozenset({"description"})

    description: Optional[str] = None
    default_lease_ttl: Optional[int] = Field(default=None, ge=0)
    max_lease_ttl: Optional[int] = Field(default=None, ge=0)
    audit_non_hmac_request_keys: Optional[set[str]] = None
    audit_non_hmac_response_keys: Optional[set[str]] = None
    listing_visibility: Optional[ListingVisibility] = None
    passthrough_request_headers: Optional[set[str]] = None
    allowed_response_headers: Optional[set[str]] = None


def list_mounts(vault: Vault) -> dict[str, SecretEngine]:
    """List all mounted secrets engines, keyed by path (no trailing slash)."""
    values = vault.get("sys/mounts").data(dict[str, dict[str, Any]])

    engines = {}
    for path, record in values.items():
        path = path.rstrip("/")
        # Vault keys the mounts by path and leaves it out of each record,
        # so it has to be put back before the record can be validated.
        record["path"] = path
        engines[path] = decode_as(SecretEngine, record)
    return engines


def enable(vault: Vault, engine: SecretEngine) -> Response:
    """Mount a secrets engine at ``engine.path``."""
    value = to_json_value(engine)
    return vault.post(f"sys/mounts/{value['path']}", value, False)


def disable(vault: Vault, path: str) -> Response:
    """Unmount the secrets engine at ``path``."""
    return vault.delete(f"sys/mounts/{path}", False)


def get_config(vault: Vault, path: str) -> SecretsEngineConfig:
    """Read the configuration of the mount at ``path``."""
    return vault.get(f"sys/mounts/{path}/tune").data(SecretsEngineConfig)


def tune(vault: Vault, path: str, config: SecretsEngineTune) -> Response:
    """Update the configuration of the mount at ``path``."""
    return vault.post(f"sys/mounts/{path}/tune", config, False)
