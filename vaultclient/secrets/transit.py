"""Transit secrets engine: named encryption keys and encrypt/decrypt.

Every function takes any object implementing the Vault protocol and the
path the engine is mounted at.
"""

import enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_serializer

from .._client import Vault
from .._protocol import Response
from .._utils import Payload, b64decode, b64encode, extract_string_list, to_json_value


class KeyType(str, enum.Enum):
    """Type of a transit key."""

    # Symmetric, support derivation and convergent encryption
    AES256_GCM96 = "aes256-gcm96"
    CHACHA20_POLY1305 = "chacha20-poly1305"
    # Asymmetric; signing with derivation is the analogue of convergent encryption
    ED25519 = "ed25519"
    ECDSA_P256 = "ecdsa-p256"
    RSA_2048 = "rsa-2048"
    RSA_4096 = "rsa-4096"


class CreateKey(Payload):
    """Parameters for creating a named key.

    ``convergent_encryption`` requires ``derived``.  ``exportable`` and
    ``allow_plaintext_backup`` cannot be turned off once set.
    """

    name: str
    convergent_encryption: Optional[bool] = None
    derived: Optional[bool] = None
    exportable: Optional[bool] = None
    allow_plaintext_backup: Optional[bool] = None
    type: KeyType = KeyType.AES256_GCM96


class Key(BaseModel):
    """A transit key as returned by read_key."""

    name: str
    derived: bool
    exportable: bool
    allow_plaintext_backup: bool
    type: KeyType
    deletion_allowed: bool
    # Key versions: creation time for symmetric keys, key details otherwise
    keys: dict[str, Any]
    min_decryption_version: int = Field(ge=0)
    min_encryption_version: int = Field(ge=0)
    supports_encryption: bool
    supports_decryption: bool
    supports_derivation: bool
    supports_signing: bool


class ConfigureKey(Payload):
    """Key configuration.

    ``min_encryption_version`` must be 0 (latest) or at least
    ``min_decryption_version``.
    """

    min_decryption_version: Optional[int] = Field(default=None, ge=0)
    min_encryption_version: Optional[int] = Field(default=None, ge=0)
    deletion_allowed: Optional[bool] = None
    exportable: Optional[bool] = None
    allow_plaintext_backup: Optional[bool] = None


class EncryptPayload(Payload):
    """A single item to encrypt.

    ``nonce`` must be 96 bits and never reused for a given context; it is
    only needed for convergent keys created by Vault 0.6.1.  ``context`` is
    required when the key uses derivation.
    """

    nullable_fields = frozenset({"nonce", "context"})

    plaintext: bytes
    nonce: Optional[bytes] = None
    context: Optional[bytes] = None

    @field_serializer("plaintext", "nonce", "context")
    def _base64(self, value: Optional[bytes]) -> Optional[str]:
        return None if value is None else b64encode(value)


class DecryptPayload(Payload):
    """A single ciphertext to decrypt."""

    nullable_fields = frozenset({"nonce", "context"})

    ciphertext: str
    nonce: Optional[bytes] = None
    context: Optional[bytes] = None

    @field_serializer("nonce", "context")
    def _base64(self, value: Optional[bytes]) -> Optional[str]:
        return None if value is None else b64encode(value)


class _Ciphertext(BaseModel):
    ciphertext: str


class _Plaintext(BaseModel):
    plaintext: str


def create_key(vault: Vault, mount: str, key: CreateKey) -> Response:
    """Create a named key.  The name goes in the URL, not the body."""
    body = to_json_value(key)
    name = body.pop("name")
    return vault.post(f"{mount}/keys/{name}", body, False)


def read_key(vault: Vault, mount: str, name: str) -> Key:
    return vault.get(f"{mount}/keys/{name}").data(Key)


def list_keys(vault: Vault, mount: str) -> list[str]:
    data = vault.list(f"{mount}/keys").data(dict[str, Any])
    return extract_string_list(data, "keys")


def delete_key(vault: Vault, mount: str, name: str) -> Response:
    """Delete a key.  Vault refuses unless ``deletion_allowed`` was configured."""
    return vault.delete(f"{mount}/keys/{name}", False)


def configure_key(vault: Vault, mount: str, name: str, config: ConfigureKey) -> Response:
    return vault.post(f"{mount}/keys/{name}/config", config, False)


def encrypt(vault: Vault, mount: str, name: str, payload: EncryptPayload) -> str:
    """Encrypt with the named key and return the ``vault:v<n>:...`` ciphertext."""
    response = vault.post(f"{mount}/encrypt/{name}", payload, True)
    return response.data(_Ciphertext).ciphertext


def decrypt(vault: Vault, mount: str, name: str, payload: DecryptPayload) -> bytes:
    """Decrypt with the named key and return the raw plaintext bytes."""
    response = vault.post(f"{mount}/decrypt/{name}", payload, True)
    return b64decode(response.data(_Plaintext).plaintext)
