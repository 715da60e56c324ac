"""Shared fixtures: an in-memory Vault server behind httpx.MockTransport."""

import json
import re
import uuid
from typing import Any

import httpx
import pytest

from vaultclient import Client

ROOT_TOKEN = "root-token"
ADDRESS = "http://127.0.0.1:8200"


def json_body(request: httpx.Request) -> Any:
    if not request.content:
        return None
    return json.loads(request.content)


def envelope(
    data: Any = None,
    *,
    lease_id: str = "",
    lease_duration: int = 0,
    renewable: bool = False,
) -> dict[str, Any]:
    return {
        "request_id": str(uuid.uuid4()),
        "lease_id": lease_id,
        "renewable": renewable,
        "lease_duration": lease_duration,
        "data": data,
        "wrap_info": None,
        "warnings": None,
        "auth": None,
    }


def normalize_duration(value: str) -> str:
    """Render a duration the way Vault does: "1h" -> "1h0m0s"."""
    seconds = 0
    for amount, unit in re.findall(r"(\d+)([hms])", value):
        seconds += int(amount) * {"h": 3600, "m": 60, "s": 1}[unit]
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h{minutes}m{secs}s"
    if minutes:
        return f"{minutes}m{secs}s"
    return f"{secs}s"


def _errors(status: int, *messages: str) -> httpx.Response:
    return httpx.Response(status, json={"errors": list(messages)})


class FakeVault:
    """Just enough of the Vault API for the engines in vaultclient."""

    def __init__(self) -> None:
        self.calls: list[httpx.Request] = []
        self.revoked = False
        self.mounts: dict[str, dict[str, Any]] = {
            "secret": {
                "type": "kv",
                "description": "key/value secret storage",
                "accessor": "kv_6b1f3c2a",
                "config": {"default_lease_ttl": 0, "max_lease_ttl": 0, "force_no_cache": False},
                "local": False,
                "seal_wrap": False,
                "options": {"version": "2"},
            },
            "sys": {
                "type": "system",
                "description": "system endpoints used for control, policy and debugging",
                "accessor": "system_1d8a0b4e",
                "config": {"default_lease_ttl": 0, "max_lease_ttl": 0, "force_no_cache": False},
                "local": False,
                "seal_wrap": False,
                "options": None,
            },
        }
        self.keys: dict[str, dict[str, dict[str, Any]]] = {}
        self.leases: dict[str, dict[str, str]] = {}
        self.roots: dict[str, dict[str, Any]] = {}
        self.credential_queries: list[dict[str, str]] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        if self.revoked or request.headers.get("X-Vault-Token") != ROOT_TOKEN:
            return _errors(403, "permission denied")
        path = request.url.path
        if not path.startswith("/v1/"):
            return _errors(404, "no handler for route")
        path = path[len("/v1/"):].strip("/")
        method = request.method

        if path == "auth/token/revoke-self" and method == "POST":
            self.revoked = True
            return httpx.Response(204)
        if path == "auth/token/lookup-self" and method == "GET":
            return httpx.Response(200, json=envelope({"id": ROOT_TOKEN, "policies": ["root"]}))
        if path == "sys/mounts" and method == "GET":
            data = {f"{name}/": dict(record) for name, record in self.mounts.items()}
            return httpx.Response(200, json=envelope(data))
        if path.startswith("sys/mounts/"):
            return self._mounts(method, path[len("sys/mounts/"):], json_body(request))

        mount, _, rest = path.partition("/")
        engine = self.mounts.get(mount, {}).get("type")
        if engine == "transit":
            return self._transit(method, mount, rest, json_body(request))
        if engine == "aws":
            return self._aws(method, mount, rest, request)
        return _errors(404, f"no handler for route '{path}'")

    # -- sys/mounts --

    def _mounts(self, method: str, rest: str, body: Any) -> httpx.Response:
        name, _, tune = rest.partition("/")
        if tune == "tune":
            if name not in self.mounts:
                return _errors(400, f"cannot fetch sysview for path \"{name}/\"")
            config = self.mounts[name]["config"]
            if method == "GET":
                return httpx.Response(200, json=envelope(dict(config)))
            if method == "POST":
                if body.get("description") is not None:
                    self.mounts[name]["description"] = body["description"]
                for field in ("default_lease_ttl", "max_lease_ttl"):
                    if field in body:
                        config[field] = body[field]
                return httpx.Response(204)
        if method == "POST":
            if name in self.mounts:
                return _errors(400, f"path is already in use at {name}/")
            self.mounts[name] = {
                "type": body["type"],
                "description": body.get("description") or "",
                "accessor": f"{body['type']}_{uuid.uuid4().hex[:8]}",
                "config": {"default_lease_ttl": 0, "max_lease_ttl": 0, "force_no_cache": False},
                "local": False,
                "seal_wrap": False,
                "options": None,
            }
            return httpx.Response(204)
        if method == "DELETE":
            self.mounts.pop(name, None)
            self.keys.pop(name, None)
            return httpx.Response(204)
        return _errors(405, "unsupported operation")

    # -- transit --

    def _transit(self, method: str, mount: str, rest: str, body: Any) -> httpx.Response:
        keys = self.keys.setdefault(mount, {})
        parts = rest.split("/")
        if parts == ["keys"] and method == "LIST":
            if not keys:
                return _errors(404)
            return httpx.Response(200, json=envelope({"keys": sorted(keys)}))
        if len(parts) == 2 and parts[0] == "keys":
            name = parts[1]
            if method == "POST":
                key_type = body.get("type", "aes256-gcm96")
                asymmetric = key_type.startswith(("rsa", "ecdsa", "ed25519"))
                keys.setdefault(name, {
                    "name": name,
                    "type": key_type,
                    "derived": bool(body.get("derived", False)),
                    "exportable": bool(body.get("exportable", False)),
                    "allow_plaintext_backup": bool(body.get("allow_plaintext_backup", False)),
                    "deletion_allowed": False,
                    "keys": {"1": 1700000000},
                    "latest_version": 1,
                    "min_available_version": 0,
                    "min_decryption_version": 1,
                    "min_encryption_version": 0,
                    "supports_encryption": True,
                    "supports_decryption": True,
                    "supports_derivation": not asymmetric,
                    "supports_signing": asymmetric,
                })
                return httpx.Response(204)
            if name not in keys:
                return _errors(404) if method == "GET" else httpx.Response(204)
            if method == "GET":
                return httpx.Response(200, json=envelope(keys[name]))
            if method == "DELETE":
                if not keys[name]["deletion_allowed"]:
                    return _errors(400, "deletion is not allowed for this key")
                del keys[name]
                return httpx.Response(204)
        if len(parts) == 3 and parts[0] == "keys" and parts[2] == "config" and method == "POST":
            if parts[1] not in keys:
                return _errors(400, "no existing key named " + parts[1])
            keys[parts[1]].update({k: v for k, v in body.items() if v is not None})
            return httpx.Response(204)
        if len(parts) == 2 and parts[0] == "encrypt" and method == "POST":
            ciphertext = "vault:v1:" + body["plaintext"]
            return httpx.Response(200, json=envelope({"ciphertext": ciphertext, "key_version": 1}))
        if len(parts) == 2 and parts[0] == "decrypt" and method == "POST":
            plaintext = body["ciphertext"].removeprefix("vault:v1:")
            return httpx.Response(200, json=envelope({"plaintext": plaintext}))
        return _errors(405, "unsupported operation")

    # -- aws --

    def _aws(self, method: str, mount: str, rest: str, request: httpx.Request) -> httpx.Response:
        if rest == "config/root" and method == "POST":
            self.roots[mount] = json_body(request)
            return httpx.Response(204)
        if rest == "config/rotate-root" and method == "POST":
            root = self.roots.setdefault(mount, {})
            root["access_key"] = "AKIAROTATED000000001"
            return httpx.Response(200, json=envelope({"access_key": root["access_key"]}))
        if rest == "config/lease":
            if method == "POST":
                body = json_body(request)
                self.leases[mount] = {
                    "lease": normalize_duration(body["lease"]),
                    "lease_max": normalize_duration(body["lease_max"]),
                }
                return httpx.Response(204)
            if method == "GET":
                lease = self.leases.get(mount, {"lease": "0s", "lease_max": "0s"})
                return httpx.Response(200, json=envelope(lease))
        if rest == "roles" and method == "LIST":
            return httpx.Response(200, json=envelope({"keys": ["deploy", "readonly"]}))
        if rest.startswith("creds/") and method == "GET":
            role = rest[len("creds/"):]
            self.credential_queries.append(dict(request.url.params))
            return httpx.Response(
                200,
                json=envelope(
                    {
                        "access_key": "AKIAEXAMPLE000000001",
                        "secret_key": "wJalrXUtnFEMI/K7MDENG/bPxRfiCYEXAMPLEKEY",
                        "security_token": None,
                    },
                    lease_id=f"{mount}/creds/{role}/Zb3aYpqD0H1K",
                    lease_duration=3600,
                    renewable=True,
                ),
            )
        return _errors(405, "unsupported operation")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("VAULT_ADDR", "VAULT_TOKEN", "VAULT_CACERT", "VAULT_CLIENT_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_vault():
    return FakeVault()


@pytest.fixture
def client(fake_vault):
    session = httpx.Client(transport=httpx.MockTransport(fake_vault.handler))
    with Client(ADDRESS, ROOT_TOKEN, session=session) as c:
        yield c
    session.close()
