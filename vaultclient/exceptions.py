"""vaultclient exceptions."""


class VaultClientError(Exception):
    """Base exception for all vaultclient errors."""
    pass


class TransportError(VaultClientError):
    """Raised when the HTTP request fails (connection, TLS, timeout)."""
    def __init__(self, detail: str = ""):
        msg = "Error making HTTP request"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class UrlParseError(VaultClientError):
    """Raised when the Vault address or a request path is not a valid URL."""
    def __init__(self, url: str, reason: str = ""):
        self.url = url
        msg = f"Error parsing URL: {url!r}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg)


class HeaderEncodingError(VaultClientError):
    """Raised when a header value cannot be encoded for the wire."""
    def __init__(self, header: str):
        self.header = header
        super().__init__(f"Error encoding HTTP header: {header}")


class IntegerParseError(VaultClientError):
    """Raised when a setting that must be an integer is not."""
    def __init__(self, name: str, value: str):
        self.name = name
        self.value = value
        super().__init__(f"Error parsing integer for {name}: {value!r}")


class JsonError(VaultClientError):
    """Raised on JSON serialization or deserialization failures."""
    def __init__(self, detail: str = ""):
        msg = "Error (de)serializing JSON"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class LocalIOError(VaultClientError):
    """Raised when a local file (e.g. the CA certificate) cannot be read."""
    def __init__(self, path: str, detail: str = ""):
        self.path = path
        msg = f"Cannot read {path}"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class ByteDecodeError(VaultClientError):
    """Raised when bytes cannot be decoded (UTF-8 text, base64 payloads)."""
    pass


class MissingAddressError(VaultClientError):
    """Raised when no Vault address was given or found in VAULT_ADDR."""
    def __init__(self):
        super().__init__("Vault address is missing. Pass address= or set VAULT_ADDR.")


class MissingTokenError(VaultClientError):
    """Raised when no Vault token was given or found in VAULT_TOKEN."""
    def __init__(self):
        super().__init__("Vault token is missing. Pass token= or set VAULT_TOKEN.")


class VaultError(VaultClientError):
    """Raised when Vault replies with an ``errors`` list."""
    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        self.message = "; ".join(self.errors)
        super().__init__(f"Vault error: {self.message}")


class MissingDataError(VaultClientError):
    """Raised when a response carries no ``data`` where some was expected."""
    def __init__(self, response):
        self.response = response
        super().__init__(f"Response is missing data: {response!r}")


class UnexpectedResponseError(VaultClientError):
    """Raised when a reply that should be empty has a body."""
    def __init__(self, body: str):
        self.body = body
        super().__init__(f"Unexpected response from Vault: {body}")


class MalformedResponseError(VaultClientError):
    """Raised when decoded data does not have the expected nested shape."""
    def __init__(self, detail: str = ""):
        msg = "Malformed response from Vault"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)
