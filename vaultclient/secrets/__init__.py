"""Secrets engines.

See https://developer.hashicorp.com/vault/api-docs/secret.
"""

from . import aws, transit

__all__ = ["aws", "transit"]
