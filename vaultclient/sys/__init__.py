"""API wrappers for the Vault system backend (``/sys``) endpoints."""

from . import mounts

__all__ = ["mounts"]
