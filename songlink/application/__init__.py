"""Application layer: the resolution client and its builder."""

from .client import ClientConfig, Songlink, SonglinkBuilder, get_executor, normalize_uri

__all__ = [
    "ClientConfig",
    "Songlink",
    "SonglinkBuilder",
    "get_executor",
    "normalize_uri",
]
