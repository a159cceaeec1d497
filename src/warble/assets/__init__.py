"""Static asset fingerprinting for cache-busted URLs."""

from warble.assets.fingerprint import FingerprintCache, checksum, resolve_asset

__all__ = ["FingerprintCache", "checksum", "resolve_asset"]
