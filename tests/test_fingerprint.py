"""Tests for the asset fingerprint cache."""

import hashlib

import pytest

from warble.assets.fingerprint import FINGERPRINT_LENGTH, FingerprintCache, checksum, resolve_asset
from warble.errors import AssetReadError


class TestChecksum:
    def test_is_sha256_prefix(self) -> None:
        data = b"body { color: red; }"
        assert checksum(data) == hashlib.sha256(data).hexdigest()[:32]

    def test_length_and_alphabet(self) -> None:
        fp = checksum(b"")
        assert len(fp) == FINGERPRINT_LENGTH
        assert set(fp) <= set("0123456789abcdef")

    def test_different_content_different_fingerprint(self) -> None:
        assert checksum(b"a") != checksum(b"b")


class TestFingerprintCache:
    async def test_reads_file(self, tmp_path) -> None:
        asset = tmp_path / "app.js"
        asset.write_bytes(b"console.log(1)")
        cache = FingerprintCache()

        assert await cache.get(asset) == checksum(b"console.log(1)")
        assert asset in cache
        assert len(cache) == 1

    async def test_memoized_for_process_lifetime(self, tmp_path) -> None:
        asset = tmp_path / "app.js"
        asset.write_bytes(b"v1")
        cache = FingerprintCache()
        first = await cache.get(asset)

        # Neither edits nor deletion reach the cache
        asset.write_bytes(b"v2")
        assert await cache.get(asset) == first
        asset.unlink()
        assert await cache.get(asset) == first

    async def test_missing_file_raises(self, tmp_path) -> None:
        cache = FingerprintCache()
        with pytest.raises(AssetReadError) as exc_info:
            await cache.get(tmp_path / "missing.css", label="/missing.css")
        assert exc_info.value.path == "/missing.css"
        assert "/missing.css" in str(exc_info.value)
        assert str(tmp_path) not in str(exc_info.value)

    async def test_failures_are_not_cached(self, tmp_path) -> None:
        asset = tmp_path / "late.css"
        cache = FingerprintCache()
        with pytest.raises(AssetReadError):
            await cache.get(asset)
        assert cache.peek(asset) is None

        asset.write_bytes(b"now here")
        assert await cache.get(asset) == checksum(b"now here")

    async def test_peek_does_not_touch_disk(self, tmp_path) -> None:
        cache = FingerprintCache()
        assert cache.peek(tmp_path / "never.js") is None
        assert len(cache) == 0

    def test_contains_rejects_non_paths(self) -> None:
        assert 42 not in FingerprintCache()


class TestResolveAsset:
    def test_maps_url_onto_static_dir(self, tmp_path) -> None:
        assert resolve_asset(tmp_path, "/css/site.css") == (tmp_path / "css" / "site.css").resolve()

    def test_ignores_query_and_fragment(self, tmp_path) -> None:
        assert resolve_asset(tmp_path, "/app.js?v=2#x") == (tmp_path / "app.js").resolve()

    def test_rejects_traversal(self, tmp_path) -> None:
        with pytest.raises(AssetReadError):
            resolve_asset(tmp_path / "static", "/../secret.txt")
