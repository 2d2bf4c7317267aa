from __future__ import annotations

import json
import os
import stat
import tempfile
import threading
import unittest
from pathlib import Path

from fakes import LINUX_BINARY, FakeResponse, FakeSession, connection_error, sha256_hex

from tailwind_cli.common.config import RuntimeConfig
from tailwind_cli.common.errors import ChecksumMismatchError, DownloadError
from tailwind_cli.common.types import Asset, ResolvedAssetSet
from tailwind_cli.launcher.asset_cache import MANIFEST_FILE_NAME, AssetCache
from tailwind_cli.launcher.asset_installer import AssetInstaller


BASE = "https://example.com/dl"
BINARY_BODY = b"#!/bin/sh\necho tailwind\n"
THEME_BODY = b".dark { color: white; }\n"
JS_BODY = b"console.log('flowbite');\n"


def _asset_set(primary_digest: str | None = None) -> ResolvedAssetSet:
    return ResolvedAssetSet(
        version="v4.1.0",
        primary=Asset(LINUX_BINARY, f"{BASE}/{LINUX_BINARY}", primary_digest),
        stylesheets=(Asset("themes.css", f"{BASE}/themes.css", "sha256:" + sha256_hex(THEME_BODY)),),
        scripts=(Asset("flowbite.min.js", f"{BASE}/flowbite.min.js"),),
    )


def _routes(**overrides) -> dict:
    routes = {
        f"{BASE}/{LINUX_BINARY}": FakeResponse(body=BINARY_BODY),
        f"{BASE}/themes.css": FakeResponse(body=THEME_BODY),
        f"{BASE}/flowbite.min.js": FakeResponse(body=JS_BODY),
    }
    routes.update(overrides)
    return routes


class FetchAllTests(unittest.TestCase):
    def test_downloads_all_assets_concurrently(self) -> None:
        # Every response waits until all three are in flight at once.
        barrier = threading.Barrier(3, timeout=5)
        slow = FakeResponse(body=BINARY_BODY, barrier=barrier, delay=0.2)
        routes = {
            f"{BASE}/{LINUX_BINARY}": slow,
            f"{BASE}/themes.css": FakeResponse(body=THEME_BODY, barrier=barrier),
            f"{BASE}/flowbite.min.js": FakeResponse(body=JS_BODY, barrier=barrier),
        }
        installer = AssetInstaller(RuntimeConfig(), FakeSession(routes))
        with tempfile.TemporaryDirectory() as td:
            target = Path(td) / "latest"
            result = installer.fetch_all(_asset_set(), target)

            self.assertTrue(slow.finished.is_set())
            self.assertEqual(result.executable, target / LINUX_BINARY)
            self.assertEqual((target / LINUX_BINARY).read_bytes(), BINARY_BODY)
            self.assertEqual((target / "themes.css").read_bytes(), THEME_BODY)
            self.assertEqual((target / "flowbite.min.js").read_bytes(), JS_BODY)
            self.assertEqual(result.stylesheets, (("themes.css", target / "themes.css"),))
            self.assertEqual(result.scripts, (("flowbite.min.js", target / "flowbite.min.js"),))
            self.assertFalse(result.from_cache)
            self.assertEqual([p.name for p in Path(td).iterdir()], ["latest"])

    @unittest.skipIf(os.name == "nt", "POSIX permission bits")
    def test_files_are_read_execute_for_owner_and_group(self) -> None:
        installer = AssetInstaller(RuntimeConfig(), FakeSession(_routes()))
        with tempfile.TemporaryDirectory() as td:
            target = Path(td) / "latest"
            installer.fetch_all(_asset_set(), target)
            for name in (LINUX_BINARY, "themes.css", "flowbite.min.js"):
                mode = stat.S_IMODE((target / name).stat().st_mode)
                self.assertEqual(mode, 0o550, name)

    def test_manifest_records_checksums(self) -> None:
        installer = AssetInstaller(RuntimeConfig(), FakeSession(_routes()))
        with tempfile.TemporaryDirectory() as td:
            target = Path(td) / "latest"
            installer.fetch_all(_asset_set(), target)
            manifest = json.loads((target / MANIFEST_FILE_NAME).read_text(encoding="utf-8"))
            self.assertEqual(manifest["version"], "v4.1.0")
            self.assertEqual(manifest["sha256"][LINUX_BINARY], sha256_hex(BINARY_BODY))
            cached = AssetCache.check(target / LINUX_BINARY)
            self.assertIsNotNone(cached)
            self.assertEqual(cached.version, "v4.1.0")

    def test_checksum_mismatch_in_strict_mode(self) -> None:
        installer = AssetInstaller(RuntimeConfig(), FakeSession(_routes()), strict_mode=True)
        remote = "sha256:" + "deadbeef" * 8
        with tempfile.TemporaryDirectory() as td:
            target = Path(td) / "latest"
            with self.assertRaises(ChecksumMismatchError) as ctx:
                installer.fetch_all(_asset_set(primary_digest=remote), target)

            err = ctx.exception
            self.assertEqual(err.name, LINUX_BINARY)
            self.assertEqual(err.local, sha256_hex(BINARY_BODY))
            self.assertEqual(err.remote, remote)
            self.assertIn("deadbeef" * 8, str(err))
            self.assertIn(sha256_hex(BINARY_BODY), str(err))
            # Nothing that could pass as a cache hit is left behind.
            self.assertFalse((target / LINUX_BINARY).exists())
            self.assertEqual(list(Path(td).iterdir()), [])

    def test_mismatch_accepted_without_strict_mode(self) -> None:
        installer = AssetInstaller(RuntimeConfig(), FakeSession(_routes()), strict_mode=False)
        with tempfile.TemporaryDirectory() as td:
            target = Path(td) / "latest"
            result = installer.fetch_all(_asset_set(primary_digest="sha256:" + "deadbeef" * 8), target)
            self.assertEqual(result.executable.read_bytes(), BINARY_BODY)

    def test_matching_digest_is_accepted(self) -> None:
        installer = AssetInstaller(RuntimeConfig(), FakeSession(_routes()), strict_mode=True)
        with tempfile.TemporaryDirectory() as td:
            target = Path(td) / "v4.1.0"
            result = installer.fetch_all(_asset_set("sha256:" + sha256_hex(BINARY_BODY)), target)
            self.assertTrue(result.executable.exists())

    def test_digest_comparison_is_case_sensitive(self) -> None:
        installer = AssetInstaller(RuntimeConfig(), FakeSession(_routes()), strict_mode=True)
        with tempfile.TemporaryDirectory() as td:
            with self.assertRaises(ChecksumMismatchError):
                installer.fetch_all(_asset_set("sha256:" + sha256_hex(BINARY_BODY).upper()), Path(td) / "x")

    def test_side_asset_failure_fails_whole_fetch(self) -> None:
        routes = _routes(**{f"{BASE}/flowbite.min.js": FakeResponse(status_code=500)})
        installer = AssetInstaller(RuntimeConfig(), FakeSession(routes))
        with tempfile.TemporaryDirectory() as td:
            target = Path(td) / "latest"
            with self.assertRaises(DownloadError) as ctx:
                installer.fetch_all(_asset_set(), target)
            self.assertEqual(ctx.exception.status, 500)
            self.assertEqual(ctx.exception.name, "flowbite.min.js")
            self.assertIsNone(AssetCache.check(target / LINUX_BINARY))

    def test_transport_error_is_download_error(self) -> None:
        routes = _routes(**{f"{BASE}/{LINUX_BINARY}": connection_error("timed out")})
        installer = AssetInstaller(RuntimeConfig(), FakeSession(routes))
        with tempfile.TemporaryDirectory() as td:
            with self.assertRaises(DownloadError) as ctx:
                installer.fetch_all(_asset_set(), Path(td) / "latest")
            self.assertIsNone(ctx.exception.status)
            self.assertIn("timed out", str(ctx.exception))

    def test_unsafe_asset_name_is_rejected(self) -> None:
        installer = AssetInstaller(RuntimeConfig(), FakeSession({}))
        with tempfile.TemporaryDirectory() as td:
            with self.assertRaises(DownloadError):
                installer.download_asset(Asset("../evil.css", f"{BASE}/evil.css"), Path(td))

    def test_existing_complete_entry_is_kept(self) -> None:
        installer = AssetInstaller(RuntimeConfig(), FakeSession(_routes()))
        with tempfile.TemporaryDirectory() as td:
            target = Path(td) / "latest"
            target.mkdir()
            (target / LINUX_BINARY).write_bytes(b"winner")
            result = installer.fetch_all(_asset_set(), target)
            self.assertTrue(result.from_cache)
            self.assertEqual((target / LINUX_BINARY).read_bytes(), b"winner")
            self.assertEqual([p.name for p in Path(td).iterdir()], ["latest"])


if __name__ == "__main__":
    unittest.main()
