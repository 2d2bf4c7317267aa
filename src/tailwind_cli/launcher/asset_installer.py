from __future__ import annotations

import logging
import os
import shutil
import stat
from dataclasses import dataclass
from pathlib import Path

import requests

from tailwind_cli.common.concurrency import run_all_or_fail
from tailwind_cli.common.config import CachePaths, RuntimeConfig
from tailwind_cli.common.errors import ChecksumMismatchError, DownloadError
from tailwind_cli.common.hashing import sha256_file, strip_digest_prefix
from tailwind_cli.common.types import Asset, DownloadResult, ResolvedAssetSet
from tailwind_cli.launcher.asset_cache import AssetCache


log = logging.getLogger(__name__)

# Read and execute for owner and group, applied to every downloaded asset.
ASSET_FILE_MODE = stat.S_IRUSR | stat.S_IXUSR | stat.S_IRGRP | stat.S_IXGRP


@dataclass(frozen=True)
class DownloadedAsset:
    asset: Asset
    path: Path
    sha256: str


class AssetInstaller:
    def __init__(self, runtime: RuntimeConfig, session: requests.Session, strict_mode: bool | None = None):
        self.runtime = runtime
        self.session = session
        self.strict_mode = runtime.strict_mode if strict_mode is None else strict_mode

    @staticmethod
    def _safe_asset_filename(asset: Asset) -> str:
        raw = str(asset.name or "").strip()
        path = Path(raw)
        if (
            not raw
            or raw in {".", ".."}
            or path.is_absolute()
            or len(path.parts) != 1
            or any(ch in raw for ch in ("/", "\\"))
        ):
            raise DownloadError(asset.name, asset.url, reason=f"invalid asset name {asset.name!r}")
        return raw

    def download_asset(self, asset: Asset, directory: Path) -> Path:
        destination = directory / self._safe_asset_filename(asset)
        log.info("Downloading asset %s", asset.name)
        try:
            with self.session.get(
                asset.url,
                stream=True,
                timeout=self.runtime.request_timeout_seconds,
            ) as resp:
                if resp.status_code != 200:
                    raise DownloadError(asset.name, asset.url, status=resp.status_code)
                with destination.open("wb") as fh:
                    for chunk in resp.iter_content(chunk_size=self.runtime.download_chunk_size):
                        if chunk:
                            fh.write(chunk)
        except requests.RequestException as exc:
            raise DownloadError(asset.name, asset.url, reason=str(exc)) from exc
        os.chmod(destination, ASSET_FILE_MODE)
        return destination

    def verify_asset(self, asset: Asset, path: Path) -> str:
        digest = sha256_file(path, chunk_size=self.runtime.download_chunk_size)
        if not self.strict_mode:
            log.debug("Skipping checksum validation of %s as strict mode is disabled.", asset.name)
            return digest
        if asset.digest is None:
            log.debug("Skipping checksum validation of %s, no digest published.", asset.name)
            return digest
        if digest != strip_digest_prefix(asset.digest):
            raise ChecksumMismatchError(asset.name, digest, asset.digest)
        return digest

    def _fetch_one(self, asset: Asset, directory: Path) -> DownloadedAsset:
        path = self.download_asset(asset, directory)
        return DownloadedAsset(asset=asset, path=path, sha256=self.verify_asset(asset, path))

    def fetch_all(self, resolved: ResolvedAssetSet, target_directory: Path) -> DownloadResult:
        """Download every asset of ``resolved`` concurrently into ``target_directory``.

        Files land in a sibling staging directory that is renamed into place only
        after all downloads and checksum checks passed, so a failed run never
        leaves an executable at the cache path.
        """
        paths = CachePaths(cache_root=target_directory.parent)
        paths.ensure_layout()
        for stale in paths.sweep_stale_staging():
            log.info("Removed abandoned staging directory %s", stale)
        staging = paths.staging_dir(target_directory.name)
        staging.mkdir(parents=True, exist_ok=False)

        try:
            downloaded = run_all_or_fail(
                lambda asset: self._fetch_one(asset, staging),
                resolved.all_assets,
                max_workers=self.runtime.max_workers,
                thread_name_prefix="tailwind-cli-download",
            )
            AssetCache.write_manifest(staging, resolved, {d.asset.name: d.sha256 for d in downloaded})
            promoted = AssetCache.promote(staging, target_directory, resolved.primary.name)
        except Exception:
            log.debug("Fetch of tailwindcss %s failed, discarding %s", resolved.version, staging)
            shutil.rmtree(staging, ignore_errors=True)
            raise

        executable = target_directory / resolved.primary.name
        if not promoted:
            log.info("Another run already populated %s, reusing it", target_directory)
            cached = AssetCache.check(executable)
            if cached is not None:
                return cached

        log.info("Downloaded tailwindcss %s to %s", resolved.version, target_directory)
        return DownloadResult(
            version=resolved.version,
            executable=executable,
            stylesheets=tuple((a.name, target_directory / a.name) for a in resolved.stylesheets),
            scripts=tuple((a.name, target_directory / a.name) for a in resolved.scripts),
        )
