from __future__ import annotations

import json
import logging
import os
import shutil
from pathlib import Path
from typing import Any

from tailwind_cli.common.config import CachePaths
from tailwind_cli.common.types import DownloadResult, ResolvedAssetSet, TailwindVersion
from tailwind_cli.launcher.release_service import SCRIPT, STYLESHEET, classify_asset_name


log = logging.getLogger(__name__)

MANIFEST_FILE_NAME = "cache_manifest.v1.json"


class AssetCache:
    def __init__(self, paths: CachePaths):
        self.paths = paths

    def entry_dir(self, version: TailwindVersion) -> Path:
        return self.paths.entry_dir(version.cache_key)

    def expected_executable(self, version: TailwindVersion, binary_name: str) -> Path:
        return self.entry_dir(version) / binary_name

    @staticmethod
    def check(expected_path: Path) -> DownloadResult | None:
        """Reuse an entry when its executable exists; files on disk are trusted as-is."""
        if not expected_path.is_file():
            return None

        entry = expected_path.parent
        stylesheets: list[tuple[str, Path]] = []
        scripts: list[tuple[str, Path]] = []
        for child in sorted(entry.iterdir(), key=lambda p: p.name):
            if child.name == expected_path.name or not child.is_file():
                continue
            kind = classify_asset_name(child.name, expected_path.name)
            if kind == STYLESHEET:
                stylesheets.append((child.name, child))
            elif kind == SCRIPT:
                scripts.append((child.name, child))

        manifest = AssetCache.read_manifest(entry)
        version = str(manifest.get("version") or entry.name) if manifest else entry.name
        log.debug("Using cached tailwindcss %s from %s", version, entry)
        return DownloadResult(
            version=version,
            executable=expected_path,
            stylesheets=tuple(stylesheets),
            scripts=tuple(scripts),
            from_cache=True,
        )

    @staticmethod
    def read_manifest(entry: Path) -> dict[str, Any] | None:
        path = entry / MANIFEST_FILE_NAME
        if not path.exists():
            return None
        try:
            with path.open("r", encoding="utf-8-sig") as fh:
                raw = json.load(fh)
        except (OSError, ValueError) as exc:
            log.debug("Ignoring unreadable cache manifest %s: %s", path, exc)
            return None
        return raw if isinstance(raw, dict) else None

    @staticmethod
    def write_manifest(entry: Path, resolved: ResolvedAssetSet, checksums: dict[str, str]) -> None:
        path = entry / MANIFEST_FILE_NAME
        tmp = path.with_suffix(".tmp")
        payload = {
            "version": resolved.version,
            "executable": resolved.primary.name,
            "stylesheets": [a.name for a in resolved.stylesheets],
            "scripts": [a.name for a in resolved.scripts],
            "sha256": checksums,
        }
        with tmp.open("w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2, sort_keys=True)
        tmp.replace(path)

    @staticmethod
    def promote(staging: Path, entry: Path, binary_name: str) -> bool:
        """Move a fully verified staging directory into place.

        Returns False when a complete entry already exists; the staging copy is dropped.
        """
        if (entry / binary_name).is_file():
            shutil.rmtree(staging, ignore_errors=True)
            return False
        if entry.exists():
            # Leftover without an executable cannot be a cache hit.
            shutil.rmtree(entry)
        try:
            os.replace(staging, entry)
        except OSError:
            if (entry / binary_name).is_file():
                shutil.rmtree(staging, ignore_errors=True)
                return False
            raise
        return True
