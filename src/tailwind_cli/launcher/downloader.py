from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

import requests

from tailwind_cli.common.config import CachePaths, RuntimeConfig
from tailwind_cli.common.http import build_session
from tailwind_cli.common.types import DownloadResult, PlatformTarget, TailwindVersion
from tailwind_cli.launcher.asset_cache import AssetCache
from tailwind_cli.launcher.asset_installer import AssetInstaller
from tailwind_cli.launcher.platform_service import identify
from tailwind_cli.launcher.release_service import ReleaseService


log = logging.getLogger(__name__)


class Downloader:
    """Cache lookup first, then release resolution and a concurrent fetch on a miss."""

    def __init__(
        self,
        paths: CachePaths,
        runtime: RuntimeConfig,
        session: requests.Session | None = None,
        strict_mode: bool | None = None,
        platform_detector: Callable[[], PlatformTarget] = identify,
    ):
        self.paths = paths
        self.runtime = runtime
        self.session = session if session is not None else build_session(runtime)
        self.cache = AssetCache(paths)
        self.releases = ReleaseService(runtime, self.session)
        self.installer = AssetInstaller(runtime, self.session, strict_mode=strict_mode)
        self._platform_detector = platform_detector
        self._target: PlatformTarget | None = None

    @property
    def target(self) -> PlatformTarget:
        if self._target is None:
            self._target = self._platform_detector()
        return self._target

    def binary_name(self) -> str:
        """Release artifact name, ``<prefix>-<os>-<arch>[.exe]``."""
        return self.target.binary_name(self.runtime.binary_prefix)

    def expected_executable(self, version: TailwindVersion) -> Path:
        return self.cache.expected_executable(version, self.binary_name())

    def download(self, version: TailwindVersion | None = None) -> DownloadResult:
        version = version or TailwindVersion.latest()
        binary_name = self.binary_name()
        expected = self.cache.expected_executable(version, binary_name)

        # fast path, no api calls needed
        cached = self.cache.check(expected)
        if cached is not None:
            return cached

        self.paths.ensure_layout()
        resolved = self.releases.resolve(version, binary_name)
        log.debug("Downloading tailwindcss version %s", resolved.version)
        return self.installer.fetch_all(resolved, expected.parent)
