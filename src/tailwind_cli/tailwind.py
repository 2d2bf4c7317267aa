from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable

import requests

from tailwind_cli.common.config import CachePaths, RuntimeConfig
from tailwind_cli.common.types import DownloadResult, PlatformTarget, RunOption, TailwindVersion
from tailwind_cli.launcher.downloader import Downloader
from tailwind_cli.launcher.platform_service import identify
from tailwind_cli.launcher.process_service import ProcessService


log = logging.getLogger(__name__)


class TailwindCLI:
    """Fetches the tailwindcss executable on demand and runs it.

    ``directory`` given to :meth:`run` or :meth:`download` overrides the cache root,
    which otherwise comes from ``TAILWIND_CLI_CACHE_DIR`` or the temp directory.
    ``strict_mode`` left as None follows ``RuntimeConfig.strict_mode``.
    """

    def __init__(
        self,
        version: TailwindVersion | str | None = None,
        session: requests.Session | None = None,
        strict_mode: bool | None = None,
        runtime: RuntimeConfig | None = None,
        platform_detector: Callable[[], PlatformTarget] = identify,
    ):
        if not isinstance(version, TailwindVersion):
            version = TailwindVersion.parse(version)
        self.version = version
        self.runtime = runtime or RuntimeConfig.from_env()
        self.strict_mode = strict_mode
        self.session = session
        self.platform_detector = platform_detector
        self.process = ProcessService(self.runtime)

    def _downloader(self, directory: str | Path | None) -> Downloader:
        paths = CachePaths(cache_root=Path(directory)) if directory is not None else CachePaths.default()
        return Downloader(
            paths,
            self.runtime,
            session=self.session,
            strict_mode=self.strict_mode,
            platform_detector=self.platform_detector,
        )

    def download(self, directory: str | Path | None = None) -> DownloadResult:
        return self._downloader(directory).download(self.version)

    def run(
        self,
        input: str | Path,
        output: str | Path,
        directory: str | Path | None = None,
        options: Iterable[RunOption] = (),
    ) -> DownloadResult:
        assets = self.download(directory)
        self.process.run_tailwind(assets.executable, input, output, options)
        self.process.place_side_assets(assets, output)
        return assets
