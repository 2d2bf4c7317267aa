from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Iterable

from tailwind_cli.common.concurrency import run_all_or_fail
from tailwind_cli.common.config import RuntimeConfig
from tailwind_cli.common.errors import ExecutionError
from tailwind_cli.common.types import DownloadResult, RunOption


log = logging.getLogger(__name__)

OUTPUT_ASSET_DIR = "flowbite"
OUTPUT_THEMES_DIR = "themes"
STDERR_DRAIN_CHUNK = 64 * 1024


class ProcessService:
    def __init__(self, runtime: RuntimeConfig):
        self.runtime = runtime

    @staticmethod
    def build_command(
        executable: Path,
        input_path: str | Path,
        output_path: str | Path,
        options: Iterable[RunOption] = (),
    ) -> list[str]:
        cmd = [str(executable), "--input", str(input_path), "--output", str(output_path)]
        cmd.extend(option.flag for option in options)
        return cmd

    def run_tailwind(
        self,
        executable: Path,
        input_path: str | Path,
        output_path: str | Path,
        options: Iterable[RunOption] = (),
    ) -> None:
        cmd = self.build_command(executable, input_path, output_path, options)
        log.info("Running tailwindcss: %s", cmd)
        try:
            with subprocess.Popen(cmd, stdout=subprocess.DEVNULL, stderr=subprocess.PIPE, shell=False) as proc:
                stderr = proc.stderr.read(self.runtime.stderr_limit_bytes)
                # Keep the prefix, drain the rest.
                while proc.stderr.read(STDERR_DRAIN_CHUNK):
                    pass
                returncode = proc.wait()
        except OSError as exc:
            raise ExecutionError(-1, str(exc)) from exc

        if returncode != 0:
            text = stderr.decode("utf-8", errors="replace")
            log.error("tailwindcss exited with code %s: %s", returncode, text.strip())
            raise ExecutionError(returncode, text or None)

    def place_side_assets(self, assets: DownloadResult, output_path: str | Path) -> Path:
        """Copy stylesheets and scripts next to the output, replacing any previous copy.

        Layout: ``<dir>/flowbite/themes/<name>.css`` and ``<dir>/flowbite/<name>.js``.
        """
        asset_dir = Path(output_path).parent / OUTPUT_ASSET_DIR
        if asset_dir.exists():
            shutil.rmtree(asset_dir)
        themes_dir = asset_dir / OUTPUT_THEMES_DIR
        themes_dir.mkdir(parents=True, exist_ok=True)

        copies: list[tuple[Path, Path]] = [(src, themes_dir / name) for name, src in assets.stylesheets]
        copies.extend((src, asset_dir / name) for name, src in assets.scripts)

        def copy(job: tuple[Path, Path]) -> Path:
            src, dst = job
            shutil.copyfile(src, dst)
            return dst

        run_all_or_fail(
            copy,
            copies,
            max_workers=self.runtime.max_workers,
            thread_name_prefix="tailwind-cli-copy",
        )
        log.debug("Copied %d side assets to %s", len(copies), asset_dir)
        return asset_dir
