from __future__ import annotations

import os
import shutil
import tempfile
import time
import uuid
from dataclasses import dataclass
from pathlib import Path


STAGING_PREFIX = ".staging-"
STALE_STAGING_SECONDS = 6 * 60 * 60


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if not raw:
        return default
    return raw not in {"0", "false", "no", "off"}


@dataclass(frozen=True)
class CachePaths:
    cache_root: Path

    @classmethod
    def default(cls) -> "CachePaths":
        override_root = os.environ.get("TAILWIND_CLI_CACHE_DIR", "").strip()
        if override_root:
            return cls(cache_root=Path(override_root))
        return cls(cache_root=Path(tempfile.gettempdir()) / "tailwind-cli")

    def entry_dir(self, cache_key: str) -> Path:
        return self.cache_root / cache_key

    def staging_dir(self, cache_key: str) -> Path:
        # Sibling of the entry so the final rename stays on one filesystem.
        return self.cache_root / f"{STAGING_PREFIX}{cache_key}-{uuid.uuid4().hex[:12]}"

    def ensure_layout(self) -> None:
        self.cache_root.mkdir(parents=True, exist_ok=True)

    def sweep_stale_staging(self, max_age_seconds: float = STALE_STAGING_SECONDS) -> list[Path]:
        """Remove staging dirs left behind by killed runs. Recent ones may belong to a live run."""
        if not self.cache_root.is_dir():
            return []
        cutoff = time.time() - max_age_seconds
        removed: list[Path] = []
        for child in self.cache_root.iterdir():
            if not child.name.startswith(STAGING_PREFIX) or not child.is_dir():
                continue
            try:
                if child.stat().st_mtime > cutoff:
                    continue
            except OSError:
                continue
            shutil.rmtree(child, ignore_errors=True)
            removed.append(child)
        return removed


@dataclass(frozen=True)
class RuntimeConfig:
    release_repo: str = "dobicinaitis/tailwind-cli-extra"
    api_base: str = "https://api.github.com"
    download_base: str = "https://github.com"
    binary_prefix: str = "tailwindcss-extra"
    user_agent: str = "com.siebenwurst.tailwind-cli"
    request_timeout_seconds: int = 30
    metadata_limit_bytes: int = 1024 * 1024
    metadata_scan_window: int = 2000
    download_chunk_size: int = 1024 * 1024
    max_retries: int = 0
    max_workers: int = 8
    strict_mode: bool = True
    stderr_limit_bytes: int = 1024

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        return cls(
            release_repo=os.environ.get("TAILWIND_CLI_RELEASE_REPO", "dobicinaitis/tailwind-cli-extra"),
            api_base=os.environ.get("TAILWIND_CLI_API_BASE", "https://api.github.com").rstrip("/"),
            download_base=os.environ.get("TAILWIND_CLI_DOWNLOAD_BASE", "https://github.com").rstrip("/"),
            binary_prefix=os.environ.get("TAILWIND_CLI_BINARY_PREFIX", "tailwindcss-extra"),
            user_agent=os.environ.get("TAILWIND_CLI_USER_AGENT", "com.siebenwurst.tailwind-cli"),
            request_timeout_seconds=int(os.environ.get("TAILWIND_CLI_TIMEOUT", "30")),
            metadata_limit_bytes=int(os.environ.get("TAILWIND_CLI_METADATA_LIMIT", str(1024 * 1024))),
            metadata_scan_window=int(os.environ.get("TAILWIND_CLI_SCAN_WINDOW", "2000")),
            download_chunk_size=int(os.environ.get("TAILWIND_CLI_DOWNLOAD_CHUNK", str(1024 * 1024))),
            max_retries=int(os.environ.get("TAILWIND_CLI_MAX_RETRIES", "0")),
            max_workers=int(os.environ.get("TAILWIND_CLI_MAX_WORKERS", "8")),
            strict_mode=_env_flag("TAILWIND_CLI_STRICT", True),
            stderr_limit_bytes=int(os.environ.get("TAILWIND_CLI_STDERR_LIMIT", "1024")),
        )

    def metadata_url(self, version_path: str) -> str:
        return f"{self.api_base}/repos/{self.release_repo}/releases/{version_path}"

    def release_download_url(self, download_path: str, name: str) -> str:
        return f"{self.download_base}/{self.release_repo}/releases/{download_path}/{name}"
