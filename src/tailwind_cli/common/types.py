from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar


@dataclass(frozen=True)
class TailwindVersion:
    """Release selector: ``latest`` when ``value`` is None, otherwise a pinned version."""

    value: str | None = None

    LATEST_KEY: ClassVar[str] = "latest"

    @classmethod
    def latest(cls) -> "TailwindVersion":
        return cls(None)

    @classmethod
    def fixed(cls, version: str) -> "TailwindVersion":
        cleaned = str(version).strip()
        if cleaned[:1] in {"v", "V"}:
            cleaned = cleaned[1:]
        if not cleaned:
            raise ValueError("Pinned tailwindcss version cannot be empty.")
        return cls(cleaned)

    @classmethod
    def parse(cls, raw: str | None) -> "TailwindVersion":
        text = str(raw or "").strip()
        if not text or text.lower() == cls.LATEST_KEY:
            return cls.latest()
        return cls.fixed(text)

    @property
    def is_latest(self) -> bool:
        return self.value is None

    @property
    def cache_key(self) -> str:
        return self.LATEST_KEY if self.value is None else f"v{self.value}"

    @property
    def metadata_path(self) -> str:
        return self.cache_key

    @property
    def download_path(self) -> str:
        if self.value is None:
            return "latest/download"
        return f"download/v{self.value}"

    def __str__(self) -> str:
        return self.cache_key


@dataclass(frozen=True)
class PlatformTarget:
    os_name: str
    arch: str

    @property
    def executable_suffix(self) -> str:
        return ".exe" if self.os_name == "windows" else ""

    def binary_name(self, prefix: str) -> str:
        return f"{prefix}-{self.os_name}-{self.arch}{self.executable_suffix}"


@dataclass(frozen=True)
class Asset:
    name: str
    url: str
    digest: str | None = None


@dataclass(frozen=True)
class ResolvedAssetSet:
    version: str
    primary: Asset
    stylesheets: tuple[Asset, ...] = ()
    scripts: tuple[Asset, ...] = ()

    @property
    def all_assets(self) -> tuple[Asset, ...]:
        return (self.primary, *self.stylesheets, *self.scripts)


@dataclass(frozen=True)
class DownloadResult:
    version: str
    executable: Path
    stylesheets: tuple[tuple[str, Path], ...] = ()
    scripts: tuple[tuple[str, Path], ...] = ()
    from_cache: bool = False


@dataclass(frozen=True)
class RunOption:
    flag: str

    WATCH: ClassVar["RunOption"]
    MINIFY: ClassVar["RunOption"]
    OPTIMIZE: ClassVar["RunOption"]
    MAP: ClassVar["RunOption"]

    @classmethod
    def custom(cls, flag: str) -> "RunOption":
        return cls(str(flag))


# Watch for changes and rebuild as needed.
RunOption.WATCH = RunOption("--watch")
# Optimize and minify the output.
RunOption.MINIFY = RunOption("--minify")
# Optimize the output without minifying.
RunOption.OPTIMIZE = RunOption("--optimize")
# Generate a source map.
RunOption.MAP = RunOption("--map")
