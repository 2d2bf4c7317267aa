from tailwind_cli.common.config import CachePaths, RuntimeConfig
from tailwind_cli.common.types import Asset, DownloadResult, PlatformTarget, ResolvedAssetSet

__all__ = [
    "CachePaths",
    "RuntimeConfig",
    "Asset",
    "DownloadResult",
    "PlatformTarget",
    "ResolvedAssetSet",
]
