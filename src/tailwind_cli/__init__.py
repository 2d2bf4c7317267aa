from tailwind_cli.common.errors import (
    ChecksumMismatchError,
    DownloadError,
    ExecutionError,
    MetadataUnavailableError,
    TailwindCLIError,
    UnsupportedPlatformError,
)
from tailwind_cli.common.types import RunOption, TailwindVersion
from tailwind_cli.tailwind import TailwindCLI

__version__ = "0.3.0"

__all__ = [
    "TailwindCLI",
    "TailwindVersion",
    "RunOption",
    "TailwindCLIError",
    "UnsupportedPlatformError",
    "MetadataUnavailableError",
    "DownloadError",
    "ChecksumMismatchError",
    "ExecutionError",
]
