from __future__ import annotations


class TailwindCLIError(RuntimeError):
    """Base class for every failure surfaced by tailwind_cli."""


class UnsupportedPlatformError(TailwindCLIError):
    def __init__(self, os_name: str, raw_arch: str | None):
        self.os_name = os_name
        self.raw_arch = raw_arch
        super().__init__(
            f"Unable to determine tailwindcss binary name for os={os_name} arch={raw_arch or 'unknown'}"
        )


class MetadataUnavailableError(TailwindCLIError):
    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Release metadata unavailable from {url}: {reason}")


class DownloadError(TailwindCLIError):
    def __init__(self, name: str, url: str, status: int | None = None, reason: str = ""):
        self.name = name
        self.url = url
        self.status = status
        self.reason = reason
        detail = f"HTTP {status}" if status is not None else (reason or "transport error")
        super().__init__(f"Download of {name} from {url} failed: {detail}")


class ChecksumMismatchError(TailwindCLIError):
    def __init__(self, name: str, local: str, remote: str):
        self.name = name
        self.local = local
        self.remote = remote
        super().__init__(f"Checksum mismatch for {name}: {local} != {remote}")


class ExecutionError(TailwindCLIError):
    def __init__(self, returncode: int, stderr: str | None):
        self.returncode = returncode
        self.stderr = stderr
        message = f"tailwindcss exited with code {returncode}"
        if stderr:
            message = f"{message}: {stderr.strip()}"
        super().__init__(message)
