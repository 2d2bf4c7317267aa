"""Host platform detection for release artifact naming."""

from __future__ import annotations

import logging
import platform
import subprocess
import sys

from tailwind_cli.common.errors import UnsupportedPlatformError
from tailwind_cli.common.types import PlatformTarget


log = logging.getLogger(__name__)

ARCH_PROBE_COMMAND = ("uname", "-m")
ARCH_PROBE_OUTPUT_LIMIT = 32
ARCH_PROBE_TIMEOUT_SECONDS = 10

_ARCH_ALIASES: dict[str, str] = {
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv7": "armv7",
    "x86_64": "x86_64",
}


def normalize_arch(raw: str | None) -> str | None:
    if raw is None:
        return None
    return _ARCH_ALIASES.get(raw.strip())


def detect_os(system: str | None = None) -> str:
    s = (system if system is not None else sys.platform).lower()
    if s.startswith("win"):
        return "windows"
    if s.startswith("linux"):
        return "linux"
    # darwin and anything unrecognized share the macOS artifacts.
    return "macos"


def probe_arch() -> str | None:
    """Raw architecture string from ``uname -m``, or None when the probe is unusable."""
    try:
        completed = subprocess.run(
            list(ARCH_PROBE_COMMAND),
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            timeout=ARCH_PROBE_TIMEOUT_SECONDS,
            check=False,
            shell=False,
        )
    except FileNotFoundError:
        log.debug("uname is not available, falling back to platform.machine()")
        return platform.machine() or None
    except (OSError, subprocess.TimeoutExpired) as exc:
        log.debug("Architecture probe failed: %s", exc)
        return None

    if completed.returncode != 0:
        log.debug("Architecture probe exited with code %s", completed.returncode)
        return None
    output = completed.stdout[:ARCH_PROBE_OUTPUT_LIMIT].decode("utf-8", errors="replace").strip()
    return output or None


def identify(system: str | None = None, raw_arch: str | None = None) -> PlatformTarget:
    os_name = detect_os(system)
    raw = raw_arch if raw_arch is not None else probe_arch()
    arch = normalize_arch(raw)
    if arch is None:
        raise UnsupportedPlatformError(os_name, raw)
    log.debug("Detected platform %s/%s (raw arch %r)", os_name, arch, raw)
    return PlatformTarget(os_name=os_name, arch=arch)
