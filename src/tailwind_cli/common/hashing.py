from __future__ import annotations

import hashlib
from pathlib import Path


SHA256_PREFIX = "sha256:"


def sha256_file(path: Path, chunk_size: int = 1024 * 1024) -> str:
    h = hashlib.sha256()
    with path.open("rb") as fh:
        while True:
            data = fh.read(chunk_size)
            if not data:
                break
            h.update(data)
    return h.hexdigest()


def strip_digest_prefix(digest: str) -> str:
    if digest.startswith(SHA256_PREFIX):
        return digest[len(SHA256_PREFIX):]
    return digest
