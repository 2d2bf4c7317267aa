"""Release metadata lookup and asset classification.

The release API normally answers with a JSON document, which is parsed
directly. Bodies that are not valid JSON (truncated at the read cap, proxies
injecting markup, and so on) go through a tolerant scan that looks for each
asset name and then for its ``digest`` and ``browser_download_url`` a bounded
number of characters further on.

Whenever no release tag or no primary executable can be found the resolver
answers with a statically constructed asset set pointing at the release
download URLs, so a build keeps working against the probable current release.
"""

from __future__ import annotations

import json
import logging
import re

import requests

from tailwind_cli.common.config import RuntimeConfig
from tailwind_cli.common.errors import MetadataUnavailableError
from tailwind_cli.common.types import Asset, ResolvedAssetSet, TailwindVersion


log = logging.getLogger(__name__)

PRIMARY = "primary"
STYLESHEET = "stylesheet"
SCRIPT = "script"

FALLBACK_STYLESHEETS: tuple[str, ...] = ("themes.css", "default.css")
FALLBACK_SCRIPTS: tuple[str, ...] = ("flowbite.min.js",)

_SCRIPT_NAME = re.compile(r"\.js(\.|$)")
_TAG_NAME = re.compile(r'"tag_name"\s*:\s*"(?P<version>[^"]+)"')
_ASSET_NAME = re.compile(r'"name"\s*:\s*"(?P<filename>[^"]+)"')
_DIGEST = re.compile(r'"digest"\s*:\s*"(?P<hash>[^"]+)"')
_DOWNLOAD_URL = re.compile(r'"browser_download_url"\s*:\s*"(?P<url>[^"]+)"')


def classify_asset_name(name: str, binary_name: str) -> str | None:
    if name == binary_name:
        return PRIMARY
    if name.endswith(".css"):
        return STYLESHEET
    if _SCRIPT_NAME.search(name):
        return SCRIPT
    return None


def _clean_digest(value: object) -> str | None:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def parse_release_json(text: str) -> tuple[str | None, list[Asset]] | None:
    """Structured parse. Returns None when ``text`` is not a JSON object."""
    try:
        data = json.loads(text)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None

    tag = data.get("tag_name")
    tag = tag if isinstance(tag, str) and tag.strip() else None

    assets: list[Asset] = []
    raw_assets = data.get("assets")
    if isinstance(raw_assets, list):
        for item in raw_assets:
            if not isinstance(item, dict):
                continue
            name = item.get("name")
            url = item.get("browser_download_url")
            if not isinstance(name, str) or not name or not isinstance(url, str) or not url:
                continue
            assets.append(Asset(name=name, url=url, digest=_clean_digest(item.get("digest"))))
    return tag, assets


def scan_release_text(text: str, window: int = 2000) -> tuple[str | None, list[Asset]]:
    """Best-effort field extraction for payloads that are not valid JSON."""
    tag_match = _TAG_NAME.search(text)
    tag = tag_match.group("version") if tag_match else None

    assets: list[Asset] = []
    for name_match in _ASSET_NAME.finditer(text):
        start = name_match.start()
        part = text[start : start + window + 1]
        url_match = _DOWNLOAD_URL.search(part)
        if url_match is None:
            continue
        digest_match = _DIGEST.search(part)
        assets.append(
            Asset(
                name=name_match.group("filename"),
                url=url_match.group("url"),
                digest=_clean_digest(digest_match.group("hash")) if digest_match else None,
            )
        )
    return tag, assets


class ReleaseService:
    def __init__(self, runtime: RuntimeConfig, session: requests.Session):
        self.runtime = runtime
        self.session = session

    def fallback_asset_set(self, version: TailwindVersion, binary_name: str) -> ResolvedAssetSet:
        def asset(name: str) -> Asset:
            return Asset(name=name, url=self.runtime.release_download_url(version.download_path, name))

        return ResolvedAssetSet(
            version=TailwindVersion.LATEST_KEY,
            primary=asset(binary_name),
            stylesheets=tuple(asset(n) for n in FALLBACK_STYLESHEETS),
            scripts=tuple(asset(n) for n in FALLBACK_SCRIPTS),
        )

    def fetch_metadata_text(self, version: TailwindVersion) -> str:
        url = self.runtime.metadata_url(version.metadata_path)
        log.debug("Downloading metadata from %s", url)
        headers = {
            "Content-Type": "application/json",
            "User-Agent": self.runtime.user_agent,
        }
        try:
            with self.session.get(
                url,
                headers=headers,
                timeout=self.runtime.request_timeout_seconds,
                stream=True,
            ) as resp:
                if resp.status_code != 200:
                    log.debug("Release metadata request answered HTTP %s", resp.status_code)
                body = bytearray()
                limit = self.runtime.metadata_limit_bytes
                for chunk in resp.iter_content(chunk_size=64 * 1024):
                    if not chunk:
                        continue
                    body.extend(chunk)
                    if len(body) >= limit:
                        log.debug("Release metadata exceeds %d bytes, truncating", limit)
                        del body[limit:]
                        break
        except requests.RequestException as exc:
            raise MetadataUnavailableError(url, str(exc)) from exc
        return body.decode("utf-8", errors="replace")

    def parse(self, text: str, version: TailwindVersion, binary_name: str) -> ResolvedAssetSet:
        parsed = parse_release_json(text)
        if parsed is None:
            log.debug("Release metadata is not valid JSON, scanning raw text")
            parsed = scan_release_text(text, window=self.runtime.metadata_scan_window)
        tag, assets = parsed

        if tag is None:
            log.info("Unexpected metadata response, tag_name not found, continuing with 'latest'")
            return self.fallback_asset_set(version, binary_name)

        primary: Asset | None = None
        stylesheets: list[Asset] = []
        scripts: list[Asset] = []
        seen: set[str] = set()
        for asset in assets:
            # Each name maps to one file on disk.
            if asset.name in seen:
                continue
            seen.add(asset.name)
            kind = classify_asset_name(asset.name, binary_name)
            if kind == PRIMARY:
                if primary is None:
                    primary = asset
            elif kind == STYLESHEET:
                stylesheets.append(asset)
            elif kind == SCRIPT:
                scripts.append(asset)
            else:
                continue
            if asset.digest is None:
                log.info("Release asset %s has no digest; it will not be verified", asset.name)

        if primary is None:
            log.info("Release %s has no asset named %s, continuing with fallback", tag, binary_name)
            return self.fallback_asset_set(version, binary_name)

        return ResolvedAssetSet(
            version=tag,
            primary=primary,
            stylesheets=tuple(stylesheets),
            scripts=tuple(scripts),
        )

    def resolve(self, version: TailwindVersion, binary_name: str) -> ResolvedAssetSet:
        text = self.fetch_metadata_text(version)
        resolved = self.parse(text, version, binary_name)
        log.debug(
            "Resolved tailwindcss %s: %s + %d stylesheets + %d scripts",
            resolved.version,
            resolved.primary.name,
            len(resolved.stylesheets),
            len(resolved.scripts),
        )
        return resolved
