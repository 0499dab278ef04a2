"""
L4 Execution — Local download cache for bootstrap payloads.

Payloads are cached by filename after the first download so repeat runs
are network-free. A present file is trusted as-is: there is no checksum
or freshness re-validation and no manifest.
"""

from __future__ import annotations

import os
import shutil
import sys
import urllib.request
from pathlib import Path

from wingetctl.core.observability.logging_config import RunLogger
from wingetctl.core.services.winget.data.payloads import Payload


class DownloadError(Exception):
    """A payload could not be fetched into the cache."""


def default_cache_dir() -> Path:
    """``WGC_CACHE_DIR``, else ProgramData on Windows, else ``~/.cache``."""
    override = os.environ.get("WGC_CACHE_DIR")
    if override:
        return Path(override)
    if sys.platform == "win32":
        base = os.environ.get("ProgramData", r"C:\ProgramData")
        return Path(base) / "wingetctl" / "cache"
    return Path.home() / ".cache" / "wingetctl"


class DownloadCache:
    """Filename-keyed payload cache.

    Args:
        cache_dir: Cache directory (created on first fetch).
        log: Run logger.
        timeout: Socket timeout per read, in seconds.
    """

    def __init__(self, cache_dir: Path, log: RunLogger, timeout: int = 60):
        self.cache_dir = Path(cache_dir)
        self.log = log.child("cache")
        self.timeout = timeout

    def path_for(self, payload: Payload) -> Path:
        return self.cache_dir / payload.filename

    def has(self, payload: Payload) -> bool:
        return self.path_for(payload).is_file()

    def fetch(self, payload: Payload) -> Path:
        """Return the cached path for ``payload``, downloading it if missing.

        Raises:
            DownloadError: the download failed. No partial file is left behind.
        """
        dest = self.path_for(payload)
        if dest.is_file():
            self.log.info("Using cached %s: %s", payload.name, dest)
            return dest

        self.cache_dir.mkdir(parents=True, exist_ok=True)
        partial = dest.with_name(dest.name + ".part")
        self.log.info("Downloading %s from %s", payload.name, payload.url)

        try:
            req = urllib.request.Request(
                payload.url,
                headers={"User-Agent": "wingetctl/1.0"},
            )
            with urllib.request.urlopen(req, timeout=self.timeout) as resp, open(partial, "wb") as fh:
                shutil.copyfileobj(resp, fh)
            partial.replace(dest)
        except Exception as exc:
            partial.unlink(missing_ok=True)
            raise DownloadError(f"Failed to download {payload.name}: {exc}") from exc

        self.log.info("Cached %s (%d bytes)", payload.filename, dest.stat().st_size)
        return dest
