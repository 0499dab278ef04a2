"""
L3 Detection — Repository reachability probing.

Read-only network check used by managed repair to fail fast when the
package repository is unreachable or blocked.
"""

from __future__ import annotations

import time
import urllib.request
from typing import Any


def check_repository_reachable(
    url: str,
    timeout: int = 5,
) -> dict[str, Any]:
    """Probe a package repository URL for reachability.

    Single attempt, no retry.

    Returns::

        {"reachable": True, "url": "https://...", "status": 200, "latency_ms": 42}
        or
        {"reachable": False, "url": "https://...", "error": "timed out", "latency_ms": 5003}
    """
    start = time.monotonic()

    try:
        req = urllib.request.Request(
            url,
            method="HEAD",
            headers={"User-Agent": "wingetctl/1.0"},
        )
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            elapsed = int((time.monotonic() - start) * 1000)
            return {
                "reachable": True,
                "url": url,
                "status": resp.getcode(),
                "latency_ms": elapsed,
            }
    except Exception as exc:
        elapsed = int((time.monotonic() - start) * 1000)
        return {
            "reachable": False,
            "url": url,
            "error": str(exc)[:200],
            "latency_ms": elapsed,
        }
