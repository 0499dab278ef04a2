"""
L3 Detection — Locate winget.exe.

Pure lookup, no decisions: explicit path, then PATH, then the per-user
WindowsApps alias, then the newest App Installer package directory
(the only place SYSTEM can see it).
"""

from __future__ import annotations

import glob
import os
import shutil
from pathlib import Path

from wingetctl.core.services.winget.data.payloads import APP_INSTALLER_DIR_GLOB


def _package_version_key(path: str) -> tuple[int, ...]:
    """Sort key from the version segment of ``Name_1.22.10582.0_x64__id``."""
    parts = Path(path).parent.name.split("_")
    if len(parts) < 2:
        return ()
    return tuple(int(p) for p in parts[1].split(".") if p.isdigit())


def locate_winget(explicit: str | None = None) -> str | None:
    """Return a candidate path to ``winget.exe``, or None.

    The returned path is a candidate only; the readiness probe decides
    whether it actually works.
    """
    if explicit:
        return explicit

    found = shutil.which("winget")
    if found:
        return found

    local_app_data = os.environ.get("LOCALAPPDATA")
    if local_app_data:
        alias = Path(local_app_data) / "Microsoft" / "WindowsApps" / "winget.exe"
        if os.path.lexists(alias):
            return str(alias)

    program_files = os.environ.get("ProgramFiles", r"C:\Program Files")
    pattern = os.path.join(program_files, "WindowsApps", APP_INSTALLER_DIR_GLOB, "winget.exe")
    candidates = sorted(glob.glob(pattern), key=_package_version_key)
    if candidates:
        return candidates[-1]

    return None
