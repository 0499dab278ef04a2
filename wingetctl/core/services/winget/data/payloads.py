"""
L0 Data — Acquisition constants: package family, repositories, payloads.

Pure data. No logic.
"""

from __future__ import annotations

from typing import NamedTuple

# The App Installer package that ships winget.exe
APP_INSTALLER_FAMILY = "Microsoft.DesktopAppInstaller_8wekyb3d8bbwe"
APP_INSTALLER_DIR_GLOB = "Microsoft.DesktopAppInstaller_*_x64__8wekyb3d8bbwe"

# Managed repair pulls its client module from here
PSGALLERY_URL = "https://www.powershellgallery.com/api/v2"
WINGET_CLIENT_MODULE = "Microsoft.WinGet.Client"
NUGET_PROVIDER_MIN_VERSION = "2.8.5.201"


class Payload(NamedTuple):
    """A downloadable installer payload. ``filename`` is the cache key."""

    name: str
    url: str
    filename: str


# Installed in this order: dependencies first, the main bundle last.
DEPENDENCY_PAYLOADS: tuple[Payload, ...] = (
    Payload(
        name="VCLibs",
        url="https://aka.ms/Microsoft.VCLibs.x64.14.00.Desktop.appx",
        filename="Microsoft.VCLibs.x64.14.00.Desktop.appx",
    ),
    Payload(
        name="UI.Xaml",
        url="https://github.com/microsoft/microsoft-ui-xaml/releases/download/v2.8.6/Microsoft.UI.Xaml.2.8.x64.appx",
        filename="Microsoft.UI.Xaml.2.8.x64.appx",
    ),
)

MAIN_PAYLOAD = Payload(
    name="App Installer",
    url="https://aka.ms/getwinget",
    filename="Microsoft.DesktopAppInstaller_8wekyb3d8bbwe.msixbundle",
)

# PowerShell invocation prefix used by every strategy
POWERSHELL: list[str] = [
    "powershell.exe",
    "-NoProfile",
    "-NonInteractive",
    "-ExecutionPolicy",
    "Bypass",
]
