"""
L0 Data — Known winget / installer exit codes.

Pure data. No logic beyond the signed/unsigned conversion helper.

winget reports failures as HRESULTs in the 0x8A15xxxx facility. On
Windows ``GetExitCodeProcess`` hands them back as an unsigned DWORD,
while PowerShell's ``$LASTEXITCODE`` shows the signed form; the table
is keyed by the signed 32-bit value and lookups normalise first.

This is a short enumerated table, not an exhaustive range: any code
missing from it is unknown and must never be read as success.
"""

from __future__ import annotations

from wingetctl.core.models.outcome import ExitCategory


def _hresult(value: int) -> int:
    """Signed 32-bit form of an HRESULT literal like ``0x8A150014``."""
    return value - (1 << 32) if value & 0x80000000 else value


# code → (category, symbolic name)
EXIT_CODE_TABLE: dict[int, tuple[ExitCategory, str]] = {
    0: (ExitCategory.SUCCESS, "S_OK"),

    # Platform installer (MSI) codes that mean "done, reboot pending"
    1641: (ExitCategory.SUCCESS_REBOOT_REQUIRED, "ERROR_SUCCESS_REBOOT_INITIATED"),
    3010: (ExitCategory.SUCCESS_REBOOT_REQUIRED, "ERROR_SUCCESS_REBOOT_REQUIRED"),

    # winget sentinels
    _hresult(0x8A150014): (ExitCategory.NO_RESULTS_FOUND, "APPINSTALLER_CLI_ERROR_NO_APPLICATIONS_FOUND"),
    _hresult(0x8A150015): (ExitCategory.MULTIPLE_MATCHES, "APPINSTALLER_CLI_ERROR_MULTIPLE_APPLICATIONS_FOUND"),
    _hresult(0x8A15002B): (ExitCategory.UPDATE_NOT_APPLICABLE, "APPINSTALLER_CLI_ERROR_UPDATE_NOT_APPLICABLE"),
    _hresult(0x8A150061): (ExitCategory.ALREADY_INSTALLED_CONFLICT, "APPINSTALLER_CLI_ERROR_PACKAGE_ALREADY_INSTALLED"),
    _hresult(0x8A150109): (ExitCategory.SUCCESS_REBOOT_REQUIRED, "APPINSTALLER_CLI_ERROR_INSTALL_REBOOT_REQUIRED_TO_FINISH"),
    _hresult(0x8A15010B): (ExitCategory.SUCCESS_REBOOT_REQUIRED, "APPINSTALLER_CLI_ERROR_INSTALL_REBOOT_INITIATED"),
    _hresult(0x8A15010D): (ExitCategory.ALREADY_INSTALLED_CONFLICT, "APPINSTALLER_CLI_ERROR_INSTALL_ALREADY_INSTALLED"),
    _hresult(0x8A15010E): (ExitCategory.DOWNGRADE_CONFLICT, "APPINSTALLER_CLI_ERROR_INSTALL_DOWNGRADE"),
}

# Convenience names for tests and diagnostics
NO_APPLICATIONS_FOUND = _hresult(0x8A150014)
MULTIPLE_APPLICATIONS_FOUND = _hresult(0x8A150015)
UPDATE_NOT_APPLICABLE = _hresult(0x8A15002B)
PACKAGE_ALREADY_INSTALLED = _hresult(0x8A150061)
INSTALL_ALREADY_INSTALLED = _hresult(0x8A15010D)
INSTALL_DOWNGRADE = _hresult(0x8A15010E)


def normalize_exit_code(code: int) -> int:
    """Fold an unsigned DWORD exit code into its signed 32-bit form."""
    if 0x80000000 <= code <= 0xFFFFFFFF:
        return code - (1 << 32)
    return code
