"""
L0 Data — ``__init__.py`` re-exports all data constants.
"""

from wingetctl.core.services.winget.data.exit_codes import (  # noqa: F401
    EXIT_CODE_TABLE,
    normalize_exit_code,
)
from wingetctl.core.services.winget.data.payloads import (  # noqa: F401
    APP_INSTALLER_FAMILY,
    DEPENDENCY_PAYLOADS,
    MAIN_PAYLOAD,
    POWERSHELL,
    PSGALLERY_URL,
    Payload,
)
