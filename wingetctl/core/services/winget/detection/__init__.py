"""
L3 Detection — ``__init__.py`` re-exports all detection functions.
"""

from wingetctl.core.services.winget.detection.locate import locate_winget  # noqa: F401
from wingetctl.core.services.winget.detection.network import (  # noqa: F401
    check_repository_reachable,
)
from wingetctl.core.services.winget.detection.readiness import ReadinessProbe  # noqa: F401
from wingetctl.core.services.winget.detection.state_detector import (  # noqa: F401
    DetectionError,
    StateDetector,
    UpgradeCheck,
)
