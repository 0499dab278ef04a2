"""
L5 Orchestration — ``__init__.py`` re-exports top-level coordinators.

These are the entry points that external code calls.
"""

from wingetctl.core.services.winget.orchestration.cascade import (  # noqa: F401
    AcquisitionCascade,
    CascadeReport,
    ToolUnavailableError,
    ensure_tool_ready,
)
from wingetctl.core.services.winget.orchestration.convergence import (  # noqa: F401
    ConvergenceEngine,
    ReconcileOptions,
    check_compliance,
    reconcile,
)
