"""
winget service — package re-exports.

Each symbol lives in its single-responsibility module inside the
appropriate onion layer (data → domain → detection → execution →
orchestration)::

    from wingetctl.core.services.winget import ensure_tool_ready, reconcile
"""

# ── L0: Data ──
from wingetctl.core.services.winget.data.exit_codes import (  # noqa: F401
    EXIT_CODE_TABLE,
    normalize_exit_code,
)

# ── L1: Domain ──
from wingetctl.core.services.winget.domain.convergence_plan import (  # noqa: F401
    MAX_PINNED_ATTEMPTS,
    plan_next_action,
)
from wingetctl.core.services.winget.domain.outcome_classifier import (  # noqa: F401
    classify_exit_code,
    describe_exit_code,
)

# ── L3: Detection ──
from wingetctl.core.services.winget.detection.readiness import ReadinessProbe  # noqa: F401
from wingetctl.core.services.winget.detection.state_detector import (  # noqa: F401
    DetectionError,
    StateDetector,
)

# ── L4: Execution ──
from wingetctl.core.services.winget.execution.hooks import HookResult, HookRunner  # noqa: F401
from wingetctl.core.services.winget.execution.source_init import SourceInitializer  # noqa: F401

# ── L5: Orchestration ──
from wingetctl.core.services.winget.orchestration.cascade import (  # noqa: F401
    AcquisitionCascade,
    ToolUnavailableError,
    ensure_tool_ready,
)
from wingetctl.core.services.winget.orchestration.convergence import (  # noqa: F401
    ConvergenceEngine,
    ReconcileOptions,
    check_compliance,
    reconcile,
)
