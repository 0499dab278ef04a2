"""
L1 Domain — ``__init__.py`` re-exports all pure domain functions.

These functions have NO subprocess calls, NO filesystem access,
NO network calls. Pure input→output.
"""

from wingetctl.core.services.winget.domain.convergence_plan import (  # noqa: F401
    MAX_PINNED_ATTEMPTS,
    Decision,
    plan_next_action,
)
from wingetctl.core.services.winget.domain.listing_parser import (  # noqa: F401
    find_listing_row,
    parse_available_version,
    parse_listing_row,
    parse_tool_version,
)
from wingetctl.core.services.winget.domain.outcome_classifier import (  # noqa: F401
    classify_exit_code,
    classify_result,
    describe_exit_code,
    is_conflict,
    is_success,
    outcome_for_action,
)
