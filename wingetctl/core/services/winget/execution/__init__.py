"""
L4 Execution — ``__init__.py`` re-exports execution components.
"""

from wingetctl.core.services.winget.execution.download_cache import (  # noqa: F401
    DownloadCache,
    DownloadError,
    default_cache_dir,
)
from wingetctl.core.services.winget.execution.hooks import HookResult, HookRunner  # noqa: F401
from wingetctl.core.services.winget.execution.source_init import SourceInitializer  # noqa: F401
from wingetctl.core.services.winget.execution.strategies import (  # noqa: F401
    STRATEGY_NAMES,
    AcquisitionStrategy,
    ManagedRepairStrategy,
    ManualBootstrapStrategy,
    RegistrationStrategy,
    StrategyContext,
    build_strategies,
)
