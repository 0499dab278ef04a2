"""
L4 Execution — Acquisition strategies.

Each strategy is one way of making winget available. Strategies are
side-effecting but best-effort: ``attempt()`` swallows its own failures
and returns False, so the cascade can always move on. Their return
value is advisory; the readiness probe decides whether they worked.

Order (fixed by the cascade):
    1. registration      — re-register an installed but unregistered App Installer
    2. managed_repair    — Microsoft.WinGet.Client's Repair-WinGetPackageManager
    3. manual_bootstrap  — download + install dependency payloads, then the bundle
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from wingetctl.adapters.base import CommandRunner
from wingetctl.core.observability.logging_config import RunLogger
from wingetctl.core.services.winget.data.payloads import (
    APP_INSTALLER_FAMILY,
    DEPENDENCY_PAYLOADS,
    MAIN_PAYLOAD,
    NUGET_PROVIDER_MIN_VERSION,
    POWERSHELL,
    PSGALLERY_URL,
    WINGET_CLIENT_MODULE,
    Payload,
)
from wingetctl.core.services.winget.detection.network import check_repository_reachable
from wingetctl.core.services.winget.domain.outcome_classifier import (
    classify_result,
    describe_exit_code,
    is_success,
)
from wingetctl.core.services.winget.execution.download_cache import (
    DownloadCache,
    DownloadError,
)


@dataclass
class StrategyContext:
    """Shared collaborators handed to every strategy of one cascade run."""

    runner: CommandRunner
    log: RunLogger
    cache: DownloadCache
    scope: str = "machine"
    repository_url: str = PSGALLERY_URL
    reachability_timeout: int = 5


def _ps_quote(value: str) -> str:
    """Single-quote a value for a PowerShell command line."""
    return "'" + value.replace("'", "''") + "'"


class AcquisitionStrategy(ABC):
    """One way of making the managed tool available.

    Subclasses implement ``_attempt``; ``attempt`` wraps it so that no
    exception ever escapes into the cascade.
    """

    name: str = ""

    def __init__(self, context: StrategyContext):
        self.ctx = context
        self.log = context.log.child(f"strategy.{self.name}")

    def attempt(self) -> bool:
        """Try once. Returns True if the strategy believes it succeeded."""
        try:
            return self._attempt()
        except Exception as exc:
            self.log.warning("Strategy %s raised: %s", self.name, exc, exc_info=True)
            return False

    @abstractmethod
    def _attempt(self) -> bool:
        """Strategy body. May raise; ``attempt`` converts that to False."""

    def _powershell(self, script: str) -> bool:
        result = self.ctx.runner.run([*POWERSHELL, "-Command", script])
        if is_success(classify_result(result)):
            return True
        self.log.warning(
            "%s: PowerShell exited %s: %s",
            self.name,
            describe_exit_code(result.exit_code),
            result.summary(),
        )
        return False

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"


class RegistrationStrategy(AcquisitionStrategy):
    """Re-register App Installer by family name. Fast, offline."""

    name = "registration"

    def _attempt(self) -> bool:
        self.log.info("Registering %s", APP_INSTALLER_FAMILY)
        return self._powershell(
            f"Add-AppxPackage -RegisterByFamilyName -MainPackage {APP_INSTALLER_FAMILY}"
        )


class ManagedRepairStrategy(AcquisitionStrategy):
    """Install Microsoft.WinGet.Client from PSGallery and run its repair.

    Fails fast (single reachability probe, no retries) when the gallery
    cannot be reached.
    """

    name = "managed_repair"

    def _attempt(self) -> bool:
        probe = check_repository_reachable(
            self.ctx.repository_url,
            timeout=self.ctx.reachability_timeout,
        )
        if not probe["reachable"]:
            self.log.warning(
                "Repository %s unreachable (%s); skipping managed repair",
                probe["url"],
                probe.get("error", "?"),
            )
            return False

        ps_scope = "AllUsers" if self.ctx.scope == "machine" else "CurrentUser"
        all_users = " -AllUsers" if self.ctx.scope == "machine" else ""
        script = "; ".join([
            "$ErrorActionPreference = 'Stop'",
            "$ProgressPreference = 'SilentlyContinue'",
            f"Install-PackageProvider -Name NuGet -MinimumVersion {NUGET_PROVIDER_MIN_VERSION} "
            f"-Force -Scope {ps_scope} | Out-Null",
            f"Install-Module -Name {WINGET_CLIENT_MODULE} -Repository PSGallery "
            f"-Force -AllowClobber -Scope {ps_scope} | Out-Null",
            f"Import-Module {WINGET_CLIENT_MODULE}",
            f"Repair-WinGetPackageManager -Force -Latest{all_users}",
        ])
        self.log.info("Running %s repair", WINGET_CLIENT_MODULE)
        return self._powershell(script)


class ManualBootstrapStrategy(AcquisitionStrategy):
    """Download the App Installer bundle and its dependencies, then install.

    Dependencies go first so the tool never runs without them; a
    dependency failure is logged and tolerated (it is often "a newer
    version is already installed"). The main bundle decides the result.
    """

    name = "manual_bootstrap"

    def _install_command(self, path: str) -> str:
        if self.ctx.scope == "machine":
            return f"Add-AppxProvisionedPackage -Online -PackagePath {_ps_quote(path)} -SkipLicense | Out-Null"
        return f"Add-AppxPackage -Path {_ps_quote(path)}"

    def _install_payload(self, payload: Payload) -> bool:
        path = self.ctx.cache.fetch(payload)
        self.log.info("Installing %s from %s", payload.name, path)
        return self._powershell(
            "$ErrorActionPreference = 'Stop'; " + self._install_command(str(path))
        )

    def _attempt(self) -> bool:
        for dep in DEPENDENCY_PAYLOADS:
            try:
                if not self._install_payload(dep):
                    self.log.warning("Dependency %s did not install cleanly; continuing", dep.name)
            except DownloadError as exc:
                self.log.warning("%s; continuing without it", exc)

        try:
            return self._install_payload(MAIN_PAYLOAD)
        except DownloadError as exc:
            self.log.warning("%s", exc)
            return False


STRATEGY_ORDER: tuple[type[AcquisitionStrategy], ...] = (
    RegistrationStrategy,
    ManagedRepairStrategy,
    ManualBootstrapStrategy,
)

STRATEGY_NAMES: tuple[str, ...] = tuple(s.name for s in STRATEGY_ORDER)


def build_strategies(
    context: StrategyContext,
    enabled: list[str] | None = None,
) -> list[AcquisitionStrategy]:
    """Instantiate the enabled strategies, always in the fixed priority order.

    The order of ``enabled`` does not matter; unknown names are rejected.
    """
    if enabled is None:
        enabled = list(STRATEGY_NAMES)
    unknown = set(enabled) - set(STRATEGY_NAMES)
    if unknown:
        raise ValueError(f"Unknown acquisition strategies: {', '.join(sorted(unknown))}")
    return [cls(context) for cls in STRATEGY_ORDER if cls.name in enabled]
