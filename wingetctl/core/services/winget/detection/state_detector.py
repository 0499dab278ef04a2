"""
L3 Detection — Managed artifact state detector.

One exact-match ``winget list`` query per call. Produces a fresh
``ArtifactState`` every time; nothing is cached between calls because
any remediation step may have changed it.
"""

from __future__ import annotations

from typing import NamedTuple

from wingetctl.adapters.winget.cli import WingetCli
from wingetctl.core.models.artifact import ArtifactState
from wingetctl.core.models.command import CommandResult
from wingetctl.core.models.outcome import CanonicalOutcome, ExitCategory
from wingetctl.core.observability.logging_config import RunLogger
from wingetctl.core.services.winget.domain.listing_parser import (
    parse_available_version,
    parse_listing_row,
)
from wingetctl.core.services.winget.domain.outcome_classifier import (
    classify_result,
    describe_exit_code,
    is_success,
)


class DetectionError(Exception):
    """The detector could not produce a state.

    ``outcome`` is ``LIST_FAILED`` (state unknowable, no safe decision)
    or ``AMBIGUOUS_MATCH`` (input error, never retried).
    """

    def __init__(self, outcome: CanonicalOutcome, result: CommandResult, message: str):
        super().__init__(message)
        self.outcome = outcome
        self.exit_code = result.exit_code
        self.code_name = describe_exit_code(result.exit_code)
        self.output = result.summary()


class UpgradeCheck(NamedTuple):
    """Informational upgrade probe. ``available`` is None when undeterminable."""

    available: bool | None
    version: str | None = None


class StateDetector:
    """Query winget for an artifact's presence and installed version."""

    def __init__(self, cli: WingetCli, log: RunLogger):
        self.cli = cli
        self.log = log.child("detector")

    def detect(self, artifact_id: str) -> ArtifactState:
        """Return the current state of ``artifact_id``.

        Raises:
            DetectionError: listing failed or the id matched several packages.
        """
        result = self.cli.list(artifact_id)
        category = classify_result(result)

        if category == ExitCategory.NO_RESULTS_FOUND:
            state = ArtifactState.absent()
        elif category == ExitCategory.MULTIPLE_MATCHES:
            raise DetectionError(
                CanonicalOutcome.AMBIGUOUS_MATCH,
                result,
                f"'{artifact_id}' matches more than one package",
            )
        elif is_success(category):
            state = parse_listing_row(result.output, artifact_id)
        else:
            raise DetectionError(
                CanonicalOutcome.LIST_FAILED,
                result,
                f"winget list failed for '{artifact_id}' "
                f"({describe_exit_code(result.exit_code)})",
            )

        self.log.info("Detected %s: %s", artifact_id, state)
        return state

    def check_upgrade(self, artifact_id: str) -> UpgradeCheck:
        """Is a newer version available? Informational only, never raises."""
        result = self.cli.list_upgrades(artifact_id)
        category = classify_result(result)

        if category in (ExitCategory.NO_RESULTS_FOUND, ExitCategory.UPDATE_NOT_APPLICABLE):
            return UpgradeCheck(available=False)
        if is_success(category):
            version = parse_available_version(result.output, artifact_id)
            self.log.info(
                "Upgrade available for %s%s",
                artifact_id,
                f": {version}" if version else "",
            )
            return UpgradeCheck(available=True, version=version)

        self.log.warning(
            "Could not check upgrades for %s (%s)",
            artifact_id,
            describe_exit_code(result.exit_code),
        )
        return UpgradeCheck(available=None)
