"""
L1 Domain — Outcome classifier (pure).

The ONLY place that interprets raw exit codes. Everything else asks
this module for an ``ExitCategory`` or a ``CanonicalOutcome``.
No I/O, no subprocess.
"""

from __future__ import annotations

from wingetctl.core.models.command import CommandResult
from wingetctl.core.models.outcome import (
    ActionKind,
    CanonicalOutcome,
    ExitCategory,
    RemediationAction,
)
from wingetctl.core.services.winget.data.exit_codes import (
    EXIT_CODE_TABLE,
    normalize_exit_code,
)

_SUCCESS = frozenset({ExitCategory.SUCCESS, ExitCategory.SUCCESS_REBOOT_REQUIRED})
_CONFLICT = frozenset({
    ExitCategory.ALREADY_INSTALLED_CONFLICT,
    ExitCategory.DOWNGRADE_CONFLICT,
})


def classify_exit_code(code: int | None) -> ExitCategory:
    """Map a raw exit code to its semantic category.

    ``None`` (process never started) and codes missing from the table
    are ``UNKNOWN``. Unknown is never coerced to success.
    """
    if code is None:
        return ExitCategory.UNKNOWN
    entry = EXIT_CODE_TABLE.get(normalize_exit_code(code))
    return entry[0] if entry else ExitCategory.UNKNOWN


def classify_result(result: CommandResult) -> ExitCategory:
    """Category of a ``CommandResult``."""
    return classify_exit_code(result.exit_code)


def describe_exit_code(code: int | None) -> str:
    """Symbolic name of a code, or its hex form when it is not in the table."""
    if code is None:
        return "NOT_STARTED"
    signed = normalize_exit_code(code)
    entry = EXIT_CODE_TABLE.get(signed)
    if entry:
        return entry[1]
    return f"0x{signed & 0xFFFFFFFF:08X}"


def is_success(category: ExitCategory) -> bool:
    """Success, including success with a pending reboot."""
    return category in _SUCCESS


def is_conflict(category: ExitCategory) -> bool:
    """The tool refused an in-place version change (already installed / downgrade)."""
    return category in _CONFLICT


def outcome_for_action(
    action: RemediationAction,
    category: ExitCategory,
) -> CanonicalOutcome | None:
    """Terminal outcome implied by an action's exit category, if any.

    Returns ``None`` when the tool accepted the action (or refused it in
    a way the convergence plan handles) and the next re-detection must
    decide. A non-None return ends convergence immediately.

    ``UPDATE_NOT_APPLICABLE`` during an upgrade is ``CONVERGED``: there
    was nothing to do.
    """
    if is_success(category):
        return None

    if category == ExitCategory.UNKNOWN:
        return CanonicalOutcome.UNKNOWN_ERROR

    if category == ExitCategory.MULTIPLE_MATCHES:
        return CanonicalOutcome.AMBIGUOUS_MATCH

    kind = action.kind

    if category == ExitCategory.UPDATE_NOT_APPLICABLE:
        if kind == ActionKind.UPGRADE:
            return CanonicalOutcome.CONVERGED
        return None

    if category == ExitCategory.NO_RESULTS_FOUND:
        if kind == ActionKind.UNINSTALL:
            return None  # already gone
        if kind in (ActionKind.INSTALL_LATEST, ActionKind.UPGRADE):
            return CanonicalOutcome.NOT_INSTALLED
        return CanonicalOutcome.VERSION_MISMATCH_UNRESOLVED

    if is_conflict(category):
        if kind == ActionKind.UNINSTALL_THEN_INSTALL_PINNED:
            return CanonicalOutcome.VERSION_MISMATCH_UNRESOLVED
        return None

    return CanonicalOutcome.UNKNOWN_ERROR
