"""
L1 Domain — winget listing parser (pure).

``winget list`` prints a whitespace-aligned table::

    Name              Id               Version   Available  Source
    ---------------------------------------------------------------
    Mozilla Firefox   Mozilla.Firefox  125.0.1   126.0      winget

The header is the line above the dashed separator. A row belongs to an
artifact when its cell under the ``Id`` header equals the artifact id
(case-insensitive); words in the Name column never match. Output with
no recognisable header falls back to matching any whole token. The
installed version is the token right after the id.

The column-splitting heuristic lives only here so it can be swapped
without touching the state machine.
"""

from __future__ import annotations

import re
from typing import NamedTuple

from wingetctl.core.models.artifact import ArtifactState

# Tokens winget prints where a concrete version would go
_PLACEHOLDER_VERSIONS = frozenset({"unknown", "<", ">", "-"})

_SEPARATOR_RE = re.compile(r"^-{3,}$")
_ID_HEADER_RE = re.compile(r"(?<!\S)id(?!\S)", re.IGNORECASE)
_TOKEN_RE = re.compile(r"\S+")


class _Row(NamedTuple):
    tokens: list[str]
    id_index: int
    columns: frozenset[str] | None  # casefolded header names, None without a header


def _is_separator(line: str) -> bool:
    return bool(_SEPARATOR_RE.match(line.strip()))


def _id_cell(line: str, id_column: int) -> tuple[list[str], int]:
    # The token starting closest to the Id header is the Id cell
    matches = list(_TOKEN_RE.finditer(line))
    index = min(range(len(matches)), key=lambda k: abs(matches[k].start() - id_column))
    return [m.group() for m in matches], index


def _match_row(text: str, artifact_id: str) -> _Row | None:
    wanted = artifact_id.casefold()
    lines = (text or "").splitlines()
    id_column: int | None = None
    columns: frozenset[str] | None = None

    for i, line in enumerate(lines):
        if not line.strip():
            continue
        if _is_separator(line):
            header = lines[i - 1] if i > 0 else ""
            found = _ID_HEADER_RE.search(header)
            id_column = found.start() if found else None
            columns = frozenset(header.casefold().split()) if found else None
            continue
        if i + 1 < len(lines) and _is_separator(lines[i + 1]):
            continue  # header line

        if id_column is not None:
            tokens, index = _id_cell(line, id_column)
            if tokens[index].casefold() == wanted:
                return _Row(tokens, index, columns)
            continue

        tokens = line.split()
        # Last occurrence: the Name column may repeat the id
        for index in range(len(tokens) - 1, -1, -1):
            if tokens[index].casefold() == wanted:
                return _Row(tokens, index, None)
    return None


def find_listing_row(text: str, artifact_id: str) -> list[str] | None:
    """Return the whitespace-split tokens of the row holding ``artifact_id``."""
    row = _match_row(text, artifact_id)
    return row.tokens if row else None


def _token_after(row: _Row, offset: int = 1) -> str | None:
    j = row.id_index + offset
    return row.tokens[j] if j < len(row.tokens) else None


def _is_version_token(token: str | None) -> bool:
    if not token or token.casefold() in _PLACEHOLDER_VERSIONS:
        return False
    return any(ch.isdigit() for ch in token)


def parse_listing_row(text: str, artifact_id: str) -> ArtifactState:
    """Parse listing output the tool reported as a successful match.

    The caller only invokes this when the tool said it found the
    artifact, so a missing row or unparseable version is
    ``PresentUnknownVersion``, never ``Absent``.
    """
    row = _match_row(text, artifact_id)
    if row is None:
        return ArtifactState.unknown_version()

    version = _token_after(row)
    if not _is_version_token(version):
        return ArtifactState.unknown_version()
    return ArtifactState.present(version)


def parse_available_version(text: str, artifact_id: str) -> str | None:
    """Available-upgrade version from ``winget list --upgrade-available`` output."""
    row = _match_row(text, artifact_id)
    if row is None:
        return None
    if row.columns is not None and "available" not in row.columns:
        return None
    available = _token_after(row, offset=2)
    return available if _is_version_token(available) else None


_VERSION_RE = re.compile(r"v?(\d+(?:\.\d+)+(?:[-+][0-9A-Za-z.\-]+)?)")


def parse_tool_version(text: str) -> str | None:
    """Extract ``1.2.3`` from ``winget --version`` output (``v1.2.3``)."""
    match = _VERSION_RE.search(text or "")
    return match.group(1) if match else None
