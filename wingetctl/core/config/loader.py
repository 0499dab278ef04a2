"""
Manifest loader — wingetctl.yml → ``Manifest``.

Lookup order when no explicit path is given:
    WGC_MANIFEST env var  >  wingetctl.yml in cwd or any parent

Paths inside the manifest (``hooks_dir``, ``tool.cache_dir``) are
relative to the manifest's own directory, not to the cwd.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from wingetctl.core.models.manifest import Manifest

logger = logging.getLogger(__name__)

MANIFEST_FILE = "wingetctl.yml"
MANIFEST_ENV = "WGC_MANIFEST"

# Parent directories searched above the start directory
_MAX_DEPTH = 20


class ConfigError(Exception):
    """Raised when the manifest is missing, unreadable or invalid."""


def find_manifest_file(start_dir: Path | None = None) -> Path | None:
    """Nearest wingetctl.yml at or above ``start_dir`` (default: cwd)."""
    start = (start_dir or Path.cwd()).resolve()
    for directory in [start, *start.parents][: _MAX_DEPTH + 1]:
        candidate = directory / MANIFEST_FILE
        if candidate.is_file():
            return candidate
    return None


def load_manifest(path: Path | None = None) -> Manifest:
    """Read, validate and path-resolve the host manifest.

    Raises:
        ConfigError: With a one-line, user-facing reason.
    """
    path = path or default_manifest_path()
    if path is None:
        raise ConfigError(f"No {MANIFEST_FILE} found. Create one, or specify --config.")
    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading manifest from %s", path)
    data = _read_mapping(path)

    try:
        manifest = Manifest.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid manifest {path}: {e}") from e

    manifest = _resolve_paths(manifest, path.parent.resolve())
    logger.info("Loaded manifest %s with %d artifacts", path.name, len(manifest.artifacts))
    return manifest


def default_manifest_path() -> Path | None:
    """Manifest named by WGC_MANIFEST, else the nearest wingetctl.yml."""
    from_env = os.environ.get(MANIFEST_ENV)
    if from_env:
        return Path(from_env)
    return find_manifest_file()


def _read_mapping(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    # An empty file is a valid, empty manifest
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a YAML mapping in {path}, got {type(data).__name__}")
    return data


def _resolve_paths(manifest: Manifest, base: Path) -> Manifest:
    def resolve(value: str | None) -> str | None:
        if not value or Path(value).is_absolute():
            return value
        return str((base / value).resolve())

    tool = manifest.tool.model_copy(update={"cache_dir": resolve(manifest.tool.cache_dir)})
    return manifest.model_copy(update={"hooks_dir": resolve(manifest.hooks_dir), "tool": tool})
