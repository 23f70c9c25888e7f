"""Resolve a manifest into the concrete set of files an export ships."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path

from porter.manifest.types import MANIFEST_FILENAME, Manifest
from porter.manifest.validator import is_safe_relative_path

logger = logging.getLogger(__name__)

# Always active; a manifest can add to these but never lift them.
DEFAULT_EXCLUDES = (
    ".env",
    ".env.*",
    "*.secret",
    "memory/",
    "*.log",
    ".git/",
    "node_modules/",
    "__pycache__/",
    ".DS_Store",
    "USER.md",
)


@dataclass(slots=True)
class ScanResult:
    files: list[str] = field(default_factory=list)
    total_size: int = 0
    warnings: list[str] = field(default_factory=list)


@lru_cache(maxsize=256)
def _wildcard_regex(pattern: str) -> re.Pattern[str]:
    # `*` spans path separators: `skills/*.md` also matches nested files.
    escaped = re.escape(pattern).replace(r"\*", ".*")
    return re.compile(f"^{escaped}$")


def matches_pattern(path: str, pattern: str) -> bool:
    if "*" in pattern:
        regex = _wildcard_regex(pattern)
        return bool(regex.match(path) or regex.match(path.rsplit("/", 1)[-1]))
    if path == pattern:
        return True
    prefix = pattern if pattern.endswith("/") else f"{pattern}/"
    return path.startswith(prefix)


def is_excluded(path: str, patterns: Iterable[str]) -> bool:
    return any(matches_pattern(path, pattern) for pattern in patterns)


def _is_hidden(relative: Path) -> bool:
    return any(part.startswith(".") for part in relative.parts)


def walk_files(root: Path) -> list[Path]:
    """Regular files under root, relative to it, sorted; hidden entries and symlinks skipped."""
    found: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        current = Path(dirpath)
        dirnames[:] = sorted(
            name
            for name in dirnames
            if not name.startswith(".") and not (current / name).is_symlink()
        )
        for name in sorted(filenames):
            candidate = current / name
            if name.startswith(".") or candidate.is_symlink() or not candidate.is_file():
                continue
            found.append(candidate.relative_to(root))
    return found


def _glob_files(workspace: Path, pattern: str) -> list[str]:
    matches: list[str] = []
    for candidate in sorted(workspace.glob(pattern)):
        relative = candidate.relative_to(workspace)
        if _is_hidden(relative) or candidate.is_symlink() or not candidate.is_file():
            continue
        matches.append(relative.as_posix())
    return matches


def _join(prefix: str, relative: Path) -> str:
    return f"{prefix.rstrip('/')}/{relative.as_posix()}"


def _unsafe_warning(path: str) -> str:
    return f"Path skipped (must be relative, no ..): {path}"


def scan_workspace(workspace: Path, manifest: Manifest) -> ScanResult:
    """Collect manifest-reachable files minus every exclusion pattern.

    Exclusions win over inclusions regardless of which rule added a file.
    Declared paths that would leave the workspace are never touched.
    """
    candidates: list[str] = [MANIFEST_FILENAME]
    warnings: list[str] = []

    for context_path in manifest.context.paths():
        if not is_safe_relative_path(context_path):
            warnings.append(_unsafe_warning(context_path))
        elif (workspace / context_path).exists():
            candidates.append(context_path)
        else:
            warnings.append(f"Context file not found: {context_path}")

    for skill in manifest.bundled_skills:
        skill_dir = workspace / skill.path
        if not is_safe_relative_path(skill.path):
            warnings.append(_unsafe_warning(skill.path))
        elif skill_dir.is_dir():
            candidates.extend(_join(skill.path, rel) for rel in walk_files(skill_dir))
        else:
            warnings.append(f"Bundled skill not found: {skill.path}")

    for pattern in manifest.assets:
        if not pattern or not is_safe_relative_path(pattern):
            warnings.append(f"Asset pattern skipped (must be relative, no ..): {pattern}")
        elif pattern.endswith("/"):
            asset_dir = workspace / pattern.rstrip("/")
            if asset_dir.is_dir():
                candidates.extend(_join(pattern, rel) for rel in walk_files(asset_dir))
            else:
                warnings.append(f"Asset directory not found: {pattern}")
        else:
            try:
                candidates.extend(_glob_files(workspace, pattern))
            except (ValueError, NotImplementedError) as exc:
                warnings.append(f"Asset pattern skipped (invalid glob: {exc}): {pattern}")

    for server in manifest.mcp:
        if not server.config:
            continue
        if not is_safe_relative_path(server.config):
            warnings.append(_unsafe_warning(server.config))
        elif (workspace / server.config).exists():
            candidates.append(server.config)
        else:
            warnings.append(f"MCP config template not found: {server.config}")

    if manifest.seeds is not None:
        for seed in manifest.seeds.memory:
            if is_safe_relative_path(seed):
                candidates.append(seed)
            else:
                warnings.append(_unsafe_warning(seed))

    patterns = [*DEFAULT_EXCLUDES, *manifest.exclude]
    files: list[str] = []
    seen: set[str] = set()
    for candidate in candidates:
        if candidate in seen:
            continue
        seen.add(candidate)
        if is_excluded(candidate, patterns):
            logger.debug("excluded %s", candidate)
            continue
        files.append(candidate)

    total_size = 0
    for relative in files:
        try:
            total_size += (workspace / relative).stat().st_size
        except OSError:
            continue

    return ScanResult(files=files, total_size=total_size, warnings=warnings)
