"""Structural and path-safety checks for manifests.

Validation is pure: it never touches the filesystem. Whether declared
files actually exist is the scanner's concern.
"""

from __future__ import annotations

import re

from porter.manifest.types import Manifest, ValidationResult

_NAME_RE = re.compile(r"^[a-z0-9-]+$")
_SEMVER_RE = re.compile(r"^\d+\.\d+\.\d+")
_DRIVE_RE = re.compile(r"^[A-Za-z]:")


def is_safe_relative_path(path: str) -> bool:
    """True when path stays inside the workspace: no root marker, no `..` segment."""
    if path.startswith(("/", "\\")) or _DRIVE_RE.match(path):
        return False
    segments = re.split(r"[\\/]", path)
    return ".." not in segments


def declared_paths(manifest: Manifest) -> list[str]:
    """Every path-valued field of the manifest, in declaration order."""
    paths = list(manifest.context.paths())
    paths.extend(manifest.assets)
    paths.extend(skill.path for skill in manifest.bundled_skills)
    paths.extend(server.config for server in manifest.mcp if server.config)
    if manifest.seeds is not None:
        paths.extend(manifest.seeds.memory)
        paths.extend(manifest.seeds.projects)
    if manifest.hooks is not None:
        hooks = (manifest.hooks.pre_export, manifest.hooks.post_install, manifest.hooks.validate_)
        paths.extend(hook for hook in hooks if hook)
    return paths


def validate_manifest(manifest: Manifest) -> ValidationResult:
    errors: list[str] = []
    warnings: list[str] = []

    if not manifest.name:
        errors.append("Missing required field: name")
    elif not _NAME_RE.match(manifest.name):
        errors.append("Name must be lowercase alphanumeric with hyphens only")

    if not manifest.version:
        errors.append("Missing required field: version")
    elif not _SEMVER_RE.match(manifest.version):
        warnings.append("Version should follow semver (e.g., 1.0.0)")

    if not manifest.description:
        errors.append("Missing required field: description")

    if not manifest.engine.clawdbot:
        errors.append("Missing required field: engine.clawdbot")

    if not manifest.context.soul:
        errors.append("Missing required field: context.soul (SOUL.md is required)")

    for path in declared_paths(manifest):
        if not is_safe_relative_path(path):
            errors.append(f"Invalid path (must be relative, no ..): {path}")

    env = manifest.env
    if env is None or (not env.required and not env.optional):
        warnings.append("No environment variables declared - agent may not work without API keys")

    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)
