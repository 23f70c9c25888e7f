"""Install an agent package from an archive, a directory, or GitHub."""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from porter.archive import extract_archive, is_archive_path
from porter.errors import ArchiveError, ManifestFormatError, PorterError
from porter.logging import operation_context
from porter.manifest.loader import load_manifest
from porter.manifest.types import (
    MANIFEST_FILENAME,
    USER_PROFILE_FILENAME,
    USER_TEMPLATE_FILENAME,
    Manifest,
)
from porter.manifest.validator import validate_manifest
from porter.remote.github import (
    GITHUB_SCHEME,
    GITHUB_TEMP_DIR,
    GitHubSource,
    fetch_github_repo,
    parse_github_source,
)

logger = logging.getLogger(__name__)

ARCHIVE_TEMP_DIR = ".porter-temp"
REGISTRY_SCHEME = "clawdhub:"

EnvLookup = Callable[[str], bool]
Fetcher = Callable[[GitHubSource, Path], Path]


@dataclass(slots=True)
class SourceSpec:
    kind: str  # github | clawdhub | local
    path: str
    version: str | None = None


@dataclass(slots=True)
class ImportResult:
    success: bool
    agent_path: Path | None = None
    missing_env: list[str] = field(default_factory=list)
    installed_skills: list[str] = field(default_factory=list)
    post_install_hook: str | None = None
    created_user_profile: bool = False
    errors: list[str] = field(default_factory=list)


def parse_source(source: str) -> SourceSpec:
    for kind, scheme in (("github", GITHUB_SCHEME), ("clawdhub", REGISTRY_SCHEME)):
        if source.startswith(scheme):
            path, _, version = source[len(scheme):].partition("@")
            return SourceSpec(kind=kind, path=path, version=version or None)
    return SourceSpec(kind="local", path=source)


def _env_present(name: str) -> bool:
    return bool(os.environ.get(name))


def _is_within(path: Path, roots: list[Path]) -> bool:
    resolved = path.resolve()
    return any(resolved == root or root in resolved.parents for root in roots)


def _resolve_source(
    source: str,
    target_root: Path,
    staging: list[Path],
    fetcher: Fetcher,
) -> Path:
    """Turn a source locator into a local directory holding porter.yaml."""
    spec = parse_source(source)

    if spec.kind == "github":
        github = parse_github_source(source)
        if github is None:
            raise PorterError(
                f"Invalid GitHub source: {source} (expected github:owner/repo[@version])"
            )
        staging.append(target_root / GITHUB_TEMP_DIR)
        return fetcher(github, target_root)

    if spec.kind == "clawdhub":
        raise PorterError(f"ClawdHub import is not supported yet: {source}")

    if is_archive_path(source):
        archive = Path(source)
        if not archive.is_file():
            raise PorterError(f"Source not found: {source}")
        temp_dir = target_root / ARCHIVE_TEMP_DIR
        staging.append(temp_dir)
        shutil.rmtree(temp_dir, ignore_errors=True)
        try:
            extract_archive(archive, temp_dir)
        except ArchiveError as exc:
            raise ArchiveError(f"Failed to extract archive: {exc}") from exc
        entries = list(temp_dir.iterdir())
        if len(entries) != 1 or not entries[0].is_dir():
            raise ArchiveError("Invalid archive structure - expected single root directory")
        return entries[0]

    directory = Path(source)
    if not directory.is_dir():
        raise PorterError(f"Source not found: {source}")
    return directory


def _copy_tree(source_dir: Path, agent_dir: Path, skip: list[Path]) -> int:
    """Copy every regular file under source_dir into agent_dir, keeping relative paths."""
    pending: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(source_dir):
        current = Path(dirpath)
        dirnames[:] = sorted(name for name in dirnames if not _is_within(current / name, skip))
        for name in sorted(filenames):
            candidate = current / name
            if candidate.is_symlink():
                logger.warning("skipping symlink %s", candidate)
                continue
            pending.append(candidate)

    agent_dir.mkdir(parents=True, exist_ok=True)
    for path in pending:
        destination = agent_dir / path.relative_to(source_dir)
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(path, destination)
    return len(pending)


def _materialize_user_profile(agent_dir: Path) -> bool:
    template = agent_dir / USER_TEMPLATE_FILENAME
    profile = agent_dir / USER_PROFILE_FILENAME
    if not template.is_file() or profile.exists():
        return False
    shutil.copyfile(template, profile)
    return True


def _install(
    source_dir: Path,
    target_root: Path,
    staging: list[Path],
    *,
    force: bool,
    skip_env: bool,
    skip_skills: bool,
    env_lookup: EnvLookup,
) -> ImportResult:
    try:
        manifest: Manifest | None = load_manifest(source_dir)
    except ManifestFormatError as exc:
        return ImportResult(
            success=False, errors=[f"Invalid {MANIFEST_FILENAME} in package: {exc}"]
        )
    if manifest is None:
        return ImportResult(success=False, errors=[f"No {MANIFEST_FILENAME} found in package"])

    validation = validate_manifest(manifest)
    if not validation.valid:
        return ImportResult(success=False, errors=list(validation.errors))

    agent_dir = target_root / str(manifest.name)
    if agent_dir.exists() and not force:
        return ImportResult(
            success=False,
            errors=[f"Agent directory already exists: {agent_dir}. Use --force to overwrite."],
        )

    source_root = source_dir.resolve()
    # Only prune dirs nested inside the source; staging may be its ancestor.
    skip = [
        resolved
        for resolved in (path.resolve() for path in (*staging, agent_dir))
        if source_root in resolved.parents
    ]
    try:
        copied = _copy_tree(source_dir, agent_dir, skip)
    except OSError as exc:
        return ImportResult(
            success=False,
            agent_path=agent_dir,
            errors=[f"Failed to copy files into {agent_dir}: {exc}"],
        )
    logger.info("copied %d files into %s", copied, agent_dir)

    result = ImportResult(success=True, agent_path=agent_dir)
    try:
        result.created_user_profile = _materialize_user_profile(agent_dir)
    except OSError as exc:
        logger.warning("could not create %s from template: %s", USER_PROFILE_FILENAME, exc)

    if not skip_env:
        result.missing_env = [name for name in manifest.required_env if not env_lookup(name)]

    if not skip_skills:
        # Reported for an external installer; never installed here.
        result.installed_skills = [skill.name for skill in manifest.external_skills]

    hook = manifest.hooks.post_install if manifest.hooks is not None else None
    if hook and (agent_dir / hook).is_file():
        result.post_install_hook = hook
    return result


def import_agent(
    source: str,
    *,
    target: Path | None = None,
    force: bool = False,
    skip_env: bool = False,
    skip_skills: bool = False,
    env_lookup: EnvLookup | None = None,
    fetcher: Fetcher | None = None,
) -> ImportResult:
    """Resolve `source`, then validate and copy it into `<target>/<manifest.name>`.

    Staging directories used for extraction or cloning are removed on
    every exit path. Expected failures are returned, not raised.
    """
    target_root = target if target is not None else Path.cwd()
    with operation_context(operation="import", source=source):
        return _import(
            source,
            target_root,
            force=force,
            skip_env=skip_env,
            skip_skills=skip_skills,
            env_lookup=env_lookup or _env_present,
            fetcher=fetcher or fetch_github_repo,
        )


def _import(
    source: str,
    target_root: Path,
    *,
    force: bool,
    skip_env: bool,
    skip_skills: bool,
    env_lookup: EnvLookup,
    fetcher: Fetcher,
) -> ImportResult:
    staging: list[Path] = []
    try:
        target_root.mkdir(parents=True, exist_ok=True)
        source_dir = _resolve_source(source, target_root, staging, fetcher)
        return _install(
            source_dir,
            target_root,
            staging,
            force=force,
            skip_env=skip_env,
            skip_skills=skip_skills,
            env_lookup=env_lookup,
        )
    except PorterError as exc:
        return ImportResult(success=False, errors=[str(exc)])
    except OSError as exc:
        return ImportResult(success=False, errors=[f"Import failed: {exc}"])
    finally:
        for path in staging:
            shutil.rmtree(path, ignore_errors=True)
