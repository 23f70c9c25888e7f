"""Package an agent workspace into a portable archive."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from porter.archive import ARCHIVE_EXTENSION, create_archive
from porter.config import get_settings
from porter.errors import ArchiveError, ManifestFormatError
from porter.logging import operation_context
from porter.manifest.loader import load_manifest
from porter.manifest.types import MANIFEST_FILENAME
from porter.manifest.validator import validate_manifest
from porter.workspace.profile import write_profile_template
from porter.workspace.scanner import scan_workspace
from porter.workspace.secrets import check_for_secrets

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ExportResult:
    success: bool
    files: list[str] = field(default_factory=list)
    output_path: Path | None = None
    warnings: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def export_agent(
    workspace: Path,
    *,
    output: Path | None = None,
    dry_run: bool = False,
    force: bool = False,
) -> ExportResult:
    """Validate, scan and archive `workspace`.

    Never raises for expected failures; they come back in `errors`. May
    write USER.md.template into the workspace even on a dry run.
    """
    with operation_context(operation="export", workspace=str(workspace)):
        return _export(workspace, output=output, dry_run=dry_run, force=force)


def _export(workspace: Path, *, output: Path | None, dry_run: bool, force: bool) -> ExportResult:
    try:
        manifest = load_manifest(workspace)
    except ManifestFormatError as exc:
        return ExportResult(success=False, errors=[f"Invalid {MANIFEST_FILENAME}: {exc}"])
    if manifest is None:
        return ExportResult(success=False, errors=[f"No {MANIFEST_FILENAME} found in {workspace}"])

    validation = validate_manifest(manifest)
    if not validation.valid:
        return ExportResult(success=False, errors=list(validation.errors))

    scan = scan_workspace(workspace, manifest)
    files = list(scan.files)
    warnings = [*validation.warnings, *scan.warnings]
    if manifest.hooks is not None and manifest.hooks.pre_export:
        warnings.append(f"pre_export hook not executed: {manifest.hooks.pre_export}")

    leaks = check_for_secrets(workspace, files)
    if leaks:
        if not force:
            return ExportResult(
                success=False,
                files=files,
                warnings=warnings,
                errors=[
                    "Potential secrets detected (use --force to export anyway):",
                    *(leak.describe() for leak in leaks),
                ],
            )
        logger.warning("exporting despite %d potential secret(s)", len(leaks))
        warnings.extend(f"Potential secret shipped: {leak.describe()}" for leak in leaks)

    try:
        template = write_profile_template(workspace)
    except OSError as exc:
        return ExportResult(
            success=False,
            files=files,
            warnings=warnings,
            errors=[f"Failed to write user profile template: {exc}"],
        )
    if template is not None and template not in files:
        files.append(template)

    if dry_run:
        return ExportResult(success=True, files=files, warnings=warnings)

    output_dir = output if output is not None else workspace / get_settings().output_dir
    archive_path = output_dir / f"{manifest.archive_root}{ARCHIVE_EXTENSION}"
    try:
        create_archive(workspace, files, archive_path, manifest.archive_root)
    except ArchiveError as exc:
        return ExportResult(
            success=False,
            files=files,
            warnings=warnings,
            errors=[f"Failed to create archive: {exc}"],
        )

    logger.info("exported %d files to %s", len(files), archive_path)
    return ExportResult(success=True, files=files, output_path=archive_path, warnings=warnings)
