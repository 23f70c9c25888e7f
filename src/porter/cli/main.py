"""Click CLI group: init, validate, export, and import commands."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from porter.cli.render import (
    cyan,
    format_bytes,
    gray,
    green,
    print_errors,
    print_warnings,
    red,
    section,
    yellow,
)
from porter.config import get_settings, validate_settings
from porter.errors import ConfigError, ManifestFormatError
from porter.exporter import export_agent
from porter.importer import import_agent
from porter.logging import configure_logging
from porter.manifest.generator import generate_manifest
from porter.manifest.loader import load_manifest, save_manifest
from porter.manifest.types import MANIFEST_FILENAME, SOUL_FILENAME
from porter.manifest.validator import validate_manifest
from porter.workspace.scanner import scan_workspace
from porter.workspace.secrets import check_for_secrets


@click.group()
@click.version_option(package_name="agent-porter")
@click.option("--log-level", type=str, default=None, help="Override PORTER_LOG_LEVEL.")
def cli(log_level: str | None) -> None:
    """Export and import AI agents with their full context."""
    settings = get_settings()
    try:
        validate_settings(settings)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    configure_logging(log_level or settings.log_level, app_env=settings.app_env)


@cli.command()
@click.argument("path", type=click.Path(path_type=Path), default=".")
@click.option(
    "-n", "--name", type=str, default=None, help="Agent name (defaults to directory name)."
)
@click.option("-d", "--description", type=str, default=None, help="Agent description.")
@click.option("-f", "--force", is_flag=True, help=f"Overwrite an existing {MANIFEST_FILENAME}.")
def init(path: Path, name: str | None, description: str | None, force: bool) -> None:
    """Create a porter.yaml manifest in an agent workspace."""
    workspace = path.resolve()
    click.echo(f"Initializing porter in {workspace}")

    if (workspace / MANIFEST_FILENAME).exists() and not force:
        click.echo(yellow(f"{MANIFEST_FILENAME} already exists. Use --force to overwrite."))
        return
    if not (workspace / SOUL_FILENAME).is_file():
        click.echo(red(f"No {SOUL_FILENAME} found."))
        click.echo(gray("   This directory doesn't look like an agent workspace."))
        click.echo(gray(f"   Create a {SOUL_FILENAME} file first, then run init again."))
        sys.exit(1)

    manifest = generate_manifest(workspace, name=name, description=description)
    save_manifest(workspace, manifest)
    click.echo(green(f"Created {MANIFEST_FILENAME}"))

    section("Detected configuration:")
    click.echo(f"  Name: {cyan(str(manifest.name))}")
    click.echo(f"  Version: {cyan(str(manifest.version))}")
    click.echo("\n  Context files:")
    for role, value in manifest.context.model_dump(exclude_none=True).items():
        click.echo(f"    - {role}: {cyan(value)}")
    if manifest.bundled_skills:
        click.echo("\n  Bundled skills:")
        for skill in manifest.bundled_skills:
            click.echo(f"    - {cyan(skill.path)}")
    if manifest.assets:
        click.echo("\n  Assets:")
        for asset in manifest.assets:
            click.echo(f"    - {cyan(asset)}")
    click.echo(gray(f"\nEdit {MANIFEST_FILENAME} to add env vars and external skills."))
    click.echo(gray("Then run: porter export"))


@cli.command()
@click.argument("path", type=click.Path(path_type=Path), default=".")
def validate(path: Path) -> None:
    """Check the manifest, the resolved file set, and scan for secrets."""
    workspace = path.resolve()
    click.echo(f"Validating agent in {workspace}")

    try:
        manifest = load_manifest(workspace)
    except ManifestFormatError as exc:
        click.echo(red(f"Invalid {MANIFEST_FILENAME}: {exc}"))
        sys.exit(1)
    if manifest is None:
        click.echo(red(f"No {MANIFEST_FILENAME} found"))
        click.echo(gray("   Run `porter init` to create one"))
        sys.exit(1)

    section("Manifest validation:")
    result = validate_manifest(manifest)
    if result.errors:
        click.echo(red("  Errors:"))
        print_errors([f"✗ {error}" for error in result.errors], indent="    ")
    if result.warnings:
        click.echo(yellow("  Warnings:"))
        print_warnings(result.warnings, indent="    ")
    if result.valid and not result.warnings:
        click.echo(green("  ✓ Manifest is valid"))

    section("File scan:")
    scan = scan_workspace(workspace, manifest)
    click.echo(f"  Found {cyan(str(len(scan.files)))} files")
    click.echo(f"  Total size: {cyan(format_bytes(scan.total_size))}")
    if scan.warnings:
        click.echo(yellow("  Warnings:"))
        print_warnings(scan.warnings, indent="    ")

    section("Security check:")
    leaks = check_for_secrets(workspace, scan.files)
    if leaks:
        click.echo(red("  ✗ Potential secrets detected:"))
        print_errors([leak.describe() for leak in leaks], indent="    ")
    else:
        click.echo(green("  ✓ No obvious secrets detected"))

    section("Summary:")
    if result.valid and not leaks:
        click.echo(green("  ✓ Ready to export!"))
        return
    click.echo(red("  ✗ Fix issues before exporting"))
    sys.exit(1)


@cli.command("export")
@click.argument("path", type=click.Path(path_type=Path), default=".")
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    default=None,
    help="Output directory (default: <workspace>/PORTER_OUTPUT_DIR).",
)
@click.option("--dry-run", is_flag=True, help="List files without creating an archive.")
@click.option("-f", "--force", is_flag=True, help="Export even if potential secrets are detected.")
def export_cmd(path: Path, output: Path | None, dry_run: bool, force: bool) -> None:
    """Package an agent workspace into a portable archive."""
    workspace = path.resolve()
    click.echo(f"Exporting agent from {workspace}")

    result = export_agent(workspace, output=output, dry_run=dry_run, force=force)
    if result.warnings:
        print_warnings(result.warnings)
    if not result.success:
        click.echo(red("Export failed:"))
        print_errors(result.errors)
        sys.exit(1)

    if dry_run:
        click.echo(yellow("Dry run - files that would be exported:"))
        for file in result.files:
            click.echo(gray(f"   {file}"))
        click.echo(gray(f"\n   Total: {len(result.files)} files"))
        return

    click.echo(green("Export successful!"))
    click.echo(f"   Output: {cyan(str(result.output_path))}")
    click.echo(f"   Files: {cyan(str(len(result.files)))}")


@cli.command("import")
@click.argument("source")
@click.option(
    "-t",
    "--target",
    type=click.Path(path_type=Path),
    default=None,
    help="Target directory (default: current directory).",
)
@click.option("--skip-env", is_flag=True, help="Skip environment variable checks.")
@click.option("--skip-skills", is_flag=True, help="Skip listing external skills to install.")
@click.option("-f", "--force", is_flag=True, help="Overwrite an existing agent directory.")
def import_cmd(
    source: str,
    target: Path | None,
    skip_env: bool,
    skip_skills: bool,
    force: bool,
) -> None:
    """Install an agent from an archive, a directory, or github:owner/repo[@tag]."""
    click.echo(f"Importing agent from {source}")

    result = import_agent(
        source,
        target=target,
        force=force,
        skip_env=skip_env,
        skip_skills=skip_skills,
    )
    if not result.success:
        click.echo(red("Import failed:"))
        print_errors(result.errors)
        sys.exit(1)

    click.echo(green("Import successful!"))
    click.echo(f"   Agent installed to: {cyan(str(result.agent_path))}")
    if result.created_user_profile:
        click.echo(gray("   Created USER.md from template - please fill in your details"))

    if result.missing_env:
        click.echo(yellow("\nMissing environment variables:"))
        for name in result.missing_env:
            click.echo(yellow(f"   - {name}"))
        click.echo(gray("   Set these in your .env file or shell environment"))

    if result.installed_skills:
        click.echo(gray("\nExternal skills to install:"))
        for skill in result.installed_skills:
            click.echo(gray(f"   clawdhub install {skill}"))

    if result.post_install_hook:
        click.echo(yellow(f"\nPost-install hook not run automatically: {result.post_install_hook}"))
        click.echo(gray("   Review it, then run it yourself if you trust it"))

    section("Next steps:")
    click.echo(gray("   1. Review and fill in USER.md"))
    click.echo(gray("   2. Set required environment variables"))
    click.echo(gray("   3. Point your agent runtime at this workspace"))


if __name__ == "__main__":
    cli()
