"""Export and import AI agent workspaces as portable packages."""

from porter.exporter import ExportResult, export_agent
from porter.importer import ImportResult, import_agent, parse_source
from porter.manifest import (
    MANIFEST_FILENAME,
    Manifest,
    ValidationResult,
    generate_manifest,
    load_manifest,
    parse_manifest,
    save_manifest,
    serialize_manifest,
    validate_manifest,
)
from porter.remote import GitHubSource, fetch_github_repo, parse_github_source
from porter.workspace import LeakRecord, ScanResult, check_for_secrets, scan_workspace

__all__ = [
    "MANIFEST_FILENAME",
    "ExportResult",
    "GitHubSource",
    "ImportResult",
    "LeakRecord",
    "Manifest",
    "ScanResult",
    "ValidationResult",
    "check_for_secrets",
    "export_agent",
    "fetch_github_repo",
    "generate_manifest",
    "import_agent",
    "load_manifest",
    "parse_github_source",
    "parse_manifest",
    "parse_source",
    "save_manifest",
    "scan_workspace",
    "serialize_manifest",
    "validate_manifest",
]
