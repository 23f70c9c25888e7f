from porter.workspace.profile import redact_profile, write_profile_template
from porter.workspace.scanner import DEFAULT_EXCLUDES, ScanResult, is_excluded, scan_workspace
from porter.workspace.secrets import LeakRecord, check_for_secrets

__all__ = [
    "DEFAULT_EXCLUDES",
    "LeakRecord",
    "ScanResult",
    "check_for_secrets",
    "is_excluded",
    "redact_profile",
    "scan_workspace",
    "write_profile_template",
]
