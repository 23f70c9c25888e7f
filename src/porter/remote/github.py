"""Fetch agent packages from GitHub with a shallow git clone."""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

from porter.config import Settings, get_settings
from porter.errors import FetchError

logger = logging.getLogger(__name__)

GITHUB_SCHEME = "github:"
GITHUB_TEMP_DIR = ".porter-github-temp"

_VERSION_MISSING_MARKERS = (
    "could not find remote branch",
    "did not match any",
    "remote branch",
)
_REPO_MISSING_MARKERS = ("repository not found", "not found", "404")
_NAME_RE = re.compile(r"^[A-Za-z0-9._-]+$")


@dataclass(frozen=True, slots=True)
class GitHubSource:
    owner: str
    repo: str
    version: str | None = None

    def url(self, base_url: str) -> str:
        return f"{base_url.rstrip('/')}/{self.owner}/{self.repo}"


def parse_github_source(source: str) -> GitHubSource | None:
    """Parse `github:owner/repo[@version]`; None if not a valid GitHub locator."""
    if not source.startswith(GITHUB_SCHEME):
        return None
    repo_path, _, version = source[len(GITHUB_SCHEME):].partition("@")
    parts = repo_path.split("/")
    if len(parts) != 2:
        return None
    owner, repo = (part.strip() for part in parts)
    for name in (owner, repo):
        if not _NAME_RE.match(name) or name in {".", ".."}:
            return None
    return GitHubSource(owner=owner, repo=repo, version=version.strip() or None)


def _classify_failure(source: GitHubSource, url: str, detail: str) -> FetchError:
    lowered = detail.lower()
    if source.version and any(marker in lowered for marker in _VERSION_MISSING_MARKERS):
        return FetchError(
            f"Version not found: {source.version}. Check available tags with: "
            f"gh release list -R {source.owner}/{source.repo}",
            kind="version_not_found",
        )
    if any(marker in lowered for marker in _REPO_MISSING_MARKERS):
        return FetchError(f"Repository not found: {url}", kind="not_found")
    return FetchError(f"Failed to clone: {detail}", kind="failed")


def fetch_github_repo(
    source: GitHubSource,
    target_dir: Path,
    settings: Settings | None = None,
) -> Path:
    """Clone into `<target_dir>/.porter-github-temp/<repo>` and strip `.git`."""
    settings = settings or get_settings()
    url = source.url(settings.github_base_url)
    temp_root = target_dir / GITHUB_TEMP_DIR
    clone_dir = temp_root / source.repo

    shutil.rmtree(temp_root, ignore_errors=True)
    temp_root.mkdir(parents=True, exist_ok=True)

    args = [settings.git_binary, "clone", "--depth", "1"]
    if source.version:
        args.extend(["--branch", source.version])
    args.extend([url, str(clone_dir)])

    logger.info("cloning %s/%s", source.owner, source.repo)
    try:
        proc = subprocess.run(
            args,
            capture_output=True,
            text=True,
            timeout=settings.fetch_timeout_seconds,
            check=False,
        )
    except subprocess.TimeoutExpired as exc:
        raise FetchError(
            f"Failed to clone: timed out after {settings.fetch_timeout_seconds}s", kind="failed"
        ) from exc
    except OSError as exc:
        raise FetchError(f"Failed to clone: {exc}", kind="failed") from exc

    if proc.returncode != 0:
        detail = (proc.stderr or "").strip() or (proc.stdout or "").strip() or "git clone failed"
        raise _classify_failure(source, url, detail)

    shutil.rmtree(clone_dir / ".git", ignore_errors=True)
    return clone_dir
