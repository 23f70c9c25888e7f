"""tar.gz read/write for agent packages."""

from __future__ import annotations

import logging
import tarfile
from pathlib import Path

from porter.errors import ArchiveError

logger = logging.getLogger(__name__)

ARCHIVE_EXTENSION = ".tar.gz"
ARCHIVE_SUFFIXES = (".tar.gz", ".tgz")


def is_archive_path(source: str) -> bool:
    return source.lower().endswith(ARCHIVE_SUFFIXES)


def _discard_partial(dest_file: Path) -> None:
    try:
        dest_file.unlink(missing_ok=True)
    except OSError as exc:
        logger.debug("could not remove partial archive %s: %s", dest_file, exc)


def create_archive(workspace: Path, files: list[str], dest_file: Path, root_name: str) -> Path:
    """Write `files` (relative to workspace) under a single `root_name/` directory."""
    try:
        dest_file.parent.mkdir(parents=True, exist_ok=True)
        with tarfile.open(dest_file, "w:gz") as archive:
            root = tarfile.TarInfo(root_name)
            root.type = tarfile.DIRTYPE
            root.mode = 0o755
            archive.addfile(root)
            for relative in files:
                source = workspace / relative
                if not source.is_file():
                    raise ArchiveError(f"file listed for export is missing: {relative}")
                archive.add(source, arcname=f"{root_name}/{relative}", recursive=False)
    except ArchiveError:
        _discard_partial(dest_file)
        raise
    except (OSError, tarfile.TarError) as exc:
        _discard_partial(dest_file)
        raise ArchiveError(str(exc)) from exc
    return dest_file


def extract_archive(archive_file: Path, dest_dir: Path) -> None:
    try:
        dest_dir.mkdir(parents=True, exist_ok=True)
        with tarfile.open(archive_file, "r:*") as archive:
            archive.extractall(dest_dir, filter="data")
    except (OSError, tarfile.TarError) as exc:
        raise ArchiveError(str(exc)) from exc
