"""Reading and writing porter.yaml."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from porter.errors import ManifestFormatError
from porter.manifest.types import MANIFEST_FILENAME, Manifest


def parse_manifest(text: str) -> Manifest:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ManifestFormatError(f"malformed YAML: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ManifestFormatError("manifest must be a mapping at the top level")
    try:
        return Manifest.model_validate(data)
    except ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        raise ManifestFormatError(f"invalid manifest structure: {details}") from exc


def serialize_manifest(manifest: Manifest) -> str:
    data = manifest.model_dump(
        mode="json",
        by_alias=True,
        exclude_none=True,
        exclude_defaults=True,
    )
    return yaml.safe_dump(
        data,
        sort_keys=False,
        indent=2,
        width=120,
        allow_unicode=True,
        default_flow_style=False,
    )


def load_manifest(workspace: Path) -> Manifest | None:
    """Load porter.yaml from a workspace root, or None when there is none.

    Raises ManifestFormatError when the file exists but cannot be decoded.
    """
    manifest_path = workspace / MANIFEST_FILENAME
    if not manifest_path.is_file():
        return None
    try:
        text = manifest_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise ManifestFormatError(f"{MANIFEST_FILENAME} is not valid UTF-8: {exc}") from exc
    return parse_manifest(text)


def save_manifest(workspace: Path, manifest: Manifest) -> Path:
    manifest_path = workspace / MANIFEST_FILENAME
    manifest_path.write_text(serialize_manifest(manifest), encoding="utf-8")
    return manifest_path
