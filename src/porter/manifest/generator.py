"""Scaffold a minimal manifest from what is already in a workspace."""

from __future__ import annotations

import re
from pathlib import Path

from porter.manifest.types import (
    CONTEXT_FILES,
    SOUL_FILENAME,
    BundledSkill,
    ContextFiles,
    EngineSpec,
    Manifest,
    SkillsSpec,
)

DEFAULT_VERSION = "1.0.0"
DEFAULT_ENGINE = ">=1.0.0"
ASSETS_DIR = "avatars"
SKILLS_DIR = "skills"


def slugify_name(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    return slug or "agent"


def generate_manifest(
    workspace: Path,
    *,
    name: str | None = None,
    description: str | None = None,
) -> Manifest:
    """Build a manifest for `workspace` without writing anything to disk."""
    dir_name = workspace.resolve().name

    context = ContextFiles(soul=SOUL_FILENAME)
    for role, filename in CONTEXT_FILES.items():
        if (workspace / filename).is_file():
            setattr(context, role, filename)

    manifest = Manifest(
        name=name or slugify_name(dir_name),
        version=DEFAULT_VERSION,
        description=description or f"AI agent: {dir_name}",
        engine=EngineSpec(clawdbot=DEFAULT_ENGINE),
        context=context,
    )

    if (workspace / ASSETS_DIR).is_dir():
        manifest.assets = [f"{ASSETS_DIR}/"]

    skills_root = workspace / SKILLS_DIR
    if skills_root.is_dir():
        skill_dirs = sorted(
            child.name
            for child in skills_root.iterdir()
            if child.is_dir() and not child.name.startswith(".")
        )
        if skill_dirs:
            manifest.skills = SkillsSpec(
                bundled=[BundledSkill(path=f"{SKILLS_DIR}/{skill}") for skill in skill_dirs]
            )

    return manifest
