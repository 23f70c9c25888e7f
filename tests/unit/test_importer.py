import tarfile
from pathlib import Path

import pytest

from porter.errors import FetchError
from porter.importer import ARCHIVE_TEMP_DIR, import_agent, parse_source
from porter.remote.github import GITHUB_TEMP_DIR, GitHubSource


def _manifest(name: str, extra: str = "") -> str:
    return (
        f"name: {name}\nversion: 1.0.0\ndescription: An agent\n"
        f"engine:\n  clawdbot: \">=1.0.0\"\ncontext:\n  soul: SOUL.md\n{extra}"
    )


def _source(root: Path, name: str = "imported-agent", extra: str = "", **files: str) -> Path:
    root.mkdir(parents=True, exist_ok=True)
    (root / "porter.yaml").write_text(_manifest(name, extra), encoding="utf-8")
    (root / "SOUL.md").write_text("# Imported Soul", encoding="utf-8")
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


def _tree(root: Path) -> list[str]:
    return sorted(path.relative_to(root).as_posix() for path in root.rglob("*") if path.is_file())


def _tarball(source_dir: Path, dest: Path) -> Path:
    with tarfile.open(dest, "w:gz") as archive:
        archive.add(source_dir, arcname=source_dir.name)
    return dest


class TestParseSource:
    def test_github(self) -> None:
        spec = parse_source("github:user/repo@v1.2.0")
        assert (spec.kind, spec.path, spec.version) == ("github", "user/repo", "v1.2.0")

    def test_clawdhub(self) -> None:
        spec = parse_source("clawdhub:my-agent")
        assert (spec.kind, spec.path, spec.version) == ("clawdhub", "my-agent", None)

    def test_local(self) -> None:
        spec = parse_source("./my-agent.tar.gz")
        assert (spec.kind, spec.path) == ("local", "./my-agent.tar.gz")


def test_import_from_directory(tmp_path: Path) -> None:
    source = _source(
        tmp_path / "src", **{"skills/web/SKILL.md": "skill", "avatars/a.png": "png"}
    )
    target = tmp_path / "target"

    result = import_agent(str(source), target=target)

    assert result.success is True
    assert result.agent_path == target / "imported-agent"
    for relative in ("porter.yaml", "SOUL.md", "skills/web/SKILL.md", "avatars/a.png"):
        assert (target / "imported-agent" / relative).is_file()


def test_import_from_tarball_cleans_staging(tmp_path: Path) -> None:
    source = _source(
        tmp_path / "test-agent",
        name="test-agent",
        **{"skills/web/SKILL.md": "skill", "avatars/face.png": "png"},
    )
    archive = _tarball(source, tmp_path / "test-agent.tar.gz")
    target = tmp_path / "target"

    result = import_agent(str(archive), target=target)

    assert result.success is True
    assert (target / "test-agent" / "SOUL.md").read_text() == "# Imported Soul"
    assert _tree(target / "test-agent") == _tree(source)
    assert "skills/web/SKILL.md" in _tree(target / "test-agent")
    assert not (target / ARCHIVE_TEMP_DIR).exists()


def test_tarball_with_multiple_roots_is_rejected(tmp_path: Path) -> None:
    archive = tmp_path / "bad.tgz"
    (tmp_path / "one").mkdir()
    (tmp_path / "two").mkdir()
    with tarfile.open(archive, "w:gz") as tar:
        tar.add(tmp_path / "one", arcname="one")
        tar.add(tmp_path / "two", arcname="two")
    target = tmp_path / "target"

    result = import_agent(str(archive), target=target)

    assert result.success is False
    assert result.errors == ["Invalid archive structure - expected single root directory"]
    assert not (target / ARCHIVE_TEMP_DIR).exists()


def test_corrupt_tarball(tmp_path: Path) -> None:
    archive = tmp_path / "corrupt.tar.gz"
    archive.write_text("nope")
    result = import_agent(str(archive), target=tmp_path / "target")
    assert result.success is False
    assert result.errors[0].startswith("Failed to extract archive")
    assert not (tmp_path / "target" / ARCHIVE_TEMP_DIR).exists()


def test_stale_staging_is_replaced(tmp_path: Path) -> None:
    source = _source(tmp_path / "test-agent", name="test-agent")
    archive = _tarball(source, tmp_path / "test-agent.tar.gz")
    target = tmp_path / "target"
    (target / ARCHIVE_TEMP_DIR / "leftover").mkdir(parents=True)

    result = import_agent(str(archive), target=target)

    assert result.success is True


def test_missing_source(tmp_path: Path) -> None:
    for source in (tmp_path / "nowhere", tmp_path / "nowhere.tar.gz"):
        result = import_agent(str(source), target=tmp_path / "target")
        assert result.success is False
        assert result.errors == [f"Source not found: {source}"]


def test_missing_manifest(tmp_path: Path) -> None:
    source = tmp_path / "src"
    source.mkdir()
    (source / "SOUL.md").write_text("x")
    result = import_agent(str(source), target=tmp_path / "target")
    assert result.errors == ["No porter.yaml found in package"]


def test_invalid_manifest_errors_propagate(tmp_path: Path) -> None:
    source = tmp_path / "src"
    source.mkdir()
    (source / "porter.yaml").write_text("name: x\n")
    result = import_agent(str(source), target=tmp_path / "target")
    assert result.success is False
    assert "Missing required field: version" in result.errors
    assert "Missing required field: context.soul (SOUL.md is required)" in result.errors
    assert not (tmp_path / "target" / "x").exists()


def test_collision_without_force(tmp_path: Path) -> None:
    source = _source(tmp_path / "src", name="existing")
    target = tmp_path / "target"
    (target / "existing").mkdir(parents=True)

    result = import_agent(str(source), target=target)

    assert result.success is False
    assert any("already exists" in error and "--force" in error for error in result.errors)
    assert list((target / "existing").iterdir()) == []


def test_collision_with_force_overwrites(tmp_path: Path) -> None:
    source = _source(tmp_path / "src", name="existing")
    target = tmp_path / "target"
    (target / "existing").mkdir(parents=True)
    (target / "existing" / "SOUL.md").write_text("old soul")
    (target / "existing" / "keep.md").write_text("mine")

    result = import_agent(str(source), target=target, force=True)

    assert result.success is True
    assert (target / "existing" / "SOUL.md").read_text() == "# Imported Soul"
    assert (target / "existing" / "keep.md").read_text() == "mine"


def test_missing_env_reported_not_fatal(tmp_path: Path) -> None:
    extra = "env:\n  required:\n    - MISSING_VAR_12345\n    - PRESENT_VAR\n"
    source = _source(tmp_path / "src", name="env-agent", extra=extra)

    result = import_agent(
        str(source),
        target=tmp_path / "target",
        env_lookup=lambda name: name == "PRESENT_VAR",
    )

    assert result.success is True
    assert result.missing_env == ["MISSING_VAR_12345"]


def test_missing_env_uses_process_environment(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.delenv("MISSING_VAR_12345", raising=False)
    extra = "env:\n  required:\n    - MISSING_VAR_12345\n"
    source = _source(tmp_path / "src", name="env-agent", extra=extra)
    result = import_agent(str(source), target=tmp_path / "target")
    assert result.missing_env == ["MISSING_VAR_12345"]

    monkeypatch.setenv("MISSING_VAR_12345", "set")
    result = import_agent(str(source), target=tmp_path / "target", force=True)
    assert result.missing_env == []


def test_skip_env_and_skills(tmp_path: Path) -> None:
    extra = (
        "env:\n  required: [NOPE_VAR]\n"
        "skills:\n  external:\n    - name: web-search\n    - name: calendar\n"
    )
    source = _source(tmp_path / "src", name="skill-agent", extra=extra)

    reported = import_agent(str(source), target=tmp_path / "a", env_lookup=lambda _n: False)
    skipped = import_agent(
        str(source), target=tmp_path / "b", skip_env=True, skip_skills=True
    )

    assert reported.installed_skills == ["web-search", "calendar"]
    assert reported.missing_env == ["NOPE_VAR"]
    assert skipped.installed_skills == []
    assert skipped.missing_env == []


def test_user_profile_created_from_template(tmp_path: Path) -> None:
    source = _source(
        tmp_path / "src",
        name="template-agent",
        **{"USER.md.template": "# USER.md\n- **Name:** {{YOUR_NAME}}"},
    )
    result = import_agent(str(source), target=tmp_path / "target")

    user_md = tmp_path / "target" / "template-agent" / "USER.md"
    assert result.created_user_profile is True
    assert user_md.read_text() == "# USER.md\n- **Name:** {{YOUR_NAME}}"


def test_existing_user_profile_is_kept(tmp_path: Path) -> None:
    source = _source(
        tmp_path / "src",
        name="template-agent",
        **{"USER.md.template": "{{YOUR_NAME}}"},
    )
    target = tmp_path / "target"
    (target / "template-agent").mkdir(parents=True)
    (target / "template-agent" / "USER.md").write_text("Jane")

    result = import_agent(str(source), target=target, force=True)

    assert result.created_user_profile is False
    assert (target / "template-agent" / "USER.md").read_text() == "Jane"


def test_post_install_hook_reported_not_run(tmp_path: Path) -> None:
    extra = "hooks:\n  post_install: scripts/setup.sh\n"
    source = _source(
        tmp_path / "src",
        name="hook-agent",
        extra=extra,
        **{"scripts/setup.sh": "#!/bin/sh\ntouch ran\n"},
    )

    result = import_agent(str(source), target=tmp_path / "target")

    assert result.post_install_hook == "scripts/setup.sh"
    assert not (tmp_path / "target" / "hook-agent" / "ran").exists()


def test_import_into_own_source_tree(tmp_path: Path) -> None:
    source = _source(tmp_path / "ws", name="self-agent")
    result = import_agent(str(source), target=source)
    assert result.success is True
    agent_dir = source / "self-agent"
    assert (agent_dir / "SOUL.md").exists()
    assert not (agent_dir / "self-agent").exists()


def test_github_source_uses_fetcher_and_cleans_up(tmp_path: Path) -> None:
    target = tmp_path / "target"
    calls: list[GitHubSource] = []

    def _fetch(source: GitHubSource, target_dir: Path) -> Path:
        calls.append(source)
        return _source(
            target_dir / GITHUB_TEMP_DIR / source.repo,
            name="remote-agent",
            **{"skills/web/SKILL.md": "skill", "mcp/github.json": "{}"},
        )

    result = import_agent("github:owner/agent-repo@v2.0.0", target=target, fetcher=_fetch)

    assert result.success is True
    assert calls == [GitHubSource("owner", "agent-repo", "v2.0.0")]
    assert _tree(target / "remote-agent") == [
        "SOUL.md",
        "mcp/github.json",
        "porter.yaml",
        "skills/web/SKILL.md",
    ]
    assert not (target / GITHUB_TEMP_DIR).exists()


def test_github_fetch_failure(tmp_path: Path) -> None:
    def _fetch(source: GitHubSource, target_dir: Path) -> Path:
        (target_dir / GITHUB_TEMP_DIR).mkdir(parents=True)
        raise FetchError("Version not found: v9", kind="version_not_found")

    result = import_agent("github:owner/repo@v9", target=tmp_path, fetcher=_fetch)

    assert result.success is False
    assert result.errors == ["Version not found: v9"]
    assert not (tmp_path / GITHUB_TEMP_DIR).exists()


@pytest.mark.parametrize("source", ["github:invalid", "github:"])
def test_invalid_github_locator(source: str, tmp_path: Path) -> None:
    result = import_agent(source, target=tmp_path)
    assert result.success is False
    assert result.errors[0].startswith("Invalid GitHub source")


def test_registry_source_is_unsupported(tmp_path: Path) -> None:
    result = import_agent("clawdhub:my-agent", target=tmp_path)
    assert result.success is False
    assert result.errors == ["ClawdHub import is not supported yet: clawdhub:my-agent"]


def test_import_into_own_source_tree_keeps_nested_dirs(tmp_path: Path) -> None:
    source = _source(tmp_path / "ws", name="nested-agent", **{"skills/a/b/c.md": "deep"})
    expected = _tree(source)

    result = import_agent(str(source), target=source)

    assert result.success is True
    assert _tree(source / "nested-agent") == expected


def test_non_utf8_manifest_is_reported(tmp_path: Path) -> None:
    source = tmp_path / "src"
    source.mkdir()
    (source / "porter.yaml").write_bytes(b"name: caf\xe9\n")

    result = import_agent(str(source), target=tmp_path / "target")

    assert result.success is False
    assert len(result.errors) == 1
    assert result.errors[0].startswith("Invalid porter.yaml in package:")


@pytest.mark.parametrize("source", ["github:owner/..", "github:owner/."])
def test_dot_segment_github_locator_is_rejected(source: str, tmp_path: Path) -> None:
    (tmp_path / ".git").mkdir()
    result = import_agent(source, target=tmp_path, fetcher=lambda *_: pytest.fail("fetched"))
    assert result.success is False
    assert result.errors[0].startswith("Invalid GitHub source")
    assert (tmp_path / ".git").is_dir()
