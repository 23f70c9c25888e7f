"""Manifest data models."""

from __future__ import annotations

from dataclasses import dataclass, field

from pydantic import BaseModel, ConfigDict, Field, field_validator

MANIFEST_FILENAME = "porter.yaml"

SOUL_FILENAME = "SOUL.md"
USER_PROFILE_FILENAME = "USER.md"
USER_TEMPLATE_FILENAME = "USER.md.template"

# Optional context roles and the filenames `porter init` detects for them.
CONTEXT_FILES = {
    "identity": "IDENTITY.md",
    "tools": "TOOLS.md",
    "agents": "AGENTS.md",
    "heartbeat": "HEARTBEAT.md",
}


class _Section(BaseModel):
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)


class EngineSpec(_Section):
    clawdbot: str | None = None
    node: str | None = None


class ContextFiles(_Section):
    soul: str | None = None
    identity: str | None = None
    tools: str | None = None
    agents: str | None = None
    heartbeat: str | None = None

    def paths(self) -> list[str]:
        """Declared context paths in role order, skipping absent roles."""
        values = (self.soul, self.identity, self.tools, self.agents, self.heartbeat)
        return [value for value in values if value]


class BundledSkill(_Section):
    path: str


class ExternalSkill(_Section):
    name: str
    version: str | None = None


class SkillsSpec(_Section):
    bundled: list[BundledSkill] = Field(default_factory=list)
    external: list[ExternalSkill] = Field(default_factory=list)

    @field_validator("bundled", mode="before")
    @classmethod
    def _bundled_shorthand(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, list):
            return [{"path": item} if isinstance(item, str) else item for item in value]
        return value

    @field_validator("external", mode="before")
    @classmethod
    def _external_shorthand(cls, value: object) -> object:
        if value is None:
            return []
        if isinstance(value, list):
            return [{"name": item} if isinstance(item, str) else item for item in value]
        return value


class McpServer(_Section):
    name: str
    config: str | None = None
    required: bool = False


class EnvSpec(_Section):
    required: list[str] = Field(default_factory=list)
    optional: list[str] = Field(default_factory=list)

    @field_validator("required", "optional", mode="before")
    @classmethod
    def _none_as_list(cls, value: object) -> object:
        return [] if value is None else value


class SeedsSpec(_Section):
    memory: list[str] = Field(default_factory=list)
    projects: list[str] = Field(default_factory=list)

    @field_validator("memory", "projects", mode="before")
    @classmethod
    def _none_as_list(cls, value: object) -> object:
        return [] if value is None else value


class HooksSpec(_Section):
    pre_export: str | None = None
    post_install: str | None = None
    validate_: str | None = Field(default=None, alias="validate")

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class Manifest(_Section):
    """Declarative description of an agent package (porter.yaml)."""

    name: str | None = None
    version: str | None = None
    description: str | None = None
    author: str | None = None
    repository: str | None = None
    license: str | None = None

    engine: EngineSpec = Field(default_factory=EngineSpec)
    context: ContextFiles = Field(default_factory=ContextFiles)
    skills: SkillsSpec | None = None
    mcp: list[McpServer] = Field(default_factory=list)
    env: EnvSpec | None = None
    assets: list[str] = Field(default_factory=list)
    exclude: list[str] = Field(default_factory=list)
    seeds: SeedsSpec | None = None
    hooks: HooksSpec | None = None
    tags: list[str] = Field(default_factory=list)

    @field_validator("engine", "context", mode="before")
    @classmethod
    def _none_as_empty(cls, value: object) -> object:
        return {} if value is None else value

    @field_validator("mcp", "assets", "exclude", "tags", mode="before")
    @classmethod
    def _none_as_list(cls, value: object) -> object:
        return [] if value is None else value

    @property
    def bundled_skills(self) -> list[BundledSkill]:
        return self.skills.bundled if self.skills else []

    @property
    def external_skills(self) -> list[ExternalSkill]:
        return self.skills.external if self.skills else []

    @property
    def required_env(self) -> list[str]:
        return self.env.required if self.env else []

    @property
    def archive_root(self) -> str:
        return f"{self.name}-{self.version}"


@dataclass(slots=True)
class ValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
