"""Best-effort detection of credentials accidentally left in agent files."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = frozenset(
    {".md", ".markdown", ".yaml", ".yml", ".json", ".toml", ".txt", ".js", ".ts", ".py", ".sh"}
)

SECRET_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(
        r"(?:api[_-]?key|apikey|secret|password|token|auth)\s*[=:]\s*[\"']?[a-zA-Z0-9_-]{20,}",
        re.IGNORECASE,
    ),
    re.compile(r"sk-[a-zA-Z0-9]{32,}"),  # OpenAI-style
    re.compile(r"xai-[a-zA-Z0-9]{32,}"),  # xAI
    re.compile(r"AIza[a-zA-Z0-9_-]{35}"),  # Google API
    re.compile(r"ghp_[a-zA-Z0-9]{36}"),  # GitHub personal token
)

_PREVIEW_CHARS = 20


@dataclass(frozen=True, slots=True)
class LeakRecord:
    file: str
    line: int
    match: str

    def describe(self) -> str:
        return f"{self.file}:{self.line} - {self.match}"


def _preview(text: str) -> str:
    return f"{text[:_PREVIEW_CHARS]}..."


def check_for_secrets(workspace: Path, files: list[str]) -> list[LeakRecord]:
    """Return one record per (file, line, pattern) hit.

    Only text-like files are read; unreadable ones are skipped.
    """
    leaks: list[LeakRecord] = []
    for relative in files:
        if Path(relative).suffix.lower() not in TEXT_EXTENSIONS:
            continue
        try:
            content = (workspace / relative).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            logger.debug("secret scan skipped unreadable file %s", relative)
            continue
        for index, line in enumerate(content.split("\n"), start=1):
            for pattern in SECRET_PATTERNS:
                found = pattern.search(line)
                if found:
                    preview = _preview(found.group(0))
                    leaks.append(LeakRecord(file=relative, line=index, match=preview))
    return leaks
