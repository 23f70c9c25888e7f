"""Redact the user-profile file (USER.md) into a shareable template."""

from __future__ import annotations

import re
from pathlib import Path

from porter.manifest.types import USER_PROFILE_FILENAME, USER_TEMPLATE_FILENAME

# Profile label (lowercased) -> placeholder token.
PLACEHOLDERS = {
    "name": "{{YOUR_NAME}}",
    "full name": "{{YOUR_NAME}}",
    "preferred name": "{{YOUR_PREFERRED_NAME}}",
    "what to call them": "{{YOUR_PREFERRED_NAME}}",
    "nickname": "{{YOUR_PREFERRED_NAME}}",
    "pronouns": "{{YOUR_PRONOUNS}}",
    "location": "{{YOUR_LOCATION}}",
    "city": "{{YOUR_LOCATION}}",
    "address": "{{YOUR_ADDRESS}}",
    "timezone": "{{YOUR_TIMEZONE}}",
    "time zone": "{{YOUR_TIMEZONE}}",
    "email": "{{YOUR_EMAIL}}",
    "phone": "{{YOUR_PHONE}}",
    "birthday": "{{YOUR_BIRTHDAY}}",
    "company": "{{YOUR_COMPANY}}",
    "occupation": "{{YOUR_OCCUPATION}}",
}

# Matches "- **Name:** John", "**Timezone**: UTC", "Location: Miami".
_FIELD_RE = re.compile(
    r"^(?P<prefix>\s*(?:[-*+]\s+)?(?:\*\*|__)?(?P<label>[A-Za-z][A-Za-z ]*?)"
    r"(?:\*\*|__)?\s*:\s*(?:\*\*|__)?\s*)(?P<value>\S.*)$"
)


def redact_profile(text: str) -> str:
    lines: list[str] = []
    for line in text.split("\n"):
        match = _FIELD_RE.match(line)
        if match:
            label = " ".join(match.group("label").lower().split())
            placeholder = PLACEHOLDERS.get(label)
            if placeholder is not None:
                line = f"{match.group('prefix')}{placeholder}"
        lines.append(line)
    return "\n".join(lines)


def write_profile_template(workspace: Path) -> str | None:
    """Write USER.md.template next to USER.md; returns its relative path, or None."""
    profile = workspace / USER_PROFILE_FILENAME
    if not profile.is_file():
        return None
    template = workspace / USER_TEMPLATE_FILENAME
    template.write_text(redact_profile(profile.read_text(encoding="utf-8")), encoding="utf-8")
    return USER_TEMPLATE_FILENAME
