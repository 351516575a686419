#!/usr/bin/env python3
"""
Skill Input Parser
Turns free-form skill listings into de-duplicated SkillReference lists.

Accepted formats:
- JSON arrays of strings or {"name", "version", "path"} objects
- One skill per line: plain names, name@1.2.3, name v1.2.3
- Filesystem paths (last segment is the skill name)
- `ls -l` output rows

Author: Skill Atlas Contributors
Version: 1.0.0
License: MIT
"""

import json
import re
from typing import Any, List

from .models_lib import SkillReference

# `ls -l` row: "drwxr-xr-x  5 user  staff  160 Feb  1 12:34 skill-name"
LS_ROW_PATTERN = re.compile(r"^[d-][rwx-]{9}\s+\d+\s+\S+\s+\S+\s+\d+\s+\w+\s+\d+\s+[\d:]+\s+(.+)$")

# "prompt-guard@2.8.0" or "prompt-guard v2.8.0"
VERSION_SUFFIX_PATTERN = re.compile(r"^(.+?)[@\s]+v?(\d+\.\d+\.\d+)$")

# Lines skipped in line mode
COMMENT_PREFIX = "#"
LS_TOTAL_PREFIX = "total"


def parse_skill_string(text: str) -> SkillReference:
    """
    Classify a single skill line.

    Args:
        text: One line of input

    Returns:
        SkillReference (name-only when nothing more specific matches)
    """
    trimmed = text.strip()

    ls_match = LS_ROW_PATTERN.match(trimmed)
    if ls_match:
        return parse_skill_string(ls_match.group(1))

    version_match = VERSION_SUFFIX_PATTERN.match(trimmed)
    if version_match:
        return SkillReference(name=version_match.group(1).strip(), version=version_match.group(2))

    if "/" in trimmed:
        return SkillReference(name=trimmed.split("/")[-1], path=trimmed)

    return SkillReference(name=trimmed)


def _scalar_text(item: Any) -> str:
    """JSON spelling of a scalar: null, true, 1 (not None, True, 1.0)."""
    if isinstance(item, float) and item.is_integer():
        return str(int(item))
    if item is None or isinstance(item, (bool, int, float)):
        return json.dumps(item)
    if isinstance(item, list):
        return ",".join("" if entry is None else _scalar_text(entry) for entry in item)
    return str(item)


def _parse_json_item(item: Any) -> SkillReference:
    if isinstance(item, str):
        return parse_skill_string(item)
    if isinstance(item, dict) and item.get("name"):
        return SkillReference(
            name=str(item["name"]),
            version=str(item["version"]) if item.get("version") else None,
            path=str(item["path"]) if item.get("path") else None,
        )
    return SkillReference(name=_scalar_text(item))


def _parse_json_array(text: str) -> List[SkillReference]:
    parsed = json.loads(text)
    if not isinstance(parsed, list):
        raise ValueError("JSON input is not an array")
    return [_parse_json_item(item) for item in parsed]


def deduplicate_references(references: List[SkillReference]) -> List[SkillReference]:
    """Drop case-insensitive name duplicates, keeping the first occurrence."""
    seen = {}
    for ref in references:
        key = ref.name.lower()
        if key not in seen:
            seen[key] = ref
    return list(seen.values())


def parse_skill_input(raw_text: str) -> List[SkillReference]:
    """
    Parse raw skill input into de-duplicated references. Never raises.

    Args:
        raw_text: Pasted listing, JSON array, or file content

    Returns:
        List of SkillReference in first-seen order
    """
    trimmed = (raw_text or "").strip()

    if trimmed.startswith("["):
        try:
            return deduplicate_references(_parse_json_array(trimmed))
        except (ValueError, TypeError, RecursionError):
            # Not a usable JSON array, fall through to line mode
            pass

    lines = [line.strip() for line in trimmed.split("\n")]
    lines = [
        line for line in lines
        if line and not line.startswith(COMMENT_PREFIX) and not line.startswith(LS_TOTAL_PREFIX)
    ]

    return deduplicate_references([parse_skill_string(line) for line in lines])
