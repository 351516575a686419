#!/usr/bin/env python3
"""
Version helpers for semver-style skill versions ("1.2.3", "v1.2").

Unparseable versions never raise: parse_version returns None and the
callers treat that as "no update available".
"""

import re
from typing import Optional, Tuple

VERSION_PATTERN = re.compile(r"^(\d+)(?:\.(\d+))?(?:\.(\d+))?")

UPDATE_MAJOR = "major"
UPDATE_MINOR = "minor"
UPDATE_PATCH = "patch"
UPDATE_NONE = "none"


def parse_version(version: Optional[str]) -> Optional[Tuple[int, int, int]]:
    """Return (major, minor, patch), or None when the string is not a version."""
    if not version:
        return None
    cleaned = str(version).strip()
    if cleaned[:1] in ("v", "V"):
        cleaned = cleaned[1:]
    match = VERSION_PATTERN.match(cleaned)
    if not match:
        return None
    return (
        int(match.group(1)),
        int(match.group(2) or 0),
        int(match.group(3) or 0),
    )


def is_outdated(version: Optional[str], latest_version: Optional[str]) -> bool:
    """True when both versions parse and differ."""
    current = parse_version(version)
    latest = parse_version(latest_version)
    if current is None or latest is None:
        return False
    return current != latest


def is_major_bump(version: Optional[str], latest_version: Optional[str]) -> bool:
    current = parse_version(version)
    latest = parse_version(latest_version)
    if current is None or latest is None:
        return False
    return latest[0] > current[0]


def get_update_type(version: Optional[str], latest_version: Optional[str]) -> str:
    """
    Classify the update from version to latest_version.

    Returns "none" when either side is unparseable or the current
    version is already at or beyond the latest one.
    """
    current = parse_version(version)
    latest = parse_version(latest_version)
    if current is None or latest is None:
        return UPDATE_NONE

    if latest[0] > current[0]:
        return UPDATE_MAJOR
    if latest[0] == current[0] and latest[1] > current[1]:
        return UPDATE_MINOR
    if latest[:2] == current[:2] and latest[2] > current[2]:
        return UPDATE_PATCH
    return UPDATE_NONE


def format_version(version: str) -> str:
    parsed = parse_version(version)
    if parsed is None:
        return version
    return "v{}.{}.{}".format(*parsed)
