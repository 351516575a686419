#!/usr/bin/env python3
"""
Risk Scorer
Heuristic 0-100 vulnerability score for a skill from its declared metadata.

Four additive contributions:
- Permissions: filesystem +10, code-execution +10, network +5
- Version gap: major +25, minor +15, any other difference +5
- Trust source: unknown +25, community +15, verified +5, official +0
- Sensitive data handling: +15

The score is a triage aid over declared metadata, not a security audit.
"""

from typing import List, Optional, Tuple

from .version_lib import parse_version

PERMISSION_WEIGHTS = {
    "filesystem": 10,
    "code-execution": 10,
    "network": 5,
}

TRUST_SOURCE_WEIGHTS = {
    "unknown": 25,
    "community": 15,
    "verified": 5,
    "official": 0,
}

VERSION_GAP_MAJOR = 25
VERSION_GAP_MINOR = 15
VERSION_GAP_OTHER = 5

SENSITIVE_DATA_WEIGHT = 15

# Upper bounds of each level, inclusive
RISK_THRESHOLDS = [
    (25, "low"),
    (50, "medium"),
    (75, "high"),
]


def risk_level(score: int) -> str:
    for upper, level in RISK_THRESHOLDS:
        if score <= upper:
            return level
    return "critical"


def version_gap_score(version: Optional[str], latest_version: Optional[str]) -> int:
    """Contribution of a version gap; 0 when either version is missing or unparseable."""
    current = parse_version(version)
    latest = parse_version(latest_version)
    if current is None or latest is None or current == latest:
        return 0
    if latest[0] > current[0]:
        return VERSION_GAP_MAJOR
    if latest[1] > current[1]:
        return VERSION_GAP_MINOR
    return VERSION_GAP_OTHER


def calculate_vulnerability_score(permissions: List[str], trust_source: str,
                                  handles_sensitive_data: bool,
                                  version: Optional[str] = None,
                                  latest_version: Optional[str] = None) -> Tuple[int, str]:
    """
    Score a skill's declared risk surface.

    Args:
        permissions: Declared permissions (filesystem, code-execution, network, ...)
        trust_source: official, verified, community or unknown
        handles_sensitive_data: Whether the skill touches credentials or personal data
        version: Installed version, if known
        latest_version: Latest published version, if known

    Returns:
        Tuple of (score in 0..100, risk level)
    """
    score = 0

    granted = set(permissions or [])
    for permission, weight in PERMISSION_WEIGHTS.items():
        if permission in granted:
            score += weight

    score += version_gap_score(version, latest_version)
    score += TRUST_SOURCE_WEIGHTS.get(trust_source, TRUST_SOURCE_WEIGHTS["unknown"])

    if handles_sensitive_data:
        score += SENSITIVE_DATA_WEIGHT

    score = max(0, min(100, score))
    return score, risk_level(score)
