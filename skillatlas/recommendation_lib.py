#!/usr/bin/env python3
"""
Recommendation Generator
Deterministic diagnosis, install, update and security advice for a
resolved portfolio. Every rule fires independently; the remove list is
left for the duplicate finder.

Author: Skill Atlas Contributors
Version: 1.0.0
License: MIT
"""

from typing import Dict, List

from .models_lib import (
    HEALTH_NEEDS_UPDATE,
    DiagnosisItem,
    InstallItem,
    Recommendations,
    SecurityItem,
    SkillNode,
    UpdateItem,
)
from .metrics_lib import round_half_up
from .version_lib import is_major_bump, is_outdated

OVERLOAD_PERCENT = 50

# Categories whose absence triggers an install suggestion, checked in this order
MISSING_CATEGORY_RULES = [
    {
        "category": "data",
        "diagnosis": ("Data/Analytics skills lacking", "No database or analytics capability"),
        "install": InstallItem(id="sql-query", reason="Data/Analytics category empty",
                               priority="high", category="Data"),
    },
    {
        "category": "devops",
        "diagnosis": None,
        "install": InstallItem(id="docker-basics", reason="DevOps capability missing",
                               priority="medium", category="DevOps"),
    },
    {
        "category": "security",
        "diagnosis": ("Security skills missing", "No protection against attacks"),
        "install": InstallItem(id="prompt-guard", reason="Critical security protection",
                               priority="high", category="Security"),
    },
]

FLAGGED_RISK_LEVELS = ("high", "critical")

MAX_LISTED_UNKNOWN = 3


def build_security_reason(node: SkillNode) -> str:
    """Human readable list of what makes a node risky."""
    vulnerability = node.vulnerability
    parts = []

    if vulnerability.trust_source == "community":
        parts.append("Community source")
    elif vulnerability.trust_source == "unknown":
        parts.append("Unknown source")

    if "code-execution" in vulnerability.permissions:
        parts.append("code execution")
    if "filesystem" in vulnerability.permissions:
        parts.append("filesystem access")

    if node.health == HEALTH_NEEDS_UPDATE:
        parts.append("outdated")

    if vulnerability.handles_sensitive_data:
        parts.append("handles sensitive data")

    return " + ".join(parts)


def build_security_action(node: SkillNode) -> str:
    if node.health == HEALTH_NEEDS_UPDATE and node.latest_version:
        return f"Update to v{node.latest_version}"
    if node.vulnerability.trust_source == "unknown":
        return "Verify source or find alternative"
    if node.vulnerability.trust_source == "community":
        return "Review permissions and source"
    return "Review security permissions"


def _overload_diagnosis(category_counts: Dict[str, int], total: int):
    if not category_counts or total <= 0:
        return None

    top_count = max(category_counts.values())
    percent = 100 * top_count / total
    if percent <= OVERLOAD_PERCENT:
        return None

    # First category reaching the maximum, in insertion order
    dominant = next(category for category, count in category_counts.items() if count == top_count)
    return DiagnosisItem(
        type="warning",
        text=f"{dominant[:1].upper() + dominant[1:]} skills overload ({round_half_up(percent)}%)",
        detail="Consider balancing with other categories",
    )


def generate_recommendations(nodes: List[SkillNode], category_counts: Dict[str, int],
                             unknown_names: List[str]) -> Recommendations:
    """
    Apply the recommendation rules to a resolved portfolio.

    Args:
        nodes: Skill nodes in input order
        category_counts: Skills per category
        unknown_names: Input names that matched no catalog entry

    Returns:
        Recommendations with items in rule order
    """
    recommendations = Recommendations()
    diagnosis = recommendations.diagnosis

    overload = _overload_diagnosis(category_counts, len(nodes))
    if overload:
        diagnosis.append(overload)

    for rule in MISSING_CATEGORY_RULES:
        if category_counts.get(rule["category"]):
            continue
        if rule["diagnosis"]:
            text, detail = rule["diagnosis"]
            diagnosis.append(DiagnosisItem(type="error", text=text, detail=detail))
        install = rule["install"]
        recommendations.install.append(InstallItem(
            id=install.id, reason=install.reason, priority=install.priority, category=install.category,
        ))

    if category_counts.get("security"):
        diagnosis.append(DiagnosisItem(
            type="success",
            text="Security skills present",
            detail="Basic protection in place",
        ))

    for node in nodes:
        if is_outdated(node.version, node.latest_version):
            recommendations.update.append(UpdateItem(
                id=node.id,
                from_version=f"v{node.version}",
                to_version=f"v{node.latest_version}",
                reason=("Major update with new features"
                        if is_major_bump(node.version, node.latest_version)
                        else "Bug fixes and improvements"),
            ))

        if node.vulnerability.level in FLAGGED_RISK_LEVELS:
            recommendations.security.append(SecurityItem(
                id=node.id,
                risk=node.vulnerability.level,
                score=node.vulnerability.score,
                reason=build_security_reason(node),
                action=build_security_action(node),
                permissions=list(node.vulnerability.permissions),
            ))

    if unknown_names:
        listed = ", ".join(unknown_names[:MAX_LISTED_UNKNOWN])
        more = "..." if len(unknown_names) > MAX_LISTED_UNKNOWN else ""
        diagnosis.append(DiagnosisItem(
            type="warning",
            text=f"{len(unknown_names)} unknown skill(s) detected",
            detail=f"Could not verify: {listed}{more}",
        ))

    if not recommendations.update:
        diagnosis.append(DiagnosisItem(type="success", text="All skills up to date",
                                       detail="No pending updates"))

    if not recommendations.security:
        diagnosis.append(DiagnosisItem(type="success", text="No critical security issues",
                                       detail="Skill permissions look reasonable"))

    return recommendations
