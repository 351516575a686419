#!/usr/bin/env python3
"""
Health Scorer
Single 0-100 portfolio health score plus the letter grade shown in reports.
"""

from typing import Dict, List

from .models_lib import SkillNode

BASE_SCORE = 100.0
OUTDATED_PENALTY = 3

RISK_PENALTIES = {
    "critical": 10,
    "high": 5,
    "medium": 2,
}

# Category -> penalty when the portfolio has none of it
MISSING_CATEGORY_PENALTIES = {
    "security": 15,
    "development": 5,
}

# (minimum distinct categories, bonus)
COVERAGE_BONUSES = [
    (5, 5),
    (7, 5),
]

GRADE_THRESHOLDS = [
    (90, "A"),
    (75, "B"),
    (60, "C"),
    (40, "D"),
]

GRADE_LABELS = [
    (80, "Excellent"),
    (65, "Good"),
    (50, "Average"),
]


def calculate_health_score(nodes: List[SkillNode], category_counts: Dict[str, int],
                           outdated_count: int) -> float:
    """
    Score portfolio health. Node order does not affect the result.

    Args:
        nodes: Skill nodes with vulnerability levels
        category_counts: Skills per category
        outdated_count: Number of nodes with a pending update

    Returns:
        Score in 0..100, rounded to one decimal
    """
    score = BASE_SCORE - outdated_count * OUTDATED_PENALTY

    for node in nodes:
        score -= RISK_PENALTIES.get(node.vulnerability.level, 0)

    for category, penalty in MISSING_CATEGORY_PENALTIES.items():
        if not category_counts.get(category):
            score -= penalty

    present = len([category for category, count in category_counts.items() if count])
    for minimum, bonus in COVERAGE_BONUSES:
        if present >= minimum:
            score += bonus

    return max(0.0, min(100.0, round(score, 1)))


def score_to_grade(score: float) -> str:
    for minimum, grade in GRADE_THRESHOLDS:
        if score >= minimum:
            return grade
    return "F"


def grade_label(score: float) -> str:
    for minimum, label in GRADE_LABELS:
        if score >= minimum:
            return label
    return "Poor"
