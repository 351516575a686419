#!/usr/bin/env python3
"""
Duplicate Finder
Optional enrichment stage that suggests removing near-duplicate skills.

Unlike the recommendation rules this is a fuzzy heuristic: ids are
stripped of variant suffixes (-pro, -max, -v2, -copy, ...) and compared
with difflib. The first node in input order is kept; later look-alikes
are suggested for removal.
"""

import copy
import re
from difflib import SequenceMatcher
from typing import List, Optional

from .models_lib import HEALTH_SHOULD_REMOVE, AnalysisResult, RemoveItem, SkillNode

VARIANT_SUFFIX_PATTERN = re.compile(
    r"-(?:pro-max|max|pro|plus|lite|v\d+|copy|old|new|\d+)$"
)

SIMILARITY_THRESHOLD = 0.85


def strip_variant_suffixes(skill_id: str) -> str:
    """Remove trailing variant markers until none is left."""
    stripped = skill_id.lower()
    while True:
        shorter = VARIANT_SUFFIX_PATTERN.sub("", stripped)
        if shorter == stripped or not shorter:
            return stripped
        stripped = shorter


def id_similarity(id1: str, id2: str) -> float:
    return SequenceMatcher(None, strip_variant_suffixes(id1), strip_variant_suffixes(id2)).ratio()


def _find_original(node: SkillNode, kept: List[SkillNode]) -> Optional[SkillNode]:
    base = strip_variant_suffixes(node.id)
    for candidate in kept:
        if strip_variant_suffixes(candidate.id) == base:
            return candidate
    for candidate in kept:
        if id_similarity(candidate.id, node.id) >= SIMILARITY_THRESHOLD:
            return candidate
    return None


def find_duplicate_skills(nodes: List[SkillNode]) -> List[RemoveItem]:
    """
    Suggest removals for near-duplicate nodes, across categories too.

    Args:
        nodes: Skill nodes in input order

    Returns:
        RemoveItem per later duplicate, naming the kept node in duplicate_of
    """
    kept = []
    suggestions = []

    for node in nodes:
        original = _find_original(node, kept)
        if original is None:
            kept.append(node)
            continue

        similarity = int(round(id_similarity(original.id, node.id) * 100))
        suggestions.append(RemoveItem(
            id=node.id,
            reason=f"{similarity}% overlap with {original.id}",
            duplicate_of=original.id,
        ))

    return suggestions


def apply_removal_suggestions(result: AnalysisResult) -> AnalysisResult:
    """
    Return a copy of result with removal suggestions filled in and the
    affected nodes marked shouldRemove. The input result is not modified.
    """
    enriched = copy.deepcopy(result)
    suggestions = find_duplicate_skills(enriched.data.nodes)

    flagged = {item.id for item in suggestions}
    for node in enriched.data.nodes:
        if node.id in flagged:
            node.health = HEALTH_SHOULD_REMOVE

    enriched.recommendations.remove = suggestions
    return enriched
