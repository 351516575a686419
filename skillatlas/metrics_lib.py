#!/usr/bin/env python3
"""
Metrics Aggregator
Portfolio-level numbers derived from the similarity graph.
"""

import math
from typing import Dict, List

from .models_lib import SkillEdge, SkillNode, VizMetrics

TOP_SIMILARITIES = 20


def round_half_up(value: float) -> int:
    """Nearest integer, halves rounded up (12.5 -> 13)."""
    return int(math.floor(value + 0.5))


def coverage_scores(nodes: List[SkillNode]) -> Dict[str, int]:
    """Percentage of total tokens per category."""
    category_tokens = {}
    for node in nodes:
        category_tokens[node.category] = category_tokens.get(node.category, 0) + node.tokens

    total_tokens = sum(category_tokens.values())
    if total_tokens <= 0:
        return {category: 0 for category in category_tokens}
    return {
        category: round_half_up(100 * tokens / total_tokens)
        for category, tokens in category_tokens.items()
    }


def calculate_metrics(nodes: List[SkillNode], edges: List[SkillEdge]) -> VizMetrics:
    """
    Aggregate graph metrics. The caller's edge list is left in its
    original order.
    """
    ranked = sorted(edges, key=lambda edge: edge.weight, reverse=True)
    similarities = [
        {"skill1": edge.source, "skill2": edge.target, "similarity": edge.weight}
        for edge in ranked[:TOP_SIMILARITIES]
    ]

    mean_weight = sum(edge.weight for edge in edges) / len(edges) if edges else 0.0
    overlap = mean_weight

    return VizMetrics(
        cosine_similarities=similarities,
        cluster_density=round(mean_weight, 2),
        overlap_coefficient=round(overlap, 2),
        uniqueness_index=round(1 - overlap * 0.5, 2),
        coverage_scores=coverage_scores(nodes),
    )
