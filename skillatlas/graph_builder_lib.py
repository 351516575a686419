#!/usr/bin/env python3
"""
Similarity Graph Builder
Connects skills that look alike by category, name and permission surface.

Pair similarity:
- Same category +0.4, different category +0.1
- Name token overlap * 0.3
- Jaccard overlap of permission sets * 0.2

Pairs scoring above EDGE_THRESHOLD become an edge.

Author: Skill Atlas Contributors
Version: 1.0.0
License: MIT
"""

import re
from typing import Iterable, List

from .models_lib import SkillEdge, SkillNode

SAME_CATEGORY_WEIGHT = 0.4
CROSS_CATEGORY_WEIGHT = 0.1
NAME_SIMILARITY_WEIGHT = 0.3
PERMISSION_OVERLAP_WEIGHT = 0.2

EDGE_THRESHOLD = 0.3

_TOKEN_SPLIT = re.compile(r"[\s\-_]+")


def tokenize_name(name: str) -> List[str]:
    return [token for token in _TOKEN_SPLIT.split(name.lower()) if token]


def _tokens_related(a: str, b: str) -> bool:
    return a == b or a in b or b in a


def name_similarity(name1: str, name2: str) -> float:
    """
    Share of name tokens that have an equal or substring-related
    counterpart in the other name, over the longer token list.
    """
    tokens1 = tokenize_name(name1)
    tokens2 = tokenize_name(name2)
    if not tokens1 or not tokens2:
        return 0.0

    fewer, other = (tokens1, tokens2) if len(tokens1) <= len(tokens2) else (tokens2, tokens1)
    matches = sum(1 for token in fewer if any(_tokens_related(token, o) for o in other))
    return matches / max(len(tokens1), len(tokens2))


def permission_overlap(permissions1: Iterable[str], permissions2: Iterable[str]) -> float:
    """Jaccard index of two permission sets; 0 when both are empty."""
    set1 = set(permissions1)
    set2 = set(permissions2)
    union = set1 | set2
    if not union:
        return 0.0
    return len(set1 & set2) / len(union)


def skill_similarity(node1: SkillNode, node2: SkillNode) -> float:
    score = SAME_CATEGORY_WEIGHT if node1.category == node2.category else CROSS_CATEGORY_WEIGHT
    score += name_similarity(node1.name, node2.name) * NAME_SIMILARITY_WEIGHT
    score += permission_overlap(node1.permissions, node2.permissions) * PERMISSION_OVERLAP_WEIGHT
    return score


def build_edges(nodes: List[SkillNode]) -> List[SkillEdge]:
    """
    Score every unordered pair once, in input order.

    Args:
        nodes: Skill nodes with unique ids

    Returns:
        Edges with source before target in input order, weight in (0, 1]
    """
    edges = []
    for i, first in enumerate(nodes):
        for second in nodes[i + 1:]:
            similarity = skill_similarity(first, second)
            if similarity > EDGE_THRESHOLD:
                edges.append(SkillEdge(
                    source=first.id,
                    target=second.id,
                    weight=min(similarity, 1.0),
                ))
    return edges


def link_nodes(nodes: List[SkillNode], edges: List[SkillEdge]) -> None:
    """Write symmetric connections and connection counts onto the nodes."""
    by_id = {node.id: node for node in nodes}
    for node in nodes:
        node.connections = []

    for edge in edges:
        source = by_id.get(edge.source)
        target = by_id.get(edge.target)
        if source is None or target is None:
            continue
        if edge.target not in source.connections:
            source.connections.append(edge.target)
        if edge.source not in target.connections:
            target.connections.append(edge.source)

    for node in nodes:
        node.connection_count = len(node.connections)
