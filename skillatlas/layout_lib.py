#!/usr/bin/env python3
"""
Layout & Cluster Engine
Places nodes on a ring of category sectors and groups them into clusters.

Well-connected nodes sit closer to the centre. Randomness comes only from
the jitter source passed in, so a NoJitter layout is fully deterministic.
"""

import math
import random
from collections import OrderedDict
from typing import Dict, List, Optional

from .models_lib import SkillCluster, SkillNode

CATEGORY_COLORS = {
    "productivity": "#94a3b8",
    "development": "#a78bfa",
    "media": "#fbbf24",
    "communication": "#60a5fa",
    "design": "#f472b6",
    "marketing": "#fb7185",
    "security": "#34d399",
    "utility": "#818cf8",
    "data": "#2dd4bf",
    "devops": "#fb923c",
}

DEFAULT_CLUSTER_COLOR = "#ffffff"

MIN_RADIUS = 2.0
CENTRALITY_SPREAD = 4.0
RADIUS_JITTER = (0.0, 1.0)
PLANE_JITTER = (-0.75, 0.75)
HEIGHT_JITTER = (-0.5, 0.5)
HEIGHT_STEP = 0.8


class RandomJitter:
    """Seedable jitter source."""

    def __init__(self, seed: Optional[int] = None):
        self._random = random.Random(seed)

    def uniform(self, low: float, high: float) -> float:
        return self._random.uniform(low, high)


class NoJitter:
    """Jitter source that always returns the in-range value closest to zero."""

    def uniform(self, low: float, high: float) -> float:
        return min(max(0.0, low), high)


def group_by_category(nodes: List[SkillNode]) -> "OrderedDict[str, List[SkillNode]]":
    groups = OrderedDict()
    for node in nodes:
        groups.setdefault(node.category, []).append(node)
    return groups


def position_nodes(nodes: List[SkillNode], jitter=None) -> None:
    """
    Assign x, y, z to every node in place.

    Args:
        nodes: Linked nodes (connection_count already set)
        jitter: Object with uniform(low, high); defaults to RandomJitter()
    """
    if not nodes:
        return
    jitter = jitter or RandomJitter()

    groups = group_by_category(nodes)
    category_count = len(groups)
    max_connections = max([node.connection_count for node in nodes] + [1])

    for category_index, members in enumerate(groups.values()):
        angle = 2 * math.pi * category_index / category_count
        for i, node in enumerate(members):
            centrality = 1 - node.connection_count / max_connections
            radius = MIN_RADIUS + centrality * CENTRALITY_SPREAD + jitter.uniform(*RADIUS_JITTER)

            node.x = math.cos(angle) * radius + jitter.uniform(*PLANE_JITTER)
            node.y = (i - len(members) / 2) * HEIGHT_STEP + jitter.uniform(*HEIGHT_JITTER)
            node.z = math.sin(angle) * radius + jitter.uniform(*PLANE_JITTER)


def build_clusters(nodes: List[SkillNode],
                   colors: Optional[Dict[str, str]] = None) -> List[SkillCluster]:
    """One cluster per category, in first-seen order."""
    colors = CATEGORY_COLORS if colors is None else colors
    total = len(nodes)
    clusters = []

    for category, members in group_by_category(nodes).items():
        count = len(members)
        clusters.append(SkillCluster(
            id=category,
            name=category[:1].upper() + category[1:],
            category=category,
            skills=[node.id for node in members],
            centroid={
                "x": sum(node.x for node in members) / count,
                "y": sum(node.y for node in members) / count,
                "z": sum(node.z for node in members) / count,
            },
            density=count / total,
            color=colors.get(category, DEFAULT_CLUSTER_COLOR),
        ))

    return clusters
