#!/usr/bin/env python3
"""
Skill Atlas Models
Typed containers for the skill portfolio graph and its analysis result.

Attributes are snake_case. Every container exposes to_dict(), which returns
the camelCase shape handed to report writers and the visualization layer.

Author: Skill Atlas Contributors
Version: 1.0.0
License: MIT
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

# Node health classifications
HEALTH_HEALTHY = "healthy"
HEALTH_NEEDS_UPDATE = "needsUpdate"
HEALTH_UNUSED = "unused"
HEALTH_SHOULD_REMOVE = "shouldRemove"

# Trust sources, most to least trusted
TRUST_SOURCES = ["official", "verified", "community", "unknown"]

# Vulnerability levels, least to most severe
RISK_LEVELS = ["low", "medium", "high", "critical"]


@dataclass
class SkillReference:
    """A raw skill identifier after input normalization."""
    name: str
    version: Optional[str] = None
    path: Optional[str] = None


@dataclass
class ExtendedSkillReference(SkillReference):
    """Skill reference carrying producer-supplied metadata (folder scans, rich share links)."""
    category: Optional[str] = None
    display_name: Optional[str] = None
    tokens: Optional[int] = None
    permissions: List[str] = field(default_factory=list)
    description: Optional[str] = None

    def has_metadata(self) -> bool:
        return bool(self.category and self.tokens)


@dataclass
class Vulnerability:
    score: int
    level: str
    permissions: List[str] = field(default_factory=list)
    trust_source: str = "unknown"
    handles_sensitive_data: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "level": self.level,
            "permissions": list(self.permissions),
            "trustSource": self.trust_source,
            "handlesSensitiveData": self.handles_sensitive_data,
        }


@dataclass
class SkillNode:
    """
    One skill in the portfolio graph.

    Positions are written by the layout pass only. connections is kept
    symmetric by graph_builder_lib.link_nodes.
    """
    id: str
    name: str
    category: str
    tokens: int
    vulnerability: Vulnerability
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    size: float = 0.5
    connections: List[str] = field(default_factory=list)
    connection_count: int = 0
    version: Optional[str] = None
    latest_version: Optional[str] = None
    health: str = HEALTH_HEALTHY
    description: Optional[str] = None

    @property
    def permissions(self) -> List[str]:
        return self.vulnerability.permissions

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "x": self.x,
            "y": self.y,
            "z": self.z,
            "tokens": self.tokens,
            "size": self.size,
            "connections": list(self.connections),
            "connectionCount": self.connection_count,
            "health": self.health,
            "vulnerability": self.vulnerability.to_dict(),
        }
        if self.version:
            data["version"] = self.version
        if self.latest_version:
            data["latestVersion"] = self.latest_version
        if self.description:
            data["description"] = self.description
        return data


@dataclass
class SkillEdge:
    source: str
    target: str
    weight: float

    def to_dict(self) -> Dict[str, Any]:
        return {"source": self.source, "target": self.target, "weight": self.weight}


@dataclass
class SkillCluster:
    id: str
    name: str
    category: str
    skills: List[str]
    centroid: Dict[str, float]
    density: float
    color: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "skills": list(self.skills),
            "centroid": dict(self.centroid),
            "density": self.density,
            "color": self.color,
        }


@dataclass
class VizMetrics:
    cosine_similarities: List[Dict[str, Any]] = field(default_factory=list)
    cluster_density: float = 0.0
    overlap_coefficient: float = 0.0
    uniqueness_index: float = 1.0
    coverage_scores: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cosineSimilarities": [dict(pair) for pair in self.cosine_similarities],
            "clusterDensity": self.cluster_density,
            "overlapCoefficient": self.overlap_coefficient,
            "uniquenessIndex": self.uniqueness_index,
            "coverageScores": dict(self.coverage_scores),
        }


@dataclass
class VizData:
    nodes: List[SkillNode] = field(default_factory=list)
    edges: List[SkillEdge] = field(default_factory=list)
    clusters: List[SkillCluster] = field(default_factory=list)
    metrics: VizMetrics = field(default_factory=VizMetrics)

    def node(self, node_id: str) -> Optional[SkillNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
            "clusters": [c.to_dict() for c in self.clusters],
            "metrics": self.metrics.to_dict(),
        }


# =============================================================================
# Recommendation items
# =============================================================================

@dataclass
class DiagnosisItem:
    type: str  # "success" | "warning" | "error"
    text: str
    detail: str

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "text": self.text, "detail": self.detail}


@dataclass
class InstallItem:
    id: str
    reason: str
    priority: str
    category: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "reason": self.reason, "priority": self.priority, "category": self.category}


@dataclass
class RemoveItem:
    id: str
    reason: str
    duplicate_of: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"id": self.id, "reason": self.reason}
        if self.duplicate_of:
            data["duplicateOf"] = self.duplicate_of
        return data


@dataclass
class UpdateItem:
    id: str
    from_version: str
    to_version: str
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "from": self.from_version, "to": self.to_version, "reason": self.reason}


@dataclass
class SecurityItem:
    id: str
    risk: str
    score: int
    reason: str
    action: str
    permissions: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "risk": self.risk,
            "score": self.score,
            "reason": self.reason,
            "action": self.action,
            "permissions": list(self.permissions),
        }


@dataclass
class Recommendations:
    diagnosis: List[DiagnosisItem] = field(default_factory=list)
    install: List[InstallItem] = field(default_factory=list)
    remove: List[RemoveItem] = field(default_factory=list)
    update: List[UpdateItem] = field(default_factory=list)
    security: List[SecurityItem] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "diagnosis": [i.to_dict() for i in self.diagnosis],
            "install": [i.to_dict() for i in self.install],
            "remove": [i.to_dict() for i in self.remove],
            "update": [i.to_dict() for i in self.update],
            "security": [i.to_dict() for i in self.security],
        }


@dataclass
class AnalysisSummary:
    total_skills: int = 0
    known_skills: int = 0
    unknown_skills: int = 0
    total_tokens: int = 0
    health_score: float = 100.0
    categories: Dict[str, int] = field(default_factory=dict)
    outdated_count: int = 0
    critical_security_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalSkills": self.total_skills,
            "knownSkills": self.known_skills,
            "unknownSkills": self.unknown_skills,
            "totalTokens": self.total_tokens,
            "healthScore": self.health_score,
            "categories": dict(self.categories),
            "outdatedCount": self.outdated_count,
            "criticalSecurityCount": self.critical_security_count,
        }


@dataclass
class AnalysisResult:
    """Root aggregate of one portfolio analysis."""
    id: str
    created_at: str
    data: VizData
    recommendations: Recommendations
    summary: AnalysisSummary

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "createdAt": self.created_at,
            "data": self.data.to_dict(),
            "recommendations": self.recommendations.to_dict(),
            "summary": self.summary.to_dict(),
        }
