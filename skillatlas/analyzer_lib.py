#!/usr/bin/env python3
"""
Skill Analyzer
Runs the portfolio pipeline end to end:

    input text -> references -> catalog resolution -> risk scoring ->
    similarity graph -> layout / clusters -> metrics ->
    recommendations / health -> AnalysisResult

Every stage below the analyzer is a plain function over typed nodes. The
analyzer owns the catalog and the jitter source, both injectable, and is
the only stage that logs.

Author: Skill Atlas Contributors
Version: 1.0.0
License: MIT
"""

import random
import string
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from .catalog_lib import SkillCatalog, default_catalog, synthesize_skill_id
from .graph_builder_lib import build_edges, link_nodes
from .health_lib import calculate_health_score
from .input_parser_lib import deduplicate_references, parse_skill_input
from .layout_lib import RandomJitter, build_clusters, position_nodes
from .metrics_lib import calculate_metrics
from .models_lib import (
    HEALTH_HEALTHY,
    HEALTH_NEEDS_UPDATE,
    AnalysisResult,
    AnalysisSummary,
    ExtendedSkillReference,
    SkillNode,
    SkillReference,
    VizData,
    Vulnerability,
)
from .recommendation_lib import FLAGGED_RISK_LEVELS, generate_recommendations
from .risk_scorer_lib import calculate_vulnerability_score
from .version_lib import is_outdated

__version__ = "1.0.0"

# Placeholder metadata for names the catalog does not know
UNKNOWN_CATEGORY = "utility"
UNKNOWN_TOKENS = 500
UNKNOWN_TRUST_SOURCE = "unknown"
UNKNOWN_VULNERABILITY_SCORE = 50
UNKNOWN_VULNERABILITY_LEVEL = "medium"

# Producer metadata (folder scans, rich share links) is not risk scored
METADATA_TOKENS = 100
METADATA_VULNERABILITY_SCORE = 25
METADATA_VULNERABILITY_LEVEL = "low"

MIN_NODE_SIZE = 0.2
NODE_SIZE_RANGE = 0.8

RESULT_ID_PREFIX = "sr_"
RESULT_ID_RANDOM_LENGTH = 6
BASE36_ALPHABET = string.digits + string.ascii_lowercase


def to_base36(number: int) -> str:
    if number == 0:
        return "0"
    sign = "-" if number < 0 else ""
    number = abs(number)
    digits = []
    while number:
        number, remainder = divmod(number, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return sign + "".join(reversed(digits))


def now_ms() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)


def format_timestamp(ms: int) -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2026-01-31T12:00:00.000Z."""
    moment = datetime.fromtimestamp(ms / 1000, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(created_at: str) -> int:
    """Milliseconds since the epoch for an ISO-8601 timestamp."""
    moment = datetime.fromisoformat(created_at.replace("Z", "+00:00"))
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(round(moment.timestamp() * 1000))


def generate_result_id(ms: Optional[int] = None, rng: Optional[random.Random] = None) -> str:
    """sr_<base36 ms timestamp>_<6 random base36 chars>"""
    ms = now_ms() if ms is None else ms
    rng = rng or random.Random()
    suffix = "".join(rng.choice(BASE36_ALPHABET) for _ in range(RESULT_ID_RANDOM_LENGTH))
    return f"{RESULT_ID_PREFIX}{to_base36(ms)}_{suffix}"


def _unique_id(candidate: str, used: set) -> str:
    if candidate not in used:
        return candidate
    index = 2
    while f"{candidate}-{index}" in used:
        index += 1
    return f"{candidate}-{index}"


def normalize_sizes(nodes: List[SkillNode]) -> None:
    """Scale node sizes into 0.2..1.0 against the largest token count."""
    max_tokens = max([node.tokens for node in nodes] + [1])
    for node in nodes:
        node.size = node.tokens / max_tokens * NODE_SIZE_RANGE + MIN_NODE_SIZE


class SkillAnalyzer:
    """Skill portfolio analyzer."""

    def __init__(self, catalog: Optional[SkillCatalog] = None, jitter=None,
                 verbose: bool = False, spinner_callback: Optional[callable] = None):
        """
        Initialize the analyzer.

        Args:
            catalog: Known skills table (bundled catalog when omitted)
            jitter: Layout jitter source (RandomJitter() when omitted)
            verbose: Enable verbose logging
            spinner_callback: Optional callback for spinner updates
        """
        self._catalog = catalog
        self.jitter = jitter or RandomJitter()
        self.verbose = verbose
        self.spinner_callback = spinner_callback

    @property
    def catalog(self) -> SkillCatalog:
        if self._catalog is None:
            self._catalog = default_catalog()
        return self._catalog

    def log(self, message: str):
        """Simple logging."""
        if self.spinner_callback:
            self.spinner_callback(f" {message}")
        elif self.verbose:
            print(f"[*] {message}")

    # -------------------------------------------------------------------------
    # Node construction
    # -------------------------------------------------------------------------

    def _resolve_node(self, reference: SkillReference, used_ids: set) -> Optional[SkillNode]:
        """Build a node from the catalog, or None when the name is unknown."""
        resolved = self.catalog.resolve(reference.name)
        if resolved is None:
            return None

        entry = resolved.entry
        if resolved.exact:
            node_id, name = resolved.skill_id, entry.name
        else:
            # Containment match: keep the catalog metadata under the user's own name
            node_id, name = synthesize_skill_id(reference.name), reference.name
            self.log(f"'{reference.name}' matched catalog entry '{resolved.skill_id}'")

        score, level = calculate_vulnerability_score(
            list(entry.permissions),
            entry.trust_source,
            entry.handles_sensitive_data,
            reference.version,
            entry.latest_version,
        )
        outdated = is_outdated(reference.version, entry.latest_version)

        return SkillNode(
            id=_unique_id(node_id, used_ids),
            name=name,
            category=entry.category,
            tokens=entry.estimated_tokens,
            vulnerability=Vulnerability(
                score=score,
                level=level,
                permissions=list(entry.permissions),
                trust_source=entry.trust_source,
                handles_sensitive_data=entry.handles_sensitive_data,
            ),
            version=reference.version,
            latest_version=entry.latest_version,
            health=HEALTH_NEEDS_UPDATE if outdated else HEALTH_HEALTHY,
            description=entry.description,
        )

    def _placeholder_node(self, reference: SkillReference, used_ids: set) -> SkillNode:
        return SkillNode(
            id=_unique_id(synthesize_skill_id(reference.name), used_ids),
            name=reference.name,
            category=UNKNOWN_CATEGORY,
            tokens=UNKNOWN_TOKENS,
            vulnerability=Vulnerability(
                score=UNKNOWN_VULNERABILITY_SCORE,
                level=UNKNOWN_VULNERABILITY_LEVEL,
                permissions=[],
                trust_source=UNKNOWN_TRUST_SOURCE,
                handles_sensitive_data=False,
            ),
            version=reference.version,
            health=HEALTH_HEALTHY,
        )

    def _metadata_node(self, reference: ExtendedSkillReference, used_ids: set) -> SkillNode:
        skill_id = synthesize_skill_id(reference.name)
        known = self.catalog.get(skill_id)
        latest_version = known.latest_version if known else None

        return SkillNode(
            id=_unique_id(skill_id, used_ids),
            name=reference.display_name or reference.name,
            category=(reference.category or UNKNOWN_CATEGORY).lower(),
            tokens=reference.tokens or METADATA_TOKENS,
            vulnerability=Vulnerability(
                score=METADATA_VULNERABILITY_SCORE,
                level=METADATA_VULNERABILITY_LEVEL,
                permissions=list(reference.permissions or []),
                trust_source=UNKNOWN_TRUST_SOURCE,
                handles_sensitive_data=False,
            ),
            version=reference.version,
            latest_version=latest_version,
            health=HEALTH_NEEDS_UPDATE if is_outdated(reference.version, latest_version) else HEALTH_HEALTHY,
            description=reference.description,
        )

    # -------------------------------------------------------------------------
    # Pipeline
    # -------------------------------------------------------------------------

    def _assemble(self, nodes: List[SkillNode], unknown_names: List[str],
                  result_id: Optional[str], created_at: Optional[str],
                  count_security: bool = True) -> AnalysisResult:
        """Run the graph, layout, metrics and scoring stages over built nodes."""
        category_counts: Dict[str, int] = {}
        for node in nodes:
            category_counts[node.category] = category_counts.get(node.category, 0) + 1

        outdated_count = len([n for n in nodes if is_outdated(n.version, n.latest_version)])

        normalize_sizes(nodes)

        self.log("Building similarity graph...")
        edges = build_edges(nodes)
        link_nodes(nodes, edges)
        self.log(f"{len(edges)} similarity edge(s) between {len(nodes)} skill(s)")

        self.log("Laying out clusters...")
        position_nodes(nodes, self.jitter)
        clusters = build_clusters(nodes)

        metrics = calculate_metrics(nodes, edges)

        self.log("Generating recommendations...")
        recommendations = generate_recommendations(nodes, category_counts, unknown_names)
        health_score = calculate_health_score(nodes, category_counts, outdated_count)

        critical_count = 0
        if count_security:
            critical_count = len([n for n in nodes if n.vulnerability.level in FLAGGED_RISK_LEVELS])

        summary = AnalysisSummary(
            total_skills=len(nodes),
            known_skills=len(nodes) - len(unknown_names),
            unknown_skills=len(unknown_names),
            total_tokens=sum(node.tokens for node in nodes),
            health_score=health_score,
            categories=category_counts,
            outdated_count=outdated_count,
            critical_security_count=critical_count,
        )

        created_ms = now_ms()
        result = AnalysisResult(
            id=result_id or generate_result_id(created_ms),
            created_at=created_at or format_timestamp(created_ms),
            data=VizData(nodes=nodes, edges=edges, clusters=clusters, metrics=metrics),
            recommendations=recommendations,
            summary=summary,
        )
        self.log(f"Analysis complete: health score {health_score}")
        return result

    def analyze(self, references: Sequence[SkillReference], result_id: Optional[str] = None,
                created_at: Optional[str] = None) -> AnalysisResult:
        """
        Analyze a list of skill references against the catalog.

        Args:
            references: Parsed references (duplicates are dropped, first wins)
            result_id: Fixed result id (generated when omitted)
            created_at: Fixed ISO-8601 creation time (now when omitted)

        Returns:
            AnalysisResult
        """
        unique = deduplicate_references(list(references))
        self.log(f"Resolving {len(unique)} skill(s) against {len(self.catalog)} catalog entries")

        nodes = []
        unknown_names = []
        used_ids = set()
        for reference in unique:
            node = self._resolve_node(reference, used_ids)
            if node is None:
                unknown_names.append(reference.name)
                node = self._placeholder_node(reference, used_ids)
            used_ids.add(node.id)
            nodes.append(node)

        if unknown_names:
            self.log(f"Unknown skill(s): {', '.join(unknown_names)}")

        return self._assemble(nodes, unknown_names, result_id, created_at)

    def analyze_text(self, raw_text: str) -> AnalysisResult:
        """Parse free-form input and analyze it."""
        references = parse_skill_input(raw_text)
        self.log(f"Parsed {len(references)} skill reference(s)")
        return self.analyze(references)

    def analyze_from_metadata(self, references: Sequence[SkillReference],
                              result_id: Optional[str] = None,
                              created_at: Optional[str] = None) -> AnalysisResult:
        """
        Analyze references that already carry producer metadata.

        Nodes take category, tokens and display name from the references
        instead of the catalog; only latest versions are looked up. When
        no reference carries metadata this is the same as analyze().
        """
        references = deduplicate_references(list(references))
        with_metadata = [
            ref for ref in references
            if isinstance(ref, ExtendedSkillReference) and ref.has_metadata()
        ]
        if not with_metadata:
            return self.analyze(references, result_id=result_id, created_at=created_at)

        self.log(f"Building {len(references)} skill(s) from supplied metadata")
        nodes = []
        used_ids = set()
        for reference in references:
            if not isinstance(reference, ExtendedSkillReference):
                reference = ExtendedSkillReference(name=reference.name, version=reference.version,
                                                   path=reference.path)
            node = self._metadata_node(reference, used_ids)
            used_ids.add(node.id)
            nodes.append(node)

        return self._assemble(nodes, [], result_id, created_at, count_security=False)


def analyze_skills(raw_text: str, catalog: Optional[SkillCatalog] = None, jitter=None,
                   verbose: bool = False,
                   spinner_callback: Optional[callable] = None) -> AnalysisResult:
    """
    Convenience function to analyze a skill listing.

    Args:
        raw_text: Pasted listing, JSON array, or file content
        catalog: Known skills table (bundled catalog when omitted)
        jitter: Layout jitter source
        verbose: Enable verbose logging
        spinner_callback: Optional callback for spinner updates

    Returns:
        AnalysisResult
    """
    analyzer = SkillAnalyzer(
        catalog=catalog,
        jitter=jitter,
        verbose=verbose,
        spinner_callback=spinner_callback
    )
    return analyzer.analyze_text(raw_text)
