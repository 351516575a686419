"""
Shared pytest fixtures for Skill Atlas tests.

Provides:
  - A small synthetic catalog covering every risk level
  - Deterministic analyzers (NoJitter)
  - A factory for hand-built SkillNodes
"""

import sys
from pathlib import Path

import pytest

# ---------------------------------------------------------------------------
# Ensure the project root is on sys.path so atlas.py and skillatlas import
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from skillatlas.analyzer_lib import SkillAnalyzer  # noqa: E402
from skillatlas.catalog_lib import SkillCatalog  # noqa: E402
from skillatlas.layout_lib import NoJitter  # noqa: E402
from skillatlas.models_lib import HEALTH_HEALTHY, SkillNode, Vulnerability  # noqa: E402


CATALOG_DATA = {
    "prompt-guard": {
        "name": "Prompt Guard",
        "category": "security",
        "estimated_tokens": 5524,
        "latest_version": "3.0.0",
        "permissions": ["code-execution"],
        "trust_source": "official",
        "handles_sensitive_data": False,
        "aliases": ["promptguard"],
    },
    "docx": {
        "name": "DOCX",
        "category": "media",
        "estimated_tokens": 2538,
        "latest_version": "1.0.0",
        "permissions": ["filesystem"],
        "trust_source": "verified",
        "aliases": ["word"],
    },
    "github": {
        "name": "GitHub Skill",
        "category": "development",
        "estimated_tokens": 418,
        "latest_version": "2.0.0",
        "permissions": ["network", "code-execution"],
        "trust_source": "official",
        "handles_sensitive_data": True,
    },
    "slack": {
        "name": "Slack Actions",
        "category": "communication",
        "estimated_tokens": 624,
        "latest_version": "1.5.2",
        "permissions": ["network"],
        "trust_source": "official",
        "handles_sensitive_data": True,
    },
    "sql-query": {
        "name": "SQL Query",
        "category": "data",
        "estimated_tokens": 1100,
        "latest_version": "1.0.0",
        "permissions": ["network"],
        "trust_source": "verified",
    },
    "docker-basics": {
        "name": "Docker Basics",
        "category": "devops",
        "estimated_tokens": 1500,
        "latest_version": "1.2.0",
        "permissions": ["code-execution"],
        "trust_source": "verified",
    },
    # community + filesystem + code-execution + sensitive: 50 (medium), 75 (high) one major behind
    "sketchy": {
        "name": "Sketchy Helper",
        "category": "utility",
        "estimated_tokens": 300,
        "latest_version": "2.0.0",
        "permissions": ["filesystem", "code-execution"],
        "trust_source": "community",
        "handles_sensitive_data": True,
    },
    # unknown source + every permission + sensitive: 65 (high)
    "shady-tool": {
        "name": "Shady Tool",
        "category": "utility",
        "estimated_tokens": 200,
        "latest_version": "1.0.0",
        "permissions": ["filesystem", "code-execution", "network"],
        "trust_source": "unknown",
        "handles_sensitive_data": True,
    },
}


@pytest.fixture()
def catalog() -> SkillCatalog:
    """Synthetic catalog independent of the bundled YAML."""
    return SkillCatalog.from_dict(CATALOG_DATA)


@pytest.fixture()
def analyzer(catalog) -> SkillAnalyzer:
    """Analyzer over the synthetic catalog with jitter disabled."""
    return SkillAnalyzer(catalog=catalog, jitter=NoJitter())


@pytest.fixture()
def make_node():
    """Build a SkillNode with sensible defaults."""

    def _make(node_id, category="utility", permissions=(), name=None, tokens=500,
              score=0, level="low", trust_source="official", sensitive=False,
              version=None, latest_version=None, health=HEALTH_HEALTHY):
        return SkillNode(
            id=node_id,
            name=name or node_id,
            category=category,
            tokens=tokens,
            vulnerability=Vulnerability(
                score=score,
                level=level,
                permissions=list(permissions),
                trust_source=trust_source,
                handles_sensitive_data=sensitive,
            ),
            version=version,
            latest_version=latest_version,
            health=health,
        )

    return _make
