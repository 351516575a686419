#!/usr/bin/env python3
"""
Skill Catalog
Read-only table of known skills and their declared metadata.

The catalog is injected into the analyzer rather than read from module
state, so tests can run against small synthetic catalogs. The bundled
catalog lives in data/catalog.yaml:

    prompt-guard:
      name: Prompt Guard
      category: security
      estimated_tokens: 5524
      latest_version: 3.0.0
      permissions: []
      trust_source: official
      handles_sensitive_data: false
      aliases: [promptguard]
      description: Injection attack detection and prevention

Author: Skill Atlas Contributors
Version: 1.0.0
License: MIT
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

import yaml

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent / "data" / "catalog.yaml"

# Containment matches shorter than this are ignored ("op" would match "openhue")
MIN_FUZZY_LENGTH = 3

VALID_TRUST_SOURCES = {"official", "verified", "community", "unknown"}

_ID_INVALID_CHARS = re.compile(r"[^a-z0-9-]")

_default_catalog = None


class CatalogError(Exception):
    """Raised when a catalog file cannot be loaded."""
    pass


def synthesize_skill_id(name: str) -> str:
    """Canonical id for a name with no catalog entry."""
    return _ID_INVALID_CHARS.sub("-", name.lower())


@dataclass(frozen=True)
class CatalogEntry:
    name: str
    category: str
    estimated_tokens: int
    trust_source: str = "unknown"
    latest_version: Optional[str] = None
    permissions: Tuple[str, ...] = ()
    handles_sensitive_data: bool = False
    aliases: Tuple[str, ...] = ()
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, skill_id: str, raw: Mapping[str, Any]) -> "CatalogEntry":
        if not isinstance(raw, Mapping):
            raise CatalogError(f"Catalog entry '{skill_id}' is not a mapping")
        if not raw.get("category"):
            raise CatalogError(f"Catalog entry '{skill_id}' has no category")

        trust_source = str(raw.get("trust_source", "unknown"))
        if trust_source not in VALID_TRUST_SOURCES:
            raise CatalogError(f"Catalog entry '{skill_id}' has invalid trust_source: {trust_source}")

        latest = raw.get("latest_version")
        return cls(
            name=str(raw.get("name", skill_id)),
            category=str(raw["category"]).lower(),
            estimated_tokens=int(raw.get("estimated_tokens", 500)),
            trust_source=trust_source,
            latest_version=str(latest) if latest is not None else None,
            permissions=tuple(str(p) for p in raw.get("permissions") or []),
            handles_sensitive_data=bool(raw.get("handles_sensitive_data", False)),
            aliases=tuple(str(a) for a in raw.get("aliases") or []),
            description=raw.get("description"),
        )


@dataclass(frozen=True)
class ResolvedSkill:
    """A reference matched against the catalog."""
    skill_id: str
    entry: CatalogEntry
    exact: bool = True


class SkillCatalog:
    """Injectable read-only lookup of known skills keyed by canonical id."""

    def __init__(self, entries: Optional[Mapping[str, CatalogEntry]] = None):
        self._entries: Dict[str, CatalogEntry] = {
            skill_id.lower(): entry for skill_id, entry in (entries or {}).items()
        }
        self._aliases: Dict[str, str] = {}
        for skill_id, entry in self._entries.items():
            for alias in entry.aliases:
                self._aliases.setdefault(alias.lower(), skill_id)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "SkillCatalog":
        return cls({
            str(skill_id): CatalogEntry.from_dict(str(skill_id), entry)
            for skill_id, entry in (raw or {}).items()
        })

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, skill_id: str) -> bool:
        return skill_id.lower() in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def get(self, skill_id: str) -> Optional[CatalogEntry]:
        return self._entries.get(skill_id.lower())

    def _match(self, name: str) -> Optional[Tuple[str, bool]]:
        normalized = name.lower().strip()
        if not normalized:
            return None

        if normalized in self._entries:
            return normalized, True

        if normalized in self._aliases:
            return self._aliases[normalized], True

        for skill_id in self._entries:
            shorter = min(len(skill_id), len(normalized))
            if shorter < MIN_FUZZY_LENGTH:
                continue
            if skill_id in normalized or normalized in skill_id:
                return skill_id, False

        return None

    def resolve(self, name: str) -> Optional[ResolvedSkill]:
        """
        Resolve a skill name against the catalog.

        Args:
            name: Skill name as typed by the user

        Returns:
            ResolvedSkill (exact=False for containment matches), or None
        """
        match = self._match(name)
        if match is None:
            return None
        skill_id, exact = match
        return ResolvedSkill(skill_id=skill_id, entry=self._entries[skill_id], exact=exact)


def load_catalog(path: Optional[str] = None) -> SkillCatalog:
    """
    Load a catalog from a YAML file.

    Args:
        path: YAML file path (defaults to the bundled catalog)

    Returns:
        SkillCatalog

    Raises:
        CatalogError: missing file, invalid YAML or malformed entries
    """
    catalog_path = Path(path) if path else DEFAULT_CATALOG_PATH
    if not catalog_path.exists():
        raise CatalogError(f"Catalog file does not exist: {catalog_path}")

    try:
        raw = yaml.safe_load(catalog_path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise CatalogError(f"Failed to parse catalog {catalog_path}: {e}") from e

    if not isinstance(raw, dict):
        raise CatalogError(f"Catalog root must be a mapping: {catalog_path}")

    # Allow both a bare mapping and a {"skills": {...}} wrapper
    if isinstance(raw.get("skills"), dict):
        raw = raw["skills"]

    return SkillCatalog.from_dict(raw)


def default_catalog() -> SkillCatalog:
    """Bundled catalog, loaded once."""
    global _default_catalog
    if _default_catalog is None:
        _default_catalog = load_catalog()
    return _default_catalog
