"""
Catalog tests: bundled catalog integrity, lookup order and load errors.
"""

import pytest

from skillatlas.catalog_lib import (
    DEFAULT_CATALOG_PATH,
    VALID_TRUST_SOURCES,
    CatalogEntry,
    CatalogError,
    SkillCatalog,
    default_catalog,
    load_catalog,
    synthesize_skill_id,
)
from skillatlas.layout_lib import CATEGORY_COLORS


class TestBundledCatalog:
    def test_loads(self):
        catalog = load_catalog()
        assert len(catalog) > 50

    def test_default_catalog_is_cached(self):
        assert default_catalog() is default_catalog()

    def test_ids_are_canonical(self):
        for skill_id in load_catalog():
            assert skill_id == synthesize_skill_id(skill_id)

    def test_entries_are_valid(self):
        catalog = load_catalog()
        for skill_id in catalog:
            entry = catalog.get(skill_id)
            assert entry.name.strip(), f"{skill_id} has empty name"
            assert entry.estimated_tokens > 0, f"{skill_id} has no token estimate"
            assert entry.trust_source in VALID_TRUST_SOURCES
            assert entry.category in CATEGORY_COLORS, f"{skill_id} has uncolored category {entry.category}"

    def test_recommended_installs_exist(self):
        catalog = load_catalog()
        for skill_id in ("sql-query", "docker-basics", "prompt-guard"):
            assert skill_id in catalog

    def test_prompt_guard_metadata(self):
        entry = load_catalog().get("prompt-guard")
        assert entry.category == "security"
        assert entry.estimated_tokens == 5524
        assert entry.latest_version == "3.0.0"
        assert entry.trust_source == "official"
        assert entry.permissions == ()

    def test_every_category_present(self):
        catalog = load_catalog()
        assert {catalog.get(skill_id).category for skill_id in catalog} == set(CATEGORY_COLORS)

    def test_aliases_do_not_shadow_ids(self):
        catalog = load_catalog()
        for skill_id in catalog:
            for alias in catalog.get(skill_id).aliases:
                assert alias not in catalog, f"alias {alias} of {skill_id} is also an id"


class TestResolve:
    def test_exact_id(self, catalog):
        resolved = catalog.resolve("docx")
        assert resolved.skill_id == "docx"
        assert resolved.exact

    def test_exact_id_is_case_insensitive(self, catalog):
        assert catalog.resolve("  DocX ").skill_id == "docx"

    def test_alias(self, catalog):
        resolved = catalog.resolve("Word")
        assert resolved.skill_id == "docx"
        assert resolved.exact

    def test_containment(self, catalog):
        resolved = catalog.resolve("docx-pro")
        assert resolved.skill_id == "docx"
        assert not resolved.exact

    def test_name_contained_in_id(self, catalog):
        assert catalog.resolve("sketch").skill_id == "sketchy"

    def test_short_names_do_not_fuzzy_match(self, catalog):
        assert catalog.resolve("do") is None

    def test_unknown(self, catalog):
        assert catalog.resolve("unknown-thing") is None
        assert catalog.resolve("") is None

    def test_alias_entry(self, catalog):
        assert catalog.resolve("promptguard").entry.name == "Prompt Guard"


class TestSynthesizeId:
    def test_lowercases_and_replaces(self):
        assert synthesize_skill_id("My Skill!") == "my-skill-"
        assert synthesize_skill_id("prompt_guard v2") == "prompt-guard-v2"

    def test_keeps_valid_ids(self):
        assert synthesize_skill_id("docx-pro") == "docx-pro"


class TestLoadErrors:
    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogError):
            load_catalog(str(tmp_path / "nope.yaml"))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("docx: [unclosed\n", encoding="utf-8")
        with pytest.raises(CatalogError):
            load_catalog(str(path))

    def test_root_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- docx\n- github\n", encoding="utf-8")
        with pytest.raises(CatalogError):
            load_catalog(str(path))

    def test_entry_without_category(self, tmp_path):
        path = tmp_path / "nocat.yaml"
        path.write_text("docx:\n  name: DOCX\n  estimated_tokens: 10\n", encoding="utf-8")
        with pytest.raises(CatalogError):
            load_catalog(str(path))

    def test_invalid_trust_source(self):
        with pytest.raises(CatalogError):
            CatalogEntry.from_dict("x", {"category": "utility", "trust_source": "friends"})

    def test_skills_wrapper(self, tmp_path):
        path = tmp_path / "wrapped.yaml"
        path.write_text(
            "skills:\n"
            "  my-tool:\n"
            "    name: My Tool\n"
            "    category: Development\n"
            "    estimated_tokens: 42\n"
            "    latest_version: '1.2.0'\n",
            encoding="utf-8",
        )
        catalog = load_catalog(str(path))
        entry = catalog.get("my-tool")
        assert entry.category == "development"
        assert entry.latest_version == "1.2.0"
        assert entry.trust_source == "unknown"

    def test_default_path_points_at_package_data(self):
        assert DEFAULT_CATALOG_PATH.name == "catalog.yaml"
        assert DEFAULT_CATALOG_PATH.exists()


def test_empty_catalog():
    catalog = SkillCatalog()
    assert len(catalog) == 0
    assert catalog.resolve("docx") is None
    assert list(catalog) == []
