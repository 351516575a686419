"""
Skill folder scanner tests against temporary skill trees.
"""

import asyncio

import pytest

from skillatlas.skill_scanner_lib import (
    SkillScanner,
    format_name,
    infer_category,
    scan_skills,
    to_skill_references,
    tools_to_permissions,
)

PDF_SKILL = """---
name: pdf-tools
description: Work with PDF files
category: Media
allowed-tools: Bash(python:*) Read Write
metadata:
  version: 1.2.0
---

# PDF Tools

Extract text and tables from PDF documents.
"""

PDF_SCRIPT = "print('extract')\n"

WEATHER_README = """# Weather Helper

Looks up the forecast for a city.
"""


@pytest.fixture()
def skills_dir(tmp_path):
    pdf = tmp_path / "pdf-tools"
    pdf.mkdir()
    (pdf / "SKILL.md").write_text(PDF_SKILL)
    (pdf / "extract.py").write_text(PDF_SCRIPT)
    (pdf / "logo.png").write_bytes(b"\x89PNG" * 50)
    (pdf / ".notes.md").write_text("private scratch notes " * 20)

    weather = tmp_path / "weather-helper"
    weather.mkdir()
    (weather / "README.md").write_text(WEATHER_README)

    hidden = tmp_path / ".cache"
    hidden.mkdir()
    (hidden / "SKILL.md").write_text("# Cached\n")

    no_manifest = tmp_path / "scratch"
    no_manifest.mkdir()
    (no_manifest / "data.txt").write_text("not a skill")

    return tmp_path


def _scan(path):
    return asyncio.run(scan_skills(str(path)))


class TestHelpers:
    def test_format_name(self):
        assert format_name("prompt-guard") == "Prompt Guard"
        assert format_name("docx") == "Docx"

    @pytest.mark.parametrize("skill_id,content,category", [
        ("prompt-guard", "", "security"),
        ("team-reminders", "", "productivity"),
        ("weather-helper", "", "utility"),
        ("build", "", "utility"),
        ("helper", "Runs SQL against the warehouse", "data"),
    ])
    def test_infer_category(self, skill_id, content, category):
        assert infer_category(skill_id, content) == category

    def test_tools_to_permissions(self):
        assert tools_to_permissions("Bash(git:*), WebFetch") == ["code-execution", "network"]
        assert tools_to_permissions(["Read", "Edit", "Write"]) == ["filesystem"]
        assert tools_to_permissions(None) == []


class TestScan:
    def test_discovers_only_skill_folders(self, skills_dir):
        results = _scan(skills_dir)
        assert [skill["id"] for skill in results["skills"]] == ["pdf-tools", "weather-helper"]
        assert results["total_skills"] == 2
        assert results["errors"] == []

    def test_frontmatter_skill(self, skills_dir):
        pdf = _scan(skills_dir)["skills"][0]
        assert pdf["name"] == "pdf-tools"
        assert pdf["description"] == "Work with PDF files"
        assert pdf["category"] == "media"
        assert pdf["version"] == "1.2.0"
        assert pdf["permissions"] == ["code-execution", "filesystem"]
        assert pdf["parse_errors"] == []
        assert ".notes.md" not in pdf["files"]

    def test_token_estimate_skips_hidden_and_binary_files(self, skills_dir):
        pdf = _scan(skills_dir)["skills"][0]
        assert pdf["tokens"] == round((len(PDF_SKILL) + len(PDF_SCRIPT)) / 4)

    def test_readme_only_skill(self, skills_dir):
        weather = _scan(skills_dir)["skills"][1]
        assert weather["name"] == "Weather Helper"
        assert weather["category"] == "utility"
        assert weather["description"] == "Looks up the forecast for a city."
        assert weather["version"] is None
        assert weather["permissions"] == []
        assert weather["tokens"] == round(len(WEATHER_README) / 4)

    def test_total_tokens(self, skills_dir):
        results = _scan(skills_dir)
        assert results["total_tokens"] == sum(skill["tokens"] for skill in results["skills"])

    def test_target_is_itself_a_skill(self, skills_dir):
        results = _scan(skills_dir / "pdf-tools")
        assert [skill["id"] for skill in results["skills"]] == ["pdf-tools"]

    def test_readme_only_target_is_a_skill(self, skills_dir):
        results = _scan(skills_dir / "weather-helper")
        assert [skill["id"] for skill in results["skills"]] == ["weather-helper"]

    def test_lowercase_skill_manifest_at_target(self, tmp_path):
        target = tmp_path / "lower"
        target.mkdir()
        (target / "skill.md").write_text("# Lower\n")
        assert [skill["id"] for skill in _scan(target)["skills"]] == ["lower"]

    def test_folder_readme_does_not_hide_skills(self, skills_dir):
        (skills_dir / "README.md").write_text("# My skills\n")
        results = _scan(skills_dir)
        assert [skill["id"] for skill in results["skills"]] == ["pdf-tools", "weather-helper"]

    def test_missing_path(self, tmp_path):
        results = _scan(tmp_path / "nope")
        assert results["skills"] == []
        assert any("Target path does not exist" in error for error in results["errors"])
        assert "No skills found in target path" in results["errors"]

    def test_broken_frontmatter_is_reported(self, tmp_path):
        broken = tmp_path / "broken"
        broken.mkdir()
        (broken / "SKILL.md").write_text("---\nname: [unclosed\n---\n# Broken\n")

        skill = _scan(tmp_path)["skills"][0]
        assert skill["name"] == "Broken"
        assert skill["parse_errors"]

    def test_log_goes_to_callback(self, skills_dir):
        messages = []
        scanner = SkillScanner(str(skills_dir), spinner_callback=messages.append)
        asyncio.run(scanner.scan())
        assert any("Scan complete: 2 skill(s) found" in m for m in messages)


class TestScanToAnalysis:
    def test_references_carry_metadata(self, skills_dir):
        references = to_skill_references(_scan(skills_dir))
        pdf = references[0]
        assert pdf.name == "pdf-tools"
        assert pdf.version == "1.2.0"
        assert pdf.category == "media"
        assert pdf.permissions == ["code-execution", "filesystem"]
        assert pdf.has_metadata()

    def test_metadata_analysis(self, skills_dir, analyzer):
        references = to_skill_references(_scan(skills_dir))
        result = analyzer.analyze_from_metadata(references)

        assert [node.id for node in result.data.nodes] == ["pdf-tools", "weather-helper"]
        pdf = result.data.node("pdf-tools")
        assert pdf.category == "media"
        assert pdf.tokens == references[0].tokens
        assert pdf.vulnerability.permissions == ["code-execution", "filesystem"]
        assert pdf.vulnerability.score == 25
        assert result.summary.unknown_skills == 0
        assert result.summary.categories == {"media": 1, "utility": 1}
