"""
Command line and reporter tests.
"""

import asyncio
import json
import sys

import pytest
import yaml

import atlas
from skillatlas.share_codec_lib import decode_result

from conftest import CATALOG_DATA


@pytest.fixture()
def catalog_file(tmp_path):
    path = tmp_path / "catalog.yaml"
    path.write_text(yaml.safe_dump({"skills": CATALOG_DATA}))
    return path


@pytest.fixture()
def skills_file(tmp_path):
    path = tmp_path / "skills.txt"
    path.write_text("# my skills\nprompt-guard@2.8.0\ndocx\ndocx-pro\nmystery\n")
    return path


def _run(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["atlas.py", *argv])
    asyncio.run(atlas.main())


class TestParser:
    def test_defaults(self):
        args = atlas.build_parser().parse_args(["skills.txt"])
        assert args.input == "skills.txt"
        assert args.output_prefix == "skill_atlas"
        assert not args.find_duplicates
        assert args.seed is None

    def test_requires_a_source(self, monkeypatch):
        with pytest.raises(SystemExit) as exc:
            _run(monkeypatch, "--share-only")
        assert exc.value.code == 2

    def test_rejects_two_sources(self, monkeypatch, skills_file):
        with pytest.raises(SystemExit) as exc:
            _run(monkeypatch, str(skills_file), "--decode", "abc")
        assert exc.value.code == 2


class TestMain:
    def test_share_only_prints_decodable_string(self, monkeypatch, capsys, skills_file,
                                                catalog_file, catalog):
        _run(monkeypatch, str(skills_file), "--share-only", "--no-jitter", "-c", str(catalog_file))
        share = capsys.readouterr().out.strip()

        assert "\n" not in share
        restored = decode_result(share, catalog=catalog)
        assert [node.id for node in restored.data.nodes] == ["prompt-guard", "docx", "docx-pro", "mystery"]

    def test_bad_share_string_exits(self, monkeypatch, capsys):
        with pytest.raises(SystemExit) as exc:
            _run(monkeypatch, "--decode", "definitely not a share string", "--share-only")
        assert exc.value.code == 1
        assert "Could not decode share string" in capsys.readouterr().out

    def test_missing_catalog_fails_cleanly(self, monkeypatch, capsys, skills_file, tmp_path):
        with pytest.raises(SystemExit) as exc:
            _run(monkeypatch, str(skills_file), "--share-only", "-c", str(tmp_path / "none.yaml"))
        assert exc.value.code == 1
        assert "Catalog file does not exist" in capsys.readouterr().out

    def test_full_run_with_reports(self, monkeypatch, capsys, skills_file, catalog_file, tmp_path):
        monkeypatch.chdir(tmp_path)
        _run(monkeypatch, str(skills_file), "-c", str(catalog_file), "--seed", "7",
             "--find-duplicates", "--json-report", "--md-report", "--output-prefix", "out")

        output = capsys.readouterr().out
        assert "Portfolio Health" in output
        assert "analysis completed successfully" in output

        json_files = list(tmp_path.glob("out_*.json"))
        md_files = list(tmp_path.glob("out_*.md"))
        assert len(json_files) == 1
        assert len(md_files) == 1

        report = json.loads(json_files[0].read_text())
        removals = report["analysis"]["recommendations"]["remove"]
        assert [item["id"] for item in removals] == ["docx-pro"]
        assert report["source"] == str(skills_file)


class TestReporter:
    def test_json_report(self, analyzer, tmp_path):
        result = analyzer.analyze_text("prompt-guard@2.8.0\nunknown-thing")
        reporter = atlas.AtlasReporter(result, "SHARE", "test")
        path = tmp_path / "report.json"

        reporter.export_json_report(str(path))

        report = json.loads(path.read_text())
        assert report["analysis"]["id"] == result.id
        assert report["grade"] == atlas.score_to_grade(result.summary.health_score)
        assert report["share_string"] == "SHARE"
        assert "scan_results" not in report

    def test_markdown_report(self, analyzer, tmp_path):
        result = analyzer.analyze_text("sketchy@1.0.0\ndocx")
        path = tmp_path / "report.md"

        atlas.AtlasReporter(result, "SHARE", "test").export_markdown_report(str(path))

        content = path.read_text()
        assert content.startswith("# Skill Atlas")
        assert "## Security" in content
        assert "| sketchy | high | 75 |" in content
        assert "Sketchy Helper (`sketchy`)" in content

    def test_updates_show_update_type(self, analyzer, tmp_path, capsys):
        result = analyzer.analyze_text("prompt-guard v2.8.0\ndocker-basics@1.1.0")
        reporter = atlas.AtlasReporter(result, "SHARE", "test")
        path = tmp_path / "report.md"

        reporter.export_markdown_report(str(path))
        content = path.read_text()
        assert "- `prompt-guard` v2.8.0 -> v3.0.0 (major): Major update with new features" in content
        assert "- `docker-basics` v1.1.0 -> v1.2.0 (minor): Bug fixes and improvements" in content
        assert "| Prompt Guard (`prompt-guard`) | security | v2.8.0 |" in content

        reporter.display_console_report()
        assert "[major]" in capsys.readouterr().out

    def test_console_truncates_unless_full_output(self, analyzer, capsys):
        result = analyzer.analyze_text("docx")
        long_share = "x" * 300

        atlas.AtlasReporter(result, long_share, "test").display_console_report()
        assert long_share not in capsys.readouterr().out

        atlas.AtlasReporter(result, long_share, "test", full_output=True).display_console_report()
        assert long_share in capsys.readouterr().out
