#!/usr/bin/env python3
"""
Skill Atlas - Skill Portfolio Analyzer
Maps a portfolio of installed agent skills and advises what to keep,
update, install or remove.

Author: Skill Atlas Contributors
Version: 1.0.0
License: MIT

Skill Atlas provides:
- Skill listing parsing (plain lists, name@version, paths, ls -l output, JSON)
- Catalog resolution with heuristic risk scoring
- Similarity graph, category clusters and portfolio metrics
- Health score, grade and recommendations
- Installed skills folder scanning
- Shareable result strings
- Multiple output formats (console, JSON, markdown)

Usage:
    python atlas.py <skills-file> [options]
    python atlas.py --skill <path> [options]
    python atlas.py --decode <share-string> [options]

Examples:
    # Analyze a list of skills
    python atlas.py my_skills.txt

    # Analyze ls -l output from stdin
    ls -l ~/.claude/skills | python atlas.py -

    # Scan an installed skills folder
    python atlas.py --skill ~/.claude/skills --find-duplicates

    # Restore a shared result
    python atlas.py --decode eyJ2IjoxLC...

    # Export detailed reports
    python atlas.py my_skills.txt --json-report --md-report
"""

import argparse
import asyncio
import json
import sys
from datetime import datetime
from typing import Optional

from yaspin import yaspin

from skillatlas.analyzer_lib import SkillAnalyzer
from skillatlas.catalog_lib import load_catalog
from skillatlas.duplicate_finder_lib import apply_removal_suggestions
from skillatlas.health_lib import grade_label, score_to_grade
from skillatlas.layout_lib import NoJitter, RandomJitter
from skillatlas.models_lib import AnalysisResult
from skillatlas.share_codec_lib import ShareCodec, encode_metadata, encode_result
from skillatlas.skill_scanner_lib import scan_skills, to_skill_references
from skillatlas.version_lib import format_version, get_update_type

TOOL_NAME = "Skill Atlas"
TOOL_VERSION = "1.0.0"
TOOL_AUTHOR = "Skill Atlas Contributors"
TOOL_DESCRIPTION = "Skill Portfolio Analyzer"

GREEN = "\033[92m"
RED = "\033[91m"
YELLOW = "\033[93m"
BLUE = "\033[94m"
CYAN = "\033[96m"
BOLD = "\033[1m"
RESET = "\033[0m"

DIAGNOSIS_MARKERS = {
    "success": (GREEN, "[+]"),
    "warning": (YELLOW, "[!]"),
    "error": (RED, "[-]"),
}

RISK_COLORS = {
    "low": GREEN,
    "medium": YELLOW,
    "high": RED,
    "critical": RED,
}

PRIORITY_COLORS = {
    "high": RED,
    "medium": YELLOW,
    "low": GREEN,
}

TOP_PAIRS_SHOWN = 5


def _grade_color(score: float) -> str:
    if score >= 75:
        return GREEN
    if score >= 50:
        return YELLOW
    return RED


class AtlasReporter:
    """Reporter for generating output reports."""

    def __init__(self, result: AnalysisResult, share_string: str, source: str,
                 scan_results: Optional[dict] = None, full_output: bool = False):
        self.result = result
        self.share_string = share_string
        self.source = source
        self.scan_results = scan_results
        self.full_output = full_output

    def _truncate(self, text: str, limit: int = 80) -> str:
        if self.full_output or len(text) <= limit:
            return text
        return text[:limit - 3] + "..."

    def display_console_report(self):
        """Display a nice terminal report."""
        summary = self.result.summary
        recommendations = self.result.recommendations
        grade = score_to_grade(summary.health_score)

        print(f"\n{BOLD}{CYAN}{'='*60}{RESET}")
        print(f"{BOLD}{GREEN} {TOOL_NAME} v{TOOL_VERSION} - {TOOL_DESCRIPTION}{RESET}")
        print(f"{BOLD}{CYAN}{'='*60}{RESET}")

        print(f"{CYAN}Source:{RESET} {self.source}")
        print(f"{CYAN}Result ID:{RESET} {self.result.id}")
        print(f"{CYAN}Created:{RESET} {self.result.created_at[:19].replace('T', ' ')}")

        color = _grade_color(summary.health_score)
        print(f"\n{BOLD}{YELLOW}[HEALTH] Portfolio Health:{RESET}")
        print(f"  {CYAN}Score:{RESET} {color}{summary.health_score}/100{RESET} "
              f"({color}{grade}{RESET} - {grade_label(summary.health_score)})")
        print(f"  {CYAN}Skills:{RESET} {summary.total_skills} total "
              f"({summary.known_skills} known, {summary.unknown_skills} unknown)")
        print(f"  {CYAN}Tokens:{RESET} {summary.total_tokens:,}")
        print(f"  {CYAN}Outdated:{RESET} {summary.outdated_count}")
        print(f"  {CYAN}High/Critical Risk:{RESET} {summary.critical_security_count}")

        if self.scan_results and self.scan_results.get("errors"):
            print(f"\n{BOLD}{RED}[ERRORS] Scan Errors:{RESET}")
            for error in self.scan_results["errors"]:
                print(f"  {RED}[-]{RESET} {error}")

        if summary.categories:
            print(f"\n{BOLD}{BLUE}[CATEGORIES] Category Breakdown ({len(summary.categories)}){RESET}")
            print(f"{BLUE}{'-' * 50}{RESET}")
            coverage = self.result.data.metrics.coverage_scores
            for category, count in sorted(summary.categories.items(), key=lambda item: -item[1]):
                bar = "#" * max(1, coverage.get(category, 0) // 5)
                print(f"  {BOLD}{category:<14}{RESET} {count:>3} skill(s)  "
                      f"{CYAN}{bar}{RESET} {coverage.get(category, 0)}% tokens")

        if recommendations.diagnosis:
            print(f"\n{BOLD}{YELLOW}[DIAGNOSIS] Findings{RESET}")
            print(f"{YELLOW}{'-' * 50}{RESET}")
            for item in recommendations.diagnosis:
                item_color, marker = DIAGNOSIS_MARKERS.get(item.type, (RESET, "[*]"))
                print(f"  {item_color}{marker}{RESET} {BOLD}{item.text}{RESET}")
                print(f"      {self._truncate(item.detail)}")

        if recommendations.install:
            print(f"\n{BOLD}{GREEN}[INSTALL] Suggested Skills ({len(recommendations.install)}){RESET}")
            for item in recommendations.install:
                priority_color = PRIORITY_COLORS.get(item.priority, RESET)
                print(f"  {BOLD}{item.id}{RESET} [{item.category}] "
                      f"{priority_color}{item.priority.upper()}{RESET} - {item.reason}")

        if recommendations.update:
            print(f"\n{BOLD}{BLUE}[UPDATE] Pending Updates ({len(recommendations.update)}){RESET}")
            for item in recommendations.update:
                update_type = get_update_type(item.from_version, item.to_version)
                print(f"  {BOLD}{item.id}{RESET} {item.from_version} -> "
                      f"{GREEN}{item.to_version}{RESET} [{update_type}] ({item.reason})")

        if recommendations.remove:
            print(f"\n{BOLD}{RED}[REMOVE] Possible Duplicates ({len(recommendations.remove)}){RESET}")
            for item in recommendations.remove:
                print(f"  {BOLD}{item.id}{RESET} - {item.reason}")

        if recommendations.security:
            print(f"\n{BOLD}{RED}[SECURITY] Risky Skills ({len(recommendations.security)}){RESET}")
            print(f"{RED}{'-' * 50}{RESET}")
            for item in recommendations.security:
                risk_color = RISK_COLORS.get(item.risk, RESET)
                print(f"  {BOLD}{item.id}{RESET} {risk_color}{item.risk.upper()} ({item.score}){RESET}")
                if item.reason:
                    print(f"      {CYAN}Reason:{RESET} {self._truncate(item.reason)}")
                print(f"      {CYAN}Action:{RESET} {item.action}")

        pairs = self.result.data.metrics.cosine_similarities
        if pairs:
            print(f"\n{BOLD}{CYAN}[SIMILARITY] Closest Pairs{RESET}")
            for pair in pairs[:TOP_PAIRS_SHOWN]:
                print(f"  {pair['skill1']} <-> {pair['skill2']}: {pair['similarity']:.2f}")
            metrics = self.result.data.metrics
            print(f"  {CYAN}Uniqueness Index:{RESET} {metrics.uniqueness_index}")

        print(f"\n{BOLD}{CYAN}[SHARE]{RESET} {self._truncate(self.share_string, 120)}")

    def build_report(self) -> dict:
        score = self.result.summary.health_score
        report = {
            "analysis": self.result.to_dict(),
            "grade": score_to_grade(score),
            "grade_label": grade_label(score),
            "share_string": self.share_string,
            "source": self.source,
            "export_timestamp": datetime.now().isoformat()
        }
        if self.scan_results is not None:
            report["scan_results"] = self.scan_results
        return report

    def export_json_report(self, filename: str):
        """Export detailed JSON report."""
        with open(filename, "w") as f:
            json.dump(self.build_report(), f, indent=2, default=str)

        print(f"{GREEN}[+] JSON report exported to: {filename}{RESET}")

    def export_markdown_report(self, filename: str):
        """Export markdown report."""
        summary = self.result.summary
        recommendations = self.result.recommendations
        md_content = []

        md_content.append(f"# {TOOL_NAME} v{TOOL_VERSION} - Portfolio Report\n\n")
        md_content.append(f"**Source:** {self.source}\n")
        md_content.append(f"**Result ID:** {self.result.id}\n")
        md_content.append(f"**Created:** {self.result.created_at}\n\n")

        md_content.append("## Summary\n\n")
        md_content.append(f"- **Health Score:** {summary.health_score}/100 "
                          f"(Grade {score_to_grade(summary.health_score)}, "
                          f"{grade_label(summary.health_score)})\n")
        md_content.append(f"- **Skills:** {summary.total_skills} "
                          f"({summary.known_skills} known, {summary.unknown_skills} unknown)\n")
        md_content.append(f"- **Total Tokens:** {summary.total_tokens}\n")
        md_content.append(f"- **Outdated:** {summary.outdated_count}\n")
        md_content.append(f"- **High/Critical Risk:** {summary.critical_security_count}\n\n")

        if summary.categories:
            coverage = self.result.data.metrics.coverage_scores
            md_content.append("## Categories\n\n")
            md_content.append("| Category | Skills | Token Share |\n")
            md_content.append("|----------|--------|-------------|\n")
            for category, count in summary.categories.items():
                md_content.append(f"| {category} | {count} | {coverage.get(category, 0)}% |\n")
            md_content.append("\n")

        if recommendations.diagnosis:
            md_content.append("## Diagnosis\n\n")
            for item in recommendations.diagnosis:
                md_content.append(f"- **[{item.type.upper()}] {item.text}**: {item.detail}\n")
            md_content.append("\n")

        if recommendations.install:
            md_content.append("## Suggested Installs\n\n")
            for item in recommendations.install:
                md_content.append(f"- `{item.id}` ({item.category}, {item.priority}): {item.reason}\n")
            md_content.append("\n")

        if recommendations.update:
            md_content.append("## Updates\n\n")
            for item in recommendations.update:
                update_type = get_update_type(item.from_version, item.to_version)
                md_content.append(f"- `{item.id}` {item.from_version} -> {item.to_version} "
                                  f"({update_type}): {item.reason}\n")
            md_content.append("\n")

        if recommendations.remove:
            md_content.append("## Possible Duplicates\n\n")
            for item in recommendations.remove:
                md_content.append(f"- `{item.id}`: {item.reason}\n")
            md_content.append("\n")

        if recommendations.security:
            md_content.append("## Security\n\n")
            md_content.append("| Skill | Risk | Score | Reason | Action |\n")
            md_content.append("|-------|------|-------|--------|--------|\n")
            for item in recommendations.security:
                md_content.append(f"| {item.id} | {item.risk} | {item.score} | "
                                  f"{item.reason} | {item.action} |\n")
            md_content.append("\n")

        md_content.append("## Skills\n\n")
        md_content.append("| Skill | Category | Version | Tokens | Risk | Connections |\n")
        md_content.append("|-------|----------|---------|--------|------|-------------|\n")
        for node in self.result.data.nodes:
            md_content.append(f"| {node.name} (`{node.id}`) | {node.category} | "
                              f"{format_version(node.version) if node.version else '-'} | {node.tokens} | "
                              f"{node.vulnerability.level} ({node.vulnerability.score}) | "
                              f"{node.connection_count} |\n")
        md_content.append("\n")

        md_content.append("## Share\n\n")
        md_content.append(f"```\n{self.share_string}\n```\n")

        with open(filename, "w") as f:
            f.write("".join(md_content))

        print(f"{GREEN}[+] Markdown report exported to: {filename}{RESET}")


def print_ascii_art():
    """Print ASCII art for help display."""
    art = r"""
     ____  _  _____ _     _        _  _____ _        _    ____
    / ___|| |/ /_ _| |   | |      / \|_   _| |      / \  / ___|
    \___ \| ' / | || |   | |     / _ \ | | | |     / _ \ \___ \
     ___) | . \ | || |___| |___ / ___ \| | | |___ / ___ \ ___) |
    |____/|_|\_\___|_____|_____/_/   \_\_| |_____/_/   \_\____/

    {} v{} - {}
    Parse * Map * Advise
    by {}
    """.format(TOOL_NAME, TOOL_VERSION, TOOL_DESCRIPTION, TOOL_AUTHOR)
    print(art)


class CustomHelpAction(argparse._HelpAction):
    """Custom help action that shows ASCII art."""
    def __init__(self, option_strings, dest=argparse.SUPPRESS,
                 default=argparse.SUPPRESS, help=None):
        super().__init__(option_strings, dest, default, help)

    def __call__(self, parser, namespace, values, option_string=None):
        _ = namespace, values, option_string
        print_ascii_art()
        parser.print_help()
        parser.exit()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Skill Atlas - Skill Portfolio Analyzer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
        epilog="""
Examples:
  # Analyze a list of skills
  python atlas.py my_skills.txt

  # Analyze ls -l output from stdin
  ls -l ~/.claude/skills | python atlas.py -

  # Scan an installed skills folder and look for duplicates
  python atlas.py --skill ~/.claude/skills --find-duplicates

  # Restore a shared result
  python atlas.py --decode eyJ2IjoxLC...

  # Reproducible layout and reports
  python atlas.py my_skills.txt --seed 42 --json-report --md-report
        """
    )

    parser.add_argument('-h', '--help', action=CustomHelpAction,
                        help='show this help message and exit')

    parser.add_argument("input", nargs="?", default=None,
                        help="File with one skill per line, a JSON array, or '-' for stdin")

    source_group = parser.add_argument_group("Sources")
    source_group.add_argument("-s", "--skill", metavar="PATH",
                              help="Scan an installed skills folder")
    source_group.add_argument("-d", "--decode", metavar="STRING",
                              help="Restore a result from a share string")

    analysis_group = parser.add_argument_group("Analysis Options")
    analysis_group.add_argument("-c", "--catalog", metavar="FILE",
                                help="YAML skill catalog (default: bundled catalog)")
    analysis_group.add_argument("--seed", type=int, default=None,
                                help="Seed for the layout jitter")
    analysis_group.add_argument("--no-jitter", action="store_true",
                                help="Disable layout jitter (deterministic positions)")
    analysis_group.add_argument("--find-duplicates", action="store_true",
                                help="Suggest removal of near-duplicate skills")

    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable verbose output during analysis")

    output_group = parser.add_argument_group("Output Options")
    output_group.add_argument("--json-report", action="store_true",
                              help="Export detailed JSON report")
    output_group.add_argument("--md-report", action="store_true",
                              help="Export markdown report")
    output_group.add_argument("--output-prefix", default="skill_atlas",
                              help="Prefix for output files (default: skill_atlas)")
    output_group.add_argument("--share-only", action="store_true",
                              help="Print only the share string")
    output_group.add_argument("--full-output", action="store_true",
                              help="Show full text without truncation")

    return parser


def read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


async def run_analysis(args, catalog, jitter, spinner_callback=None):
    """
    Run the analysis for whichever source was given.

    Returns:
        Tuple of (result or None, share string, source label, scan results or None)
    """
    if args.skill:
        scan_results = await scan_skills(
            target_path=args.skill,
            verbose=args.verbose,
            spinner_callback=spinner_callback
        )
        references = to_skill_references(scan_results)
        analyzer = SkillAnalyzer(catalog=catalog, jitter=jitter,
                                 verbose=args.verbose, spinner_callback=spinner_callback)
        result = analyzer.analyze_from_metadata(references)
        return result, encode_metadata(references), args.skill, scan_results

    if args.decode:
        codec = ShareCodec(catalog=catalog, jitter=jitter,
                           verbose=args.verbose, spinner_callback=spinner_callback)
        return codec.decode(args.decode), args.decode, "share string", None

    raw_text = read_input(args.input)
    analyzer = SkillAnalyzer(catalog=catalog, jitter=jitter,
                             verbose=args.verbose, spinner_callback=spinner_callback)
    result = analyzer.analyze_text(raw_text)
    source = "stdin" if args.input == "-" else args.input
    return result, encode_result(result), source, None


async def main():
    """Main function for Skill Atlas."""
    parser = build_parser()
    args = parser.parse_args()

    sources = [source for source in (args.input, args.skill, args.decode) if source]
    if not sources:
        parser.error("provide a skills file, --skill PATH or --decode STRING")
    if len(sources) > 1:
        parser.error("use only one of: skills file, --skill, --decode")

    quiet = args.share_only

    if not quiet:
        print(f"\n--==[{BOLD}{GREEN} {TOOL_NAME} v{TOOL_VERSION} - {TOOL_DESCRIPTION}{RESET} - {CYAN}by {TOOL_AUTHOR}{RESET}]==--")
        if args.skill:
            print(f"\n{CYAN}Skills folder: {args.skill}{RESET}")
        elif args.decode:
            print(f"\n{CYAN}Share string: {args.decode[:40]}...{RESET}")
        else:
            print(f"\n{CYAN}Input: {'stdin' if args.input == '-' else args.input}{RESET}")
        if args.find_duplicates:
            print(f"{YELLOW}Duplicate detection: Enabled{RESET}")
        print()

    try:
        catalog = load_catalog(args.catalog) if args.catalog else None
        jitter = NoJitter() if args.no_jitter else RandomJitter(args.seed)

        if quiet:
            result, share_string, source, scan_results = await run_analysis(args, catalog, jitter)
        else:
            with yaspin(text=" Analyzing skill portfolio...", color="cyan") as spinner:
                def update_spinner(message):
                    spinner.text = message

                result, share_string, source, scan_results = await run_analysis(
                    args, catalog, jitter, spinner_callback=update_spinner
                )

                if result is None:
                    spinner.fail("[-]")
                else:
                    spinner.ok("[+]")

        if result is None:
            print(f"{RED}[-] Could not decode share string{RESET}")
            sys.exit(1)

        if args.find_duplicates:
            result = apply_removal_suggestions(result)

        if args.verbose and not quiet:
            print(f"{CYAN}[DEBUG] Analysis summary:{RESET}")
            print(f"  Nodes: {len(result.data.nodes)}")
            print(f"  Edges: {len(result.data.edges)}")
            print(f"  Clusters: {len(result.data.clusters)}")

        if quiet:
            print(share_string)
            return

        reporter = AtlasReporter(result, share_string, source,
                                 scan_results=scan_results, full_output=args.full_output)
        reporter.display_console_report()

        if args.json_report or args.md_report:
            with yaspin(text=" Generating reports...", color="green") as spinner:

                if args.json_report:
                    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
                    json_filename = f"{args.output_prefix}_{timestamp}.json"
                    reporter.export_json_report(json_filename)

                if args.md_report:
                    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
                    md_filename = f"{args.output_prefix}_{timestamp}.md"
                    reporter.export_markdown_report(md_filename)

                spinner.ok("[+]")

        print(f"\n{GREEN}[+] {TOOL_NAME} analysis completed successfully!{RESET}")

    except KeyboardInterrupt:
        print(f"\n{YELLOW}[!] Analysis interrupted by user{RESET}")
        sys.exit(1)
    except Exception as e:
        print(f"\n{RED}[-] Analysis failed: {e}{RESET}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
