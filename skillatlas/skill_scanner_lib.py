#!/usr/bin/env python3
"""
Skill Scanner Library
Reads a folder of installed Agent Skills and extracts the metadata the
analyzer needs.

Each skill is a folder containing:
- SKILL.md (or README.md) with optional YAML frontmatter
- Any number of supporting text and script files

Author: Skill Atlas Contributors
Version: 1.0.0
License: MIT
"""

import os
import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .models_lib import ExtendedSkillReference

MANIFEST_FILES = ["SKILL.md", "README.md"]

# Files counted towards the token estimate
TOKEN_FILE_EXTENSIONS = {".md", ".txt", ".ts", ".js", ".json", ".py"}

# Rough estimate: ~4 characters per token
CHARS_PER_TOKEN = 4

DESCRIPTION_MAX_LENGTH = 200

# allowed-tools entry -> permission
TOOL_PERMISSIONS = {
    "Bash": "code-execution",
    "Write": "filesystem",
    "Edit": "filesystem",
    "WebFetch": "network",
    "WebSearch": "network",
}

# Keyword lists for skills that do not declare a category, checked in order.
# Keywords of 4+ characters also match as word prefixes ("remind" -> "reminders").
CATEGORY_KEYWORDS = {
    "communication": ["discord", "slack", "email", "message", "chat", "telegram", "whatsapp"],
    "development": ["github", "git", "code", "coding", "programming", "debug", "api"],
    "design": ["canvas", "theme", "ui", "ux", "design", "visual", "css", "style"],
    "media": ["audio", "video", "image", "pdf", "pptx", "docx", "whisper", "music", "spotify"],
    "productivity": ["notion", "obsidian", "notes", "todo", "task", "calendar", "remind"],
    "security": ["guard", "security", "password", "auth", "1password", "protect", "encrypt"],
    "marketing": ["seo", "copy", "content", "marketing", "ads", "social", "campaign"],
    "utility": ["weather", "search", "fetch", "summarize", "translate", "convert"],
    "data": ["sql", "database", "analytics", "data", "query", "report"],
    "devops": ["docker", "deploy", "ci", "cd", "kubernetes", "aws", "cloud"],
}

DEFAULT_CATEGORY = "utility"

_FRONTMATTER_PATTERN = re.compile(r"^---\s*\n(.*?)\n---\s*(?:\n(.*))?$", re.DOTALL)
_HEADING_PATTERN = re.compile(r"^#\s+(.+)$", re.MULTILINE)
_WORD_PATTERN = re.compile(r"[a-z0-9]+")
_TOOL_NAME_PATTERN = re.compile(r"^([A-Za-z]+)")


def format_name(skill_id: str) -> str:
    """'prompt-guard' -> 'Prompt Guard'"""
    return " ".join(word[:1].upper() + word[1:] for word in skill_id.split("-"))


def infer_category(skill_id: str, content: str) -> str:
    words = _WORD_PATTERN.findall(f"{skill_id} {content}".lower())
    for category, keywords in CATEGORY_KEYWORDS.items():
        for keyword in keywords:
            if len(keyword) >= 4:
                if any(word.startswith(keyword) for word in words):
                    return category
            elif keyword in words:
                return category
    return DEFAULT_CATEGORY


def tools_to_permissions(allowed_tools: Any) -> List[str]:
    """
    Map an allowed-tools declaration to permissions.

    Accepts a list or a comma/space separated string, with or without
    scopes ("Bash(git:*)").
    """
    if not allowed_tools:
        return []
    if isinstance(allowed_tools, str):
        entries = re.split(r"[,\s]+", allowed_tools)
    else:
        entries = [str(entry) for entry in allowed_tools]

    permissions = []
    for entry in entries:
        match = _TOOL_NAME_PATTERN.match(entry.strip())
        if not match:
            continue
        permission = TOOL_PERMISSIONS.get(match.group(1))
        if permission and permission not in permissions:
            permissions.append(permission)
    return permissions


class SkillScanner:
    """Installed skills folder scanner."""

    def __init__(self, target_path: str, verbose: bool = False,
                 spinner_callback: Optional[callable] = None):
        """
        Initialize Skill scanner.

        Args:
            target_path: Path to a skill directory or a folder of skills
            verbose: Enable verbose logging
            spinner_callback: Optional callback for spinner updates
        """
        self.target_path = os.path.abspath(target_path)
        self.verbose = verbose
        self.spinner_callback = spinner_callback

        self.results = {
            "target": target_path,
            "timestamp": datetime.now().isoformat(),
            "skills": [],
            "total_skills": 0,
            "total_tokens": 0,
            "errors": []
        }

    def log(self, message: str):
        """Simple logging."""
        if self.spinner_callback:
            self.spinner_callback(f" {message}")
        elif self.verbose:
            print(f"[*] {message}")

    @staticmethod
    def _manifest_path(skill_dir: Path) -> Optional[Path]:
        for name in MANIFEST_FILES:
            candidate = skill_dir / name
            if candidate.is_file():
                return candidate
        # Case-insensitive fallback (skill.md, Readme.md)
        wanted = {name.lower() for name in MANIFEST_FILES}
        for candidate in sorted(skill_dir.iterdir()):
            if candidate.is_file() and candidate.name.lower() in wanted:
                return candidate
        return None

    def discover_skills(self) -> List[str]:
        """
        Find skill folders in the target directory.

        Returns:
            Paths of directories holding SKILL.md or README.md
        """
        skill_dirs = []
        target = Path(self.target_path)

        if not target.exists():
            self.results["errors"].append(f"Target path does not exist: {self.target_path}")
            return skill_dirs

        if not target.is_dir():
            self.results["errors"].append(f"Target path is not a directory: {self.target_path}")
            return skill_dirs

        # Target itself is a skill. A README.md alone only counts when no
        # subfolder is a skill, so a skills folder may carry its own README.
        target_manifest = self._manifest_path(target)
        if target_manifest and target_manifest.name.lower() == "skill.md":
            self.log(f"Found skill at: {target}")
            return [str(target)]

        for child in sorted(target.iterdir()):
            if not child.is_dir() or child.name.startswith("."):
                continue
            if self._manifest_path(child):
                self.log(f"Found skill at: {child}")
                skill_dirs.append(str(child))

        if not skill_dirs and target_manifest:
            self.log(f"Found skill at: {target}")
            return [str(target)]

        self.log(f"Discovered {len(skill_dirs)} skill(s)")
        return skill_dirs

    def _parse_yaml_frontmatter(self, content: str) -> tuple[Dict[str, Any], str]:
        """
        Extract YAML frontmatter and body content from a manifest.

        Args:
            content: Full manifest content

        Returns:
            Tuple of (frontmatter dict, body content string)
        """
        frontmatter = {}
        body = content

        match = _FRONTMATTER_PATTERN.match(content)
        if match:
            body = match.group(2) or ""
            try:
                frontmatter = yaml.safe_load(match.group(1)) or {}
            except yaml.YAMLError as e:
                self.log(f"Warning: Failed to parse YAML frontmatter: {e}")
                frontmatter = {"_parse_error": str(e)}

            if not isinstance(frontmatter, dict):
                frontmatter = {"_parse_error": "Frontmatter is not a mapping"}

        return frontmatter, body

    def _estimate_tokens(self, skill_dir: Path) -> int:
        total_chars = 0
        for file_path in skill_dir.rglob("*"):
            relative_parts = file_path.relative_to(skill_dir).parts
            if any(part.startswith(".") for part in relative_parts):
                continue
            if not file_path.is_file() or file_path.suffix.lower() not in TOKEN_FILE_EXTENSIONS:
                continue
            try:
                total_chars += len(file_path.read_text(encoding="utf-8", errors="replace"))
            except OSError as e:
                self.log(f"Warning: could not read {file_path}: {e}")
        return int(round(total_chars / CHARS_PER_TOKEN))

    @staticmethod
    def _first_paragraph(body: str) -> Optional[str]:
        after_title = False
        for line in body.splitlines():
            if line.startswith("#"):
                after_title = True
                continue
            if after_title and line.strip():
                return line.strip()[:DESCRIPTION_MAX_LENGTH]
        return None

    def parse_skill(self, skill_dir: str) -> Dict[str, Any]:
        """
        Parse a single skill folder.

        Args:
            skill_dir: Path to the skill directory

        Returns:
            Dict with id, name, version, category, description,
            permissions, tokens, files and parse_errors
        """
        skill_path = Path(skill_dir)
        skill_id = skill_path.name

        skill_info = {
            "id": skill_id,
            "name": None,
            "path": str(skill_path),
            "manifest": None,
            "version": None,
            "category": None,
            "description": None,
            "permissions": [],
            "allowed_tools": None,
            "tokens": 0,
            "files": [],
            "frontmatter": {},
            "parse_errors": []
        }

        content = ""
        try:
            skill_info["files"] = sorted(
                child.name for child in skill_path.iterdir() if not child.name.startswith(".")
            )
            manifest = self._manifest_path(skill_path)
            if manifest:
                skill_info["manifest"] = str(manifest)
                content = manifest.read_text(encoding="utf-8", errors="replace")
        except Exception as e:
            skill_info["parse_errors"].append(f"Failed to read skill folder: {e}")

        frontmatter, body = self._parse_yaml_frontmatter(content)
        skill_info["frontmatter"] = frontmatter
        if "_parse_error" in frontmatter:
            skill_info["parse_errors"].append(f"Invalid frontmatter: {frontmatter['_parse_error']}")

        try:
            metadata = frontmatter.get("metadata") if isinstance(frontmatter.get("metadata"), dict) else {}

            if frontmatter.get("name"):
                skill_info["name"] = str(frontmatter["name"]).strip()
            else:
                heading = _HEADING_PATTERN.search(body)
                skill_info["name"] = heading.group(1).strip() if heading else format_name(skill_id)

            version = frontmatter.get("version") or metadata.get("version")
            skill_info["version"] = str(version).strip() if version is not None else None

            category = frontmatter.get("category") or metadata.get("category")
            skill_info["category"] = (
                str(category).strip().lower() if category else infer_category(skill_id, content)
            )

            description = frontmatter.get("description")
            skill_info["description"] = (
                str(description).strip() if description else self._first_paragraph(body)
            )

            declared = frontmatter.get("permissions") or []
            if isinstance(declared, str):
                declared = [declared]
            permissions = [str(p) for p in declared]
            skill_info["allowed_tools"] = frontmatter.get("allowed-tools")
            for permission in tools_to_permissions(skill_info["allowed_tools"]):
                if permission not in permissions:
                    permissions.append(permission)
            skill_info["permissions"] = permissions

        except Exception as e:
            skill_info["parse_errors"].append(f"Failed to parse manifest: {e}")

        skill_info["tokens"] = self._estimate_tokens(skill_path)
        return skill_info

    async def scan(self) -> Dict[str, Any]:
        """
        Main scanning function.

        Returns:
            Dict containing all scan results
        """
        self.log(f"Starting skill scan of {self.target_path}")

        skill_dirs = self.discover_skills()

        if not skill_dirs:
            self.results["errors"].append("No skills found in target path")
            return self.results

        for skill_dir in skill_dirs:
            self.log(f"Parsing skill: {skill_dir}")
            skill_info = self.parse_skill(skill_dir)
            self.results["skills"].append(skill_info)

        self.results["total_skills"] = len(self.results["skills"])
        self.results["total_tokens"] = sum(skill["tokens"] for skill in self.results["skills"])
        self.log(f"Scan complete: {self.results['total_skills']} skill(s) found")

        return self.results


def to_skill_references(scan_results: Dict[str, Any]) -> List[ExtendedSkillReference]:
    """Turn scan results into references carrying their scanned metadata."""
    references = []
    for skill in scan_results.get("skills", []):
        references.append(ExtendedSkillReference(
            name=skill["id"],
            version=skill.get("version"),
            path=skill.get("path"),
            category=skill.get("category"),
            display_name=skill.get("name"),
            tokens=skill.get("tokens") or None,
            permissions=list(skill.get("permissions") or []),
            description=skill.get("description"),
        ))
    return references


async def scan_skills(target_path: str, verbose: bool = False,
                      spinner_callback: Optional[callable] = None) -> Dict[str, Any]:
    """
    Convenience function to scan a skills folder.

    Args:
        target_path: Path to a skill directory or a folder of skills
        verbose: Enable verbose logging
        spinner_callback: Optional callback for spinner updates

    Returns:
        dict: Scan results
    """
    scanner = SkillScanner(
        target_path=target_path,
        verbose=verbose,
        spinner_callback=spinner_callback
    )
    return await scanner.scan()
