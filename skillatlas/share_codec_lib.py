#!/usr/bin/env python3
"""
Share Codec
Compact, URL-safe encoding of an analysis result.

Envelope (JSON, version 1):

    {"v": 1, "i": "sr_...", "t": 1760000000000, "s": ["prompt-guard@2.8.0", "docx"]}

Results are encoded as compact JSON, percent-encoded like JavaScript's
encodeURIComponent, then base64url without padding. Folder scans emit a
richer envelope whose "s" is a list of {"i", "n", "c", "t", "v"} objects,
base64url encoded without the percent step. Decoding accepts both and
re-runs the pipeline, so only identifiers and versions travel.

Author: Skill Atlas Contributors
Version: 1.0.0
License: MIT
"""

import base64
import binascii
import json
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote, unquote

from .analyzer_lib import SkillAnalyzer, format_timestamp, now_ms, parse_timestamp, to_base36
from .catalog_lib import SkillCatalog
from .models_lib import AnalysisResult, ExtendedSkillReference, SkillReference

SHARE_FORMAT_VERSION = 1

# Characters encodeURIComponent leaves alone
URI_SAFE_CHARS = "-_.!~*'()"


def _dumps(payload: Dict[str, Any]) -> str:
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False)


def _b64url_encode(text: str) -> str:
    return base64.urlsafe_b64encode(text.encode("utf-8")).rstrip(b"=").decode("ascii")


def _b64_decode(text: str) -> bytes:
    """base64url first, then standard base64."""
    cleaned = text.strip()
    try:
        standard = cleaned.replace("-", "+").replace("_", "/")
        padded = standard + "=" * (-len(standard) % 4)
        return base64.b64decode(padded, validate=True)
    except (binascii.Error, ValueError):
        return base64.b64decode(cleaned)


def encode_result(result: AnalysisResult) -> str:
    """
    Encode a result as a share string.

    Args:
        result: AnalysisResult to share

    Returns:
        base64url string without padding
    """
    entries = []
    for node in result.data.nodes:
        entry = node.id
        if node.version:
            entry += f"@{node.version}"
        entries.append(entry)

    payload = {
        "v": SHARE_FORMAT_VERSION,
        "i": result.id,
        "t": parse_timestamp(result.created_at),
        "s": entries,
    }
    return _b64url_encode(quote(_dumps(payload), safe=URI_SAFE_CHARS))


def encode_metadata(skills: Sequence[ExtendedSkillReference], timestamp_ms: Optional[int] = None) -> str:
    """
    Encode scanned skills with their metadata (the folder scan format).

    Args:
        skills: References carrying category, display name and tokens
        timestamp_ms: Envelope timestamp (now when omitted)

    Returns:
        base64url string without padding
    """
    entries = []
    for skill in skills:
        entry = {
            "i": skill.name,
            "n": skill.display_name or skill.name,
            "c": skill.category or "utility",
            "t": skill.tokens or 0,
        }
        if skill.version:
            entry["v"] = skill.version
        entries.append(entry)

    payload = {
        "v": SHARE_FORMAT_VERSION,
        "t": now_ms() if timestamp_ms is None else timestamp_ms,
        "s": entries,
    }
    return _b64url_encode(_dumps(payload))


def _rich_references(entries: List[Any]) -> Optional[List[ExtendedSkillReference]]:
    """Rich schema: a non-empty list of objects. None when the shape differs."""
    if not entries or not all(isinstance(entry, dict) for entry in entries):
        return None

    references = []
    for entry in entries:
        tokens = entry.get("t")
        references.append(ExtendedSkillReference(
            name=str(entry["i"]),
            version=str(entry["v"]) if entry.get("v") else None,
            category=entry.get("c"),
            display_name=entry.get("n"),
            tokens=int(tokens) if tokens else None,
        ))
    return references


def _simple_references(entries: List[Any]) -> List[SkillReference]:
    """Simple schema: a list of "id" or "id@version" strings."""
    references = []
    for entry in entries:
        if not isinstance(entry, str):
            raise ValueError(f"Unexpected share entry: {entry!r}")
        name, _, version = entry.partition("@")
        references.append(SkillReference(name=name, version=version or None))
    return references


class ShareCodec:
    """Decodes share strings back into full analysis results."""

    def __init__(self, catalog: Optional[SkillCatalog] = None, jitter=None,
                 verbose: bool = False, spinner_callback: Optional[callable] = None):
        self.verbose = verbose
        self.spinner_callback = spinner_callback
        self.analyzer = SkillAnalyzer(
            catalog=catalog,
            jitter=jitter,
            verbose=verbose,
            spinner_callback=spinner_callback
        )

    def log(self, message: str):
        """Simple logging."""
        if self.spinner_callback:
            self.spinner_callback(f" {message}")
        elif self.verbose:
            print(f"[*] {message}")

    def encode(self, result: AnalysisResult) -> str:
        return encode_result(result)

    def decode(self, encoded: str) -> Optional[AnalysisResult]:
        """
        Restore a shared result. Never raises.

        Args:
            encoded: Share string

        Returns:
            AnalysisResult, or None when the string cannot be decoded
        """
        try:
            text = unquote(_b64_decode(encoded).decode("utf-8"), errors="strict")
            payload = json.loads(text)

            if payload.get("v") != SHARE_FORMAT_VERSION:
                self.log(f"Warning: unknown share format version: {payload.get('v')}")

            timestamp = int(payload["t"])
            result_id = payload.get("i") or f"sr_{to_base36(timestamp)}"
            created_at = format_timestamp(timestamp)

            entries = payload["s"]
            if not isinstance(entries, list):
                raise ValueError("Share payload 's' is not a list")

            rich = _rich_references(entries)
            if rich is not None:
                self.log(f"Decoded {len(rich)} skill(s) with metadata")
                return self.analyzer.analyze_from_metadata(rich, result_id=result_id, created_at=created_at)

            references = _simple_references(entries)
            self.log(f"Decoded {len(references)} skill reference(s)")
            return self.analyzer.analyze(references, result_id=result_id, created_at=created_at)

        except Exception as e:
            self.log(f"Failed to decode shared result: {e}")
            return None


def decode_result(encoded: str, catalog: Optional[SkillCatalog] = None, jitter=None,
                  verbose: bool = False,
                  spinner_callback: Optional[callable] = None) -> Optional[AnalysisResult]:
    """
    Convenience function to decode a share string.

    Args:
        encoded: Share string
        catalog: Known skills table (bundled catalog when omitted)
        jitter: Layout jitter source
        verbose: Enable verbose logging
        spinner_callback: Optional callback for spinner updates

    Returns:
        AnalysisResult, or None when the string cannot be decoded
    """
    codec = ShareCodec(
        catalog=catalog,
        jitter=jitter,
        verbose=verbose,
        spinner_callback=spinner_callback
    )
    return codec.decode(encoded)
