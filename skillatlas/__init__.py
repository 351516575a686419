"""
Skill Atlas - Library Package
Skill portfolio analysis: similarity graph, risk, health and recommendations.
"""

from .analyzer_lib import SkillAnalyzer, analyze_skills
from .catalog_lib import CatalogError, SkillCatalog, default_catalog, load_catalog
from .duplicate_finder_lib import apply_removal_suggestions, find_duplicate_skills
from .health_lib import calculate_health_score, grade_label, score_to_grade
from .input_parser_lib import parse_skill_input
from .layout_lib import CATEGORY_COLORS, NoJitter, RandomJitter
from .models_lib import AnalysisResult, ExtendedSkillReference, SkillReference
from .share_codec_lib import ShareCodec, decode_result, encode_metadata, encode_result
from .skill_scanner_lib import SkillScanner, scan_skills, to_skill_references

__version__ = "1.0.0"

__all__ = [
    "SkillAnalyzer",
    "analyze_skills",
    "CatalogError",
    "SkillCatalog",
    "default_catalog",
    "load_catalog",
    "apply_removal_suggestions",
    "find_duplicate_skills",
    "calculate_health_score",
    "grade_label",
    "score_to_grade",
    "parse_skill_input",
    "CATEGORY_COLORS",
    "NoJitter",
    "RandomJitter",
    "AnalysisResult",
    "ExtendedSkillReference",
    "SkillReference",
    "ShareCodec",
    "decode_result",
    "encode_metadata",
    "encode_result",
    "SkillScanner",
    "scan_skills",
    "to_skill_references",
]
