"""Content scanner and framework scorer.

Public API:
    search_content(project_root, markers, tables) -> list[str]
    score_frameworks(project_root, files, language, tables) -> FrameworkScore
    score_platforms(project_root, files, tables) -> (platform, scores)
"""

from smartui_migrator.scanner.orchestrator import collect_files, glob_files, search_content
from smartui_migrator.scanner.scorer import (
    infer_language,
    score_all_frameworks,
    score_frameworks,
    score_platforms,
)
from smartui_migrator.scanner.tables import DEFAULT_TABLES, DetectionTables
from smartui_migrator.scanner.types import FrameworkScore, PlatformScore

__all__ = [
    "DEFAULT_TABLES",
    "DetectionTables",
    "FrameworkScore",
    "PlatformScore",
    "collect_files",
    "glob_files",
    "infer_language",
    "score_all_frameworks",
    "score_frameworks",
    "score_platforms",
    "search_content",
]
