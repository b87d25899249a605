"""Detector orchestrator: anchor, search, score, resolve.

Detection flow:
1. Resolve an anchor from manifests, then config files (anchor.py).
2. Anchor with platform:
   - framework and language known: search with the anchor's magic strings;
   - otherwise search with the anchor strings plus the platform vocabulary
     and score the framework (scanner/scorer.py).
3. No anchor: cold-search with every vocabulary. No hits is
   PlatformNotDetectedError; hits for a platform with no declared
   dependency is MismatchedSignalsError.
4. Glob config, CI and package-manager files and build the DetectionResult.

detect_all() is the multi-detection variant: it never raises on conflicts
and returns every candidate with a confidence level instead. Once a caller
has picked a candidate, detect_selected() builds its DetectionResult.
"""

import logging
from pathlib import Path

from smartui_migrator.detector.anchor import collect_all_anchors, resolve_anchor
from smartui_migrator.detector.config_files import CONFIG_PATTERNS
from smartui_migrator.detector.errors import MismatchedSignalsError, PlatformNotDetectedError
from smartui_migrator.detector.types import (
    CONTENT_SCAN_EVIDENCE,
    AnchorResult,
    DetectionCandidate,
    DetectionEvidence,
    DetectionFiles,
    DetectionResult,
    Evidence,
    FrameworkEvidence,
    MultiDetectionResult,
)
from smartui_migrator.platforms import UNKNOWN, Framework, Language, Platform, test_type_for
from smartui_migrator.scanner import (
    DEFAULT_TABLES,
    DetectionTables,
    glob_files,
    infer_language,
    score_all_frameworks,
    score_frameworks,
    score_platforms,
    search_content,
)
from smartui_migrator.scanner.orchestrator import MAX_FILE_SIZE

logger = logging.getLogger(__name__)

CI_PATTERNS: tuple[str, ...] = (
    ".github/workflows/**/*.yml",
    ".github/workflows/**/*.yaml",
    ".gitlab-ci.yml",
    "Jenkinsfile",
    "azure-pipelines.yml",
    ".circleci/config.yml",
)

PACKAGE_MANAGER_PATTERNS: tuple[str, ...] = (
    "package.json",
    "package-lock.json",
    "yarn.lock",
    "pnpm-lock.yaml",
    "pom.xml",
    "requirements.txt",
    "Pipfile",
    "poetry.lock",
)

# Manifest file -> ecosystem language, for multi-detection language candidates.
MANIFEST_LANGUAGES: list[tuple[str, Language]] = [
    ("package.json", Language.JAVASCRIPT),
    ("pom.xml", Language.JAVA),
    ("requirements.txt", Language.PYTHON),
]


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------

def detect(
    project_root: Path,
    tables: DetectionTables = DEFAULT_TABLES,
    max_file_size: int = MAX_FILE_SIZE,
    multi_detection: bool = False,
) -> DetectionResult | MultiDetectionResult:
    """Run the full detection pipeline.

    Returns a single DetectionResult, or with multi_detection the full
    MultiDetectionResult candidate set from detect_all(); no platform is
    picked on the caller's behalf in that mode.

    Raises PlatformNotDetectedError, MultiplePlatformsDetectedError or
    MismatchedSignalsError (only the first in multi-detection mode).
    """
    project_root = Path(project_root)
    if multi_detection:
        return detect_all(project_root, tables, max_file_size)

    anchor = resolve_anchor(project_root, tables)

    if anchor.is_unknown:
        _cold_search(project_root, tables, max_file_size)

    result = _resolve(project_root, anchor, tables, max_file_size)
    logger.info(
        "Detected %s / %s / %s (%d source, %d config, %d ci files)",
        result.platform.value,
        result.framework.value,
        result.language.value,
        len(result.files.source),
        len(result.files.config),
        len(result.files.ci),
    )
    return result


def detect_selected(
    project_root: Path,
    platform: Platform | str,
    framework: Framework | str | None = None,
    language: Language | str | None = None,
    tables: DetectionTables = DEFAULT_TABLES,
    max_file_size: int = MAX_FILE_SIZE,
) -> DetectionResult:
    """Build the DetectionResult for a candidate chosen from detect_all().

    A missing language is inferred from the matched files and a missing
    framework is scored, exactly as for a config-file anchor.
    """
    project_root = Path(project_root)
    platform = Platform(platform)
    anchor = AnchorResult(
        platform=platform,
        magic_strings=tables.markers_for(platform),
        framework=Framework(framework) if framework is not None else None,
        language=Language(language) if language is not None else None,
        evidence=Evidence(source="selection", match=platform.value),
    )
    result = _resolve(project_root, anchor, tables, max_file_size)
    logger.info(
        "Selected %s / %s / %s (%d source files)",
        result.platform.value,
        result.framework.value,
        result.language.value,
        len(result.files.source),
    )
    return result


def detect_all(
    project_root: Path,
    tables: DetectionTables = DEFAULT_TABLES,
    max_file_size: int = MAX_FILE_SIZE,
) -> MultiDetectionResult:
    """Collect every platform, framework and language candidate.

    Manifest and config anchors are "high" confidence; content-scan findings
    are "low". Raises PlatformNotDetectedError only when nothing is found.
    """
    project_root = Path(project_root)
    result = MultiDetectionResult()

    for anchor in collect_all_anchors(project_root, tables):
        _merge_candidate(result.platforms, anchor.platform.value, "high", anchor.evidence, anchor)
        if anchor.framework is not None:
            _merge_candidate(
                result.frameworks,
                anchor.framework.value,
                "high",
                anchor.evidence,
                AnchorResult(platform=anchor.platform, language=anchor.language),
            )

    files = search_content(project_root, tables.all_markers(), tables, max_file_size)
    if files:
        _, platform_scores = score_platforms(project_root, files, tables)
        for entry in platform_scores:
            if entry.score > 0:
                lang = infer_language(entry.files)
                _merge_candidate(
                    result.platforms,
                    entry.platform.value,
                    "low",
                    CONTENT_SCAN_EVIDENCE,
                    AnchorResult(platform=entry.platform, language=lang),
                )

        for score in score_all_frameworks(project_root, files, tables):
            if score.score > 0:
                _merge_candidate(
                    result.frameworks,
                    score.framework.value,
                    "low",
                    Evidence(source="content-scan", match=", ".join(score.signatures)),
                    None,
                )

    for manifest, language in MANIFEST_LANGUAGES:
        if (project_root / manifest).is_file():
            _merge_candidate(
                result.languages,
                language.value,
                "high",
                Evidence(source=manifest, match="present"),
                None,
            )

    if not result.platforms:
        raise PlatformNotDetectedError()

    logger.info(
        "Multi-detection: %d platform, %d framework, %d language candidates",
        len(result.platforms), len(result.frameworks), len(result.languages),
    )
    return result


# ---------------------------------------------------------------------------
# Resolution helpers
# ---------------------------------------------------------------------------

def _cold_search(project_root: Path, tables: DetectionTables, max_file_size: int) -> None:
    """No anchor: always ends in a typed error."""
    files = search_content(project_root, tables.all_markers(), tables, max_file_size)
    if not files:
        raise PlatformNotDetectedError()

    platform, scores = score_platforms(project_root, files, tables)
    logger.warning(
        "Cold search found %d files with platform markers: %s",
        len(files),
        ", ".join(f"{s.platform.value}={s.score}" for s in scores),
    )
    if platform == UNKNOWN:
        raise PlatformNotDetectedError()
    raise MismatchedSignalsError(platform)


def _resolve(
    project_root: Path,
    anchor: AnchorResult,
    tables: DetectionTables,
    max_file_size: int,
) -> DetectionResult:
    platform = anchor.platform

    if anchor.framework is not None and anchor.language is not None:
        source = search_content(project_root, anchor.magic_strings, tables, max_file_size)
        framework = anchor.framework
        language = anchor.language
        fw_evidence = FrameworkEvidence(
            files=tuple(source),
            signatures=(anchor.evidence.match,) if anchor.evidence else (),
        )
    else:
        markers = list(anchor.magic_strings)
        markers.extend(m for m in tables.markers_for(platform) if m not in markers)
        source = search_content(project_root, markers, tables, max_file_size)
        language = anchor.language or infer_language(source)
        score = score_frameworks(project_root, source, language, tables)
        framework = anchor.framework or score.framework
        fw_evidence = FrameworkEvidence(files=tuple(score.files), signatures=tuple(score.signatures))

    files = DetectionFiles(
        config=tuple(glob_files(project_root, CONFIG_PATTERNS.get(platform, ()), tables)),
        source=tuple(source),
        ci=tuple(glob_files(project_root, CI_PATTERNS, tables)),
        package_manager=tuple(glob_files(project_root, PACKAGE_MANAGER_PATTERNS, tables)),
    )

    return DetectionResult(
        platform=platform,
        framework=framework,
        language=language,
        test_type=test_type_for(framework),
        files=files,
        evidence=DetectionEvidence(
            platform=anchor.evidence or CONTENT_SCAN_EVIDENCE,
            framework=fw_evidence,
        ),
    )


def _merge_candidate(
    candidates: list[DetectionCandidate],
    name: str,
    confidence: str,
    evidence: Evidence | None,
    anchor: AnchorResult | None,
) -> None:
    """Add a candidate, or fold framework/language hints into an existing one.

    An existing "high" candidate is never downgraded by a later "low" one.
    """
    existing = next((c for c in candidates if c.name == name), None)
    if existing is None:
        existing = DetectionCandidate(
            name=name,
            confidence=confidence,
            evidence=evidence or CONTENT_SCAN_EVIDENCE,
        )
        candidates.append(existing)

    if anchor is not None:
        if anchor.framework is not None and anchor.framework.value not in existing.frameworks:
            existing.frameworks.append(anchor.framework.value)
        if anchor.language is not None and anchor.language.value not in existing.languages:
            existing.languages.append(anchor.language.value)
