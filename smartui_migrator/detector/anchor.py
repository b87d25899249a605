"""Anchor resolution across manifests and config files.

Resolution order:
1. Read every ecosystem manifest (package.json, pom.xml, requirements.txt).
   Two platforms in one manifest, or different platforms across
   manifests, are a conflict.
2. When manifests agree, the first ecosystem (JavaScript, Java, Python)
   supplies the anchor.
3. Only when no manifest anchored, probe the named config files.
4. Otherwise return an UNKNOWN anchor; the orchestrator cold-searches.
"""

import logging
from pathlib import Path

from smartui_migrator.detector import jvm, package_json, python
from smartui_migrator.detector.config_files import find_config_anchor, find_config_anchors
from smartui_migrator.detector.errors import MultiplePlatformsDetectedError
from smartui_migrator.detector.types import AnchorResult
from smartui_migrator.platforms import Platform
from smartui_migrator.scanner.tables import DEFAULT_TABLES, DetectionTables

logger = logging.getLogger(__name__)


def collect_manifest_anchors(
    project_root: Path,
    tables: DetectionTables = DEFAULT_TABLES,
) -> list[tuple[str, list[AnchorResult]]]:
    """Per-ecosystem anchors, in ecosystem priority order."""
    project_root = Path(project_root)
    return [
        ("package.json", package_json.find_anchors(project_root)),
        ("pom.xml", jvm.find_anchors(project_root)),
        ("requirements.txt", python.find_anchors(project_root, tables)),
    ]


def collect_all_anchors(
    project_root: Path,
    tables: DetectionTables = DEFAULT_TABLES,
) -> list[AnchorResult]:
    """Every manifest and config-file anchor, for multi-detection mode."""
    anchors = [a for _, found in collect_manifest_anchors(project_root, tables) for a in found]
    anchors.extend(find_config_anchors(project_root, tables))
    return anchors


def resolve_anchor(
    project_root: Path,
    tables: DetectionTables = DEFAULT_TABLES,
) -> AnchorResult:
    """Return the single anchor for the project, or an UNKNOWN anchor.

    Raises MultiplePlatformsDetectedError on conflicting manifests; callers
    wanting every candidate use collect_all_anchors instead.
    """
    manifest_anchors: list[AnchorResult] = []

    for manifest, anchors in collect_manifest_anchors(project_root, tables):
        if len(anchors) > 1:
            names = [a.platform.value for a in anchors]
            logger.warning("%s declares multiple platforms: %s", manifest, ", ".join(names))
            raise MultiplePlatformsDetectedError([a.platform for a in anchors])
        manifest_anchors.extend(anchors)

    platforms = _distinct_platforms(manifest_anchors)
    if len(platforms) > 1:
        logger.warning(
            "Manifests disagree on platform: %s",
            ", ".join(p.value for p in platforms),
        )
        raise MultiplePlatformsDetectedError(platforms)

    if manifest_anchors:
        anchor = manifest_anchors[0]
        logger.debug("Manifest anchor: %s (%s)", anchor.platform.value, anchor.evidence.match)
        return anchor

    config_anchor = find_config_anchor(project_root, tables)
    if config_anchor is not None:
        return config_anchor

    logger.debug("No anchor found in %s", project_root)
    return AnchorResult()


def _distinct_platforms(anchors: list[AnchorResult]) -> list[Platform]:
    seen: list[Platform] = []
    for anchor in anchors:
        if anchor.platform not in seen:
            seen.append(anchor.platform)
    return seen
