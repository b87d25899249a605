"""Named platform config files at the project root.

Config-file anchors carry no framework or language; the orchestrator falls
back to the scorer for those. They are only consulted when no manifest
produced an anchor.
"""

import logging
from pathlib import Path

from smartui_migrator.detector.types import AnchorResult, Evidence
from smartui_migrator.platforms import PLATFORM_PRIORITY, Platform
from smartui_migrator.scanner.tables import DEFAULT_TABLES, DetectionTables

logger = logging.getLogger(__name__)

# Files whose presence anchors a platform.
ANCHOR_CONFIG_FILES: dict[Platform, tuple[str, ...]] = {
    Platform.PERCY: (".percy.yml", ".percy.yaml", ".percy.js", ".percyrc", "percy.config.js"),
    Platform.APPLITOOLS: ("applitools.config.js", "applitools.config.ts", "applitools.config.json"),
    Platform.SAUCE_LABS: (
        "saucectl.yml",
        ".sauce/config.yml",
        "sauce.config.js",
        "sauce.config.ts",
        "sauce.config.json",
    ),
}

# Globs used to list a resolved platform's config files.
CONFIG_PATTERNS: dict[Platform, tuple[str, ...]] = {
    Platform.PERCY: ANCHOR_CONFIG_FILES[Platform.PERCY] + ("percy.config.ts",),
    Platform.APPLITOOLS: ANCHOR_CONFIG_FILES[Platform.APPLITOOLS],
    Platform.SAUCE_LABS: ANCHOR_CONFIG_FILES[Platform.SAUCE_LABS],
}


def find_config_anchor(
    repo_dir: Path,
    tables: DetectionTables = DEFAULT_TABLES,
) -> AnchorResult | None:
    """Probe platforms in priority order; first existing config file wins."""
    anchors = find_config_anchors(repo_dir, tables)
    if not anchors:
        return None
    anchor = anchors[0]
    logger.debug("Config anchor %s -> %s", anchor.evidence.match, anchor.platform.value)
    return anchor


def find_config_anchors(
    repo_dir: Path,
    tables: DetectionTables = DEFAULT_TABLES,
) -> list[AnchorResult]:
    """Every platform with a config file present (multi-detection mode)."""
    repo_dir = Path(repo_dir)
    anchors: list[AnchorResult] = []
    for platform in tables.platform_priority or PLATFORM_PRIORITY:
        for name in ANCHOR_CONFIG_FILES.get(platform, ()):
            if (repo_dir / name).is_file():
                anchors.append(
                    AnchorResult(
                        platform=platform,
                        magic_strings=tables.markers_for(platform),
                        evidence=Evidence(source="config-file", match=name),
                    )
                )
                break
    return anchors
