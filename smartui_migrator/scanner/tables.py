"""Static detection tables.

`DetectionTables` bundles every lookup table used by the scanner, the
framework scorer and the anchor resolver. Instances are immutable; the
module-level `DEFAULT_TABLES` is what production code uses, and tests pass
alternates where they need a smaller vocabulary or ignore list.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from smartui_migrator.platforms import PLATFORM_PRIORITY, Framework, Language, Platform
from smartui_migrator.scanner.signatures import FRAMEWORK_SIGNATURES, Signature

# Directories never walked by the scanner or the config/CI globbing.
IGNORE_DIRS = frozenset({
    "node_modules", ".git", "dist", "build", ".next",
    "coverage", ".nyc_output", "__pycache__", ".venv", "venv", "target",
})

# fnmatch patterns for individual files to skip.
IGNORE_FILES: tuple[str, ...] = ("*.log", ".DS_Store")

SCANNABLE_EXTENSIONS = frozenset({
    ".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs", ".py", ".java", ".robot",
})

# Literal tokens whose presence in a source file is evidence of platform usage.
PLATFORM_MARKERS: dict[Platform, tuple[str, ...]] = {
    Platform.PERCY: (
        "percySnapshot",
        "percyScreenshot",
        "percy.capture",
        "percy.snapshot",
        "percy.screenshot",
        "percy_snapshot",
        "percy_screenshot",
        "@percy/cypress",
        "@percy/playwright",
        "@percy/storybook",
    ),
    Platform.APPLITOOLS: (
        "eyes.check",
        "eyes.open",
        "eyes.close",
        "eyes.checkWindow",
        "eyes.checkElement",
        "cy.eyesCheckWindow",
        "@applitools/eyes",
        "eyes.selenium",
        "eyes.playwright",
    ),
    Platform.SAUCE_LABS: (
        "sauceVisualCheck",
        "sauceVisualSnapshot",
        "sauce.visual",
        "sauce_visual_check",
        "screener.snapshot",
        "screener.check",
        "saucelabs_visual",
        "SauceVisual",
        "Visual Snapshot",
    ),
}

# Used when framework scores tie or are all zero.
DEFAULT_FRAMEWORKS: dict[Language, Framework] = {
    Language.JAVASCRIPT: Framework.CYPRESS,
    Language.JAVA: Framework.SELENIUM,
    Language.PYTHON: Framework.SELENIUM,
}


def _frozen(mapping: dict) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class DetectionTables:
    ignore_dirs: frozenset = IGNORE_DIRS
    ignore_files: tuple[str, ...] = IGNORE_FILES
    scannable_extensions: frozenset = SCANNABLE_EXTENSIONS
    platform_markers: Mapping[Platform, tuple[str, ...]] = field(
        default_factory=lambda: _frozen(PLATFORM_MARKERS)
    )
    framework_signatures: Mapping[Framework, tuple[Signature, ...]] = field(
        default_factory=lambda: _frozen(FRAMEWORK_SIGNATURES)
    )
    default_frameworks: Mapping[Language, Framework] = field(
        default_factory=lambda: _frozen(DEFAULT_FRAMEWORKS)
    )
    platform_priority: tuple[Platform, ...] = PLATFORM_PRIORITY

    def markers_for(self, platform: Platform) -> tuple[str, ...]:
        return tuple(self.platform_markers.get(platform, ()))

    def all_markers(self) -> tuple[str, ...]:
        """Union of every platform vocabulary, in priority order, deduplicated."""
        seen: list[str] = []
        for platform in self.platform_priority:
            for marker in self.markers_for(platform):
                if marker not in seen:
                    seen.append(marker)
        return tuple(seen)


DEFAULT_TABLES = DetectionTables()
