"""package.json reader for JavaScript / TypeScript anchors.

Maps known visual-testing dependencies (dependencies + devDependencies) to
a platform, framework and the magic strings searched in source files.
"""

import json
import logging
from pathlib import Path

from smartui_migrator.detector.types import AnchorResult, Evidence
from smartui_migrator.platforms import Framework, Language, Platform

logger = logging.getLogger(__name__)

_PERCY_STRINGS = ("percySnapshot", "percyScreenshot")
_APPLITOOLS_STRINGS = ("eyes.check", "eyes.open", "eyes.close", "cy.eyesCheckWindow")

# (dependency, platform, framework, magic strings). Order matters: within a
# platform the first declared dependency supplies the anchor.
PLATFORM_INDICATORS: list[tuple[str, Platform, Framework, tuple[str, ...]]] = [
    ("@percy/cypress", Platform.PERCY, Framework.CYPRESS, _PERCY_STRINGS),
    ("@percy/playwright", Platform.PERCY, Framework.PLAYWRIGHT, _PERCY_STRINGS),
    (
        "@percy/storybook",
        Platform.PERCY,
        Framework.STORYBOOK,
        _PERCY_STRINGS + ("export default", "export const", "title:"),
    ),
    ("@applitools/eyes-cypress", Platform.APPLITOOLS, Framework.CYPRESS, _APPLITOOLS_STRINGS),
    ("@applitools/eyes-playwright", Platform.APPLITOOLS, Framework.PLAYWRIGHT, _APPLITOOLS_STRINGS),
    ("@applitools/eyes-storybook", Platform.APPLITOOLS, Framework.STORYBOOK, _APPLITOOLS_STRINGS),
    (
        "@saucelabs/cypress-visual-plugin",
        Platform.SAUCE_LABS,
        Framework.CYPRESS,
        ("sauceVisualCheck", "sauceVisualSnapshot"),
    ),
    (
        "screener-storybook",
        Platform.SAUCE_LABS,
        Framework.STORYBOOK,
        ("screener.snapshot", "screener.check"),
    ),
]


def read_dependencies(repo_dir: Path) -> dict[str, str] | None:
    """Return merged dependencies + devDependencies, or None when unavailable."""
    pkg_path = Path(repo_dir) / "package.json"
    if not pkg_path.exists():
        return None

    try:
        data = json.loads(pkg_path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError, OSError) as exc:
        logger.error("Failed to parse package.json: %s", exc)
        return None

    if not isinstance(data, dict):
        logger.error("package.json is not a JSON object; ignoring it")
        return None

    deps: dict[str, str] = {}
    for section in ("dependencies", "devDependencies"):
        block = data.get(section) or {}
        if isinstance(block, dict):
            deps.update({str(k): str(v) for k, v in block.items()})
    return deps


def find_anchors(repo_dir: Path) -> list[AnchorResult]:
    """One anchor per distinct platform declared in package.json."""
    deps = read_dependencies(repo_dir)
    if not deps:
        return []

    anchors: list[AnchorResult] = []
    seen: set[Platform] = set()
    for dep, platform, framework, magic in PLATFORM_INDICATORS:
        if dep not in deps or platform in seen:
            continue
        seen.add(platform)
        anchors.append(
            AnchorResult(
                platform=platform,
                magic_strings=magic,
                framework=framework,
                language=Language.JAVASCRIPT,
                evidence=Evidence(source="package.json", match=dep),
            )
        )
    return anchors
