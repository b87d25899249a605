"""requirements.txt reader for Python anchors.

Parses requirements.txt line-by-line. Strips version specifiers, extras,
comments, and pip flags.
"""

import logging
import re
from pathlib import Path

from smartui_migrator.detector.types import AnchorResult, Evidence
from smartui_migrator.platforms import Framework, Language, Platform
from smartui_migrator.scanner.orchestrator import is_ignored
from smartui_migrator.scanner.tables import DEFAULT_TABLES, DetectionTables

logger = logging.getLogger(__name__)

# (normalised package, platform, framework, magic strings)
PLATFORM_INDICATORS: list[tuple[str, Platform, Framework, tuple[str, ...]]] = [
    (
        "saucelabs_visual",
        Platform.SAUCE_LABS,
        Framework.SELENIUM,
        ("saucelabs_visual", "sauce_visual_check", "Visual Snapshot", "SauceLabsVisual"),
    ),
    ("percy_selenium", Platform.PERCY, Framework.SELENIUM, ("percy_snapshot", "percy.snapshot")),
    ("percy_appium_app", Platform.PERCY, Framework.APPIUM, ("percy_screenshot", "percy_snapshot")),
    ("eyes_selenium", Platform.APPLITOOLS, Framework.SELENIUM, ("eyes.check", "eyes.open", "eyes.close")),
]

_APPIUM_CLIENT = "appium_python_client"

_NAME_SPLIT = re.compile(r"[><=!~;@\[\s]")


def normalise(name: str) -> str:
    return name.strip().lower().replace("-", "_").replace(".", "_")


def read_packages(repo_dir: Path) -> set[str] | None:
    """Return normalised package names, or None when requirements.txt is absent."""
    path = Path(repo_dir) / "requirements.txt"
    if not path.exists():
        return None

    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("Could not read %s: %s", path, exc)
        return None

    packages: set[str] = set()
    for line in text.splitlines():
        line = line.split("#")[0].strip()
        # Skip blank lines and pip flags (-r, -c, --index-url, etc.)
        if not line or line.startswith("-"):
            continue
        name = normalise(_NAME_SPLIT.split(line)[0])
        if name:
            packages.add(name)
    return packages


def has_robot_files(repo_dir: Path, tables: DetectionTables = DEFAULT_TABLES) -> bool:
    repo_dir = Path(repo_dir)
    return any(
        not is_ignored(p, repo_dir, tables) for p in repo_dir.rglob("*.robot")
    )


def find_anchors(repo_dir: Path, tables: DetectionTables = DEFAULT_TABLES) -> list[AnchorResult]:
    """One anchor per distinct platform declared in requirements.txt."""
    packages = read_packages(repo_dir)
    if not packages:
        return []

    has_appium = _APPIUM_CLIENT in packages
    anchors: list[AnchorResult] = []
    seen: set[Platform] = set()

    for package, platform, framework, magic in PLATFORM_INDICATORS:
        if package not in packages or platform in seen:
            continue
        if platform == Platform.SAUCE_LABS and has_robot_files(repo_dir, tables):
            framework = Framework.ROBOT
        elif framework == Framework.SELENIUM and has_appium:
            framework = Framework.APPIUM
        seen.add(platform)
        anchors.append(
            AnchorResult(
                platform=platform,
                magic_strings=magic,
                framework=framework,
                language=Language.PYTHON,
                evidence=Evidence(source="requirements.txt", match=package.replace("_", "-")),
            )
        )
    return anchors
