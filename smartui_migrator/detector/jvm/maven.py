"""pom.xml reader for Java anchors.

Uses xml.etree.ElementTree (stdlib) to parse Maven POM files. Looks at
<dependencies> and <dependencyManagement>, with or without the Maven
namespace.
"""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path

from smartui_migrator.detector.types import AnchorResult, Evidence
from smartui_migrator.platforms import Framework, Language, Platform

logger = logging.getLogger(__name__)

# Maven XML namespace used by pom.xml files
_POM_NS = "http://maven.apache.org/POM/4.0.0"

_APPLITOOLS_STRINGS = ("com.applitools.eyes", "eyes.check", "eyes.open", "eyes.close")
_SAUCE_STRINGS = ("com.saucelabs.visual", "sauceVisualCheck", "VisualApi")
_PERCY_STRINGS = ("io.percy", "percy.snapshot", "percy.screenshot")

# (artifactId, required groupId or None, platform, framework, magic strings)
PLATFORM_INDICATORS: list[tuple[str, str | None, Platform, Framework, tuple[str, ...]]] = [
    ("eyes-selenium-java5", None, Platform.APPLITOOLS, Framework.SELENIUM, _APPLITOOLS_STRINGS),
    ("eyes-appium-java5", None, Platform.APPLITOOLS, Framework.APPIUM, _APPLITOOLS_STRINGS),
    ("java-client", "com.saucelabs.visual", Platform.SAUCE_LABS, Framework.SELENIUM, _SAUCE_STRINGS),
    ("percy-java-selenium", "io.percy", Platform.PERCY, Framework.SELENIUM, _PERCY_STRINGS),
    ("percy-appium-java", "io.percy", Platform.PERCY, Framework.APPIUM, _PERCY_STRINGS),
]

_APPIUM_COORDINATE = ("io.appium", "java-client")


def _ns(tag: str) -> str:
    return f"{{{_POM_NS}}}{tag}"


def parse_coordinates(root: ET.Element) -> list[tuple[str, str]]:
    """Collect (groupId, artifactId) pairs from dependencies and dependencyManagement."""
    coords: list[tuple[str, str]] = []

    for dep in root.findall(f".//{_ns('dependency')}"):
        aid = dep.findtext(_ns("artifactId"))
        if aid:
            coords.append(((dep.findtext(_ns("groupId")) or "").strip(), aid.strip()))

    # pom.xml files without namespace (some minimal POMs omit it)
    for dep in root.findall(".//dependency"):
        aid = dep.findtext("artifactId")
        if aid:
            coords.append(((dep.findtext("groupId") or "").strip(), aid.strip()))

    return coords


def read_coordinates(repo_dir: Path) -> list[tuple[str, str]] | None:
    path = Path(repo_dir) / "pom.xml"
    if not path.exists():
        return None

    try:
        root = ET.parse(path).getroot()
    except (ET.ParseError, OSError) as exc:
        logger.error("Failed to parse pom.xml: %s", exc)
        return None

    return parse_coordinates(root)


def find_anchors(repo_dir: Path) -> list[AnchorResult]:
    """One anchor per distinct platform declared in pom.xml."""
    coords = read_coordinates(repo_dir)
    if not coords:
        return []

    has_appium = _APPIUM_COORDINATE in coords
    anchors: list[AnchorResult] = []
    seen: set[Platform] = set()

    for artifact, group, platform, framework, magic in PLATFORM_INDICATORS:
        if platform in seen:
            continue
        if not any(a == artifact and (group is None or g == group) for g, a in coords):
            continue
        if framework == Framework.SELENIUM and has_appium:
            framework = Framework.APPIUM
        seen.add(platform)
        anchors.append(
            AnchorResult(
                platform=platform,
                magic_strings=magic,
                framework=framework,
                language=Language.JAVA,
                evidence=Evidence(source="pom.xml", match=f"{group or ''}:{artifact}".lstrip(":")),
            )
        )
    return anchors
