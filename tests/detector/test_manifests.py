"""Tests for the manifest and config-file anchor readers."""

import json
from pathlib import Path

from smartui_migrator.detector import jvm, package_json, python
from smartui_migrator.detector.config_files import find_config_anchor, find_config_anchors
from smartui_migrator.platforms import Framework, Language, Platform


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _package_json(tmp_path: Path, deps: dict | None = None, dev: dict | None = None) -> None:
    data = {"name": "demo"}
    if deps is not None:
        data["dependencies"] = deps
    if dev is not None:
        data["devDependencies"] = dev
    _write(tmp_path / "package.json", json.dumps(data))


POM_TEMPLATE = """<?xml version="1.0" encoding="UTF-8"?>
<project xmlns="http://maven.apache.org/POM/4.0.0">
  <modelVersion>4.0.0</modelVersion>
  <dependencies>
{deps}
  </dependencies>
</project>
"""


def _dep(group: str, artifact: str) -> str:
    return (
        "    <dependency>\n"
        f"      <groupId>{group}</groupId>\n"
        f"      <artifactId>{artifact}</artifactId>\n"
        "    </dependency>"
    )


# ---------------------------------------------------------------------------
# package.json
# ---------------------------------------------------------------------------

class TestPackageJson:
    def test_percy_cypress_dev_dependency(self, tmp_path):
        _package_json(tmp_path, dev={"@percy/cypress": "^3.1.0", "cypress": "^13.0.0"})
        anchors = package_json.find_anchors(tmp_path)
        assert len(anchors) == 1
        anchor = anchors[0]
        assert anchor.platform == Platform.PERCY
        assert anchor.framework == Framework.CYPRESS
        assert anchor.language == Language.JAVASCRIPT
        assert "percySnapshot" in anchor.magic_strings
        assert anchor.evidence.source == "package.json"
        assert anchor.evidence.match == "@percy/cypress"

    def test_two_platforms_yield_two_anchors(self, tmp_path):
        _package_json(
            tmp_path,
            deps={"@applitools/eyes-cypress": "3.0.0"},
            dev={"@percy/cypress": "3.0.0"},
        )
        platforms = {a.platform for a in package_json.find_anchors(tmp_path)}
        assert platforms == {Platform.PERCY, Platform.APPLITOOLS}

    def test_unrelated_dependencies(self, tmp_path):
        _package_json(tmp_path, deps={"react": "18.0.0"})
        assert package_json.find_anchors(tmp_path) == []

    def test_missing_or_invalid_file(self, tmp_path):
        assert package_json.find_anchors(tmp_path) == []
        _write(tmp_path / "package.json", "{ not json")
        assert package_json.find_anchors(tmp_path) == []


# ---------------------------------------------------------------------------
# pom.xml
# ---------------------------------------------------------------------------

class TestMaven:
    def test_applitools_selenium(self, tmp_path):
        _write(tmp_path / "pom.xml", POM_TEMPLATE.format(deps=_dep("com.applitools", "eyes-selenium-java5")))
        anchors = jvm.find_anchors(tmp_path)
        assert [a.platform for a in anchors] == [Platform.APPLITOOLS]
        assert anchors[0].framework == Framework.SELENIUM
        assert anchors[0].language == Language.JAVA

    def test_appium_client_upgrades_selenium(self, tmp_path):
        deps = "\n".join([
            _dep("io.percy", "percy-java-selenium"),
            _dep("io.appium", "java-client"),
        ])
        _write(tmp_path / "pom.xml", POM_TEMPLATE.format(deps=deps))
        anchors = jvm.find_anchors(tmp_path)
        assert anchors[0].platform == Platform.PERCY
        assert anchors[0].framework == Framework.APPIUM

    def test_sauce_requires_group(self, tmp_path):
        _write(tmp_path / "pom.xml", POM_TEMPLATE.format(deps=_dep("io.appium", "java-client")))
        assert jvm.find_anchors(tmp_path) == []

        _write(tmp_path / "pom.xml", POM_TEMPLATE.format(deps=_dep("com.saucelabs.visual", "java-client")))
        anchors = jvm.find_anchors(tmp_path)
        assert anchors[0].platform == Platform.SAUCE_LABS
        assert anchors[0].evidence.match == "com.saucelabs.visual:java-client"

    def test_pom_without_namespace(self, tmp_path):
        _write(
            tmp_path / "pom.xml",
            "<project><dependencies>"
            "<dependency><groupId>io.percy</groupId><artifactId>percy-appium-java</artifactId></dependency>"
            "</dependencies></project>",
        )
        anchors = jvm.find_anchors(tmp_path)
        assert anchors[0].framework == Framework.APPIUM

    def test_malformed_pom(self, tmp_path):
        _write(tmp_path / "pom.xml", "<project><dependencies>")
        assert jvm.find_anchors(tmp_path) == []


# ---------------------------------------------------------------------------
# requirements.txt
# ---------------------------------------------------------------------------

class TestRequirements:
    def test_read_packages_strips_specifiers(self, tmp_path):
        _write(
            tmp_path / "requirements.txt",
            "# visual\n-r base.txt\nPercy-Selenium>=1.0  # pinned\nselenium[extras]==4.0\n\n",
        )
        assert python.read_packages(tmp_path) == {"percy_selenium", "selenium"}

    def test_percy_selenium(self, tmp_path):
        _write(tmp_path / "requirements.txt", "percy-selenium==2.0.0\n")
        anchors = python.find_anchors(tmp_path)
        assert anchors[0].platform == Platform.PERCY
        assert anchors[0].framework == Framework.SELENIUM
        assert anchors[0].language == Language.PYTHON
        assert anchors[0].evidence.match == "percy-selenium"

    def test_sauce_with_robot_files(self, tmp_path):
        _write(tmp_path / "requirements.txt", "saucelabs-visual\n")
        _write(tmp_path / "tests/visual.robot", "*** Test Cases ***\n")
        anchors = python.find_anchors(tmp_path)
        assert anchors[0].platform == Platform.SAUCE_LABS
        assert anchors[0].framework == Framework.ROBOT

    def test_robot_files_in_ignored_dirs_do_not_count(self, tmp_path):
        _write(tmp_path / "requirements.txt", "saucelabs-visual\n")
        _write(tmp_path / "node_modules/pkg/visual.robot", "*** Test Cases ***\n")
        anchors = python.find_anchors(tmp_path)
        assert anchors[0].framework == Framework.SELENIUM

    def test_appium_client_upgrades_selenium(self, tmp_path):
        _write(tmp_path / "requirements.txt", "eyes-selenium\nAppium-Python-Client\n")
        anchors = python.find_anchors(tmp_path)
        assert anchors[0].platform == Platform.APPLITOOLS
        assert anchors[0].framework == Framework.APPIUM

    def test_missing_file(self, tmp_path):
        assert python.find_anchors(tmp_path) == []


# ---------------------------------------------------------------------------
# Config files
# ---------------------------------------------------------------------------

class TestConfigAnchors:
    def test_percy_config(self, tmp_path):
        _write(tmp_path / ".percy.yml", "version: 2\n")
        anchor = find_config_anchor(tmp_path)
        assert anchor.platform == Platform.PERCY
        assert anchor.framework is None
        assert anchor.language is None
        assert anchor.evidence.source == "config-file"
        assert anchor.evidence.match == ".percy.yml"

    def test_priority_order(self, tmp_path):
        _write(tmp_path / "saucectl.yml", "apiVersion: v1alpha\n")
        _write(tmp_path / "applitools.config.js", "module.exports = {};\n")
        assert find_config_anchor(tmp_path).platform == Platform.APPLITOOLS
        assert [a.platform for a in find_config_anchors(tmp_path)] == [
            Platform.APPLITOOLS,
            Platform.SAUCE_LABS,
        ]

    def test_nested_sauce_config(self, tmp_path):
        _write(tmp_path / ".sauce/config.yml", "apiVersion: v1alpha\n")
        assert find_config_anchor(tmp_path).platform == Platform.SAUCE_LABS

    def test_none(self, tmp_path):
        assert find_config_anchor(tmp_path) is None
