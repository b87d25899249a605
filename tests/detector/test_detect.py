"""End-to-end detection tests: anchors, conflicts, cold search, multi-detection."""

import json
from pathlib import Path

import pytest

from smartui_migrator.detector import (
    DetectionError,
    MismatchedSignalsError,
    MultiDetectionResult,
    MultiplePlatformsDetectedError,
    PlatformNotDetectedError,
    detect,
    detect_all,
    detect_selected,
)
from smartui_migrator.detector.anchor import resolve_anchor
from smartui_migrator.platforms import Framework, Language, Platform


def _write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def _package_json(tmp_path: Path, dev: dict) -> None:
    _write(tmp_path / "package.json", json.dumps({"name": "demo", "devDependencies": dev}, indent=2))


@pytest.fixture
def percy_cypress(tmp_path):
    _package_json(tmp_path, {"@percy/cypress": "^3.1.0", "cypress": "^13.0.0"})
    _write(
        tmp_path / "cypress/e2e/home.cy.js",
        "describe('home', () => {\n"
        "  it('renders', () => {\n"
        "    cy.visit('/');\n"
        "    cy.percySnapshot('Home');\n"
        "  });\n"
        "});\n",
    )
    _write(tmp_path / "node_modules/@percy/cypress/index.js", "cy.percySnapshot('vendored');\n")
    _write(tmp_path / ".github/workflows/visual.yml", "on: push\njobs: {}\n")
    return tmp_path


# ---------------------------------------------------------------------------
# Anchor resolution
# ---------------------------------------------------------------------------

class TestResolveAnchor:
    def test_manifests_agree(self, tmp_path):
        _package_json(tmp_path, {"@percy/playwright": "1.0.0"})
        _write(tmp_path / "requirements.txt", "percy-selenium\n")
        anchor = resolve_anchor(tmp_path)
        assert anchor.platform == Platform.PERCY
        assert anchor.language == Language.JAVASCRIPT
        assert anchor.framework == Framework.PLAYWRIGHT

    def test_manifests_disagree(self, tmp_path):
        _package_json(tmp_path, {"@percy/playwright": "1.0.0"})
        _write(tmp_path / "requirements.txt", "eyes-selenium\n")
        with pytest.raises(MultiplePlatformsDetectedError) as exc_info:
            resolve_anchor(tmp_path)
        assert exc_info.value.platforms == [Platform.PERCY, Platform.APPLITOOLS]

    def test_two_platforms_in_one_manifest(self, tmp_path):
        _package_json(tmp_path, {"@percy/cypress": "3.0.0", "@applitools/eyes-cypress": "3.0.0"})
        with pytest.raises(MultiplePlatformsDetectedError) as exc_info:
            resolve_anchor(tmp_path)
        assert exc_info.value.platforms == [Platform.PERCY, Platform.APPLITOOLS]

    def test_manifest_beats_config_file(self, tmp_path):
        _package_json(tmp_path, {"@applitools/eyes-playwright": "1.0.0"})
        _write(tmp_path / ".percy.yml", "version: 2\n")
        assert resolve_anchor(tmp_path).platform == Platform.APPLITOOLS

    def test_unknown(self, tmp_path):
        assert resolve_anchor(tmp_path).is_unknown


# ---------------------------------------------------------------------------
# detect()
# ---------------------------------------------------------------------------

class TestDetect:
    def test_percy_cypress(self, percy_cypress):
        result = detect(percy_cypress)
        assert result.platform == Platform.PERCY
        assert result.framework == Framework.CYPRESS
        assert result.language == Language.JAVASCRIPT
        assert result.test_type == "e2e"
        assert result.files.source == ("cypress/e2e/home.cy.js",)
        assert result.files.ci == (".github/workflows/visual.yml",)
        assert result.files.package_manager == ("package.json",)
        assert result.evidence.platform.source == "package.json"
        assert result.evidence.platform.match == "@percy/cypress"
        assert result.evidence.framework.files == ("cypress/e2e/home.cy.js",)
        assert result.evidence.framework.signatures == ("@percy/cypress",)

    def test_to_dict(self, percy_cypress):
        data = detect(percy_cypress).to_dict()
        assert data["platform"] == "Percy"
        assert data["framework"] == "Cypress"
        assert data["language"] == "JavaScript/TypeScript"
        assert data["files"]["source"] == ["cypress/e2e/home.cy.js"]

    def test_config_anchor_scores_framework(self, tmp_path):
        _write(tmp_path / ".percy.yml", "version: 2\nsnapshot:\n  widths: [375, 1280]\n")
        _write(
            tmp_path / "tests/home.spec.ts",
            "import { test } from '@playwright/test';\n"
            "test('home', async ({ page }) => {\n"
            "  await page.goto('/');\n"
            "  await percySnapshot(page, 'Home');\n"
            "});\n",
        )
        result = detect(tmp_path)
        assert result.platform == Platform.PERCY
        assert result.framework == Framework.PLAYWRIGHT
        assert result.language == Language.JAVASCRIPT
        assert result.files.config == (".percy.yml",)
        assert result.evidence.platform.source == "config-file"

    def test_python_robot(self, tmp_path):
        _write(tmp_path / "requirements.txt", "saucelabs-visual\nrobotframework\n")
        _write(
            tmp_path / "tests/visual.robot",
            "*** Settings ***\nLibrary    SauceLabsVisual\n\n"
            "*** Test Cases ***\nHome\n    Visual Snapshot    Home\n",
        )
        result = detect(tmp_path)
        assert result.platform == Platform.SAUCE_LABS
        assert result.framework == Framework.ROBOT
        assert result.language == Language.PYTHON
        assert result.files.source == ("tests/visual.robot",)

    def test_source_dependency_mismatch(self, tmp_path):
        _package_json(tmp_path, {"cypress": "^13.0.0"})
        _write(tmp_path / "cypress/e2e/home.cy.js", "cy.percySnapshot('Home');\n")
        with pytest.raises(MismatchedSignalsError) as exc_info:
            detect(tmp_path)
        assert exc_info.value.platform == Platform.PERCY
        assert "Percy" in str(exc_info.value)

    def test_multiple_platforms(self, tmp_path):
        _package_json(tmp_path, {"@percy/cypress": "3.0.0", "@applitools/eyes-cypress": "3.0.0"})
        with pytest.raises(MultiplePlatformsDetectedError):
            detect(tmp_path)

    def test_multi_mode_returns_every_candidate(self, tmp_path):
        _package_json(tmp_path, {"@percy/cypress": "3.0.0", "@applitools/eyes-cypress": "3.0.0"})
        result = detect(tmp_path, multi_detection=True)
        assert isinstance(result, MultiDetectionResult)
        assert [c.name for c in result.platforms] == ["Percy", "Applitools"]

    def test_multi_mode_does_not_raise_mismatch(self, tmp_path):
        _package_json(tmp_path, {"cypress": "^13.0.0"})
        _write(tmp_path / "cypress/e2e/home.cy.js", "cy.percySnapshot('Home');\n")
        result = detect(tmp_path, multi_detection=True)
        assert isinstance(result, MultiDetectionResult)
        assert [(c.name, c.confidence) for c in result.platforms] == [("Percy", "low")]

    def test_multi_mode_still_reports_nothing_found(self, tmp_path):
        with pytest.raises(PlatformNotDetectedError):
            detect(tmp_path, multi_detection=True)

    def test_nothing_detected(self, tmp_path):
        _package_json(tmp_path, {"react": "18.0.0", "lodash": "4.0.0"})
        _write(tmp_path / "src/app.js", "console.log('hello');\n")
        with pytest.raises(PlatformNotDetectedError):
            detect(tmp_path)

    def test_errors_share_a_base_class(self, tmp_path):
        with pytest.raises(DetectionError):
            detect(tmp_path)


# ---------------------------------------------------------------------------
# detect_all()
# ---------------------------------------------------------------------------

class TestDetectAll:
    def test_conflicting_manifests_are_candidates(self, tmp_path):
        _package_json(tmp_path, {"@percy/cypress": "3.0.0", "@applitools/eyes-cypress": "3.0.0"})
        result = detect_all(tmp_path)
        names = [c.name for c in result.platforms]
        assert names == ["Percy", "Applitools"]
        assert all(c.confidence == "high" for c in result.platforms)
        assert [c.name for c in result.languages] == ["JavaScript/TypeScript"]

    def test_content_scan_is_low_confidence(self, tmp_path):
        _write(tmp_path / "tests/home.spec.js", "await percySnapshot(page, 'Home');\n")
        result = detect_all(tmp_path)
        assert [(c.name, c.confidence) for c in result.platforms] == [("Percy", "low")]
        assert result.platforms[0].evidence.source == "content-scan"

    def test_high_is_not_downgraded(self, tmp_path):
        _package_json(tmp_path, {"@percy/cypress": "3.0.0"})
        _write(tmp_path / "cypress/e2e/a.cy.js", "cy.percySnapshot('A');\n")
        result = detect_all(tmp_path)
        percy = next(c for c in result.platforms if c.name == "Percy")
        assert percy.confidence == "high"
        assert "Cypress" in percy.frameworks

    def test_to_dict_counts(self, tmp_path):
        _package_json(tmp_path, {"@percy/cypress": "3.0.0"})
        data = detect_all(tmp_path).to_dict()
        assert data["total_detections"] == len(data["platforms"]) + len(data["frameworks"]) + len(data["languages"])

    def test_nothing_found(self, tmp_path):
        with pytest.raises(PlatformNotDetectedError):
            detect_all(tmp_path)


class TestDetectSelected:
    def test_selected_candidate_becomes_a_result(self, tmp_path):
        _package_json(tmp_path, {"@percy/cypress": "3.0.0", "@applitools/eyes-cypress": "3.0.0"})
        _write(tmp_path / "cypress/e2e/home.cy.js", "cy.eyesCheckWindow('Home');\n")
        _write(tmp_path / "cypress/e2e/cart.cy.js", "cy.percySnapshot('Cart');\n")

        result = detect_selected(tmp_path, "Applitools", "Cypress", "JavaScript/TypeScript")
        assert result.platform == Platform.APPLITOOLS
        assert result.framework == Framework.CYPRESS
        assert result.files.source == ("cypress/e2e/home.cy.js",)
        assert result.evidence.platform.source == "selection"

    def test_missing_framework_is_scored(self, tmp_path):
        _write(
            tmp_path / "tests/home.spec.ts",
            "import { test } from '@playwright/test';\n"
            "test('home', async ({ page }) => {\n"
            "  await percySnapshot(page, 'Home');\n"
            "});\n",
        )
        result = detect_selected(tmp_path, Platform.PERCY)
        assert result.framework == Framework.PLAYWRIGHT
        assert result.language == Language.JAVASCRIPT
        assert result.evidence.framework.files == ("tests/home.spec.ts",)


class TestErrorMessages:
    def test_not_detected(self):
        assert "root of your project" in str(PlatformNotDetectedError())

    def test_multiple(self):
        err = MultiplePlatformsDetectedError([Platform.PERCY, Platform.SAUCE_LABS])
        assert "only one platform at a time" in err.message
        assert err.platforms == [Platform.PERCY, Platform.SAUCE_LABS]

    @pytest.mark.parametrize(
        "platform, needle",
        [
            (Platform.PERCY, "package.json"),
            (Platform.APPLITOOLS, "pom.xml"),
            (Platform.SAUCE_LABS, "requirements.txt"),
        ],
    )
    def test_mismatch_names_manifest(self, platform, needle):
        err = MismatchedSignalsError(platform)
        assert platform.value in err.message
        assert needle in err.message
