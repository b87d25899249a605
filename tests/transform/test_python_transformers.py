"""Tests for the Python and Robot Framework transformers."""

from smartui_migrator.platforms import Framework, Language, Platform
from smartui_migrator.transform import TransformContext
from smartui_migrator.transform.transformers import (
    ApplitoolsPythonTransformer,
    PercyPythonTransformer,
    SaucePythonTransformer,
)
from smartui_migrator.transform.transformers.python import FULLY_WARNING, SMARTUI_IMPORT


def _ctx(platform: Platform, file_path: str = "tests/test_home.py", framework=Framework.SELENIUM) -> TransformContext:
    return TransformContext(
        platform=platform,
        framework=framework,
        language=Language.PYTHON,
        file_path=file_path,
    )


PERCY_PY = """\
from selenium import webdriver
from percy import percy_snapshot


def test_home():
    driver = webdriver.Chrome()
    driver.get("https://example.com")
    percy_snapshot(driver, "Home")
    percy_snapshot(driver, "About", widths=[375, 1280])
    driver.quit()
"""

APPLITOOLS_PY = """\
from applitools.selenium import Eyes, Target


def test_home(driver):
    eyes = Eyes()
    eyes.open(driver, "App", "Home")
    eyes.check("Home", Target.window().fully())
    eyes.check_window(tag="Landing")
    eyes.check(Target.region("#main"))
    eyes.close()
"""

SAUCE_PY = """\
from saucelabs_visual.client import SauceLabsVisual


def test_home(driver):
    visual = SauceLabsVisual()
    visual.create_visual_build(name="Build")
    driver.get("https://example.com")
    visual.sauce_visual_check("Home", capture_dom=True)
    visual.finish_visual_build()
"""

SAUCE_ROBOT = """\
*** Settings ***
Library    SeleniumLibrary
Library    SauceLabsVisual

*** Test Cases ***
Home Page
    Create Visual Build    My Build
    Open Browser    https://example.com    chrome
    Visual Snapshot    Home
    Visual Snapshot    Cart
    Finish Visual Build
"""


class TestPercyPython:
    def test_snapshot_calls(self):
        result = PercyPythonTransformer().transform(PERCY_PY, _ctx(Platform.PERCY))
        assert result.content == (
            "from selenium import webdriver\n"
            f"{SMARTUI_IMPORT}\n"
            "\n"
            "\n"
            "def test_home():\n"
            "    driver = webdriver.Chrome()\n"
            '    driver.get("https://example.com")\n'
            '    smartui_snapshot(driver, "Home")\n'
            '    smartui_snapshot(driver, "About")\n'
            "    driver.quit()\n"
        )
        assert result.snapshot_count == 2
        assert [w.message for w in result.warnings] == [
            "Percy option `widths` has no SmartUI equivalent and was dropped."
        ]

    def test_second_run_is_a_no_op(self):
        transformer = PercyPythonTransformer()
        first = transformer.transform(PERCY_PY, _ctx(Platform.PERCY))
        second = transformer.transform(first.content, _ctx(Platform.PERCY))
        assert second.content == first.content
        assert second.snapshot_count == 0
        assert second.warnings == []

    def test_keyword_name(self):
        source = 'percy_snapshot(driver=browser, name="Home")\n'
        result = PercyPythonTransformer().transform(source, _ctx(Platform.PERCY))
        assert result.content == 'smartui_snapshot(browser, "Home")\n'

    def test_appium_screenshot_options(self):
        source = (
            "from percy import percy_screenshot\n"
            'percy_screenshot(driver, "Home", device_name="Pixel 7", orientation="landscape", sync=True)\n'
        )
        result = PercyPythonTransformer().transform(source, _ctx(Platform.PERCY, framework=Framework.APPIUM))
        assert result.content == (
            f"{SMARTUI_IMPORT}\n"
            'smartui_snapshot(driver, "Home", options={"device_name": "Pixel 7", "orientation": "landscape"})\n'
        )
        assert [w.message for w in result.warnings] == [
            "Percy option `sync` has no SmartUI equivalent and was dropped."
        ]

    def test_ignore_elements_renamed(self):
        source = 'percy_screenshot(driver, "Home", ignore_region_appium_elements=[banner])\n'
        result = PercyPythonTransformer().transform(source, _ctx(Platform.PERCY))
        assert result.content == 'smartui_snapshot(driver, "Home", options={"ignore_elements": [banner]})\n'

    def test_native_context_reported(self):
        source = 'driver.switch_to.context("NATIVE_APP")\npercy_screenshot(driver, "Home")\n'
        result = PercyPythonTransformer().transform(source, _ctx(Platform.PERCY))
        assert 'driver.switch_to.context("NATIVE_APP")' in result.content
        assert result.warnings[-1].message == "Found 1 native context switching call(s)"

    def test_other_snapshot_calls_untouched(self):
        source = (
            "tree = page.accessibility.snapshot()\n"
            "camera.snapshot()\n"
            'percy_snapshot(driver, "Home")\n'
        )
        result = PercyPythonTransformer().transform(source, _ctx(Platform.PERCY))
        assert result.content == (
            "tree = page.accessibility.snapshot()\n"
            "camera.snapshot()\n"
            'smartui_snapshot(driver, "Home")\n'
        )
        assert result.snapshot_count == 1

    def test_percy_instance_receiver(self):
        source = (
            "self.visual = Percy(driver)\n"
            'self.visual.snapshot("Home")\n'
            'percy.snapshot(name="Cart")\n'
        )
        result = PercyPythonTransformer().transform(source, _ctx(Platform.PERCY))
        assert result.content == (
            "self.visual = Percy(driver)\n"
            'smartui_snapshot(driver, "Home")\n'
            'smartui_snapshot(driver, "Cart")\n'
        )
        assert result.snapshot_count == 2


class TestApplitoolsPython:
    def test_lifecycle_and_checks(self):
        result = ApplitoolsPythonTransformer().transform(APPLITOOLS_PY, _ctx(Platform.APPLITOOLS))
        assert result.content == (
            f"{SMARTUI_IMPORT}\n"
            "\n"
            "\n"
            "def test_home(driver):\n"
            "    eyes = Eyes()\n"
            '    smartui_snapshot(driver, "Home")\n'
            '    smartui_snapshot(driver, "Landing")\n'
            '    smartui_snapshot(driver, "Region")\n'
        )
        assert result.snapshot_count == 3
        assert result.warnings == [FULLY_WARNING]

    def test_self_eyes(self):
        source = (
            "class TestHome:\n"
            "    def test_home(self):\n"
            '        self.eyes.check_window("Home")\n'
            "        self.eyes.close_async()\n"
        )
        result = ApplitoolsPythonTransformer().transform(source, _ctx(Platform.APPLITOOLS))
        assert result.content == (
            "class TestHome:\n"
            "    def test_home(self):\n"
            '        smartui_snapshot(driver, "Home")\n'
        )


class TestSaucePython:
    def test_builds_removed_and_check_rewritten(self):
        result = SaucePythonTransformer().transform(SAUCE_PY, _ctx(Platform.SAUCE_LABS))
        assert result.content == (
            f"{SMARTUI_IMPORT}\n"
            "\n"
            "\n"
            "def test_home(driver):\n"
            "    visual = SauceLabsVisual()\n"
            '    driver.get("https://example.com")\n'
            '    smartui_snapshot(driver, "Home")\n'
        )
        assert result.snapshot_count == 1
        assert [w.message for w in result.warnings] == [
            "Sauce Labs option `capture_dom` has no SmartUI equivalent and was dropped."
        ]


class TestRobot:
    def test_sauce_keywords(self):
        ctx = _ctx(Platform.SAUCE_LABS, "tests/visual.robot", Framework.ROBOT)
        result = SaucePythonTransformer().transform(SAUCE_ROBOT, ctx)
        assert result.content == (
            "*** Settings ***\n"
            "Library    SeleniumLibrary\n"
            "Library    LambdaTestSmartUI\n"
            "\n"
            "*** Test Cases ***\n"
            "Home Page\n"
            "    Open Browser    https://example.com    chrome\n"
            "    SmartUI Snapshot    Home\n"
            "    SmartUI Snapshot    Cart\n"
        )
        assert result.snapshot_count == 2
        assert result.warnings == []

    def test_other_platforms_warn(self):
        ctx = _ctx(Platform.PERCY, "tests/visual.robot", Framework.ROBOT)
        result = PercyPythonTransformer().transform(SAUCE_ROBOT, ctx)
        assert result.content == SAUCE_ROBOT
        assert result.warnings[0].message == "Robot Framework transformation not yet implemented for Percy"

    def test_unsupported_suffix(self):
        result = PercyPythonTransformer().transform("x", _ctx(Platform.PERCY, "notes.txt"))
        assert result.content == "x"
        assert result.warnings[0].message == "Unsupported file type: notes.txt"
