"""Enumerations shared by detection and transformation.

Platform, framework and language values are the display names used in
reports and error messages, so they double as their `str` values.
"""

from enum import Enum

# Intermediate anchor state only; never a valid DetectionResult platform.
UNKNOWN = "unknown"


class Platform(str, Enum):
    PERCY = "Percy"
    APPLITOOLS = "Applitools"
    SAUCE_LABS = "Sauce Labs Visual"


class Framework(str, Enum):
    CYPRESS = "Cypress"
    PLAYWRIGHT = "Playwright"
    SELENIUM = "Selenium"
    STORYBOOK = "Storybook"
    ROBOT = "Robot Framework"
    APPIUM = "Appium"


class Language(str, Enum):
    JAVASCRIPT = "JavaScript/TypeScript"
    JAVA = "Java"
    PYTHON = "Python"


# Cold-search tie-break and config-file probe order.
PLATFORM_PRIORITY: tuple[Platform, ...] = (
    Platform.PERCY,
    Platform.APPLITOOLS,
    Platform.SAUCE_LABS,
)


def test_type_for(framework: Framework) -> str:
    """Map a framework to the SmartUI test type (e2e, storybook or appium)."""
    if framework == Framework.STORYBOOK:
        return "storybook"
    if framework == Framework.APPIUM:
        return "appium"
    return "e2e"


# Not a test function despite the name.
test_type_for.__test__ = False
