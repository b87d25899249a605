"""Weighted regex signatures used to infer the test framework.

Each framework has a list of (pattern, weight) pairs. A pattern contributes
its weight at most once per file; the scorer sums weights across files.
Strongest signatures are listed first within each framework.
"""

import re
from dataclasses import dataclass

from smartui_migrator.platforms import Framework


@dataclass(frozen=True)
class Signature:
    pattern: re.Pattern
    weight: float

    def to_dict(self) -> dict:
        return {"pattern": self.pattern.pattern, "weight": self.weight}


def _sigs(*pairs: tuple[str, float]) -> tuple[Signature, ...]:
    return tuple(Signature(re.compile(p), w) for p, w in pairs)


FRAMEWORK_SIGNATURES: dict[Framework, tuple[Signature, ...]] = {
    Framework.CYPRESS: _sigs(
        (r"cy\.(visit|get|contains|click|type|find|should|wait|intercept|request)\(", 0.9),
        (r"Cypress\.Commands\.add", 0.8),
        (r"cypress\.config\.", 0.7),
        (r"cy\.(on|off|window|document)\(", 0.6),
        (r"describe\s*\(\s*['\"]", 0.3),
        (r"it\s*\(\s*['\"]", 0.3),
    ),
    Framework.PLAYWRIGHT: _sigs(
        (r"page\.(goto|click|fill|locator|getByRole|getByText|getByLabel)\(", 0.9),
        (r"expect\s*\(\s*page\s*\)", 0.8),
        (r"browser\.(newPage|close)\(", 0.7),
        (r"playwright\.config\.", 0.7),
        (r"context\.(newPage|close)\(", 0.6),
        (r"test\s*\(\s*['\"]", 0.5),
    ),
    Framework.SELENIUM: _sigs(
        (r"new ChromeDriver\(\)", 0.7),
        (r"new FirefoxDriver\(\)", 0.7),
        (r"new EdgeDriver\(\)", 0.7),
        (r"WebDriverWait\s*\(", 0.6),
        (r"driver\.(findElement|findElements)\(", 0.6),
        (r"By\.(id|cssSelector|xpath|className|tagName)\(", 0.5),
        (r"Actions\s*\(", 0.5),
        (r"JavascriptExecutor", 0.4),
    ),
    Framework.ROBOT: _sigs(
        (r"Open Browser", 0.8),
        (r"Click Element", 0.7),
        (r"Input Text", 0.7),
        (r"Get Text", 0.6),
        (r"Wait Until Element Is Visible", 0.6),
        (r"Robot Framework", 0.5),
    ),
    Framework.APPIUM: _sigs(
        (r"driver\.findElementBy", 0.8),
        (r"MobileElement", 0.7),
        (r"AppiumDriver", 0.7),
        (r"DesiredCapabilities", 0.6),
        (r"TouchAction", 0.6),
        (r"appium", 0.5),
    ),
    Framework.STORYBOOK: _sigs(
        (r"\.stories\.(js|ts|jsx|tsx)", 0.9),
        (r"export default.*title:", 0.8),
        (r"export const.*=.*\(\)", 0.7),
        (r"\.add\(", 0.6),
        (r"Storybook", 0.5),
    ),
}
