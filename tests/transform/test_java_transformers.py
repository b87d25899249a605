"""Tests for the Java transformers."""

from smartui_migrator.platforms import Framework, Language, Platform
from smartui_migrator.transform import TransformContext
from smartui_migrator.transform.transformers import (
    ApplitoolsJavaTransformer,
    PercyJavaTransformer,
    SauceJavaTransformer,
)
from smartui_migrator.transform.transformers.java import FULLY_WARNING, SMARTUI_IMPORT


def _ctx(platform: Platform, file_path: str = "src/test/java/demo/HomeTest.java") -> TransformContext:
    return TransformContext(
        platform=platform,
        framework=Framework.SELENIUM,
        language=Language.JAVA,
        file_path=file_path,
    )


PERCY_JAVA = """\
package demo;

import io.percy.selenium.Percy;
import org.openqa.selenium.WebDriver;

public class HomeTest {
    private WebDriver driver;
    private Percy percy;

    public void home() {
        percy.snapshot("Home");
        percy.snapshot("About", Arrays.asList(375, 1280));
    }
}
"""

APPLITOOLS_JAVA = """\
package demo;

import com.applitools.eyes.selenium.Eyes;
import com.applitools.eyes.selenium.fluent.Target;
import org.openqa.selenium.WebDriver;

public class HomeTest {
    private Eyes eyes;

    public void home() {
        eyes.open(driver, "App", "Home");
        eyes.check("Home", Target.window().fully());
        eyes.check(Target.region(By.id("main")));
        eyes.checkWindow();
        eyes.closeAsync();
    }
}
"""

SAUCE_JAVA = """\
import com.saucelabs.visual.VisualApi;
import com.saucelabs.visual.CheckOptions;

class HomeTest {
    void home() {
        visual.sauceVisualCheck("Home");
        visual.sauceVisualCheck("Cart", new CheckOptions.Builder().build());
    }
}
"""


class TestPercyJava:
    def test_calls_and_import(self):
        result = PercyJavaTransformer().transform(PERCY_JAVA, _ctx(Platform.PERCY))
        assert SMARTUI_IMPORT + "\n" in result.content
        assert "io.percy" not in result.content
        assert 'SmartUISnapshot.smartuiSnapshot(driver, "Home");' in result.content
        assert 'SmartUISnapshot.smartuiSnapshot(driver, "About");' in result.content
        assert result.snapshot_count == 2
        assert len(result.warnings) == 1

    def test_other_snapshot_and_screenshot_calls_untouched(self):
        source = (
            "class HomeTest {\n"
            "    void home() {\n"
            '        percy.snapshot("Home");\n'
            "        page.screenshot(new Page.ScreenshotOptions().setPath(p));\n"
            "        camera.snapshot();\n"
            "    }\n"
            "}\n"
        )
        result = PercyJavaTransformer().transform(source, _ctx(Platform.PERCY))
        assert result.content == source.replace(
            'percy.snapshot("Home");', 'SmartUISnapshot.smartuiSnapshot(driver, "Home");'
        )
        assert result.snapshot_count == 1

    def test_declared_app_percy_receiver(self):
        source = (
            "AppPercy appPercy = new AppPercy(driver);\n"
            'appPercy.screenshot("Login");\n'
            'this.percy.snapshot("Cart");\n'
        )
        result = PercyJavaTransformer().transform(source, _ctx(Platform.PERCY))
        assert result.content == (
            "AppPercy appPercy = new AppPercy(driver);\n"
            'SmartUISnapshot.smartuiSnapshot(driver, "Login");\n'
            'SmartUISnapshot.smartuiSnapshot(driver, "Cart");\n'
        )
        assert result.snapshot_count == 2

    def test_second_run_is_a_no_op(self):
        transformer = PercyJavaTransformer()
        first = transformer.transform(PERCY_JAVA, _ctx(Platform.PERCY))
        second = transformer.transform(first.content, _ctx(Platform.PERCY))
        assert second.content == first.content
        assert second.snapshot_count == 0

    def test_handles_only_java(self):
        transformer = PercyJavaTransformer()
        assert transformer.handles("src/HomeTest.java")
        assert not transformer.handles("src/home.py")


class TestApplitoolsJava:
    def test_lifecycle_and_checks(self):
        result = ApplitoolsJavaTransformer().transform(APPLITOOLS_JAVA, _ctx(Platform.APPLITOOLS))
        content = result.content
        assert content.count(SMARTUI_IMPORT) == 1
        assert "com.applitools" not in content
        assert "eyes.open" not in content
        assert "eyes.closeAsync" not in content
        assert 'SmartUISnapshot.smartuiSnapshot(driver, "Home");' in content
        assert 'SmartUISnapshot.smartuiSnapshot(driver, "Region");' in content
        assert 'SmartUISnapshot.smartuiSnapshot(driver, "Full Page");' in content
        assert result.snapshot_count == 3

    def test_warnings(self):
        result = ApplitoolsJavaTransformer().transform(APPLITOOLS_JAVA, _ctx(Platform.APPLITOOLS))
        assert result.warnings[0] == FULLY_WARNING
        assert result.warnings[-1].message == "Applitools `Eyes` instance `eyes` is still declared."

    def test_custom_receiver_and_with_name(self):
        source = (
            "Eyes myEyes = new Eyes();\n"
            "myEyes.open(driver, \"App\", \"Test\");\n"
            "myEyes.check(Target.window().withName(\"Dashboard\"));\n"
            "myEyes.close();\n"
        )
        result = ApplitoolsJavaTransformer().transform(source, _ctx(Platform.APPLITOOLS))
        assert result.content == (
            "Eyes myEyes = new Eyes();\n"
            'SmartUISnapshot.smartuiSnapshot(driver, "Dashboard");\n'
        )
        assert result.snapshot_count == 1


class TestSauceJava:
    def test_calls_and_imports(self):
        result = SauceJavaTransformer().transform(SAUCE_JAVA, _ctx(Platform.SAUCE_LABS))
        assert result.content.startswith(SMARTUI_IMPORT + "\n\nclass HomeTest")
        assert 'SmartUISnapshot.smartuiSnapshot(driver, "Home");' in result.content
        assert 'SmartUISnapshot.smartuiSnapshot(driver, "Cart");' in result.content
        assert result.snapshot_count == 2
        assert len(result.warnings) == 1
        assert "CheckOptions" in result.warnings[0].message

    def test_existing_smartui_import_kept_once(self):
        source = SMARTUI_IMPORT + "\nimport com.saucelabs.visual.VisualApi;\n"
        result = SauceJavaTransformer().transform(source, _ctx(Platform.SAUCE_LABS))
        assert result.content == SMARTUI_IMPORT + "\n"
