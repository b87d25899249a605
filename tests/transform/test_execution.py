"""Tests for manifest and CI rewrites."""

import json

import pytest
import yaml

from smartui_migrator.platforms import Framework, Language, Platform
from smartui_migrator.transform import TransformContext
from smartui_migrator.transform.transformers import CiTransformer, ManifestTransformer
from smartui_migrator.transform.transformers.execution import CiLoader, rewrite_command


def _ctx(platform: Platform, file_path: str) -> TransformContext:
    return TransformContext(
        platform=platform,
        framework=Framework.CYPRESS,
        language=Language.JAVASCRIPT,
        file_path=file_path,
    )


class TestRewriteCommand:
    @pytest.mark.parametrize(
        "command, expected",
        [
            ("percy exec -- cypress run", "npx smartui exec -- cypress run"),
            ("npx percy exec -- playwright test", "npx smartui exec -- playwright test"),
            ("npx percy app:exec -- pytest", "npx smartui exec -- pytest"),
            ("percy storybook ./storybook-static", "smartui-storybook ./storybook-static"),
            ("eslint .", "eslint ."),
        ],
    )
    def test_percy(self, command, expected):
        assert rewrite_command(command, Platform.PERCY) == expected

    @pytest.mark.parametrize(
        "command, expected",
        [
            ("npx cypress run --browser chrome", "npx smartui exec -- npx cypress run --browser chrome"),
            ("mvn test -Dtest=HomeTest", "npx smartui exec -- mvn test -Dtest=HomeTest"),
            ("eyes-storybook -u http://localhost:6006", "smartui-storybook -u http://localhost:6006"),
            ("npm ci", "npm ci"),
        ],
    )
    def test_applitools(self, command, expected):
        assert rewrite_command(command, Platform.APPLITOOLS) == expected

    def test_multi_line_keeps_indent(self):
        command = "npm ci\n  pytest tests/\n"
        assert rewrite_command(command, Platform.SAUCE_LABS) == "npm ci\n  npx smartui exec -- pytest tests/\n"

    def test_already_wrapped(self):
        command = "npx smartui exec -- cypress run"
        assert rewrite_command(command, Platform.SAUCE_LABS) == command


# ---------------------------------------------------------------------------
# Manifests
# ---------------------------------------------------------------------------

PACKAGE_JSON = """\
{
  "name": "demo",
  "scripts": {
    "test:visual": "percy exec -- cypress run",
    "lint": "eslint ."
  },
  "devDependencies": {
    "@percy/cli": "^1.27.0",
    "@percy/cypress": "^3.1.0",
    "cypress": "^13.0.0"
  }
}
"""

POM = """\
<project xmlns="http://maven.apache.org/POM/4.0.0">
  <dependencies>
    <dependency>
      <groupId>com.applitools</groupId>
      <artifactId>eyes-selenium-java5</artifactId>
      <version>5.60.0</version>
    </dependency>
    <dependency>
      <groupId>org.seleniumhq.selenium</groupId>
      <artifactId>selenium-java</artifactId>
      <version>4.15.0</version>
    </dependency>
  </dependencies>
</project>
"""


class TestPackageJson:
    def test_dependencies_and_scripts(self):
        result = ManifestTransformer().transform(PACKAGE_JSON, _ctx(Platform.PERCY, "package.json"))
        data = json.loads(result.content)
        assert data["devDependencies"] == {
            "@lambdatest/smartui-cli": "^1.27.0",
            "@lambdatest/smartui-cypress": "^3.1.0",
            "cypress": "^13.0.0",
        }
        assert data["scripts"] == {
            "test:visual": "npx smartui exec -- cypress run",
            "lint": "eslint .",
        }
        assert result.content.startswith('{\n  "name": "demo"')
        assert result.content.endswith("}\n")
        assert result.warnings == []

    def test_existing_smartui_dependency_not_duplicated(self):
        source = json.dumps(
            {
                "scripts": {},
                "devDependencies": {"@percy/cypress": "3.0.0", "@lambdatest/smartui-cypress": "1.0.0"},
            }
        )
        result = ManifestTransformer().transform(source, _ctx(Platform.PERCY, "package.json"))
        assert json.loads(result.content)["devDependencies"] == {"@lambdatest/smartui-cypress": "1.0.0"}

    def test_missing_scripts_warns(self):
        source = '{"dependencies": {"screener-storybook": "0.23.0"}}'
        result = ManifestTransformer().transform(source, _ctx(Platform.SAUCE_LABS, "package.json"))
        assert json.loads(result.content)["dependencies"] == {"@lambdatest/smartui-storybook": "0.23.0"}
        assert result.warnings[0].message == "No scripts section found in package.json"

    def test_unchanged_is_byte_identical(self):
        source = '{\n    "scripts": {"lint": "eslint ."},\n    "dependencies": {"react": "18"}\n}'
        result = ManifestTransformer().transform(source, _ctx(Platform.PERCY, "package.json"))
        assert result.content == source

    def test_invalid_json(self):
        result = ManifestTransformer().transform("{ nope", _ctx(Platform.PERCY, "package.json"))
        assert result.content == "{ nope"
        assert result.warnings[0].message.startswith("Failed to parse package.json:")


class TestPom:
    def test_dependency_swapped(self):
        result = ManifestTransformer().transform(POM, _ctx(Platform.APPLITOOLS, "pom.xml"))
        assert (
            "    <dependency>\n"
            "      <groupId>io.github.lambdatest</groupId>\n"
            "      <artifactId>lambdatest-java-sdk</artifactId>\n"
            "    </dependency>\n"
        ) in result.content
        assert "<version>4.15.0</version>" in result.content
        assert "5.60.0" not in result.content
        assert result.warnings[0].message == (
            "Replaced 1 Applitools Maven dependency with io.github.lambdatest:lambdatest-java-sdk."
        )

    def test_other_platform_untouched(self):
        result = ManifestTransformer().transform(POM, _ctx(Platform.PERCY, "pom.xml"))
        assert result.content == POM
        assert result.warnings == []

    def test_malformed(self):
        result = ManifestTransformer().transform("<project>", _ctx(Platform.PERCY, "pom.xml"))
        assert result.content == "<project>"
        assert result.warnings[0].message.startswith("Failed to parse pom.xml:")


class TestRequirements:
    def test_first_package_replaced(self):
        source = "# visual\nselenium==4.15.0\npercy-selenium==2.0.0\npercy-appium-app\npytest\n"
        result = ManifestTransformer().transform(source, _ctx(Platform.PERCY, "requirements.txt"))
        assert result.content == "# visual\nselenium==4.15.0\nlambdatest-selenium-driver\npytest\n"

    def test_unchanged(self):
        source = "selenium\n"
        result = ManifestTransformer().transform(source, _ctx(Platform.SAUCE_LABS, "requirements.txt"))
        assert result.content == source

    def test_lock_files_not_handled(self):
        transformer = ManifestTransformer()
        assert transformer.handles("package.json")
        assert not transformer.handles("package-lock.json")
        assert not transformer.handles("yarn.lock")


# ---------------------------------------------------------------------------
# CI
# ---------------------------------------------------------------------------

GITHUB_WORKFLOW = """\
name: Visual
on: push
jobs:
  visual:
    runs-on: ubuntu-latest
    steps:
      - uses: actions/checkout@v4
      - run: npx percy exec -- cypress run
        env:
          PERCY_TOKEN: ${{ secrets.PERCY_TOKEN }}
"""

GITLAB_CI = """\
visual:
  image: node:20
  variables:
    APPLITOOLS_API_KEY: $APPLITOOLS_API_KEY
  script:
    - npm ci
    - npx cypress run
"""


class TestCiYaml:
    def test_github_workflow(self):
        ctx = _ctx(Platform.PERCY, ".github/workflows/visual.yml")
        result = CiTransformer().transform(GITHUB_WORKFLOW, ctx)
        doc = yaml.load(result.content, Loader=CiLoader)
        assert doc["on"] == "push"
        step = doc["jobs"]["visual"]["steps"][1]
        assert step["run"] == "npx smartui exec -- cypress run"
        assert step["env"] == {
            "PROJECT_TOKEN": "${{ secrets.SMARTUI_PROJECT_TOKEN }}",
            "LT_USERNAME": "${{ secrets.LT_USERNAME }}",
            "LT_ACCESS_KEY": "${{ secrets.LT_ACCESS_KEY }}",
        }
        assert len(result.warnings) == 1
        assert result.warnings[0].message == (
            "Configure the following secrets in your CI provider: "
            "SMARTUI_PROJECT_TOKEN, LT_USERNAME, LT_ACCESS_KEY"
        )
        assert result.warnings[0].details == "Removed legacy secrets: PERCY_TOKEN."

    def test_gitlab_variables(self):
        ctx = _ctx(Platform.APPLITOOLS, ".gitlab-ci.yml")
        result = CiTransformer().transform(GITLAB_CI, ctx)
        doc = yaml.safe_load(result.content)
        assert doc["visual"]["script"] == ["npm ci", "npx smartui exec -- npx cypress run"]
        assert doc["visual"]["variables"] == {
            "PROJECT_TOKEN": "$SMARTUI_PROJECT_TOKEN",
            "LT_USERNAME": "$LT_USERNAME",
            "LT_ACCESS_KEY": "$LT_ACCESS_KEY",
        }

    def test_nothing_to_do_is_byte_identical(self):
        source = "build:\n  script:\n    - npm ci   # install\n"
        result = CiTransformer().transform(source, _ctx(Platform.PERCY, ".gitlab-ci.yml"))
        assert result.content == source
        assert result.warnings == []

    def test_invalid_yaml(self):
        source = "jobs: [unclosed\n"
        result = CiTransformer().transform(source, _ctx(Platform.PERCY, ".gitlab-ci.yml"))
        assert result.content == source
        assert result.warnings[0].message == "Failed to parse YAML content"


class TestJenkinsfile:
    def test_sh_steps_and_legacy_secrets(self):
        source = (
            "pipeline {\n"
            "  environment {\n"
            "    SAUCE_USERNAME = credentials('sauce-user')\n"
            "  }\n"
            "  stages {\n"
            "    stage('Test') {\n"
            "      steps {\n"
            "        sh 'npm test'\n"
            "      }\n"
            "    }\n"
            "  }\n"
            "}\n"
        )
        result = CiTransformer().transform(source, _ctx(Platform.SAUCE_LABS, "Jenkinsfile"))
        assert "sh 'npx smartui exec -- npm test'" in result.content
        assert result.warnings[0].message == "Jenkinsfile still references legacy secrets: SAUCE_USERNAME"

    def test_handles(self):
        transformer = CiTransformer()
        assert transformer.handles("Jenkinsfile")
        assert transformer.handles(".github/workflows/ci.yaml")
        assert not transformer.handles("package.json")
