"""Execution-layer rewrites: manifests and CI pipelines.

ManifestTransformer swaps platform SDK dependencies for their SmartUI
counterparts in package.json, pom.xml and requirements.txt, and rewrites
package.json scripts. CiTransformer rewrites test commands and secrets in
CI YAML files and Jenkinsfiles.

A file with nothing to migrate comes back byte-identical.
"""

import json
import logging
import re
import xml.etree.ElementTree as ET
from pathlib import PurePosixPath
from typing import Any, Callable, Optional

import yaml

from smartui_migrator.detector.jvm.maven import PLATFORM_INDICATORS as MAVEN_INDICATORS
from smartui_migrator.detector.python.requirements import PLATFORM_INDICATORS as PYPI_INDICATORS
from smartui_migrator.detector.python.requirements import normalise
from smartui_migrator.platforms import Platform
from smartui_migrator.transform.transformers.base import Transformer
from smartui_migrator.transform.types import (
    TransformationResult,
    TransformationWarning,
    TransformContext,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------

NPM_DEPENDENCY_MAP: dict[Platform, dict[str, str]] = {
    Platform.PERCY: {
        "@percy/cli": "@lambdatest/smartui-cli",
        "@percy/cypress": "@lambdatest/smartui-cypress",
        "@percy/playwright": "@lambdatest/smartui-playwright",
        "@percy/selenium-webdriver": "@lambdatest/smartui-selenium",
        "@percy/storybook": "@lambdatest/smartui-storybook",
        "@percy/appium-app": "@lambdatest/smartui-appium",
        "@percy/automate": "@lambdatest/smartui-automate",
        "@percy/puppeteer": "@lambdatest/smartui-puppeteer",
        "@percy/agent": "@lambdatest/smartui-cli",
        "@percy/sdk": "@lambdatest/smartui-cli",
    },
    Platform.APPLITOOLS: {
        "@applitools/eyes-selenium": "@lambdatest/smartui-selenium",
        "@applitools/eyes-cypress": "@lambdatest/smartui-cypress",
        "@applitools/eyes-playwright": "@lambdatest/smartui-playwright",
        "@applitools/eyes-storybook": "@lambdatest/smartui-storybook",
        "@applitools/eyes-webdriverio": "@lambdatest/smartui-webdriverio",
        "@applitools/eyes-puppeteer": "@lambdatest/smartui-puppeteer",
        "@applitools/eyes": "@lambdatest/smartui-cli",
        "@applitools/eyes-api": "@lambdatest/smartui-cli",
    },
    Platform.SAUCE_LABS: {
        "@saucelabs/cypress-plugin": "@lambdatest/smartui-cypress",
        "@saucelabs/cypress-visual-plugin": "@lambdatest/smartui-cypress",
        "@saucelabs/webdriverio": "@lambdatest/smartui-selenium",
        "@saucelabs/playwright-plugin": "@lambdatest/smartui-playwright",
        "@saucelabs/sauce-cypress-runner": "@lambdatest/smartui-cypress",
        "@saucelabs/sauce-playwright-runner": "@lambdatest/smartui-playwright",
        "saucectl": "@lambdatest/smartui-cli",
        "screener-storybook": "@lambdatest/smartui-storybook",
    },
}

_DEPENDENCY_SECTIONS = ("dependencies", "devDependencies", "optionalDependencies", "peerDependencies")

SMARTUI_MAVEN = ("io.github.lambdatest", "lambdatest-java-sdk")
SMARTUI_PYPI = "lambdatest-selenium-driver"

LEGACY_SECRETS: dict[Platform, tuple[str, ...]] = {
    Platform.PERCY: ("PERCY_TOKEN", "PERCY_PROJECT"),
    Platform.APPLITOOLS: ("APPLITOOLS_API_KEY", "APPLITOOLS_BATCH_ID", "APPLITOOLS_BATCH_NAME"),
    Platform.SAUCE_LABS: ("SAUCE_USERNAME", "SAUCE_ACCESS_KEY", "SAUCE_REGION", "SCREENER_API_KEY"),
}

# variable -> CI secret it is read from
SMARTUI_SECRETS: dict[str, str] = {
    "PROJECT_TOKEN": "SMARTUI_PROJECT_TOKEN",
    "LT_USERNAME": "LT_USERNAME",
    "LT_ACCESS_KEY": "LT_ACCESS_KEY",
}

TEST_COMMANDS = (
    "cypress run",
    "cypress open",
    "playwright test",
    "jest",
    "mocha",
    "jasmine",
    "karma",
    "mvn test",
    "gradle test",
    "pytest",
    "python -m pytest",
    "robot",
    "npm test",
    "yarn test",
)

_TEST_COMMAND = re.compile(
    r"(?<![\w@/-])(?:" + "|".join(re.escape(c) for c in TEST_COMMANDS) + r")(?![\w-])"
)
_PERCY_EXEC = re.compile(r"\b(?:npx\s+)?percy\s+(?:app:)?exec\b")
_PERCY_STORYBOOK = re.compile(r"\bpercy\s+storybook\b")
_STORYBOOK_CLI = re.compile(r"(?<![\w-])(?:eyes-storybook|screener-storybook)\b")
_WRAPPED = "smartui exec"


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

def rewrite_command(command: str, platform: Platform) -> str:
    """Rewrite one (possibly multi-line) shell command for SmartUI."""
    return "\n".join(_rewrite_line(line, platform) for line in command.split("\n"))


def _rewrite_line(line: str, platform: Platform) -> str:
    if _WRAPPED in line:
        return line
    if platform == Platform.PERCY:
        line = _PERCY_EXEC.sub("npx smartui exec", line)
        return _PERCY_STORYBOOK.sub("smartui-storybook", line)
    if _STORYBOOK_CLI.search(line):
        return _STORYBOOK_CLI.sub("smartui-storybook", line)
    match = _TEST_COMMAND.search(line)
    if match is None:
        return line
    # Wrap from the start of the command, keeping leading whitespace.
    stripped = line.lstrip()
    indent = line[: len(line) - len(stripped)]
    return f"{indent}npx smartui exec -- {stripped}"


# ---------------------------------------------------------------------------
# Manifests
# ---------------------------------------------------------------------------

def _json_indent(source: str) -> int | str:
    m = re.search(r"\n([ \t]+)\"", source)
    if m is None:
        return 2
    indent = m.group(1)
    return indent if "\t" in indent else len(indent)


def rewrite_package_json(source: str, platform: Platform) -> TransformationResult:
    try:
        data = json.loads(source)
    except ValueError as e:
        logger.warning("Invalid package.json: %s", e)
        return TransformationResult(
            content=source,
            warnings=[TransformationWarning(message=f"Failed to parse package.json: {e}")],
        )
    if not isinstance(data, dict):
        return TransformationResult(
            content=source,
            warnings=[TransformationWarning(message="Failed to parse package.json: top level is not an object")],
        )

    mapping = NPM_DEPENDENCY_MAP.get(platform, {})
    changed = False
    for section in _DEPENDENCY_SECTIONS:
        deps = data.get(section)
        if not isinstance(deps, dict) or not set(deps) & set(mapping):
            continue
        renamed: dict[str, Any] = {}
        for name, version in deps.items():
            target = mapping.get(name, name)
            if target in renamed or (target != name and target in deps):
                continue
            renamed[target] = version
        data[section] = renamed
        changed = True

    warnings: list[TransformationWarning] = []
    scripts = data.get("scripts")
    if isinstance(scripts, dict):
        for key, command in scripts.items():
            if isinstance(command, str):
                new = rewrite_command(command, platform)
                if new != command:
                    scripts[key] = new
                    changed = True
    else:
        warnings.append(
            TransformationWarning(
                message="No scripts section found in package.json",
                details="The package.json file does not contain a scripts section to transform.",
            )
        )

    if not changed:
        return TransformationResult(content=source, warnings=warnings)
    content = json.dumps(data, indent=_json_indent(source), ensure_ascii=False)
    if source.endswith("\n"):
        content += "\n"
    return TransformationResult(content=content, warnings=warnings)


_DEPENDENCY_BLOCK = re.compile(r"([ \t]*)<dependency>(.*?)</dependency>[ \t]*(?:\r?\n)?", re.S)
_VERSION_LINE = re.compile(r"[ \t]*<version>[^<]*</version>[ \t]*(?:\r?\n)?")


def _tag_text(block: str, tag: str) -> str:
    m = re.search(rf"<{tag}>\s*([^<]*?)\s*</{tag}>", block)
    return m.group(1) if m else ""


def _is_platform_sdk(group: str, artifact: str, platform: Platform) -> bool:
    for aid, gid, indicator_platform, _, _ in MAVEN_INDICATORS:
        if indicator_platform == platform and artifact == aid and (gid is None or gid == group):
            return True
    return False


def rewrite_pom(source: str, platform: Platform) -> TransformationResult:
    try:
        ET.fromstring(source)
    except ET.ParseError as e:
        logger.warning("Invalid pom.xml: %s", e)
        return TransformationResult(
            content=source,
            warnings=[TransformationWarning(message=f"Failed to parse pom.xml: {e}")],
        )

    present = any(
        (_tag_text(m.group(2), "groupId"), _tag_text(m.group(2), "artifactId")) == SMARTUI_MAVEN
        for m in _DEPENDENCY_BLOCK.finditer(source)
    )
    replaced = 0

    def swap(m: re.Match) -> str:
        nonlocal present, replaced
        body = m.group(2)
        if not _is_platform_sdk(_tag_text(body, "groupId"), _tag_text(body, "artifactId"), platform):
            return m.group(0)
        replaced += 1
        if present:
            return ""
        present = True
        body = re.sub(r"<groupId>[^<]*</groupId>", f"<groupId>{SMARTUI_MAVEN[0]}</groupId>", body)
        body = re.sub(r"<artifactId>[^<]*</artifactId>", f"<artifactId>{SMARTUI_MAVEN[1]}</artifactId>", body)
        body = _VERSION_LINE.sub("", body)
        return m.group(0).replace(m.group(2), body)

    content = _DEPENDENCY_BLOCK.sub(swap, source)
    if not replaced:
        return TransformationResult(content=source)
    return TransformationResult(
        content=content,
        warnings=[
            TransformationWarning(
                message=f"Replaced {replaced} {platform.value} Maven dependenc{'y' if replaced == 1 else 'ies'} with io.github.lambdatest:lambdatest-java-sdk.",
                details="Add a <version> for lambdatest-java-sdk, or manage it in <dependencyManagement>.",
            )
        ],
    )


def rewrite_requirements(source: str, platform: Platform) -> TransformationResult:
    packages = {pkg for pkg, indicator_platform, _, _ in PYPI_INDICATORS if indicator_platform == platform}
    lines = source.splitlines(keepends=True)
    present = any(_requirement_name(line) == normalise(SMARTUI_PYPI) for line in lines)
    out: list[str] = []
    changed = False
    for line in lines:
        if _requirement_name(line) not in packages:
            out.append(line)
            continue
        changed = True
        if present:
            continue
        present = True
        body = line.rstrip("\r\n")
        out.append(SMARTUI_PYPI + line[len(body):])
    if not changed:
        return TransformationResult(content=source)
    return TransformationResult(content="".join(out))


def _requirement_name(line: str) -> Optional[str]:
    stripped = line.split("#", 1)[0].strip()
    if not stripped or stripped.startswith("-"):
        return None
    return normalise(re.split(r"[><=!~;@\[\s]", stripped, 1)[0])


class ManifestTransformer(Transformer):
    """package.json, pom.xml and requirements.txt; lock files are not handled."""

    name = "manifest"
    handles_names = ("package.json", "pom.xml", "requirements.txt")

    _REWRITERS: dict[str, Callable[[str, Platform], TransformationResult]] = {
        "package.json": rewrite_package_json,
        "pom.xml": rewrite_pom,
        "requirements.txt": rewrite_requirements,
    }

    def transform(self, source: str, context: TransformContext) -> TransformationResult:
        rewriter = self._REWRITERS.get(PurePosixPath(context.file_path).name)
        if rewriter is None:
            return TransformationResult(content=source)
        return rewriter(source, context.platform)


# ---------------------------------------------------------------------------
# CI
# ---------------------------------------------------------------------------

_COMMAND_KEYS = {"run", "script", "command", "before_script", "after_script"}
_ENV_KEYS = {"env", "variables", "environment"}
_JENKINS_SH = re.compile(r"(\bsh\s*\(?\s*)(['\"]{1,3})(.*?)(\2)", re.S)


class CiLoader(yaml.SafeLoader):
    """SafeLoader that keeps `on`, `yes` and `no` as strings (GitHub's `on:` trigger key)."""


CiLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:bool"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
CiLoader.add_implicit_resolver(
    "tag:yaml.org,2002:bool",
    re.compile(r"^(?:true|True|TRUE|false|False|FALSE)$"),
    list("tTfF"),
)


def _secret_ref(secret: str, github: bool) -> str:
    return f"${{{{ secrets.{secret} }}}}" if github else f"${secret}"


class _CiRewrite:
    """Mutable state for one YAML document walk."""

    def __init__(self, platform: Platform, github: bool):
        self.platform = platform
        self.github = github
        self.removed: list[str] = []
        self.changed = False

    def command(self, value: Any) -> Any:
        if isinstance(value, str):
            new = rewrite_command(value, self.platform)
            self.changed |= new != value
            return new
        if isinstance(value, list):
            return [self.command(v) for v in value]
        if isinstance(value, dict):
            self.walk(value)
        return value

    def env(self, env: dict) -> None:
        legacy = [k for k in LEGACY_SECRETS.get(self.platform, ()) if k in env]
        if not legacy:
            return
        for key in legacy:
            del env[key]
        self.removed.extend(k for k in legacy if k not in self.removed)
        for name, secret in SMARTUI_SECRETS.items():
            env.setdefault(name, _secret_ref(secret, self.github))
        self.changed = True

    def walk(self, node: Any) -> None:
        if isinstance(node, list):
            for item in node:
                self.walk(item)
            return
        if not isinstance(node, dict):
            return
        for key, value in list(node.items()):
            if key in _COMMAND_KEYS:
                node[key] = self.command(value)
            elif key in _ENV_KEYS and isinstance(value, dict):
                self.env(value)
            else:
                self.walk(value)


def secrets_warning(removed: list[str]) -> TransformationWarning:
    return TransformationWarning(
        message=(
            "Configure the following secrets in your CI provider: "
            + ", ".join(SMARTUI_SECRETS.values())
        ),
        details=f"Removed legacy secrets: {', '.join(removed)}.",
    )


def rewrite_ci_yaml(source: str, file_path: str, platform: Platform) -> TransformationResult:
    try:
        doc = yaml.load(source, Loader=CiLoader)
    except yaml.YAMLError as e:
        logger.warning("Invalid CI YAML in %s: %s", file_path, e)
        return TransformationResult(
            content=source,
            warnings=[TransformationWarning(message="Failed to parse YAML content", details=str(e))],
        )
    if not isinstance(doc, dict):
        return TransformationResult(
            content=source,
            warnings=[TransformationWarning(message="Failed to parse YAML content", details="The document is empty or not a mapping.")],
        )

    state = _CiRewrite(platform, github=file_path.startswith(".github/"))
    state.walk(doc)
    if not state.changed:
        return TransformationResult(content=source)
    warnings = [secrets_warning(state.removed)] if state.removed else []
    content = yaml.safe_dump(doc, sort_keys=False, default_flow_style=False, allow_unicode=True)
    return TransformationResult(content=content, warnings=warnings)


def rewrite_jenkinsfile(source: str, platform: Platform) -> TransformationResult:
    def swap(m: re.Match) -> str:
        return m.group(1) + m.group(2) + rewrite_command(m.group(3), platform) + m.group(4)

    content = _JENKINS_SH.sub(swap, source)
    legacy = [k for k in LEGACY_SECRETS.get(platform, ()) if re.search(rf"\b{k}\b", content)]
    warnings = []
    if legacy:
        warnings.append(
            TransformationWarning(
                message=f"Jenkinsfile still references legacy secrets: {', '.join(legacy)}",
                details="Replace them with PROJECT_TOKEN, LT_USERNAME and LT_ACCESS_KEY credentials.",
            )
        )
    return TransformationResult(content=content, warnings=warnings)


class CiTransformer(Transformer):
    name = "ci"
    handles_suffixes = (".yml", ".yaml")
    handles_names = ("Jenkinsfile",)

    def transform(self, source: str, context: TransformContext) -> TransformationResult:
        if PurePosixPath(context.file_path).name == "Jenkinsfile":
            return rewrite_jenkinsfile(source, context.platform)
        return rewrite_ci_yaml(source, context.file_path, context.platform)
