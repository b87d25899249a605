"""Python and Robot Framework rewrite rules.

Python visual calls become ``smartui_snapshot(driver, "name")`` from
``lambdatest_selenium_driver``. Robot suites are only rewritten for Sauce
Labs Visual, whose keyword library has a direct SmartUI counterpart.
"""

import logging
import re
from pathlib import PurePosixPath
from typing import Optional

from smartui_migrator.transform.transformers import text
from smartui_migrator.transform.transformers.base import Rule, RuleTransformer, apply_rules
from smartui_migrator.transform.types import (
    RuleOutcome,
    TransformationResult,
    TransformationWarning,
    TransformContext,
)

logger = logging.getLogger(__name__)

SMARTUI_IMPORT = "from lambdatest_selenium_driver import smartui_snapshot"
SMARTUI_FN = "smartui_snapshot"
DEFAULT_NAME = '"Untitled Snapshot"'
DRIVER = "driver"


def snapshot_call(driver: str, name: str, options: Optional[str] = None) -> str:
    args = [driver, name]
    if options:
        args.append(f"options={options}")
    return f"{SMARTUI_FN}({', '.join(args)})"


def _positional(args: list[str]) -> list[str]:
    return [a for a in args if text.keyword(a) is None]


def _keywords(args: list[str]) -> dict[str, str]:
    out = {}
    for arg in args:
        kw = text.keyword(arg)
        if kw is not None:
            out[kw[0]] = kw[1]
    return out


def _dropped(platform: str, key: str) -> TransformationWarning:
    return TransformationWarning(
        message=f"{platform} option `{key}` has no SmartUI equivalent and was dropped.",
        details="Review the snapshot options after migration.",
    )


# ---------------------------------------------------------------------------
# Imports
# ---------------------------------------------------------------------------

def make_import_rule(package: str) -> Rule:
    """Rule replacing `from <package>... import ...` and `import <package>...`."""
    pkg = re.escape(package)
    pattern = re.compile(
        rf"^[ \t]*(?:from[ \t]+{pkg}(?:\.[\w.]+)?[ \t]+import[ \t]+(?:\([^)]*\)|[^\n]+)"
        rf"|import[ \t]+{pkg}(?:\.[\w.]+)?(?:[ \t]+as[ \t]+\w+)?)[ \t]*(?:\r?\n|$)",
        re.M,
    )

    def rewrite_imports(source: str, context: TransformContext) -> RuleOutcome:
        seen = re.search(rf"^[ \t]*{re.escape(SMARTUI_IMPORT)}[ \t]*$", source, re.M) is not None
        edits = []
        for match in pattern.finditer(source):
            replacement = ""
            if not seen:
                seen = True
                ending = "\n" if match.group(0).endswith("\n") else ""
                replacement = SMARTUI_IMPORT + ending
            edits.append((match.start(), match.end(), replacement))
        if not edits:
            return RuleOutcome(content=source)
        return RuleOutcome(content=text.splice(source, edits))

    return rewrite_imports


# ---------------------------------------------------------------------------
# Percy
# ---------------------------------------------------------------------------

_PERCY_SNAPSHOT = re.compile(r"(?<![.\w])percy_snapshot\s*\(")
_PERCY_ASSIGN = re.compile(r"\b((?:self\.)?\w+)\s*=\s*(?:App)?Percy\s*\(")
_PERCY_SCREENSHOT = re.compile(r"(?<![.\w])(?:(\w+)\.)?percy_screenshot\s*\(")

# percy_screenshot keyword -> SmartUI options key
APPIUM_OPTIONS = {
    "device_name": "device_name",
    "orientation": "orientation",
    "full_screen": "full_screen",
    "ignore_region_appium_elements": "ignore_elements",
}


def _percy_method(source: str) -> re.Pattern:
    """`<receiver>.snapshot(` where the receiver is `percy` or bound to Percy()."""
    names = {"percy", "self.percy", *_PERCY_ASSIGN.findall(source)}
    receivers = "|".join(re.escape(n) for n in sorted(names, key=len, reverse=True))
    return re.compile(rf"(?<![.\w])(?:{receivers})\.snapshot\s*\(")


def _name_from(positional: list[str], keywords: dict[str, str], index: int) -> str:
    if len(positional) > index:
        return positional[index]
    return keywords.get("name", DEFAULT_NAME)


def rewrite_percy_snapshots(source: str, context: TransformContext) -> RuleOutcome:
    edits = []
    warnings: list[TransformationWarning] = []

    for call in text.iter_calls(source, _PERCY_SNAPSHOT):
        positional = _positional(call.args)
        keywords = _keywords(call.args)
        driver = positional[0] if positional else keywords.get("driver", DRIVER)
        for key in keywords:
            if key not in ("driver", "name"):
                warnings.append(_dropped("Percy", key))
        edits.append((call.start, call.end, snapshot_call(driver, _name_from(positional, keywords, 1))))

    for call in text.iter_calls(source, _percy_method(source)):
        positional = _positional(call.args)
        keywords = _keywords(call.args)
        for key in keywords:
            if key != "name":
                warnings.append(_dropped("Percy", key))
        edits.append((call.start, call.end, snapshot_call(DRIVER, _name_from(positional, keywords, 0))))

    if not edits:
        return RuleOutcome(content=source, warnings=warnings)
    return RuleOutcome(content=text.splice(source, edits), warnings=warnings, snapshot_count=len(edits))


def rewrite_percy_screenshots(source: str, context: TransformContext) -> RuleOutcome:
    edits = []
    warnings: list[TransformationWarning] = []

    for call in text.iter_calls(source, _PERCY_SCREENSHOT):
        positional = _positional(call.args)
        keywords = _keywords(call.args)
        receiver = call.match.group(1)
        if receiver:
            driver, name = receiver, _name_from(positional, keywords, 0)
        else:
            driver = positional[0] if positional else keywords.get("driver", DRIVER)
            name = _name_from(positional, keywords, 1)

        pairs = []
        for key, value in keywords.items():
            if key in ("driver", "name"):
                continue
            target = APPIUM_OPTIONS.get(key)
            if target is None:
                warnings.append(_dropped("Percy", key))
                continue
            pairs.append(f'"{target}": {value}')
        options = "{" + ", ".join(pairs) + "}" if pairs else None
        edits.append((call.start, call.end, snapshot_call(driver, name, options)))

    if not edits:
        return RuleOutcome(content=source, warnings=warnings)
    return RuleOutcome(content=text.splice(source, edits), warnings=warnings, snapshot_count=len(edits))


# ---------------------------------------------------------------------------
# Applitools
# ---------------------------------------------------------------------------

_EYES_ASSIGN = re.compile(r"\b((?:self\.)?\w+)\s*=\s*Eyes\s*\(")
_EYES_LIFECYCLE = ("open", "close", "close_async", "abort", "abort_if_not_closed")
_WITH_NAME = re.compile(r"\.with_name\(\s*(\"[^\"]*\"|'[^']*')\s*\)")

FULLY_WARNING = TransformationWarning(
    message=(
        "Applitools `fully()` was detected. To achieve full-page screenshots in "
        "SmartUI, please ensure your viewports in `.smartui.json` are defined "
        "with a single width value (e.g., `[1920]`)."
    ),
    details="SmartUI captures full-page screenshots when a viewport has no height.",
)


def _eyes_pattern(source: str) -> str:
    names = {"eyes", "self.eyes", *_EYES_ASSIGN.findall(source)}
    return "|".join(re.escape(n) for n in sorted(names, key=len, reverse=True))


def remove_eyes_lifecycle(source: str, context: TransformContext) -> RuleOutcome:
    pattern = re.compile(
        rf"^[ \t]*(?:[\w.]+\s*=\s*)?(?:{_eyes_pattern(source)})\.(?:{'|'.join(_EYES_LIFECYCLE)})\s*\(",
        re.M,
    )
    edits = []
    for call in text.iter_calls(source, pattern):
        span = text.statement_span(source, call.start, call.end)
        if span is not None:
            edits.append((span[0], span[1], ""))
    if not edits:
        return RuleOutcome(content=source)
    logger.debug("Removed %d Applitools lifecycle lines", len(edits))
    return RuleOutcome(content=text.splice(source, edits))


def rewrite_eyes_checks(source: str, context: TransformContext) -> RuleOutcome:
    pattern = re.compile(
        rf"(?<![.\w])(?:{_eyes_pattern(source)})\.(check|check_window|check_region)\s*\("
    )
    edits = []
    warnings: list[TransformationWarning] = []
    for call in text.iter_calls(source, pattern):
        method = call.match.group(1)
        joined = ", ".join(call.args)
        positional = _positional(call.args)
        keywords = _keywords(call.args)
        if (".fully(" in joined and ".fully(False)" not in joined) or keywords.get("fully") == "True":
            warnings.append(FULLY_WARNING)

        named = _WITH_NAME.search(joined)
        if positional and text.is_string_literal(positional[0]):
            name = positional[0]
        elif "tag" in keywords or "name" in keywords:
            name = keywords.get("tag") or keywords["name"]
        elif named:
            name = named.group(1)
        elif method == "check_region" or "Target.region(" in joined:
            name = '"Region"'
        elif method == "check_window" or "Target.window(" in joined:
            name = '"Full Page"'
        else:
            name = DEFAULT_NAME
        edits.append((call.start, call.end, snapshot_call(DRIVER, name)))

    if not edits:
        return RuleOutcome(content=source, warnings=warnings)
    return RuleOutcome(content=text.splice(source, edits), warnings=warnings, snapshot_count=len(edits))


# ---------------------------------------------------------------------------
# Sauce Labs Visual
# ---------------------------------------------------------------------------

_SAUCE_CHECK = re.compile(r"(?<![.\w])\w+\.sauce_visual_check\s*\(")
_SAUCE_BUILD = re.compile(r"^[ \t]*(?:[\w.]+\s*=\s*)?\w+\.(?:create_visual_build|finish_visual_build)\s*\(", re.M)


def remove_sauce_builds(source: str, context: TransformContext) -> RuleOutcome:
    edits = []
    for call in text.iter_calls(source, _SAUCE_BUILD):
        span = text.statement_span(source, call.start, call.end)
        if span is not None:
            edits.append((span[0], span[1], ""))
    if not edits:
        return RuleOutcome(content=source)
    return RuleOutcome(content=text.splice(source, edits))


def rewrite_sauce_checks(source: str, context: TransformContext) -> RuleOutcome:
    edits = []
    warnings: list[TransformationWarning] = []
    for call in text.iter_calls(source, _SAUCE_CHECK):
        positional = _positional(call.args)
        keywords = _keywords(call.args)
        for key in keywords:
            if key != "name":
                warnings.append(_dropped("Sauce Labs", key))
        edits.append((call.start, call.end, snapshot_call(DRIVER, _name_from(positional, keywords, 0))))
    if not edits:
        return RuleOutcome(content=source, warnings=warnings)
    return RuleOutcome(content=text.splice(source, edits), warnings=warnings, snapshot_count=len(edits))


# ---------------------------------------------------------------------------
# Shared
# ---------------------------------------------------------------------------

_NATIVE_CONTEXT = re.compile(r"\w+\.switch_to\.context\s*\(\s*[\"']NATIVE_APP[\"']\s*\)")


def report_native_context(source: str, context: TransformContext) -> RuleOutcome:
    """Count hybrid-app context switches; they are left untouched."""
    found = len(_NATIVE_CONTEXT.findall(source))
    if not found:
        return RuleOutcome(content=source)
    return RuleOutcome(
        content=source,
        warnings=[
            TransformationWarning(
                message=f"Found {found} native context switching call(s)",
                details="Native context switching calls have been preserved to maintain hybrid app testing functionality.",
            )
        ],
    )


# ---------------------------------------------------------------------------
# Robot Framework
# ---------------------------------------------------------------------------

_ROBOT_SNAPSHOT = re.compile(r"^([ \t]+)Visual Snapshot(?=\s|$)", re.M)
_ROBOT_BUILD = re.compile(r"^[ \t]*(?:\$\{\w+\}=?\s+)?(?:Create|Finish) Visual Build\b[^\n]*(?:\r?\n|$)", re.M)
_ROBOT_LIBRARY = re.compile(r"^(Library(?: {2,}|\t)[ \t]*)SauceLabsVisual\S*", re.M)


def rewrite_robot_keywords(source: str, context: TransformContext) -> RuleOutcome:
    content, count = _ROBOT_SNAPSHOT.subn(r"\1SmartUI Snapshot", source)
    content = _ROBOT_BUILD.sub("", content)
    content = _ROBOT_LIBRARY.sub(r"\1LambdaTestSmartUI", content)
    return RuleOutcome(content=content, snapshot_count=count)


# ---------------------------------------------------------------------------
# Transformers
# ---------------------------------------------------------------------------

class PythonTransformer(RuleTransformer):
    """Routes .py files through `rules` and .robot files through `robot_rules`."""

    handles_suffixes = (".py", ".robot")
    robot_rules: tuple[Rule, ...] = ()

    def transform(self, source: str, context: TransformContext) -> TransformationResult:
        suffix = PurePosixPath(context.file_path).suffix
        if suffix == ".robot":
            if not self.robot_rules:
                return TransformationResult(
                    content=source,
                    warnings=[
                        TransformationWarning(
                            message=f"Robot Framework transformation not yet implemented for {context.platform.value}",
                            details="Currently only Sauce Labs Visual Robot Framework files are supported.",
                        )
                    ],
                )
            return apply_rules(self.robot_rules, source, context)
        if suffix not in ("", ".py"):
            return TransformationResult(
                content=source,
                warnings=[TransformationWarning(message=f"Unsupported file type: {context.file_path}")],
            )
        return apply_rules(self.rules, source, context)


class PercyPythonTransformer(PythonTransformer):
    name = "percy-python"
    rules = (
        make_import_rule("percy"),
        rewrite_percy_snapshots,
        rewrite_percy_screenshots,
        report_native_context,
    )


class ApplitoolsPythonTransformer(PythonTransformer):
    name = "applitools-python"
    rules = (
        make_import_rule("applitools"),
        remove_eyes_lifecycle,
        rewrite_eyes_checks,
        report_native_context,
    )


class SaucePythonTransformer(PythonTransformer):
    name = "sauce-python"
    rules = (
        make_import_rule("saucelabs_visual"),
        remove_sauce_builds,
        rewrite_sauce_checks,
        report_native_context,
    )
    robot_rules = (rewrite_robot_keywords,)

