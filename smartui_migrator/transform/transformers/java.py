"""Java rewrite rules for Percy, Applitools and Sauce Labs Visual.

Every platform's visual call becomes
``SmartUISnapshot.smartuiSnapshot(driver, "name")`` and its imports collapse
into a single ``import io.github.lambdatest.SmartUISnapshot;``.
"""

import logging
import re

from smartui_migrator.transform.transformers import text
from smartui_migrator.transform.transformers.base import Rule, RuleTransformer
from smartui_migrator.transform.types import RuleOutcome, TransformationWarning, TransformContext

logger = logging.getLogger(__name__)

SMARTUI_IMPORT = "import io.github.lambdatest.SmartUISnapshot;"
SMARTUI_CALL = "SmartUISnapshot.smartuiSnapshot"
DEFAULT_NAME = '"Untitled Snapshot"'

_STRING = r'"(?:[^"\\]|\\.)*"'


def snapshot_call(name: str) -> str:
    return f"{SMARTUI_CALL}(driver, {name})"


# ---------------------------------------------------------------------------
# Imports
# ---------------------------------------------------------------------------

def make_import_rule(package: str) -> Rule:
    """Rule replacing imports under `package` with the SmartUI import."""
    pattern = re.compile(
        rf"^\s*import\s+(?:static\s+)?{re.escape(package)}\.[\w.]*(?:\*)?\s*;\s*$"
    )

    def rewrite_imports(source: str, context: TransformContext) -> RuleOutcome:
        lines = source.splitlines(keepends=True)
        seen = any(line.strip() == SMARTUI_IMPORT for line in lines)
        out: list[str] = []
        changed = False
        for line in lines:
            if not pattern.match(line):
                out.append(line)
                continue
            changed = True
            if seen:
                continue
            seen = True
            body = line.rstrip("\r\n")
            indent = body[: len(body) - len(body.lstrip())]
            out.append(indent + SMARTUI_IMPORT + line[len(body):])
        if not changed:
            return RuleOutcome(content=source)
        return RuleOutcome(content="".join(out))

    return rewrite_imports


# ---------------------------------------------------------------------------
# Percy
# ---------------------------------------------------------------------------

_PERCY_DECL = re.compile(r"\b(?:App)?Percy\s+(\w+)\s*[=;,)]")


def percy_receivers(source: str) -> set[str]:
    """Names of variables and fields declared as Percy or AppPercy, plus `percy`."""
    return {"percy", "Percy", *_PERCY_DECL.findall(source)}


def rewrite_percy_calls(source: str, context: TransformContext) -> RuleOutcome:
    receivers = "|".join(re.escape(n) for n in sorted(percy_receivers(source)))
    pattern = re.compile(rf"(?<![\w.])(?:this\.)?(?:{receivers})\.(?:snapshot|screenshot)\s*\(")
    edits = []
    warnings: list[TransformationWarning] = []
    for call in text.iter_calls(source, pattern):
        name = call.args[0] if call.args else DEFAULT_NAME
        if len(call.args) > 1:
            warnings.append(
                TransformationWarning(
                    message="Percy snapshot options were dropped from a Java snapshot call.",
                    details="Configure widths and other options in .smartui.json.",
                )
            )
        edits.append((call.start, call.end, snapshot_call(name)))
    if not edits:
        return RuleOutcome(content=source)
    return RuleOutcome(content=text.splice(source, edits), warnings=warnings, snapshot_count=len(edits))


# ---------------------------------------------------------------------------
# Applitools
# ---------------------------------------------------------------------------

_EYES_DECL = re.compile(r"\bEyes\s+(\w+)\s*[=;,)]")
_LIFECYCLE = ("open", "close", "closeAsync", "abortIfNotClosed", "abort")
_WITH_NAME = re.compile(rf"\.withName\(\s*({_STRING})\s*\)")

FULLY_WARNING = TransformationWarning(
    message=(
        "Applitools `fully()` was detected. To achieve full-page screenshots in "
        "SmartUI, please ensure your viewports in `.smartui.json` are defined "
        "with a single width value (e.g., `[1920]`)."
    ),
    details="SmartUI captures full-page screenshots when a viewport has no height.",
)

LAYOUT_WARNING = TransformationWarning(
    message="Applitools layout matching has no SmartUI equivalent; the check was migrated as a plain snapshot.",
    details="Use ignoreDOM in the snapshot options to exclude dynamic content.",
)


def eyes_receivers(source: str) -> set[str]:
    """Names of variables and fields declared as Eyes, plus `eyes`."""
    return {"eyes", *_EYES_DECL.findall(source)}


def _receiver_group(names: set[str]) -> str:
    return "|".join(re.escape(n) for n in sorted(names))


def remove_eyes_lifecycle(source: str, context: TransformContext) -> RuleOutcome:
    receivers = _receiver_group(eyes_receivers(source))
    pattern = re.compile(
        rf"^[ \t]*(?:\w+\s*=\s*)?(?:{receivers})\.(?:{'|'.join(_LIFECYCLE)})\s*\(",
        re.M,
    )
    edits = []
    for call in text.iter_calls(source, pattern):
        span = text.statement_span(source, call.start, call.end, ";")
        if span is not None:
            edits.append((span[0], span[1], ""))
    if not edits:
        return RuleOutcome(content=source)
    logger.debug("Removed %d Applitools lifecycle statements", len(edits))
    return RuleOutcome(content=text.splice(source, edits))


def _eyes_name(method: str, args: list[str]) -> tuple[str, list[TransformationWarning]]:
    warnings: list[TransformationWarning] = []
    joined = ", ".join(args)
    if ".fully(" in joined and ".fully(false)" not in joined:
        warnings.append(FULLY_WARNING)
    if "Target.layout(" in joined:
        warnings.append(LAYOUT_WARNING)

    if args and text.is_string_literal(args[0]):
        return args[0], warnings
    named = _WITH_NAME.search(joined)
    if named:
        return named.group(1), warnings
    if "Target.region(" in joined or method == "checkRegion":
        return '"Region"', warnings
    if "Target.layout(" in joined:
        return '"Layout"', warnings
    if "Target.window(" in joined or method == "checkWindow":
        return '"Full Page"', warnings
    return DEFAULT_NAME, warnings


def rewrite_eyes_checks(source: str, context: TransformContext) -> RuleOutcome:
    receivers = _receiver_group(eyes_receivers(source))
    pattern = re.compile(rf"\b(?:{receivers})\.(check|checkWindow|checkRegion)\s*\(")
    edits = []
    warnings: list[TransformationWarning] = []
    for call in text.iter_calls(source, pattern):
        name, call_warnings = _eyes_name(call.match.group(1), call.args)
        warnings.extend(call_warnings)
        edits.append((call.start, call.end, snapshot_call(name)))

    declared = _EYES_DECL.search(text.splice(source, edits) if edits else source)
    if declared:
        warnings.append(
            TransformationWarning(
                message=f"Applitools `Eyes` instance `{declared.group(1)}` is still declared.",
                details="Remove the Eyes field and its setup once the migration is reviewed.",
            )
        )
    if not edits:
        return RuleOutcome(content=source, warnings=warnings)
    return RuleOutcome(content=text.splice(source, edits), warnings=warnings, snapshot_count=len(edits))


# ---------------------------------------------------------------------------
# Sauce Labs Visual
# ---------------------------------------------------------------------------

_SAUCE_CALL = re.compile(r"\b\w+\.sauceVisualCheck\s*\(")


def rewrite_sauce_calls(source: str, context: TransformContext) -> RuleOutcome:
    edits = []
    warnings: list[TransformationWarning] = []
    for call in text.iter_calls(source, _SAUCE_CALL):
        name = call.args[0] if call.args else DEFAULT_NAME
        if len(call.args) > 1:
            warnings.append(
                TransformationWarning(
                    message="Sauce Labs `CheckOptions` were dropped from a Java visual check.",
                    details="Configure ignored regions through SmartUI snapshot options.",
                )
            )
        edits.append((call.start, call.end, snapshot_call(name)))
    if not edits:
        return RuleOutcome(content=source)
    return RuleOutcome(content=text.splice(source, edits), warnings=warnings, snapshot_count=len(edits))


class JavaTransformer(RuleTransformer):
    handles_suffixes = (".java",)


class PercyJavaTransformer(JavaTransformer):
    name = "percy-java"
    rules = (make_import_rule("io.percy"), rewrite_percy_calls)


class ApplitoolsJavaTransformer(JavaTransformer):
    name = "applitools-java"
    rules = (make_import_rule("com.applitools.eyes"), remove_eyes_lifecycle, rewrite_eyes_checks)


class SauceJavaTransformer(JavaTransformer):
    name = "sauce-java"
    rules = (make_import_rule("com.saucelabs.visual"), rewrite_sauce_calls)
