"""Sauce Labs Visual -> SmartUI rewrite rules for JavaScript / TypeScript.

Rules, in order:
1. Module specifiers: @saucelabs/* plugins -> @lambdatest/smartui-*.
2. Call sites: sauceVisualCheck(...), cy.sauceVisualCheck(...) and
   browser.sauceVisualCheck(...) become smartuiSnapshot(name, options),
   translating the Sauce option object.
"""

import logging
from typing import Optional

from smartui_migrator.transform.transformers import js_ast
from smartui_migrator.transform.transformers.javascript import JavaScriptTransformer, make_import_rule
from smartui_migrator.transform.types import RuleOutcome, TransformationWarning, TransformContext

logger = logging.getLogger(__name__)

SMARTUI_FN = "smartuiSnapshot"
SAUCE_FN = "sauceVisualCheck"
DEFAULT_NAME = "Untitled Snapshot"

SAUCE_MODULES: dict[str, str] = {
    "@saucelabs/cypress-plugin": "@lambdatest/smartui-cypress",
    "@saucelabs/cypress-visual-plugin": "@lambdatest/smartui-cypress",
    "@saucelabs/webdriverio": "@lambdatest/smartui-selenium",
    "@saucelabs/playwright-plugin": "@lambdatest/smartui-playwright",
}

# Receivers the check is called on; None is a bare function call.
SAUCE_RECEIVERS = {None, "cy", "browser"}

# Accepted but meaningless for SmartUI; dropped without a warning.
_SILENT_KEYS = {"captureDom"}

DIFFING_WARNING = TransformationWarning(
    message=(
        "Sauce Labs' custom `diffingMethod` and `diffingOptions` are not "
        "supported by SmartUI. The snapshot will be compared using SmartUI's "
        "default algorithm. Please review the results carefully."
    ),
    details="Tune comparison sensitivity in the SmartUI project settings instead.",
)


def _selectors(node) -> list[str]:
    """Source text of each selector in an ignoredRegions value."""
    node = js_ast.unwrap(node)
    if node is None:
        return []
    elements = node.named_children if node.type == "array" else [node]
    out = []
    for child in elements:
        if child.type == "comment":
            continue
        if child.type == "object":
            for key, member in js_ast.object_pairs(child):
                if key in ("selector", "cssSelector"):
                    value = js_ast.pair_value(member)
                    if value is not None:
                        out.append(js_ast.node_text(value))
            continue
        out.append(js_ast.node_text(child))
    return out


def _translate_options(obj) -> tuple[list[str], list[TransformationWarning]]:
    items: list[str] = []
    warnings: list[TransformationWarning] = []
    ignore: list[str] = []
    element: Optional[str] = None
    diffing = False

    for key, member in js_ast.object_pairs(obj):
        value = js_ast.pair_value(member)
        value_text = js_ast.node_text(value) if value is not None else (key or "")
        if key == "ignoredRegions":
            ignore.extend(_selectors(value))
        elif key == "clipSelector":
            element = value_text
        elif key in ("diffingMethod", "diffingOptions"):
            diffing = True
        elif key in _SILENT_KEYS:
            continue
        elif key is not None:
            warnings.append(
                TransformationWarning(
                    message=f"Sauce Labs option `{key}` has no SmartUI equivalent and was dropped.",
                    details="Review the snapshot options after migration.",
                )
            )

    if element:
        items.append(f"element: {{ cssSelector: {element} }}")
    if ignore:
        items.append(f"ignoreDOM: {{ cssSelector: [{', '.join(ignore)}] }}")
    if diffing:
        warnings.append(DIFFING_WARNING)
    return items, warnings


def rewrite_check_calls(source: str, context: TransformContext) -> RuleOutcome:
    tree = js_ast.parse(source, context.file_path)
    edits: list[js_ast.Edit] = []
    warnings: list[TransformationWarning] = []
    count = 0

    for call in js_ast.nodes_of_type(tree.root_node, "call_expression"):
        obj, name, _ = js_ast.callee(call)
        if name != SAUCE_FN or obj not in SAUCE_RECEIVERS:
            continue

        snapshot_name: Optional[str] = None
        items: list[str] = []
        options_seen = False
        for arg in js_ast.arguments(call):
            arg = js_ast.unwrap(arg)
            if arg is None:
                continue
            if arg.type in ("string", "template_string") and snapshot_name is None:
                snapshot_name = js_ast.node_text(arg)
            elif arg.type == "object" and not options_seen:
                options_seen = True
                items, option_warnings = _translate_options(arg)
                warnings.extend(option_warnings)

        args = [snapshot_name or js_ast.js_string(DEFAULT_NAME)]
        if items:
            args.append("{ " + ", ".join(items) + " }")
        fn = "cy." + SMARTUI_FN if obj == "cy" else SMARTUI_FN
        edits.append(js_ast.Edit(call.start_byte, call.end_byte, f"{fn}({', '.join(args)})"))
        count += 1

    if not edits:
        return RuleOutcome(content=source, warnings=warnings)
    return RuleOutcome(content=js_ast.apply_edits(source, edits), warnings=warnings, snapshot_count=count)


class SauceJavaScriptTransformer(JavaScriptTransformer):
    name = "sauce-javascript"
    rules = (
        make_import_rule(SAUCE_MODULES),
        rewrite_check_calls,
    )
