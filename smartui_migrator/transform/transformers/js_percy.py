"""Percy -> SmartUI rewrite rules for JavaScript / TypeScript.

Rules, in order:
1. Module specifiers: @percy/<sdk> -> @lambdatest/smartui-<sdk>.
2. Call sites: percySnapshot(...) and <obj>.percySnapshot(...) become
   smartuiSnapshot(...). Bindings imported from the rewritten modules are
   renamed with them, so aliased imports keep working.
3. Options on smartuiSnapshot calls: Percy-only keys are translated or
   dropped with a warning.
"""

import logging

from smartui_migrator.transform.transformers import js_ast
from smartui_migrator.transform.transformers.javascript import (
    JavaScriptTransformer,
    make_import_rule,
    smartui_bindings,
)
from smartui_migrator.transform.types import RuleOutcome, TransformationWarning, TransformContext

logger = logging.getLogger(__name__)

SMARTUI_FN = "smartuiSnapshot"
PERCY_FN = "percySnapshot"

PERCY_MODULES: dict[str, str] = {
    "@percy/cypress": "@lambdatest/smartui-cypress",
    "@percy/playwright": "@lambdatest/smartui-playwright",
    "@percy/storybook": "@lambdatest/smartui-storybook",
    "@percy/selenium-webdriver": "@lambdatest/smartui-selenium",
    "@percy/puppeteer": "@lambdatest/smartui-puppeteer",
}

WIDTHS_COMMENT = (
    "// MIGRATION-WARNING: per-snapshot widths are not supported. "
    "Please configure viewports in your .smartui.json file."
)

_WIDTHS_WARNING = TransformationWarning(
    message=(
        "Per-snapshot `widths` option was found and is not supported. "
        "Viewports must be configured in `.smartui.json`."
    ),
    details="The option was removed; add the widths to web.viewports in .smartui.json.",
)

_PERCY_CSS_WARNING = TransformationWarning(
    message=(
        "Per-snapshot `percyCSS` option was found. SmartUI has no per-snapshot "
        "CSS injection, so the option was removed."
    ),
    details="Hide or restyle the affected elements with ignoreDOM or in the page under test.",
)

_PERCY_OPTION_KEYS = {"widths", "percyCSS", "ignore_region_selectors", "scope"}


def rewrite_snapshot_calls(source: str, context: TransformContext) -> RuleOutcome:
    tree = js_ast.parse(source, context.file_path)
    root = tree.root_node
    edits: list[js_ast.Edit] = []

    names = {PERCY_FN}
    for node, local, imported in smartui_bindings(root):
        if imported not in (None, PERCY_FN, SMARTUI_FN):
            continue
        if local != SMARTUI_FN:
            names.add(local)
        if js_ast.node_text(node) != SMARTUI_FN:
            edits.append(js_ast.Edit(node.start_byte, node.end_byte, SMARTUI_FN))

    count = 0
    for call in js_ast.nodes_of_type(root, "call_expression"):
        obj, name, name_node = js_ast.callee(call)
        if name is None:
            continue
        if (obj is None and name in names) or (obj is not None and name == PERCY_FN):
            edits.append(js_ast.Edit(name_node.start_byte, name_node.end_byte, SMARTUI_FN))
            count += 1

    if not edits:
        return RuleOutcome(content=source)
    return RuleOutcome(content=js_ast.apply_edits(source, edits), snapshot_count=count)


def translate_snapshot_options(source: str, context: TransformContext) -> RuleOutcome:
    tree = js_ast.parse(source, context.file_path)
    src = source.encode("utf-8")
    edits: list[js_ast.Edit] = []
    warnings: list[TransformationWarning] = []

    for call in js_ast.nodes_of_type(tree.root_node, "call_expression"):
        _, name, _ = js_ast.callee(call)
        if name != SMARTUI_FN:
            continue
        args = js_ast.arguments(call)
        if len(args) < 2:
            continue
        index = 2 if len(args) >= 3 else 1
        options = args[index]
        if options.type != "object":
            continue

        members = js_ast.object_pairs(options)
        if not {key for key, _ in members} & _PERCY_OPTION_KEYS:
            continue

        items: list[str] = []
        needs_comment = False
        for key, member in members:
            value = js_ast.pair_value(member)
            value_text = js_ast.node_text(value) if value is not None else key
            if key == "widths":
                warnings.append(_WIDTHS_WARNING)
                needs_comment = True
            elif key == "percyCSS":
                warnings.append(_PERCY_CSS_WARNING)
            elif key == "ignore_region_selectors":
                items.append(f"ignoreDOM: {{ cssSelector: {value_text} }}")
            elif key == "scope":
                items.append(f"element: {{ cssSelector: {value_text} }}")
            else:
                items.append(js_ast.node_text(member))

        if items:
            edits.append(
                js_ast.Edit(options.start_byte, options.end_byte, js_ast.render_object(src, options, items))
            )
        else:
            # Nothing left: drop the argument together with its separator.
            edits.append(js_ast.Edit(args[index - 1].end_byte, options.end_byte, ""))

        if needs_comment:
            edits.append(js_ast.insert_before_statement(src, call, [WIDTHS_COMMENT]))

    if not edits:
        return RuleOutcome(content=source, warnings=warnings)
    return RuleOutcome(content=js_ast.apply_edits(source, edits), warnings=warnings)


class PercyJavaScriptTransformer(JavaScriptTransformer):
    name = "percy-javascript"
    rules = (
        make_import_rule(PERCY_MODULES),
        rewrite_snapshot_calls,
        translate_snapshot_options,
    )
