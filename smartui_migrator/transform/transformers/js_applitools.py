"""Applitools Eyes -> SmartUI rewrite rules for JavaScript / TypeScript.

Rules, in order:
1. Module specifiers: @applitools/eyes-<sdk> -> @lambdatest/smartui-<sdk>.
2. Lifecycle: eyes.open / eyes.close / eyes.closeAsync and the Cypress
   cy.eyesOpen / cy.eyesClose statements are removed.
3. Checks: eyes.check(...), eyes.checkWindow(...) and cy.eyesCheckWindow(...)
   become smartuiSnapshot(name, options), translating Target.* fluent
   chains and option objects.
4. Unused `new Eyes()` and runner instances are removed; used ones warn.
5. SmartUI import lists lose unused Applitools names and gain smartuiSnapshot
   when the file calls it. Names still referenced stay, with a warning.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from smartui_migrator.platforms import Framework
from smartui_migrator.transform.transformers import js_ast
from smartui_migrator.transform.transformers.javascript import (
    SMARTUI_MODULE_PREFIX,
    JavaScriptTransformer,
    make_import_rule,
    pattern_bindings,
    smartui_bindings,
)
from smartui_migrator.transform.types import RuleOutcome, TransformationWarning, TransformContext

logger = logging.getLogger(__name__)

SMARTUI_FN = "smartuiSnapshot"
DEFAULT_NAME = "Untitled Snapshot"

APPLITOOLS_MODULES: dict[str, str] = {
    "@applitools/eyes-cypress": "@lambdatest/smartui-cypress",
    "@applitools/eyes-playwright": "@lambdatest/smartui-playwright",
    "@applitools/eyes-selenium": "@lambdatest/smartui-selenium",
    "@applitools/eyes-puppeteer": "@lambdatest/smartui-puppeteer",
}

# (object, method) pairs whose statements are dropped.
LIFECYCLE_CALLS = {
    ("eyes", "open"),
    ("eyes", "close"),
    ("eyes", "closeAsync"),
    ("cy", "eyesOpen"),
    ("cy", "eyesClose"),
}

CHECK_CALLS = {
    ("eyes", "check"),
    ("eyes", "checkWindow"),
    ("cy", "eyesCheckWindow"),
}

LAYOUT_NOTE = (
    "// MIGRATION-NOTE: Applitools layout matching has no SmartUI equivalent. "
    "The region is asserted visible and its contents are ignored."
)

FULLY_WARNING = TransformationWarning(
    message=(
        "Applitools `fully()` was detected. To achieve full-page screenshots in "
        "SmartUI, please ensure your viewports in `.smartui.json` are defined "
        "with a single width value (e.g., `[1920]`)."
    ),
    details="SmartUI captures full-page screenshots when a viewport has no height.",
)


@dataclass
class _Snapshot:
    """Everything collected from one check call."""

    name: Optional[str] = None  # source text of the name literal
    quote: str = "'"
    element: Optional[str] = None
    ignore: list[str] = field(default_factory=list)
    layout: list[str] = field(default_factory=list)
    fully: bool = False
    dropped: list[str] = field(default_factory=list)

    def options_text(self) -> str:
        items = []
        if self.element:
            items.append(f"element: {{ cssSelector: {self.element} }}")
        if self.ignore:
            items.append(f"ignoreDOM: {{ cssSelector: [{', '.join(self.ignore)}] }}")
        return "{ " + ", ".join(items) + " }" if items else ""


def _is_lifecycle(node) -> bool:
    node = js_ast.unwrap(node)
    if node is None or node.type != "call_expression":
        return False
    obj, name, _ = js_ast.callee(node)
    return (obj, name) in LIFECYCLE_CALLS


def remove_lifecycle_calls(source: str, context: TransformContext) -> RuleOutcome:
    tree = js_ast.parse(source, context.file_path)
    src = source.encode("utf-8")
    edits: list[js_ast.Edit] = []

    for stmt in js_ast.nodes_of_type(tree.root_node, "expression_statement", "lexical_declaration", "variable_declaration"):
        if stmt.type == "expression_statement":
            inner = [c for c in stmt.named_children if c.type != "comment"]
            target = inner[0] if inner else None
        else:
            declarators = [c for c in stmt.named_children if c.type == "variable_declarator"]
            if len(declarators) != 1:
                continue
            target = declarators[0].child_by_field_name("value")
        if _is_lifecycle(target):
            edits.append(js_ast.statement_removal(src, stmt))

    if not edits:
        return RuleOutcome(content=source)
    logger.debug("Removed %d Applitools lifecycle statements", len(edits))
    return RuleOutcome(content=js_ast.apply_edits(source, edits))


def _selector_text(node) -> Optional[str]:
    """Selector expression as source text; objects contribute their `selector`."""
    node = js_ast.unwrap(node)
    if node is None:
        return None
    if node.type == "object":
        for key, member in js_ast.object_pairs(node):
            if key == "selector":
                return _selector_text(js_ast.pair_value(member))
        return None
    return js_ast.node_text(node)


def _array_selectors(node) -> list[str]:
    node = js_ast.unwrap(node)
    if node is None:
        return []
    if node.type != "array":
        text = _selector_text(node)
        return [text] if text else []
    out = []
    for child in node.named_children:
        if child.type == "comment":
            continue
        text = _selector_text(child)
        if text:
            out.append(text)
    return out


def _target_chain(node) -> Optional[list[tuple[str, list]]]:
    """[(method, args), ...] innermost first for `Target.x(...).y(...)`."""
    chain: list[tuple[str, list]] = []
    current = js_ast.unwrap(node)
    while current is not None and current.type == "call_expression":
        fn = current.child_by_field_name("function")
        if fn is None or fn.type != "member_expression":
            return None
        prop = fn.child_by_field_name("property")
        chain.append((js_ast.node_text(prop), js_ast.arguments(current)))
        current = fn.child_by_field_name("object")
    if current is None or current.type != "identifier" or js_ast.node_text(current) != "Target":
        return None
    chain.reverse()
    return chain


def _apply_target(snap: _Snapshot, chain: list[tuple[str, list]]) -> None:
    for method, args in chain:
        first = args[0] if args else None
        if method == "window":
            continue
        if method == "fully":
            if first is None or js_ast.node_text(first) != "false":
                snap.fully = True
        elif method == "region":
            snap.element = _selector_text(first)
        elif method == "layout":
            sel = js_ast.string_value(first)
            if sel is None:
                snap.dropped.append("layout()")
            else:
                snap.layout.append(sel)
        elif method in ("ignore", "ignoreRegions", "ignoreRegion"):
            for arg in args:
                snap.ignore.extend(_array_selectors(arg))
        else:
            snap.dropped.append(f"{method}()")


def _apply_options(snap: _Snapshot, obj) -> None:
    for key, member in js_ast.object_pairs(obj):
        value = js_ast.pair_value(member)
        if key in ("tag", "name") and snap.name is None and value is not None:
            snap.name = js_ast.node_text(value)
            snap.quote = js_ast.quote_of(value)
        elif key == "fully":
            if value is None or js_ast.node_text(value) != "false":
                snap.fully = True
        elif key == "ignore":
            snap.ignore.extend(_array_selectors(value))
        elif key == "selector":
            snap.element = _selector_text(value)
        elif key == "target":
            continue
        elif key is not None:
            snap.dropped.append(key)


def _layout_lines(framework: Framework, selector: str, quote: str) -> list[str]:
    literal = js_ast.js_string(selector, quote)
    if framework == Framework.PLAYWRIGHT:
        assertion = f"await expect(page.locator({literal})).toBeVisible();"
    else:
        assertion = f"cy.get({literal}).should('be.visible');"
    return [LAYOUT_NOTE, assertion]


def rewrite_check_calls(source: str, context: TransformContext) -> RuleOutcome:
    tree = js_ast.parse(source, context.file_path)
    src = source.encode("utf-8")
    edits: list[js_ast.Edit] = []
    warnings: list[TransformationWarning] = []
    count = 0

    for call in js_ast.nodes_of_type(tree.root_node, "call_expression"):
        obj, name, _ = js_ast.callee(call)
        if (obj, name) not in CHECK_CALLS:
            continue

        snap = _Snapshot()
        for arg in js_ast.arguments(call):
            arg = js_ast.unwrap(arg)
            if arg is None:
                continue
            if arg.type in ("string", "template_string"):
                if snap.name is None:
                    snap.name = js_ast.node_text(arg)
                    snap.quote = js_ast.quote_of(arg)
            elif arg.type == "object":
                _apply_options(snap, arg)
            else:
                chain = _target_chain(arg)
                if chain is not None:
                    _apply_target(snap, chain)

        for selector in snap.layout:
            snap.ignore.append(js_ast.js_string(f"{selector} *", snap.quote))
            edits.append(
                js_ast.insert_before_statement(
                    src, call, _layout_lines(context.framework, selector, snap.quote)
                )
            )

        if snap.fully:
            warnings.append(FULLY_WARNING)
        for construct in snap.dropped:
            warnings.append(
                TransformationWarning(
                    message=f"Applitools `{construct}` has no SmartUI equivalent and was dropped.",
                    details="Review the snapshot options after migration.",
                )
            )

        fn = "cy." + SMARTUI_FN if obj == "cy" else SMARTUI_FN
        args = [snap.name or js_ast.js_string(DEFAULT_NAME, snap.quote)]
        options = snap.options_text()
        if options:
            args.append(options)
        edits.append(js_ast.Edit(call.start_byte, call.end_byte, f"{fn}({', '.join(args)})"))
        count += 1

    if not edits:
        return RuleOutcome(content=source, warnings=warnings)
    return RuleOutcome(content=js_ast.apply_edits(source, edits), warnings=warnings, snapshot_count=count)


# ---------------------------------------------------------------------------
# Leftover Eyes instances and bindings
# ---------------------------------------------------------------------------

EYES_CONSTRUCTORS = {"Eyes", "ClassicRunner", "VisualGridRunner"}

_REFERENCE_TYPES = ("identifier", "type_identifier", "shorthand_property_identifier")


def _references(root, name: str, skip) -> int:
    """Occurrences of `name` outside the `skip` node."""
    count = 0
    for node in js_ast.walk(root):
        if node.type not in _REFERENCE_TYPES or js_ast.node_text(node) != name:
            continue
        if skip.start_byte <= node.start_byte and node.end_byte <= skip.end_byte:
            continue
        count += 1
    return count


def _constructed(node) -> Optional[str]:
    node = js_ast.unwrap(node)
    if node is None or node.type != "new_expression":
        return None
    ctor = node.child_by_field_name("constructor")
    if ctor is None or ctor.type != "identifier":
        return None
    name = js_ast.node_text(ctor)
    return name if name in EYES_CONSTRUCTORS else None


def _assignment(stmt) -> tuple:
    """(target, value) of a single-binding declaration or assignment statement."""
    if stmt.type == "expression_statement":
        inner = [c for c in stmt.named_children if c.type != "comment"]
        if not inner or inner[0].type != "assignment_expression":
            return None, None
        return inner[0].child_by_field_name("left"), inner[0].child_by_field_name("right")
    declarators = [c for c in stmt.named_children if c.type == "variable_declarator"]
    if len(declarators) != 1:
        return None, None
    return declarators[0].child_by_field_name("name"), declarators[0].child_by_field_name("value")


def remove_eyes_instances(source: str, context: TransformContext) -> RuleOutcome:
    """Drop `new Eyes()` / runner statements whose variable is no longer used."""
    tree = js_ast.parse(source, context.file_path)
    root = tree.root_node
    src = source.encode("utf-8")
    edits: list[js_ast.Edit] = []
    warnings: list[TransformationWarning] = []

    for stmt in js_ast.nodes_of_type(root, "lexical_declaration", "variable_declaration", "expression_statement"):
        target, value = _assignment(stmt)
        ctor = _constructed(value)
        if ctor is None or target is None:
            continue
        var = js_ast.node_text(target)
        if target.type == "identifier" and _references(root, var, stmt) == 0:
            edits.append(js_ast.statement_removal(src, stmt))
            continue
        warnings.append(
            TransformationWarning(
                message=f"Applitools `new {ctor}()` at line {stmt.start_point[0] + 1} is still in use as `{var}`.",
                details="Remove the instance and its remaining calls once the migration is reviewed.",
            )
        )

    if not edits:
        return RuleOutcome(content=source, warnings=warnings)
    logger.debug("Removed %d unused Applitools instances", len(edits))
    return RuleOutcome(content=js_ast.apply_edits(source, edits), warnings=warnings)


def _named_smartui_imports(root) -> list[tuple]:
    """(statement, list node, module, [(local, imported, text)]) per SmartUI import list."""
    found = []
    for node in js_ast.walk(root):
        if node.type == "import_statement":
            module = js_ast.string_value(node.child_by_field_name("source")) or ""
            if not module.startswith(SMARTUI_MODULE_PREFIX):
                continue
            for clause in node.named_children:
                if clause.type != "import_clause":
                    continue
                for part in clause.named_children:
                    if part.type != "named_imports":
                        continue
                    items = []
                    for spec in part.named_children:
                        name = spec.child_by_field_name("name")
                        if spec.type != "import_specifier" or name is None:
                            continue
                        local = spec.child_by_field_name("alias") or name
                        items.append((js_ast.node_text(local), js_ast.node_text(name), js_ast.node_text(spec)))
                    removable = len(clause.named_children) == 1
                    found.append((node, part, module, items, removable))
        elif node.type == "variable_declarator":
            pattern = node.child_by_field_name("name")
            value = js_ast.unwrap(node.child_by_field_name("value"))
            if pattern is None or pattern.type != "object_pattern" or value is None:
                continue
            if value.type != "call_expression" or js_ast.callee(value)[1] != "require":
                continue
            args = js_ast.arguments(value)
            module = js_ast.string_value(args[0]) if args else None
            if not module or not module.startswith(SMARTUI_MODULE_PREFIX):
                continue
            items = [(local, imported, js_ast.node_text(n)) for n, local, imported in pattern_bindings(pattern)]
            stmt = node.parent
            removable = stmt is not None and len(
                [c for c in stmt.named_children if c.type == "variable_declarator"]
            ) == 1
            found.append((stmt or node, pattern, module, items, removable))
    return found


def clean_smartui_bindings(source: str, context: TransformContext) -> RuleOutcome:
    """Drop unused Applitools names from SmartUI imports and bind smartuiSnapshot."""
    tree = js_ast.parse(source, context.file_path)
    root = tree.root_node
    src = source.encode("utf-8")
    edits: list[js_ast.Edit] = []
    warnings: list[TransformationWarning] = []

    bound = any(local == SMARTUI_FN for _, local, _ in smartui_bindings(root))
    called = any(
        js_ast.callee(call)[:2] == (None, SMARTUI_FN)
        for call in js_ast.nodes_of_type(root, "call_expression")
    )
    needs_binding = called and not bound

    for stmt, list_node, module, items, removable in _named_smartui_imports(root):
        kept = []
        for local, imported, item_text in items:
            if imported == SMARTUI_FN:
                kept.append(item_text)
                continue
            if _references(root, local, stmt) == 0:
                continue
            kept.append(item_text)
            warnings.append(
                TransformationWarning(
                    message=f"Applitools binding `{local}` is still referenced, but `{module}` does not export it.",
                    details="Replace the remaining Applitools calls with smartuiSnapshot.",
                )
            )
        if needs_binding:
            kept.append(SMARTUI_FN)
            needs_binding = False

        if kept == [text for _, _, text in items]:
            continue
        if kept:
            edits.append(js_ast.Edit(list_node.start_byte, list_node.end_byte, "{ " + ", ".join(kept) + " }"))
        elif removable:
            edits.append(js_ast.statement_removal(src, stmt))
        else:
            edits.append(js_ast.Edit(list_node.start_byte, list_node.end_byte, "{}"))

    if not edits:
        return RuleOutcome(content=source, warnings=warnings)
    return RuleOutcome(content=js_ast.apply_edits(source, edits), warnings=warnings)


class ApplitoolsJavaScriptTransformer(JavaScriptTransformer):
    name = "applitools-javascript"
    rules = (
        make_import_rule(APPLITOOLS_MODULES),
        remove_lifecycle_calls,
        rewrite_check_calls,
        remove_eyes_instances,
        clean_smartui_bindings,
    )
