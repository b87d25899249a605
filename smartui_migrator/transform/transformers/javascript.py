"""Shared pieces of the JavaScript / TypeScript transformers.

JavaScriptTransformer refuses to touch files tree-sitter cannot parse
cleanly: the content comes back unchanged with a single warning.
make_import_rule builds the module-specifier rewrite used by every
platform as its first rule.
"""

import logging

from smartui_migrator.transform.transformers import js_ast
from smartui_migrator.transform.transformers.base import Rule, RuleTransformer, apply_rules
from smartui_migrator.transform.types import (
    RuleOutcome,
    TransformationResult,
    TransformationWarning,
    TransformContext,
)

logger = logging.getLogger(__name__)

JS_SUFFIXES = (".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs", ".mts", ".cts")

SMARTUI_MODULE_PREFIX = "@lambdatest/smartui-"


class JavaScriptTransformer(RuleTransformer):
    handles_suffixes = JS_SUFFIXES

    def transform(self, source: str, context: TransformContext) -> TransformationResult:
        tree = js_ast.parse(source, context.file_path)
        if tree.root_node.has_error:
            logger.warning("Syntax errors in %s; leaving it unchanged", context.file_path)
            return TransformationResult(
                content=source,
                warnings=[
                    TransformationWarning(
                        message="Failed to parse source code: syntax error in "
                        f"{context.file_path or 'source'}",
                        details="The source file may contain unsupported syntax or be malformed.",
                    )
                ],
            )
        return apply_rules(self.rules, source, context)


def module_specifiers(root) -> list:
    """String nodes naming a module in import/export/require/import()."""
    found = []
    for node in js_ast.walk(root):
        if node.type in ("import_statement", "export_statement"):
            src = node.child_by_field_name("source")
            if src is not None and src.type == "string":
                found.append(src)
        elif node.type == "call_expression":
            fn = node.child_by_field_name("function")
            if fn is not None and fn.type in ("identifier", "import") and js_ast.node_text(fn) in ("require", "import"):
                args = js_ast.arguments(node)
                if args and args[0].type == "string":
                    found.append(args[0])
    return found


def make_import_rule(mapping: dict[str, str]) -> Rule:
    """Rule rewriting module specifiers found in `mapping`."""

    def rewrite_imports(source: str, context: TransformContext) -> RuleOutcome:
        tree = js_ast.parse(source, context.file_path)
        edits: list[js_ast.Edit] = []
        for node in module_specifiers(tree.root_node):
            target = mapping.get(js_ast.string_value(node) or "")
            if target is None:
                continue
            edits.append(
                js_ast.Edit(node.start_byte + 1, node.end_byte - 1, target)
            )
        if not edits:
            return RuleOutcome(content=source)
        return RuleOutcome(content=js_ast.apply_edits(source, edits))

    return rewrite_imports


def smartui_bindings(root) -> list[tuple]:
    """Local bindings created by imports of SmartUI modules.

    Returns (node, local name, imported name) triples. `node` is the span to
    replace when renaming the binding. Default imports and `require()`
    results report None as the imported name.
    """
    bindings = []
    for node in js_ast.walk(root):
        if node.type == "import_statement":
            src = js_ast.string_value(node.child_by_field_name("source"))
            if not src or not src.startswith(SMARTUI_MODULE_PREFIX):
                continue
            for clause in node.named_children:
                if clause.type != "import_clause":
                    continue
                for part in clause.named_children:
                    if part.type == "identifier":
                        bindings.append((part, js_ast.node_text(part), None))
                    elif part.type == "named_imports":
                        for spec in part.named_children:
                            if spec.type != "import_specifier":
                                continue
                            name = spec.child_by_field_name("name")
                            alias = spec.child_by_field_name("alias")
                            local = alias or name
                            if name is None or local is None:
                                continue
                            bindings.append(
                                (spec, js_ast.node_text(local), js_ast.node_text(name))
                            )
        elif node.type == "variable_declarator":
            value = js_ast.unwrap(node.child_by_field_name("value"))
            name = node.child_by_field_name("name")
            if value is None or name is None or value.type != "call_expression":
                continue
            _, fn_name, _ = js_ast.callee(value)
            args = js_ast.arguments(value)
            if fn_name != "require" or not args:
                continue
            src = js_ast.string_value(args[0])
            if not src or not src.startswith(SMARTUI_MODULE_PREFIX):
                continue
            if name.type == "identifier":
                bindings.append((name, js_ast.node_text(name), None))
            elif name.type == "object_pattern":
                bindings.extend(pattern_bindings(name))
    return bindings


def pattern_bindings(pattern) -> list[tuple]:
    """Bindings from `const { a, b: c } = require(...)`."""
    found = []
    for child in pattern.named_children:
        if child.type == "shorthand_property_identifier_pattern":
            text = js_ast.node_text(child)
            found.append((child, text, text))
        elif child.type == "pair_pattern":
            key = child.child_by_field_name("key")
            value = child.child_by_field_name("value")
            if key is not None and value is not None and value.type == "identifier":
                found.append((child, js_ast.node_text(value), js_ast.node_text(key)))
    return found
