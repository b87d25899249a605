"""tree-sitter helpers for JavaScript / TypeScript rewriting.

Rewrites are expressed as byte-span edits against the parsed source and
applied last to first, so earlier offsets stay valid. Nothing here knows
about a particular platform; the per-platform rules live in js_*.py.
"""

import logging
import re
from typing import Iterator, NamedTuple, Optional

import tree_sitter
import tree_sitter_javascript as tsjs
import tree_sitter_typescript as tsts

logger = logging.getLogger(__name__)

# Initialize languages once at module level
_JS_LANG = tree_sitter.Language(tsjs.language())
_TS_LANG = tree_sitter.Language(tsts.language_typescript())
_TSX_LANG = tree_sitter.Language(tsts.language_tsx())

# File extension to language mapping; anything else parses as JavaScript.
_LANG_MAP: dict[str, tree_sitter.Language] = {
    ".ts": _TS_LANG,
    ".mts": _TS_LANG,
    ".cts": _TS_LANG,
    ".tsx": _TSX_LANG,
}

_STATEMENT_TYPES = {
    "expression_statement",
    "lexical_declaration",
    "variable_declaration",
    "return_statement",
}

_ESCAPE = re.compile(r"\\(.)")
_ESCAPE_MAP = {"n": "\n", "t": "\t", "r": "\r"}


class Edit(NamedTuple):
    start: int
    end: int
    text: str


# ---------------------------------------------------------------------------
# Parsing and traversal
# ---------------------------------------------------------------------------

def parse(source: str, file_path: str = "") -> tree_sitter.Tree:
    suffix = "." + file_path.rsplit(".", 1)[-1] if "." in file_path else ""
    parser = tree_sitter.Parser(_LANG_MAP.get(suffix, _JS_LANG))
    return parser.parse(source.encode("utf-8"))


def node_text(node: tree_sitter.Node) -> str:
    return node.text.decode("utf-8")


def walk(node: tree_sitter.Node) -> Iterator[tree_sitter.Node]:
    """Pre-order traversal without recursion."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def nodes_of_type(root: tree_sitter.Node, *types: str) -> list[tree_sitter.Node]:
    return [n for n in walk(root) if n.type in types]


def unwrap(node: Optional[tree_sitter.Node]) -> Optional[tree_sitter.Node]:
    """Strip await, parentheses and TS `as`/`satisfies` wrappers."""
    while node is not None and node.type in (
        "await_expression",
        "parenthesized_expression",
        "as_expression",
        "satisfies_expression",
        "non_null_expression",
    ):
        inner = [c for c in node.named_children if c.type != "comment"]
        node = inner[0] if inner else None
    return node


# ---------------------------------------------------------------------------
# Calls and arguments
# ---------------------------------------------------------------------------

def callee(call: tree_sitter.Node) -> tuple[Optional[str], Optional[str], Optional[tree_sitter.Node]]:
    """Return (object text, called name, name node) for a call_expression.

    `foo(x)` gives (None, "foo", <foo>); `cy.foo(x)` gives ("cy", "foo", <foo>).
    """
    fn = call.child_by_field_name("function")
    if fn is None:
        return None, None, None
    if fn.type == "identifier":
        return None, node_text(fn), fn
    if fn.type == "member_expression":
        obj = fn.child_by_field_name("object")
        prop = fn.child_by_field_name("property")
        if prop is None:
            return None, None, None
        return (node_text(obj) if obj is not None else None), node_text(prop), prop
    return None, None, None


def arguments(call: tree_sitter.Node) -> list[tree_sitter.Node]:
    args = call.child_by_field_name("arguments")
    if args is None:
        return []
    return [a for a in args.named_children if a.type != "comment"]


def enclosing_statement(node: tree_sitter.Node) -> Optional[tree_sitter.Node]:
    current = node.parent
    while current is not None:
        if current.type in _STATEMENT_TYPES:
            return current
        current = current.parent
    return None


def object_pairs(obj: tree_sitter.Node) -> list[tuple[Optional[str], tree_sitter.Node]]:
    """(key, node) for each member of an object literal.

    The key is None for spreads, methods and computed keys, which callers
    keep verbatim.
    """
    members: list[tuple[Optional[str], tree_sitter.Node]] = []
    for child in obj.named_children:
        if child.type == "comment":
            continue
        if child.type == "pair":
            members.append((property_key(child.child_by_field_name("key")), child))
        elif child.type == "shorthand_property_identifier":
            members.append((node_text(child), child))
        else:
            members.append((None, child))
    return members


def property_key(key: Optional[tree_sitter.Node]) -> Optional[str]:
    if key is None:
        return None
    if key.type in ("property_identifier", "identifier", "number"):
        return node_text(key)
    if key.type == "string":
        return string_value(key)
    return None


def pair_value(pair: tree_sitter.Node) -> Optional[tree_sitter.Node]:
    if pair.type != "pair":
        return None
    return pair.child_by_field_name("value")


# ---------------------------------------------------------------------------
# Literals
# ---------------------------------------------------------------------------

def string_value(node: Optional[tree_sitter.Node]) -> Optional[str]:
    """Decoded value of a string literal (or substitution-free template)."""
    if node is None:
        return None
    if node.type == "template_string":
        if any(c.type == "template_substitution" for c in node.named_children):
            return None
    elif node.type != "string":
        return None
    inner = node_text(node)[1:-1]
    return _ESCAPE.sub(lambda m: _ESCAPE_MAP.get(m.group(1), m.group(1)), inner)


def quote_of(node: Optional[tree_sitter.Node], default: str = "'") -> str:
    if node is not None and node.type == "string":
        return node_text(node)[0]
    return default


def js_string(value: str, quote: str = "'") -> str:
    escaped = value.replace("\\", "\\\\").replace(quote, "\\" + quote)
    return f"{quote}{escaped}{quote}"


def literal_value(node: Optional[tree_sitter.Node]):
    """Convert a literal expression to a Python value.

    Unknown identifiers come back as their name; anything non-literal
    (calls, template substitutions, functions) comes back as None.
    """
    node = unwrap(node)
    if node is None:
        return None
    kind = node.type
    if kind in ("string", "template_string"):
        return string_value(node)
    if kind == "number":
        raw = node_text(node).replace("_", "")
        try:
            return int(raw, 0)
        except ValueError:
            try:
                return float(raw)
            except ValueError:
                return None
    if kind == "true":
        return True
    if kind == "false":
        return False
    if kind in ("null", "undefined"):
        return None
    if kind == "unary_expression" and node_text(node).startswith("-"):
        inner = literal_value(node.named_children[-1]) if node.named_children else None
        return -inner if isinstance(inner, (int, float)) else None
    if kind == "array":
        values = [literal_value(c) for c in node.named_children if c.type != "comment"]
        return [v for v in values if v is not None]
    if kind == "object":
        out: dict = {}
        for key, member in object_pairs(node):
            if key is None:
                continue
            if member.type == "shorthand_property_identifier":
                out[key] = key
            else:
                out[key] = literal_value(pair_value(member))
        return out
    if kind == "identifier":
        return node_text(node)
    return None


def find_exported_object(root: tree_sitter.Node) -> Optional[tree_sitter.Node]:
    """Locate the config object of `module.exports = {...}` / `export default {...}`.

    A wrapping call such as `defineConfig({...})` is looked through.
    """
    found: Optional[tree_sitter.Node] = None
    for node in walk(root):
        value = None
        if node.type == "assignment_expression":
            left = node.child_by_field_name("left")
            if left is not None and node_text(left) in ("module.exports", "exports.default"):
                value = node.child_by_field_name("right")
        elif node.type == "export_statement" and node_text(node).startswith("export default"):
            value = node.child_by_field_name("value") or node.child_by_field_name("declaration")
        value = unwrap(value)
        if value is not None and value.type == "call_expression":
            objects = [unwrap(a) for a in arguments(value)]
            objects = [o for o in objects if o is not None and o.type == "object"]
            value = objects[0] if objects else None
        if value is not None and value.type == "object":
            found = value
    return found


# ---------------------------------------------------------------------------
# Edits
# ---------------------------------------------------------------------------

def line_start(src: bytes, pos: int) -> int:
    return src.rfind(b"\n", 0, pos) + 1


def indent_at(src: bytes, pos: int) -> str:
    start = line_start(src, pos)
    line = src[start:pos]
    return line[: len(line) - len(line.lstrip())].decode("utf-8")


def statement_removal(src: bytes, node: tree_sitter.Node) -> Edit:
    """Edit deleting a statement, and its whole line when it stands alone."""
    start, end = node.start_byte, node.end_byte
    head = line_start(src, start)
    if not src[head:start].strip():
        start = head
        newline = src.find(b"\n", end)
        tail = newline if newline != -1 else len(src)
        if not src[end:tail].strip():
            end = tail + 1 if newline != -1 else tail
    return Edit(start, end, "")


def insert_before_statement(src: bytes, node: tree_sitter.Node, lines: list[str]) -> Edit:
    """Edit inserting lines above the statement containing node."""
    anchor = enclosing_statement(node) or node
    pos = line_start(src, anchor.start_byte)
    indent = indent_at(src, anchor.start_byte)
    return Edit(pos, pos, "".join(f"{indent}{line}\n" for line in lines))


def apply_edits(source: str, edits: list[Edit]) -> str:
    """Apply non-overlapping edits from the end of the file backwards.

    An edit overlapping one already applied is dropped.
    """
    data = source.encode("utf-8")
    boundary = len(data) + 1
    for edit in sorted(edits, key=lambda e: (e.start, e.end), reverse=True):
        if edit.end > boundary:
            logger.debug("Dropping overlapping edit at %d-%d", edit.start, edit.end)
            continue
        data = data[: edit.start] + edit.text.encode("utf-8") + data[edit.end:]
        boundary = edit.start
    return data.decode("utf-8")


def render_object(src: bytes, obj: tree_sitter.Node, items: list[str]) -> str:
    """Object literal text for `items`, keeping the original's line layout."""
    if not items:
        return "{}"
    if "\n" not in node_text(obj):
        return "{ " + ", ".join(items) + " }"
    members = [c for c in obj.named_children if c.type != "comment"]
    if members:
        inner = indent_at(src, members[0].start_byte)
    else:
        inner = indent_at(src, obj.start_byte) + "  "
    closing = indent_at(src, obj.end_byte - 1)
    body = ",\n".join(inner + item for item in items)
    return "{\n" + body + "\n" + closing + "}"
