"""Text helpers for the regex-driven transformers (Java, Python, Robot).

Regexes find where a call starts; the argument list is then scanned by
hand so nested parentheses and quoted commas survive.
"""

import re
from typing import Iterator, NamedTuple, Optional

_QUOTES = ("'", '"')
_OPEN = "([{"
_CLOSE = ")]}"


class Call(NamedTuple):
    """A call found in the text.

    start: offset of the match (receiver included).
    end: offset just past the closing parenthesis.
    args: top-level argument strings, stripped.
    match: the regex match that located the call.
    """

    start: int
    end: int
    args: list[str]
    match: re.Match


def closing_paren(source: str, open_idx: int) -> Optional[int]:
    """Offset of the parenthesis closing the one at open_idx, or None."""
    depth = 0
    quote: Optional[str] = None
    i = open_idx
    while i < len(source):
        ch = source[i]
        if quote:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in _QUOTES:
            quote = ch
        elif ch in _OPEN:
            depth += 1
        elif ch in _CLOSE:
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return None


def split_args(text: str) -> list[str]:
    """Split an argument list on top-level commas."""
    parts: list[str] = []
    depth = 0
    quote: Optional[str] = None
    current: list[str] = []
    i = 0
    while i < len(text):
        ch = text[i]
        if quote:
            current.append(ch)
            if ch == "\\" and i + 1 < len(text):
                current.append(text[i + 1])
                i += 2
                continue
            if ch == quote:
                quote = None
        elif ch in _QUOTES:
            quote = ch
            current.append(ch)
        elif ch in _OPEN:
            depth += 1
            current.append(ch)
        elif ch in _CLOSE:
            depth -= 1
            current.append(ch)
        elif ch == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
        i += 1
    tail = "".join(current).strip()
    if tail:
        parts.append(tail)
    return parts


def iter_calls(source: str, pattern: re.Pattern) -> Iterator[Call]:
    """Calls whose head matches `pattern`; the match must end at "("."""
    for match in pattern.finditer(source):
        open_idx = match.end() - 1
        if source[open_idx] != "(":
            continue
        close = closing_paren(source, open_idx)
        if close is None:
            continue
        yield Call(match.start(), close + 1, split_args(source[open_idx + 1:close]), match)


def is_string_literal(arg: str) -> bool:
    return len(arg) >= 2 and arg[0] in _QUOTES and arg[-1] == arg[0]


def keyword(arg: str) -> Optional[tuple[str, str]]:
    """(name, value) for a `name=value` argument."""
    m = re.match(r"^(\w+)\s*=(?!=)\s*(.+)$", arg, re.S)
    if m is None:
        return None
    return m.group(1), m.group(2).strip()


def statement_span(source: str, start: int, end: int, terminator: str = "") -> Optional[tuple[int, int]]:
    """Span covering the whole line(s) of a standalone statement, or None.

    The statement is standalone when only whitespace precedes it on its
    first line and only `terminator` and whitespace follow it.
    """
    head = source.rfind("\n", 0, start) + 1
    if source[head:start].strip():
        return None
    newline = source.find("\n", end)
    tail = newline if newline != -1 else len(source)
    rest = source[end:tail].strip()
    if terminator and rest.startswith(terminator):
        rest = rest[len(terminator):].strip()
    if rest:
        return None
    return head, (tail + 1 if newline != -1 else tail)


def splice(source: str, edits: list[tuple[int, int, str]]) -> str:
    """Apply (start, end, text) edits last to first; overlapping ones are dropped."""
    boundary = len(source) + 1
    for start, end, text in sorted(edits, reverse=True):
        if end > boundary:
            continue
        source = source[:start] + text + source[end:]
        boundary = start
    return source
