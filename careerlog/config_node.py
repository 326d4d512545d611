# careerlog/config_node.py
"""
Hierarchical key/value node tree used by the host game for persisted state.

Text form:

    SCENARIO
    {
        name = CareerLog
        LOGPERIODS
        {
            LOGPERIOD
            {
                StartUT = 0
            }
        }
    }

Values keep insertion order and may repeat; child nodes likewise. In text
form each value sits on one line: backslashes, line breaks, braces and "//"
are written as backslash sequences, so free text such as a contract title
cannot open a node or start a comment.
"""
from __future__ import annotations

import re
from typing import Iterator, List, Optional, Tuple

from .errors import ConfigNodeParseError


class ConfigNode:
    def __init__(self, name: str = "root") -> None:
        self.name = name
        self.values: List[Tuple[str, str]] = []
        self.nodes: List["ConfigNode"] = []

    def __repr__(self) -> str:
        return f"ConfigNode({self.name!r}, values={len(self.values)}, nodes={len(self.nodes)})"

    # ----- values -------------------------------------------------------------

    def add_value(self, key: str, value: object) -> None:
        self.values.append((key, _to_text(value)))

    def set_value(self, key: str, value: object) -> None:
        """Replace the first value named ``key`` or append it."""
        text = _to_text(value)
        for i, (k, _) in enumerate(self.values):
            if k == key:
                self.values[i] = (key, text)
                return
        self.values.append((key, text))

    def get_value(self, key: str, default: Optional[str] = None) -> Optional[str]:
        for k, v in self.values:
            if k == key:
                return v
        return default

    def get_values(self, key: str) -> List[str]:
        return [v for k, v in self.values if k == key]

    def has_value(self, key: str) -> bool:
        return any(k == key for k, _ in self.values)

    # ----- child nodes --------------------------------------------------------

    def add_node(self, name: str) -> "ConfigNode":
        child = ConfigNode(name)
        self.nodes.append(child)
        return child

    def get_nodes(self, name: str) -> List["ConfigNode"]:
        return [n for n in self.nodes if n.name == name]

    def get_node(self, name: str) -> Optional["ConfigNode"]:
        for n in self.nodes:
            if n.name == name:
                return n
        return None

    def walk(self) -> Iterator["ConfigNode"]:
        yield self
        for n in self.nodes:
            yield from n.walk()

    # ----- text form ----------------------------------------------------------

    def to_text(self) -> str:
        """Serialize the children and values of this node (the node itself is the document root)."""
        lines: List[str] = []
        self._dump_body(lines, 0)
        return "\n".join(lines) + "\n"

    def _dump_body(self, lines: List[str], depth: int) -> None:
        pad = "\t" * depth
        for k, v in self.values:
            lines.append(f"{pad}{k} = {_escape(v)}")
        for n in self.nodes:
            lines.append(f"{pad}{n.name}")
            lines.append(f"{pad}{{")
            n._dump_body(lines, depth + 1)
            lines.append(f"{pad}}}")

    @classmethod
    def parse(cls, text: str, name: str = "root") -> "ConfigNode":
        root = cls(name)
        stack: List[ConfigNode] = [root]
        pending: Optional[str] = None

        for lineno, raw in enumerate(text.splitlines(), start=1):
            line = raw.split("//", 1)[0].strip()
            # Tolerate "NAME {" and "{ key = v }" styles by splitting on braces.
            for token in _split_braces(line):
                if token == "{":
                    if pending is None:
                        raise ConfigNodeParseError(f"line {lineno}: '{{' without a node name")
                    child = stack[-1].add_node(pending)
                    stack.append(child)
                    pending = None
                elif token == "}":
                    if pending is not None:
                        raise ConfigNodeParseError(f"line {lineno}: node {pending!r} has no body")
                    if len(stack) == 1:
                        raise ConfigNodeParseError(f"line {lineno}: unbalanced '}}'")
                    stack.pop()
                elif "=" in token:
                    if pending is not None:
                        raise ConfigNodeParseError(f"line {lineno}: node {pending!r} has no body")
                    key, _, value = token.partition("=")
                    stack[-1].values.append((key.strip(), _unescape(value.strip())))
                else:
                    if pending is not None:
                        raise ConfigNodeParseError(f"line {lineno}: node {pending!r} has no body")
                    pending = token

        if pending is not None:
            raise ConfigNodeParseError(f"node {pending!r} has no body")
        if len(stack) != 1:
            raise ConfigNodeParseError(f"unterminated node {stack[-1].name!r}")
        return root


def _split_braces(line: str) -> List[str]:
    out: List[str] = []
    buf = ""
    for ch in line:
        if ch in "{}":
            if buf.strip():
                out.append(buf.strip())
            out.append(ch)
            buf = ""
        else:
            buf += ch
    if buf.strip():
        out.append(buf.strip())
    return out


_ESCAPES = {"\\": "\\\\", "\n": "\\n", "\r": "\\r", "{": "\\x7b", "}": "\\x7d"}
_ESCAPED = re.compile(r"\\(\\|n|r|x[0-9a-fA-F]{2})")


def _escape(text: str) -> str:
    text = "".join(_ESCAPES.get(ch, ch) for ch in text)
    return text.replace("//", "/\\x2f")


def _unescape_match(match: "re.Match[str]") -> str:
    code = match.group(1)
    if code == "n":
        return "\n"
    if code == "r":
        return "\r"
    if code == "\\":
        return "\\"
    return chr(int(code[1:], 16))


def _unescape(text: str) -> str:
    return _ESCAPED.sub(_unescape_match, text) if "\\" in text else text


def _to_text(value: object) -> str:
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, float):
        return repr(value)
    if value is None:
        return ""
    return str(value)
