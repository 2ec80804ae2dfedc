"""
Stylesheet model for @font-face rewriting.

Parsing is delegated to tinycss2. Every top-level node is kept in document
order; @font-face rules are additionally wrapped in FontFaceRule objects that
expose typed accessors for the declarations the pipeline reads and rewrites.
Anything else (comments, other at-rules, qualified rules) is serialized back
as it was parsed.
"""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import tinycss2

from cjk_font_subsetter.core.errors import ParseError

FONT_FACE = "font-face"
FONT_FAMILY = "font-family"
SRC = "src"
UNICODE_RANGE = "unicode-range"

REQUIRED_DESCRIPTORS = (FONT_FAMILY, SRC, UNICODE_RANGE)

INDENT = "  "

_SAFE_URL_RE = re.compile(r"^[^\s\"'()\\]+$")


@dataclass(frozen=True)
class SrcTerm:
    """One `url(...) format(...)` group of a src descriptor."""

    url: str
    format: str

    def to_css(self) -> str:
        return f"{_url_to_css(self.url)} format({_string_to_css(self.format)})"


def _string_to_css(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def _url_to_css(url: str) -> str:
    if _SAFE_URL_RE.match(url):
        return f"url({url})"
    return f"url({_string_to_css(url)})"


def _split_commas(tokens: Iterable) -> list[list]:
    """Split a component value list on its top-level commas."""
    groups: list[list] = [[]]
    for token in tokens:
        if token.type == "literal" and token.value == ",":
            groups.append([])
        else:
            groups[-1].append(token)
    return groups


def _check_tokens(tokens: Iterable, where: str) -> None:
    for token in tokens:
        if token.type == "error":
            raise ParseError(
                f"{where}: {token.message} (line {token.source_line}, "
                f"column {token.source_column})"
            )


class FontFaceRule:
    """
    A parsed @font-face rule.

    Mutation goes through set_family() and set_src_terms(), which replace the
    value of the existing declaration and leave every other descriptor alone.
    """

    def __init__(self, index: int, node, contents: list):
        self.index = index
        self._node = node
        self._contents = contents
        self._declarations = {}
        for item in contents:
            if item.type == "declaration":
                # Last declaration wins, as in a browser
                self._declarations[item.lower_name] = item

        missing = [name for name in REQUIRED_DESCRIPTORS if name not in self._declarations]
        if missing:
            raise ParseError(
                f"@font-face rule {index} (line {node.source_line}) is missing "
                f"{', '.join(missing)}"
            )

    @property
    def family(self) -> str:
        """The font-family value, unquoted."""
        value = self._declarations[FONT_FAMILY].value
        strings = [token.value for token in value if token.type == "string"]
        if strings:
            return strings[0]
        return " ".join(token.value for token in value if token.type == "ident")

    def set_family(self, family: str) -> None:
        self._declarations[FONT_FAMILY].value = tinycss2.parse_component_value_list(
            _string_to_css(family)
        )

    @property
    def unicode_ranges(self) -> tuple[str, ...]:
        """Unicode-range tokens in source order, as written."""
        groups = _split_commas(self._declarations[UNICODE_RANGE].value)
        ranges = (tinycss2.serialize(group).strip() for group in groups)
        return tuple(r for r in ranges if r)

    @property
    def src(self) -> str:
        return tinycss2.serialize(self._declarations[SRC].value).strip()

    def set_src_terms(self, terms: Sequence[SrcTerm]) -> None:
        """Replace the src descriptor with the given url/format groups."""
        if not terms:
            raise ValueError("src requires at least one term")
        css = ", ".join(term.to_css() for term in terms)
        self._declarations[SRC].value = tinycss2.parse_component_value_list(css)

    def to_css(self, print_width: int | None = None) -> str:
        lines = ["@font-face {"]
        for item in self._contents:
            if item.type == "whitespace":
                continue
            if item.type == "declaration":
                lines.append(_declaration_to_css(item, print_width))
            else:
                lines.append(INDENT + item.serialize().strip())
        lines.append("}")
        return "\n".join(lines)


def _declaration_to_css(declaration, print_width: int | None) -> str:
    suffix = " !important" if declaration.important else ""
    value = tinycss2.serialize(declaration.value).strip()
    line = f"{INDENT}{declaration.name}: {value}{suffix};"
    if print_width is None or len(line) <= print_width:
        return line

    parts = [tinycss2.serialize(group).strip() for group in _split_commas(declaration.value)]
    if len(parts) < 2:
        return line
    body = ",\n".join(INDENT * 2 + part for part in parts)
    return f"{INDENT}{declaration.name}:\n{body}{suffix};"


class Stylesheet:
    """An ordered sequence of top-level nodes."""

    def __init__(self, nodes: list, font_faces: list[FontFaceRule]):
        self.nodes = nodes
        self._font_faces = font_faces
        self._by_node = {id(rule._node): rule for rule in font_faces}

    def find_font_face_rules(self) -> list[FontFaceRule]:
        """All top-level @font-face rules, in document order."""
        return list(self._font_faces)

    def to_css(self, print_width: int | None = None) -> str:
        chunks = []
        for node in self.nodes:
            if node.type == "whitespace":
                continue
            rule = self._by_node.get(id(node))
            if rule is not None:
                chunks.append(rule.to_css(print_width))
            else:
                chunks.append(node.serialize().strip())
        return "\n".join(chunks) + "\n"


def parse_stylesheet(css: str) -> Stylesheet:
    """
    Parse CSS text.

    Raises:
        ParseError: On syntax errors at the top level or inside an
            @font-face rule, or when an @font-face rule lacks a descriptor
            the rewriter needs
    """
    nodes = tinycss2.parse_stylesheet(css, skip_comments=False, skip_whitespace=False)
    _check_tokens(nodes, "Invalid stylesheet")

    font_faces = []
    for node in nodes:
        if (
            node.type != "at-rule"
            or node.lower_at_keyword != FONT_FACE
            or node.content is None
        ):
            continue
        contents = tinycss2.parse_blocks_contents(
            node.content, skip_comments=False, skip_whitespace=False
        )
        _check_tokens(contents, "Invalid @font-face rule")
        for item in contents:
            if item.type == "declaration":
                _check_tokens(item.value, f"Invalid {item.name} descriptor")
        font_faces.append(FontFaceRule(len(font_faces), node, contents))

    return Stylesheet(nodes, font_faces)


def serialize_stylesheet(stylesheet: Stylesheet, print_width: int | None = None) -> str:
    """
    Serialize a stylesheet.

    Args:
        stylesheet: Stylesheet to serialize
        print_width: Wrap declarations longer than this at their top-level
            commas. None never wraps.
    """
    return stylesheet.to_css(print_width)
