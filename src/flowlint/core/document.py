"""Document model: parse flow XML into an index-addressed element tree with line/column provenance."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from xml.parsers import expat

if TYPE_CHECKING:
    from collections.abc import Iterator

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class Element:
    """A single element node.

    Parent and children are indices into the owning :class:`Document`'s
    arena, so the tree holds no reference cycles.
    """

    index: int
    tag: str
    attributes: dict[str, str]
    line: int
    column: int
    parent: int | None = None
    children: list[int] = field(default_factory=list)
    text: str = ""

    @property
    def prefix(self) -> str | None:
        """Namespace prefix as written in the source (``http`` for ``http:listener``)."""
        if ":" in self.tag:
            return self.tag.split(":", 1)[0]
        return None

    @property
    def local_name(self) -> str:
        """Tag name without its namespace prefix."""
        return self.tag.rsplit(":", 1)[-1]


@dataclass
class Document:
    """Parsed document: a flat arena of elements, root at index 0."""

    elements: list[Element]
    path: str | None = None

    @property
    def root(self) -> Element:
        return self.elements[0]

    @property
    def namespaces(self) -> dict[str, str]:
        """Prefix -> URI map from the root element's ``xmlns:*`` declarations."""
        result: dict[str, str] = {}
        for name, value in self.root.attributes.items():
            if name.startswith("xmlns:"):
                result[name[len("xmlns:"):]] = value
            elif name == "xmlns":
                result[""] = value
        return result

    def parent(self, node: Element) -> Element | None:
        if node.parent is None:
            return None
        return self.elements[node.parent]

    def children(self, node: Element) -> list[Element]:
        return [self.elements[i] for i in node.children]

    def iter(self, node: Element | None = None) -> Iterator[Element]:
        """Yield *node* (default: root) and all of its descendants in document order."""
        start = self.root if node is None else node
        stack = [start.index]
        while stack:
            current = self.elements[stack.pop()]
            yield current
            stack.extend(reversed(current.children))

    def ancestors(self, node: Element) -> Iterator[Element]:
        """Yield ancestors of *node*, nearest first."""
        current = self.parent(node)
        while current is not None:
            yield current
            current = self.parent(current)

    def text_content(self, node: Element | None = None) -> str:
        """Concatenated text of *node* and every descendant."""
        return "".join(el.text for el in self.iter(node))

    # Tree-query shortcuts.  Imported lazily: query depends on this module.

    def select_all(self, path: str, context: Element | None = None) -> list[Element]:
        from flowlint.core.query import select_all

        return select_all(self, path, context)

    def select_first(self, path: str, context: Element | None = None) -> Element | None:
        from flowlint.core.query import select_first

        return select_first(self, path, context)

    def exists(self, path: str, context: Element | None = None) -> bool:
        from flowlint.core.query import exists

        return exists(self, path, context)

    def count(self, path: str, context: Element | None = None) -> int:
        from flowlint.core.query import count

        return count(self, path, context)


@dataclass(frozen=True)
class ParseResult:
    """Outcome of :func:`parse_xml`. Exactly one of *document* / *error* is set."""

    document: Document | None = None
    error: str | None = None
    error_line: int | None = None
    error_column: int | None = None

    @property
    def success(self) -> bool:
        return self.document is not None


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class _TreeBuilder:
    """Expat callbacks that append elements to the arena."""

    def __init__(self, parser: expat.XMLParserType) -> None:
        self._parser = parser
        self.elements: list[Element] = []
        self._stack: list[int] = []

    def start(self, tag: str, attrs: dict[str, str]) -> None:
        index = len(self.elements)
        parent = self._stack[-1] if self._stack else None
        element = Element(
            index=index,
            tag=tag,
            attributes=dict(attrs),
            line=self._parser.CurrentLineNumber,
            column=self._parser.CurrentColumnNumber + 1,
            parent=parent,
        )
        self.elements.append(element)
        if parent is not None:
            self.elements[parent].children.append(index)
        self._stack.append(index)

    def end(self, _tag: str) -> None:
        self._stack.pop()

    def data(self, text: str) -> None:
        if self._stack:
            self.elements[self._stack[-1]].text += text


def parse_xml(content: str, file_path: str | None = None) -> ParseResult:
    """Parse XML *content* into a :class:`Document`.

    Never raises for malformed input: the expat error message and its
    position are returned in the :class:`ParseResult` instead.
    """
    where = f" in {file_path}" if file_path else ""
    parser = expat.ParserCreate()
    builder = _TreeBuilder(parser)
    parser.StartElementHandler = builder.start
    parser.EndElementHandler = builder.end
    parser.CharacterDataHandler = builder.data
    parser.buffer_text = True

    try:
        parser.Parse(content, True)
    except expat.ExpatError as exc:
        line = exc.lineno or None
        column = exc.offset + 1 if exc.offset is not None else None
        reason = expat.ErrorString(exc.code) if exc.code else str(exc)
        msg = f"XML parse error{where}"
        if line:
            msg += f" at line {line}"
            if column:
                msg += f", column {column}"
        msg += f": {reason}"
        return ParseResult(error=msg, error_line=line, error_column=column)

    if not builder.elements:
        return ParseResult(error=f"No root element found{where}")

    return ParseResult(document=Document(elements=builder.elements, path=file_path))


def looks_like_xml(content: str) -> bool:
    """Cheap sniff: does *content* start like an XML document?"""
    trimmed = content.strip()
    if not trimmed.startswith("<"):
        return False
    return trimmed.startswith(("<?xml", "<!")) or (len(trimmed) > 1 and trimmed[1].isalpha())
