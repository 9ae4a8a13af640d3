"""Tree queries: a small, namespace-agnostic path language over :class:`Document`.

Supported syntax::

    //flow                      every <flow> (any prefix) in the document
    /mule                       the root element, if it is named ``mule``
    error-handler  ./route      children of the context node
    .//when                     descendants of the context node
    //choice/otherwise/raise-error
    ancestor::until-successful  ancestors of the context node
    //*[@name="x"][@type]       attribute predicates
    //logger[not(@category)]
    //flow | //sub-flow         unions, returned in document order

Element names match by local name; ``mule:flow`` and ``flow`` are the same
test.  Attribute names in predicates match the qualified name first and
then, for prefixed names, any attribute with the same local part.
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from flowlint.core.document import Document, Element

# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class QueryError(ValueError):
    """Raised for a malformed path expression."""


# ---------------------------------------------------------------------------
# Compiled form
# ---------------------------------------------------------------------------

_STEP_RE = re.compile(
    r"^(?:(?P<axis>ancestor|child|descendant)::)?"
    r"(?P<name>\*|[A-Za-z_][\w.-]*(?::[A-Za-z_][\w.-]*)?)"
    r"(?P<predicates>(?:\[.*\])*)$"
)
_ATTR_NAME = r"[A-Za-z_][\w.-]*(?::[A-Za-z_][\w.-]*)?"
_PRED_HAS_RE = re.compile(rf"^@(?P<attr>{_ATTR_NAME})$")
_PRED_EQ_RE = re.compile(rf"^@(?P<attr>{_ATTR_NAME})\s*=\s*(?P<q>['\"])(?P<value>.*)(?P=q)$")
_PRED_NOT_RE = re.compile(rf"^not\(\s*@(?P<attr>{_ATTR_NAME})\s*\)$")


@dataclass(frozen=True)
class Predicate:
    """Attribute test: presence, equality, or absence (``negate``)."""

    attr: str
    value: str | None = None
    negate: bool = False

    def matches(self, node: Element) -> bool:
        actual = _raw_attribute(node, self.attr)
        if self.negate:
            return actual is None
        if actual is None:
            return False
        return self.value is None or actual == self.value


@dataclass(frozen=True)
class Step:
    """One location step: axis, local-name test, predicates."""

    axis: str  # "child" | "descendant" | "ancestor"
    name: str  # local name or "*"
    predicates: tuple[Predicate, ...] = ()

    def matches(self, node: Element) -> bool:
        if self.name != "*" and node.local_name != self.name:
            return False
        return all(p.matches(node) for p in self.predicates)


@dataclass(frozen=True)
class CompiledPath:
    """A single union branch."""

    absolute: bool
    steps: tuple[Step, ...]


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


def _split_top_level(text: str, sep: str) -> list[str]:
    """Split on *sep* outside brackets, parentheses, and quotes."""
    parts: list[str] = []
    depth = 0
    quote: str | None = None
    current: list[str] = []
    for ch in text:
        if quote is not None:
            if ch == quote:
                quote = None
        elif ch in "'\"":
            quote = ch
        elif ch in "[(":
            depth += 1
        elif ch in "])":
            depth -= 1
        elif ch == sep and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(ch)
    parts.append("".join(current))
    return parts


def _split_steps(text: str) -> list[tuple[str, str]]:
    """Split a relative path into ``(separator, step)`` pairs.

    The separator is ``"/"`` or ``"//"`` (the first step gets ``"/"``).
    """
    raw = _split_top_level(text, "/")
    pairs: list[tuple[str, str]] = []
    sep = "/"
    for chunk in raw:
        if chunk == "":
            sep = "//"
            continue
        pairs.append((sep, chunk.strip()))
        sep = "/"
    return pairs


def _parse_predicates(text: str, expression: str) -> tuple[Predicate, ...]:
    predicates: list[Predicate] = []
    rest = text
    while rest:
        if not rest.startswith("["):
            msg = f"Malformed predicate in path '{expression}'"
            raise QueryError(msg)
        # Find the matching close bracket, honouring quotes.
        quote: str | None = None
        end = -1
        for i, ch in enumerate(rest[1:], start=1):
            if quote is not None:
                if ch == quote:
                    quote = None
            elif ch in "'\"":
                quote = ch
            elif ch == "]":
                end = i
                break
        if end < 0:
            msg = f"Unclosed predicate in path '{expression}'"
            raise QueryError(msg)
        body = rest[1:end].strip()
        rest = rest[end + 1:]

        if m := _PRED_EQ_RE.match(body):
            predicates.append(Predicate(attr=m.group("attr"), value=m.group("value")))
        elif m := _PRED_HAS_RE.match(body):
            predicates.append(Predicate(attr=m.group("attr")))
        elif m := _PRED_NOT_RE.match(body):
            predicates.append(Predicate(attr=m.group("attr"), negate=True))
        else:
            msg = f"Unsupported predicate '[{body}]' in path '{expression}'"
            raise QueryError(msg)
    return tuple(predicates)


def _parse_step(text: str, default_axis: str, expression: str) -> Step:
    m = _STEP_RE.match(text)
    if m is None:
        msg = f"Invalid step '{text}' in path '{expression}'"
        raise QueryError(msg)
    axis = m.group("axis") or default_axis
    name = m.group("name").rsplit(":", 1)[-1]
    return Step(axis=axis, name=name, predicates=_parse_predicates(m.group("predicates"), expression))


def _compile_branch(branch: str, expression: str) -> CompiledPath:
    text = branch.strip()
    if not text:
        msg = f"Empty path in expression '{expression}'"
        raise QueryError(msg)

    absolute = False
    first_axis = "child"
    if text.startswith("//"):
        absolute, first_axis, text = True, "descendant", text[2:]
    elif text.startswith("/"):
        absolute, text = True, text[1:]
    elif text.startswith(".//"):
        first_axis, text = "descendant", text[3:]
    elif text.startswith("./"):
        text = text[2:]

    steps: list[Step] = []
    for i, (sep, chunk) in enumerate(_split_steps(text)):
        if not chunk:
            msg = f"Empty step in path '{expression}'"
            raise QueryError(msg)
        if i == 0:
            axis = first_axis if sep == "/" else "descendant"
        else:
            axis = "descendant" if sep == "//" else "child"
        steps.append(_parse_step(chunk, axis, expression))

    if not steps:
        msg = f"Path '{expression}' has no steps"
        raise QueryError(msg)
    return CompiledPath(absolute=absolute, steps=tuple(steps))


@functools.lru_cache(maxsize=512)
def compile_path(expression: str) -> tuple[CompiledPath, ...]:
    """Compile *expression* into union branches. Cached per expression string."""
    return tuple(_compile_branch(b, expression) for b in _split_top_level(expression, "|"))


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------


def _axis_nodes(doc: Document, item: Element | None, axis: str) -> Iterable[Element]:
    """Nodes reachable from *item* along *axis*. ``None`` is the document node."""
    if axis == "child":
        return [doc.root] if item is None else doc.children(item)
    if axis == "descendant":
        if item is None:
            return doc.iter()
        return (el for el in doc.iter(item) if el.index != item.index)
    if item is None:
        return []
    return doc.ancestors(item)


def _evaluate(doc: Document, compiled: CompiledPath, context: Element | None) -> list[Element]:
    current: list[Element | None] = [None if compiled.absolute else context]
    for step in compiled.steps:
        found: dict[int, Element] = {}
        for item in current:
            for node in _axis_nodes(doc, item, step.axis):
                if step.matches(node):
                    found[node.index] = node
        current = [found[i] for i in sorted(found)]
    return [n for n in current if n is not None]


def select_all(doc: Document, path: str, context: Element | None = None) -> list[Element]:
    """All elements matching *path*, in document order, without duplicates."""
    found: dict[int, Element] = {}
    for branch in compile_path(path):
        for node in _evaluate(doc, branch, context):
            found[node.index] = node
    return [found[i] for i in sorted(found)]


def select_first(doc: Document, path: str, context: Element | None = None) -> Element | None:
    nodes = select_all(doc, path, context)
    return nodes[0] if nodes else None


def exists(doc: Document, path: str, context: Element | None = None) -> bool:
    return bool(select_all(doc, path, context))


def count(doc: Document, path: str, context: Element | None = None) -> int:
    return len(select_all(doc, path, context))


# ---------------------------------------------------------------------------
# Node accessors
# ---------------------------------------------------------------------------


def _raw_attribute(node: Element, name: str) -> str | None:
    if name in node.attributes:
        return node.attributes[name]
    if ":" not in name:
        return None
    local = name.rsplit(":", 1)[-1]
    for key, value in node.attributes.items():
        if ":" in key and not key.startswith("xmlns") and key.rsplit(":", 1)[-1] == local:
            return value
    return None


def attribute(node: Element, name: str) -> str | None:
    """Attribute value, or ``None`` when missing or empty."""
    value = _raw_attribute(node, name)
    return value or None


def has_attribute(node: Element, name: str) -> bool:
    return _raw_attribute(node, name) is not None


def line_of(node: Element) -> int:
    return node.line or 1


def column_of(node: Element) -> int | None:
    return node.column or None
