"""
Namespace aware node access on top of :mod:`xml.etree.ElementTree`.

Paths are written as slash separated steps of ``prefix:LocalName``. The last
step may select text (``text()``) or an attribute (``@name`` or
``@prefix:name``), which makes the path *text valued*: it resolves to a string
instead of an element. A path can be given as a single string or as an
ordered sequence of candidate paths; a string containing ``|`` is split into
candidates as well. Candidates are tried in order and the first one that
matches wins.
"""

from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union
from xml.etree.ElementTree import Element

from .errors import ParseError

PathSpec = Union[str, Sequence[str]]

TEXT_STEP = "text()"


class _CompiledPath:
    """A single candidate path split into an element part and a value selector."""

    def __init__(self, expression: str, namespaces: Mapping[str, str]):
        self.expression = expression
        steps = [step.strip() for step in expression.strip().split("/")]
        # empty inner steps come from "//" (descendant search)
        if not steps[0] or not steps[-1]:
            raise ParseError(f"Invalid path expression '{expression}'")

        self.text = False
        self.attribute: Optional[str] = None
        last = steps[-1]
        if last == TEXT_STEP:
            self.text = True
            steps = steps[:-1]
        elif last.startswith("@"):
            self.attribute = _qualify(last[1:], namespaces, expression)
            steps = steps[:-1]

        if steps and not steps[-1]:
            raise ParseError(f"Invalid path expression '{expression}'")
        for step in steps:
            if step and step not in (".", "*"):
                _qualify(step, namespaces, expression)
        self.element_path = "/".join(steps) if steps else "."

    @property
    def text_valued(self) -> bool:
        return self.text or self.attribute is not None

    def elements(self, node: Element, namespaces: Mapping[str, str]) -> List[Element]:
        return node.findall(self.element_path, dict(namespaces))

    def values(self, node: Element, namespaces: Mapping[str, str]) -> List[str]:
        values: List[str] = []
        for element in self.elements(node, namespaces):
            if self.attribute is not None:
                value = element.get(self.attribute)
            else:
                value = element.text
            if value is not None:
                values.append(value.strip())
        return values


def _qualify(step: str, namespaces: Mapping[str, str], expression: str) -> str:
    """Translate ``prefix:name`` into ElementTree's ``{uri}name`` notation."""
    if ":" not in step:
        return step
    prefix, local_name = step.split(":", 1)
    try:
        uri = namespaces[prefix]
    except KeyError as exc:
        raise ParseError(
            f"Namespace prefix '{prefix}' used in '{expression}' is not declared"
        ) from exc
    return f"{{{uri}}}{local_name}"


def _candidates(path: PathSpec) -> Tuple[str, ...]:
    if isinstance(path, str):
        return tuple(part for part in path.split("|") if part.strip())
    candidates: List[str] = []
    for item in path:
        candidates.extend(_candidates(item))
    return tuple(candidates)


def _compile(path: PathSpec, namespaces: Mapping[str, str]) -> List[_CompiledPath]:
    candidates = _candidates(path)
    if not candidates:
        raise ParseError("Empty path expression")
    compiled = [_CompiledPath(candidate, namespaces) for candidate in candidates]
    if len({item.text_valued for item in compiled}) > 1:
        raise ParseError(f"Cannot mix text and element paths in {list(candidates)}")
    return compiled


def single(
    node: Optional[Element], namespaces: Mapping[str, str], path: PathSpec
) -> Union[str, Element, None]:
    """
    Resolve ``path`` to a single result.

    Args:
        node: The context element
        namespaces: Mapping of prefixes to namespace URIs
        path: A path, or ordered candidate paths

    Returns:
        For text valued paths the first matching string, or ``""`` when
        nothing matched. For element paths the first matching element,
        or ``None``.
    """
    compiled = _compile(path, namespaces)
    text_valued = compiled[0].text_valued
    if node is None:
        return "" if text_valued else None

    for candidate in compiled:
        if text_valued:
            values = candidate.values(node, namespaces)
            if values:
                return values[0]
        else:
            elements = candidate.elements(node, namespaces)
            if elements:
                return elements[0]
    return "" if text_valued else None


def many(
    node: Optional[Element], namespaces: Mapping[str, str], path: PathSpec
) -> List[Union[str, Element]]:
    """
    Resolve ``path`` to an ordered list of strings or elements.

    Results of all candidate paths are concatenated in candidate order.
    The returned list is never ``None``.
    """
    compiled = _compile(path, namespaces)
    if node is None:
        return []

    results: List[Union[str, Element]] = []
    for candidate in compiled:
        if candidate.text_valued:
            results.extend(candidate.values(node, namespaces))
        else:
            results.extend(candidate.elements(node, namespaces))
    return results


class XPath:
    """Path lookups bound to a namespace map."""

    def __init__(self, namespaces: Mapping[str, str]):
        self.namespaces: Dict[str, str] = dict(namespaces)

    def single(self, node: Optional[Element], path: PathSpec) -> Union[str, Element, None]:
        return single(node, self.namespaces, path)

    def many(self, node: Optional[Element], path: PathSpec) -> List[Union[str, Element]]:
        return many(node, self.namespaces, path)

    def text(self, node: Optional[Element], path: PathSpec) -> str:
        """Like :meth:`single`, for paths known to be text valued."""
        value = self.single(node, path)
        return value if isinstance(value, str) else ""

    def element(self, node: Optional[Element], path: PathSpec) -> Optional[Element]:
        """Like :meth:`single`, for paths known to select elements."""
        value = self.single(node, path)
        return value if isinstance(value, Element) else None

    def texts(self, node: Optional[Element], path: PathSpec) -> List[str]:
        return [value for value in self.many(node, path) if isinstance(value, str)]

    def elements(self, node: Optional[Element], path: PathSpec) -> List[Element]:
        return [value for value in self.many(node, path) if isinstance(value, Element)]


def local_name(element: Element) -> str:
    """Return the tag name of ``element`` without its namespace."""
    tag = element.tag
    if not isinstance(tag, str):
        return ""
    if tag.startswith("{"):
        return tag[tag.index("}") + 1:]
    return tag.split(":", 1)[-1]
