"""
Registry of parsing functions, keyed by XML tag name.

Several functions can be registered for the same tag. Dispatching an element
calls all of them in registration order and deep-merges their partial results,
so extension profiles can add fields to, or override fields of, a result
without touching the module that registered the first parser for that tag.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Type, Union
from xml.etree.ElementTree import Element, ElementTree

from defusedxml import DefusedXmlException
from defusedxml.ElementTree import ParseError as XMLParseError
from defusedxml.ElementTree import fromstring
from pydantic import BaseModel, ValidationError

from .errors import ConfigurationError, NoParserRegistered, ParseError
from .types import ExceptionReport, ParseOptions
from .utils import deep_merge
from .xpath import local_name

logger = logging.getLogger(__name__)

__all__ = [
    "Parser",
    "ParseContext",
    "ParserRegistry",
    "load_root",
    "merge_options",
]

PartialResult = Union[Mapping[str, Any], BaseModel, None]
Parser = Callable[[Element, "ParseContext"], PartialResult]
OptionsArg = Union[ParseOptions, Mapping[str, Any], None]


class ParseContext:
    """Handed to every parsing function; re-enters the registry for child elements."""

    def __init__(self, registry: "ParserRegistry", options: ParseOptions):
        self.registry = registry
        self.options = options

    def dispatch(self, tag_name: str, node: Element) -> Any:
        return self.registry.dispatch(tag_name, node, self.options)


class ParserRegistry:
    """Registration of all functions that can parse a WCS response element.

    The registry is an explicit object: create one per application (see
    :func:`libcoverage.create_registry`) or per test. Registration order is
    the merge order, so profiles must be registered after the core parsers
    they extend.
    """

    def __init__(self, default_options: OptionsArg = None):
        self._parsers: Dict[str, List[Parser]] = {}
        self._result_types: Dict[str, Type[BaseModel]] = {}
        self._lock = threading.RLock()
        self.default_options = merge_options(ParseOptions(), default_options)

    def __contains__(self, tag_name: object) -> bool:
        with self._lock:
            return tag_name in self._parsers

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} tags={sorted(self.tag_names)}>"

    @property
    def tag_names(self) -> List[str]:
        with self._lock:
            return list(self._parsers)

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------
    def register(self, tag_name: str, parser: Parser) -> None:
        """Append ``parser`` to the functions registered for ``tag_name``.

        The same function may be registered more than once; it is then also
        called more than once.
        """
        if not callable(parser):
            raise ConfigurationError(f"Parser for '{tag_name}' must be callable, got {parser!r}")
        with self._lock:
            self._parsers.setdefault(tag_name, []).append(parser)
        logger.debug("Registered parser %s for <%s>", getattr(parser, "__name__", parser), tag_name)

    def register_all(self, parsers: Mapping[str, Parser]) -> None:
        """Register multiple parsers at once, in the mapping's iteration order."""
        with self._lock:
            for tag_name, parser in parsers.items():
                self.register(tag_name, parser)

    def parser(self, tag_name: str):
        """Decorator for registering a parsing function."""

        def decorator(func: Parser) -> Parser:
            self.register(tag_name, func)
            return func

        return decorator

    def register_result_type(self, tag_name: str, model: Type[BaseModel]) -> None:
        """Bind the model that merged results for ``tag_name`` are validated into.

        A tag that already has a model can only be rebound to a subclass of it,
        so an extension narrows the result type without losing its fields.
        """
        if not (isinstance(model, type) and issubclass(model, BaseModel)):
            raise ConfigurationError(f"Result type for '{tag_name}' must be a pydantic model")
        with self._lock:
            current = self._result_types.get(tag_name)
            if current is not None and not issubclass(model, current):
                raise ConfigurationError(
                    f"Result type {model.__name__} for '{tag_name}' must extend {current.__name__}"
                )
            self._result_types[tag_name] = model
        logger.debug("Bound result type %s to <%s>", model.__name__, tag_name)

    def get_parsers(self, tag_name: str) -> Tuple[Parser, ...]:
        with self._lock:
            return tuple(self._parsers.get(tag_name, ()))

    def get_result_type(self, tag_name: str) -> Optional[Type[BaseModel]]:
        with self._lock:
            return self._result_types.get(tag_name)

    def copy(self) -> "ParserRegistry":
        """Return an independent registry with the same registrations."""
        clone = self.__class__(self.default_options)
        with self._lock:
            clone._parsers = {tag: list(funcs) for tag, funcs in self._parsers.items()}
            clone._result_types = dict(self._result_types)
        return clone

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------
    def options(self, options: OptionsArg = None, **overrides: Any) -> ParseOptions:
        """Combine the default options with per-call options."""
        merged = merge_options(self.default_options, options)
        if overrides:
            merged = merge_options(merged, overrides)
        return merged

    def dispatch(self, tag_name: str, node: Element, options: OptionsArg = None) -> Any:
        """
        Call all parsers registered for ``tag_name`` and merge their results.

        Args:
            tag_name: The local name of the element
            node: The element to parse
            options: Parse options, defaults to the registry's options

        Returns:
            The merged result, validated into the result type bound to the
            tag, or a plain ``dict`` when no result type is bound.

        Raises:
            NoParserRegistered: If no function is registered for ``tag_name``
        """
        with self._lock:
            parsers = tuple(self._parsers.get(tag_name, ()))
            result_type = self._result_types.get(tag_name)
        if not parsers:
            raise NoParserRegistered(tag_name)

        logger.debug("Dispatching <%s> to %d parser(s)", tag_name, len(parsers))
        context = ParseContext(self, self.options(options))
        merged: Dict[str, Any] = {}
        for parser in parsers:
            deep_merge(merged, _as_mapping(parser(node, context), tag_name))

        if result_type is None:
            return merged
        try:
            return result_type.model_validate(merged)
        except ValidationError as exc:
            raise ParseError(f"Invalid parse result for <{tag_name}>: {exc}", cause=exc) from exc

    def parse(self, xml: Union[str, bytes, Element, ElementTree], options: OptionsArg = None, **overrides: Any) -> Any:
        """
        Parse a (EO-)WCS response.

        Args:
            xml: The XML document as string or bytes, or an already parsed
                element or element tree
            options: Parse options, e.g. ``{"throw_on_exception": True}``
            **overrides: Individual options, overriding ``options``

        Returns:
            The merged result for the root element

        Raises:
            ServiceException: If the response is an exception report and
                ``throw_on_exception`` is set
        """
        root = load_root(xml)
        parse_options = self.options(options, **overrides)
        result = self.dispatch(local_name(root), root, parse_options)
        if parse_options.throw_on_exception and isinstance(result, ExceptionReport):
            raise result.to_exception()
        return result


def load_root(xml: Union[str, bytes, Element, ElementTree]) -> Element:
    """Return the root element of a raw or already parsed XML document."""
    if isinstance(xml, Element):
        return xml
    if isinstance(xml, ElementTree):
        root = xml.getroot()
        if root is None:
            raise ParseError("Empty XML document")
        return root
    if isinstance(xml, (str, bytes)):
        try:
            return fromstring(xml)
        except (XMLParseError, DefusedXmlException) as exc:
            raise ParseError(f"Invalid XML content: {exc}", cause=exc) from exc
    raise ParseError(f"Cannot parse object of type {type(xml).__name__}")


def _as_mapping(partial: PartialResult, tag_name: str) -> Mapping[str, Any]:
    if partial is None:
        return {}
    if isinstance(partial, BaseModel):
        return _model_fields(partial)
    if isinstance(partial, Mapping):
        return partial
    raise ParseError(
        f"Parser for <{tag_name}> returned {type(partial).__name__}, expected a mapping or model"
    )


def _model_fields(model: BaseModel) -> Dict[str, Any]:
    # Only explicitly set fields take part in the merge; nested models become
    # mappings so they merge key by key, models inside lists stay as they are.
    # Extra keys contributed by extensions are kept alongside declared fields.
    fields: Dict[str, Any] = {}
    for name in model.model_fields_set | set(model.model_extra or {}):
        value = getattr(model, name)
        fields[name] = _model_fields(value) if isinstance(value, BaseModel) else value
    return fields


def merge_options(base: ParseOptions, options: OptionsArg) -> ParseOptions:
    """Return ``base`` updated with the options explicitly set in ``options``."""
    if options is None:
        return base
    if isinstance(options, ParseOptions):
        updates = {name: getattr(options, name) for name in options.model_fields_set}
    elif isinstance(options, Mapping):
        parsed = ParseOptions.model_validate(options)
        updates = {name: getattr(parsed, name) for name in parsed.model_fields_set}
    else:
        raise TypeError(f"Invalid parse options: {options!r}")
    return base.model_copy(update=updates)

