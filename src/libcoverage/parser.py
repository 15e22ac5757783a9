"""
High level entry point for parsing (EO-)WCS responses.
"""

import logging
from typing import Any, Optional, Type, TypeVar, Union
from xml.etree.ElementTree import Element, ElementTree

from . import eowcs
from . import parsers as core
from .eowcs.types import EOCoverageSetDescription
from .errors import ParseError
from .registry import OptionsArg, ParserRegistry, merge_options
from .types import Capabilities, CoverageDescriptions, ExceptionReport

logger = logging.getLogger(__name__)

XMLInput = Union[str, bytes, Element, ElementTree]
ResultT = TypeVar("ResultT")


def create_registry(eowcs_profile: bool = True, default_options: OptionsArg = None) -> ParserRegistry:
    """
    Create a registry holding the core parsers and, optionally, the EO-WCS profile.

    The core parsers are always registered first; the EO-WCS parsers for shared
    tags therefore run after the core ones and merge into their results.
    """
    registry = ParserRegistry(default_options)
    core.register(registry)
    if eowcs_profile:
        eowcs.register(registry)
    logger.debug("Created parser registry for tags %s", registry.tag_names)
    return registry


class WCSParser:
    """Parser for WCS XML responses."""

    def __init__(
        self,
        registry: Optional[ParserRegistry] = None,
        *,
        eowcs_profile: bool = True,
        throw_on_exception: Optional[bool] = None,
    ):
        """
        Initialize WCS parser.

        Args:
            registry: Registry to dispatch through; a new one is created when omitted
            eowcs_profile: Load the EO-WCS parsers into a newly created registry
            throw_on_exception: Raise ServiceException for exception reports;
                defaults to the registry's default options
        """
        self.registry = registry if registry is not None else create_registry(eowcs_profile)
        self.options = self.registry.default_options
        if throw_on_exception is not None:
            self.options = merge_options(self.options, {"throw_on_exception": throw_on_exception})

    def parse(self, xml: XMLInput, options: OptionsArg = None, **overrides: Any) -> Any:
        """Parse any registered response document."""
        parse_options = merge_options(self.options, options)
        if overrides:
            parse_options = merge_options(parse_options, overrides)
        return self.registry.parse(xml, parse_options)

    def parse_capabilities(self, xml: XMLInput) -> Capabilities:
        return self._expect(self.parse(xml), Capabilities)

    def parse_coverage_descriptions(self, xml: XMLInput) -> CoverageDescriptions:
        return self._expect(self.parse(xml), CoverageDescriptions)

    def parse_eo_coverage_set_description(self, xml: XMLInput) -> EOCoverageSetDescription:
        return self._expect(self.parse(xml), EOCoverageSetDescription)

    @staticmethod
    def _expect(result: Any, expected: Type[ResultT]) -> ResultT:
        if isinstance(result, expected):
            return result
        if isinstance(result, ExceptionReport):
            raise result.to_exception()
        raise ParseError(f"Expected {expected.__name__}, got {type(result).__name__}")


def parse(xml: XMLInput, options: OptionsArg = None, registry: Optional[ParserRegistry] = None, **overrides: Any) -> Any:
    """
    Parse a (EO-)WCS response.

    Without ``registry`` a new registry with the core and EO-WCS parsers is used.
    """
    if registry is None:
        registry = create_registry()
    return registry.parse(xml, options, **overrides)
