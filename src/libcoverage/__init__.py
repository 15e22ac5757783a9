"""libcoverage - request builders and response parsers for OGC WCS 2.0 and EO-WCS."""

from ._version import __version__

from . import eowcs
from .client import CoverageResponse, WCSClient
from .config import ClientConfig
from .errors import (
    ConfigurationError,
    InvalidArgument,
    LibCoverageError,
    NetworkError,
    NoParserRegistered,
    ParseError,
    ServiceException,
)
from .eowcs import DescribeEOCoverageSetOptions, describe_eo_coverage_set_url
from .kvp import (
    GetCapabilitiesOptions,
    GetCoverageOptions,
    describe_coverage_url,
    get_capabilities_url,
    get_coverage_url,
)
from .parser import WCSParser, create_registry, parse
from .registry import ParseContext, ParserRegistry
from .types import (
    Capabilities,
    CoverageDescription,
    CoverageDescriptions,
    ExceptionReport,
    ParseOptions,
)
from .utils import deep_merge, object_to_kvp, string_to_float_array, string_to_int_array
from .xpath import XPath, many, single

__all__ = [
    "__version__",
    "eowcs",
    "CoverageResponse",
    "WCSClient",
    "ClientConfig",
    "ConfigurationError",
    "InvalidArgument",
    "LibCoverageError",
    "NetworkError",
    "NoParserRegistered",
    "ParseError",
    "ServiceException",
    "DescribeEOCoverageSetOptions",
    "describe_eo_coverage_set_url",
    "GetCapabilitiesOptions",
    "GetCoverageOptions",
    "describe_coverage_url",
    "get_capabilities_url",
    "get_coverage_url",
    "WCSParser",
    "create_registry",
    "parse",
    "ParseContext",
    "ParserRegistry",
    "Capabilities",
    "CoverageDescription",
    "CoverageDescriptions",
    "ExceptionReport",
    "ParseOptions",
    "deep_merge",
    "object_to_kvp",
    "string_to_float_array",
    "string_to_int_array",
    "XPath",
    "many",
    "single",
]
