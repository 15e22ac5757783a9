"""
Earth Observation application profile of WCS 2.0 (EO-WCS).

Call :func:`register` on a registry that already holds the core parsers.
"""

from .kvp import DescribeEOCoverageSetOptions, describe_eo_coverage_set_url
from .parse import EOWCS_PARSERS, NAMESPACES, register
from .types import (
    DatasetSeriesDescription,
    DatasetSeriesDescriptions,
    EOCapabilities,
    EOContents,
    EOCoverageDescription,
    EOCoverageSetDescription,
    TimePeriod,
)

__all__ = [
    "DescribeEOCoverageSetOptions",
    "describe_eo_coverage_set_url",
    "EOWCS_PARSERS",
    "NAMESPACES",
    "register",
    "DatasetSeriesDescription",
    "DatasetSeriesDescriptions",
    "EOCapabilities",
    "EOContents",
    "EOCoverageDescription",
    "EOCoverageSetDescription",
    "TimePeriod",
]
