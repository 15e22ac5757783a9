"""
Parsing functions for the EO-WCS vocabulary.

Besides the EO-WCS specific elements, this registers additional parsers for
``Capabilities`` and ``CoverageDescription``. They only contribute the EO
fields; the core parsers registered before them provide the rest.
"""

import logging
from typing import Dict
from xml.etree.ElementTree import Element

from ..registry import ParseContext, Parser, ParserRegistry
from ..utils import parse_datetime, parse_int, string_to_float_array
from ..xpath import XPath
from .types import (
    DatasetSeriesDescription,
    DatasetSeriesDescriptions,
    EOCapabilities,
    EOContents,
    EOCoverageDescription,
    EOCoverageSetDescription,
    TimePeriod,
)

logger = logging.getLogger(__name__)

NAMESPACES: Dict[str, str] = {
    "wcs": "http://www.opengis.net/wcs/2.0",
    "gml": "http://www.opengis.net/gml/3.2",
    "gmlcov": "http://www.opengis.net/gmlcov/1.0",
    "eop": "http://www.opengis.net/eop/2.0",
    "om": "http://www.opengis.net/om/2.0",
    "wcseo": "http://www.opengis.net/wcs/wcseo/1.0",
    # older servers still use the pre-release namespace
    "wcseoold": "http://www.opengis.net/wcseo/1.0",
}

xpath = XPath(NAMESPACES)


def _eo(path: str) -> list:
    """Expand a ``wcseo:`` path to its current and legacy namespace variants."""
    return [path, path.replace("wcseo:", "wcseoold:")]


FOOTPRINT_POS_LIST = (
    "eop:EarthObservation/om:featureOfInterest/eop:Footprint/eop:multiExtentOf/gml:MultiSurface"
    "/gml:surfaceMember/gml:Polygon/gml:exterior/gml:LinearRing/gml:posList/text()"
)


def parse_time_period(node: Element) -> TimePeriod:
    """Parse the ``gml:TimePeriod`` child of ``node``."""
    return TimePeriod(
        begin=parse_datetime(xpath.text(node, "gml:TimePeriod/gml:beginPosition/text()")),
        end=parse_datetime(xpath.text(node, "gml:TimePeriod/gml:endPosition/text()")),
    )


def parse_eo_coverage_set_description(node: Element, context: ParseContext) -> EOCoverageSetDescription:
    """Parse a ``wcseo:EOCoverageSetDescription`` into coverage and dataset series descriptions."""
    coverage_descriptions = []
    descriptions_node = xpath.element(node, "wcs:CoverageDescriptions")
    if descriptions_node is not None:
        coverage_descriptions = context.dispatch("CoverageDescriptions", descriptions_node).coverage_descriptions

    dataset_series_descriptions = []
    series_node = xpath.element(node, _eo("wcseo:DatasetSeriesDescriptions"))
    if series_node is not None:
        dataset_series_descriptions = context.dispatch(
            "DatasetSeriesDescriptions", series_node
        ).dataset_series_descriptions

    return EOCoverageSetDescription(
        coverage_descriptions=coverage_descriptions,
        dataset_series_descriptions=dataset_series_descriptions,
        number_matched=parse_int(node.get("numberMatched")),
        number_returned=parse_int(node.get("numberReturned")),
    )


def parse_dataset_series_descriptions(node: Element, context: ParseContext) -> DatasetSeriesDescriptions:
    return DatasetSeriesDescriptions(
        dataset_series_descriptions=[
            context.dispatch("DatasetSeriesDescription", description)
            for description in xpath.elements(node, _eo("wcseo:DatasetSeriesDescription"))
        ]
    )


def parse_dataset_series_description(node: Element, context: ParseContext) -> DatasetSeriesDescription:
    """Parse a dataset series description; also used for dataset series summaries."""
    return DatasetSeriesDescription(
        dataset_series_id=xpath.text(node, _eo("wcseo:DatasetSeriesId/text()")),
        time_period=parse_time_period(node),
    )


def parse_extended_capabilities(node: Element, context: ParseContext) -> EOCapabilities:
    summaries = xpath.elements(node, _eo("wcs:Contents/wcs:Extension/wcseo:DatasetSeriesSummary"))
    return EOCapabilities(
        contents=EOContents(
            dataset_series=[context.dispatch("DatasetSeriesDescription", summary) for summary in summaries]
        )
    )


def parse_extended_coverage_description(node: Element, context: ParseContext) -> EOCoverageDescription:
    """Add footprint, acquisition time and EO identifier from the ``wcseo:EOMetadata``."""
    eo_metadata = xpath.element(
        node,
        _eo("gmlcov:metadata/gmlcov:Extension/wcseo:EOMetadata") + _eo("gmlcov:metadata/wcseo:EOMetadata"),
    )
    if eo_metadata is None:
        return EOCoverageDescription()

    phenomenon_time = xpath.element(eo_metadata, "eop:EarthObservation/om:phenomenonTime")
    return EOCoverageDescription(
        eo_identifier=xpath.text(
            eo_metadata,
            "eop:EarthObservation/eop:metaDataProperty/eop:EarthObservationMetaData/eop:identifier/text()",
        ),
        footprint=string_to_float_array(xpath.text(eo_metadata, FOOTPRINT_POS_LIST)),
        time_period=parse_time_period(phenomenon_time) if phenomenon_time is not None else None,
    )


EOWCS_PARSERS: Dict[str, Parser] = {
    "EOCoverageSetDescription": parse_eo_coverage_set_description,
    "DatasetSeriesDescriptions": parse_dataset_series_descriptions,
    "DatasetSeriesDescription": parse_dataset_series_description,
    "Capabilities": parse_extended_capabilities,
    "CoverageDescription": parse_extended_coverage_description,
}

EOWCS_RESULT_TYPES = {
    "EOCoverageSetDescription": EOCoverageSetDescription,
    "DatasetSeriesDescriptions": DatasetSeriesDescriptions,
    "DatasetSeriesDescription": DatasetSeriesDescription,
    "Capabilities": EOCapabilities,
    "CoverageDescription": EOCoverageDescription,
}


def register(registry: ParserRegistry) -> ParserRegistry:
    """
    Register the EO-WCS parsers with ``registry``.

    Must be called after the core parsers were registered, so that the EO
    parsers run after (and merge into) the core results for the shared tags.
    """
    registry.register_all(EOWCS_PARSERS)
    for tag_name, model in EOWCS_RESULT_TYPES.items():
        registry.register_result_type(tag_name, model)
    logger.debug("Registered %d EO-WCS parsers", len(EOWCS_PARSERS))
    return registry
