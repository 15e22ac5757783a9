"""
Parsing functions for the WCS 2.0 core response vocabulary.

Each function receives an element and the :class:`~libcoverage.registry.ParseContext`
and returns a typed partial result. They are registered with
:func:`register`, which binds the result models as well.
"""

import logging
from typing import Dict, List
from xml.etree.ElementTree import Element

from .registry import ParseContext, Parser, ParserRegistry
from .types import (
    Address,
    Bounds,
    Capabilities,
    ContactInfo,
    Contents,
    CoverageDescription,
    CoverageDescriptions,
    CoverageSummary,
    ExceptionReport,
    GridEnvelope,
    NilValue,
    Operation,
    Phone,
    RangeField,
    ServiceIdentification,
    ServiceMetadata,
    ServiceProvider,
)
from .utils import parse_int, parse_number, string_to_float_array, string_to_int_array
from .xpath import XPath

logger = logging.getLogger(__name__)

NAMESPACES: Dict[str, str] = {
    "xlink": "http://www.w3.org/1999/xlink",
    "ows": "http://www.opengis.net/ows/2.0",
    "wcs": "http://www.opengis.net/wcs/2.0",
    "gml": "http://www.opengis.net/gml/3.2",
    "gmlcov": "http://www.opengis.net/gmlcov/1.0",
    "swe": "http://www.opengis.net/swe/2.0",
    "crs": "http://www.opengis.net/wcs/crs/1.0",
    "int": "http://www.opengis.net/wcs/interpolation/1.0",
}

xpath = XPath(NAMESPACES)

_GRIDS = ("gml:domainSet/gml:RectifiedGrid", "gml:domainSet/gml:ReferenceableGrid")


def _in_grids(path: str) -> List[str]:
    return [f"{grid}/{path}" for grid in _GRIDS]


def parse_exception_report(node: Element, context: ParseContext) -> ExceptionReport:
    """Parse an ``ows:ExceptionReport``.

    Always returns the report as a value; raising is left to the caller of
    ``parse()`` so that every registered parser has run first.
    """
    exception = xpath.element(node, "ows:Exception")
    if exception is None:
        return ExceptionReport(text=xpath.text(node, ".//ows:ExceptionText/text()"))
    return ExceptionReport(
        code=exception.get("exceptionCode"),
        locator=exception.get("locator"),
        text=xpath.text(exception, "ows:ExceptionText/text()"),
    )


def parse_capabilities(node: Element, context: ParseContext) -> Capabilities:
    """Parse a ``wcs:Capabilities`` document."""
    contact = "ows:ServiceProvider/ows:ServiceContact"
    info = f"{contact}/ows:ContactInfo"

    return Capabilities(
        version=node.get("version", ""),
        update_sequence=node.get("updateSequence", ""),
        service_identification=ServiceIdentification(
            title=xpath.text(node, "ows:ServiceIdentification/ows:Title/text()"),
            abstract=xpath.text(node, "ows:ServiceIdentification/ows:Abstract/text()"),
            keywords=xpath.texts(node, "ows:ServiceIdentification/ows:Keywords/ows:Keyword/text()"),
            service_type=xpath.text(node, "ows:ServiceIdentification/ows:ServiceType/text()"),
            service_type_version=xpath.text(node, "ows:ServiceIdentification/ows:ServiceTypeVersion/text()"),
            profiles=xpath.texts(node, "ows:ServiceIdentification/ows:Profile/text()"),
            fees=xpath.text(node, "ows:ServiceIdentification/ows:Fees/text()"),
            access_constraints=xpath.text(node, "ows:ServiceIdentification/ows:AccessConstraints/text()"),
        ),
        service_provider=ServiceProvider(
            provider_name=xpath.text(node, "ows:ServiceProvider/ows:ProviderName/text()"),
            provider_site=xpath.text(node, "ows:ServiceProvider/ows:ProviderSite/@xlink:href"),
            individual_name=xpath.text(node, f"{contact}/ows:IndividualName/text()"),
            position_name=xpath.text(node, f"{contact}/ows:PositionName/text()"),
            contact_info=ContactInfo(
                phone=Phone(
                    voice=xpath.text(node, f"{info}/ows:Phone/ows:Voice/text()"),
                    facsimile=xpath.text(node, f"{info}/ows:Phone/ows:Facsimile/text()"),
                ),
                address=Address(
                    delivery_point=xpath.text(node, f"{info}/ows:Address/ows:DeliveryPoint/text()"),
                    city=xpath.text(node, f"{info}/ows:Address/ows:City/text()"),
                    administrative_area=xpath.text(node, f"{info}/ows:Address/ows:AdministrativeArea/text()"),
                    postal_code=xpath.text(node, f"{info}/ows:Address/ows:PostalCode/text()"),
                    country=xpath.text(node, f"{info}/ows:Address/ows:Country/text()"),
                    electronic_mail_address=xpath.text(
                        node, f"{info}/ows:Address/ows:ElectronicMailAddress/text()"
                    ),
                ),
                online_resource=xpath.text(node, f"{info}/ows:OnlineResource/@xlink:href"),
                hours_of_service=xpath.text(node, f"{info}/ows:HoursOfService/text()"),
                contact_instructions=xpath.text(node, f"{info}/ows:ContactInstructions/text()"),
            ),
            role=xpath.text(node, f"{contact}/ows:Role/text()"),
        ),
        service_metadata=ServiceMetadata(
            formats_supported=xpath.texts(node, "wcs:ServiceMetadata/wcs:formatSupported/text()"),
            crss_supported=xpath.texts(
                node, "wcs:ServiceMetadata/wcs:Extension/crs:CrsMetadata/crs:crsSupported/text()"
            ),
            interpolations_supported=xpath.texts(
                node,
                "wcs:ServiceMetadata/wcs:Extension/int:InterpolationMetadata/int:InterpolationSupported/text()",
            ),
        ),
        operations=[
            Operation(
                name=operation.get("name", ""),
                get_url=xpath.text(operation, "ows:DCP/ows:HTTP/ows:Get/@xlink:href"),
                post_url=xpath.text(operation, "ows:DCP/ows:HTTP/ows:Post/@xlink:href"),
            )
            for operation in xpath.elements(node, "ows:OperationsMetadata/ows:Operation")
        ],
        contents=Contents(
            coverages=[
                CoverageSummary(
                    coverage_id=xpath.text(summary, "wcs:CoverageId/text()"),
                    coverage_subtype=xpath.text(summary, "wcs:CoverageSubtype/text()"),
                )
                for summary in xpath.elements(node, "wcs:Contents/wcs:CoverageSummary")
            ]
        ),
    )


def parse_coverage_descriptions(node: Element, context: ParseContext) -> CoverageDescriptions:
    """Parse ``wcs:CoverageDescriptions`` by dispatching each child description."""
    return CoverageDescriptions(
        coverage_descriptions=[
            context.dispatch("CoverageDescription", description)
            for description in xpath.elements(node, "wcs:CoverageDescription")
        ]
    )


def parse_coverage_description(node: Element, context: ParseContext) -> CoverageDescription:
    """Parse a ``wcs:CoverageDescription`` (or a ``gml:RectifiedGridCoverage``)."""
    low = string_to_int_array(xpath.text(node, _in_grids("gml:limits/gml:GridEnvelope/gml:low/text()")))
    high = string_to_int_array(xpath.text(node, _in_grids("gml:limits/gml:GridEnvelope/gml:high/text()")))
    size = [hi + 1 - lo for lo, hi in zip(low, high)]

    pos = xpath.text(node, "gml:domainSet/gml:RectifiedGrid/gml:origin/gml:Point/gml:pos/text()")
    origin = string_to_float_array(pos) if pos else None
    offset_vectors = [
        string_to_float_array(vector)
        for vector in xpath.texts(node, "gml:domainSet/gml:RectifiedGrid/gml:offsetVector/text()")
    ]

    projection = xpath.text(node, "gml:boundedBy/gml:Envelope/@srsName")
    return CoverageDescription(
        coverage_id=xpath.text(node, ["wcs:CoverageId/text()", "@gml:id"]),
        dimensions=parse_int(xpath.text(node, _in_grids("@dimension"))),
        axis_labels=xpath.text(node, "gml:boundedBy/gml:Envelope/@axisLabels").split(),
        bounds=Bounds(
            projection=projection,
            lower=string_to_float_array(xpath.text(node, "gml:boundedBy/gml:Envelope/gml:lowerCorner/text()")),
            upper=string_to_float_array(xpath.text(node, "gml:boundedBy/gml:Envelope/gml:upperCorner/text()")),
        ),
        envelope=GridEnvelope(low=low, high=high),
        size=size,
        origin=origin,
        offset_vectors=offset_vectors,
        resolution=axis_resolution(offset_vectors),
        range_type=[
            _parse_range_field(field)
            for field in xpath.elements(node, "gmlcov:rangeType/swe:DataRecord/swe:field")
        ],
        coverage_subtype=xpath.text(node, "wcs:ServiceParameters/wcs:CoverageSubtype/text()"),
        native_format=xpath.text(node, "wcs:ServiceParameters/wcs:nativeFormat/text()"),
        native_crs=xpath.text(node, _in_grids("@srsName")) or projection,
        supported_formats=xpath.texts(
            node,
            ["wcs:ServiceParameters/wcs:supportedFormat/text()", "wcs:ServiceParameters/wcs:SupportedFormat/text()"],
        ),
        supported_crss=xpath.texts(
            node,
            ["wcs:ServiceParameters/wcs:supportedCRS/text()", "wcs:ServiceParameters/wcs:SupportedCRS/text()"],
        ),
    )


def axis_resolution(offset_vectors: List[List[float]]) -> List[float]:
    """
    Simplified per-axis resolution derived from the grid offset vectors.

    For every axis ``i`` the non-zero ``i``-th components of all offset
    vectors are collected. This is only meaningful for axis aligned grids;
    rotated grids yield more values than axes.
    """
    resolution: List[float] = []
    for i in range(len(offset_vectors)):
        for vector in offset_vectors:
            if i < len(vector) and vector[i] != 0.0:
                resolution.append(vector[i])
    return resolution


def _parse_range_field(field: Element) -> RangeField:
    return RangeField(
        name=field.get("name", ""),
        description=xpath.text(field, "swe:Quantity/swe:description/text()"),
        uom=xpath.text(field, "swe:Quantity/swe:uom/@code"),
        nil_values=[
            NilValue(value=parse_number(nil_value.text), reason=nil_value.get("reason", ""))
            for nil_value in xpath.elements(field, "swe:Quantity/swe:nilValues/swe:NilValues/swe:nilValue")
        ],
        allowed_values=string_to_float_array(
            xpath.text(field, "swe:Quantity/swe:constraint/swe:AllowedValues/swe:interval/text()")
        ),
        significant_figures=parse_int(
            xpath.text(field, "swe:Quantity/swe:constraint/swe:AllowedValues/swe:significantFigures/text()")
        ),
    )


CORE_PARSERS: Dict[str, Parser] = {
    "Capabilities": parse_capabilities,
    "ExceptionReport": parse_exception_report,
    "CoverageDescriptions": parse_coverage_descriptions,
    "CoverageDescription": parse_coverage_description,
    "RectifiedGridCoverage": parse_coverage_description,
}

CORE_RESULT_TYPES = {
    "Capabilities": Capabilities,
    "ExceptionReport": ExceptionReport,
    "CoverageDescriptions": CoverageDescriptions,
    "CoverageDescription": CoverageDescription,
    "RectifiedGridCoverage": CoverageDescription,
}


def register(registry: ParserRegistry) -> ParserRegistry:
    """Register the core WCS parsers and result types with ``registry``."""
    registry.register_all(CORE_PARSERS)
    for tag_name, model in CORE_RESULT_TYPES.items():
        registry.register_result_type(tag_name, model)
    logger.debug("Registered %d core WCS parsers", len(CORE_PARSERS))
    return registry
