"""
Typed models for parsed WCS 2.0 responses.

Every field carries a default, so a model instance with only some fields set
doubles as a *partial* result: the parser registry merges the explicitly set
fields of all partials for an element and validates the merged data into the
model bound to the element's tag. Keys a model does not declare are kept as
extra attributes, so fields added by extension parsers survive the merge.
"""

from typing import List, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from .errors import ServiceException

Number = Union[int, float]


class ParsedModel(BaseModel):
    """Base class for all parsed document models."""

    model_config = ConfigDict(extra="allow")


class ParseOptions(BaseModel):
    """Options controlling how responses are parsed."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    throw_on_exception: bool = Field(
        default=False,
        validation_alias=AliasChoices("throw_on_exception", "throwOnException"),
        description="Raise ServiceException when an ExceptionReport is parsed",
    )


# ----------------------------------------------------------------------
# ExceptionReport
# ----------------------------------------------------------------------


class ExceptionReport(ParsedModel):
    """A service exception, returned as a value."""

    code: Optional[str] = None
    locator: Optional[str] = None
    text: str = ""

    def to_exception(self) -> ServiceException:
        return ServiceException(self.text, code=self.code, locator=self.locator)


# ----------------------------------------------------------------------
# Capabilities
# ----------------------------------------------------------------------


class ServiceIdentification(ParsedModel):
    title: str = ""
    abstract: str = ""
    keywords: List[str] = Field(default_factory=list)
    service_type: str = ""
    service_type_version: str = ""
    profiles: List[str] = Field(default_factory=list)
    fees: str = ""
    access_constraints: str = ""


class Phone(ParsedModel):
    voice: str = ""
    facsimile: str = ""


class Address(ParsedModel):
    delivery_point: str = ""
    city: str = ""
    administrative_area: str = ""
    postal_code: str = ""
    country: str = ""
    electronic_mail_address: str = ""


class ContactInfo(ParsedModel):
    phone: Phone = Field(default_factory=Phone)
    address: Address = Field(default_factory=Address)
    online_resource: str = ""
    hours_of_service: str = ""
    contact_instructions: str = ""


class ServiceProvider(ParsedModel):
    provider_name: str = ""
    provider_site: str = ""
    individual_name: str = ""
    position_name: str = ""
    contact_info: ContactInfo = Field(default_factory=ContactInfo)
    role: str = ""


class ServiceMetadata(ParsedModel):
    formats_supported: List[str] = Field(default_factory=list)
    crss_supported: List[str] = Field(default_factory=list)
    interpolations_supported: List[str] = Field(default_factory=list)


class Operation(ParsedModel):
    """An operation advertised in ``ows:OperationsMetadata``."""

    name: str = ""
    get_url: str = ""
    post_url: str = ""


class CoverageSummary(ParsedModel):
    coverage_id: str = ""
    coverage_subtype: str = ""


class Contents(ParsedModel):
    coverages: List[CoverageSummary] = Field(default_factory=list)


class Capabilities(ParsedModel):
    """Parsed ``wcs:Capabilities`` document."""

    version: str = ""
    update_sequence: str = ""
    service_identification: ServiceIdentification = Field(default_factory=ServiceIdentification)
    service_provider: ServiceProvider = Field(default_factory=ServiceProvider)
    service_metadata: ServiceMetadata = Field(default_factory=ServiceMetadata)
    operations: List[Operation] = Field(default_factory=list)
    contents: Contents = Field(default_factory=Contents)

    def get_operation(self, name: str) -> Optional[Operation]:
        """Return the advertised operation with the given name (case insensitive)."""
        wanted = name.lower()
        for operation in self.operations:
            if operation.name.lower() == wanted:
                return operation
        return None

    @property
    def coverage_ids(self) -> List[str]:
        return [summary.coverage_id for summary in self.contents.coverages]


# ----------------------------------------------------------------------
# CoverageDescription(s)
# ----------------------------------------------------------------------


class Bounds(ParsedModel):
    """The ``gml:Envelope`` of a coverage."""

    projection: str = ""
    lower: List[float] = Field(default_factory=list)
    upper: List[float] = Field(default_factory=list)


class GridEnvelope(ParsedModel):
    """Integer grid limits of a coverage."""

    low: List[int] = Field(default_factory=list)
    high: List[int] = Field(default_factory=list)


class NilValue(ParsedModel):
    value: Optional[Number] = None
    reason: str = ""


class RangeField(ParsedModel):
    """A band of the coverage range type (``swe:field``)."""

    name: str = ""
    description: str = ""
    uom: str = ""
    nil_values: List[NilValue] = Field(default_factory=list)
    allowed_values: List[float] = Field(default_factory=list)
    significant_figures: Optional[int] = None


class CoverageDescription(ParsedModel):
    """Parsed ``wcs:CoverageDescription`` element."""

    coverage_id: str = ""
    dimensions: Optional[int] = None
    axis_labels: List[str] = Field(default_factory=list)
    bounds: Bounds = Field(default_factory=Bounds)
    envelope: GridEnvelope = Field(default_factory=GridEnvelope)
    size: List[int] = Field(default_factory=list)
    origin: Optional[List[float]] = None
    offset_vectors: List[List[float]] = Field(default_factory=list)
    resolution: List[float] = Field(default_factory=list)
    range_type: List[RangeField] = Field(default_factory=list)
    coverage_subtype: str = ""
    native_format: str = ""
    native_crs: str = ""
    supported_formats: List[str] = Field(default_factory=list)
    supported_crss: List[str] = Field(default_factory=list)


class CoverageDescriptions(ParsedModel):
    """Parsed ``wcs:CoverageDescriptions`` element."""

    coverage_descriptions: List[CoverageDescription] = Field(default_factory=list)

    @property
    def coverage_ids(self) -> List[str]:
        return [description.coverage_id for description in self.coverage_descriptions]

    def get(self, coverage_id: str) -> Optional[CoverageDescription]:
        for description in self.coverage_descriptions:
            if description.coverage_id == coverage_id:
                return description
        return None
