"""
Models for the Earth Observation application profile of WCS 2.0 (EO-WCS).

The EO models extend the core models, so results parsed with the EO profile
loaded are still instances of the core result types.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from ..types import Capabilities, Contents, CoverageDescription, CoverageDescriptions, ParsedModel


class TimePeriod(ParsedModel):
    """A ``gml:TimePeriod`` with begin and end position."""

    begin: Optional[datetime] = None
    end: Optional[datetime] = None


class DatasetSeriesDescription(ParsedModel):
    """A dataset series description or summary."""

    dataset_series_id: str = ""
    time_period: TimePeriod = Field(default_factory=TimePeriod)


class DatasetSeriesDescriptions(ParsedModel):
    dataset_series_descriptions: List[DatasetSeriesDescription] = Field(default_factory=list)


class EOContents(Contents):
    dataset_series: List[DatasetSeriesDescription] = Field(default_factory=list)


class EOCapabilities(Capabilities):
    """Capabilities with the EO-WCS dataset series summaries."""

    contents: EOContents = Field(default_factory=EOContents)

    @property
    def dataset_series_ids(self) -> List[str]:
        return [series.dataset_series_id for series in self.contents.dataset_series]


class EOCoverageDescription(CoverageDescription):
    """A coverage description with EO metadata."""

    eo_identifier: str = ""
    footprint: List[float] = Field(default_factory=list)
    time_period: Optional[TimePeriod] = None


class EOCoverageSetDescription(CoverageDescriptions):
    """Parsed ``wcseo:EOCoverageSetDescription``."""

    dataset_series_descriptions: List[DatasetSeriesDescription] = Field(default_factory=list)
    number_matched: Optional[int] = None
    number_returned: Optional[int] = None
