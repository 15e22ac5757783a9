"""
KVP request builder for the EO-WCS ``DescribeEOCoverageSet`` operation.
"""

from datetime import datetime
from typing import Any, List, Literal, Mapping, Optional, Tuple, Union

from pydantic import Field

from ..kvp import (
    DEFAULT_SUBSET_CRS,
    SpatialSubsetOptions,
    build_url,
    coerce_options,
    format_subset,
    require,
    resolve_spatial_subsets,
)
from ..utils import format_datetime

TimeStamp = Union[datetime, str]


class DescribeEOCoverageSetOptions(SpatialSubsetOptions):
    subset_time: Optional[Tuple[TimeStamp, TimeStamp]] = Field(None, alias="subsetTime")
    containment: Optional[Literal["overlaps", "contains"]] = None
    count: Optional[int] = Field(None, ge=0)
    sections: Optional[List[str]] = Field(
        None, description='Any of "CoverageDescriptions" and "DatasetSeriesDescriptions"'
    )


def describe_eo_coverage_set_url(
    url: str,
    eoid: str,
    options: Union[DescribeEOCoverageSetOptions, Mapping[str, Any], None] = None,
    extra_params: Optional[Mapping[str, Any]] = None,
    **option_values: Any,
) -> str:
    """
    Return a 'DescribeEOCoverageSet' request URL.

    Args:
        url: Base URL of the service
        eoid: The ID of the coverage, dataset series or stitched mosaic
        options: Any of the :class:`DescribeEOCoverageSetOptions`.
            The spatial subsets are qualified with ``subsetCRS``, EPSG:4326 by default.
        extra_params: Vendor specific parameters, appended to the query string
        **option_values: Options given as keyword arguments

    Returns:
        The request URL

    Raises:
        InvalidArgument: If ``url`` or ``eoid`` is missing, or an option is invalid
    """
    require("url", url)
    require("eoid", eoid)
    opts = coerce_options(DescribeEOCoverageSetOptions, options, option_values)

    params = [f"eoid={eoid}"]
    subset_x, subset_y = resolve_spatial_subsets(opts)
    subset_crs = opts.subset_crs or DEFAULT_SUBSET_CRS
    if subset_x is not None:
        params.append(format_subset("x", subset_x, subset_crs))
    if subset_y is not None:
        params.append(format_subset("y", subset_y, subset_crs))
    if opts.subset_time is not None:
        begin, end = (format_datetime(value) for value in opts.subset_time)
        params.append(f'subset=phenomenonTime("{begin}","{end}")')
    if opts.containment is not None:
        params.append(f"containment={opts.containment}")
    if opts.count is not None:
        params.append(f"count={opts.count}")
    if opts.sections is not None:
        params.append("sections=" + ",".join(opts.sections))

    return build_url(url, "DescribeEOCoverageSet", params, extra_params)
