"""
Builders for WCS 2.0 request URLs using KVP encoding.

All builders are pure functions: they validate their mandatory arguments,
never modify the options passed in, and return the request URL as string.
Options can be passed as an options model, as a mapping (using either the
Python field names or the camelCase option names), or as keyword arguments.
"""

import logging
from typing import Any, List, Mapping, Optional, Sequence, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import InvalidArgument
from .utils import object_to_kvp

logger = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_SUBSET_CRS",
    "GetCapabilitiesOptions",
    "GetCoverageOptions",
    "SpatialSubsetOptions",
    "build_url",
    "describe_coverage_url",
    "get_capabilities_url",
    "get_coverage_url",
]

SERVICE = "wcs"
VERSION = "2.0.0"
DEFAULT_SUBSET_CRS = "http://www.opengis.net/def/crs/EPSG/0/4326"

Coordinate = Union[int, float, str]
Interval = Tuple[Coordinate, Coordinate]
OptionsT = TypeVar("OptionsT", bound="RequestOptions")


class RequestOptions(BaseModel):
    """Base class for the optional parameters of a request."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid", frozen=True)


class GetCapabilitiesOptions(RequestOptions):
    update_sequence: Optional[str] = Field(None, alias="updatesequence")
    sections: Optional[List[str]] = Field(
        None,
        description='Any of "ServiceIdentification", "ServiceProvider", "OperationsMetadata" and "Contents"',
    )


class SpatialSubsetOptions(RequestOptions):
    """Spatial subsetting shared by GetCoverage and DescribeEOCoverageSet."""

    bbox: Optional[Tuple[Coordinate, Coordinate, Coordinate, Coordinate]] = Field(
        None, description="Convenience form of the subsets: (minx, miny, maxx, maxy)"
    )
    subset_x: Optional[Interval] = Field(None, alias="subsetX")
    subset_y: Optional[Interval] = Field(None, alias="subsetY")
    subset_crs: Optional[str] = Field(None, alias="subsetCRS")


class GetCoverageOptions(SpatialSubsetOptions):
    format: Optional[str] = None
    range_subset: Optional[List[Union[str, int]]] = Field(None, alias="rangeSubset")
    size: Optional[Tuple[int, int]] = None
    size_x: Optional[int] = Field(None, alias="sizeX")
    size_y: Optional[int] = Field(None, alias="sizeY")
    resolution: Optional[Tuple[Union[int, float], Union[int, float]]] = None
    resolution_x: Optional[Union[int, float]] = Field(None, alias="resolutionX")
    resolution_y: Optional[Union[int, float]] = Field(None, alias="resolutionY")
    interpolation: Optional[str] = None
    output_crs: Optional[str] = Field(None, alias="outputCRS")
    multipart: bool = False


def coerce_options(
    model: Type[OptionsT], options: Union[OptionsT, Mapping[str, Any], None], overrides: Mapping[str, Any]
) -> OptionsT:
    """Turn the options argument of a builder into an options model."""
    if isinstance(options, model) and not overrides:
        return options
    if options is None:
        values: dict = {}
    elif isinstance(options, BaseModel):
        values = {name: getattr(options, name) for name in options.model_fields_set}
    elif isinstance(options, Mapping):
        values = dict(options)
    else:
        raise InvalidArgument(f"Invalid options for {model.__name__}: {options!r}")
    values.update(overrides)
    try:
        return model.model_validate(values)
    except ValidationError as exc:
        raise InvalidArgument(f"Invalid {model.__name__}: {exc}", cause=exc) from exc


def require(name: str, value: Any) -> None:
    """Raise :class:`InvalidArgument` when a mandatory argument is missing."""
    if value is None or (isinstance(value, (str, list, tuple)) and len(value) == 0):
        raise InvalidArgument(f"Parameter '{name}' is mandatory.")


def resolve_spatial_subsets(
    options: SpatialSubsetOptions,
) -> Tuple[Optional[Interval], Optional[Interval]]:
    """Return the x and y subsets, derived from ``bbox`` unless given explicitly."""
    subset_x, subset_y = options.subset_x, options.subset_y
    if options.bbox is not None and subset_x is None and subset_y is None:
        min_x, min_y, max_x, max_y = options.bbox
        subset_x, subset_y = (min_x, max_x), (min_y, max_y)
    return subset_x, subset_y


def format_subset(axis: str, interval: Interval, crs: Optional[str] = None) -> str:
    """Format a trimming subset as ``axis(low,high)`` or ``axis,crs(low,high)``."""
    qualifier = f"{axis},{crs}" if crs else axis
    return f"subset={qualifier}({interval[0]},{interval[1]})"


def build_url(url: str, request: str, params: Sequence[str], extra_params: Optional[Mapping[str, Any]] = None) -> str:
    """
    Assemble a request URL.

    The fixed ``service``, ``version`` and ``request`` parameters come first,
    followed by ``params`` and the KVP encoded ``extra_params``.
    """
    query = [f"service={SERVICE}", f"version={VERSION}", f"request={request.lower()}"]
    query.extend(params)
    extra = object_to_kvp(extra_params)
    if extra:
        query.append(extra)
    request_url = _with_separator(url) + "&".join(query)
    logger.debug("Built %s request URL %s", request, request_url)
    return request_url


def _with_separator(url: str) -> str:
    if url.endswith(("?", "&")):
        return url
    if "?" in url:
        return url + "&"
    return url + "?"


def get_capabilities_url(
    url: str,
    options: Union[GetCapabilitiesOptions, Mapping[str, Any], None] = None,
    extra_params: Optional[Mapping[str, Any]] = None,
    **option_values: Any,
) -> str:
    """
    Return a 'GetCapabilities' request URL.

    Args:
        url: Base URL of the service
        options: ``updatesequence`` and ``sections``
        extra_params: Vendor specific parameters, appended to the query string
        **option_values: Options given as keyword arguments

    Returns:
        The request URL
    """
    require("url", url)
    opts = coerce_options(GetCapabilitiesOptions, options, option_values)

    params: List[str] = []
    if opts.update_sequence is not None:
        params.append(f"updatesequence={opts.update_sequence}")
    if opts.sections is not None:
        params.append("sections=" + ",".join(opts.sections))
    return build_url(url, "GetCapabilities", params, extra_params)


def describe_coverage_url(
    url: str,
    coverage_ids: Union[str, Sequence[str]],
    extra_params: Optional[Mapping[str, Any]] = None,
) -> str:
    """
    Return a 'DescribeCoverage' request URL.

    Args:
        url: Base URL of the service
        coverage_ids: A single coverage ID or a sequence thereof
        extra_params: Vendor specific parameters, appended to the query string
    """
    require("url", url)
    if not isinstance(coverage_ids, str) and coverage_ids is not None:
        coverage_ids = list(coverage_ids)
    require("coverageids", coverage_ids)

    ids = coverage_ids if isinstance(coverage_ids, str) else ",".join(str(cid) for cid in coverage_ids)
    return build_url(url, "DescribeCoverage", [f"coverageid={ids}"], extra_params)


def get_coverage_url(
    url: str,
    coverage_id: str,
    options: Union[GetCoverageOptions, Mapping[str, Any], None] = None,
    extra_params: Optional[Mapping[str, Any]] = None,
    **option_values: Any,
) -> str:
    """
    Return a 'GetCoverage' request URL.

    Args:
        url: Base URL of the service
        coverage_id: The ID of the coverage
        options: Any of the :class:`GetCoverageOptions`. ``bbox``, ``size``
            and ``resolution`` are only used when none of their per-axis
            counterparts are given.
        extra_params: Vendor specific parameters, appended to the query string
        **option_values: Options given as keyword arguments

    Returns:
        The request URL

    Raises:
        InvalidArgument: If ``url`` or ``coverage_id`` is missing, or an
            option is invalid
    """
    require("url", url)
    require("coverageid", coverage_id)
    opts = coerce_options(GetCoverageOptions, options, option_values)

    params = [f"coverageid={coverage_id}"]
    if opts.format is not None:
        require("format", opts.format)
        params.append(f"format={opts.format}")

    subset_x, subset_y = resolve_spatial_subsets(opts)
    if subset_x is not None:
        params.append(format_subset("x", subset_x))
    if subset_y is not None:
        params.append(format_subset("y", subset_y))
    if subset_x is not None or subset_y is not None:
        params.append(f"subsettingCrs={opts.subset_crs or DEFAULT_SUBSET_CRS}")

    size_x, size_y = opts.size_x, opts.size_y
    if opts.size is not None and size_x is None and size_y is None:
        size_x, size_y = opts.size
    sizes = []
    if size_x is not None:
        sizes.append(f"x({size_x})")
    if size_y is not None:
        sizes.append(f"y({size_y})")
    if sizes:
        params.append("scalesize=" + ",".join(sizes))

    if opts.range_subset is not None:
        params.append("rangesubset=" + ",".join(str(band) for band in opts.range_subset))

    resolution_x, resolution_y = opts.resolution_x, opts.resolution_y
    if opts.resolution is not None and resolution_x is None and resolution_y is None:
        resolution_x, resolution_y = opts.resolution
    if resolution_x is not None:
        params.append(f"resolution=x({resolution_x})")
    if resolution_y is not None:
        params.append(f"resolution=y({resolution_y})")

    if opts.interpolation is not None:
        params.append(f"interpolation={opts.interpolation}")
    if opts.output_crs is not None:
        params.append(f"outputcrs={opts.output_crs}")
    if opts.multipart:
        params.append("mediatype=multipart/mixed")

    return build_url(url, "GetCoverage", params, extra_params)
