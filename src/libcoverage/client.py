"""
Thin HTTP client performing WCS requests with :mod:`requests`.

The client only glues the URL builders and the parser to a
``requests.Session``: one GET per call, no retries.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Sequence, Union

import requests
from pydantic import BaseModel, Field

from .eowcs.kvp import DescribeEOCoverageSetOptions, describe_eo_coverage_set_url
from .eowcs.types import EOCoverageSetDescription
from .errors import NetworkError, ParseError
from .kvp import GetCapabilitiesOptions, GetCoverageOptions, describe_coverage_url, get_capabilities_url, get_coverage_url
from .parser import WCSParser
from .registry import load_root
from .types import Capabilities, CoverageDescriptions
from .xpath import local_name

logger = logging.getLogger(__name__)

XML_CONTENT_TYPES = ("text/xml", "application/xml", "application/gml+xml")


class CoverageResponse(BaseModel):
    """Raw coverage data returned by GetCoverage."""

    data: bytes
    content_type: str = ""
    status_code: int
    url: str
    headers: Dict[str, str] = Field(default_factory=dict)


class WCSClient:
    """Client for WCS and EO-WCS operations."""

    def __init__(
        self,
        base_url: str,
        *,
        session: Optional[requests.Session] = None,
        parser: Optional[WCSParser] = None,
        extra_params: Optional[Mapping[str, Any]] = None,
        headers: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = 30,
    ) -> None:
        """
        Initialize WCS client.

        Args:
            base_url: Base URL of the WCS service
            session: Session used for the requests
            parser: Parser for the responses, by default with the EO-WCS profile
            extra_params: Vendor specific parameters added to every request
            headers: Additional HTTP headers
            timeout: Request timeout in seconds
        """
        self.base_url = base_url
        self.session = session or requests.Session()
        self.parser = parser or WCSParser()
        self.extra_params: Dict[str, Any] = dict(extra_params or {})
        self.headers: Dict[str, str] = dict(headers or {})
        self.timeout = timeout

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def get_capabilities(
        self,
        options: Union[GetCapabilitiesOptions, Mapping[str, Any], None] = None,
        extra_params: Optional[Mapping[str, Any]] = None,
    ) -> Capabilities:
        url = get_capabilities_url(self.base_url, options, self._extra(extra_params))
        return self.parser.parse_capabilities(self._fetch(url).content)

    def describe_coverage(
        self,
        coverage_ids: Union[str, Sequence[str]],
        extra_params: Optional[Mapping[str, Any]] = None,
    ) -> CoverageDescriptions:
        url = describe_coverage_url(self.base_url, coverage_ids, self._extra(extra_params))
        return self.parser.parse_coverage_descriptions(self._fetch(url).content)

    def describe_eo_coverage_set(
        self,
        eoid: str,
        options: Union[DescribeEOCoverageSetOptions, Mapping[str, Any], None] = None,
        extra_params: Optional[Mapping[str, Any]] = None,
    ) -> EOCoverageSetDescription:
        url = describe_eo_coverage_set_url(self.base_url, eoid, options, self._extra(extra_params))
        return self.parser.parse_eo_coverage_set_description(self._fetch(url).content)

    def get_coverage(
        self,
        coverage_id: str,
        options: Union[GetCoverageOptions, Mapping[str, Any], None] = None,
        extra_params: Optional[Mapping[str, Any]] = None,
    ) -> CoverageResponse:
        """
        Get coverage data.

        Raises:
            ServiceException: If the service answered with an exception report
            NetworkError: If the request failed
        """
        url = get_coverage_url(self.base_url, coverage_id, options, self._extra(extra_params))
        response = self._fetch(url)
        content_type = response.headers.get("Content-Type", "")
        if content_type.split(";")[0].strip() in XML_CONTENT_TYPES:
            self._raise_for_exception_report(response.content)

        return CoverageResponse(
            data=response.content,
            content_type=content_type,
            status_code=response.status_code,
            url=url,
            headers=dict(response.headers),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _extra(self, extra_params: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        return {**self.extra_params, **(extra_params or {})}

    def _fetch(self, url: str) -> requests.Response:
        logger.debug("WCS request: %s", url)
        try:
            response = self.session.get(url, headers=self.headers or None, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.debug("WCS request failed: %s", exc, exc_info=True)
            raise NetworkError(f"Request to {url} failed: {exc}", cause=exc) from exc

        if response.status_code >= 400:
            # OWS services report errors as XML exception reports with 4xx/5xx codes
            self._raise_for_exception_report(response.content)
            try:
                response.raise_for_status()
            except requests.HTTPError as exc:
                raise NetworkError(f"Request to {url} failed: {exc}", cause=exc) from exc
        return response

    def _raise_for_exception_report(self, content: bytes) -> None:
        try:
            root = load_root(content)
        except ParseError:
            logger.debug("Response body is not XML")
            return
        if local_name(root) == "ExceptionReport":
            self.parser.parse(root, throw_on_exception=True)
