"""
Tests for the EO-WCS DescribeEOCoverageSet URL builder.
"""

from datetime import datetime, timezone

import pytest

from libcoverage.eowcs import DescribeEOCoverageSetOptions, describe_eo_coverage_set_url
from libcoverage.errors import InvalidArgument
from libcoverage.kvp import DEFAULT_SUBSET_CRS

URL = "http://example.com/ows"


def tokens(url):
    return url.split("?", 1)[1].split("&")


@pytest.mark.unit
class TestDescribeEOCoverageSet:
    def test_minimal(self):
        url = describe_eo_coverage_set_url(URL, "MER_FRS_1P")
        assert tokens(url) == ["service=wcs", "version=2.0.0", "request=describeeocoverageset", "eoid=MER_FRS_1P"]

    def test_missing_eoid(self):
        with pytest.raises(InvalidArgument):
            describe_eo_coverage_set_url(URL, "")

    def test_bbox(self):
        url = describe_eo_coverage_set_url(URL, "DS", {"bbox": [10, 40, 12, 42]})
        assert tokens(url)[4:] == [f"subset=x,{DEFAULT_SUBSET_CRS}(10,12)", f"subset=y,{DEFAULT_SUBSET_CRS}(40,42)"]

    def test_subset_crs_defaults_to_wgs84(self):
        """Subsets without an explicit CRS are qualified with EPSG:4326."""
        url = describe_eo_coverage_set_url(URL, "DS", subset_y=(40, 42))
        assert tokens(url)[4:] == ["subset=y,http://www.opengis.net/def/crs/EPSG/0/4326(40,42)"]

    def test_subset_crs_qualifies_axes(self):
        crs = "http://www.opengis.net/def/crs/EPSG/0/3857"
        url = describe_eo_coverage_set_url(URL, "DS", {"subsetX": [1, 2], "subsetCRS": crs})
        assert f"subset=x,{crs}(1,2)" in tokens(url)
        assert not any(token.startswith("subsettingCrs") for token in tokens(url))

    def test_time_subset(self):
        begin = datetime(2006, 8, 1, tzinfo=timezone.utc)
        url = describe_eo_coverage_set_url(URL, "DS", subset_time=(begin, "2006-08-31T23:59:59Z"))
        assert 'subset=phenomenonTime("2006-08-01T00:00:00Z","2006-08-31T23:59:59Z")' in tokens(url)

    def test_all_options_in_order(self):
        options = DescribeEOCoverageSetOptions(
            subset_x=(0, 1),
            subset_y=(2, 3),
            containment="contains",
            count=0,
            sections=["CoverageDescriptions"],
        )
        url = describe_eo_coverage_set_url(URL, "DS", options, {"vendor": "x"})
        assert tokens(url)[4:] == [
            f"subset=x,{DEFAULT_SUBSET_CRS}(0,1)",
            f"subset=y,{DEFAULT_SUBSET_CRS}(2,3)",
            "containment=contains",
            "count=0",
            "sections=CoverageDescriptions",
            "vendor=x",
        ]

    def test_invalid_containment(self):
        with pytest.raises(InvalidArgument):
            describe_eo_coverage_set_url(URL, "DS", containment="within")

    def test_negative_count(self):
        with pytest.raises(InvalidArgument):
            describe_eo_coverage_set_url(URL, "DS", count=-1)
