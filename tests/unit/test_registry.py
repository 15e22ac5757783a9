"""
Tests for the parser registry: registration, dispatch and merging.
"""

import threading
from typing import List
from xml.etree.ElementTree import fromstring

import pytest
from pydantic import Field

from libcoverage import ParserRegistry, create_registry
from libcoverage.errors import ConfigurationError, NoParserRegistered, ParseError, ServiceException
from libcoverage.types import ExceptionReport, ParsedModel, ParseOptions

NODE = fromstring("<Foo/>")


class Foo(ParsedModel):
    a: int = 0
    items: List[str] = Field(default_factory=list)


class ExtendedFoo(Foo):
    b: int = 0


class Other(ParsedModel):
    value: str = ""


@pytest.mark.unit
class TestRegistration:
    """Test registering parsing functions."""

    def setup_method(self):
        self.registry = ParserRegistry()

    def test_unknown_tag(self):
        """Dispatching a tag without parsers is an error, not an empty result."""
        with pytest.raises(NoParserRegistered) as excinfo:
            self.registry.dispatch("UnknownTag", NODE)
        assert excinfo.value.tag_name == "UnknownTag"
        assert "UnknownTag" in str(excinfo.value)

    def test_single_contributor(self):
        self.registry.register("Foo", lambda node, context: {"a": 1, "nested": {"x": [1, 2]}})
        assert self.registry.dispatch("Foo", NODE) == {"a": 1, "nested": {"x": [1, 2]}}

    def test_merge_in_registration_order(self):
        self.registry.register("Foo", lambda node, context: {"a": 1, "nested": {"x": 1}})
        self.registry.register("Foo", lambda node, context: {"b": 2, "nested": {"y": 2}})
        assert self.registry.dispatch("Foo", NODE) == {"a": 1, "b": 2, "nested": {"x": 1, "y": 2}}

    def test_later_leaf_wins(self):
        self.registry.register("Foo", lambda node, context: {"footprint": [1, 2, 3]})
        self.registry.register("Foo", lambda node, context: {"footprint": [4]})
        assert self.registry.dispatch("Foo", NODE) == {"footprint": [4]}

    def test_duplicate_registration_runs_twice(self):
        calls = []

        def parser(node, context):
            calls.append(node)
            return {}

        self.registry.register("Foo", parser)
        self.registry.register("Foo", parser)
        self.registry.dispatch("Foo", NODE)
        assert len(calls) == 2

    def test_register_all_and_decorator(self):
        self.registry.register_all({
            "Foo": lambda node, context: {"a": 1},
            "Bar": lambda node, context: {"b": 1},
        })

        @self.registry.parser("Foo")
        def more(node, context):
            return {"c": 3}

        assert self.registry.tag_names == ["Foo", "Bar"]
        assert "Foo" in self.registry
        assert len(self.registry.get_parsers("Foo")) == 2
        assert self.registry.dispatch("Foo", NODE) == {"a": 1, "c": 3}

    def test_not_callable(self):
        with pytest.raises(ConfigurationError):
            self.registry.register("Foo", "not a function")

    def test_none_partial(self):
        self.registry.register("Foo", lambda node, context: None)
        assert self.registry.dispatch("Foo", NODE) == {}

    def test_invalid_partial(self):
        self.registry.register("Foo", lambda node, context: [1, 2])
        with pytest.raises(ParseError):
            self.registry.dispatch("Foo", NODE)

    def test_registries_are_isolated(self):
        other = ParserRegistry()
        self.registry.register("Foo", lambda node, context: {})
        assert "Foo" not in other

    def test_copy(self):
        self.registry.register("Foo", lambda node, context: {"a": 1})
        clone = self.registry.copy()
        clone.register("Foo", lambda node, context: {"b": 2})
        assert self.registry.dispatch("Foo", NODE) == {"a": 1}
        assert clone.dispatch("Foo", NODE) == {"a": 1, "b": 2}


@pytest.mark.unit
class TestTypedResults:
    """Test merging typed partials into bound result models."""

    def setup_method(self):
        self.registry = ParserRegistry()
        self.registry.register_result_type("Foo", Foo)

    def test_model_partials_merge(self):
        self.registry.register("Foo", lambda node, context: Foo(a=5, items=["x"]))
        self.registry.register_result_type("Foo", ExtendedFoo)
        self.registry.register("Foo", lambda node, context: ExtendedFoo(b=7))

        result = self.registry.dispatch("Foo", NODE)

        assert isinstance(result, ExtendedFoo)
        assert result.a == 5
        assert result.items == ["x"]
        assert result.b == 7

    def test_unset_fields_do_not_override(self):
        """Only explicitly set fields of a partial take part in the merge."""
        self.registry.register("Foo", lambda node, context: Foo(a=5))
        self.registry.register("Foo", lambda node, context: Foo(items=["y"]))
        result = self.registry.dispatch("Foo", NODE)
        assert result.a == 5
        assert result.items == ["y"]

    def test_rebind_requires_subclass(self):
        with pytest.raises(ConfigurationError):
            self.registry.register_result_type("Foo", Other)
        assert self.registry.get_result_type("Foo") is Foo

    def test_result_type_must_be_model(self):
        with pytest.raises(ConfigurationError):
            self.registry.register_result_type("Bar", dict)

    def test_invalid_merged_result(self):
        self.registry.register("Foo", lambda node, context: {"a": "not a number"})
        with pytest.raises(ParseError):
            self.registry.dispatch("Foo", NODE)

    def test_undeclared_keys_kept(self):
        """Keys an extension adds to a typed result survive the merge."""
        self.registry.register("Foo", lambda node, context: Foo(a=5))
        self.registry.register("Foo", lambda node, context: {"vendor_quality": 0.9})

        result = self.registry.dispatch("Foo", NODE)

        assert isinstance(result, Foo)
        assert result.a == 5
        assert result.vendor_quality == 0.9
        assert result.model_extra == {"vendor_quality": 0.9}

    def test_undeclared_keys_of_model_partials(self):
        self.registry.register("Foo", lambda node, context: Foo(a=1, vendor={"x": 1}))
        self.registry.register("Foo", lambda node, context: Foo(vendor={"y": 2}))

        result = self.registry.dispatch("Foo", NODE)

        assert result.vendor == {"x": 1, "y": 2}

    def test_undeclared_keys_in_nested_models(self):
        registry = create_registry()
        registry.register(
            "Capabilities", lambda node, context: {"contents": {"vendor_layers": ["a"]}}
        )

        capabilities = registry.parse(
            '<wcs:Capabilities xmlns:wcs="http://www.opengis.net/wcs/2.0">'
            "<wcs:Contents><wcs:CoverageSummary><wcs:CoverageId>c1</wcs:CoverageId>"
            "</wcs:CoverageSummary></wcs:Contents></wcs:Capabilities>"
        )

        assert capabilities.coverage_ids == ["c1"]
        assert capabilities.contents.vendor_layers == ["a"]

    def test_extension_field_on_coverage_description(self):
        registry = create_registry()
        registry.register("CoverageDescription", lambda node, context: {"vendor_quality": 0.9})

        description = registry.parse(
            '<wcs:CoverageDescription xmlns:wcs="http://www.opengis.net/wcs/2.0">'
            "<wcs:CoverageId>c1</wcs:CoverageId></wcs:CoverageDescription>"
        )

        assert description.coverage_id == "c1"
        assert description.vendor_quality == 0.9


@pytest.mark.unit
class TestNestedDispatch:
    def test_context_dispatches_children(self):
        registry = ParserRegistry()
        registry.register(
            "List", lambda node, context: {"items": [context.dispatch("Item", child) for child in node]}
        )
        registry.register("Item", lambda node, context: {"name": node.get("name")})

        result = registry.parse("<List><Item name='a'/><Item name='b'/></List>")
        assert result == {"items": [{"name": "a"}, {"name": "b"}]}

    def test_options_reach_parsers(self):
        registry = ParserRegistry()
        seen = []
        registry.register("Foo", lambda node, context: seen.append(context.options) or {})

        registry.parse("<Foo/>", {"throwOnException": True})
        registry.parse("<Foo/>")

        assert seen[0].throw_on_exception is True
        assert seen[1].throw_on_exception is False


@pytest.mark.unit
class TestParse:
    def setup_method(self):
        self.registry = ParserRegistry()
        self.registry.register(
            "ExceptionReport", lambda node, context: ExceptionReport(code="NoSuchCoverage", text="missing")
        )
        self.registry.register_result_type("ExceptionReport", ExceptionReport)

    def test_namespaced_root(self):
        self.registry.register("Foo", lambda node, context: {"tag": node.tag})
        result = self.registry.parse('<x:Foo xmlns:x="http://example.com/x"/>')
        assert result == {"tag": "{http://example.com/x}Foo"}

    def test_accepts_bytes_and_elements(self):
        self.registry.register("Foo", lambda node, context: {"a": 1})
        assert self.registry.parse(b"<Foo/>") == {"a": 1}
        assert self.registry.parse(NODE) == {"a": 1}

    def test_exception_report_returned(self):
        result = self.registry.parse("<ExceptionReport/>")
        assert isinstance(result, ExceptionReport)
        assert result.code == "NoSuchCoverage"

    def test_exception_report_raised(self):
        with pytest.raises(ServiceException) as excinfo:
            self.registry.parse("<ExceptionReport/>", throw_on_exception=True)
        assert excinfo.value.code == "NoSuchCoverage"

    def test_default_options(self):
        registry = ParserRegistry(ParseOptions(throw_on_exception=True))
        registry.register("ExceptionReport", lambda node, context: ExceptionReport(text="boom"))
        registry.register_result_type("ExceptionReport", ExceptionReport)
        with pytest.raises(ServiceException):
            registry.parse("<ExceptionReport/>")
        assert isinstance(registry.parse("<ExceptionReport/>", throw_on_exception=False), ExceptionReport)

    def test_malformed_xml(self):
        with pytest.raises(ParseError):
            self.registry.parse("<ExceptionReport>")

    def test_entities_rejected(self):
        xml = '<!DOCTYPE x [<!ENTITY e "boom">]><ExceptionReport>&e;</ExceptionReport>'
        with pytest.raises(ParseError):
            self.registry.parse(xml)


@pytest.mark.unit
def test_concurrent_registration_and_dispatch():
    """Dispatch never observes a partially updated parser list."""
    registry = ParserRegistry()
    registry.register("Foo", lambda node, context: {"a": 1})
    errors = []

    def register_many():
        for i in range(200):
            registry.register("Foo", lambda node, context, i=i: {"last": i})

    def dispatch_many():
        for _ in range(200):
            try:
                result = registry.dispatch("Foo", NODE)
                assert result["a"] == 1
            except Exception as exc:  # noqa: BLE001
                errors.append(exc)

    threads = [threading.Thread(target=register_many), threading.Thread(target=dispatch_many)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert len(registry.get_parsers("Foo")) == 201
