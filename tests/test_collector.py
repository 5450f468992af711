"""Unit tests for sampler collection."""
from __future__ import annotations

import xml.etree.ElementTree as ET

from conftest import jmx_xml, plan_with_samplers, sampler_xml, thread_group_xml, transaction_xml
from services.correlations.collector import (
    TraversalContext,
    build_request_descriptor,
    collect_samplers,
    extract_arguments,
    get_string_prop,
)
from services.correlations.document import Node, normalize_document


def _root(xml: str):
    return normalize_document(ET.fromstring(xml))


class TestCollectSamplers:
    def test_orders_are_global_and_follow_document_order(self) -> None:
        xml = jmx_xml(
            thread_group_xml(sampler_xml("A", "/a") + sampler_xml("B", "/b"), name="TG1"),
            thread_group_xml(sampler_xml("C", "/c"), name="TG2"),
        )
        descriptors = collect_samplers(_root(xml))

        assert [d["name"] for d in descriptors] == ["A", "B", "C"]
        assert [d["order"] for d in descriptors] == [1, 2, 3]

    def test_samplers_nested_in_controllers_are_found_in_place(self) -> None:
        body = (
            sampler_xml("First", "/first")
            + transaction_xml(sampler_xml("Inner1", "/i1") + sampler_xml("Inner2", "/i2"))
            + sampler_xml("Last", "/last")
        )
        descriptors = collect_samplers(_root(plan_with_samplers([body])))
        assert [d["name"] for d in descriptors] == ["First", "Inner1", "Inner2", "Last"]

    def test_plan_without_samplers_yields_nothing(self) -> None:
        assert collect_samplers(_root(jmx_xml(thread_group_xml("")))) == []

    def test_missing_name_defaults_to_sampler_order(self) -> None:
        xml = plan_with_samplers([sampler_xml("Named", "/x"), sampler_xml(None, "/y")])
        descriptors = collect_samplers(_root(xml))
        assert descriptors[1]["name"] == "Sampler-2"

    def test_missing_path_and_method_are_empty(self) -> None:
        descriptors = collect_samplers(_root(plan_with_samplers([sampler_xml("A", None, None)])))
        assert descriptors[0]["path"] == ""
        assert descriptors[0]["method"] == ""

    def test_header_manager_after_sampler_contributes_headers(self) -> None:
        xml = plan_with_samplers([
            sampler_xml("WithHeader", "/me", headers=[("Authorization", "Bearer abc")]),
            sampler_xml("NoHeader", "/other"),
        ])
        first, second = collect_samplers(_root(xml))

        assert {"name": "Authorization", "value": "Bearer abc", "source": "header"} in first["arguments"]
        assert all(a["source"] == "argument" for a in second["arguments"])

    def test_mapping_input_yields_same_samplers(self) -> None:
        raw = {
            "jmeterTestPlan": {
                "hashTree": {
                    "HTTPSamplerProxy": [
                        {"$": {"testname": "Only"},
                         "stringProp": [
                             {"$": {"name": "HTTPSampler.path"}, "_": "/only"},
                             {"$": {"name": "HTTPSampler.method"}, "_": "GET"},
                         ]},
                    ]
                }
            }
        }
        descriptors = collect_samplers(normalize_document(raw))
        assert descriptors == [{
            "order": 1, "name": "Only", "method": "GET", "path": "/only", "arguments": [],
        }]

    def test_childless_samplers_of_every_kind_are_collected(self) -> None:
        root = Node(tag="hashTree", children=(
            Node(tag="HTTPSamplerProxy"),
            Node(tag="HTTPSamplerProxy", attributes={"testname": "Named"}),
            Node(tag="hashTree"),
        ))

        descriptors = collect_samplers(root)

        assert [d["name"] for d in descriptors] == ["Sampler-1", "Named"]
        assert descriptors[0]["arguments"] == []

    def test_depth_bound_skips_deep_subtrees(self) -> None:
        deep = sampler_xml("Deep", "/deep")
        for _ in range(10):
            deep = transaction_xml(deep)
        xml = plan_with_samplers([sampler_xml("Shallow", "/shallow"), deep])

        context = TraversalContext(max_depth=6)
        descriptors = collect_samplers(_root(xml), context)

        assert [d["name"] for d in descriptors] == ["Shallow"]
        assert context.truncated > 0


class TestDescriptorParts:
    def test_arguments_skip_empty_values_and_keep_names(self) -> None:
        xml = plan_with_samplers([
            sampler_xml("A", "/a", "POST", args=[("user", "alice"), ("blank", "  "), (None, '{"k": 1}')]),
        ])
        (descriptor,) = collect_samplers(_root(xml))
        assert descriptor["arguments"] == [
            {"name": "user", "value": "alice", "source": "argument"},
            {"name": None, "value": '{"k": 1}', "source": "argument"},
        ]

    def test_path_and_method_are_stripped(self) -> None:
        sampler = normalize_document(ET.fromstring(
            '<HTTPSamplerProxy testname="S">'
            '<stringProp name="HTTPSampler.path">  /padded  </stringProp>'
            '<stringProp name="HTTPSampler.method"> GET </stringProp>'
            '</HTTPSamplerProxy>'
        ))
        descriptor = build_request_descriptor(sampler, 7)
        assert descriptor["path"] == "/padded"
        assert descriptor["method"] == "GET"
        assert descriptor["order"] == 7

    def test_get_string_prop_absent(self) -> None:
        sampler = normalize_document(ET.fromstring("<HTTPSamplerProxy/>"))
        assert get_string_prop(sampler, "HTTPSampler.path") is None
        assert extract_arguments(sampler) == []
