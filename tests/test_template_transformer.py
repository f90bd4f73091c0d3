import json

import pytest

from h2j import TemplateTransformer
from h2j.converters.template_transformer import format_path
from h2j.utils import ConfigurationError, TemplateError, TraceLogger, UnsupportedTemplateError, VerbosityLevel


def render(template, message, flat_profile, concat_delimiter=None, trace_logger=None):
    return TemplateTransformer(template, flat_profile).transform(message, concat_delimiter, trace_logger)


class TestLeaves:

    def test_single_value(self, sample_message, flat_profile):
        assert render({"id": "MSH-10"}, sample_message, flat_profile) == {"id": "MSG00001"}

    def test_many_values_become_array(self, sample_message, flat_profile):
        output = render({"ids": "PID-3.1"}, sample_message, flat_profile)
        assert output == {"ids": ["A123", "B456"]}

    def test_many_values_joined(self, sample_message, flat_profile):
        output = render({"ids": "PID-3.1", "values": "OBX-5.1"}, sample_message, flat_profile, ", ")
        assert output["ids"] == "A123, B456"
        assert output["values"] == "3092008, 1, 2, 3, Final report"

    def test_selector(self, sample_message, flat_profile):
        output = render(
            {"first": "PID-3.1(0)", "second": "PID-3.1(1)", "fourth": "OBX-5.1(3)", "missing": "PID-3.1(3)"},
            sample_message,
            flat_profile
        )
        assert output == {"first": "A123", "second": "B456", "fourth": "3", "missing": None}

    def test_selector_on_bare_repetitions(self, flat_profile):
        output = render({"id": "PID-3(1)"}, "MSH|^~\\&|LAB|FAC\rPID|1||A123~B456", flat_profile)
        assert output == {"id": "B456"}

    def test_unresolved_leaf_is_null(self, sample_message, flat_profile):
        output = render({"a": "ZZZ-1", "b": "PID-4", "c": "plain text"}, sample_message, flat_profile)
        assert output == {"a": None, "b": None, "c": None}

    def test_non_string_scalars_are_constants(self, sample_message, flat_profile):
        template = {"version": 1, "active": True, "note": None, "ratio": 0.5}
        assert render(template, sample_message, flat_profile) == template

    def test_nested_objects(self, sample_message, flat_profile):
        output = render({"patient": {"name": {"family": "PID-5.1", "given": "PID-5.2"}}}, sample_message, flat_profile)
        assert output == {"patient": {"name": {"family": "DOE", "given": "JOHN"}}}


class TestDynamicKeys:

    def test_key_resolves_to_name(self, sample_message, flat_profile):
        output = render(
            {"before": "PID-8", "$$OBX[1]-3.1": "OBX[1]-5.2", "after": "PID-7"},
            sample_message,
            flat_profile
        )
        assert output == {"before": "M", "625-4": "Staphylococcus aureus", "after": "19800101"}
        assert list(output) == ["before", "625-4", "after"]

    def test_unresolved_key_is_dropped(self, sample_message, flat_profile):
        trace_logger = TraceLogger(verbosity=VerbosityLevel.NORMAL)
        output = render({"sex": "PID-8", "$$ZZZ-1": "PID-7"}, sample_message, flat_profile,
                        trace_logger=trace_logger)
        assert output == {"sex": "M"}
        assert "dynamic key did not resolve" in trace_logger.entries_of("decision")[0]["title"]

    def test_dynamic_key_with_object_value(self, sample_message, flat_profile):
        output = render({"$$MSH-9.1": {"control": "MSH-10"}}, sample_message, flat_profile)
        assert output == {"ORU": {"control": "MSG00001"}}

    def test_no_placeholder_keys_remain(self, sample_message, flat_profile, resource_manager):
        template = resource_manager.load_template("simpleTemplate.json")

        def keys(node):
            if isinstance(node, dict):
                for key, value in node.items():
                    yield key
                    yield from keys(value)
            elif isinstance(node, list):
                for value in node:
                    yield from keys(value)

        output = render(template, sample_message, flat_profile)
        assert not any(key.startswith("$$") for key in keys(output))


class TestArrays:

    def test_one_element_per_segment(self, sample_message, flat_profile):
        output = render({"observations": [{"value": "OBX-5"}]}, sample_message, flat_profile)
        assert output["observations"] == [
            {"value": "3092008^Staphylococcus aureus^SCT"},
            {"value": ["1", "2", "3"]},
            {"value": "Final report"},
        ]

    def test_join_inside_arrays(self, sample_message, flat_profile):
        output = render({"observations": [{"value": "OBX-5"}]}, sample_message, flat_profile, "|")
        assert output["observations"][1] == {"value": "1|2|3"}

    def test_leaves_are_merged_by_index(self, sample_message, flat_profile):
        template = {"observations": [{
            "setId": "OBX-1",
            "code": {"id": "OBX-3.1", "text": "OBX-3.2"},
            "units": "OBX-6.1",
            "priority": 1
        }]}
        output = render(template, sample_message, flat_profile)
        assert output["observations"][1] == {
            "setId": "2",
            "code": {"id": "2345-7", "text": "Glucose"},
            "units": "mg/dL",
            "priority": 1,
        }
        assert output["observations"][0]["units"] is None
        assert [o["code"]["id"] for o in output["observations"]] == ["625-4", "2345-7", "8251-1"]

    def test_count_is_longest_leaf(self, sample_message, flat_profile):
        output = render({"rows": [{"obx": "OBX-1", "pid": "PID-8"}]}, sample_message, flat_profile)
        assert output["rows"] == [
            {"obx": "1", "pid": "M"},
            {"obx": "2", "pid": None},
            {"obx": "3", "pid": None},
        ]

    def test_selector_inside_array(self, sample_message, flat_profile):
        output = render({"obs": [{"second": "OBX-5(1)"}]}, sample_message, flat_profile)
        assert [o["second"] for o in output["obs"]] == [None, "2", None]

    def test_dynamic_keys_per_repetition(self, sample_message, flat_profile):
        output = render({"results": [{"$$OBX[*]-3.1": "OBX-5.1"}]}, sample_message, flat_profile)
        assert output["results"] == [
            {"625-4": "3092008"},
            {"2345-7": ["1", "2", "3"]},
            {"8251-1": "Final report"},
        ]

    def test_no_matches_gives_empty_array(self, sample_message, flat_profile):
        assert render({"notes": [{"text": "NTE-3"}]}, sample_message, flat_profile) == {"notes": []}

    def test_array_expansion_is_traced(self, sample_message, flat_profile):
        trace_logger = TraceLogger(verbosity=VerbosityLevel.DETAILED)
        render({"observations": [{"value": "OBX-5"}]}, sample_message, flat_profile, trace_logger=trace_logger)
        assert trace_logger.entries_of("decision")[0]["title"] == "Expanded $.observations into 3 element(s)"

    def test_array_in_array_element_is_unsupported(self, sample_message, flat_profile):
        with pytest.raises(UnsupportedTemplateError) as excinfo:
            render({"observations": [{"codes": ["OBX-3"]}]}, sample_message, flat_profile)
        assert excinfo.value.path == "$.observations[*].codes"

    def test_array_directly_in_array_is_unsupported(self, sample_message, flat_profile):
        with pytest.raises(UnsupportedTemplateError) as excinfo:
            render({"patient": {"ids": [["PID-3"]]}}, sample_message, flat_profile)
        assert excinfo.value.path == "$.patient.ids[*]"


def test_format_path():
    assert format_path(("a", "[*]", "b")) == "$.a[*].b"
    assert format_path(()) == "$"


def test_template_is_not_mutated(sample_message, flat_profile):
    template = {"observations": [{"value": "OBX-5"}], "id": "MSH-10"}
    transformer = TemplateTransformer(template, flat_profile)
    transformer.transform(sample_message)
    assert transformer.template == template
    assert transformer.transform(sample_message) == transformer.transform(sample_message)


def test_simple_template_resource(sample_message):
    transformer = TemplateTransformer.from_resources("simpleTemplate.json", "PhinGuideProfile.json")
    output = transformer.transform(sample_message)

    assert output["message"]["controlId"] == "MSG00001"
    assert output["message"]["profiles"] == ["PHLabReport-NoAck", "ELR_Receiver"]
    assert output["patient"]["primaryId"] == "A123"
    assert len(output["observations"]) == 3
    assert output["results"] == {"625-4": "3092008^Staphylococcus aureus^SCT"}
    assert output["templateVersion"] == 1


def test_transform_to_string(sample_message, flat_profile):
    text = TemplateTransformer({"id": "MSH-10"}, flat_profile).transform_to_string(sample_message)
    assert json.loads(text) == {"id": "MSG00001"}


def test_from_content(sample_message, phin_profile):
    profile_text = json.dumps({"segmentFields": {"PID": [{"name": "Set ID - PID", "fieldNumber": 1}]}})
    transformer = TemplateTransformer.from_content('{"sex": "PID-8"}', profile_text)
    assert transformer.transform(sample_message) == {"sex": "M"}


def test_from_content_invalid_template(flat_profile):
    with pytest.raises(TemplateError):
        TemplateTransformer.from_content("{not json", {"PID": []})


def test_from_content_invalid_profile():
    with pytest.raises(ConfigurationError):
        TemplateTransformer.from_content("{}", "{not json")


def test_template_must_be_object(flat_profile):
    with pytest.raises(TemplateError):
        TemplateTransformer(["PID-3"], flat_profile)


def test_missing_template_resource():
    with pytest.raises(TemplateError):
        TemplateTransformer.from_resources("Missing.json", "PhinGuideProfile.json")
