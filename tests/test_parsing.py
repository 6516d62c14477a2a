"""Tests for pitchplan.utils.parsing: JSON recovery and report extraction."""

import json

import pytest

from pitchplan.errors import ReportParseError, ReportValidationError
from pitchplan.schemas import REPORT_SECTIONS
from pitchplan.utils.parsing import extract_json, extract_report


class TestExtractJson:
    def test_direct_json(self):
        assert extract_json('{"key": "value"}') == {"key": "value"}

    def test_direct_json_with_whitespace(self):
        assert extract_json('  \n{"key": "value"}\n  ') == {"key": "value"}

    def test_json_fence_inside_prose(self):
        text = 'Sure! Here it is:\n```json\n{"key": "value"}\n```\nLet me know.'
        assert extract_json(text) == {"key": "value"}

    def test_first_json_fence_wins(self):
        text = '```json\n{"a": 1}\n```\n\n```json\n{"b": 2}\n```'
        assert extract_json(text) == {"a": 1}

    def test_untagged_fence_is_not_used(self):
        with pytest.raises(ReportParseError):
            extract_json('Report:\n```\n{"key": "value"}\n```')

    def test_plain_text_raises_parse_error(self):
        with pytest.raises(ReportParseError):
            extract_json("I could not produce a report, sorry.")

    def test_invalid_json_in_fence_raises_parse_error(self):
        with pytest.raises(ReportParseError):
            extract_json('```json\n{"key": \n```')

    def test_empty_string_raises_parse_error(self):
        with pytest.raises(ReportParseError):
            extract_json("")


class TestExtractReport:
    def test_direct_json_report(self, report_dict, report):
        assert extract_report(json.dumps(report_dict)) == report

    def test_fenced_report_matches_direct_parse(self, fenced_report_text, report_dict):
        block = fenced_report_text.split("```json\n", 1)[1].split("\n```", 1)[0]
        assert extract_report(fenced_report_text) == extract_report(block)
        assert extract_report(fenced_report_text).to_wire() == json.loads(block)

    def test_all_sections_present(self, fenced_report_text):
        wire = extract_report(fenced_report_text).to_wire()
        assert tuple(wire.keys()) == REPORT_SECTIONS

    def test_non_json_text_is_parse_not_validation_error(self):
        with pytest.raises(ReportParseError) as excinfo:
            extract_report("# Habit Hero\n\nA markdown-only answer.")
        assert not isinstance(excinfo.value, ReportValidationError)

    def test_missing_section_is_validation_error(self, report_dict):
        del report_dict["risks"]
        with pytest.raises(ReportValidationError) as excinfo:
            extract_report(json.dumps(report_dict))
        assert any(e.startswith("risks") for e in excinfo.value.errors)

    def test_missing_nested_field_is_validation_error(self, report_dict):
        del report_dict["audience"]["personas"][0]["painPoints"]
        with pytest.raises(ReportValidationError) as excinfo:
            extract_report(json.dumps(report_dict))
        assert "audience.personas.0.painPoints: Field required" in excinfo.value.errors

    def test_json_array_is_validation_error(self):
        with pytest.raises(ReportValidationError):
            extract_report("[1, 2, 3]")
