"""Tests for defensive parsing of oracle answers."""

import json

import pytest

from editwise.errors import MalformedResponseError
from editwise.models import PerformanceRating, SecurityRating, SuggestionType
from editwise.parsing import (
    ANALYSIS_FAILED_RISK,
    ParseStatus,
    extract_json_object,
    iter_balanced_objects,
    parse_analysis_response,
    parse_edit_response,
    strip_code_fences,
)


EDIT_JSON = {
    "language": "python",
    "complexity": 4,
    "suggestions": [
        {
            "originalLines": ["a = 1"],
            "suggestedLines": ["a = 10"],
            "startLine": 1,
            "endLine": 1,
            "reasoning": "bigger",
            "confidence": 88,
        }
    ],
    "risks": ["none"],
    "dependencies": [],
}


class TestExtraction:
    def test_strip_code_fences(self):
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'
        assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'

    def test_only_wrapping_fence_is_stripped(self):
        inner = '{"a": "```python\nx\n```"}'
        assert strip_code_fences(inner) == inner
        assert strip_code_fences(f"```json\n{inner}\n```") == inner

    def test_plain_json(self):
        assert extract_json_object('{"a": 1}') == {"a": 1}

    def test_fenced_json(self):
        assert extract_json_object('```json\n{"a": {"b": 2}}\n```') == {"a": {"b": 2}}

    def test_json_surrounded_by_prose(self):
        text = 'Here is my analysis:\n{"a": 1, "b": [1, 2]}\nHope this helps!'
        assert extract_json_object(text) == {"a": 1, "b": [1, 2]}

    def test_braces_inside_strings_are_ignored(self):
        text = 'note {"msg": "use } and { carefully", "n": 1} end'
        assert extract_json_object(text) == {"msg": "use } and { carefully", "n": 1}

    def test_skips_non_json_brace_spans(self):
        text = 'function f() { return 1; } then {"ok": true}'
        assert extract_json_object(text) == {"ok": True}

    def test_iter_balanced_objects_yields_in_order(self):
        spans = list(iter_balanced_objects('{"a": {"b": 1}} {"c": 2}'))
        assert spans[0] == '{"a": {"b": 1}}'
        assert '{"c": 2}' in spans

    @pytest.mark.parametrize("text", [None, "", "   ", "no json here", "[1, 2, 3]", "{not json}"])
    def test_unrecoverable_text_raises(self, text):
        with pytest.raises(MalformedResponseError):
            extract_json_object(text)


class TestParseEditResponse:
    def test_valid_answer(self):
        result = parse_edit_response(json.dumps(EDIT_JSON), "python")
        assert result.status is ParseStatus.OK
        analysis = result.value
        assert analysis.complexity == 4
        assert analysis.suggestions[0].suggested_lines == ["a = 10"]
        assert analysis.suggestions[0].start_line == 1

    def test_fenced_answer_matches_plain_answer(self):
        plain = parse_edit_response(json.dumps(EDIT_JSON), "python")
        fenced = parse_edit_response(f"```json\n{json.dumps(EDIT_JSON)}\n```", "python")
        assert fenced.value == plain.value

    def test_missing_language_uses_classified_one(self):
        data = dict(EDIT_JSON)
        del data["language"]
        result = parse_edit_response(json.dumps(data), "rust")
        assert result.is_ok
        assert result.value.language == "rust"

    def test_complexity_is_clamped(self):
        data = dict(EDIT_JSON, complexity=42)
        assert parse_edit_response(json.dumps(data), "python").value.complexity == 10

    def test_unparseable_answer_degrades_to_fallback(self):
        result = parse_edit_response("I cannot help with that.", "python")
        assert result.status is ParseStatus.DEGRADED
        assert result.error
        assert result.value.language == "python"
        assert result.value.complexity == 5
        assert result.value.suggestions == []
        assert result.value.risks == [ANALYSIS_FAILED_RISK]

    def test_missing_suggestions_degrades(self):
        result = parse_edit_response('{"language": "python"}', "python")
        assert not result.is_ok

    def test_malformed_suggestion_degrades(self):
        data = dict(EDIT_JSON)
        data["suggestions"] = [dict(EDIT_JSON["suggestions"][0], startLine=3, endLine=1)]
        result = parse_edit_response(json.dumps(data), "python")
        assert not result.is_ok
        assert result.value.suggestions == []

    def test_fences_inside_suggested_lines_are_kept(self):
        data = dict(EDIT_JSON)
        data["suggestions"] = [
            dict(
                EDIT_JSON["suggestions"][0],
                suggestedLines=["Example:", "```python", "x = 1", "```"],
                startLine=1,
                endLine=1,
            )
        ]
        for text in (json.dumps(data), f"```json\n{json.dumps(data)}\n```"):
            result = parse_edit_response(text, "markdown")
            assert result.is_ok
            assert result.value.suggestions[0].suggested_lines == [
                "Example:",
                "```python",
                "x = 1",
                "```",
            ]

    @pytest.mark.parametrize("value", ["Infinity", "-Infinity", "NaN"])
    def test_non_finite_complexity_degrades(self, value):
        text = '{"language": "python", "complexity": %s, "suggestions": []}' % value
        result = parse_edit_response(text, "python")
        assert result.status is ParseStatus.DEGRADED
        assert result.value.complexity == 5

    def test_deeply_nested_answer_degrades(self):
        for text in ("[" * 100000, '{"a": ' + "[" * 100000 + "}"):
            result = parse_edit_response(text, "python")
            assert result.status is ParseStatus.DEGRADED
            assert result.value.suggestions == []

    def test_reserialized_answer_parses_to_the_same_suggestions(self):
        first = parse_edit_response(json.dumps(EDIT_JSON), "python")
        text = json.dumps(first.value.model_dump(mode="json", by_alias=True))
        second = parse_edit_response(text, "python")

        assert second.is_ok
        assert second.value == first.value
        assert len(second.value.suggestions) == len(EDIT_JSON["suggestions"])
        assert [s.confidence for s in second.value.suggestions] == [
            s["confidence"] for s in EDIT_JSON["suggestions"]
        ]


class TestParseAnalysisResponse:
    def test_valid_answer(self):
        text = json.dumps(
            {
                "issues": [
                    {"line": 3, "column": 1, "severity": "warning", "message": "m", "type": "style"}
                ],
                "suggestions": [],
                "metrics": {
                    "complexity": 2,
                    "maintainabilityIndex": 90,
                    "performance": "excellent",
                    "security": "secure",
                },
            }
        )
        result = parse_analysis_response(text, "x.py")
        assert result.is_ok
        assert result.value.file == "x.py"
        assert result.value.issues[0].line == 3
        assert result.value.metrics.maintainability_index == 90

    def test_missing_parts_get_defaults(self):
        result = parse_analysis_response('{"metrics": {"complexity": 8}}', "x.py")
        assert result.is_ok
        assert result.value.issues == []
        assert result.value.suggestions == []
        assert result.value.metrics.complexity == 8
        assert result.value.metrics.maintainability_index == 70
        assert result.value.metrics.performance is PerformanceRating.GOOD

    def test_unparseable_answer_degrades_to_basic_review(self):
        result = parse_analysis_response("garbage", "x.py")
        assert result.status is ParseStatus.DEGRADED
        value = result.value
        assert value.file == "x.py"
        assert value.issues == []
        assert len(value.suggestions) == 1
        assert value.suggestions[0].line == 1
        assert value.suggestions[0].type is SuggestionType.DOCUMENTATION
        assert value.metrics.complexity == 5
        assert value.metrics.maintainability_index == 70
        assert value.metrics.security is SecurityRating.MODERATE

    def test_invalid_enum_degrades(self):
        text = json.dumps(
            {"issues": [{"line": 1, "severity": "fatal", "message": "m", "type": "style"}]}
        )
        assert not parse_analysis_response(text, "x.py").is_ok
