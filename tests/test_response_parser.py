"""Tests for the model reply parser.

The parser must recover the JSON envelope from noisy replies and must never
raise, whatever the model sends back.
"""

import json

import pytest

from stack_advisor.config import get_config, load_config
from stack_advisor.response_parser import (
    FALLBACK_SUGGESTIONS,
    extract_json_candidate,
    parse_response,
)
from stack_advisor.schema import AIRecommendation, ParsedResponse


FULL_RECOMMENDATION = {
    "text": "Based on your requirements, here are my recommendations:",
    "suggestions": ["Explain frontend choice", "Explain backend choice", "Start over"],
    "recommendations": {
        "frontend": {"name": "Next.js", "reason": "SSR and SEO.", "alternatives": ["Astro", "Remix"]},
        "backend": {"name": "FastAPI", "reason": "Async Python.", "alternatives": ["Django"]},
        "database": {"name": "PostgreSQL", "reason": "Relational and reliable.", "alternatives": []},
        "hosting": {"name": "Railway", "reason": "Simple deploys.", "alternatives": ["Fly.io"]},
        "summary": "A pragmatic full-stack setup.",
        "followUp": "Want deployment tips?",
    },
}


class TestExtraction:
    """Tests for locating the JSON candidate."""

    def test_fenced_json_block(self):
        raw = 'Sure!\n```json\n{"text": "hi"}\n```\nanything else'
        assert extract_json_candidate(raw) == '{"text": "hi"}'

    def test_fenced_block_without_tag(self):
        raw = '```\n{"text": "hi"}\n```'
        assert extract_json_candidate(raw) == '{"text": "hi"}'

    def test_first_fenced_block_wins(self):
        raw = '```json\n{"text": "one"}\n```\n```json\n{"text": "two"}\n```'
        assert extract_json_candidate(raw) == '{"text": "one"}'

    def test_outer_braces(self):
        raw = 'Here is the answer: {"text": {"nested": true}} trailing junk'
        assert extract_json_candidate(raw) == '{"text": {"nested": true}}'

    def test_whole_text_when_no_braces(self):
        assert extract_json_candidate("  plain words \n") == "plain words"

    def test_fence_takes_precedence_over_braces(self):
        raw = 'pre {"a": 1} ```json\n{"b": 2}\n```'
        assert extract_json_candidate(raw) == '{"b": 2}'

    def test_closing_brace_before_opening(self):
        """A '}' before the first '{' gives an empty candidate."""
        assert extract_json_candidate("} oops {") == ""


class TestStructuredReplies:
    """Tests for replies that contain a decodable envelope."""

    def test_fenced_reply(self):
        parsed = parse_response('```json\n{"text":"hi","suggestions":["a","b"]}\n```')
        assert parsed.text == "hi"
        assert parsed.suggestions == ["a", "b"]
        assert parsed.recommendations is None

    def test_embedded_object(self):
        parsed = parse_response('Here is the answer: {"text":"ok"} trailing junk')
        assert parsed.text == "ok"
        assert parsed.suggestions == []
        assert parsed.recommendations is None

    def test_bare_json(self):
        parsed = parse_response(json.dumps(FULL_RECOMMENDATION))
        assert parsed.text == FULL_RECOMMENDATION["text"]
        assert parsed.suggestions == FULL_RECOMMENDATION["suggestions"]

    def test_full_recommendation(self):
        parsed = parse_response(json.dumps(FULL_RECOMMENDATION))
        rec = parsed.recommendations
        assert isinstance(rec, AIRecommendation)
        assert rec.frontend.name == "Next.js"
        assert rec.frontend.alternatives == ["Astro", "Remix"]
        assert rec.database.alternatives == []
        assert rec.summary == "A pragmatic full-stack setup."
        assert rec.follow_up == "Want deployment tips?"
        assert [c.value for c, _ in rec.choices()] == ["frontend", "backend", "database", "hosting"]

    def test_partial_recommendation(self):
        raw = json.dumps({"text": "t", "recommendations": {"backend": {"name": "Go"}}})
        rec = parse_response(raw).recommendations
        assert rec.backend.name == "Go"
        assert rec.backend.reason == ""
        assert rec.backend.alternatives == []
        assert rec.frontend is None

    def test_missing_text_defaults_to_raw(self):
        raw = '{"suggestions": ["x"]}'
        parsed = parse_response(raw)
        assert parsed.text == raw
        assert parsed.suggestions == ["x"]

    def test_empty_text_defaults_to_raw(self):
        raw = '{"text": "", "suggestions": []}'
        assert parse_response(raw).text == raw

    def test_non_string_text_defaults_to_raw(self):
        raw = '{"text": 42}'
        assert parse_response(raw).text == raw

    def test_non_string_suggestions_dropped(self):
        parsed = parse_response('{"text": "t", "suggestions": ["ok", 3, null, {"a": 1}, "fine"]}')
        assert parsed.suggestions == ["ok", "fine"]

    def test_suggestions_not_a_list(self):
        assert parse_response('{"text": "t", "suggestions": "Tell me more"}').suggestions == []

    def test_recommendations_not_an_object(self):
        assert parse_response('{"text": "t", "recommendations": ["Next.js"]}').recommendations is None

    def test_empty_recommendations_object(self):
        assert parse_response('{"text": "t", "recommendations": {}}').recommendations is None

    def test_malformed_category_dropped(self):
        raw = json.dumps({
            "text": "t",
            "recommendations": {
                "frontend": "Next.js",
                "backend": {"name": "Rails", "alternatives": "Django"},
                "unknown": {"name": "?"},
            },
        })
        rec = parse_response(raw).recommendations
        assert rec.frontend is None
        assert rec.backend.name == "Rails"
        assert rec.backend.alternatives == []

    def test_invalid_fence_does_not_fall_through_to_braces(self):
        raw = '```python\nprint(1)\n```\n{"text": "from braces"}'
        parsed = parse_response(raw)
        assert parsed.text == raw
        assert parsed.suggestions == list(FALLBACK_SUGGESTIONS)
        assert parsed.recommendations is None


class TestFallback:
    """Tests for replies with no recoverable JSON object."""

    def test_plain_text(self):
        parsed = parse_response("not json at all")
        assert parsed.text == "not json at all"
        assert parsed.suggestions == ["Tell me more", "Show recommendations", "Start over"]
        assert parsed.recommendations is None

    def test_empty_string(self):
        parsed = parse_response("")
        assert isinstance(parsed, ParsedResponse)
        assert parsed.text == ""
        assert parsed.suggestions == list(FALLBACK_SUGGESTIONS)

    def test_raw_text_kept_verbatim(self):
        raw = "  Hello {broken json here  \n"
        assert parse_response(raw).text == raw

    @pytest.mark.parametrize("raw", [
        "[1, 2, 3]",
        "null",
        '"just a string"',
        "42",
        "{'single': 'quotes'}",
        "{" * 5000 + "}" * 5000,
        "```json\n```",
        "}{",
    ])
    def test_never_raises(self, raw):
        parsed = parse_response(raw)
        assert parsed.text == raw
        assert parsed.suggestions == list(FALLBACK_SUGGESTIONS)

    def test_none_input(self):
        parsed = parse_response(None)
        assert parsed.text == ""
        assert parsed.suggestions == list(FALLBACK_SUGGESTIONS)

    def test_explicit_fallback_suggestions(self):
        parsed = parse_response("nope", fallback_suggestions=["Retry"])
        assert parsed.suggestions == ["Retry"]

    def test_configured_fallback_suggestions(self, tmp_path):
        config_file = tmp_path / "advisor-config.yaml"
        config_file.write_text("chat:\n  fallback_suggestions: [Again, Quit]\n", encoding="utf-8")
        load_config(config_file)
        assert get_config().chat.fallback_suggestions == ["Again", "Quit"]
        assert parse_response("nope").suggestions == ["Again", "Quit"]
