"""Response parser - turns a free-form model reply into a ParsedResponse.

Model output is untrusted text that usually, but not always, contains the
JSON envelope we asked for:

    {"text": "...", "suggestions": ["..."], "recommendations": {...}}

The parser locates a JSON candidate, decodes it permissively, and falls back
to the raw text with fixed quick replies when it does not decode. It never
raises.
"""

import json
import logging
import re
from typing import Any, Optional, Sequence

from pydantic import ValidationError

from .config import get_config
from .schema import AIRecommendation, ParsedResponse, coerce_string_list

logger = logging.getLogger(__name__)

FALLBACK_SUGGESTIONS = ("Tell me more", "Show recommendations", "Start over")

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


def _fenced_block(raw: str) -> Optional[str]:
    match = _FENCED_BLOCK.search(raw)
    return match.group(1) if match else None


def _outer_braces(raw: str) -> Optional[str]:
    if "{" not in raw or "}" not in raw:
        return None
    return raw[raw.index("{"):raw.rindex("}") + 1]


def extract_json_candidate(raw: str) -> str:
    """Locate the JSON candidate in ``raw``, trimmed.

    Exactly one stage applies:
    1. Inner content of the first fenced code block (optionally tagged json)
    2. Otherwise everything from the first ``{`` to the last ``}``
    3. Otherwise the whole text
    """
    fenced = _fenced_block(raw)
    if fenced is not None:
        return fenced.strip()
    braces = _outer_braces(raw)
    if braces is not None:
        return braces.strip()
    return raw.strip()


def _decode_object(candidate: str) -> Optional[dict]:
    try:
        data = json.loads(candidate)
    except (ValueError, RecursionError) as exc:
        logger.debug("Candidate is not valid JSON: %s", exc)
        return None
    if not isinstance(data, dict):
        logger.debug("Candidate decoded to %s, expected an object", type(data).__name__)
        return None
    return data


def _decode_recommendations(value: Any) -> Optional[AIRecommendation]:
    if not isinstance(value, dict):
        return None
    try:
        recommendation = AIRecommendation.model_validate(value)
    except ValidationError as exc:
        logger.debug("Discarding malformed recommendations: %s", exc)
        return None
    return None if recommendation.is_empty() else recommendation


def fallback_response(
    raw: str,
    fallback_suggestions: Optional[Sequence[str]] = None,
) -> ParsedResponse:
    """Result used when no JSON object can be recovered from ``raw``."""
    if fallback_suggestions is None:
        fallback_suggestions = get_config().chat.fallback_suggestions or FALLBACK_SUGGESTIONS
    return ParsedResponse(text=raw, suggestions=list(fallback_suggestions))


def parse_response(
    raw: str,
    fallback_suggestions: Optional[Sequence[str]] = None,
) -> ParsedResponse:
    """Parse a model reply into text, quick replies and recommendations.

    Args:
        raw: The reply exactly as received from the provider.
        fallback_suggestions: Quick replies used when parsing fails.
            Defaults to the configured fallback list.

    Returns:
        A ParsedResponse. ``text`` defaults to ``raw`` when the envelope has
        no usable text; ``suggestions`` keeps only string items.
    """
    if not isinstance(raw, str):
        raw = "" if raw is None else str(raw)

    data = _decode_object(extract_json_candidate(raw))
    if data is None:
        logger.info("Model reply was not structured JSON; using fallback response")
        return fallback_response(raw, fallback_suggestions)

    text = data.get("text")
    if not isinstance(text, str) or not text:
        text = raw

    return ParsedResponse(
        text=text,
        suggestions=coerce_string_list(data.get("suggestions")),
        recommendations=_decode_recommendations(data.get("recommendations")),
    )
