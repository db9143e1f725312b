"""Scorer - ranks catalog technologies against questionnaire answers.

Each technology gets a weighted sum of its per-axis weights for the selected
answers. Technologies are then ranked within their category and the best
few are recommended.
"""

import logging
from dataclasses import dataclass, field
from typing import Mapping, Optional

from tech_catalog.catalog import DEFAULT_CATALOG
from tech_catalog.schema import Axis, Category, Technology, TechnologyCatalog

from .config import ScoringWeightsConfig, get_config

logger = logging.getLogger(__name__)

RecommendationResult = dict[Category, list[Technology]]


@dataclass
class ScoredTechnology:
    """A technology with its total score and per-axis contributions."""
    technology: Technology
    score: float
    breakdown: dict[Axis, float] = field(default_factory=dict)

    @property
    def category(self) -> Category:
        return self.technology.category


def normalize_answers(answers: Mapping[str, str]) -> dict[Axis, str]:
    """Map answer keys to axes, dropping keys that name no axis."""
    normalized = {}
    for key, value in answers.items():
        axis = Axis.from_string(key)
        if axis is None:
            logger.debug("Ignoring answer for unknown question '%s'", key)
            continue
        if not isinstance(value, str):
            logger.debug("Ignoring non-string answer for '%s': %r", key, value)
            continue
        if value:
            normalized[axis] = value
    return normalized


def score_technology(
    tech: Technology,
    answers: Mapping[Axis, str],
    weights: ScoringWeightsConfig,
) -> ScoredTechnology:
    """Score a single technology.

    An unanswered axis, or an answer the technology has no weight for,
    contributes 0.
    """
    breakdown = {}
    for axis in Axis:
        value = answers.get(axis)
        breakdown[axis] = tech.scores.weight(axis, value) * weights.for_axis(axis)
    return ScoredTechnology(technology=tech, score=sum(breakdown.values()), breakdown=breakdown)


def rank_by_category(
    scored: list[ScoredTechnology],
    top_n: int = 2,
) -> dict[Category, list[ScoredTechnology]]:
    """Group scored technologies by category, best first.

    ``sorted`` is stable, so equal scores keep catalog order.
    """
    ranked = {}
    for category in Category.ordered():
        in_category = [s for s in scored if s.category == category]
        ranked[category] = sorted(in_category, key=lambda s: s.score, reverse=True)[:top_n]
    return ranked


class ScoringEngine:
    """Ranks a technology catalog against an answer set.

    Scoring principles:
    - Pure and deterministic: same catalog and answers, same ranking
    - Partial answers are fine; missing axes count as zero
    - Unknown values count as zero, never an error
    - Every category is present in the result, possibly empty
    """

    def __init__(
        self,
        catalog: Optional[TechnologyCatalog] = None,
        weights: Optional[ScoringWeightsConfig] = None,
        top_n: Optional[int] = None,
    ):
        config = get_config()
        self.catalog = catalog if catalog is not None else DEFAULT_CATALOG
        self.weights = weights or config.scoring_weights
        self.top_n = top_n if top_n is not None else config.ranking.top_n

    def score_all(self, answers: Mapping[str, str]) -> list[ScoredTechnology]:
        """Score every technology, in catalog order."""
        normalized = normalize_answers(answers)
        return [score_technology(t, normalized, self.weights) for t in self.catalog.technologies]

    def rank(self, answers: Mapping[str, str]) -> dict[Category, list[ScoredTechnology]]:
        """Top scored technologies per category, with scores attached."""
        return rank_by_category(self.score_all(answers), self.top_n)

    def recommend(self, answers: Mapping[str, str]) -> RecommendationResult:
        """Top technologies per category."""
        return {
            category: [s.technology for s in entries]
            for category, entries in self.rank(answers).items()
        }


def compute_recommendations(
    catalog: TechnologyCatalog,
    answers: Mapping[str, str],
    weights: Optional[ScoringWeightsConfig] = None,
) -> RecommendationResult:
    """Rank ``catalog`` against ``answers`` and return the top 2 per category."""
    return ScoringEngine(catalog=catalog, weights=weights or ScoringWeightsConfig(), top_n=2).recommend(answers)
