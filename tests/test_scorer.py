"""Tests for the questionnaire scorer.

This test suite validates that the scorer:
1. Applies the per-axis multipliers (project type x2, priority x1.5)
2. Treats missing axes and unknown values as zero, never as errors
3. Returns at most two technologies per category, best first
4. Breaks ties by catalog order
"""

import pytest

from stack_advisor.config import ScoringWeightsConfig
from stack_advisor.scorer import ScoringEngine, compute_recommendations, normalize_answers
from tech_catalog.catalog import DEFAULT_CATALOG
from tech_catalog.schema import Axis, Category

from conftest import make_catalog, make_tech


def ids(technologies) -> list[str]:
    return [t.id for t in technologies]


@pytest.fixture
def two_frontends():
    return make_catalog(
        make_tech("a", "frontend", projectType={"webapp": 10}),
        make_tech("b", "frontend", projectType={"webapp": 4}),
    )


class TestWeightedScore:
    """Tests for the weighted sum of axis contributions."""

    def test_project_type_counts_double(self):
        catalog = make_catalog(make_tech("a", "backend", projectType={"api": 7}))
        scored = ScoringEngine(catalog=catalog).score_all({"projectType": "api"})
        assert scored[0].score == 14

    def test_priority_counts_one_and_a_half(self):
        catalog = make_catalog(make_tech("a", "backend", priority={"cost": 5}))
        scored = ScoringEngine(catalog=catalog).score_all({"priority": "cost"})
        assert scored[0].score == 7.5

    def test_other_axes_count_once(self):
        catalog = make_catalog(make_tech(
            "a", "backend",
            scale={"mvp": 3}, experience={"beginner": 4}, features={"ai": 5},
        ))
        scored = ScoringEngine(catalog=catalog).score_all(
            {"scale": "mvp", "experience": "beginner", "features": "ai"}
        )
        assert scored[0].score == 12

    def test_all_axes_summed(self):
        """Python + FastAPI against an API-heavy answer set."""
        answers = {
            "projectType": "api",
            "scale": "large",
            "experience": "advanced",
            "priority": "performance",
            "features": "ai",
        }
        scored = {s.technology.id: s for s in ScoringEngine(catalog=DEFAULT_CATALOG).score_all(answers)}
        # 10*2 + 9 + 10 + 9*1.5 + 10
        assert scored["python-fastapi"].score == 62.5
        assert scored["python-fastapi"].breakdown[Axis.PRIORITY] == 13.5

    def test_custom_weights(self):
        catalog = make_catalog(make_tech("a", "backend", projectType={"api": 7}))
        weights = ScoringWeightsConfig(project_type=3.0)
        scored = ScoringEngine(catalog=catalog, weights=weights).score_all({"projectType": "api"})
        assert scored[0].score == 21


class TestMissingAnswers:
    """Missing and unknown answers contribute zero."""

    def test_empty_answers_score_zero(self):
        scored = ScoringEngine(catalog=DEFAULT_CATALOG).score_all({})
        assert all(s.score == 0 for s in scored)

    @pytest.mark.parametrize("axis", [a.value for a in Axis])
    def test_omitting_one_axis_only_zeroes_that_axis(self, axis):
        answers = {
            "projectType": "webapp",
            "scale": "small",
            "experience": "beginner",
            "priority": "speed",
            "features": "seo",
        }
        engine = ScoringEngine(catalog=DEFAULT_CATALOG)
        full = {s.technology.id: s for s in engine.score_all(answers)}
        partial_answers = {k: v for k, v in answers.items() if k != axis}
        partial = {s.technology.id: s for s in engine.score_all(partial_answers)}

        for tech_id, scored in partial.items():
            assert scored.breakdown[Axis(axis)] == 0
            assert scored.score == pytest.approx(full[tech_id].score - full[tech_id].breakdown[Axis(axis)])

    def test_unknown_value_scores_zero(self):
        catalog = make_catalog(make_tech("a", "frontend", projectType={"webapp": 10}))
        scored = ScoringEngine(catalog=catalog).score_all({"projectType": "spaceship"})
        assert scored[0].score == 0

    def test_value_missing_from_one_table(self):
        catalog = make_catalog(
            make_tech("a", "frontend", projectType={"webapp": 10}),
            make_tech("b", "frontend", projectType={"mobile": 10}),
        )
        scored = ScoringEngine(catalog=catalog).score_all({"projectType": "mobile"})
        assert [s.score for s in scored] == [0, 20]

    def test_unknown_question_ignored(self):
        assert normalize_answers({"budget": "tiny", "projectType": "api"}) == {Axis.PROJECT_TYPE: "api"}

    def test_non_string_answer_ignored(self):
        """Features is single-valued; a list answer carries no weight."""
        assert normalize_answers({"features": ["ai", "seo"]}) == {}

    def test_snake_case_keys_accepted(self):
        assert normalize_answers({"project_type": "api"}) == {Axis.PROJECT_TYPE: "api"}


class TestRanking:
    """Tests for per-category ranking."""

    def test_higher_score_ranks_first(self, two_frontends):
        result = compute_recommendations(two_frontends, {"projectType": "webapp"})
        assert ids(result[Category.FRONTEND]) == ["a", "b"]

    def test_ranking_independent_of_catalog_order_when_scores_differ(self):
        catalog = make_catalog(
            make_tech("b", "frontend", projectType={"webapp": 4}),
            make_tech("a", "frontend", projectType={"webapp": 10}),
        )
        result = compute_recommendations(catalog, {"projectType": "webapp"})
        assert ids(result[Category.FRONTEND]) == ["a", "b"]

    def test_ties_keep_catalog_order(self):
        catalog = make_catalog(
            make_tech("first", "hosting", projectType={"api": 5}),
            make_tech("second", "hosting", projectType={"api": 5}),
            make_tech("third", "hosting", projectType={"api": 5}),
        )
        result = compute_recommendations(catalog, {"projectType": "api"})
        assert ids(result[Category.HOSTING]) == ["first", "second"]

    def test_at_most_two_per_category(self):
        result = compute_recommendations(DEFAULT_CATALOG, {"projectType": "webapp"})
        for category, technologies in result.items():
            assert len(technologies) <= 2
            assert all(t.category == category for t in technologies)

    def test_single_entry_category(self):
        catalog = make_catalog(make_tech("only", "database"))
        result = compute_recommendations(catalog, {})
        assert ids(result[Category.DATABASE]) == ["only"]

    def test_missing_categories_are_empty(self, two_frontends):
        result = compute_recommendations(two_frontends, {"projectType": "webapp"})
        assert list(result.keys()) == Category.ordered()
        assert result[Category.BACKEND] == []
        assert result[Category.DATABASE] == []
        assert result[Category.HOSTING] == []

    def test_empty_catalog(self):
        result = compute_recommendations(make_catalog(), {"projectType": "webapp"})
        assert all(entries == [] for entries in result.values())

    def test_results_non_increasing(self):
        answers = {"projectType": "static", "priority": "cost", "scale": "mvp"}
        ranked = ScoringEngine(catalog=DEFAULT_CATALOG, top_n=3).rank(answers)
        for entries in ranked.values():
            scores = [s.score for s in entries]
            assert scores == sorted(scores, reverse=True)

    def test_top_n_from_engine(self):
        ranked = ScoringEngine(catalog=DEFAULT_CATALOG, top_n=1).recommend({"projectType": "api"})
        assert all(len(entries) == 1 for entries in ranked.values())

    def test_deterministic(self):
        answers = {"projectType": "fullstack", "priority": "dx"}
        first = compute_recommendations(DEFAULT_CATALOG, answers)
        second = compute_recommendations(DEFAULT_CATALOG, answers)
        assert {c: ids(t) for c, t in first.items()} == {c: ids(t) for c, t in second.items()}


class TestDefaultCatalogScenarios:
    """End-to-end rankings on the built-in catalog."""

    def test_webapp_only(self):
        result = compute_recommendations(DEFAULT_CATALOG, {"projectType": "webapp"})
        assert ids(result[Category.FRONTEND]) == ["nextjs", "vite-react"]
        assert ids(result[Category.BACKEND]) == ["supabase", "nodejs"]
        assert ids(result[Category.DATABASE]) == ["postgres", "mongodb"]
        # Railway and AWS tie at 16; Railway is defined first
        assert ids(result[Category.HOSTING]) == ["vercel", "railway"]

    def test_large_ai_api(self):
        answers = {
            "projectType": "api",
            "scale": "large",
            "experience": "advanced",
            "priority": "performance",
            "features": "ai",
        }
        result = compute_recommendations(DEFAULT_CATALOG, answers)
        assert ids(result[Category.BACKEND]) == ["python-fastapi", "nodejs"]
        assert ids(result[Category.HOSTING]) == ["aws", "railway"]

    def test_engine_uses_default_catalog(self):
        result = ScoringEngine().recommend({"projectType": "mobile", "features": "offline"})
        assert result[Category.DATABASE][0].id == "sqlite"
