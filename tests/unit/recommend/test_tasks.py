"""Tests for paintquest/recommend/tasks.py and the shared factor functions

The task scorer must:
- Return at most 5 results, highest score first, stable on ties
- Explain every contributing factor in ``reasons``
- Treat tool, constraint and energy terms as unweighted
"""

from datetime import datetime, timedelta, timezone

import pytest

from paintquest.config_models import RecommendationWeights
from paintquest.recommend.scoring import (
    days_since,
    energy_for_minutes,
    excluded_tools,
    priority_score,
    skill_match_score,
    time_fit_score,
)
from paintquest.recommend.tasks import recommend_tasks, resolve_weights

NOW = datetime(2026, 2, 16, 12, 0, tzinfo=timezone.utc)


def _task(task_id, **fields):
    task = {
        "id": task_id,
        "title": task_id,
        "priority": 3,
        "estimated_minutes_min": None,
        "estimated_minutes_max": None,
        "skills_tags": [],
        "required_tools_tags": [],
    }
    task.update(fields)
    return task


def _ago(days):
    return (NOW - timedelta(days=days)).isoformat()


# ─────────────────────────────────────────────────────────────────────────────
# Factor Functions
# ─────────────────────────────────────────────────────────────────────────────


class TestTimeFit:
    """Tests for time_fit_score."""

    def test_inside_range(self):
        assert time_fit_score(30, 60, 45) == 1.0

    def test_bounds_are_inclusive(self):
        assert time_fit_score(30, 60, 30) == 1.0
        assert time_fit_score(30, 60, 60) == 1.0

    def test_decays_below_min(self):
        """15 short of a 30 minimum halves the score."""
        assert time_fit_score(30, 60, 15) == pytest.approx(0.5)

    def test_decays_above_max(self):
        """30 over a 60 maximum halves the score."""
        assert time_fit_score(30, 60, 90) == pytest.approx(0.5)

    def test_floors_at_zero(self):
        assert time_fit_score(30, 60, 500) == 0.0

    def test_no_range_is_neutral(self):
        assert time_fit_score(None, None, 45) == 0.5

    def test_only_min_uses_min_as_max(self):
        """With only a minimum, the range collapses to that single value."""
        assert time_fit_score(30, None, 30) == 1.0
        assert time_fit_score(30, None, 45) == pytest.approx(0.5)

    def test_zero_bound_avoids_division_by_zero(self):
        assert time_fit_score(0, 0, 1) == 0.0


class TestFactorHelpers:
    """Tests for the smaller factor helpers."""

    @pytest.mark.parametrize("priority,expected", [(5, 1.0), (1, 0.2), (9, 1.0), (-2, 0.0), (None, 0.0)])
    def test_priority_score(self, priority, expected):
        assert priority_score(priority) == pytest.approx(expected)

    def test_skill_match_is_fraction_of_task_skills(self):
        assert skill_match_score(["basecoating", "glazing"], ["Glazing"]) == 0.5

    def test_skill_match_empty_sets(self):
        assert skill_match_score([], ["glazing"]) == 0.0
        assert skill_match_score(["glazing"], []) == 0.0

    @pytest.mark.parametrize("minutes,tier", [(10, "low"), (30, "low"), (31, "med"), (60, "med"), (61, "high")])
    def test_energy_buckets(self, minutes, tier):
        assert energy_for_minutes(minutes).value == tier

    def test_days_since(self):
        assert days_since(_ago(2.5), NOW) == pytest.approx(2.5)
        assert days_since("garbage", NOW) is None

    def test_excluded_tools_shapes(self):
        assert excluded_tools({"excluded_tools": "airbrush, drybrush"}) == ["airbrush", "drybrush"]
        assert excluded_tools(["airbrush"]) == ["airbrush"]
        assert excluded_tools(None) == []


# ─────────────────────────────────────────────────────────────────────────────
# Scorer
# ─────────────────────────────────────────────────────────────────────────────


class TestRecommendTasks:
    """Tests for recommend_tasks."""

    def test_priority_and_skill_match_rank_first(self):
        """A high-priority, well-fitting, focus-skill task ranks first and says why."""
        tasks = [
            _task("filler", priority=2, estimated_minutes_min=90, estimated_minutes_max=120),
            _task("target", priority=5, estimated_minutes_min=30, estimated_minutes_max=60, skills_tags=["basecoat"]),
        ]

        recs = recommend_tasks(tasks, [], 45, config={"focus_skills": ["basecoat"]}, now=NOW)

        assert recs[0].task["id"] == "target"
        assert "priority 5" in recs[0].reasons
        assert any(reason.startswith("skill match") for reason in recs[0].reasons)
        assert recs[0].score == pytest.approx(1.0 + 1.0 + 1.0 + 0.5)

    def test_never_more_than_five(self):
        tasks = [_task(f"t{i}") for i in range(8)]

        assert len(recommend_tasks(tasks, [], 45, now=NOW)) == 5

    def test_limit_cannot_exceed_five(self):
        tasks = [_task(f"t{i}") for i in range(8)]

        assert len(recommend_tasks(tasks, [], 45, now=NOW, limit=50)) == 5

    def test_sorted_descending_and_stable(self):
        """Equal scores keep input order."""
        tasks = [_task("a"), _task("b", priority=5), _task("c")]

        recs = recommend_tasks(tasks, [], 45, now=NOW)
        scores = [rec.score for rec in recs]

        assert scores == sorted(scores, reverse=True)
        assert [rec.task["id"] for rec in recs] == ["b", "a", "c"]

    def test_reason_formats(self):
        """Reasons use fixed formats."""
        recs = recommend_tasks([_task("a", estimated_minutes_min=30, estimated_minutes_max=60)], [], 15, now=NOW)

        assert recs[0].reasons[:2] == ["priority 3", "time fit 0.50"]
        assert "stale boost (never attempted)" in recs[0].reasons

    def test_skill_match_prefers_config_over_profile(self):
        """An explicit config focus list overrides the profile's top-3."""
        tasks = [_task("a", skills_tags=["glazing"])]
        profile = {"focus_skills_top3": ["glazing"]}

        with_config = recommend_tasks(tasks, [], 45, config={"focus_skills": ["basing"]}, profile=profile, now=NOW)
        profile_only = recommend_tasks(tasks, [], 45, profile=profile, now=NOW)

        assert "skill match 0.00" in with_config[0].reasons
        assert "skill match 1.00" in profile_only[0].reasons

    def test_weights_multiply_weighted_factors(self):
        """Doubling weight_priority doubles the priority contribution only."""
        tasks = [_task("a", priority=5)]

        base = recommend_tasks(tasks, [], 45, now=NOW)[0].score
        doubled = recommend_tasks(tasks, [], 45, config={"weight_priority": 2.0}, now=NOW)[0].score

        assert doubled - base == pytest.approx(1.0)


class TestStalenessAndRecency:
    """Stale boost and recency penalty from the last attempt on a task."""

    def test_recent_attempt_penalized(self):
        recs = recommend_tasks([_task("a")], [{"task_id": "a", "created_at": _ago(2)}], 45, now=NOW)

        assert "recency penalty (2.0 days)" in recs[0].reasons
        assert not any(reason.startswith("stale boost") for reason in recs[0].reasons)

    def test_old_attempt_boosted(self):
        recs = recommend_tasks([_task("a")], [{"task_id": "a", "created_at": _ago(20)}], 45, now=NOW)

        assert "stale boost (20.0 days)" in recs[0].reasons

    def test_between_thresholds_gets_neither(self):
        recs = recommend_tasks([_task("a")], [{"task_id": "a", "created_at": _ago(10)}], 45, now=NOW)

        assert not any("stale" in r or "recency" in r for r in recs[0].reasons)

    def test_latest_attempt_is_used(self):
        """Only the most recent attempt on the task matters."""
        attempts = [
            {"task_id": "a", "created_at": _ago(30)},
            {"task_id": "a", "created_at": _ago(1)},
            {"task_id": "b", "created_at": _ago(0.5)},
        ]

        recs = recommend_tasks([_task("a")], attempts, 45, now=NOW)

        assert "recency penalty (1.0 days)" in recs[0].reasons

    def test_custom_thresholds(self):
        """Configured thresholds replace 14 / 3."""
        recs = recommend_tasks(
            [_task("a")],
            [{"task_id": "a", "created_at": _ago(5)}],
            45,
            config={"stale_days_threshold": 4, "recent_days_threshold": 1},
            now=NOW,
        )

        assert "stale boost (5.0 days)" in recs[0].reasons


class TestToolsConstraintsEnergy:
    """Unweighted arsenal, constraint and energy terms."""

    def test_tools_ready(self):
        recs = recommend_tasks([_task("a", required_tools_tags=["Round Brush"])], [], 45,
                               available_tool_tags=["round brush"], now=NOW)

        assert "tools ready" in recs[0].reasons

    def test_missing_tools_listed(self):
        recs = recommend_tasks([_task("a", required_tools_tags=["round brush", "airbrush"])], [], 45,
                               available_tool_tags=["round brush"], now=NOW)

        assert "missing tools: airbrush" in recs[0].reasons

    def test_no_arsenal_data(self):
        recs = recommend_tasks([_task("a", required_tools_tags=["round brush"])], [], 45, now=NOW)

        assert "no arsenal data for required tools" in recs[0].reasons

    def test_tool_terms_ignore_weights(self):
        """Zeroing every weight leaves the tool bonus intact."""
        zero = {name: 0.0 for name in (
            "weight_priority", "weight_time_fit", "weight_skill_match", "weight_stale", "weight_recency_penalty",
        )}
        recs = recommend_tasks([_task("a", required_tools_tags=["drybrush"])], [], 45, config=zero,
                               available_tool_tags=["drybrush"], now=NOW)

        assert recs[0].score == pytest.approx(0.5)

    def test_blocked_by_constraints(self):
        profile = {"constraints": {"excluded_tools": ["airbrush"]}}
        recs = recommend_tasks([_task("a", required_tools_tags=["airbrush"])], [], 45, profile=profile,
                               available_tool_tags=["airbrush"], now=NOW)

        assert "blocked by constraints" in recs[0].reasons

    def test_energy_fit_bonus(self):
        """A 45-minute budget is 'med'; a med preference earns +1.0."""
        tasks = [_task("a")]

        plain = recommend_tasks(tasks, [], 45, now=NOW)[0]
        matched = recommend_tasks(tasks, [], 45, profile={"energy_preference": "med"}, now=NOW)[0]
        mismatched = recommend_tasks(tasks, [], 45, profile={"energy_preference": "high"}, now=NOW)[0]

        assert matched.score - plain.score == pytest.approx(1.0)
        assert "energy fit med" in matched.reasons
        assert mismatched.score == pytest.approx(plain.score)


class TestResolveWeights:
    """Tests for config resolution."""

    def test_none_uses_defaults(self):
        weights = resolve_weights(None)

        assert weights.weight_priority == 1.0
        assert weights.stale_days_threshold == 14
        assert weights.recent_days_threshold == 3

    def test_null_columns_fall_back(self):
        weights = resolve_weights({"weight_priority": None, "weight_stale": 2.0, "user_id": "u"})

        assert weights.weight_priority == 1.0
        assert weights.weight_stale == 2.0

    def test_model_passthrough(self):
        model = RecommendationWeights(weight_time_fit=3.0)

        assert resolve_weights(model) is model

    def test_to_dict(self):
        rec = recommend_tasks([_task("a")], [], 45, now=NOW)[0]

        assert set(rec.to_dict()) == {"task", "score", "reasons"}
