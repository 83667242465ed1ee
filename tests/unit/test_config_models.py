"""Tests for paintquest/config_models.py"""

import pytest
from pydantic import ValidationError

from paintquest import CONFIG_PATH
from paintquest.config_models import (
    PaintQuestConfig,
    RecommendationSettings,
    StoredRecommendationConfig,
    load_config,
)


class TestLoadConfig:
    """Loading args/paintquest.yaml."""

    def test_shipped_config_loads(self):
        config = load_config(CONFIG_PATH)

        assert config.recommendation.max_results == 5
        assert config.recommendation.defaults.stale_days_threshold == 14
        assert config.provisioning.min_unused_task_templates == 3
        assert config.provisioning.used_template_window is None
        assert config.review.window_days == 7

    def test_missing_file_uses_defaults(self, tmp_path):
        config = load_config(tmp_path / "absent.yaml")

        assert config == PaintQuestConfig()

    def test_invalid_file_uses_defaults(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("recommendation:\n  max_results: 50\n")

        assert load_config(path).recommendation.max_results == 5

    def test_partial_file_fills_defaults(self, tmp_path):
        path = tmp_path / "partial.yaml"
        path.write_text("provisioning:\n  default_energy: low\n")

        config = load_config(path)

        assert config.provisioning.default_energy == "low"
        assert config.provisioning.default_minutes == 60


class TestModels:
    """Validation rules."""

    def test_max_results_capped_at_five(self):
        with pytest.raises(ValidationError):
            RecommendationSettings(max_results=6)

    def test_stored_config_drops_nulls(self):
        stored = StoredRecommendationConfig.model_validate({"weight_stale": None, "focus_skills": None})

        assert stored.weight_stale == 1.0
        assert stored.focus_skills == []

    def test_negative_weight_rejected(self):
        with pytest.raises(ValidationError):
            StoredRecommendationConfig(weight_priority=-0.5)
