from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

from paintquest import CONFIG_PATH

logger = logging.getLogger(__name__)


# =============================================================================
# Recommendation weighting (args/paintquest.yaml -> recommendation)
# =============================================================================

class RecommendationWeights(BaseModel):
    """Per-factor weights for the task scorer. Tool, constraint and energy
    terms are unweighted and have no entry here."""

    model_config = ConfigDict(extra="allow")
    weight_priority: float = Field(default=1.0, ge=0)
    weight_time_fit: float = Field(default=1.0, ge=0)
    weight_skill_match: float = Field(default=1.0, ge=0)
    weight_stale: float = Field(default=1.0, ge=0)
    weight_recency_penalty: float = Field(default=1.0, ge=0)
    stale_days_threshold: float = Field(default=14, ge=0)
    recent_days_threshold: float = Field(default=3, ge=0)
    focus_skills: list[str] = Field(default_factory=list)


class RecommendationSettings(BaseModel):
    model_config = ConfigDict(extra="allow")
    max_results: int = Field(default=5, ge=1, le=5)
    defaults: RecommendationWeights = Field(default_factory=RecommendationWeights)


# =============================================================================
# Template provisioning (args/paintquest.yaml -> provisioning)
# =============================================================================

class ProvisioningSettings(BaseModel):
    model_config = ConfigDict(extra="allow")
    min_unused_task_templates: int = Field(default=3, ge=0)
    recent_template_window: int = Field(default=20, ge=0)
    # None: every template ever used on this quest is excluded
    used_template_window: Optional[int] = Field(default=None, ge=0)
    default_minutes: int = Field(default=60, ge=1)
    default_energy: str = Field(default="med", pattern="^(low|med|high)$")


class ReviewSettings(BaseModel):
    model_config = ConfigDict(extra="allow")
    window_days: int = Field(default=7, ge=1)


class StorageSettings(BaseModel):
    model_config = ConfigDict(extra="allow")
    db_path: Optional[str] = None


class PaintQuestConfig(BaseModel):
    model_config = ConfigDict(extra="allow")
    recommendation: RecommendationSettings = Field(default_factory=RecommendationSettings)
    provisioning: ProvisioningSettings = Field(default_factory=ProvisioningSettings)
    review: ReviewSettings = Field(default_factory=ReviewSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)


# =============================================================================
# Per-user stored weighting row (recommendation_config table)
# =============================================================================

class StoredRecommendationConfig(RecommendationWeights):
    """A user's saved weighting row; unset columns fall back to defaults."""

    user_id: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data):
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if v is not None}
        return data


def load_config(path: Path | None = None) -> PaintQuestConfig:
    """Load and validate args/paintquest.yaml, falling back to defaults."""
    yaml_path = path or CONFIG_PATH

    try:
        if yaml_path.exists():
            with open(yaml_path) as f:
                raw = yaml.safe_load(f) or {}
        else:
            raw = {}

        return PaintQuestConfig.model_validate(raw)
    except Exception as e:
        logger.warning(f"Config validation failed for {yaml_path}: {e}, using defaults")
        return PaintQuestConfig()


__all__ = [
    "PaintQuestConfig",
    "ProvisioningSettings",
    "RecommendationSettings",
    "RecommendationWeights",
    "ReviewSettings",
    "StorageSettings",
    "StoredRecommendationConfig",
    "load_config",
]
