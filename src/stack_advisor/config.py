"""Centralized configuration management for the stack advisor."""

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field

from tech_catalog.schema import Axis


class ScoringWeightsConfig(BaseModel):
    """Multipliers applied to each axis weight.

    Project type and priority count for more than the other axes.
    """
    project_type: float = Field(
        2.0,
        description="Multiplier for the project type answer"
    )
    scale: float = Field(
        1.0,
        description="Multiplier for the expected scale answer"
    )
    experience: float = Field(
        1.0,
        description="Multiplier for the team experience answer"
    )
    priority: float = Field(
        1.5,
        description="Multiplier for the optimization priority answer"
    )
    features: float = Field(
        1.0,
        description="Multiplier for the special requirement answer"
    )

    def for_axis(self, axis: Axis) -> float:
        return getattr(self, axis.field_name)


class RankingConfig(BaseModel):
    """How many technologies are recommended per category."""
    top_n: int = Field(2, ge=1, description="Technologies returned per category")


class ChatConfig(BaseModel):
    """Settings for the conversational advisor."""
    temperature: float = Field(0.7, description="Sampling temperature sent to the model")
    max_tokens: int = Field(2000, description="Maximum tokens in one model reply")
    connect_timeout: float = Field(10.0, description="HTTP connect timeout in seconds")
    read_timeout: float = Field(60.0, description="HTTP read timeout in seconds")
    fallback_suggestions: list[str] = Field(
        default_factory=lambda: ["Tell me more", "Show recommendations", "Start over"],
        description="Quick replies offered when a model reply cannot be parsed"
    )

    @property
    def request_timeout(self) -> tuple[float, float]:
        return (self.connect_timeout, self.read_timeout)


class AdvisorConfig(BaseModel):
    """Complete configuration for the stack advisor."""
    scoring_weights: ScoringWeightsConfig = Field(default_factory=ScoringWeightsConfig)
    ranking: RankingConfig = Field(default_factory=RankingConfig)
    chat: ChatConfig = Field(default_factory=ChatConfig)


# Global config instance
_config: Optional[AdvisorConfig] = None


def get_config() -> AdvisorConfig:
    """Get the current configuration.

    Returns the global config, initializing with defaults if not yet loaded.
    """
    global _config
    if _config is None:
        _config = AdvisorConfig()
    return _config


def load_config(path: Path) -> AdvisorConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        The loaded AdvisorConfig.
    """
    global _config

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)

    _config = AdvisorConfig.model_validate(data or {})
    return _config


def reset_config() -> None:
    """Reset configuration to defaults."""
    global _config
    _config = AdvisorConfig()


def find_config_file() -> Optional[Path]:
    """Find an advisor configuration file.

    Looks in (order of priority):
    1. STACK_ADVISOR_CONFIG environment variable
    2. ./advisor-config.yaml
    3. ./advisor-config.yml
    4. ~/.config/stack-advisor/config.yaml
    """
    env_path = os.environ.get("STACK_ADVISOR_CONFIG")
    if env_path:
        path = Path(env_path)
        if path.exists():
            return path

    for name in ["advisor-config.yaml", "advisor-config.yml"]:
        path = Path(name)
        if path.exists():
            return path

    user_config = Path.home() / ".config" / "stack-advisor" / "config.yaml"
    if user_config.exists():
        return user_config

    return None


def save_default_config(path: Path) -> None:
    """Save the default configuration to a YAML file."""
    data = AdvisorConfig().model_dump()

    yaml_content = """# Stack Advisor Configuration
# ===========================
#
# scoring_weights: multiplier applied to each questionnaire answer
# ranking.top_n:   technologies recommended per category
# chat:            model request settings and fallback quick replies
#
# Copy this file to one of these locations:
#   - ./advisor-config.yaml (current directory)
#   - ~/.config/stack-advisor/config.yaml (user config)
#
# Or set the STACK_ADVISOR_CONFIG environment variable.

"""
    yaml_content += yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True)

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        f.write(yaml_content)
