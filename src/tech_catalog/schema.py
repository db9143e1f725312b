"""Pydantic models for the technology catalog schema."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


MIN_WEIGHT = 1
MAX_WEIGHT = 10


class Category(str, Enum):
    """Catalog partition a technology belongs to."""
    FRONTEND = "frontend"
    BACKEND = "backend"
    DATABASE = "database"
    HOSTING = "hosting"

    @classmethod
    def ordered(cls) -> list["Category"]:
        """Categories in display order."""
        return [cls.FRONTEND, cls.BACKEND, cls.DATABASE, cls.HOSTING]


class Axis(str, Enum):
    """Question dimension used for scoring.

    Values match the question ids used in answer sets.
    """
    PROJECT_TYPE = "projectType"
    SCALE = "scale"
    EXPERIENCE = "experience"
    PRIORITY = "priority"
    FEATURES = "features"

    @classmethod
    def from_string(cls, value: str) -> Optional["Axis"]:
        """Parse an axis from a question id, tolerating snake_case."""
        if not value:
            return None
        mapping = {
            "projecttype": cls.PROJECT_TYPE,
            "scale": cls.SCALE,
            "experience": cls.EXPERIENCE,
            "priority": cls.PRIORITY,
            "features": cls.FEATURES,
        }
        return mapping.get(value.lower().replace("_", "").replace("-", ""))

    @property
    def field_name(self) -> str:
        """Attribute name on AxisScores."""
        return {
            Axis.PROJECT_TYPE: "project_type",
            Axis.SCALE: "scale",
            Axis.EXPERIENCE: "experience",
            Axis.PRIORITY: "priority",
            Axis.FEATURES: "features",
        }[self]


class AxisScores(BaseModel):
    """Per-axis weight tables for one technology.

    Each table maps an answer value to a weight in [1, 10]. A value missing
    from a table contributes nothing to the score.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    project_type: dict[str, int] = Field(default_factory=dict, alias="projectType")
    scale: dict[str, int] = Field(default_factory=dict)
    experience: dict[str, int] = Field(default_factory=dict)
    priority: dict[str, int] = Field(default_factory=dict)
    features: dict[str, int] = Field(default_factory=dict)

    @field_validator("project_type", "scale", "experience", "priority", "features")
    @classmethod
    def _check_weight_range(cls, table: dict[str, int]) -> dict[str, int]:
        for value, weight in table.items():
            if not MIN_WEIGHT <= weight <= MAX_WEIGHT:
                raise ValueError(
                    f"weight for '{value}' must be between {MIN_WEIGHT} and {MAX_WEIGHT}, got {weight}"
                )
        return table

    def table(self, axis: Axis) -> dict[str, int]:
        return getattr(self, axis.field_name)

    def weight(self, axis: Axis, value: Optional[str]) -> int:
        """Weight for an answer value on an axis, 0 when absent."""
        if value is None:
            return 0
        return self.table(axis).get(value, 0)


class Technology(BaseModel):
    """Catalog entry for a single technology."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., description="Unique key")
    name: str = Field(..., description="Display name")
    category: Category = Field(..., description="Catalog partition")
    logo: str = Field("", description="Emoji shown next to the name")
    description: str = Field("", description="One-line summary")
    pros: list[str] = Field(default_factory=list)
    cons: list[str] = Field(default_factory=list)
    learn_more: Optional[str] = Field(None, alias="learnMore", description="Documentation URL")
    scores: AxisScores = Field(default_factory=AxisScores)


class TechnologyCatalog(BaseModel):
    """Ordered collection of technologies.

    Order is significant: it breaks ties when two technologies score the same.
    """
    version: str = Field(default="1.0.0", description="Catalog schema version")
    technologies: list[Technology] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_unique_ids(self) -> "TechnologyCatalog":
        seen = set()
        for tech in self.technologies:
            if tech.id in seen:
                raise ValueError(f"duplicate technology id '{tech.id}'")
            seen.add(tech.id)
        return self

    def get(self, tech_id: str) -> Optional[Technology]:
        for tech in self.technologies:
            if tech.id == tech_id:
                return tech
        return None

    def by_category(self, category: Category) -> list[Technology]:
        """Technologies in a category, in catalog order."""
        return [t for t in self.technologies if t.category == category]

    def categories(self) -> list[Category]:
        """Categories that have at least one technology."""
        present = {t.category for t in self.technologies}
        return [c for c in Category.ordered() if c in present]


class QuestionOption(BaseModel):
    """A selectable answer to a question."""
    value: str
    label: str
    icon: str = ""


class Question(BaseModel):
    """A questionnaire question bound to one scoring axis."""
    id: Axis
    title: str
    description: str = ""
    options: list[QuestionOption] = Field(default_factory=list)

    def option_values(self) -> list[str]:
        return [o.value for o in self.options]
