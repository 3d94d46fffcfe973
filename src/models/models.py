"""Data models and schemas for the keto recipe generation pipeline.

Defines Pydantic models for generated recipes, stored user dietary preferences,
and the resolved shape of a Flowise prediction response.
All models use Pydantic v2. Field aliases follow the camelCase names used by the
web application and the Flowise prompt schema.
"""

import json
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_PREP_TIME = "15 minutes"
DEFAULT_SERVINGS = 1
DEFAULT_NET_CARBS = "Unknown"


class Recipe(BaseModel):
    """Domain model for a generated keto recipe.

    Every Recipe handed to a caller has all fields populated. `instructions` accepts
    a list or a newline-delimited string and is always stored as a list.
    """

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    title: Annotated[str, Field(min_length=1, max_length=200, description="Recipe name (1-200 chars)")]
    ingredients: Annotated[
        List[str], Field(default_factory=list, description="Free-text ingredient lines, in order")
    ]
    instructions: Annotated[
        List[str], Field(default_factory=list, description="Procedural steps, in order")
    ]
    prep_time: Annotated[
        str, Field(DEFAULT_PREP_TIME, alias="prepTime", description="Human-readable prep time")
    ]
    servings: Annotated[int, Field(DEFAULT_SERVINGS, ge=1, le=100, description="Number of servings")]
    net_carbs: Annotated[
        str, Field(DEFAULT_NET_CARBS, alias="netCarbs", description="Net carb estimate, e.g. '6g per serving'")
    ]

    @field_validator("instructions", mode="before")
    @classmethod
    def split_instruction_text(cls, value: Any) -> Any:
        """Split a newline-delimited instruction string into non-blank steps."""
        if isinstance(value, str):
            return [line.strip() for line in value.splitlines() if line.strip()]
        return value

    def to_dict(self) -> dict:
        """Serialize with the camelCase field names callers persist."""
        return self.model_dump(by_alias=True)


class UserPreferences(BaseModel):
    """Stored dietary preferences for one user (read-only input to prompt building).

    List fields may arrive JSON-encoded (as persisted by the web app) or as
    comma-separated text; both are decoded to lists.
    """

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    vegetarian: bool = False
    vegan: bool = False
    pescatarian: bool = False
    dairy_free: Annotated[bool, Field(False, alias="dairyFree")]
    gluten_free: Annotated[bool, Field(False, alias="glutenFree")]
    nut_free: Annotated[bool, Field(False, alias="nutFree")]
    protein_sources: Annotated[List[str], Field(default_factory=list, alias="proteinSources")]
    allergies: Annotated[List[str], Field(default_factory=list)]
    intolerances: Annotated[List[str], Field(default_factory=list)]
    carb_limit: Annotated[Optional[int], Field(None, ge=0, le=500, alias="carbLimit")]
    intermittent_fasting: Annotated[bool, Field(False, alias="intermittentFasting")]
    fasting_hours: Annotated[Optional[int], Field(None, ge=0, le=72, alias="fastingHours")]
    keto_experience: Annotated[Optional[str], Field(None, alias="ketoExperience")]
    primary_goal: Annotated[Optional[str], Field(None, alias="primaryGoal")]

    @field_validator("protein_sources", "allergies", "intolerances", mode="before")
    @classmethod
    def parse_string_list(cls, value: Any) -> list[str]:
        """Decode JSON-encoded or comma-separated lists; None becomes []."""
        if value is None:
            return []

        if isinstance(value, str):
            text = value.strip()
            if not text:
                return []
            if text.startswith("["):
                try:
                    decoded = json.loads(text)
                except json.JSONDecodeError:
                    decoded = None
                if isinstance(decoded, list):
                    return [str(item).strip() for item in decoded if str(item).strip()]
            return [item.strip() for item in text.split(",") if item.strip()]

        if isinstance(value, list):
            return [str(item).strip() for item in value if item is not None and str(item).strip()]

        return value

    def dietary_restrictions(self) -> list[str]:
        """Human-readable names of the enabled dietary flags, in fixed order."""
        flags = [
            (self.vegetarian, "Vegetarian"),
            (self.vegan, "Vegan"),
            (self.pescatarian, "Pescatarian"),
            (self.dairy_free, "Dairy-free"),
            (self.gluten_free, "Gluten-free"),
            (self.nut_free, "Nut-free"),
        ]
        return [label for enabled, label in flags if enabled]


class ObjectPayload(BaseModel):
    """Prediction response that is a single JSON object."""

    kind: Literal["object"] = "object"
    data: dict


class ArrayPayload(BaseModel):
    """Prediction response that is a JSON array."""

    kind: Literal["array"] = "array"
    data: list


class TextPayload(BaseModel):
    """Prediction response that is free text (including buffered stream text)."""

    kind: Literal["text"] = "text"
    text: str


FlowisePayload = Annotated[Union[ObjectPayload, ArrayPayload, TextPayload], Field(discriminator="kind")]
