"""User profile models."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class Sex(StrEnum):
    """Biological sex, used only for the BMR offset."""

    MALE = "male"
    FEMALE = "female"


class ActivityLevel(StrEnum):
    """Activity levels ordered from least to most active."""

    SEDENTARY = "sedentary"
    LIGHT = "light"
    MODERATE = "moderate"
    ACTIVE = "active"
    ATHLETE = "athlete"


class Goal(StrEnum):
    """Body composition goal."""

    LOSE_WEIGHT = "lose_weight"
    MAINTAIN = "maintain"
    GAIN_MUSCLE = "gain_muscle"


class DietType(StrEnum):
    """Dietary restriction applied to generated meals."""

    OMNIVORE = "omnivore"
    VEGETARIAN = "vegetarian"
    VEGAN = "vegan"
    KETO = "keto"


class UserProfile(BaseModel):
    """Onboarding profile; replaced whole, never edited in place.

    Aliases keep the camelCase keys used by stored profile snapshots.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(min_length=1, max_length=80)
    age: int = Field(gt=0, le=120)
    weight: float = Field(gt=0, le=400, description="Body weight in kg")
    height: float = Field(gt=0, le=272, description="Height in cm")
    sex: Sex = Field(alias="gender")
    activity_level: ActivityLevel = Field(alias="activityLevel")
    goal: Goal
    diet_type: DietType = Field(alias="dietType")
