"""Daily meal plan models."""

from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict, Field

MEAL_SLOTS: tuple[str, ...] = ("breakfast", "lunch", "dinner", "snack")


class Meal(BaseModel):
    """Single meal suggested by the model."""

    model_config = ConfigDict(strict=True, extra="ignore", frozen=True)

    name: str = Field(min_length=1)
    description: str = ""
    calories: int = Field(ge=0)
    protein: float | None = Field(default=None, ge=0)
    carbs: float | None = Field(default=None, ge=0)
    fats: float | None = Field(default=None, ge=0)
    ingredients: list[str] = Field(default_factory=list)


class DailyPlan(BaseModel):
    """One day of meals, exactly one per slot."""

    model_config = ConfigDict(strict=True, extra="forbid", frozen=True)

    breakfast: Meal
    lunch: Meal
    dinner: Meal
    snack: Meal

    def meals(self) -> Iterator[tuple[str, Meal]]:
        """Yield (slot, meal) pairs in serving order."""
        for slot in MEAL_SLOTS:
            yield slot, getattr(self, slot)

    @property
    def total_calories(self) -> int:
        return sum(meal.calories for _, meal in self.meals())

    def calorie_gap(self, target_kcal: int) -> int:
        """Planned calories minus the target; advisory only."""
        return self.total_calories - target_kcal
