"""Derived nutrition targets."""

from dataclasses import dataclass
from enum import StrEnum


class BmiCategory(StrEnum):
    """WHO-style BMI bands."""

    UNDERWEIGHT = "underweight"
    NORMAL = "normal"
    OVERWEIGHT = "overweight"
    OBESE = "obese"


@dataclass(frozen=True)
class NutritionTargets:
    """Daily energy and macro targets computed from a profile."""

    bmi: float
    bmi_category: BmiCategory
    bmr: float
    maintenance_kcal: int
    target_kcal: int
    protein_g: int
    carbs_g: int
    fat_g: int

    @property
    def macro_kcal(self) -> int:
        """Energy supplied by the macro targets."""
        return self.protein_g * 4 + self.carbs_g * 4 + self.fat_g * 9

    def as_dict(self) -> dict[str, object]:
        """Return a JSON-friendly representation."""
        return {
            "bmi": self.bmi,
            "bmi_category": self.bmi_category.value,
            "bmr": round(self.bmr, 2),
            "maintenance_kcal": self.maintenance_kcal,
            "target_kcal": self.target_kcal,
            "protein_g": self.protein_g,
            "carbs_g": self.carbs_g,
            "fat_g": self.fat_g,
        }
