"""Deterministic BMI, energy and macro target calculations."""

import logging
import math
from decimal import ROUND_HALF_UP, Decimal

from nutrigenius.domain.metrics import BmiCategory, NutritionTargets
from nutrigenius.domain.profile import ActivityLevel, Goal, Sex, UserProfile
from nutrigenius.errors import ValidationError

ACTIVITY_MULTIPLIERS: dict[ActivityLevel, float] = {
    ActivityLevel.SEDENTARY: 1.2,
    ActivityLevel.LIGHT: 1.375,
    ActivityLevel.MODERATE: 1.55,
    ActivityLevel.ACTIVE: 1.725,
    ActivityLevel.ATHLETE: 1.9,
}

GOAL_ADJUSTMENTS: dict[Goal, int] = {
    Goal.LOSE_WEIGHT: -400,
    Goal.MAINTAIN: 0,
    Goal.GAIN_MUSCLE: 300,
}

_SEX_OFFSETS: dict[Sex, int] = {Sex.MALE: 5, Sex.FEMALE: -161}

# Share of target energy, kcal per gram.
_PROTEIN_SHARE = 0.30
_FAT_SHARE = 0.30
_KCAL_PER_G_PROTEIN = 4
_KCAL_PER_G_CARBS = 4
_KCAL_PER_G_FAT = 9

_logger = logging.getLogger(__name__)


def compute_targets(profile: UserProfile) -> NutritionTargets:
    """Compute BMI, maintenance energy, goal energy and macro grams."""
    _ensure_positive(profile)

    bmi = body_mass_index(profile.weight, profile.height)
    bmr = basal_metabolic_rate(profile.weight, profile.height, profile.age, profile.sex)
    if bmr <= 0:
        raise ValidationError(
            f"Profile gives a non-positive basal rate ({bmr} kcal); "
            "check age, weight and height"
        )
    maintenance = _round_half_up(bmr * ACTIVITY_MULTIPLIERS[profile.activity_level])
    target = maintenance + GOAL_ADJUSTMENTS[profile.goal]
    floor = _round_half_up(bmr)
    if target < floor:
        _logger.info(
            "Target energy %s below basal rate %s; using basal rate", target, floor
        )
        target = floor

    protein_g = _round_half_up(target * _PROTEIN_SHARE / _KCAL_PER_G_PROTEIN)
    fat_g = _round_half_up(target * _FAT_SHARE / _KCAL_PER_G_FAT)
    # Carbs take whatever energy protein and fat leave, so rounding error
    # never exceeds half a gram of carbohydrate.
    remaining = target - protein_g * _KCAL_PER_G_PROTEIN - fat_g * _KCAL_PER_G_FAT
    carbs_g = max(_round_half_up(remaining / _KCAL_PER_G_CARBS), 0)

    return NutritionTargets(
        bmi=bmi,
        bmi_category=bmi_category(bmi),
        bmr=bmr,
        maintenance_kcal=maintenance,
        target_kcal=target,
        protein_g=protein_g,
        carbs_g=carbs_g,
        fat_g=fat_g,
    )


def body_mass_index(weight_kg: float, height_cm: float) -> float:
    """Return BMI rounded to one decimal."""
    height_m = height_cm / 100
    raw = weight_kg / (height_m * height_m)
    return float(Decimal(repr(raw)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def bmi_category(bmi: float) -> BmiCategory:
    """Classify a BMI value."""
    if bmi < 18.5:
        return BmiCategory.UNDERWEIGHT
    if bmi < 25:
        return BmiCategory.NORMAL
    if bmi < 30:
        return BmiCategory.OVERWEIGHT
    return BmiCategory.OBESE


def basal_metabolic_rate(weight_kg: float, height_cm: float, age: int, sex: Sex) -> float:
    """Mifflin-St Jeor resting energy expenditure in kcal/day."""
    return 10 * weight_kg + 6.25 * height_cm - 5 * age + _SEX_OFFSETS[sex]


def _ensure_positive(profile: UserProfile) -> None:
    for field_name in ("age", "weight", "height"):
        value = getattr(profile, field_name)
        if not isinstance(value, int | float) or value <= 0:
            raise ValidationError(f"{field_name} must be a positive number, got {value!r}")


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)
