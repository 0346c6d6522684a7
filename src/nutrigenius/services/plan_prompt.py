"""Prompt construction for daily plan generation."""

import json

from nutrigenius.domain.metrics import NutritionTargets
from nutrigenius.domain.plan import MEAL_SLOTS
from nutrigenius.domain.profile import Goal, UserProfile
from nutrigenius.ingredient_policy import DIET_CONSTRAINTS, IngredientPolicy

GOAL_DESCRIPTIONS: dict[Goal, str] = {
    Goal.LOSE_WEIGHT: "lose body fat",
    Goal.MAINTAIN: "maintain current weight",
    Goal.GAIN_MUSCLE: "gain muscle",
}

_MEAL_TEMPLATE: dict[str, object] = {
    "name": "",
    "description": "",
    "calories": 0,
    "protein": 0,
    "carbs": 0,
    "fats": 0,
    "ingredients": [""],
}


def plan_output_example() -> str:
    """Return the JSON shape the model must reproduce."""
    return json.dumps({slot: _MEAL_TEMPLATE for slot in MEAL_SLOTS}, indent=2)


def build_plan_instruction(
    profile: UserProfile, targets: NutritionTargets, policy: IngredientPolicy
) -> str:
    """Build the instruction asking the model for a one-day meal plan."""
    lines = [
        "Create a one-day meal plan with breakfast, lunch, dinner and a snack.",
        f"Diet: {DIET_CONSTRAINTS[profile.diet_type]}.",
        f"Goal: {GOAL_DESCRIPTIONS[profile.goal]}.",
        f"Total daily calorie target: {targets.target_kcal} kcal "
        f"(protein {targets.protein_g} g, carbs {targets.carbs_g} g, "
        f"fat {targets.fat_g} g).",
        "",
        f"LOCAL CONTEXT: {policy.region}.",
        "INGREDIENTS: use only cheap, very common ingredients found in "
        f"{policy.shopping_places}.",
        f"- Prefer: {', '.join(policy.preferred)}.",
        f"- AVOID: {', '.join(policy.avoided)}.",
        f"- Style: {policy.style}.",
        "",
        "Return ONLY a JSON object with exactly this structure and no extra "
        "text, no markdown and no code fences:",
        plan_output_example(),
        "Calories and macros are whole numbers; ingredients are plain names.",
        f"Make sure the meal calories add up to about {targets.target_kcal} kcal.",
    ]
    return "\n".join(lines)
