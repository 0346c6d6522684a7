"""Ingredient locality policies and diet constraints used in model prompts."""

from dataclasses import dataclass

from nutrigenius.domain.profile import DietType


@dataclass(frozen=True)
class IngredientPolicy:
    """Which ingredients the model should favour or avoid for a region."""

    region: str
    preferred: tuple[str, ...]
    avoided: tuple[str, ...]
    style: str
    shopping_places: str


CHILE_POLICY = IngredientPolicy(
    region="Chile",
    preferred=(
        "chicken",
        "turkey",
        "lean ground beef",
        "canned jack mackerel (jurel)",
        "canned tuna",
        "eggs",
        "lentils",
        "beans (porotos)",
        "chickpeas",
        "rice",
        "pasta",
        "potatoes",
        "oats",
        "wholemeal marraqueta or hallulla bread",
        "seasonal fruit (apple, banana, orange)",
        "lettuce",
        "tomato",
        "carrot",
        "squash (zapallo)",
    ),
    avoided=(
        "salmon",
        "shrimp",
        "expensive cuts of beef",
        "exotic fruit",
        "hard-to-find ingredients",
    ),
    style="simple, tasty home cooking",
    shopping_places="supermarkets and street markets (ferias)",
)

GENERIC_POLICY = IngredientPolicy(
    region="any region",
    preferred=(
        "chicken",
        "eggs",
        "canned fish",
        "dried legumes",
        "rice",
        "pasta",
        "potatoes",
        "oats",
        "seasonal fruit",
        "seasonal vegetables",
    ),
    avoided=(
        "premium seafood",
        "expensive cuts of meat",
        "imported specialty products",
    ),
    style="simple, budget-friendly home cooking",
    shopping_places="an ordinary supermarket",
)

POLICIES: dict[str, IngredientPolicy] = {
    "chile": CHILE_POLICY,
    "generic": GENERIC_POLICY,
}

DIET_CONSTRAINTS: dict[DietType, str] = {
    DietType.OMNIVORE: "omnivore: any food group is allowed",
    DietType.VEGETARIAN: "vegetarian: no meat, poultry or fish; eggs and dairy are fine",
    DietType.VEGAN: "vegan: no animal products at all (no meat, fish, eggs, dairy or honey)",
    DietType.KETO: "keto: very low carbohydrate, no bread, rice, pasta, potatoes or sugar",
}


def policy_for_region(region: str) -> IngredientPolicy:
    """Return the policy registered for a region key."""
    key = region.strip().lower()
    try:
        return POLICIES[key]
    except KeyError:
        known = ", ".join(sorted(POLICIES))
        raise ValueError(
            f"Unknown ingredient region {region!r}; expected one of {known}"
        ) from None
