"""Deterministic template recipes used when live generation is unavailable."""

from src.models.models import Recipe


FALLBACK_INGREDIENT_NAME = "Keto Ingredients"

MOCK_RECIPE_TEMPLATES = [
    {
        "title": "Keto Power Bowl",
        "ingredients": ["protein source", "leafy greens", "healthy fats", "low-carb vegetables"],
        "instructions": ["Season and cook protein", "Prepare fresh vegetables", "Combine with healthy fats", "Serve in a bowl"],
        "prepTime": "15 minutes",
        "servings": 1,
        "netCarbs": "6g per serving",
    },
    {
        "title": "Quick Keto Stir-Fry",
        "ingredients": ["main protein", "mixed vegetables", "cooking oil", "seasonings"],
        "instructions": ["Heat oil in pan", "Add protein and cook until done", "Add vegetables and stir-fry", "Season to taste"],
        "prepTime": "12 minutes",
        "servings": 2,
        "netCarbs": "5g per serving",
    },
    {
        "title": "Creamy Keto Delight",
        "ingredients": ["primary ingredient", "cream or cheese", "herbs", "optional nuts"],
        "instructions": ["Prepare main ingredient", "Create creamy sauce", "Combine and heat gently", "Garnish with herbs"],
        "prepTime": "18 minutes",
        "servings": 1,
        "netCarbs": "7g per serving",
    },
]


def split_ingredients(ingredients: str) -> list[str]:
    return [item.strip() for item in (ingredients or "").split(",") if item.strip()]


def mock_recipes(ingredients: str) -> list[Recipe]:
    """Build exactly one recipe per template around the user's ingredients.

    The first ingredient is named in each title; the full list replaces the
    template ingredients when any were supplied. Never raises.
    """
    actual = split_ingredients(ingredients)
    headline = actual[0][:100] if actual else FALLBACK_INGREDIENT_NAME

    return [
        Recipe(
            title=f"{template['title']} with {headline}",
            ingredients=list(actual) if actual else list(template["ingredients"]),
            instructions=list(template["instructions"]),
            prep_time=template["prepTime"],
            servings=template["servings"],
            net_carbs=template["netCarbs"],
        )
        for template in MOCK_RECIPE_TEMPLATES
    ]
