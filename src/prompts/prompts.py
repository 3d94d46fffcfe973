"""Prompt builders for the Flowise recipe and motivation flows.

Prompts are deterministic: the same preferences and ingredients always
produce the same text (no timestamps, no randomness).
"""

from typing import Optional

from src.models.models import UserPreferences


DEFAULT_PREFERENCES_LINE = "User Dietary Preferences: standard keto diet, no specific restrictions."

DEFAULT_CARB_LIMIT = 20
DEFAULT_EXPERIENCE = "beginner"
DEFAULT_GOAL = "general health"

RECIPE_INSTRUCTIONS = """Generate exactly 3 unique keto recipes using these ingredients. Each recipe must:
- Be keto-friendly (under 10g net carbs per serving)
- Include the provided ingredients as main components
- Respect every dietary restriction, allergy and intolerance listed above
- Be practical and easy to make

Format as JSON array:
[
  {
    "title": "Recipe Name",
    "ingredients": ["ingredient 1", "ingredient 2"],
    "instructions": ["step 1", "step 2"],
    "prepTime": "15 minutes",
    "servings": 2,
    "netCarbs": "5g per serving"
  }
]

Return ONLY the JSON array, no additional text."""


def _joined(items: list[str], fallback: str) -> str:
    return ", ".join(items) if items else fallback


def build_preferences_block(preferences: Optional[UserPreferences]) -> str:
    """Render stored preferences as a fixed-order text block.

    Only fields that are present are rendered; every other line states its default.
    """
    if preferences is None:
        return DEFAULT_PREFERENCES_LINE

    carb_limit = preferences.carb_limit if preferences.carb_limit else DEFAULT_CARB_LIMIT
    lines = [
        "User Dietary Preferences:",
        f"- Dietary restrictions: {_joined(preferences.dietary_restrictions(), 'None')}",
        f"- Preferred proteins: {_joined(preferences.protein_sources, 'Any keto-friendly proteins')}",
        f"- Allergies: {_joined(preferences.allergies, 'None')}",
        f"- Intolerances: {_joined(preferences.intolerances, 'None')}",
        f"- Daily carb limit: {carb_limit}g net carbs",
        f"- Keto experience level: {preferences.keto_experience or DEFAULT_EXPERIENCE}",
        f"- Primary goal: {preferences.primary_goal or DEFAULT_GOAL}",
    ]
    if preferences.intermittent_fasting:
        hours = preferences.fasting_hours or 16
        lines.append(f"- Intermittent fasting: {hours}-hour fasting window")

    lines.append("")
    lines.append(
        "IMPORTANT: All dietary restrictions and allergies above are MANDATORY constraints, "
        "not suggestions. Never include an ingredient that violates them."
    )
    return "\n".join(lines)


def build_recipe_prompt(preferences: Optional[UserPreferences], ingredients: str) -> str:
    """Build the full recipe-generation question sent to Flowise.

    Args:
        preferences: Stored user preferences, or None for the standard keto default.
        ingredients: Raw comma-separated ingredient input from the user.

    Returns:
        Prompt text demanding exactly 3 recipes as a bare JSON array.
    """
    return (
        f"{build_preferences_block(preferences)}\n\n"
        f"INGREDIENTS TO USE: {ingredients}\n\n"
        f"{RECIPE_INSTRUCTIONS}"
    )


def build_motivation_prompt(user_context: Optional[dict] = None) -> str:
    """Build the daily-motivation question from the user's streak/progress context."""
    context = user_context or {}
    lines = [
        "You are a keto sensei: wise, encouraging and a little playful.",
        "Write ONE short motivational message (max 2 sentences) for today.",
    ]
    if context.get("currentStreak") is not None:
        lines.append(f"Current keto streak: {context['currentStreak']} days")
    if context.get("longestStreak") is not None:
        lines.append(f"Longest streak: {context['longestStreak']} days")
    if context.get("primaryGoal"):
        lines.append(f"Primary goal: {context['primaryGoal']}")
    lines.append("Return only the message text.")
    return "\n".join(lines)
