"""Recipe extraction from Flowise prediction output.

The model is asked for a bare JSON array but frequently wraps it in prose or
code fences, returns a single object, or answers in plain text. Parsing runs
an ordered list of attempts, each returning candidates or None:

1. Direct JSON parse of the whole text
2. Bracket-balanced [...] regions, then {...} regions, until one parses as JSON
3. Plain-text fallback: a single recipe whose steps are the text lines

Candidates from 1 or 2 are validated: every record needs a title, ingredients
and instructions. A structurally incomplete record raises RecipeValidationError
instead of degrading to plain text, because the payload *was* JSON.
"""

import json
import math
import re
from typing import Any, Callable, Optional, Union

from pydantic import ValidationError

from src.models.models import (
    DEFAULT_NET_CARBS,
    DEFAULT_PREP_TIME,
    DEFAULT_SERVINGS,
    ArrayPayload,
    FlowisePayload,
    ObjectPayload,
    Recipe,
    TextPayload,
)
from src.utils.errors import RecipeValidationError
from src.utils.logger import logger


PLAIN_TEXT_TITLE = "AI Generated Recipe"
PLAIN_TEXT_INGREDIENTS = ["See instructions for ingredients"]
PLAIN_TEXT_EMPTY_STEP = "No instructions were returned"

REQUIRED_FIELDS = ("title", "ingredients", "instructions")

# Object keys read, in order, when the model emits structured list items
INGREDIENT_KEYS = ("quantity", "amount", "unit", "name", "ingredient", "item")
INSTRUCTION_KEYS = ("instruction", "text", "description", "step")

MAX_SERVINGS = 100


def find_balanced_regions(text: str, open_char: str = "[", close_char: str = "]"):
    """Yield every bracket-balanced substring starting at an `open_char`, in order.

    Brackets inside JSON string literals are ignored.
    """
    start = text.find(open_char)
    while start != -1:
        depth = 0
        in_string = False
        escaped = False
        for pos in range(start, len(text)):
            char = text[pos]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == open_char:
                depth += 1
            elif char == close_char:
                depth -= 1
                if depth == 0:
                    yield text[start:pos + 1]
                    break
        start = text.find(open_char, start + 1)


def _as_candidates(parsed: Any) -> Optional[list]:
    """Object -> one-element list, array -> as-is, anything else -> None."""
    if isinstance(parsed, list):
        return parsed
    if isinstance(parsed, dict):
        # {"recipes": [...]} envelopes are unwrapped
        nested = parsed.get("recipes")
        if isinstance(nested, list):
            return nested
        return [parsed]
    return None


def _attempt_direct_json(text: str) -> Optional[list]:
    try:
        return _as_candidates(json.loads(text))
    except (json.JSONDecodeError, ValueError):
        return None


def _attempt_embedded_json(text: str) -> Optional[list]:
    for open_char, close_char in (("[", "]"), ("{", "}")):
        for region in find_balanced_regions(text, open_char, close_char):
            try:
                candidates = _as_candidates(json.loads(region))
            except (json.JSONDecodeError, ValueError):
                continue
            if candidates is not None:
                return candidates
    return None


JSON_ATTEMPTS: list[tuple[str, Callable[[str], Optional[list]]]] = [
    ("direct JSON", _attempt_direct_json),
    ("embedded JSON", _attempt_embedded_json),
]


def extract_json_candidates(text: str) -> Optional[list]:
    """Run the JSON attempts in order and return the first hit, or None."""
    for name, attempt in JSON_ATTEMPTS:
        candidates = attempt(text)
        if candidates is not None:
            logger.debug(f"Recipe JSON found via {name} ({len(candidates)} candidates)")
            return candidates
    return None


def plain_text_recipe(text: str) -> Recipe:
    """Wrap unstructured model output as a single recipe."""
    steps = [line.strip() for line in (text or "").splitlines() if line.strip()]
    return Recipe(
        title=PLAIN_TEXT_TITLE,
        ingredients=list(PLAIN_TEXT_INGREDIENTS),
        instructions=steps or [PLAIN_TEXT_EMPTY_STEP],
        prep_time=DEFAULT_PREP_TIME,
        servings=DEFAULT_SERVINGS,
        net_carbs=DEFAULT_NET_CARBS,
    )


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


def _is_number(value: Any) -> bool:
    """int or finite float; json.loads yields inf/nan for 1e400, Infinity and NaN."""
    if isinstance(value, bool):
        return False
    if isinstance(value, float):
        return math.isfinite(value)
    return isinstance(value, int)


def _scalar_text(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    if _is_number(value):
        return f"{value:g}"
    return ""


def _item_text(item: Any, keys: tuple[str, ...] = (), first_only: bool = False) -> str:
    """Render one structured list item as display text.

    Objects are read through `keys` in order, falling back to all their scalar
    values; nested lists are joined with spaces.
    """
    if isinstance(item, dict):
        parts = [_scalar_text(item[key]) for key in keys if key in item]
        parts = [part for part in parts if part]
        if not parts:
            parts = [text for text in (_scalar_text(value) for value in item.values()) if text]
        if first_only:
            return parts[0] if parts else ""
        return " ".join(parts)
    if isinstance(item, (list, tuple)):
        return " ".join(text for text in (_item_text(sub, keys) for sub in item) if text)
    return _scalar_text(item)


def _normalize_ingredients(value: Any) -> list[str]:
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = value
    else:
        items = [value]
    return [text for text in (_item_text(item, INGREDIENT_KEYS) for item in items) if text]


def _normalize_instructions(value: Any) -> Union[str, list[str]]:
    # A string is handed to Recipe as-is; the model splits it on newlines.
    if isinstance(value, str):
        return value
    if not isinstance(value, (list, tuple)):
        value = [value]
    return [text for text in (_item_text(step, INSTRUCTION_KEYS, first_only=True) for step in value) if text]


def _coerce_text(value: Any, default: str, number_suffix: str) -> str:
    if _is_blank(value) or isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return f"{value:g}{number_suffix}" if _is_number(value) else default
    return _item_text(value) or default


def _coerce_servings(value: Any) -> int:
    if isinstance(value, bool) or value is None:
        return DEFAULT_SERVINGS
    if isinstance(value, (int, float)):
        if not _is_number(value):
            return DEFAULT_SERVINGS
        servings = int(value)
    else:
        match = re.search(r"\d+", str(value))
        servings = int(match.group()) if match else 0
    if servings < 1:
        return DEFAULT_SERVINGS
    return min(servings, MAX_SERVINGS)


def validate_and_format_recipes(candidates: list) -> list[Recipe]:
    """Validate parsed JSON records and normalize them to Recipe models.

    Args:
        candidates: Parsed JSON values, expected to be recipe objects.

    Returns:
        One Recipe per candidate, defaults applied.

    Raises:
        RecipeValidationError: For the first record (1-based index) missing a required field.
    """
    recipes: list[Recipe] = []
    for index, item in enumerate(candidates, start=1):
        if not isinstance(item, dict):
            raise RecipeValidationError(index, list(REQUIRED_FIELDS))

        missing = [name for name in REQUIRED_FIELDS if _is_blank(item.get(name))]
        ingredients = _normalize_ingredients(item.get("ingredients")) if "ingredients" not in missing else []
        instructions = _normalize_instructions(item.get("instructions")) if "instructions" not in missing else []
        if "ingredients" not in missing and not ingredients:
            missing.append("ingredients")
        if "instructions" not in missing and not instructions:
            missing.append("instructions")
        if missing:
            raise RecipeValidationError(index, missing)

        try:
            recipes.append(
                Recipe(
                    title=_item_text(item["title"])[:200],
                    ingredients=ingredients,
                    instructions=instructions,
                    prep_time=_coerce_text(item.get("prepTime"), DEFAULT_PREP_TIME, " minutes"),
                    servings=_coerce_servings(item.get("servings")),
                    net_carbs=_coerce_text(item.get("netCarbs"), DEFAULT_NET_CARBS, "g per serving"),
                )
            )
        except ValidationError as e:
            raise RecipeValidationError(index, [str(err["loc"][0]) for err in e.errors()]) from e

    return recipes


def parse_recipe_payload(payload: Union[FlowisePayload, str]) -> list[Recipe]:
    """Turn a resolved prediction payload (or raw text) into validated recipes.

    Args:
        payload: ObjectPayload, ArrayPayload, TextPayload, or a raw string
            (e.g. the buffered text of an event stream).

    Returns:
        Validated recipes. Unparseable text yields one plain-text recipe.

    Raises:
        RecipeValidationError: Parsed JSON is missing a required field.
    """
    if isinstance(payload, str):
        payload = TextPayload(text=payload)

    if isinstance(payload, ArrayPayload):
        return validate_and_format_recipes(payload.data)
    if isinstance(payload, ObjectPayload):
        return validate_and_format_recipes(_as_candidates(payload.data))

    candidates = extract_json_candidates(payload.text)
    if candidates is None:
        logger.warning("No JSON found in prediction output, using plain-text fallback")
        return [plain_text_recipe(payload.text)]

    return validate_and_format_recipes(candidates)
