"""Recipe generation orchestrator.

RecipeGenerator.generate is the single entry point the application uses to get
keto recipes for a list of ingredients:

    cache hit? -> return
    build prompt -> Flowise prediction (streamed or buffered) -> parse -> cache -> return

Generation is best-effort. Missing configuration, transport failures,
validation failures and anything unexpected are logged and answered with the
deterministic mock recipes; callers never see an exception. Cancellation of
the awaiting task still propagates and discards any partially streamed text.
"""

from typing import Any, Optional, Union

from src.cache.recipe_cache import RecipeCache
from src.flowise.client import FlowiseClient
from src.generator.mock_recipes import mock_recipes
from src.models.models import Recipe, TextPayload, UserPreferences
from src.parsing.recipe_parser import parse_recipe_payload
from src.prompts.prompts import build_recipe_prompt
from src.utils.config import Config, config
from src.utils.errors import (
    ConfigurationMissing,
    RecipeServiceError,
    RecipeValidationError,
    TransportFailure,
)
from src.utils.logger import log_context, logger
from src.utils.safe_execute import safe_execute_sync


PreferencesInput = Union[UserPreferences, dict, None]


def recipe_session_id(user_id: Any) -> str:
    return f"user_{user_id}_recipes"


def coerce_preferences(preferences: PreferencesInput) -> Optional[UserPreferences]:
    """Accept a model, a stored-preferences dict, or None.

    Invalid preference data is logged and treated as absent so the prompt falls
    back to the standard keto default.
    """
    if preferences is None or isinstance(preferences, UserPreferences):
        return preferences
    return safe_execute_sync(
        lambda: UserPreferences.model_validate(preferences),
        "Invalid user preferences, using defaults",
        log_level="warning",
        default_return=None,
    )


class RecipeGenerator:
    """Cache-first, fail-safe recipe generation."""

    def __init__(
        self,
        cache: RecipeCache,
        client: Optional[FlowiseClient] = None,
        settings: Optional[Config] = None,
    ) -> None:
        """Initialize RecipeGenerator.

        Args:
            cache: Process-wide RecipeCache shared by all generate calls.
            client: Flowise client. Built from settings when omitted and Flowise is configured.
            settings: Configuration (defaults to the module-level config).
        """
        self.cache = cache
        self.settings = settings or config
        if client is None and self.settings.flowise_configured:
            client = FlowiseClient.from_config(self.settings)
        self.client = client

    async def generate(
        self,
        ingredients: str,
        user_id: Any,
        preferences: PreferencesInput = None,
    ) -> list[Recipe]:
        """Generate keto recipes for the given ingredients.

        Args:
            ingredients: Raw comma-separated ingredient input.
            user_id: Opaque user id, used for the Flowise session id and logging.
            preferences: Stored dietary preferences, if any.

        Returns:
            Recipes from the cache, the live flow, or the 3 mock templates. Never raises.
        """
        ingredients = ingredients or ""
        context = log_context(user_id=user_id)

        try:
            cached = self.cache.get(ingredients)
            if cached is not None:
                return cached

            prompt = build_recipe_prompt(coerce_preferences(preferences), ingredients)
            recipes = await self._generate_live(prompt, user_id)
            self.cache.put(ingredients, recipes)
            logger.info(f"Generated {len(recipes)} recipes via Flowise", extra=context)
            return recipes

        except ConfigurationMissing as e:
            logger.info(f"Flowise not configured ({e}), using mock recipes", extra=context)
        except TransportFailure as e:
            logger.warning(f"Flowise call failed, using mock recipes: {e}", extra=context)
        except RecipeValidationError as e:
            logger.warning(
                f"Invalid recipe at index {e.index} in Flowise response, using mock recipes: {e}",
                extra=context,
            )
        except RecipeServiceError as e:
            logger.warning(f"Recipe generation failed, using mock recipes: {e}", extra=context)
        except Exception as e:
            logger.error(f"Unexpected recipe generation error, using mock recipes: {e}", exc_info=True, extra=context)

        return mock_recipes(ingredients)

    async def _generate_live(self, prompt: str, user_id: Any) -> list[Recipe]:
        """One prediction call parsed into recipes. Raises on any failure."""
        if self.client is None or not self.settings.flowise_configured:
            raise ConfigurationMissing("FLOWISE_API_URL, FLOWISE_API_KEY and FLOWISE_RECIPE_FLOW_ID are required")

        payload = await self.client.predict(
            self.settings.FLOWISE_RECIPE_FLOW_ID,
            prompt,
            recipe_session_id(user_id),
            streaming=self.settings.ENABLE_STREAMING,
        )
        if isinstance(payload, TextPayload) and not payload.text.strip():
            raise TransportFailure("Flowise returned an empty response")

        recipes = parse_recipe_payload(payload)
        if not recipes:
            raise RecipeServiceError("Flowise response contained no recipes")
        return recipes
