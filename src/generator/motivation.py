"""Daily sensei motivation message.

Uses the Flowise motivation flow when configured; otherwise, or when the call
fails, picks one of the built-in messages. Never raises.
"""

import random
from typing import Any, Optional

from src.flowise.client import FlowiseClient
from src.models.models import ObjectPayload, TextPayload
from src.prompts.prompts import build_motivation_prompt
from src.utils.config import Config, config
from src.utils.logger import logger
from src.utils.safe_execute import safe_execute_async


SENSEI_MESSAGES = [
    "🥋 Discipline is choosing between what you want now and what you want most. Stay strong, warrior!",
    "🌟 Every meal is a choice. Every choice is a step on your journey. Walk with purpose.",
    "⚡ The ketones flow through you like chi through a master. Feel the energy!",
    "🎯 Focus, grasshopper. Your goals await beyond the carb-laden distractions.",
    "🔥 Your consistency burns brighter than a thousand suns. The sensei is proud!",
]

FALLBACK_MESSAGE = "🥋 The path of the warrior is never easy, but it is always worth walking."


def _message_from_payload(payload) -> Optional[str]:
    if isinstance(payload, TextPayload):
        return payload.text.strip() or None
    if isinstance(payload, ObjectPayload):
        message = payload.data.get("message")
        return message.strip() if isinstance(message, str) and message.strip() else None
    return None


async def daily_motivation(
    user_context: Optional[dict] = None,
    user_id: Any = None,
    client: Optional[FlowiseClient] = None,
    settings: Optional[Config] = None,
    rng: Optional[random.Random] = None,
) -> str:
    """Return today's motivational message for the user.

    Args:
        user_context: Streak/progress data (currentStreak, longestStreak, primaryGoal).
        user_id: Opaque user id, used for the Flowise session id.
        client: Flowise client; built from settings when omitted.
        settings: Configuration (defaults to the module-level config).
        rng: Random source for the built-in messages.

    Returns:
        Message text. Never raises.
    """
    settings = settings or config
    rng = rng or random.Random()

    if not settings.motivation_configured:
        return rng.choice(SENSEI_MESSAGES)

    client = client or FlowiseClient.from_config(settings)
    payload = await safe_execute_async(
        client.predict(
            settings.FLOWISE_MOTIVATION_FLOW_ID,
            build_motivation_prompt(user_context),
            f"user_{user_id}_motivation",
            streaming=False,
        ),
        "Motivation prediction",
        log_level="warning",
        default_return=None,
    )

    message = _message_from_payload(payload)
    if message is None:
        logger.info("Motivation flow returned nothing usable, using fallback message")
        return FALLBACK_MESSAGE
    return message
