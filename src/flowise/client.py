"""Flowise prediction client.

Posts a question to `{base_url}/api/v1/prediction/{flow_id}` and resolves the
response, exactly once, into a FlowisePayload:

- `text/event-stream`: tokens are collected into one string (TextPayload)
- JSON object with a `text`/`response` field: that field (TextPayload, or
  ArrayPayload/ObjectPayload if it is already structured)
- other JSON object / array: ObjectPayload / ArrayPayload
- anything else: TextPayload of the raw body

Every failure of the call itself is raised as TransportFailure.
"""

import asyncio
import json
from typing import Any, Callable, Optional

import aiohttp

from src.models.models import ArrayPayload, FlowisePayload, ObjectPayload, TextPayload
from src.parsing.stream import collect_stream_text
from src.utils.config import Config, config
from src.utils.errors import ConfigurationMissing, TransportFailure
from src.utils.logger import log_context, logger


RESPONSE_TEXT_FIELDS = ("text", "response")


def resolve_payload(body_text: str) -> FlowisePayload:
    """Classify a buffered (non-streamed) response body."""
    try:
        parsed: Any = json.loads(body_text)
    except (json.JSONDecodeError, ValueError):
        return TextPayload(text=body_text)

    if isinstance(parsed, dict):
        for field in RESPONSE_TEXT_FIELDS:
            value = parsed.get(field)
            if isinstance(value, str):
                return TextPayload(text=value)
            if isinstance(value, list):
                return ArrayPayload(data=value)
            if isinstance(value, dict):
                return ObjectPayload(data=value)
        return ObjectPayload(data=parsed)
    if isinstance(parsed, list):
        return ArrayPayload(data=parsed)
    if isinstance(parsed, str):
        return TextPayload(text=parsed)
    return TextPayload(text=body_text)


class FlowiseClient:
    """Authenticated client for Flowise prediction flows."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout_seconds: float = 60,
        temperature: float = 0.5,
        max_tokens: int = 800,
        session_factory: Callable[..., aiohttp.ClientSession] = aiohttp.ClientSession,
    ) -> None:
        """Initialize FlowiseClient.

        Args:
            base_url: Flowise server root, e.g. "https://flowise.example.com".
            api_key: Flowise API key sent as a bearer token.
            timeout_seconds: Total timeout for one prediction, streaming included.
            temperature: LLM temperature override.
            max_tokens: LLM max token override.
            session_factory: aiohttp.ClientSession or a compatible factory (tests).

        Raises:
            ConfigurationMissing: If base_url or api_key is empty.
        """
        if not base_url or not api_key:
            raise ConfigurationMissing("FLOWISE_API_URL and FLOWISE_API_KEY are required")

        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._session_factory = session_factory

    @classmethod
    def from_config(cls, settings: Optional[Config] = None) -> "FlowiseClient":
        settings = settings or config
        return cls(
            base_url=settings.FLOWISE_API_URL,
            api_key=settings.FLOWISE_API_KEY,
            timeout_seconds=settings.REQUEST_TIMEOUT_SECONDS,
            temperature=settings.TEMPERATURE,
            max_tokens=settings.MAX_TOKENS,
        )

    def prediction_url(self, flow_id: str) -> str:
        return f"{self.base_url}/api/v1/prediction/{flow_id}"

    def build_headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "text/event-stream",
            "Authorization": f"Bearer {self.api_key}",
        }

    def build_body(self, question: str, session_id: str, streaming: bool = True) -> dict:
        return {
            "question": question,
            "sessionId": session_id,
            "streaming": streaming,
            "overrideConfig": {
                "temperature": self.temperature,
                "maxTokens": self.max_tokens,
                "sessionId": session_id,
            },
        }

    async def predict(
        self,
        flow_id: str,
        question: str,
        session_id: str,
        streaming: bool = True,
    ) -> FlowisePayload:
        """Run one prediction and resolve its response.

        Args:
            flow_id: Flowise chatflow identifier.
            question: Prompt text.
            session_id: Flowise session id (keeps per-user history separate).
            streaming: Ask Flowise to stream tokens as server-sent events.

        Returns:
            Resolved FlowisePayload.

        Raises:
            ConfigurationMissing: If flow_id is empty.
            TransportFailure: On network error, non-2xx status or timeout.
        """
        if not flow_id:
            raise ConfigurationMissing("Flowise flow id is not configured")

        url = self.prediction_url(flow_id)
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        logger.info(
            f"Calling Flowise flow {flow_id} (streaming={streaming})",
            extra=log_context(flow_id=flow_id, session_id=session_id),
        )

        try:
            async with self._session_factory(timeout=timeout) as session:
                async with session.post(
                    url,
                    json=self.build_body(question, session_id, streaming),
                    headers=self.build_headers(),
                ) as response:
                    if not 200 <= response.status < 300:
                        detail = await response.text()
                        raise TransportFailure(
                            f"Flowise API error: {response.status} {detail[:200]}",
                            status=response.status,
                        )

                    if "text/event-stream" in (response.content_type or ""):
                        logger.debug("Consuming Flowise event stream")
                        return TextPayload(text=await collect_stream_text(response.content))

                    return resolve_payload(await response.text())

        except TransportFailure:
            raise
        except asyncio.TimeoutError as e:
            raise TransportFailure(f"Flowise call timed out after {self.timeout_seconds}s") from e
        except aiohttp.ClientError as e:
            raise TransportFailure(f"Flowise request failed: {e}") from e
