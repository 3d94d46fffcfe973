"""Error taxonomy for the recipe generation pipeline.

None of these reach callers of RecipeGenerator.generate: the orchestrator
absorbs them and degrades to mock recipes.
"""

from typing import Optional


class RecipeServiceError(Exception):
    """Base class for recipe pipeline errors."""


class ConfigurationMissing(RecipeServiceError):
    """Flowise base URL, API key or flow id is not configured."""


class TransportFailure(RecipeServiceError):
    """Network error, non-2xx status or timeout on the prediction call."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class RecipeValidationError(RecipeServiceError, ValueError):
    """Parsed JSON recipe at a known 1-based index is missing a required field."""

    def __init__(self, index: int, missing: Optional[list[str]] = None) -> None:
        self.index = index
        self.missing = missing or []
        detail = f" ({', '.join(self.missing)})" if self.missing else ""
        super().__init__(f"Recipe {index} is missing required fields{detail}")


class StreamDecodeError(RecipeServiceError):
    """A server-sent-event frame could not be decoded."""
