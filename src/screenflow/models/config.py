"""
Completion model configuration with strong typing.
Centralized request parameters for the chat completion API.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ..core.config import Settings


class CompletionModel(str, Enum):
    """Known completion model variants."""

    GPT_4O_MINI = "gpt-4o-mini"  # Default: fast, cheap, good enough for layouts
    GPT_4O = "gpt-4o"


class CompletionConfig(BaseModel):
    """Type-safe completion request configuration."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    url: str = Field(default="https://api.openai.com/v1/chat/completions")
    api_key: str = Field(default="")
    model_name: str = Field(default=CompletionModel.GPT_4O_MINI.value)

    # Generation parameters
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=2000, ge=1)

    @classmethod
    def from_settings(cls, settings: Settings) -> "CompletionConfig":
        return cls(
            url=settings.completion_url,
            api_key=settings.completion_api_key,
            model_name=settings.completion_model,
            temperature=settings.completion_temperature,
            max_tokens=settings.completion_max_tokens,
        )

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)

    def model_copy_with_updates(self, **updates) -> "CompletionConfig":
        """Create updated config (immutable pattern)."""
        data = self.model_dump()
        data.update(updates)
        return CompletionConfig(**data)
