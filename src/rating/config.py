"""Configuration for content rating.

Covers the component weights used to derive total scores and the LLM
evaluator that produces component scores. All settings can be overridden
via RATING_* environment variables.
"""

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.core.errors import ValidationError
from src.rating.scoring import parse_weights


class RatingConfig(BaseSettings):
    """Settings for rating totals and the content evaluator.

    Example:
        RATING_WEIGHTS=2,1,1
        RATING_OPENAI_API_KEY=sk-...
    """

    model_config = SettingsConfigDict(
        env_prefix="RATING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    weights: str | None = Field(
        default=None,
        description=(
            "Comma-separated weights for interest, local relevance, community "
            "impact (unset = equal weighting)"
        ),
    )

    # Evaluator
    openai_api_key: SecretStr | None = Field(
        default=None,
        description="OpenAI API key for the content evaluator",
    )
    openai_model: str = Field(default="gpt-4o")
    llm_timeout: float = Field(default=30.0, gt=0.0, le=300.0)
    max_tokens: int = Field(default=1000, ge=64)
    temperature: float = Field(default=0.3, ge=0.0, le=2.0)
    content_char_limit: int = Field(
        default=1000,
        ge=100,
        description="Characters of post body included in the evaluation prompt",
    )
    dedupe_snippet_chars: int = Field(
        default=200,
        ge=0,
        description="Characters of post body shown per article when grouping duplicates",
    )

    # Retry / circuit breaker
    max_attempts: int = Field(default=3, ge=1, le=10)
    retry_base_delay: float = Field(default=1.0, ge=0.0)
    retry_max_delay: float = Field(default=30.0, ge=0.0)
    circuit_failure_threshold: int = Field(default=5, ge=1)
    circuit_recovery_timeout: float = Field(default=60.0, ge=1.0)

    # Batching
    batch_size: int = Field(default=3, ge=1, le=50)
    batch_delay_seconds: float = Field(default=2.0, ge=0.0)

    @field_validator("weights")
    @classmethod
    def _validate_weights(cls, v: str | None) -> str | None:
        try:
            parse_weights(v)
        except ValidationError as e:
            raise ValueError(str(e)) from e
        return v

    @property
    def component_weights(self) -> tuple[float, float, float] | None:
        """Parsed weights, or None for equal weighting."""
        return parse_weights(self.weights)

    @property
    def evaluator_configured(self) -> bool:
        """Check if the LLM evaluator has credentials."""
        return self.openai_api_key is not None
