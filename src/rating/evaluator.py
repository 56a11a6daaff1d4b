"""LLM-backed content evaluator.

Produces the three component scores for content items that have no rating
yet, and groups snapshot items that cover the same story. Calls go through
bounded retries and a circuit breaker; an item whose evaluation fails stays
unrated and is simply not selectable.

The OpenAI SDK is imported on first use so the module loads without
credentials configured.
"""

import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from src.content.schemas import ContentItem, DuplicateGroup
from src.core.backoff import ExponentialBackoff, retry_async
from src.core.errors import UpstreamFailure, ValidationError
from src.observability.metrics import MetricsCollector, get_metrics
from src.rating.accessor import RatingAccessor
from src.rating.circuit_breaker import CircuitBreaker, CircuitOpenError, CircuitState
from src.rating.config import RatingConfig
from src.rating.prompts import (
    DEDUPE_PROMPT,
    DEDUPE_SYSTEM_PROMPT,
    EVALUATION_PROMPT,
    SYSTEM_PROMPT,
)
from src.rating.scoring import COMPONENT_NAMES, validate_component

logger = logging.getLogger(__name__)


@dataclass
class EvaluationScores:
    """Component scores returned by the evaluator for one item."""

    interest_level: int
    local_relevance: int
    community_impact: int
    reasoning: str = ""


@dataclass
class EvaluationBatchResult:
    """Counts from one ``rate_unrated`` pass."""

    candidates: int = 0
    rated: int = 0
    failed: int = 0
    skipped: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "candidates": self.candidates,
            "rated": self.rated,
            "failed": self.failed,
            "skipped": self.skipped,
        }


class ContentEvaluator:
    """Scores content items with an OpenAI chat model.

    Args:
        config: Rating configuration with model and retry settings.
        metrics: Metrics collector (default: global instance).
        sleep: Awaitable sleep used between retries and batches.
    """

    def __init__(
        self,
        config: RatingConfig | None = None,
        metrics: MetricsCollector | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._config = config or RatingConfig()
        self._metrics = metrics or get_metrics()
        self._sleep = sleep
        self._client: Any = None
        self._breaker = CircuitBreaker(
            failure_threshold=self._config.circuit_failure_threshold,
            recovery_timeout=self._config.circuit_recovery_timeout,
            name="openai",
        )

    def _get_client(self) -> Any:
        """Lazy-initialize the OpenAI async client."""
        if self._client is None:
            import openai

            api_key = self._config.openai_api_key
            key_str = api_key.get_secret_value() if api_key else None
            self._client = openai.AsyncOpenAI(
                api_key=key_str,
                timeout=self._config.llm_timeout,
            )
        return self._client

    @property
    def breaker(self) -> CircuitBreaker:
        return self._breaker

    def build_prompt(self, item: ContentItem) -> str:
        content = (item.body or "")[: self._config.content_char_limit]
        return EVALUATION_PROMPT.format(title=item.title, content=content)

    def build_dedupe_prompt(self, items: list[ContentItem]) -> str:
        limit = self._config.dedupe_snippet_chars
        lines = []
        for index, item in enumerate(items):
            snippet = (item.body or "")[:limit] or "No description"
            lines.append(f"{index}. {item.title}\n   {snippet}")
        return DEDUPE_PROMPT.format(articles="\n\n".join(lines))

    async def _complete(self, system_prompt: str, prompt: str) -> str:
        """One JSON chat completion behind retries and the circuit breaker."""

        async def _call() -> str:
            client = self._get_client()
            response = await client.chat.completions.create(
                model=self._config.openai_model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": prompt},
                ],
                temperature=self._config.temperature,
                max_tokens=self._config.max_tokens,
                response_format={"type": "json_object"},
            )
            return response.choices[0].message.content or ""

        return await self._breaker.call(
            retry_async,
            _call,
            max_attempts=self._config.max_attempts,
            backoff=ExponentialBackoff(
                base_delay=self._config.retry_base_delay,
                max_delay=self._config.retry_max_delay,
            ),
            sleep=self._sleep,
        )

    async def evaluate(self, item: ContentItem) -> EvaluationScores:
        """Score one item.

        Raises:
            UpstreamFailure: The model call failed after retries, the circuit
                is open, or the response could not be parsed.
        """
        start = time.perf_counter()
        try:
            raw = await self._complete(SYSTEM_PROMPT, self.build_prompt(item))
        except CircuitOpenError as e:
            self._metrics.record_evaluation("circuit_open")
            raise UpstreamFailure(str(e)) from e
        except Exception as e:
            self._metrics.record_evaluation("error", time.perf_counter() - start)
            raise UpstreamFailure(f"Evaluator call failed for {item.id}: {e}") from e

        try:
            scores = parse_evaluation(raw)
        except ValidationError as e:
            self._metrics.record_evaluation("error", time.perf_counter() - start)
            raise UpstreamFailure(f"Unusable evaluator response for {item.id}: {e}") from e

        self._metrics.record_evaluation("success", time.perf_counter() - start)
        return scores

    async def find_duplicate_groups(self, items: list[ContentItem]) -> list[DuplicateGroup]:
        """Group items that cover the same story.

        Fewer than two items never reach the model.

        Returns:
            Groups indexing into ``items``. Each position appears in at most
            one group, and every group has at least one duplicate.

        Raises:
            UpstreamFailure: The model call failed after retries, the circuit
                is open, or the response could not be parsed.
        """
        if len(items) < 2:
            return []

        start = time.perf_counter()
        try:
            raw = await self._complete(DEDUPE_SYSTEM_PROMPT, self.build_dedupe_prompt(items))
        except CircuitOpenError as e:
            self._metrics.record_evaluation("circuit_open")
            raise UpstreamFailure(str(e)) from e
        except Exception as e:
            self._metrics.record_evaluation("error", time.perf_counter() - start)
            raise UpstreamFailure(f"Duplicate detection call failed: {e}") from e

        try:
            groups = parse_duplicate_groups(raw, len(items))
        except ValidationError as e:
            self._metrics.record_evaluation("error", time.perf_counter() - start)
            raise UpstreamFailure(f"Unusable duplicate detection response: {e}") from e

        self._metrics.record_evaluation("success", time.perf_counter() - start)
        logger.info(
            "Found %d duplicate groups among %d items", len(groups), len(items),
        )
        return groups

    async def rate_unrated(
        self,
        items: list[ContentItem],
        accessor: RatingAccessor,
    ) -> EvaluationBatchResult:
        """Evaluate and store ratings for every unrated item.

        Items are processed ``batch_size`` at a time with a pause between
        batches. Rated items on the list get their ``rating`` attribute
        filled in place. Once the circuit opens, the remaining items are
        skipped.
        """
        pending = [item for item in items if not item.is_rated]
        result = EvaluationBatchResult(candidates=len(pending))
        batch_size = self._config.batch_size

        for offset in range(0, len(pending), batch_size):
            if offset:
                await self._sleep(self._config.batch_delay_seconds)

            batch = pending[offset:offset + batch_size]
            outcomes = await asyncio.gather(
                *(self._rate_one(item, accessor) for item in batch),
                return_exceptions=True,
            )
            for item, outcome in zip(batch, outcomes):
                if isinstance(outcome, BaseException):
                    result.failed += 1
                    logger.warning("Evaluation failed for %s: %s", item.id, outcome)
                else:
                    result.rated += 1

            if self._breaker.state == CircuitState.OPEN:
                result.skipped = len(pending) - offset - len(batch)
                logger.warning(
                    "Evaluator circuit open; skipping %d remaining items",
                    result.skipped,
                )
                break

        logger.info(
            "Evaluated %d unrated items: %d rated, %d failed, %d skipped",
            result.candidates, result.rated, result.failed, result.skipped,
        )
        return result

    async def _rate_one(self, item: ContentItem, accessor: RatingAccessor) -> None:
        scores = await self.evaluate(item)
        item.rating = await accessor.save_rating(
            item.id,
            scores.interest_level,
            scores.local_relevance,
            scores.community_impact,
            ai_reasoning=scores.reasoning or None,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.close()
            self._client = None


def parse_evaluation(raw: str) -> EvaluationScores:
    """Parse the model's JSON reply into validated component scores.

    Integral floats (``7.0``) are accepted; anything else outside 1..10
    raises ValidationError.
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise ValidationError(f"response is not JSON: {e}") from e
    if not isinstance(data, dict):
        raise ValidationError("response is not a JSON object")

    values: dict[str, int] = {}
    for name in COMPONENT_NAMES:
        value = data.get(name)
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        validate_component(name, value)
        values[name] = value

    reasoning = data.get("reasoning")
    return EvaluationScores(
        reasoning=reasoning if isinstance(reasoning, str) else "",
        **values,
    )


def _is_index(value: object, count: int) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and 0 <= value < count


def parse_duplicate_groups(raw: str, count: int) -> list[DuplicateGroup]:
    """Parse the model's grouping reply for ``count`` items.

    Out-of-range or repeated indices are dropped, as are groups left with no
    duplicates. A position claimed by an earlier group is not reused, so a
    post is never both kept in one group and dropped in another.
    """
    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        raise ValidationError(f"response is not JSON: {e}") from e
    if not isinstance(data, dict):
        raise ValidationError("response is not a JSON object")
    entries = data.get("groups") or []
    if not isinstance(entries, list):
        raise ValidationError("groups is not a list")

    claimed: set[int] = set()
    groups: list[DuplicateGroup] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        primary = entry.get("primary_article_index")
        if not _is_index(primary, count) or primary in claimed:
            continue

        duplicates: list[int] = []
        raw_indices = entry.get("duplicate_indices")
        for index in raw_indices if isinstance(raw_indices, list) else []:
            if _is_index(index, count) and index != primary \
                    and index not in claimed and index not in duplicates:
                duplicates.append(index)
        if not duplicates:
            continue

        claimed.add(primary)
        claimed.update(duplicates)
        signature = entry.get("topic_signature")
        groups.append(DuplicateGroup(
            primary_index=primary,
            duplicate_indices=duplicates,
            topic_signature=signature if isinstance(signature, str) else "",
        ))
    return groups
