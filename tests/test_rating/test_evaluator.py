"""Tests for the LLM content evaluator."""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.core.errors import UpstreamFailure, ValidationError
from src.rating.circuit_breaker import CircuitState
from src.rating.config import RatingConfig
from src.rating.evaluator import ContentEvaluator, parse_duplicate_groups, parse_evaluation
from src.rating.schemas import Rating
from tests.conftest import _make_item


def _completion(content: str) -> SimpleNamespace:
    message = SimpleNamespace(content=content)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _scores_json(a=7, b=8, c=9, reasoning="Council vote affects every resident") -> str:
    return json.dumps({
        "interest_level": a,
        "local_relevance": b,
        "community_impact": c,
        "reasoning": reasoning,
    })


@pytest.fixture
def config() -> RatingConfig:
    return RatingConfig(
        _env_file=None,
        openai_api_key="sk-test",
        max_attempts=2,
        retry_base_delay=0.0,
        circuit_failure_threshold=2,
        batch_size=2,
        batch_delay_seconds=0.5,
    )


@pytest.fixture
def mock_client():
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=_completion(_scores_json()))
    client.close = AsyncMock()
    return client


@pytest.fixture
def evaluator(config, mock_client):
    ev = ContentEvaluator(config, metrics=MagicMock(), sleep=AsyncMock())
    ev._client = mock_client
    return ev


@pytest.fixture
def mock_accessor():
    accessor = AsyncMock()

    async def save(post_id, a, b, c, ai_reasoning=None):
        return Rating(post_id, a, b, c, ai_reasoning=ai_reasoning)

    accessor.save_rating = AsyncMock(side_effect=save)
    return accessor


class TestParseEvaluation:
    def test_valid_response(self):
        scores = parse_evaluation(_scores_json())
        assert (scores.interest_level, scores.local_relevance, scores.community_impact) == (7, 8, 9)
        assert scores.reasoning == "Council vote affects every resident"

    def test_integral_float_accepted(self):
        raw = json.dumps({"interest_level": 7.0, "local_relevance": 8, "community_impact": 9})
        scores = parse_evaluation(raw)
        assert scores.interest_level == 7
        assert scores.reasoning == ""

    def test_not_json(self):
        with pytest.raises(ValidationError, match="not JSON"):
            parse_evaluation("seven, eight, nine")

    def test_not_object(self):
        with pytest.raises(ValidationError, match="not a JSON object"):
            parse_evaluation("[7, 8, 9]")

    def test_missing_component(self):
        raw = json.dumps({"interest_level": 7, "local_relevance": 8})
        with pytest.raises(ValidationError, match="community_impact"):
            parse_evaluation(raw)

    def test_out_of_range(self):
        with pytest.raises(ValidationError, match="between 1 and 10"):
            parse_evaluation(_scores_json(c=11))


class TestEvaluate:
    async def test_success(self, evaluator, mock_client):
        scores = await evaluator.evaluate(_make_item("p1"))

        assert scores.community_impact == 9
        kwargs = mock_client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o"
        assert kwargs["response_format"] == {"type": "json_object"}
        assert "Story p1" in kwargs["messages"][1]["content"]
        evaluator._metrics.record_evaluation.assert_called_once()
        assert evaluator._metrics.record_evaluation.call_args[0][0] == "success"

    async def test_prompt_truncates_body(self, config):
        ev = ContentEvaluator(config.model_copy(update={"content_char_limit": 100}), metrics=MagicMock())
        prompt = ev.build_prompt(_make_item("p1", body="x" * 500))
        assert "x" * 100 in prompt
        assert "x" * 101 not in prompt

    async def test_retries_then_succeeds(self, evaluator, mock_client):
        mock_client.chat.completions.create.side_effect = [
            TimeoutError("slow"),
            _completion(_scores_json()),
        ]
        scores = await evaluator.evaluate(_make_item("p1"))
        assert scores.interest_level == 7
        assert mock_client.chat.completions.create.await_count == 2
        evaluator._sleep.assert_awaited_once()

    async def test_exhausted_retries_raise_upstream(self, evaluator, mock_client):
        mock_client.chat.completions.create.side_effect = TimeoutError("slow")
        with pytest.raises(UpstreamFailure, match="p1"):
            await evaluator.evaluate(_make_item("p1"))
        assert evaluator._metrics.record_evaluation.call_args[0][0] == "error"

    async def test_unusable_response_raises_upstream(self, evaluator, mock_client):
        mock_client.chat.completions.create.return_value = _completion("no idea")
        with pytest.raises(UpstreamFailure, match="Unusable"):
            await evaluator.evaluate(_make_item("p1"))

    async def test_open_circuit_short_circuits(self, evaluator, mock_client):
        mock_client.chat.completions.create.side_effect = TimeoutError("slow")
        for _ in range(2):
            with pytest.raises(UpstreamFailure):
                await evaluator.evaluate(_make_item("p1"))
        assert evaluator.breaker.state == CircuitState.OPEN

        calls = mock_client.chat.completions.create.await_count
        with pytest.raises(UpstreamFailure, match="OPEN"):
            await evaluator.evaluate(_make_item("p2"))
        assert mock_client.chat.completions.create.await_count == calls
        assert evaluator._metrics.record_evaluation.call_args[0][0] == "circuit_open"


class TestRateUnrated:
    async def test_rates_only_unrated_items_in_place(self, evaluator, mock_accessor):
        items = [_make_item("a", (5, 5, 5)), _make_item("b"), _make_item("c")]

        result = await evaluator.rate_unrated(items, mock_accessor)

        assert result.to_dict() == {"candidates": 2, "rated": 2, "failed": 0, "skipped": 0}
        assert items[0].rating.total_score == 15
        assert items[1].rating.total_score == 24
        assert items[2].is_rated
        saved = {c.args[0] for c in mock_accessor.save_rating.call_args_list}
        assert saved == {"b", "c"}

    async def test_pauses_between_batches(self, evaluator, mock_accessor):
        items = [_make_item(str(i)) for i in range(5)]

        result = await evaluator.rate_unrated(items, mock_accessor)

        assert result.rated == 5
        # batch_size=2 gives three batches and two pauses
        delays = [c.args[0] for c in evaluator._sleep.call_args_list]
        assert delays == [0.5, 0.5]

    async def test_failed_item_stays_unrated(self, evaluator, mock_client, mock_accessor):
        mock_client.chat.completions.create.side_effect = [
            _completion(_scores_json()),
            _completion("garbage"),
        ]
        items = [_make_item("a"), _make_item("b")]

        result = await evaluator.rate_unrated(items, mock_accessor)

        assert result.rated == 1
        assert result.failed == 1
        assert sum(1 for i in items if i.is_rated) == 1

    async def test_open_circuit_skips_remaining(self, evaluator, mock_client, mock_accessor):
        mock_client.chat.completions.create.side_effect = TimeoutError("down")
        items = [_make_item(str(i)) for i in range(6)]

        result = await evaluator.rate_unrated(items, mock_accessor)

        assert result.failed == 2
        assert result.skipped == 4
        assert result.rated == 0
        mock_accessor.save_rating.assert_not_called()

    async def test_nothing_to_rate(self, evaluator, mock_accessor):
        result = await evaluator.rate_unrated([_make_item("a", (1, 2, 3))], mock_accessor)
        assert result.candidates == 0
        evaluator._sleep.assert_not_called()



def _groups_json(*groups) -> str:
    return json.dumps({"groups": [
        {"topic_signature": sig, "primary_article_index": primary, "duplicate_indices": dups}
        for sig, primary, dups in groups
    ]})


class TestParseDuplicateGroups:
    def test_valid_groups(self):
        groups = parse_duplicate_groups(
            _groups_json(("Fire open houses", 2, [0, 3]), ("Library hours", 1, [4])), 5,
        )
        assert [(g.primary_index, g.duplicate_indices) for g in groups] == [(2, [0, 3]), (1, [4])]
        assert groups[0].topic_signature == "Fire open houses"

    def test_no_groups(self):
        assert parse_duplicate_groups(json.dumps({"groups": []}), 3) == []
        assert parse_duplicate_groups(json.dumps({"unique_articles": [0, 1]}), 2) == []

    def test_invalid_indices_dropped(self):
        groups = parse_duplicate_groups(_groups_json(("Road work", 0, [0, 1, 1, 7, -1, True, "2"])), 3)
        assert groups[0].duplicate_indices == [1]

    def test_group_without_duplicates_dropped(self):
        assert parse_duplicate_groups(_groups_json(("Solo", 1, [1, 9])), 3) == []
        assert parse_duplicate_groups(_groups_json(("Bad primary", 5, [0])), 3) == []

    def test_position_used_by_one_group_only(self):
        groups = parse_duplicate_groups(
            _groups_json(("A", 0, [1]), ("B", 1, [2]), ("C", 3, [0, 4])), 5,
        )
        assert [(g.primary_index, g.duplicate_indices) for g in groups] == [(0, [1]), (3, [4])]

    def test_not_json(self):
        with pytest.raises(ValidationError, match="not JSON"):
            parse_duplicate_groups("none", 2)

    def test_groups_not_a_list(self):
        with pytest.raises(ValidationError, match="not a list"):
            parse_duplicate_groups(json.dumps({"groups": "none"}), 2)


class TestFindDuplicateGroups:
    async def test_groups_returned(self, evaluator, mock_client):
        mock_client.chat.completions.create.return_value = _completion(
            _groups_json(("Fire open houses", 1, [0])),
        )
        items = [_make_item("a", body="Sartell open house"), _make_item("b"), _make_item("c")]

        groups = await evaluator.find_duplicate_groups(items)

        assert [(g.primary_index, g.duplicate_indices) for g in groups] == [(1, [0])]
        messages = mock_client.chat.completions.create.call_args.kwargs["messages"]
        assert "duplicate stories" in messages[0]["content"]
        assert "0. Story a\n   Sartell open house" in messages[1]["content"]
        assert "2. Story c" in messages[1]["content"]

    async def test_single_item_skips_model(self, evaluator, mock_client):
        assert await evaluator.find_duplicate_groups([_make_item("a")]) == []
        mock_client.chat.completions.create.assert_not_called()

    def test_dedupe_prompt_snippet_limit(self, config):
        ev = ContentEvaluator(config.model_copy(update={"dedupe_snippet_chars": 10}), metrics=MagicMock())
        prompt = ev.build_dedupe_prompt([_make_item("a", body="y" * 50), _make_item("b", body="")])
        assert "y" * 10 in prompt
        assert "y" * 11 not in prompt
        assert "1. Story b\n   No description" in prompt

    async def test_unusable_response_raises_upstream(self, evaluator, mock_client):
        mock_client.chat.completions.create.return_value = _completion("[]")
        with pytest.raises(UpstreamFailure, match="duplicate detection"):
            await evaluator.find_duplicate_groups([_make_item("a"), _make_item("b")])

    async def test_call_failure_raises_upstream(self, evaluator, mock_client):
        mock_client.chat.completions.create.side_effect = TimeoutError("slow")
        with pytest.raises(UpstreamFailure, match="Duplicate detection"):
            await evaluator.find_duplicate_groups([_make_item("a"), _make_item("b")])
        assert evaluator._metrics.record_evaluation.call_args[0][0] == "error"


class TestClose:
    async def test_close_releases_client(self, evaluator, mock_client):
        await evaluator.close()
        mock_client.close.assert_awaited_once()
        assert evaluator._client is None
