"""Unit tests for the multi-LLM orchestrator pipeline."""

import asyncio
import itertools
import json

import httpx
import pytest

from apps.multi_llm_orchestrator.core.orchestrator import (
    FALLBACK_MESSAGE,
    MultiLLMOrchestrator,
    build_worker_enhancement_task,
    should_enhance,
)
from apps.multi_llm_orchestrator.core.providers import (
    AnthropicProvider,
    OpenAIProvider,
    ProviderRegistry,
)
from apps.multi_llm_orchestrator.core.selection import SELECTION_TABLE, ModelSelector
from apps.multi_llm_orchestrator.models import Complexity, ModelSelection, Priority, Provider

ALL_COMBINATIONS = list(itertools.product([c.value for c in Complexity], [p.value for p in Priority]))


class TestProcessTask:
    """Test the primary path."""

    @pytest.mark.asyncio
    async def test_routes_to_selected_provider(self, orchestrator, anthropic_executor, openai_executor, make_task):
        result = await orchestrator.process_task(make_task(type="brand", complexity="medium"))

        assert result.success is True
        assert result.provider == "anthropic"
        assert result.model == "claude-3-5-sonnet-20241022"
        assert len(anthropic_executor.calls) == 1
        assert openai_executor.calls == []
        assert "Include your reasoning process" in anthropic_executor.calls[0]["prompt"]

    @pytest.mark.asyncio
    async def test_records_history_for_every_call(self, orchestrator, recorder, make_task):
        task = make_task(type="design", complexity="simple")

        await orchestrator.process_task(task)
        await orchestrator.process_task(task)

        history = recorder.history("design_simple")
        assert len(history) == 2
        assert all(entry.provider == "openai" for entry in history)
        assert all(entry.total_time >= 0 for entry in history)

    @pytest.mark.asyncio
    async def test_cost_override_scenario(self, recorder, make_task):
        """development/simple/cost goes once to the cheap OpenAI model."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(
                200,
                json={
                    "choices": [{"message": {"content": "def hello():\n    print('hello world')"}}],
                    "usage": {"total_tokens": 42},
                },
            )

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        registry = ProviderRegistry(
            {
                Provider.OPENAI: OpenAIProvider("sk-test", client, "https://api.openai.test/v1"),
                Provider.ANTHROPIC: AnthropicProvider("ak-test", client, "https://api.anthropic.test/v1"),
            }
        )
        orchestrator = MultiLLMOrchestrator(registry, recorder)
        task = make_task(
            type="development",
            complexity="simple",
            priority="cost",
            content="Write a hello world function",
        )

        result = await orchestrator.process_task(task)

        assert len(calls) == 1
        assert calls[0].url.host == "api.openai.test"
        assert json.loads(calls[0].content)["model"] == "gpt-4o-mini"
        assert result.success is True
        assert result.provider == "openai"
        assert result.model == "gpt-4o-mini"
        assert result.metrics.token_count == 42
        assert result.metrics.cost == pytest.approx(42 * 0.00003)
        await client.aclose()


class TestEnhancement:
    """Test the second-opinion enhancement pass."""

    @pytest.mark.parametrize("complexity,priority", ALL_COMBINATIONS)
    def test_trigger_condition(self, complexity, priority, make_task):
        task = make_task(complexity=complexity, priority=priority)

        assert should_enhance(task) == (complexity == "expert" and priority == "quality")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("complexity,priority", ALL_COMBINATIONS)
    async def test_content_unchanged_unless_triggered(
        self, complexity, priority, orchestrator, anthropic_executor, openai_executor, make_task
    ):
        """Only expert/quality tasks return the other provider's text."""
        executors = (anthropic_executor, openai_executor)
        task = make_task(type="brand", complexity=complexity, priority=priority)

        result = await orchestrator.process_task(task)

        primary = orchestrator.selector.select(task)
        primary_text = f"Generated response from {primary.provider.value}"
        if complexity == "expert" and priority == "quality":
            assert result.content != primary_text
            assert sum(len(e.calls) for e in executors) == 2
        else:
            assert result.content == primary_text
            assert sum(len(e.calls) for e in executors) == 1

    @pytest.mark.asyncio
    async def test_expert_quality_brand_scenario(self, orchestrator, anthropic_executor, openai_executor, make_task):
        """Expert brand work is drafted on Anthropic and reviewed on OpenAI."""
        task = make_task(type="brand", complexity="expert", priority="quality")

        result = await orchestrator.process_task(task)

        assert anthropic_executor.calls[0]["model"] == "claude-3-opus-20240229"
        assert openai_executor.calls[0]["model"] == "gpt-4o"
        assert result.content == "Generated response from openai"
        assert result.reasoning == "Enhanced using openai gpt-4o"
        assert result.provider == "anthropic"
        assert result.model == "claude-3-opus-20240229"

    @pytest.mark.asyncio
    async def test_enhancement_prompt_embeds_primary_and_context(self, orchestrator, openai_executor, make_task):
        task = make_task(type="brand", complexity="expert", priority="quality")

        await orchestrator.process_task(task)

        prompt = openai_executor.calls[0]["prompt"]
        assert prompt.startswith("Please review and enhance this brand response:")
        assert "Generated response from anthropic" in prompt
        assert "for a saas business in the fintech industry" in prompt

    @pytest.mark.asyncio
    async def test_enhancement_context_defaults_to_general(self, orchestrator, openai_executor, make_task):
        task = make_task(type="brand", complexity="expert", priority="quality", context={"targetAudience": "devs"})

        await orchestrator.process_task(task)

        assert "for a general business in the general industry" in openai_executor.calls[0]["prompt"]

    @pytest.mark.asyncio
    async def test_enhancement_renders_non_string_context(self, orchestrator, openai_executor, make_task):
        task = make_task(
            type="brand",
            complexity="expert",
            priority="quality",
            context={"businessType": 42, "industry": ["dental", "health"]},
        )

        result = await orchestrator.process_task(task)

        assert result.content == "Generated response from openai"
        assert "for a 42 business in the ['dental', 'health'] industry" in openai_executor.calls[0]["prompt"]

    @pytest.mark.asyncio
    async def test_enhancement_uses_medium_row_on_opposite_provider(
        self, orchestrator, anthropic_executor, openai_executor, make_task
    ):
        """Expert analysis runs on Anthropic; the medium analysis row is OpenAI gpt-4o."""
        task = make_task(type="analysis", complexity="expert", priority="quality")

        await orchestrator.process_task(task)

        assert anthropic_executor.calls[0]["model"] == "claude-3-opus-20240229"
        assert openai_executor.calls[0]["model"] == "gpt-4o"

    @pytest.mark.asyncio
    async def test_enhancement_follows_custom_medium_row(
        self, registry, recorder, anthropic_executor, openai_executor, make_task
    ):
        """A medium row on the reviewing provider wins over its balanced model."""
        table = {key: dict(rows) for key, rows in SELECTION_TABLE.items()}
        table["analysis"]["medium"] = ModelSelection(
            provider=Provider.OPENAI, model="gpt-4-turbo", reasoning="Custom review model"
        )
        orchestrator = MultiLLMOrchestrator(registry, recorder, selector=ModelSelector(table))
        task = make_task(type="analysis", complexity="expert", priority="quality")

        result = await orchestrator.process_task(task)

        assert anthropic_executor.calls[0]["model"] == "claude-3-opus-20240229"
        assert openai_executor.calls[0]["model"] == "gpt-4-turbo"
        assert result.reasoning == "Enhanced using openai gpt-4-turbo"

    @pytest.mark.asyncio
    async def test_enhancement_from_openai_goes_to_anthropic_balanced_model(
        self, orchestrator, anthropic_executor, make_task
    ):
        task = make_task(type="development", complexity="expert", priority="quality")

        result = await orchestrator.process_task(task)

        assert anthropic_executor.calls[0]["model"] == "claude-3-5-sonnet-20241022"
        assert result.content == "Generated response from anthropic"
        assert result.reasoning == "Enhanced using anthropic claude-3-5-sonnet-20241022"

    @pytest.mark.asyncio
    async def test_enhancement_cost_is_additive(self, orchestrator, make_task):
        task = make_task(type="brand", complexity="expert", priority="quality")

        result = await orchestrator.process_task(task)

        assert result.metrics.cost == 100 * 0.000015 + 100 * 0.00003
        assert result.metrics.token_count == 100

    @pytest.mark.asyncio
    async def test_enhancement_failure_returns_primary(self, orchestrator, openai_executor, make_task):
        openai_executor.fail_all = True
        task = make_task(type="brand", complexity="expert", priority="quality")

        result = await orchestrator.process_task(task)

        assert result.success is True
        assert result.content == "Generated response from anthropic"
        assert result.reasoning is None
        assert result.metrics.cost == pytest.approx(100 * 0.000015)


class TestFallback:
    """Test fallback and terminal envelopes."""

    @pytest.mark.asyncio
    async def test_primary_failure_uses_openai_cheap_model(
        self, orchestrator, anthropic_executor, openai_executor, make_task
    ):
        anthropic_executor.fail_all = True
        task = make_task(type="content", complexity="simple", content="Write a tagline")

        result = await orchestrator.process_task(task)

        assert result.success is True
        assert result.provider == "openai"
        assert result.model == "gpt-4o-mini"
        assert openai_executor.calls[0]["prompt"] == (
            "Write a tagline\n\nPlease provide a helpful response for this content request."
        )

    @pytest.mark.asyncio
    async def test_fallback_failure_returns_terminal_envelope(
        self, orchestrator, recorder, anthropic_executor, openai_executor, make_task
    ):
        anthropic_executor.fail_all = True
        openai_executor.fail_all = True
        task = make_task(type="brand", complexity="simple")

        result = await orchestrator.process_task(task)

        assert result.success is False
        assert result.provider == "fallback"
        assert result.model == "fallback"
        assert result.content == FALLBACK_MESSAGE
        assert result.metrics.processing_time == 0
        assert result.metrics.token_count == 0
        assert result.metrics.cost == 0
        assert result.metrics.quality_score == 0
        assert recorder.history("brand_simple")[0].success is False

    @pytest.mark.asyncio
    async def test_openai_primary_failure_retries_on_fallback_model(self, orchestrator, openai_executor, make_task):
        openai_executor.failing_models = ("gpt-4o",)
        task = make_task(type="development", complexity="medium")

        result = await orchestrator.process_task(task)

        assert [call["model"] for call in openai_executor.calls] == ["gpt-4o", "gpt-4o-mini"]
        assert result.model == "gpt-4o-mini"

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, recorder, make_task):
        class HangingExecutor:
            async def complete(self, prompt, model, task):
                await asyncio.sleep(10)

        registry = ProviderRegistry({p: HangingExecutor() for p in Provider})
        orchestrator = MultiLLMOrchestrator(registry, recorder)

        job = asyncio.create_task(orchestrator.process_task(make_task()))
        await asyncio.sleep(0)
        job.cancel()

        with pytest.raises(asyncio.CancelledError):
            await job
        assert recorder.snapshot() == {}


class TestWorkerEnhancementTask:
    """Test the task built for worker response enhancement."""

    def test_builds_medium_quality_task(self):
        task = build_worker_enhancement_task(
            "brand",
            "Original brand copy",
            requirements="Make it bolder",
            context={"businessType": "saas"},
        )

        assert task.type == "brand"
        assert task.complexity == "medium"
        assert task.priority == "quality"
        assert task.context.business_type == "saas"
        assert task.metadata.expected_output_length == 1500
        assert task.metadata.creativity_level == 0.8
        assert "Original Response:\nOriginal brand copy" in task.content
        assert "Enhancement Requirements:\nMake it bolder" in task.content
        assert 'Business Context: {"businessType":"saas"}' in task.content

    def test_defaults_requirements_and_creativity(self):
        task = build_worker_enhancement_task("development", "code")

        assert "Improve clarity, depth, and actionability" in task.content
        assert task.metadata.creativity_level == 0.5
        assert task.content.endswith("Business Context: {}")

    def test_accepts_untyped_context_values(self):
        task = build_worker_enhancement_task(
            "content",
            "Draft",
            context={"businessType": 7, "requirements": "Modern dental website"},
        )

        assert task.context.business_type == 7
        assert 'Business Context: {"businessType":7,"requirements":"Modern dental website"}' in task.content
