"""Multi-LLM orchestration: select, adapt, execute, enhance, record."""

import json
import time
from typing import Any, Dict, Optional

import structlog

from apps.multi_llm_orchestrator.core.exceptions import ProviderError
from apps.multi_llm_orchestrator.core.performance import PerformanceRecorder
from apps.multi_llm_orchestrator.core.prompt_adapter import adapt_prompt
from apps.multi_llm_orchestrator.core.providers import (
    ProviderRegistry,
    get_profile,
    opposite_provider,
)
from apps.multi_llm_orchestrator.core.selection import ModelSelector
from apps.multi_llm_orchestrator.models import (
    FALLBACK_LABEL,
    Complexity,
    LLMResponse,
    ModelSelection,
    Priority,
    Provider,
    ResponseMetrics,
    TaskContext,
    TaskMetadata,
    TaskRequest,
    TaskType,
)

logger = structlog.get_logger(__name__)

FALLBACK_PROVIDER = Provider.OPENAI
FALLBACK_MESSAGE = "Multi-LLM service temporarily unavailable. Please try again."

ENHANCEMENT_PROMPT = """Please review and enhance this {type} response:

Original Response:
{content}

Provide an enhanced version that improves clarity, adds depth, and ensures it meets expert-level standards for a {business_type} business in the {industry} industry."""


def should_enhance(task: TaskRequest) -> bool:
    return task.complexity == Complexity.EXPERT.value and task.priority == Priority.QUALITY.value


def context_label(value: Any) -> str:
    return str(value or "general")


def build_enhancement_prompt(content: str, task: TaskRequest) -> str:
    return ENHANCEMENT_PROMPT.format(
        type=task.type,
        content=content,
        business_type=context_label(task.context.business_type),
        industry=context_label(task.context.industry),
    )


def build_fallback_prompt(task: TaskRequest) -> str:
    return f"{task.content}\n\nPlease provide a helpful response for this {task.type} request."


WORKER_ENHANCEMENT_PROMPT = """Please enhance this {worker_type} response:

Original Response:
{original_response}

Enhancement Requirements:
{requirements}

Business Context: {context}"""

DEFAULT_ENHANCEMENT_REQUIREMENTS = "Improve clarity, depth, and actionability"
WORKER_ENHANCEMENT_OUTPUT_LENGTH = 1500


def build_worker_enhancement_task(
    worker_type: str,
    original_response: str,
    requirements: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None,
) -> TaskRequest:
    """Wrap an existing worker response into a medium/quality enhancement task."""
    context = context or {}
    creative = worker_type in (TaskType.BRAND.value, TaskType.DESIGN.value)

    return TaskRequest(
        type=worker_type,
        complexity=Complexity.MEDIUM.value,
        priority=Priority.QUALITY.value,
        context=TaskContext.model_validate(context),
        content=WORKER_ENHANCEMENT_PROMPT.format(
            worker_type=worker_type,
            original_response=original_response,
            requirements=requirements or DEFAULT_ENHANCEMENT_REQUIREMENTS,
            context=json.dumps(context, ensure_ascii=False, separators=(",", ":")),
        ),
        metadata=TaskMetadata(
            expected_output_length=WORKER_ENHANCEMENT_OUTPUT_LENGTH,
            creativity_level=0.8 if creative else 0.5,
        ),
    )


def terminal_fallback_response() -> LLMResponse:
    return LLMResponse(
        success=False,
        content=FALLBACK_MESSAGE,
        model=FALLBACK_LABEL,
        provider=FALLBACK_LABEL,
        metrics=ResponseMetrics(),
    )


class MultiLLMOrchestrator:
    """Routes a task to a provider/model and returns a response envelope.

    ``process_task`` never raises for provider or pipeline failures: the
    primary path falls back to a fixed low-cost model, and if that fails too
    a ``success=False`` envelope is returned. Cancellation still propagates.
    """

    def __init__(
        self,
        providers: ProviderRegistry,
        recorder: PerformanceRecorder,
        selector: Optional[ModelSelector] = None,
    ):
        self.providers = providers
        self.recorder = recorder
        self.selector = selector or ModelSelector()

    async def process_task(self, task: TaskRequest) -> LLMResponse:
        start_time = time.perf_counter()

        try:
            selection = self.selector.select(task)
            prompt = adapt_prompt(task, selection)
            result = await self.execute_with_model(prompt, selection, task)
            result = await self.enhance_if_needed(result, task)
        except Exception as e:
            logger.error(
                "Multi-LLM orchestration failed, using fallback",
                task_type=task.type,
                complexity=task.complexity,
                error=str(e),
            )
            result = await self.execute_fallback(task)

        total_time = int((time.perf_counter() - start_time) * 1000)
        self.recorder.record(task, result, total_time)

        return result

    async def execute_with_model(
        self, prompt: str, selection: ModelSelection, task: TaskRequest
    ) -> LLMResponse:
        executor = self.providers.get(selection.provider)

        try:
            return await executor.complete(prompt, selection.model, task)
        except ProviderError as e:
            logger.error(
                "Provider execution failed",
                provider=selection.provider.value,
                model=selection.model,
                status_code=e.status_code,
                error=str(e),
            )
            raise

    def enhancement_selection(self, task: TaskRequest, provider: Provider) -> ModelSelection:
        """Pick the reviewer model on ``provider``.

        Uses the policy's medium-complexity row for the task type when it lands
        on ``provider``; otherwise the provider's balanced model.
        """
        medium = self.selector.select(task.model_copy(update={"complexity": Complexity.MEDIUM.value}))
        model = medium.model if medium.provider == provider else get_profile(provider).balanced_model

        return ModelSelection(
            provider=provider,
            model=model,
            reasoning=f"Second-opinion review on {provider.value}",
        )

    async def enhance_if_needed(self, result: LLMResponse, task: TaskRequest) -> LLMResponse:
        if not should_enhance(task):
            return result

        selection = self.enhancement_selection(task, opposite_provider(Provider(result.provider)))
        prompt = build_enhancement_prompt(result.content, task)

        try:
            enhancement = await self.execute_with_model(prompt, selection, task)
        except Exception as e:
            logger.warning(
                "Enhancement failed, using original result",
                provider=selection.provider.value,
                model=selection.model,
                error=str(e),
            )
            return result

        logger.info(
            "Result enhanced",
            primary_provider=result.provider,
            enhancement_provider=selection.provider.value,
            enhancement_model=selection.model,
        )

        return result.model_copy(
            update={
                "content": enhancement.content,
                "metrics": result.metrics.model_copy(
                    update={"cost": result.metrics.cost + enhancement.metrics.cost}
                ),
                "reasoning": f"Enhanced using {selection.provider.value} {selection.model}",
            }
        )

    async def execute_fallback(self, task: TaskRequest) -> LLMResponse:
        selection = ModelSelection(
            provider=FALLBACK_PROVIDER,
            model=get_profile(FALLBACK_PROVIDER).cheap_model,
            reasoning="Fallback to the most reliable model",
        )

        try:
            return await self.execute_with_model(build_fallback_prompt(task), selection, task)
        except Exception as e:
            logger.error("Fallback execution failed", error=str(e))
            return terminal_fallback_response()
