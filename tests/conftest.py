"""Shared fixtures for orchestrator tests."""

from typing import Any, Dict, List, Optional, Tuple

import pytest

from apps.multi_llm_orchestrator.core.exceptions import ProviderError
from apps.multi_llm_orchestrator.core.orchestrator import MultiLLMOrchestrator
from apps.multi_llm_orchestrator.core.performance import PerformanceRecorder
from apps.multi_llm_orchestrator.core.providers import ProviderRegistry, calculate_cost
from apps.multi_llm_orchestrator.models import (
    LLMResponse,
    Provider,
    ResponseMetrics,
    TaskRequest,
)


class FakeExecutor:
    """In-memory provider executor.

    Answers every call with ``reply`` unless the model is listed in
    ``failing_models`` (or ``fail_all`` is set), in which case it raises
    :class:`ProviderError`. Every call is recorded.
    """

    def __init__(
        self,
        provider: Provider,
        reply: str = "Generated response",
        token_count: int = 100,
        quality_score: float = 0.7,
        fail_all: bool = False,
        failing_models: Tuple[str, ...] = (),
        healthy: bool = True,
    ):
        self.provider = provider
        self.reply = reply
        self.token_count = token_count
        self.quality_score = quality_score
        self.fail_all = fail_all
        self.failing_models = failing_models
        self.healthy = healthy
        self.calls: List[Dict[str, Any]] = []

    async def complete(self, prompt: str, model: str, task: TaskRequest) -> LLMResponse:
        self.calls.append({"prompt": prompt, "model": model, "task": task})

        if self.fail_all or model in self.failing_models:
            raise ProviderError(self.provider.value, status_code=500, reason="Internal Server Error")

        return LLMResponse(
            success=True,
            content=f"{self.reply} from {self.provider.value}",
            model=model,
            provider=self.provider.value,
            metrics=ResponseMetrics(
                processing_time=10,
                token_count=self.token_count,
                cost=calculate_cost(self.provider, self.token_count),
                quality_score=self.quality_score,
            ),
        )

    async def probe(self, timeout: float) -> bool:
        return self.healthy


def make_task(
    type: Optional[str] = "brand",
    complexity: Optional[str] = "medium",
    priority: str = "balanced",
    content: str = "Create a brand identity",
    context: Optional[Dict[str, Any]] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> TaskRequest:
    body: Dict[str, Any] = {
        "type": type,
        "complexity": complexity,
        "priority": priority,
        "content": content,
        "context": context or {"businessType": "saas", "industry": "fintech"},
    }
    if metadata is not None:
        body["metadata"] = metadata
    return TaskRequest.model_validate(body)


@pytest.fixture
def openai_executor():
    return FakeExecutor(Provider.OPENAI)


@pytest.fixture
def anthropic_executor():
    return FakeExecutor(Provider.ANTHROPIC)


@pytest.fixture
def registry(openai_executor, anthropic_executor):
    return ProviderRegistry(
        {
            Provider.OPENAI: openai_executor,
            Provider.ANTHROPIC: anthropic_executor,
        }
    )


@pytest.fixture
def recorder():
    return PerformanceRecorder()


@pytest.fixture
def orchestrator(registry, recorder):
    return MultiLLMOrchestrator(registry, recorder)


@pytest.fixture(name="make_task")
def make_task_fixture():
    return make_task
