from typing import Dict

import structlog

from apps.multi_llm_orchestrator.core.providers import get_profile
from apps.multi_llm_orchestrator.models import (
    Complexity,
    ModelSelection,
    Priority,
    Provider,
    TaskRequest,
    TaskType,
)

logger = structlog.get_logger(__name__)

HAIKU = "claude-3-haiku-20240307"
SONNET = "claude-3-5-sonnet-20241022"
OPUS = "claude-3-opus-20240229"


def _row(provider: Provider, model: str, reasoning: str) -> ModelSelection:
    return ModelSelection(provider=provider, model=model, reasoning=reasoning)


SELECTION_TABLE: Dict[str, Dict[str, ModelSelection]] = {
    TaskType.BRAND.value: {
        Complexity.SIMPLE.value: _row(Provider.ANTHROPIC, HAIKU, "Fast creative processing for basic brand tasks"),
        Complexity.MEDIUM.value: _row(Provider.ANTHROPIC, SONNET, "Balanced creativity and analysis for brand strategy"),
        Complexity.COMPLEX.value: _row(Provider.ANTHROPIC, SONNET, "Superior creative reasoning for complex brand challenges"),
        Complexity.EXPERT.value: _row(Provider.ANTHROPIC, OPUS, "Maximum creative depth for expert brand work"),
    },
    TaskType.DESIGN.value: {
        Complexity.SIMPLE.value: _row(Provider.OPENAI, "gpt-4o-mini", "Cost-effective for simple design specifications"),
        Complexity.MEDIUM.value: _row(Provider.ANTHROPIC, SONNET, "Creative visual thinking for design concepts"),
        Complexity.COMPLEX.value: _row(Provider.ANTHROPIC, SONNET, "Advanced creative reasoning for complex designs"),
        Complexity.EXPERT.value: _row(Provider.ANTHROPIC, OPUS, "Peak creative intelligence for expert design work"),
    },
    TaskType.DEVELOPMENT.value: {
        Complexity.SIMPLE.value: _row(Provider.OPENAI, "gpt-4o-mini", "Efficient code generation for simple tasks"),
        Complexity.MEDIUM.value: _row(Provider.OPENAI, "gpt-4o", "Strong coding capabilities for medium complexity"),
        Complexity.COMPLEX.value: _row(Provider.OPENAI, "gpt-4o", "Superior technical reasoning for complex development"),
        Complexity.EXPERT.value: _row(Provider.OPENAI, "gpt-4-turbo", "Maximum technical depth for expert development work"),
    },
    TaskType.CONTENT.value: {
        Complexity.SIMPLE.value: _row(Provider.ANTHROPIC, HAIKU, "Fast content generation with good quality"),
        Complexity.MEDIUM.value: _row(Provider.ANTHROPIC, SONNET, "Balanced creativity and structure for content"),
        Complexity.COMPLEX.value: _row(Provider.ANTHROPIC, SONNET, "Superior writing quality for complex content"),
        Complexity.EXPERT.value: _row(Provider.ANTHROPIC, OPUS, "Peak writing intelligence for expert content"),
    },
    TaskType.ANALYSIS.value: {
        Complexity.SIMPLE.value: _row(Provider.OPENAI, "gpt-4o-mini", "Efficient analysis for simple data"),
        Complexity.MEDIUM.value: _row(Provider.OPENAI, "gpt-4o", "Strong analytical capabilities"),
        Complexity.COMPLEX.value: _row(Provider.OPENAI, "gpt-4o", "Deep analytical reasoning for complex problems"),
        Complexity.EXPERT.value: _row(Provider.ANTHROPIC, OPUS, "Maximum reasoning depth for expert analysis"),
    },
    TaskType.OPTIMIZATION.value: {
        Complexity.SIMPLE.value: _row(Provider.OPENAI, "gpt-4o-mini", "Cost-effective optimization suggestions"),
        Complexity.MEDIUM.value: _row(Provider.OPENAI, "gpt-4o", "Strong optimization logic and data analysis"),
        Complexity.COMPLEX.value: _row(Provider.ANTHROPIC, SONNET, "Creative optimization approaches"),
        Complexity.EXPERT.value: _row(Provider.ANTHROPIC, OPUS, "Deep strategic optimization thinking"),
    },
}

DEFAULT_SELECTION = SELECTION_TABLE[TaskType.ANALYSIS.value][Complexity.MEDIUM.value]

# Priority overrides only ever swap the model within the provider they target
PRIORITY_OVERRIDES: Dict[str, Provider] = {
    Priority.SPEED.value: Provider.ANTHROPIC,
    Priority.COST.value: Provider.OPENAI,
}


class ModelSelector:
    """Deterministic task -> (provider, model) policy."""

    def __init__(self, table: Dict[str, Dict[str, ModelSelection]] = SELECTION_TABLE):
        self.table = table

    def select(self, task: TaskRequest) -> ModelSelection:
        selection = self.table.get(task.type or "", {}).get(task.complexity or "")

        if selection is None:
            logger.warning(
                "Unrecognized task type or complexity, using default selection",
                task_type=task.type,
                complexity=task.complexity,
                provider=DEFAULT_SELECTION.provider.value,
                model=DEFAULT_SELECTION.model,
            )
            selection = DEFAULT_SELECTION

        return self._apply_priority(selection, task.priority)

    def _apply_priority(self, selection: ModelSelection, priority: str) -> ModelSelection:
        target = PRIORITY_OVERRIDES.get(priority)
        if target is None or selection.provider != target:
            return selection

        profile = get_profile(target)
        if priority == Priority.SPEED.value:
            return selection.model_copy(
                update={
                    "model": profile.fast_model,
                    "reasoning": f"{selection.reasoning} (optimized for speed)",
                }
            )
        return selection.model_copy(
            update={
                "model": profile.cheap_model,
                "reasoning": f"{selection.reasoning} (optimized for cost)",
            }
        )
