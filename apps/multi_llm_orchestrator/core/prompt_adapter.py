"""Provider-specific prompt framing.

Context values are interpolated verbatim, without escaping.
"""

import json

from apps.multi_llm_orchestrator.core.providers import get_profile
from apps.multi_llm_orchestrator.models import ModelSelection, TaskRequest

REASONING_TEMPLATE = """{content}

Context: You are the world's best {type} AI working for Code24, the revolutionary AI website platform. This task is {complexity} complexity and should prioritize {priority}.

Business Context: {context}

Please provide a comprehensive response that demonstrates expert-level thinking and creativity. Include your reasoning process and consider multiple perspectives."""

STRUCTURED_TEMPLATE = """{content}

Task Type: {type}
Complexity: {complexity}
Priority: {priority}
Context: {context}

Provide a detailed, well-structured response. Focus on practical implementation and technical accuracy."""

TEMPLATES = {
    "reasoning": REASONING_TEMPLATE,
    "structured": STRUCTURED_TEMPLATE,
}


def serialize_context(task: TaskRequest) -> str:
    return json.dumps(task.context.as_prompt_json(), ensure_ascii=False, separators=(",", ":"))


def adapt_prompt(task: TaskRequest, selection: ModelSelection) -> str:
    template = TEMPLATES[get_profile(selection.provider).prompt_style]
    return template.format(
        content=task.content,
        type=task.type,
        complexity=task.complexity,
        priority=task.priority,
        context=serialize_context(task),
    )
