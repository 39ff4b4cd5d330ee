"""Multi-LLM orchestrator core components."""

from .exceptions import OrchestratorError, ProviderError
from .orchestrator import MultiLLMOrchestrator
from .performance import PerformanceRecorder
from .prompt_adapter import adapt_prompt
from .providers import AnthropicProvider, LLMProvider, OpenAIProvider, ProviderRegistry
from .quality import estimate_quality_score
from .selection import ModelSelector

__all__ = [
    "OrchestratorError",
    "ProviderError",
    "MultiLLMOrchestrator",
    "PerformanceRecorder",
    "adapt_prompt",
    "LLMProvider",
    "OpenAIProvider",
    "AnthropicProvider",
    "ProviderRegistry",
    "estimate_quality_score",
    "ModelSelector",
]
