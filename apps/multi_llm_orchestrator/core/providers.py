import math
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple, Type

import httpx
import structlog

from apps.multi_llm_orchestrator.core.exceptions import ProviderError
from apps.multi_llm_orchestrator.core.quality import estimate_quality_score
from apps.multi_llm_orchestrator.models import (
    LLMResponse,
    Provider,
    ResponseMetrics,
    TaskRequest,
    TaskType,
)
from apps.multi_llm_orchestrator.settings import Settings

logger = structlog.get_logger(__name__)

DEFAULT_MAX_TOKENS = 2000
CREATIVE_TEMPERATURE = 0.8
PRECISE_TEMPERATURE = 0.3
CREATIVE_TASK_TYPES = frozenset({TaskType.BRAND.value, TaskType.DESIGN.value})


@dataclass(frozen=True)
class ProviderProfile:
    """Static description of a provider, used by selection, prompting and costing."""

    provider: Provider
    models: Tuple[str, ...]
    strengths: Tuple[str, ...]
    # Blended per-token rate, independent of the model actually used
    cost_per_token: float
    fast_model: str
    cheap_model: str
    balanced_model: str
    prompt_style: str


PROVIDER_PROFILES: Dict[Provider, ProviderProfile] = {
    Provider.OPENAI: ProviderProfile(
        provider=Provider.OPENAI,
        models=("gpt-4o", "gpt-4o-mini", "gpt-4-turbo", "gpt-3.5-turbo"),
        strengths=("coding", "analysis", "structured_output", "api_integration", "technical_writing"),
        cost_per_token=0.00003,
        fast_model="gpt-4o-mini",
        cheap_model="gpt-4o-mini",
        balanced_model="gpt-4o",
        prompt_style="structured",
    ),
    Provider.ANTHROPIC: ProviderProfile(
        provider=Provider.ANTHROPIC,
        models=("claude-3-5-sonnet-20241022", "claude-3-haiku-20240307", "claude-3-opus-20240229"),
        strengths=("creative_writing", "brand_strategy", "complex_reasoning", "ethical_analysis", "long_form_content"),
        cost_per_token=0.000015,
        fast_model="claude-3-haiku-20240307",
        cheap_model="claude-3-haiku-20240307",
        balanced_model="claude-3-5-sonnet-20241022",
        prompt_style="reasoning",
    ),
}


def get_profile(provider: Provider) -> ProviderProfile:
    return PROVIDER_PROFILES[Provider(provider)]


def opposite_provider(provider: Provider) -> Provider:
    """Return the first provider that is not ``provider``."""
    return next(p for p in Provider if p != Provider(provider))


def calculate_cost(provider: Provider, token_count: int) -> float:
    return token_count * get_profile(provider).cost_per_token


def estimate_tokens(text: str) -> int:
    return math.ceil(len(text) / 4)


def temperature_for(task: TaskRequest) -> float:
    return CREATIVE_TEMPERATURE if task.type in CREATIVE_TASK_TYPES else PRECISE_TEMPERATURE


def max_tokens_for(task: TaskRequest) -> int:
    if task.metadata and task.metadata.expected_output_length:
        return task.metadata.expected_output_length
    return DEFAULT_MAX_TOKENS


def system_preamble(task: TaskRequest) -> str:
    return (
        f"You are an expert {task.type} AI for Code24, the world's most advanced "
        "AI website platform. Provide professional, actionable responses."
    )


class LLMProvider(ABC):
    """One text-generation provider reached over HTTP.

    Subclasses describe the wire format only; the request/response cycle,
    error mapping and metrics are shared here. No retries happen at this
    layer: a failure surfaces as :class:`ProviderError` to the orchestrator.
    """

    provider: Provider

    def __init__(
        self,
        api_key: Optional[str],
        client: httpx.AsyncClient,
        base_url: str,
        timeout: float = 30.0,
    ):
        self.api_key = api_key
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @property
    def profile(self) -> ProviderProfile:
        return get_profile(self.provider)

    @property
    @abstractmethod
    def endpoint(self) -> str:
        pass

    @abstractmethod
    def build_headers(self) -> Dict[str, str]:
        pass

    @abstractmethod
    def build_payload(self, prompt: str, model: str, task: TaskRequest) -> Dict[str, Any]:
        pass

    @abstractmethod
    def extract_text(self, data: Dict[str, Any]) -> str:
        pass

    def extract_token_count(self, data: Dict[str, Any], text: str) -> int:
        return estimate_tokens(text)

    @abstractmethod
    async def probe(self, timeout: float) -> bool:
        """Make a minimal authenticated request; True when the provider answers 2xx."""

    async def complete(self, prompt: str, model: str, task: TaskRequest) -> LLMResponse:
        if not self.api_key:
            raise ProviderError(self.provider.value, reason="API key not configured")

        start_time = time.perf_counter()

        try:
            response = await self.client.post(
                self.endpoint,
                headers=self.build_headers(),
                json=self.build_payload(prompt, model, task),
                timeout=self.timeout,
            )
        except httpx.RequestError as e:
            raise ProviderError(self.provider.value, reason=f"{type(e).__name__}: {e}") from e

        if not response.is_success:
            raise ProviderError(
                self.provider.value,
                status_code=response.status_code,
                reason=response.reason_phrase,
            )

        try:
            data = response.json()
            text = self.extract_text(data)
            if not isinstance(text, str):
                raise TypeError(f"expected text content, got {type(text).__name__}")
            token_count = self.extract_token_count(data, text)
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise ProviderError(
                self.provider.value,
                status_code=response.status_code,
                reason=f"malformed response body: {e}",
            ) from e

        processing_time = int((time.perf_counter() - start_time) * 1000)

        logger.debug(
            "Provider call completed",
            provider=self.provider.value,
            model=model,
            token_count=token_count,
            processing_time_ms=processing_time,
        )

        return LLMResponse(
            success=True,
            content=text,
            model=model,
            provider=self.provider.value,
            metrics=ResponseMetrics(
                processing_time=processing_time,
                token_count=token_count,
                cost=calculate_cost(self.provider, token_count),
                quality_score=estimate_quality_score(text, task.type),
            ),
        )


class OpenAIProvider(LLMProvider):
    provider = Provider.OPENAI

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/chat/completions"

    def build_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def build_payload(self, prompt: str, model: str, task: TaskRequest) -> Dict[str, Any]:
        return {
            "model": model,
            "messages": [
                {"role": "system", "content": system_preamble(task)},
                {"role": "user", "content": prompt},
            ],
            "temperature": temperature_for(task),
            "max_tokens": max_tokens_for(task),
        }

    def extract_text(self, data: Dict[str, Any]) -> str:
        return data["choices"][0]["message"]["content"]

    def extract_token_count(self, data: Dict[str, Any], text: str) -> int:
        usage = data.get("usage") or {}
        total_tokens = usage.get("total_tokens")
        if total_tokens is None:
            return estimate_tokens(text)
        return int(total_tokens)

    async def probe(self, timeout: float) -> bool:
        response = await self.client.get(
            f"{self.base_url}/models",
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=timeout,
        )
        return response.is_success


class AnthropicProvider(LLMProvider):
    provider = Provider.ANTHROPIC

    def __init__(
        self,
        api_key: Optional[str],
        client: httpx.AsyncClient,
        base_url: str,
        timeout: float = 30.0,
        api_version: str = "2023-06-01",
    ):
        super().__init__(api_key, client, base_url, timeout)
        self.api_version = api_version

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/messages"

    def build_headers(self) -> Dict[str, str]:
        return {
            "x-api-key": self.api_key or "",
            "Content-Type": "application/json",
            "anthropic-version": self.api_version,
        }

    def build_payload(self, prompt: str, model: str, task: TaskRequest) -> Dict[str, Any]:
        return {
            "model": model,
            "max_tokens": max_tokens_for(task),
            "system": system_preamble(task),
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature_for(task),
        }

    def extract_text(self, data: Dict[str, Any]) -> str:
        return data["content"][0]["text"]

    async def probe(self, timeout: float) -> bool:
        response = await self.client.post(
            self.endpoint,
            headers=self.build_headers(),
            json={
                "model": self.profile.fast_model,
                "max_tokens": 1,
                "messages": [{"role": "user", "content": "Test"}],
            },
            timeout=timeout,
        )
        return response.is_success


EXECUTOR_CLASSES: Dict[Provider, Type[LLMProvider]] = {
    Provider.OPENAI: OpenAIProvider,
    Provider.ANTHROPIC: AnthropicProvider,
}


class ProviderRegistry:
    """Maps each :class:`Provider` to its executor."""

    def __init__(self, executors: Mapping[Provider, LLMProvider]):
        missing = [p.value for p in Provider if p not in executors]
        if missing:
            raise ValueError(f"No executor registered for providers: {', '.join(missing)}")
        self._executors = dict(executors)

    def get(self, provider: Provider) -> LLMProvider:
        return self._executors[Provider(provider)]

    def items(self):
        return self._executors.items()

    @classmethod
    def from_settings(cls, settings: Settings, client: httpx.AsyncClient) -> "ProviderRegistry":
        executors: Dict[Provider, LLMProvider] = {}
        for provider, executor_cls in EXECUTOR_CLASSES.items():
            kwargs: Dict[str, Any] = {
                "api_key": getattr(settings, f"{provider.value}_api_key"),
                "client": client,
                "base_url": getattr(settings, f"{provider.value}_base_url"),
                "timeout": settings.request_timeout,
            }
            if provider == Provider.ANTHROPIC:
                kwargs["api_version"] = settings.anthropic_version
            executors[provider] = executor_cls(**kwargs)
        return cls(executors)
