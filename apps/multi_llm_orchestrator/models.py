"""Data contracts for the multi-LLM orchestrator.

Python attributes are snake_case; JSON on the wire uses the camelCase names the
surrounding workers already send and consume (``expectedOutputLength``,
``modelSelection``, ``qualityScore``...).
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class TaskType(str, Enum):
    BRAND = "brand"
    DESIGN = "design"
    DEVELOPMENT = "development"
    CONTENT = "content"
    ANALYSIS = "analysis"
    OPTIMIZATION = "optimization"


class Complexity(str, Enum):
    SIMPLE = "simple"
    MEDIUM = "medium"
    COMPLEX = "complex"
    EXPERT = "expert"


class Priority(str, Enum):
    SPEED = "speed"
    QUALITY = "quality"
    COST = "cost"
    BALANCED = "balanced"


class Provider(str, Enum):
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


FALLBACK_LABEL = "fallback"


class CamelModel(BaseModel):
    """Base model serializing to camelCase while accepting either spelling."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
    )


class TaskContext(CamelModel):
    """Business context bag.

    Unknown keys are kept so they reach the prompt exactly as the caller sent
    them. Nothing here is validated or escaped: this is a trust boundary, the
    values go verbatim to a third-party model.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )

    business_type: Optional[Any] = None
    industry: Optional[Any] = None
    target_audience: Optional[Any] = None
    requirements: Optional[Any] = None

    def as_prompt_json(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True)


class TaskMetadata(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    # Falsy values (None, 0) fall back to the provider default
    expected_output_length: Optional[int] = None
    creativity_level: Optional[float] = None
    technical_depth: Optional[float] = None


class TaskRequest(CamelModel):
    """Task descriptor sent by the surrounding workers.

    ``type``, ``complexity`` and ``priority`` are plain strings:
    unrecognized values are resolved by the selection policy's default row
    rather than rejected here.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
        frozen=True,
    )

    type: Optional[str] = None
    complexity: Optional[str] = None
    priority: str = Priority.BALANCED.value
    context: TaskContext = Field(default_factory=TaskContext)
    content: str
    metadata: Optional[TaskMetadata] = None

    @property
    def history_key(self) -> str:
        return f"{self.type}_{self.complexity}"


class ModelSelection(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
        frozen=True,
    )

    provider: Provider
    model: str
    reasoning: str


class ResponseMetrics(CamelModel):
    processing_time: int = 0
    token_count: int = 0
    cost: float = 0.0
    quality_score: float = 0.0


class LLMResponse(CamelModel):
    success: bool
    content: str
    model: str
    provider: str
    metrics: ResponseMetrics = Field(default_factory=ResponseMetrics)
    reasoning: Optional[str] = None


class PerformanceLogEntry(CamelModel):
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    task_type: Optional[str] = None
    complexity: Optional[str] = None
    priority: str
    provider: str
    model: str
    metrics: ResponseMetrics
    total_time: int
    success: bool


# HTTP bodies


class SelectionSummary(CamelModel):
    provider: str
    model: str
    reasoning: str


class PerformanceSummary(CamelModel):
    processing_time: int
    cost: float
    quality_score: float


class ProcessResponse(CamelModel):
    success: bool
    result: LLMResponse
    model_selection: SelectionSummary
    performance: PerformanceSummary


class EnhancementRequirements(CamelModel):
    requirements: Optional[str] = None
    context: Dict[str, Any] = Field(default_factory=dict)


class EnhanceWorkerRequest(CamelModel):
    worker_type: str
    original_response: str
    enhancement_request: EnhancementRequirements = Field(default_factory=EnhancementRequirements)


class EnhancementInfo(CamelModel):
    provider: str
    model: str
    quality_improvement: float
    processing_time: int


class ComparisonInfo(CamelModel):
    original_length: int
    enhanced_length: int
    improvement_ratio: float


class EnhanceWorkerResponse(CamelModel):
    success: bool
    original_response: str
    enhanced_response: str
    enhancement: EnhancementInfo
    comparison: ComparisonInfo


class ProviderPerformance(CamelModel):
    requests: int = 0
    average_time: float = 0.0
    cost: float = 0.0
    quality_score: float = 0.0


class TaskTypePerformance(CamelModel):
    requests: int = 0
    average_cost: float = 0.0
    average_quality: float = 0.0
    success_rate: float = 0.0


class PerformanceAnalytics(CamelModel):
    total_requests: int = 0
    average_processing_time: float = 0.0
    total_cost: float = 0.0
    provider_performance: Dict[str, ProviderPerformance] = Field(default_factory=dict)
    task_type_performance: Dict[str, TaskTypePerformance] = Field(default_factory=dict)
