"""Prometheus task analytics for the orchestrator."""

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

from apps.multi_llm_orchestrator.models import LLMResponse, TaskRequest


class TaskMetrics:
    def __init__(self, registry: Optional[CollectorRegistry] = None):
        self.registry = registry or CollectorRegistry()

        self.tasks_total = Counter(
            "multi_llm_tasks_total",
            "Total tasks processed",
            ["task_type", "complexity", "provider", "success"],
            registry=self.registry,
        )

        self.task_processing_seconds = Histogram(
            "multi_llm_task_processing_seconds",
            "Provider processing time per task",
            ["provider"],
            buckets=[0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
            registry=self.registry,
        )

        self.task_tokens = Counter(
            "multi_llm_task_tokens_total",
            "Total tokens reported or estimated",
            ["provider"],
            registry=self.registry,
        )

        self.task_cost = Counter(
            "multi_llm_task_cost_usd_total",
            "Total estimated cost in USD",
            ["provider"],
            registry=self.registry,
        )

        self.task_quality = Histogram(
            "multi_llm_task_quality_score",
            "Heuristic quality score per task",
            ["task_type"],
            buckets=[0.5, 0.6, 0.7, 0.8, 0.9, 1.0],
            registry=self.registry,
        )

        self.enhancements_total = Counter(
            "multi_llm_worker_enhancements_total",
            "Worker responses enhanced",
            ["worker_type", "provider"],
            registry=self.registry,
        )

        self.enhancement_length_ratio = Histogram(
            "multi_llm_worker_enhancement_length_ratio",
            "Enhanced length divided by original length",
            ["worker_type"],
            buckets=[0.5, 1.0, 1.5, 2.0, 3.0, 5.0],
            registry=self.registry,
        )

    def record_task(self, task: TaskRequest, result: LLMResponse) -> None:
        self.tasks_total.labels(
            task_type=task.type or "unknown",
            complexity=task.complexity or "unknown",
            provider=result.provider,
            success=str(result.success).lower(),
        ).inc()
        self.task_processing_seconds.labels(provider=result.provider).observe(
            result.metrics.processing_time / 1000
        )
        self.task_tokens.labels(provider=result.provider).inc(result.metrics.token_count)
        self.task_cost.labels(provider=result.provider).inc(result.metrics.cost)
        self.task_quality.labels(task_type=task.type or "unknown").observe(result.metrics.quality_score)

    def record_enhancement(self, worker_type: str, length_ratio: float, result: LLMResponse) -> None:
        self.enhancements_total.labels(worker_type=worker_type, provider=result.provider).inc()
        self.enhancement_length_ratio.labels(worker_type=worker_type).observe(length_ratio)

    def export(self) -> bytes:
        return generate_latest(self.registry)
