"""In-process performance history.

Reporting only: selection never reads this. History lives for the process
lifetime and is lost on restart.
"""

import threading
from collections import defaultdict, deque
from typing import Deque, Dict, List

from apps.multi_llm_orchestrator.models import (
    LLMResponse,
    PerformanceAnalytics,
    PerformanceLogEntry,
    ProviderPerformance,
    TaskRequest,
    TaskTypePerformance,
)

DEFAULT_HISTORY_LIMIT = 100


class PerformanceRecorder:
    """Bounded per-key history, safe to share between concurrent tasks and threads.

    Each ``"{type}_{complexity}"`` key keeps its most recent ``limit`` entries;
    the oldest is evicted first.
    """

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT):
        if limit <= 0:
            raise ValueError("History limit must be positive")
        self.limit = limit
        self._history: Dict[str, Deque[PerformanceLogEntry]] = defaultdict(
            lambda: deque(maxlen=self.limit)
        )
        self._lock = threading.Lock()

    def record(self, task: TaskRequest, result: LLMResponse, total_time_ms: int) -> PerformanceLogEntry:
        entry = PerformanceLogEntry(
            task_type=task.type,
            complexity=task.complexity,
            priority=task.priority,
            provider=result.provider,
            model=result.model,
            metrics=result.metrics.model_copy(),
            total_time=total_time_ms,
            success=result.success,
        )

        with self._lock:
            self._history[task.history_key].append(entry)

        return entry

    def history(self, key: str) -> List[PerformanceLogEntry]:
        with self._lock:
            return list(self._history.get(key, ()))

    def snapshot(self) -> Dict[str, List[PerformanceLogEntry]]:
        with self._lock:
            return {key: list(entries) for key, entries in self._history.items()}

    def clear(self) -> None:
        with self._lock:
            self._history.clear()

    def analytics(self) -> PerformanceAnalytics:
        """Aggregate history into per-provider and per-key totals."""
        snapshot = self.snapshot()
        analytics = PerformanceAnalytics()

        total_time = 0
        provider_time: Dict[str, int] = defaultdict(int)
        provider_quality: Dict[str, float] = defaultdict(float)

        for key, entries in snapshot.items():
            if not entries:
                continue

            analytics.total_requests += len(entries)

            key_cost = 0.0
            key_quality = 0.0
            key_successes = 0

            for entry in entries:
                analytics.total_cost += entry.metrics.cost
                total_time += entry.total_time

                stats = analytics.provider_performance.setdefault(entry.provider, ProviderPerformance())
                stats.requests += 1
                stats.cost += entry.metrics.cost
                provider_time[entry.provider] += entry.total_time
                provider_quality[entry.provider] += entry.metrics.quality_score

                key_cost += entry.metrics.cost
                key_quality += entry.metrics.quality_score
                key_successes += int(entry.success)

            analytics.task_type_performance[key] = TaskTypePerformance(
                requests=len(entries),
                average_cost=key_cost / len(entries),
                average_quality=key_quality / len(entries),
                success_rate=key_successes / len(entries),
            )

        for provider, stats in analytics.provider_performance.items():
            stats.average_time = provider_time[provider] / stats.requests
            stats.quality_score = provider_quality[provider] / stats.requests

        if analytics.total_requests:
            analytics.average_processing_time = total_time / analytics.total_requests

        return analytics
