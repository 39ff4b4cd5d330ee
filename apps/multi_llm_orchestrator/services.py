"""Process-wide collaborators, built once at startup and shared by all requests."""

from dataclasses import dataclass

import httpx
import structlog
from sqlalchemy.exc import SQLAlchemyError

from apps.multi_llm_orchestrator.core.cache import ModelCache
from apps.multi_llm_orchestrator.core.metrics import TaskMetrics
from apps.multi_llm_orchestrator.core.orchestrator import MultiLLMOrchestrator
from apps.multi_llm_orchestrator.core.performance import PerformanceRecorder
from apps.multi_llm_orchestrator.core.performance_store import PerformanceStore
from apps.multi_llm_orchestrator.core.providers import ProviderRegistry
from apps.multi_llm_orchestrator.settings import Settings

logger = structlog.get_logger(__name__)


@dataclass
class OrchestratorServices:
    http_client: httpx.AsyncClient
    providers: ProviderRegistry
    recorder: PerformanceRecorder
    orchestrator: MultiLLMOrchestrator
    store: PerformanceStore
    cache: ModelCache
    metrics: TaskMetrics

    @classmethod
    def from_settings(cls, settings: Settings) -> "OrchestratorServices":
        http_client = httpx.AsyncClient(timeout=httpx.Timeout(settings.request_timeout))
        providers = ProviderRegistry.from_settings(settings, http_client)
        recorder = PerformanceRecorder(limit=settings.history_limit)

        return cls(
            http_client=http_client,
            providers=providers,
            recorder=recorder,
            orchestrator=MultiLLMOrchestrator(providers, recorder),
            store=PerformanceStore(settings.database_url),
            cache=ModelCache(settings.redis_url),
            metrics=TaskMetrics(),
        )

    async def start(self) -> None:
        try:
            await self.store.initialize()
        except (SQLAlchemyError, OSError) as e:
            # Routing works without the performance store
            logger.error("Performance store unavailable at startup", error=str(e))

    async def close(self) -> None:
        await self.http_client.aclose()
        await self.store.close()
        await self.cache.close()
        logger.info("Orchestrator services closed")
