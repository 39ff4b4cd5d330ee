"""Multi-LLM orchestrator service."""

import asyncio
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx
import structlog
import uvicorn
from fastapi import APIRouter, BackgroundTasks, Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST
from sqlalchemy.exc import SQLAlchemyError

from apps.multi_llm_orchestrator.core.insights import generate_insights, generate_recommendations
from apps.multi_llm_orchestrator.core.orchestrator import build_worker_enhancement_task
from apps.multi_llm_orchestrator.core.providers import PROVIDER_PROFILES
from apps.multi_llm_orchestrator.models import (
    ComparisonInfo,
    EnhancementInfo,
    EnhanceWorkerRequest,
    EnhanceWorkerResponse,
    PerformanceSummary,
    ProcessResponse,
    Provider,
    SelectionSummary,
    TaskRequest,
)
from apps.multi_llm_orchestrator.services import OrchestratorServices
from apps.multi_llm_orchestrator.settings import Settings, get_settings
from libs.utils.fastapi_app_factory import create_fastapi_app
from libs.utils.logging_config import configure_structured_logging

logger = structlog.get_logger(__name__)

SERVICE_TITLE = "Code24 Multi-LLM Orchestrator"
DEFAULT_SELECTION_REASONING = "Optimal model selected based on task requirements"

router = APIRouter()


def get_services(request: Request) -> OrchestratorServices:
    """Get the services container."""
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise HTTPException(status_code=503, detail="Orchestrator not initialized")
    return services


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


@router.get("/")
async def service_info():
    """Service information endpoint."""
    return {
        "service": SERVICE_TITLE,
        "status": "online",
        "capabilities": [
            "Intelligent model selection (OpenAI + Anthropic)",
            "Task-optimized routing",
            "Performance analytics",
            "Elite Worker enhancement",
            "Cost optimization",
            "Quality scoring",
        ],
        "providers": {
            provider.value: {
                "models": list(profile.models),
                "strengths": list(profile.strengths),
            }
            for provider, profile in PROVIDER_PROFILES.items()
        },
        "endpoints": [
            "POST /process - Process task with optimal model",
            "POST /enhance-worker - Enhance Elite Worker responses",
            "GET /analytics - Performance analytics",
            "GET /health - System health check",
            "GET /metrics - Prometheus metrics",
        ],
    }


@router.post("/process", response_model=ProcessResponse)
async def process_task(
    task: TaskRequest,
    background_tasks: BackgroundTasks,
    services: OrchestratorServices = Depends(get_services),
):
    """Process a task with the optimal provider/model."""
    try:
        result = await services.orchestrator.process_task(task)
        services.metrics.record_task(task, result)
    except Exception as e:
        logger.error("Task processing failed", task_type=task.type, error=str(e))
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "Task processing failed",
                "fallback": "Consider using individual Elite Workers directly",
            },
        )

    background_tasks.add_task(services.store.store, task, result)

    return ProcessResponse(
        success=True,
        result=result,
        model_selection=SelectionSummary(
            provider=result.provider,
            model=result.model,
            reasoning=result.reasoning or DEFAULT_SELECTION_REASONING,
        ),
        performance=PerformanceSummary(
            processing_time=result.metrics.processing_time,
            cost=result.metrics.cost,
            quality_score=result.metrics.quality_score,
        ),
    )


@router.post("/enhance-worker", response_model=EnhanceWorkerResponse)
async def enhance_worker(
    body: EnhanceWorkerRequest,
    services: OrchestratorServices = Depends(get_services),
):
    """Enhance a response produced by another worker."""
    try:
        task = build_worker_enhancement_task(
            worker_type=body.worker_type,
            original_response=body.original_response,
            requirements=body.enhancement_request.requirements,
            context=body.enhancement_request.context,
        )
        result = await services.orchestrator.process_task(task)

        original_length = len(body.original_response)
        enhanced_length = len(result.content)
        improvement_ratio = enhanced_length / original_length if original_length else 0.0

        services.metrics.record_enhancement(body.worker_type, improvement_ratio, result)
    except Exception as e:
        logger.error("Worker enhancement failed", worker_type=body.worker_type, error=str(e))
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "Enhancement service temporarily unavailable",
                "originalResponse": body.original_response,
            },
        )

    return EnhanceWorkerResponse(
        success=True,
        original_response=body.original_response,
        enhanced_response=result.content,
        enhancement=EnhancementInfo(
            provider=result.provider,
            model=result.model,
            quality_improvement=result.metrics.quality_score,
            processing_time=result.metrics.processing_time,
        ),
        comparison=ComparisonInfo(
            original_length=original_length,
            enhanced_length=enhanced_length,
            improvement_ratio=improvement_ratio,
        ),
    )


@router.get("/analytics")
async def analytics(services: OrchestratorServices = Depends(get_services)):
    """Aggregated performance history with insights and recommendations."""
    try:
        performance = services.recorder.analytics()
        database = await services.store.weekly_summary()

        payload: Dict[str, Any] = performance.model_dump(by_alias=True)
        payload["database"] = database
        payload["insights"] = generate_insights(performance)
        payload["recommendations"] = generate_recommendations(performance)
        return payload
    except Exception as e:
        logger.error("Analytics generation failed", error=str(e))
        return JSONResponse(
            status_code=500,
            content={
                "error": "Analytics temporarily unavailable",
                "basicStats": {
                    "status": "Multi-LLM system operational",
                    "providers": ["OpenAI", "Anthropic"],
                    "capabilities": "Full orchestration available",
                },
            },
        )


async def _probe_provider(provider: Provider, services: OrchestratorServices, timeout: float) -> Dict[str, Any]:
    executor = services.providers.get(provider)
    try:
        ok = await executor.probe(timeout)
    except httpx.HTTPError as e:
        logger.warning("Provider health probe failed", provider=provider.value, error=str(e))
        return {"status": "error", "lastCheck": None}
    return {
        "status": "healthy" if ok else "unhealthy",
        "lastCheck": datetime.now(timezone.utc).isoformat(),
    }


async def _check_database(services: OrchestratorServices) -> Dict[str, str]:
    try:
        await services.store.ping()
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Database health check failed", error=str(e))
        return {"status": "error"}
    return {"status": "healthy"}


@router.get("/health")
async def health_check(
    services: OrchestratorServices = Depends(get_services),
    settings: Settings = Depends(get_app_settings),
):
    """Probe both providers and both storage bindings."""
    providers = list(Provider)
    provider_results = await asyncio.gather(
        *(_probe_provider(p, services, settings.health_check_timeout) for p in providers)
    )
    database = await _check_database(services)
    cache = {"status": await services.cache.check()}

    provider_health = dict(zip((p.value for p in providers), provider_results))
    overall_healthy = all(result["status"] == "healthy" for result in provider_results)

    return JSONResponse(
        status_code=200 if overall_healthy else 503,
        content={
            "status": "healthy" if overall_healthy else "degraded",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "providers": provider_health,
            "database": database,
            "cache": cache,
        },
    )


@router.get("/metrics")
async def metrics(services: OrchestratorServices = Depends(get_services)):
    """Prometheus metrics endpoint."""
    return Response(content=services.metrics.export(), media_type=CONTENT_TYPE_LATEST)


def create_app(
    settings: Optional[Settings] = None,
    services: Optional[OrchestratorServices] = None,
) -> FastAPI:
    """Build the orchestrator app; ``services`` overrides the settings-built container."""
    settings = settings or get_settings()
    configure_structured_logging(settings.log_level, settings.log_json)

    async def startup(app: FastAPI) -> None:
        app.state.services = services or OrchestratorServices.from_settings(settings)
        await app.state.services.start()
        logger.info("Multi-LLM orchestrator initialized")

    async def shutdown(app: FastAPI) -> None:
        container = getattr(app.state, "services", None)
        if container is not None:
            await container.close()

    app = create_fastapi_app(
        title=SERVICE_TITLE,
        description="Routes website-platform AI tasks to the optimal OpenAI or Anthropic model",
        version=settings.version,
        service_name=settings.app_name,
        startup_hook=startup,
        shutdown_hook=shutdown,
        cors_origins=settings.cors_origins,
    )
    app.state.settings = settings
    app.include_router(router)

    return app


app = create_app()


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)
