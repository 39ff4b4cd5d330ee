"""Relational performance log, written after every processed task."""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import structlog
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    Integer,
    MetaData,
    String,
    Table,
    case,
    func,
    insert,
    select,
    text,
)
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from apps.multi_llm_orchestrator.models import LLMResponse, TaskRequest

logger = structlog.get_logger(__name__)

metadata = MetaData()

performance_logs = Table(
    "performance_logs",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("timestamp", DateTime, nullable=False, index=True),
    Column("task_type", String(50)),
    Column("complexity", String(20)),
    Column("priority", String(20)),
    Column("provider", String(50), nullable=False),
    Column("model", String(100), nullable=False),
    Column("processing_time", Integer, nullable=False, default=0),
    Column("token_count", Integer, nullable=False, default=0),
    Column("cost", Float, nullable=False, default=0.0),
    Column("quality_score", Float, nullable=False, default=0.0),
    Column("success", Boolean, nullable=False),
)


def _utc_naive(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class PerformanceStore:
    """Async SQLAlchemy store for performance logs.

    Write and summary failures are logged and reported through return values;
    they never fail the request that triggered them.
    """

    def __init__(self, database_url: str, engine: Optional[AsyncEngine] = None):
        self.database_url = database_url
        self.engine = engine or create_async_engine(
            database_url,
            echo=False,
            pool_pre_ping=True,
        )

    async def initialize(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(metadata.create_all)
        logger.info("Performance store initialized")

    async def store(self, task: TaskRequest, result: LLMResponse) -> bool:
        try:
            async with self.engine.begin() as conn:
                await conn.execute(
                    insert(performance_logs).values(
                        timestamp=_utc_naive(datetime.now(timezone.utc)),
                        task_type=task.type,
                        complexity=task.complexity,
                        priority=task.priority,
                        provider=result.provider,
                        model=result.model,
                        processing_time=result.metrics.processing_time,
                        token_count=result.metrics.token_count,
                        cost=result.metrics.cost,
                        quality_score=result.metrics.quality_score,
                        success=result.success,
                    )
                )
            return True
        except SQLAlchemyError as e:
            logger.error("Failed to store performance data", error=str(e))
            return False

    async def weekly_summary(self, days: int = 7) -> Dict[str, Any]:
        cutoff = _utc_naive(datetime.now(timezone.utc) - timedelta(days=days))
        stmt = (
            select(
                performance_logs.c.provider,
                func.count().label("total_requests"),
                func.avg(performance_logs.c.processing_time).label("avg_processing_time"),
                func.sum(performance_logs.c.cost).label("total_cost"),
                func.avg(performance_logs.c.quality_score).label("avg_quality_score"),
                (
                    func.sum(case((performance_logs.c.success.is_(True), 1), else_=0))
                    * 100.0
                    / func.count()
                ).label("success_rate"),
            )
            .where(performance_logs.c.timestamp > cutoff)
            .group_by(performance_logs.c.provider)
        )

        try:
            async with self.engine.connect() as conn:
                result = await conn.execute(stmt)
                rows = [dict(row._mapping) for row in result]
        except SQLAlchemyError as e:
            logger.error("Failed to get database analytics", error=str(e))
            return {"error": "Database analytics unavailable"}

        return {
            "weekly_summary": rows,
            "last_updated": datetime.now(timezone.utc).isoformat(),
        }

    async def ping(self) -> bool:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

    async def close(self) -> None:
        await self.engine.dispose()
