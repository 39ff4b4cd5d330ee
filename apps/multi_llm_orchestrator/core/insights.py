"""Threshold-based commentary for the analytics endpoint."""

from typing import List

from apps.multi_llm_orchestrator.models import PerformanceAnalytics, Provider

HIGH_COST_INSIGHT_THRESHOLD = 100
HIGH_COST_RECOMMENDATION_THRESHOLD = 50
SLOW_PROCESSING_THRESHOLD_MS = 5000


def generate_insights(analytics: PerformanceAnalytics) -> List[str]:
    insights = []

    openai = analytics.provider_performance.get(Provider.OPENAI.value)
    anthropic = analytics.provider_performance.get(Provider.ANTHROPIC.value)

    if openai and anthropic:
        if openai.quality_score > anthropic.quality_score:
            insights.append("OpenAI models showing higher average quality scores")
        else:
            insights.append("Anthropic models showing higher average quality scores")

        if openai.cost < anthropic.cost:
            insights.append("OpenAI providing better cost efficiency")
        else:
            insights.append("Anthropic providing better cost efficiency")

    if analytics.total_cost > HIGH_COST_INSIGHT_THRESHOLD:
        insights.append("High API usage detected - consider optimization")

    return insights


def generate_recommendations(analytics: PerformanceAnalytics) -> List[str]:
    recommendations = []

    if analytics.total_cost > HIGH_COST_RECOMMENDATION_THRESHOLD:
        recommendations.append("Consider using more cost-effective models for simple tasks")

    if analytics.average_processing_time > SLOW_PROCESSING_THRESHOLD_MS:
        recommendations.append("Switch to faster models for time-sensitive tasks")

    recommendations.append("Monitor quality scores and adjust model selection accordingly")
    recommendations.append("Use caching for repeated similar tasks")

    return recommendations
