"""AI-written insights for the dashboard, analytics and algo reports.

Insights are advisory text only: when OpenAI is unconfigured, disabled or
failing, a fixed fallback sentence is returned instead of an error.

Insight texts are cached in Redis for 24 hours by prompt hash (skipped when
Redis is not initialised).
"""

from __future__ import annotations

import asyncio
import json
import logging

from linkedin_growth.schemas.algo import AlgoMetrics
from linkedin_growth.schemas.analytics import AnalyticsReport
from linkedin_growth.schemas.dashboard import DashboardAnalysis
from linkedin_growth.services.openai_client import OpenAIError, chat_completion, prompt_hash
from linkedin_growth.settings import get_settings
from linkedin_growth.stores.redis import get_ai_insight_cache, set_ai_insight_cache

logger = logging.getLogger("uvicorn.error")

INSIGHT_SYSTEM_PROMPT = (
    "You are a LinkedIn growth expert. Provide concise, actionable insights based on user data. "
    "Keep responses under 100 words and focus on specific improvements."
)

NARRATIVE_SYSTEM_PROMPT = (
    "You are a LinkedIn analytics expert. Analyze the provided comprehensive metrics and write a "
    "detailed summary with 3-4 specific, actionable recommendations. Focus on content strategy, "
    "posting optimization, and engagement improvement. Keep it under 400 words."
)

ALGO_SYSTEM_PROMPT = (
    "You are a LinkedIn algorithm expert. Analyze the provided metrics and provide specific, "
    "actionable insights for algorithm optimization. Focus on concrete improvements the user can "
    "make immediately."
)

NARRATIVE_FALLBACK_NO_KEY = (
    "Analytics processed successfully. Review the detailed metrics above to optimize your LinkedIn strategy."
)
NARRATIVE_FALLBACK_ERROR = (
    "Your LinkedIn analytics show promising trends. Continue posting consistently and engaging "
    "with your network for optimal growth."
)
ALGO_FALLBACK_NO_KEY = (
    "Algorithm analysis complete. Focus on consistent posting and engaging content for optimal performance."
)
ALGO_FALLBACK_ERROR = (
    "Algorithm analysis shows good potential. Focus on consistent posting and meaningful "
    "engagement for optimal performance."
)


def _ai_available() -> bool:
    settings = get_settings()
    return settings.ai_insights_enabled and bool(settings.openai_api_key)


async def _cached_completion(
    system_prompt: str,
    user_prompt: str,
    *,
    max_tokens: int,
    temperature: float,
) -> str:
    """Chat completion with a 24h Redis cache keyed by the prompts."""
    settings = get_settings()
    model = settings.openai_model_insights
    key = prompt_hash(model, system_prompt, user_prompt)

    try:
        cached = await get_ai_insight_cache(key)
    except RuntimeError:
        cached = None
    if cached:
        return cached

    text = await chat_completion(
        [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        model=model,
        max_tokens=max_tokens,
        temperature=temperature,
    )
    text = text.strip()
    if text:
        try:
            await set_ai_insight_cache(key, text)
        except RuntimeError:
            pass
    return text


# ============================================================
# Dashboard metric insights
# ============================================================


def metric_prompt(metric: str, data: dict) -> str:
    """Per-metric user prompt; `data` is the analysis dumped with camelCase keys."""
    if metric == "profileCompleteness":
        return (
            "Analyze this LinkedIn profile completeness data and provide specific improvement advice:\n"
            f"Score: {data.get('score')}/10\n"
            f"Breakdown: {json.dumps(data.get('breakdown'))}\n"
            "What should they focus on first?"
        )
    if metric == "postingActivity":
        return (
            "Analyze this LinkedIn posting activity and suggest improvements:\n"
            f"Posts per week: {data.get('postsPerWeek')}\n"
            f"Total posts: {data.get('totalPosts')}\n"
            f"Score: {data.get('score')}/10\n"
            "What's the optimal posting strategy?"
        )
    if metric == "engagementQuality":
        return (
            "Analyze this LinkedIn engagement data and suggest content improvements:\n"
            f"Average engagement per post: {data.get('avgEngagementPerPost')}\n"
            f"Total engagement: {data.get('totalEngagement')}\n"
            f"Score: {data.get('score')}/10\n"
            "How can they increase engagement?"
        )
    if metric == "contentImpact":
        return (
            "Analyze this content impact data:\n"
            f"High engagement posts: {data.get('highEngagementPosts')}\n"
            f"Score: {data.get('score')}/10\n"
            "How can they create more impactful content?"
        )
    if metric == "contentDiversity":
        return (
            "Analyze this content diversity data:\n"
            f"Media types used: {', '.join(data.get('mediaTypes') or [])}\n"
            f"Diversity ratio: {data.get('diversityRatio')}\n"
            f"Score: {data.get('score')}/10\n"
            "What content formats should they try?"
        )
    if metric == "postingConsistency":
        return (
            "Analyze this posting consistency data:\n"
            f"Consistency score: {data.get('consistencyScore')}\n"
            f"Score: {data.get('score')}/10\n"
            "How can they improve posting consistency?"
        )
    return f"Analyze this LinkedIn metric data: {json.dumps(data)}"


async def generate_metric_insight(metric: str, data: dict) -> str:
    """One short insight for a dashboard metric, with fallbacks."""
    if not _ai_available():
        return f"{metric} analysis: Based on your data, continue focusing on consistent improvement."
    try:
        text = await _cached_completion(
            INSIGHT_SYSTEM_PROMPT,
            metric_prompt(metric, data),
            max_tokens=150,
            temperature=0.3,
        )
    except OpenAIError:
        logger.warning(f"[ai_insights] insight generation failed metric={metric}")
        return f"{metric} analysis: Continue focusing on improvement and consistency."
    return text or f"{metric} shows room for improvement. Focus on consistent growth."


async def attach_dashboard_insights(analysis: DashboardAnalysis) -> DashboardAnalysis:
    """Generate all six metric insights concurrently and attach them in place."""
    sections = {
        "profileCompleteness": analysis.profile_completeness,
        "postingActivity": analysis.posting_activity,
        "engagementQuality": analysis.engagement_quality,
        "contentImpact": analysis.content_impact,
        "contentDiversity": analysis.content_diversity,
        "postingConsistency": analysis.posting_consistency,
    }
    texts = await asyncio.gather(
        *(
            generate_metric_insight(metric, section.model_dump(by_alias=True, exclude={"ai_insight"}))
            for metric, section in sections.items()
        )
    )
    for section, text in zip(sections.values(), texts):
        section.ai_insight = text
    return analysis


# ============================================================
# Analytics narrative
# ============================================================


def analytics_narrative_prompt(report: AnalyticsReport) -> str:
    formats = ", ".join(f"{f.name}: {f.value} ({f.percentage}%)" for f in report.content_formats[:3])
    hashtags = ", ".join(f"{h.hashtag} ({h.count})" for h in report.hashtag_trends[:5])
    best = report.performance_metrics.best_performing_post
    return (
        "Analyze these comprehensive LinkedIn analytics:\n"
        f"Posts in {report.time_range}: {report.metadata.posts_count}\n"
        f"Content formats: {formats}\n"
        f"Average engagement per post: {report.performance_metrics.avg_engagement_per_post}\n"
        f"Posting frequency: {report.time_based_insights.posting_frequency} posts/week\n"
        f"Top hashtags: {hashtags}\n"
        f"Best performing post: {best.engagement if best else 0} engagement\n"
        "Provide a comprehensive analysis with specific recommendations for:\n"
        "1. Content strategy optimization\n"
        "2. Posting frequency and timing\n"
        "3. Engagement improvement tactics\n"
        "4. Format diversification"
    )


async def generate_analytics_narrative(report: AnalyticsReport) -> str:
    if not _ai_available():
        logger.warning("[ai_insights] OpenAI not configured, skipping AI narrative")
        return NARRATIVE_FALLBACK_NO_KEY
    try:
        text = await _cached_completion(
            NARRATIVE_SYSTEM_PROMPT,
            analytics_narrative_prompt(report),
            max_tokens=500,
            temperature=0.4,
        )
    except OpenAIError:
        logger.warning("[ai_insights] analytics narrative failed")
        return NARRATIVE_FALLBACK_ERROR
    return text or "Analytics show good potential. Focus on consistent posting and engaging content for optimal growth."


# ============================================================
# Algo analysis
# ============================================================


def algorithm_analysis_prompt(metrics: AlgoMetrics, posts_count: int, industry: str | None) -> str:
    return (
        "Analyze this LinkedIn algorithm performance data:\n"
        f"Posting Frequency: {metrics.post_frequency.posts_per_week} posts/week "
        f"(Score: {metrics.post_frequency.score}/10)\n"
        f"Engagement Rate: {metrics.engagement_rate.rate} avg per post "
        f"(Score: {metrics.engagement_rate.score}/10)\n"
        f"Estimated Reach: {metrics.reach_score.estimated_reach} per post "
        f"(Score: {metrics.reach_score.score}/10)\n"
        f"Content Mix: {metrics.content_mix_score.diversity} different formats "
        f"(Score: {metrics.content_mix_score.score}/10)\n"
        f"Consistency: {metrics.consistency_score.consistency}% "
        f"(Score: {metrics.consistency_score.score}/10)\n"
        f"Overall Grade: {metrics.algorithm_grade}\n"
        f"Total Posts Analyzed: {posts_count}\n"
        f"Industry: {industry or 'Professional Services'}\n"
        "Provide specific recommendations for:\n"
        "1. Immediate algorithm optimization tactics\n"
        "2. Content strategy improvements\n"
        "3. Posting timing and frequency adjustments\n"
        "4. Engagement optimization techniques\n"
        "Keep it actionable and specific to their current performance."
    )


async def generate_algorithm_analysis(metrics: AlgoMetrics, posts_count: int, industry: str | None) -> str:
    if not _ai_available():
        return ALGO_FALLBACK_NO_KEY
    try:
        text = await _cached_completion(
            ALGO_SYSTEM_PROMPT,
            algorithm_analysis_prompt(metrics, posts_count, industry),
            max_tokens=600,
            temperature=0.3,
        )
    except OpenAIError:
        logger.warning("[ai_insights] algorithm analysis failed")
        return ALGO_FALLBACK_ERROR
    return text or "Continue focusing on consistent, engaging content for algorithm success."
