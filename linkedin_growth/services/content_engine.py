"""AI content generation: Creation Engine and PostGen.

Creation Engine request types:
- content_ideas: 5 ideas with format, hashtags and timing
- posting_strategy: weekly schedule and content mix
- algorithm_optimization: dwell time / engagement tactics

PostGen writes in a bold, hook-first house style (generate, hooks, rewrite)
and also offers free-form performance analysis and content strategy.

Unlike dashboard insights, generation has no fallback text: a missing API key
or upstream failure surfaces as ContentGenerationError.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import json
import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from linkedin_growth.models import ContentIdea, User
from linkedin_growth.schemas.content import ContentIdeaItem, ContentIdeasResponse, GeneratedContent
from linkedin_growth.services.openai_client import OpenAIError, chat_completion
from linkedin_growth.settings import get_settings

logger = logging.getLogger("uvicorn.error")


class ContentGenerationError(RuntimeError):
    """Content could not be generated (503 when unconfigured, 502 upstream)."""

    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.status_code = status_code


class UnknownCreationTypeError(ValueError):
    """Creation Engine request type is not supported."""


@dataclass(frozen=True)
class CreationPrompt:
    system: str
    user: str
    max_tokens: int
    temperature: float
    fallback: str


CREATION_PROMPTS: dict[str, CreationPrompt] = {
    "content_ideas": CreationPrompt(
        system=(
            "You are a LinkedIn content strategist specializing in {industry}. Generate 5 specific, "
            "actionable content ideas that will drive engagement and establish thought leadership.\n\n"
            "LinkedIn Algorithm Rules to Follow:\n"
            "- Prioritize content that generates comments over likes\n"
            "- Native content performs better than external links\n"
            "- Carousels and mini-articles (150-400 words) perform best\n"
            "- First 60 minutes post-publish is critical\n"
            "- 3-5 niche hashtags work better than trending ones"
        ),
        user=(
            "Generate 5 LinkedIn content ideas for a {industry} professional with this profile:\n"
            "{profile}\n\n"
            "For each idea, provide:\n"
            "1. Content title/hook\n"
            "2. Content format (text, carousel, video, etc.)\n"
            "3. Key points to cover\n"
            "4. Estimated engagement potential (1-10)\n"
            "5. Optimal posting time\n"
            "6. Relevant hashtags (3-5)\n\n"
            "Focus on value-first content that sparks meaningful conversations."
        ),
        max_tokens=800,
        temperature=0.7,
        fallback="Failed to generate content ideas",
    ),
    "posting_strategy": CreationPrompt(
        system=(
            "You are a LinkedIn growth strategist. Create a comprehensive weekly posting strategy that "
            "aligns with LinkedIn's algorithm preferences.\n\n"
            "Algorithm Optimization Rules:\n"
            "- 3-5 posts per week is optimal\n"
            "- Avoid posting multiple times per day\n"
            "- Engage with others' content 15-30 minutes before posting\n"
            "- Reply to comments within 15 minutes for maximum reach\n"
            "- Tuesday-Thursday, 8-10 AM or 12-2 PM are best times\n"
            "- Avoid weekends unless targeting global/startup audiences"
        ),
        user=(
            "Create a weekly LinkedIn posting strategy for a {industry} professional:\n"
            "{profile}\n\n"
            "Include:\n"
            "1. Optimal posting schedule (days and times)\n"
            "2. Content mix recommendations (formats and topics)\n"
            "3. Engagement strategy (pre-posting and post-posting activities)\n"
            "4. Hashtag strategy for {industry}\n"
            "5. Content calendar template\n"
            "6. Performance tracking metrics\n\n"
            "Make it specific and actionable for immediate implementation."
        ),
        max_tokens=1000,
        temperature=0.4,
        fallback="Failed to generate posting strategy",
    ),
    "algorithm_optimization": CreationPrompt(
        system=(
            "You are a LinkedIn algorithm expert. Analyze user behavior and provide specific "
            "optimization recommendations.\n\n"
            "LinkedIn Algorithm Factors:\n"
            "- Dwell time is the most important ranking factor\n"
            "- Comments > Reactions > Shares > Likes in algorithm weight\n"
            "- Native content (no external links) is prioritized\n"
            "- Engagement in first 60 minutes determines reach\n"
            "- Consistent posting schedule builds algorithm trust\n"
            "- Author engagement with comments boosts post performance"
        ),
        user=(
            "Analyze this LinkedIn user profile and provide algorithm optimization recommendations:\n"
            "{profile}\n\n"
            "Provide specific advice on:\n"
            "1. Content optimization for maximum dwell time\n"
            "2. Engagement tactics to trigger algorithm boost\n"
            "3. Posting timing and frequency optimization\n"
            "4. Content format recommendations\n"
            "5. Hashtag and tagging strategy\n"
            "6. Common algorithm penalties to avoid\n\n"
            "Focus on actionable tactics they can implement immediately."
        ),
        max_tokens=1000,
        temperature=0.3,
        fallback="Failed to generate algorithm optimization",
    ),
}

POSTGEN_SYSTEM_PROMPT = (
    "You are a LinkedIn content expert. Create engaging, professional LinkedIn posts that drive "
    "engagement. Keep posts concise, authentic, and valuable to the professional community."
)

HOUSE_STYLE = (
    "You are an AI content strategist, trained to create viral hooks and rewrite posts in a bold, "
    "pithy, and no-nonsense style.\n"
    "Rules:\n"
    "- Avoid emojis, filler, or politeness.\n"
    "- Tone must be confident, emotionally charged, and attention-grabbing.\n"
    "- Hooks and rewrites must evoke curiosity, fear, surprise, or identity."
)

_POST_FRAMEWORK = (
    "- Start with a scroll-stopping hook (bold, punchy opening).\n"
    "- Add a sub-hook with tension or curiosity.\n"
    "- Include a credibility element (quote/stat).\n"
    "- Use a list (1/, 2/, 3/ with ↳ sub-points) if applicable.\n"
    "- End with a short, powerful engagement question.\n"
    "- Tone: bold, confident, and no-nonsense."
)

HOOKS_PROMPT = (
    "Generate 5 viral hooks for the following post.\n"
    "Guidelines:\n"
    "- Hooks must be 10–20 words, pithy, bold, and emotionally charged.\n"
    "- Use curiosity, fear, and surprise to drive attention.\n"
    "- Match the tone of these examples:\n"
    "  1. Leaving a toxic workplace is not an act of defeat, but a sign of bravery.\n"
    "  2. You don't get what you deserve, you get what you negotiate.\n"
    "  3. The worst part of a toxic boss isn't behavior, it's how they make you doubt your own self-worth.\n"
    "  4. Politeness is the poison of collaboration (Not joking).\n"
    "  5. Before you fix your productivity, fix the people killing it.\n\n"
    "Post: {text}"
)

REWRITE_PROMPT = "Rewrite this post using this framework:\n" + _POST_FRAMEWORK + "\n\nPost: {text}"

GENERATE_PROMPT = "Create a professional LinkedIn post about: {topic}. Use this framework:\n" + _POST_FRAMEWORK


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


async def _complete(
    messages: list[dict[str, str]],
    *,
    model: str,
    max_tokens: int,
    temperature: float,
) -> str:
    """chat_completion with OpenAIError mapped to ContentGenerationError."""
    try:
        return await chat_completion(messages, model=model, max_tokens=max_tokens, temperature=temperature)
    except OpenAIError as e:
        if e.status_code is None and not get_settings().openai_api_key:
            raise ContentGenerationError("OpenAI API key not configured", status_code=503) from e
        raise ContentGenerationError(f"Failed to generate AI content: {e}", status_code=502) from e


# ============================================================
# Creation Engine
# ============================================================


async def generate_creation_content(
    request_type: str,
    industry: str,
    user_profile: dict[str, Any] | None = None,
) -> GeneratedContent:
    """Run one Creation Engine request.

    Raises:
        UnknownCreationTypeError: For request types other than CREATION_PROMPTS keys.
        ContentGenerationError: When OpenAI is unconfigured or fails.
    """
    prompt = CREATION_PROMPTS.get(request_type)
    if prompt is None:
        raise UnknownCreationTypeError(f"Invalid request type: {request_type}")

    profile = json.dumps(user_profile or {})
    content = await _complete(
        [
            {"role": "system", "content": prompt.system.format(industry=industry)},
            {"role": "user", "content": prompt.user.format(industry=industry, profile=profile)},
        ],
        model=get_settings().openai_model_insights,
        max_tokens=prompt.max_tokens,
        temperature=prompt.temperature,
    )
    return GeneratedContent(type=request_type, content=content or prompt.fallback, timestamp=_utcnow())


# ============================================================
# PostGen
# ============================================================


async def generate_content(prompt: str, context: str | None = None) -> str:
    """Base PostGen call; `context` is appended as a second system message."""
    messages = [{"role": "system", "content": POSTGEN_SYSTEM_PROMPT}]
    if context:
        messages.append({"role": "system", "content": f"Context: {context}"})
    messages.append({"role": "user", "content": prompt})

    content = await _complete(
        messages,
        model=get_settings().openai_model_content,
        max_tokens=500,
        temperature=0.7,
    )
    return content or "Failed to generate content"


async def generate_post(topic: str) -> GeneratedContent:
    content = await generate_content(GENERATE_PROMPT.format(topic=topic), HOUSE_STYLE)
    return GeneratedContent(type="post", content=content, timestamp=_utcnow())


async def generate_hooks(text: str) -> GeneratedContent:
    """Five 10-20 word hooks for an existing post."""
    content = await generate_content(HOOKS_PROMPT.format(text=text), HOUSE_STYLE)
    return GeneratedContent(type="hooks", content=content, timestamp=_utcnow())


async def rewrite_post(text: str) -> GeneratedContent:
    content = await generate_content(REWRITE_PROMPT.format(text=text), HOUSE_STYLE)
    return GeneratedContent(type="rewrite", content=content, timestamp=_utcnow())


async def analyze_post_performance(posts: list[Any], engagement: list[Any]) -> GeneratedContent:
    prompt = (
        "Analyze the following LinkedIn post performance data and provide insights:\n\n"
        f"Posts: {json.dumps(posts[:10], default=str)}\n"
        f"Engagement: {json.dumps(engagement[:20], default=str)}\n\n"
        "Please provide:\n"
        "1. Top performing post types\n"
        "2. Best posting times\n"
        "3. Engagement patterns\n"
        "4. Content recommendations\n"
        "5. Algorithm insights\n\n"
        "Keep the analysis professional and actionable."
    )
    content = await _complete(
        [
            {
                "role": "system",
                "content": (
                    "You are a LinkedIn analytics expert. Analyze post performance data and provide "
                    "actionable insights for improving LinkedIn engagement and reach."
                ),
            },
            {"role": "user", "content": prompt},
        ],
        model=get_settings().openai_model_content,
        max_tokens=1000,
        temperature=0.3,
    )
    return GeneratedContent(
        type="performance_analysis",
        content=content or "Failed to generate analysis",
        timestamp=_utcnow(),
    )


async def generate_content_strategy(history: list[Any], metrics: dict[str, Any]) -> GeneratedContent:
    prompt = (
        "Based on this LinkedIn user's posting history and performance metrics, create a "
        "personalized content strategy:\n\n"
        f"User History: {json.dumps(history[:10], default=str)}\n"
        f"Metrics: {json.dumps(metrics, default=str)}\n\n"
        "Please provide:\n"
        "1. Content pillars to focus on\n"
        "2. Optimal posting frequency and timing\n"
        "3. Content format recommendations\n"
        "4. Engagement strategies\n"
        "5. Growth tactics\n\n"
        "Make it specific and actionable."
    )
    content = await _complete(
        [
            {
                "role": "system",
                "content": (
                    "You are a LinkedIn growth strategist. Create personalized content strategies "
                    "based on user data and performance metrics."
                ),
            },
            {"role": "user", "content": prompt},
        ],
        model=get_settings().openai_model_content,
        max_tokens=1200,
        temperature=0.4,
    )
    return GeneratedContent(
        type="content_strategy",
        content=content or "Failed to generate strategy",
        timestamp=_utcnow(),
    )


# ============================================================
# Persistence
# ============================================================


async def save_content_idea(
    session: AsyncSession,
    user: User,
    generated: GeneratedContent,
    industry: str | None = None,
) -> ContentIdea:
    """Store generated content for the user's history."""
    settings = get_settings()
    model = settings.openai_model_insights if generated.type in CREATION_PROMPTS else settings.openai_model_content
    idea = ContentIdea(
        user_id=user.id,
        content_type=generated.type,
        industry_focus=industry,
        body=generated.content,
        ai_model=model,
    )
    session.add(idea)
    await session.flush()
    logger.info(f"[content] saved {generated.type} for user={user.user_id}")
    return idea


async def list_content_ideas(
    session: AsyncSession,
    user: User,
    content_type: str | None = None,
    limit: int = 10,
) -> ContentIdeasResponse:
    """Most recent saved generations for the user, newest first."""
    query = select(ContentIdea).where(ContentIdea.user_id == user.id)
    if content_type:
        query = query.where(ContentIdea.content_type == content_type)
    query = query.order_by(ContentIdea.created_at.desc(), ContentIdea.id.desc()).limit(limit)

    result = await session.execute(query)
    ideas = [
        ContentIdeaItem(
            id=idea.id,
            type=idea.content_type,
            industry=idea.industry_focus,
            content=idea.body,
            ai_model=idea.ai_model,
            created_at=idea.created_at,
        )
        for idea in result.scalars().all()
    ]
    return ContentIdeasResponse(ideas=ideas, total=len(ideas))
