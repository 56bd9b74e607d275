"""AI comment suggestions for a synergy partner's post.

Always yields exactly 3 comments (insight, question, compliment with added
value). Model output is parsed leniently; anything unusable falls back to
fixed comments so the UI never shows an empty list.

Suggestions are stored in `suggested_comments`. If storage is unavailable the
comments are still returned, with temporary ids.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging
import time
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from linkedin_growth.models import SuggestedComment, User
from linkedin_growth.schemas.synergy import CommentSuggestion, SuggestCommentResponse
from linkedin_growth.services.linkedin_client import LinkedInDMAClient
from linkedin_growth.services.openai_client import OpenAIError, chat_completion, extract_json_payload
from linkedin_growth.services.users import UserResolutionError, get_user_by_public_id, resolve_current_user
from linkedin_growth.settings import get_settings
from linkedin_growth.stores.postgres import get_session

logger = logging.getLogger("uvicorn.error")

SUGGESTION_COUNT = 3
SUGGESTION_TONES = ("insight", "question", "compliment")

FALLBACK_COMMENTS = (
    "Great insights! This really resonates with my experience.",
    "Thanks for sharing this perspective. Looking forward to hearing more about your thoughts on this topic.",
    "Excellent point! I'd love to connect and discuss this further.",
)

PADDING_COMMENTS = (
    "Great insights! This really resonates with my experience.",
    "Thanks for sharing this perspective. Very thought-provoking!",
    "Excellent point! I'd love to hear more about your thoughts on this.",
)

GENERIC_COMMENT = "Thanks for sharing this!"

SYSTEM_PROMPT = (
    "You are an expert LinkedIn networker who crafts comments that build professional relationships "
    "and establish thought leadership. Your comments should:\n"
    "- Demonstrate subject matter expertise relevant to the post\n"
    "- Create opportunities for deeper connection and conversation\n"
    "- Show genuine curiosity and interest in the poster's perspective\n"
    "- Be memorable and distinctive from typical LinkedIn comments\n"
    "- Add a unique angle or complementary insight to the discussion\n"
    "- Position the commenter as a valuable professional connection\n"
    "- Always maintain professionalism while being personable."
)

USER_PROMPT = (
    "Based on the post content below, generate exactly 3 professional LinkedIn comments. "
    "Each comment should take a different approach:\n\n"
    "Comment 1: Share a related insight or experience\n"
    "Comment 2: Ask a thoughtful question to continue the conversation\n"
    "Comment 3: Offer a compliment with added value or perspective\n\n"
    "Requirements:\n"
    "- Maximum 25 words per comment\n"
    "- Sound natural and conversational\n"
    "- Be specific to the post content, not generic\n"
    "- Avoid overused LinkedIn phrases\n"
    "- Each comment should feel authentic and engaging\n\n"
    'Return as JSON: {{"comments": ["comment1", "comment2", "comment3"]}}\n\n'
    'Post Content: "{post_content}"'
)


def normalize_comments(parsed: Any) -> list[str]:
    """Coerce parsed model output into exactly 3 comment strings.

    Accepts {"comments": [...]}, {"suggestions": [...]} or a bare list, with
    items as strings or {"text"}/{"comment"} objects. Short lists are padded
    with fallbacks, long ones truncated.
    """
    if parsed is None:
        return list(FALLBACK_COMMENTS)

    comments: list[Any] = []
    if isinstance(parsed, dict):
        if isinstance(parsed.get("comments"), list):
            comments = list(parsed["comments"])
        elif isinstance(parsed.get("suggestions"), list):
            comments = list(parsed["suggestions"])
    elif isinstance(parsed, list):
        comments = list(parsed)

    while len(comments) < SUGGESTION_COUNT:
        comments.append(PADDING_COMMENTS[len(comments)])

    result: list[str] = []
    for comment in comments[:SUGGESTION_COUNT]:
        if isinstance(comment, str) and comment.strip():
            result.append(comment.strip())
        elif isinstance(comment, dict) and isinstance(comment.get("text"), str) and comment["text"].strip():
            result.append(comment["text"].strip())
        elif isinstance(comment, dict) and isinstance(comment.get("comment"), str) and comment["comment"].strip():
            result.append(comment["comment"].strip())
        else:
            result.append(GENERIC_COMMENT)
    return result


async def generate_comment_texts(post_content: str) -> list[str]:
    """Ask OpenAI for 3 comments; any failure yields the fallback trio."""
    try:
        text = await chat_completion(
            [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": USER_PROMPT.format(post_content=post_content)},
            ],
            model=get_settings().openai_model_content,
            max_tokens=500,
            temperature=0.7,
            json_mode=True,
        )
    except OpenAIError:
        logger.warning("[comments] OpenAI unavailable, using fallback suggestions")
        return list(FALLBACK_COMMENTS)

    return normalize_comments(extract_json_payload(text))


def _temporary_suggestions(comments: list[str], now: datetime) -> list[CommentSuggestion]:
    stamp = int(time.time() * 1000)
    return [
        CommentSuggestion(id=f"temp-{stamp}-{i}", text=text, created_at=now)
        for i, text in enumerate(comments)
    ]


async def store_suggestions(
    post_urn: str,
    comments: list[str],
    from_user: User | None,
    to_user: User | None = None,
) -> list[CommentSuggestion]:
    """Persist suggestions; on any storage failure return them with temp ids."""
    now = datetime.now(timezone.utc)
    if from_user is None:
        return _temporary_suggestions(comments, now)

    model = get_settings().openai_model_content
    try:
        async with get_session() as session:
            rows = [
                SuggestedComment(
                    from_user_id=from_user.id,
                    to_user_id=to_user.id if to_user else None,
                    post_urn=post_urn,
                    suggestion=text,
                    tone=SUGGESTION_TONES[i],
                    ai_model=model,
                    created_at=now,
                )
                for i, text in enumerate(comments)
            ]
            session.add_all(rows)
            await session.flush()
            return [
                CommentSuggestion(id=row.suggestion_id, text=row.suggestion, created_at=row.created_at)
                for row in rows
            ]
    except (RuntimeError, SQLAlchemyError):
        logger.exception("[comments] storing suggestions failed, returning temporary ids")
        return _temporary_suggestions(comments, now)


async def generate_comment_suggestions(
    post_urn: str,
    post_content: str,
    from_user: User | None = None,
    to_user: User | None = None,
) -> SuggestCommentResponse:
    comments = await generate_comment_texts(post_content)
    suggestions = await store_suggestions(post_urn, comments, from_user, to_user)
    logger.info(f"[comments] generated {len(suggestions)} suggestions post={post_urn}")
    return SuggestCommentResponse(
        suggestions=suggestions,
        post_urn=post_urn,
        generated_at=datetime.now(timezone.utc),
    )


async def resolve_comment_parties(
    client: LinkedInDMAClient,
    partner_id: str | None = None,
) -> tuple[User | None, User | None]:
    """Best-effort (from_user, to_user) for storing suggestions.

    Unregistered callers, unknown partners or a missing database all yield
    None, which makes the suggestions temporary instead of failing the request.
    """
    try:
        async with get_session() as session:
            from_user = await resolve_current_user(session, client)
            to_user = await get_user_by_public_id(session, partner_id) if partner_id else None
    except UserResolutionError:
        return None, None
    except (RuntimeError, SQLAlchemyError):
        logger.warning("[comments] user lookup unavailable, suggestions will not be stored")
        return None, None
    return from_user, to_user
