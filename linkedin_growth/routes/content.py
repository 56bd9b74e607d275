"""AI content endpoints.

POST /v1/creation/ai         - Creation Engine (ideas, strategy, algorithm tips)
POST /v1/postgen/generate    - New post from a topic
POST /v1/postgen/hooks       - Five hooks for a post
POST /v1/postgen/rewrite     - Rewrite a post in the house style
POST /v1/postgen/analyze     - Performance analysis of past posts
POST /v1/postgen/strategy    - Personalised content strategy
GET  /v1/creation/ideas      - Saved generations, newest first

With `save: true` the result is also stored in content_ideas for the
registered user behind the token.
"""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from linkedin_growth.models import User
from linkedin_growth.routes.deps import get_current_user, get_db_session, get_linkedin_client
from linkedin_growth.schemas.content import (
    ContentIdeasResponse,
    ContentStrategyRequest,
    CreationRequest,
    GeneratedContent,
    PerformanceAnalysisRequest,
    PostTextRequest,
    PostTopicRequest,
)
from linkedin_growth.services.content_engine import (
    ContentGenerationError,
    UnknownCreationTypeError,
    analyze_post_performance,
    generate_content_strategy,
    generate_creation_content,
    generate_hooks,
    generate_post,
    list_content_ideas,
    rewrite_post,
    save_content_idea,
)
from linkedin_growth.services.linkedin_client import LinkedInDMAClient
from linkedin_growth.services.users import UserResolutionError, resolve_current_user
from linkedin_growth.stores.postgres import db_available, get_session

router = APIRouter()


async def _save(client: LinkedInDMAClient, generated: GeneratedContent, industry: str | None = None) -> None:
    if not db_available():
        raise HTTPException(status_code=503, detail="Database not available")
    async with get_session() as session:
        try:
            user = await resolve_current_user(session, client)
        except UserResolutionError as e:
            raise HTTPException(status_code=e.status_code, detail=str(e))
        await save_content_idea(session, user, generated, industry)


@router.post("/creation/ai", response_model=GeneratedContent)
async def creation_engine(
    request: CreationRequest,
    client: LinkedInDMAClient = Depends(get_linkedin_client),
) -> GeneratedContent:
    try:
        generated = await generate_creation_content(request.type, request.industry, request.user_profile)
    except UnknownCreationTypeError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ContentGenerationError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    if request.save:
        await _save(client, generated, request.industry)
    return generated


@router.post("/postgen/generate", response_model=GeneratedContent)
async def postgen_generate(
    request: PostTopicRequest,
    client: LinkedInDMAClient = Depends(get_linkedin_client),
) -> GeneratedContent:
    try:
        generated = await generate_post(request.topic)
    except ContentGenerationError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    if request.save:
        await _save(client, generated)
    return generated


@router.post("/postgen/hooks", response_model=GeneratedContent)
async def postgen_hooks(
    request: PostTextRequest,
    client: LinkedInDMAClient = Depends(get_linkedin_client),
) -> GeneratedContent:
    try:
        generated = await generate_hooks(request.text)
    except ContentGenerationError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    if request.save:
        await _save(client, generated)
    return generated


@router.post("/postgen/rewrite", response_model=GeneratedContent)
async def postgen_rewrite(
    request: PostTextRequest,
    client: LinkedInDMAClient = Depends(get_linkedin_client),
) -> GeneratedContent:
    try:
        generated = await rewrite_post(request.text)
    except ContentGenerationError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    if request.save:
        await _save(client, generated)
    return generated


@router.post("/postgen/analyze", response_model=GeneratedContent)
async def postgen_analyze(
    request: PerformanceAnalysisRequest,
    client: LinkedInDMAClient = Depends(get_linkedin_client),
) -> GeneratedContent:
    try:
        return await analyze_post_performance(request.posts, request.engagement)
    except ContentGenerationError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/postgen/strategy", response_model=GeneratedContent)
async def postgen_strategy(
    request: ContentStrategyRequest,
    client: LinkedInDMAClient = Depends(get_linkedin_client),
) -> GeneratedContent:
    try:
        return await generate_content_strategy(request.history, request.metrics)
    except ContentGenerationError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/creation/ideas", response_model=ContentIdeasResponse)
async def content_ideas(
    content_type: str | None = Query(default=None, alias="type", max_length=50),
    limit: int = Query(default=10, ge=1, le=50),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_db_session),
) -> ContentIdeasResponse:
    return await list_content_ideas(session, user, content_type, limit)
