import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status

from ..config import settings
from ..models.schemas import (
    CategorySummary,
    ClassifyRequest,
    HealthResponse,
    SearchDestination,
    SessionState,
    SessionUpdate,
    SuccessResult,
    Suggestion,
)
from ..service.classifier import resolve
from ..service.suggester import category_summaries, generate_suggestions, popular_searches
from ..utils.loader import get_keywords_loader
from ..utils.session_store import SessionStore, get_session_store

logger = logging.getLogger(settings.SERVICE_NAME + ".api_router")

router = APIRouter(prefix=f"/{settings.API_VERSION}")


# --- Health Check Endpoint ---

@router.get(
    "/healthz",
    tags=["Health"],
    summary="Perform a Health Check",
    response_model=SuccessResult[HealthResponse],
)
async def health_check():
    """
    Reports whether the keyword tables are loaded.
    The service still answers when they are not, but every query then goes to the market.
    """
    loader = get_keywords_loader()
    if loader.get_rules():
        health = HealthResponse(
            status="ok",
            service=settings.SERVICE_NAME,
            keywords_loaded=True,
            keyword_counts=loader.keyword_counts(),
        )
    else:
        health = HealthResponse(
            status="degraded",
            service=settings.SERVICE_NAME,
            keywords_loaded=False,
            message="Keywords not loaded",
        )
    return SuccessResult[HealthResponse](data=health)


# --- Search Endpoints ---

@router.get(
    "/search/categories",
    tags=["Search"],
    summary="List destination sections",
    response_model=SuccessResult[List[CategorySummary]],
)
async def list_categories():
    categories = category_summaries()
    return SuccessResult[List[CategorySummary]](data=categories, total=len(categories))


@router.post(
    "/search/classify",
    tags=["Search"],
    summary="Resolve where a submitted query navigates",
    response_model=SuccessResult[SearchDestination],
)
async def classify_query(request: ClassifyRequest):
    """
    Classifies the query into jobs, market, guides or community and returns
    the listing URL with the query attached as the `search` parameter.
    """
    destination = resolve(request.query)
    if destination is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="query must not be empty")
    logger.info(f"Classified query {request.query!r} as {destination.category.value}")
    return SuccessResult[SearchDestination](data=destination)


@router.get(
    "/search/suggestions",
    tags=["Search"],
    summary="Suggestions for partially typed input",
    response_model=SuccessResult[List[Suggestion]],
)
async def get_suggestions(
    q: str = Query("", max_length=settings.MAX_QUERY_LENGTH, description="Text typed so far."),
    session_id: Optional[UUID] = Query(None, description="Apply this session's suggestion preference."),
    store: SessionStore = Depends(get_session_store),
):
    show_suggestions = True
    if session_id is not None:
        session = await store.touch(session_id)
        if session is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Session '{session_id}' not found")
        show_suggestions = session.show_suggestions

    suggestions = generate_suggestions(q, show_suggestions)
    return SuccessResult[List[Suggestion]](data=suggestions, total=len(suggestions))


@router.get(
    "/search/popular",
    tags=["Search"],
    summary="Searches shown before anything is typed",
    response_model=SuccessResult[List[Suggestion]],
)
async def get_popular_searches():
    popular = popular_searches()
    return SuccessResult[List[Suggestion]](data=popular, total=len(popular))


# --- Session Management Endpoints ---

@router.post(
    "/sessions",
    tags=["Session Management"],
    summary="Create a new visitor session",
    response_model=SuccessResult[SessionState],
    status_code=status.HTTP_201_CREATED,
)
async def create_session(store: SessionStore = Depends(get_session_store)):
    session = await store.create()
    return SuccessResult[SessionState](data=session)


@router.get(
    "/sessions/{session_id}",
    tags=["Session Management"],
    summary="Get a visitor session",
    response_model=SuccessResult[SessionState],
)
async def get_session(
    session_id: UUID = Path(..., description="The unique identifier of the session."),
    store: SessionStore = Depends(get_session_store),
):
    session = await store.get(session_id)
    if session is None:
        logger.warning(f"Session not found: {session_id}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Session '{session_id}' not found")
    return SuccessResult[SessionState](data=session)


@router.patch(
    "/sessions/{session_id}",
    tags=["Session Management"],
    summary="Update session preferences",
    response_model=SuccessResult[SessionState],
)
async def update_session(
    changes: SessionUpdate,
    session_id: UUID = Path(..., description="The unique identifier of the session."),
    store: SessionStore = Depends(get_session_store),
):
    session = await store.update(session_id, changes)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Session '{session_id}' not found")
    logger.info(f"Session {session_id} updated: {changes.model_dump(exclude_unset=True, exclude={'token'})}")
    return SuccessResult[SessionState](data=session)


@router.delete(
    "/sessions/{session_id}",
    tags=["Session Management"],
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_session(
    session_id: UUID = Path(..., description="ID of the session to delete"),
    store: SessionStore = Depends(get_session_store),
):
    if not await store.delete(session_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Session '{session_id}' not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
