from typing import List
import uuid as uuid_lib

from fastapi import APIRouter, Depends, Query
import logging

from shelfwise.core.auth import get_current_user_id
from shelfwise.core.config import settings
from shelfwise.dependencies import get_recommendation_service
from shelfwise.schemas.recommendation import Recommendation, RecommendationsResponse, SearchKeywordsResponse
from shelfwise.services.recommendation_service import RecommendationService
from shelfwise.utils.timing import now_ms, log_elapsed

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/recommendations", tags=["recommendations"])


@router.get("", response_model=RecommendationsResponse)
def get_recommendations(
    limit: int = Query(settings.RECOMMENDATIONS_DEFAULT_LIMIT, ge=1, le=settings.RECOMMENDATIONS_MAX_LIMIT),
    user_id: str = Depends(get_current_user_id),
    service: RecommendationService = Depends(get_recommendation_service),
):
    """Personalized recommendations for the authenticated user."""
    t0 = now_ms()
    request_id = str(uuid_lib.uuid4())

    logger.info("Fetching recommendations for user %s (req_id=%s, limit=%d)", user_id, request_id, limit)
    items = service.get_recommendations(user_id, limit=limit)

    if settings.DEBUG:
        log_elapsed(t0, f"req_id={request_id} user={user_id} total count={len(items)}", logger.debug)

    return RecommendationsResponse(request_id=request_id, items=items)


@router.get("/similar", response_model=List[Recommendation])
def get_similar_books(
    title: str = Query(..., min_length=1, description="Title of the book to find similar books for"),
    author: str = Query(..., min_length=1, description="Author of that book"),
    limit: int = Query(10, ge=1, le=settings.RECOMMENDATIONS_MAX_LIMIT),
    user_id: str = Depends(get_current_user_id),
    service: RecommendationService = Depends(get_recommendation_service),
):
    """Books similar to a single seed book ("more like this")."""
    logger.info("Fetching similar books to '%s' by %s for user %s", title, author, user_id)
    return service.get_similar_books(title, author, limit=limit)


@router.get("/keywords", response_model=SearchKeywordsResponse)
def get_search_keywords(
    user_id: str = Depends(get_current_user_id),
    service: RecommendationService = Depends(get_recommendation_service),
):
    """Author names worth suggesting as search terms for this user."""
    return SearchKeywordsResponse(keywords=service.get_search_keywords(user_id))
