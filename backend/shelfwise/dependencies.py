"""FastAPI providers wiring the recommendation service to its collaborators."""
from typing import Iterator

from fastapi import Depends
from sqlalchemy.orm import Session

from shelfwise.clients.book_search import BookSearchClient, BookSearchProvider
from shelfwise.database import get_db
from shelfwise.repositories.library import LibraryRepository, SqlLibraryRepository
from shelfwise.services.recommendation_service import RecommendationService


def get_search_provider() -> Iterator[BookSearchProvider]:
    """Dependency for a per-request search client; its HTTP session never outlives the request."""
    client = BookSearchClient()
    try:
        yield client
    finally:
        client.session.close()


def get_library_repository(db: Session = Depends(get_db)) -> LibraryRepository:
    return SqlLibraryRepository(db)


def get_recommendation_service(
    library_repository: LibraryRepository = Depends(get_library_repository),
    search_provider: BookSearchProvider = Depends(get_search_provider),
) -> RecommendationService:
    return RecommendationService(library_repository, search_provider)
