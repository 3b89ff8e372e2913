from pydantic import BaseModel, ConfigDict, Field
from typing import List
import enum

from shelfwise.schemas.library import BookStatus, LibraryBook
from shelfwise.schemas.search import SearchResult


class RecommendationStrategy(str, enum.Enum):
    AUTHOR = "author"
    SIMILAR_BOOK = "similar-book"
    SIMILAR_AUTHOR = "similar-author"
    POPULAR = "popular"
    SIMILAR_THEME = "similar-theme"


class AuthorCount(BaseModel):
    model_config = ConfigDict(frozen=True)

    author: str
    count: int


class AuthorRating(BaseModel):
    model_config = ConfigDict(frozen=True)

    author: str
    rating: float


class ReadingPatterns(BaseModel):
    model_config = ConfigDict(frozen=True)

    most_read_authors: List[AuthorCount] = Field(default_factory=list)
    average_rating_by_author: List[AuthorRating] = Field(default_factory=list)


class UserPreferences(BaseModel):
    """Taste profile derived from a library snapshot. Recomputed on every request."""

    model_config = ConfigDict(frozen=True)

    favorite_authors: List[str] = Field(default_factory=list)
    average_rating: float = 0.0
    total_books_read: int = 0
    preferred_status: List[BookStatus] = Field(default_factory=list)
    reading_patterns: ReadingPatterns = Field(default_factory=ReadingPatterns)
    user_books: List[LibraryBook] = Field(default_factory=list)
    highly_rated_books: List[LibraryBook] = Field(default_factory=list)
    recent_books: List[LibraryBook] = Field(default_factory=list)

    @property
    def is_new_user(self) -> bool:
        return not self.user_books


class Recommendation(SearchResult):
    reason: str
    match_score: float = Field(ge=0.1, le=1.0)
    strategy: RecommendationStrategy


class RecommendationsResponse(BaseModel):
    """Response wrapper for recommendations that includes request_id for client-side tracking."""
    request_id: str
    items: List[Recommendation]


class SearchKeywordsResponse(BaseModel):
    keywords: List[str]
