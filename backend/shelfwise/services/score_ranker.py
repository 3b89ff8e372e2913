from typing import List, Sequence

from shelfwise.schemas.recommendation import Recommendation, RecommendationStrategy, UserPreferences
from shelfwise.schemas.search import SearchResult
from shelfwise.services.matching import any_author_matches

BASE_SCORE = 0.5
MIN_SCORE = 0.1
MAX_SCORE = 1.0
POPULAR_MATCH_SCORE = 0.5

# Bonus when the candidate is by an author already in the user's library
LIBRARY_AUTHOR_BONUS = {
    RecommendationStrategy.AUTHOR: 0.5,
    RecommendationStrategy.SIMILAR_AUTHOR: 0.3,
    RecommendationStrategy.SIMILAR_BOOK: 0.2,
}
HIGHLY_RATED_AUTHOR_BONUS = 0.2
DESCRIPTION_BONUS = 0.1
DESCRIPTION_MIN_LENGTH = 100
COVER_BONUS = 0.1


def calculate_match_score(
    book: SearchResult,
    preferences: UserPreferences,
    strategy: RecommendationStrategy,
) -> float:
    """Heuristic match score in [0.1, 1.0] for a candidate found by `strategy`."""
    if strategy == RecommendationStrategy.POPULAR:
        return POPULAR_MATCH_SCORE

    score = BASE_SCORE

    if book.authors:
        library_authors = [b.author for b in preferences.user_books]
        if any_author_matches(book.authors, library_authors):
            score += LIBRARY_AUTHOR_BONUS.get(strategy, 0.0)

        highly_rated_authors = [b.author for b in preferences.highly_rated_books]
        if highly_rated_authors and any_author_matches(book.authors, highly_rated_authors):
            score += HIGHLY_RATED_AUTHOR_BONUS

    if book.description and len(book.description) > DESCRIPTION_MIN_LENGTH:
        score += DESCRIPTION_BONUS

    if book.cover_url:
        score += COVER_BONUS

    return round(max(MIN_SCORE, min(score, MAX_SCORE)), 4)


def rank_recommendations(recommendations: Sequence[Recommendation], limit: int) -> List[Recommendation]:
    """Highest score first; equal scores keep discovery order."""
    # sorted() is stable, so reverse=True preserves insertion order among ties
    ranked = sorted(recommendations, key=lambda rec: rec.match_score, reverse=True)
    return ranked[:max(limit, 0)]
