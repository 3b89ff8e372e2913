"""
Recommendation orchestration.

Owns the per-request pipeline: load the library once, analyze it, generate
candidates, drop duplicate ids across strategies, score and rank. Callers
always get a list back; failures degrade to the popularity fallback.
"""
import logging
import math
from typing import List

from shelfwise.clients.book_search import BookSearchProvider
from shelfwise.core.config import settings
from shelfwise.repositories.library import LibraryRepository
from shelfwise.schemas.recommendation import Recommendation, RecommendationStrategy
from shelfwise.services.candidate_generator import Candidate, CandidateGenerator, REASON_BY_AUTHOR
from shelfwise.services.preference_analyzer import analyze_preferences, get_search_keywords
from shelfwise.services.score_ranker import POPULAR_MATCH_SCORE, calculate_match_score, rank_recommendations
from shelfwise.utils.timing import now_ms, log_elapsed

logger = logging.getLogger(__name__)

SIMILAR_BY_AUTHOR_SCORE = 0.8
SIMILAR_THEME_SCORE = 0.6
SIMILAR_BY_AUTHOR_PADDING = 5
SIMILAR_THEME_PADDING = 3
SIMILAR_THEME_TITLE_WORDS = 2
REASON_SIMILAR_THEME = "Similar theme"


def _to_recommendation(candidate: Candidate, match_score: float) -> Recommendation:
    return Recommendation(
        **candidate.book.model_dump(),
        reason=candidate.reason,
        match_score=match_score,
        strategy=candidate.strategy,
    )


class RecommendationService:
    def __init__(self, library_repository: LibraryRepository, search_provider: BookSearchProvider):
        self.library_repository = library_repository
        self.generator = CandidateGenerator(search_provider)

    def get_recommendations(self, user_id: str, limit: int = 20) -> List[Recommendation]:
        """
        Ranked recommendations for a user, at most `limit` items.

        When two strategies surface the same book id, the first strategy to
        find it wins, even if a later one would have scored it higher.
        """
        if limit <= 0:
            return []

        t = now_ms()
        try:
            library = self.library_repository.get_library(user_id)
            if settings.DEBUG:
                t = log_elapsed(t, f"user={user_id} load_library")

            preferences = analyze_preferences(library)
            candidates = self.generator.generate(preferences, limit)
            if settings.DEBUG:
                t = log_elapsed(t, f"user={user_id} generate_candidates")

            seen_ids = set()
            recommendations: List[Recommendation] = []
            for candidate in candidates:
                if candidate.book.id in seen_ids:
                    continue
                seen_ids.add(candidate.book.id)
                score = calculate_match_score(candidate.book, preferences, candidate.strategy)
                recommendations.append(_to_recommendation(candidate, score))

            ranked = rank_recommendations(recommendations, limit)
            logger.info(
                "[RECS] user=%s library=%d candidates=%d unique=%d returned=%d",
                user_id,
                len(preferences.user_books),
                len(candidates),
                len(recommendations),
                len(ranked),
            )
            return ranked
        except Exception:
            logger.exception("Error getting recommendations for user %s, falling back to popular books", user_id)
            return self.get_popular_recommendations(limit)

    def get_popular_recommendations(self, limit: int = 20) -> List[Recommendation]:
        """Non-personalized fallback: well-known books, all scored 0.5."""
        try:
            candidates = self.generator.popular_candidates(limit)
            return [_to_recommendation(c, POPULAR_MATCH_SCORE) for c in candidates][:limit]
        except Exception:
            logger.exception("Error getting popular recommendations")
            return []

    def get_similar_books(self, title: str, author: str, limit: int = 10) -> List[Recommendation]:
        """
        "More like this" for a single book.

        One query for the author's other books, one for the first words of the
        title. The seed book itself is never returned.
        """
        if limit <= 0:
            return []

        try:
            seed_title = title.lower()
            seen_ids = set()
            recommendations: List[Recommendation] = []

            def _collect(books, strategy, reason, score):
                for book in books:
                    if book.title.lower() == seed_title or book.id in seen_ids:
                        continue
                    seen_ids.add(book.id)
                    recommendations.append(_to_recommendation(
                        Candidate(book=book, strategy=strategy, reason=reason),
                        score,
                    ))

            if author.strip():
                _collect(
                    self.generator.search_books(author, limit + SIMILAR_BY_AUTHOR_PADDING),
                    RecommendationStrategy.AUTHOR,
                    REASON_BY_AUTHOR.format(author=author),
                    SIMILAR_BY_AUTHOR_SCORE,
                )

            title_words = " ".join(title.split(" ")[:SIMILAR_THEME_TITLE_WORDS]).strip()
            if title_words:
                _collect(
                    self.generator.search_books(title_words, math.ceil(limit / 2) + SIMILAR_THEME_PADDING),
                    RecommendationStrategy.SIMILAR_THEME,
                    REASON_SIMILAR_THEME,
                    SIMILAR_THEME_SCORE,
                )

            return rank_recommendations(recommendations, limit)
        except Exception:
            logger.exception("Error getting similar books for '%s' by %s", title, author)
            return []

    def get_search_keywords(self, user_id: str) -> List[str]:
        """Authors worth searching for this user; [] if the library can't be read."""
        try:
            preferences = analyze_preferences(self.library_repository.get_library(user_id))
            return get_search_keywords(preferences)
        except Exception:
            logger.exception("Error getting search keywords for user %s", user_id)
            return []
