"""
Candidate generation: turn a preference profile into search-provider queries.

Strategies always run in the same order (favorite author, similar title,
similar author) so that downstream first-seen dedup is deterministic. Each
query is isolated: a provider failure drops that query's results only.
"""
import logging
import math
from dataclasses import dataclass
from typing import List

from shelfwise.clients.book_search import BookSearchProvider
from shelfwise.schemas.recommendation import RecommendationStrategy, UserPreferences
from shelfwise.schemas.search import SearchResult
from shelfwise.services.book_filter import filter_books
from shelfwise.services.matching import LibraryIndex, any_author_matches

logger = logging.getLogger(__name__)

MAX_AUTHORS_TO_SEARCH = 5
FAVORITE_AUTHORS_SEEDED = 3
AUTHOR_QUERY_RESULTS = 10

SIMILAR_TITLE_SEEDS = 3
SIMILAR_TITLE_WORDS = 2
SIMILAR_TITLE_MIN_WORD_LENGTH = 4
SIMILAR_TITLE_QUERY_RESULTS = 5

SIMILAR_AUTHOR_MIN_FAVORITES = 2
SIMILAR_AUTHOR_SEEDS = 2
SIMILAR_AUTHOR_QUERY_RESULTS = 5

POPULAR_QUERIES = [
    "best seller",
    "classic literature",
    "popular fiction",
    "award winning",
]
POPULAR_QUERY_PADDING = 5

REASON_BY_AUTHOR = "Another book by {author}"
REASON_SIMILAR_TITLE = "Similar to '{title}'"
REASON_SIMILAR_AUTHOR = "Author similar to ones you like"
REASON_POPULAR = "Popular and well-rated book"


@dataclass(frozen=True)
class Candidate:
    book: SearchResult
    strategy: RecommendationStrategy
    reason: str


def title_keywords(title: str) -> List[str]:
    """Up to two words longer than three characters, in title order."""
    words = [word for word in title.split(" ") if len(word) >= SIMILAR_TITLE_MIN_WORD_LENGTH]
    return words[:SIMILAR_TITLE_WORDS]


def authors_to_search(preferences: UserPreferences) -> List[str]:
    """
    Authors queried by the favorite-author strategy.

    Highly rated books' authors first, then recent books' authors, then the
    top favorite authors; first-seen order, capped at five.
    """
    ordered = {}
    for book in preferences.highly_rated_books:
        ordered.setdefault(book.author.strip(), None)
    for book in preferences.recent_books:
        ordered.setdefault(book.author.strip(), None)
    for author in preferences.favorite_authors[:FAVORITE_AUTHORS_SEEDED]:
        ordered.setdefault(author.strip(), None)
    return [author for author in ordered if author][:MAX_AUTHORS_TO_SEARCH]


class CandidateGenerator:
    def __init__(self, search_provider: BookSearchProvider):
        self.search_provider = search_provider

    def search_books(self, query: str, limit: int) -> List[SearchResult]:
        """Provider search + non-book filtering. Failures are logged and yield []."""
        try:
            results = self.search_provider.search(query, limit)
        except Exception as e:
            logger.warning("Book search failed for query '%s': %s", query, e)
            return []
        return filter_books(results or [])

    def generate(self, preferences: UserPreferences, limit: int = 20) -> List[Candidate]:
        """
        Produce unranked candidates for a profile.

        Results are already checked against the user's library but may contain
        the same book more than once across strategies. A user with no valid
        library books gets the popularity fallback instead.
        """
        if preferences.is_new_user:
            return self.popular_candidates(limit)

        library = LibraryIndex(preferences.user_books)
        searched_authors = authors_to_search(preferences)

        strategies = [
            (RecommendationStrategy.AUTHOR, lambda: self.by_favorite_author(searched_authors, library)),
            (RecommendationStrategy.SIMILAR_BOOK, lambda: self.by_similar_title(preferences, library)),
            (RecommendationStrategy.SIMILAR_AUTHOR, lambda: self.by_similar_author(preferences, searched_authors, library)),
        ]

        candidates: List[Candidate] = []
        for strategy, run in strategies:
            try:
                candidates.extend(run())
            except Exception:
                logger.exception("[RECS] %s strategy failed, continuing with the others", strategy.value)

        logger.info(
            "[RECS] generated %d candidate(s) from %d author(s), %d highly rated book(s)",
            len(candidates),
            len(searched_authors),
            len(preferences.highly_rated_books),
        )
        return candidates

    def _books_by_author(
        self,
        author: str,
        limit: int,
        library: LibraryIndex,
        strategy: RecommendationStrategy,
        reason: str,
    ) -> List[Candidate]:
        candidates = []
        for book in self.search_books(author, limit):
            if library.contains(book):
                continue
            # Generic author names match unrelated books; keep only actual hits
            if not any_author_matches(book.authors, [author]):
                continue
            candidates.append(Candidate(book=book, strategy=strategy, reason=reason))
        return candidates

    def by_favorite_author(self, authors: List[str], library: LibraryIndex) -> List[Candidate]:
        candidates = []
        for author in authors:
            candidates.extend(self._books_by_author(
                author,
                AUTHOR_QUERY_RESULTS,
                library,
                RecommendationStrategy.AUTHOR,
                REASON_BY_AUTHOR.format(author=author),
            ))
        return candidates

    def by_similar_title(self, preferences: UserPreferences, library: LibraryIndex) -> List[Candidate]:
        candidates = []
        for seed in preferences.highly_rated_books[:SIMILAR_TITLE_SEEDS]:
            words = title_keywords(seed.title)
            if not words:
                continue

            query = f"{' '.join(words)} {seed.author}"
            seed_title = seed.title.lower().strip()
            reason = REASON_SIMILAR_TITLE.format(title=seed.title)
            for book in self.search_books(query, SIMILAR_TITLE_QUERY_RESULTS):
                if library.contains(book) or book.title.lower().strip() == seed_title:
                    continue
                candidates.append(Candidate(
                    book=book,
                    strategy=RecommendationStrategy.SIMILAR_BOOK,
                    reason=reason,
                ))
        return candidates

    def by_similar_author(
        self,
        preferences: UserPreferences,
        searched_authors: List[str],
        library: LibraryIndex,
    ) -> List[Candidate]:
        if len(preferences.favorite_authors) < SIMILAR_AUTHOR_MIN_FAVORITES:
            return []

        # Exact match: the analyzer keys authors case-sensitively
        already_searched = {author.strip() for author in searched_authors}
        candidates = []
        for entry in preferences.reading_patterns.average_rating_by_author[:SIMILAR_AUTHOR_SEEDS]:
            if entry.author.strip() in already_searched:
                continue
            candidates.extend(self._books_by_author(
                entry.author,
                SIMILAR_AUTHOR_QUERY_RESULTS,
                library,
                RecommendationStrategy.SIMILAR_AUTHOR,
                REASON_SIMILAR_AUTHOR,
            ))
        return candidates

    def popular_candidates(self, limit: int) -> List[Candidate]:
        """
        Generic well-known books for users without a library.

        Queries run in order until enough unique books are collected, so
        usually only the first two are issued.
        """
        per_query = math.ceil(limit / 2) + POPULAR_QUERY_PADDING
        seen_ids = set()
        candidates: List[Candidate] = []
        for query in POPULAR_QUERIES:
            if len(candidates) >= limit:
                break
            for book in self.search_books(query, per_query):
                if book.id in seen_ids:
                    continue
                seen_ids.add(book.id)
                candidates.append(Candidate(
                    book=book,
                    strategy=RecommendationStrategy.POPULAR,
                    reason=REASON_POPULAR,
                ))
        return candidates
