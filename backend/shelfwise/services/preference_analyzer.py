"""
Reduce a user's raw library into a UserPreferences taste profile.

The analyzer never raises: malformed records are dropped and any unexpected
failure yields an empty profile, which callers treat as a brand new user.
"""
import logging
from collections import Counter, defaultdict
from datetime import datetime
from typing import Any, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from shelfwise.schemas.library import BookStatus, LibraryBook
from shelfwise.schemas.recommendation import (
    AuthorCount,
    AuthorRating,
    ReadingPatterns,
    UserPreferences,
)

logger = logging.getLogger(__name__)

MAX_FAVORITE_AUTHORS = 10
MAX_MOST_READ_AUTHORS = 5
MAX_AUTHORS_BY_RATING = 5
MAX_RECENT_BOOKS = 10
MAX_PREFERRED_STATUSES = 3
HIGH_RATING_THRESHOLD = 4
KEYWORD_FAVORITE_AUTHORS = 5


def _coerce_book(record: Any) -> Optional[LibraryBook]:
    """Return a LibraryBook for a valid record, or None if it should be discarded."""
    if isinstance(record, LibraryBook):
        return record
    if record is None:
        return None
    try:
        if isinstance(record, dict):
            return LibraryBook.model_validate(record)
        # ORM rows and other attribute-style objects
        return LibraryBook.model_validate(record, from_attributes=True)
    except ValidationError:
        return None


def _created_at_timestamp(value: Any) -> Optional[float]:
    """Epoch seconds for a created_at value, or None if it cannot be parsed."""
    if isinstance(value, datetime):
        return value.timestamp()
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip()).timestamp()
        except ValueError:
            return None
    return None


def _recent_sort_key(book: LibraryBook) -> Tuple[bool, float]:
    ts = _created_at_timestamp(book.created_at)
    if ts is None:
        return (True, 0.0)
    return (False, -ts)


def analyze_preferences(library: Iterable[Any]) -> UserPreferences:
    """
    Build the preference profile for a library snapshot.

    Records missing id, title, author, status or created_at are discarded.
    Author names are trimmed and matched case-sensitively. Ties in every
    ranking keep first-seen order.
    """
    try:
        valid_books: List[LibraryBook] = []
        for record in library:
            book = _coerce_book(record)
            if book is not None:
                valid_books.append(book)

        read_books = [b for b in valid_books if b.status == BookStatus.READ]
        rated_books = [b for b in read_books if b.rating is not None and b.rating > 0]
        highly_rated_books = [b for b in rated_books if b.rating >= HIGH_RATING_THRESHOLD]

        recent_books = sorted(valid_books, key=_recent_sort_key)[:MAX_RECENT_BOOKS]

        author_counts: Counter = Counter()
        for book in read_books:
            author = book.author.strip()
            if author:
                author_counts[author] += 1
        # Counter.most_common keeps insertion order for equal counts
        ranked_authors = author_counts.most_common()
        favorite_authors = [author for author, _ in ranked_authors[:MAX_FAVORITE_AUTHORS]]
        most_read_authors = [
            AuthorCount(author=author, count=count)
            for author, count in ranked_authors[:MAX_MOST_READ_AUTHORS]
        ]

        rating_totals = defaultdict(lambda: [0, 0])
        for book in rated_books:
            author = book.author.strip()
            if author:
                rating_totals[author][0] += book.rating
                rating_totals[author][1] += 1
        average_rating_by_author = sorted(
            (AuthorRating(author=author, rating=total / count) for author, (total, count) in rating_totals.items()),
            key=lambda entry: entry.rating,
            reverse=True,
        )[:MAX_AUTHORS_BY_RATING]

        average_rating = (
            sum(b.rating for b in rated_books) / len(rated_books) if rated_books else 0.0
        )

        status_counts = Counter(b.status for b in valid_books)
        preferred_status = [status for status, _ in status_counts.most_common(MAX_PREFERRED_STATUSES)]

        return UserPreferences(
            favorite_authors=favorite_authors,
            average_rating=average_rating,
            total_books_read=len(read_books),
            preferred_status=preferred_status,
            reading_patterns=ReadingPatterns(
                most_read_authors=most_read_authors,
                average_rating_by_author=average_rating_by_author,
            ),
            user_books=valid_books,
            highly_rated_books=highly_rated_books,
            recent_books=recent_books,
        )
    except Exception:
        logger.exception("Error analyzing user preferences")
        return UserPreferences()


def get_search_keywords(preferences: UserPreferences) -> List[str]:
    """Top favorite authors followed by any other author averaging 4+ stars."""
    keywords = list(preferences.favorite_authors[:KEYWORD_FAVORITE_AUTHORS])
    for entry in preferences.reading_patterns.average_rating_by_author:
        if entry.rating >= HIGH_RATING_THRESHOLD and entry.author not in keywords:
            keywords.append(entry.author)
    return keywords
