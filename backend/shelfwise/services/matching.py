"""Normalization and matching helpers shared by candidate generation and scoring."""
from typing import Iterable, Sequence

from shelfwise.schemas.library import LibraryBook
from shelfwise.schemas.search import SearchResult


def normalize_title(title: str) -> str:
    """Lowercase, trim and collapse internal whitespace."""
    return " ".join((title or "").lower().split())


def normalize_author(author: str) -> str:
    return (author or "").lower().strip()


def any_author_matches(book_authors: Sequence[str], known_authors: Iterable[str]) -> bool:
    """True if any book author and any known author contain one another, ignoring case."""
    known = [normalize_author(author) for author in known_authors]
    known = [k for k in known if k]
    for book_author in book_authors or []:
        candidate = normalize_author(book_author)
        if not candidate:
            continue
        if any(candidate in k or k in candidate for k in known):
            return True
    return False


class LibraryIndex:
    """Lookup sets answering "has the user already added this book?"."""

    def __init__(self, books: Iterable[LibraryBook]):
        self.titles = set()
        self.title_author_pairs = set()
        for book in books:
            title = normalize_title(book.title)
            self.titles.add(title)
            self.title_author_pairs.add((title, normalize_author(book.author)))

    def contains(self, result: SearchResult) -> bool:
        title = normalize_title(result.title)
        if title in self.titles:
            return True
        if result.authors:
            return (title, normalize_author(result.authors[0])) in self.title_author_pairs
        return False
