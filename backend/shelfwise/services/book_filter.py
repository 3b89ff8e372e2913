"""
Heuristic classifier separating real books from catalog noise.

Search providers return papers, theses, journal issues and product catalogs
alongside books. The rules favor precision: some ambiguous non-fiction is
rejected. Keywords cover English and Portuguese only.
"""
import re
from typing import Any, List, Mapping, Optional, Sequence, TypeVar

T = TypeVar("T")

NON_BOOK_KEYWORDS = [
    "trabalho",
    "paper",
    "thesis",
    "dissertação",
    "dissertacao",
    "tese",
    "artigo",
    "article",
    "journal",
    "revista",
    "proceedings",
    "conference",
    "workshop",
    "abstract",
    "resumo",
    "monografia",
    "relatório",
    "relatorio",
    "report",
    "manual técnico",
    "manual tecnico",
    "technical manual",
    "guia rápido",
    "quick guide",
    "folheto",
    "pamphlet",
    "brochura",
    "catálogo",
    "catalogo",
    "catalog",
]

# Only these can veto a result on their own
STRONG_NON_BOOK_KEYWORDS = frozenset([
    "trabalho",
    "paper",
    "thesis",
    "dissertação",
    "dissertacao",
    "tese",
    "artigo",
    "article",
])

BOOK_KEYWORDS = [
    "romance",
    "novel",
    "ficção",
    "ficcao",
    "fiction",
    "história",
    "historia",
    "history",
    "biografia",
    "biography",
    "autobiografia",
    "autobiography",
    "poesia",
    "poetry",
    "poema",
    "poem",
    "contos",
    "short stories",
    "crônicas",
    "cronicas",
    "chronicles",
    "ensaio",
    "essay",
    "livro",
    "book",
]

PAPER_TITLE_PATTERNS = [
    re.compile(r"^\d{4}"),  # leading year
    re.compile(r"^\[.*\]"),
    re.compile(r"^\(.*\)"),
    re.compile(r"vol\.\s*\d+", re.IGNORECASE),
    re.compile(r"volume\s*\d+", re.IGNORECASE),
    re.compile(r"issue\s*\d+", re.IGNORECASE),
    re.compile(r"n\.\s*\d+", re.IGNORECASE),
    re.compile(r"pp\.\s*\d+", re.IGNORECASE),
    re.compile(r"pages?\s*\d+", re.IGNORECASE),
]

DESCRIPTION_PREFIX_CHARS = 200
MIN_TITLE_WORDS = 2


def _field(candidate: Any, name: str) -> Any:
    if isinstance(candidate, Mapping):
        return candidate.get(name)
    return getattr(candidate, name, None)


def _is_strong_non_book_indicator(keyword: str, title: str, description: str) -> bool:
    if keyword not in STRONG_NON_BOOK_KEYWORDS:
        return False
    return keyword in title or keyword in description[:DESCRIPTION_PREFIX_CHARS]


def _looks_like_paper_or_thesis(title: str) -> bool:
    return any(pattern.search(title) for pattern in PAPER_TITLE_PATTERNS)


def is_book(candidate: Any) -> bool:
    """
    Return True if a search result looks like a book.

    Works on SearchResult objects and on plain dicts with title, description
    and categories. Checks, in order: a strong non-book keyword in the title or
    opening of the description (reject), any book keyword (accept), a one-word
    title (reject), an academic-looking title (reject), otherwise accept.
    """
    title = (_field(candidate, "title") or "").lower()
    description = (_field(candidate, "description") or "").lower()
    categories: Optional[Sequence[str]] = _field(candidate, "categories") or []
    full_text = f"{title} {description} {' '.join(categories).lower()}"

    for keyword in NON_BOOK_KEYWORDS:
        if keyword in full_text and _is_strong_non_book_indicator(keyword, title, description):
            return False

    for keyword in BOOK_KEYWORDS:
        if keyword in full_text:
            return True

    if len(title.split(" ")) < MIN_TITLE_WORDS:
        return False

    if _looks_like_paper_or_thesis(title):
        return False

    return True


def filter_books(candidates: Sequence[T]) -> List[T]:
    """Keep only the candidates classified as books, preserving order."""
    return [candidate for candidate in candidates if is_book(candidate)]
