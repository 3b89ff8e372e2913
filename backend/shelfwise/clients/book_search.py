"""
Book search provider backed by Google Books and Open Library.

Both catalogs are queried for each search; a source that fails is logged and
skipped so the other one can still answer. Results are merged Google first and
deduplicated by title + first author.

The catalogs are queried one after the other and SEARCH_TIMEOUT_SECONDS applies
to each request, so a single search can take up to twice that long.
"""
import logging
import math
import re
from typing import Any, Dict, List, Literal, Optional, Protocol

import requests

from shelfwise.core.config import Settings, settings as default_settings
from shelfwise.schemas.search import SearchResult

logger = logging.getLogger(__name__)

UNKNOWN_AUTHOR = "Unknown author"
OPEN_LIBRARY_COVER_URL = "https://covers.openlibrary.org/b/{kind}/{value}-L.jpg"
OPEN_LIBRARY_MAX_CATEGORIES = 5

_ZOOM_PARAM = re.compile(r"&zoom=\d+")

# Open Library filters on MARC (ISO 639-2) codes rather than Google's two-letter ones
_OPEN_LIBRARY_LANGUAGES = {
    "pt": "por",
    "en": "eng",
    "es": "spa",
    "fr": "fre",
    "de": "ger",
    "it": "ita",
}


class BookSearchProvider(Protocol):
    def search(self, query: str, limit: int) -> List[SearchResult]:
        """Return up to `limit` results for a free-text query; [] when nothing matches."""
        ...


class BookSearchError(Exception):
    """Raised when no catalog could be queried at all."""
    pass


def _best_cover_url(image_links: Optional[Dict[str, str]]) -> Optional[str]:
    if not image_links:
        return None
    url = (
        image_links.get("large")
        or image_links.get("medium")
        or image_links.get("thumbnail")
        or image_links.get("smallThumbnail")
    )
    if not url:
        return None
    return _ZOOM_PARAM.sub("", url).replace("http://", "https://")


def _extract_isbn(volume_info: Dict[str, Any]) -> Optional[str]:
    for ident in volume_info.get("industryIdentifiers") or []:
        if ident.get("type") in ("ISBN_13", "ISBN_10"):
            return ident.get("identifier")
    return None


def map_google_volume(volume: Dict[str, Any]) -> Optional[SearchResult]:
    """Convert a Google Books volume to a SearchResult, or None if it has no title."""
    info = volume.get("volumeInfo") or {}
    title = info.get("title")
    if not title or not volume.get("id"):
        return None

    return SearchResult(
        id=volume["id"],
        title=title,
        authors=info.get("authors") or [UNKNOWN_AUTHOR],
        description=info.get("description"),
        cover_url=_best_cover_url(info.get("imageLinks")),
        published_date=info.get("publishedDate"),
        page_count=info.get("pageCount"),
        categories=info.get("categories"),
        language=info.get("language"),
        source="google",
        isbn=_extract_isbn(info),
    )


def map_open_library_doc(doc: Dict[str, Any]) -> Optional[SearchResult]:
    """Convert an Open Library search doc to a SearchResult, or None if it has no title."""
    title = doc.get("title")
    if not title or not doc.get("key"):
        return None

    cover_url = None
    if doc.get("cover_i"):
        cover_url = OPEN_LIBRARY_COVER_URL.format(kind="id", value=doc["cover_i"])
    elif doc.get("cover_edition_key"):
        cover_url = OPEN_LIBRARY_COVER_URL.format(kind="olid", value=doc["cover_edition_key"])

    first_year = doc.get("first_publish_year")
    subjects = doc.get("subject")
    languages = doc.get("language") or []
    isbns = doc.get("isbn") or []

    return SearchResult(
        id=doc["key"],
        title=title,
        authors=doc.get("author_name") or [UNKNOWN_AUTHOR],
        cover_url=cover_url,
        published_date=str(first_year) if first_year else None,
        page_count=doc.get("number_of_pages_median"),
        categories=subjects[:OPEN_LIBRARY_MAX_CATEGORIES] if subjects else None,
        language=languages[0] if languages else None,
        source="openlibrary",
        isbn=isbns[0] if isbns else None,
    )


def remove_duplicates(results: List[SearchResult]) -> List[SearchResult]:
    """Drop results sharing a lowercased title + first author, keeping the first one."""
    seen = set()
    unique: List[SearchResult] = []
    for result in results:
        if not result.title or not result.authors:
            continue
        normalized_title = result.title.lower().strip()
        normalized_author = (result.authors[0] or "").lower().strip()
        key = f"{normalized_title}|{normalized_author}"
        if normalized_title and key not in seen:
            seen.add(key)
            unique.append(result)
    return unique


class BookSearchClient:
    """requests-based search provider over Google Books and Open Library."""

    def __init__(self, session: Optional[requests.Session] = None, config: Optional[Settings] = None):
        self.session = session or requests.Session()
        self.config = config or default_settings

    def search(self, query: str, limit: int = 20) -> List[SearchResult]:
        if not query.strip():
            return []

        per_source = math.ceil(limit / 2)
        results: List[SearchResult] = []
        failures = 0

        for name, fetch in (("Google Books", self.search_google_books), ("Open Library", self.search_open_library)):
            try:
                results.extend(fetch(query, per_source))
            except Exception as e:
                failures += 1
                logger.warning("%s search failed for '%s': %s", name, query, e)

        if failures == 2:
            raise BookSearchError(f"All book search sources failed for '{query}'")

        return remove_duplicates(results)[:limit]

    def search_from_source(
        self,
        source: Literal["google", "openlibrary"],
        query: str,
        limit: int = 20,
    ) -> List[SearchResult]:
        """Query a single catalog, without merging or deduplication."""
        if source == "google":
            return self.search_google_books(query, limit)
        return self.search_open_library(query, limit)

    def search_google_books(self, query: str, limit: int) -> List[SearchResult]:
        params: Dict[str, Any] = {
            "q": query,
            "maxResults": limit,
        }
        if self.config.SEARCH_LANG_RESTRICT:
            params["langRestrict"] = self.config.SEARCH_LANG_RESTRICT
        if self.config.GOOGLE_BOOKS_API_KEY:
            params["key"] = self.config.GOOGLE_BOOKS_API_KEY

        resp = self.session.get(
            self.config.GOOGLE_BOOKS_BASE_URL,
            params=params,
            timeout=self.config.SEARCH_TIMEOUT_SECONDS,
        )
        resp.raise_for_status()
        items = resp.json().get("items") or []

        results = []
        for item in items:
            mapped = map_google_volume(item)
            if mapped is not None:
                results.append(mapped)
        return results

    def search_open_library(self, query: str, limit: int) -> List[SearchResult]:
        params: Dict[str, Any] = {
            "q": query,
            "limit": limit,
        }
        if self.config.SEARCH_LANG_RESTRICT:
            params["language"] = _open_library_language(self.config.SEARCH_LANG_RESTRICT)

        resp = self.session.get(
            self.config.OPEN_LIBRARY_BASE_URL,
            params=params,
            timeout=self.config.SEARCH_TIMEOUT_SECONDS,
        )
        resp.raise_for_status()
        docs = resp.json().get("docs") or []

        results = []
        for doc in docs:
            mapped = map_open_library_doc(doc)
            if mapped is not None:
                results.append(mapped)
        return results



def _open_library_language(code: str) -> str:
    return _OPEN_LIBRARY_LANGUAGES.get(code, code)
