from pydantic import BaseModel, ConfigDict
from typing import Optional, List, Literal


SearchSource = Literal["google", "openlibrary"]


class SearchResult(BaseModel):
    """A catalog hit from one of the book search providers."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    authors: List[str]
    description: Optional[str] = None
    cover_url: Optional[str] = None
    published_date: Optional[str] = None
    page_count: Optional[int] = None
    categories: Optional[List[str]] = None
    language: Optional[str] = None
    source: SearchSource
    isbn: Optional[str] = None
