from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Union, Any
from datetime import datetime
from uuid import UUID
import enum
import math


class BookStatus(str, enum.Enum):
    WANT_TO_READ = "want-to-read"
    READING = "reading"
    READ = "read"
    REREADING = "rereading"


class LibraryBook(BaseModel):
    """A book in a user's library, as read from the library store."""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    author: str = Field(min_length=1)
    status: BookStatus
    rating: Optional[int] = None
    # Raw strings are kept as-is: an unparseable date sorts last rather than dropping the book
    created_at: Union[datetime, str]
    cover_url: Optional[str] = None
    notes: Optional[str] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> Any:
        if isinstance(value, (int, UUID)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("rating", mode="before")
    @classmethod
    def _drop_unusable_rating(cls, value: Any) -> Optional[int]:
        # Only whole numbers 1-5 count as a rating; anything else means "unrated"
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        if not math.isfinite(value) or value != int(value) or not 1 <= value <= 5:
            return None
        return int(value)

    @field_validator("created_at")
    @classmethod
    def _require_created_at(cls, value: Union[datetime, str]) -> Union[datetime, str]:
        if isinstance(value, str) and not value.strip():
            raise ValueError("created_at must not be empty")
        return value
