import logging
from typing import Any, List, Protocol

from pydantic import ValidationError
from sqlalchemy.orm import Session

from shelfwise.models import UserBook
from shelfwise.schemas.library import LibraryBook

logger = logging.getLogger(__name__)


class LibraryRepository(Protocol):
    def get_library(self, user_id: str) -> List[Any]:
        """Return every record in the user's library. Invalid records may be included."""
        ...


class SqlLibraryRepository:
    """Read-only access to the user_books table."""

    def __init__(self, db: Session):
        self.db = db

    def get_library(self, user_id: str) -> List[Any]:
        rows = (
            self.db.query(UserBook)
            .filter(UserBook.user_id == user_id)
            .order_by(UserBook.updated_at.desc())
            .all()
        )

        books: List[Any] = []
        for row in rows:
            try:
                books.append(LibraryBook.model_validate(row, from_attributes=True))
            except ValidationError:
                # Leave it to the preference analyzer to discard
                logger.debug("user_books row %s failed validation", row.id)
                books.append(row)
        return books
