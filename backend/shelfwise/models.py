from sqlalchemy import Column, String, Integer, Text, DateTime, Enum as SQLEnum, Index
import uuid
from datetime import datetime
from shelfwise.database import Base
from shelfwise.schemas.library import BookStatus


class UserBook(Base):
    """
    One entry in a user's personal library.

    user_id is the Supabase auth user id (JWT "sub"); rows are only ever read
    here, the mobile app owns writes.
    """
    __tablename__ = "user_books"
    __table_args__ = (
        Index("ix_user_books_user_id_updated_at", "user_id", "updated_at"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, nullable=False, index=True)
    title = Column(String, nullable=False)
    author = Column(String, nullable=False)
    status = Column(
        SQLEnum(
            BookStatus,
            name="bookstatus",
            values_callable=lambda enum: [e.value for e in enum],
        ),
        nullable=False,
        default=BookStatus.WANT_TO_READ,
    )
    rating = Column(Integer, nullable=True)
    cover_url = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    started_at = Column(DateTime, nullable=True)
    finished_at = Column(DateTime, nullable=True)
    display_order = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
