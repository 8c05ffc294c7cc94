"""
restmount — Demo Note Model
=============================

What:  ORM model behind the demo `/notes` collection.
Who:   Registered by restmount.main.create_app(); also used by the test suite.

Table Design:
    - Integer primary key: identities in URLs are base-10 integers
    - created_at: assigned by Python on insert, UTC
    - category_id: plain integer column; relationships are not serialized
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from restmount.database import Base


class Note(Base):
    """A short text note. Exposed at /{prefix}/notes."""

    __tablename__ = "notes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    title: Mapped[str] = mapped_column(String(200), nullable=False)

    body: Mapped[str] = mapped_column(Text, nullable=False, default="")

    pinned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    category_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, default=None)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, title='{self.title}')>"
