"""
restmount — Demo Category Model
=================================

Exposed at /{prefix}/categories (name derived by pluralization).
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from restmount.database import Base


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    color: Mapped[str] = mapped_column(String(7), nullable=False, default="#888888")

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name='{self.name}')>"
