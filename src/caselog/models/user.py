# src/caselog/models/user.py
"""SQLAlchemy model for forum members."""

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from caselog.db.session import Base


class User(Base):
    """Forum member who can author content, be sanctioned, or moderate."""

    __tablename__ = "user"

    user_id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    is_moderator: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
