from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from api.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Stored trimmed and lowercased
    username = Column(String(100), unique=True, index=True, nullable=False)

    hashed_password = Column(String(255), nullable=False)

    created_at = Column(DateTime, default=_utcnow, nullable=False)

    watchlist = relationship("WatchlistEntry", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username})>"


class WatchlistEntry(Base):
    __tablename__ = "watchlists"
    __table_args__ = (UniqueConstraint("user_id", "anime_id", name="uix_watchlist_user_anime"),)

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    anime_id = Column(Integer, nullable=False, index=True)

    added_at = Column(DateTime, default=_utcnow, nullable=False)

    user = relationship("User", back_populates="watchlist")

    def __repr__(self):
        return f"<WatchlistEntry(user_id={self.user_id}, anime_id={self.anime_id})>"
