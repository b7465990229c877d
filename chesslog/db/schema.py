"""Database tables / schema"""

from datetime import datetime, timezone

from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class DBGame(Base):
    __tablename__ = "games"
    id: Mapped[str] = mapped_column(primary_key=True)
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    entries: Mapped[list["DBLogEntry"]] = relationship(
        back_populates="game", order_by="DBLogEntry.ply"
    )


class DBLogEntry(Base):
    """One row per ply. (game_id, ply) is unique: two clients can never both write the same ply."""

    __tablename__ = "log_entries"
    __table_args__ = (UniqueConstraint("game_id", "ply"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    game_id: Mapped[str] = mapped_column(ForeignKey("games.id"), index=True)
    ply: Mapped[int]
    entry: Mapped[str]
    created_at: Mapped[datetime] = mapped_column(default=utc_now)
    game: Mapped[DBGame] = relationship(back_populates="entries")
