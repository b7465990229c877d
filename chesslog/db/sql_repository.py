"""Implementation of GameLog using SQLAlchemy"""

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from chesslog.core.exceptions import StoreAccessError
from chesslog.core.models import GameIdentifier
from chesslog.db.schema import DBGame, DBLogEntry

logger = logging.getLogger(__name__)


class SQLGameLog:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def exists(self, game_id: GameIdentifier) -> bool:
        try:
            return self._fetch_game(game_id) is not None
        except SQLAlchemyError as exc:
            raise self._access_error("exists", game_id, exc) from exc

    def create_if_absent(self, game_id: GameIdentifier) -> bool:
        try:
            if self._fetch_game(game_id) is not None:
                return False
            self.db.add(DBGame(id=game_id))
            self.db.commit()
            logger.info("created game %s", game_id)
            return True
        except SQLAlchemyError as exc:
            raise self._access_error("create_if_absent", game_id, exc) from exc

    def append_entry(self, game_id: GameIdentifier, entry: str) -> bool:
        try:
            if self._fetch_game(game_id) is None:
                return False
            ply = self._count(game_id)
            self.db.add(DBLogEntry(game_id=game_id, ply=ply, entry=entry))
            self.db.commit()
            logger.debug("game %s ply %d: %s", game_id, ply, entry)
            return True
        except SQLAlchemyError as exc:
            raise self._access_error("append_entry", game_id, exc) from exc

    def all_entries(self, game_id: GameIdentifier) -> list[str]:
        try:
            query = (
                select(DBLogEntry.entry)
                .where(DBLogEntry.game_id == game_id)
                .order_by(DBLogEntry.ply)
            )
            return list(self.db.scalars(query))
        except SQLAlchemyError as exc:
            raise self._access_error("all_entries", game_id, exc) from exc

    def last_entry(self, game_id: GameIdentifier) -> Optional[str]:
        try:
            query = (
                select(DBLogEntry.entry)
                .where(DBLogEntry.game_id == game_id)
                .order_by(DBLogEntry.ply.desc())
                .limit(1)
            )
            return self.db.scalar(query)
        except SQLAlchemyError as exc:
            raise self._access_error("last_entry", game_id, exc) from exc

    def entry_count(self, game_id: GameIdentifier) -> int:
        try:
            return self._count(game_id)
        except SQLAlchemyError as exc:
            raise self._access_error("entry_count", game_id, exc) from exc

    # -- Internal helpers --
    def _fetch_game(self, game_id: GameIdentifier) -> DBGame | None:
        query = select(DBGame).where(DBGame.id == game_id)
        return self.db.scalar(query)

    def _count(self, game_id: GameIdentifier) -> int:
        query = select(func.count()).where(DBLogEntry.game_id == game_id)
        return self.db.scalar(query) or 0

    def _access_error(
        self, operation: str, game_id: GameIdentifier, exc: SQLAlchemyError
    ) -> StoreAccessError:
        """Leave the session usable for a retry, and hand the caller one error type."""
        self.db.rollback()
        logger.error("store failure during %s(%s): %s", operation, game_id, exc)
        return StoreAccessError(f"Could not {operation} for game {game_id!r}: {exc}")
