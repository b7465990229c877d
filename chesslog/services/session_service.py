"""
Orchestration of a game between the move log (persistence) and the chess rules (domain).

Every operation reads the log through the GameLog protocol, and returns a new Session inside a SessionResult.
A Session handed in is never modified.
"""

import logging
from dataclasses import replace
from typing import Optional

from chesslog.api.models import JoinGameRequest, OpenGameRequest, PlayRequest
from chesslog.chess.classifier import classify
from chesslog.chess.notation import format_log_for_display, parse_move, to_log_entry
from chesslog.chess.replay import replay
from chesslog.core.exceptions import InputError, InvariantViolationError
from chesslog.core.models import GameIdentifier, Session, SessionResult
from chesslog.core.shared_types import Color, MoveType, ResultKind
from chesslog.db.repository import GameLog

logger = logging.getLogger(__name__)

# The side that moves first on an empty log is the one who opened the game.
OPENER_SIDE = Color.WHITE
JOINER_SIDE = Color.BLACK


class SessionService:
    """Open / join / play / refresh for one client."""

    def __init__(self, log: GameLog) -> None:
        self.log = log

    # -- Operations --
    def open(self, game_id: Optional[str]) -> SessionResult:
        """Open a game (created if it does not exist yet) and play with the side of the opener."""
        try:
            request = OpenGameRequest(game_id=game_id)
        except InputError as exc:
            return SessionResult.error(Session(), str(exc))

        if self.log.create_if_absent(request.game_id):
            logger.info("opened new game %s", request.game_id)
        return self._rebuild(request.game_id, OPENER_SIDE)

    def join(self, game_id: Optional[str]) -> SessionResult:
        """Join an existing game with the remaining side. Nothing happens if the game does not exist."""
        try:
            request = JoinGameRequest(game_id=game_id)
        except InputError as exc:
            return SessionResult.error(Session(), str(exc))

        if not self.log.exists(request.game_id):
            return SessionResult.empty(
                Session(), f"Game {request.game_id} does not exist."
            )
        return self._rebuild(request.game_id, JOINER_SIDE)

    def play(self, session: Session, text: Optional[str]) -> SessionResult:
        """
        Attempt a move
        -----

        1. must be in a game, and it must be your turn
        2. parse the text against the cached board, and classify the move
        3. the cached board must not be behind the log
        4. append the LOG form of the move to the log, and apply it to the board
        """
        if session.game_id is None:
            return SessionResult.error(
                session, "Can't play without a game: try open or join."
            )
        if not session.is_my_turn:
            return SessionResult.empty(session, "Wait for your turn: try refresh.")

        try:
            request = PlayRequest(move=text)
            move = parse_move(request.move, session.board)
        except InputError as exc:
            return SessionResult.error(session, str(exc))

        move_type = classify(session.board, move.piece_move, move.promote_to)
        if move_type == MoveType.ILLEGAL:
            logger.warning("game %s: illegal move %r", session.game_id, request.move)
            return SessionResult.empty(session, f"Illegal move {request.move}.")

        if self.log.entry_count(session.game_id) != session.entries_seen:
            logger.warning("game %s: stale play %r rejected", session.game_id, request.move)
            return SessionResult.empty(session, "Board is out of date: try refresh.")

        entry = to_log_entry(move, session.board)
        if not self.log.append_entry(session.game_id, entry):
            raise InvariantViolationError(
                f"Game {session.game_id} disappeared from the log while playing {entry!r}."
            )
        logger.info("game %s: %s played %s (%s)", session.game_id, session.local_side, entry, move_type)

        played = replace(
            session,
            board=session.board.apply(move.piece_move, move.promote_to),
            entries_seen=session.entries_seen + 1,
        )
        return self._result(move_type, played, self.log.all_entries(session.game_id))

    def refresh(self, session: Session) -> SessionResult:
        """Fold the entries the session has not seen yet onto its board. No-op if there are none."""
        if session.game_id is None:
            return SessionResult.error(
                session, "Can't refresh without a game: try open or join."
            )

        count = self.log.entry_count(session.game_id)
        if count == session.entries_seen:
            return SessionResult.empty(session)
        if count < session.entries_seen:
            raise InvariantViolationError(
                f"Log of game {session.game_id} shrank from {session.entries_seen} to {count} entries."
            )

        entries = self.log.all_entries(session.game_id)
        replayed = replay(entries[session.entries_seen :], start=session.board)
        refreshed = replace(
            session,
            board=replayed.board,
            entries_seen=session.entries_seen + replayed.entries_applied,
        )
        logger.debug("game %s: refreshed %d entries", session.game_id, replayed.entries_applied)
        return self._result(replayed.last_move_type, refreshed, entries)

    def moves(self, session: Session) -> str:
        """The log of the session's game, formatted for display."""
        if session.game_id is None:
            return ""
        return format_log_for_display(self.log.all_entries(session.game_id))

    # -- Internal helpers --
    def _rebuild(self, game_id: GameIdentifier, side: Color) -> SessionResult:
        """Reconstruct the board from scratch by replaying the whole log."""
        entries = self.log.all_entries(game_id)
        replayed = replay(entries)
        session = Session(replayed.board, game_id, side, replayed.entries_applied)
        logger.info("game %s: %s rebuilt from %d entries", game_id, side, len(entries))
        return self._result(replayed.last_move_type, session, entries)

    def _result(
        self, move_type: Optional[MoveType], session: Session, entries: list[str]
    ) -> SessionResult:
        """Translate the classification of the latest move into what the presentation layer gets to see."""
        next_side = session.board.side_to_move
        match move_type:
            case MoveType.CHECKMATE:
                return SessionResult(ResultKind.CHECKMATE, session, entries, side=next_side)
            case MoveType.CHECK:
                return SessionResult(ResultKind.CHECK, session, entries, side=next_side)
            case MoveType.STALEMATE:
                return SessionResult(ResultKind.STALEMATE, session, entries)
            case _:
                return SessionResult(ResultKind.OK, session, entries)
