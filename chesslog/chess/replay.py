"""
Rebuilding a Board from the persisted log.

The log is the only source of truth. A Board is a left fold of `apply_log_entry` over the log, starting from
the initial position. Applying only the unseen tail of the log to a cached Board gives the same result.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from chesslog.chess.board import Board
from chesslog.chess.classifier import classify
from chesslog.chess.notation import parse_move
from chesslog.core.exceptions import InputError, InvariantViolationError
from chesslog.core.shared_types import MoveType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Replay:
    board: Board
    last_move_type: Optional[MoveType]
    entries_applied: int


def apply_log_entry(board: Board, entry: str) -> tuple[Board, MoveType]:
    """
    Pure step function of the replay: classify the entry on `board`, then apply it.
    ---

    An entry that no longer parses or is illegal on the Board it is replayed on means the log and the engine
    disagree. That is never a user error, so it is raised as an invariant violation.
    """
    try:
        move = parse_move(entry, board)
    except InputError as exc:
        raise InvariantViolationError(
            f"Log entry {entry!r} does not parse against the replayed board: {exc}"
        ) from exc

    move_type = classify(board, move.piece_move, move.promote_to)
    if move_type == MoveType.ILLEGAL:
        raise InvariantViolationError(
            f"Log entry {entry!r} is illegal on the replayed board:\n{board}"
        )
    return board.apply(move.piece_move, move.promote_to), move_type


def replay(entries: Iterable[str], start: Optional[Board] = None) -> Replay:
    """Fold `entries` in log order onto `start` (the initial position if omitted)."""
    board = start if start is not None else Board.new()
    last_move_type: Optional[MoveType] = None
    applied = 0
    for entry in entries:
        board, last_move_type = apply_log_entry(board, entry)
        applied += 1
        logger.debug("replayed %r as %s", entry, last_move_type)
    return Replay(board, last_move_type, applied)
