"""
Boundary layer data model(s).

These objects are handed out by the Session service to whatever presents the game (GUI, console, API).
The presentation layer only ever sees a tagged SessionResult and its payload.
"""

from dataclasses import dataclass, field
from typing import Optional, Self

from chesslog.chess.board import Board
from chesslog.core.shared_types import Color, ResultKind

# Type alias to make the models easier to read
GameIdentifier = str


@dataclass(frozen=True)
class Session:
    """
    Client-local view of one game: a cache of the persisted log, never the source of truth.

    `entries_seen` counts the log entries already folded into `board`.
    """

    board: Board = field(default_factory=Board.new)
    game_id: Optional[GameIdentifier] = None
    local_side: Optional[Color] = None
    entries_seen: int = 0

    @property
    def is_my_turn(self) -> bool:
        return self.local_side is not None and self.board.side_to_move == self.local_side


@dataclass(frozen=True)
class SessionResult:
    """
    Outcome of one Session operation.
    * OK / CHECK / CHECKMATE / STALEMATE carry the new session.
    * CHECK: `side` is the side in check. CHECKMATE: `side` is the side that lost.
    * EMPTY: nothing happened (rejected or no-op); `session` is the unchanged input.
    * ERROR: malformed input, `message` says why; `session` is the unchanged input.
    """

    kind: ResultKind
    session: Session
    log: list[str] = field(default_factory=list)
    side: Optional[Color] = None
    message: Optional[str] = None

    @classmethod
    def empty(cls, session: Session, message: Optional[str] = None) -> Self:
        return cls(ResultKind.EMPTY, session, message=message)

    @classmethod
    def error(cls, session: Session, message: str) -> Self:
        return cls(ResultKind.ERROR, session, message=message)
