"""Requests and Response models"""

from typing import Any, Optional, Self

from pydantic import BaseModel, field_validator

from chesslog.chess.notation import format_log_for_display
from chesslog.core.exceptions import InvalidRequestError
from chesslog.core.models import SessionResult
from chesslog.core.shared_types import Color, ResultKind


# --- REQUEST MODELS ---
class GameRequest(BaseModel):
    """Anything addressed to one persisted game."""

    game_id: str

    @field_validator("game_id", mode="before")
    @classmethod
    def validate_game_id(cls, value: Any) -> str:
        """A game identifier is a non-empty string without whitespace."""
        if value is None:
            raise InvalidRequestError("Missing game name.")
        if not isinstance(value, str) or not value.strip():
            raise InvalidRequestError("Game name cannot be blank.")
        if any(character.isspace() for character in value):
            raise InvalidRequestError(
                f"Game name {value!r} cannot contain whitespace."
            )
        return value


class OpenGameRequest(GameRequest):
    pass


class JoinGameRequest(GameRequest):
    pass


class PlayRequest(BaseModel):
    move: str

    @field_validator("move", mode="before")
    @classmethod
    def validate_move(cls, value: Any) -> str:
        if value is None or not isinstance(value, str) or not value.strip():
            raise InvalidRequestError("Missing move.")
        return value.strip()


# --- RESPONSE MODELS ---
class SessionResponse(BaseModel):
    """What a presentation layer needs to draw the game after an operation."""

    kind: ResultKind
    game_id: Optional[str]
    local_side: Optional[Color]
    side_to_move: Color
    board: str
    side: Optional[Color]
    log: list[str]
    moves: str
    message: Optional[str]

    @classmethod
    def from_result(cls, result: SessionResult) -> Self:
        session = result.session
        return cls(
            kind=result.kind,
            game_id=session.game_id,
            local_side=session.local_side,
            side_to_move=session.board.side_to_move,
            board=session.board.to_fen(),
            side=result.side,
            log=result.log,
            moves=format_log_for_display(result.log),
            message=result.message,
        )
