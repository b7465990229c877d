"""
Type definitions used across layers
"""

from enum import StrEnum


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"

    @property
    def opponent(self) -> "Color":
        return Color.BLACK if self == Color.WHITE else Color.WHITE


class PieceType(StrEnum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"


class MoveType(StrEnum):
    """Effect of a single move. Produced by the classifier, never persisted."""

    ILLEGAL = "illegal"
    CHECKMATE = "checkmate"
    CHECK = "check"
    STALEMATE = "stalemate"
    CASTLE = "castle"
    PROMOTION = "promotion"
    ENPASSANT = "en passant"
    CAPTURE = "capture"
    REGULAR = "regular"


class ResultKind(StrEnum):
    """Tagged result handed to the presentation layer after every Session operation."""

    OK = "ok"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    EMPTY = "empty"
    ERROR = "error"
