"""Defines the chess pieces as immutable values."""

from dataclasses import dataclass, replace
from typing import Self

from chesslog.core.shared_types import Color, PieceType

LETTER_TO_PIECE: dict[str, PieceType] = {
    "p": PieceType.PAWN,
    "n": PieceType.KNIGHT,
    "b": PieceType.BISHOP,
    "r": PieceType.ROOK,
    "q": PieceType.QUEEN,
    "k": PieceType.KING,
}

PIECE_TO_LETTER: dict[PieceType, str] = {
    value: key for key, value in LETTER_TO_PIECE.items()
}

# only these kinds need to remember whether they moved (castling / double pawn push)
TRACKS_MOVEMENT: frozenset[PieceType] = frozenset(
    {PieceType.PAWN, PieceType.ROOK, PieceType.KING}
)


@dataclass(frozen=True)
class Piece:
    type: PieceType
    color: Color
    has_moved: bool = False
    move_counter: int = 0

    @classmethod
    def from_letter(cls, character: str) -> Self:
        # lower case: Black pieces, upper case: White pieces
        color = Color.WHITE if character.isupper() else Color.BLACK
        piece_type = LETTER_TO_PIECE[character.lower()]
        return cls(piece_type, color)

    def to_letter(self) -> str:
        return (
            PIECE_TO_LETTER[self.type].upper()
            if self.color == Color.WHITE
            else PIECE_TO_LETTER[self.type]
        )

    def after_move(self) -> Self:
        """The value this piece has once it stood on a new square. Pawns additionally count their moves."""
        if self.type not in TRACKS_MOVEMENT:
            return self
        counter = self.move_counter + 1 if self.type == PieceType.PAWN else 0
        return replace(self, has_moved=True, move_counter=counter)

    def promote_to(self, new_type: PieceType) -> Self:
        """A promoted piece is a fresh piece that already moved (a promoted rook cannot castle)."""
        return type(self)(new_type, self.color, has_moved=True)

    def __str__(self) -> str:
        return self.to_letter()
