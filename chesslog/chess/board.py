"""The Board: an immutable position (64 optional pieces) plus the side to move."""

from dataclasses import dataclass, field
from typing import Iterator, Optional, Self

from chesslog.chess.moves import (
    HOME_ROW,
    PieceMove,
    castling_rook_move,
    en_passant_victim_square,
    is_castling_shape,
    is_en_passant_shape,
    is_pawn_move_to_promotion_row,
)
from chesslog.chess.pieces import LETTER_TO_PIECE, Piece
from chesslog.chess.square import BOARD_SIZE, Square
from chesslog.core.exceptions import InvariantViolationError
from chesslog.core.shared_types import Color, PieceType

Cells = tuple[Optional[Piece], ...]

STARTING_PLACEMENT = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"
DEFAULT_PROMOTION = PieceType.QUEEN

# Squares where a piece that tracks its movement counts as "not moved yet"
_PAWN_START_ROW: dict[Color, int] = {Color.WHITE: 1, Color.BLACK: 6}
_KING_HOME_COLUMN = 4
_ROOK_HOME_COLUMNS = (0, 7)


def _empty_cells() -> Cells:
    return (None,) * (BOARD_SIZE * BOARD_SIZE)


def _is_on_home_square(piece: Piece, square: Square) -> bool:
    """Used to infer moved-state for positions that were not reached by playing moves."""
    match piece.type:
        case PieceType.PAWN:
            return square.row == _PAWN_START_ROW[piece.color]
        case PieceType.KING:
            return (
                square.row == HOME_ROW[piece.color]
                and square.column == _KING_HOME_COLUMN
            )
        case PieceType.ROOK:
            return (
                square.row == HOME_ROW[piece.color]
                and square.column in _ROOK_HOME_COLUMNS
            )
        case _:
            return True


@dataclass(frozen=True)
class Board:
    cells: Cells = field(default_factory=_empty_cells)
    side_to_move: Color = Color.WHITE
    last_move: Optional[PieceMove] = None

    def __post_init__(self) -> None:
        if len(self.cells) != BOARD_SIZE * BOARD_SIZE:
            raise InvariantViolationError(
                f"A board holds {BOARD_SIZE * BOARD_SIZE} cells, got {len(self.cells)}."
            )

    @classmethod
    def new(cls) -> Self:
        """Standard starting position, White to move."""
        return cls.from_fen(STARTING_PLACEMENT)

    @classmethod
    def from_fen(cls, placement: str, side_to_move: Color = Color.WHITE) -> Self:
        """Construct a board from the piece placement part of a FEN string.

        ex. standard starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        means:
        * black pieces are on the 8th rank, starting with a rook on a8, knight on b8, etc.
        * pawns cover 7th rank entirely
        * ranks 6 through 3 have 8 consecutive empty squares
        * rank 2 are the white pawns (capital letters)
        * 1st rank are the white pieces.

        NOTE: FEN does not say which pieces moved. Pawns, kings and rooks that are not on their
        starting squares are marked as moved, all others count as unmoved.
        """
        cells: list[Optional[Piece]] = list(_empty_cells())
        fen_by_rows = placement.split("/")
        if len(fen_by_rows) != BOARD_SIZE:
            raise ValueError(f"Expected {BOARD_SIZE} rows in {placement!r}")
        for row_idx, fen_one_row in enumerate(fen_by_rows):
            # FEN string is read from top row (8th rank) to bottom row (1st rank)
            row = BOARD_SIZE - 1 - row_idx
            column = 0
            for character in fen_one_row:
                if character.isdigit():
                    column += int(character)
                    continue
                square = Square(column, row)
                if character.lower() not in LETTER_TO_PIECE:
                    raise ValueError(f"Unknown piece {character!r} in {placement!r}")
                piece = Piece.from_letter(character)
                if not _is_on_home_square(piece, square):
                    piece = Piece(piece.type, piece.color, has_moved=True)
                cells[square.to_index()] = piece
                column += 1
        return cls(tuple(cells), side_to_move)

    def to_fen(self) -> str:
        """Rows are separated by slashes in the FEN piece placement."""
        return "/".join(
            self._row_to_fen(row) for row in range(BOARD_SIZE - 1, -1, -1)
        )

    def _row_to_fen(self, row: int) -> str:
        fen_characters: list[str] = []
        empty_count = 0
        for column in range(BOARD_SIZE):
            piece = self.piece_at(Square(column, row))
            if piece is None:
                empty_count += 1
                continue
            if empty_count > 0:
                fen_characters.append(str(empty_count))
                empty_count = 0
            fen_characters.append(piece.to_letter())
        if empty_count > 0:
            fen_characters.append(str(empty_count))
        return "".join(fen_characters)

    # --- LOOKUPS ---
    def piece_at(self, square: Square) -> Optional[Piece]:
        return self.cells[square.to_index()]

    def has_piece(self, square: Square) -> bool:
        return self.piece_at(square) is not None

    def pieces(self, color: Color) -> Iterator[tuple[Square, Piece]]:
        for index, piece in enumerate(self.cells):
            if piece is not None and piece.color == color:
                yield Square.from_index(index), piece

    def king_square(self, color: Color) -> Square:
        """Every reachable board has exactly one king per side. Absence is a defect, not a game state."""
        kings = [
            square for square, piece in self.pieces(color) if piece.type == PieceType.KING
        ]
        if len(kings) != 1:
            raise InvariantViolationError(
                f"Expected exactly one {color} king, found {len(kings)} on {self.to_fen()}"
            )
        return kings[0]

    def king(self, color: Color) -> Piece:
        king = self.piece_at(self.king_square(color))
        assert king is not None
        return king

    # --- UPDATES (always a new Board) ---
    def apply(
        self, move: PieceMove, promote_to: Optional[PieceType] = None
    ) -> "Board":
        """
        Play a (validated) move and return the resulting Board.
        ----

        Special moves are inferred from geometry and the piece on the start square:
        * a king moving two columns castles: the rook is moved along
        * a pawn moving diagonally onto an empty square takes en passant: the pawn beside it is removed
        * a pawn reaching the farthest row promotes (to a queen unless told otherwise)

        The side to move flips; this Board is left untouched.
        """
        piece = self.piece_at(move.start)
        if piece is None:
            raise InvariantViolationError(f"No piece on {move.start} to play {move}.")

        cells = list(self.cells)
        moved = piece.after_move()
        if is_pawn_move_to_promotion_row(self, move):
            moved = piece.promote_to(promote_to or DEFAULT_PROMOTION)

        if is_castling_shape(self, move):
            rook_move = castling_rook_move(move)
            rook = cells[rook_move.start.to_index()]
            if rook is None:
                raise InvariantViolationError(f"Castling {move} without a rook.")
            cells[rook_move.start.to_index()] = None
            cells[rook_move.end.to_index()] = rook.after_move()
        elif is_en_passant_shape(self, move):
            cells[en_passant_victim_square(move).to_index()] = None

        cells[move.start.to_index()] = None
        cells[move.end.to_index()] = moved
        return Board(tuple(cells), self.side_to_move.opponent, move)

    def __str__(self) -> str:
        rows = []
        for row in range(BOARD_SIZE - 1, -1, -1):
            rows.append(
                "".join(
                    str(self.piece_at(Square(column, row)) or ".")
                    for column in range(BOARD_SIZE)
                )
            )
        return "\n".join(rows)
