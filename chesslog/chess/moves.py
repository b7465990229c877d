"""
Geometry/Base movement and capturing/attacking rules

Key idea: one candidate-move function per piece kind, picked by a single `match` on the piece type.

Everything in here is *pseudo-legal*: it never asks whether the mover's own king ends up attacked.
That question is answered in legality.py, which calls back into this module (never the other way around).
"""

from dataclasses import dataclass
from typing import Optional, Protocol, assert_never

from chesslog.chess.pieces import Piece
from chesslog.chess.square import Direction, Square
from chesslog.core.shared_types import Color, PieceType


class Board(Protocol):
    """Just the parts the movement rules need"""

    @property
    def last_move(self) -> Optional["PieceMove"]: ...

    def piece_at(self, square: Square) -> Optional[Piece]: ...


@dataclass(frozen=True)
class PieceMove:
    """The minimal structural move: where a piece starts and where it ends up."""

    start: Square
    end: Square

    @property
    def column_delta(self) -> int:
        return self.end.column - self.start.column

    @property
    def row_delta(self) -> int:
        return self.end.row - self.start.row

    def __str__(self) -> str:
        return f"{self.start}{self.end}"


STRAIGHTS: list[Direction] = [(1, 0), (-1, 0), (0, 1), (0, -1)]
DIAGONALS: list[Direction] = [(1, 1), (-1, 1), (1, -1), (-1, -1)]
KNIGHT_DELTAS: list[Direction] = [
    (1, 2),
    (2, 1),
    (2, -1),
    (1, -2),
    (-1, -2),
    (-2, -1),
    (-2, 1),
    (-1, 2),
]
KING_DELTAS: list[Direction] = STRAIGHTS + DIAGONALS

# White moves UP the board (towards row 7), Black moves DOWN
PAWN_DIRECTION: dict[Color, int] = {Color.WHITE: 1, Color.BLACK: -1}
PROMOTION_ROW: dict[Color, int] = {Color.WHITE: 7, Color.BLACK: 0}
HOME_ROW: dict[Color, int] = {Color.WHITE: 0, Color.BLACK: 7}

# The king travels two columns when castling; the rook sits on the edge of that side.
CASTLE_KING_SHIFT = 2
KING_SIDE_ROOK_COLUMN = 7
QUEEN_SIDE_ROOK_COLUMN = 0


def _own_piece(board: Board, square: Square) -> Piece:
    piece = board.piece_at(square)
    if piece is None:
        raise ValueError(f"No piece on {square} to generate moves for.")
    return piece


def _is_friendly(board: Board, square: Square, color: Color) -> bool:
    piece = board.piece_at(square)
    return piece is not None and piece.color == color


def _is_enemy(board: Board, square: Square, color: Color) -> bool:
    piece = board.piece_at(square)
    return piece is not None and piece.color != color


# --- MOVEMENT RULES ---
def raycasting_moves(
    board: Board, square: Square, directions: list[Direction]
) -> list[PieceMove]:
    """
    Raycasting algorithm
    -----

    ---
    Walk outward one square at a time along each direction.
    Stop before the first friendly piece, stop on the first enemy piece (that one can be captured),
    keep going through empty squares until the edge of the board.
    """
    color = _own_piece(board, square).color
    moves: list[PieceMove] = []
    for direction in directions:
        target = square.add_direction(direction)
        while target is not None:
            if _is_friendly(board, target, color):
                break
            moves.append(PieceMove(square, target))
            if _is_enemy(board, target, color):
                break
            target = target.add_direction(direction)
    return moves


def single_step_moves(
    board: Board, square: Square, deltas: list[Direction]
) -> list[PieceMove]:
    """Raycasting is for sliding pieces. This is the equivalent for kings and knights that leap by a fixed offset"""
    color = _own_piece(board, square).color
    moves: list[PieceMove] = []
    for delta in deltas:
        target = square.add_direction(delta)
        if target is None or _is_friendly(board, target, color):
            continue
        moves.append(PieceMove(square, target))
    return moves


def candidate_pawn_moves(board: Board, square: Square) -> list[PieceMove]:
    """
    A pawn:
    - moves by a single square forward, onto an empty square.
    - can move by two in its first move, if both squares in front of it are empty
    - takes diagonally
    - takes en passant (see `en_passant_target`)
    """
    pawn = _own_piece(board, square)
    forward = PAWN_DIRECTION[pawn.color]
    moves: list[PieceMove] = []

    one_step = square.add_direction((0, forward))
    if one_step is not None and board.piece_at(one_step) is None:
        moves.append(PieceMove(square, one_step))
        two_steps = one_step.add_direction((0, forward))
        if (
            not pawn.has_moved
            and two_steps is not None
            and board.piece_at(two_steps) is None
        ):
            moves.append(PieceMove(square, two_steps))

    for df in (-1, 1):
        target = square.add_direction((df, forward))
        if target is None:
            continue
        if _is_enemy(board, target, pawn.color):
            moves.append(PieceMove(square, target))
        elif en_passant_target(board, square, df) == target:
            moves.append(PieceMove(square, target))
    return moves


def candidate_knight_moves(board: Board, square: Square) -> list[PieceMove]:
    """Knights always move such that |delta_row| + |delta_column| = 3"""
    return single_step_moves(board, square, KNIGHT_DELTAS)


def candidate_bishop_moves(board: Board, square: Square) -> list[PieceMove]:
    """Bishops move diagonally: |delta_row| = |delta_column|"""
    return raycasting_moves(board, square, DIAGONALS)


def candidate_rook_moves(board: Board, square: Square) -> list[PieceMove]:
    """Rooks move either horizontally or vertically"""
    return raycasting_moves(board, square, STRAIGHTS)


def candidate_queen_moves(board: Board, square: Square) -> list[PieceMove]:
    """
    The Queen combines the rook moves (horizontal + vertical movements) and bishop moves (diagonal movement)
    """
    return raycasting_moves(board, square, STRAIGHTS + DIAGONALS)


def candidate_king_moves(board: Board, square: Square) -> list[PieceMove]:
    """
    The king can move by a single square at the time.

    Castling is modelled as a king move of two columns, added while the king has not moved yet.
    """
    king = _own_piece(board, square)
    moves = single_step_moves(board, square, KING_DELTAS)
    if king.has_moved:
        return moves
    for shift in (CASTLE_KING_SHIFT, -CASTLE_KING_SHIFT):
        target = square.add_direction((shift, 0))
        if target is None:
            continue
        castle = PieceMove(square, target)
        if can_castle(board, castle):
            moves.append(castle)
    return moves


def candidate_moves(board: Board, square: Square) -> list[PieceMove]:
    """
    Unfiltered (pseudo-legal) moves of the piece standing on `square`.
    ---
    NOTE: one branch per piece kind. `assert_never` makes a type checker complain if a kind gets added without a rule.
    """
    piece = _own_piece(board, square)
    match piece.type:
        case PieceType.PAWN:
            return candidate_pawn_moves(board, square)
        case PieceType.KNIGHT:
            return candidate_knight_moves(board, square)
        case PieceType.BISHOP:
            return candidate_bishop_moves(board, square)
        case PieceType.ROOK:
            return candidate_rook_moves(board, square)
        case PieceType.QUEEN:
            return candidate_queen_moves(board, square)
        case PieceType.KING:
            return candidate_king_moves(board, square)
        case _:
            assert_never(piece.type)


# -- CASTLING ---
def castling_rook_square(move: PieceMove) -> Square:
    """Square of the rook that belongs to a castling move of the king (h-file going right, a-file going left)."""
    rook_column = (
        KING_SIDE_ROOK_COLUMN if move.column_delta > 0 else QUEEN_SIDE_ROOK_COLUMN
    )
    return Square(rook_column, move.start.row)


def castling_rook_move(move: PieceMove) -> PieceMove:
    """The rook jumps over the king and lands right next to it."""
    step = 1 if move.column_delta > 0 else -1
    rook_to = Square(move.end.column - step, move.end.row)
    return PieceMove(castling_rook_square(move), rook_to)


def squares_between_on_row(from_square: Square, to_square: Square) -> list[Square]:
    """
    Find the squares in between the two squares specified that are on the same row (both ends excluded).

    Needed for checking if you can still castle.
    """
    if from_square.row != to_square.row:
        raise ValueError(
            f"squares_between_on_row requires both squares to lie on the same row. \n from: {from_square}\n to:{to_square}"
        )
    low, high = sorted((from_square.column, to_square.column))
    return [Square(column, from_square.row) for column in range(low + 1, high)]


def is_castling_shape(board: Board, move: PieceMove) -> bool:
    """A king moving two columns along its row."""
    piece = board.piece_at(move.start)
    return (
        piece is not None
        and piece.type == PieceType.KING
        and move.row_delta == 0
        and abs(move.column_delta) == CASTLE_KING_SHIFT
    )


def can_castle(board: Board, move: PieceMove) -> bool:
    """
    Castling precondition
    ---

    * king and the rook on that side have both not moved yet
    * every square between them is empty

    NOTE: Whether the king is in check, passes through or lands on an attacked square is NOT tested here.
    The check filter (legality.py) takes care of that.
    """
    if not is_castling_shape(board, move):
        return False
    king = board.piece_at(move.start)
    assert king is not None
    if king.has_moved:
        return False

    rook_square = castling_rook_square(move)
    rook = board.piece_at(rook_square)
    if rook is None or rook.type != PieceType.ROOK or rook.color != king.color:
        return False
    if rook.has_moved:
        return False

    between = squares_between_on_row(move.start, rook_square)
    return all(board.piece_at(square) is None for square in between)


# -- EN PASSANT ---
def en_passant_victim_square(move: PieceMove) -> Square:
    """The pawn taken en passant stands next to the capturing pawn: same row as the start, same column as the end."""
    return Square(move.end.column, move.start.row)


def en_passant_target(board: Board, square: Square, df: int) -> Optional[Square]:
    """
    Square a pawn on `square` could capture onto en passant towards the adjacent column `df` (-1 or 1), if any.
    ---

    The adjacent square must hold an enemy pawn that has moved exactly once,
    and that single move was a two-row advance made on the ply just before this one.
    """
    pawn = _own_piece(board, square)
    beside = square.add_direction((df, 0))
    if beside is None:
        return None

    victim = board.piece_at(beside)
    if (
        victim is None
        or victim.type != PieceType.PAWN
        or victim.color == pawn.color
        or victim.move_counter != 1
    ):
        return None

    last_move = board.last_move
    if last_move is None or last_move.end != beside or abs(last_move.row_delta) != 2:
        return None

    target = square.add_direction((df, PAWN_DIRECTION[pawn.color]))
    if target is None or board.piece_at(target) is not None:
        return None
    return target


def is_en_passant_shape(board: Board, move: PieceMove) -> bool:
    """A pawn moving diagonally onto an empty square"""
    piece = board.piece_at(move.start)
    return (
        piece is not None
        and piece.type == PieceType.PAWN
        and abs(move.column_delta) == 1
        and move.row_delta == PAWN_DIRECTION[piece.color]
        and board.piece_at(move.end) is None
    )


# -- PROMOTION ---
PROMOTION_OPTIONS: list[PieceType] = [
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.ROOK,
    PieceType.QUEEN,
]


def is_pawn_move_to_promotion_row(board: Board, move: PieceMove) -> bool:
    """check if the move is a pawn move that reaches the farthest row for its color"""
    piece = board.piece_at(move.start)
    return (
        piece is not None
        and piece.type == PieceType.PAWN
        and move.end.row == PROMOTION_ROW[piece.color]
    )


# --- CAPTURING RULES / ATTACKING RULES ---
def raycasting_attack(
    square: Square,
    by_color: Color,
    by_piece_types: tuple[PieceType, ...],
    board: Board,
    directions: list[Direction],
) -> bool:
    """
    Raycasting algorithm for attacks.
    ---

    Where `raycasting_moves()` determines
    _"What is the line-of-sight of the piece standing on the specified square?"_

    This function determines:
    _"Is the specified square in the line-of-sight of a piece of the specified color and that
    is allowed to move along the given direction?"_

    ---
    Returns TRUE if the first piece encountered is of the given color and one of the given types.
    """
    for direction in directions:
        target = square.add_direction(direction)
        while target is not None:
            piece_found = board.piece_at(target)
            if piece_found is not None:
                if (
                    piece_found.color == by_color
                    and piece_found.type in by_piece_types
                ):
                    return True
                break
            target = target.add_direction(direction)
    return False


def single_step_attack(
    square: Square,
    by_color: Color,
    by_piece_type: PieceType,
    board: Board,
    deltas: list[Direction],
) -> bool:
    """
    Equivalent of `raycasting_attack` for pawns, kings, and knights that can only reach a square a single step away.
    """
    for delta in deltas:
        target = square.add_direction(delta)
        if target is None:
            continue
        piece_found = board.piece_at(target)
        if (
            piece_found is not None
            and piece_found.color == by_color
            and piece_found.type == by_piece_type
        ):
            return True
    return False


def is_square_attacked(board: Board, square: Square, by_color: Color) -> bool:
    """
    Could any piece of `by_color` capture on `square`, if something stood there?
    ----

    NOTE: Pawn moves are not symmetric, so to check IF a white pawn attacks your square -->
    Must look one row DOWN the board. Hence the pawn deltas below are the inverse of its capture directions.

    Unlike the destinations produced by `candidate_moves`, this also counts pawn diagonals onto empty squares,
    which matters for castling across a square.
    """
    inverse_pawn = -PAWN_DIRECTION[by_color]
    pawn_deltas: list[Direction] = [(1, inverse_pawn), (-1, inverse_pawn)]
    return (
        single_step_attack(square, by_color, PieceType.PAWN, board, pawn_deltas)
        or single_step_attack(
            square, by_color, PieceType.KNIGHT, board, KNIGHT_DELTAS
        )
        or single_step_attack(square, by_color, PieceType.KING, board, KING_DELTAS)
        or raycasting_attack(
            square, by_color, (PieceType.ROOK, PieceType.QUEEN), board, STRAIGHTS
        )
        or raycasting_attack(
            square, by_color, (PieceType.BISHOP, PieceType.QUEEN), board, DIAGONALS
        )
    )
