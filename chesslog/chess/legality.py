"""
King safety and the check filter.

Two entry points on purpose:
* `candidate_moves` (moves.py): unfiltered, never looks at king safety
* `possible_moves(..., filter_for_check=True)` / `legal_moves`: simulate every candidate and drop the ones that leave
  the mover's king attacked.

Check detection only ever uses the unfiltered generator. Using the filtered one there would recurse forever.
"""

from chesslog.chess.board import Board
from chesslog.chess.moves import (
    PieceMove,
    candidate_moves,
    is_castling_shape,
    is_square_attacked,
    squares_between_on_row,
)
from chesslog.chess.square import Square
from chesslog.core.shared_types import Color


def is_king_in_check(board: Board, side: Color) -> bool:
    """True iff the king of `side` is among the unfiltered destinations of the opposing pieces."""
    king_square = board.king_square(side)
    return any(
        move.end == king_square
        for square, _ in board.pieces(side.opponent)
        for move in candidate_moves(board, square)
    )


def is_king_in_check_after(board: Board, move: PieceMove) -> bool:
    """Play `move` on a copy and test whether the side that moved left its own king attacked."""
    mover = board.side_to_move
    piece = board.piece_at(move.start)
    if piece is not None:
        mover = piece.color
    return is_king_in_check(_simulate(board, move, mover), mover)


def _simulate(board: Board, move: PieceMove, mover: Color) -> Board:
    """
    Board.apply flips the side to move based on the Board, not on the piece.
    Moves of the side NOT to move are simulated from a board where it is their turn, so last_move timing stays right.
    """
    if board.side_to_move != mover:
        board = Board(board.cells, mover, board.last_move)
    return board.apply(move)


def _is_safe_castle(board: Board, move: PieceMove, mover: Color) -> bool:
    """Cannot castle out of check, nor across a square the opponent attacks. (Landing square is tested by the filter)"""
    if is_king_in_check(board, mover):
        return False
    passed = squares_between_on_row(move.start, move.end)
    return not any(is_square_attacked(board, square, mover.opponent) for square in passed)


def possible_moves(
    board: Board, square: Square, filter_for_check: bool = True
) -> list[PieceMove]:
    """
    Moves of the piece on `square`.
    ----

    Without the filter this is just the geometry. With the filter, every candidate is played on a copy of the board,
    and discarded if the mover's own king ends up attacked.
    """
    candidates = candidate_moves(board, square)
    if not filter_for_check:
        return candidates

    piece = board.piece_at(square)
    assert piece is not None
    mover = piece.color
    legal: list[PieceMove] = []
    for move in candidates:
        if is_castling_shape(board, move) and not _is_safe_castle(board, move, mover):
            continue
        if is_king_in_check_after(board, move):
            continue
        legal.append(move)
    return legal


def legal_moves(board: Board, side: Color) -> list[PieceMove]:
    """All check-filtered moves for one side"""
    return [
        move
        for square, _ in board.pieces(side)
        for move in possible_moves(board, square, filter_for_check=True)
    ]


def has_legal_move(board: Board, side: Color) -> bool:
    """Short-circuits on the first legal move found (much cheaper than `legal_moves` on a full board)."""
    return any(
        possible_moves(board, square, filter_for_check=True)
        for square, _ in board.pieces(side)
    )
