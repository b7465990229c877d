"""
Move Classifier
-----

A pure decision procedure: (Board, PieceMove) -> exactly one MoveType.
It is re-run on every play and on every replayed log entry; nothing it computes is stored.

Priority order (first match wins):
ILLEGAL > CHECKMATE > CHECK > STALEMATE > CASTLE > PROMOTION > ENPASSANT > CAPTURE > REGULAR
"""

from typing import Optional

from chesslog.chess.board import Board
from chesslog.chess.legality import has_legal_move, is_king_in_check, possible_moves
from chesslog.chess.moves import (
    PieceMove,
    can_castle,
    en_passant_target,
    is_castling_shape,
    is_en_passant_shape,
    is_pawn_move_to_promotion_row,
)
from chesslog.core.shared_types import MoveType, PieceType


def is_legal(board: Board, move: PieceMove) -> bool:
    """The move must be one of the check-filtered moves of a piece belonging to the side to move."""
    piece = board.piece_at(move.start)
    if piece is None or piece.color != board.side_to_move:
        return False
    return move in possible_moves(board, move.start, filter_for_check=True)


# --- EFFECTS (geometry only, independent of the priority order) ---
def is_castle(board: Board, move: PieceMove) -> bool:
    return is_castling_shape(board, move) and can_castle(board, move)


def is_promotion(board: Board, move: PieceMove) -> bool:
    return is_pawn_move_to_promotion_row(board, move)


def is_en_passant(board: Board, move: PieceMove) -> bool:
    if not is_en_passant_shape(board, move):
        return False
    return en_passant_target(board, move.start, move.column_delta) == move.end


def is_capture(board: Board, move: PieceMove) -> bool:
    """Anything that removes an enemy piece, including en passant."""
    piece = board.piece_at(move.start)
    target = board.piece_at(move.end)
    if piece is None:
        return False
    if target is not None:
        return target.color != piece.color
    return is_en_passant(board, move)


# --- STALEMATE CONDITIONS ---
def mover_has_no_other_move(board: Board, move: PieceMove) -> bool:
    """The move is the only legal move the side to move has."""
    others = (
        other
        for square, _ in board.pieces(board.side_to_move)
        for other in possible_moves(board, square, filter_for_check=True)
        if other != move
    )
    return is_legal(board, move) and next(others, None) is None


def opponent_has_no_move_after(board: Board, move: PieceMove) -> bool:
    """After the move, the side to move next cannot make a single legal move."""
    after = board.apply(move)
    return not has_legal_move(after, after.side_to_move)


# --- CLASSIFICATION ---
def classify(
    board: Board, move: PieceMove, promote_to: Optional[PieceType] = None
) -> MoveType:
    """
    Produce exactly one MoveType for `move` played on `board`.
    ---

    NOTE: the promotion choice can change the outcome (an under-promotion may not give check), so it is part of the input.
    """
    if not is_legal(board, move):
        return MoveType.ILLEGAL

    after = board.apply(move, promote_to)
    opponent = after.side_to_move
    opponent_in_check = is_king_in_check(after, opponent)
    opponent_can_reply = has_legal_move(after, opponent)

    if opponent_in_check and not opponent_can_reply:
        return MoveType.CHECKMATE
    if opponent_in_check:
        return MoveType.CHECK
    if not opponent_can_reply:
        return MoveType.STALEMATE
    if is_castle(board, move):
        return MoveType.CASTLE
    if is_promotion(board, move):
        return MoveType.PROMOTION
    if is_en_passant(board, move):
        return MoveType.ENPASSANT
    if is_capture(board, move):
        return MoveType.CAPTURE
    return MoveType.REGULAR
