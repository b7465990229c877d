"""
Notation Codec
-----

Two textual forms of the same move:

* **play form**: `<Letter><from><to>`, ex. `Pe2e4`. What a Board needs to advance.
* **log form**: what gets persisted for replay. Same as the play form, plus markers the Board itself re-derives anyway:
    * `x` between origin and destination for captures: `Pe4xd5`
    * `=<Letter>` suffix for promotions: `Pe7e8=Q`
    * `.ep` suffix for en passant: `Pe5xd6.ep`
    * castling replaces the move by a marker: `O-O` (king side) or `o-o-o` (queen side)

Letters are upper case for White pieces, lower case for Black pieces.
Users may leave out the letter (`e2e4`); it is then looked up on the board.
"""

import re
from dataclasses import dataclass
from typing import Iterable, Optional

from chesslog.chess.board import DEFAULT_PROMOTION, Board
from chesslog.chess.classifier import is_capture, is_castle, is_en_passant, is_promotion
from chesslog.chess.moves import CASTLE_KING_SHIFT, PROMOTION_OPTIONS, PieceMove
from chesslog.chess.pieces import LETTER_TO_PIECE, PIECE_TO_LETTER
from chesslog.chess.square import Square
from chesslog.core.exceptions import InvalidMoveTextError
from chesslog.core.shared_types import PieceType

# NOTE: the two markers really are spelled differently. Both are kept literally, for both colors.
KING_SIDE_CASTLE = "O-O"
QUEEN_SIDE_CASTLE = "o-o-o"

CAPTURE_MARKER = "x"
PROMOTION_MARKER = "="
EN_PASSANT_MARKER = ".ep"

MOVE_PATTERN = re.compile(
    r"^(?P<letter>[RNBQKPrnbqkp])?"
    r"(?P<start>[a-h][1-8])"
    r"(?P<capture>x)?"
    r"(?P<end>[a-h][1-8])"
    r"(?:=?(?P<promotion>[NBQRnbqr]))?"
    r"(?P<en_passant>\.ep)?$"
)


@dataclass(frozen=True)
class Move:
    """A parsed move that has been matched against the piece actually standing on its origin square."""

    letter: str
    piece_move: PieceMove
    promote_to: Optional[PieceType] = None

    def to_play(self) -> str:
        """The canonical play form: no markers, but a promotion keeps its letter (`Pa7a8N`)"""
        text = f"{self.letter}{self.piece_move.start}{self.piece_move.end}"
        if self.promote_to is not None:
            text += PIECE_TO_LETTER[self.promote_to].upper()
        return text

    def __str__(self) -> str:
        return self.to_play()


def _parse_castle(marker: str, board: Board) -> Move:
    """Castle markers do not name squares: they are resolved against the king of the side to move."""
    king_square = board.king_square(board.side_to_move)
    shift = CASTLE_KING_SHIFT if marker == KING_SIDE_CASTLE else -CASTLE_KING_SHIFT
    target = king_square.add_direction((shift, 0))
    if target is None:
        raise InvalidMoveTextError(
            f"{marker!r}: king on {king_square} cannot castle in that direction."
        )
    king = board.king(board.side_to_move)
    return Move(king.to_letter(), PieceMove(king_square, target))


def parse_move(text: str, board: Board) -> Move:
    """
    Parse user input or a log entry into a Move.
    ----

    Accepted:
    * full form `Pe2e4`, or the letter left out: `e2e4`
    * the log markers: `x`, `=Q` (or just `Q`), `.ep`, `O-O`, `o-o-o`

    The markers are accepted but not trusted: the Board re-derives captures, castling and en passant from geometry.
    A pawn move to the last row without a promotion letter promotes to a queen.
    """
    if text is None:
        raise InvalidMoveTextError("Missing move.")
    text = text.strip()
    if text in (KING_SIDE_CASTLE, QUEEN_SIDE_CASTLE):
        return _parse_castle(text, board)

    match = MOVE_PATTERN.match(text)
    if match is None:
        raise InvalidMoveTextError(
            f"Unrecognized move {text!r}. Use format: [<piece>]<from>[x]<to>[=<piece>]"
        )

    piece_move = PieceMove(
        Square.from_algebraic(match["start"]), Square.from_algebraic(match["end"])
    )
    piece = board.piece_at(piece_move.start)
    if piece is None:
        raise InvalidMoveTextError(f"No piece on {piece_move.start} in {text!r}.")
    if match["letter"] and match["letter"].lower() != piece.to_letter().lower():
        raise InvalidMoveTextError(
            f"{text!r} names a {LETTER_TO_PIECE[match['letter'].lower()]}, but {piece_move.start} holds a {piece.type}."
        )

    promote_to = _promotion_choice(match["promotion"], board, piece_move, text)
    return Move(piece.to_letter(), piece_move, promote_to)


def _promotion_choice(
    letter: Optional[str], board: Board, piece_move: PieceMove, text: str
) -> Optional[PieceType]:
    if not is_promotion(board, piece_move):
        if letter:
            raise InvalidMoveTextError(
                f"{text!r}: only a pawn reaching the last row can promote."
            )
        return None
    if not letter:
        return DEFAULT_PROMOTION
    piece_type = LETTER_TO_PIECE[letter.lower()]
    if piece_type not in PROMOTION_OPTIONS:
        raise InvalidMoveTextError(f"{text!r}: cannot promote to a {piece_type}.")
    return piece_type


def format_move(move: Move) -> str:
    return move.to_play()


def to_log_entry(move: Move, board: Board) -> str:
    """
    The log form of a move played on `board` (the Board BEFORE the move).

    NOTE: markers depend on what the move does, not on how it is classified. A capture that gives check still gets its `x`.
    """
    piece_move = move.piece_move
    if is_castle(board, piece_move):
        return KING_SIDE_CASTLE if piece_move.column_delta > 0 else QUEEN_SIDE_CASTLE

    entry = move.letter + str(piece_move.start)
    if is_capture(board, piece_move):
        entry += CAPTURE_MARKER
    entry += str(piece_move.end)
    if is_promotion(board, piece_move):
        promoted = move.promote_to or DEFAULT_PROMOTION
        entry += PROMOTION_MARKER + PIECE_TO_LETTER[promoted].upper()
    if is_en_passant(board, piece_move):
        entry += EN_PASSANT_MARKER
    return entry


def format_log_for_display(entries: Iterable[str]) -> str:
    """Numbered move list: one line per turn, White's move first: `1. Pe2e4 - pe7e5`"""
    lines: list[str] = []
    for ply, entry in enumerate(entries):
        if ply % 2 == 0:
            lines.append(f"{ply // 2 + 1}. {entry}")
        else:
            lines[-1] += f" - {entry}"
    return "\n".join(lines)
