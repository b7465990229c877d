"""
A square on the board, and the coordinate types it is built from.

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from chesslog.core.exceptions import InvalidMoveTextError

BOARD_SIZE = 8

# (delta column, delta row)
Direction = tuple[int, int]


class Column(IntEnum):
    A = 0
    B = 1
    C = 2
    D = 3
    E = 4
    F = 5
    G = 6
    H = 7

    @classmethod
    def from_letter(cls, letter: str) -> Column:
        if len(letter) != 1 or not ("a" <= letter.lower() <= "h"):
            raise InvalidMoveTextError(f"{letter!r} is not a column (a-h).")
        return cls(ord(letter.lower()) - ord("a"))

    @property
    def letter(self) -> str:
        return chr(ord("a") + self.value)


class Row(IntEnum):
    """Row 0 is White's back rank, which players call rank "1"."""

    ONE = 0
    TWO = 1
    THREE = 2
    FOUR = 3
    FIVE = 4
    SIX = 5
    SEVEN = 6
    EIGHT = 7

    @classmethod
    def from_digit(cls, digit: str) -> Row:
        if len(digit) != 1 or not ("1" <= digit <= "8"):
            raise InvalidMoveTextError(f"{digit!r} is not a row (1-8).")
        return cls(int(digit) - 1)

    @property
    def digit(self) -> str:
        return str(self.value + 1)


def is_within_bounds(column: int, row: int) -> bool:
    return (0 <= column < BOARD_SIZE) and (0 <= row < BOARD_SIZE)


@dataclass(frozen=True)
class Square:
    column: int
    row: int

    def __post_init__(self) -> None:
        if not is_within_bounds(self.column, self.row):
            raise ValueError(f"Square out of bounds: ({self.column}, {self.row})")
        # store plain ints, so Square(Column.E, Row.TWO) and Square(4, 1) are indistinguishable
        object.__setattr__(self, "column", int(self.column))
        object.__setattr__(self, "row", int(self.row))

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a1' - 'h8' get converted to (0,0) - (7,7)"""
        if len(sq) != 2:
            raise InvalidMoveTextError(f"{sq!r} is not a square name.")
        return cls(Column.from_letter(sq[0]), Row.from_digit(sq[1]))

    @classmethod
    def from_index(cls, index: int) -> Square:
        return cls(index % BOARD_SIZE, index // BOARD_SIZE)

    def to_algebraic(self) -> str:
        return f"{Column(self.column).letter}{Row(self.row).digit}"

    def to_index(self) -> int:
        return self.row * BOARD_SIZE + self.column

    def add_direction(self, direction: Direction) -> Optional[Square]:
        """The square one step along `direction`, or None when that would leave the board."""
        column = self.column + direction[0]
        row = self.row + direction[1]
        if not is_within_bounds(column, row):
            return None
        return Square(column, row)

    def __str__(self) -> str:
        return self.to_algebraic()
