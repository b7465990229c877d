"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures/helpers required for testing multiple layers.
"""

from typing import Callable, Generator

import pytest
from sqlalchemy import StaticPool, create_engine
from sqlalchemy.orm import Session, sessionmaker

from chesslog.chess.board import Board
from chesslog.chess.notation import parse_move
from chesslog.db.schema import Base

# Setup an in-memory SQLite database for testing
DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autoflush=False, bind=engine)


@pytest.fixture
def db_session_repo() -> Generator[Session, None, None]:
    """Connection to a test database. Tables are removed at teardown to make unit tests of the store independent of each other."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


def _play_moves(moves: list[str], board: Board | None = None) -> Board:
    board = board if board is not None else Board.new()
    for text in moves:
        move = parse_move(text, board)
        board = board.apply(move.piece_move, move.promote_to)
    return board


PlayMovesFn = Callable[..., Board]


@pytest.fixture
def play_moves() -> PlayMovesFn:
    """Convenience: reach a position by applying moves in play form (no legality checks)."""
    return _play_moves
