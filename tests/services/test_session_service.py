"""Unit tests for chesslog/services/session_service.py"""

from typing import Generator, Optional

import pytest

from chesslog.chess.board import STARTING_PLACEMENT
from chesslog.core.exceptions import InvariantViolationError, StoreAccessError
from chesslog.core.models import GameIdentifier, Session, SessionResult
from chesslog.core.shared_types import Color, ResultKind
from chesslog.services.session_service import SessionService

GAME = "friday-blitz"
FOOLS_MATE = ["f2f3", "e7e5", "g2g4", "d8h4"]
# Shortest known stalemate (Sam Loyd)
LOYD_STALEMATE = [
    "e2e3", "a7a5", "d1h5", "a8a6", "h5a5", "h7h5", "h2h4", "a6h6", "a5c7", "f7f6",
    "c7d7", "e8f7", "d7b7", "d8d3", "b7b8", "d3h7", "b8c8", "f7g6", "c8e6",
]


# --- MOCK DEPENDENCIES ----
class MockGameLog:
    """Mock the GameLog using a dictionary of lists."""

    def __init__(self) -> None:
        self._logs: dict[GameIdentifier, list[str]] = {}
        self.broken = False

    def _check(self) -> None:
        if self.broken:
            raise StoreAccessError("store is down")

    def exists(self, game_id: GameIdentifier) -> bool:
        self._check()
        return game_id in self._logs

    def create_if_absent(self, game_id: GameIdentifier) -> bool:
        self._check()
        if game_id in self._logs:
            return False
        self._logs[game_id] = []
        return True

    def append_entry(self, game_id: GameIdentifier, entry: str) -> bool:
        self._check()
        if game_id not in self._logs:
            return False
        self._logs[game_id].append(entry)
        return True

    def all_entries(self, game_id: GameIdentifier) -> list[str]:
        self._check()
        return list(self._logs.get(game_id, []))

    def last_entry(self, game_id: GameIdentifier) -> Optional[str]:
        self._check()
        entries = self._logs.get(game_id)
        return entries[-1] if entries else None

    def entry_count(self, game_id: GameIdentifier) -> int:
        self._check()
        return len(self._logs.get(game_id, []))

    # test helpers, not part of the protocol
    def seed(self, game_id: GameIdentifier, entries: list[str]) -> None:
        self._logs[game_id] = list(entries)

    def drop(self, game_id: GameIdentifier) -> None:
        self._logs.pop(game_id, None)

    def clear(self) -> None:
        """Clear the log (useful in between tests)"""
        self._logs.clear()


@pytest.fixture
def mock_log() -> Generator[MockGameLog, None, None]:
    """Ensures to clear the log between tests"""
    log = MockGameLog()
    try:
        yield log
    finally:
        log.clear()


@pytest.fixture
def service(mock_log: MockGameLog) -> SessionService:
    return SessionService(mock_log)


def play_alternately(
    service: SessionService, white: Session, black: Session, moves: list[str]
) -> tuple[SessionResult, Session, Session]:
    """Play moves from both sides; after every move the other side refreshes."""
    sessions = {Color.WHITE: white, Color.BLACK: black}
    result: Optional[SessionResult] = None
    for ply, text in enumerate(moves):
        side = Color.WHITE if ply % 2 == 0 else Color.BLACK
        result = service.play(sessions[side], text)
        assert result.kind not in (ResultKind.EMPTY, ResultKind.ERROR), result.message
        sessions[side] = result.session
        sessions[side.opponent] = service.refresh(sessions[side.opponent]).session
    assert result is not None
    return result, sessions[Color.WHITE], sessions[Color.BLACK]


# --- OPEN ---
def test_open_new_game(service: SessionService, mock_log: MockGameLog) -> None:
    result = service.open(GAME)

    assert result.kind == ResultKind.OK
    assert result.log == []
    session = result.session
    assert session.game_id == GAME
    assert session.local_side == Color.WHITE
    assert session.entries_seen == 0
    assert session.board.to_fen() == STARTING_PLACEMENT
    assert session.is_my_turn

    # Check persisted data
    assert mock_log.exists(GAME)
    assert mock_log.all_entries(GAME) == []


@pytest.mark.parametrize("game_id", [None, "", "   ", "two words"])
def test_open_invalid_game_name(
    game_id: Optional[str], service: SessionService, mock_log: MockGameLog
) -> None:
    result = service.open(game_id)
    assert result.kind == ResultKind.ERROR
    assert result.message
    assert result.session == Session()
    assert mock_log.entry_count(GAME) == 0


def test_open_existing_game_replays_the_log(
    service: SessionService, mock_log: MockGameLog
) -> None:
    mock_log.seed(GAME, ["Pe2e4", "pe7e5"])
    result = service.open(GAME)
    assert result.kind == ResultKind.OK
    assert result.log == ["Pe2e4", "pe7e5"]
    assert result.session.entries_seen == 2
    assert result.session.board.side_to_move == Color.WHITE


def test_reopen_shows_check(service: SessionService, mock_log: MockGameLog) -> None:
    mock_log.seed(GAME, ["Pf2f3", "pe7e5", "Pd2d4", "qd8h4"])
    result = service.open(GAME)
    assert result.kind == ResultKind.CHECK
    assert result.side == Color.WHITE


def test_open_corrupt_log(service: SessionService, mock_log: MockGameLog) -> None:
    mock_log.seed(GAME, ["Pe2e4", "garbage"])
    with pytest.raises(InvariantViolationError):
        service.open(GAME)


# --- JOIN ---
def test_join_existing_game(service: SessionService) -> None:
    service.open(GAME)
    result = service.join(GAME)
    assert result.kind == ResultKind.OK
    assert result.session.local_side == Color.BLACK
    assert not result.session.is_my_turn


def test_join_missing_game(service: SessionService, mock_log: MockGameLog) -> None:
    result = service.join(GAME)
    assert result.kind == ResultKind.EMPTY
    assert result.session.game_id is None
    assert not mock_log.exists(GAME)


def test_join_invalid_game_name(service: SessionService) -> None:
    assert service.join("").kind == ResultKind.ERROR


# --- PLAY ---
def test_play_a_move(service: SessionService, mock_log: MockGameLog) -> None:
    session = service.open(GAME).session
    result = service.play(session, "e2e4")

    assert result.kind == ResultKind.OK
    assert result.log == ["Pe2e4"]
    assert result.session.entries_seen == 1
    assert result.session.board.side_to_move == Color.BLACK
    assert mock_log.all_entries(GAME) == ["Pe2e4"]

    # handed-in session is left as is
    assert session.entries_seen == 0
    assert session.board.to_fen() == STARTING_PLACEMENT


def test_play_without_game(service: SessionService) -> None:
    result = service.play(Session(), "e2e4")
    assert result.kind == ResultKind.ERROR


def test_play_out_of_turn(service: SessionService, mock_log: MockGameLog) -> None:
    service.open(GAME)
    black = service.join(GAME).session
    result = service.play(black, "e7e5")
    assert result.kind == ResultKind.EMPTY
    assert result.session == black
    assert mock_log.entry_count(GAME) == 0


@pytest.mark.parametrize("text", [None, "", "e2", "Ne2e4", "e4e5"])
def test_play_malformed_move(
    text: Optional[str], service: SessionService, mock_log: MockGameLog
) -> None:
    session = service.open(GAME).session
    result = service.play(session, text)
    assert result.kind == ResultKind.ERROR
    assert result.message
    assert mock_log.entry_count(GAME) == 0


def test_play_illegal_move(service: SessionService, mock_log: MockGameLog) -> None:
    session = service.open(GAME).session
    result = service.play(session, "e2e5")
    assert result.kind == ResultKind.EMPTY
    assert result.session == session
    assert mock_log.entry_count(GAME) == 0


def test_play_on_stale_board(service: SessionService, mock_log: MockGameLog) -> None:
    """Two clients on the same side: the second one has not seen the first move yet."""
    first = service.open(GAME).session
    second = service.open(GAME).session

    assert service.play(first, "e2e4").kind == ResultKind.OK
    result = service.play(second, "d2d4")
    assert result.kind == ResultKind.EMPTY
    assert mock_log.all_entries(GAME) == ["Pe2e4"]


def test_play_after_game_disappeared(
    service: SessionService, mock_log: MockGameLog
) -> None:
    session = service.open(GAME).session
    mock_log.drop(GAME)
    with pytest.raises(InvariantViolationError):
        service.play(session, "e2e4")


def test_play_logs_markers(service: SessionService, mock_log: MockGameLog) -> None:
    white = service.open(GAME).session
    black = service.join(GAME).session
    play_alternately(
        service, white, black, ["e2e4", "a7a6", "e4e5", "d7d5", "e5d6", "a6a5", "g1f3",
                                "a5a4", "f1e2", "a4a3", "O-O"]
    )
    entries = mock_log.all_entries(GAME)
    assert entries[4] == "Pe5xd6.ep"
    assert entries[-1] == "O-O"


# --- REFRESH ---
def test_refresh_without_game(service: SessionService) -> None:
    assert service.refresh(Session()).kind == ResultKind.ERROR


def test_refresh_picks_up_opponent_move(service: SessionService) -> None:
    white = service.open(GAME).session
    black = service.join(GAME).session
    service.play(white, "e2e4")

    result = service.refresh(black)
    assert result.kind == ResultKind.OK
    assert result.session.entries_seen == 1
    assert result.session.is_my_turn
    assert result.log == ["Pe2e4"]


def test_refresh_is_idempotent(service: SessionService) -> None:
    white = service.open(GAME).session
    black = service.join(GAME).session
    service.play(white, "e2e4")

    refreshed = service.refresh(black).session
    again = service.refresh(refreshed)
    assert again.kind == ResultKind.EMPTY
    assert again.session == refreshed


def test_refresh_matches_a_fresh_open(service: SessionService) -> None:
    white = service.open(GAME).session
    black = service.join(GAME).session
    _, white, black = play_alternately(service, white, black, ["e2e4", "e7e5", "g1f3"])
    assert black.board == service.join(GAME).session.board
    assert white.board == black.board


def test_refresh_after_log_shrank(service: SessionService, mock_log: MockGameLog) -> None:
    session = service.play(service.open(GAME).session, "e2e4").session
    mock_log.seed(GAME, [])
    with pytest.raises(InvariantViolationError):
        service.refresh(session)


# --- FULL GAMES ---
def test_fools_mate_between_two_clients(service: SessionService) -> None:
    white = service.open(GAME).session
    black = service.join(GAME).session
    result, white, black = play_alternately(service, white, black, FOOLS_MATE)

    assert result.kind == ResultKind.CHECKMATE
    assert result.side == Color.WHITE

    # white learns about it on refresh / reopen
    reopened = service.open(GAME)
    assert reopened.kind == ResultKind.CHECKMATE
    assert reopened.side == Color.WHITE
    assert white.board == reopened.session.board


def test_no_move_after_checkmate(service: SessionService) -> None:
    white = service.open(GAME).session
    black = service.join(GAME).session
    _, white, _ = play_alternately(service, white, black, FOOLS_MATE)
    assert service.play(white, "e1f2").kind == ResultKind.EMPTY


def test_stalemate_between_two_clients(service: SessionService) -> None:
    white = service.open(GAME).session
    black = service.join(GAME).session
    result, _, black = play_alternately(service, white, black, LOYD_STALEMATE)
    assert result.kind == ResultKind.STALEMATE
    assert result.side is None
    assert black.is_my_turn


def test_check_result_names_side_in_check(service: SessionService) -> None:
    white = service.open(GAME).session
    black = service.join(GAME).session
    result, _, _ = play_alternately(service, white, black, ["f2f3", "e7e5", "d2d4", "d8h4"])
    assert result.kind == ResultKind.CHECK
    assert result.side == Color.WHITE


# --- MOVES ---
def test_moves_for_display(service: SessionService) -> None:
    white = service.open(GAME).session
    black = service.join(GAME).session
    _, white, _ = play_alternately(service, white, black, ["e2e4", "e7e5", "g1f3"])
    assert service.moves(white) == "1. Pe2e4 - pe7e5\n2. Ng1f3"
    assert service.moves(Session()) == ""


# --- STORE FAILURES ---
def test_store_failure_propagates(service: SessionService, mock_log: MockGameLog) -> None:
    session = service.open(GAME).session
    mock_log.broken = True
    with pytest.raises(StoreAccessError):
        service.play(session, "e2e4")
    with pytest.raises(StoreAccessError):
        service.refresh(session)
    with pytest.raises(StoreAccessError):
        service.open(GAME)
