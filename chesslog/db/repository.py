"""Protocol for the persisted move log (can implement later for a document store / simple file etc.)"""

from typing import Optional, Protocol

from chesslog.core.models import GameIdentifier


class GameLog(Protocol):
    """
    Append-only log of entries per game.

    An absent game is a valid, empty log. Failing to reach the store raises StoreAccessError.
    """

    def exists(self, game_id: GameIdentifier) -> bool:
        """Is there a record for this game?"""
        ...

    def create_if_absent(self, game_id: GameIdentifier) -> bool:
        """Create an empty log. True if it was created, False if it already existed."""
        ...

    def append_entry(self, game_id: GameIdentifier, entry: str) -> bool:
        """Add one entry at the end. False if the game does not exist."""
        ...

    def all_entries(self, game_id: GameIdentifier) -> list[str]:
        """Every entry, in the order they were appended."""
        ...

    def last_entry(self, game_id: GameIdentifier) -> Optional[str]:
        ...

    def entry_count(self, game_id: GameIdentifier) -> int:
        ...
