"""
Custom exceptions.

Two families that callers must be able to tell apart:
* errors caused by the user / the outside world (bad input, unreachable store)
* invariant violations, which point at a programming defect and must never be hidden.
"""


class GameError(Exception):
    """Top-level exception for anything raised on purpose by this package."""


# --- USER INPUT ---
class InputError(GameError):
    """Rejected synchronously, no state change."""


class InvalidRequestError(InputError):
    """Request does not hold the data needed (ex. missing or blank game identifier)."""


class InvalidMoveTextError(InputError):
    """Move text cannot be interpreted against the current board."""


# --- PERSISTENCE ---
class StoreAccessError(GameError):
    """The persisted log could not be reached or returned an error. Caller decides whether to retry."""


# --- PROGRAMMING DEFECTS ---
class InvariantViolationError(GameError):
    """The engine reached a state that should be impossible (ex. no king on the board, log that no longer replays)."""
