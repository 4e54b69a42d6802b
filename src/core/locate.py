"""
Booking plan file resolution.

The booking plan is looked up through an ordered list of strategies. Each
strategy returns a candidate path or None; the first existing file wins.
"""

from collections.abc import Callable, Iterable
from pathlib import Path

from core.config import BOOKING_PLAN_PATH, DEFAULT_BOOKING_PLAN_NAME, USER_BOOKING_PLAN_PATH

Strategy = Callable[[], Path | None]


def from_argument(value: str | Path | None) -> Strategy:
    """Path given on the command line or in a request."""
    return lambda: Path(value) if value else None


def from_environment(value: str = BOOKING_PLAN_PATH) -> Strategy:
    """Path configured via the BOOKING_PLAN_PATH environment variable."""
    return lambda: Path(value).expanduser() if value else None


def from_user_profile(path: Path = USER_BOOKING_PLAN_PATH) -> Strategy:
    """Default location below the user's Desktop folder."""
    return lambda: path


def from_working_directory(name: str = DEFAULT_BOOKING_PLAN_NAME) -> Strategy:
    """Default file name in the current working directory."""
    return lambda: Path.cwd() / name


def default_strategies(argument: str | Path | None = None) -> list[Strategy]:
    """Argument, environment, user profile, working directory, in that order."""
    return [
        from_argument(argument),
        from_environment(),
        from_user_profile(),
        from_working_directory(),
    ]


def resolve_input_file(strategies: Iterable[Strategy]) -> Path | None:
    """
    Return the first strategy result that is an existing file.

    Returns:
        Path to the booking plan, or None if no strategy finds one
    """
    for strategy in strategies:
        candidate = strategy()
        if candidate is not None and candidate.is_file():
            return candidate
    return None
