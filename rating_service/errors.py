"""
Error types raised by the rating store and match service.

Routers translate these into HTTP responses; nothing here is retried.
"""

from typing import Any, Dict, Optional


class RatingServiceError(Exception):
    """Base exception for rating service errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (details: {self.details})"
        return self.message


class StoreError(RatingServiceError):
    """Base exception for failures talking to the ratings store."""


class StoreUnavailable(StoreError):
    """Raised when the backend is unreachable or the connection pool is exhausted."""


class PartialUpdate(StoreError):
    """Raised when at least one of the two post-match writes failed.

    The other write may have succeeded; no rollback is attempted.
    """

    def __init__(self, failed_players, cause: Optional[BaseException] = None):
        super().__init__(
            f"Could not write ratings for: {', '.join(failed_players)}",
            {"failed_players": list(failed_players)},
        )
        self.failed_players = list(failed_players)
        self.cause = cause


class ConcurrentUpdate(StoreError):
    """Raised when the ratings table changed between the read and the write of a match."""


class SelfMatchError(RatingServiceError):
    """Raised when a match names the same player as winner and loser."""

    def __init__(self, player: str):
        super().__init__("Winner and loser must be different players", {"player": player})
        self.player = player
