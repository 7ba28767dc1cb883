"""Application service: Cleanup Expired Reservations (maintenance).

Runs one sweep immediately instead of waiting for the next scheduled one.
"""

from __future__ import annotations

from printstock.domain.service.expiration_sweeper import ExpirationSweeper


class CleanupExpiredHandler:

    def __init__(self, sweeper: ExpirationSweeper) -> None:
        self._sweeper = sweeper

    def handle(self) -> int:
        """Return the number of reservations expired by this sweep."""
        return self._sweeper.run_once().expired_count
