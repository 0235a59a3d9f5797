"""
One check-in cycle: try the stored cookie, refresh it once on failure.
"""

from __future__ import annotations

import logging

from .challenge import ChallengeSolver, solve_in_worker
from .client import CheckinResult, SessionClient
from .config import Credentials
from .cookies import CookieStore
from .errors import CheckinError


logger = logging.getLogger(__name__)


class CheckinRunner:
    def __init__(
        self,
        credentials: Credentials,
        store: CookieStore,
        client: SessionClient,
        solver: ChallengeSolver,
    ):
        self.credentials = credentials
        self.store = store
        self.client = client
        self.solver = solver

    def close(self) -> None:
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _attempt(self) -> CheckinResult | None:
        try:
            cookie = self.store.load()
        except CheckinError as e:
            logger.warning("%s, refreshing cookie", e)
            return None

        try:
            return self.client.checkin(cookie)
        except CheckinError as e:
            logger.warning("Check-in with stored cookie failed (%s): %s", e.code, e)
            return None

    def refresh(self) -> str:
        """Solve the challenge, log in and persist the new session cookie."""
        logger.info("Logging in to refresh cookie")
        challenge_cookie = solve_in_worker(self.solver)
        cookie = self.client.login(self.credentials, challenge_cookie)
        self.store.save(cookie)
        return cookie

    def run(self) -> CheckinResult:
        """
        Run a single cycle.

        Failures of the first attempt only trigger the refresh; failures of
        the refresh or of the retry propagate to the caller.
        """
        result = self._attempt()
        if result is not None:
            return result

        cookie = self.refresh()
        return self.client.checkin(cookie)
