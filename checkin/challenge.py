"""
Bot-challenge solver.

Drives headless Chromium (Playwright) to the site root and waits for the
challenge clearance cookie to show up in the browser context. The browser
work is blocking and slow, so callers run it through solve_in_worker().
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Protocol

from .config import SiteConfig, SolverConfig
from .errors import BrowserError, ChallengeNotFound, CheckinError


logger = logging.getLogger(__name__)

BROWSER_ARGS = ["--no-sandbox", "--disable-gpu"]


class ChallengeSolver(Protocol):
    def solve_challenge(self) -> str:
        ...


def build_clearance_cookie(
    name: str,
    value: str,
    ip: str,
    expire_days: int,
    now: datetime | None = None,
) -> str:
    """Compose '{name}={value}; ip={ip}; expire_in={unix_ts}'."""
    now = now or datetime.now(timezone.utc)
    expire = now + timedelta(days=expire_days)
    parts = [f"{name}={value}", f"ip={ip}", f"expire_in={int(expire.timestamp())}"]
    return "; ".join(parts)


def poll_for_cookie(
    read_cookies: Callable[[], list[dict[str, Any]]],
    name: str,
    timeout: float,
    interval: float,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> dict[str, Any] | None:
    """
    Call read_cookies() every interval seconds until a cookie called name appears.

    Returns the cookie dict, or None once timeout seconds have passed.
    """
    start = clock()
    while clock() - start < timeout:
        for cookie in read_cookies():
            if cookie.get('name') == name:
                return cookie
        sleep(interval)
    return None


class BrowserChallengeSolver:
    """Solves the challenge with a real headless browser."""

    def __init__(self, site: SiteConfig | None = None, config: SolverConfig | None = None):
        self.site = site or SiteConfig()
        self.config = config or SolverConfig()

    def solve_challenge(self) -> str:
        try:
            from playwright.sync_api import Error as PlaywrightError
            from playwright.sync_api import sync_playwright
        except ImportError as e:
            raise BrowserError(
                "playwright is required: pip install playwright && playwright install chromium"
            ) from e

        config = self.config
        url = self.site.base_url
        logger.info("Launching browser for %s", url)

        try:
            with sync_playwright() as p:
                browser = p.chromium.launch(
                    headless=config.headless,
                    args=BROWSER_ARGS,
                    executable_path=config.executable_path,
                )
                try:
                    context = browser.new_context()
                    page = context.new_page()
                    page.goto(url, wait_until="load", timeout=config.timeout * 1000)
                    cookie = poll_for_cookie(
                        context.cookies,
                        config.cookie_name,
                        timeout=config.timeout,
                        interval=config.poll_interval,
                    )
                finally:
                    browser.close()
        except PlaywrightError as e:
            raise BrowserError(f"Browser failed on {url}: {e}") from e

        if cookie is None:
            raise ChallengeNotFound(
                f"{config.cookie_name} cookie not found within {config.timeout:.0f}s"
            )

        result = build_clearance_cookie(
            cookie['name'],
            cookie['value'],
            config.ip_placeholder,
            config.expire_days,
        )
        logger.debug("Retrieved %s", result.split(';', 1)[0])
        return result


def solve_in_worker(solver: ChallengeSolver) -> str:
    """
    Run solver.solve_challenge() on a dedicated worker thread and wait for it.

    CheckinError subclasses propagate as-is; anything else raised by the
    worker is reported as BrowserError.
    """
    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="challenge") as executor:
        future = executor.submit(solver.solve_challenge)
        try:
            return future.result()
        except CheckinError:
            raise
        except Exception as e:
            raise BrowserError(f"Challenge worker failed: {e!r}") from e
