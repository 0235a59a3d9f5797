"""
Daily check-in bot.

Primary interface:
    from checkin import load_settings, build_runner

    settings = load_settings()
    result = build_runner(settings).run()

    # Returns CheckinResult(ret, msg), or raises a CheckinError subclass
    # once the single refresh-then-retry cycle has also failed.
"""

from .challenge import BrowserChallengeSolver, solve_in_worker
from .client import CheckinResult, RequestsTransport, SessionClient, build_headers
from .config import Credentials, Settings, SiteConfig, SolverConfig, load_settings
from .cookies import CookieStatus, CookieStore
from .errors import CheckinError
from .orchestrator import CheckinRunner


__all__ = [
    'build_runner',
    'load_settings',
    'build_headers',
    'solve_in_worker',
    'BrowserChallengeSolver',
    'CheckinError',
    'CheckinResult',
    'CheckinRunner',
    'CookieStatus',
    'CookieStore',
    'Credentials',
    'RequestsTransport',
    'SessionClient',
    'Settings',
    'SiteConfig',
    'SolverConfig',
]


def build_runner(settings: Settings) -> CheckinRunner:
    """Wire the real browser, HTTP client and cookie file together."""
    if settings.credentials is None:
        raise ValueError("settings.credentials is required to run a check-in")
    return CheckinRunner(
        credentials=settings.credentials,
        store=CookieStore(settings.cookie_file),
        client=SessionClient(settings.site, RequestsTransport()),
        solver=BrowserChallengeSolver(settings.site, settings.solver),
    )
