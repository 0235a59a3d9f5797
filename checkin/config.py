"""
Configuration and constants for the check-in bot.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from .errors import CredentialsMissing


PROJECT_ROOT = Path(__file__).parent.parent
ENV_FILE = PROJECT_ROOT / ".env"

TARGET_HOST = "okti.xyz"
COOKIE_FILE = "cookie.txt"
LOG_FILE = "app.log"

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:145.0) Gecko/20100101 Firefox/145.0"
)

# Challenge cookie
CF_CLEARANCE_NAME = "cf_clearance"
IP_PLACEHOLDER = "12704efe9702be1480f07823cef5222b"  # md5 of the client ip
COOKIE_EXPIRE_DAYS = 30
CHALLENGE_TIMEOUT = 60.0
POLL_INTERVAL = 2.0

LOGIN_TIMEOUT = 30.0
CHECKIN_TIMEOUT = 30.0

# Browser-like headers sent with every request. Host and Origin are added per site.
BASE_HEADERS = {
    'User-Agent': DEFAULT_USER_AGENT,
    'Accept': 'application/json, text/javascript, */*; q=0.01',
    'Accept-Language': 'zh-CN,zh;q=0.8,zh-TW;q=0.7,zh-HK;q=0.5,en-US;q=0.3,en;q=0.2',
    'X-Requested-With': 'XMLHttpRequest',
    'Connection': 'keep-alive',
    'Sec-Fetch-Dest': 'empty',
    'Sec-Fetch-Mode': 'cors',
    'Sec-Fetch-Site': 'same-origin',
    'Priority': 'u=0',
    'Pragma': 'no-cache',
    'Cache-Control': 'no-cache',
}

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=UTF-8"

EMAIL_ENV = "OKTI_EMAIL"
PASSWORD_ENV = "OKTI_PASSWD"


@dataclass(frozen=True)
class Credentials:
    email: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(email={self.email!r}, password='***')"


@dataclass(frozen=True)
class SiteConfig:
    """Endpoints of the target site."""

    host: str = TARGET_HOST
    scheme: str = "https"

    @property
    def base_url(self) -> str:
        return f"{self.scheme}://{self.host}"

    @property
    def origin(self) -> str:
        return f"{self.base_url}/"

    @property
    def login_url(self) -> str:
        return f"{self.base_url}/auth/login"

    @property
    def checkin_url(self) -> str:
        return f"{self.base_url}/user/checkin"

    @property
    def user_url(self) -> str:
        return f"{self.base_url}/user"


@dataclass(frozen=True)
class SolverConfig:
    """Settings for the browser challenge solver."""

    cookie_name: str = CF_CLEARANCE_NAME
    timeout: float = CHALLENGE_TIMEOUT  # seconds to wait for the cookie
    poll_interval: float = POLL_INTERVAL
    ip_placeholder: str = IP_PLACEHOLDER
    expire_days: int = COOKIE_EXPIRE_DAYS
    headless: bool = True
    executable_path: str | None = None  # e.g. /usr/bin/chromium on servers


@dataclass
class Settings:
    credentials: Credentials | None = None
    site: SiteConfig = field(default_factory=SiteConfig)
    solver: SolverConfig = field(default_factory=SolverConfig)
    cookie_file: Path = Path(COOKIE_FILE)
    log_level: str = "INFO"
    log_file: Path | None = Path(LOG_FILE)


def _getenv(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


def load_credentials() -> Credentials:
    """Read login credentials from the environment."""
    email = _getenv(EMAIL_ENV)
    password = _getenv(PASSWORD_ENV)
    missing = [name for name, value in ((EMAIL_ENV, email), (PASSWORD_ENV, password)) if not value]
    if missing:
        raise CredentialsMissing(f"Missing environment variable(s): {', '.join(missing)}")
    return Credentials(email=email, password=password)


def load_settings(env_file: Path | None = ENV_FILE, require_credentials: bool = True) -> Settings:
    """
    Build Settings from environment variables.

    Loads env_file first when it exists; variables already set in the
    process environment win.
    """
    if env_file is not None and Path(env_file).exists():
        load_dotenv(dotenv_path=env_file)

    credentials = load_credentials() if require_credentials else None

    log_file = _getenv("LOG_FILE", LOG_FILE)
    chromium = _getenv("OKTI_CHROMIUM_PATH")

    return Settings(
        credentials=credentials,
        site=SiteConfig(host=_getenv("OKTI_HOST", TARGET_HOST)),
        solver=SolverConfig(executable_path=chromium or None),
        cookie_file=Path(_getenv("OKTI_COOKIE_FILE", COOKIE_FILE)),
        log_level=_getenv("LOG_LEVEL", "INFO").upper(),
        log_file=Path(log_file) if log_file else None,
    )
