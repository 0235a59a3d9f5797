"""
Session cookie persistence.

The cookie is stored as a single line of semicolon-joined name=value pairs
and handed back to the server verbatim.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from .config import COOKIE_FILE
from .errors import CookieFileEmpty, CookieFileError, CookieFileMissing


logger = logging.getLogger(__name__)

_EXPIRE_RE = re.compile(r'(?:^|;)\s*expire_in=(\d+)')


@dataclass
class CookieStatus:
    path: str
    exists: bool
    empty: bool
    names: list[str] = field(default_factory=list)
    expires_at: str | None = None
    expired: bool = False
    warning: str | None = None


def cookie_names(cookie: str) -> list[str]:
    """Names of the name=value pairs in a cookie string, in order."""
    names = []
    for part in cookie.split(';'):
        name, sep, _ = part.strip().partition('=')
        if sep and name:
            names.append(name)
    return names


def cookie_expiry(cookie: str) -> datetime | None:
    """Expiry embedded in the challenge fragment (expire_in=<unix ts>), if any."""
    match = _EXPIRE_RE.search(cookie)
    if not match:
        return None
    return datetime.fromtimestamp(int(match.group(1)), tz=timezone.utc)


class CookieStore:
    """Reads and writes the session cookie file."""

    def __init__(self, path: Path | str = COOKIE_FILE):
        self.path = Path(path)

    def _read(self) -> str:
        try:
            return self.path.read_text(encoding="utf-8").strip()
        except (OSError, UnicodeDecodeError) as e:
            raise CookieFileError(f"{self.path} is unreadable: {e}") from e

    def load(self) -> str:
        if not self.path.exists():
            raise CookieFileMissing(f"{self.path} does not exist")
        cookie = self._read()
        if not cookie:
            raise CookieFileEmpty(f"{self.path} is empty")
        return cookie

    def save(self, cookie: str) -> None:
        try:
            self.path.write_text(cookie.strip(), encoding="utf-8")
        except OSError as e:
            raise CookieFileError(f"Cannot write {self.path}: {e}") from e
        logger.info("Cookie saved to %s", self.path)

    def inspect(self) -> CookieStatus:
        path = str(self.path)
        if not self.path.exists():
            return CookieStatus(path=path, exists=False, empty=True, warning="cookie_file_missing")

        try:
            cookie = self._read()
        except CookieFileError:
            return CookieStatus(path=path, exists=True, empty=True, warning="cookie_file_unreadable")
        if not cookie:
            return CookieStatus(path=path, exists=True, empty=True, warning="cookie_file_empty")

        names = cookie_names(cookie)
        expiry = cookie_expiry(cookie)
        if expiry is None:
            return CookieStatus(path=path, exists=True, empty=False, names=names)

        expired = expiry < datetime.now(timezone.utc)
        return CookieStatus(
            path=path,
            exists=True,
            empty=False,
            names=names,
            expires_at=expiry.isoformat(),
            expired=expired,
            warning="cookie_expired" if expired else None,
        )
