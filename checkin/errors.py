"""
Exceptions raised by the check-in flow.

Everything derives from CheckinError so the CLI can report any failure of a
run from a single except clause.
"""

from __future__ import annotations


class CheckinError(Exception):
    """Base class for check-in failures."""

    code = 'checkin_error'

    def __init__(self, message: str = ''):
        self.message = message or self.__class__.__doc__ or self.code
        super().__init__(self.message)


class CredentialsMissing(CheckinError):
    """Login email or password is not configured."""

    code = 'credentials_missing'


class CookieFileError(CheckinError):
    """The persisted session cookie cannot be used."""

    code = 'cookie_file_error'


class CookieFileMissing(CookieFileError):
    """Cookie file does not exist."""

    code = 'cookie_file_missing'


class CookieFileEmpty(CookieFileError):
    """Cookie file is empty."""

    code = 'cookie_file_empty'


class RequestFailed(CheckinError):
    """HTTP request failed or returned a non-success status."""

    code = 'request_failed'

    def __init__(self, message: str = '', status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class CookieExpired(CheckinError):
    """Check-in response was not the expected JSON, the session is stale."""

    code = 'cookie_expired'


class ChallengeNotFound(CheckinError):
    """Browser never received the challenge clearance cookie."""

    code = 'challenge_not_found'


class BrowserError(CheckinError):
    """Headless browser could not be launched or navigated."""

    code = 'browser_error'


class InvalidHeaderValue(CheckinError):
    """A header name or value is not valid HTTP header syntax."""

    code = 'invalid_header_value'

    def __init__(self, message: str = '', name: str | None = None):
        self.name = name
        super().__init__(message)
