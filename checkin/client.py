"""
HTTP session client for the login and check-in endpoints.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Mapping, Protocol

import requests

from .config import (
    BASE_HEADERS,
    CHECKIN_TIMEOUT,
    FORM_CONTENT_TYPE,
    LOGIN_TIMEOUT,
    Credentials,
    SiteConfig,
)
from .errors import CookieExpired, InvalidHeaderValue, RequestFailed


logger = logging.getLogger(__name__)

# RFC 7230 token / field-value (visible ASCII, inner space and tab)
_HEADER_NAME_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")
_HEADER_VALUE_RE = re.compile(r"(?:[\x21-\x7e](?:[\t\x20-\x7e]*[\x21-\x7e])?)?")


@dataclass
class HttpResponse:
    status_code: int
    text: str = ''
    cookies: list[tuple[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class Transport(Protocol):
    def post(
        self,
        url: str,
        headers: Mapping[str, str],
        data: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> HttpResponse:
        ...


class RequestsTransport:
    """Transport backed by a requests.Session."""

    def __init__(self, session: requests.Session | None = None):
        self.session = session or requests.Session()

    def close(self) -> None:
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def post(self, url, headers, data=None, timeout=None) -> HttpResponse:
        try:
            resp = self.session.post(
                url,
                headers=dict(headers),
                data=data,
                timeout=timeout,
                allow_redirects=False,
            )
        except requests.RequestException as e:
            raise RequestFailed(f"POST {url} failed: {e}") from e

        return HttpResponse(
            status_code=resp.status_code,
            text=resp.text,
            cookies=[(c.name, c.value) for c in resp.cookies],
        )


@dataclass
class CheckinResult:
    ret: int
    msg: str


def _validate_header(name: str, value: str) -> None:
    if not isinstance(name, str) or not _HEADER_NAME_RE.fullmatch(name):
        raise InvalidHeaderValue(f"Invalid header name: {name!r}", name=str(name))
    if not isinstance(value, str) or not _HEADER_VALUE_RE.fullmatch(value):
        raise InvalidHeaderValue(f"Invalid header value for {name}", name=name)


def _set_header(headers: dict[str, str], name: str, value: str) -> None:
    for existing in list(headers):
        if existing.lower() == name.lower():
            del headers[existing]
    headers[name] = value


def build_headers(site: SiteConfig, extra: Mapping[str, str] | None = None) -> dict[str, str]:
    """
    Browser-like request headers for site, with extra headers merged on top.

    Header names match case-insensitively, so extra replaces a base header
    of the same name. Raises InvalidHeaderValue on malformed input.
    """
    headers = dict(BASE_HEADERS)
    headers['Host'] = site.host
    headers['Origin'] = site.origin

    for name, value in (extra or {}).items():
        _validate_header(name, value)
        _set_header(headers, name, value)

    return headers


def parse_checkin_response(text: str) -> CheckinResult:
    """Parse a {ret: int, msg: str} body or raise CookieExpired."""
    try:
        data = json.loads(text)
    except ValueError as e:
        raise CookieExpired(f"Check-in response is not JSON: {e}") from e

    if not isinstance(data, dict):
        raise CookieExpired("Check-in response is not a JSON object")
    ret = data.get('ret')
    msg = data.get('msg')
    if isinstance(ret, bool) or not isinstance(ret, int) or not isinstance(msg, str):
        raise CookieExpired(f"Unexpected check-in response: {text[:200]}")
    return CheckinResult(ret=ret, msg=msg)


class SessionClient:
    """Issues the login and check-in requests for one site."""

    def __init__(self, site: SiteConfig | None = None, transport: Transport | None = None):
        self.site = site or SiteConfig()
        self.transport = transport or RequestsTransport()

    def close(self) -> None:
        """Release the transport's connections, if it holds any."""
        close = getattr(self.transport, 'close', None)
        if close is not None:
            close()

    def login(self, credentials: Credentials, challenge_cookie: str) -> str:
        """Log in and return the session cookie (server cookies + challenge cookie)."""
        url = self.site.login_url
        headers = build_headers(self.site, {
            'Referer': url,
            'Content-Type': FORM_CONTENT_TYPE,
            'Cookie': challenge_cookie,
        })
        form = {
            'email': credentials.email,
            'passwd': credentials.password,
            'code': '',
        }

        resp = self.transport.post(url, headers, data=form, timeout=LOGIN_TIMEOUT)
        if not resp.ok:
            raise RequestFailed(f"Login failed with status {resp.status_code}", status_code=resp.status_code)

        cookie_lines = [f"{name}={value}" for name, value in resp.cookies]
        cookie_lines.append(challenge_cookie)
        logger.info("Login successful, received %d cookie(s)", len(resp.cookies))
        return ";".join(cookie_lines)

    def checkin(self, session_cookie: str) -> CheckinResult:
        url = self.site.checkin_url
        headers = build_headers(self.site, {
            'Referer': self.site.user_url,
            'TE': 'trailers',
            'Content-Length': '0',
            'Cookie': session_cookie,
        })

        resp = self.transport.post(url, headers, timeout=CHECKIN_TIMEOUT)
        if not resp.ok:
            raise RequestFailed(f"Check-in failed with status {resp.status_code}", status_code=resp.status_code)
        logger.info("Status: %s", resp.status_code)

        try:
            result = parse_checkin_response(resp.text)
        except CookieExpired as e:
            logger.warning("Failed to parse response as JSON: %s", e)
            raise
        logger.info("ret=%s msg=%s", result.ret, result.msg)
        return result
