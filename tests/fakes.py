"""
Test doubles for the network and the browser.
"""

from checkin.client import HttpResponse
from checkin.errors import ChallengeNotFound


class FakeTransport:
    """Returns queued responses and records every request."""

    def __init__(self, responses=None):
        self.responses = list(responses or [])
        self.requests = []

    def post(self, url, headers, data=None, timeout=None):
        self.requests.append({"url": url, "headers": dict(headers), "data": data, "timeout": timeout})
        if not self.responses:
            raise AssertionError(f"unexpected request to {url}")
        resp = self.responses.pop(0)
        if isinstance(resp, Exception):
            raise resp
        return resp

    def urls(self):
        return [r["url"] for r in self.requests]


class StubSolver:
    def __init__(self, token="cf_clearance=tok; ip=abc; expire_in=1900000000", error=None):
        self.token = token
        self.error = error
        self.calls = 0

    def solve_challenge(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.token


class TimeoutSolver(StubSolver):
    def __init__(self):
        super().__init__(error=ChallengeNotFound("cf_clearance cookie not found within 60s"))


def ok_json(body='{"ret":1,"msg":"ok"}'):
    return HttpResponse(status_code=200, text=body)


def login_ok(cookies=(("uid", "42"), ("key", "k3y"))):
    return HttpResponse(status_code=200, text='{"ret":1,"msg":"login ok"}', cookies=list(cookies))
