"""
Tests for scripts/daily_checkin.py.
"""

import logging
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pytest

from checkin.client import CheckinResult
from checkin.errors import ChallengeNotFound
from scripts import daily_checkin


ENV_VARS = ["OKTI_EMAIL", "OKTI_PASSWD", "OKTI_HOST", "OKTI_COOKIE_FILE", "OKTI_CHROMIUM_PATH", "LOG_LEVEL", "LOG_FILE"]


@pytest.fixture
def env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    # keep the project .env out of the way
    monkeypatch.setattr(daily_checkin, "load_settings",
                        lambda require_credentials=True: _load(tmp_path, require_credentials))
    yield monkeypatch
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()


def _load(tmp_path, require_credentials):
    from checkin.config import load_settings
    return load_settings(env_file=tmp_path / "missing.env", require_credentials=require_credentials)


def _with_credentials(env):
    env.setenv("OKTI_EMAIL", "me@example.test")
    env.setenv("OKTI_PASSWD", "s3cret")


class TestStatus:

    def test_missing_cookie(self, env, tmp_path, capsys):
        code = daily_checkin.main(["--status", "--cookie-file", str(tmp_path / "cookie.txt")])
        assert code == 1
        assert "MISSING" in capsys.readouterr().out

    def test_valid_cookie_without_credentials(self, env, tmp_path, capsys):
        path = tmp_path / "cookie.txt"
        path.write_text("uid=1;cf_clearance=x; ip=y; expire_in=4102444800", encoding="utf-8")

        code = daily_checkin.main(["--status", "--cookie-file", str(path)])

        out = capsys.readouterr().out
        assert code == 0
        assert "uid, cf_clearance" in out
        assert "valid" in out


class TestRun:

    def test_credentials_missing(self, env, capsys):
        assert daily_checkin.main([]) == 2
        assert "OKTI_EMAIL" in capsys.readouterr().err

    def test_success(self, env, tmp_path):
        _with_credentials(env)
        runner = MagicMock()
        runner.run.return_value = CheckinResult(ret=1, msg="ok")

        with patch.object(daily_checkin, "build_runner", return_value=runner) as build:
            code = daily_checkin.main(["--log-file", str(tmp_path / "app.log"), "--host", "example.test"])

        assert code == 0
        runner.run.assert_called_once()
        runner.close.assert_called_once()
        runner.refresh.assert_not_called()
        settings = build.call_args[0][0]
        assert settings.site.host == "example.test"

    def test_failure_exit_code(self, env, tmp_path):
        _with_credentials(env)
        runner = MagicMock()
        runner.run.side_effect = ChallengeNotFound("cf_clearance cookie not found within 60s")

        with patch.object(daily_checkin, "build_runner", return_value=runner):
            code = daily_checkin.main(["--log-file", str(tmp_path / "app.log")])

        assert code == 1
        runner.close.assert_called_once()

    def test_refresh_only(self, env, tmp_path):
        _with_credentials(env)
        runner = MagicMock()

        with patch.object(daily_checkin, "build_runner", return_value=runner) as build:
            code = daily_checkin.main([
                "--refresh", "--headful", "--chromium", "/usr/bin/chromium",
                "--log-file", str(tmp_path / "app.log"),
            ])

        assert code == 0
        runner.refresh.assert_called_once()
        runner.run.assert_not_called()
        runner.close.assert_called_once()
        settings = build.call_args[0][0]
        assert settings.solver.headless is False
        assert settings.solver.executable_path == "/usr/bin/chromium"
