#!/usr/bin/env python3
"""
Daily check-in - run one check-in cycle against the configured site.

Commands:
    (default)           Check in, refreshing the cookie once if it is stale
    --refresh           Force a cookie refresh (browser challenge + login)
    --status            Show the stored cookie without touching the network

Usage:
    python scripts/daily_checkin.py
    python scripts/daily_checkin.py --refresh --chromium /usr/bin/chromium
    python scripts/daily_checkin.py --status --cookie-file cookie.txt

Credentials come from OKTI_EMAIL / OKTI_PASSWD (a .env file in the project
root is loaded first). Meant to be invoked by an external scheduler, e.g.:
    0 8 * * * cd /opt/checkin && python scripts/daily_checkin.py
"""

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from checkin import CookieStore, build_runner, load_settings
from checkin.errors import CheckinError, CredentialsMissing
from checkin.log import setup_logging


logger = logging.getLogger("checkin.cli")


def cmd_status(store: CookieStore) -> int:
    """Print the state of the stored cookie."""
    status = store.inspect()

    print(f'Cookie file: {status.path}')
    if not status.exists:
        print('Status: MISSING - next run will refresh')
        return 1
    if status.warning == 'cookie_file_unreadable':
        print('Status: UNREADABLE - next run will refresh')
        return 1
    if status.empty:
        print('Status: EMPTY - next run will refresh')
        return 1

    print(f'Cookies: {", ".join(status.names) or "none"}')
    if status.expires_at:
        state = 'EXPIRED' if status.expired else 'valid'
        print(f'Challenge expires: {status.expires_at} ({state})')
    else:
        print('Challenge expires: unknown')
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description='Daily check-in bot',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )

    group = parser.add_mutually_exclusive_group()
    group.add_argument('--refresh', action='store_true', help='Refresh the cookie without checking in')
    group.add_argument('--status', action='store_true', help='Show the stored cookie and exit')
    parser.add_argument('--cookie-file', type=Path, help='Cookie file (default: cookie.txt)')
    parser.add_argument('--host', help='Target host (default: okti.xyz)')
    parser.add_argument('--log-level', help='Logging level (default: INFO)')
    parser.add_argument('--log-file', type=Path, help='Log file (default: app.log)')
    parser.add_argument('--headful', action='store_true', help='Show the browser window')
    parser.add_argument('--chromium', help='Path to the Chromium executable')

    args = parser.parse_args(argv)

    try:
        settings = load_settings(require_credentials=not args.status)
    except CredentialsMissing as e:
        print(f'Error: {e}', file=sys.stderr)
        return 2

    if args.cookie_file:
        settings.cookie_file = args.cookie_file
    if args.host:
        settings.site = replace(settings.site, host=args.host)
    if args.log_level:
        settings.log_level = args.log_level.upper()
    if args.log_file:
        settings.log_file = args.log_file
    if args.headful:
        settings.solver = replace(settings.solver, headless=False)
    if args.chromium:
        settings.solver = replace(settings.solver, executable_path=args.chromium)

    if args.status:
        return cmd_status(CookieStore(settings.cookie_file))

    setup_logging(settings.log_level, settings.log_file)
    runner = build_runner(settings)

    try:
        if args.refresh:
            runner.refresh()
            logger.info("Cookie refreshed")
        else:
            result = runner.run()
            logger.info("Check-in done: %s", result.msg)
    except CheckinError as e:
        logger.error("Check-in failed (%s): %s", e.code, e)
        return 1
    finally:
        runner.close()

    return 0


if __name__ == '__main__':
    sys.exit(main())
