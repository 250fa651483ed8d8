"""
CLI wrapper for build_chart_payload().

Usage:
    ganzhi --birth-date YYYY-MM-DD --birth-time HH:MM \
        [--latitude LAT --longitude LON] [--utc-offset OFFSET] \
        [--language en|zh-hans|zh-hant|ja] [--method pattern|strength_balance|climate] [--verbose]
"""

import argparse
import json
import logging
import sys

from ganzhi.config import get_settings
from ganzhi.create_chart import build_chart_payload
from ganzhi.labels import LANGUAGES
from ganzhi.useful_god import UsefulGodMethod


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ganzhi", description="Compute a Four Pillars (BaZi) chart.")
    parser.add_argument("--birth-date", required=True, dest="birth_date")
    parser.add_argument("--birth-time", required=True, dest="birth_time")
    parser.add_argument("--latitude", type=float, default=None)
    parser.add_argument("--longitude", type=float, default=None)
    parser.add_argument("--utc-offset", dest="utc_offset", type=float, default=None)
    parser.add_argument("--language", choices=LANGUAGES, default=None)
    parser.add_argument("--method", choices=[m.value for m in UsefulGodMethod], default=None,
                        help="only report this useful-god method")
    parser.add_argument("--verbose", "-v", action="store_true")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    settings = get_settings()

    level = logging.DEBUG if args.verbose else getattr(logging, settings.log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)

    try:
        payload = build_chart_payload(
            birth_date=args.birth_date,
            birth_time=args.birth_time,
            latitude=args.latitude,
            longitude=args.longitude,
            utc_offset=args.utc_offset,
            language=args.language,
            settings=settings,
        )
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if args.method is not None:
        payload["useful_gods"] = {args.method: payload["useful_gods"][args.method]}

    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
