"""
timestate.cli
=============

Command-line access to the temporal core.

Examples
--------
$ python -m timestate.cli parse 2024-02-29T12:00:00+02:00
$ python -m timestate.cli static --base 2024-02-29T12:00:00Z
$ python -m timestate.cli offset --base 2024-01-31T00:00:00Z --months 1
$ python -m timestate.cli check 2024-01-08T00:00:00Z --now 2024-01-09T00:00:00Z
$ python -m timestate.cli import 2024-01-01T00:00:00Z,0,0,7,0,0
$ python -m timestate.cli sleep 30s --timeout 10
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from typing import List, Optional

from .codec import format_rfc3339, parse_rfc3339, rfc3339_parse, unix_timestamp_parse
from .engine import TimeStateEngine
from .errors import Cancelled, TimeStateError
from .lifecycle import evaluate
from .models import OffsetSpec, Projection, RotationState
from .settings import settings
from .sleep import CancelToken, delay
from .state_codec import encode

logger = logging.getLogger(__name__)

_UNITS = ("years", "months", "days", "hours", "minutes", "seconds")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="timestate", description="Pinned time state utilities")
    parser.add_argument("--log-level", default=settings.log_level, help="logging level (default: %(default)s)")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("parse", help="decompose an RFC3339 timestamp")
    p.add_argument("timestamp")

    p = sub.add_parser("unix", help="decompose epoch seconds")
    p.add_argument("seconds", type=int)

    p = sub.add_parser("static", help="pin a base timestamp with no target")
    p.add_argument("--base", help="base timestamp (default: now)")

    p = sub.add_parser("offset", help="derive a target timestamp from a base")
    p.add_argument("--base", help="base timestamp (default: now)")
    for unit in _UNITS:
        p.add_argument(f"--{unit}", type=int)

    p = sub.add_parser("check", help="report whether a target has passed")
    p.add_argument("target")
    p.add_argument("--now", help="evaluation instant (default: now)")

    p = sub.add_parser("import", help="decode an import identifier")
    p.add_argument("identifier")

    p = sub.add_parser("sleep", help="cancellable delay")
    p.add_argument("duration", help="e.g. 30s, 5m, 1.5h, 250ms")
    p.add_argument("--timeout", type=float, help="give up after this many seconds")

    return parser


def _record_json(engine: TimeStateEngine, rec) -> dict:
    return {
        "id": rec.id,
        "base": format_rfc3339(rec.base),
        "target": None if rec.is_static else format_rfc3339(rec.target),
        "import_id": encode(rec),
        "fields": asdict(engine.read(rec, Projection.TARGET)),
    }


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format=settings.log_format)
    engine = TimeStateEngine()

    try:
        if args.command == "parse":
            print(json.dumps(rfc3339_parse(args.timestamp), indent=2))

        elif args.command == "unix":
            print(json.dumps(unix_timestamp_parse(args.seconds), indent=2))

        elif args.command == "static":
            print(json.dumps(_record_json(engine, engine.create_static(base=args.base)), indent=2))

        elif args.command == "offset":
            spec = OffsetSpec.of(**{u: getattr(args, u) for u in _UNITS})
            rec = engine.create(spec, base=args.base, rotating=False)
            print(json.dumps(_record_json(engine, rec), indent=2))

        elif args.command == "check":
            now = parse_rfc3339(args.now) if args.now else engine.clock.now()
            state = evaluate(now, parse_rfc3339(args.target))
            print(state.name)
            return 1 if state is RotationState.EXPIRED else 0

        elif args.command == "import":
            print(json.dumps(_record_json(engine, engine.import_record(args.identifier)), indent=2))

        elif args.command == "sleep":
            token = CancelToken.with_timeout(args.timeout) if args.timeout is not None else CancelToken()
            try:
                delay(args.duration, token).raise_if_cancelled("sleep")
            except KeyboardInterrupt:
                token.cancel("interrupted")
                raise Cancelled("sleep interrupted")

    except Cancelled as e:
        logger.warning(str(e))
        return 130
    except TimeStateError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
