from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from simapi.exceptions import SimapiInputError, SimapiResourceError
from simapi.stress import burn_cpu, delay, delay_range, hold_memory, write_and_hold
from simapi.stress.result import StressResult


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="simapi",
        description="Stress this machine or serve the simulation HTTP API.",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Log generator progress to stderr."
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn.")
    serve.add_argument("--host", help="Bind address (default: SIMAPI_HOST).")
    serve.add_argument("--port", type=int, help="Port (default: SIMAPI_PORT).")
    serve.add_argument("--reload", action="store_true", help="Reload on code changes.")

    cpu = sub.add_parser("cpu", help="Load every core at PERCENT for SECONDS.")
    cpu.add_argument("seconds", type=int)
    cpu.add_argument("percent", type=int)
    cpu.add_argument("--workers", type=int, help="Worker processes (default: cores).")

    memory = sub.add_parser("memory", help="Hold SIZE_MB MiB for SECONDS.")
    memory.add_argument("seconds", type=int)
    memory.add_argument("size_mb", type=int)

    disk = sub.add_parser("disk", help="Keep a SIZE_MB MiB scratch file for SECONDS.")
    disk.add_argument("seconds", type=int)
    disk.add_argument("size_mb", type=int)
    disk.add_argument("--scratch-dir", help="Directory for the scratch file.")

    sleep = sub.add_parser("delay", help="Sleep MS milliseconds (or a random time up to MS_MAX).")
    sleep.add_argument("ms", type=int)
    sleep.add_argument("ms_max", type=int, nargs="?")

    return parser.parse_args(argv)


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    from simapi.server.config import get_settings

    settings = get_settings()
    uvicorn.run(
        "simapi.server:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload,
    )
    return 0


def _run(args: argparse.Namespace) -> StressResult:
    if args.command == "cpu":
        return burn_cpu(args.seconds, args.percent, workers=args.workers)
    if args.command == "memory":
        return hold_memory(args.seconds, args.size_mb)
    if args.command == "disk":
        return write_and_hold(args.seconds, args.size_mb, scratch_dir=args.scratch_dir)
    if args.ms_max is not None:
        return delay_range(args.ms, args.ms_max)
    return delay(args.ms)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if args.command == "serve":
        return _serve(args)
    try:
        result = _run(args)
    except SimapiInputError as exc:
        print(f"error: {exc.message}", file=sys.stderr)
        return 2
    except SimapiResourceError as exc:
        print(f"error: {exc.message}", file=sys.stderr)
        return 1
    print(json.dumps(result.to_dict(), ensure_ascii=True))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
