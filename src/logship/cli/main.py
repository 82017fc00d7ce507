"""
Command-line entry point for logship.

Reads NDJSON log lines (one pino-style record per line) from stdin and
ships them to Coralogix until stdin closes, then drains:

    node app.js | logship --domain eu1 --application-name shop \
        --subsystem-name checkout

Every option can also come from a ``LOGSHIP_*`` environment variable;
flags take precedence. Prefer ``LOGSHIP_API_KEY`` over ``--api-key`` so the
key does not show up in process listings.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from collections.abc import AsyncIterator
from typing import IO, Any, Sequence

from ..core.errors import ConfigurationError
from ..transport import build_transport


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="logship",
        description="Ship NDJSON log lines from stdin to Coralogix.",
    )
    parser.add_argument("--domain", help="Coralogix region (us1, eu1, ...)")
    parser.add_argument("--api-key", dest="api_key", help="Coralogix API key")
    parser.add_argument("--application-name", dest="application_name")
    parser.add_argument("--subsystem-name", dest="subsystem_name")
    parser.add_argument("--computer-name", dest="computer_name")
    parser.add_argument("--batch-size", dest="batch_size", type=int)
    parser.add_argument(
        "--flush-interval",
        dest="flush_interval_seconds",
        type=float,
        help="Seconds between periodic flushes",
    )
    parser.add_argument(
        "--timeout", dest="timeout_seconds", type=float, help="Request timeout"
    )
    parser.add_argument(
        "--echo",
        action="store_true",
        help="Copy every input line to stdout (tee mode)",
    )
    return parser


async def read_lines(
    stream: IO[str], *, echo: bool = False, out: IO[str] | None = None
) -> AsyncIterator[str]:
    """Yield lines from a blocking text stream without blocking the loop."""
    while True:
        line = await asyncio.to_thread(stream.readline)
        if not line:
            return
        if echo:
            target = out or sys.stdout
            target.write(line)
            target.flush()
        yield line


async def main(
    argv: Sequence[str] | None = None, *, stdin: IO[str] | None = None
) -> int:
    """Main CLI entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    overrides: dict[str, Any] = {
        key: value
        for key, value in vars(args).items()
        if key != "echo" and value is not None
    }
    try:
        transport = build_transport(**overrides)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    await transport.run(read_lines(stdin or sys.stdin, echo=args.echo))
    return 0


def cli_main(argv: Sequence[str] | None = None) -> int:
    """CLI main function for non-async entry."""
    return asyncio.run(main(argv))


if __name__ == "__main__":
    sys.exit(cli_main())
