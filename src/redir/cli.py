"""Command-line front end: trace one URL, or every URL found on stdin."""

from __future__ import annotations

import argparse
import sys
from typing import Iterable, TextIO

from .inputs import iter_urls
from .logging import set_level
from .render import OUTPUT_FORMATS, RED, RESET, render
from .settings import get_settings
from .tracer import RedirectTracer


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {value}")
    return number


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()
    parser = argparse.ArgumentParser(prog="redir", description="Follow HTTP redirections and show every hop")
    parser.add_argument(
        "--url",
        default="",
        help="The URL to follow redirections for. If empty, URLs are read from STDIN "
        "(one per line, extra text allowed).",
    )
    parser.add_argument(
        "--output",
        choices=OUTPUT_FORMATS,
        default=settings.output,
        help="Output format: json or table",
    )
    parser.add_argument(
        "--max",
        dest="max_hops",
        type=_positive_int,
        default=settings.max_hops,
        help="Maximum number of redirections to follow",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=settings.request_timeout_s,
        help="Per-request timeout seconds",
    )
    parser.add_argument("--no-color", action="store_true", help="Disable ANSI colors in table output")
    parser.add_argument("--verbose", action="store_true", help="Log every hop to stderr")
    return parser


def process_urls(
    urls: Iterable[str],
    tracer: RedirectTracer,
    *,
    max_hops: int,
    output: str,
    color: bool,
    stdout: TextIO,
    stderr: TextIO,
) -> int:
    """Trace each URL in turn; a failing URL is reported and skipped."""
    failures = 0
    for url in urls:
        result = tracer.trace(url, max_hops)
        if result.error is not None:
            failures += 1
            red, reset = (RED, RESET) if color else ("", "")
            print(f"{red}Error processing {url}: {result.error}{reset}", file=stderr)
            continue
        print(render(result, output, color=color), file=stdout)
    return 1 if failures else 0


def main(argv: list[str] | None = None, stdin: TextIO | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = get_settings()

    # stderr carries only per-target errors unless --verbose asks for logs.
    set_level("DEBUG" if args.verbose else "ERROR")

    tracer = RedirectTracer(settings.model_copy(update={"request_timeout_s": args.timeout}))
    urls: Iterable[str] = [args.url] if args.url else iter_urls(stdin or sys.stdin)
    return process_urls(
        urls,
        tracer,
        max_hops=args.max_hops,
        output=args.output,
        color=settings.color and not args.no_color,
        stdout=sys.stdout,
        stderr=sys.stderr,
    )


if __name__ == "__main__":
    raise SystemExit(main())
