"""CLI for cleaning saved comment pages and plain text locally."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any

from talkback_cleaner.config import AppConfig, load_config
from talkback_cleaner.core.logging_utils import setup_json_logging
from talkback_cleaner.core.text_cleaner import TextCleaner
from talkback_cleaner.dom.document import LiveDocument
from talkback_cleaner.pipeline.bootstrap import CommentCleaner, schedule_startup
from talkback_cleaner.pipeline.scheduler import LoopFrameClock

logger = logging.getLogger(__name__)

__all__ = ["main", "run_page", "run_text"]


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        prog="talkback-cleaner",
        description="Strip invisible-character spam and blank padding from comments",
        allow_abbrev=False,
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override the configured log level for this session.",
    )
    parser.add_argument(
        "--verbosity",
        choices=["off", "summary", "verbose"],
        help="Override the configured pipeline log verbosity.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    page = sub.add_parser("page", help="Clean every comment in a saved HTML page")
    page.add_argument("path", type=Path, help="HTML file to clean")
    page.add_argument(
        "--url",
        default=None,
        help="Location reported by the page (must match PAGE_URL_PATTERN).",
    )
    page.add_argument("--output", "-o", type=Path, help="Write cleaned HTML here (default stdout)")
    page.add_argument(
        "--append",
        type=Path,
        action="append",
        default=[],
        help="HTML fragment appended to the comment list after startup, like a lazy load. "
        "May be repeated.",
    )
    page.add_argument(
        "--frames",
        type=int,
        default=3,
        help="Frames to keep observing after the last append.",
    )
    page.add_argument("--stats", type=Path, help="Write run statistics JSON here")

    text = sub.add_parser("text", help="Clean plain comment text")
    text.add_argument("path", nargs="?", default="-", help="Text file, or '-' for stdin")
    return parser.parse_args(argv)


def _prepare_config(args: argparse.Namespace) -> AppConfig:
    runtime: dict[str, Any] = {}
    if args.log_level:
        runtime["log_level"] = args.log_level
    if args.verbosity:
        runtime["log_verbosity"] = args.verbosity
    return load_config(runtime=runtime) if runtime else load_config()


def run_text(args: argparse.Namespace, config: AppConfig) -> dict[str, Any]:
    raw = sys.stdin.read() if args.path == "-" else Path(args.path).read_text(encoding="utf-8")
    result = TextCleaner.from_config(config.cleaner).clean(raw)
    return asdict(result)


async def run_page(args: argparse.Namespace, config: AppConfig) -> tuple[str, dict[str, Any]]:
    loop = asyncio.get_running_loop()
    url = args.url or "https://news.walla.co.il/item/local"
    document = LiveDocument.from_file(args.path, url=url)
    clock = LoopFrameClock(loop, interval_ms=config.observer.frame_interval_ms)
    cleaner = CommentCleaner(document, config, clock=clock)

    started = asyncio.Event()

    def _init() -> None:
        cleaner.init()
        started.set()

    schedule_startup(
        _init,
        loop=loop,
        idle_timeout_ms=config.observer.idle_timeout_ms,
        startup_delay_ms=config.observer.startup_delay_ms,
    )
    await started.wait()

    frame = config.observer.frame_interval_ms / 1000.0
    if cleaner.started:
        for fragment in args.append:
            root = cleaner.scheduler.root
            if root is None:
                break
            document.append_html(root, fragment.read_text(encoding="utf-8"))
            await asyncio.sleep(frame)
        await asyncio.sleep(frame * max(args.frames, 1))

    cleaner.stop()
    stats = {
        **cleaner.statistics.to_dict(),
        "started": cleaner.started,
        "passes": cleaner.processor.passes,
        "failures": cleaner.scheduler.failures,
    }
    return document.to_html(), stats


def main(argv: list[str] | None = None) -> int:
    """Entry point for ``talkback-cleaner`` and ``python -m talkback_cleaner.cli.clean``."""
    args = parse_args(argv)
    try:
        config = _prepare_config(args)
    except RuntimeError as exc:
        print(str(exc), file=sys.stderr)
        return 2

    setup_json_logging(
        config.runtime.log_level,
        json_output=config.runtime.log_json,
        log_file=config.runtime.log_file,
    )

    try:
        if args.command == "text":
            print(json.dumps(run_text(args, config), ensure_ascii=False, indent=2))
            return 0

        html, stats = asyncio.run(run_page(args, config))
        if args.output:
            args.output.write_text(html, encoding="utf-8")
        else:
            sys.stdout.write(html)
        if args.stats:
            args.stats.write_text(json.dumps(stats, indent=2), encoding="utf-8")
        else:
            print(json.dumps(stats), file=sys.stderr)
        return 0 if stats["started"] else 1
    except KeyboardInterrupt:  # pragma: no cover - user cancelled
        return 1
    except Exception as exc:
        logger.exception("cli_clean_failed", exc_info=exc)
        return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
