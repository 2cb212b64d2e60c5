#!/usr/bin/env python3
"""
cli.py - Entry point for the streaming helper.

Usage:
    streaming start              # 10 minute intro, marks the stream live
    streaming kafe 300           # coffee break countdown
    streaming break 120          # generic break countdown
    streaming stop               # 5 minute outro, marks the stream offline
    streaming --no-notify start  # skip the live-status webhook
    streaming --help
"""

import argparse
import logging
import sys
from pathlib import Path

from streaming.caption_acquirer import ExhaustedRetriesError
from streaming.config import ConfigError, load_config
from streaming.notifier import NotificationError, notify_live
from streaming.progress import CaptionProgress
from streaming.providers import ProviderError, get_provider
from streaming.sequence import SequenceRunner
from streaming.streaming_utils import configure_logging
from streaming.version import __version__

_log = logging.getLogger("streaming.cli")

EXIT_INTERRUPTED = 130


def parse_seconds(value: str) -> int:
    """argparse type for a positive whole number of seconds."""
    try:
        seconds = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number of seconds: {value}") from None
    if seconds <= 0:
        raise argparse.ArgumentTypeError(f"invalid number of seconds: {value}")
    return seconds


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="streaming",
        description="Streaming helper. Check it out at https://www.twitch.tv/worldofyaml",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"streaming {__version__}"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="YAML config merged over the built-in defaults"
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="dotenv file with API keys (default: ./.env if present)"
    )
    parser.add_argument(
        "--provider",
        default=None,
        help="Chat provider to use (openai, anthropic)"
    )
    parser.add_argument(
        "--model",
        default=None,
        help="Model name passed to the provider"
    )
    parser.add_argument(
        "--no-notify",
        action="store_true",
        help="Do not update the live status on the personal page"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging to stderr"
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Append debug logs to this file"
    )

    subparsers = parser.add_subparsers(dest="command", metavar="command", required=True)

    start = subparsers.add_parser("start", help="Start the stream.")
    start.set_defaults(sequence="start", seconds=None)

    kafe = subparsers.add_parser("kafe", help="Small break - coffee preparation.")
    kafe.add_argument("seconds", type=parse_seconds, help="Countdown length in seconds")
    kafe.set_defaults(sequence="kafe")

    pause = subparsers.add_parser("break", help="Small break during the stream.")
    pause.add_argument("seconds", type=parse_seconds, help="Countdown length in seconds")
    pause.set_defaults(sequence="break")

    stop = subparsers.add_parser("stop", aliases=["end"], help="Stop the stream.")
    stop.set_defaults(sequence="stop", seconds=None)

    return parser


def run_command(args: argparse.Namespace) -> None:
    """Load config, update live status if needed and play the sequence."""
    config = load_config(
        args.config,
        args.env_file,
        overrides={"provider": args.provider, "model": args.model},
    )
    sequence = config.get_sequence(args.sequence)

    duration = args.seconds or sequence.duration_seconds
    if duration is None:
        raise ConfigError(f"Sequence '{sequence.name}' needs a duration")

    # Fail on a missing API key before touching the live status
    provider = get_provider(config)

    if sequence.notify_live is not None and not args.no_notify:
        if config.notify_url:
            notify_live(
                sequence.notify_live,
                config.notify_url,
                config.notify_token,
                timeout=config.notify_timeout,
            )
        else:
            _log.warning("No notify url configured, live status not updated")

    runner = SequenceRunner(config, provider, sink_factory=CaptionProgress)
    runner.run_sequence(sequence.template, duration, title=sequence.title)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=args.verbose, log_file=args.log_file)

    try:
        run_command(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED
    except (
        ConfigError,
        ProviderError,
        ExhaustedRetriesError,
        NotificationError,
        ImportError,
        ValueError,
    ) as e:
        _log.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
