import argparse
import curses
import sys

from loguru import logger

from .app import Application
from .client import GeminiClient
from .config import LOG_LEVELS, Settings
from .errors import GeminiError
from .log import configure_logging
from .terminal import CursesTerminal


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="dioscuri", description="A terminal browser for Gemini capsules.")

    parser.add_argument("url", nargs="?", help="Address to open (defaults to DIOSCURI_DEFAULT_URL).")
    parser.add_argument("--log-file", type=str, help="File to write logs to.")
    parser.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, help="Minimum level to log (e.g., DEBUG, INFO).")
    parser.add_argument("--dump", action="store_true", help="Print the body of URL to stdout and exit.")

    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> Settings:
    settings = Settings()
    overrides = {}
    if args.url:
        overrides["default_url"] = args.url
    if args.log_file:
        overrides["log_file"] = args.log_file
    if args.log_level:
        overrides["log_level"] = args.log_level
    return settings.model_copy(update=overrides)


def dump(client: GeminiClient, url: str) -> int:
    try:
        body = client.request(url)
    except GeminiError as e:
        print(f"dioscuri: {e}", file=sys.stderr)
        return 1

    sys.stdout.write(body)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = build_settings(args)
    configure_logging(settings)

    with GeminiClient.from_settings(settings) as client:
        if args.dump:
            return dump(client, settings.default_url)

        def run(window: "curses.window") -> None:
            app = Application(
                client,
                CursesTerminal(window),
                default_url=settings.default_url,
                tick_rate=settings.tick_rate_seconds,
            )
            app.run()

        try:
            curses.wrapper(run)
        except KeyboardInterrupt:
            logger.info("interrupted")
    return 0


if __name__ == "__main__":
    sys.exit(main())
