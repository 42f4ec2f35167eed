import argparse
import logging
import shlex
import sys
from pathlib import Path
from textwrap import dedent
from typing import Optional, Sequence

from colorama import Fore, Style, init

from huffbench import (
    BenchmarkError,
    EmptyAccumulatorError,
    MeasurementError,
    build_tool,
    discover_categories,
    make_report,
    measurer_from_settings,
    run_benchmark,
)
from huffbench import config
from huffbench.timer import PerformanceMonitor

VERSION = "0.2.0"


def setup_logging(verbosity: int) -> None:
    debug_enabled = verbosity >= 2

    class _Formatter(logging.Formatter):
        def __init__(self, debug: bool) -> None:
            super().__init__()
            self._debug = debug

        def format(self, record: logging.LogRecord) -> str:
            if record.levelno == logging.DEBUG:
                if self._debug:
                    return f"DEBUG: {record.getMessage()}"
                return ""
            if record.levelno == logging.INFO:
                return record.getMessage()
            if record.levelno >= logging.WARNING:
                return f"{record.levelname}: {record.getMessage()}"
            return ""

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_Formatter(debug_enabled))

    root_logger = logging.getLogger()
    root_logger.handlers = []
    root_logger.addHandler(handler)
    if debug_enabled:
        root_logger.setLevel(logging.DEBUG)
    elif verbosity >= 1:
        root_logger.setLevel(logging.INFO)
    else:
        root_logger.setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    description = dedent(
        """
        Measure how much the huffman stage shrinks every PNG of a corpus compared
        to the raw pixels and to QOI, and report per-category and total savings.
        """
    ).strip()

    epilog = dedent(
        """
        Examples:
          huffbench                                  Human-readable report for ./corpus
          huffbench -t > results.md                  Markdown table, no progress bars
          huffbench --build -j 8 --corpus images     Build the tool first, use 8 workers
          huffbench --reference-command "qoiconv {input} -"
                                                     Measure QOI sizes with a separate encoder

        Verbosity levels:
          -v    Show per-category file counts and the timing summary
          -vv   Enable full debug logging
        """
    ).rstrip()

    parser = argparse.ArgumentParser(
        prog="huffbench",
        description=description,
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )
    parser.add_argument(
        "-t",
        "--table",
        action="store_true",
        help="Print a Markdown table instead of the colored report",
    )
    parser.add_argument(
        "--corpus",
        type=Path,
        default=Path(config.DEFAULT_CORPUS_DIR),
        help="Corpus root with one subdirectory per category (default: %(default)s)",
    )
    parser.add_argument(
        "--tool",
        default=config.DEFAULT_TOOL,
        help="Measurement tool invoked as '<tool> <file>' (default: %(default)s)",
    )
    parser.add_argument(
        "-j",
        "--threads",
        type=int,
        default=config.DEFAULT_CONCURRENCY,
        help="Concurrent measurements per category (default: %(default)s)",
    )
    parser.add_argument(
        "--reference-command",
        default=None,
        help="Encode each file to QOI on stdout with this command instead of trusting the tool's QOI size. "
        "'{input}' is replaced with the file path",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds before a single external command is considered failed",
    )
    parser.add_argument(
        "--build",
        action="store_true",
        help="Run '%s' before benchmarking" % " ".join(config.DEFAULT_BUILD_COMMAND),
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    return parser


def settings_from_args(args: argparse.Namespace) -> config.BenchSettings:
    reference_command = None
    if args.reference_command:
        reference_command = tuple(shlex.split(args.reference_command))
    return config.BenchSettings(
        corpus=args.corpus,
        tool=args.tool,
        tabular=args.table,
        concurrency=config.clamp_worker_count(args.threads),
        reference_command=reference_command,
        timeout=args.timeout,
        build=args.build,
    )


def _print_error(message: str) -> None:
    print(Fore.RED + message + Style.RESET_ALL, file=sys.stderr)


def run(settings: config.BenchSettings) -> int:
    if settings.build:
        build_tool()

    categories = discover_categories(settings.corpus)
    measurer = measurer_from_settings(settings)
    report = make_report(settings.tabular)

    monitor = PerformanceMonitor()
    monitor.start_operation()
    try:
        outcome = run_benchmark(categories, measurer, report, settings.concurrency, monitor)
    finally:
        monitor.end_operation()

    monitor.print_summary()
    if not outcome.ok:
        _print_error("Empty categories: " + ", ".join(outcome.failed_categories))
        return 1
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    init(autoreset=True)

    settings = settings_from_args(args)
    try:
        return run(settings)
    except MeasurementError as exc:
        _print_error(f"Measurement failed, aborting: {exc.describe()}")
        return 1
    except EmptyAccumulatorError as exc:
        _print_error(f"No samples collected: {exc.describe()}")
        return 1
    except BenchmarkError as exc:
        _print_error(exc.describe())
        return 1
    except KeyboardInterrupt:
        print(Fore.CYAN + "\nOperation cancelled by user." + Style.RESET_ALL, file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
