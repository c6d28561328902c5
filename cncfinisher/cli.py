"""Command line entry point: ``cnc-finisher INPUT ALLOWANCE OUTPUT``.

Exit codes: 0 success (or overwrite declined), 1 general failure,
2 invalid arguments or strategy.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from pathlib import Path
from typing import Callable, Sequence

from cncfinisher import __version__
from cncfinisher.config import OptimizerConfig
from cncfinisher.errors import ConfigurationError, FinisherError, GcodeFileError
from cncfinisher.gcode.parser import GCodeParser
from cncfinisher.gcode.writer import GCodeWriter
from cncfinisher.optimizer.engine import Optimizer
from cncfinisher.optimizer.strategy import CrossingStrategy, FilterStrategy
from cncfinisher.progress import progress_bar, track_lines
from cncfinisher.report import format_summary
from cncfinisher.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:
        self.print_usage(sys.stderr)
        self.exit(EXIT_USAGE, f"Error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="cnc-finisher",
        description=(
            "Remove finishing-pass moves that only cut air left by a rough pass. "
            "Moves deeper than (deepest Z + allowance) are kept."
        ),
    )
    parser.add_argument("input", type=Path, help="finishing pass G-code (e.g. from Snapmaker Luban)")
    parser.add_argument("allowance", help="material left by the rough cut, in mm (e.g. 1.0)")
    parser.add_argument("output", type=Path, help="path for the optimised G-code")
    parser.add_argument(
        "-s",
        "--strategy",
        default=FilterStrategy.SAFE.value,
        help="multi-axis shallow move handling: "
        + ", ".join(s.value for s in FilterStrategy)
        + " (default: %(default)s)",
    )
    parser.add_argument(
        "-c",
        "--crossing",
        default=CrossingStrategy.AGGRESSIVE.value,
        help="threshold-crossing move handling: "
        + ", ".join(s.value for s in CrossingStrategy)
        + " (default: %(default)s)",
    )
    parser.add_argument("-f", "--force", action="store_true", help="overwrite OUTPUT without asking")
    parser.add_argument("-q", "--quiet", action="store_true", help="do not show the progress bar")
    parser.add_argument("--verbose", action="store_true", help="show debug output")
    parser.add_argument("--log-file", type=Path, default=None, help="also write a log file")
    parser.add_argument("-v", "--version", action="version", version=f"cnc-finisher {__version__}")
    return parser


def _parse_allowance(text: str) -> float:
    try:
        return float(text)
    except ValueError:
        raise ConfigurationError(f"invalid allowance value {text!r}: must be a number") from None


def _confirm_overwrite(path: Path, ask: Callable[[str], str]) -> bool:
    answer = ask(f"Output file exists: {path}\nOverwrite? (y/n): ")
    return answer.strip().lower() in ("y", "yes")


def run(
    input_path: Path,
    output_path: Path,
    config: OptimizerConfig,
    show_progress: bool = True,
) -> int:
    """Optimise *input_path* into *output_path* and print the summary."""
    try:
        text = input_path.read_text(encoding="utf-8", errors="replace")
        bytes_in = input_path.stat().st_size
    except OSError as exc:
        raise GcodeFileError(f"failed to read input file: {exc}") from exc

    program = GCodeParser().parse_file(text)
    optimizer = Optimizer(config)
    line_count = len(program) + len(program.errors)
    bar = progress_bar(
        program.header.total_lines or line_count,
        disable=None if show_progress else True,
    )

    try:
        with output_path.open("w", encoding="utf-8", newline="\n") as stream, bar:
            writer = GCodeWriter(stream)
            writer.write_all(track_lines(optimizer.process(program), bar, line_count))
            writer.flush()
    except OSError as exc:
        raise GcodeFileError(f"failed to write output file: {exc}") from exc
    except FinisherError:
        output_path.unlink(missing_ok=True)
        raise

    stats = dataclasses.replace(
        optimizer.statistics,
        bytes_in=bytes_in,
        bytes_out=writer.bytes_written,
    )
    print(format_summary(stats, optimizer.threshold, optimizer.min_depth))
    print(f"Output written to: {output_path}")
    return EXIT_OK


def main(argv: Sequence[str] | None = None, ask: Callable[[str], str] = input) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(verbose=args.verbose, log_file=args.log_file)

    try:
        config = OptimizerConfig.create(
            _parse_allowance(args.allowance),
            crossing=args.crossing,
            filter_strategy=args.strategy,
        )
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_USAGE

    if not args.input.is_file():
        print(f"Error: input file does not exist: {args.input}", file=sys.stderr)
        return EXIT_FAILURE
    output_dir = args.output.parent
    if not output_dir.is_dir():
        print(f"Error: output directory does not exist: {output_dir}", file=sys.stderr)
        return EXIT_FAILURE
    if args.output.exists() and not args.force:
        if not _confirm_overwrite(args.output, ask):
            print("Operation cancelled.")
            return EXIT_OK

    try:
        return run(args.input, args.output, config, show_progress=not args.quiet)
    except FinisherError as exc:
        logger.debug("Run failed", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
