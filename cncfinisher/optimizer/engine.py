"""Two-pass optimisation pipeline.

Pass 1 scans the whole program for the deepest G0/G1 move and fixes the
threshold.  Pass 2 walks the program again in order, classifies each G1
move against the threshold and removes, keeps or splits it according to the
configured strategies.  Everything that is not a G1 move is written through
untouched.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Iterable, Iterator

from cncfinisher.config import DEFAULT_CONFIG, DEPTH_TOLERANCE, OptimizerConfig
from cncfinisher.errors import GeometryError, MalformedInstructionError
from cncfinisher.gcode.header import HeaderMetadata
from cncfinisher.gcode.parser import Instruction, ParsedProgram
from cncfinisher.optimizer.classify import MoveClassification, classify_move
from cncfinisher.optimizer.geometry import calculate_intersection, split_move
from cncfinisher.optimizer.state import ModalStateTracker
from cncfinisher.optimizer.stats import Statistics, StatisticsAccumulator
from cncfinisher.optimizer.strategy import Action, FilterStrategy, Strategy
from cncfinisher.optimizer.threshold import scan_min_depth

logger = logging.getLogger(__name__)


@dataclass
class OptimizationResult:
    """Output of a complete run."""

    instructions: list[Instruction]
    statistics: Statistics
    threshold: float
    min_depth: float
    advisories: list[str] = field(default_factory=list)


class Optimizer:
    """Removes finishing moves that lie entirely in already-roughed stock.

    One Optimizer may be reused; every call to :meth:`process` or
    :meth:`optimize` starts a fresh run with its own modal state and
    statistics.
    """

    def __init__(self, config: OptimizerConfig = DEFAULT_CONFIG) -> None:
        self.config = config
        self.strategy = Strategy(config.crossing_strategy, config.filter_strategy)
        self.threshold: float | None = None
        self.min_depth: float | None = None
        self.advisories: list[str] = []
        self._stats = StatisticsAccumulator()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def resolve(self, instructions: Iterable[Instruction], header: HeaderMetadata | None = None) -> float:
        """Run pass 1 and fix the threshold for this run."""
        max_depth = header.max_z if header is not None else None
        self.min_depth = scan_min_depth(instructions, max_depth)
        self.threshold = self.min_depth + self.config.allowance
        logger.info(
            "Depth analysis: min Z %.3f mm, threshold %.3f mm (%.3f mm allowance)",
            self.min_depth,
            self.threshold,
            self.config.allowance,
        )
        return self.threshold

    def process(self, program: ParsedProgram) -> Iterator[Instruction]:
        """Yield the optimised program one instruction at a time.

        Raises
        ------
        NoMotionFoundError
            Before anything is yielded, if the program has no G0/G1 moves.
        """
        self._start_run()
        self.resolve(program.instructions, program.header)
        for warning in program.header.warnings:
            self._advise(warning)
        if self.config.filter_strategy is FilterStrategy.SPLIT:
            self._advise(
                "Strategy 'split' does not decompose multi-axis moves yet; "
                "behaving as 'safe'"
            )

        started = time.perf_counter()
        yield from self._transform(_in_line_order(program), program.header)
        self._stats.processing_time_sec = time.perf_counter() - started

    def optimize(self, program: ParsedProgram) -> OptimizationResult:
        """Run both passes and collect the output in memory."""
        instructions = list(self.process(program))
        return OptimizationResult(
            instructions=instructions,
            statistics=self.statistics,
            threshold=self.threshold,
            min_depth=self.min_depth,
            advisories=list(self.advisories),
        )

    @property
    def statistics(self) -> Statistics:
        return self._stats.finalize()

    # ------------------------------------------------------------------
    # Pass 2
    # ------------------------------------------------------------------

    def _start_run(self) -> None:
        self.threshold = None
        self.min_depth = None
        self.advisories = []
        self._stats = StatisticsAccumulator()

    def _advise(self, message: str) -> None:
        logger.warning(message)
        self.advisories.append(message)

    def _transform(
        self,
        items: Iterable[Instruction | MalformedInstructionError],
        header: HeaderMetadata,
    ) -> Iterator[Instruction]:
        tracker = ModalStateTracker(header.max_z)
        threshold = self.threshold
        cutting_moves = 0
        feed_seen = False

        for item in items:
            if isinstance(item, MalformedInstructionError):
                self._stats.record_skipped()
                self._advise(f"Skipping malformed {item}")
                continue

            instruction = item
            start = tracker.state
            end = tracker.update(instruction)

            if not instruction.is_cutting_move:
                self._stats.record_preserved()
                yield instruction
                continue

            cutting_moves += 1
            feed_seen = feed_seen or end.f > 0

            classification = classify_move(start.z, end.z, threshold)
            action = self.strategy.decide(classification, instruction.axes_present)

            if action is Action.REMOVE:
                if self._stats.record_removed(start.position, end.position, end.f):
                    self._advise(
                        f"Default feed rate {self._stats.default_feed_rate:g} mm/min "
                        "used for time saved estimates"
                    )
                continue

            if action is Action.SPLIT and _ends_on_threshold(classification, start.z, end.z, threshold):
                action = Action.PRESERVE

            if action is Action.PRESERVE:
                self._stats.record_preserved()
                yield instruction
                continue

            try:
                intersection = calculate_intersection(start, end, threshold)
                first, second = split_move(instruction, intersection, classification, start)
            except GeometryError as exc:
                self._advise(
                    f"Could not split line {instruction.line_number} ({exc}); kept whole"
                )
                self._stats.record_preserved()
                yield instruction
                continue

            emitted = [first] if second is None else [first, second]
            logger.debug(
                "Split line %d (%s) at t=%.4f into %d line(s)",
                instruction.line_number,
                classification,
                intersection.t,
                len(emitted),
            )
            self._stats.record_split(len(emitted))
            yield from emitted

        if cutting_moves and not feed_seen:
            self._advise("No feed rate (F) specified anywhere in the program")


def _ends_on_threshold(
    classification: MoveClassification, start_depth: float, end_depth: float, threshold: float
) -> bool:
    """True when the deep end of a crossing lies on the threshold itself.

    Such a move has nothing below the threshold to keep apart from a single
    point, so it is kept whole rather than split into a zero-length piece.
    """
    deep_end = end_depth if classification is MoveClassification.CROSSING_ENTER else start_depth
    return abs(deep_end - threshold) < DEPTH_TOLERANCE


def _in_line_order(program: ParsedProgram) -> list[Instruction | MalformedInstructionError]:
    if not program.errors:
        return list(program.instructions)
    items: list[Instruction | MalformedInstructionError] = [*program.instructions, *program.errors]
    items.sort(key=lambda item: item.line_number or 0)
    return items
