"""Run statistics and estimated machining time saved."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from cncfinisher.config import DEFAULT_FEED_RATE
from cncfinisher.utils.math_helpers import distance


@dataclass(frozen=True)
class Statistics:
    """Summary of one optimisation run."""

    total_lines: int = 0
    removed_lines: int = 0
    preserved_lines: int = 0
    split_lines: int = 0  # source lines that were cut in two (or one)
    skipped_lines: int = 0  # malformed input lines
    output_lines: int = 0
    bytes_in: int = 0
    bytes_out: int = 0
    time_saved_sec: float = 0.0
    processing_time_sec: float = 0.0
    used_default_feed_rate: bool = False

    @property
    def kept_lines(self) -> int:
        return self.total_lines - self.removed_lines - self.skipped_lines

    @property
    def reduction_percent(self) -> float:
        if self.total_lines == 0:
            return 0.0
        return self.removed_lines / self.total_lines * 100.0

    @property
    def size_reduction_percent(self) -> float:
        if self.bytes_in == 0:
            return 0.0
        return (self.bytes_in - self.bytes_out) / self.bytes_in * 100.0

    @property
    def lines_per_second(self) -> float:
        if self.processing_time_sec <= 0.0:
            return 0.0
        return self.total_lines / self.processing_time_sec


def estimate_move_time(
    start: Sequence[float],
    end: Sequence[float],
    feed_rate: float,
) -> float:
    """Seconds needed to travel from *start* to *end* at *feed_rate* mm/min."""
    return distance(start, end) / feed_rate * 60.0


class StatisticsAccumulator:
    """Running counters for the second pass."""

    def __init__(self, default_feed_rate: float = DEFAULT_FEED_RATE) -> None:
        self.default_feed_rate = default_feed_rate
        self.total_lines = 0
        self.removed_lines = 0
        self.preserved_lines = 0
        self.split_lines = 0
        self.skipped_lines = 0
        self.output_lines = 0
        self.bytes_in = 0
        self.bytes_out = 0
        self.time_saved_sec = 0.0
        self.processing_time_sec = 0.0
        self.used_default_feed_rate = False

    def record_removed(
        self,
        start: Sequence[float],
        end: Sequence[float],
        feed_rate: float | None,
    ) -> bool:
        """Count a removed move and add its travel time to the saving.

        Returns True the first time the default feed rate had to be used, so
        the caller can report it once.
        """
        self.total_lines += 1
        self.removed_lines += 1

        first_default = False
        if not feed_rate or feed_rate <= 0:
            feed_rate = self.default_feed_rate
            first_default = not self.used_default_feed_rate
            self.used_default_feed_rate = True

        self.time_saved_sec += estimate_move_time(start, end, feed_rate)
        return first_default

    def record_preserved(self) -> None:
        self.total_lines += 1
        self.preserved_lines += 1
        self.output_lines += 1

    def record_split(self, emitted: int) -> None:
        self.total_lines += 1
        self.split_lines += 1
        self.output_lines += emitted

    def record_skipped(self) -> None:
        self.total_lines += 1
        self.skipped_lines += 1

    def finalize(self) -> Statistics:
        return Statistics(
            total_lines=self.total_lines,
            removed_lines=self.removed_lines,
            preserved_lines=self.preserved_lines,
            split_lines=self.split_lines,
            skipped_lines=self.skipped_lines,
            output_lines=self.output_lines,
            bytes_in=self.bytes_in,
            bytes_out=self.bytes_out,
            time_saved_sec=self.time_saved_sec,
            processing_time_sec=self.processing_time_sec,
            used_default_feed_rate=self.used_default_feed_rate,
        )
