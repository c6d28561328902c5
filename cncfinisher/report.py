"""Human-readable formatting of run results."""

from __future__ import annotations

from cncfinisher.optimizer.stats import Statistics


def format_number(n: int) -> str:
    """Thousands separators: 12450 -> ``12,450``."""
    return f"{n:,}"


def format_duration(seconds: float) -> str:
    """``3.2s``, ``1m 15s`` or ``1h 2m``."""
    if seconds < 60:
        return f"{seconds:.1f}s"
    whole = int(seconds)
    minutes, secs = divmod(whole, 60)
    if minutes < 60:
        return f"{minutes}m {secs}s"
    hours, minutes = divmod(minutes, 60)
    return f"{hours}h {minutes}m"


def format_summary(stats: Statistics, threshold: float | None = None, min_depth: float | None = None) -> str:
    lines = ["", "=== Optimization Complete ===", ""]
    if min_depth is not None and threshold is not None:
        lines += [
            f"Min Z:           {min_depth:.3f} mm",
            f"Threshold:       {threshold:.3f} mm",
            "",
        ]
    lines += [
        f"Total lines:     {format_number(stats.total_lines)}",
        f"Removed lines:   {format_number(stats.removed_lines)}",
        f"Split lines:     {format_number(stats.split_lines)}",
        f"Kept lines:      {format_number(stats.kept_lines)}",
    ]
    if stats.skipped_lines:
        lines.append(f"Skipped lines:   {format_number(stats.skipped_lines)}")
    lines += [
        f"Line reduction:  {stats.reduction_percent:.1f}%",
        "",
        f"Input size:      {format_number(stats.bytes_in)} bytes",
        f"Output size:     {format_number(stats.bytes_out)} bytes",
        f"Size reduction:  {stats.size_reduction_percent:.1f}%",
        "",
        f"Estimated time saved:  {format_duration(stats.time_saved_sec)}",
        f"Processing time:       {format_duration(stats.processing_time_sec)}",
        f"Throughput:            {format_number(int(stats.lines_per_second))} lines/s",
        "",
    ]
    return "\n".join(lines)
