"""Snapmaker Luban header metadata.

Luban writes the bounding box and job information as ``;key: value`` or
``;key(unit): value`` comment lines at the top of each program.  Only the
keys the optimiser reads are kept.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

logger = logging.getLogger(__name__)

HEADER_SCAN_LINES = 50  # header comments only appear near the top

MISSING_MAX_Z_WARNING = "No max_z in header; starting Z assumed 0"


@dataclass
class HeaderMetadata:
    """Job information parsed from the program header."""

    tool_head: str = ""  # e.g. "standardCNCToolheadForSM2"
    total_lines: int | None = None  # file_total_lines, sizes the progress bar
    max_z: float | None = None  # stock top (mm), the starting depth

    warnings: list[str] = field(default_factory=list)


def _split_header_line(line: str) -> tuple[str, str] | None:
    text = line.strip()
    if not text.startswith(";"):
        return None
    key, sep, value = text[1:].partition(":")
    if not sep:
        return None
    key = key.strip()
    # Drop unit suffixes: "max_z(mm)" -> "max_z"
    if "(" in key:
        key = key[: key.index("(")].strip()
    return key.lower(), value.strip()


def parse_header(lines: Iterable[str], scan_lines: int = HEADER_SCAN_LINES) -> HeaderMetadata:
    """Extract HeaderMetadata from the first *scan_lines* lines.

    Values that do not parse are ignored.  Missing or non-CNC tool heads and
    a missing ``max_z`` are recorded in ``warnings``.
    """
    header = HeaderMetadata()

    for index, line in enumerate(lines):
        if index >= scan_lines:
            break
        pair = _split_header_line(line)
        if pair is None:
            continue
        key, value = pair

        try:
            if key == "tool_head":
                header.tool_head = value
            elif key == "max_z":
                header.max_z = float(value)
            elif key == "file_total_lines":
                header.total_lines = int(float(value))
        except ValueError:
            logger.debug("Ignoring header %s with value %r", key, value)

    if not header.tool_head:
        header.warnings.append("Missing tool_head in header")
    elif "cnc" not in header.tool_head.lower():
        header.warnings.append(
            f"Tool head '{header.tool_head}' may not be a CNC tool head"
        )
    if header.max_z is None:
        header.warnings.append(MISSING_MAX_Z_WARNING)

    return header
