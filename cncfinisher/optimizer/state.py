"""Modal position and feed-rate tracking.

G-code is modal: a word left off a line keeps the value it last had.  The
tracker folds each instruction into a ModalState so that the start and end
of every move are known even when the line only names one axis.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from cncfinisher.gcode.parser import Instruction

_TRACKED = {"X": "x", "Y": "y", "Z": "z", "B": "b", "F": "f"}


@dataclass(frozen=True)
class ModalState:
    """Most recent explicit value of each tracked word."""

    x: float = 0.0  # mm
    y: float = 0.0  # mm
    z: float = 0.0  # mm, negative = below the stock surface
    b: float = 0.0  # degrees, rotary module only
    f: float = 0.0  # mm/min, 0 until the program sets one

    def axis(self, letter: str) -> float:
        """Value of a position axis or ``F`` by its G-code letter."""
        return getattr(self, _TRACKED[letter.upper()])

    @property
    def position(self) -> tuple[float, float, float]:
        """Linear position (x, y, z)."""
        return (self.x, self.y, self.z)


class ModalStateTracker:
    """Owns the ModalState for one pass over a program.

    Each pass creates its own tracker; states handed out are immutable
    snapshots, so a caller can keep the start state of a move while the
    tracker moves on.
    """

    def __init__(self, header_max_depth: float | None = None) -> None:
        self._initial = self.initialize(header_max_depth)
        self.state: ModalState = self._initial

    @staticmethod
    def initialize(header_max_depth: float | None = None) -> ModalState:
        """Starting state: Z from the header's max_z (or 0), everything else 0."""
        return ModalState(z=header_max_depth if header_max_depth is not None else 0.0)

    def update(self, instruction: Instruction) -> ModalState:
        """Overwrite the words present in *instruction* and return the new state."""
        changes = {
            _TRACKED[letter]: value
            for letter, value in instruction.params.items()
            if letter in _TRACKED
        }
        if changes:
            self.state = replace(self.state, **changes)
        return self.state

    def reset(self) -> None:
        self.state = self._initial
