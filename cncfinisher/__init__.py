"""cncfinisher: trims finishing-pass G-code down to the stock a rough pass left behind."""

from cncfinisher.config import DEFAULT_CONFIG, OptimizerConfig
from cncfinisher.gcode.parser import GCodeParser, Instruction, ParsedProgram
from cncfinisher.optimizer.engine import OptimizationResult, Optimizer
from cncfinisher.optimizer.stats import Statistics

__version__ = "1.0.0"

__all__ = [
    "DEFAULT_CONFIG",
    "GCodeParser",
    "Instruction",
    "OptimizationResult",
    "Optimizer",
    "OptimizerConfig",
    "ParsedProgram",
    "Statistics",
    "__version__",
]
