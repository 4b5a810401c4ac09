"""Analysis package.

Design principle:
  - Ingest produces validated :class:`~interferometer_analyzer.models.frames.Trace` objects.
  - Analysis consumes a Trace and produces derived series and points in a
    :class:`~interferometer_analyzer.models.results.PipelineResult`.

Project-wide constraint:
  - The time base comes from the scope export and is never resampled. The
    SG derivative assumes uniform spacing taken from the first two samples.
"""

from .baseline import remove_baseline
from .jump_edge import find_jump_by_derivative, find_largest_jump_start
from .pipeline import process, process_file, process_text, recompute_intersections
from .roots import filter_close_points, find_intersections, find_zero_crossings
from .savgol import SavgolCoefficients, savgol_coefficients, savgol_derivative, savgol_smooth

__all__ = [
    "remove_baseline",
    "find_jump_by_derivative",
    "find_largest_jump_start",
    "process",
    "process_file",
    "process_text",
    "recompute_intersections",
    "filter_close_points",
    "find_intersections",
    "find_zero_crossings",
    "SavgolCoefficients",
    "savgol_coefficients",
    "savgol_derivative",
    "savgol_smooth",
]
