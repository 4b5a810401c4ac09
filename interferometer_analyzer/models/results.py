from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
import pandas as pd

from interferometer_analyzer.models.config import AnalysisConfig
from interferometer_analyzer.models.frames import Trace


@dataclass(frozen=True)
class RootPoint:
    """A linearly interpolated crossing (time in seconds, value in signal units)."""

    time: float
    value: float


@dataclass(frozen=True)
class FocusHint:
    """Onset time and width of the dominant transient, used to center a view."""

    time: float
    window: float


@dataclass(frozen=True)
class PipelineResult:
    """Container for everything derived from a single Trace.

    Attributes
    ----------
    trace:
        The parsed input (never modified).
    config:
        The normalized configuration actually used.
    interf_smoothed:
        Savitzky-Golay smoothed interferometer channel, shape ``(n,)``.
    interf_corrected:
        ``interf_smoothed`` with the leading-window baseline removed, shape ``(n,)``.
    zero_crossings:
        De-duplicated zero crossings of ``interf_corrected``.
    derivative:
        Local SG derivative of ``interf_corrected`` around each zero crossing,
        zero elsewhere, shape ``(n,)``.
    intersections:
        Near-zero crossings of the strain and corrected interferometer series.
    focus:
        Onset of the dominant transient in ``interf_corrected`` (None if unresolved).
    warnings:
        Diagnostics collected by the parser and the pipeline stages.
    """

    trace: Trace
    config: AnalysisConfig

    interf_smoothed: np.ndarray
    interf_corrected: np.ndarray
    zero_crossings: Tuple[RootPoint, ...]
    derivative: np.ndarray
    intersections: Tuple[RootPoint, ...]

    focus: Optional[FocusHint] = None
    warnings: Tuple[str, ...] = ()

    @property
    def n_samples(self) -> int:
        return self.trace.n_samples

    def to_frame(self) -> pd.DataFrame:
        """Per-sample table of raw and derived series."""
        return pd.DataFrame(
            {
                "t": self.trace.t,
                "strain": self.trace.strain,
                "interf": self.trace.interf,
                "interf_smoothed": self.interf_smoothed,
                "interf_corrected": self.interf_corrected,
                "derivative": self.derivative,
            }
        )

    def intersections_frame(self) -> pd.DataFrame:
        return points_frame(self.intersections)


def points_frame(points) -> pd.DataFrame:
    """Two-column ``time``/``value`` table from a sequence of RootPoint."""
    return pd.DataFrame(
        {
            "time": np.array([p.time for p in points], dtype=np.float64),
            "value": np.array([p.value for p in points], dtype=np.float64),
        }
    )
