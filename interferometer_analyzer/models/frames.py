from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import numpy as np
import pandas as pd


TRACE_COLUMNS: Tuple[str, str, str] = ("t", "strain", "interf")


@dataclass(frozen=True)
class Trace:
    """
    In-memory representation of one oscilloscope export after parsing and calibration.

    Notes
    - 't' is the scope time base as exported (never resampled or repaired).
    - 'strain' is CH1 already multiplied by the strain gain.
    - 'interf' is the interferometer channel with the bias added.
    - df columns are always float64. Derived series live in PipelineResult, never here.
    """
    df: pd.DataFrame
    source_path: Optional[Path] = None
    warnings: Tuple[str, ...] = ()

    @classmethod
    def from_arrays(
        cls,
        t,
        strain,
        interf,
        *,
        source_path: Optional[Path] = None,
        warnings: Tuple[str, ...] = (),
    ) -> Trace:
        t = np.asarray(t, dtype=np.float64)
        strain = np.asarray(strain, dtype=np.float64)
        interf = np.asarray(interf, dtype=np.float64)
        if not (t.shape == strain.shape == interf.shape) or t.ndim != 1:
            raise ValueError(
                f"trace arrays must be 1D and equal length, got {t.shape}, {strain.shape}, {interf.shape}"
            )
        df = pd.DataFrame({"t": t, "strain": strain, "interf": interf})
        return cls(df=df, source_path=source_path, warnings=tuple(warnings))

    @property
    def n_samples(self) -> int:
        return int(len(self.df))

    @property
    def t(self) -> np.ndarray:
        return self.df["t"].to_numpy(dtype=np.float64)

    @property
    def strain(self) -> np.ndarray:
        return self.df["strain"].to_numpy(dtype=np.float64)

    @property
    def interf(self) -> np.ndarray:
        return self.df["interf"].to_numpy(dtype=np.float64)
