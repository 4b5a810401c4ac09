from __future__ import annotations

import pandas as pd

from interferometer_analyzer.models.results import PipelineResult


DISPLAY_COLUMNS = ("t", "strain", "interf_smoothed", "interf_corrected", "derivative")


def decimation_step(n_samples: int, max_points: int = 2000) -> int:
    return max(1, int(n_samples) // max(1, int(max_points)))


def decimate_for_display(result: PipelineResult, max_points: int = 2000) -> pd.DataFrame:
    """Every ``step``-th sample of the plotted series, ``step = max(1, n // max_points)``.

    Decimation only: no averaging and no interpolation, so every row is an
    actual sample. The row count can exceed ``max_points`` by less than a factor 2.
    """
    df = result.to_frame()
    step = decimation_step(len(df), max_points)
    return df.loc[:, list(DISPLAY_COLUMNS)].iloc[::step].reset_index(drop=True)
