from .config import AnalysisConfig, normalize_window
from .frames import Trace
from .results import FocusHint, PipelineResult, RootPoint

__all__ = [
    "AnalysisConfig",
    "normalize_window",
    "Trace",
    "FocusHint",
    "PipelineResult",
    "RootPoint",
]
