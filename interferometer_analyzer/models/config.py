"""Analysis configuration -- bundles every parameter that affects the pipeline output.

An AnalysisConfig groups the parser bounds, calibration, smoothing and
root-finding parameters into one frozen dataclass.  It can be:

- Overridden field-by-field via ``dataclasses.replace()``
- Normalized (window forced odd and >= 3, order clamped below the window)
- Serialized to/from a dict for JSON provenance
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, List, Tuple


# Scope calibration of the strain channel (CH1) and bias of the interferometer (CH3).
STRAIN_GAIN = 0.00132 * 1.25
INTERF_BIAS = 0.04


def normalize_window(window_size: int, polynomial_order: int) -> Tuple[int, int]:
    """Force ``window_size`` odd and >= 3, and ``polynomial_order`` into ``[1, window_size - 1]``."""
    window = max(3, int(window_size))
    if window % 2 == 0:
        window += 1
    order = max(1, int(polynomial_order))
    if order >= window:
        order = window - 1
    return window, order


@dataclass(frozen=True)
class AnalysisConfig:
    """Frozen configuration for parsing and processing one trace.

    Fields
    ------
    smoothing_window_size : int
        Savitzky-Golay window length (samples). Forced odd and >= 3.
    polynomial_order : int
        Savitzky-Golay polynomial order. Clamped to ``[1, window - 1]``.
    baseline_sample_count : int
        Number of leading samples averaged for the baseline correction.
    start_line_index, end_line_index : int
        Inclusive bounds on the 1-based data-row counter after the CSV header.
    derivative_window_s : float
        Half-width (seconds) of the local derivative window around each zero crossing.
    root_min_separation_s : float
        Zero crossings closer than this (seconds) to the previous kept one are dropped.
    intersection_amplitude_threshold : float
        Strain/interferometer crossings are kept only if ``|value| <=`` this.
    strain_gain, interf_bias : float
        Calibration applied by the parser (strain multiplied, interferometer offset).
    """

    smoothing_window_size: int = 31
    polynomial_order: int = 3
    baseline_sample_count: int = 2000
    start_line_index: int = 6650
    end_line_index: int = 27000
    derivative_window_s: float = 200e-9

    root_min_separation_s: float = 100e-9
    intersection_amplitude_threshold: float = 0.02
    strain_gain: float = STRAIN_GAIN
    interf_bias: float = INTERF_BIAS

    # ------------------------------------------------------------------
    # Normalization
    # ------------------------------------------------------------------

    def normalization_notes(self) -> List[str]:
        """Describe what :meth:`normalized` would change (empty if nothing)."""
        window, order = normalize_window(self.smoothing_window_size, self.polynomial_order)
        notes: List[str] = []
        if window != self.smoothing_window_size:
            notes.append(f"smoothing_window_size {self.smoothing_window_size} -> {window} (odd, >= 3)")
        if order != self.polynomial_order:
            notes.append(f"polynomial_order {self.polynomial_order} -> {order} (must be in [1, window-1])")
        return notes

    def normalized(self) -> AnalysisConfig:
        window, order = normalize_window(self.smoothing_window_size, self.polynomial_order)
        if window == self.smoothing_window_size and order == self.polynomial_order:
            return self
        return replace(self, smoothing_window_size=window, polynomial_order=order)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-friendly dict."""
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> AnalysisConfig:
        """Reconstruct from a dict (e.g. loaded from JSON). Unknown keys are rejected."""
        return cls(**dict(d))
