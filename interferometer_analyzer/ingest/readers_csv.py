from __future__ import annotations

import math
from pathlib import Path
from typing import List, Optional, Union

from interferometer_analyzer.models.config import AnalysisConfig
from interferometer_analyzer.models.frames import Trace


HEADER_PREFIX = "TIME,CH1,"

# Column semantics of the scope export:
#   col0: time [s]
#   col1: CH1, strain gauge amplifier output
#   col3: interferometer photodiode
# All other columns are ignored.
_COL_T = 0
_COL_STRAIN = 1
_COL_INTERF = 3
_MIN_FIELDS = 5


def _finite_float(s: str) -> Optional[float]:
    try:
        v = float(s)
    except ValueError:
        return None
    if not math.isfinite(v):
        return None
    return v


def parse_trace_text(
    text: Union[str, bytes],
    config: Optional[AnalysisConfig] = None,
    *,
    source_path: Optional[Path] = None,
) -> Trace:
    """Parse a scope CSV export into a calibrated :class:`Trace`.

    Rules
    -----
    - Everything before the first line starting with ``TIME,CH1,`` is ignored.
    - Non-empty lines after the header are counted from 1. Rows with
      ``count < start_line_index`` are skipped; parsing stops at the first
      ``count > end_line_index``.
    - A row is accepted if it has at least 5 fields and fields 0, 1 and 3 are
      finite numbers. Anything else is skipped (counted in the warnings).
    - Calibration: ``strain = CH1 * strain_gain``, ``interf = col3 + interf_bias``.

    Never raises for text input; an input without usable rows yields an empty Trace.
    """
    cfg = config or AnalysisConfig()
    if isinstance(text, bytes):
        text = text.decode("utf-8-sig", errors="replace")
    if text.startswith("\ufeff"):
        text = text[1:]

    start = int(cfg.start_line_index)
    end = int(cfg.end_line_index)
    gain = float(cfg.strain_gain)
    bias = float(cfg.interf_bias)

    t: List[float] = []
    strain: List[float] = []
    interf: List[float] = []

    header_seen = False
    line_count = 0
    n_malformed = 0

    for raw in text.split("\n"):
        line = raw.strip()
        if not line:
            continue
        if line.startswith(HEADER_PREFIX):
            header_seen = True
            continue
        if not header_seen:
            continue

        line_count += 1
        if line_count < start:
            continue
        if line_count > end:
            break

        fields = line.split(",")
        if len(fields) < _MIN_FIELDS:
            n_malformed += 1
            continue
        t0 = _finite_float(fields[_COL_T])
        ch1 = _finite_float(fields[_COL_STRAIN])
        ch3 = _finite_float(fields[_COL_INTERF])
        if t0 is None or ch1 is None or ch3 is None:
            n_malformed += 1
            continue

        t.append(t0)
        strain.append(ch1 * gain)
        interf.append(ch3 + bias)

    warnings: List[str] = []
    if not header_seen:
        warnings.append(f"header line '{HEADER_PREFIX}...' not found; no data rows read")
    else:
        warnings.append(f"data rows seen={line_count}, window=[{start}, {end}], accepted={len(t)}")
        if n_malformed:
            warnings.append(f"skipped malformed rows: {n_malformed}")
        if not t:
            warnings.append("no data rows accepted; trace is empty")

    return Trace.from_arrays(t, strain, interf, source_path=source_path, warnings=tuple(warnings))


def read_trace_file(file_path: Union[str, Path], config: Optional[AnalysisConfig] = None) -> Trace:
    """Read and parse one scope export.

    Raises ``FileNotFoundError`` if the file does not exist and ``OSError`` if it
    cannot be read. Parsing itself never fails.
    """
    path = Path(file_path).expanduser().resolve()
    if not path.exists():
        raise FileNotFoundError(str(path))
    raw = path.read_bytes()
    return parse_trace_text(raw, config, source_path=path)


class TraceCsvReader:
    """
    Reader for oscilloscope CSV exports (``TIME,CH1,...`` header).

    HARD REQUIREMENT:
      - time is always taken from the file (column 0)
      - no resampling or synthetic time is ever generated
    """

    def __init__(self, config: Optional[AnalysisConfig] = None):
        self.config = config or AnalysisConfig()

    def read(self, file_path: Union[str, Path]) -> Trace:
        return read_trace_file(file_path, self.config)

    def parse(self, text: Union[str, bytes]) -> Trace:
        return parse_trace_text(text, self.config)
