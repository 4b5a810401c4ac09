"""
Command-line processing of one oscilloscope export.

Runs the full pipeline (parse -> smooth -> baseline -> roots -> local derivative
-> intersections -> focus) and prints a compact summary. Optionally writes the
intersection table (time, value, velocity, displacement), the decimated
display table, and the configuration used (JSON provenance).

Examples
--------
    python -m interferometer_analyzer.scripts.analyze_trace shot_042.csv --window 31 --order 3
    interferometer-analyze shot_042.csv --start-line 1 --end-line 50000 --out-dir out/
"""

from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

from interferometer_analyzer.analysis.decimate import decimate_for_display
from interferometer_analyzer.analysis.kinematics import velocity_at_points
from interferometer_analyzer.analysis.pipeline import process_file
from interferometer_analyzer.models.config import AnalysisConfig


def build_config(ns) -> AnalysisConfig:
    cfg = AnalysisConfig()
    overrides = {
        "smoothing_window_size": ns.window,
        "polynomial_order": ns.order,
        "baseline_sample_count": ns.baseline,
        "start_line_index": ns.start_line,
        "end_line_index": ns.end_line,
        "intersection_amplitude_threshold": ns.threshold,
    }
    if ns.derivative_window_ns is not None:
        overrides["derivative_window_s"] = ns.derivative_window_ns * 1e-9
    overrides = {k: v for k, v in overrides.items() if v is not None}
    return replace(cfg, **overrides)


def main(argv: Optional[Sequence[str]] = None) -> int:
    import argparse
    import textwrap

    p = argparse.ArgumentParser(
        prog="python -m interferometer_analyzer.scripts.analyze_trace",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description=textwrap.dedent(
            """\
            Process one oscilloscope CSV export (header 'TIME,CH1,...').

            Column 1 is the strain channel, column 3 the interferometer channel.
            Prints zero crossings, strain/interferometer intersections and the
            focus hint of the dominant transient.
            """
        ),
    )
    p.add_argument("file", help="Scope CSV export")
    p.add_argument("--window", type=int, default=None, help="SG window size (odd, >= 3; default 31)")
    p.add_argument("--order", type=int, default=None, help="SG polynomial order (default 3)")
    p.add_argument("--baseline", type=int, default=None, help="Leading samples for baseline (default 2000)")
    p.add_argument("--start-line", type=int, default=None, help="First data row kept, 1-based (default 6650)")
    p.add_argument("--end-line", type=int, default=None, help="Last data row kept, inclusive (default 27000)")
    p.add_argument("--derivative-window-ns", type=float, default=None, help="Half-width around each root (default 200)")
    p.add_argument("--threshold", type=float, default=None, help="Intersection amplitude band (default 0.02)")
    p.add_argument("--max-points", type=int, default=2000, help="Row cap of the decimated display table")
    p.add_argument("--out-dir", default=None, help="If set, write intersections.csv, display.csv and config.json here")

    ns = p.parse_args(list(argv) if argv is not None else None)
    cfg = build_config(ns)

    try:
        res = process_file(ns.file, cfg)
    except OSError as e:
        print(f"[error] cannot read {ns.file!r}: {e}")
        return 2

    for w in res.warnings:
        print(f"[warn] {w}")

    print(f"samples: {res.n_samples}")
    print(f"window/order: {res.config.smoothing_window_size}/{res.config.polynomial_order}")
    print(f"zero crossings: {len(res.zero_crossings)}")
    if res.intersections:
        mean_value = sum(pt.value for pt in res.intersections) / len(res.intersections)
        print(f"intersections: {len(res.intersections)}, mean value: {mean_value:+.6g}")
    else:
        print("intersections: 0, mean value: <none>")
    if res.focus is not None:
        print(f"focus: t={res.focus.time:.6g} s, window={res.focus.window:.3g} s")
    else:
        print("focus: <none>")

    table = velocity_at_points(res.trace.t, res.derivative, res.intersections)
    table.insert(1, "value", [pt.value for pt in res.intersections])
    for row in table.itertuples(index=False):
        print(f"  t={row.time:.9g}  y={row.value:+.5f}  v={row.velocity:+.5g}  x={row.displacement:+.5g}")

    if ns.out_dir:
        out = Path(ns.out_dir).expanduser()
        out.mkdir(parents=True, exist_ok=True)
        table.to_csv(out / "intersections.csv", index=False)
        decimate_for_display(res, max_points=ns.max_points).to_csv(out / "display.csv", index=False)
        (out / "config.json").write_text(json.dumps(res.config.to_dict(), indent=2), encoding="utf-8")
        print(f"[info] wrote outputs to {out}")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
