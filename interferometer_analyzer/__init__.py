"""Interferometer Analyzer -- Python tooling for strain/interferometer oscilloscope traces.

This package provides tools for:
- Ingesting oscilloscope CSV exports (``TIME,CH1,...`` header) with channel calibration
- Savitzky-Golay smoothing and differentiation built on an explicit least-squares solve
- Baseline correction of the interferometer channel
- Zero-crossing and strain/interferometer intersection finding
- Locating the dominant transient edge (focus hint for viewers)
- Velocity/displacement tables at the intersections and decimated display tables

Key principles:
- No synthetic time: time comes from the export's TIME column
- No interpolation for display: downsampling uses decimation only
- Numerical edge cases degrade to empty, zero or pass-through outputs;
  only an unreadable source is an error

Main subpackages:
- analysis: SG kernel, roots, jump edge, pipeline
- ingest: CSV readers
- models: Data models (AnalysisConfig, Trace, PipelineResult)
- scripts: command-line entry point
"""

__all__ = []
