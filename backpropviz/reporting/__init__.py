"""Reporting utilities for backpropviz."""

from .artifacts import write_manifest
from .metrics import CsvSink, JsonlSink, MetricsCapture
from .plots import PlotAdapter
from .summary import write_summary

__all__ = ["write_manifest", "CsvSink", "JsonlSink", "MetricsCapture", "PlotAdapter", "write_summary"]
