"""immediate: live per-test result rendering for pytest."""

from immediate._protocols import ColorSink, TestObserver
from immediate._types import RunState, TestIdentity, TestOutcome, TraceDetail, TraceFrame
from immediate.colors import ColorTag
from immediate.config import (
    ConfigError,
    PerformanceThresholdTable,
    RendererConfig,
    ThresholdEntry,
    load_config,
)
from immediate.renderer import EventOrderError, LiveResultRenderer
from immediate.sink import TerminalWriterSink

__all__ = [
    # Data types
    "TestIdentity",
    "TraceDetail",
    "TraceFrame",
    "TestOutcome",
    "RunState",
    "ColorTag",
    # Protocols
    "ColorSink",
    "TestObserver",
    # Config
    "RendererConfig",
    "PerformanceThresholdTable",
    "ThresholdEntry",
    "load_config",
    "ConfigError",
    # Rendering
    "LiveResultRenderer",
    "EventOrderError",
    "TerminalWriterSink",
]
