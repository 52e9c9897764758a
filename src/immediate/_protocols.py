"""Protocol definitions for immediate extension points.

All extension points use typing.Protocol (structural subtyping).
Users never need to inherit: if the object has the right methods, it works.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from immediate._types import TestIdentity, TraceDetail
from immediate.colors import ColorTag


@runtime_checkable
class ColorSink(Protocol):
    """Line-oriented output target that understands color tags.

    Implement this to render somewhere other than pytest's terminal writer.
    Writes append to the current line; ``write_newline`` ends it.
    """

    def write_colored(self, tag: ColorTag, text: str) -> None: ...

    def write_plain(self, text: str) -> None: ...

    def write_newline(self) -> None: ...


@runtime_checkable
class TestObserver(Protocol):
    """Receives test lifecycle events from a runner, one test at a time."""

    def on_run_start(self, total_tests: int) -> None: ...

    def on_test_start(self, test: TestIdentity) -> None: ...

    def on_test_glyph(self, glyph: str, color: ColorTag) -> None: ...

    def on_test_failure(self, test: TestIdentity, detail: TraceDetail) -> None: ...

    def on_test_error(self, test: TestIdentity, detail: TraceDetail) -> None: ...

    def on_test_end(self, test: TestIdentity, elapsed_seconds: float) -> None: ...
