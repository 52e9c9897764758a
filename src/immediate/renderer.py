"""Live, one-line-per-test result renderer.

Output for each finished test:

    {percent:3d}% {glyph} {name} ({ms} ms)

followed, when the test failed or errored, by a blank line and the
colorized trace. Nothing is written until the test ends, so the glyph and
the name share the color of the final outcome.
"""

from __future__ import annotations

import logging
import math

from immediate._protocols import ColorSink
from immediate._types import RunState, TestIdentity, TestOutcome, TraceDetail
from immediate.colors import ColorTag
from immediate.config import RendererConfig

logger = logging.getLogger("immediate.renderer")


class EventOrderError(RuntimeError):
    """A lifecycle event arrived in an order the renderer cannot honor."""


class LiveResultRenderer:
    """Renders test lifecycle events to a ColorSink as they happen.

    Usage:
        renderer = LiveResultRenderer(sink)
        renderer.on_run_start(2)
        renderer.on_test_start(test)
        renderer.on_test_failure(test, TraceDetail.from_exception(exc))
        renderer.on_test_end(test, 0.3)

    With ``config.strict`` set, out-of-order events raise EventOrderError;
    otherwise they are logged and ignored.
    """

    def __init__(self, sink: ColorSink, config: RendererConfig | None = None) -> None:
        self.sink = sink
        self.config = config or RendererConfig()
        self.state = RunState()
        self._outcome: TestOutcome | None = None
        self._last_test_failed = False

    @property
    def last_test_failed(self) -> bool:
        """Whether the most recently started test has failed or errored."""
        return self._last_test_failed

    # ------------------------------------------------------------------
    # Lifecycle events
    # ------------------------------------------------------------------
    def on_run_start(self, total_tests: int) -> None:
        if self.state.started:
            self._out_of_order("on_run_start called twice")
            return
        self.state.start(total_tests)
        logger.debug("Run started with %d planned tests", total_tests)

    def on_test_start(self, test: TestIdentity) -> None:
        if self._outcome is not None:
            logger.warning(
                "Test %s started before %s ended; discarding its state",
                test.label,
                self._outcome.identity.label,
            )
        self._outcome = TestOutcome(
            identity=test,
            glyph=self.config.pass_glyph,
            color=self.config.pass_color,
        )
        self._last_test_failed = False

    def on_test_glyph(self, glyph: str, color: ColorTag) -> None:
        outcome = self._require_outcome("on_test_glyph")
        if outcome is None:
            return
        outcome.glyph = glyph
        outcome.color = color

    def on_test_failure(self, test: TestIdentity, detail: TraceDetail) -> None:
        self._record_failure(test, detail, self.config.failure_glyph)

    def on_test_error(self, test: TestIdentity, detail: TraceDetail) -> None:
        self._record_failure(test, detail, self.config.error_glyph)

    def on_test_end(self, test: TestIdentity, elapsed_seconds: float) -> None:
        if not self.state.started:
            self._outcome = None
            self._out_of_order(f"on_test_end for {test.label} before on_run_start")
            return
        outcome = self._require_outcome("on_test_end", test)
        if outcome is None:
            return

        self.state.complete_test()
        if self.state.total_tests and self.state.tests_run > self.state.total_tests:
            logger.warning(
                "Completed %d tests but only %d were planned",
                self.state.tests_run,
                self.state.total_tests,
            )

        self.sink.write_plain(f"{self.state.percent:3d}% ")
        self.sink.write_colored(outcome.color, outcome.glyph)
        self.sink.write_plain(" ")
        self.sink.write_colored(outcome.color, outcome.identity.label)
        self.write_performance(elapsed_seconds)

        if outcome.detail is not None:
            self.print_exception_trace(outcome.detail)

        self._outcome = None

    # ------------------------------------------------------------------
    # Output pieces
    # ------------------------------------------------------------------
    def write_performance(self, elapsed_seconds: float) -> None:
        """Write `` (<ms> ms)`` colored by the threshold table and end the line."""
        ms = math.floor(elapsed_seconds * 1000 + 0.5)
        color = self.config.thresholds.select(ms)
        self.sink.write_colored(color, f" ({ms} ms)")
        self.sink.write_newline()

    def print_exception_trace(self, detail: TraceDetail) -> None:
        self.sink.write_newline()

        for index, link in enumerate(detail.chain()):
            if index:
                self._write_line("")
                self._write_line(link.cause_note)
                self._write_line("")

            if link.is_textual:
                for line in link.body_lines():
                    pos = line.find(": ")
                    if not link.is_assertion and pos != -1:
                        self._write_banner(line[:pos], line[pos + 1 :])
                    else:
                        self._write_line(line)
                continue

            header = link.header()
            if link.is_assertion:
                self._write_line(header)
            else:
                self._write_banner(link.kind, header[len(link.kind) + 1 :])
            for line in link.body_lines():
                self._write_line(line)

    def _write_banner(self, name: str, message: str) -> None:
        # Padding is as wide as the " name " box, drawn above and below it.
        padding = " " * (len(name) + 2)
        self.sink.write_colored(ColorTag.HIGH_SEVERITY_ON_INVERSE, padding)
        self.sink.write_newline()
        self.sink.write_colored(ColorTag.HIGH_SEVERITY_ON_INVERSE, f" {name} ")
        self._write_line(message)
        self.sink.write_colored(ColorTag.HIGH_SEVERITY_ON_INVERSE, padding)
        self.sink.write_newline()

    def _write_line(self, text: str) -> None:
        if text:
            self.sink.write_colored(ColorTag.HIGH_SEVERITY, text)
        self.sink.write_newline()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _record_failure(self, test: TestIdentity, detail: TraceDetail, glyph: str) -> None:
        outcome = self._require_outcome("failure/error event", test)
        if outcome is None:
            return
        if outcome.detail is not None:
            logger.debug("Replacing earlier failure detail for %s", test.label)
        outcome.glyph = glyph
        outcome.color = self.config.failure_color
        outcome.detail = detail
        outcome.failed = True
        self._last_test_failed = True

    def _require_outcome(self, event: str, test: TestIdentity | None = None) -> TestOutcome | None:
        outcome = self._outcome
        if outcome is None:
            self._out_of_order(f"{event} without a started test")
            return None
        if test is not None and test.nodeid != outcome.identity.nodeid:
            self._out_of_order(
                f"{event} for {test.label} while {outcome.identity.label} is running"
            )
            return None
        return outcome

    def _out_of_order(self, message: str) -> None:
        if self.config.strict:
            raise EventOrderError(message)
        logger.warning("Ignoring out-of-order event: %s", message)
