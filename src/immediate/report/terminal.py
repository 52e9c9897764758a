"""pytest terminal reporter that streams results through LiveResultRenderer."""

from __future__ import annotations

from typing import TextIO

import pytest
from _pytest.terminal import TerminalReporter

from immediate._types import TestIdentity, TraceDetail
from immediate.colors import ColorTag
from immediate.config import RendererConfig
from immediate.renderer import LiveResultRenderer
from immediate.sink import TerminalWriterSink

_CATEGORY_COLORS = {
    "skipped": ColorTag.MEDIUM_SEVERITY,
    "xfailed": ColorTag.MEDIUM_SEVERITY,
    "xpassed": ColorTag.MEDIUM_SEVERITY,
}

DETAIL_ATTR = "immediate_detail"


class ImmediateTerminalReporter(TerminalReporter):  # type: ignore[misc]
    """Replaces pytest's dot progress with one rendered line per test.

    Only the progress hooks are overridden; headers, warnings, the short
    summary and the stats line are pytest's own. Failure and error
    sections are skipped because their traces were already printed live.
    """

    def __init__(
        self,
        config: pytest.Config,
        renderer_config: RendererConfig | None = None,
        file: TextIO | None = None,
    ) -> None:
        super().__init__(config, file)
        self.renderer = LiveResultRenderer(TerminalWriterSink(self._tw), renderer_config)
        self._identity: TestIdentity | None = None
        self._elapsed = 0.0

    def pytest_collection_finish(self, session: pytest.Session) -> None:
        super().pytest_collection_finish(session)
        if self.config.getoption("collectonly"):
            return
        self.renderer.on_run_start(len(session.items))
        if session.items:
            self._tw.line()

    def pytest_runtest_logstart(self, nodeid: str, location: tuple[str, int | None, str]) -> None:
        self._identity = TestIdentity(nodeid=nodeid, location=location)
        self._elapsed = 0.0
        self.renderer.on_test_start(self._identity)

    def pytest_runtest_logreport(self, report: pytest.TestReport) -> None:
        self._tests_ran = True
        category, letter, word = self.config.hook.pytest_report_teststatus(
            report=report, config=self.config
        )
        self._add_stats(category, [report])
        self._elapsed += report.duration

        identity = self._identity
        if identity is None or identity.nodeid != report.nodeid:
            identity = TestIdentity(nodeid=report.nodeid, location=report.location)

        if report.failed:
            detail = _detail_for(report)
            if report.when == "call":
                self.renderer.on_test_failure(identity, detail)
            else:
                self.renderer.on_test_error(identity, detail)
        elif letter and category != "passed":
            # A pass keeps the configured pass glyph and color.
            color = _CATEGORY_COLORS.get(category, ColorTag.HIGH_SEVERITY)
            self.renderer.on_test_glyph(letter, color)

    def pytest_runtest_logfinish(self, nodeid: str, location: tuple[str, int | None, str]) -> None:
        identity = self._identity
        if identity is None or identity.nodeid != nodeid:
            identity = TestIdentity(nodeid=nodeid, location=location)
        self.renderer.on_test_end(identity, self._elapsed)
        self._identity = None

    def summary_failures(self) -> None:
        pass

    def summary_errors(self) -> None:
        # Collection errors never reach the renderer, so only they keep their section.
        errors = self.stats.get("error", [])
        collect_errors = [rep for rep in errors if rep.when == "collect"]
        if not collect_errors:
            return
        self.stats["error"] = collect_errors
        try:
            super().summary_errors()
        finally:
            self.stats["error"] = errors


def _detail_for(report: pytest.TestReport) -> TraceDetail:
    detail = getattr(report, DETAIL_ATTR, None)
    if isinstance(detail, TraceDetail):
        return detail
    # No live exception (e.g. strict XPASS): fall back to pytest's rendering.
    return TraceDetail.from_text(report.longreprtext, assertion=True)
