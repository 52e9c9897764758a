"""Shared fixtures for immediate tests."""

from __future__ import annotations

import pytest

from immediate._types import TestIdentity
from immediate.colors import ColorTag
from immediate.config import RendererConfig
from immediate.renderer import LiveResultRenderer


# ---------------------------------------------------------------------------
# Fake sink
# ---------------------------------------------------------------------------
class RecordingSink:
    """In-memory ColorSink that keeps every segment with its color tag.

    ``None`` marks plain (uncolored) text.
    """

    def __init__(self) -> None:
        self.segments: list[list[tuple[ColorTag | None, str]]] = [[]]

    def write_colored(self, tag: ColorTag, text: str) -> None:
        self.segments[-1].append((tag, text))

    def write_plain(self, text: str) -> None:
        self.segments[-1].append((None, text))

    def write_newline(self) -> None:
        self.segments.append([])

    @property
    def lines(self) -> list[str]:
        """Completed lines as plain text (a trailing partial line included)."""
        rendered = ["".join(text for _, text in line) for line in self.segments]
        if rendered and rendered[-1] == "":
            rendered.pop()
        return rendered

    def line_segments(self, index: int) -> list[tuple[ColorTag | None, str]]:
        return self.segments[index]

    def color_of(self, text: str) -> ColorTag | None:
        """Tag of the first segment whose text is exactly ``text``."""
        for line in self.segments:
            for tag, segment in line:
                if segment == text:
                    return tag
        raise AssertionError(f"no segment {text!r} in {self.lines!r}")


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def renderer(sink: RecordingSink) -> LiveResultRenderer:
    return LiveResultRenderer(sink)


@pytest.fixture
def strict_renderer(sink: RecordingSink) -> LiveResultRenderer:
    return LiveResultRenderer(sink, RendererConfig(strict=True))


def ident(nodeid: str) -> TestIdentity:
    return TestIdentity(nodeid=nodeid)


def raise_and_capture(exc: BaseException) -> BaseException:
    """Raise ``exc`` so it carries a traceback, and hand it back."""
    try:
        raise exc
    except BaseException as caught:
        return caught
