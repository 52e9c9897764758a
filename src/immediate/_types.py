"""Core data types for immediate.

Identities and trace details are Pydantic models so they validate and
repr nicely; the per-run and per-test state are plain dataclasses owned
by the renderer.
"""

from __future__ import annotations

import traceback
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import PurePath

from pydantic import BaseModel, ConfigDict, Field

from immediate.colors import ColorTag

_CAUSE_NOTE = "The above exception was the direct cause of the following exception:"
_CONTEXT_NOTE = "During handling of the above exception, another exception occurred:"

_HIDDEN_PACKAGES = frozenset({"_pytest", "pluggy"})


def is_internal_frame(filename: str) -> bool:
    """True for frames that live inside pytest or pluggy themselves."""
    return not _HIDDEN_PACKAGES.isdisjoint(PurePath(filename).parts)


class _FrozenModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class TestIdentity(_FrozenModel):
    """Identifies a single test for display purposes."""

    __test__ = False

    nodeid: str
    location: tuple[str, int | None, str] | None = None

    @property
    def label(self) -> str:
        """Human-readable descriptive name."""
        return self.nodeid


class TraceFrame(_FrozenModel):
    filename: str
    lineno: int | None = None
    name: str
    line: str = ""

    def lines(self) -> list[str]:
        out = [f'  File "{self.filename}", line {self.lineno}, in {self.name}']
        if self.line:
            out.append(f"    {self.line}")
        return out


class TraceDetail(_FrozenModel):
    """Failure or error detail for one test, possibly chained.

    Structured details carry ``kind``/``message``/``frames``. Details built
    from plain text only carry ``text`` and leave ``kind`` empty.
    """

    kind: str = ""
    message: str = ""
    frames: list[TraceFrame] = Field(default_factory=list)
    is_assertion: bool = False
    cause: TraceDetail | None = None
    cause_note: str = ""
    text: str | None = None

    @classmethod
    def from_exception(
        cls,
        exc: BaseException,
        *,
        assertion: bool | None = None,
        hide: Callable[[str], bool] = is_internal_frame,
    ) -> TraceDetail:
        """Build a detail chain from a live exception.

        ``assertion`` overrides the assertion-style check for ``exc`` itself;
        chained causes are always classified by their own type.
        """
        return cls._from_exception(exc, assertion, hide, set())

    @classmethod
    def _from_exception(
        cls,
        exc: BaseException,
        assertion: bool | None,
        hide: Callable[[str], bool],
        seen: set[int],
    ) -> TraceDetail:
        seen.add(id(exc))

        frames = [
            TraceFrame(filename=fs.filename, lineno=fs.lineno, name=fs.name, line=fs.line or "")
            for fs in traceback.extract_tb(exc.__traceback__)
            if not hide(fs.filename)
        ]

        cause: TraceDetail | None = None
        note = ""
        if exc.__cause__ is not None and id(exc.__cause__) not in seen:
            cause = cls._from_exception(exc.__cause__, None, hide, seen)
            note = _CAUSE_NOTE
        elif (
            exc.__context__ is not None
            and not exc.__suppress_context__
            and id(exc.__context__) not in seen
        ):
            cause = cls._from_exception(exc.__context__, None, hide, seen)
            note = _CONTEXT_NOTE

        return cls(
            kind=_exception_name(type(exc)),
            message=str(exc),
            frames=frames,
            is_assertion=isinstance(exc, AssertionError) if assertion is None else assertion,
            cause=cause,
            cause_note=note,
        )

    @classmethod
    def from_text(cls, text: str, *, assertion: bool = False) -> TraceDetail:
        """Fallback for runners that only hand over a rendered string."""
        return cls(text=text, is_assertion=assertion)

    @property
    def is_textual(self) -> bool:
        return self.text is not None

    def chain(self) -> list[TraceDetail]:
        """All links of this detail, innermost cause first."""
        links: list[TraceDetail] = []
        link: TraceDetail | None = self
        while link is not None:
            links.append(link)
            link = link.cause
        links.reverse()
        return links

    def header(self) -> str:
        first, _, _ = self.message.partition("\n")
        return f"{self.kind}: {first}" if first else self.kind

    def body_lines(self) -> list[str]:
        """Lines following the header: message continuation, then frames."""
        if self.text is not None:
            return self.text.split("\n")
        _, _, rest = self.message.partition("\n")
        out = rest.split("\n") if rest else []
        for frame in self.frames:
            out.extend(frame.lines())
        return out

    def lines(self) -> list[str]:
        """Plain newline-delimited representation of the whole chain."""
        out: list[str] = []
        for index, link in enumerate(self.chain()):
            if index:
                out.extend(["", link.cause_note, ""])
            if not link.is_textual:
                out.append(link.header())
            out.extend(link.body_lines())
        return out

    def __str__(self) -> str:
        return "\n".join(self.lines())


def _exception_name(exc_type: type[BaseException]) -> str:
    module = exc_type.__module__
    if module in {"builtins", "__main__"}:
        return exc_type.__qualname__
    return f"{module}.{exc_type.__qualname__}"


@dataclass
class TestOutcome:
    """Transient state for the test currently between start and end."""

    __test__ = False

    identity: TestIdentity
    glyph: str
    color: ColorTag
    detail: TraceDetail | None = None
    failed: bool = False


@dataclass
class RunState:
    """Run-wide progress counters."""

    tests_run: int = 0
    total_tests: int = 0
    started: bool = False

    def start(self, total_tests: int) -> None:
        if total_tests < 0:
            raise ValueError(f"total_tests must be >= 0, got {total_tests}")
        self.total_tests = total_tests
        self.tests_run = 0
        self.started = True

    def complete_test(self) -> None:
        self.tests_run += 1

    @property
    def percent(self) -> int:
        """Whole percent of planned tests completed; 0 for an empty run."""
        if self.total_tests <= 0:
            return 0
        return min(self.tests_run * 100 // self.total_tests, 100)
