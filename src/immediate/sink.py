"""ColorSink backed by pytest's TerminalWriter."""

from __future__ import annotations

from typing import TYPE_CHECKING

from immediate.colors import ColorTag, markup_for

if TYPE_CHECKING:
    from _pytest._io import TerminalWriter


class TerminalWriterSink:
    """Writes tagged text through a TerminalWriter.

    Escape codes are only emitted when the writer has markup enabled
    (a tty, ``--color=yes``, ``PY_COLORS=1``...).
    """

    def __init__(self, writer: TerminalWriter) -> None:
        self._writer = writer

    def write_colored(self, tag: ColorTag, text: str) -> None:
        self._writer.write(text, **markup_for(tag))

    def write_plain(self, text: str) -> None:
        self._writer.write(text)

    def write_newline(self) -> None:
        self._writer.line()
        self._writer.flush()
