"""Color vocabulary shared by the renderer and its sinks.

The renderer only ever speaks in ``ColorTag`` values; sinks decide what
a tag looks like on the terminal.
"""

from __future__ import annotations

from enum import Enum


class ColorTag(str, Enum):
    NEUTRAL_BOLD = "neutral-bold"
    NEUTRAL_ON_INVERSE = "neutral-on-inverse"
    LOW_SEVERITY = "low-severity"
    LOW_SEVERITY_BOLD = "low-severity-bold"
    MEDIUM_SEVERITY = "medium-severity"
    HIGH_SEVERITY = "high-severity"
    HIGH_SEVERITY_BOLD = "high-severity-bold"
    HIGH_SEVERITY_ON_INVERSE = "high-severity-on-inverse"


# Keyword markup understood by _pytest._io.TerminalWriter.write()
TERMINAL_MARKUP: dict[ColorTag, dict[str, bool]] = {
    ColorTag.NEUTRAL_BOLD: {"bold": True},
    ColorTag.NEUTRAL_ON_INVERSE: {"invert": True},
    ColorTag.LOW_SEVERITY: {"green": True},
    ColorTag.LOW_SEVERITY_BOLD: {"green": True, "bold": True},
    ColorTag.MEDIUM_SEVERITY: {"yellow": True},
    ColorTag.HIGH_SEVERITY: {"red": True},
    ColorTag.HIGH_SEVERITY_BOLD: {"red": True, "bold": True},
    ColorTag.HIGH_SEVERITY_ON_INVERSE: {"Red": True, "white": True},
}


def markup_for(tag: ColorTag) -> dict[str, bool]:
    return dict(TERMINAL_MARKUP[tag])
