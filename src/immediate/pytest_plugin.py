"""pytest plugin for immediate, auto-discovered via the pytest11 entry point.

Provides:
- `--immediate` to swap pytest's progress dots for live per-test lines
- `--immediate-config` / `immediate_config` ini for threshold and glyph settings
- Structured failure capture so traces render as soon as a test ends
"""

from __future__ import annotations

import logging
from collections.abc import Generator
from typing import Any

import pytest

from immediate._types import TraceDetail
from immediate.config import ConfigError, RendererConfig, load_config
from immediate.report.terminal import DETAIL_ATTR, ImmediateTerminalReporter

logger = logging.getLogger("immediate.plugin")

_active_key = pytest.StashKey[bool]()


# ---------------------------------------------------------------------------
# CLI options
# ---------------------------------------------------------------------------
def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("immediate", "immediate live result rendering")
    group.addoption(
        "--immediate",
        action="store_true",
        default=None,
        dest="immediate",
        help="Render one line per test as it finishes, with failures printed immediately.",
    )
    group.addoption(
        "--immediate-config",
        action="store",
        default=None,
        metavar="PATH",
        help="YAML/JSON file with renderer settings (thresholds, glyphs, colors).",
    )
    group.addoption(
        "--immediate-strict",
        action="store_true",
        default=False,
        help="Fail the run on out-of-order test events instead of ignoring them.",
    )
    parser.addini("immediate", type="bool", default=False, help="Enable immediate rendering.")
    parser.addini("immediate_config", default="", help="Path to the immediate renderer config file.")


# ---------------------------------------------------------------------------
# Reporter swap
# ---------------------------------------------------------------------------
def _wants_immediate(config: pytest.Config) -> bool:
    flag = config.getoption("immediate")
    if flag is not None:
        return bool(flag)
    return bool(config.getini("immediate"))


def _renderer_config(config: pytest.Config) -> RendererConfig:
    overrides: dict[str, Any] = {}
    if config.getoption("immediate_strict"):
        overrides["strict"] = True

    option = config.getoption("immediate_config")
    ini = config.getini("immediate_config")
    if option:
        path = config.invocation_params.dir / option
    elif ini:
        base = config.inipath.parent if config.inipath else config.rootpath
        path = base / ini
    else:
        return RendererConfig(**overrides)

    try:
        return load_config(path, **overrides)
    except ConfigError as exc:
        raise pytest.UsageError(str(exc)) from exc


@pytest.hookimpl(trylast=True)
def pytest_configure(config: pytest.Config) -> None:
    config.stash[_active_key] = False
    if not _wants_immediate(config):
        return

    if hasattr(config, "workerinput") or config.getoption("dist", default="no") != "no":
        logger.warning("immediate rendering is disabled under pytest-xdist")
        return

    standard_reporter = config.pluginmanager.getplugin("terminalreporter")
    if standard_reporter is None:
        return  # -p no:terminal

    reporter = ImmediateTerminalReporter(config, _renderer_config(config))
    config.pluginmanager.unregister(standard_reporter)
    config.pluginmanager.register(reporter, "terminalreporter")
    config.stash[_active_key] = True


# ---------------------------------------------------------------------------
# Failure capture
# ---------------------------------------------------------------------------
@pytest.hookimpl(wrapper=True)
def pytest_runtest_makereport(
    item: pytest.Item, call: pytest.CallInfo[None]
) -> Generator[None, pytest.TestReport, pytest.TestReport]:
    """Attach a structured TraceDetail to failed reports while rendering is on."""
    report = yield
    if not item.config.stash.get(_active_key, False):
        return report

    if report.failed and call.excinfo is not None:
        exc = call.excinfo.value
        assertion = isinstance(exc, (AssertionError, pytest.fail.Exception))
        setattr(report, DETAIL_ATTR, TraceDetail.from_exception(exc, assertion=assertion))
    return report
