"""End-to-end tests for the pytest plugin, driven through pytester."""

from __future__ import annotations

import pytest

LIVE_TESTS = """
def test_fast():
    pass

def test_fail():
    assert 1 == 2

def test_error():
    raise RuntimeError("boom")
"""


class TestActivation:
    def test_inactive_by_default(self, pytester: pytest.Pytester) -> None:
        pytester.makepyfile(test_live=LIVE_TESTS)
        result = pytester.runpytest()

        result.stdout.fnmatch_lines(["test_live.py .FF*"])
        result.stdout.no_fnmatch_line("*% . test_live.py::test_fast*")
        result.assert_outcomes(passed=1, failed=2)

    def test_enabled_by_flag(self, pytester: pytest.Pytester) -> None:
        pytester.makepyfile(test_live=LIVE_TESTS)
        result = pytester.runpytest("--immediate")

        result.stdout.fnmatch_lines([" 33% . test_live.py::test_fast (* ms)"])
        result.assert_outcomes(passed=1, failed=2)

    def test_enabled_by_ini(self, pytester: pytest.Pytester) -> None:
        pytester.makeini("[pytest]\nimmediate = true\n")
        pytester.makepyfile(test_live=LIVE_TESTS)
        result = pytester.runpytest()

        result.stdout.fnmatch_lines([" 33% . test_live.py::test_fast (* ms)"])

    def test_collect_only(self, pytester: pytest.Pytester) -> None:
        pytester.makepyfile(test_live=LIVE_TESTS)
        result = pytester.runpytest("--immediate", "--collect-only")

        assert result.ret == pytest.ExitCode.OK
        result.stdout.no_fnmatch_line("*% . test_live.py*")


class TestLiveOutput:
    def test_failures_printed_under_their_line(self, pytester: pytest.Pytester) -> None:
        pytester.makepyfile(test_live=LIVE_TESTS)
        result = pytester.runpytest("--immediate")

        result.stdout.fnmatch_lines(
            [
                " 33% . test_live.py::test_fast (* ms)",
                " 66% F test_live.py::test_fail (* ms)",
                "",
                "AssertionError: assert 1 == 2",
                "*in test_fail",
                "*assert 1 == 2",
                "100% F test_live.py::test_error (* ms)",
                "",
                " RuntimeError  boom",
                "*in test_error",
            ]
        )

    def test_deferred_failure_section_suppressed(self, pytester: pytest.Pytester) -> None:
        pytester.makepyfile(test_live=LIVE_TESTS)
        result = pytester.runpytest("--immediate")

        result.stdout.no_fnmatch_line("*= FAILURES =*")
        result.stdout.fnmatch_lines(["*short test summary info*", "FAILED test_live.py::test_fail*"])

    def test_pytest_internals_hidden_from_trace(self, pytester: pytest.Pytester) -> None:
        pytester.makepyfile(test_live=LIVE_TESTS)
        result = pytester.runpytest("--immediate")

        result.stdout.no_fnmatch_line('*File "*/_pytest/*')
        result.stdout.no_fnmatch_line('*File "*/pluggy/*')
        result.stdout.fnmatch_lines(['*File "*test_live.py", line *, in test_error'])

    def test_setup_error(self, pytester: pytest.Pytester) -> None:
        pytester.makepyfile(
            test_setup="""
            import pytest

            @pytest.fixture
            def broken():
                raise ValueError("no fixture")

            def test_uses(broken):
                pass
            """
        )
        result = pytester.runpytest("--immediate")

        result.stdout.fnmatch_lines(
            ["100% E test_setup.py::test_uses (* ms)", "", " ValueError  no fixture"]
        )
        result.assert_outcomes(errors=1)

    def test_collection_error_section_omits_live_errors(self, pytester: pytest.Pytester) -> None:
        pytester.makepyfile(
            test_broken="raise ImportError('cannot load')",
            test_setup="""
            import pytest

            @pytest.fixture
            def broken():
                raise ValueError("no fixture")

            def test_uses(broken):
                pass
            """,
        )
        result = pytester.runpytest("--immediate", "--continue-on-collection-errors")

        result.stdout.fnmatch_lines(
            ["100% E test_setup.py::test_uses (* ms)", "*= ERRORS =*", "*ERROR collecting test_broken.py*"]
        )
        result.stdout.no_fnmatch_line("*ERROR at setup of test_uses*")
        result.assert_outcomes(errors=2)

    def test_pytest_fail_is_assertion_style(self, pytester: pytest.Pytester) -> None:
        pytester.makepyfile(
            test_failing="""
            import pytest

            def test_explicit():
                pytest.fail("custom reason")
            """
        )
        result = pytester.runpytest("--immediate")

        result.stdout.fnmatch_lines(["100% F test_failing.py::test_explicit (* ms)", "", "*Failed: custom reason"])
        result.stdout.no_fnmatch_line(" *Failed  custom reason")

    def test_skip_and_xfail_glyphs(self, pytester: pytest.Pytester) -> None:
        pytester.makepyfile(
            test_marks="""
            import pytest

            @pytest.mark.skip(reason="later")
            def test_skipped():
                pass

            @pytest.mark.xfail
            def test_expected():
                assert False
            """
        )
        result = pytester.runpytest("--immediate")

        result.stdout.fnmatch_lines(
            [
                " 50% s test_marks.py::test_skipped (* ms)",
                "100% x test_marks.py::test_expected (* ms)",
            ]
        )
        result.assert_outcomes(skipped=1, xfailed=1)

    def test_strict_xpass_falls_back_to_text(self, pytester: pytest.Pytester) -> None:
        pytester.makepyfile(
            test_xpass="""
            import pytest

            @pytest.mark.xfail(strict=True)
            def test_unexpected():
                pass
            """
        )
        result = pytester.runpytest("--immediate")

        result.stdout.fnmatch_lines(["100% F test_xpass.py::test_unexpected (* ms)", "", "[[]XPASS(strict)[]]*"])
        result.assert_outcomes(failed=1)

    def test_no_tests_collected(self, pytester: pytest.Pytester) -> None:
        pytester.makepyfile(test_empty="")
        result = pytester.runpytest("--immediate")

        assert result.ret == pytest.ExitCode.NO_TESTS_COLLECTED


class TestConfigFile:
    def test_config_from_ini(self, pytester: pytest.Pytester) -> None:
        pytester.makefile(".yaml", immediate="pass_glyph: '+'\n")
        pytester.makeini("[pytest]\nimmediate = true\nimmediate_config = immediate.yaml\n")
        pytester.makepyfile(test_live=LIVE_TESTS)
        result = pytester.runpytest()

        result.stdout.fnmatch_lines([" 33% + test_live.py::test_fast (* ms)"])

    def test_pass_glyph_leaves_other_outcomes_alone(self, pytester: pytest.Pytester) -> None:
        pytester.makefile(".yaml", immediate="pass_glyph: '+'\n")
        pytester.makepyfile(
            test_marks="""
            import pytest

            def test_ok():
                pass

            @pytest.mark.skip(reason="later")
            def test_skipped():
                pass
            """
        )
        result = pytester.runpytest("--immediate", "--immediate-config", "immediate.yaml")

        result.stdout.fnmatch_lines(
            [
                " 50% + test_marks.py::test_ok (* ms)",
                "100% s test_marks.py::test_skipped (* ms)",
            ]
        )

    def test_config_from_option(self, pytester: pytest.Pytester) -> None:
        pytester.makefile(".json", custom='{"failure_glyph": "!"}')
        pytester.makepyfile(test_live=LIVE_TESTS)
        result = pytester.runpytest("--immediate", "--immediate-config", "custom.json")

        result.stdout.fnmatch_lines([" 66% ! test_live.py::test_fail (* ms)"])

    def test_invalid_config_is_usage_error(self, pytester: pytest.Pytester) -> None:
        pytester.makefile(".yaml", immediate="pass_glyph: 'too long'\n")
        pytester.makepyfile(test_live=LIVE_TESTS)
        result = pytester.runpytest("--immediate", "--immediate-config", "immediate.yaml")

        assert result.ret == pytest.ExitCode.USAGE_ERROR
        result.stderr.fnmatch_lines(["*Invalid renderer config*"])
