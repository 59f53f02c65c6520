"""Tests for the event-recording base reporter."""
from __future__ import annotations

import xml.etree.ElementTree as ET

from junitkit.reporters.base import UNDEFINED_KEY, Reporter
from junitkit.reporters.junit import JunitReporter
from junitkit.runners.runner import HookStats, RunnerResult, SuiteStats, TestStats


def _run_events(reporter: Reporter) -> None:
    top = SuiteStats(uid="suite-0", title="Login")
    nested = SuiteStats(uid="suite-1", title="with MFA")
    hook = HookStats(uid="hook-0", title='"before all" hook')
    t1 = TestStats(uid="test-0", title="opens page")
    t2 = TestStats(uid="test-1", title="asks for code")

    reporter.on_suite_start(top)
    reporter.on_hook_start(hook)
    reporter.on_hook_end(hook)
    reporter.on_test_start(t1)
    reporter.on_before_command({"method": "POST", "endpoint": "/session/:sessionId/url",
                                "sessionId": "abc", "body": {"url": "https://example.org"}})
    reporter.on_after_command({"result": {"value": None}})
    reporter.on_test_pass(t1)
    reporter.on_test_end(t1)
    reporter.on_suite_start(nested)
    reporter.on_test_start(t2)
    reporter.on_test_fail(t2, {"message": "boom"})
    reporter.on_test_end(t2)
    reporter.on_suite_end(nested)
    reporter.on_suite_end(top)


class TestReporterEvents:
    def test_registry_in_discovery_order(self) -> None:
        reporter = Reporter()
        _run_events(reporter)
        assert list(reporter.suites) == ["suite-0", "suite-1"]

    def test_nested_suite_references_parent(self) -> None:
        reporter = Reporter()
        _run_events(reporter)
        assert reporter.suites["suite-0"].parent is None
        assert reporter.suites["suite-1"].parent == "suite-0"
        assert reporter.current_suite is None

    def test_hooks_and_tests_recorded_on_current_suite(self) -> None:
        reporter = Reporter()
        _run_events(reporter)
        top = reporter.suites["suite-0"]
        assert [h.title for h in top.hooks] == ['"before all" hook']
        assert list(top.tests) == ["test-0"]
        assert list(reporter.suites["suite-1"].tests) == ["test-1"]

    def test_states(self) -> None:
        reporter = Reporter()
        _run_events(reporter)
        assert reporter.suites["suite-0"].tests["test-0"].state == "passed"
        failed = reporter.suites["suite-1"].tests["test-1"]
        assert failed.state == "failed"
        assert failed.error == {"message": "boom"}

    def test_commands_captured_on_running_test(self) -> None:
        reporter = Reporter()
        _run_events(reporter)
        output = reporter.suites["suite-0"].tests["test-0"].output
        assert [o.type for o in output] == ["command", "result"]
        assert output[0].session_id == "abc"
        assert output[0].body == {"url": "https://example.org"}
        assert output[1].body == {"value": None}
        assert reporter.current_test is None

    def test_command_outside_test_ignored(self) -> None:
        reporter = Reporter()
        reporter.on_before_command({"command": "url"})
        assert reporter.suites == {}

    def test_test_without_uid_uses_sentinel_key(self) -> None:
        reporter = Reporter()
        reporter.on_suite_start(SuiteStats(uid="s", title="Feature"))
        reporter.on_test_start(TestStats(title="cucumber hook"))
        assert list(reporter.suites["s"].tests) == [UNDEFINED_KEY]

    def test_test_outside_suite_ignored(self) -> None:
        reporter = Reporter()
        reporter.on_test_start(TestStats(uid="t", title="stray"))
        assert reporter.suites == {}
        assert reporter.current_test is None

    def test_skip_keeps_pending_reason(self) -> None:
        reporter = Reporter()
        test = TestStats(uid="t", title="t", pending_reason="not ready")
        reporter.on_test_skip(test)
        assert test.state == "skipped"
        assert test.pending_reason == "not ready"

    def test_base_retry_is_noop(self) -> None:
        test = TestStats(uid="t", title="t", state="failed")
        Reporter().on_test_retry(test)
        assert test.state == "failed"


class TestHookEvents:
    def _failing_hook_run(self, reporter: Reporter, uid: str | None) -> None:
        reporter.on_suite_start(SuiteStats(uid="s", title="Login", full_title="Login"))
        reporter.on_hook_start(HookStats(uid=uid, title='"before each" hook: setup'))
        reporter.on_hook_end(HookStats(
            uid=uid, title='"before each" hook: setup', state="failed", duration=40,
            error={"message": "no browser", "stack": "Error: no browser"},
        ))
        reporter.on_suite_end(reporter.suites["s"])

    def test_end_state_copied_onto_recorded_hook(self) -> None:
        reporter = Reporter()
        self._failing_hook_run(reporter, "h")
        hooks = reporter.suites["s"].hooks
        assert len(hooks) == 1
        assert hooks[0].state == "failed"
        assert hooks[0].duration == 40
        assert hooks[0].error == {"message": "no browser", "stack": "Error: no browser"}

    def test_hook_without_uid_matched_by_title(self) -> None:
        reporter = Reporter()
        self._failing_hook_run(reporter, None)
        hooks = reporter.suites["s"].hooks
        assert len(hooks) == 1
        assert hooks[0].error["message"] == "no browser"

    def test_end_without_start_recorded(self) -> None:
        reporter = Reporter()
        reporter.on_suite_start(SuiteStats(uid="s", title="Login"))
        reporter.on_hook_end(HookStats(uid="h", title='"after all" hook', state="passed"))
        assert [h.uid for h in reporter.suites["s"].hooks] == ["h"]

    def test_failed_hook_reaches_report(self) -> None:
        reporter = JunitReporter(cwd="/work")
        self._failing_hook_run(reporter, "h")
        runner = RunnerResult(specs=["/work/specs/login.js"], capabilities={"browserName": "chrome"})
        root = ET.fromstring(reporter.build_junit_xml(runner))
        assert root.get("failures") == "1"
        tc = root.find(".//testcase")
        assert tc.find("error").get("message") == "no browser"
        assert tc.find("system-err").text == "\nError: no browser\n"
