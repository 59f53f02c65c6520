
import json
import os
import pathlib
import re
from typing import Any, Dict, List, Optional
from .base import Reporter, UNDEFINED_KEY
from .builder import ERROR_SETTERS, ReportBuilder, ReportTestCase
from ..config import ClassNameContext, ReporterOptions, SuiteNameContext
from ..runners.runner import RunnerResult, SuiteStats, TestStats
from ..utils.sanitize import DEFAULT_NAME_RE, limit, prepare_name, strip_ansi

HOOK_TITLE_RE = re.compile(r'^"(before|after)( all| each)?" hook')
ROOT_BEFORE_ALL_RE = re.compile(r'^"before all"')
# hosts whose default sanitized capabilities embed device UUIDs / minor OS versions
BROWSERSTACK_MARKER = "browserstack"

def add_failed_hooks(suite: SuiteStats) -> SuiteStats:
    """Add every errored before/after hook of the suite to its tests. Safe to call repeatedly."""
    for hook in suite.hooks:
        if not hook.error or not HOOK_TITLE_RE.match(hook.title or ""):
            continue
        key = f"hook:{hook.uid or hook.title}"
        if key in suite.tests:
            continue
        suite.tests[key] = TestStats(
            uid=key,
            title=hook.title,
            duration=hook.duration,
            error=hook.error,
            state=hook.state,
            output=[],
        )
    return suite

def resolve_package_name(runner: RunnerResult, override: Optional[str] = None) -> str:
    if override:
        return override
    hostname = runner.config.hostname
    if hostname is not None and BROWSERSTACK_MARKER in hostname:
        caps = runner.capabilities
        parts = [caps.get("device"), caps.get("os"), (caps.get("os_version") or "").replace(".", "_")]
        name = ".".join(str(p).lower() for p in parts if p).replace(" ", "")
        return name or runner.sanitized_capabilities
    return runner.sanitized_capabilities

def relative_spec_path(spec: str, cwd: str) -> str:
    try:
        return "./" + pathlib.PurePath(spec).relative_to(cwd).as_posix()
    except ValueError:
        return spec

def _format(value: Any) -> str:
    return json.dumps(limit(value), default=str)

def format_output(test: TestStats) -> str:
    """Render the captured commands/results of a test, one line per event."""
    lines: List[str] = []
    for ev in test.output:
        if ev.type == "command":
            if ev.method:
                endpoint = (ev.endpoint or "").replace(":sessionId", ev.session_id or "", 1)
                lines.append(f"COMMAND: {ev.method.upper()} {endpoint} - {_format(ev.body)}")
            else:
                lines.append(f"COMMAND: {ev.command} - {_format(ev.params)}")
        elif ev.type == "result":
            lines.append(f"RESULT: {_format(ev.body)}")
    return "\n".join(lines)

def _stack_text(error: Dict[str, Any]) -> str:
    return f"\n{strip_ansi(error.get('stack') or '')}\n"

class JunitReporter(Reporter):
    """
    Converts the recorded suites of a single runner into a JUnit XML document.

    Each top-level suite becomes one <testsuite> with a summary <testcase>
    named after the suite; the outcomes of all tests below that suite
    (nested suites and failed hooks included) are folded into the summary.
    """

    def __init__(self, options: Optional[ReporterOptions] = None, cwd: Optional[str] = None):
        super().__init__(options)
        self.cwd = cwd
        fmt = self.options.suite_name_format
        self._suite_name_re = fmt if isinstance(fmt, re.Pattern) else DEFAULT_NAME_RE
        self.package_name: Optional[str] = None
        self.unattached: List[TestStats] = []

    def on_test_retry(self, test: TestStats) -> None:
        test.skip("Retry")

    def on_runner_end(self, runner: RunnerResult) -> None:
        self.write(self.build_junit_xml(runner), runner.cid)

    # ---------- naming ----------
    def suite_name(self, suite: SuiteStats) -> str:
        fmt = self.options.suite_name_format
        if fmt is None or isinstance(fmt, re.Pattern):
            return prepare_name(suite.title, self._suite_name_re)
        return fmt(SuiteNameContext(name=suite.title, suite=suite))

    def class_name(self, suite: SuiteStats) -> str:
        if self.options.class_name_format:
            return self.options.class_name_format(ClassNameContext(package_name=self.package_name, suite=suite))
        title = re.sub(r"\s", "_", suite.full_title or suite.title or "")
        return f"{self.package_name}.{title}"

    # ---------- assembly ----------
    def build_junit_xml(self, runner: RunnerResult, cwd: Optional[str] = None) -> str:
        builder = ReportBuilder()
        self.package_name = resolve_package_name(runner, self.options.package_name)
        self.unattached = []
        cwd = cwd or self.cwd or os.getcwd()
        for spec in runner.specs:
            self._build_ordered_report(builder, runner, spec, cwd)
        return builder.build()

    def _build_ordered_report(self, builder: ReportBuilder, runner: RunnerResult, spec: str, cwd: str) -> ReportBuilder:
        file_path = relative_spec_path(spec, cwd)
        root_cases: Dict[str, ReportTestCase] = {}
        for key, suite in self.suites.items():
            if suite.parent or ROOT_BEFORE_ALL_RE.match(key):
                continue
            add_failed_hooks(suite)
            name = self.suite_name(suite)
            report_suite = (builder.test_suite()
                .name(name)
                .timestamp(suite.start)
                .time(suite.duration / 1000)
                .property("specId", 0)
                .property("suiteName", suite.title)
                .property("capabilities", runner.sanitized_capabilities)
                .property("file", file_path))
            # the suite doubles as its own testcase; test outcomes are folded into it
            tc = (report_suite.test_case()
                .classname(self.class_name(suite))
                .name(name)
                .time(suite.duration / 1000))
            if self.options.add_file_attribute:
                tc.file(file_path)
            root_cases[key] = tc
        self.log.debug("%s: %d top-level suites", file_path, len(root_cases))

        for key, suite in self.suites.items():
            if ROOT_BEFORE_ALL_RE.match(key):
                continue
            for test_key, test in suite.tests.items():
                if test_key == UNDEFINED_KEY:
                    continue
                tc = self._find_root_case(key, test, root_cases)
                if tc is None:
                    self.log.warning("No top-level suite found for test %r; left out of the report",
                                     test.full_title or test.title)
                    self.unattached.append(test)
                    continue
                self._apply_outcome(tc, test)
        return builder

    def _find_root_case(self, suite_key: str, test: TestStats,
                        root_cases: Dict[str, ReportTestCase]) -> Optional[ReportTestCase]:
        key, seen = suite_key, set()
        while key in self.suites and key not in seen:
            seen.add(key)
            parent = self.suites[key].parent
            if not parent:
                return root_cases.get(key)
            key = parent
        # parent chain broken: fall back to the first suite name contained in the test title
        title = test.full_title or test.title or ""
        return next((tc for tc in root_cases.values() if tc.attributes.get("name", "") in title), None)

    def _apply_outcome(self, tc: ReportTestCase, test: TestStats) -> None:
        error = test.error
        if test.state in ("pending", "skipped"):
            tc.skipped()
            if error:
                tc.standard_error(_stack_text(error))
        elif test.state == "failed":
            if error:
                if error.get("message"):
                    error["message"] = strip_ansi(error["message"])
                if self.options.error_options:
                    for attr, field_name in self.options.error_options.items():
                        value = error.get(field_name)
                        ERROR_SETTERS[attr](tc, strip_ansi(value) if isinstance(value, str) else value)
                else:
                    tc.error(error.get("message"))
                tc.standard_error(_stack_text(error))
            else:
                tc.error()
            tc.failure()
        output = format_output(test)
        if output:
            tc.standard_output(f"\n{output}\n")
