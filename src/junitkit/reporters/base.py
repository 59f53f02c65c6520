
import logging
import pathlib
from typing import Any, Dict, List, Optional
from ..config import ReporterOptions
from ..runners.runner import HookStats, OutputEvent, RunnerResult, SuiteStats, TestStats
from ..utils.artifacts import report_path, write_report

# key the runner gives to tests that carry no uid (cucumber hooks)
UNDEFINED_KEY = "undefined"

class Reporter:
    """
    Records the runner's event stream into an ordered suites registry.

    Suites are keyed by uid (title when no uid is given); nested suites reference
    their parent's key instead of being owned by it. Subclasses turn the registry
    into a report in on_runner_end.
    """

    def __init__(self, options: Optional[ReporterOptions] = None):
        self.options = options or ReporterOptions()
        self.suites: Dict[str, SuiteStats] = {}
        self.current_test: Optional[TestStats] = None
        self.output_path: Optional[pathlib.Path] = None
        self.log = logging.getLogger(__name__)
        self._suite_stack: List[str] = []

    @property
    def current_suite(self) -> Optional[SuiteStats]:
        return self.suites[self._suite_stack[-1]] if self._suite_stack else None

    # ---------- suites ----------
    def on_suite_start(self, suite: SuiteStats) -> None:
        key = suite.uid or suite.title
        if suite.parent is None and self._suite_stack:
            suite.parent = self._suite_stack[-1]
        self.suites[key] = suite
        self._suite_stack.append(key)

    def on_suite_end(self, suite: SuiteStats) -> None:
        key = suite.uid or suite.title
        if key in self._suite_stack:
            del self._suite_stack[self._suite_stack.index(key):]

    # ---------- hooks ----------
    def on_hook_start(self, hook: HookStats) -> None:
        if self.current_suite is None:
            self.log.warning("Hook %r started outside of any suite; ignored", hook.title)
            return
        self.current_suite.hooks.append(hook)

    def on_hook_end(self, hook: HookStats) -> None:
        suite = self.current_suite
        if suite is None:
            self.log.warning("Hook %r ended outside of any suite; ignored", hook.title)
            return
        if hook.uid is not None:
            recorded = next((h for h in suite.hooks if h.uid == hook.uid), None)
        else:
            recorded = next((h for h in suite.hooks if h.uid is None and h.title == hook.title), None)
        if recorded is None:
            suite.hooks.append(hook)
        elif recorded is not hook:
            recorded.state = hook.state
            recorded.error = hook.error
            recorded.duration = hook.duration

    # ---------- tests ----------
    def on_test_start(self, test: TestStats) -> None:
        if self.current_suite is None:
            self.log.warning("Test %r started outside of any suite; ignored", test.title)
            return
        key = test.uid if test.uid is not None else UNDEFINED_KEY
        self.current_suite.tests[key] = test
        self.current_test = test

    def on_test_pass(self, test: TestStats) -> None:
        test.pass_()

    def on_test_fail(self, test: TestStats, error: Optional[Dict[str, Any]] = None) -> None:
        test.fail(error if error is not None else test.error)

    def on_test_skip(self, test: TestStats) -> None:
        test.skip(test.pending_reason)

    def on_test_retry(self, test: TestStats) -> None:
        pass

    def on_test_end(self, test: TestStats) -> None:
        if self.current_test is test:
            self.current_test = None

    # ---------- commands ----------
    def on_before_command(self, command: Dict[str, Any]) -> None:
        if self.current_test is None:
            return
        self.current_test.output.append(OutputEvent(
            type="command",
            method=command.get("method"),
            endpoint=command.get("endpoint"),
            session_id=command.get("sessionId"),
            command=command.get("command"),
            params=command.get("params"),
            body=command.get("body"),
        ))

    def on_after_command(self, result: Dict[str, Any]) -> None:
        if self.current_test is None:
            return
        self.current_test.output.append(OutputEvent(type="result", body=result.get("result")))

    # ---------- output ----------
    def on_runner_end(self, runner: RunnerResult) -> None:
        pass

    def write(self, text: str, cid: str = "0-0") -> Optional[pathlib.Path]:
        """Write the report into output_dir, or to stdout when no directory is configured."""
        if not self.options.output_dir:
            print(text, end="")
            return None
        fmt = self.options.output_file_format
        name = fmt({"cid": cid}) if callable(fmt) else fmt.format(cid=cid)
        self.output_path = write_report(report_path(self.options.output_dir, name), text)
        self.log.info("Report written to %s", self.output_path)
        return self.output_path
