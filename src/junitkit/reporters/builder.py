
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Union
import xml.etree.ElementTree as ET

def _fmt_time(seconds: Union[int, float]) -> str:
    return str(round(float(seconds), 3))

def _fmt_timestamp(ts: Union[datetime, str, None]) -> Optional[str]:
    if isinstance(ts, datetime):
        return ts.strftime("%Y-%m-%dT%H:%M:%S")
    return ts

class ReportTestCase:
    """One <testcase>. Setters return self so calls can be chained."""

    def __init__(self):
        self.attributes: Dict[str, str] = {}
        self.is_skipped = False
        self.is_failure = False
        self.is_error = False
        self._failure_message: Optional[str] = None
        self._failure_type: Optional[str] = None
        self._error_message: Optional[str] = None
        self._error_type: Optional[str] = None
        self._error_content: Optional[str] = None
        self._stacktrace: Optional[str] = None
        self._standard_output: List[str] = []
        self._standard_error: List[str] = []

    def classname(self, value: str) -> "ReportTestCase":
        self.attributes["classname"] = value
        return self

    def name(self, value: str) -> "ReportTestCase":
        self.attributes["name"] = value
        return self

    def time(self, seconds: Union[int, float]) -> "ReportTestCase":
        self.attributes["time"] = _fmt_time(seconds)
        return self

    def file(self, path: str) -> "ReportTestCase":
        self.attributes["file"] = path
        return self

    def skipped(self) -> "ReportTestCase":
        self.is_skipped = True
        return self

    def failure(self, message: Optional[str] = None, type: Optional[str] = None) -> "ReportTestCase":
        # a bare failure() keeps any message set earlier
        self.is_failure = True
        if message is not None:
            self._failure_message = str(message)
        if type is not None:
            self._failure_type = type
        return self

    def error(self, message: Optional[str] = None, type: Optional[str] = None,
              content: Optional[str] = None) -> "ReportTestCase":
        self.is_error = True
        if message is not None:
            self._error_message = str(message)
        if type is not None:
            self._error_type = type
        if content is not None:
            self._error_content = content
        return self

    def stacktrace(self, text: Optional[str]) -> "ReportTestCase":
        self.is_failure = True
        self._stacktrace = text
        return self

    def standard_output(self, text: Optional[str]) -> "ReportTestCase":
        if text:
            self._standard_output.append(text)
        return self

    def standard_error(self, text: Optional[str]) -> "ReportTestCase":
        if text:
            self._standard_error.append(text)
        return self

    @property
    def system_out(self) -> Optional[str]:
        return "".join(self._standard_output) or None

    @property
    def system_err(self) -> Optional[str]:
        return "".join(self._standard_error) or None

    def build(self, parent: ET.Element) -> ET.Element:
        tc = ET.SubElement(parent, "testcase", self.attributes)
        if self.is_failure:
            failure = ET.SubElement(tc, "failure")
            if self._failure_message is not None:
                failure.set("message", self._failure_message)
            if self._failure_type:
                failure.set("type", self._failure_type)
            failure.text = self._stacktrace
        if self.is_error:
            error = ET.SubElement(tc, "error")
            if self._error_message is not None:
                error.set("message", self._error_message)
            if self._error_type:
                error.set("type", self._error_type)
            error.text = self._error_content
        if self.is_skipped:
            ET.SubElement(tc, "skipped")
        if self.system_out:
            ET.SubElement(tc, "system-out").text = self.system_out
        if self.system_err:
            ET.SubElement(tc, "system-err").text = self.system_err
        return tc

# Error-record fields can only be routed to these testcase setters.
ERROR_SETTERS: Dict[str, Callable[[ReportTestCase, Any], ReportTestCase]] = {
    "error": lambda tc, v: tc.error(v),
    "failure": lambda tc, v: tc.failure(v),
    "stacktrace": lambda tc, v: tc.stacktrace(v),
    "standardOutput": lambda tc, v: tc.standard_output(v),
    "standardError": lambda tc, v: tc.standard_error(v),
}

class ReportSuite:
    def __init__(self):
        self.attributes: Dict[str, str] = {}
        self.properties: List[tuple] = []
        self.test_cases: List[ReportTestCase] = []

    def name(self, value: str) -> "ReportSuite":
        self.attributes["name"] = value
        return self

    def timestamp(self, ts: Union[datetime, str, None]) -> "ReportSuite":
        value = _fmt_timestamp(ts)
        if value is not None:
            self.attributes["timestamp"] = value
        return self

    def time(self, seconds: Union[int, float]) -> "ReportSuite":
        self.attributes["time"] = _fmt_time(seconds)
        return self

    def property(self, name: str, value: Any) -> "ReportSuite":
        self.properties.append((name, "" if value is None else str(value)))
        return self

    def test_case(self) -> ReportTestCase:
        tc = ReportTestCase()
        self.test_cases.append(tc)
        return tc

    def counts(self) -> Dict[str, int]:
        return {
            "tests": len(self.test_cases),
            "failures": sum(1 for c in self.test_cases if c.is_failure),
            "errors": sum(1 for c in self.test_cases if c.is_error),
            "skipped": sum(1 for c in self.test_cases if c.is_skipped),
        }

    def build(self, parent: ET.Element) -> ET.Element:
        counts = {k: str(v) for k, v in self.counts().items()}
        suite = ET.SubElement(parent, "testsuite", {**self.attributes, **counts})
        if self.properties:
            props = ET.SubElement(suite, "properties")
            for name, value in self.properties:
                ET.SubElement(props, "property", name=name, value=value)
        for c in self.test_cases:
            c.build(suite)
        return suite

class ReportBuilder:
    """Collects report suites and serializes them into one <testsuites> document."""

    def __init__(self):
        self.suites: List[ReportSuite] = []

    def test_suite(self) -> ReportSuite:
        s = ReportSuite()
        self.suites.append(s)
        return s

    def build(self) -> str:
        totals = {"tests": 0, "failures": 0, "errors": 0, "skipped": 0}
        for s in self.suites:
            for k, v in s.counts().items():
                totals[k] += v
        root = ET.Element("testsuites", {k: str(v) for k, v in totals.items()})
        for s in self.suites:
            s.build(root)
        ET.indent(root, space="  ")
        return '<?xml version="1.0" encoding="UTF-8"?>\n' + ET.tostring(root, encoding="unicode") + "\n"
