
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Dict, Any, Optional, Tuple
import pathlib
import yaml
from ..utils.sanitize import sanitize_capabilities

@dataclass
class OutputEvent:
    type: str
    method: Optional[str] = None
    endpoint: Optional[str] = None
    session_id: Optional[str] = None
    command: Optional[str] = None
    params: Any = None
    body: Any = None

@dataclass
class HookStats:
    title: str
    uid: Optional[str] = None
    state: Optional[str] = None
    duration: float = 0
    error: Optional[Dict[str, Any]] = None

@dataclass
class TestStats:
    __test__ = False  # not a pytest test class

    title: str
    uid: Optional[str] = None
    full_title: Optional[str] = None
    state: str = "pending"
    duration: float = 0
    error: Optional[Dict[str, Any]] = None
    output: List[OutputEvent] = field(default_factory=list)
    pending_reason: Optional[str] = None
    retries: int = 0

    def skip(self, reason: Optional[str] = None) -> None:
        self.state = "skipped"
        self.pending_reason = reason

    def fail(self, error: Optional[Dict[str, Any]] = None) -> None:
        self.state = "failed"
        self.error = error

    def pass_(self) -> None:
        self.state = "passed"

@dataclass
class SuiteStats:
    title: str
    uid: Optional[str] = None
    full_title: Optional[str] = None
    parent: Optional[str] = None
    start: Optional[datetime] = None
    duration: float = 0
    hooks: List[HookStats] = field(default_factory=list)
    tests: Dict[str, TestStats] = field(default_factory=dict)

@dataclass
class RunnerConfig:
    hostname: Optional[str] = None

@dataclass
class RunnerResult:
    cid: str = "0-0"
    specs: List[str] = field(default_factory=list)
    capabilities: Dict[str, Any] = field(default_factory=dict)
    config: RunnerConfig = field(default_factory=RunnerConfig)
    sanitized_capabilities: Optional[str] = None

    def __post_init__(self):
        if self.sanitized_capabilities is None:
            self.sanitized_capabilities = sanitize_capabilities(self.capabilities)

# ---------- run dump loading ----------
def _pick(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    for k in keys:
        if k in data:
            return data[k]
    return default

def _parse_start(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError as e:
        raise ValueError(f"Bad suite start timestamp: {value!r}") from e

def _output_event(data: Dict[str, Any]) -> OutputEvent:
    if data.get("type") not in ("command", "result"):
        raise ValueError(f"Unknown output event type: {data.get('type')!r}")
    return OutputEvent(
        type=data["type"],
        method=data.get("method"),
        endpoint=data.get("endpoint"),
        session_id=_pick(data, "sessionId", "session_id"),
        command=data.get("command"),
        params=data.get("params"),
        body=data.get("body"),
    )

def _test(key: str, data: Dict[str, Any]) -> TestStats:
    return TestStats(
        uid=data.get("uid", key),
        title=data.get("title"),
        full_title=_pick(data, "fullTitle", "full_title"),
        state=data.get("state", "pending"),
        duration=_pick(data, "_duration", "duration", default=0),
        error=data.get("error"),
        output=[_output_event(o) for o in data.get("output") or []],
        pending_reason=_pick(data, "pendingReason", "pending_reason"),
        retries=data.get("retries", 0),
    )

def _suite(key: str, data: Dict[str, Any]) -> SuiteStats:
    tests = data.get("tests") or {}
    if isinstance(tests, list):
        tests = {t.get("uid", str(i)): t for i, t in enumerate(tests)}
    return SuiteStats(
        uid=data.get("uid", key),
        title=data.get("title"),
        full_title=_pick(data, "fullTitle", "full_title"),
        parent=data.get("parent"),
        start=_parse_start(data.get("start")),
        duration=_pick(data, "_duration", "duration", default=0),
        hooks=[HookStats(uid=h.get("uid"), title=h.get("title"), state=h.get("state"),
                         duration=_pick(h, "_duration", "duration", default=0), error=h.get("error"))
               for h in data.get("hooks") or []],
        tests={k: _test(k, t) for k, t in tests.items()},
    )

def load_run(path: str) -> Tuple[RunnerResult, Dict[str, SuiteStats]]:
    """Read a recorded run dump (YAML or JSON) into a RunnerResult and its suites registry."""
    data = yaml.safe_load(pathlib.Path(path).read_text())
    if not isinstance(data, dict) or "runner" not in data:
        raise ValueError(f"{path}: run dump must be a mapping with a 'runner' key")
    r = data["runner"]
    runner = RunnerResult(
        cid=str(r.get("cid", "0-0")),
        specs=list(r.get("specs") or []),
        capabilities=dict(r.get("capabilities") or {}),
        config=RunnerConfig(hostname=(r.get("config") or {}).get("hostname")),
        sanitized_capabilities=_pick(r, "sanitizedCapabilities", "sanitized_capabilities"),
    )
    suites = {k: _suite(k, s) for k, s in (data.get("suites") or {}).items()}
    return runner, suites
