
import re
import json
from typing import Any, Mapping, Optional, Pattern, Sequence

ANSI_RE = re.compile(
    r"[\u001B\u009B][\[\]()#;?]*(?:(?:(?:[a-zA-Z\d]*(?:;[-a-zA-Z\d/#&.:=?%@~_]*)*)?\u0007)"
    r"|(?:(?:\d{1,4}(?:;\d{0,4})*)?[\dA-PR-TZcf-ntqry=><~]))"
)
# '@' is kept so that leading "@tag" tokens in suite names survive for tag-aware consumers
DEFAULT_NAME_RE = re.compile(r"[^a-zA-Z0-9@]+")
_BASE64_RE = re.compile(r"^[A-Za-z0-9+/]+={0,2}$")
_CAP_SEGMENT_RE = re.compile(r"[^a-zA-Z0-9_-]+")

OBJ_LENGTH = 10
ARR_LENGTH = 10
STRING_LIMIT = 1000
STRING_TRUNCATE = 200

def strip_ansi(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    return ANSI_RE.sub("", text)

def prepare_name(name: Optional[str] = None, pattern: Pattern[str] = DEFAULT_NAME_RE) -> str:
    """Collapse every separator run into one space; missing titles become 'Skipped test'."""
    if name is None:
        name = "Skipped test"
    return " ".join(part for part in pattern.split(name) if part)

def _sanitize_segment(value: Any) -> str:
    return _CAP_SEGMENT_RE.sub("", str(value).replace(".", "_")).lower()

def sanitize_capabilities(caps: Optional[Mapping[str, Any]]) -> str:
    """<browser-or-device>.<version>.<platform>, e.g. chrome.118_0.linux"""
    if not caps:
        return ""
    device = caps.get("appium:deviceName") or caps.get("deviceName")
    browser = caps.get("browserName")
    version = (caps.get("browserVersion") or caps.get("version")
               or caps.get("appium:platformVersion") or caps.get("platformVersion"))
    platform = caps.get("platformName") or caps.get("platform")
    return ".".join(_sanitize_segment(v) for v in (device or browser, version, platform) if v)

def _is_base64(value: str) -> bool:
    return len(value) % 4 == 0 and bool(_BASE64_RE.match(value))

def limit(value: Any) -> Any:
    """
    Copy of a captured payload bounded for the report: base64 blobs (screenshots)
    collapse to their size, long strings are truncated, and lists and mappings
    keep their first ten entries plus a note on what was dropped.
    """
    if not value:
        return value
    if isinstance(value, str):
        if len(value) > 100 and _is_base64(value):
            return f"[base64] {len(value)} bytes"
        if len(value) > STRING_LIMIT:
            return f"{value[:STRING_TRUNCATE]} ... ({len(value) - STRING_TRUNCATE} more bytes)"
        return value
    if isinstance(value, Mapping):
        keys = list(value)
        limited = {k: limit(value[k]) for k in keys[:OBJ_LENGTH]}
        if len(keys) > OBJ_LENGTH:
            rest = [str(k) for k in keys[OBJ_LENGTH:]]
            limited["_"] = f"{len(keys) - OBJ_LENGTH} more keys: {json.dumps(rest)}"
        return limited
    if isinstance(value, Sequence) and not isinstance(value, (bytes, bytearray)):
        limited = [limit(v) for v in value[:ARR_LENGTH]]
        if len(value) > ARR_LENGTH:
            limited.append(f"({len(value) - ARR_LENGTH} more items)")
        return limited
    return value
