"""junitkit test configuration and fixtures."""
from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path

import pytest

# Add src to path for imports
SRC_DIR = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(SRC_DIR))

from junitkit.runners.runner import HookStats, RunnerResult, SuiteStats, TestStats  # noqa: E402

CWD = "/work/project"


@pytest.fixture
def runner() -> RunnerResult:
    """A single-spec chrome run."""
    return RunnerResult(
        cid="0-1",
        specs=[f"{CWD}/specs/login.e2e.js"],
        capabilities={"browserName": "chrome", "platformName": "linux"},
    )


@pytest.fixture
def suites() -> dict[str, SuiteStats]:
    """Two top-level suites; the first has a nested suite and an errored hook."""
    login = SuiteStats(
        uid="suite-0-0",
        title="Login Flow",
        full_title="Login Flow",
        start=datetime(2024, 5, 1, 12, 0, 0),
        duration=2500,
        hooks=[
            HookStats(
                uid="hook-0-0",
                title='"before each" hook: setup',
                state="failed",
                duration=12,
                error={"message": "setup broke", "stack": "Error: setup broke"},
            ),
            HookStats(uid="hook-0-1", title='"after all" hook', state="passed", duration=3),
        ],
        tests={
            "test-0-0": TestStats(
                uid="test-0-0", title="logs in", full_title="Login Flow logs in",
                state="passed", duration=800,
            ),
        },
    )
    mfa = SuiteStats(
        uid="suite-0-1",
        title="with MFA",
        full_title="Login Flow with MFA",
        parent="suite-0-0",
        duration=900,
        tests={
            "test-0-1": TestStats(
                uid="test-0-1",
                title="asks for code",
                full_title="Login Flow with MFA asks for code",
                state="failed",
                duration=900,
                error={
                    "message": "Timeout\u001b[31m",
                    "stack": "Error: Timeout\n    at \u001b[90mlogin.js:10\u001b[39m",
                    "type": "TimeoutError",
                },
            ),
        },
    )
    checkout = SuiteStats(
        uid="suite-1-0",
        title="@smoke Checkout / cart",
        full_title="@smoke Checkout / cart",
        start=datetime(2024, 5, 1, 12, 0, 3),
        duration=1000,
        tests={
            "test-1-0": TestStats(
                uid="test-1-0", title="adds item", full_title="@smoke Checkout / cart adds item",
                state="pending",
            ),
        },
    )
    return {"suite-0-0": login, "suite-0-1": mfa, "suite-1-0": checkout}
