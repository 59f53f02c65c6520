
from collections import Counter
from typing import Dict, Optional, TextIO
from ..runners.runner import SuiteStats

def count_states(suites: Dict[str, SuiteStats]) -> Counter:
    return Counter(t.state for s in suites.values() for t in s.tests.values())

class ConsoleReporter:
    def emit(self, suites: Dict[str, SuiteStats], file: Optional[TextIO] = None) -> None:
        for s in suites.values():
            indent = "  " if s.parent else ""
            print(f"{indent}Suite: {s.title}", file=file)
            for t in s.tests.values():
                status = {"passed": "PASS", "failed": "FAIL"}.get(t.state, "SKIP")
                print(f"{indent} - {t.title}: {status}", file=file)
