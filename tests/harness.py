"""
Console reporting shared by the test suites.

Every suite records its checks through assert_test and fails the pytest
function when any check failed, so a suite can run under pytest or be
executed directly as a script for a readable report.
"""

import sys
import traceback
from pathlib import Path

# Suites import the project packages without installing them
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


class Colors:
    """ANSI escape codes used in the report."""
    RESET = "\033[0m"
    BOLD = "\033[1m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"


RULE_WIDTH = 60


def _paint(text: str, *styles: str) -> str:
    return "".join(styles) + text + Colors.RESET


def print_header(text: str) -> None:
    rule = "=" * RULE_WIDTH
    print(_paint(f"\n{rule}\n {text}\n{rule}\n", Colors.BOLD, Colors.BLUE))


def print_subheader(text: str) -> None:
    print(_paint(f"\n--- {text} ---", Colors.CYAN))


def print_success(text: str) -> None:
    print("  " + _paint(f"✓ {text}", Colors.GREEN))


def print_failure(text: str) -> None:
    print("  " + _paint(f"✗ {text}", Colors.RED))


def print_info(text: str) -> None:
    print("  " + _paint(f"→ {text}", Colors.YELLOW))


def assert_test(condition: bool, success_msg: str, failure_msg: str) -> bool:
    """Report one check and return whether it held."""
    (print_success if condition else print_failure)(success_msg if condition else failure_msg)
    return bool(condition)


class SuiteResults:
    """Pass/fail tally for the checks of one suite."""

    def __init__(self):
        self.passed = 0
        self.failed = 0

    @property
    def total(self) -> int:
        return self.passed + self.failed

    def add(self, passed: bool) -> None:
        if passed:
            self.passed += 1
        else:
            self.failed += 1

    def summary(self) -> None:
        print_header("TEST SUMMARY")
        print(f"  Total:  {self.total}")
        print("  " + _paint(f"Passed: {self.passed}", Colors.GREEN))
        print("  " + _paint(f"Failed: {self.failed}", Colors.RED))

        if self.failed:
            print(_paint("\nSome suites failed ✗", Colors.RED, Colors.BOLD))
        else:
            print(_paint("\nAll suites passed ✓", Colors.GREEN, Colors.BOLD))


def run_suites(title: str, suites: list) -> bool:
    """Run (name, function) pairs, counting a suite as failed if it raises."""
    banner = "═" * (RULE_WIDTH - 2)
    print(_paint(f"\n╔{banner}╗\n║ {title:^56} ║\n╚{banner}╝\n", Colors.BOLD, Colors.CYAN))

    outcome = SuiteResults()
    for name, suite in suites:
        try:
            suite()
        except AssertionError:
            print_failure(f"{name} suite failed")
            outcome.add(False)
        except Exception as e:
            print_failure(f"{name} suite raised {type(e).__name__}: {e}")
            traceback.print_exc()
            outcome.add(False)
        else:
            outcome.add(True)

    outcome.summary()
    return outcome.failed == 0
