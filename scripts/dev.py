#!/usr/bin/env python3
"""
Run the local checks of hydro-evaluation: formatting, linting and the test suite.
Usage: uv run python scripts/dev.py [format|check-format|lint|fix|test|test-cov|full]
"""

import subprocess
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def run_command(cmd: list[str], description: str) -> bool:
    """Run a command from the project root and return True if it succeeded."""
    print(f"\n--> {description}: {' '.join(cmd)}")
    try:
        subprocess.run(cmd, check=True, cwd=PROJECT_ROOT)
    except subprocess.CalledProcessError as e:
        print(f"{description} FAILED (exit code: {e.returncode})")
        return False
    print(f"{description} passed")
    return True


def format_code() -> bool:
    return run_command(["uv", "run", "ruff", "format", "src", "tests", "scripts"], "Code Formatting")


def check_format() -> bool:
    return run_command(["uv", "run", "ruff", "format", "--check", "--diff", "src", "tests", "scripts"], "Format Check")


def lint_code() -> bool:
    return run_command(["uv", "run", "ruff", "check", "src", "tests", "scripts"], "Code Linting")


def fix_lint() -> bool:
    return run_command(["uv", "run", "ruff", "check", "--fix", "src", "tests", "scripts"], "Lint Fixes")


def run_tests() -> bool:
    return run_command(["uv", "run", "pytest", "tests/", "-v"], "Test Suite")


def run_tests_with_coverage() -> bool:
    return run_command(
        ["uv", "run", "pytest", "tests/", "--cov=hydro_evaluation", "--cov-report=term-missing"],
        "Test Suite with Coverage",
    )


def full_check() -> bool:
    results = [(name, func()) for name, func in [("Format Check", check_format), ("Linting", lint_code), ("Tests", run_tests)]]

    print("\n" + "=" * 40)
    for name, passed in results:
        print(f"{name:<20} {'PASSED' if passed else 'FAILED'}")
    return all(passed for _, passed in results)


COMMANDS = {
    "format": format_code,
    "check-format": check_format,
    "lint": lint_code,
    "fix": fix_lint,
    "test": run_tests,
    "test-cov": run_tests_with_coverage,
    "full": full_check,
}


def main() -> int:
    command = "full" if len(sys.argv) < 2 else sys.argv[1]
    if command not in COMMANDS:
        print("Available commands:")
        for name in COMMANDS:
            print(f"  - {name}")
        return 1
    return 0 if COMMANDS[command]() else 1


if __name__ == "__main__":
    sys.exit(main())
