#!/usr/bin/env python3
"""Run the test suite with Qt on the offscreen platform.

Usage:
  python scripts/run_tests_offscreen.py [--timeout SECONDS] [--] [pytest args...]

Examples:
  python scripts/run_tests_offscreen.py tests/test_session.py::test_add_flow_sends_value_untrimmed
  python scripts/run_tests_offscreen.py -- -k transport -q
"""

from __future__ import annotations

import argparse
import os
import shlex
import subprocess
import sys


def main() -> int:
    p = argparse.ArgumentParser(description="Run pytest with Qt offscreen mode")
    p.add_argument("--timeout", type=int, default=120, help="Maximum seconds for the whole run")
    p.add_argument("--verbose", action="store_true", help="Don't use -q (quiet)")
    p.add_argument("pytest_args", nargs=argparse.REMAINDER, help="Additional pytest args")
    args = p.parse_args()

    env = os.environ.copy()
    # No window manager needed; also keeps the backend-process tests headless.
    env.setdefault("QT_QPA_PLATFORM", "offscreen")
    env.setdefault("MAILSHELL_LOG_LEVEL", "warning")

    cmd = [sys.executable, "-m", "pytest"]
    if not args.verbose:
        cmd += ["-q"]
    # Per-test limit via pytest-timeout; the transport tests spawn a child process.
    cmd.append(f"--timeout={min(60, args.timeout)}")
    cmd += [a for a in args.pytest_args if a != "--"]

    print("Running:", " ".join(shlex.quote(c) for c in cmd))
    try:
        completed = subprocess.run(cmd, env=env, check=False, timeout=args.timeout)
        return completed.returncode
    except subprocess.TimeoutExpired:
        print(f"pytest run timed out after {args.timeout} seconds", file=sys.stderr)
        return 124


if __name__ == "__main__":
    raise SystemExit(main())
