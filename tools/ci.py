#!/usr/bin/env python3
# Copyright 2026 Specimen Contributors
# SPDX-License-Identifier: Apache-2.0

"""Run all CI checks locally: format, lint, type check, tests, smoke test, and build."""

import argparse
import pathlib
import subprocess
import sys
import time
from typing import NamedTuple

from yachalk import chalk

# ###############
# Public Interface
# ###############


class Step(NamedTuple):
    name: str
    command: list[str]
    slow: bool = False


STEPS: list[Step] = [
    Step("Format check", ["uv", "run", "ruff", "format", "--check", "src/", "tests/", "tools/"]),
    Step("Lint", ["uv", "run", "ruff", "check", "src/", "tests/", "tools/"]),
    Step("Type check", ["uv", "run", "ty", "check", "src/"]),
    Step("Tests", ["uv", "run", "pytest", "--cov=specimen", "--cov-report=term-missing"]),
    Step("CLI smoke test", ["uv", "run", "specimen", "--help"]),
    Step("Build", ["uv", "build"], slow=True),
]


def main(argv: list[str] | None = None) -> int:
    """Run the CI steps and report results."""
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--fast", action="store_true", help="Skip slow steps such as the package build")
    parser.add_argument("--fail-fast", action="store_true", help="Stop at the first failing step")
    args = parser.parse_args(argv)

    results: list[tuple[str, bool, float]] = []
    for step in STEPS:
        if args.fast and step.slow:
            continue
        _banner(step.name)
        start = time.monotonic()
        proc = subprocess.run(step.command, cwd=_repo_root())
        passed = proc.returncode == 0
        results.append((step.name, passed, time.monotonic() - start))
        if args.fail_fast and not passed:
            break

    _banner("  Summary")
    for name, passed, elapsed in results:
        color = chalk.green if passed else chalk.red
        print(color(f"  {'PASS' if passed else 'FAIL'}  {name} ({elapsed:.1f}s)"))
    print()
    return 0 if all(passed for _, passed, _ in results) else 1


# ################
# Implementation
# ################


def _banner(title: str) -> None:
    sep = chalk.blue("=" * 60)
    print(f"\n{sep}")
    print(chalk.blue(title))
    print(sep)


def _repo_root() -> pathlib.Path:
    return pathlib.Path(__file__).parent.parent


if __name__ == "__main__":
    sys.exit(main())
