from __future__ import annotations

import subprocess  # nosec B404
import sys
from typing import Sequence

_CHECK_COMMANDS: Sequence[Sequence[str]] = (
    ("ruff", "check", "src", "tests"),
    ("pyright", "src"),
    ("bandit", "-q", "-r", "src/dws_toolbox"),
    ("pytest", "-q"),
)


def run_checks() -> int:
    """Run lint, type, security and test checks; stop at the first failure."""

    for command in _CHECK_COMMANDS:
        print(f"-> {' '.join(command)}", file=sys.stderr, flush=True)
        completed = subprocess.run(command, check=False)  # nosec B603
        if completed.returncode != 0:
            return completed.returncode
    return 0


if __name__ == "__main__":
    raise SystemExit(run_checks())
