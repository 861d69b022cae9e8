"""Fixtures for integration tests running real shell commands."""

from pathlib import Path

import pytest


@pytest.fixture
def alternating_command(tmp_path: Path) -> str:
    """Shell command that passes on odd runs and fails on even runs.

    The run counter lives in a file under the test's temporary directory.
    """
    counter = tmp_path / "counter"
    return (
        f'n=$(cat "{counter}" 2>/dev/null || echo 0); '
        f'echo $((n + 1)) > "{counter}"; '
        "[ $((n % 2)) -eq 0 ]"
    )
