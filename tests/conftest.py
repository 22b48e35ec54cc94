from pathlib import Path

import pytest

from dispatch import dispatch

TASKS_DIR = Path(__file__).resolve().parents[1] / "docs" / "tasks"


@pytest.fixture
def tasks_dir():
    return TASKS_DIR


@pytest.fixture
def example_task_class():
    (info,) = dispatch([TASKS_DIR / "example_task.py"])
    return info["class"]
