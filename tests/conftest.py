"""Shared test fixtures for md-apply."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from md_apply.adapters.filesystem.local import LocalFileSystem


@pytest.fixture
def fs(tmp_path: Path) -> LocalFileSystem:
    """Real filesystem rooted at a temporary directory."""
    return LocalFileSystem(tmp_path)


@pytest.fixture
def mock_console() -> MagicMock:
    """Console whose prompt answers 'y' unless a test changes it."""
    console = MagicMock()
    console.status = MagicMock()
    console.result = MagicMock()
    console.prompt = AsyncMock(return_value="y")
    return console


@pytest.fixture
def markdown_input() -> MagicMock:
    """InputSource returning an empty document; tests set the text."""
    source = MagicMock()
    source.description = "file: changes.md"
    source.acquire = AsyncMock(return_value="")
    return source


@pytest.fixture
def sample_markdown() -> str:
    """A document mixing both path styles, prose and a nested directory."""
    return (
        "# Changes\n"
        "\n"
        "Some prose first.\n"
        "\n"
        "```python // src/app.py\n"
        "def main():\n"
        "    return 1\n"
        "```\n"
        "\n"
        "```text\n"
        "// docs/notes/readme.txt\n"
        "hello\n"
        "```\n"
    )
