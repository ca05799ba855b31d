"""Shared fixtures: an on-disk repository layout and an in-memory reprepro."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Sequence, Tuple

import pytest
from fastapi.testclient import TestClient

from bazapta.core.config import Settings
from bazapta.domain.models import ToolResult
from bazapta.main import create_app
from bazapta.storage.repository_tool import RepositoryTool


class FakeTool(RepositoryTool):
    """Answers commands from canned results and records every call."""

    def __init__(self) -> None:
        self.calls: List[List[str]] = []
        self.responses: Dict[Tuple[str, ...], ToolResult] = {}
        self.staged: Dict[str, bytes] = {}
        self.checked = False

    def respond(self, args: Sequence[str], output: str = "", status: int = 0) -> None:
        self.responses[tuple(args)] = ToolResult(args=list(args), output=output, status=status)

    async def run(self, args: Sequence[str]) -> ToolResult:
        args = list(args)
        self.calls.append(args)
        if args[0] == "includedeb":
            # the staged file only lives while the tool runs
            path = Path(args[2])
            self.staged[path.name] = path.read_bytes()
        return self.responses.get(tuple(args), ToolResult(args=args))

    async def check(self) -> None:
        self.checked = True


@pytest.fixture
def repo_root(tmp_path: Path) -> Path:
    root = tmp_path / "reprepro"
    for name in ("wheezy", "squeeze", ".hidden"):
        (root / "dists" / name).mkdir(parents=True)
    (root / "pool" / "main" / "h" / "hadoop").mkdir(parents=True)
    return root


@pytest.fixture
def settings(tmp_path: Path, repo_root: Path) -> Settings:
    staging = tmp_path / "staging"
    staging.mkdir()
    return Settings(reprepro_path=repo_root, staging_dir=staging, sudo=False)


@pytest.fixture
def tool() -> FakeTool:
    return FakeTool()


@pytest.fixture
def client(settings: Settings, tool: FakeTool):
    app = create_app(settings=settings, tool=tool)
    with TestClient(app) as c:
        yield c
