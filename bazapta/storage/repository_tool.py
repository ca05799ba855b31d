from abc import ABC, abstractmethod
from typing import Sequence

from bazapta.domain.models import ToolResult


class RepositoryTool(ABC):
    """
    Abstract base class for the external repository-management tool.

    The tool owns all repository state. Implementations only execute it and
    report what happened; they never interpret its output.
    """

    @abstractmethod
    async def run(self, args: Sequence[str]) -> ToolResult:
        """
        Execute the tool with `args` in the repository root.

        The combined output is returned whatever the exit status. A non-zero
        status or a launch failure gives a result whose `ok` is False.
        """
        pass

    @abstractmethod
    async def check(self) -> None:
        """Verify the tool can be executed. Raises PreflightError otherwise."""
        pass

    # Command vocabulary

    async def list_distribution(self, distribution: str) -> ToolResult:
        return await self.run(["list", distribution])

    async def list_package(self, distribution: str, name: str, architecture: str) -> ToolResult:
        return await self.run(["-A", architecture, "list", distribution, name])

    async def include_deb(self, distribution: str, path: str) -> ToolResult:
        return await self.run(["includedeb", distribution, path])

    async def remove(self, distribution: str, name: str) -> ToolResult:
        return await self.run(["remove", distribution, name])

    async def remove_architecture(self, distribution: str, name: str, architecture: str) -> ToolResult:
        return await self.run(["-A", architecture, "remove", distribution, name])

    async def dump_references(self) -> ToolResult:
        return await self.run(["dumpreferences"])
