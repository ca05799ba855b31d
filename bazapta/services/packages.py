"""
Package operations on top of the repository tool.

Each operation issues one or two tool commands, turns a failed invocation
into ToolFailure, and looks for rejections the tool reports while still
exiting with status 0.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from bazapta.domain.errors import PackageNotFound, PackageRejected, ToolFailure
from bazapta.domain.grammar import find_package_file, iter_references, parse_listing
from bazapta.domain.models import PackageEntry, ToolResult
from bazapta.storage.repository_tool import RepositoryTool

logger = logging.getLogger(__name__)

# includedeb: "Skipping inclusion of 'x' '1.0' in 'squeeze|main|i386', as it has already '1.0'."
REJECTION_MARKER = "Skipping"
# remove: "Not removed as not found: x"
NOT_FOUND_MARKER = "Not removed as not found"


def ensure_ok(result: ToolResult) -> ToolResult:
    if not result.ok:
        raise ToolFailure(result.args, result.output, result.status)
    return result


def check_rejection(result: ToolResult) -> ToolResult:
    """
    Classify domain rejections hidden in an otherwise successful result.
    """
    for line in result.lines():
        stripped = line.strip()
        if stripped.startswith(REJECTION_MARKER):
            raise PackageRejected(stripped)
        if stripped.startswith(NOT_FOUND_MARKER):
            raise PackageNotFound(stripped)
    return result


class PackageService:
    def __init__(self, tool: RepositoryTool, repository_root: Path):
        self.tool = tool
        self.repository_root = Path(repository_root)

    async def list_packages(self, distribution: str) -> List[PackageEntry]:
        result = ensure_ok(await self.tool.list_distribution(distribution))
        return parse_listing(result.output)

    async def package_info(
        self,
        distribution: str,
        component: str,
        architecture: str,
        name: str,
        version: str,
    ) -> Optional[PackageEntry]:
        """
        Look up a single package. Returns None when the tool lists nothing
        for it, or nothing with the requested component and version.
        """
        result = ensure_ok(await self.tool.list_package(distribution, name, architecture))
        if not result.output.strip():
            return None

        for entry in parse_listing(result.output):
            if entry.component == component and entry.version == version and entry.name == name:
                return entry
        return None

    async def register_package(self, distribution: str, path: Path) -> None:
        result = ensure_ok(await self.tool.include_deb(distribution, str(path)))
        check_rejection(result)
        logger.info(f"registered {path.name} in {distribution}")

    async def remove_package(self, distribution: str, name: str, architecture: Optional[str] = None) -> None:
        if architecture is None:
            result = await self.tool.remove(distribution, name)
        else:
            result = await self.tool.remove_architecture(distribution, name, architecture)
        check_rejection(ensure_ok(result))
        logger.info(f"removed {name} ({architecture or 'any architecture'}) from {distribution}")

    async def resolve_package_file(
        self,
        distribution: str,
        name: str,
        version: str,
        architecture: str,
    ) -> Optional[Path]:
        """
        Locate the pool file of a package through `dumpreferences`.
        """
        result = ensure_ok(await self.tool.dump_references())
        filekey = find_package_file(iter_references(result.output, distribution), name, version, architecture)
        if filekey is None:
            return None
        return self.repository_root / filekey
