from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from bazapta.domain.errors import PreflightError
from bazapta.storage.repository_tool import RepositoryTool

logger = logging.getLogger(__name__)


def discover_distributions(repository_root: Path) -> List[str]:
    """
    Names of the distributions in `<root>/dists`, sorted.

    Hidden directories are ignored. An empty or missing `dists` directory
    is a startup error.
    """
    dists_path = Path(repository_root) / "dists"
    try:
        children = sorted(dists_path.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise PreflightError(f"could not read {dists_path}: {e}") from e

    distributions: List[str] = []
    for child in children:
        if child.is_dir() and not child.name.startswith("."):
            distributions.append(child.name)
            logger.info(f"found distribution {child.name}")

    if not distributions:
        raise PreflightError(f"could not find any distributions in {dists_path}")
    return distributions


async def run_preflight(repository_root: Path, tool: RepositoryTool) -> List[str]:
    distributions = discover_distributions(repository_root)
    await tool.check()
    return distributions
