import asyncio
import logging
import shutil
from pathlib import Path
from typing import List, Optional, Sequence

from bazapta.domain.errors import PreflightError
from bazapta.domain.models import ToolResult
from bazapta.storage.repository_tool import RepositoryTool

logger = logging.getLogger(__name__)

SUDO = "/usr/bin/sudo"


class RepreproTool(RepositoryTool):
    def __init__(self, repository_root: Path, executable: str = "reprepro", sudo: bool = False):
        self._root = Path(repository_root)
        self._executable = executable
        self._sudo = sudo

    @property
    def root(self) -> Path:
        return self._root

    def _resolve(self) -> Optional[str]:
        return shutil.which(self._executable)

    def command_line(self, args: Sequence[str]) -> List[str]:
        executable = self._resolve() or self._executable
        if self._sudo:
            return [SUDO, "-n", executable, *args]
        return [executable, *args]

    async def run(self, args: Sequence[str]) -> ToolResult:
        cmd = self.command_line(args)
        logger.debug(f"executing: {cmd} in {self._root}")

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=str(self._root),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
            stdout, _ = await process.communicate()
        except OSError as e:
            logger.error(f"executing: {cmd} could not be launched: {e}")
            return ToolResult(args=list(args), output=str(e), status=-1)

        output = stdout.decode("utf-8", errors="replace")
        result = ToolResult(args=list(args), output=output, status=process.returncode)
        if not result.ok:
            logger.error(f"executing: {cmd} caused error {result.status}: {output}")
        return result

    async def check(self) -> None:
        executable = self._resolve()
        if executable is None:
            raise PreflightError(f"could not find {self._executable} on PATH")

        if not self._sudo:
            return

        # password-less sudo is required, `-n` fails instead of prompting
        result = await self.run(["-h"])
        if not result.ok:
            raise PreflightError(f"need password-less sudo rights for {executable}")
