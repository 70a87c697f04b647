"""
ShellCommands: OS-process adapter for installing a document and
updating its shortlink.

Command templates come from Settings and are split with shlex; the
arguments are appended as separate argv entries, never interpolated
into a shell string.
"""

from __future__ import annotations

import asyncio
import shlex
from typing import Protocol

from pubflow.core.logging import get_logger
from pubflow.pipeline.errors import CommandError

logger = get_logger(__name__)


class Commands(Protocol):
    async def install_document(self, source: str, dest: str) -> None: ...

    async def update_shortlink(self, uri: str) -> None: ...


class ShellCommands:
    """Runs the configured install / shortlink commands as subprocesses."""

    def __init__(self, install_command: str, shortlink_command: str) -> None:
        self._install = shlex.split(install_command)
        self._shortlink = shlex.split(shortlink_command)

    async def install_document(self, source: str, dest: str) -> None:
        await self._run([*self._install, source, dest])

    async def update_shortlink(self, uri: str) -> None:
        await self._run([*self._shortlink, uri])

    async def _run(self, argv: list[str]) -> None:
        logger.info("Running command", command=argv)
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise CommandError(
                f"Could not start {argv[0]}: {exc}",
                command=argv,
            ) from exc

        stdout, stderr = await process.communicate()
        if process.returncode != 0:
            message = stderr.decode(errors="replace").strip()
            raise CommandError(
                f"Command {shlex.join(argv)} exited with status {process.returncode}"
                + (f": {message}" if message else ""),
                command=argv,
                returncode=process.returncode,
                stderr=message,
            )

        logger.info(
            "Command succeeded",
            command=argv,
            output=stdout.decode(errors="replace").strip() or None,
        )
