"""Narrow seam over external process execution (the Go toolchain and git)."""

from collections.abc import Mapping, Sequence
import os
from pathlib import Path
import subprocess
from typing import Protocol

from pyvider.telemetry import logger

from .exceptions import CommandError


class CommandRunner(Protocol):
    def run(
        self,
        args: Sequence[str],
        env: Mapping[str, str] | None = None,
        cwd: Path | str | None = None,
    ) -> str: ...


class SubprocessRunner:
    """Runs commands with `subprocess`, layering `env` over the inherited environment."""

    def run(
        self,
        args: Sequence[str],
        env: Mapping[str, str] | None = None,
        cwd: Path | str | None = None,
    ) -> str:
        command = list(args)
        merged_env = None
        if env:
            merged_env = os.environ.copy()
            merged_env.update(env)

        logger.debug(f"Running command: {' '.join(command)}", env=dict(env or {}))
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                cwd=cwd,
                env=merged_env,
                check=False,
            )
        except FileNotFoundError as e:
            raise CommandError(
                f"Executable not found: {command[0]}", command=command
            ) from e

        if result.returncode != 0:
            raise CommandError(
                f"Command failed with exit code {result.returncode}.\n"
                f"  Command: {' '.join(command)}\n"
                f"  Stderr:\n{result.stderr.strip()}",
                command=command,
                returncode=result.returncode,
                stdout=result.stdout,
                stderr=result.stderr,
            )
        if result.stderr:
            logger.debug("Command stderr", output=result.stderr.strip())
        return result.stdout.strip()
