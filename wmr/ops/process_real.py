# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Real process execution using subprocess.

Commands and inline scripts are handed to the configured shell as a
single argument; script files are passed to the script shell by path.
stderr is folded into stdout so checks see one combined text stream.
"""

import subprocess
from pathlib import Path
from typing import Sequence, Tuple

import structlog

from wmr.config import default_script_shell, default_shell
from wmr.ops.process import ProcessResult, ProcessRunner

logger = structlog.get_logger()


class SubprocessRunner(ProcessRunner):
    """
    Process execution via subprocess.run().

    Example:
        runner = SubprocessRunner(shell=("/bin/sh", "-c"))
        result = runner.run_command("git --version")
        result.output  # "git version 2.43.0\\n"
    """

    def __init__(
        self,
        shell: Sequence[str] | None = None,
        script_shell: Sequence[str] | None = None,
    ) -> None:
        self.shell: Tuple[str, ...] = tuple(shell or default_shell())
        self.script_shell: Tuple[str, ...] = tuple(script_shell or default_script_shell())

    def _run(self, argv: list[str]) -> ProcessResult:
        logger.debug("process_started", program=argv[0])
        completed = subprocess.run(
            argv,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
        logger.debug("process_finished", exit_code=completed.returncode)
        return ProcessResult(exit_code=completed.returncode, output=completed.stdout or "")

    def run_command(self, command: str) -> ProcessResult:
        return self._run([*self.shell, command])

    def run_script(self, script: str) -> ProcessResult:
        return self._run([*self.shell, script])

    def run_script_file(self, path: Path) -> ProcessResult:
        if not path.is_file():
            raise FileNotFoundError(f"Script not found: {path}")
        return self._run([*self.script_shell, str(path)])
