# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Process execution interface used by application and script prerequisites.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ProcessResult:
    """Exit status and combined stdout/stderr text of a finished process."""

    exit_code: int
    output: str

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0


class ProcessRunner(ABC):
    """
    Abstract interface for running commands and scripts.

    Every call blocks until the child process exits. No timeout is applied.
    """

    @abstractmethod
    def run_command(self, command: str) -> ProcessResult:
        """
        Run a command line.

        Raises:
            OSError: If the process cannot be started
        """
        ...

    @abstractmethod
    def run_script(self, script: str) -> ProcessResult:
        """
        Run script text in a fresh interpreter process.

        Raises:
            OSError: If the process cannot be started
        """
        ...

    @abstractmethod
    def run_script_file(self, path: Path) -> ProcessResult:
        """
        Run the script stored at path in a fresh interpreter process.

        Raises:
            FileNotFoundError: If the script does not exist
            OSError: If the process cannot be started
        """
        ...
