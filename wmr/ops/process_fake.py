# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Scripted process runner for tests.

Results are looked up by the exact command, script text, or script path.
Anything not scripted behaves like a missing program: run_command and
run_script raise FileNotFoundError.
"""

from pathlib import Path
from typing import Dict, List

from wmr.ops.process import ProcessResult, ProcessRunner


class FakeProcessRunner(ProcessRunner):
    """In-memory ProcessRunner that records every invocation."""

    def __init__(
        self,
        commands: Dict[str, ProcessResult] | None = None,
        scripts: Dict[str, ProcessResult] | None = None,
        script_files: Dict[str, ProcessResult] | None = None,
    ) -> None:
        self.commands = dict(commands or {})
        self.scripts = dict(scripts or {})
        self.script_files = dict(script_files or {})
        self.calls: List[tuple[str, str]] = []

    def run_command(self, command: str) -> ProcessResult:
        self.calls.append(("command", command))
        if command not in self.commands:
            raise FileNotFoundError(f"Command not found: {command}")
        return self.commands[command]

    def run_script(self, script: str) -> ProcessResult:
        self.calls.append(("script", script))
        if script not in self.scripts:
            raise FileNotFoundError("Script interpreter not available")
        return self.scripts[script]

    def run_script_file(self, path: Path) -> ProcessResult:
        self.calls.append(("script_file", str(path)))
        if str(path) not in self.script_files:
            raise FileNotFoundError(f"Script not found: {path}")
        return self.script_files[str(path)]
