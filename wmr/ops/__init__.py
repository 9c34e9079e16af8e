# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
System capabilities - registry and process access behind injectable interfaces.
"""

from wmr.ops.registry import (
    RegistryAccessor,
    normalize_key_path,
    split_key_path,
)
from wmr.ops.registry_real import WinRegistry
from wmr.ops.registry_fake import FakeRegistry

from wmr.ops.process import ProcessResult, ProcessRunner
from wmr.ops.process_real import SubprocessRunner
from wmr.ops.process_fake import FakeProcessRunner

__all__ = [
    # Registry
    "RegistryAccessor",
    "WinRegistry",
    "FakeRegistry",
    "normalize_key_path",
    "split_key_path",
    # Processes
    "ProcessResult",
    "ProcessRunner",
    "SubprocessRunner",
    "FakeProcessRunner",
]
