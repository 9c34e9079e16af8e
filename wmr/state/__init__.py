# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
State Engine - State files, registry item and file item capture/replay.
"""

from wmr.state.store import (
    state_file_path,
    write_state_file,
    read_state_file,
)

from wmr.state.registry_state import (
    capture_registry_state,
    replay_registry_state,
    CapturedRegistryState,
)

from wmr.state.file_state import (
    capture_file_state,
    replay_file_state,
    CapturedFileState,
)

__all__ = [
    # Store
    "state_file_path",
    "write_state_file",
    "read_state_file",
    # Registry items
    "capture_registry_state",
    "replay_registry_state",
    "CapturedRegistryState",
    # File items
    "capture_file_state",
    "replay_file_state",
    "CapturedFileState",
]
