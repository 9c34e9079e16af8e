# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
WMR Configuration - Immutable configuration and descriptor types.

All configuration and item descriptors are frozen (immutable) after
creation so that one descriptor can be captured and replayed many times
without accidental modification.
"""

import re
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import List, Tuple, Union

from wmr.errors import explain_invalid_state_path


class Operation(str, Enum):
    """Operation gated by prerequisites and run by the orchestrator."""

    BACKUP = "Backup"
    RESTORE = "Restore"


class OnMissing(str, Enum):
    """Policy applied when a prerequisite check does not pass."""

    WARN = "warn"  # Log and continue
    FAIL_BACKUP = "fail_backup"  # Abort Backup operations only
    FAIL_RESTORE = "fail_restore"  # Abort Restore operations only

    def aborts(self, operation: Operation) -> bool:
        """Return True if this policy stops the given operation."""
        if self is OnMissing.FAIL_BACKUP:
            return operation is Operation.BACKUP
        if self is OnMissing.FAIL_RESTORE:
            return operation is Operation.RESTORE
        return False


class ItemAction(str, Enum):
    """Direction an item descriptor is declared for."""

    BACKUP = "backup"
    RESTORE = "restore"
    SYNC = "sync"  # Both directions

    def applies_to(self, operation: Operation) -> bool:
        """Return True if items with this action take part in the operation."""
        if self is ItemAction.SYNC:
            return True
        if self is ItemAction.BACKUP:
            return operation is Operation.BACKUP
        return operation is Operation.RESTORE


class ItemMode(str, Enum):
    """Registry item mode: a single named value or every value under a key."""

    VALUE = "value"
    KEY = "key"


class FileKind(str, Enum):
    """File item kind."""

    FILE = "file"
    DIRECTORY = "directory"


# Registry data that can round-trip through a JSON state file
Scalar = Union[str, int, bool, List[str]]


def _validate_state_path(relative: str) -> bool:
    """
    Validate a dynamic_state_path.

    Rules:
    - Non-empty, and not the root itself (".")
    - Relative on both POSIX and Windows
    - No '..' components
    """
    if not relative or not isinstance(relative, str):
        return False

    for flavour in (PurePosixPath, PureWindowsPath):
        candidate = flavour(relative)
        if candidate.is_absolute() or candidate.anchor:
            return False
        if not candidate.parts or ".." in candidate.parts:
            return False

    return True


def _validate_pattern(pattern: str) -> bool:
    """Validate that a regular expression compiles."""
    try:
        re.compile(pattern)
    except (re.error, TypeError):
        return False
    return True


def _raise_if_errors(errors: List[str], what: str) -> None:
    if errors:
        from wmr.exceptions import ConfigurationError

        raise ConfigurationError(
            f"{what} validation failed",
            details={"errors": errors},
        )


@dataclass(frozen=True)
class RegistryItemConfig:
    """
    Declarative descriptor for one registry value or key.

    The mode is explicit: VALUE items name a single value via key_name,
    KEY items cover every value directly under path.
    """

    # Display identifier
    name: str

    # Fully-qualified key path, e.g. HKCU:\Software\Vendor
    path: str

    # Relative location of the state file under the state-files root
    dynamic_state_path: str

    mode: ItemMode = ItemMode.KEY

    # Value name (VALUE mode only)
    key_name: str | None = None

    action: ItemAction = ItemAction.SYNC

    # Pass captured values through the encoder before storing them
    encrypt: bool = False

    # Default written on restore when no state file exists (VALUE mode only)
    value_data: Scalar | None = None

    def __post_init__(self) -> None:
        """Validate the descriptor after creation."""
        errors: List[str] = []

        if not self.name:
            errors.append("name must be a non-empty string")

        if not self.path:
            errors.append(f"path is required for item {self.name!r}")

        if not _validate_state_path(self.dynamic_state_path):
            errors.append(explain_invalid_state_path(self.dynamic_state_path))

        if self.mode is ItemMode.VALUE and not self.key_name:
            errors.append(f"key_name is required for value item {self.name!r}")

        if self.mode is ItemMode.KEY and self.value_data is not None:
            errors.append(f"value_data is only allowed on value items, not {self.name!r}")

        _raise_if_errors(errors, "Registry item")


@dataclass(frozen=True)
class FileItemConfig:
    """Declarative descriptor for one file or directory."""

    name: str

    # Source path; may contain $env:NAME, %NAME% or ~ references
    path: str

    dynamic_state_path: str

    kind: FileKind = FileKind.FILE

    action: ItemAction = ItemAction.SYNC

    encrypt: bool = False

    def __post_init__(self) -> None:
        errors: List[str] = []

        if not self.name:
            errors.append("name must be a non-empty string")
        if not self.path:
            errors.append(f"path is required for file item {self.name!r}")
        if not _validate_state_path(self.dynamic_state_path):
            errors.append(explain_invalid_state_path(self.dynamic_state_path))

        _raise_if_errors(errors, "File item")


# ============================================================================
# Prerequisite descriptors
# ============================================================================

@dataclass(frozen=True)
class ApplicationPrerequisite:
    """Run a command and search its output for a pattern."""

    name: str
    check_command: str
    expected_output: str
    on_missing: OnMissing = OnMissing.WARN

    def __post_init__(self) -> None:
        errors: List[str] = []
        if not self.name:
            errors.append("name must be a non-empty string")
        if not self.check_command:
            errors.append(f"check_command is required for {self.name!r}")
        if not _validate_pattern(self.expected_output):
            errors.append(f"Invalid expected_output pattern: {self.expected_output!r}")
        _raise_if_errors(errors, "Application prerequisite")


@dataclass(frozen=True)
class RegistryPrerequisite:
    """Require a registry key, optionally a value and its text."""

    name: str
    path: str
    key_name: str | None = None
    expected_value: Scalar | None = None
    on_missing: OnMissing = OnMissing.WARN

    def __post_init__(self) -> None:
        errors: List[str] = []
        if not self.name:
            errors.append("name must be a non-empty string")
        if not self.path:
            errors.append(f"path is required for {self.name!r}")
        if self.expected_value is not None and not self.key_name:
            errors.append(f"expected_value requires key_name for {self.name!r}")
        _raise_if_errors(errors, "Registry prerequisite")


@dataclass(frozen=True)
class ScriptPrerequisite:
    """
    Run a script and search its output for a pattern.

    When both path and inline_script are set, the script file at path is run.
    Without expected_output the check passes on exit code 0.
    """

    name: str
    expected_output: str | None = None
    inline_script: str | None = None
    path: str | None = None
    on_missing: OnMissing = OnMissing.WARN

    def __post_init__(self) -> None:
        errors: List[str] = []
        if not self.name:
            errors.append("name must be a non-empty string")
        if not self.inline_script and not self.path:
            errors.append(f"inline_script or path is required for {self.name!r}")
        if self.expected_output is not None and not _validate_pattern(self.expected_output):
            errors.append(f"Invalid expected_output pattern: {self.expected_output!r}")
        _raise_if_errors(errors, "Script prerequisite")


Prerequisite = Union[ApplicationPrerequisite, RegistryPrerequisite, ScriptPrerequisite]


# ============================================================================
# Engine configuration
# ============================================================================

def default_shell() -> Tuple[str, ...]:
    if sys.platform == "win32":
        return ("powershell.exe", "-NoProfile", "-NonInteractive", "-Command")
    return ("/bin/sh", "-c")


def default_script_shell() -> Tuple[str, ...]:
    if sys.platform == "win32":
        return (
            "powershell.exe",
            "-NoProfile",
            "-NonInteractive",
            "-ExecutionPolicy",
            "Bypass",
            "-File",
        )
    return ("/bin/sh",)


@dataclass(frozen=True)
class WMRConfig:
    """
    Immutable configuration for backup and restore runs.

    Frozen after creation so that one config can be shared by every
    item processed in an operation.
    """

    # Required: machine-specific backup directory
    machine_backup_path: Path

    # Backup directory shared between machines (consulted on restore)
    shared_backup_path: Path | None = None

    # Fernet key file; created on first use
    encryption_key_path: Path | None = None

    # Passphrase used to derive a key when no key file is configured
    encryption_passphrase: str | None = None

    # argv prefix used to run check commands and inline scripts
    shell: Tuple[str, ...] = field(default_factory=default_shell)

    # argv prefix used to run script files
    script_shell: Tuple[str, ...] = field(default_factory=default_script_shell)

    def __post_init__(self) -> None:
        """Validate configuration after creation."""
        errors: List[str] = []

        if not self.machine_backup_path:
            errors.append("machine_backup_path is required")

        if (
            self.shared_backup_path is not None
            and Path(self.shared_backup_path) == Path(self.machine_backup_path)
        ):
            errors.append("shared_backup_path must differ from machine_backup_path")

        if self.encryption_passphrase is not None and not self.encryption_passphrase:
            errors.append("encryption_passphrase must not be empty when set")

        if not self.shell:
            errors.append("shell must contain at least the program to run")

        if not self.script_shell:
            errors.append("script_shell must contain at least the program to run")

        _raise_if_errors(errors, "Configuration")

    @property
    def encryption_enabled(self) -> bool:
        """True if an encoder can be built from this configuration."""
        return self.encryption_key_path is not None or bool(self.encryption_passphrase)

    def with_updates(self, **kwargs) -> "WMRConfig":
        """
        Create a new config with updated values.

        Since the config is frozen, this creates a new instance.
        """
        from dataclasses import asdict

        current = asdict(self)
        current.update(kwargs)
        return WMRConfig(**current)
