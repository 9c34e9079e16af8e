# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Registry access interface.

The state engines never touch the Windows registry directly. They receive
a RegistryAccessor, so the real winreg-backed implementation can be swapped
for an in-memory fake in tests.
"""

from abc import ABC, abstractmethod
from typing import Dict, Tuple

from wmr.config import Scalar
from wmr.exceptions import RegistryAccessError

# Hive aliases accepted in templates, mapped to their canonical names
HIVE_ALIASES: Dict[str, str] = {
    "HKCU": "HKEY_CURRENT_USER",
    "HKEY_CURRENT_USER": "HKEY_CURRENT_USER",
    "HKLM": "HKEY_LOCAL_MACHINE",
    "HKEY_LOCAL_MACHINE": "HKEY_LOCAL_MACHINE",
    "HKCR": "HKEY_CLASSES_ROOT",
    "HKEY_CLASSES_ROOT": "HKEY_CLASSES_ROOT",
    "HKU": "HKEY_USERS",
    "HKEY_USERS": "HKEY_USERS",
    "HKCC": "HKEY_CURRENT_CONFIG",
    "HKEY_CURRENT_CONFIG": "HKEY_CURRENT_CONFIG",
}


def split_key_path(path: str) -> Tuple[str, str]:
    """
    Split a registry key path into its canonical hive and subkey.

    Accepts PowerShell drive syntax (HKCU:\\Software), full hive names
    (HKEY_CURRENT_USER\\Software) and forward slashes.

    Args:
        path: Registry key path

    Returns:
        Tuple of (hive name, subkey path with backslash separators)

    Raises:
        RegistryAccessError: If the hive is not recognized
    """
    cleaned = path.strip().replace("/", "\\")
    head, _, rest = cleaned.partition("\\")
    hive = HIVE_ALIASES.get(head.rstrip(":").upper())

    if hive is None:
        raise RegistryAccessError(
            f"Unknown registry hive in path: {path}",
            details={"path": path},
        )

    subkey = "\\".join(part for part in rest.split("\\") if part)
    return hive, subkey


def normalize_key_path(path: str) -> str:
    """Return the canonical HIVE\\subkey form of a registry key path."""
    hive, subkey = split_key_path(path)
    return f"{hive}\\{subkey}" if subkey else hive


class RegistryAccessor(ABC):
    """
    Abstract interface for registry operations.

    Values are plain Python scalars: str, int, bool, or a list of str
    for multi-string values.
    """

    @abstractmethod
    def key_exists(self, path: str) -> bool:
        """Return True if the key at path exists."""
        ...

    @abstractmethod
    def value_exists(self, path: str, name: str) -> bool:
        """Return True if the key exists and holds a value called name."""
        ...

    @abstractmethod
    def get_value(self, path: str, name: str) -> Scalar:
        """
        Read one named value.

        Raises:
            RegistryAccessError: If the key or value does not exist
        """
        ...

    @abstractmethod
    def set_value(self, path: str, name: str, value: Scalar) -> None:
        """
        Write one named value, creating the key (and parents) if absent.

        Raises:
            RegistryAccessError: If the write fails
        """
        ...

    @abstractmethod
    def list_values(self, path: str) -> Dict[str, Scalar]:
        """
        Return every value directly under the key, without recursing into subkeys.

        Raises:
            RegistryAccessError: If the key does not exist
        """
        ...
