# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
In-memory registry for tests.

Key paths are normalized the same way the real implementation parses
them, so HKCU:\\Software\\X and HKEY_CURRENT_USER/Software/X address the
same key. Key lookups are case-insensitive, like the Windows registry.
"""

import copy
from typing import Dict

from wmr.config import Scalar
from wmr.exceptions import RegistryAccessError
from wmr.ops.registry import RegistryAccessor, normalize_key_path


class FakeRegistry(RegistryAccessor):
    """
    Registry operations against a dict of key path -> values.

    Example:
        registry = FakeRegistry({"HKCU:/Software/Test": {"Value": "data"}})
        registry.get_value("HKCU:/Software/Test", "Value")
    """

    def __init__(self, keys: Dict[str, Dict[str, Scalar]] | None = None) -> None:
        self._keys: Dict[str, Dict[str, Scalar]] = {}
        self.writes: list[tuple[str, str, Scalar]] = []
        for path, values in (keys or {}).items():
            self._keys[self._norm(path)] = copy.deepcopy(values)

    @staticmethod
    def _norm(path: str) -> str:
        return normalize_key_path(path).lower()

    def key_exists(self, path: str) -> bool:
        return self._norm(path) in self._keys

    def value_exists(self, path: str, name: str) -> bool:
        return name in self._keys.get(self._norm(path), {})

    def get_value(self, path: str, name: str) -> Scalar:
        values = self._keys.get(self._norm(path))
        if values is None or name not in values:
            raise RegistryAccessError(
                "Registry value not found",
                details={"path": path, "name": name},
            )
        return copy.deepcopy(values[name])

    def set_value(self, path: str, name: str, value: Scalar) -> None:
        self._keys.setdefault(self._norm(path), {})[name] = copy.deepcopy(value)
        self.writes.append((path, name, value))

    def list_values(self, path: str) -> Dict[str, Scalar]:
        values = self._keys.get(self._norm(path))
        if values is None:
            raise RegistryAccessError(
                "Registry key not found",
                details={"path": path},
            )
        return copy.deepcopy(values)

    def create_key(self, path: str) -> None:
        """Create an empty key (test setup helper)."""
        self._keys.setdefault(self._norm(path), {})
