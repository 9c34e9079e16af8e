# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
Real registry operations on top of the winreg standard library module.

winreg only exists on Windows, so it is imported lazily inside each
operation. Constructing a WinRegistry elsewhere is allowed; using it raises
RegistryAccessError.
"""

from typing import Any, Dict, Tuple

import structlog

from wmr.config import Scalar
from wmr.exceptions import RegistryAccessError
from wmr.ops.registry import RegistryAccessor, split_key_path

logger = structlog.get_logger()

_DWORD_MAX = 0xFFFFFFFF
_QWORD_MASK = 0xFFFFFFFFFFFFFFFF


def _winreg() -> Any:
    try:
        import winreg
    except ImportError as e:
        raise RegistryAccessError(
            "The Windows registry is not available on this platform",
            details={"error": str(e)},
        )
    return winreg


def _to_registry(winreg: Any, value: Scalar) -> Tuple[int, Any]:
    """Pick the registry type for a Python scalar."""
    # bool first: bool is a subclass of int
    if isinstance(value, bool):
        return winreg.REG_DWORD, int(value)
    if isinstance(value, int):
        if 0 <= value <= _DWORD_MAX:
            return winreg.REG_DWORD, value
        return winreg.REG_QWORD, value & _QWORD_MASK
    if isinstance(value, list):
        return winreg.REG_MULTI_SZ, [str(v) for v in value]
    return winreg.REG_SZ, str(value)


def _is_storable(data: Any) -> bool:
    if isinstance(data, (str, int)):
        return True
    return isinstance(data, list) and all(isinstance(v, str) for v in data)


class WinRegistry(RegistryAccessor):
    """
    Registry operations via winreg.

    Binary values (REG_BINARY, REG_NONE) have no JSON scalar form and are
    skipped when enumerating a key.
    """

    def __init__(self, wow64_32: bool = False) -> None:
        self._wow64_32 = wow64_32

    def _access(self, winreg: Any, write: bool = False) -> int:
        access = winreg.KEY_READ | (winreg.KEY_SET_VALUE if write else 0)
        if self._wow64_32:
            access |= winreg.KEY_WOW64_32KEY
        return access

    def _open(self, winreg: Any, path: str) -> Any:
        hive, subkey = split_key_path(path)
        return winreg.OpenKey(getattr(winreg, hive), subkey, 0, self._access(winreg))

    def key_exists(self, path: str) -> bool:
        winreg = _winreg()
        try:
            with self._open(winreg, path):
                return True
        except OSError:
            return False

    def value_exists(self, path: str, name: str) -> bool:
        winreg = _winreg()
        try:
            with self._open(winreg, path) as key:
                winreg.QueryValueEx(key, name)
                return True
        except OSError:
            return False

    def get_value(self, path: str, name: str) -> Scalar:
        winreg = _winreg()
        try:
            with self._open(winreg, path) as key:
                data, _reg_type = winreg.QueryValueEx(key, name)
        except OSError as e:
            raise RegistryAccessError(
                f"Failed to read registry value: {e}",
                details={"path": path, "name": name},
            )
        return data

    def set_value(self, path: str, name: str, value: Scalar) -> None:
        winreg = _winreg()
        hive, subkey = split_key_path(path)
        reg_type, data = _to_registry(winreg, value)

        try:
            with winreg.CreateKeyEx(
                getattr(winreg, hive), subkey, 0, self._access(winreg, write=True)
            ) as key:
                winreg.SetValueEx(key, name, 0, reg_type, data)
        except OSError as e:
            raise RegistryAccessError(
                f"Failed to write registry value: {e}",
                details={"path": path, "name": name},
            )

    def list_values(self, path: str) -> Dict[str, Scalar]:
        winreg = _winreg()
        values: Dict[str, Scalar] = {}

        try:
            with self._open(winreg, path) as key:
                i = 0
                while True:
                    try:
                        name, data, reg_type = winreg.EnumValue(key, i)
                    except OSError:
                        break
                    i += 1

                    if not _is_storable(data):
                        logger.warning(
                            "registry_value_skipped",
                            path=path,
                            name=name,
                            reg_type=reg_type,
                        )
                        continue
                    values[name] = data
        except OSError as e:
            raise RegistryAccessError(
                f"Failed to enumerate registry key: {e}",
                details={"path": path},
            )

        return values
