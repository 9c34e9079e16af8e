# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
System Operation Tests.

Registry path parsing, the in-memory registry, and real process execution
(POSIX shell only).
"""

import sys
from pathlib import Path

import pytest

from wmr.exceptions import RegistryAccessError
from wmr.ops.registry import normalize_key_path, split_key_path
from wmr.ops.registry_fake import FakeRegistry
from wmr.ops.process_real import SubprocessRunner


# ============================================================================
# Registry paths
# ============================================================================

@pytest.mark.parametrize(
    "path,expected",
    [
        (r"HKCU:\Software\Vendor", ("HKEY_CURRENT_USER", r"Software\Vendor")),
        (r"HKEY_LOCAL_MACHINE\SOFTWARE\Lxss", ("HKEY_LOCAL_MACHINE", r"SOFTWARE\Lxss")),
        ("hklm:/SOFTWARE/Lxss/", ("HKEY_LOCAL_MACHINE", r"SOFTWARE\Lxss")),
        ("HKU:", ("HKEY_USERS", "")),
    ],
)
def test_split_key_path(path: str, expected):
    assert split_key_path(path) == expected


def test_unknown_hive_is_rejected():
    with pytest.raises(RegistryAccessError, match="Unknown registry hive"):
        split_key_path(r"HKXX:\Software")


def test_normalize_key_path():
    assert normalize_key_path(r"HKCU:\Keyboard Layout") == r"HKEY_CURRENT_USER\Keyboard Layout"


# ============================================================================
# FakeRegistry
# ============================================================================

def test_fake_registry_key_lookup_is_case_insensitive():
    registry = FakeRegistry({r"HKCU:\Software\Test": {"Value": "data"}})

    assert registry.key_exists(r"HKEY_CURRENT_USER\SOFTWARE\test")
    assert registry.get_value("hkcu:/software/TEST", "Value") == "data"


def test_fake_registry_returns_copies():
    registry = FakeRegistry({r"HKCU:\Software\Test": {"List": ["a"]}})

    registry.get_value(r"HKCU:\Software\Test", "List").append("b")

    assert registry.get_value(r"HKCU:\Software\Test", "List") == ["a"]


def test_fake_registry_missing_value_raises():
    registry = FakeRegistry()
    registry.create_key(r"HKCU:\Software\Test")

    with pytest.raises(RegistryAccessError):
        registry.get_value(r"HKCU:\Software\Test", "Absent")
    assert registry.list_values(r"HKCU:\Software\Test") == {}


# ============================================================================
# SubprocessRunner
# ============================================================================

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="uses /bin/sh")


@posix_only
def test_run_command_captures_output():
    result = SubprocessRunner().run_command("echo hello")

    assert result.succeeded
    assert result.output == "hello\n"


@posix_only
def test_stderr_is_folded_into_output():
    result = SubprocessRunner().run_command("echo out; echo err 1>&2")

    assert "out" in result.output
    assert "err" in result.output


@posix_only
def test_exit_code_is_reported():
    result = SubprocessRunner().run_script("exit 3")

    assert result.exit_code == 3
    assert not result.succeeded


@posix_only
def test_run_script_file(temp_dir: Path):
    script = temp_dir / "check.sh"
    script.write_text("echo from file\n", encoding="utf-8")

    result = SubprocessRunner().run_script_file(script)

    assert result.output.strip() == "from file"


def test_run_missing_script_file_raises(temp_dir: Path):
    with pytest.raises(FileNotFoundError):
        SubprocessRunner().run_script_file(temp_dir / "absent.ps1")
