# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
State Store and Path Tests.
"""

from pathlib import Path

import pytest
from structlog.testing import capture_logs

from wmr.exceptions import StateFileError
from wmr.paths import expand_path, resolve_backup_path
from wmr.state.store import read_state_file, state_file_path, write_state_file


# ============================================================================
# State file locations
# ============================================================================

def test_state_file_path_joins_relative_path(state_root: Path):
    assert state_file_path(state_root, "registry/a.json") == state_root / "registry" / "a.json"


def test_state_file_path_accepts_windows_separators(state_root: Path):
    assert state_file_path(state_root, r"registry\a.json") == state_root / "registry" / "a.json"


@pytest.mark.parametrize(
    "relative",
    ["", ".", "./", "/etc/passwd", r"C:\Windows\a.json", "../outside.json", r"registry\..\..\x.json"],
)
def test_state_file_path_rejects_escaping_paths(state_root: Path, relative: str):
    with pytest.raises(StateFileError):
        state_file_path(state_root, relative)


# ============================================================================
# Reading and writing
# ============================================================================

def test_write_creates_parent_directories(state_root: Path):
    target = state_root / "deep" / "nested" / "state.json"

    write_state_file(target, {"Name": "x", "Values": {"ü": 1}})

    assert read_state_file(target) == {"Name": "x", "Values": {"ü": 1}}


def test_write_rejects_unserializable_record(state_root: Path):
    with pytest.raises(StateFileError):
        write_state_file(state_root / "bad.json", {"Value": b"bytes"})


def test_read_missing_file_returns_none(state_root: Path):
    assert read_state_file(state_root / "absent.json") is None


def test_read_invalid_json_returns_none_with_warning(state_root: Path):
    target = state_root / "broken.json"
    target.parent.mkdir(parents=True)
    target.write_text("{not json", encoding="utf-8")

    with capture_logs() as logs:
        assert read_state_file(target) is None

    assert [log["event"] for log in logs] == ["state_file_unreadable"]


def test_read_non_object_returns_none(state_root: Path):
    target = state_root / "list.json"
    target.parent.mkdir(parents=True)
    target.write_text("[1, 2]", encoding="utf-8")

    assert read_state_file(target) is None


# ============================================================================
# Backup path priority
# ============================================================================

def test_machine_specific_path_wins(temp_dir: Path):
    machine = temp_dir / "machine"
    shared = temp_dir / "shared"
    (machine / "System" / "keyboard").mkdir(parents=True)
    (shared / "System" / "keyboard").mkdir(parents=True)

    assert resolve_backup_path("System/keyboard", machine, shared) == machine / "System" / "keyboard"


def test_shared_path_used_when_machine_path_missing(temp_dir: Path):
    machine = temp_dir / "machine"
    shared = temp_dir / "shared"
    (shared / "System" / "keyboard").mkdir(parents=True)

    assert resolve_backup_path("System/keyboard", machine, shared) == shared / "System" / "keyboard"


def test_no_backup_path_returns_none(temp_dir: Path):
    with capture_logs() as logs:
        result = resolve_backup_path("System/keyboard", temp_dir / "m", temp_dir / "s")

    assert result is None
    assert logs[-1]["event"] == "backup_path_missing"


# ============================================================================
# Path expansion
# ============================================================================

def test_expand_powershell_and_cmd_references(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("WMR_APPDATA", "/data/appdata")

    assert expand_path("$env:WMR_APPDATA/WinSCP") == Path("/data/appdata/WinSCP")
    assert expand_path("%WMR_APPDATA%/WinSCP") == Path("/data/appdata/WinSCP")


def test_unknown_reference_is_left_in_place(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv("WMR_UNSET_VARIABLE", raising=False)

    assert expand_path("%WMR_UNSET_VARIABLE%/x") == Path("%WMR_UNSET_VARIABLE%/x")
