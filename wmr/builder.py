# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
WMR Builder - Turn template documents into typed descriptors.

Templates are YAML documents with a metadata block and the sections
handled here: prerequisites, registry and files. Each entry is a plain
mapping with snake_case keys; the builders below validate it and return
the matching frozen descriptor. Other sections (applications, stages,
cleanup, ...) are ignored.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple, Type, TypeVar

import structlog
import yaml

from wmr.config import (
    ApplicationPrerequisite,
    FileItemConfig,
    FileKind,
    ItemAction,
    ItemMode,
    OnMissing,
    Prerequisite,
    RegistryItemConfig,
    RegistryPrerequisite,
    ScriptPrerequisite,
)
from wmr.errors import explain_invalid_enum, explain_missing_field
from wmr.exceptions import ConfigurationError, TemplateError

logger = structlog.get_logger()

# Type alias for raw template entries
ConfigDict = Dict[str, Any]

E = TypeVar("E", bound=Enum)

HANDLED_SECTIONS = ("prerequisites", "registry", "files")


@dataclass(frozen=True)
class Template:
    """Descriptors parsed from one template document."""

    name: str
    description: str = ""
    prerequisites: Tuple[Prerequisite, ...] = field(default_factory=tuple)
    registry: Tuple[RegistryItemConfig, ...] = field(default_factory=tuple)
    files: Tuple[FileItemConfig, ...] = field(default_factory=tuple)


def _require(raw: ConfigDict, key: str, section: str, index: int) -> Any:
    value = raw.get(key)
    if value is None or value == "":
        raise TemplateError(
            explain_missing_field(section, index, key),
            details={"section": section, "index": index, "entry": raw.get("name")},
        )
    return value


def _enum(
    enum_cls: Type[E],
    raw: ConfigDict,
    key: str,
    default: E,
    section: str,
    index: int,
) -> E:
    value = raw.get(key)
    if value is None:
        return default
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        raise TemplateError(
            explain_invalid_enum(key, value, [m.value for m in enum_cls]),
            details={"section": section, "index": index, "entry": raw.get("name")},
        )


def _bool(raw: ConfigDict, key: str, section: str, index: int) -> bool:
    value = raw.get(key, False)
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.lower() in ("true", "false"):
        return value.lower() == "true"
    raise TemplateError(
        f"Field '{key}' must be true or false, got {value!r}",
        details={"section": section, "index": index, "entry": raw.get("name")},
    )


def _wrap_validation(error: ConfigurationError, section: str, index: int) -> TemplateError:
    return TemplateError(
        f"Entry {index} of '{section}' is invalid",
        details={"section": section, "index": index, **error.details},
    )


def build_prerequisite(raw: ConfigDict, index: int = 0) -> Prerequisite:
    """
    Build a prerequisite descriptor from a template entry.

    Args:
        raw: Template entry with a type of application, registry or script
        index: Position in the prerequisites section (for error messages)

    Returns:
        ApplicationPrerequisite, RegistryPrerequisite or ScriptPrerequisite
    """
    section = "prerequisites"
    kind = str(_require(raw, "type", section, index)).lower()
    name = _require(raw, "name", section, index)
    on_missing = _enum(OnMissing, raw, "on_missing", OnMissing.WARN, section, index)

    try:
        if kind == "application":
            return ApplicationPrerequisite(
                name=name,
                check_command=_require(raw, "check_command", section, index),
                expected_output=_require(raw, "expected_output", section, index),
                on_missing=on_missing,
            )
        if kind == "registry":
            return RegistryPrerequisite(
                name=name,
                path=_require(raw, "path", section, index),
                key_name=raw.get("key_name"),
                expected_value=raw.get("expected_value"),
                on_missing=on_missing,
            )
        if kind == "script":
            return ScriptPrerequisite(
                name=name,
                expected_output=raw.get("expected_output"),
                inline_script=raw.get("inline_script"),
                path=raw.get("path"),
                on_missing=on_missing,
            )
    except ConfigurationError as e:
        raise _wrap_validation(e, section, index)

    raise TemplateError(
        explain_invalid_enum("type", kind, ["application", "registry", "script"]),
        details={"section": section, "index": index, "entry": name},
    )


def build_registry_item(raw: ConfigDict, index: int = 0) -> RegistryItemConfig:
    """
    Build a registry item descriptor from a template entry.

    When the entry has no type, the mode is VALUE if key_name is present
    and KEY otherwise.

    Args:
        raw: Template entry
        index: Position in the registry section (for error messages)

    Returns:
        RegistryItemConfig
    """
    section = "registry"
    inferred = ItemMode.VALUE if raw.get("key_name") else ItemMode.KEY

    try:
        return RegistryItemConfig(
            name=_require(raw, "name", section, index),
            path=_require(raw, "path", section, index),
            dynamic_state_path=_require(raw, "dynamic_state_path", section, index),
            mode=_enum(ItemMode, raw, "type", inferred, section, index),
            key_name=raw.get("key_name"),
            action=_enum(ItemAction, raw, "action", ItemAction.SYNC, section, index),
            encrypt=_bool(raw, "encrypt", section, index),
            value_data=raw.get("value_data"),
        )
    except ConfigurationError as e:
        raise _wrap_validation(e, section, index)


def build_file_item(raw: ConfigDict, index: int = 0) -> FileItemConfig:
    """
    Build a file item descriptor from a template entry.

    Args:
        raw: Template entry with type file (default) or directory
        index: Position in the files section (for error messages)

    Returns:
        FileItemConfig
    """
    section = "files"

    try:
        return FileItemConfig(
            name=_require(raw, "name", section, index),
            path=_require(raw, "path", section, index),
            dynamic_state_path=_require(raw, "dynamic_state_path", section, index),
            kind=_enum(FileKind, raw, "type", FileKind.FILE, section, index),
            action=_enum(ItemAction, raw, "action", ItemAction.SYNC, section, index),
            encrypt=_bool(raw, "encrypt", section, index),
        )
    except ConfigurationError as e:
        raise _wrap_validation(e, section, index)


def _entries(document: Mapping[str, Any], section: str) -> List[ConfigDict]:
    entries = document.get(section) or []
    if not isinstance(entries, list):
        raise TemplateError(
            f"Section '{section}' must be a list",
            details={"section": section},
        )
    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise TemplateError(
                f"Entry {index} of '{section}' must be a mapping",
                details={"section": section, "index": index},
            )
    return entries


def build_template(document: Mapping[str, Any], default_name: str = "template") -> Template:
    """
    Build a Template from a parsed template document.

    Args:
        document: Mapping as produced by yaml.safe_load()
        default_name: Name used when the document has no metadata.name

    Returns:
        Template with every prerequisite, registry and file descriptor
    """
    if not isinstance(document, Mapping):
        raise TemplateError("Template document must be a mapping")

    metadata = document.get("metadata") or {}
    ignored = [key for key in document if key not in HANDLED_SECTIONS and key != "metadata"]
    if ignored:
        logger.debug("template_sections_ignored", sections=ignored)

    return Template(
        name=metadata.get("name") or default_name,
        description=metadata.get("description") or "",
        prerequisites=tuple(
            build_prerequisite(raw, i)
            for i, raw in enumerate(_entries(document, "prerequisites"))
        ),
        registry=tuple(
            build_registry_item(raw, i)
            for i, raw in enumerate(_entries(document, "registry"))
        ),
        files=tuple(
            build_file_item(raw, i)
            for i, raw in enumerate(_entries(document, "files"))
        ),
    )


def load_template(path: Path) -> Template:
    """
    Load and build a template from a YAML file.

    Args:
        path: Template file

    Returns:
        Template

    Raises:
        TemplateError: If the file cannot be read, parsed or validated
    """
    try:
        document = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise TemplateError(
            f"Failed to load template: {e}",
            details={"path": str(path)},
        )

    template = build_template(document or {}, default_name=Path(path).stem)
    logger.info(
        "template_loaded",
        path=str(path),
        name=template.name,
        prerequisites=len(template.prerequisites),
        registry_items=len(template.registry),
        file_items=len(template.files),
    )
    return template
