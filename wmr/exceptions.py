# SPDX-License-Identifier: LGPL-2.1-only
# Copyright (c) 2026 Akshat Kotpalliwar (alias IntegerAlex)

"""
WMR Exceptions - Custom exceptions for the wmr package.
"""


class WMRError(Exception):
    """Base exception for all WMR errors."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(WMRError):
    """Raised when configuration is invalid."""

    pass


class TemplateError(WMRError):
    """Raised when a template document cannot be turned into descriptors."""

    pass


class StateFileError(WMRError):
    """Raised when a state file location is invalid or cannot be written."""

    pass


class EncodingError(WMRError):
    """Raised when protecting or unprotecting state data fails."""

    pass


class RegistryAccessError(WMRError):
    """Raised when the registry cannot be read or written."""

    pass


class PrerequisiteError(WMRError):
    """
    Raised when a prerequisite with a hard policy fails for the running operation.

    The string form is always the bare message so callers can show it as-is.
    """

    def __str__(self) -> str:
        return self.message
