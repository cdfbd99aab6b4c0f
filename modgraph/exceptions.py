"""
Custom exception hierarchy for modgraph.

This module defines structured exception types used across modgraph.
All exceptions inherit from :class:`ModGraphError` and support optional
structured metadata via the ``details`` attribute to improve diagnostics
and logging.

Only caller mistakes and unusable catalog data are raised. Malformed
version constraints, unresolvable identifiers and dependency cycles are
ordinary outcomes of resolution and never surface as exceptions.
"""

from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Optional

from modgraph.constants import VALIDATION_FAILED


class ModGraphError(Exception):
    """Base exception for all modgraph errors.

    Args:
        message: Human-readable error message.
        details: Optional structured metadata describing the error.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.message: str = message
        # Internally normalize to a mutable dict
        self.details: MutableMapping[str, Any] = dict(details) if details else {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        formatted = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({formatted})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, details={dict(self.details)!r})"
        )


def _add_if(details: MutableMapping[str, Any], key: str, value: Any) -> None:
    """Add a key to ``details`` only if ``value`` is not ``None``."""
    if value is not None:
        details[key] = value


def _truncate(text: str, max_length: int = 200) -> str:
    """Truncate long text for safe logging or error reporting."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


class ValidationError(ModGraphError):
    """Raised when caller input cannot be used at all.

    Covers a missing or blank parameter, a parameter with no parseable
    ``identifier:version`` pair, and an unknown or unpublished target
    platform version. Well-formed input that simply matches nothing is
    *not* a validation error.

    Args:
        message: Error description.
        parameter: Name of the offending input parameter.
        value: Raw value supplied for the parameter (truncated).
    """

    __slots__ = ("parameter", "value", "code")

    def __init__(
        self,
        message: str,
        *,
        parameter: Optional[str] = None,
        value: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "parameter", parameter)

        if value is not None:
            details["value"] = _truncate(value)

        super().__init__(message, details)

        self.parameter = parameter
        self.value = value
        self.code: str = VALIDATION_FAILED


class ConfigError(ModGraphError):
    """Raised when a configuration file is unreadable or invalid.

    Args:
        message: Error description.
        config_path: Path of the configuration file involved.
        option: Name of the offending option, if any.
    """

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", config_path)
        _add_if(details, "option", option)

        super().__init__(message, details)

        self.config_path = config_path
        self.option = option


class CatalogError(ModGraphError):
    """Raised when catalog data cannot be loaded or is structurally invalid.

    This is the request-level fatal error: nothing is resolved against a
    catalog that failed to load.

    Args:
        message: Error description.
        source: Where the catalog was loaded from.
        record: Offending record, if the failure is tied to one.
    """

    __slots__ = ("source", "record")

    def __init__(
        self,
        message: str,
        *,
        source: Optional[str] = None,
        record: Optional[Any] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "source", source)

        if record is not None:
            details["record"] = _truncate(repr(record))

        super().__init__(message, details)

        self.source = source
        self.record = record


class FileOperationError(ModGraphError):
    """Raised when file system operations fail.

    Args:
        message: Error description.
        file_path: Path to the file involved.
        operation: Operation being performed (read/validate).
        original_error: Original exception that triggered this error.
    """

    __slots__ = ("file_path", "operation", "original_error")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", file_path)
        _add_if(details, "operation", operation)
        _add_if(
            details,
            "original_error",
            str(original_error) if original_error else None,
        )

        super().__init__(message, details)

        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error
