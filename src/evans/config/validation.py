"""Decode-time type checking for Evans configuration files.

Values are only checked for the shape the schema declares; their
contents are not validated.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

from .errors import ConfigDecodeError
from .schema import KIND_BOOL, KIND_HEADERS, KIND_STR, KIND_STR_LIST, SCHEMA


@dataclass
class ValidationError:
    """Represents a configuration validation error."""

    key: str
    message: str
    value: Any = None

    def __str__(self) -> str:
        if self.value is not None:
            return f"{self.key}: {self.message} (got: {self.value!r})"
        return f"{self.key}: {self.message}"


@dataclass
class ValidationResult:
    """Result of configuration validation."""

    valid: bool
    errors: list[ValidationError]
    warnings: list[ValidationError]

    def __bool__(self) -> bool:
        return self.valid


class ConfigValidationError(ConfigDecodeError):
    """Raised when a decoded file does not match the schema.

    Attributes:
        errors: List of ValidationError objects describing what failed
        warnings: List of ValidationError objects for non-fatal issues
    """

    def __init__(
        self,
        message: str,
        errors: list[ValidationError],
        warnings: Optional[list[ValidationError]] = None,
        path: Optional[Union[str, Path]] = None,
    ) -> None:
        super().__init__(message, path)
        self.errors = errors
        self.warnings = warnings or []

    def __str__(self) -> str:
        lines = [super().__str__()]
        if self.errors:
            lines.append("Errors:")
            for error in self.errors:
                lines.append(f"  - {error}")
        if self.warnings:
            lines.append("Warnings:")
            for warning in self.warnings:
                lines.append(f"  - {warning}")
        return "\n".join(lines)


def _check_kind(key: str, kind: str, value: Any) -> Optional[ValidationError]:
    if kind == KIND_STR:
        if not isinstance(value, str):
            return ValidationError(key, "must be a string", value)
    elif kind == KIND_BOOL:
        if not isinstance(value, bool):
            return ValidationError(key, "must be a boolean", value)
    elif kind == KIND_STR_LIST:
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            return ValidationError(key, "must be a list of strings", value)
    elif kind == KIND_HEADERS:
        if not isinstance(value, list):
            return ValidationError(key, "must be an array of tables", value)
        for i, item in enumerate(value):
            if not isinstance(item, dict):
                return ValidationError(f"{key}[{i}]", "must be a table", item)
            for field_name in ("key", "val"):
                if field_name in item and not isinstance(item[field_name], str):
                    return ValidationError(
                        f"{key}[{i}].{field_name}", "must be a string", item[field_name]
                    )
    return None


def validate_data(data: dict[str, Any]) -> ValidationResult:
    """Check a decoded mapping against the configuration schema.

    Type mismatches are errors. Keys the schema does not know about are
    warnings, since they are ignored when the mapping is decoded.

    Args:
        data: Mapping decoded from a TOML file

    Returns:
        ValidationResult with errors and warnings
    """
    errors: list[ValidationError] = []
    warnings: list[ValidationError] = []

    for section, body in data.items():
        if section not in SCHEMA:
            warnings.append(ValidationError(section, "unknown section"))
            continue
        if not isinstance(body, dict):
            errors.append(ValidationError(section, "must be a table", body))
            continue

        fields = SCHEMA[section]
        for key, value in body.items():
            dotted = f"{section}.{key}"
            if key not in fields:
                warnings.append(ValidationError(dotted, "unknown key"))
                continue
            error = _check_kind(dotted, fields[key], value)
            if error is not None:
                errors.append(error)

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def ensure_valid(
    data: dict[str, Any], path: Optional[Union[str, Path]] = None
) -> ValidationResult:
    """Validate ``data`` and raise ConfigValidationError if it has errors."""
    result = validate_data(data)
    if not result.valid:
        raise ConfigValidationError(
            "configuration does not match schema",
            result.errors,
            result.warnings,
            path=path,
        )
    return result
