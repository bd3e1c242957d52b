"""
Custom exception classes for form model errors.

This module provides specialized exception classes for the failures the
form model reports to callers: unresolvable paths, invalid array
operations, unsupported schema nodes and loader failures.
"""

from typing import Optional, Dict, Any, List
from pathlib import Path


class FormModelError(Exception):
    """
    Base exception for form model errors.

    Attributes:
        message: Error message
        code: Stable machine-readable error code
        path: Field path the error refers to, if any
        context: Additional context information
        recovery_suggestions: List of suggested recovery actions
    """

    code = "FORM_MODEL_ERROR"

    def __init__(self, message: str, path: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None,
                 recovery_suggestions: Optional[List[str]] = None):
        self.message = message
        self.path = path
        self.context = context or {}
        self.recovery_suggestions = recovery_suggestions or []
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    def get_full_details(self) -> Dict[str, Any]:
        """Get complete error details including context and suggestions."""
        return {
            'error_type': self.__class__.__name__,
            'code': self.code,
            'message': self.message,
            'path': self.path,
            'context': self.context,
            'recovery_suggestions': self.recovery_suggestions
        }


class FieldNotFoundError(FormModelError):
    """
    Exception raised when a path cannot be resolved or materialized.
    """

    code = "FIELD_NOT_FOUND"

    def __init__(self, path: str, message: Optional[str] = None):
        if message is None:
            message = f"Field not found: {path}"

        recovery_suggestions = [
            "Check the path against the schema's declared properties",
            "Array indices must be numeric path segments such as 'items.0'"
        ]

        super().__init__(message, path, {'path': path}, recovery_suggestions)


class ArrayOperationError(FormModelError):
    """
    Exception raised when a structural array operation is invalid.

    This includes targeting a non-array field and out-of-range indices.
    """

    code = "ARRAY_OPERATION_ERROR"

    def __init__(self, path: str, operation: str, reason: str,
                 message: Optional[str] = None):
        self.operation = operation
        self.reason = reason

        if message is None:
            message = f"Array {operation} failed for '{path}': {reason}"

        context = {
            'path': path,
            'operation': operation,
            'reason': reason
        }

        super().__init__(message, path, context)


class UnsupportedSchemaError(FormModelError):
    """
    Exception raised when no field creator can handle a schema node.
    """

    code = "UNSUPPORTED_SCHEMA"

    def __init__(self, path: str, schema: Any, message: Optional[str] = None):
        schema_type = schema.get('type') if isinstance(schema, dict) else None

        if message is None:
            message = f"No field creator found for schema type: {schema_type}"

        context = {
            'path': path,
            'schema_type': schema_type
        }

        recovery_suggestions = [
            "Objects need 'properties', arrays need 'items'",
            "Supported primitive types: string, number, integer, boolean"
        ]

        super().__init__(message, path, context, recovery_suggestions)


class SchemaLoadError(FormModelError):
    """
    Exception raised when a schema file cannot be read or is structurally invalid.
    """

    code = "SCHEMA_LOAD_ERROR"

    def __init__(self, schema_path: Path, reason: str, message: Optional[str] = None):
        self.schema_path = schema_path
        self.reason = reason

        if message is None:
            message = f"Failed to load schema from {schema_path}: {reason}"

        context = {
            'schema_path': str(schema_path),
            'reason': reason
        }

        recovery_suggestions = [
            "Check that the schema file exists and is readable",
            "Verify YAML or JSON syntax is correct",
            "Ensure every field declares a supported 'type'"
        ]

        super().__init__(message, None, context, recovery_suggestions)


class ConfigurationLoadError(FormModelError):
    """
    Exception raised when configuration file loading fails.

    This includes YAML parsing errors, file not found, permission issues, etc.
    """

    code = "CONFIG_LOAD_ERROR"

    def __init__(self, config_path: Path, original_error: Exception,
                 message: Optional[str] = None):
        self.config_path = config_path
        self.original_error = original_error

        if message is None:
            message = f"Failed to load configuration from {config_path}: {str(original_error)}"

        context = {
            'config_path': str(config_path),
            'original_error_type': type(original_error).__name__,
            'original_error_message': str(original_error)
        }

        recovery_suggestions = [
            "Check if the configuration file exists and is readable",
            "Verify YAML syntax is correct",
            "Default configuration is used as fallback"
        ]

        super().__init__(message, None, context, recovery_suggestions)
