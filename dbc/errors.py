"""Error types for dbc."""

from typing import Optional, Dict, Any


class DbcError(Exception):
    """Base exception for dbc errors."""

    def __init__(self, message: str, code: str = "DBC_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for structured output."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationError(DbcError):
    """Invalid connections file or unknown connection identifier."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CONFIGURATION_ERROR", details=details)


class ConnectionError(DbcError):
    """Error connecting to a database (malformed URL, driver refused, ...)."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CONNECTION_ERROR", details=details)


class NoResultError(DbcError):
    """A query produced no result columns."""

    def __init__(self, statement: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            "No result found",
            code="NO_RESULT",
            details=details or {"statement": statement},
        )


class QueryExecutionError(DbcError):
    """The native driver rejected a statement."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="QUERY_EXECUTION_ERROR", details=details)


class ObjectNotFoundError(DbcError):
    """Catalog object not found."""

    def __init__(self, object_name: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            f"Object not found: {object_name}",
            code="OBJECT_NOT_FOUND",
            details=details or {"object_name": object_name},
        )


class UnsupportedOperationError(DbcError):
    """Operation not implemented for a backend."""

    def __init__(self, operation: str, backend: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            f"{operation} is not supported for {backend} connections",
            code="UNSUPPORTED_OPERATION",
            details=details or {"operation": operation, "backend": backend},
        )


class ExportError(DbcError):
    """Error writing an export (bad path, unsupported target)."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="EXPORT_ERROR", details=details)


class CommandError(DbcError):
    """Malformed meta-command typed at the prompt."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="COMMAND_ERROR", details=details)
