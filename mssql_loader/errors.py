"""Error types for the SQL Server schema loader."""

from typing import Optional, Dict, Any


class LoaderError(Exception):
    """Base exception for loader errors."""

    def __init__(self, message: str, code: str = "LOADER_ERROR", details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to a dictionary for structured output."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class ConfigurationInvalid(LoaderError):
    """Missing or malformed connection configuration. Never retried."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CONFIGURATION_INVALID", details=details)


class InvalidAddress(ConfigurationInvalid):
    """Server address or user identity could not be parsed."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details=details)
        self.code = "INVALID_ADDRESS"


class ConnectivityFailed(LoaderError):
    """The connectivity check run by ``prepare`` failed."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CONNECTIVITY_FAILED", details=details)


class ConnectionUnavailable(LoaderError):
    """No pooled connection could be handed out."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="CONNECTION_UNAVAILABLE", details=details)


class QueryFailed(LoaderError):
    """A catalog metadata query failed."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="QUERY_FAILED", details=details)


class UnsupportedType(LoaderError):
    """A column's SQL type has no canonical property type."""

    def __init__(self, model_name: Optional[str], column_name: str, data_type: str):
        where = f"{model_name}.{column_name}" if model_name else column_name
        super().__init__(
            f"Unsupported data type {data_type} for {where}",
            code="UNSUPPORTED_TYPE",
            details={"model": model_name, "column": column_name, "data_type": data_type},
        )
        self.model_name = model_name
        self.column_name = column_name
        self.data_type = data_type


class ModelNotIntrospected(LoaderError):
    """Details were requested for a model whose catalog data is not cached yet."""

    def __init__(self, model_name: str, required_call: str):
        super().__init__(
            f"Model {model_name} has not been introspected; call {required_call}() first",
            code="MODEL_NOT_INTROSPECTED",
            details={"model": model_name, "required_call": required_call},
        )


class PropertyNotFound(LoaderError):
    """The model is introspected but has no such column."""

    def __init__(self, model_name: str, property_name: str):
        super().__init__(
            f"Unable to find column definition for {model_name}.{property_name}",
            code="PROPERTY_NOT_FOUND",
            details={"model": model_name, "property": property_name},
        )


class ReferenceNotFound(LoaderError):
    """The model is introspected but has no such foreign key."""

    def __init__(self, model_name: str, reference_name: str):
        super().__init__(
            f"Unable to find reference {reference_name} on {model_name}",
            code="REFERENCE_NOT_FOUND",
            details={"model": model_name, "reference": reference_name},
        )


class SessionClosed(LoaderError):
    """A read was attempted without an open session."""

    def __init__(self, message: str = "Loader is not connected", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="SESSION_CLOSED", details=details)


class LoaderStateError(LoaderError):
    """A lifecycle call was made in a state that does not allow it."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="INVALID_STATE", details=details)
