"""Exception hierarchy for the tablecast package."""


class TableCastError(Exception):
    """Base exception for all tablecast errors."""

    def __init__(self, message: str, context: dict | None = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} ({context_str})"
        return self.message


class CastError(TableCastError):
    """Raised when a raw cell cannot be interpreted as its field's type."""

    pass


class SchemaError(TableCastError):
    """Raised when a schema document or field definition is invalid."""

    pass


class StructuralError(TableCastError):
    """Raised when row or header columns do not line up."""

    pass


class SecurityError(TableCastError):
    """Raised when a path would resolve outside the working root."""

    pass


class ConnectorError(TableCastError):
    """Raised when reading or writing the underlying storage fails."""

    pass


class ValidationError(TableCastError):
    """Raised by fail-fast helpers when a row does not validate."""

    def __init__(self, message: str, context: dict | None = None, issues=None):
        super().__init__(message, context)
        self.issues = list(issues or [])
