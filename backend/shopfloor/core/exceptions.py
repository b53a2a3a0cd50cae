"""
Application exceptions.

Errors raised by the service layer. API routes translate them into
``{"message": ..., "errors": [...]}`` responses.
"""


class ShopfloorError(Exception):
    """Base class for all application errors."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors = list(errors or [])

    def to_dict(self) -> dict[str, str | list[str]]:
        """Convert error to dictionary for API responses."""
        body: dict[str, str | list[str]] = {"message": self.message}
        if self.errors:
            body["errors"] = self.errors
        return body


class ConfigurationError(ShopfloorError):
    """Raised at startup when required settings are missing or unsafe."""


class ValidationError(ShopfloorError):
    """Raised when input violates a business validation rule."""


class RegistrationError(ValidationError):
    """Raised when a user account cannot be created."""


class EntityNotFoundError(ShopfloorError):
    """Raised when a referenced entity does not exist (or is soft-deleted)."""

    def __init__(self, entity_type: str, entity_id: object) -> None:
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id {entity_id} not found")
