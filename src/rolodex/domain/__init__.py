"""Domain layer: entities, value objects and errors. No dependencies on outer layers."""

from rolodex.domain.entities import (
    NAME_MAX_LENGTH,
    Contact,
    ContactId,
    NewContact,
)
from rolodex.domain.errors import (
    AuthError,
    ConfigError,
    CredentialsFileError,
    ExternalValidationError,
    InvalidAuthHeader,
    InvalidBase64Value,
    InvalidPageError,
    InvalidScheme,
    InvalidUtf8Value,
    NotFoundError,
    ParsingError,
    RolodexError,
    StorageError,
)

__all__ = [
    "NAME_MAX_LENGTH",
    "AuthError",
    "ConfigError",
    "Contact",
    "ContactId",
    "CredentialsFileError",
    "ExternalValidationError",
    "InvalidAuthHeader",
    "InvalidBase64Value",
    "InvalidPageError",
    "InvalidScheme",
    "InvalidUtf8Value",
    "NewContact",
    "NotFoundError",
    "ParsingError",
    "RolodexError",
    "StorageError",
]
