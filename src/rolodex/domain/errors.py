"""Error taxonomy shared by every layer. The HTTP layer maps each kind to a status code."""

from rolodex.domain.entities import ContactId


class RolodexError(Exception):
    """Base class for all errors raised by the contacts core."""


class ConfigError(RolodexError):
    """Raised when required configuration is missing or inconsistent."""


# --- pagination ---


class ParsingError(RolodexError):
    """A pagination query value is not a non-negative integer."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"Cannot parse pagination value: {value!r}")


class InvalidPageError(RolodexError):
    """Page number below 1 or negative page size."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


# --- storage ---


class StorageError(RolodexError):
    """Opaque wrapper around a backing-store fault (connection, constraint, query)."""


class NotFoundError(RolodexError):
    """A mutating single-row operation addressed a contact that does not exist."""

    def __init__(self, contact_id: ContactId | int) -> None:
        self.contact_id = contact_id
        super().__init__(f"No contact with id {contact_id}")


# --- basic auth ---


class AuthError(RolodexError):
    """Base class for malformed Authorization headers."""


class InvalidAuthHeader(AuthError):
    def __init__(self) -> None:
        super().__init__("Invalid authorization header")


class InvalidScheme(AuthError):
    def __init__(self, scheme: str) -> None:
        self.scheme = scheme
        super().__init__(f"Invalid authorization scheme: {scheme}")


class InvalidBase64Value(AuthError):
    def __init__(self) -> None:
        super().__init__("Invalid base64 value in authorization header")


class InvalidUtf8Value(AuthError):
    def __init__(self) -> None:
        super().__init__("Invalid UTF-8 value in authorization header")


class CredentialsFileError(RolodexError):
    """The credentials file is missing or not a JSON object of strings."""


# --- external validation ---


class ExternalValidationError(RolodexError):
    """The phone verification service rejected the request (4xx) or sent an unusable payload."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)
