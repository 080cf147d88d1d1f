"""Infrastructure layer: concrete implementations of application ports."""

from rolodex.infrastructure.credentials import BasicAuthVerifier, CredentialStore
from rolodex.infrastructure.locks import ReadWriteLock
from rolodex.infrastructure.memory_repository import InMemoryContactRepository
from rolodex.infrastructure.persistence.sql_repository import (
    SqlContactRepository,
    create_sql_engine,
    ensure_contacts_table,
)
from rolodex.infrastructure.phone import parse_phone_no
from rolodex.infrastructure.validation import (
    ContactValidator,
    PhoneNumberVerifier,
    build_retrying_session,
)

__all__ = [
    "BasicAuthVerifier",
    "ContactValidator",
    "CredentialStore",
    "InMemoryContactRepository",
    "PhoneNumberVerifier",
    "ReadWriteLock",
    "SqlContactRepository",
    "build_retrying_session",
    "create_sql_engine",
    "ensure_contacts_table",
    "parse_phone_no",
]
