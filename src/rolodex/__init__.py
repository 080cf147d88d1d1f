"""
Rolodex core: clean-architecture layout.

- domain: entities (Contact, ContactId, NewContact) and errors. No outer dependencies.
- application: use cases (ContactService), ports (ContactRepository), pagination.
- infrastructure: adapters (InMemoryContactRepository, SqlContactRepository),
  Basic-Auth verification, phone/email validation.
"""

from rolodex.application import (
    ContactRepository,
    ContactService,
    Invalid,
    get_limit_and_offset,
)
from rolodex.domain import Contact, ContactId, NewContact
from rolodex.infrastructure import (
    BasicAuthVerifier,
    ContactValidator,
    CredentialStore,
    InMemoryContactRepository,
    PhoneNumberVerifier,
    SqlContactRepository,
)

__all__ = [
    "BasicAuthVerifier",
    "Contact",
    "ContactId",
    "ContactRepository",
    "ContactService",
    "ContactValidator",
    "CredentialStore",
    "InMemoryContactRepository",
    "Invalid",
    "NewContact",
    "PhoneNumberVerifier",
    "SqlContactRepository",
    "get_limit_and_offset",
]
