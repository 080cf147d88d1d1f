"""Application ports (interfaces). Implemented by infrastructure adapters."""

from typing import Protocol

from rolodex.domain import Contact, ContactId, NewContact


class ContactRepository(Protocol):
    """Persists and queries contacts.

    Reads never treat absence as an error. Mutations on a missing id either do
    nothing or raise NotFoundError, depending on the adapter.
    """

    def list(
        self, page_no: int | None = None, page_size: int | None = None
    ) -> list[Contact]:
        """Return one page of contacts; an empty list when the page is past the end."""
        ...

    def get(self, contact_id: ContactId) -> Contact | None:
        """Return the contact with the given id, or None."""
        ...

    def add(self, new_contact: NewContact) -> Contact:
        """Store a contact and return it with its assigned id."""
        ...

    def update(self, contact: NewContact | Contact, contact_id: ContactId) -> None:
        """Replace name, phone number and email of the contact with contact_id."""
        ...

    def update_email(self, new_email: str, contact_id: ContactId) -> None:
        """Replace only the email."""
        ...

    def update_phone_no(self, new_phone_no: int, contact_id: ContactId) -> None:
        """Replace only the phone number."""
        ...

    def delete(self, contact_id: ContactId) -> None:
        """Remove the contact. Deleting a missing contact is not an error."""
        ...


class ContactChecks(Protocol):
    """Input checks run before anything is written."""

    def is_name_invalid(self, name: str) -> bool:
        ...

    def is_email_valid(self, email: str) -> bool:
        ...

    def is_phone_no_valid(self, phone_no: int) -> bool:
        ...
