"""Contact use cases: validate input, then call the repository."""

import logging

from rolodex.application.dto import Invalid
from rolodex.application.ports import ContactChecks, ContactRepository
from rolodex.domain import NAME_MAX_LENGTH, Contact, ContactId, NewContact

logger = logging.getLogger(__name__)


class ContactService:
    """CRUD over contacts. Writes are validated first; rejected input never reaches storage."""

    def __init__(self, repository: ContactRepository, validator: ContactChecks) -> None:
        self._repo = repository
        self._validator = validator

    def list_contacts(
        self, page_no: int | None = None, page_size: int | None = None
    ) -> list[Contact]:
        return self._repo.list(page_no, page_size)

    def get_contact(self, contact_id: ContactId) -> Contact | None:
        return self._repo.get(contact_id)

    def create_contact(self, new_contact: NewContact) -> Contact | Invalid:
        """Validate and store a new contact. Returns the stored contact or Invalid."""
        invalid = self._check_contact(new_contact)
        if invalid is not None:
            return invalid
        contact = self._repo.add(new_contact)
        logger.info("Created contact %s", contact.id)
        return contact

    def update_contact(
        self, contact_id: ContactId, payload: NewContact | Contact
    ) -> Invalid | None:
        """Replace every field of a contact. The payload's own id, if any, is ignored."""
        invalid = self._check_contact(payload)
        if invalid is not None:
            return invalid
        self._repo.update(payload, contact_id)
        return None

    def update_email(self, contact_id: ContactId, email: str) -> Invalid | None:
        invalid = self._check_email(email)
        if invalid is not None:
            return invalid
        self._repo.update_email(email, contact_id)
        return None

    def update_phone_no(self, contact_id: ContactId, phone_no: int) -> Invalid | None:
        invalid = self._check_phone_no(phone_no)
        if invalid is not None:
            return invalid
        self._repo.update_phone_no(phone_no, contact_id)
        return None

    def delete_contact(self, contact_id: ContactId) -> None:
        self._repo.delete(contact_id)
        logger.info("Deleted contact %s", contact_id)

    def _check_contact(self, payload: NewContact | Contact) -> Invalid | None:
        if self._validator.is_name_invalid(payload.name):
            return Invalid(
                reason=f"Name must be between 1 and {NAME_MAX_LENGTH} characters."
            )
        return self._check_email(payload.email) or self._check_phone_no(payload.phone_no)

    def _check_email(self, email: str) -> Invalid | None:
        if not self._validator.is_email_valid(email):
            return Invalid(reason="Email address is not valid.")
        return None

    def _check_phone_no(self, phone_no: int) -> Invalid | None:
        # May call the remote verification service; no lock is held here.
        if not self._validator.is_phone_no_valid(phone_no):
            return Invalid(reason="Phone number is not valid.")
        return None
