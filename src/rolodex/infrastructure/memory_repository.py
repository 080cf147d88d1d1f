"""In-memory implementation of ContactRepository (no DB)."""

import logging
from itertools import islice

from rolodex.application.pagination import get_limit_and_offset
from rolodex.domain import Contact, ContactId, NewContact, NotFoundError
from rolodex.infrastructure.locks import ReadWriteLock

logger = logging.getLogger(__name__)


class InMemoryContactRepository:
    """Stores contacts in a dict keyed by ContactId. Order preserved by insertion.

    One ReadWriteLock guards the whole dict: list/get share the read side,
    mutations hold the write side only while touching the dict.

    Updating a missing id is a silent no-op unless raise_on_missing is set,
    in which case NotFoundError is raised like the SQL adapter does.
    """

    def __init__(
        self,
        contacts: list[Contact] | None = None,
        *,
        raise_on_missing: bool = False,
    ) -> None:
        self._data: dict[ContactId, Contact] = {c.id: c for c in contacts or []}
        self._lock = ReadWriteLock()
        self._raise_on_missing = raise_on_missing

    def list(
        self, page_no: int | None = None, page_size: int | None = None
    ) -> list[Contact]:
        limit, offset = get_limit_and_offset(page_no, page_size)
        with self._lock.read():
            return list(islice(self._data.values(), offset, offset + limit))

    def get(self, contact_id: ContactId) -> Contact | None:
        with self._lock.read():
            return self._data.get(contact_id)

    def add(self, new_contact: NewContact) -> Contact:
        # Id selection and insert share one write lock: two concurrent adds
        # cannot both claim the same free id.
        with self._lock.write():
            candidate = len(self._data)
            while ContactId(candidate) in self._data:
                candidate += 1
            contact = Contact.from_new(ContactId(candidate), new_contact)
            self._data[contact.id] = contact
        logger.debug("Stored contact %s in memory", contact.id)
        return contact

    def update(self, contact: NewContact | Contact, contact_id: ContactId) -> None:
        with self._lock.write():
            if contact_id not in self._data:
                self._missing(contact_id)
                return
            self._data[contact_id] = Contact.from_new(contact_id, contact)

    def update_email(self, new_email: str, contact_id: ContactId) -> None:
        with self._lock.write():
            existing = self._data.get(contact_id)
            if existing is None:
                self._missing(contact_id)
                return
            self._data[contact_id] = Contact(
                id=contact_id,
                name=existing.name,
                phone_no=existing.phone_no,
                email=new_email,
            )

    def update_phone_no(self, new_phone_no: int, contact_id: ContactId) -> None:
        with self._lock.write():
            existing = self._data.get(contact_id)
            if existing is None:
                self._missing(contact_id)
                return
            self._data[contact_id] = Contact(
                id=contact_id,
                name=existing.name,
                phone_no=new_phone_no,
                email=existing.email,
            )

    def delete(self, contact_id: ContactId) -> None:
        with self._lock.write():
            self._data.pop(contact_id, None)

    def _missing(self, contact_id: ContactId) -> None:
        if self._raise_on_missing:
            raise NotFoundError(contact_id)
        logger.debug("Update of missing contact %s ignored", contact_id)
