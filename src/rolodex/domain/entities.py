"""Domain entities: ContactId, Contact and NewContact."""

from dataclasses import dataclass

# Max length for a contact name, in characters.
NAME_MAX_LENGTH = 255

# phone_no is stored as a signed 64-bit integer (BIGINT column).
PHONE_NO_MIN = -(2**63)
PHONE_NO_MAX = 2**63 - 1


def _check_phone_no(phone_no: int) -> None:
    if isinstance(phone_no, bool) or not isinstance(phone_no, int):
        raise ValueError("Phone number must be an integer.")
    if not PHONE_NO_MIN <= phone_no <= PHONE_NO_MAX:
        raise ValueError("Phone number must fit in a signed 64-bit integer.")


@dataclass(frozen=True)
class ContactId:
    """
    Identifier of a stored contact. Assigned by the repository, never changed.
    Equality and hashing are by value, so it can key a dict.
    """

    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class NewContact:
    """Creation payload: a contact without an identifier.

    Only the phone number range is enforced here. Name and email rules are
    input validation: ContactService checks them before any write and turns a
    rejection into Invalid rather than an exception. Repositories store what
    they are given.
    """

    name: str
    phone_no: int
    email: str

    def __post_init__(self):
        _check_phone_no(self.phone_no)


@dataclass(frozen=True)
class Contact:
    """
    A stored contact record.
    Owned by the repository; callers get copies and pass them by value.
    """

    id: ContactId
    name: str
    phone_no: int
    email: str

    def __post_init__(self):
        if not isinstance(self.id, ContactId):
            raise ValueError("Contact id must be a ContactId.")
        _check_phone_no(self.phone_no)

    @classmethod
    def from_new(cls, contact_id: ContactId, new_contact: "NewContact | Contact") -> "Contact":
        """Build the stored record for contact_id from a payload (its own id, if any, is ignored)."""
        return cls(
            id=contact_id,
            name=new_contact.name,
            phone_no=new_contact.phone_no,
            email=new_contact.email,
        )

