"""SQL implementation of ContactRepository (SQLAlchemy Core, plain statements).

Table: contacts(id integer primary key, name text, phone_no bigint, email text).
Each statement runs in its own implicit transaction; concurrency is left to
the engine's connection pool.
"""

import logging

from sqlalchemy import (
    BigInteger,
    Column,
    Engine,
    Integer,
    MetaData,
    Table,
    Text,
    create_engine,
    text,
)
from sqlalchemy.exc import NoResultFound, SQLAlchemyError

from rolodex.application.pagination import get_limit_and_offset
from rolodex.domain import Contact, ContactId, NewContact, NotFoundError, StorageError

logger = logging.getLogger(__name__)

MAX_CONNECTIONS = 5

_metadata = MetaData()

contacts_table = Table(
    "contacts",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", Text, nullable=False),
    Column("phone_no", BigInteger, nullable=False),
    Column("email", Text, nullable=False),
)

_LIST_QUERY = text(
    "SELECT id, name, phone_no, email FROM contacts LIMIT :limit OFFSET :offset"
)

_GET_QUERY = text("SELECT id, name, phone_no, email FROM contacts WHERE id = :id")

_INSERT_QUERY = text(
    "INSERT INTO contacts(name, phone_no, email) VALUES (:name, :phone_no, :email) "
    "RETURNING id, name, phone_no, email"
)

_UPDATE_QUERY = text(
    "UPDATE contacts SET name = :name, phone_no = :phone_no, email = :email WHERE id = :id"
)

_UPDATE_EMAIL_QUERY = text("UPDATE contacts SET email = :email WHERE id = :id")

_UPDATE_PHONE_NO_QUERY = text("UPDATE contacts SET phone_no = :phone_no WHERE id = :id")

_DELETE_QUERY = text("DELETE FROM contacts WHERE id = :id")


def create_sql_engine(database_url: str, **kwargs) -> Engine:
    """Create a pooled engine (at most MAX_CONNECTIONS concurrent connections)."""
    kwargs.setdefault("pool_size", MAX_CONNECTIONS)
    kwargs.setdefault("max_overflow", 0)
    kwargs.setdefault("pool_pre_ping", True)
    return create_engine(database_url, **kwargs)


def ensure_contacts_table(engine: Engine) -> None:
    """Create the contacts table if it does not exist yet."""
    _metadata.create_all(engine, tables=[contacts_table], checkfirst=True)


class SqlContactRepository:
    """Stores contacts in a relational database.

    A missing row on get() is reported as None; on update*() as NotFoundError.
    Every other SQLAlchemy failure is wrapped in StorageError.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def list(
        self, page_no: int | None = None, page_size: int | None = None
    ) -> list[Contact]:
        limit, offset = get_limit_and_offset(page_no, page_size)
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(_LIST_QUERY, {"limit": limit, "offset": offset})
                return [_row_to_contact(row) for row in rows]
        except SQLAlchemyError as e:
            raise _storage_error("list contacts", e) from e

    def get(self, contact_id: ContactId) -> Contact | None:
        try:
            with self._engine.connect() as conn:
                row = conn.execute(_GET_QUERY, {"id": contact_id.value}).one()
        except NoResultFound:
            return None
        except SQLAlchemyError as e:
            raise _storage_error(f"get contact {contact_id}", e) from e
        return _row_to_contact(row)

    def add(self, new_contact: NewContact) -> Contact:
        try:
            with self._engine.begin() as conn:
                row = conn.execute(
                    _INSERT_QUERY,
                    {
                        "name": new_contact.name,
                        "phone_no": new_contact.phone_no,
                        "email": new_contact.email,
                    },
                ).one()
        except SQLAlchemyError as e:
            raise _storage_error("add contact", e) from e
        contact = _row_to_contact(row)
        logger.debug("Inserted contact %s", contact.id)
        return contact

    def update(self, contact: NewContact | Contact, contact_id: ContactId) -> None:
        self._execute_update(
            _UPDATE_QUERY,
            {
                "name": contact.name,
                "phone_no": contact.phone_no,
                "email": contact.email,
            },
            contact_id,
        )

    def update_email(self, new_email: str, contact_id: ContactId) -> None:
        self._execute_update(_UPDATE_EMAIL_QUERY, {"email": new_email}, contact_id)

    def update_phone_no(self, new_phone_no: int, contact_id: ContactId) -> None:
        self._execute_update(
            _UPDATE_PHONE_NO_QUERY, {"phone_no": new_phone_no}, contact_id
        )

    def delete(self, contact_id: ContactId) -> None:
        try:
            with self._engine.begin() as conn:
                conn.execute(_DELETE_QUERY, {"id": contact_id.value})
        except SQLAlchemyError as e:
            raise _storage_error(f"delete contact {contact_id}", e) from e

    def _execute_update(self, statement, params: dict, contact_id: ContactId) -> None:
        try:
            with self._engine.begin() as conn:
                result = conn.execute(statement, {**params, "id": contact_id.value})
                rowcount = result.rowcount
        except SQLAlchemyError as e:
            raise _storage_error(f"update contact {contact_id}", e) from e
        if rowcount == 0:
            raise NotFoundError(contact_id)


def _row_to_contact(row) -> Contact:
    return Contact(
        id=ContactId(row.id),
        name=row.name,
        phone_no=row.phone_no,
        email=row.email,
    )


def _storage_error(action: str, error: SQLAlchemyError) -> StorageError:
    logger.error("Failed to %s: %s", action, error)
    return StorageError(f"Failed to {action}: {error.__class__.__name__}")
