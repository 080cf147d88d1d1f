"""Behaviour every ContactRepository adapter must share.

Runs against the in-memory adapter and the SQL adapter on SQLite. The SQL
adapter on PostgreSQL is covered in test_sql_repository.py.
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from rolodex.domain import ContactId, InvalidPageError, NewContact
from rolodex.infrastructure import (
    InMemoryContactRepository,
    SqlContactRepository,
    ensure_contacts_table,
)


def _sqlite_repository() -> SqlContactRepository:
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    ensure_contacts_table(engine)
    return SqlContactRepository(engine)


@pytest.fixture(params=["memory", "sqlite"])
def repo(request):
    if request.param == "memory":
        return InMemoryContactRepository()
    return _sqlite_repository()


def _new(i: int = 0) -> NewContact:
    return NewContact(
        name=f"Contact {i}",
        phone_no=491700000000 + i,
        email=f"contact{i}@example.com",
    )


def test_add_then_get_returns_same_record(repo):
    created = repo.add(_new(1))

    found = repo.get(created.id)
    assert found == created
    assert found.id == created.id
    assert found.name == "Contact 1"
    assert found.phone_no == 491700000001
    assert found.email == "contact1@example.com"


def test_get_never_created_returns_none(repo):
    assert repo.get(ContactId(12345)) is None


def test_assigned_ids_are_distinct(repo):
    ids = {repo.add(_new(i)).id for i in range(10)}
    assert len(ids) == 10


def test_delete_then_get_returns_none(repo):
    created = repo.add(_new())
    repo.delete(created.id)
    assert repo.get(created.id) is None


def test_delete_missing_is_not_an_error(repo):
    repo.delete(ContactId(999))


def test_list_pages(repo):
    created = {repo.add(_new(i)).id for i in range(7)}

    first = repo.list()
    second = repo.list(2)
    third = repo.list(3)

    assert len(first) == 5
    assert len(second) == 2
    assert third == []
    assert {c.id for c in first} | {c.id for c in second} == created


def test_list_custom_page_size(repo):
    for i in range(4):
        repo.add(_new(i))
    assert len(repo.list(1, 3)) == 3
    assert len(repo.list(2, 3)) == 1
    assert repo.list(1, 0) == []


def test_list_empty_repository(repo):
    assert repo.list() == []


def test_list_page_zero_fails(repo):
    with pytest.raises(InvalidPageError):
        repo.list(0, 5)


def test_update_replaces_fields_and_keeps_id(repo):
    created = repo.add(_new(1))

    repo.update(NewContact(name="Renamed", phone_no=4915112345678, email="r@x.de"), created.id)

    found = repo.get(created.id)
    assert found.id == created.id
    assert found.name == "Renamed"
    assert found.phone_no == 4915112345678
    assert found.email == "r@x.de"


def test_update_ignores_payload_id(repo):
    first = repo.add(_new(1))
    second = repo.add(_new(2))

    # Payload carries the second contact's id; the addressed id wins.
    repo.update(second, first.id)

    assert repo.get(first.id).id == first.id
    assert repo.get(first.id).name == "Contact 2"
    assert repo.get(second.id) == second


def test_update_email_only_touches_email(repo):
    created = repo.add(_new(1))
    repo.update_email("new@example.org", created.id)

    found = repo.get(created.id)
    assert found.email == "new@example.org"
    assert found.name == created.name
    assert found.phone_no == created.phone_no


def test_update_phone_no_only_touches_phone_no(repo):
    created = repo.add(_new(1))
    repo.update_phone_no(4930123456789, created.id)

    found = repo.get(created.id)
    assert found.phone_no == 4930123456789
    assert found.name == created.name
    assert found.email == created.email


def test_phone_no_round_trips_as_64_bit(repo):
    big = 2**62 + 7
    created = repo.add(NewContact(name="Big", phone_no=big, email="big@example.com"))
    assert repo.get(created.id).phone_no == big
