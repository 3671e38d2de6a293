"""
Tests for the SQL-backed stores against an in-memory SQLite database.
"""
from datetime import date, datetime
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import IntegrityError

from app.core.errors import DuplicateKey
from app.db.session import check_db_connection
from app.services.employee_store import SqlEmployeeStore
from app.services.user_store import SqlUserStore, _collided_field


def _employee_fields(**overrides):
    fields = {
        "first_name": "A",
        "last_name": "B",
        "email": "a@b.com",
        "gender": "M",
        "designation": "Eng",
        "salary": 2000.0,
        "date_of_joining": date(2024, 1, 1),
        "department": "R&D",
        "employee_photo": None,
    }
    fields.update(overrides)
    return fields


class TestSqlUserStore:

    @pytest.mark.asyncio
    async def test_create_and_find(self, db_session):
        store = SqlUserStore(db_session)

        user = await store.create("jdoe", "jdoe@example.com", "hashed")

        assert user.id
        assert user.created_at is not None
        assert (await store.find_by_username("jdoe")).id == user.id
        assert (await store.find_by_email("jdoe@example.com")).id == user.id

    @pytest.mark.asyncio
    async def test_find_unknown_returns_none(self, db_session):
        store = SqlUserStore(db_session)

        assert await store.find_by_username("ghost") is None
        assert await store.find_by_email("ghost@example.com") is None

    @pytest.mark.asyncio
    async def test_duplicate_username_reported(self, db_session):
        store = SqlUserStore(db_session)
        await store.create("jdoe", "jdoe@example.com", "hashed")

        result = await store.create("jdoe", "other@example.com", "hashed")

        assert result == DuplicateKey(field="username")

    @pytest.mark.asyncio
    async def test_duplicate_email_reported(self, db_session):
        store = SqlUserStore(db_session)
        await store.create("jdoe", "jdoe@example.com", "hashed")

        result = await store.create("other", "jdoe@example.com", "hashed")

        assert result == DuplicateKey(field="email")

    @pytest.mark.asyncio
    async def test_session_usable_after_duplicate(self, db_session):
        store = SqlUserStore(db_session)
        await store.create("jdoe", "jdoe@example.com", "hashed")
        await store.create("jdoe", "jdoe@example.com", "hashed")

        user = await store.create("other", "other@example.com", "hashed")

        assert not isinstance(user, DuplicateKey)
        assert user.username == "other"


class TestCollidedField:
    """Driver messages from both backends name the colliding column."""

    @staticmethod
    def _error(message):
        return IntegrityError("INSERT INTO users ...", {}, Exception(message))

    @pytest.mark.parametrize(
        "message, expected",
        [
            ("UNIQUE constraint failed: users.username", "username"),
            ("UNIQUE constraint failed: users.email", "email"),
            (
                'duplicate key value violates unique constraint "ix_users_username"\n'
                "DETAIL:  Key (username)=(jdoe) already exists.",
                "username",
            ),
            (
                'duplicate key value violates unique constraint "ix_users_email"\n'
                "DETAIL:  Key (email)=(username@x.com) already exists.",
                "email",
            ),
        ],
    )
    def test_column_named_by_driver(self, message, expected):
        assert _collided_field(self._error(message), ("username", "email")) == expected

    def test_submitted_value_does_not_decide(self):
        """An email that contains the other column's name is still an email collision."""
        error = self._error(
            'duplicate key value violates unique constraint "ix_users_email"\n'
            "DETAIL:  Key (email)=(users.username@ix_users_username.io) already exists."
        )

        assert _collided_field(error, ("username", "email")) == "email"


class TestSqlEmployeeStore:

    @pytest.mark.asyncio
    async def test_create_assigns_id_and_round_trips_date(self, db_session):
        store = SqlEmployeeStore(db_session)

        employee = await store.create(_employee_fields())

        assert employee.id
        fetched = await store.get(employee.id)
        assert fetched.date_of_joining == date(2024, 1, 1)
        assert fetched.salary == 2000.0

    @pytest.mark.asyncio
    async def test_duplicate_email_reported(self, db_session):
        store = SqlEmployeeStore(db_session)
        await store.create(_employee_fields())

        result = await store.create(_employee_fields(first_name="Other"))

        assert result == DuplicateKey(field="email")
        assert len(await store.list_all()) == 1

    @pytest.mark.asyncio
    async def test_list_all_newest_first(self, db_session):
        store = SqlEmployeeStore(db_session)
        older = await store.create(_employee_fields(email="old@x.com", created_at=datetime(2024, 1, 1)))
        newer = await store.create(_employee_fields(email="new@x.com", created_at=datetime(2024, 6, 1)))

        employees = await store.list_all()

        assert [e.id for e in employees] == [newer.id, older.id]

    @pytest.mark.asyncio
    async def test_get_unknown_or_empty_id(self, db_session):
        store = SqlEmployeeStore(db_session)

        assert await store.get("does-not-exist") is None
        assert await store.get("") is None

    @pytest.mark.asyncio
    async def test_search_combines_filters(self, db_session):
        store = SqlEmployeeStore(db_session)
        match = await store.create(_employee_fields(email="m@x.com", designation="QA"))
        await store.create(_employee_fields(email="n@x.com", designation="Eng"))
        await store.create(_employee_fields(email="o@x.com", designation="QA", department="Ops"))

        by_both = await store.search(designation="QA", department="R&D")
        by_department = await store.search(department="R&D")

        assert [e.id for e in by_both] == [match.id]
        assert len(by_department) == 2

    @pytest.mark.asyncio
    async def test_update_applies_changes(self, db_session):
        store = SqlEmployeeStore(db_session)
        employee = await store.create(_employee_fields())

        updated = await store.update(employee, {"salary": 5000.0, "designation": "Lead"})

        fetched = await store.get(employee.id)
        assert updated.salary == 5000.0
        assert fetched.designation == "Lead"
        assert fetched.first_name == "A"

    @pytest.mark.asyncio
    async def test_update_to_taken_email_reported(self, db_session):
        store = SqlEmployeeStore(db_session)
        await store.create(_employee_fields(email="taken@x.com"))
        employee = await store.create(_employee_fields(email="mine@x.com"))

        result = await store.update(employee, {"email": "taken@x.com"})

        assert result == DuplicateKey(field="email")

    @pytest.mark.asyncio
    async def test_delete_returns_removed_record(self, db_session):
        store = SqlEmployeeStore(db_session)
        employee = await store.create(_employee_fields())

        deleted = await store.delete(employee.id)

        assert deleted.id == employee.id
        assert deleted.email == "a@b.com"
        assert await store.get(employee.id) is None

    @pytest.mark.asyncio
    async def test_delete_unknown_returns_none(self, db_session):
        store = SqlEmployeeStore(db_session)

        assert await store.delete("does-not-exist") is None


class TestCheckDbConnection:

    @pytest.mark.asyncio
    async def test_reachable_database(self, db_session):
        assert await check_db_connection(db_session.bind) is True

    @pytest.mark.asyncio
    async def test_unreachable_database(self):
        broken = MagicMock()
        broken.connect = MagicMock(side_effect=OSError("Connection refused"))

        assert await check_db_connection(broken) is False
