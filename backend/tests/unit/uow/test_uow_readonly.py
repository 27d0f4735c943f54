import pytest
from sqlalchemy import text

from tests.factories.user import UserFactory
from userauth.models.user import User
from userauth.uow import (
    SQLAlchemyReadOnlyUnitOfWork as ROuow,
)
from userauth.uow import (
    SQLAlchemyUnitOfWork as RWuow,
)


class TestSQLAlchemyReadOnlyUnitOfWork:
    def test_blocks_orm_flush_writes(self, db):
        """
        Ensure that attempting to flush ORM changes inside the RO UoW raises.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            user = UserFactory.build()  # not persisted
            uow.session.add(user)
            uow.session.flush()

    def test_blocks_core_dml(self, db):
        """
        Ensure that raw SQL DML is blocked inside the RO UoW.
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="SQL statement blocked"):
            uow.session.execute(
                text("DELETE FROM users WHERE email = :email"), {"email": "x@example.com"}
            )

    def test_allows_reads(self, db):
        """
        Read operations should work normally within RO UoW.
        """
        with RWuow() as uow:
            uow.users.add(UserFactory.build())

        with ROuow() as uow:
            assert uow.session.query(User).count() == 1
            assert uow.users.list()

    def test_disallows_commit(self, db):
        """
        RO UoW must reject commit().
        """
        with ROuow() as uow, pytest.raises(RuntimeError, match="does not allow commit"):
            uow.commit()

    def test_changes_never_persist(self, db):
        """
        Blocked modifications leave the stored row untouched.
        """
        with RWuow() as uow:
            user = UserFactory.build(email="keep@example.com")
            uow.users.add(user)
            user_id = user.id

        with ROuow() as uow, pytest.raises(RuntimeError, match="ORM flush blocked"):
            u = uow.session.get(User, user_id)
            u.email = "mutated-in-ro@example.com"
            uow.session.flush()

        with ROuow() as uow:
            assert uow.users.get(user_id).email == "keep@example.com"

    def test_guards_removed_on_exit(self, db):
        """
        Writes work again once the RO scope is closed.
        """
        with ROuow():
            pass

        with RWuow() as uow:
            uow.users.add(UserFactory.build())

        with ROuow() as uow:
            assert uow.session.query(User).count() == 1
